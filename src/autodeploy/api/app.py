"""FastAPI app entrypoint."""

from __future__ import annotations

import uvicorn
from fastapi import FastAPI

from autodeploy.api.deps import get_settings
from autodeploy.api.routes.history import router as history_router
from autodeploy.api.routes.session import router as session_router
from autodeploy.logging_config import setup_logging


def create_app() -> FastAPI:
    settings = get_settings()
    setup_logging(log_format=settings.log_format, log_level=settings.log_level)

    app = FastAPI(title="AutoDeploy API", version="0.1.0")
    app.include_router(session_router)
    app.include_router(history_router)

    @app.get("/api/v1/health", tags=["system"])
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    return app


app = create_app()


def run() -> None:
    uvicorn.run("autodeploy.api.app:app", host="0.0.0.0", port=8000, reload=False)
