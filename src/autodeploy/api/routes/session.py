"""Session routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from autodeploy.api.deps import get_session
from autodeploy.api.routes.common import http_error
from autodeploy.api.schemas.session import (
    GenerateRequest,
    LoginRequest,
    LogsResponse,
    SessionStateResponse,
    TemplateItem,
    TemplatesResponse,
)
from autodeploy.core.errors import AutoDeployError
from autodeploy.core.session import DeploySession
from autodeploy.core.templates import TEMPLATES

router = APIRouter(prefix="/api/v1/session", tags=["session"])


@router.get("", response_model=SessionStateResponse)
async def session_state(session: DeploySession = Depends(get_session)) -> SessionStateResponse:
    return SessionStateResponse.from_session(session)


@router.post("/login", response_model=SessionStateResponse)
async def session_login(
    request: LoginRequest,
    session: DeploySession = Depends(get_session),
) -> SessionStateResponse:
    try:
        await session.login(request.to_credentials())
    except AutoDeployError as exc:
        raise http_error(exc) from exc
    return SessionStateResponse.from_session(session)


@router.post("/generate", response_model=SessionStateResponse)
async def session_generate(
    request: GenerateRequest,
    session: DeploySession = Depends(get_session),
) -> SessionStateResponse:
    try:
        await session.generate(request.prompt, request.mode)
    except AutoDeployError as exc:
        raise http_error(exc) from exc
    return SessionStateResponse.from_session(session)


@router.post("/deploy", response_model=SessionStateResponse)
async def session_deploy(session: DeploySession = Depends(get_session)) -> SessionStateResponse:
    try:
        await session.deploy()
    except AutoDeployError as exc:
        raise http_error(exc) from exc
    return SessionStateResponse.from_session(session)


@router.post("/back", response_model=SessionStateResponse)
async def session_back(session: DeploySession = Depends(get_session)) -> SessionStateResponse:
    try:
        session.back()
    except AutoDeployError as exc:
        raise http_error(exc) from exc
    return SessionStateResponse.from_session(session)


@router.post("/restart", response_model=SessionStateResponse)
async def session_restart(session: DeploySession = Depends(get_session)) -> SessionStateResponse:
    try:
        session.restart()
    except AutoDeployError as exc:
        raise http_error(exc) from exc
    return SessionStateResponse.from_session(session)


@router.get("/logs", response_model=LogsResponse)
async def session_logs(session: DeploySession = Depends(get_session)) -> LogsResponse:
    return LogsResponse(items=session.logs)


@router.get("/templates", response_model=TemplatesResponse)
async def list_templates() -> TemplatesResponse:
    return TemplatesResponse(
        items=[TemplateItem(name=t.name, title=t.title) for t in TEMPLATES.values()]
    )


@router.post("/templates/{name}", response_model=SessionStateResponse)
async def session_load_template(
    name: str,
    session: DeploySession = Depends(get_session),
) -> SessionStateResponse:
    try:
        session.load_template(name)
    except AutoDeployError as exc:
        raise http_error(exc) from exc
    return SessionStateResponse.from_session(session)
