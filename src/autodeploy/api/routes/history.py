"""History routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from autodeploy.api.deps import get_session
from autodeploy.api.routes.common import http_error
from autodeploy.api.schemas.history import HistoryResponse, SaveProjectResponse
from autodeploy.api.schemas.session import SessionStateResponse
from autodeploy.core.errors import AutoDeployError
from autodeploy.core.session import DeploySession

router = APIRouter(prefix="/api/v1/history", tags=["history"])


@router.get("", response_model=HistoryResponse)
async def list_history(session: DeploySession = Depends(get_session)) -> HistoryResponse:
    return HistoryResponse(items=session.history)


@router.post("", status_code=status.HTTP_201_CREATED, response_model=SaveProjectResponse)
async def save_current_project(
    session: DeploySession = Depends(get_session),
) -> SaveProjectResponse:
    try:
        outcome = await session.save_current_project()
    except AutoDeployError as exc:
        raise http_error(exc) from exc
    return SaveProjectResponse(duplicate=outcome.duplicate, items=outcome.history)


@router.post("/sync", response_model=HistoryResponse)
async def sync_history(session: DeploySession = Depends(get_session)) -> HistoryResponse:
    return HistoryResponse(items=await session.sync_history())


@router.post("/{record_id}/load", response_model=SessionStateResponse)
async def load_saved_project(
    record_id: str,
    session: DeploySession = Depends(get_session),
) -> SessionStateResponse:
    try:
        await session.load_project(record_id)
    except AutoDeployError as exc:
        raise http_error(exc) from exc
    return SessionStateResponse.from_session(session)


@router.delete("/{record_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_saved_project(
    record_id: str,
    session: DeploySession = Depends(get_session),
) -> None:
    await session.delete_project(record_id)
