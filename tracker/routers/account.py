"""
Account router — profile, bulk deletion and export.

Endpoints:
  GET    /account/export    — user profile + every project
  PATCH  /account/profile   — name / location / website
  DELETE /account/projects  — delete every project, keep the account
  DELETE /account           — delete the account and all its data
"""

from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from tracker.auth.dependencies import CurrentUserId
from tracker.core.database import get_db_session
from tracker.routers.envelope import NO_STORE, to_response
from tracker.services import account as actions

router = APIRouter(tags=["Account"])

DbSession = Annotated[AsyncSession, Depends(get_db_session)]


@router.get("/export", summary="Export all of the caller's data")
async def export_data(session: DbSession, user_id: CurrentUserId) -> JSONResponse:
    result = await actions.export_user_data(session, user_id)
    return to_response(result, headers=NO_STORE)


@router.patch("/profile", summary="Update the caller's profile")
async def update_profile(
    session: DbSession,
    user_id: CurrentUserId,
    payload: Annotated[dict[str, Any] | None, Body()] = None,
) -> JSONResponse:
    return to_response(await actions.update_profile(session, user_id, payload))


@router.delete("/projects", summary="Delete every project of the caller")
async def delete_all_projects(session: DbSession, user_id: CurrentUserId) -> JSONResponse:
    return to_response(await actions.delete_all_projects(session, user_id))


@router.delete("", summary="Delete the caller's account")
async def delete_account(session: DbSession, user_id: CurrentUserId) -> JSONResponse:
    return to_response(await actions.delete_account(session, user_id))
