"""
Projects router — thin adapter over tracker.services.projects.

Every handler resolves the caller (CurrentUserId, possibly None), passes
the raw JSON body to the action and serializes the ActionResult.
Validation, ownership and status rules all live in the action.

Endpoints:
  GET    /projects                 — list (search, tag, status, sort)
  POST   /projects                 — create
  GET    /projects/{id}            — one project
  PATCH  /projects/{id}            — partial update
  DELETE /projects/{id}            — delete
  POST   /projects/{id}/complete   — ACTIVE/ABANDONED → COMPLETED
  POST   /projects/{id}/abandon    — → ABANDONED with a retrospective
  POST   /projects/{id}/revive     — COMPLETED/ABANDONED → ACTIVE
"""

from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, Query, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from tracker.auth.dependencies import CurrentUserId
from tracker.core.database import get_db_session
from tracker.routers.envelope import to_response
from tracker.services import projects as actions

router = APIRouter(tags=["Projects"])

DbSession = Annotated[AsyncSession, Depends(get_db_session)]
JsonBody = Annotated[dict[str, Any] | None, Body()]


@router.get(
    "",
    summary="List the caller's projects",
    description=(
        "Most recently updated first by default. `search` matches name or "
        "description (case-insensitive); `tag` and `status` filter exactly."
    ),
)
async def list_projects(
    session: DbSession,
    user_id: CurrentUserId,
    search: Annotated[str | None, Query()] = None,
    tag: Annotated[str | None, Query()] = None,
    status_filter: Annotated[str | None, Query(alias="status")] = None,
    sort: Annotated[str | None, Query()] = None,
) -> JSONResponse:
    filters = {
        key: value
        for key, value in (
            ("search", search),
            ("tag", tag),
            ("status", status_filter),
            ("sort", sort),
        )
        if value is not None
    }
    return to_response(await actions.get_projects(session, user_id, filters))


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    summary="Create a project",
)
async def create_project(
    session: DbSession,
    user_id: CurrentUserId,
    payload: JsonBody = None,
) -> JSONResponse:
    result = await actions.create_project(session, user_id, payload)
    return to_response(result, success_status=status.HTTP_201_CREATED)


@router.get("/{project_id}", summary="Get one project")
async def get_project(
    project_id: str,
    session: DbSession,
    user_id: CurrentUserId,
) -> JSONResponse:
    return to_response(await actions.get_project(session, user_id, project_id))


@router.patch(
    "/{project_id}",
    summary="Update a project",
    description="Only fields present in the body change. `tags` replaces the whole set.",
)
async def update_project(
    project_id: str,
    session: DbSession,
    user_id: CurrentUserId,
    payload: JsonBody = None,
) -> JSONResponse:
    return to_response(await actions.update_project(session, user_id, project_id, payload))


@router.delete("/{project_id}", summary="Delete a project")
async def delete_project(
    project_id: str,
    session: DbSession,
    user_id: CurrentUserId,
) -> JSONResponse:
    return to_response(await actions.delete_project(session, user_id, project_id))


# ── Transitions ─────────────────────────────────────────────
@router.post("/{project_id}/complete", summary="Mark a project completed")
async def complete_project(
    project_id: str,
    session: DbSession,
    user_id: CurrentUserId,
    payload: JsonBody = None,
) -> JSONResponse:
    return to_response(await actions.complete_project(session, user_id, project_id, payload))


@router.post("/{project_id}/abandon", summary="Abandon a project")
async def abandon_project(
    project_id: str,
    session: DbSession,
    user_id: CurrentUserId,
    payload: JsonBody = None,
) -> JSONResponse:
    return to_response(await actions.abandon_project(session, user_id, project_id, payload))


@router.post("/{project_id}/revive", summary="Revive a completed or abandoned project")
async def revive_project(
    project_id: str,
    session: DbSession,
    user_id: CurrentUserId,
    payload: JsonBody = None,
) -> JSONResponse:
    return to_response(await actions.revive_project(session, user_id, project_id, payload))
