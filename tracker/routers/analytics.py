"""
Analytics router — per-user statistics and the analytics view.

Both endpoints recompute from storage on every call; responses are
marked no-store so nothing downstream serves a stale count after a
mutation.

Endpoints:
  GET /analytics/stats — counts per status + completion rate (SQL GROUP BY)
  GET /analytics       — monthly activity, reasons, tags, key metrics
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from tracker.auth.dependencies import CurrentUserId
from tracker.core.database import get_db_session
from tracker.routers.envelope import NO_STORE, to_response
from tracker.services.analytics import get_project_analytics, get_project_stats

router = APIRouter(tags=["Analytics"])

DbSession = Annotated[AsyncSession, Depends(get_db_session)]


@router.get(
    "/stats",
    summary="Project counts per status",
    description="Total, active, completed, abandoned and the completion rate (0–100).",
)
async def read_stats(session: DbSession, user_id: CurrentUserId) -> JSONResponse:
    result = await get_project_stats(session, user_id)
    return to_response(result, headers=NO_STORE)


@router.get(
    "",
    summary="Full analytics view",
    description=(
        "Six trailing calendar months of activity (UTC), abandonment reasons, "
        "top tags, tag success rates and key metrics for the current year."
    ),
)
async def read_analytics(session: DbSession, user_id: CurrentUserId) -> JSONResponse:
    result = await get_project_analytics(session, user_id)
    return to_response(result, headers=NO_STORE)
