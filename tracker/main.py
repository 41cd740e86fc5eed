"""
FastAPI application entrypoint.

Lifespan:
  • On startup: verify DB connectivity.
  • On shutdown: dispose the engine cleanly.

Routers:
  • /projects  — project CRUD and status transitions
  • /analytics — per-user statistics and analytics
  • /account   — profile, bulk deletion, export
  • /health    — shallow liveness probe

Every response body is the action envelope
({"success": ..., "data" | "error" + "code"}), including auth and
request-parsing failures.
"""

import logging
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy import text

from tracker.auth.errors import UnauthorizedError
from tracker.core.config import settings
from tracker.core.database import engine
from tracker.routers.account import router as account_router
from tracker.routers.analytics import router as analytics_router
from tracker.routers.projects import router as projects_router
from tracker.services.results import UNAUTHORIZED, VALIDATION_ERROR, error

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)


# ── Lifespan ────────────────────────────────────────────────
@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    """Startup / shutdown lifecycle."""

    logger.info("Starting %s (%s)", settings.APP_NAME, settings.ENVIRONMENT)

    # Startup — verify DB is reachable
    try:
        async with engine.begin() as conn:
            await conn.execute(text("SELECT 1"))
        logger.info("Database connection verified ✓")
    except Exception:
        logger.warning(
            "Could not reach the database on startup. "
            "The app will start, but requests will fail until the DB is available."
        )

    yield  # ← application runs here

    # Shutdown — clean up connection pool
    await engine.dispose()
    logger.info("Database engine disposed ✓")


# ── Exception handlers ──────────────────────────────────────
async def unauthorized_handler(_request: Request, exc: UnauthorizedError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_401_UNAUTHORIZED,
        content=error(str(exc), UNAUTHORIZED).to_dict(),
        headers={"WWW-Authenticate": "Bearer"},
    )


async def request_validation_handler(
    _request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Malformed bodies / params (e.g. a JSON array instead of an object)."""
    first = exc.errors()[0] if exc.errors() else {"loc": (), "msg": "Invalid request"}
    field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = f"{field}: {first['msg']}" if field else first["msg"]
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=error(message, VALIDATION_ERROR).to_dict(),
    )


# ── App ─────────────────────────────────────────────────────
def create_application() -> FastAPI:
    application = FastAPI(
        title=settings.APP_NAME,
        version="0.1.0",
        description=(
            "Personal project lifecycle tracker — projects, status transitions "
            "(complete / abandon / revive), tags and analytics."
        ),
        lifespan=lifespan,
    )

    application.add_exception_handler(UnauthorizedError, unauthorized_handler)
    application.add_exception_handler(RequestValidationError, request_validation_handler)

    # Mount routers
    application.include_router(projects_router, prefix="/projects")
    application.include_router(analytics_router, prefix="/analytics")
    application.include_router(account_router, prefix="/account")

    @application.get(
        "/health",
        tags=["System"],
        summary="Liveness probe",
    )
    async def health_check() -> dict[str, str]:
        """Shallow health check — confirms the process is alive."""
        return {"status": "healthy"}

    return application


app = create_application()
