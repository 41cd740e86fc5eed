"""
FastAPI dependency resolving the current user from a session token.

Flow:
  1. Extract Bearer token from Authorization header
  2. Hash the token (SHA-256)
  3. Look up user_sessions by hash
  4. Verify the session has not expired
  5. Return the owning user id

Nothing is raised here: a missing, unknown or expired token resolves to
None. Project actions receive the id as an explicit argument and fail
closed (UnauthorizedError → 401) when it is None, so ownership checks
never depend on ambient request state.

Security:
  • Raw tokens are NEVER logged
  • Hash lookup means the DB never sees the raw token
"""

from __future__ import annotations

import logging
import uuid
from typing import Annotated

from fastapi import Depends, Header
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tracker.auth.hashing import hash_session_token
from tracker.core.database import get_db_session
from tracker.core.timeutils import as_utc, utcnow
from tracker.models.user import UserSession

logger = logging.getLogger(__name__)


async def get_current_user_id(
    authorization: str | None = Header(default=None, alias="Authorization"),
    session: AsyncSession = Depends(get_db_session),
) -> uuid.UUID | None:
    """
    Resolve the Bearer session token to a user id, or None.

    Usage in routers:
        CurrentUserId = Annotated[uuid.UUID | None, Depends(get_current_user_id)]
    """

    # ── 1. Extract token ────────────────────────────────────
    if not authorization:
        return None

    parts = authorization.split(" ", maxsplit=1)
    if len(parts) != 2 or parts[0].lower() != "bearer" or not parts[1].strip():
        return None

    # ── 2. Hash and look up ─────────────────────────────────
    token_hash = hash_session_token(parts[1].strip())
    result = await session.execute(
        select(UserSession).where(UserSession.token_hash == token_hash)
    )
    user_session = result.scalar_one_or_none()

    if user_session is None:
        return None

    # ── 3. Check expiry ─────────────────────────────────────
    if as_utc(user_session.expires_at) <= utcnow():
        logger.info("Expired session %s for user %s", user_session.id, user_session.user_id)
        return None

    return user_session.user_id


CurrentUserId = Annotated[uuid.UUID | None, Depends(get_current_user_id)]
