"""
Dev bootstrap script — create a user and a session token for local development.

Usage:
    python -m scripts.bootstrap_dev [email] [name]

This will:
  1. Create (or reuse) the user with the given email
  2. Generate a session token valid for SESSION_TTL_DAYS
  3. Print the raw token ONCE (only its hash is stored)

Use it as `Authorization: Bearer <token>` against the API.
"""

import asyncio
import datetime
import sys

# Ensure the project root is on the path
sys.path.insert(0, ".")

from sqlalchemy import select

from tracker.auth.hashing import generate_session_token
from tracker.core.config import settings
from tracker.core.database import async_session_factory, engine
from tracker.core.timeutils import utcnow
from tracker.models.user import User, UserSession


async def main(email: str, name: str) -> None:
    async with async_session_factory() as session:
        # ── Create or reuse user ────────────────────────────
        result = await session.execute(select(User).where(User.email == email))
        user = result.scalar_one_or_none()
        if user is None:
            user = User(email=email, name=name)
            session.add(user)
            await session.flush()  # get user.id

        # ── Generate session token ──────────────────────────
        raw_token, token_hash = generate_session_token()
        expires_at = utcnow() + datetime.timedelta(days=settings.SESSION_TTL_DAYS)

        session.add(UserSession(
            user_id=user.id,
            token_hash=token_hash,
            expires_at=expires_at,
        ))
        await session.commit()

    # ── Print results ───────────────────────────────────────
    print()
    print("=" * 60)
    print("  Dev Bootstrap Complete")
    print("=" * 60)
    print()
    print(f"  User:       {user.name} <{user.email}>")
    print(f"  User ID:    {user.id}")
    print(f"  Expires:    {expires_at:%Y-%m-%d %H:%M} UTC")
    print()
    print(f"  Token:      {raw_token}")
    print()
    print("  ⚠  Copy this token now — it will NEVER be shown again.")
    print("=" * 60)
    print()

    await engine.dispose()


if __name__ == "__main__":
    cli_email = sys.argv[1] if len(sys.argv) > 1 else "dev@example.com"
    cli_name = sys.argv[2] if len(sys.argv) > 2 else "Dev User"
    asyncio.run(main(cli_email, cli_name))
