"""
Session token hashing utilities.

Security notes:
  • SHA-256 is used for token hashing — acceptable because session tokens
    are high-entropy random strings (not low-entropy passwords).
  • Raw tokens use the plt_sess_ prefix (convention, not security).
  • generate_session_token() returns the raw token exactly once — the
    identity provider hands it to the client. It is never stored.
"""

import hashlib
import secrets


_TOKEN_PREFIX = "plt_sess_"


def hash_session_token(raw_token: str) -> str:
    """
    Hash a raw session token using SHA-256.

    Returns the hex digest string for storage/lookup.
    """
    return hashlib.sha256(raw_token.encode("utf-8")).hexdigest()


def generate_session_token() -> tuple[str, str]:
    """
    Generate a new session token.

    Returns:
        (raw_token, token_hash) — raw_token goes to the client, token_hash is stored.
    """
    random_part = secrets.token_urlsafe(32)
    raw_token = f"{_TOKEN_PREFIX}{random_part}"
    return raw_token, hash_session_token(raw_token)
