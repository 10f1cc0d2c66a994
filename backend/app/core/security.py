"""Module: security."""

import hashlib
import hmac
import os
from datetime import UTC, datetime, timedelta
from secrets import token_urlsafe

from app.core.config import settings

# Shared password hashing format/version marker.
PASSWORD_SCHEME = "pbkdf2_sha256"
PASSWORD_ITERATIONS = 390000

# Active bearer sessions: token -> (user_id, issued_at). Process-local, so a
# restart of the API logs everybody out; entries lapse after session_ttl_hours.
SESSIONS: dict[str, tuple[str, datetime]] = {}


def hash_password(password: str) -> str:
    """
    Create a PBKDF2-SHA256 password hash string.

    Stored format:
      pbkdf2_sha256$<iterations>$<salt_hex>$<hash_hex>
    """
    salt = os.urandom(16)
    digest = hashlib.pbkdf2_hmac(
        "sha256",
        password.encode("utf-8"),
        salt,
        PASSWORD_ITERATIONS,
    )
    return f"{PASSWORD_SCHEME}${PASSWORD_ITERATIONS}${salt.hex()}${digest.hex()}"


def verify_password(password: str, stored: str) -> bool:
    if not stored or not stored.startswith(f"{PASSWORD_SCHEME}$"):
        return False

    try:
        _, iterations_raw, salt_hex, hash_hex = stored.split("$", 3)
        iterations = int(iterations_raw)
        salt = bytes.fromhex(salt_hex)
        expected = bytes.fromhex(hash_hex)
    except ValueError:
        return False

    computed = hashlib.pbkdf2_hmac(
        "sha256",
        password.encode("utf-8"),
        salt,
        iterations,
    )
    return hmac.compare_digest(computed, expected)


def issue_token(user_id: str) -> str:
    token = token_urlsafe(32)
    SESSIONS[token] = (user_id, datetime.now(UTC))
    return token


def resolve_token(token: str) -> str | None:
    session = SESSIONS.get(token)
    if session is None:
        return None

    user_id, issued_at = session
    if datetime.now(UTC) - issued_at > timedelta(hours=settings.session_ttl_hours):
        SESSIONS.pop(token, None)
        return None
    return user_id


def revoke_token(token: str) -> bool:
    return SESSIONS.pop(token, None) is not None
