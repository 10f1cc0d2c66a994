"""Module: deps."""

import uuid
from datetime import date
from typing import Generator

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from app.core.errors import Unauthorized, ValidationError
from app.core.security import resolve_token
from app.db.models.user import User
from app.db.session import SessionLocal


# Dependency provider: one DB session per request lifecycle.
def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def bearer_token(authorization: str | None = Header(default=None)) -> str:
    if not authorization:
        raise Unauthorized("Authentication token is required")

    parts = authorization.split(" ", 1)
    if len(parts) != 2 or parts[0].lower() != "bearer" or not parts[1].strip():
        raise Unauthorized("Invalid Authorization header")

    return parts[1].strip()


# Resolve the caller's identity from the bearer session table.
def get_current_user(
    token: str = Depends(bearer_token),
    db: Session = Depends(get_db),
) -> User:
    user_id = resolve_token(token)
    if not user_id:
        raise Unauthorized("Invalid or expired session")

    user = db.get(User, uuid.UUID(user_id))
    if not user:
        raise Unauthorized("User not found")
    return user


# Validate and coerce UUID inputs from query/path payloads.
def parse_uuid(value: str, field_name: str = "id") -> uuid.UUID:
    try:
        return uuid.UUID(value)
    except ValueError:
        raise ValidationError(f"Invalid {field_name} (must be UUID)")


# Year/month query pair; either part defaults to the current month.
def resolve_period(year: int | None, month: int | None) -> tuple[int, int]:
    today = date.today()
    return (year or today.year, month or today.month)
