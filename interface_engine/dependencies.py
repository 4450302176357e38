# File: /interface_engine/dependencies.py | Version: 2.0 | Path: /interface_engine/dependencies.py
from typing import Generator, Optional

from fastapi import Header

from interface_engine.core.cancellation import CancelToken
from interface_engine.core.permissions import Role
from interface_engine.db.session import SessionLocal


def get_db() -> Generator:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_role(x_user_role: Optional[str] = Header(default=None)) -> Optional[Role]:
    """Caller role as sent by the auth layer in front of us; unknown values mean no role."""
    if not x_user_role:
        return None
    try:
        return Role(x_user_role.strip().lower())
    except ValueError:
        return None


def get_cancel_token() -> CancelToken:
    return CancelToken.from_settings()
