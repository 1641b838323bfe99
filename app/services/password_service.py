"""
Password hashing for onboarding credentials.
"""

from __future__ import annotations

import bcrypt

from app.config import get_password_settings


def hash_password(password: str, *, rounds: int | None = None) -> str:
    """Hash password with bcrypt."""
    cost = rounds if rounds is not None else get_password_settings().hash_rounds
    hashed = bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=cost))
    return hashed.decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify password against hash."""
    try:
        return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError:
        return False
