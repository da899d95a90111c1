"""
Credential helpers and the authenticated-instructor dependency.

Authentication itself happens upstream; requests arrive with the
instructor's user id in a trusted header.
"""

import logging
import secrets
from typing import Optional

from fastapi import Request
from passlib.context import CryptContext

from .core.config import settings
from .core.exceptions import UnauthorizedException

logger = logging.getLogger(__name__)

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.password_hash_rounds,
)

PLACEHOLDER_SECRET_BYTES = 12


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a plain password against a hashed password.

    Args:
        plain_password: The plain text password
        hashed_password: The hashed password to compare against

    Returns:
        bool: True if password matches, False otherwise
    """
    try:
        return bool(pwd_context.verify(plain_password, hashed_password))
    except ValueError as e:
        logger.error(f"Error verifying password: {str(e)}")
        return False


def get_password_hash(password: str) -> str:
    """Hash a password using bcrypt."""
    return str(pwd_context.hash(password))


def generate_placeholder_secret() -> str:
    """Random secret for accounts provisioned on someone else's behalf."""
    return secrets.token_hex(PLACEHOLDER_SECRET_BYTES)


def get_current_instructor_id(request: Request) -> str:
    """
    FastAPI dependency returning the authenticated instructor's user id.

    Raises:
        UnauthorizedException: header missing or blank
    """
    value: Optional[str] = request.headers.get(settings.instructor_id_header)
    instructor_id = (value or "").strip()
    if not instructor_id:
        raise UnauthorizedException(
            "Authentication required",
            code="NOT_AUTHENTICATED",
            details={"header": settings.instructor_id_header},
        )
    return instructor_id
