"""
Security helpers: person passwords and shared-secret comparison
"""

import base64
import binascii
import hmac
import logging
from typing import Optional

from passlib.context import CryptContext

logger = logging.getLogger(__name__)

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password_bcrypt(password: str) -> str:
    """Hash password using bcrypt"""
    return pwd_context.hash(password)


def verify_password_bcrypt(plain_password: str, hashed_password: str) -> bool:
    """Verify password against bcrypt hash"""
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except (ValueError, TypeError) as e:
        logger.error(f"Password verification error: {e}")
        return False


def constant_time_compare(a: Optional[str], b: Optional[str]) -> bool:
    """
    Compare two strings in constant time to prevent timing attacks.
    Missing values never match.
    """
    if not a or not b:
        return False
    return hmac.compare_digest(a.encode(), b.encode())


def password_from_authorization(authorization: Optional[str]) -> Optional[str]:
    """
    Extract the password from an ``Authorization: Bearer <base64>`` header.

    Returns None when the header is absent, uses another scheme, or is not
    valid base64 UTF-8.
    """
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    try:
        return base64.b64decode(token.strip(), validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        return None
