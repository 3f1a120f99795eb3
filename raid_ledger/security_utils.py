"""
Token utilities
Bearer JWTs are minted by the login gateway (Discord OAuth / local credentials)
and verified here with the shared secret.
"""

import logging
from datetime import timedelta
from typing import Any, Optional

from jose import JWTError
from jose import jwt as jose_jwt

from .config import JWT_ALGORITHM, JWT_EXPIRE_MINUTES, SECRET_KEY
from .shared.timeutils import utc_now

logger = logging.getLogger(__name__)


def create_jwt_token(data: dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a JWT token

    Args:
        data: Claims to encode in the token ("sub" must be the user id)
        expires_delta: Token lifetime (default JWT_EXPIRE_MINUTES)
    """
    to_encode = data.copy()
    expire = utc_now() + (expires_delta or timedelta(minutes=JWT_EXPIRE_MINUTES))
    to_encode.update({"exp": expire})
    return jose_jwt.encode(to_encode, SECRET_KEY, algorithm=JWT_ALGORITHM)


def verify_jwt_token(token: str) -> Optional[dict[str, Any]]:
    """
    Verify and decode a JWT token

    Returns:
        Decoded payload if valid, None if invalid or expired
    """
    try:
        return jose_jwt.decode(token, SECRET_KEY, algorithms=[JWT_ALGORITHM])
    except JWTError as e:
        logger.warning(f"JWT verification failed: {e}")
        return None
