import logging

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from .database import get_db
from .models import User
from .security_utils import verify_jwt_token

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)

ORGANIZER_ROLES = {"operator", "admin"}


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    """Resolve the current user from the bearer JWT ("sub" claim = user id)"""

    if not credentials:
        logger.warning("⚠️ No credentials provided")
        raise HTTPException(
            status_code=401,
            detail="Not authenticated. Please provide a valid Bearer token in the Authorization header.",
        )

    token = credentials.credentials
    if len(token.split(".")) != 3:
        logger.warning(f"⚠️ Malformed token received, token length: {len(token)}")
        raise HTTPException(
            status_code=401, detail="Invalid token format. Expected a valid JWT token."
        )

    payload = verify_jwt_token(token)
    if not payload:
        raise HTTPException(status_code=401, detail="Invalid or expired token")

    subject = payload.get("sub")
    try:
        user_id = int(subject)
    except (TypeError, ValueError) as e:
        logger.error(f"❌ Token missing user ID claim. Available claims: {list(payload.keys())}")
        raise HTTPException(status_code=401, detail="Invalid token claims") from e

    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        logger.warning(f"🚫 Token references unknown user {user_id}")
        raise HTTPException(status_code=401, detail="User no longer exists")

    logger.debug(f"✅ User authenticated: {user.username}")
    return user


def is_organizer(user: User) -> bool:
    """Operators and admins can manage any event"""
    return user.role in ORGANIZER_ROLES


async def get_current_organizer(user: User = Depends(get_current_user)) -> User:
    """
    Get current user and verify they are an operator or admin.
    Use this dependency for registry management routes.
    """
    if not is_organizer(user):
        logger.warning(f"⚠️ User {user.username} attempted an organizer-only action")
        raise HTTPException(status_code=403, detail="Operator or admin role required")
    return user
