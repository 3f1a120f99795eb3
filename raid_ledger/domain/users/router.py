"""User router - FastAPI endpoints for accounts and profiles"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import User
from .schemas import PublicProfileResponse, UserEventsResponse, UserResponse
from .service import UserService, user_to_dict

router = APIRouter(prefix="/users", tags=["Users"])


def get_user_service(db: Session = Depends(get_db)) -> UserService:
    """Dependency injection for UserService"""
    return UserService(db)


@router.get("/me", response_model=UserResponse)
async def get_me(current_user: User = Depends(get_current_user)):
    return user_to_dict(current_user)


@router.get("/me/events", response_model=UserEventsResponse)
async def get_my_events(
    current_user: User = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
):
    """Upcoming events the current user has signed up for"""
    return service.get_upcoming_events(current_user.id)


@router.get("/{user_id}/profile", response_model=PublicProfileResponse)
async def get_profile(user_id: int, service: UserService = Depends(get_user_service)):
    return service.get_public_profile(user_id)
