"""Preference router - FastAPI endpoints for user preferences"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import User
from .schemas import PreferencesResponse, PreferenceUpdate
from .service import PreferenceService

router = APIRouter(prefix="/users/me/preferences", tags=["Preferences"])


def get_preference_service(db: Session = Depends(get_db)) -> PreferenceService:
    """Dependency injection for PreferenceService"""
    return PreferenceService(db)


@router.get("", response_model=PreferencesResponse)
async def get_preferences(
    current_user: User = Depends(get_current_user),
    service: PreferenceService = Depends(get_preference_service),
):
    return {"data": service.get_preferences(current_user.id)}


@router.put("", response_model=PreferencesResponse)
async def update_preference(
    data: PreferenceUpdate,
    current_user: User = Depends(get_current_user),
    service: PreferenceService = Depends(get_preference_service),
):
    return {"data": service.set_preference(current_user.id, data.key, data.value)}
