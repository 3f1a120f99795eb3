"""User schemas - Pydantic models for profile responses"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from ..characters.schemas import CharacterResponse
from ..events.schemas import EventResponse


class UserResponse(BaseModel):
    """The authenticated user's own account"""

    id: int
    discordId: Optional[str] = None
    username: str
    displayName: Optional[str] = None
    avatar: Optional[str] = None
    avatarUrl: Optional[str] = None
    role: str
    createdAt: Optional[datetime] = None


class PublicProfileResponse(BaseModel):
    id: int
    username: str
    displayName: Optional[str] = None
    avatar: Optional[str] = None
    avatarUrl: Optional[str] = None
    createdAt: Optional[datetime] = None
    characters: list[CharacterResponse]


class UserEventsResponse(BaseModel):
    data: list[EventResponse]
    meta: dict
