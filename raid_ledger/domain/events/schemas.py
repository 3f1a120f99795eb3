"""Event domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


class EventCreate(BaseModel):
    """Schema for creating an event (times are ISO-8601, normalized to UTC)"""

    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    gameId: Optional[int] = None
    startTime: datetime
    endTime: datetime


class EventUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    gameId: Optional[int] = None
    startTime: Optional[datetime] = None
    endTime: Optional[datetime] = None


class CreatorPreview(BaseModel):
    id: int
    username: str
    avatar: Optional[str] = None


class EventGame(BaseModel):
    id: int
    name: str
    slug: str
    coverUrl: Optional[str] = None


class EventResponse(BaseModel):
    """Schema for event response"""

    id: int
    title: str
    description: Optional[str] = None
    startTime: str
    endTime: str
    creator: CreatorPreview
    game: Optional[EventGame] = None
    signupCount: int
    createdAt: Optional[str] = None
    updatedAt: Optional[str] = None


class EventListMeta(BaseModel):
    total: int
    page: int
    limit: int
    totalPages: int


class EventListResponse(BaseModel):
    data: list[EventResponse]
    meta: EventListMeta
