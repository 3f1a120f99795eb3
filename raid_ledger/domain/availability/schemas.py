"""Availability schemas - Pydantic models for concrete availability windows"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator

AVAILABILITY_STATUSES = {"available", "committed", "blocked", "freed"}


def _check_status(v: Optional[str]) -> Optional[str]:
    if v is not None and v not in AVAILABILITY_STATUSES:
        raise ValueError(f"Status must be one of: {', '.join(sorted(AVAILABILITY_STATUSES))}")
    return v


class AvailabilityCreate(BaseModel):
    """Schema for creating a window (times are ISO-8601, normalized to UTC)"""

    startTime: datetime
    endTime: datetime
    status: str = "available"
    gameId: Optional[int] = None

    @field_validator("status")
    @classmethod
    def validate_status(cls, v):
        return _check_status(v)


class AvailabilityUpdate(BaseModel):
    startTime: Optional[datetime] = None
    endTime: Optional[datetime] = None
    status: Optional[str] = None
    gameId: Optional[int] = None

    @field_validator("startTime", "endTime", "status")
    @classmethod
    def reject_null(cls, v, info):
        if v is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return _check_status(v) if info.field_name == "status" else v


class TimeRange(BaseModel):
    start: str
    end: str


class AvailabilityConflict(BaseModel):
    conflictingId: str
    timeRange: TimeRange
    status: str
    gameId: Optional[int] = None


class AvailabilityResponse(BaseModel):
    id: str
    userId: int
    timeRange: TimeRange
    status: str
    gameId: Optional[int] = None
    sourceEventId: Optional[int] = None
    createdAt: Optional[str] = None
    updatedAt: Optional[str] = None


class AvailabilityWithConflicts(AvailabilityResponse):
    """Committed or blocked windows that overlap the saved one; null when there are none"""

    conflicts: Optional[list[AvailabilityConflict]] = None


class AvailabilityListResponse(BaseModel):
    data: list[AvailabilityResponse]
    meta: dict


class AvailabilitySlot(BaseModel):
    start: str
    end: str
    status: str
    gameId: Optional[int] = None
    sourceEventId: Optional[int] = None


class UserAvailability(BaseModel):
    id: int
    username: str
    avatar: Optional[str] = None
    slots: list[AvailabilitySlot]


class RosterAvailabilityResponse(BaseModel):
    """Availability of every signed-up user around an event, for the heatmap"""

    eventId: int
    timeRange: TimeRange
    users: list[UserAvailability]
