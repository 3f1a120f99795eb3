"""Game time schemas - Pydantic models for the weekly availability grid"""

from datetime import date
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

from ...shared.validators import validate_day_of_week, validate_hour

OVERRIDE_STATUSES = {"available", "blocked"}


class TemplateSlot(BaseModel):
    """One recurring hour of the week (dayOfWeek 0=Sunday)"""

    dayOfWeek: int
    hour: int

    @field_validator("dayOfWeek")
    @classmethod
    def check_day(cls, v):
        return validate_day_of_week(v)

    @field_validator("hour")
    @classmethod
    def check_hour(cls, v):
        return validate_hour(v)


class SaveTemplateRequest(BaseModel):
    slots: list[TemplateSlot] = []


class OverrideInput(BaseModel):
    date: date
    hour: int
    status: str

    @field_validator("hour")
    @classmethod
    def check_hour(cls, v):
        return validate_hour(v)

    @field_validator("status")
    @classmethod
    def check_status(cls, v):
        if v not in OVERRIDE_STATUSES:
            raise ValueError(f"Status must be one of: {', '.join(sorted(OVERRIDE_STATUSES))}")
        return v


class SaveOverridesRequest(BaseModel):
    overrides: list[OverrideInput] = []


class AbsenceCreate(BaseModel):
    startDate: date
    endDate: date
    reason: Optional[str] = Field(None, max_length=255)


class AbsenceResponse(BaseModel):
    id: int
    startDate: str
    endDate: str
    reason: Optional[str] = None


class TemplateResponse(BaseModel):
    slots: list[TemplateSlot]


class CompositeSlot(BaseModel):
    dayOfWeek: int
    hour: int
    status: str
    fromTemplate: bool


class OverrideRecord(BaseModel):
    date: str
    hour: int
    status: str


class EventBlock(BaseModel):
    eventId: int
    title: str
    gameSlug: Optional[str] = None
    gameName: Optional[str] = None
    coverUrl: Optional[str] = None
    signupId: int
    confirmationStatus: str
    dayOfWeek: int
    startHour: int
    endHour: int
    description: Optional[str] = None
    creatorUsername: Optional[str] = None
    signupsPreview: list[dict[str, Any]] = []
    signupCount: int = 0


class CompositeView(BaseModel):
    slots: list[CompositeSlot]
    events: list[EventBlock]
    weekStart: str
    overrides: list[OverrideRecord]
    absences: list[AbsenceResponse]


class CompositeViewResponse(BaseModel):
    data: CompositeView


class TemplateEnvelope(BaseModel):
    data: TemplateResponse


class AbsenceEnvelope(BaseModel):
    data: AbsenceResponse


class AbsenceListEnvelope(BaseModel):
    data: list[AbsenceResponse]
