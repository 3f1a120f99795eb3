"""Signup domain schemas - Pydantic models for validation"""

from typing import Optional

from pydantic import BaseModel, Field, field_validator

ROSTER_ROLES = {"tank", "healer", "dps", "flex", "player", "bench"}
SIGNUP_STATUSES = {"signed_up", "tentative", "declined"}


def _check_roster_role(v: Optional[str]) -> Optional[str]:
    if v is not None and v not in ROSTER_ROLES:
        raise ValueError(f"Slot must be one of: {', '.join(sorted(ROSTER_ROLES))}")
    return v


class SignupCreate(BaseModel):
    """Optional signup details; an empty body is a plain signup"""

    note: Optional[str] = Field(None, max_length=200)
    characterId: Optional[str] = None
    slotRole: Optional[str] = None
    slotPosition: Optional[int] = Field(None, ge=1)

    @field_validator("slotRole")
    @classmethod
    def validate_slot_role(cls, v):
        return _check_roster_role(v)


class ConfirmSignupRequest(BaseModel):
    characterId: str


class SignupStatusUpdate(BaseModel):
    status: str

    @field_validator("status")
    @classmethod
    def validate_status(cls, v):
        if v not in SIGNUP_STATUSES:
            raise ValueError(f"Status must be one of: {', '.join(sorted(SIGNUP_STATUSES))}")
        return v


class RosterAssignmentInput(BaseModel):
    userId: int
    signupId: Optional[int] = None
    slot: str
    position: int = Field(..., ge=1)
    isOverride: bool = False

    @field_validator("slot")
    @classmethod
    def validate_slot(cls, v):
        return _check_roster_role(v)


class RosterUpdateRequest(BaseModel):
    """Full replacement of an event's roster assignments"""

    assignments: list[RosterAssignmentInput] = []


class SignupUser(BaseModel):
    id: int
    discordId: Optional[str] = None
    username: str
    avatar: Optional[str] = None


class SignupCharacter(BaseModel):
    id: str
    name: str
    className: Optional[str] = None
    spec: Optional[str] = None
    role: Optional[str] = None
    isMain: bool = False
    itemLevel: Optional[int] = None
    avatarUrl: Optional[str] = None


class SignupResponse(BaseModel):
    id: int
    eventId: int
    user: SignupUser
    note: Optional[str] = None
    signedUpAt: Optional[str] = None
    characterId: Optional[str] = None
    character: Optional[SignupCharacter] = None
    confirmationStatus: str
    status: str


class RosterResponse(BaseModel):
    eventId: int
    signups: list[SignupResponse]
    count: int


class RosterEntry(BaseModel):
    id: int
    signupId: int
    userId: int
    discordId: Optional[str] = None
    username: str
    avatar: Optional[str] = None
    slot: Optional[str] = None
    position: int
    isOverride: bool
    character: Optional[SignupCharacter] = None


class RosterWithAssignmentsResponse(BaseModel):
    eventId: int
    pool: list[RosterEntry]
    assignments: list[RosterEntry]
    slots: dict[str, int]
