"""Character domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

CHARACTER_ROLES = {"tank", "healer", "dps"}


def _check_role(v: Optional[str]) -> Optional[str]:
    if v is not None and v not in CHARACTER_ROLES:
        raise ValueError(f"Role must be one of: {', '.join(sorted(CHARACTER_ROLES))}")
    return v


class CharacterCreate(BaseModel):
    """Schema for creating a character"""

    model_config = ConfigDict(populate_by_name=True)

    gameId: int
    name: str = Field(..., min_length=1, max_length=100)
    realm: Optional[str] = Field(None, max_length=100)
    className: Optional[str] = Field(None, alias="class", max_length=50)
    spec: Optional[str] = Field(None, max_length=50)
    role: Optional[str] = None
    isMain: bool = False
    itemLevel: Optional[int] = Field(None, ge=0)
    externalId: Optional[str] = Field(None, max_length=255)
    avatarUrl: Optional[str] = Field(None, max_length=500)
    level: Optional[int] = Field(None, ge=1)
    race: Optional[str] = Field(None, max_length=50)
    faction: Optional[str] = None

    @field_validator("role")
    @classmethod
    def validate_role(cls, v):
        return _check_role(v)

    @field_validator("faction")
    @classmethod
    def validate_faction(cls, v):
        if v is not None and v not in ("alliance", "horde"):
            raise ValueError("Faction must be 'alliance' or 'horde'")
        return v


class CharacterUpdate(BaseModel):
    """Schema for a partial character update"""

    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = Field(None, min_length=1, max_length=100)
    realm: Optional[str] = Field(None, max_length=100)
    className: Optional[str] = Field(None, alias="class", max_length=50)
    spec: Optional[str] = Field(None, max_length=50)
    roleOverride: Optional[str] = None
    itemLevel: Optional[int] = Field(None, ge=0)
    avatarUrl: Optional[str] = Field(None, max_length=500)
    displayOrder: Optional[int] = Field(None, ge=0)

    @field_validator("name", "displayOrder")
    @classmethod
    def reject_null(cls, v, info):
        # Omit the field to leave it unchanged; the column itself is NOT NULL
        if v is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return v

    @field_validator("roleOverride")
    @classmethod
    def validate_role_override(cls, v):
        return _check_role(v)


class CharacterResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    userId: int
    gameId: int
    name: str
    realm: Optional[str] = None
    className: Optional[str] = Field(None, alias="class")
    spec: Optional[str] = None
    role: Optional[str] = None
    roleOverride: Optional[str] = None
    effectiveRole: Optional[str] = None
    isMain: bool
    itemLevel: Optional[int] = None
    externalId: Optional[str] = None
    avatarUrl: Optional[str] = None
    level: Optional[int] = None
    race: Optional[str] = None
    faction: Optional[str] = None
    displayOrder: int
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None


class CharacterListResponse(BaseModel):
    data: list[CharacterResponse]
    meta: dict
