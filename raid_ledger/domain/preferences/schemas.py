"""Preference schemas - Pydantic models for validation"""

from typing import Any

from pydantic import BaseModel, field_validator

from ...shared.validators import validate_preference_key


class PreferenceUpdate(BaseModel):
    """Set one preference; value can be any JSON value"""

    key: str
    value: Any = None

    @field_validator("key")
    @classmethod
    def check_key(cls, v):
        return validate_preference_key(v)


class PreferencesResponse(BaseModel):
    data: dict[str, Any]
