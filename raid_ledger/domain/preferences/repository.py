"""Preference repository - Database operations for user preferences"""

from typing import Any

from sqlalchemy.orm import Session

from ...models import UserPreference


class PreferenceRepository:
    @staticmethod
    def get_preferences(db: Session, user_id: int) -> list[UserPreference]:
        return (
            db.query(UserPreference)
            .filter(UserPreference.user_id == user_id)
            .order_by(UserPreference.key.asc())
            .all()
        )

    @staticmethod
    def upsert_preference(db: Session, user_id: int, key: str, value: Any) -> UserPreference:
        preference = (
            db.query(UserPreference)
            .filter(UserPreference.user_id == user_id, UserPreference.key == key)
            .first()
        )
        if preference is None:
            preference = UserPreference(user_id=user_id, key=key)
            db.add(preference)
        preference.value = value
        db.commit()
        db.refresh(preference)
        return preference
