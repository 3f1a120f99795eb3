"""Preference service - Per-user key/value settings"""

import logging
from typing import Any

from sqlalchemy.orm import Session

from .repository import PreferenceRepository

logger = logging.getLogger(__name__)


class PreferenceService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = PreferenceRepository()

    def get_preferences(self, user_id: int) -> dict[str, Any]:
        return {p.key: p.value for p in self.repo.get_preferences(self.db, user_id)}

    def set_preference(self, user_id: int, key: str, value: Any) -> dict[str, Any]:
        """Upsert one preference and return the full preference map"""
        self.repo.upsert_preference(self.db, user_id, key, value)
        logger.info(f"✅ User {user_id} set preference '{key}'")
        return self.get_preferences(user_id)
