"""User service - Account and public profile views"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import User
from ...shared.timeutils import utc_now
from ..characters.repository import CharacterRepository
from ..characters.service import character_to_dict
from ..events.repository import EventRepository
from ..events.service import event_to_dict
from .repository import UserRepository

logger = logging.getLogger(__name__)

DISCORD_AVATAR_URL = "https://cdn.discordapp.com/avatars/{discord_id}/{avatar}.png"


def resolve_avatar_url(user: User) -> Optional[str]:
    """Custom upload first, then the Discord CDN (local accounts have no Discord avatar)"""
    if user.custom_avatar_url:
        return user.custom_avatar_url
    if user.avatar and user.discord_id and not user.discord_id.startswith("local:"):
        return DISCORD_AVATAR_URL.format(discord_id=user.discord_id, avatar=user.avatar)
    return None


def user_to_dict(user: User) -> dict:
    return {
        "id": user.id,
        "discordId": user.discord_id,
        "username": user.username,
        "displayName": user.display_name,
        "avatar": user.avatar,
        "avatarUrl": resolve_avatar_url(user),
        "role": user.role,
        "createdAt": user.created_at,
    }


class UserService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = UserRepository()

    def get_public_profile(self, user_id: int) -> dict:
        user = self.repo.get_user_by_id(self.db, user_id)
        if not user:
            raise HTTPException(status_code=404, detail=f"User {user_id} not found")

        characters = CharacterRepository.get_characters_for_user(self.db, user_id)
        return {
            "id": user.id,
            "username": user.username,
            "displayName": user.display_name,
            "avatar": user.avatar,
            "avatarUrl": resolve_avatar_url(user),
            "createdAt": user.created_at,
            "characters": [character_to_dict(c) for c in characters],
        }

    def get_upcoming_events(self, user_id: int) -> dict:
        """Events the user is signed up for that have not ended"""
        events = EventRepository.get_upcoming_events_for_user(self.db, user_id, utc_now())
        data = [event_to_dict(e, EventRepository.count_signups(self.db, e.id)) for e in events]
        return {"data": data, "meta": {"total": len(data)}}
