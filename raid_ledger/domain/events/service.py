"""Event service - Business logic for event scheduling"""

import logging
import math
from datetime import datetime
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...auth import is_organizer
from ...models import Event, User
from ...shared.timeutils import isoformat_utc, to_naive_utc, utc_now
from ..games.repository import GameRepository
from .repository import EventRepository
from .schemas import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, EventCreate, EventUpdate

logger = logging.getLogger(__name__)


def event_to_dict(event: Event, signup_count: int) -> dict:
    creator = event.creator
    game = event.game
    return {
        "id": event.id,
        "title": event.title,
        "description": event.description,
        "startTime": isoformat_utc(event.start_time),
        "endTime": isoformat_utc(event.end_time),
        "creator": {
            "id": creator.id if creator else 0,
            "username": creator.username if creator else "Unknown",
            "avatar": creator.avatar if creator else None,
        },
        "game": (
            {"id": game.id, "name": game.name, "slug": game.slug, "coverUrl": game.cover_url}
            if game
            else None
        ),
        "signupCount": signup_count,
        "createdAt": isoformat_utc(event.created_at),
        "updatedAt": isoformat_utc(event.updated_at),
    }


class EventService:
    """Service layer for event business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = EventRepository()

    def _ensure_game(self, game_id: Optional[int]) -> None:
        if game_id is not None and not GameRepository.get_game_by_id(self.db, game_id):
            raise HTTPException(status_code=404, detail=f"Game {game_id} not found")

    def _ensure_can_manage(self, event: Event, user: User, action: str) -> None:
        if event.creator_id != user.id and not is_organizer(user):
            logger.warning(f"🚫 User {user.id} tried to {action} event {event.id}")
            raise HTTPException(status_code=403, detail=f"You can only {action} your own events")

    def create(self, creator_id: int, data: EventCreate) -> dict:
        start = to_naive_utc(data.startTime)
        end = to_naive_utc(data.endTime)
        if start >= end:
            raise HTTPException(status_code=400, detail="Start time must be before end time")
        self._ensure_game(data.gameId)

        event = self.repo.create_event(
            self.db,
            {
                "title": data.title,
                "description": data.description,
                "game_id": data.gameId,
                "creator_id": creator_id,
                "start_time": start,
                "end_time": end,
            },
        )
        logger.info(f"✅ Event created: {event.id} by user {creator_id}")
        return event_to_dict(event, 0)

    def find_all(
        self,
        page: int = 1,
        limit: Optional[int] = None,
        upcoming: bool = False,
        start_after: Optional[datetime] = None,
        end_before: Optional[datetime] = None,
        game_id: Optional[int] = None,
    ) -> dict:
        page = max(page, 1)
        limit = min(limit or DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE)

        rows, total = self.repo.list_events(
            self.db,
            page,
            limit,
            upcoming_after=utc_now() if upcoming else None,
            start_after=to_naive_utc(start_after) if start_after else None,
            end_before=to_naive_utc(end_before) if end_before else None,
            game_id=game_id,
        )
        return {
            "data": [event_to_dict(event, count) for event, count in rows],
            "meta": {
                "total": total,
                "page": page,
                "limit": limit,
                "totalPages": math.ceil(total / limit),
            },
        }

    def get_event(self, event_id: int) -> Event:
        event = self.repo.get_event_by_id(self.db, event_id)
        if not event:
            raise HTTPException(status_code=404, detail=f"Event with ID {event_id} not found")
        return event

    def find_one(self, event_id: int) -> dict:
        event = self.get_event(event_id)
        return event_to_dict(event, self.repo.count_signups(self.db, event_id))

    def update(self, event_id: int, user: User, data: EventUpdate) -> dict:
        event = self.get_event(event_id)
        self._ensure_can_manage(event, user, "update")

        changes = data.model_dump(exclude_unset=True)
        start = to_naive_utc(changes["startTime"]) if changes.get("startTime") else event.start_time
        end = to_naive_utc(changes["endTime"]) if changes.get("endTime") else event.end_time
        if start >= end:
            raise HTTPException(status_code=400, detail="Start time must be before end time")
        if "gameId" in changes:
            self._ensure_game(changes["gameId"])
            event.game_id = changes["gameId"]

        if "title" in changes and changes["title"] is not None:
            event.title = changes["title"]
        if "description" in changes:
            event.description = changes["description"]
        event.start_time = start
        event.end_time = end

        self.db.commit()
        self.db.refresh(event)
        logger.info(f"✅ Event {event_id} updated by user {user.id}")
        return event_to_dict(event, self.repo.count_signups(self.db, event_id))

    def delete(self, event_id: int, user: User) -> None:
        event = self.get_event(event_id)
        self._ensure_can_manage(event, user, "delete")
        self.repo.delete_event(self.db, event)
        logger.info(f"🗑️ Event {event_id} deleted by user {user.id}")
