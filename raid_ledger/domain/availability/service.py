"""Availability service - Concrete availability windows and conflict detection"""

import logging
from collections import defaultdict
from datetime import datetime, timedelta
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import Availability
from ...shared.timeutils import isoformat_utc, to_naive_utc
from ...shared.validators import validate_time_window, validate_uuid
from ..events.repository import EventRepository
from ..games.repository import GameRepository
from ..signups.repository import SignupRepository
from .repository import AvailabilityRepository
from .schemas import AvailabilityCreate, AvailabilityUpdate

logger = logging.getLogger(__name__)

MAX_WINDOW_LENGTH = timedelta(hours=24)
# The roster heatmap shows this much time on either side of the event
ROSTER_BUFFER = timedelta(hours=2)


def time_range(start: datetime, end: datetime) -> dict:
    return {"start": isoformat_utc(start), "end": isoformat_utc(end)}


def availability_to_dict(window: Availability) -> dict:
    return {
        "id": window.id,
        "userId": window.user_id,
        "timeRange": time_range(window.start_time, window.end_time),
        "status": window.status,
        "gameId": window.game_id,
        "sourceEventId": window.source_event_id,
        "createdAt": isoformat_utc(window.created_at),
        "updatedAt": isoformat_utc(window.updated_at),
    }


def conflict_to_dict(window: Availability) -> dict:
    return {
        "conflictingId": window.id,
        "timeRange": time_range(window.start_time, window.end_time),
        "status": window.status,
        "gameId": window.game_id,
    }


class AvailabilityService:
    """Service layer for availability window business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = AvailabilityRepository()

    def _validate_window(self, start: datetime, end: datetime) -> None:
        try:
            validate_time_window(start, end, MAX_WINDOW_LENGTH)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e)) from e

    def _ensure_game(self, game_id: Optional[int]) -> None:
        if game_id is not None and not GameRepository.get_game_by_id(self.db, game_id):
            raise HTTPException(status_code=404, detail=f"Game {game_id} not found")

    def find_all_for_user(
        self, user_id: int, start: Optional[datetime] = None, end: Optional[datetime] = None
    ) -> dict:
        """List a user's windows; the range filter applies only when both bounds are given"""
        if start is not None and end is not None:
            start, end = to_naive_utc(start), to_naive_utc(end)
        else:
            start = end = None

        windows = self.repo.get_windows_for_user(self.db, user_id, start, end)
        return {
            "data": [availability_to_dict(w) for w in windows],
            "meta": {"total": len(windows)},
        }

    def get_window(self, user_id: int, availability_id: str) -> Availability:
        window = (
            self.repo.get_window_by_id(self.db, availability_id) if validate_uuid(availability_id) else None
        )
        if not window:
            raise HTTPException(status_code=404, detail=f"Availability window {availability_id} not found")
        if window.user_id != user_id:
            raise HTTPException(status_code=403, detail="You do not own this availability window")
        return window

    def find_one(self, user_id: int, availability_id: str) -> dict:
        return availability_to_dict(self.get_window(user_id, availability_id))

    def check_conflicts(
        self,
        user_id: int,
        start: datetime,
        end: datetime,
        exclude_game_id: Optional[int] = None,
        exclude_id: Optional[str] = None,
    ) -> list[dict]:
        """
        Committed or blocked windows overlapping [start, end).

        Windows for exclude_game_id are skipped so game-specific availability
        may overlap commitments for the same game; exclude_id skips the window
        being updated.
        """
        conflicts = []
        for window in self.repo.get_overlapping_commitments(self.db, user_id, start, end):
            if exclude_id and window.id == exclude_id:
                continue
            if exclude_game_id is not None and window.game_id == exclude_game_id:
                continue
            conflicts.append(conflict_to_dict(window))
        return conflicts

    def create(self, user_id: int, data: AvailabilityCreate) -> dict:
        start, end = to_naive_utc(data.startTime), to_naive_utc(data.endTime)
        self._validate_window(start, end)
        self._ensure_game(data.gameId)

        conflicts = self.check_conflicts(user_id, start, end, data.gameId)
        window = self.repo.create_window(
            self.db,
            {
                "user_id": user_id,
                "start_time": start,
                "end_time": end,
                "status": data.status,
                "game_id": data.gameId,
            },
        )

        logger.info(f"✅ User {user_id} created availability window {window.id} ({window.status})")
        if conflicts:
            logger.info(f"⚠️ Window {window.id} overlaps {len(conflicts)} commitment(s)")
        return {**availability_to_dict(window), "conflicts": conflicts or None}

    def update(self, user_id: int, availability_id: str, data: AvailabilityUpdate) -> dict:
        window = self.get_window(user_id, availability_id)
        changes = data.model_dump(exclude_unset=True)

        start = to_naive_utc(changes["startTime"]) if "startTime" in changes else window.start_time
        end = to_naive_utc(changes["endTime"]) if "endTime" in changes else window.end_time
        self._validate_window(start, end)
        if "gameId" in changes:
            self._ensure_game(changes["gameId"])

        game_id = changes["gameId"] if "gameId" in changes else window.game_id
        conflicts = self.check_conflicts(user_id, start, end, game_id, exclude_id=window.id)

        updates = {"start_time": start, "end_time": end, "game_id": game_id}
        if "status" in changes:
            updates["status"] = changes["status"]
        window = self.repo.update_window(self.db, window, updates)

        logger.info(f"✅ User {user_id} updated availability window {availability_id}")
        return {**availability_to_dict(window), "conflicts": conflicts or None}

    def delete(self, user_id: int, availability_id: str) -> None:
        window = self.get_window(user_id, availability_id)
        self.repo.delete_window(self.db, window)
        logger.info(f"🗑️ User {user_id} deleted availability window {availability_id}")

    def find_for_users_in_range(
        self, user_ids: list[int], start: datetime, end: datetime
    ) -> dict[int, list[Availability]]:
        """Windows overlapping [start, end) grouped by user id"""
        grouped: dict[int, list[Availability]] = defaultdict(list)
        for window in self.repo.get_windows_for_users(self.db, user_ids, start, end):
            grouped[window.user_id].append(window)
        return grouped

    def get_roster_availability(
        self, event_id: int, start: Optional[datetime] = None, end: Optional[datetime] = None
    ) -> dict:
        """
        Availability of everyone signed up for an event.

        The range defaults to the event padded by two hours on each side.
        """
        event = EventRepository.get_event_by_id(self.db, event_id)
        if not event:
            raise HTTPException(status_code=404, detail=f"Event with ID {event_id} not found")

        start = to_naive_utc(start) if start else event.start_time - ROSTER_BUFFER
        end = to_naive_utc(end) if end else event.end_time + ROSTER_BUFFER
        if end <= start:
            raise HTTPException(status_code=400, detail="'to' must be after 'from'")

        users = [s.user for s in SignupRepository.get_roster(self.db, event_id) if s.user is not None]
        windows = self.find_for_users_in_range([u.id for u in users], start, end)

        return {
            "eventId": event_id,
            "timeRange": time_range(start, end),
            "users": [
                {
                    "id": user.id,
                    "username": user.username,
                    "avatar": user.avatar,
                    "slots": [
                        {
                            "start": isoformat_utc(w.start_time),
                            "end": isoformat_utc(w.end_time),
                            "status": w.status,
                            "gameId": w.game_id,
                            "sourceEventId": w.source_event_id,
                        }
                        for w in windows.get(user.id, [])
                    ],
                }
                for user in users
            ],
        }
