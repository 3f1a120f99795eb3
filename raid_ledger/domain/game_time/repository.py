"""Game time repository - Database operations for templates, overrides and absences"""

from collections import defaultdict
from datetime import date, datetime
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, contains_eager, joinedload

from ...models import (
    Character,
    Event,
    EventSignup,
    GameTimeAbsence,
    GameTimeOverride,
    GameTimeTemplate,
    User,
)

SIGNUP_PREVIEW_LIMIT = 6


class GameTimeRepository:
    """Repository for game time database operations"""

    # ------------------------------------------------------------------
    # Template
    # ------------------------------------------------------------------

    @staticmethod
    def get_template_rows(db: Session, user_id: int) -> list[GameTimeTemplate]:
        return (
            db.query(GameTimeTemplate)
            .filter(GameTimeTemplate.user_id == user_id)
            .order_by(GameTimeTemplate.day_of_week.asc(), GameTimeTemplate.start_hour.asc())
            .all()
        )

    @staticmethod
    def replace_template(db: Session, user_id: int, storage_slots: list[tuple[int, int]]) -> None:
        """Delete every template row for the user and insert the new set in one transaction"""
        try:
            db.query(GameTimeTemplate).filter(GameTimeTemplate.user_id == user_id).delete(
                synchronize_session=False
            )
            db.add_all(
                GameTimeTemplate(user_id=user_id, day_of_week=day, start_hour=hour)
                for day, hour in storage_slots
            )
            db.commit()
        except Exception:
            db.rollback()
            raise

    # ------------------------------------------------------------------
    # Signed-up events
    # ------------------------------------------------------------------

    @staticmethod
    def get_signed_up_ranges(
        db: Session, user_id: int, range_start: datetime, range_end: datetime
    ) -> list[tuple[datetime, datetime]]:
        """(start, end) of the user's signed-up events overlapping [range_start, range_end)"""
        rows = (
            db.query(Event.start_time, Event.end_time)
            .join(EventSignup, EventSignup.event_id == Event.id)
            .filter(
                EventSignup.user_id == user_id,
                Event.start_time < range_end,
                Event.end_time > range_start,
            )
            .all()
        )
        return [(start, end) for start, end in rows]

    @staticmethod
    def get_week_signups(
        db: Session, user_id: int, week_start: datetime, week_end: datetime
    ) -> list[EventSignup]:
        """The user's signups for events overlapping the week, with event, game and creator loaded"""
        return (
            db.query(EventSignup)
            .join(EventSignup.event)
            .options(
                contains_eager(EventSignup.event).joinedload(Event.game),
                contains_eager(EventSignup.event).joinedload(Event.creator),
            )
            .filter(
                EventSignup.user_id == user_id,
                Event.start_time < week_end,
                Event.end_time > week_start,
            )
            .order_by(Event.start_time.asc(), Event.id.asc())
            .all()
        )

    @staticmethod
    def get_signup_previews(
        db: Session, event_ids: list[int], limit: int = SIGNUP_PREVIEW_LIMIT
    ) -> dict[int, dict]:
        """
        First `limit` signups per event (by signup id) plus the total count, batched for all events.

        Returns:
            {event_id: {"preview": [{id, username, avatar, characters?}], "count": int}}
        """
        if not event_ids:
            return {}

        row_num = (
            func.row_number()
            .over(partition_by=EventSignup.event_id, order_by=EventSignup.id)
            .label("row_num")
        )
        ranked = (
            db.query(
                EventSignup.event_id.label("event_id"),
                EventSignup.user_id.label("user_id"),
                User.username.label("username"),
                User.avatar.label("avatar"),
                row_num,
            )
            .join(User, User.id == EventSignup.user_id)
            .filter(EventSignup.event_id.in_(event_ids))
            .subquery()
        )
        preview_rows = (
            db.query(ranked)
            .filter(ranked.c.row_num <= limit)
            .order_by(ranked.c.event_id, ranked.c.row_num)
            .all()
        )

        counts = dict(
            db.query(EventSignup.event_id, func.count(EventSignup.id))
            .filter(EventSignup.event_id.in_(event_ids))
            .group_by(EventSignup.event_id)
            .all()
        )

        previews: dict[int, dict] = {
            event_id: {"preview": [], "count": int(counts.get(event_id, 0))} for event_id in event_ids
        }
        for row in preview_rows:
            previews[row.event_id]["preview"].append(
                {"id": row.user_id, "username": row.username, "avatar": row.avatar}
            )

        user_ids = {entry["id"] for p in previews.values() for entry in p["preview"]}
        if user_ids:
            characters_by_user = defaultdict(list)
            for char_user_id, game_id, avatar_url in (
                db.query(Character.user_id, Character.game_id, Character.avatar_url)
                .filter(Character.user_id.in_(user_ids))
                .all()
            ):
                characters_by_user[char_user_id].append({"gameId": game_id, "avatarUrl": avatar_url})

            for p in previews.values():
                for entry in p["preview"]:
                    if entry["id"] in characters_by_user:
                        entry["characters"] = characters_by_user[entry["id"]]

        return previews

    # ------------------------------------------------------------------
    # Overrides
    # ------------------------------------------------------------------

    @staticmethod
    def get_overrides_in_range(
        db: Session, user_id: int, start_date: date, end_date: date
    ) -> list[GameTimeOverride]:
        return (
            db.query(GameTimeOverride)
            .filter(
                GameTimeOverride.user_id == user_id,
                GameTimeOverride.date >= start_date,
                GameTimeOverride.date <= end_date,
            )
            .order_by(GameTimeOverride.date.asc(), GameTimeOverride.hour.asc())
            .all()
        )

    @staticmethod
    def upsert_overrides(db: Session, user_id: int, overrides: list[tuple[date, int, str]]) -> None:
        """Insert or update each (date, hour) override in a single transaction"""
        try:
            for override_date, hour, status in overrides:
                row = (
                    db.query(GameTimeOverride)
                    .filter(
                        GameTimeOverride.user_id == user_id,
                        GameTimeOverride.date == override_date,
                        GameTimeOverride.hour == hour,
                    )
                    .first()
                )
                if row is None:
                    row = GameTimeOverride(user_id=user_id, date=override_date, hour=hour)
                    db.add(row)
                row.status = status
                db.flush()
            db.commit()
        except Exception:
            db.rollback()
            raise

    # ------------------------------------------------------------------
    # Absences
    # ------------------------------------------------------------------

    @staticmethod
    def create_absence(db: Session, absence_data: dict) -> GameTimeAbsence:
        absence = GameTimeAbsence(**absence_data)
        db.add(absence)
        db.commit()
        db.refresh(absence)
        return absence

    @staticmethod
    def get_absences(db: Session, user_id: int) -> list[GameTimeAbsence]:
        return (
            db.query(GameTimeAbsence)
            .filter(GameTimeAbsence.user_id == user_id)
            .order_by(GameTimeAbsence.start_date.asc(), GameTimeAbsence.id.asc())
            .all()
        )

    @staticmethod
    def get_absence(db: Session, user_id: int, absence_id: int) -> Optional[GameTimeAbsence]:
        return (
            db.query(GameTimeAbsence)
            .filter(GameTimeAbsence.id == absence_id, GameTimeAbsence.user_id == user_id)
            .first()
        )

    @staticmethod
    def get_absences_in_range(
        db: Session, user_id: int, start_date: date, end_date: date
    ) -> list[GameTimeAbsence]:
        return (
            db.query(GameTimeAbsence)
            .filter(
                GameTimeAbsence.user_id == user_id,
                GameTimeAbsence.start_date <= end_date,
                GameTimeAbsence.end_date >= start_date,
            )
            .order_by(GameTimeAbsence.start_date.asc())
            .all()
        )

    @staticmethod
    def delete_absence(db: Session, absence: GameTimeAbsence) -> None:
        db.delete(absence)
        db.commit()
