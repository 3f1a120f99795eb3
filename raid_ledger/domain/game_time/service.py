"""Game time service - Recurring weekly availability and the composite week view"""

import logging
from datetime import datetime, timedelta
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import GameTimeAbsence
from ...shared.timeutils import current_week_start, isoformat_utc, to_naive_utc, utc_now
from ...shared.validators import validate_date_range
from .grid import (
    WEEK,
    committed_storage_keys,
    compose_slots,
    event_day_spans,
    expand_dates,
    local_cells,
    to_display_day,
    to_storage_day,
)
from .repository import GameTimeRepository
from .schemas import AbsenceCreate, OverrideInput, TemplateSlot

logger = logging.getLogger(__name__)

# Template slots covered by signups this far ahead survive a template save
COMMITMENT_LOOKAHEAD = timedelta(days=14)


def absence_to_dict(absence: GameTimeAbsence) -> dict:
    return {
        "id": absence.id,
        "startDate": absence.start_date.isoformat(),
        "endDate": absence.end_date.isoformat(),
        "reason": absence.reason,
    }


class GameTimeService:
    """Service layer for the game time planner"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = GameTimeRepository()

    def get_template(self, user_id: int) -> dict:
        """Raw template slots in storage convention (0=Monday)"""
        rows = self.repo.get_template_rows(self.db, user_id)
        return {"slots": [{"dayOfWeek": r.day_of_week, "hour": r.start_hour} for r in rows]}

    def _committed_template_keys(self, user_id: int, now: datetime) -> list[tuple[int, int]]:
        """Existing storage-convention template slots covered by signups in the next two weeks"""
        existing = [(r.day_of_week, r.start_hour) for r in self.repo.get_template_rows(self.db, user_id)]
        if not existing:
            return []

        ranges = self.repo.get_signed_up_ranges(self.db, user_id, now, now + COMMITMENT_LOOKAHEAD)
        if not ranges:
            return []

        committed = committed_storage_keys(ranges)
        return [key for key in existing if key in committed]

    def save_template(self, user_id: int, slots: list[TemplateSlot]) -> dict:
        """
        Replace the user's weekly template.

        Slots arrive in display convention (0=Sunday) and are stored 0=Monday.
        Existing slots that overlap upcoming signups are kept even when the
        payload omits them, and are returned alongside the payload.
        """
        payload = list(dict.fromkeys((s.dayOfWeek, s.hour) for s in slots))
        storage_slots = [(to_storage_day(day), hour) for day, hour in payload]

        storage_keys = set(storage_slots)
        preserved = [
            key for key in self._committed_template_keys(user_id, utc_now()) if key not in storage_keys
        ]

        self.repo.replace_template(self.db, user_id, storage_slots + preserved)

        if preserved:
            logger.info(f"🔒 Preserved {len(preserved)} committed template slot(s) for user {user_id}")
        logger.info(f"✅ Saved game time template for user {user_id} ({len(storage_slots) + len(preserved)} slots)")

        merged = payload + [(to_display_day(day), hour) for day, hour in preserved]
        return {"slots": [{"dayOfWeek": day, "hour": hour} for day, hour in merged]}

    def save_overrides(self, user_id: int, overrides: list[OverrideInput]) -> None:
        if not overrides:
            return

        # Last entry wins when the same cell appears twice
        latest = {(o.date, o.hour): o.status for o in overrides}
        self.repo.upsert_overrides(
            self.db, user_id, [(d, hour, status) for (d, hour), status in latest.items()]
        )
        logger.info(f"✅ Saved {len(latest)} game time override(s) for user {user_id}")

    def create_absence(self, user_id: int, data: AbsenceCreate) -> dict:
        try:
            validate_date_range(data.startDate, data.endDate)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e)) from e

        absence = self.repo.create_absence(
            self.db,
            {
                "user_id": user_id,
                "start_date": data.startDate,
                "end_date": data.endDate,
                "reason": data.reason,
            },
        )
        logger.info(f"✅ Absence {absence.id} created for user {user_id}")
        return absence_to_dict(absence)

    def get_absences(self, user_id: int) -> list[dict]:
        return [absence_to_dict(a) for a in self.repo.get_absences(self.db, user_id)]

    def delete_absence(self, user_id: int, absence_id: int) -> None:
        absence = self.repo.get_absence(self.db, user_id, absence_id)
        if not absence:
            raise HTTPException(status_code=404, detail=f"Absence {absence_id} not found")
        self.repo.delete_absence(self.db, absence)
        logger.info(f"🗑️ Absence {absence_id} deleted for user {user_id}")

    def get_composite_view(
        self, user_id: int, week_start: Optional[datetime] = None, tz_offset: int = 0
    ) -> dict:
        """
        Build the weekly grid for one user.

        Combines the recurring template with the week's signed-up events,
        per-date overrides and absences. Slot priority is
        absence > override > committed > template default.
        """
        week_start = to_naive_utc(week_start) if week_start else current_week_start()
        week_end = week_start + WEEK

        template = [
            (to_display_day(r.day_of_week), r.start_hour)
            for r in self.repo.get_template_rows(self.db, user_id)
        ]

        signups = self.repo.get_week_signups(self.db, user_id, week_start, week_end)
        event_ids = list(dict.fromkeys(s.event_id for s in signups))
        previews = self.repo.get_signup_previews(self.db, event_ids)

        start_date = week_start.date()
        end_date = (week_end - timedelta(microseconds=1)).date()
        override_rows = self.repo.get_overrides_in_range(self.db, user_id, start_date, end_date)
        absence_rows = self.repo.get_absences_in_range(self.db, user_id, start_date, end_date)

        absence_dates = set()
        for absence in absence_rows:
            absence_dates.update(expand_dates(absence.start_date, absence.end_date))
        override_map = {(o.date, o.hour): o.status for o in override_rows}

        committed = set()
        for signup in signups:
            event = signup.event
            committed.update(local_cells(event.start_time, event.end_time, week_start, tz_offset))

        slots = compose_slots(template, committed, week_start, absence_dates, override_map)

        blocks = []
        for signup in signups:
            event = signup.event
            game = event.game
            preview = previews.get(event.id, {"preview": [], "count": 0})
            for day, start_hour, end_hour in event_day_spans(
                event.start_time, event.end_time, week_start, tz_offset
            ):
                blocks.append(
                    {
                        "eventId": event.id,
                        "title": event.title,
                        "gameSlug": game.slug if game else None,
                        "gameName": game.name if game else None,
                        "coverUrl": game.cover_url if game else None,
                        "signupId": signup.id,
                        "confirmationStatus": signup.confirmation_status,
                        "dayOfWeek": day,
                        "startHour": start_hour,
                        "endHour": end_hour,
                        "description": event.description,
                        "creatorUsername": event.creator.username if event.creator else None,
                        "signupsPreview": preview["preview"],
                        "signupCount": preview["count"],
                    }
                )

        logger.debug(
            f"📅 Composite view for user {user_id}: {len(slots)} slots, {len(blocks)} event blocks"
        )
        return {
            "slots": slots,
            "events": blocks,
            "weekStart": isoformat_utc(week_start),
            "overrides": [
                {"date": o.date.isoformat(), "hour": o.hour, "status": o.status} for o in override_rows
            ],
            "absences": [absence_to_dict(a) for a in absence_rows],
        }
