"""Event repository - Database operations for events"""

from datetime import datetime
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from ...models import Event, EventSignup


class EventRepository:
    """Repository for event database operations"""

    @staticmethod
    def _signup_counts(db: Session):
        return (
            db.query(EventSignup.event_id.label("event_id"), func.count(EventSignup.id).label("count"))
            .group_by(EventSignup.event_id)
            .subquery()
        )

    @staticmethod
    def list_events(
        db: Session,
        page: int,
        limit: int,
        upcoming_after: Optional[datetime] = None,
        start_after: Optional[datetime] = None,
        end_before: Optional[datetime] = None,
        game_id: Optional[int] = None,
    ) -> tuple[list[tuple[Event, int]], int]:
        """
        Paginated events ordered by start time.

        Returns:
            ([(event, signup_count)], total matching rows)
        """
        filters = []
        if upcoming_after is not None:
            filters.append(Event.end_time >= upcoming_after)
        if start_after is not None:
            filters.append(Event.start_time >= start_after)
        if end_before is not None:
            filters.append(Event.end_time <= end_before)
        if game_id is not None:
            filters.append(Event.game_id == game_id)

        total = db.query(func.count(Event.id)).filter(*filters).scalar()

        counts = EventRepository._signup_counts(db)
        rows = (
            db.query(Event, func.coalesce(counts.c.count, 0))
            .outerjoin(counts, counts.c.event_id == Event.id)
            .options(joinedload(Event.creator), joinedload(Event.game))
            .filter(*filters)
            .order_by(Event.start_time.asc(), Event.id.asc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return [(event, int(count)) for event, count in rows], total

    @staticmethod
    def get_event_by_id(db: Session, event_id: int) -> Optional[Event]:
        return db.query(Event).filter(Event.id == event_id).first()

    @staticmethod
    def count_signups(db: Session, event_id: int) -> int:
        return db.query(func.count(EventSignup.id)).filter(EventSignup.event_id == event_id).scalar()

    @staticmethod
    def create_event(db: Session, event_data: dict) -> Event:
        event = Event(**event_data)
        db.add(event)
        db.commit()
        db.refresh(event)
        return event

    @staticmethod
    def delete_event(db: Session, event: Event) -> None:
        db.delete(event)
        db.commit()

    @staticmethod
    def get_upcoming_events_for_user(db: Session, user_id: int, now: datetime) -> list[Event]:
        """Events the user signed up for that have not ended yet"""
        return (
            db.query(Event)
            .join(EventSignup, EventSignup.event_id == Event.id)
            .filter(EventSignup.user_id == user_id, Event.end_time >= now)
            .order_by(Event.start_time.asc())
            .all()
        )
