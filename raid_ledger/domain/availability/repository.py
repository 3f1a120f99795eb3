"""Availability repository - Database operations for availability windows"""

from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from ...models import Availability

CONFLICTING_STATUSES = ("committed", "blocked")


class AvailabilityRepository:
    """Repository for availability window database operations"""

    @staticmethod
    def get_windows_for_user(
        db: Session,
        user_id: int,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> list[Availability]:
        query = db.query(Availability).filter(Availability.user_id == user_id)
        if start is not None and end is not None:
            query = query.filter(Availability.start_time < end, Availability.end_time > start)
        return query.order_by(Availability.created_at.asc(), Availability.start_time.asc()).all()

    @staticmethod
    def get_window_by_id(db: Session, availability_id: str) -> Optional[Availability]:
        return db.query(Availability).filter(Availability.id == availability_id).first()

    @staticmethod
    def create_window(db: Session, window_data: dict) -> Availability:
        window = Availability(**window_data)
        db.add(window)
        db.commit()
        db.refresh(window)
        return window

    @staticmethod
    def update_window(db: Session, window: Availability, changes: dict) -> Availability:
        for field, value in changes.items():
            setattr(window, field, value)
        db.commit()
        db.refresh(window)
        return window

    @staticmethod
    def delete_window(db: Session, window: Availability) -> None:
        db.delete(window)
        db.commit()

    @staticmethod
    def get_overlapping_commitments(
        db: Session, user_id: int, start: datetime, end: datetime
    ) -> list[Availability]:
        """Committed or blocked windows overlapping the half-open range [start, end)"""
        return (
            db.query(Availability)
            .filter(
                Availability.user_id == user_id,
                Availability.start_time < end,
                Availability.end_time > start,
                Availability.status.in_(CONFLICTING_STATUSES),
            )
            .order_by(Availability.start_time.asc())
            .all()
        )

    @staticmethod
    def get_windows_for_users(
        db: Session, user_ids: list[int], start: datetime, end: datetime
    ) -> list[Availability]:
        if not user_ids:
            return []
        return (
            db.query(Availability)
            .filter(
                Availability.user_id.in_(user_ids),
                Availability.start_time < end,
                Availability.end_time > start,
            )
            .order_by(Availability.start_time.asc())
            .all()
        )
