"""Signup repository - Database operations for signups and roster assignments"""

from typing import Optional

from sqlalchemy.orm import Session, joinedload

from ...models import EventSignup, RosterAssignment


class SignupRepository:
    """Repository for signup database operations"""

    @staticmethod
    def get_signup(db: Session, event_id: int, user_id: int) -> Optional[EventSignup]:
        return (
            db.query(EventSignup)
            .filter(EventSignup.event_id == event_id, EventSignup.user_id == user_id)
            .first()
        )

    @staticmethod
    def get_signup_by_id(db: Session, event_id: int, signup_id: int) -> Optional[EventSignup]:
        return (
            db.query(EventSignup)
            .filter(EventSignup.id == signup_id, EventSignup.event_id == event_id)
            .first()
        )

    @staticmethod
    def get_roster(db: Session, event_id: int) -> list[EventSignup]:
        """Signups with user, character and assignment loaded, in signup order"""
        return (
            db.query(EventSignup)
            .options(
                joinedload(EventSignup.user),
                joinedload(EventSignup.character),
                joinedload(EventSignup.assignment),
            )
            .filter(EventSignup.event_id == event_id)
            .order_by(EventSignup.signed_up_at.asc(), EventSignup.id.asc())
            .all()
        )

    @staticmethod
    def get_signups_by_user(db: Session, event_id: int) -> dict[int, EventSignup]:
        return {
            s.user_id: s for s in db.query(EventSignup).filter(EventSignup.event_id == event_id).all()
        }

    @staticmethod
    def create_signup(db: Session, signup_data: dict) -> EventSignup:
        signup = EventSignup(**signup_data)
        db.add(signup)
        db.flush()
        return signup

    @staticmethod
    def create_assignment(db: Session, assignment_data: dict) -> RosterAssignment:
        assignment = RosterAssignment(**assignment_data)
        db.add(assignment)
        return assignment

    @staticmethod
    def clear_assignments(db: Session, event_id: int) -> int:
        deleted = (
            db.query(RosterAssignment)
            .filter(RosterAssignment.event_id == event_id)
            .delete(synchronize_session="fetch")
        )
        db.flush()
        return deleted

    @staticmethod
    def delete_signup(db: Session, signup: EventSignup) -> None:
        db.delete(signup)
        db.commit()
