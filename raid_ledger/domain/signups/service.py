"""Signup service - Business logic for event signups and roster assignments"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...auth import is_organizer
from ...models import Character, Event, EventSignup, User
from ...shared.timeutils import isoformat_utc
from ..characters.repository import CharacterRepository
from ..events.repository import EventRepository
from ..games.service import is_mmo
from .repository import SignupRepository
from .schemas import ConfirmSignupRequest, RosterUpdateRequest, SignupCreate

logger = logging.getLogger(__name__)

MMO_ROSTER_SLOTS = {"tank": 2, "healer": 4, "dps": 14, "flex": 5}
GENERIC_ROSTER_SLOTS = {"player": 10, "bench": 5}


def _character_preview(character: Optional[Character]) -> Optional[dict]:
    if character is None:
        return None
    return {
        "id": character.id,
        "name": character.name,
        "className": character.class_name,
        "spec": character.spec,
        "role": character.role_override or character.role,
        "isMain": bool(character.is_main),
        "itemLevel": character.item_level,
        "avatarUrl": character.avatar_url,
    }


def signup_to_dict(signup: EventSignup) -> dict:
    user = signup.user
    return {
        "id": signup.id,
        "eventId": signup.event_id,
        "user": {
            "id": user.id if user else 0,
            "discordId": user.discord_id if user else None,
            "username": user.username if user else "Unknown",
            "avatar": user.avatar if user else None,
        },
        "note": signup.note,
        "signedUpAt": isoformat_utc(signup.signed_up_at),
        "characterId": signup.character_id,
        "character": _character_preview(signup.character),
        "confirmationStatus": signup.confirmation_status,
        "status": signup.status,
    }


def roster_entry(signup: EventSignup) -> dict:
    user = signup.user
    assignment = signup.assignment
    return {
        "id": assignment.id if assignment else 0,
        "signupId": signup.id,
        "userId": user.id if user else 0,
        "discordId": user.discord_id if user else None,
        "username": user.username if user else "Unknown",
        "avatar": user.avatar if user else None,
        "slot": assignment.role if assignment else None,
        "position": assignment.position if assignment else 0,
        "isOverride": bool(assignment.is_override) if assignment else False,
        "character": _character_preview(signup.character),
    }


class SignupService:
    """Service layer for signup and roster business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = SignupRepository()

    def _get_event(self, event_id: int) -> Event:
        event = EventRepository.get_event_by_id(self.db, event_id)
        if not event:
            raise HTTPException(status_code=404, detail=f"Event with ID {event_id} not found")
        return event

    def _get_owned_character(self, user_id: int, character_id: str) -> Character:
        character = CharacterRepository.get_character_by_id(self.db, character_id)
        if not character or character.user_id != user_id:
            raise HTTPException(status_code=400, detail="Character does not belong to you")
        return character

    def signup(self, event_id: int, user_id: int, data: Optional[SignupCreate] = None) -> EventSignup:
        """
        Sign a user up for an event.

        Idempotent: signing up twice returns the existing signup unchanged.
        A characterId confirms the signup immediately; slotRole + slotPosition
        places the user on the roster right away.
        """
        self._get_event(event_id)
        data = data or SignupCreate()

        existing = self.repo.get_signup(self.db, event_id, user_id)
        if existing:
            logger.info(f"🔁 User {user_id} already signed up for event {event_id}")
            return existing

        character = self._get_owned_character(user_id, data.characterId) if data.characterId else None

        try:
            signup = self.repo.create_signup(
                self.db,
                {
                    "event_id": event_id,
                    "user_id": user_id,
                    "note": data.note,
                    "character_id": character.id if character else None,
                    "confirmation_status": "confirmed" if character else "pending",
                },
            )
            if data.slotRole and data.slotPosition:
                self.repo.create_assignment(
                    self.db,
                    {
                        "event_id": event_id,
                        "signup_id": signup.id,
                        "role": data.slotRole,
                        "position": data.slotPosition,
                        "is_override": False,
                    },
                )
                logger.info(f"📌 Assigned user {user_id} to {data.slotRole} slot {data.slotPosition}")
            self.db.commit()
        except IntegrityError:
            # Lost a race with a concurrent signup for the same user
            self.db.rollback()
            existing = self.repo.get_signup(self.db, event_id, user_id)
            if existing:
                return existing
            raise

        self.db.refresh(signup)
        logger.info(f"✅ User {user_id} signed up for event {event_id}")
        return signup

    def confirm_signup(
        self, event_id: int, signup_id: int, user_id: int, data: ConfirmSignupRequest
    ) -> EventSignup:
        """Attach a character; first confirmation is 'confirmed', later ones 'changed'"""
        signup = self.repo.get_signup_by_id(self.db, event_id, signup_id)
        if not signup:
            raise HTTPException(
                status_code=404, detail=f"Signup {signup_id} not found for event {event_id}"
            )
        if signup.user_id != user_id:
            raise HTTPException(status_code=403, detail="You can only confirm your own signup")

        character = self._get_owned_character(user_id, data.characterId)

        signup.character_id = character.id
        signup.confirmation_status = "confirmed" if signup.confirmation_status == "pending" else "changed"
        self.db.commit()
        self.db.refresh(signup)

        logger.info(f"✅ Signup {signup_id} {signup.confirmation_status} with character {character.id}")
        return signup

    def update_status(self, event_id: int, user_id: int, status: str) -> EventSignup:
        signup = self.repo.get_signup(self.db, event_id, user_id)
        if not signup:
            raise HTTPException(status_code=404, detail="You are not signed up for this event")

        signup.status = status
        self.db.commit()
        self.db.refresh(signup)
        logger.info(f"🔄 User {user_id} set status '{status}' for event {event_id}")
        return signup

    def cancel(self, event_id: int, user_id: int) -> None:
        signup = self.repo.get_signup(self.db, event_id, user_id)
        if not signup:
            raise HTTPException(status_code=404, detail="Signup not found for this event")

        self.repo.delete_signup(self.db, signup)
        logger.info(f"🗑️ User {user_id} canceled signup for event {event_id}")

    def get_roster(self, event_id: int) -> dict:
        self._get_event(event_id)
        signups = self.repo.get_roster(self.db, event_id)
        return {
            "eventId": event_id,
            "signups": [signup_to_dict(s) for s in signups],
            "count": len(signups),
        }

    def get_roster_with_assignments(self, event_id: int) -> dict:
        """Split the roster into the unassigned pool and the assigned slots"""
        event = self._get_event(event_id)
        pool, assigned = [], []
        for signup in self.repo.get_roster(self.db, event_id):
            (assigned if signup.assignment else pool).append(roster_entry(signup))

        return {
            "eventId": event_id,
            "pool": pool,
            "assignments": assigned,
            "slots": dict(MMO_ROSTER_SLOTS if is_mmo(event.game) else GENERIC_ROSTER_SLOTS),
        }

    def update_roster(self, event_id: int, user: User, data: RosterUpdateRequest) -> dict:
        """Replace every assignment for the event (creator, operator or admin)"""
        event = self._get_event(event_id)
        if event.creator_id != user.id and not is_organizer(user):
            logger.warning(f"🚫 User {user.id} tried to edit roster of event {event_id}")
            raise HTTPException(status_code=403, detail="Only event creator or admin can update roster")

        seen_users = set()
        for assignment in data.assignments:
            if assignment.userId in seen_users:
                raise HTTPException(
                    status_code=400,
                    detail=f"User {assignment.userId} appears more than once in the roster",
                )
            seen_users.add(assignment.userId)

        signup_by_user = self.repo.get_signups_by_user(self.db, event_id)
        for assignment in data.assignments:
            if assignment.userId not in signup_by_user:
                raise HTTPException(
                    status_code=400,
                    detail=f"User {assignment.userId} is not signed up for this event",
                )

        self.repo.clear_assignments(self.db, event_id)
        for assignment in data.assignments:
            self.repo.create_assignment(
                self.db,
                {
                    "event_id": event_id,
                    "signup_id": signup_by_user[assignment.userId].id,
                    "role": assignment.slot,
                    "position": assignment.position,
                    "is_override": assignment.isOverride,
                },
            )
        self.db.commit()

        logger.info(f"✅ Roster updated for event {event_id}: {len(data.assignments)} assignment(s)")
        return self.get_roster_with_assignments(event_id)
