"""Signup router - FastAPI endpoints for event signups and rosters"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import User
from .schemas import (
    ConfirmSignupRequest,
    RosterResponse,
    RosterUpdateRequest,
    RosterWithAssignmentsResponse,
    SignupCreate,
    SignupResponse,
    SignupStatusUpdate,
)
from .service import SignupService, signup_to_dict

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/events", tags=["Signups"])


def get_signup_service(db: Session = Depends(get_db)) -> SignupService:
    """Dependency injection for SignupService"""
    return SignupService(db)


@router.post("/{event_id}/signup", response_model=SignupResponse, status_code=201)
async def signup(
    event_id: int,
    data: Optional[SignupCreate] = None,
    current_user: User = Depends(get_current_user),
    service: SignupService = Depends(get_signup_service),
):
    """Sign up for an event (repeat calls return the existing signup)"""
    return signup_to_dict(service.signup(event_id, current_user.id, data))


@router.delete("/{event_id}/signup", status_code=204)
async def cancel_signup(
    event_id: int,
    current_user: User = Depends(get_current_user),
    service: SignupService = Depends(get_signup_service),
):
    service.cancel(event_id, current_user.id)
    return Response(status_code=204)


@router.patch("/{event_id}/signup/status", response_model=SignupResponse)
async def update_signup_status(
    event_id: int,
    data: SignupStatusUpdate,
    current_user: User = Depends(get_current_user),
    service: SignupService = Depends(get_signup_service),
):
    return signup_to_dict(service.update_status(event_id, current_user.id, data.status))


@router.patch("/{event_id}/signups/{signup_id}/confirm", response_model=SignupResponse)
async def confirm_signup(
    event_id: int,
    signup_id: int,
    data: ConfirmSignupRequest,
    current_user: User = Depends(get_current_user),
    service: SignupService = Depends(get_signup_service),
):
    """Confirm which character the user is bringing"""
    return signup_to_dict(service.confirm_signup(event_id, signup_id, current_user.id, data))


@router.get("/{event_id}/roster", response_model=RosterResponse)
async def get_roster(event_id: int, service: SignupService = Depends(get_signup_service)):
    return service.get_roster(event_id)


@router.get("/{event_id}/roster/assignments", response_model=RosterWithAssignmentsResponse)
async def get_roster_assignments(
    event_id: int, service: SignupService = Depends(get_signup_service)
):
    return service.get_roster_with_assignments(event_id)


@router.patch("/{event_id}/roster", response_model=RosterWithAssignmentsResponse)
async def update_roster(
    event_id: int,
    data: RosterUpdateRequest,
    current_user: User = Depends(get_current_user),
    service: SignupService = Depends(get_signup_service),
):
    """Replace the event's roster assignments"""
    return service.update_roster(event_id, current_user, data)
