"""Availability router - FastAPI endpoints for availability windows and the roster heatmap"""

import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import User
from ...rate_limiter import create_user_rate_limiter
from .schemas import (
    AvailabilityCreate,
    AvailabilityListResponse,
    AvailabilityResponse,
    AvailabilityUpdate,
    AvailabilityWithConflicts,
    RosterAvailabilityResponse,
)
from .service import AvailabilityService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users/me/availability", tags=["Availability"])
roster_router = APIRouter(prefix="/events", tags=["Availability"])

write_rate_limit = create_user_rate_limiter(limit=30, window_seconds=60, key_prefix="availability_write")


def get_availability_service(db: Session = Depends(get_db)) -> AvailabilityService:
    """Dependency injection for AvailabilityService"""
    return AvailabilityService(db)


@router.get("", response_model=AvailabilityListResponse)
async def list_availability(
    start: Optional[datetime] = Query(None, alias="from"),
    end: Optional[datetime] = Query(None, alias="to"),
    current_user: User = Depends(get_current_user),
    service: AvailabilityService = Depends(get_availability_service),
):
    """List the current user's windows, optionally only those overlapping [from, to)"""
    return service.find_all_for_user(current_user.id, start, end)


@router.post("", response_model=AvailabilityWithConflicts, status_code=201)
async def create_availability(
    data: AvailabilityCreate,
    current_user: User = Depends(get_current_user),
    service: AvailabilityService = Depends(get_availability_service),
    _: None = Depends(write_rate_limit),
):
    return service.create(current_user.id, data)


@router.get("/{availability_id}", response_model=AvailabilityResponse)
async def get_availability(
    availability_id: str,
    current_user: User = Depends(get_current_user),
    service: AvailabilityService = Depends(get_availability_service),
):
    return service.find_one(current_user.id, availability_id)


@router.patch("/{availability_id}", response_model=AvailabilityWithConflicts)
async def update_availability(
    availability_id: str,
    data: AvailabilityUpdate,
    current_user: User = Depends(get_current_user),
    service: AvailabilityService = Depends(get_availability_service),
    _: None = Depends(write_rate_limit),
):
    return service.update(current_user.id, availability_id, data)


@router.delete("/{availability_id}")
async def delete_availability(
    availability_id: str,
    current_user: User = Depends(get_current_user),
    service: AvailabilityService = Depends(get_availability_service),
):
    service.delete(current_user.id, availability_id)
    return {"success": True}


@roster_router.get("/{event_id}/roster/availability", response_model=RosterAvailabilityResponse)
async def get_roster_availability(
    event_id: int,
    start: Optional[datetime] = Query(None, alias="from"),
    end: Optional[datetime] = Query(None, alias="to"),
    service: AvailabilityService = Depends(get_availability_service),
):
    """Heatmap data for everyone signed up (public)"""
    return service.get_roster_availability(event_id, start, end)
