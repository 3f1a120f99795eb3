"""Event router - FastAPI endpoints for event scheduling"""

import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import User
from .schemas import EventCreate, EventListResponse, EventResponse, EventUpdate
from .service import EventService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/events", tags=["Events"])


def get_event_service(db: Session = Depends(get_db)) -> EventService:
    """Dependency injection for EventService"""
    return EventService(db)


@router.post("", response_model=EventResponse, status_code=201)
async def create_event(
    data: EventCreate,
    current_user: User = Depends(get_current_user),
    service: EventService = Depends(get_event_service),
):
    return service.create(current_user.id, data)


@router.get("", response_model=EventListResponse)
async def list_events(
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1),
    upcoming: bool = Query(False),
    startAfter: Optional[datetime] = Query(None),
    endBefore: Optional[datetime] = Query(None),
    gameId: Optional[int] = Query(None),
    service: EventService = Depends(get_event_service),
):
    """Paginated event listing ordered by start time"""
    return service.find_all(page, limit, upcoming, startAfter, endBefore, gameId)


@router.get("/{event_id}", response_model=EventResponse)
async def get_event(event_id: int, service: EventService = Depends(get_event_service)):
    return service.find_one(event_id)


@router.patch("/{event_id}", response_model=EventResponse)
async def update_event(
    event_id: int,
    data: EventUpdate,
    current_user: User = Depends(get_current_user),
    service: EventService = Depends(get_event_service),
):
    """Update an event (creator, operator or admin)"""
    return service.update(event_id, current_user, data)


@router.delete("/{event_id}", status_code=204)
async def delete_event(
    event_id: int,
    current_user: User = Depends(get_current_user),
    service: EventService = Depends(get_event_service),
):
    service.delete(event_id, current_user)
    return Response(status_code=204)
