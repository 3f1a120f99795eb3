"""Game time router - FastAPI endpoints for the weekly availability planner"""

import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import User
from ...rate_limiter import create_user_rate_limiter
from .schemas import (
    AbsenceCreate,
    AbsenceEnvelope,
    AbsenceListEnvelope,
    CompositeViewResponse,
    SaveOverridesRequest,
    SaveTemplateRequest,
    TemplateEnvelope,
)
from .service import GameTimeService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users/me/game-time", tags=["Game Time"])

write_rate_limit = create_user_rate_limiter(limit=30, window_seconds=60, key_prefix="game_time_write")


def get_game_time_service(db: Session = Depends(get_db)) -> GameTimeService:
    """Dependency injection for GameTimeService"""
    return GameTimeService(db)


@router.get("", response_model=CompositeViewResponse)
async def get_game_time(
    week: Optional[datetime] = Query(None, description="Week start (ISO-8601); defaults to this Sunday"),
    tzOffset: int = Query(0, ge=-840, le=840, description="Minutes behind UTC"),
    current_user: User = Depends(get_current_user),
    service: GameTimeService = Depends(get_game_time_service),
):
    """Composite weekly grid: template, commitments, overrides and absences"""
    return {"data": service.get_composite_view(current_user.id, week, tzOffset)}


@router.put("", response_model=TemplateEnvelope)
async def save_game_time(
    data: SaveTemplateRequest,
    current_user: User = Depends(get_current_user),
    service: GameTimeService = Depends(get_game_time_service),
    _: None = Depends(write_rate_limit),
):
    """Replace the recurring weekly template (dayOfWeek 0=Sunday)"""
    return {"data": service.save_template(current_user.id, data.slots)}


@router.put("/overrides")
async def save_overrides(
    data: SaveOverridesRequest,
    current_user: User = Depends(get_current_user),
    service: GameTimeService = Depends(get_game_time_service),
    _: None = Depends(write_rate_limit),
):
    service.save_overrides(current_user.id, data.overrides)
    return {"data": {"success": True}}


@router.post("/absences", response_model=AbsenceEnvelope, status_code=201)
async def create_absence(
    data: AbsenceCreate,
    current_user: User = Depends(get_current_user),
    service: GameTimeService = Depends(get_game_time_service),
    _: None = Depends(write_rate_limit),
):
    return {"data": service.create_absence(current_user.id, data)}


@router.get("/absences", response_model=AbsenceListEnvelope)
async def list_absences(
    current_user: User = Depends(get_current_user),
    service: GameTimeService = Depends(get_game_time_service),
):
    return {"data": service.get_absences(current_user.id)}


@router.delete("/absences/{absence_id}", status_code=204)
async def delete_absence(
    absence_id: int,
    current_user: User = Depends(get_current_user),
    service: GameTimeService = Depends(get_game_time_service),
):
    service.delete_absence(current_user.id, absence_id)
    return Response(status_code=204)
