"""Game router - FastAPI endpoints for the game registry"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_organizer, get_current_user
from ...database import get_db
from ...models import User
from ...rate_limiter import create_user_rate_limiter
from .schemas import GameImportRequest, GameListResponse, GameResponse
from .service import GameService, game_to_dict

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/games", tags=["Games"])

import_rate_limit = create_user_rate_limiter(limit=10, window_seconds=60, key_prefix="games_import")


def get_game_service(db: Session = Depends(get_db)) -> GameService:
    """Dependency injection for GameService"""
    return GameService(db)


@router.get("", response_model=GameListResponse)
async def list_games(
    search: Optional[str] = Query(None, max_length=100),
    _: User = Depends(get_current_user),
    service: GameService = Depends(get_game_service),
):
    """List registry games, optionally filtered by name"""
    return service.list_games(search)


@router.get("/{game_id}", response_model=GameResponse)
async def get_game(
    game_id: int,
    _: User = Depends(get_current_user),
    service: GameService = Depends(get_game_service),
):
    return game_to_dict(service.get_game(game_id))


@router.post("/import", response_model=GameListResponse)
async def import_games(
    data: GameImportRequest,
    current_user: User = Depends(get_current_organizer),
    service: GameService = Depends(get_game_service),
    _: None = Depends(import_rate_limit),
):
    """Import games from IGDB into the registry (operators and admins)"""
    logger.info(f"📥 User {current_user.id} importing games for '{data.query}'")
    games = await service.import_from_igdb(data.query, data.limit)
    items = [game_to_dict(g) for g in games]
    return {"data": items, "meta": {"total": len(items)}}
