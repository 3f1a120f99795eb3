"""Character router - FastAPI endpoints for the current user's characters"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import User
from ...rate_limiter import create_rate_limiter
from .schemas import CharacterCreate, CharacterListResponse, CharacterResponse, CharacterUpdate
from .service import CharacterService, character_to_dict

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users/me/characters", tags=["Characters"])
public_router = APIRouter(prefix="/characters", tags=["Characters"])

public_lookup_rate_limit = create_rate_limiter(limit=60, window_seconds=60, key_prefix="public_character")


def get_character_service(db: Session = Depends(get_db)) -> CharacterService:
    """Dependency injection for CharacterService"""
    return CharacterService(db)


@router.get("", response_model=CharacterListResponse)
async def list_characters(
    gameId: Optional[int] = Query(None),
    current_user: User = Depends(get_current_user),
    service: CharacterService = Depends(get_character_service),
):
    """List the current user's characters, optionally for one game"""
    return service.find_all_for_user(current_user.id, gameId)


@router.post("", response_model=CharacterResponse, status_code=201)
async def create_character(
    data: CharacterCreate,
    current_user: User = Depends(get_current_user),
    service: CharacterService = Depends(get_character_service),
):
    return character_to_dict(service.create(current_user.id, data))


@router.get("/{character_id}", response_model=CharacterResponse)
async def get_character(
    character_id: str,
    current_user: User = Depends(get_current_user),
    service: CharacterService = Depends(get_character_service),
):
    return character_to_dict(service.find_one(current_user.id, character_id))


@router.patch("/{character_id}", response_model=CharacterResponse)
async def update_character(
    character_id: str,
    data: CharacterUpdate,
    current_user: User = Depends(get_current_user),
    service: CharacterService = Depends(get_character_service),
):
    return character_to_dict(service.update(current_user.id, character_id, data))


@router.delete("/{character_id}", status_code=204)
async def delete_character(
    character_id: str,
    current_user: User = Depends(get_current_user),
    service: CharacterService = Depends(get_character_service),
):
    service.delete(current_user.id, character_id)
    return Response(status_code=204)


@router.patch("/{character_id}/main", response_model=CharacterResponse)
async def set_main_character(
    character_id: str,
    current_user: User = Depends(get_current_user),
    service: CharacterService = Depends(get_character_service),
):
    """Make this character the main for its game (the previous main becomes an alt)"""
    return character_to_dict(service.set_main(current_user.id, character_id))


@public_router.get("/{character_id}", response_model=CharacterResponse)
async def get_public_character(
    character_id: str,
    service: CharacterService = Depends(get_character_service),
    _: None = Depends(public_lookup_rate_limit),
):
    """Public character detail (no ownership check)"""
    return character_to_dict(service.get_public(character_id))
