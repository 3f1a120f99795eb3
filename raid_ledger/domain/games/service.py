"""Game service - Business logic for the game registry"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...cache import get_games_cached, invalidate_games_cache, set_games_cached
from ...config import GAMES_CACHE_TTL
from ...models import Game
from ...services.igdb_client import IgdbClient, IgdbError
from ...shared.validators import slugify
from .repository import GameRepository

logger = logging.getLogger(__name__)

MMO_GENRE_ID = 36  # IGDB "Massively Multiplayer Online (MMO)"


def game_to_dict(game: Game) -> dict:
    return {
        "id": game.id,
        "igdbId": game.igdb_id,
        "name": game.name,
        "slug": game.slug,
        "coverUrl": game.cover_url,
        "genres": list(game.genres or []),
    }


def is_mmo(game: Optional[Game]) -> bool:
    """MMO games get role-based roster slots"""
    return bool(game and MMO_GENRE_ID in (game.genres or []))


class GameService:
    """Service layer for game registry business logic"""

    def __init__(self, db: Session, igdb: Optional[IgdbClient] = None):
        self.db = db
        self.repo = GameRepository()
        self.igdb = igdb or IgdbClient()

    def list_games(self, search: Optional[str] = None) -> dict:
        """List the registry; the unfiltered listing is served from cache"""
        if not search:
            cached = get_games_cached()
            if cached is not None:
                return {"data": cached, "meta": {"total": len(cached)}}

        data = [game_to_dict(g) for g in self.repo.list_games(self.db, search)]
        if not search:
            set_games_cached(data, GAMES_CACHE_TTL)
        return {"data": data, "meta": {"total": len(data)}}

    def get_game(self, game_id: int) -> Game:
        game = self.repo.get_game_by_id(self.db, game_id)
        if not game:
            raise HTTPException(status_code=404, detail=f"Game {game_id} not found")
        return game

    async def import_from_igdb(self, query: str, limit: int = 10) -> list[Game]:
        """Search IGDB and upsert every match into the registry"""
        if not self.igdb.is_configured():
            raise HTTPException(status_code=503, detail="IGDB integration is not configured")

        try:
            results = await self.igdb.search_games(query, limit)
        except IgdbError as e:
            logger.error(f"❌ IGDB import failed for '{query}': {e}")
            raise HTTPException(status_code=502, detail="Game data provider unavailable") from e

        rows = [
            {
                "igdb_id": r["igdbId"],
                "name": r["name"],
                "slug": r["slug"] or slugify(r["name"]),
                "cover_url": r["coverUrl"],
                "genres": r["genres"],
            }
            for r in results
        ]
        games = self.repo.upsert_games(self.db, rows)
        invalidate_games_cache()
        logger.info(f"✅ Imported {len(games)} game(s) from IGDB for '{query}'")
        return games
