"""Game repository - Database operations for the game registry"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import Game


class GameRepository:
    """Repository for game registry database operations"""

    @staticmethod
    def list_games(db: Session, search: Optional[str] = None) -> list[Game]:
        query = db.query(Game)
        if search:
            query = query.filter(Game.name.ilike(f"%{search.lower()}%"))
        return query.order_by(Game.name.asc()).all()

    @staticmethod
    def get_game_by_id(db: Session, game_id: int) -> Optional[Game]:
        return db.query(Game).filter(Game.id == game_id).first()

    @staticmethod
    def get_game_by_igdb_id(db: Session, igdb_id: int) -> Optional[Game]:
        return db.query(Game).filter(Game.igdb_id == igdb_id).first()

    @staticmethod
    def get_game_by_slug(db: Session, slug: str) -> Optional[Game]:
        return db.query(Game).filter(Game.slug == slug).first()

    @staticmethod
    def upsert_games(db: Session, rows: list[dict]) -> list[Game]:
        """Insert new games or refresh existing ones (matched by IGDB id, then slug)"""
        games = []
        for row in rows:
            game = GameRepository.get_game_by_igdb_id(db, row["igdb_id"])
            if game is None:
                game = GameRepository.get_game_by_slug(db, row["slug"])
            if game is None:
                game = Game(slug=row["slug"])
                db.add(game)

            game.igdb_id = row["igdb_id"]
            game.name = row["name"]
            game.cover_url = row["cover_url"]
            game.genres = row["genres"]
            # Later rows resolving to the same slug must find this one
            db.flush()
            if game not in games:
                games.append(game)

        db.commit()
        for game in games:
            db.refresh(game)
        return games
