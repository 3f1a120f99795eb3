"""Character repository - Database operations for characters"""

from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ...models import Character


class CharacterRepository:
    """Repository for character database operations"""

    @staticmethod
    def get_characters_for_user(
        db: Session, user_id: int, game_id: Optional[int] = None
    ) -> list[Character]:
        query = db.query(Character).filter(Character.user_id == user_id)
        if game_id is not None:
            query = query.filter(Character.game_id == game_id)
        return query.order_by(Character.display_order.asc(), Character.created_at.asc()).all()

    @staticmethod
    def get_character_by_id(db: Session, character_id: str) -> Optional[Character]:
        return db.query(Character).filter(Character.id == character_id).first()

    @staticmethod
    def find_claim_by_other_user(
        db: Session, game_id: int, user_id: int, name: str, realm: str
    ) -> Optional[Character]:
        """Same name (case-insensitive) on the same realm owned by someone else"""
        return (
            db.query(Character)
            .filter(
                Character.game_id == game_id,
                Character.user_id != user_id,
                func.lower(Character.name) == name.lower(),
                func.lower(Character.realm) == realm.lower(),
            )
            .first()
        )

    @staticmethod
    def count_for_game(db: Session, user_id: int, game_id: int) -> int:
        return (
            db.query(func.count(Character.id))
            .filter(Character.user_id == user_id, Character.game_id == game_id)
            .scalar()
        )

    @staticmethod
    def demote_main(db: Session, user_id: int, game_id: int) -> int:
        """Clear the main flag for a user's game; flushed immediately so a promote can follow"""
        return (
            db.query(Character)
            .filter(
                Character.user_id == user_id,
                Character.game_id == game_id,
                Character.is_main.is_(True),
            )
            .update({Character.is_main: False}, synchronize_session="fetch")
        )

    @staticmethod
    def create_character(db: Session, character_data: dict) -> Character:
        character = Character(**character_data)
        db.add(character)
        db.flush()
        return character

    @staticmethod
    def delete_character(db: Session, character: Character) -> None:
        db.delete(character)
        db.flush()
