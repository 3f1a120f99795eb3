"""Character service - Business logic for player characters (one main per game)"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...models import Character
from ..games.repository import GameRepository
from .repository import CharacterRepository
from .schemas import CharacterCreate, CharacterUpdate

logger = logging.getLogger(__name__)

# Request field -> column attribute for partial updates
UPDATABLE_FIELDS = {
    "name": "name",
    "realm": "realm",
    "className": "class_name",
    "spec": "spec",
    "roleOverride": "role_override",
    "itemLevel": "item_level",
    "avatarUrl": "avatar_url",
    "displayOrder": "display_order",
}


def character_to_dict(character: Character) -> dict:
    return {
        "id": character.id,
        "userId": character.user_id,
        "gameId": character.game_id,
        "name": character.name,
        "realm": character.realm,
        "class": character.class_name,
        "spec": character.spec,
        "role": character.role,
        "roleOverride": character.role_override,
        "effectiveRole": character.role_override or character.role,
        "isMain": bool(character.is_main),
        "itemLevel": character.item_level,
        "externalId": character.external_id,
        "avatarUrl": character.avatar_url,
        "level": character.level,
        "race": character.race,
        "faction": character.faction,
        "displayOrder": character.display_order or 0,
        "createdAt": character.created_at,
        "updatedAt": character.updated_at,
    }


class CharacterService:
    """Service layer for character business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = CharacterRepository()

    def find_all_for_user(self, user_id: int, game_id: Optional[int] = None) -> dict:
        characters = self.repo.get_characters_for_user(self.db, user_id, game_id)
        return {
            "data": [character_to_dict(c) for c in characters],
            "meta": {"total": len(characters)},
        }

    def get_public(self, character_id: str) -> Character:
        """Characters are publicly viewable by id"""
        character = self.repo.get_character_by_id(self.db, character_id)
        if not character:
            raise HTTPException(status_code=404, detail=f"Character {character_id} not found")
        return character

    def find_one(self, user_id: int, character_id: str) -> Character:
        character = self.get_public(character_id)
        if character.user_id != user_id:
            raise HTTPException(status_code=403, detail="You do not own this character")
        return character

    def create(self, user_id: int, data: CharacterCreate) -> Character:
        """
        Create a character.

        The first character for a game always becomes the main; isMain=true on a
        later character demotes the current main in the same transaction.
        """
        if not GameRepository.get_game_by_id(self.db, data.gameId):
            raise HTTPException(status_code=404, detail=f"Game {data.gameId} not found")

        try:
            # Cross-user claim check only applies to realm-based games
            if data.realm and self.repo.find_claim_by_other_user(
                self.db, data.gameId, user_id, data.name, data.realm
            ):
                raise HTTPException(
                    status_code=409,
                    detail=f"{data.name} on {data.realm} is already claimed by another player",
                )

            existing = self.repo.count_for_game(self.db, user_id, data.gameId)
            should_be_main = data.isMain or existing == 0
            if should_be_main and existing > 0:
                self.repo.demote_main(self.db, user_id, data.gameId)

            character = self.repo.create_character(
                self.db,
                {
                    "user_id": user_id,
                    "game_id": data.gameId,
                    "name": data.name,
                    "realm": data.realm,
                    "class_name": data.className,
                    "spec": data.spec,
                    "role": data.role,
                    "is_main": should_be_main,
                    "item_level": data.itemLevel,
                    "external_id": data.externalId,
                    "avatar_url": data.avatarUrl,
                    "level": data.level,
                    "race": data.race,
                    "faction": data.faction,
                    "display_order": existing,
                },
            )
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            logger.warning(f"⚠️ Duplicate character {data.name} for user {user_id}")
            raise HTTPException(
                status_code=409, detail=f"Character {data.name} already exists for this game/realm"
            ) from e
        except HTTPException:
            self.db.rollback()
            raise

        self.db.refresh(character)
        logger.info(
            f"✅ User {user_id} created character {character.id} ({character.name})"
            f"{' [main]' if should_be_main else ''}"
        )
        return character

    def update(self, user_id: int, character_id: str, data: CharacterUpdate) -> Character:
        character = self.find_one(user_id, character_id)

        changes = data.model_dump(exclude_unset=True, by_alias=False)
        for field, value in changes.items():
            setattr(character, UPDATABLE_FIELDS[field], value)

        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise HTTPException(
                status_code=409, detail="A character with that name already exists for this game/realm"
            ) from e

        self.db.refresh(character)
        logger.info(f"✅ User {user_id} updated character {character_id}")
        return character

    def delete(self, user_id: int, character_id: str) -> None:
        """Delete a character, promoting the lowest-order survivor if the game lost its main"""
        character = self.find_one(user_id, character_id)
        game_id = character.game_id

        self.repo.delete_character(self.db, character)

        remaining = self.repo.get_characters_for_user(self.db, user_id, game_id)
        if remaining and not any(c.is_main for c in remaining):
            promote = remaining[0]
            promote.is_main = True
            logger.info(f"🔄 Auto-promoted character {promote.id} ({promote.name}) to main")

        self.db.commit()
        logger.info(f"🗑️ User {user_id} deleted character {character_id}")

    def set_main(self, user_id: int, character_id: str) -> Character:
        character = self.find_one(user_id, character_id)

        # Demote is flushed before the promote so the one-main index never sees two rows
        self.repo.demote_main(self.db, user_id, character.game_id)
        character.is_main = True
        self.db.commit()
        self.db.refresh(character)

        logger.info(f"✅ User {user_id} set character {character_id} as main for game {character.game_id}")
        return character
