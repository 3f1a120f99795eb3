"""Game registry schemas - Pydantic models for validation"""

from typing import Optional

from pydantic import BaseModel, Field


class GameResponse(BaseModel):
    """Schema for a registry game"""

    id: int
    igdbId: Optional[int] = None
    name: str
    slug: str
    coverUrl: Optional[str] = None
    genres: list[int] = []


class GameListResponse(BaseModel):
    data: list[GameResponse]
    meta: dict


class GameImportRequest(BaseModel):
    """Search IGDB and upsert the matches into the registry"""

    query: str = Field(..., min_length=1, max_length=100)
    limit: int = Field(10, ge=1, le=50)
