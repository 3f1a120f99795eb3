# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# Environment is configured before the application is imported: config.py
# reads settings at import time and database.py builds its engine from them.
# Every test gets a fresh in-memory SQLite database wired in through
# app.dependency_overrides, and Redis is replaced by a mock.
# =============================================================================

import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["DB_LOG_SLOW_QUERIES"] = "false"
os.environ["SECURITY_HEADERS_ENABLED"] = "true"

from datetime import datetime, timedelta
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from raid_ledger import cache as cache_module
from raid_ledger import rate_limiter
from raid_ledger.database import Base, build_engine, get_db
from raid_ledger.main import app
from raid_ledger.models import Character, Event, EventSignup, Game, User
from raid_ledger.security_utils import create_jwt_token

MMO_GENRES = [12, 36]


# =============================================================================
# Database
# =============================================================================


@pytest.fixture
def engine():
    test_engine = build_engine("sqlite://")
    Base.metadata.create_all(bind=test_engine)
    yield test_engine
    Base.metadata.drop_all(bind=test_engine)
    test_engine.dispose()


@pytest.fixture
def db_session(engine):
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(engine):
    """TestClient whose requests each get their own session on the test engine"""
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    def override_get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    with_client = TestClient(app)
    yield with_client
    app.dependency_overrides.clear()


# =============================================================================
# Redis
# =============================================================================


@pytest.fixture(autouse=True)
def fake_redis(monkeypatch):
    """Redis stand-in: cache always misses, limiter state starts empty"""
    redis_mock = MagicMock()
    redis_mock.get.return_value = None
    redis_mock.ttl.return_value = -2

    monkeypatch.setattr(cache_module.cache, "redis_client", redis_mock)
    monkeypatch.setattr(rate_limiter, "redis_client", redis_mock)
    monkeypatch.setattr(rate_limiter, "memory_cache", {})
    return redis_mock


# =============================================================================
# Data helpers
# =============================================================================


def auth_headers(user: User) -> dict:
    return {"Authorization": f"Bearer {create_jwt_token({'sub': str(user.id)})}"}


def make_user(db, username: str, role: str = "member", **kwargs) -> User:
    user = User(username=username, discord_id=kwargs.pop("discord_id", f"d-{username}"), role=role, **kwargs)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def make_game(db, name: str = "World of Warcraft", slug: str = "world-of-warcraft", genres=None) -> Game:
    game = Game(name=name, slug=slug, genres=genres if genres is not None else MMO_GENRES)
    db.add(game)
    db.commit()
    db.refresh(game)
    return game


def make_event(
    db,
    creator: User,
    start: datetime,
    hours: float = 2,
    game: Game = None,
    title: str = "Raid Night",
) -> Event:
    event = Event(
        title=title,
        creator_id=creator.id,
        game_id=game.id if game else None,
        start_time=start,
        end_time=start + timedelta(hours=hours),
    )
    db.add(event)
    db.commit()
    db.refresh(event)
    return event


def make_signup(db, event: Event, user: User, **kwargs) -> EventSignup:
    signup = EventSignup(event_id=event.id, user_id=user.id, **kwargs)
    db.add(signup)
    db.commit()
    db.refresh(signup)
    return signup


def make_character(db, user: User, game: Game, name: str = "Thrall", **kwargs) -> Character:
    character = Character(user_id=user.id, game_id=game.id, name=name, **kwargs)
    db.add(character)
    db.commit()
    db.refresh(character)
    return character


@pytest.fixture
def alice(db_session):
    return make_user(db_session, "alice")


@pytest.fixture
def bob(db_session):
    return make_user(db_session, "bob")


@pytest.fixture
def admin(db_session):
    return make_user(db_session, "admin", role="admin")


@pytest.fixture
def wow(db_session):
    return make_game(db_session)
