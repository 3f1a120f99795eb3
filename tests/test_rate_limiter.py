"""Fixed-window rate limiting and its Redis failure modes"""

import asyncio
from unittest.mock import MagicMock

import pytest
import redis
from fastapi import HTTPException
from starlette.requests import Request

from raid_ledger import config, rate_limiter
from raid_ledger.models import User

from .conftest import auth_headers, make_character


def make_request(ip="10.0.0.1", forwarded=None):
    headers = [(b"x-forwarded-for", forwarded.encode())] if forwarded else []
    scope = {"type": "http", "method": "PUT", "path": "/", "headers": headers, "client": (ip, 1234)}
    return Request(scope)


def test_allows_up_to_limit(fake_redis):
    results = [rate_limiter.check_rate_limit("k", 3, 60, fake_redis)[0] for _ in range(4)]
    assert results == [True, True, True, False]


def test_seeds_window_from_redis():
    client = MagicMock()
    client.get.return_value = "5"
    client.ttl.return_value = 30

    allowed, count, ttl = rate_limiter.check_rate_limit("seeded", 5, 60, client)

    assert allowed is False
    assert count == 5
    assert 0 < ttl <= 30


def test_redis_errors_fall_back_to_memory():
    client = MagicMock()
    client.get.side_effect = redis.RedisError("down")
    client.set.side_effect = redis.RedisError("down")

    allowed, count, _ = rate_limiter.check_rate_limit("memory-only", 2, 60, client)

    assert allowed is True
    assert count == 1


def test_client_identity_prefers_forwarded_header():
    assert rate_limiter._client_identity(make_request(forwarded="1.2.3.4, 10.0.0.1")) == "1.2.3.4"
    assert rate_limiter._client_identity(make_request()) == "10.0.0.1"


def test_dependency_raises_429(monkeypatch):
    monkeypatch.setattr(config, "RATE_LIMIT_ENABLED", True)
    limiter = rate_limiter.create_rate_limiter(limit=1, window_seconds=60, key_prefix="test")
    request = make_request()

    asyncio.run(limiter(request))
    with pytest.raises(HTTPException) as exc_info:
        asyncio.run(limiter(request))

    assert exc_info.value.status_code == 429
    assert "Retry-After" in exc_info.value.headers


def test_disabled_limiter_never_blocks(monkeypatch):
    monkeypatch.setattr(config, "RATE_LIMIT_ENABLED", False)
    limiter = rate_limiter.create_rate_limiter(limit=1, window_seconds=60, key_prefix="off")
    for _ in range(3):
        asyncio.run(limiter(make_request()))


def test_fail_closed_without_redis(monkeypatch):
    monkeypatch.setattr(config, "RATE_LIMIT_ENABLED", True)
    monkeypatch.setattr(config, "RATE_LIMIT_FAILURE_MODE", "closed")
    monkeypatch.setattr(rate_limiter, "get_redis_client", MagicMock(side_effect=redis.ConnectionError("down")))
    limiter = rate_limiter.create_rate_limiter(limit=5, window_seconds=60)

    with pytest.raises(HTTPException) as exc_info:
        asyncio.run(limiter(make_request()))
    assert exc_info.value.status_code == 503


def test_fail_open_without_redis(monkeypatch):
    monkeypatch.setattr(config, "RATE_LIMIT_ENABLED", True)
    monkeypatch.setattr(config, "RATE_LIMIT_FAILURE_MODE", "open")
    monkeypatch.setattr(rate_limiter, "get_redis_client", MagicMock(side_effect=redis.ConnectionError("down")))
    limiter = rate_limiter.create_rate_limiter(limit=5, window_seconds=60)

    asyncio.run(limiter(make_request()))


def test_game_time_writes_are_limited(client, alice, monkeypatch):
    monkeypatch.setattr(config, "RATE_LIMIT_ENABLED", True)
    headers = auth_headers(alice)
    statuses = [
        client.put("/users/me/game-time", json={"slots": []}, headers=headers).status_code for _ in range(31)
    ]

    assert statuses[:30] == [200] * 30
    assert statuses[30] == 429


def test_game_time_quota_is_per_user(client, alice, bob, monkeypatch):
    monkeypatch.setattr(config, "RATE_LIMIT_ENABLED", True)
    for _ in range(30):
        assert client.put("/users/me/game-time", json={"slots": []}, headers=auth_headers(alice)).status_code == 200

    assert client.put("/users/me/game-time", json={"slots": []}, headers=auth_headers(alice)).status_code == 429
    assert client.put("/users/me/game-time", json={"slots": []}, headers=auth_headers(bob)).status_code == 200


def test_user_limiter_keys_on_user_id(monkeypatch):
    monkeypatch.setattr(config, "RATE_LIMIT_ENABLED", True)
    limiter = rate_limiter.create_user_rate_limiter(limit=1, window_seconds=60, key_prefix="per_user")
    request = make_request()

    asyncio.run(limiter(request, user=User(id=1)))
    asyncio.run(limiter(request, user=User(id=2)))

    assert set(rate_limiter.memory_cache) == {"per_user:user:1", "per_user:user:2"}
    with pytest.raises(HTTPException) as exc_info:
        asyncio.run(limiter(request, user=User(id=1)))
    assert exc_info.value.status_code == 429


def test_public_character_lookup_is_limited_per_ip(client, db_session, alice, wow, monkeypatch):
    monkeypatch.setattr(config, "RATE_LIMIT_ENABLED", True)
    character = make_character(db_session, alice, wow)

    statuses = [client.get(f"/characters/{character.id}").status_code for _ in range(61)]

    assert statuses[:60] == [200] * 60
    assert statuses[60] == 429
    assert "public_character:testclient" in rate_limiter.memory_cache
