"""
Hybrid in-memory + Redis rate limiting
Counters live in process memory and are synced to Redis periodically so
multiple workers converge on the same window without a Redis call per request.
"""

import logging
import os
import time
from threading import Lock
from typing import Optional

import redis
from fastapi import Depends, HTTPException, Request, status

from . import config
from .auth import get_current_user
from .models import User

logger = logging.getLogger(__name__)

redis_client: Optional[redis.Redis] = None

# Format: {key: {'count': int, 'reset_time': int, 'last_redis_sync': int}}
memory_cache: dict[str, dict] = {}
cache_lock = Lock()

MEMORY_CACHE_SYNC_INTERVAL = 10  # seconds between Redis syncs per key
MEMORY_CACHE_CLEANUP_INTERVAL = 60  # seconds between expired-entry sweeps
last_cleanup_time = 0


def get_redis_client() -> redis.Redis:
    """Get or create the shared Redis client (REDIS_URL, or REDIS_HOST/PORT/...)"""
    global redis_client

    if redis_client is None:
        logger.info("🔄 Initializing Redis connection...")
        redis_url = os.getenv("REDIS_URL")

        try:
            if redis_url:
                client = redis.from_url(
                    redis_url,
                    decode_responses=True,
                    socket_connect_timeout=5,
                    socket_timeout=5,
                    retry_on_timeout=True,
                    health_check_interval=30,
                    max_connections=20,
                )
            else:
                redis_host = os.getenv("REDIS_HOST", "localhost")
                redis_port = int(os.getenv("REDIS_PORT", "6379"))
                redis_ssl = os.getenv("REDIS_SSL", "false").lower() == "true"
                logger.info(f"📡 Using Redis at {redis_host}:{redis_port} (SSL: {redis_ssl})")
                client = redis.Redis(
                    host=redis_host,
                    port=redis_port,
                    password=os.getenv("REDIS_PASSWORD"),
                    db=int(os.getenv("REDIS_DB", "0")),
                    ssl=redis_ssl,
                    decode_responses=True,
                    socket_connect_timeout=5,
                    socket_timeout=5,
                    retry_on_timeout=True,
                    health_check_interval=30,
                    max_connections=20,
                )
            client.ping()
        except Exception as e:
            logger.error(f"❌ Failed to connect to Redis: {str(e)}")
            raise

        redis_client = client
        logger.info("✅ Redis connected successfully")

    return redis_client


def cleanup_expired_cache():
    """Remove expired entries from memory cache"""
    global last_cleanup_time
    current_time = int(time.time())

    if current_time - last_cleanup_time < MEMORY_CACHE_CLEANUP_INTERVAL:
        return

    with cache_lock:
        expired_keys = [
            k for k, v in memory_cache.items() if current_time >= v.get("reset_time", 0)
        ]
        for k in expired_keys:
            del memory_cache[k]

        if expired_keys:
            logger.debug(f"🧹 Cleaned up {len(expired_keys)} expired rate limit entries")

    last_cleanup_time = current_time


def _new_window(current_time: int, window_seconds: int, count: int = 0) -> dict:
    return {
        "count": count,
        "reset_time": current_time + window_seconds,
        "last_redis_sync": current_time,
    }


def check_rate_limit(
    key: str, limit: int, window_seconds: int, client: redis.Redis
) -> tuple[bool, int, int]:
    """Check and consume one request from a fixed window

    Args:
        key: Redis key for this rate limit
        limit: Maximum number of requests allowed
        window_seconds: Time window in seconds
        client: Redis client instance

    Returns:
        Tuple of (is_allowed, current_count, ttl_seconds)
    """
    current_time = int(time.time())
    cleanup_expired_cache()

    with cache_lock:
        if key not in memory_cache:
            # Seed from Redis so a restarted worker keeps the window other workers built
            try:
                redis_count = client.get(key)
                redis_ttl = client.ttl(key)
                if redis_count and redis_ttl > 0:
                    memory_cache[key] = {
                        "count": int(redis_count),
                        "reset_time": current_time + redis_ttl,
                        "last_redis_sync": current_time,
                    }
                else:
                    memory_cache[key] = _new_window(current_time, window_seconds)
            except redis.RedisError as e:
                logger.warning(f"⚠️ Failed to load {key} from Redis, using memory only: {e}")
                memory_cache[key] = _new_window(current_time, window_seconds)

        entry = memory_cache[key]

        if current_time >= entry["reset_time"]:
            entry.update(_new_window(current_time, window_seconds))
            entry["last_redis_sync"] = 0

        is_allowed = entry["count"] < limit
        if is_allowed:
            entry["count"] += 1

        if current_time - entry.get("last_redis_sync", 0) >= MEMORY_CACHE_SYNC_INTERVAL:
            try:
                ttl = max(1, entry["reset_time"] - current_time)
                client.set(key, entry["count"], ex=ttl)
                entry["last_redis_sync"] = current_time
                logger.debug(f"📡 Synced {key} to Redis: {entry['count']}/{limit}")
            except redis.RedisError as e:
                logger.warning(f"⚠️ Failed to sync {key} to Redis: {e}")

        return is_allowed, entry["count"], max(0, entry["reset_time"] - current_time)


def _client_identity(request: Request) -> str:
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


async def rate_limit_dependency(
    request: Request,
    limit: int,
    window_seconds: int,
    key_prefix: str = "rate_limit",
    identity: str = "global",
):
    """
    FastAPI dependency for rate limiting

    Args:
        request: FastAPI request object
        limit: Maximum requests allowed
        window_seconds: Time window in seconds
        key_prefix: Prefix for Redis key
        identity: Bucket owner (client IP, "user:<id>", or "global")
    """
    if not config.RATE_LIMIT_ENABLED:
        return

    key = f"{key_prefix}:{identity}"

    try:
        client = get_redis_client()
        is_allowed, current_count, ttl = check_rate_limit(key, limit, window_seconds, client)
    except Exception as e:
        logger.error(f"❌ Rate limiting error: {str(e)}")
        if config.RATE_LIMIT_FAILURE_MODE == "open":
            logger.warning(f"🔓 Allowing {key} without rate limiting (fail-open mode)")
            return
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Rate limiting service temporarily unavailable",
        ) from e

    if not is_allowed:
        logger.warning(f"🚫 Rate limit EXCEEDED for {key} - {current_count}/{limit} requests used")
        raise HTTPException(
            status_code=429,
            detail={
                "message": f"Rate limit exceeded. Maximum {limit} requests per {window_seconds} seconds.",
                "retry_after": ttl,
                "limit": limit,
                "window_seconds": window_seconds,
            },
            headers={"Retry-After": str(ttl)},
        )

    request.state.rate_limit_remaining = limit - current_count
    request.state.rate_limit_limit = limit
    request.state.rate_limit_reset = int(time.time()) + ttl


def create_rate_limiter(
    limit: int, window_seconds: int, key_prefix: str = "rate_limit", use_ip: bool = True
):
    """
    Create a rate limiter dependency with specific parameters

    Example usage:
        public_limit = create_rate_limiter(limit=60, window_seconds=60, key_prefix="public_character")

        @public_router.get("/{character_id}")
        async def get_public_character(character_id: str, _: None = Depends(public_limit)):
            ...
    """

    async def rate_limiter(request: Request):
        identity = _client_identity(request) if use_ip else "global"
        return await rate_limit_dependency(request, limit, window_seconds, key_prefix, identity)

    return rate_limiter


def create_user_rate_limiter(limit: int, window_seconds: int, key_prefix: str = "rate_limit"):
    """
    Create a rate limiter dependency that gives every authenticated user their own bucket

    Users sharing an IP (NAT, proxies) do not consume each other's quota.
    """

    async def rate_limiter(request: Request, user: User = Depends(get_current_user)):
        return await rate_limit_dependency(request, limit, window_seconds, key_prefix, f"user:{user.id}")

    return rate_limiter
