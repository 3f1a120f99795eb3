import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./raid_ledger.db")

# Security - JWTs are issued by the auth gateway and verified here
SECRET_KEY = os.getenv("SECRET_KEY")
if not SECRET_KEY:
    import warnings

    warnings.warn(
        "SECRET_KEY not set! Using insecure default - DO NOT USE IN PRODUCTION", RuntimeWarning, stacklevel=2
    )
    SECRET_KEY = "INSECURE-DEV-KEY-CHANGE-IN-PRODUCTION"  # noqa: S105 - Dev fallback only
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
JWT_EXPIRE_MINUTES = int(os.getenv("JWT_EXPIRE_MINUTES", "10080"))  # 7 days

# Frontend base URL (used for CORS defaults)
FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:5173")
ALLOWED_ORIGINS = os.getenv(
    "ALLOWED_ORIGINS",
    f"{FRONTEND_URL},http://localhost:3000",
).split(",")

# Rate limiting is ENABLED by default; set RATE_LIMIT_ENABLED=false for local dev/tests
RATE_LIMIT_ENABLED = os.getenv("RATE_LIMIT_ENABLED", "true").lower() == "true"
# When Redis is down: "closed" denies requests (503), "open" lets them through
RATE_LIMIT_FAILURE_MODE = os.getenv("RATE_LIMIT_FAILURE_MODE", "closed").lower()

# IGDB (Twitch) game data API
IGDB_CLIENT_ID = os.getenv("IGDB_CLIENT_ID")
IGDB_CLIENT_SECRET = os.getenv("IGDB_CLIENT_SECRET")
IGDB_BASE_URL = os.getenv("IGDB_BASE_URL", "https://api.igdb.com/v4")
TWITCH_TOKEN_URL = os.getenv("TWITCH_TOKEN_URL", "https://id.twitch.tv/oauth2/token")
IGDB_MAX_RETRIES = int(os.getenv("IGDB_MAX_RETRIES", "3"))

# Game registry cache TTL (seconds)
GAMES_CACHE_TTL = int(os.getenv("GAMES_CACHE_TTL", "3600"))

# Response hardening
ENVIRONMENT = os.getenv("ENVIRONMENT", "development").lower()
IS_PRODUCTION = ENVIRONMENT == "production"
SECURITY_HEADERS_ENABLED = os.getenv("SECURITY_HEADERS_ENABLED", "true").lower() == "true"
