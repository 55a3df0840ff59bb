"""
Numeris - Configuration et utilitaires partagés

Settings are read once from the environment (and backend/.env) and passed
explicitly to whatever needs them: repositories, token service, activity
logger, cleanup scheduler.
"""

import os
from datetime import date, datetime, timezone
from functools import lru_cache
from pathlib import Path
from typing import List

from bson import ObjectId
from dotenv import load_dotenv
from pydantic import BaseModel

# Charger .env
ROOT_DIR = Path(__file__).parent
load_dotenv(ROOT_DIR / '.env')


class Settings(BaseModel):
    """Runtime configuration of the API process."""

    # MongoDB
    mongo_url: str = "mongodb://localhost:27017"
    db_name: str = "track_space"
    db_timeout_seconds: float = 10.0
    db_max_pool_size: int = 5
    db_max_idle_time_ms: int = 120_000
    db_connect_attempts: int = 10
    db_connect_retry_seconds: float = 5.0

    # Auth
    auth_token_key: str = ""
    token_ttl_hours: int = 48
    token_issuer: str = "numeris"

    # Background work
    activity_queue_size: int = 1000
    download_dir: str = str(ROOT_DIR / "downloads")
    download_ttl_seconds: int = 300

    cors_origins: List[str] = ["*"]
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        env = os.environ
        defaults = cls()
        return cls(
            mongo_url=env.get('MONGO_URL', defaults.mongo_url),
            db_name=env.get('DB_NAME', defaults.db_name),
            db_timeout_seconds=float(env.get('DB_TIMEOUT_SECONDS', defaults.db_timeout_seconds)),
            db_max_pool_size=int(env.get('DB_MAX_POOL_SIZE', defaults.db_max_pool_size)),
            db_max_idle_time_ms=int(env.get('DB_MAX_IDLE_TIME_MS', defaults.db_max_idle_time_ms)),
            db_connect_attempts=int(env.get('DB_CONNECT_ATTEMPTS', defaults.db_connect_attempts)),
            db_connect_retry_seconds=float(env.get('DB_CONNECT_RETRY_SECONDS', defaults.db_connect_retry_seconds)),
            auth_token_key=env.get('AUTH_TOKEN_KEY', defaults.auth_token_key),
            token_ttl_hours=int(env.get('TOKEN_TTL_HOURS', defaults.token_ttl_hours)),
            token_issuer=env.get('TOKEN_ISSUER', defaults.token_issuer),
            activity_queue_size=int(env.get('ACTIVITY_QUEUE_SIZE', defaults.activity_queue_size)),
            download_dir=env.get('DOWNLOAD_DIR', defaults.download_dir),
            download_ttl_seconds=int(env.get('DOWNLOAD_TTL_SECONDS', defaults.download_ttl_seconds)),
            cors_origins=env.get('CORS_ORIGINS', '*').split(','),
            log_level=env.get('LOG_LEVEL', defaults.log_level).upper(),
        )


@lru_cache()
def get_settings() -> Settings:
    return Settings.from_env()


# ==================== HELPERS ====================

def now_utc() -> datetime:
    return datetime.now(timezone.utc)


def now_iso() -> str:
    """Retourne la date/heure actuelle en ISO"""
    return now_utc().isoformat()


def today() -> date:
    """Calendar date in UTC; invoice dates are compared against it."""
    return now_utc().date()


def new_object_id() -> str:
    return str(ObjectId())


def is_object_id(value: str) -> bool:
    return ObjectId.is_valid(value) and len(value) == 24
