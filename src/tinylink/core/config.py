from pydantic_settings import BaseSettings
from functools import lru_cache
from typing import Optional
from redis import Redis
from redis.exceptions import RedisError
import logging
import time

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger("tinylink")


class Settings(BaseSettings):
    """
    Application settings with environment variable support.

    Settings can be overridden by environment variables or .env file.
    """

    DATABASE_URL: str = "sqlite:///./tinylink.db"

    # Empty means the redirect cache is disabled
    REDIS_URL: str = ""
    REDIS_RETRY_ATTEMPTS: int = 3
    REDIS_RETRY_DELAY: int = 1
    CACHE_TTL_SECONDS: int = 24 * 60 * 60
    # Seconds to run without the cache after a failed connection
    REDIS_RECONNECT_INTERVAL: int = 30

    BASE_URL: str = "http://localhost:8000"
    ALLOWED_ORIGINS: str = "http://localhost:8000,http://localhost:3000"

    SHORT_CODE_LENGTH: int = 6
    CODE_GENERATION_ATTEMPTS: int = 3

    class Config:
        env_file = ".env"
        extra = "ignore"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to avoid loading .env file multiple times.
    """
    return Settings()


settings = get_settings()


_redis_client: Optional[Redis] = None
_redis_retry_after: float = 0.0


def get_redis() -> Optional[Redis]:
    """
    Get the Redis client used for the redirect cache.

    Returns None when no REDIS_URL is configured or Redis stays unreachable
    after the configured retries. Callers treat None as "no cache". Only a
    working client is kept; after a failure, connecting is tried again once
    REDIS_RECONNECT_INTERVAL has passed.
    """
    global _redis_client, _redis_retry_after

    if not settings.REDIS_URL:
        return None
    if _redis_client is not None:
        return _redis_client
    if time.monotonic() < _redis_retry_after:
        return None

    retry_attempts = settings.REDIS_RETRY_ATTEMPTS
    retry_delay = settings.REDIS_RETRY_DELAY

    for attempt in range(retry_attempts):
        try:
            redis_client = Redis.from_url(settings.REDIS_URL, decode_responses=True)
            redis_client.ping()
            _redis_client = redis_client
            return redis_client
        except RedisError as e:
            if attempt < retry_attempts - 1:
                logger.warning(f"Redis connection attempt {attempt+1} failed: {e}. Retrying in {retry_delay}s...")
                time.sleep(retry_delay)
            else:
                logger.error(
                    f"Redis connection failed after {retry_attempts} attempts: {e}. "
                    f"Cache disabled for {settings.REDIS_RECONNECT_INTERVAL}s."
                )

    _redis_retry_after = time.monotonic() + settings.REDIS_RECONNECT_INTERVAL
    return None
