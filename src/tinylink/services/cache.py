"""
Redis read-through cache of redirect targets.

Only the target URL and expiration time are cached; visit counts and stats
always come from the database. Every operation is best effort: Redis
failures are logged and behave like a cache miss.
"""

from typing import Optional

from pydantic import ValidationError as PydanticValidationError
from redis import Redis
from redis.exceptions import RedisError

from tinylink.core.config import settings, logger
from tinylink.models.url import URL
from tinylink.schemas.url import CachedTarget
from tinylink.services.expiration import as_utc, utcnow


def cache_key(short_code: str) -> str:
    return f"url:{short_code}"


def cache_ttl_seconds(mapping: URL) -> int:
    """Align the cache TTL with the mapping's expiration, if it has one."""
    expires_at = as_utc(mapping.expires_at)
    if expires_at is None:
        return settings.CACHE_TTL_SECONDS
    return max(1, int((expires_at - utcnow()).total_seconds()))


def get_cached_target(cache: Optional[Redis], short_code: str) -> Optional[CachedTarget]:
    if cache is None:
        return None
    try:
        cached_json = cache.get(cache_key(short_code))
    except RedisError as e:
        logger.error(f"Redis error: {e}")
        return None

    if not cached_json:
        return None
    try:
        return CachedTarget.model_validate_json(cached_json)
    except PydanticValidationError as e:
        logger.warning(f"Discarding malformed cache entry for {short_code}: {e}")
        return None


def cache_target(cache: Optional[Redis], mapping: URL) -> None:
    if cache is None:
        return
    target = CachedTarget.model_validate(mapping)
    try:
        cache.setex(
            cache_key(mapping.short_code),
            cache_ttl_seconds(mapping),
            target.model_dump_json(),
        )
    except RedisError as e:
        logger.error(f"Redis error: {e}")


def invalidate_target(cache: Optional[Redis], short_code: str) -> None:
    if cache is None:
        return
    try:
        cache.delete(cache_key(short_code))
    except RedisError as e:
        logger.error(f"Redis error: {e}")
