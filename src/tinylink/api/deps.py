from typing import Optional

from redis import Redis

from tinylink.core.config import get_redis
from tinylink.db.session import get_db

__all__ = ["get_db", "get_cache"]


def get_cache() -> Optional[Redis]:
    """
    Get the redirect cache client.

    Returns None when caching is disabled or Redis is unreachable; the
    services then go straight to the database.
    """
    return get_redis()
