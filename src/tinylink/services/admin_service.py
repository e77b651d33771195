from datetime import datetime
from typing import List, Optional

from redis import Redis
from sqlalchemy.orm import Session

from tinylink.core.config import logger
from tinylink.core.exceptions import NotFoundError
from tinylink.models.url import URL
from tinylink.services.cache import invalidate_target
from tinylink.services.url_store import delete_expired_mappings, delete_mapping, list_mappings, lookup_mapping


def list_all(db: Session) -> List[URL]:
    """Every stored mapping, expired-but-not-yet-reclaimed rows included."""
    return list_mappings(db)


def get_stats(db: Session, short_code: str) -> URL:
    """
    Get URL statistics.

    Read-only: the expiration policy is not applied and visits are not
    counted, so an expired row is reported until it is reclaimed.

    Raises:
        NotFoundError: If no row exists for short_code
    """
    return lookup_mapping(db, short_code)


def remove_mapping(db: Session, short_code: str, cache: Optional[Redis] = None) -> None:
    """
    Delete a URL by short code.

    Raises:
        NotFoundError: If nothing was deleted
    """
    invalidate_target(cache, short_code)
    if not delete_mapping(db, short_code):
        raise NotFoundError(short_code)
    logger.info(f"Deleted short code {short_code}")


def cleanup_expired(db: Session, now: Optional[datetime] = None) -> int:
    """
    Delete URLs that have expired.

    Returns:
        Number of URLs deleted
    """
    return delete_expired_mappings(db, now)
