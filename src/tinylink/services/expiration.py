from datetime import datetime, timedelta, UTC
from typing import Optional

from tinylink.core.exceptions import ValidationError


def utcnow() -> datetime:
    return datetime.now(UTC)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to naive timestamps (SQLite hands them back without tzinfo)."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=UTC)


def compute_expires_at(created_at: datetime, ttl_seconds: Optional[int]) -> Optional[datetime]:
    """
    Raises:
        ValidationError: If created_at + ttl_seconds is past datetime.max
    """
    if ttl_seconds is None:
        return None
    try:
        return created_at + timedelta(seconds=ttl_seconds)
    except OverflowError as e:
        raise ValidationError("ttl too large") from e


def is_expired(mapping, now: datetime) -> bool:
    """
    Decide whether a mapping is past its expiration time.

    Args:
        mapping: Anything with an ``expires_at`` attribute (URL row or CachedTarget)
        now: Current time

    Returns:
        True if expires_at is set and strictly earlier than now
    """
    expires_at = as_utc(mapping.expires_at)
    if expires_at is None:
        return False
    return expires_at < as_utc(now)
