from datetime import datetime
from typing import Optional

from redis import Redis
from sqlalchemy.orm import Session

from tinylink.core.config import settings, logger
from tinylink.core.exceptions import DuplicateCodeError, NotFoundError, StoreError
from tinylink.models.url import URL
from tinylink.schemas.url import CachedTarget, ShortenRequest
from tinylink.services.cache import cache_target, get_cached_target, invalidate_target
from tinylink.services.code_allocator import allocate_short_code
from tinylink.services.expiration import compute_expires_at, is_expired, utcnow
from tinylink.services.url_store import create_mapping, delete_mapping, increment_visits, lookup_mapping
from tinylink.services.validation import validate_shorten_request


def shorten_url(db: Session, request: ShortenRequest, cache: Optional[Redis] = None) -> URL:
    """
    Create a new shortened URL.

    Args:
        db: Database session
        request: URL, optional custom code and optional TTL in seconds
        cache: Redis client for the redirect cache, or None

    Returns:
        Created URL object

    Raises:
        ValidationError: If the request is malformed
        DuplicateCodeError: If the custom code is taken, or every generated
            code collided
        StoreError: On database failure
    """
    validate_shorten_request(request)

    created_at = utcnow()
    expires_at = compute_expires_at(created_at, request.ttl_seconds)

    # A caller-chosen code gets exactly one attempt
    attempts = 1 if request.code is not None else max(1, settings.CODE_GENERATION_ATTEMPTS)

    last_error: Optional[DuplicateCodeError] = None
    for _ in range(attempts):
        short_code = allocate_short_code(request.code, settings.SHORT_CODE_LENGTH)
        try:
            db_url = create_mapping(db, short_code, request.url, expires_at, created_at)
        except DuplicateCodeError as e:
            logger.warning(f"Short code already taken: {short_code}")
            last_error = e
            continue

        logger.info(f"Created short code {short_code} -> {request.url}")
        cache_target(cache, db_url)
        return db_url

    raise last_error


def _reclaim_expired(db: Session, cache: Optional[Redis], short_code: str) -> None:
    invalidate_target(cache, short_code)
    try:
        if delete_mapping(db, short_code):
            logger.info(f"Reclaimed expired short code {short_code}")
    except StoreError as e:
        logger.error(f"Failed to reclaim expired short code {short_code}: {e}")


def resolve_short_code(
    db: Session,
    short_code: str,
    cache: Optional[Redis] = None,
    now: Optional[datetime] = None,
) -> str:
    """
    Resolve a short code to its redirect target and count the visit.

    Expired mappings are deleted on sight and reported exactly like missing
    ones. Failing to count the visit or to delete an expired row is logged
    but does not fail the call.

    Args:
        db: Database session
        short_code: Code to resolve
        cache: Redis client for the redirect cache, or None
        now: Current time, defaults to utcnow()

    Returns:
        The original URL

    Raises:
        NotFoundError: If the code is missing or expired
        StoreError: If the lookup itself fails
    """
    now = now or utcnow()

    target = get_cached_target(cache, short_code)
    if target is None:
        mapping = lookup_mapping(db, short_code)
        target = CachedTarget.model_validate(mapping)
        if not is_expired(target, now):
            cache_target(cache, mapping)

    if is_expired(target, now):
        _reclaim_expired(db, cache, short_code)
        raise NotFoundError(short_code)

    try:
        counted = increment_visits(db, short_code)
    except StoreError as e:
        logger.error(f"Failed to count visit for {short_code}: {e}")
        return target.original_url

    if not counted:
        # Row vanished after the lookup, or the cache entry was stale
        invalidate_target(cache, short_code)
        raise NotFoundError(short_code)

    return target.original_url
