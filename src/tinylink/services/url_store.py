"""
Persistence of short-code-to-URL mappings.

Every write is a single statement committed on its own, so the database's
primary key on short_code and its row-level atomicity are the only
concurrency control: two concurrent creates of one code end in exactly one
row, and concurrent visit increments never overwrite each other.
"""

from datetime import datetime
from typing import List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import FlushError

from tinylink.core.config import logger
from tinylink.core.exceptions import DuplicateCodeError, NotFoundError, StoreError
from tinylink.models.url import URL
from tinylink.services.expiration import utcnow


def _code_exists(db: Session, short_code: str) -> bool:
    return (
        db.query(URL.short_code).filter(URL.short_code == short_code).first()
        is not None
    )


def create_mapping(
    db: Session,
    short_code: str,
    original_url: str,
    expires_at: Optional[datetime] = None,
    created_at: Optional[datetime] = None,
) -> URL:
    """
    Insert a new mapping.

    Args:
        db: Database session
        short_code: Primary key of the new row
        original_url: Redirect target, stored verbatim
        expires_at: Expiration time, or None for a permanent mapping
        created_at: Creation time, defaults to now

    Returns:
        Created URL object

    Raises:
        DuplicateCodeError: If short_code is already taken
        StoreError: On any other database failure
    """
    db_url = URL(
        short_code=short_code,
        original_url=original_url,
        created_at=created_at or utcnow(),
        expires_at=expires_at,
        visits=0,
    )
    db.add(db_url)

    try:
        db.commit()
    except (IntegrityError, FlushError) as e:
        db.rollback()
        try:
            duplicate = _code_exists(db, short_code)
        except SQLAlchemyError as lookup_error:
            raise StoreError(f"Insert failed: {e}") from lookup_error
        if duplicate:
            raise DuplicateCodeError(short_code) from e
        raise StoreError(f"Insert failed: {e}") from e
    except SQLAlchemyError as e:
        db.rollback()
        raise StoreError(f"Insert failed: {e}") from e

    db.refresh(db_url)
    return db_url


def lookup_mapping(db: Session, short_code: str) -> URL:
    """
    Point read by short code.

    Raises:
        NotFoundError: If no row exists
        StoreError: On database failure
    """
    try:
        db_url = db.query(URL).filter(URL.short_code == short_code).first()
    except SQLAlchemyError as e:
        db.rollback()
        raise StoreError(f"Lookup failed: {e}") from e

    if db_url is None:
        raise NotFoundError(short_code)
    return db_url


def list_mappings(db: Session) -> List[URL]:
    """Return every stored mapping, oldest first."""
    try:
        return db.query(URL).order_by(URL.created_at, URL.short_code).all()
    except SQLAlchemyError as e:
        db.rollback()
        raise StoreError(f"Listing failed: {e}") from e


def delete_mapping(db: Session, short_code: str) -> bool:
    """
    Delete a mapping by short code.

    Returns:
        True if a row was removed, False if there was nothing to delete
    """
    try:
        deleted = (
            db.query(URL)
            .filter(URL.short_code == short_code)
            .delete(synchronize_session="fetch")
        )
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise StoreError(f"Delete failed: {e}") from e
    return deleted > 0


def increment_visits(db: Session, short_code: str) -> bool:
    """
    Add one to the visit counter in a single UPDATE statement.

    Returns:
        True if the row existed and was updated
    """
    try:
        updated = (
            db.query(URL)
            .filter(URL.short_code == short_code)
            .update({URL.visits: URL.visits + 1}, synchronize_session=False)
        )
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise StoreError(f"Visit increment failed: {e}") from e
    return updated > 0


def delete_expired_mappings(db: Session, now: Optional[datetime] = None) -> int:
    """
    Delete every mapping whose expiration time is earlier than now.

    Returns:
        Number of rows deleted
    """
    now = now or utcnow()
    try:
        deleted = (
            db.query(URL)
            .filter(URL.expires_at.isnot(None), URL.expires_at < now)
            .delete(synchronize_session="fetch")
        )
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise StoreError(f"Expired cleanup failed: {e}") from e

    if deleted:
        logger.info(f"Removed {deleted} expired mappings")
    return deleted
