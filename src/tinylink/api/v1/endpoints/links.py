from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from tinylink.api.deps import get_db, get_cache
from tinylink.schemas.url import ShortenRequest, ShortenResponse, URLStats
from tinylink.services.url_service import shorten_url
from tinylink.services.admin_service import (
    list_all,
    get_stats,
    remove_mapping,
    cleanup_expired,
)
from tinylink.core.config import settings

router = APIRouter()


@router.post("/shorten", response_model=ShortenResponse, status_code=status.HTTP_201_CREATED)
def create_link(
    request: ShortenRequest,
    db: Session = Depends(get_db),
    cache=Depends(get_cache),
):
    """
    Create a shortened URL.

    Omit `code` to get a random one. `ttl_seconds` makes the link stop
    resolving after that many seconds.
    """
    url = shorten_url(db, request, cache)
    return ShortenResponse(
        short_code=url.short_code,
        short_url=f"{settings.BASE_URL.rstrip('/')}/{url.short_code}",
    )


@router.get("", response_model=list[URLStats])
def list_links(db: Session = Depends(get_db)):
    """
    List every stored link.

    Expired links appear here until they are reclaimed.
    """
    return list_all(db)


@router.post("/cleanup-expired", status_code=status.HTTP_200_OK)
def cleanup_expired_links(db: Session = Depends(get_db)):
    """
    Delete every link whose expiration time has passed.
    """
    deleted_count = cleanup_expired(db)
    return {"message": f"Deleted {deleted_count} expired links", "deleted": deleted_count}


@router.get("/{short_code}/stats", response_model=URLStats)
def get_link_stats(short_code: str, db: Session = Depends(get_db)):
    """
    Get statistics for a shortened URL.

    Reading stats does not count as a visit.
    """
    return get_stats(db, short_code)


@router.delete("/{short_code}", status_code=status.HTTP_204_NO_CONTENT)
def delete_link(
    short_code: str,
    db: Session = Depends(get_db),
    cache=Depends(get_cache),
):
    """
    Delete a shortened URL.
    """
    remove_mapping(db, short_code, cache)
