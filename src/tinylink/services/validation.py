from typing import Optional

from pydantic import AnyUrl, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from tinylink.core.exceptions import ValidationError
from tinylink.schemas.url import ShortenRequest
from tinylink.services.code_allocator import CODE_ALPHABET
from tinylink.services.expiration import compute_expires_at, utcnow

MIN_CODE_LENGTH = 6

_url_adapter = TypeAdapter(AnyUrl)


def is_absolute_url(value: Optional[str]) -> bool:
    """Return True if value parses as a URL with both a scheme and a host."""
    if not value:
        return False
    try:
        parsed = _url_adapter.validate_python(value)
    except PydanticValidationError:
        return False
    return bool(parsed.scheme and parsed.host)


def validate_shorten_request(request: ShortenRequest) -> None:
    """
    Check a creation request before it reaches storage.

    Args:
        request: Incoming shorten request

    Raises:
        ValidationError: With reason "invalid url", "code too short",
            "code contains invalid characters", "ttl must be positive" or
            "ttl too large"
    """
    if not is_absolute_url(request.url):
        raise ValidationError("invalid url")

    if request.code is not None:
        if len(request.code) < MIN_CODE_LENGTH:
            raise ValidationError("code too short")
        # Anything else (e.g. "/") could never match the redirect route
        if not set(request.code) <= set(CODE_ALPHABET):
            raise ValidationError("code contains invalid characters")

    if request.ttl_seconds is not None:
        if request.ttl_seconds <= 0:
            raise ValidationError("ttl must be positive")
        compute_expires_at(utcnow(), request.ttl_seconds)
