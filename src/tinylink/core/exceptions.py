"""Exceptions raised by the mapping lifecycle services.

Classes:
    ShortenerError:
        Base class for every service-level error.

    ValidationError:
        The creation request is malformed. Never touches storage.

    DuplicateCodeError:
        The short code is already taken (unique constraint violation).

    NotFoundError:
        The short code does not exist, or it exists but has expired.

    StoreError:
        Any other failure of the backing database.
"""


class ShortenerError(Exception):
    """Base exception for all service-level errors."""

    pass


class ValidationError(ShortenerError):
    """The creation request failed validation."""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class DuplicateCodeError(ShortenerError):
    """A mapping with the requested short code already exists."""

    def __init__(self, short_code: str):
        super().__init__(f"Short code '{short_code}' already exists")
        self.short_code = short_code


class NotFoundError(ShortenerError):
    """No live mapping exists for the short code.

    Expired mappings raise this too, so callers cannot tell them apart from
    missing ones.
    """

    def __init__(self, short_code: str):
        super().__init__(f"URL not found: {short_code}")
        self.short_code = short_code


class StoreError(ShortenerError):
    """The backing store failed (connectivity, unexpected constraint, etc.)."""

    pass
