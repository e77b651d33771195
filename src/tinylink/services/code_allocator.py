import secrets
import string
from typing import Optional

# URL-safe: letters, digits and the two unreserved punctuation characters
CODE_ALPHABET = string.ascii_letters + string.digits + "-_"


def generate_short_code(length: int = 6) -> str:
    """
    Generate a random short code of specified length.

    Args:
        length: Length of the short code to generate, defaults to 6

    Returns:
        A random string drawn from CODE_ALPHABET using a CSPRNG
    """
    return "".join(secrets.choice(CODE_ALPHABET) for _ in range(length))


def allocate_short_code(code: Optional[str] = None, length: int = 6) -> str:
    """
    Pick the short code for a new mapping.

    A caller-supplied code is used verbatim; uniqueness is left to the
    store's constraint. Otherwise a fresh random code is generated.
    """
    if code is not None:
        return code
    return generate_short_code(length)
