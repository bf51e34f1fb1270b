"""URL slugs for directory records."""

import re
import time
import unicodedata
from typing import Awaitable, Callable, Optional

from core.logging import get_logger

logger = get_logger(__name__)

SLUG_MAX_LENGTH = 255
SLUG_SEPARATOR = "-"

# (slug, exclude_id) -> does another record already use this slug?
ExistenceCheck = Callable[[str, Optional[int]], Awaitable[bool]]

# Letters NFKD leaves untouched that still have a plain ASCII spelling
_TRANSLITERATIONS = str.maketrans({
    "ł": "l", "Ł": "L",
    "đ": "d", "Đ": "D",
    "ø": "o", "Ø": "O",
    "ı": "i",
    "ß": "ss",
    "æ": "ae", "Æ": "AE",
    "œ": "oe", "Œ": "OE",
    "þ": "th", "Þ": "TH",
    "ð": "d", "Ð": "D",
})

_NON_ALPHANUMERIC = re.compile(r"[^a-z0-9]+")


def to_ascii(value: str) -> str:
    """Transliterate ``value`` to plain ASCII, dropping what has no equivalent."""
    decomposed = unicodedata.normalize("NFKD", value.translate(_TRANSLITERATIONS))
    return decomposed.encode("ascii", "ignore").decode("ascii")


def slugify(value: str) -> str:
    """Lowercase, ASCII-only, dash-separated form of ``value``."""
    slug = _NON_ALPHANUMERIC.sub(SLUG_SEPARATOR, to_ascii(value).lower())
    return slug.strip(SLUG_SEPARATOR)


def append_suffix(candidate: str, suffix: str, max_length: int = SLUG_MAX_LENGTH) -> str:
    """Append ``suffix``, cutting the candidate (never the suffix) to fit."""
    if len(candidate) + len(suffix) > max_length:
        candidate = candidate[: max_length - len(suffix)]
    return f"{candidate}{suffix}"


async def generate_slug(
    name: str,
    existing_id: Optional[int],
    exists: ExistenceCheck,
    clock: Callable[[], float] = time.time,
) -> str:
    """
    Derive a unique slug for ``name``.

    The normalized name is used as-is unless another record (other than
    ``existing_id``) already holds it, in which case ``-<unix timestamp>``
    is appended. A name that normalizes to nothing yields only the suffix.
    If the suffixed slug is taken too (several records with the same name
    in one second), the next second's timestamp is tried.

    Args:
        name: Display name to derive the slug from
        existing_id: ID of the record being updated, None on create
        exists: Async collision check against the stored records
        clock: Source of the current time in seconds

    Returns:
        A slug of at most 255 characters
    """
    candidate = slugify(name)[:SLUG_MAX_LENGTH]

    if candidate and not await exists(candidate, existing_id):
        return candidate

    timestamp = int(clock())
    slug = append_suffix(candidate, f"{SLUG_SEPARATOR}{timestamp}")
    while await exists(slug, existing_id):
        timestamp += 1
        slug = append_suffix(candidate, f"{SLUG_SEPARATOR}{timestamp}")

    logger.debug(f"Slug '{candidate}' is taken or empty, using '{slug}'")
    return slug
