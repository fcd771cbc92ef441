"""Input validation helpers shared by command models and the record store.

Every validator returns the normalized value or raises ValueError, so they
can be called directly or from pydantic field validators.
"""

import re
from collections.abc import Iterable

# Record and roster identifiers: letters, digits, dots, hyphens, underscores
_IDENTIFIER_RE = re.compile(r'^[A-Za-z0-9._-]{1,64}$')

# Characters never accepted in an attachment filename
_FILENAME_FORBIDDEN = re.compile(r'[\\/\x00<>:"|?*]')

MAX_FILENAME_LENGTH = 255


def require_text(value: str | None, label: str = "value") -> str:
    """Return ``value`` stripped of surrounding whitespace.

    Raises ValueError when nothing is left after trimming.
    """
    if value is None or not str(value).strip():
        raise ValueError(f"{label} must not be empty")
    return str(value).strip()


def validate_choice(value: str, allowed: Iterable[str], label: str = "value") -> str:
    """Validate ``value`` is one of ``allowed`` (exact match)."""
    allowed = tuple(allowed)
    if value not in allowed:
        raise ValueError(f"{label} must be one of {', '.join(allowed)}, got: {value!r}")
    return value


def validate_identifier(value: str, label: str = "id") -> str:
    """Validate a record, system or roster identifier."""
    value = require_text(value, label)
    if not _IDENTIFIER_RE.match(value):
        raise ValueError(
            f"Invalid {label}: must be alphanumeric with dots/hyphens/underscores, "
            f"max 64 chars. Got: {value!r}"
        )
    return value


def validate_filename(value: str) -> str:
    """Validate an attachment filename: no path separators, traversal or null bytes."""
    value = require_text(value, "filename")
    if len(value) > MAX_FILENAME_LENGTH:
        raise ValueError(f"Filename too long (max {MAX_FILENAME_LENGTH} chars): {len(value)}")
    if value in (".", "..") or _FILENAME_FORBIDDEN.search(value):
        raise ValueError(f"Filename contains forbidden characters: {value!r}")
    return value
