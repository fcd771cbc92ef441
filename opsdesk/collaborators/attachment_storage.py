"""Attachment byte storage and media classification.

The record engine never reads attachment bytes. It hands them to a storage
object, keeps the returned locator, and classifies the attachment from the
declared MIME type and filename.
"""

import uuid
from typing import Optional
from urllib.parse import quote

from ..errors import NotFound
from ..models.variants import MEDIA_KINDS
from ..utils.input_validators import validate_filename
from ..utils.logging import get_logger

logger = get_logger("collaborators.attachment_storage")

LOCATOR_SCHEME = "mem://"

SCREENSHOT, LOG, METRICS, DOCUMENT = MEDIA_KINDS

_LOG_EXTENSIONS = (".log", ".txt", ".out")
_METRICS_EXTENSIONS = (".csv", ".json", ".prom")
_METRICS_CONTENT_TYPES = ("text/csv", "application/json")


def classify_media_kind(content_type: Optional[str], filename: str = "") -> str:
    """Derive an attachment's media kind.

    image/* is always a screenshot. Plain-text logs and tabular/JSON exports
    are recognised by MIME type or extension; everything else is a document.
    """
    mime = (content_type or "").split(";", 1)[0].strip().lower()
    name = filename.lower()

    if mime.startswith("image/"):
        return SCREENSHOT
    if mime == "text/x-log" or name.endswith(_LOG_EXTENSIONS):
        return LOG
    if mime in _METRICS_CONTENT_TYPES or name.endswith(_METRICS_EXTENSIONS):
        return METRICS
    return DOCUMENT


class InMemoryAttachmentStorage:
    """Keeps uploaded bytes in process memory behind ``mem://`` locators."""

    def __init__(self):
        self._blobs: dict[str, tuple[bytes, str, str]] = {}

    def store(self, content: bytes, content_type: str, filename: str) -> str:
        """Store ``content`` and return an opaque locator for it."""
        filename = validate_filename(filename)
        locator = f"{LOCATOR_SCHEME}{uuid.uuid4().hex}/{quote(filename)}"
        self._blobs[locator] = (bytes(content), content_type, filename)
        logger.debug("attachment_stored", locator=locator, size=len(content), content_type=content_type)
        return locator

    def fetch(self, locator: str) -> bytes:
        try:
            return self._blobs[locator][0]
        except KeyError:
            raise NotFound("attachment", locator)

    def __contains__(self, locator: object) -> bool:
        return locator in self._blobs

    def __len__(self) -> int:
        return len(self._blobs)
