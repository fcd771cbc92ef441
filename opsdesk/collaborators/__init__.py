"""Reference implementations of the collaborators the record engine reads from."""

from .attachment_storage import InMemoryAttachmentStorage, classify_media_kind
from .roster import TeamRoster

__all__ = [
    "InMemoryAttachmentStorage",
    "TeamRoster",
    "classify_media_kind",
]
