"""Record, ledger and roster models."""

from .record import Activity, Attachment, Record
from .roster import RosterMember
from .variants import (
    ACTIVITY_KINDS,
    ENVIRONMENTS,
    INCIDENT,
    MEDIA_KINDS,
    TICKET,
    RecordVariant,
    get_variant,
)

__all__ = [
    "Activity",
    "Attachment",
    "Record",
    "RosterMember",
    "RecordVariant",
    "INCIDENT",
    "TICKET",
    "ACTIVITY_KINDS",
    "ENVIRONMENTS",
    "MEDIA_KINDS",
    "get_variant",
]
