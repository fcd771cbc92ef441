"""Record model — an incident or ticket with its activity ledger and attachments."""

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Optional


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass(frozen=True)
class Activity:
    """One ledger entry. Immutable once appended."""
    id: str
    actor: str
    timestamp: datetime
    text: str
    kind: str  # update, escalation, comment, resolution

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "actor": self.actor,
            "timestamp": _iso(self.timestamp),
            "text": self.text,
            "kind": self.kind,
        }


@dataclass(frozen=True)
class Attachment:
    """Descriptor of uploaded evidence. The bytes live behind ``locator``."""
    id: str
    filename: str
    media_kind: str  # screenshot, log, metrics, document
    locator: str
    uploaded_by: str
    timestamp: datetime
    content_type: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "filename": self.filename,
            "media_kind": self.media_kind,
            "locator": self.locator,
            "uploaded_by": self.uploaded_by,
            "timestamp": _iso(self.timestamp),
            "content_type": self.content_type,
        }


@dataclass
class Record:
    """An incident (or support ticket) tracked by the command center."""
    id: str
    variant: str
    system_id: str
    system_name: str
    title: str
    description: str
    status: str
    severity: str
    category: str
    detected_at: datetime
    last_update: datetime
    service: Optional[str] = None
    assigned_to: Optional[str] = None
    assigned_name: Optional[str] = None
    activities: list[Activity] = field(default_factory=list)
    attachments: list[Attachment] = field(default_factory=list)
    # Telemetry
    affected_users: Optional[int] = None
    error_rate: Optional[float] = None
    response_time_ms: Optional[int] = None
    environment: Optional[str] = None
    # Ticket details
    location: Optional[str] = None
    equipment: Optional[str] = None
    estimated_hours: Optional[float] = None

    # Ticket vocabulary
    @property
    def created_at(self) -> datetime:
        return self.detected_at

    @property
    def updated_at(self) -> datetime:
        return self.last_update

    @property
    def client_id(self) -> str:
        return self.system_id

    @property
    def client_name(self) -> str:
        return self.system_name

    @property
    def priority(self) -> str:
        return self.severity

    @property
    def subcategory(self) -> Optional[str]:
        return self.service

    def snapshot(self) -> "Record":
        """Copy that shares the immutable entries but not the ledger lists."""
        return replace(
            self,
            activities=list(self.activities),
            attachments=list(self.attachments),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "variant": self.variant,
            "system_id": self.system_id,
            "system_name": self.system_name,
            "title": self.title,
            "description": self.description,
            "status": self.status,
            "severity": self.severity,
            "category": self.category,
            "service": self.service,
            "assigned_to": self.assigned_to,
            "assigned_name": self.assigned_name,
            "detected_at": _iso(self.detected_at),
            "last_update": _iso(self.last_update),
            "activities": [a.to_dict() for a in self.activities],
            "attachments": [a.to_dict() for a in self.attachments],
            "affected_users": self.affected_users,
            "error_rate": self.error_rate,
            "response_time_ms": self.response_time_ms,
            "environment": self.environment,
            "location": self.location,
            "equipment": self.equipment,
            "estimated_hours": self.estimated_hours,
        }
