"""Record Store — the authoritative in-memory collection of incidents or tickets.

Owns record creation, field mutation and the activity/attachment ledgers.
Every failing operation raises before anything is written, so the store never
holds a half-applied change.
"""

import threading
from datetime import datetime, timezone
from typing import Callable, Iterable, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError

from ..collaborators.attachment_storage import InMemoryAttachmentStorage, classify_media_kind
from ..collaborators.roster import TeamRoster
from ..config import OpsDeskConfig
from ..errors import EmptyInput, NotFound, ValidationError
from ..models.record import Activity, Attachment, Record
from ..models.variants import ACTIVITY_KINDS, INCIDENT, RecordVariant
from ..utils.input_validators import validate_filename
from ..utils.logging import get_logger
from .commands import (
    RecordCommand,
    Reassign,
    SetSeverity,
    SetStatus,
    apply_changes,
    command_errors,
    commands_from_fields,
    errors_from_pydantic,
    parse_new_record,
    plan_changes,
)
from .identifiers import IdentifierGenerator

logger = get_logger("engine.record_store")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AttachmentUpload(BaseModel):
    """An uploaded file: either raw ``content`` or an already stored ``locator``."""

    model_config = ConfigDict(extra="forbid")

    filename: str
    content_type: str = Field(default="application/octet-stream")
    content: Optional[bytes] = None
    locator: Optional[str] = None
    uploaded_by: Optional[str] = None

    @field_validator("filename")
    @classmethod
    def check_filename(cls, v):
        return validate_filename(v)

    @model_validator(mode="after")
    def check_source(self):
        if (self.content is None) == (self.locator is None):
            raise ValueError("exactly one of content or locator is required")
        return self


class RecordStore:
    """Manages the full record lifecycle for one variant (incidents or tickets)."""

    def __init__(
        self,
        variant: RecordVariant = INCIDENT,
        roster: Optional[TeamRoster] = None,
        attachment_storage=None,
        config: Optional[OpsDeskConfig] = None,
        clock: Optional[Callable[[], datetime]] = None,
        id_generator: Optional[IdentifierGenerator] = None,
    ):
        self._variant = variant
        self._roster = roster if roster is not None else TeamRoster()
        self._storage = attachment_storage if attachment_storage is not None else InMemoryAttachmentStorage()
        self._config = config or OpsDeskConfig()
        self._clock = clock or _utcnow
        self._ids = id_generator or IdentifierGenerator(variant.id_prefix, self._config.id_year)
        self._records: dict[str, Record] = {}
        self._lock = threading.RLock()

    @property
    def variant(self) -> RecordVariant:
        return self._variant

    @property
    def roster(self) -> TeamRoster:
        return self._roster

    @property
    def attachment_storage(self):
        return self._storage

    # --- Lifecycle ---

    def init(self, seed_records: Iterable[Record] = ()) -> None:
        """Replace the collection with ``seed_records`` (insertion order kept)."""
        records: dict[str, Record] = {}
        for record in seed_records:
            if record.id in records:
                raise ValidationError({"id": f"duplicate record id {record.id}"})
            if record.variant != self._variant.name:
                raise ValidationError({"variant": f"{record.id} is a {record.variant}, expected {self._variant.name}"})
            records[record.id] = record.snapshot()
        with self._lock:
            self._records = records
        logger.info("record_store_initialized", variant=self._variant.name, count=len(records))

    def reset(self) -> None:
        """Drop every record."""
        with self._lock:
            self._records = {}

    # --- Reads ---

    def get(self, record_id: str) -> Record:
        """Return a copy of the record, or raise NotFound."""
        with self._lock:
            return self._find(record_id).snapshot()

    def list(self) -> list[Record]:
        """Copies of every record in creation order."""
        with self._lock:
            return [r.snapshot() for r in self._records.values()]

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, record_id: object) -> bool:
        return record_id in self._records

    # --- Creation ---

    def create(self, data) -> Record:
        """Create a record from a field mapping (or NewRecord).

        Raises ValidationError naming every invalid field.
        """
        try:
            draft = parse_new_record(data, self._variant)
        except ValidationError as exc:
            logger.warning("record_validation_failed", operation="create", fields=exc.fields)
            raise

        assigned_name = None
        if draft.assigned_to is not None:
            member = self._roster.get(draft.assigned_to)
            if member is None:
                logger.warning("roster_member_unresolved", member_id=draft.assigned_to, operation="create")
            else:
                assigned_name = member.name

        with self._lock:
            now = self._clock()
            record = Record(
                id=self._next_record_id(),
                variant=self._variant.name,
                system_id=draft.system_id,
                system_name=draft.system_name or self._variant.system_name_for(draft.system_id) or draft.system_id,
                title=draft.title,
                description=draft.description,
                status=self._variant.initial_status,
                severity=draft.severity,
                category=draft.category,
                service=draft.service,
                assigned_to=draft.assigned_to,
                assigned_name=assigned_name,
                detected_at=now,
                last_update=now,
                affected_users=draft.affected_users,
                error_rate=draft.error_rate,
                response_time_ms=draft.response_time_ms,
                environment=draft.environment,
                location=draft.location,
                equipment=draft.equipment,
                estimated_hours=draft.estimated_hours,
            )
            self._records[record.id] = record
            result = record.snapshot()

        logger.info("record_created", id=result.id, severity=result.severity, title=result.title)
        return result

    # --- Field mutation ---

    def update(self, record_id: str, fields: Mapping) -> Record:
        """Merge ``fields`` into the record without writing to its ledger."""
        try:
            commands = commands_from_fields(fields)
        except ValidationError as exc:
            logger.warning("record_validation_failed", operation="update", id=record_id, fields=exc.fields)
            raise
        return self.apply(record_id, *commands)

    def apply(self, record_id: str, *commands: RecordCommand) -> Record:
        """Apply typed commands as one change; ``last_update`` always refreshes."""
        with self._lock:
            record = self._find(record_id)
            changes = self._plan(record, commands, "apply")
            apply_changes(record, changes, self._clock())
            result = record.snapshot()
        logger.info("record_updated", id=record_id, fields=sorted(changes))
        return result

    # --- Transitions (field change + ledger entry, atomically) ---

    def change_status(self, record_id: str, new_status: str, actor: Optional[str] = None) -> Record:
        """Set the status and log an ``update`` activity."""
        result = self._transition(
            record_id,
            self._command(SetStatus, status=new_status),
            text=lambda record: f"Status changed to {record.status}",
            kind="update",
            actor=actor,
        )
        logger.info("record_status_changed", id=record_id, status=result.status)
        return result

    def change_severity(self, record_id: str, new_severity: str, actor: Optional[str] = None) -> Record:
        """Set the severity (ticket priority) and log an ``escalation`` activity."""
        result = self._transition(
            record_id,
            self._command(SetSeverity, severity=new_severity),
            text=lambda record: f"Severity changed to {record.severity}",
            kind="escalation",
            actor=actor,
        )
        logger.info("record_severity_changed", id=record_id, severity=result.severity)
        return result

    def reassign(self, record_id: str, new_owner_id: str, actor: Optional[str] = None) -> Record:
        """Assign to a roster member and log an ``update`` activity.

        An owner id the roster does not know is still assigned, with no
        display name.
        """
        result = self._transition(
            record_id,
            self._command(Reassign, owner_id=new_owner_id),
            text=lambda record: f"Reassigned to {record.assigned_name or record.assigned_to or 'nobody'}",
            kind="update",
            actor=actor,
        )
        if new_owner_id and result.assigned_name is None:
            logger.warning("roster_member_unresolved", member_id=new_owner_id, operation="reassign")
        logger.info("record_reassigned", id=record_id, assigned_to=result.assigned_to)
        return result

    # --- Ledgers ---

    def append_activity(
        self,
        record_id: str,
        actor: Optional[str],
        text: str,
        kind: str = "comment",
    ) -> Activity:
        """Append a ledger entry and refresh the record's ``last_update``."""
        if text is None or not text.strip():
            logger.warning("record_validation_failed", operation="append_activity", id=record_id, fields=["text"])
            raise EmptyInput("text", "activity text must not be empty")
        if kind not in ACTIVITY_KINDS:
            raise ValidationError({"kind": f"kind must be one of {', '.join(ACTIVITY_KINDS)}, got: {kind!r}"})

        with self._lock:
            record = self._find(record_id)
            now = self._clock()
            activity = self._new_activity(record, actor, text.strip(), kind, now)
            record.activities.append(activity)
            apply_changes(record, {}, now)

        logger.info("record_activity_added", id=record_id, activity_id=activity.id, kind=kind)
        return activity

    def append_attachment(self, record_id: str, descriptor) -> Attachment:
        """Store an upload's bytes (if given) and append its descriptor."""
        try:
            upload = descriptor if isinstance(descriptor, AttachmentUpload) \
                else AttachmentUpload.model_validate(descriptor)
        except PydanticValidationError as exc:
            errors = errors_from_pydantic(exc)
            logger.warning("record_validation_failed", operation="append_attachment", id=record_id, fields=list(errors))
            raise ValidationError(errors) from exc

        with self._lock:
            record = self._find(record_id)
            locator = upload.locator
            if locator is None:
                locator = self._storage.store(upload.content, upload.content_type, upload.filename)
            now = self._clock()
            attachment = Attachment(
                id=self._ids.next_sub_entity_id("attachment"),
                filename=upload.filename,
                media_kind=classify_media_kind(upload.content_type, upload.filename),
                locator=locator,
                uploaded_by=upload.uploaded_by or self._config.current_user_name,
                timestamp=max(now, record.last_update),
                content_type=upload.content_type,
            )
            record.attachments.append(attachment)
            apply_changes(record, {}, now)

        logger.info(
            "record_attachment_added",
            id=record_id,
            attachment_id=attachment.id,
            media_kind=attachment.media_kind,
        )
        return attachment

    # --- Internals ---

    def _find(self, record_id: str) -> Record:
        record = self._records.get(record_id)
        if record is None:
            raise NotFound("record", record_id)
        return record

    def _next_record_id(self) -> str:
        count = len(self._records)
        candidate = self._ids.next_record_id(count)
        # seeded records may already hold the next sequence number
        while candidate in self._records:
            count += 1
            candidate = self._ids.next_record_id(count)
        return candidate

    def _command(self, command_cls: type[RecordCommand], **kwargs) -> RecordCommand:
        try:
            return command_cls(**kwargs)
        except PydanticValidationError as exc:
            errors = command_errors(exc)
            logger.warning("record_validation_failed", operation=command_cls.__name__, fields=list(errors))
            raise ValidationError(errors) from exc

    def _plan(self, record: Record, commands: Iterable[RecordCommand], operation: str) -> dict:
        try:
            return plan_changes(record, commands, self._variant, self._roster)
        except ValidationError as exc:
            logger.warning("record_validation_failed", operation=operation, id=record.id, fields=exc.fields)
            raise

    def _new_activity(self, record: Record, actor: Optional[str], text: str, kind: str, now: datetime) -> Activity:
        return Activity(
            id=self._ids.next_sub_entity_id("activity"),
            actor=actor or self._config.current_user_name,
            timestamp=max(now, record.last_update),
            text=text,
            kind=kind,
        )

    def _transition(
        self,
        record_id: str,
        command: RecordCommand,
        text: Callable[[Record], str],
        kind: str,
        actor: Optional[str],
    ) -> Record:
        with self._lock:
            record = self._find(record_id)
            changes = self._plan(record, [command], type(command).__name__)
            now = self._clock()
            apply_changes(record, changes, now)
            record.activities.append(self._new_activity(record, actor, text(record), kind, now))
            return record.snapshot()
