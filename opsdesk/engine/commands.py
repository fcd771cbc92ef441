"""Typed record mutations.

Partial field updates are translated into a closed set of commands
(SetStatus, SetSeverity, Reassign, SetTelemetry, SetClassification,
SetDetails). Each command is validated in two steps: pydantic checks shape
and ranges when the command is built, then ``plan_changes`` checks it
against the record's variant and the roster. Nothing is written to a record
until every command of a batch has been planned, so a failing batch leaves
the record untouched.
"""

from datetime import datetime
from typing import Callable, Iterable, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator
from pydantic import ValidationError as PydanticValidationError

from ..errors import ValidationError
from ..models.record import Record
from ..models.variants import ENVIRONMENTS, RecordVariant
from ..utils.input_validators import require_text, validate_choice, validate_identifier

# Ticket vocabulary -> canonical record field
FIELD_ALIASES = {
    "priority": "severity",
    "client_id": "system_id",
    "client_name": "system_name",
    "subcategory": "service",
    "assigned_tech": "assigned_name",
    "assigned_engineer": "assigned_name",
    "created_at": "detected_at",
    "updated_at": "last_update",
}

IMMUTABLE_FIELDS = frozenset({
    "id", "variant", "detected_at", "last_update", "activities", "attachments",
})


def normalize_fields(data: Mapping) -> dict:
    """Rewrite ticket-vocabulary keys to canonical record field names."""
    normalized = {}
    for key, value in data.items():
        canonical = FIELD_ALIASES.get(key, key)
        if canonical in normalized and canonical != key:
            continue  # canonical spelling wins over its alias
        normalized[canonical] = value
    return normalized


def errors_from_pydantic(exc: PydanticValidationError) -> dict[str, str]:
    """Flatten a pydantic error into ``{field: message}``, first message per field."""
    errors: dict[str, str] = {}
    for err in exc.errors():
        field = str(err["loc"][0]) if err.get("loc") else "__root__"
        ctx_error = (err.get("ctx") or {}).get("error")
        message = str(ctx_error) if ctx_error is not None else err["msg"]
        errors.setdefault(field, message)
    return errors


def command_errors(exc: PydanticValidationError) -> dict[str, str]:
    """Like errors_from_pydantic, keyed by record field names."""
    return {
        "assigned_to" if field == "owner_id" else field: message
        for field, message in errors_from_pydantic(exc).items()
    }


def _blank_to_none(v):
    if isinstance(v, str) and not v.strip():
        return None
    return v.strip() if isinstance(v, str) else v


def _check_environment(v: Optional[str]) -> Optional[str]:
    v = _blank_to_none(v)
    if v is None:
        return None
    return validate_choice(v, ENVIRONMENTS, "environment")


def _context_variant(info: ValidationInfo) -> Optional[RecordVariant]:
    return (info.context or {}).get("variant")


# --- Record creation ---

class NewRecord(BaseModel):
    """Input for creating a record. Every failing field is reported together."""

    model_config = ConfigDict(extra="forbid")

    system_id: Optional[str] = Field(default=None, validate_default=True)
    system_name: Optional[str] = None
    title: Optional[str] = Field(default=None, validate_default=True)
    description: Optional[str] = Field(default=None, validate_default=True)
    severity: Optional[str] = Field(default=None, validate_default=True)
    category: Optional[str] = Field(default=None, validate_default=True)
    service: Optional[str] = None
    assigned_to: Optional[str] = None
    affected_users: Optional[int] = Field(default=None, ge=0)
    error_rate: Optional[float] = Field(default=None, ge=0, le=100)
    response_time_ms: Optional[int] = Field(default=None, ge=0)
    environment: Optional[str] = None
    location: Optional[str] = None
    equipment: Optional[str] = None
    estimated_hours: Optional[float] = Field(default=None, ge=0)

    @field_validator("system_id")
    @classmethod
    def check_system_id(cls, v):
        return validate_identifier(v, "system_id")

    @field_validator("title", "description")
    @classmethod
    def check_text(cls, v, info: ValidationInfo):
        return require_text(v, info.field_name)

    @field_validator("severity")
    @classmethod
    def check_severity(cls, v, info: ValidationInfo):
        v = require_text(v, "severity")
        variant = _context_variant(info)
        if variant is not None:
            validate_choice(v, variant.severities, "severity")
        return v

    @field_validator("category")
    @classmethod
    def check_category(cls, v, info: ValidationInfo):
        v = require_text(v, "category")
        variant = _context_variant(info)
        if variant is not None and variant.categories:
            validate_choice(v, variant.categories, "category")
        return v

    @field_validator("service")
    @classmethod
    def check_service(cls, v, info: ValidationInfo):
        v = _blank_to_none(v)
        variant = _context_variant(info)
        category = info.data.get("category")
        if v is None or variant is None or category is None:
            return v
        allowed = variant.services_for(category)
        if allowed is not None:
            validate_choice(v, allowed, f"service for category {category}")
        return v

    @field_validator("system_name", "assigned_to", "location", "equipment")
    @classmethod
    def check_optional_text(cls, v):
        return _blank_to_none(v)

    @field_validator("environment")
    @classmethod
    def check_environment(cls, v):
        return _check_environment(v)


def parse_new_record(data, variant: RecordVariant) -> NewRecord:
    """Validate creation input, raising ValidationError listing every bad field."""
    if isinstance(data, NewRecord):
        data = data.model_dump(exclude_unset=True)
    try:
        return NewRecord.model_validate(normalize_fields(data), context={"variant": variant})
    except PydanticValidationError as exc:
        raise ValidationError(errors_from_pydantic(exc)) from exc


# --- Mutation commands ---

class RecordCommand(BaseModel):
    """Base class for record mutations. Only explicitly given fields apply."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    def provided(self) -> dict:
        return {name: getattr(self, name) for name in self.model_fields_set}


class SetStatus(RecordCommand):
    status: str

    @field_validator("status")
    @classmethod
    def check_status(cls, v):
        return require_text(v, "status")


class SetSeverity(RecordCommand):
    severity: str

    @field_validator("severity")
    @classmethod
    def check_severity(cls, v):
        return require_text(v, "severity")


class Reassign(RecordCommand):
    """Assign to ``owner_id``. An explicit None unassigns; a blank id is rejected.

    ``assigned_name`` overrides the roster lookup. Given alone, it refreshes
    the stored name of the current assignee without changing the owner.
    """
    owner_id: Optional[str] = None
    assigned_name: Optional[str] = None

    @field_validator("owner_id")
    @classmethod
    def check_owner(cls, v):
        if v is None:
            return v
        return require_text(v, "assigned_to")

    @field_validator("assigned_name")
    @classmethod
    def check_name(cls, v):
        return _blank_to_none(v)


class SetTelemetry(RecordCommand):
    affected_users: Optional[int] = Field(default=None, ge=0)
    error_rate: Optional[float] = Field(default=None, ge=0, le=100)
    response_time_ms: Optional[int] = Field(default=None, ge=0)
    environment: Optional[str] = None

    @field_validator("environment")
    @classmethod
    def check_environment(cls, v):
        return _check_environment(v)


class SetClassification(RecordCommand):
    category: Optional[str] = None
    service: Optional[str] = None

    @field_validator("category")
    @classmethod
    def check_category(cls, v):
        return require_text(v, "category")

    @field_validator("service")
    @classmethod
    def check_service(cls, v):
        return _blank_to_none(v)


class SetDetails(RecordCommand):
    title: Optional[str] = None
    description: Optional[str] = None
    system_id: Optional[str] = None
    system_name: Optional[str] = None
    location: Optional[str] = None
    equipment: Optional[str] = None
    estimated_hours: Optional[float] = Field(default=None, ge=0)

    @field_validator("title", "description")
    @classmethod
    def check_text(cls, v, info: ValidationInfo):
        return require_text(v, info.field_name)

    @field_validator("system_id")
    @classmethod
    def check_system_id(cls, v):
        return validate_identifier(v, "system_id")

    @field_validator("system_name", "location", "equipment")
    @classmethod
    def check_optional_text(cls, v):
        return _blank_to_none(v)


# Which command owns each updatable field
_FIELD_COMMANDS: dict[str, type[RecordCommand]] = {
    "status": SetStatus,
    "severity": SetSeverity,
    "assigned_to": Reassign,
    "assigned_name": Reassign,
    "affected_users": SetTelemetry,
    "error_rate": SetTelemetry,
    "response_time_ms": SetTelemetry,
    "environment": SetTelemetry,
    "category": SetClassification,
    "service": SetClassification,
    "title": SetDetails,
    "description": SetDetails,
    "system_id": SetDetails,
    "system_name": SetDetails,
    "location": SetDetails,
    "equipment": SetDetails,
    "estimated_hours": SetDetails,
}

# Reassign's field names differ from the record's
_COMMAND_FIELD_NAMES = {
    (Reassign, "assigned_to"): "owner_id",
}


def commands_from_fields(fields: Mapping) -> list[RecordCommand]:
    """Translate a partial field mapping into typed commands."""
    fields = normalize_fields(fields)
    errors: dict[str, str] = {}
    grouped: dict[type[RecordCommand], dict] = {}

    for name, value in fields.items():
        if name in IMMUTABLE_FIELDS:
            errors[name] = f"{name} cannot be changed"
            continue
        command_cls = _FIELD_COMMANDS.get(name)
        if command_cls is None:
            errors[name] = f"unknown field {name}"
            continue
        arg = _COMMAND_FIELD_NAMES.get((command_cls, name), name)
        grouped.setdefault(command_cls, {})[arg] = value

    commands: list[RecordCommand] = []
    for command_cls, kwargs in grouped.items():
        try:
            commands.append(command_cls(**kwargs))
        except PydanticValidationError as exc:
            errors.update(command_errors(exc))

    if errors:
        raise ValidationError(errors)
    return commands


# --- Planning and applying ---

def _choice(field: str, value: str, allowed: Iterable[str]) -> None:
    try:
        validate_choice(value, allowed, field)
    except ValueError as exc:
        raise ValidationError({field: str(exc)})


def _plan_status(record: Record, cmd: SetStatus, variant: RecordVariant, roster) -> dict:
    _choice("status", cmd.status, variant.statuses)
    return {"status": cmd.status}


def _plan_severity(record: Record, cmd: SetSeverity, variant: RecordVariant, roster) -> dict:
    _choice("severity", cmd.severity, variant.severities)
    return {"severity": cmd.severity}


def _plan_reassign(record: Record, cmd: Reassign, variant: RecordVariant, roster) -> dict:
    given = cmd.model_fields_set
    if "owner_id" in given:
        if cmd.owner_id is None:
            if cmd.assigned_name is not None:
                raise ValidationError({"assigned_name": "cannot name an assignee while unassigning"})
            return {"assigned_to": None, "assigned_name": None}
        name = cmd.assigned_name
        if name is None:
            # name stays None only for an owner the roster does not know
            member = roster.get(cmd.owner_id) if roster is not None else None
            name = member.name if member is not None else None
        return {"assigned_to": cmd.owner_id, "assigned_name": name}

    if "assigned_name" not in given:
        raise ValidationError({"assigned_to": "owner id or assignee name required"})
    if record.assigned_to is None:
        raise ValidationError({"assigned_name": "record has no assignee"})
    if cmd.assigned_name is None:
        raise ValidationError({"assigned_name": "assigned_name must not be empty"})
    return {"assigned_name": cmd.assigned_name}


def _plan_telemetry(record: Record, cmd: SetTelemetry, variant: RecordVariant, roster) -> dict:
    return cmd.provided()


def _plan_classification(record: Record, cmd: SetClassification, variant: RecordVariant, roster) -> dict:
    given = cmd.model_fields_set
    changes: dict = {}
    errors: dict[str, str] = {}

    category = record.category
    if "category" in given:
        category = cmd.category
        if variant.categories and category not in variant.categories:
            errors["category"] = f"category must be one of {', '.join(variant.categories)}, got: {category!r}"
        changes["category"] = category

    allowed = None if "category" in errors else variant.services_for(category)
    if "service" in given:
        if cmd.service is not None and allowed is not None and cmd.service not in allowed:
            errors["service"] = f"service {cmd.service!r} is not offered for category {category!r}"
        changes["service"] = cmd.service
    elif "category" in changes and record.service is not None and allowed is not None \
            and record.service not in allowed:
        # the old service does not exist under the new category
        changes["service"] = None

    if errors:
        raise ValidationError(errors)
    return changes


def _plan_details(record: Record, cmd: SetDetails, variant: RecordVariant, roster) -> dict:
    changes = cmd.provided()
    if "system_id" in changes and "system_name" not in changes:
        changes["system_name"] = variant.system_name_for(cmd.system_id) or cmd.system_id
    if "system_name" in changes and changes["system_name"] is None:
        changes["system_name"] = changes.get("system_id", record.system_id)
    return changes


_PLANNERS: dict[type[RecordCommand], Callable[..., dict]] = {
    SetStatus: _plan_status,
    SetSeverity: _plan_severity,
    Reassign: _plan_reassign,
    SetTelemetry: _plan_telemetry,
    SetClassification: _plan_classification,
    SetDetails: _plan_details,
}


def plan_changes(
    record: Record,
    commands: Iterable[RecordCommand],
    variant: RecordVariant,
    roster=None,
) -> dict:
    """Validate ``commands`` against ``record`` and return the field changes.

    Errors from every command are merged into one ValidationError.
    """
    changes: dict = {}
    errors: dict[str, str] = {}
    for command in commands:
        planner = _PLANNERS.get(type(command))
        if planner is None:
            raise TypeError(f"Unsupported record command: {type(command).__name__}")
        try:
            changes.update(planner(record, command, variant, roster))
        except ValidationError as exc:
            errors.update(exc.errors)
    if errors:
        raise ValidationError(errors)
    return changes


def apply_changes(record: Record, changes: Mapping, now: datetime) -> None:
    """Write planned changes and refresh ``last_update``."""
    for name, value in changes.items():
        setattr(record, name, value)
    record.last_update = max(now, record.last_update, record.detected_at)


def apply(
    record: Record,
    command: RecordCommand,
    *,
    variant: RecordVariant,
    now: datetime,
    roster=None,
) -> dict:
    """Plan and apply a single command; returns the changes written."""
    changes = plan_changes(record, [command], variant, roster)
    apply_changes(record, changes, now)
    return changes
