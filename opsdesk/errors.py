"""Error taxonomy for the record engine.

Every failing operation raises one of these and leaves the store untouched.
"""


class OpsDeskError(Exception):
    """Base class for all record engine errors."""


class ValidationError(OpsDeskError):
    """One or more fields are missing or violate a constraint.

    ``errors`` maps every failing field to a message, so callers can surface
    all problems at once instead of the first one.
    """

    def __init__(self, errors: dict[str, str]):
        self.errors = dict(errors)
        detail = "; ".join(f"{field}: {msg}" for field, msg in self.errors.items())
        super().__init__(f"Validation failed ({detail})")

    @property
    def fields(self) -> list[str]:
        return list(self.errors)


class EmptyInput(ValidationError):
    """Required free text is empty or whitespace-only."""

    def __init__(self, field: str, message: str | None = None):
        super().__init__({field: message or f"{field} must not be empty"})
        self.field = field


class NotFound(OpsDeskError):
    """A record, roster member or attachment locator does not resolve."""

    def __init__(self, kind: str, key: str):
        self.kind = kind
        self.key = key
        super().__init__(f"{kind.replace('_', ' ').capitalize()} not found: {key}")
