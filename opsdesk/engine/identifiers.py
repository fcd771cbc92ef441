"""Identifier generation for records and ledger entries."""

import itertools
from datetime import datetime, timezone
from typing import Optional

SUB_ENTITY_PREFIXES = {
    "activity": "act",
    "attachment": "att",
}


def format_record_id(prefix: str, year: int, sequence: int) -> str:
    """``INC-2024-001`` style id; the counter widens past 999."""
    return f"{prefix}-{year}-{sequence:03d}"


class IdentifierGenerator:
    """Produces record ids and ledger entry ids."""

    def __init__(self, prefix: str, year: Optional[int] = None):
        self._prefix = prefix
        self._year = year
        self._sub_counter = itertools.count(1)

    @property
    def year(self) -> int:
        return self._year or datetime.now(timezone.utc).year

    def next_record_id(self, existing_count: int) -> str:
        """Id for the record created after ``existing_count`` others."""
        return format_record_id(self._prefix, self.year, existing_count + 1)

    def next_sub_entity_id(self, kind: str) -> str:
        """Id for an activity or attachment, unique for this generator."""
        try:
            prefix = SUB_ENTITY_PREFIXES[kind]
        except KeyError:
            raise ValueError(f"Unknown sub-entity kind: {kind!r}")
        return f"{prefix}{next(self._sub_counter)}"
