"""Tests for record and ledger identifier generation."""

from datetime import datetime, timezone

import pytest

from opsdesk.engine.identifiers import IdentifierGenerator, format_record_id


def test_record_id_format():
    ids = IdentifierGenerator("INC", year=2024)
    assert ids.next_record_id(0) == "INC-2024-001"
    assert ids.next_record_id(41) == "INC-2024-042"


def test_counter_widens_past_999():
    assert format_record_id("TKT", 2025, 1000) == "TKT-2025-1000"


def test_year_defaults_to_current():
    ids = IdentifierGenerator("INC")
    year = datetime.now(timezone.utc).year
    assert ids.next_record_id(2) == f"INC-{year}-003"


def test_record_id_is_side_effect_free():
    ids = IdentifierGenerator("INC", year=2024)
    assert ids.next_record_id(4) == ids.next_record_id(4)


def test_sub_entity_ids_are_unique():
    ids = IdentifierGenerator("INC", year=2024)
    generated = [ids.next_sub_entity_id("activity") for _ in range(3)]
    generated.append(ids.next_sub_entity_id("attachment"))
    assert generated == ["act1", "act2", "act3", "att4"]


def test_unknown_sub_entity_kind():
    with pytest.raises(ValueError):
        IdentifierGenerator("INC").next_sub_entity_id("comment")
