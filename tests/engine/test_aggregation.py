"""Tests for the aggregation engine — dashboard metrics over record snapshots."""

from datetime import datetime, timezone

import pytest

from opsdesk.engine.aggregation import (
    active_assignments,
    average_response_time,
    count_by_severity,
    count_by_status,
    dashboard_summary,
    filter_records,
    health_score,
    records_with_status,
    total_affected_users,
    workload_percent,
)
from opsdesk.models.record import Record
from opsdesk.models.roster import RosterMember
from opsdesk.models.variants import INCIDENT, TICKET
from opsdesk.seed import demo_incidents

NOW = datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc)


def _record(id="INC-2024-001", **fields):
    defaults = dict(
        id=id,
        variant="incident",
        system_id="SYS-API",
        system_name="Core API Gateway",
        title="Untitled",
        description="",
        status="active",
        severity="medium",
        category="Performance",
        detected_at=NOW,
        last_update=NOW,
    )
    defaults.update(fields)
    return Record(**defaults)


class TestCounts:

    def test_count_by_status_zero_fills_variant(self):
        records = [_record(status="active"), _record(status="active"), _record(status="resolved")]
        assert count_by_status(records, INCIDENT) == {
            "active": 2, "investigating": 0, "monitoring": 0, "resolved": 1,
        }

    def test_count_by_status_without_variant(self):
        assert count_by_status([]) == {}
        assert count_by_status([_record(status="monitoring")]) == {"monitoring": 1}

    def test_count_by_severity(self):
        records = [_record(severity="critical"), _record(severity="low"), _record(severity="critical")]
        counts = count_by_severity(records, INCIDENT)
        assert counts["critical"] == 2
        assert counts["low"] == 1
        assert counts["high"] == 0

    def test_records_with_status(self):
        records = demo_incidents()
        assert [r.id for r in records_with_status(records, "active")] == ["INC-2024-001"]


class TestTotalAffectedUsers:

    def test_resolved_only_is_zero(self):
        records = [_record(status="resolved", affected_users=50), _record(status="resolved", affected_users=7)]
        assert total_affected_users(records) == 0

    def test_resolved_excluded(self):
        records = [_record(status="active", affected_users=100), _record(status="resolved", affected_users=900)]
        assert total_affected_users(records) == 100

    def test_missing_values_count_as_zero(self):
        records = [_record(status="monitoring"), _record(status="active", affected_users=3)]
        assert total_affected_users(records) == 3

    def test_ticket_resolved_status(self):
        records = [
            _record(status="resolu", affected_users=40),
            _record(status="urgent", affected_users=2),
        ]
        assert total_affected_users(records, TICKET.resolved_status) == 2


class TestAverageResponseTime:

    def test_no_data_is_zero(self):
        assert average_response_time([]) == 0
        assert average_response_time([_record(), _record()]) == 0

    def test_mean_over_reporting_records(self):
        records = [_record(response_time_ms=1000), _record(response_time_ms=3000), _record()]
        assert average_response_time(records) == 2000


class TestFilter:

    def test_search_matches_title_case_insensitively(self):
        records = demo_incidents()
        matches = filter_records(records, search_text="auth", status_filter="all")
        assert [r.title for r in matches] == ["High latency in user authentication"]

    def test_no_match(self):
        assert filter_records(demo_incidents(), search_text="zzz-no-match") == []

    def test_search_matches_system_name_and_description(self):
        records = demo_incidents()
        assert [r.id for r in filter_records(records, "PAYMENT GATEWAY")] == ["INC-2024-002"]
        assert [r.id for r in filter_records(records, "2-3 hours")] == ["INC-2024-003"]

    def test_status_filter_and_search_combine(self):
        records = demo_incidents()
        assert filter_records(records, "e", "monitoring")[0].id == "INC-2024-003"
        assert filter_records(records, "auth", "monitoring") == []

    def test_empty_search_keeps_everything_in_order(self):
        records = list(reversed(demo_incidents()))
        assert filter_records(records) == records

    def test_filter_does_not_mutate_input(self):
        records = demo_incidents()
        before = [r.to_dict() for r in records]
        filter_records(records, "latency", "active")
        assert [r.to_dict() for r in records] == before


class TestWorkload:

    @pytest.mark.parametrize("count, expected", [(0, 0), (1, 25), (4, 100), (5, 125)])
    def test_workload_percent_uncapped(self, count, expected):
        member = RosterMember(id="1", name="Alex Chen", role="sre_lead", active_record_count=count)
        assert workload_percent(member) == expected

    def test_workload_percent_cap(self):
        member = RosterMember(id="1", name="Alex Chen", role="sre_lead", active_record_count=6)
        assert workload_percent(member, cap=100) == 100

    def test_active_assignments_ignore_resolved(self):
        records = [
            _record(assigned_to="t1", status="urgent"),
            _record(assigned_to="t1", status="resolu"),
            _record(assigned_to="t2", status="en_cours"),
        ]
        assert active_assignments(records, "t1", TICKET.resolved_status) == 1


class TestHealthAndSummary:

    @pytest.mark.parametrize("error_rate, response_ms, score", [
        (15.3, 32000, 25),
        (0.0, 31000, 25),
        (8.7, 15000, 50),
        (2.1, 8500, 75),
        (1.0, 1000, 95),
        (None, None, 95),
    ])
    def test_health_score(self, error_rate, response_ms, score):
        record = _record(error_rate=error_rate, response_time_ms=response_ms)
        assert health_score(record) == score

    def test_dashboard_summary_for_seed(self):
        summary = dashboard_summary(demo_incidents(), INCIDENT)
        assert summary["total"] == 3
        assert summary["by_status"] == {"active": 1, "investigating": 1, "monitoring": 1, "resolved": 0}
        assert summary["by_severity"]["critical"] == 1
        assert summary["total_affected_users"] == 12500 + 800 + 3200
        assert summary["average_response_time_ms"] == pytest.approx((32000 + 15000 + 8500) / 3)
