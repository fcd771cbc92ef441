"""Aggregation Engine — dashboard metrics computed from a record snapshot.

All functions are pure: they read the records they are given and never
mutate them. Nothing is cached; callers recompute on every read.
"""

from typing import Iterable, Optional, Sequence

from ..models.record import Record
from ..models.roster import RosterMember
from ..models.variants import RecordVariant

ALL_STATUSES = "all"

DEFAULT_WORKLOAD_PER_ASSIGNMENT = 25

# (error rate %, response time seconds, score), first match wins
HEALTH_THRESHOLDS = (
    (10.0, 30.0, 25),
    (5.0, 15.0, 50),
    (2.0, 5.0, 75),
)
HEALTHY_SCORE = 95


def count_by_status(records: Iterable[Record], variant: Optional[RecordVariant] = None) -> dict[str, int]:
    """Records per status. With a variant, every status is present (zero-filled)."""
    counts = dict.fromkeys(variant.statuses, 0) if variant else {}
    for record in records:
        counts[record.status] = counts.get(record.status, 0) + 1
    return counts


def count_by_severity(records: Iterable[Record], variant: Optional[RecordVariant] = None) -> dict[str, int]:
    """Records per severity (ticket priority), zero-filled when a variant is given."""
    counts = dict.fromkeys(variant.severities, 0) if variant else {}
    for record in records:
        counts[record.severity] = counts.get(record.severity, 0) + 1
    return counts


def total_affected_users(records: Iterable[Record], resolved_status: str = "resolved") -> int:
    """Users currently impacted: resolved records do not count."""
    return sum(
        record.affected_users or 0
        for record in records
        if record.status != resolved_status
    )


def average_response_time(records: Iterable[Record]) -> float:
    """Mean ``response_time_ms`` over records reporting one; 0.0 with no data."""
    samples = [record.response_time_ms for record in records if record.response_time_ms]
    if not samples:
        return 0.0
    return sum(samples) / len(samples)


def filter_records(
    records: Iterable[Record],
    search_text: str = "",
    status_filter: str = ALL_STATUSES,
) -> list[Record]:
    """Records matching ``search_text`` and ``status_filter``, input order kept.

    The search is a case-insensitive substring match on title, system (client)
    name and description.
    """
    needle = (search_text or "").lower()
    matches = []
    for record in records:
        if status_filter != ALL_STATUSES and record.status != status_filter:
            continue
        if needle and not any(
            needle in (value or "").lower()
            for value in (record.title, record.system_name, record.description)
        ):
            continue
        matches.append(record)
    return matches


def records_with_status(records: Iterable[Record], status: str) -> list[Record]:
    return [record for record in records if record.status == status]


def workload_percent(
    member: RosterMember,
    per_assignment: int = DEFAULT_WORKLOAD_PER_ASSIGNMENT,
    cap: Optional[int] = None,
) -> int:
    """Roster workload as a percentage. Exceeds 100 past four records unless capped."""
    percent = member.active_record_count * per_assignment
    if cap is not None:
        percent = min(percent, cap)
    return percent


def active_assignments(records: Iterable[Record], member_id: str, resolved_status: str = "resolved") -> int:
    """Unresolved records currently assigned to ``member_id``."""
    return sum(
        1 for record in records
        if record.assigned_to == member_id and record.status != resolved_status
    )


def health_score(record: Record) -> int:
    """Service health of an incident from its error rate and response time."""
    error_rate = record.error_rate or 0.0
    response_seconds = (record.response_time_ms or 0) / 1000
    for max_error_rate, max_response_seconds, score in HEALTH_THRESHOLDS:
        if error_rate > max_error_rate or response_seconds > max_response_seconds:
            return score
    return HEALTHY_SCORE


def dashboard_summary(records: Sequence[Record], variant: RecordVariant) -> dict:
    """Header metrics of the command-center view."""
    return {
        "total": len(records),
        "by_status": count_by_status(records, variant),
        "by_severity": count_by_severity(records, variant),
        "total_affected_users": total_affected_users(records, variant.resolved_status),
        "average_response_time_ms": average_response_time(records),
    }
