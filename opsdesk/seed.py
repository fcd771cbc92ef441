"""Demo roster and incidents loaded when ``seed_demo_data`` is enabled."""

from datetime import datetime, timezone

from .models.record import Activity, Record
from .models.roster import RosterMember


def _at(value: str) -> datetime:
    return datetime.fromisoformat(value).replace(tzinfo=timezone.utc)


def demo_roster() -> list[RosterMember]:
    return [
        RosterMember(id="1", name="Alex Chen", role="sre_lead", availability="online",
                     active_record_count=3, avg_response_time=5),
        RosterMember(id="2", name="Jordan Rivera", role="sre_engineer", availability="online",
                     active_record_count=2, avg_response_time=8),
        RosterMember(id="3", name="Sam Taylor", role="on_call", availability="busy",
                     active_record_count=1, avg_response_time=12),
        RosterMember(id="4", name="Morgan Lee", role="security_analyst", availability="offline",
                     active_record_count=0, avg_response_time=15),
    ]


def demo_incidents() -> list[Record]:
    return [
        Record(
            id="INC-2024-001",
            variant="incident",
            system_id="SYS-AUTH",
            system_name="Authentication Service",
            title="High latency in user authentication",
            description="Users experiencing 30+ second delays when logging in. Error rate increased to 15%.",
            status="active",
            severity="critical",
            category="Performance",
            service="Latency",
            assigned_to="1",
            assigned_name="Alex Chen",
            detected_at=_at("2024-01-15T14:30:00"),
            last_update=_at("2024-01-15T15:45:00"),
            activities=[
                Activity(
                    id="a1",
                    actor="Alex Chen",
                    timestamp=_at("2024-01-15T15:45:00"),
                    text="Escalated to critical severity due to increasing error rate",
                    kind="escalation",
                ),
            ],
            affected_users=12500,
            environment="Production",
            error_rate=15.3,
            response_time_ms=32000,
        ),
        Record(
            id="INC-2024-002",
            variant="incident",
            system_id="SYS-PAY",
            system_name="Payment Gateway",
            title="Transaction processing failures",
            description="Payment transactions failing intermittently. Investigating connection timeouts.",
            status="investigating",
            severity="high",
            category="Functional",
            service="API Errors",
            assigned_to="2",
            assigned_name="Jordan Rivera",
            detected_at=_at("2024-01-15T13:15:00"),
            last_update=_at("2024-01-15T15:30:00"),
            activities=[
                Activity(
                    id="a2",
                    actor="Jordan Rivera",
                    timestamp=_at("2024-01-15T15:30:00"),
                    text="Identified potential database connection pool exhaustion",
                    kind="update",
                ),
            ],
            affected_users=800,
            environment="Production",
            error_rate=8.7,
            response_time_ms=15000,
        ),
        Record(
            id="INC-2024-003",
            variant="incident",
            system_id="SYS-NOT",
            system_name="Notification Service",
            title="Email delivery delays",
            description="Scheduled email notifications are being delayed by 2-3 hours.",
            status="monitoring",
            severity="medium",
            category="Performance",
            service="Throughput",
            assigned_to="3",
            assigned_name="Sam Taylor",
            detected_at=_at("2024-01-15T11:00:00"),
            last_update=_at("2024-01-15T14:20:00"),
            affected_users=3200,
            environment="Production",
            error_rate=2.1,
            response_time_ms=8500,
        ),
    ]
