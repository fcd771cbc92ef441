"""Record variants — the enumerations that distinguish incidents from tickets.

Both variants share the same record structure; only the vocabulary differs.
"""

from dataclasses import dataclass, field

ACTIVITY_KINDS = ("update", "escalation", "comment", "resolution")

ENVIRONMENTS = ("Production", "Staging", "Development")

MEDIA_KINDS = ("screenshot", "log", "metrics", "document")


@dataclass(frozen=True)
class RecordVariant:
    """Vocabulary of one record flavour."""
    name: str
    id_prefix: str
    statuses: tuple[str, ...]
    severities: tuple[str, ...]  # most to least severe
    initial_status: str
    resolved_status: str
    # category -> allowed services; an empty mapping leaves both free-form
    categories: dict[str, tuple[str, ...]] = field(default_factory=dict)
    # known system/client ids -> display names
    systems: dict[str, str] = field(default_factory=dict)

    def services_for(self, category: str) -> tuple[str, ...] | None:
        """Allowed services for ``category``, or None when unconstrained."""
        if not self.categories:
            return None
        return self.categories.get(category, ())

    def system_name_for(self, system_id: str) -> str | None:
        return self.systems.get(system_id)


INCIDENT = RecordVariant(
    name="incident",
    id_prefix="INC",
    statuses=("active", "investigating", "monitoring", "resolved"),
    severities=("critical", "high", "medium", "low"),
    initial_status="investigating",
    resolved_status="resolved",
    categories={
        "Performance": ("Latency", "Throughput", "Resource Usage", "Timeout"),
        "Functional": ("API Errors", "Data Corruption", "Feature Failure", "Integration"),
        "Security": ("Breach", "Vulnerability", "Access Issues", "Audit"),
        "Infrastructure": ("Server Down", "Network", "Database", "Storage"),
    },
    systems={
        "SYS-AUTH": "Authentication Service",
        "SYS-PAY": "Payment Gateway",
        "SYS-NOT": "Notification Service",
        "SYS-USER": "User Management",
        "SYS-API": "Core API Gateway",
        "SYS-DB": "Database Cluster",
        "SYS-CDN": "Content Delivery Network",
    },
)

TICKET = RecordVariant(
    name="ticket",
    id_prefix="TKT",
    statuses=("urgent", "en_cours", "assigne", "resolu"),
    severities=("critique", "haute", "normale", "basse"),
    initial_status="assigne",
    resolved_status="resolu",
)

VARIANTS = {v.name: v for v in (INCIDENT, TICKET)}


def get_variant(name: str) -> RecordVariant:
    """Look up a variant by name ("incident" or "ticket")."""
    try:
        return VARIANTS[name]
    except KeyError:
        raise ValueError(f"Unknown record variant: {name!r}. Known: {sorted(VARIANTS)}")
