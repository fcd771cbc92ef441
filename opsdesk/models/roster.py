"""Roster member — a read-only view of an assignable team member."""

from dataclasses import dataclass


@dataclass(frozen=True)
class RosterMember:
    id: str
    name: str
    role: str  # sre_lead, sre_engineer, on_call, security_analyst, technicien, ...
    availability: str = "online"  # online/busy/offline or available/unavailable
    active_record_count: int = 0
    avg_response_time: float = 0.0  # minutes

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "role": self.role,
            "availability": self.availability,
            "active_record_count": self.active_record_count,
            "avg_response_time": self.avg_response_time,
        }
