"""Shared test fixtures."""

from datetime import datetime, timedelta, timezone

import pytest

from opsdesk.collaborators.attachment_storage import InMemoryAttachmentStorage
from opsdesk.collaborators.roster import TeamRoster
from opsdesk.config import OpsDeskConfig
from opsdesk.engine.record_store import RecordStore
from opsdesk.models.roster import RosterMember
from opsdesk.models.variants import INCIDENT, TICKET

START = datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc)


class ManualClock:
    """Clock that only moves when told to (or by ``step`` on every read)."""

    def __init__(self, start: datetime = START, step: timedelta = timedelta(0)):
        self.now = start
        self.step = step

    def __call__(self) -> datetime:
        current = self.now
        self.now = self.now + self.step
        return current

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def config():
    return OpsDeskConfig(_env_file=None, id_year=2024, log_dir=None)


@pytest.fixture
def roster():
    return TeamRoster([
        RosterMember(id="1", name="Alex Chen", role="sre_lead", active_record_count=3),
        RosterMember(id="2", name="Jordan Rivera", role="sre_engineer", active_record_count=2),
        RosterMember(id="3", name="Sam Taylor", role="on_call", availability="busy", active_record_count=1),
    ])


@pytest.fixture
def storage():
    return InMemoryAttachmentStorage()


@pytest.fixture
def store(roster, storage, config, clock):
    return RecordStore(
        variant=INCIDENT,
        roster=roster,
        attachment_storage=storage,
        config=config,
        clock=clock,
    )


@pytest.fixture
def ticket_store(config, clock):
    technicians = TeamRoster([
        RosterMember(id="t1", name="Claire Martin", role="technicien", availability="available"),
        RosterMember(id="t2", name="Hugo Bernard", role="technicien", availability="unavailable"),
    ])
    return RecordStore(variant=TICKET, roster=technicians, config=config, clock=clock)


@pytest.fixture
def incident_data():
    """Valid creation input for an incident."""
    return {
        "system_id": "SYS-AUTH",
        "title": "High latency in user authentication",
        "description": "Users experiencing 30+ second delays when logging in.",
        "severity": "medium",
        "category": "Performance",
        "service": "Latency",
        "environment": "Production",
        "affected_users": 12500,
        "error_rate": 15.3,
        "response_time_ms": 32000,
    }


@pytest.fixture
def ticket_data():
    return {
        "client_id": "CLI-042",
        "client_name": "Boulangerie Dupont",
        "title": "Imprimante hors service",
        "description": "L'imprimante du comptoir ne répond plus.",
        "priority": "haute",
        "category": "Matériel",
        "subcategory": "Imprimante",
        "location": "Comptoir",
        "equipment": "HP LaserJet",
        "estimated_hours": 1.5,
    }
