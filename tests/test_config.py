"""Tests for the OpsDesk configuration system."""

import pytest
from pydantic import ValidationError

from opsdesk.config import OpsDeskConfig, get_config


class TestOpsDeskConfig:

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("RECORD_VARIANT", raising=False)
        config = OpsDeskConfig(_env_file=None)
        assert config.record_variant == "incident"
        assert config.current_user_name == "Current User"
        assert config.workload_per_assignment == 25
        assert config.workload_cap is None
        assert config.id_year is None

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("RECORD_VARIANT", "Ticket")
        monkeypatch.setenv("WORKLOAD_CAP", "100")
        monkeypatch.setenv("ID_YEAR", "2025")
        config = get_config()
        assert config.record_variant == "ticket"
        assert config.workload_cap == 100
        assert config.id_year == 2025

    def test_rejects_unknown_variant(self):
        with pytest.raises(ValidationError):
            OpsDeskConfig(_env_file=None, record_variant="change_request")

    def test_rejects_negative_workload_step(self):
        with pytest.raises(ValidationError):
            OpsDeskConfig(_env_file=None, workload_per_assignment=-25)
