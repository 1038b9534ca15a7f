"""Tests for SimulationConfig."""

from datetime import timedelta

import pytest
from pydantic import ValidationError

from empire_sim.config import SimulationConfig


class TestSimulationConfig:

    def test_defaults(self):
        config = SimulationConfig()
        assert config.check_interval == timedelta(minutes=30)
        assert config.event_cooldown == timedelta(hours=4)
        assert config.raid_cooldown == timedelta(hours=6)
        assert config.event_retention == timedelta(days=7)
        assert config.governor_interval == timedelta(minutes=15)
        assert config.max_concurrent_events == 1
        assert config.raid_chance == 0.3
        assert config.auto_spawn_dampening == 0.7
        assert config.governor_act_probability == 0.3

    def test_probabilities_are_bounded(self):
        with pytest.raises(ValidationError):
            SimulationConfig(raid_chance=1.5)
        with pytest.raises(ValidationError):
            SimulationConfig(governor_act_probability=-0.1)

    def test_preparation_window_must_be_open(self):
        with pytest.raises(ValidationError):
            SimulationConfig(raid_preparation_min_minutes=30, raid_preparation_max_minutes=30)

    def test_from_env(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("EMPIRE_SIM_RAID_CHANCE", "0.5")
        monkeypatch.setenv("EMPIRE_SIM_MAX_CONCURRENT_EVENTS", "2")
        config = SimulationConfig.from_env()
        assert config.raid_chance == 0.5
        assert config.max_concurrent_events == 2

    def test_overrides_win_over_env(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("EMPIRE_SIM_RAID_CHANCE", "0.5")
        assert SimulationConfig.from_env(raid_chance=0.1).raid_chance == 0.1

    def test_dotenv_file(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        # registers the variable with monkeypatch so whatever .env sets is undone
        monkeypatch.setenv("EMPIRE_SIM_EVENT_COOLDOWN_HOURS", "0")
        monkeypatch.delenv("EMPIRE_SIM_EVENT_COOLDOWN_HOURS")
        (tmp_path / ".env").write_text("EMPIRE_SIM_EVENT_COOLDOWN_HOURS=2\n")
        assert SimulationConfig.from_env().event_cooldown == timedelta(hours=2)

    def test_bad_env_value(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("EMPIRE_SIM_CHECK_INTERVAL_MINUTES", "soon")
        with pytest.raises(ValidationError):
            SimulationConfig.from_env()
