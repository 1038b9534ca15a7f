"""Simulation configuration, loadable from the environment or a .env file."""

from __future__ import annotations
import os
from datetime import timedelta
from typing import Any

from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, Field, model_validator


ENV_PREFIX = "EMPIRE_SIM_"


class SimulationConfig(BaseModel):
    """Tunables for the scheduler loop and the governor runner."""

    # Scheduler loop
    check_interval_minutes: float = Field(default=30, gt=0)
    event_cooldown_hours: float = Field(default=4, ge=0)
    raid_cooldown_hours: float = Field(default=6, ge=0)
    max_concurrent_events: int = Field(default=1, ge=1)
    raid_chance: float = Field(default=0.3, ge=0, le=1)
    auto_spawn_dampening: float = Field(default=0.7, ge=0, le=1)
    event_expiry_hours: int = Field(default=24, ge=1)
    event_retention_days: float = Field(default=7, gt=0)
    raid_preparation_min_minutes: int = Field(default=10, ge=0)
    raid_preparation_max_minutes: int = Field(default=30, ge=1)

    # Governor runner
    governor_interval_minutes: float = Field(default=15, gt=0)
    governor_act_probability: float = Field(default=0.3, ge=0, le=1)

    store_timeout_seconds: float = Field(default=10, gt=0)
    log_level: str = "INFO"

    @model_validator(mode="after")
    def _check_preparation_window(self) -> "SimulationConfig":
        if self.raid_preparation_max_minutes <= self.raid_preparation_min_minutes:
            raise ValueError("raid_preparation_max_minutes must exceed raid_preparation_min_minutes")
        return self

    @property
    def check_interval(self) -> timedelta:
        return timedelta(minutes=self.check_interval_minutes)

    @property
    def governor_interval(self) -> timedelta:
        return timedelta(minutes=self.governor_interval_minutes)

    @property
    def event_cooldown(self) -> timedelta:
        return timedelta(hours=self.event_cooldown_hours)

    @property
    def raid_cooldown(self) -> timedelta:
        return timedelta(hours=self.raid_cooldown_hours)

    @property
    def event_retention(self) -> timedelta:
        return timedelta(days=self.event_retention_days)

    @classmethod
    def from_env(cls, **overrides: Any) -> "SimulationConfig":
        """Build a config from EMPIRE_SIM_* variables (after loading .env).

        e.g. ``EMPIRE_SIM_RAID_CHANCE=0.5``. Keyword overrides win over the
        environment.
        """
        load_dotenv(find_dotenv(usecwd=True))
        values: dict[str, Any] = {}
        for name in cls.model_fields:
            raw = os.getenv(ENV_PREFIX + name.upper())
            if raw is not None:
                values[name] = raw
        values.update(overrides)
        return cls.model_validate(values)
