"""Scheduler loop - periodic event and raid generation."""

from __future__ import annotations
import asyncio
import logging
import random
from datetime import datetime, timedelta
from enum import Enum
from typing import Awaitable, Optional, TypeVar

from pydantic import BaseModel

from empire_sim.catalogs import Catalog, default_catalog
from empire_sim.config import SimulationConfig
from empire_sim.errors import ConcurrencyConflictError
from empire_sim.models.combat import RaidEvent
from empire_sim.models.province import EmpireSnapshot, ProvinceSnapshot
from empire_sim.store.base import SimulationStore
from empire_sim.systems.eligibility import is_province_eligible_for_event, is_province_eligible_for_raid
from empire_sim.systems.periodic import Clock, PeriodicTask
from empire_sim.systems.scoring import calculate_event_chance
from empire_sim.systems.selection import (
    create_event_instance,
    get_eligible_enemies,
    get_eligible_events,
    select_random_enemy,
    select_random_event,
)


logger = logging.getLogger(__name__)

T = TypeVar("T")


class Generated(str, Enum):
    """What one province produced in a cycle."""
    NOTHING = "nothing"
    EVENT = "event"
    RAID = "raid"


class SchedulerReport(BaseModel):
    """Counters from one scheduler cycle."""
    events_generated: int = 0
    raids_generated: int = 0
    expired_events: int = 0
    cleaned_old_events: int = 0
    cleaned_effects: int = 0
    eligible_provinces: int = 0
    skipped: int = 0
    errors: int = 0

    def summary(self) -> str:
        return (
            f"{self.events_generated} event(s), {self.raids_generated} raid(s) "
            f"from {self.eligible_provinces} eligible province(s); "
            f"expired {self.expired_events}, purged {self.cleaned_old_events} event(s) "
            f"and {self.cleaned_effects} effect(s); {self.errors} error(s)"
        )


class EventScheduler(PeriodicTask):
    """Generates events and raids for provinces that pass the eligibility gate."""

    name = "event scheduler"

    def __init__(
        self,
        store: SimulationStore,
        config: Optional[SimulationConfig] = None,
        catalog: Optional[Catalog] = None,
        rng: Optional[random.Random] = None,
        clock: Optional[Clock] = None,
    ):
        self.config = config or SimulationConfig()
        super().__init__(self.config.check_interval, clock)
        self.store = store
        self.catalog = catalog or default_catalog()
        self.rng = rng or random.Random()

    async def _store_call(self, call: Awaitable[T]) -> T:
        return await asyncio.wait_for(call, timeout=self.config.store_timeout_seconds)

    async def run_cycle(self, user_id: Optional[str] = None) -> SchedulerReport:
        now = self.clock.now()
        report = SchedulerReport()

        try:
            report.expired_events = await self._store_call(self.store.expire_events(now))
            report.cleaned_old_events = await self._store_call(
                self.store.purge_resolved_events(now - self.config.event_retention)
            )
            report.cleaned_effects = await self._store_call(self.store.purge_expired_effects(now))
        except Exception:
            logger.exception("Housekeeping failed")
            report.errors += 1

        if report.expired_events:
            logger.info("Expired %d unresolved event(s)", report.expired_events)
        if report.cleaned_old_events:
            logger.info("Purged %d old event(s)", report.cleaned_old_events)
        if report.cleaned_effects:
            logger.info("Purged %d expired effect(s)", report.cleaned_effects)

        try:
            province_ids = await self._store_call(self.store.list_province_ids(user_id))
        except Exception:
            logger.exception("Could not list provinces")
            report.errors += 1
            return report

        for province_id in province_ids:
            try:
                eligible = await is_province_eligible_for_event(
                    self.store, province_id, self.config, now, self.config.store_timeout_seconds,
                )
                if not eligible:
                    logger.debug("Province %s not eligible for events", province_id)
                    continue
                report.eligible_provinces += 1
                generated = await self._process_province(province_id, now)
            except ConcurrencyConflictError as exc:
                logger.warning("Province %s: %s", province_id, exc)
                report.skipped += 1
                continue
            except Exception:
                logger.exception("Failed to generate for province %s", province_id)
                report.errors += 1
                continue

            if generated == Generated.EVENT:
                report.events_generated += 1
            elif generated == Generated.RAID:
                report.raids_generated += 1
            else:
                report.skipped += 1

        logger.info("Scheduler cycle: %s", report.summary())
        return report

    async def _process_province(self, province_id: str, now: datetime) -> Generated:
        province = await self._store_call(self.store.get_province(province_id))
        empire = await self._store_call(self.store.get_empire(province.city_id))

        chance = calculate_event_chance(province, empire) * self.config.auto_spawn_dampening
        if self.rng.random() >= chance:
            logger.debug("Province %s: no event this cycle (chance %.3f)", province_id, chance)
            return Generated.NOTHING

        if self.rng.random() < self.config.raid_chance:
            raid_ok = await is_province_eligible_for_raid(
                self.store, province_id, self.config, now, self.config.store_timeout_seconds,
            )
            if raid_ok:
                raid = await self._generate_raid(province, now)
                if raid is not None:
                    return Generated.RAID
                logger.debug("Province %s: no enemy fits, falling back to an event", province_id)
            else:
                logger.debug("Province %s: raid gate closed, falling back to an event", province_id)

        return await self._generate_event(province, empire, now)

    async def _generate_raid(self, province: ProvinceSnapshot, now: datetime) -> Optional[RaidEvent]:
        enemy = select_random_enemy(get_eligible_enemies(province, self.catalog), self.rng)
        if enemy is None:
            return None

        preparation = self.rng.randrange(
            self.config.raid_preparation_min_minutes,
            self.config.raid_preparation_max_minutes,
        )
        raid = RaidEvent(
            province_id=province.id,
            enemy_id=enemy.id,
            enemy_type=enemy.type,
            enemy_name=enemy.name,
            enemy_strength=enemy.strength,
            enemy_threat_level=enemy.threat_level,
            detected_at=now,
            arrival_time=now + timedelta(minutes=preparation),
            preparation_minutes=preparation,
        )
        await self._store_call(self.store.create_raid(raid))
        logger.info("Raid on %s by %s arrives in %d minutes", province.name, enemy.name, preparation)
        return raid

    async def _generate_event(self, province: ProvinceSnapshot, empire: EmpireSnapshot, now: datetime) -> Generated:
        event = select_random_event(
            get_eligible_events(province, empire, self.catalog),
            self.rng,
            self.catalog.rarity_weights,
        )
        if event is None:
            logger.debug("Province %s: no eligible event", province.id)
            return Generated.NOTHING

        instance = create_event_instance(event, province.id, now, self.config.event_expiry_hours)
        await self._store_call(self.store.create_event_instance(instance, self.config.max_concurrent_events))
        logger.info("Event %s triggered in %s", event.id, province.name)
        return Generated.EVENT
