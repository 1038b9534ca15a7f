"""The persistence boundary of the simulation core."""

from __future__ import annotations
from datetime import datetime
from typing import Optional, Protocol, runtime_checkable

from empire_sim.models.combat import CombatResult, RaidEvent
from empire_sim.models.events import EventInstance, TemporaryEffect
from empire_sim.models.province import EmpireSnapshot, Governor, ProvinceSnapshot
from empire_sim.models.tasks import ConstructionTask, ResearchTask


@runtime_checkable
class SimulationStore(Protocol):
    """Async operations the periodic drivers need from durable storage.

    Lookups of missing ids raise ``EntityNotFoundError``. Writes that would
    break a per-province ceiling raise ``ConcurrencyConflictError``, and
    ``adjust_resources`` raises ``InsufficientResourcesError`` rather than
    let any stock go below zero. ``adjust_resources_clamped`` instead cuts
    each loss to the stock on hand at write time and returns the deltas it
    actually applied.
    """

    # Reads
    async def get_province(self, province_id: str) -> ProvinceSnapshot: ...

    async def list_province_ids(self, user_id: Optional[str] = None) -> list[str]: ...

    async def list_city_ids(self) -> list[str]: ...

    async def get_empire(self, city_id: str) -> EmpireSnapshot: ...

    async def get_event_instance(self, instance_id: str) -> EventInstance: ...

    async def get_raid(self, raid_id: str) -> RaidEvent: ...

    # Eligibility counts
    async def count_unresolved_events(self, province_id: str) -> int: ...

    async def count_events_since(self, province_id: str, cutoff: datetime) -> int: ...

    async def count_unresolved_raids(self, province_id: str) -> int: ...

    async def count_raids_since(self, province_id: str, cutoff: datetime) -> int: ...

    # Writes
    async def create_event_instance(self, instance: EventInstance, max_unresolved: int = 1) -> EventInstance: ...

    async def create_raid(self, raid: RaidEvent) -> RaidEvent: ...

    async def resolve_event_instance(
        self,
        instance_id: str,
        choice_id: str,
        now: datetime,
        resource_changes: Optional[dict[str, int]] = None,
        governor_loyalty_change: int = 0,
        governor_xp_gained: int = 0,
        followup_scheduled: bool = False,
    ) -> EventInstance: ...

    async def resolve_raid(
        self,
        raid_id: str,
        result: CombatResult,
        now: datetime,
        strategy: Optional[str] = None,
    ) -> RaidEvent: ...

    async def adjust_resources(self, province_id: str, changes: dict[str, int], reason: str = "") -> dict[str, int]: ...

    async def adjust_resources_clamped(self, province_id: str, changes: dict[str, int], reason: str = "") -> dict[str, int]: ...

    async def update_governor(self, province_id: str, governor: Governor) -> None: ...

    async def create_construction_task(self, task: ConstructionTask) -> ConstructionTask: ...

    async def create_research_task(self, task: ResearchTask) -> ResearchTask: ...

    async def add_temporary_effect(self, effect: TemporaryEffect) -> TemporaryEffect: ...

    # Housekeeping
    async def expire_events(self, now: datetime) -> int: ...

    async def purge_resolved_events(self, cutoff: datetime) -> int: ...

    async def purge_expired_effects(self, now: datetime) -> int: ...

    async def complete_due_tasks(self, now: datetime) -> int: ...
