"""In-memory store - reference implementation used by tests and the console."""

from __future__ import annotations
import asyncio
import logging
from datetime import datetime
from typing import Any, Optional

from empire_sim.errors import (
    AlreadyResolvedError,
    ConcurrencyConflictError,
    EntityNotFoundError,
    InsufficientResourcesError,
    InvalidInputError,
)
from empire_sim.models.combat import CombatResult, RaidEvent
from empire_sim.models.events import EventInstance, TemporaryEffect
from empire_sim.models.province import (
    Building,
    EmpireSnapshot,
    Governor,
    ProvinceSnapshot,
    ResourceLedgerEntry,
    clamp_to_stock,
    normalize_resources,
)
from empire_sim.models.tasks import ConstructionTask, ResearchTask, TaskStatus


logger = logging.getLogger(__name__)

AUTO_EXPIRED = "AUTO_EXPIRED"


class InMemoryStore:
    """Dict-backed store with per-province ceilings enforced on insert.

    Reads hand out deep copies, so callers can never mutate stored state
    except through the write methods.
    """

    def __init__(self) -> None:
        self._provinces: dict[str, ProvinceSnapshot] = {}
        self._city_owners: dict[str, Optional[str]] = {}
        self._researched: dict[str, list[str]] = {}
        self._events: dict[str, EventInstance] = {}
        self._raids: dict[str, RaidEvent] = {}
        self._effects: dict[str, TemporaryEffect] = {}
        self._constructions: dict[str, ConstructionTask] = {}
        self._researches: dict[str, ResearchTask] = {}
        self.ledger: list[ResourceLedgerEntry] = []
        self._lock = asyncio.Lock()

    # ------------------------------------------------------------------
    # Seeding
    # ------------------------------------------------------------------

    def add_province(self, province: ProvinceSnapshot, user_id: Optional[str] = None) -> ProvinceSnapshot:
        """Register a province (and its city, if new)."""
        self._provinces[province.id] = province.model_copy(deep=True)
        if province.city_id not in self._city_owners or user_id is not None:
            self._city_owners[province.city_id] = user_id
        self._researched.setdefault(province.city_id, [])
        return province

    def mark_researched(self, city_id: str, tech_key: str) -> None:
        techs = self._researched.setdefault(city_id, [])
        if tech_key not in techs:
            techs.append(tech_key)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def _require_province(self, province_id: str) -> ProvinceSnapshot:
        province = self._provinces.get(province_id)
        if province is None:
            raise EntityNotFoundError("Province", province_id)
        return province

    async def get_province(self, province_id: str) -> ProvinceSnapshot:
        province = self._require_province(province_id)
        pending = [
            t.model_copy() for t in self._constructions.values()
            if t.province_id == province_id and t.status == TaskStatus.PENDING
        ]
        return province.model_copy(deep=True, update={"active_constructions": pending})

    async def list_province_ids(self, user_id: Optional[str] = None) -> list[str]:
        if user_id is None:
            return list(self._provinces)
        return [pid for pid, p in self._provinces.items() if self._city_owners.get(p.city_id) == user_id]

    async def list_city_ids(self) -> list[str]:
        return list(self._city_owners)

    async def get_empire(self, city_id: str) -> EmpireSnapshot:
        if city_id not in self._city_owners:
            raise EntityNotFoundError("City", city_id)
        provinces = [await self.get_province(pid) for pid, p in self._provinces.items() if p.city_id == city_id]
        active = [
            t.model_copy() for t in self._researches.values()
            if t.city_id == city_id and t.status == TaskStatus.PENDING
        ]
        return EmpireSnapshot.from_provinces(
            provinces,
            city_id=city_id,
            user_id=self._city_owners[city_id],
            active_researches=active,
            researched=list(self._researched.get(city_id, [])),
        )

    async def get_event_instance(self, instance_id: str) -> EventInstance:
        instance = self._events.get(instance_id)
        if instance is None:
            raise EntityNotFoundError("Event instance", instance_id)
        return instance.model_copy(deep=True)

    async def get_raid(self, raid_id: str) -> RaidEvent:
        raid = self._raids.get(raid_id)
        if raid is None:
            raise EntityNotFoundError("Raid", raid_id)
        return raid.model_copy(deep=True)

    async def list_event_instances(self, province_id: Optional[str] = None, unresolved_only: bool = False) -> list[EventInstance]:
        return [
            e.model_copy(deep=True) for e in self._events.values()
            if (province_id is None or e.province_id == province_id) and not (unresolved_only and e.resolved)
        ]

    async def list_raids(self, province_id: Optional[str] = None, unresolved_only: bool = False) -> list[RaidEvent]:
        return [
            r.model_copy(deep=True) for r in self._raids.values()
            if (province_id is None or r.province_id == province_id) and not (unresolved_only and r.resolved)
        ]

    async def list_temporary_effects(self, province_id: Optional[str] = None) -> list[TemporaryEffect]:
        return [e.model_copy() for e in self._effects.values() if province_id is None or e.province_id == province_id]

    # ------------------------------------------------------------------
    # Counts
    # ------------------------------------------------------------------

    def _unresolved_events(self, province_id: str) -> int:
        return sum(1 for e in self._events.values() if e.province_id == province_id and not e.resolved)

    def _unresolved_raids(self, province_id: str) -> int:
        return sum(1 for r in self._raids.values() if r.province_id == province_id and not r.resolved)

    async def count_unresolved_events(self, province_id: str) -> int:
        return self._unresolved_events(province_id)

    async def count_events_since(self, province_id: str, cutoff: datetime) -> int:
        return sum(1 for e in self._events.values() if e.province_id == province_id and e.triggered_at >= cutoff)

    async def count_unresolved_raids(self, province_id: str) -> int:
        return self._unresolved_raids(province_id)

    async def count_raids_since(self, province_id: str, cutoff: datetime) -> int:
        return sum(1 for r in self._raids.values() if r.province_id == province_id and r.detected_at >= cutoff)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def create_event_instance(self, instance: EventInstance, max_unresolved: int = 1) -> EventInstance:
        async with self._lock:
            self._require_province(instance.province_id)
            if not instance.resolved and self._unresolved_events(instance.province_id) >= max_unresolved:
                raise ConcurrencyConflictError(
                    f"Province {instance.province_id} already has {max_unresolved} unresolved event(s)"
                )
            self._events[instance.id] = instance.model_copy(deep=True)
        return instance

    async def create_raid(self, raid: RaidEvent) -> RaidEvent:
        async with self._lock:
            self._require_province(raid.province_id)
            if self._unresolved_raids(raid.province_id) > 0:
                raise ConcurrencyConflictError(f"Province {raid.province_id} already has an unresolved raid")
            self._raids[raid.id] = raid.model_copy(deep=True)
        return raid

    async def resolve_event_instance(
        self,
        instance_id: str,
        choice_id: str,
        now: datetime,
        resource_changes: Optional[dict[str, int]] = None,
        governor_loyalty_change: int = 0,
        governor_xp_gained: int = 0,
        followup_scheduled: bool = False,
    ) -> EventInstance:
        async with self._lock:
            instance = self._events.get(instance_id)
            if instance is None:
                raise EntityNotFoundError("Event instance", instance_id)
            if instance.resolved:
                raise AlreadyResolvedError(f"Event {instance_id} already resolved")
            resolved = instance.model_copy(update={
                "resolved": True,
                "resolved_at": now,
                "choice_id": choice_id,
                "resource_changes": dict(resource_changes or {}),
                "governor_loyalty_change": governor_loyalty_change,
                "governor_xp_gained": governor_xp_gained,
                "followup_scheduled": followup_scheduled,
            })
            self._events[instance_id] = resolved
        return resolved.model_copy(deep=True)

    async def resolve_raid(
        self,
        raid_id: str,
        result: CombatResult,
        now: datetime,
        strategy: Optional[str] = None,
    ) -> RaidEvent:
        async with self._lock:
            raid = self._raids.get(raid_id)
            if raid is None:
                raise EntityNotFoundError("Raid", raid_id)
            if raid.resolved:
                raise AlreadyResolvedError(f"Raid {raid_id} already resolved")
            resolved = raid.model_copy(update={
                "resolved": True,
                "resolved_at": now,
                "strategy": strategy,
                "combat_result": result,
            })
            self._raids[raid_id] = resolved
        return resolved.model_copy(deep=True)

    async def adjust_resources(self, province_id: str, changes: dict[str, int], reason: str = "") -> dict[str, int]:
        """Apply all deltas or none. Returns the new stock."""
        changes = normalize_resources(changes)
        async with self._lock:
            province = self._require_province(province_id)
            updated = dict(province.resources)
            for resource, delta in changes.items():
                updated[resource] = updated.get(resource, 0) + delta
            missing = {r: -amount for r, amount in updated.items() if amount < 0}
            if missing:
                raise InsufficientResourcesError(missing)
            self._provinces[province_id] = province.model_copy(update={"resources": updated})
            self.ledger.append(ResourceLedgerEntry(province_id=province_id, changes=changes, reason=reason))
        logger.debug("Adjusted resources of %s (%s): %s", province_id, reason or "unspecified", changes)
        return dict(updated)

    async def adjust_resources_clamped(self, province_id: str, changes: dict[str, int], reason: str = "") -> dict[str, int]:
        """Apply deltas with losses cut to the current stock. Returns the applied deltas."""
        async with self._lock:
            province = self._require_province(province_id)
            applied = clamp_to_stock(changes, province.resources)
            if not applied:
                return {}
            updated = dict(province.resources)
            for resource, delta in applied.items():
                updated[resource] = updated.get(resource, 0) + delta
            self._provinces[province_id] = province.model_copy(update={"resources": updated})
            self.ledger.append(ResourceLedgerEntry(province_id=province_id, changes=applied, reason=reason))
        logger.debug("Adjusted resources of %s (%s): %s", province_id, reason or "unspecified", applied)
        return applied

    async def update_governor(self, province_id: str, governor: Governor) -> None:
        async with self._lock:
            province = self._require_province(province_id)
            current = province.governor
            if current is not None and current.id == governor.id and current.personality != governor.personality:
                raise InvalidInputError(f"Governor {governor.id} personality cannot change")
            self._provinces[province_id] = province.model_copy(update={"governor": governor})

    async def create_construction_task(self, task: ConstructionTask) -> ConstructionTask:
        async with self._lock:
            self._require_province(task.province_id)
            self._constructions[task.id] = task.model_copy()
        return task

    async def create_research_task(self, task: ResearchTask) -> ResearchTask:
        async with self._lock:
            if task.city_id not in self._city_owners:
                raise EntityNotFoundError("City", task.city_id)
            self._researches[task.id] = task.model_copy()
        return task

    async def add_temporary_effect(self, effect: TemporaryEffect) -> TemporaryEffect:
        async with self._lock:
            self._require_province(effect.province_id)
            self._effects[effect.id] = effect.model_copy()
        return effect

    # ------------------------------------------------------------------
    # Housekeeping
    # ------------------------------------------------------------------

    async def expire_events(self, now: datetime) -> int:
        """Resolve unresolved events past their expiry as AUTO_EXPIRED."""
        count = 0
        async with self._lock:
            for instance_id, instance in list(self._events.items()):
                if not instance.resolved and instance.expires_at is not None and instance.expires_at <= now:
                    self._events[instance_id] = instance.model_copy(update={
                        "resolved": True,
                        "resolved_at": now,
                        "choice_id": AUTO_EXPIRED,
                    })
                    count += 1
        return count

    async def purge_resolved_events(self, cutoff: datetime) -> int:
        async with self._lock:
            stale = [
                i for i, e in self._events.items()
                if e.resolved and e.resolved_at is not None and e.resolved_at <= cutoff
            ]
            for instance_id in stale:
                del self._events[instance_id]
        return len(stale)

    async def purge_expired_effects(self, now: datetime) -> int:
        async with self._lock:
            expired = [i for i, e in self._effects.items() if e.expires_at <= now]
            for effect_id in expired:
                del self._effects[effect_id]
        return len(expired)

    async def complete_due_tasks(self, now: datetime) -> int:
        """Finish construction and research tasks whose time has come."""
        completed = 0
        async with self._lock:
            for task_id, task in list(self._constructions.items()):
                if task.status != TaskStatus.PENDING or not task.is_complete(now):
                    continue
                province = self._provinces.get(task.province_id)
                if province is not None:
                    buildings = [b for b in province.buildings if b.type != task.building_type]
                    buildings.append(Building(type=task.building_type, level=task.target_level))
                    self._provinces[task.province_id] = province.model_copy(update={"buildings": buildings})
                self._constructions[task_id] = task.model_copy(update={"status": TaskStatus.COMPLETED})
                completed += 1

            for task_id, task in list(self._researches.items()):
                if task.status != TaskStatus.PENDING or not task.is_complete(now):
                    continue
                self.mark_researched(task.city_id, task.tech_key)
                self._researches[task_id] = task.model_copy(update={"status": TaskStatus.COMPLETED})
                completed += 1
        return completed

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def export(self) -> dict[str, Any]:
        """JSON-serialisable dump of the whole store."""
        return {
            "provinces": [p.model_dump(mode="json") for p in self._provinces.values()],
            "city_owners": dict(self._city_owners),
            "researched": {k: list(v) for k, v in self._researched.items()},
            "events": [e.model_dump(mode="json") for e in self._events.values()],
            "raids": [r.model_dump(mode="json") for r in self._raids.values()],
            "effects": [e.model_dump(mode="json") for e in self._effects.values()],
            "constructions": [t.model_dump(mode="json") for t in self._constructions.values()],
            "researches": [t.model_dump(mode="json") for t in self._researches.values()],
        }

    @classmethod
    def load(cls, data: dict[str, Any]) -> "InMemoryStore":
        """Rebuild a store from ``export()`` output."""
        store = cls()
        for raw in data.get("provinces", []):
            province = ProvinceSnapshot.model_validate(raw)
            store._provinces[province.id] = province
        store._city_owners = dict(data.get("city_owners", {}))
        store._researched = {k: list(v) for k, v in data.get("researched", {}).items()}
        for raw in data.get("events", []):
            instance = EventInstance.model_validate(raw)
            store._events[instance.id] = instance
        for raw in data.get("raids", []):
            raid = RaidEvent.model_validate(raw)
            store._raids[raid.id] = raid
        for raw in data.get("effects", []):
            effect = TemporaryEffect.model_validate(raw)
            store._effects[effect.id] = effect
        for raw in data.get("constructions", []):
            task = ConstructionTask.model_validate(raw)
            store._constructions[task.id] = task
        for raw in data.get("researches", []):
            research = ResearchTask.model_validate(raw)
            store._researches[research.id] = research
        return store
