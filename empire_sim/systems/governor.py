"""Governor policy - autonomous build/research decisions and the runner that applies them."""

from __future__ import annotations
import asyncio
import logging
import math
import random
from datetime import datetime, timedelta
from typing import Any, Awaitable, Callable, Optional, TypeVar

from pydantic import BaseModel, Field

from empire_sim.catalogs import BuildingData, Catalog, default_catalog
from empire_sim.config import SimulationConfig
from empire_sim.errors import InsufficientResourcesError, UnknownCatalogEntryError
from empire_sim.models.province import EmpireSnapshot, Governor, ProvinceSnapshot
from empire_sim.models.tasks import (
    ConstructionTask,
    DecisionAction,
    DecisionType,
    GovernorDecision,
    ResearchTask,
)
from empire_sim.store.base import SimulationStore
from empire_sim.systems.periodic import Clock, PeriodicTask
from empire_sim.systems.traits import traits_for


logger = logging.getLogger(__name__)

T = TypeVar("T")

MAX_GOVERNOR_XP = 10_000
RESEARCH_ABUNDANCE_THRESHOLD = 500
RESEARCH_WEIGHT = 0.7


# ------------------------------------------------------------------
# Decision policy
# ------------------------------------------------------------------

def calculate_affordability_score(cost: dict[str, int], resources: dict[str, int]) -> float:
    """0-100 score of how comfortably ``resources`` cover ``cost``.

    Per resource: 100 when at least twice the cost is available, otherwise
    ``floor(available / amount * 50)``. Any shortfall scores the whole cost 0.
    """
    if not cost or sum(cost.values()) <= 0:
        return 0.0
    total = 0
    for resource, amount in cost.items():
        available = resources.get(resource.lower(), 0)
        if available >= amount * 2:
            total += 100
        elif available >= amount:
            total += math.floor(available / amount * 50)
        else:
            return 0.0
    return total / len(cost)


def building_prerequisites_met(data: BuildingData, province: ProvinceSnapshot, empire: EmpireSnapshot) -> bool:
    req = data.requirements
    if req is None:
        return True
    if req.min_level is not None and province.level < req.min_level:
        return False
    for building_type, level in req.required_buildings.items():
        if province.building_level(building_type) < level:
            return False
    return all(empire.has_researched(tech) for tech in req.required_tech)


def make_governor_decision(
    province: ProvinceSnapshot,
    empire: EmpireSnapshot,
    catalog: Optional[Catalog] = None,
) -> GovernorDecision:
    """Pick the single best-scoring affordable action, or WAIT.

    Deterministic for identical snapshots.
    """
    governor = province.governor
    if governor is None:
        return GovernorDecision.wait()
    catalog = catalog or default_catalog()
    traits = traits_for(governor.personality)
    style = governor.personality.value.lower()

    loyalty_modifier = max(0.3, governor.loyalty / 100)
    experience_modifier = min(1.5, 1 + governor.xp / 1000)

    best = GovernorDecision.wait()
    best_score = 0.0

    for building_type, base_priority in traits.building_priorities.items():
        if province.is_under_construction(building_type):
            continue
        data = catalog.buildings.get(building_type)
        if data is None or not building_prerequisites_met(data, province, empire):
            continue

        level = province.building_level(building_type)
        try:
            upgrade = catalog.upgrade_cost(building_type, level)
        except UnknownCatalogEntryError:
            continue
        affordability = calculate_affordability_score(upgrade.cost, province.resources)
        if affordability == 0:
            continue

        score = base_priority * loyalty_modifier * experience_modifier
        if level == 0 and base_priority >= 8:
            score *= 1.5
        if level > 5:
            score *= 0.8 ** (level - 5)
        score *= affordability / 100

        if score > best_score:
            best_score = score
            best = GovernorDecision(
                type=DecisionType.BUILD,
                action=DecisionAction(
                    building_type=building_type,
                    reason=(
                        f"{style}: {building_type.lower()} level {level + 1} "
                        f"(Priority: {base_priority}, Affordable: {affordability:.1f}%)"
                    ),
                    priority=math.ceil(score),
                ),
            )

    if sum(province.resources.values()) > RESEARCH_ABUNDANCE_THRESHOLD:
        for tech_key, base_priority in traits.research_priorities.items():
            if empire.is_researching(tech_key) or empire.has_researched(tech_key):
                continue
            tech = catalog.technologies.get(tech_key)
            if tech is None:
                continue
            if not all(empire.has_researched(p) for p in tech.prerequisites):
                continue

            affordability = calculate_affordability_score(tech.cost, empire.total_resources)
            if affordability == 0:
                continue

            score = base_priority * loyalty_modifier * experience_modifier * RESEARCH_WEIGHT
            score *= affordability / 100
            if score > best_score:
                best_score = score
                best = GovernorDecision(
                    type=DecisionType.RESEARCH,
                    action=DecisionAction(
                        tech_key=tech_key,
                        reason=(
                            f"{style}: Research {tech.name} "
                            f"(Priority: {base_priority}, Affordable: {affordability:.1f}%)"
                        ),
                        priority=math.ceil(score),
                    ),
                )

    return best


def update_governor_experience(xp: int, decision: GovernorDecision) -> int:
    """New experience total after acting on ``decision``. Capped, never lower."""
    if decision.action is None:
        return xp
    gain = decision.action.priority * 10
    if decision.type == DecisionType.BUILD:
        gain += 20
    elif decision.type == DecisionType.RESEARCH:
        gain += 30
    return max(xp, min(MAX_GOVERNOR_XP, xp + gain))


def _loyalty_text(loyalty: int) -> str:
    if loyalty > 80:
        return "Extremely loyal and motivated."
    if loyalty > 60:
        return "Loyal and reliable."
    if loyalty > 40:
        return "Moderately loyal."
    return "Loyalty is wavering."


def _status_text(province: ProvinceSnapshot, governor: Governor) -> str:
    personality = governor.personality.value
    if personality == "CONSERVATIVE":
        food = province.resource("food")
        if food > 1000:
            return "Food reserves are excellent. Provincial stability is high."
        if food < 200:
            return "Food situation is concerning. Focusing on agricultural development."
        return "Food production is stable. Maintaining steady growth."
    if personality == "AGGRESSIVE":
        if province.building_level("BARRACKS") > 2:
            return "Military infrastructure is developing well. Ready for expansion."
        return "Military capabilities need improvement. Prioritizing barracks construction."
    if personality == "MERCHANT":
        gold = province.resource("gold")
        if gold > 2000:
            return "Trade is flourishing! Gold reserves are excellent."
        if gold < 300:
            return "Economic situation needs attention. Focusing on gold production."
        return "Trade networks are developing steadily."
    if province.building_level("ACADEMY") > 1:
        return "Research capabilities are advancing. Knowledge expansion continues."
    return "Seeking new knowledge and opportunities for advancement."


def generate_governor_report(province: ProvinceSnapshot) -> str:
    """One-paragraph status report in the governor's own voice."""
    governor = province.governor
    if governor is None:
        return f"{province.name} has no governor."
    suggestion = traits_for(governor.personality).report_suggestion
    return (
        f"{governor.name} ({governor.personality.value.lower()}): "
        f"{_status_text(province, governor)} {suggestion} {_loyalty_text(governor.loyalty)}"
    )


def plan_empire_deduction(empire: EmpireSnapshot, cost: dict[str, int]) -> dict[str, dict[str, int]]:
    """Split ``cost`` across provinces, draining each in order before the next.

    Returns ``{province_id: {resource: amount}}``. Raises
    InsufficientResourcesError when the empire as a whole is short.
    """
    missing = {
        r: amount - empire.total_resources.get(r, 0)
        for r, amount in cost.items()
        if empire.total_resources.get(r, 0) < amount
    }
    if missing:
        raise InsufficientResourcesError(missing)

    plan: dict[str, dict[str, int]] = {}
    for resource, amount in cost.items():
        remaining = amount
        for province in empire.provinces:
            if remaining <= 0:
                break
            take = min(remaining, province.resource(resource))
            if take > 0:
                plan.setdefault(province.id, {})[resource] = take
                remaining -= take
    return plan


# ------------------------------------------------------------------
# Runner
# ------------------------------------------------------------------

class GovernorReport(BaseModel):
    """Counters from one governor cycle."""
    decisions: int = 0
    builds: int = 0
    researches: int = 0
    skipped: int = 0
    errors: int = 0
    actions: list[str] = Field(default_factory=list)

    def summary(self) -> str:
        return (
            f"{self.decisions} decision(s): {self.builds} build(s), {self.researches} research(es), "
            f"{self.skipped} skipped, {self.errors} error(s)"
        )


class GovernorRunner(PeriodicTask):
    """Lets each governor act on its province with a fixed probability per cycle."""

    name = "governor runner"

    def __init__(
        self,
        store: SimulationStore,
        config: Optional[SimulationConfig] = None,
        catalog: Optional[Catalog] = None,
        rng: Optional[random.Random] = None,
        clock: Optional[Clock] = None,
    ):
        self.config = config or SimulationConfig()
        super().__init__(self.config.governor_interval, clock)
        self.store = store
        self.catalog = catalog or default_catalog()
        self.rng = rng or random.Random()

    async def _store_call(self, call: Awaitable[T]) -> T:
        return await asyncio.wait_for(call, timeout=self.config.store_timeout_seconds)

    async def run_cycle(self) -> GovernorReport:
        now = self.clock.now()
        report = GovernorReport()

        try:
            completed = await self._store_call(self.store.complete_due_tasks(now))
        except Exception:
            logger.exception("Could not complete due tasks")
            report.errors += 1
        else:
            if completed:
                logger.info("Completed %d task(s)", completed)

        for city_id in await self._store_call(self.store.list_city_ids()):
            try:
                empire = await self._store_call(self.store.get_empire(city_id))
            except Exception:
                logger.exception("Could not load empire %s", city_id)
                report.errors += 1
                continue
            for province in empire.provinces:
                if province.governor is None:
                    continue
                try:
                    await self._process_province(province.id, city_id, now, report)
                except Exception:
                    logger.exception("Governor AI failed for province %s", province.id)
                    report.errors += 1

        logger.info("Governor cycle: %s", report.summary())
        return report

    async def _process_province(self, province_id: str, city_id: str, now: datetime, report: GovernorReport) -> None:
        if self.rng.random() >= self.config.governor_act_probability:
            report.skipped += 1
            return

        province = await self._store_call(self.store.get_province(province_id))
        empire = await self._store_call(self.store.get_empire(city_id))
        governor = province.governor
        if governor is None:
            report.skipped += 1
            return

        decision = make_governor_decision(province, empire, self.catalog)
        report.decisions += 1
        if decision.type == DecisionType.WAIT or decision.action is None:
            logger.debug("%s (%s) waits", governor.name, province.name)
            return

        try:
            if decision.type == DecisionType.BUILD:
                acted = await self._build(province, governor, decision, now)
            else:
                acted = await self._research(province, empire, governor, decision, now)
        except InsufficientResourcesError as exc:
            logger.debug("%s (%s) cannot afford %s: %s", governor.name, province.name, decision.summary(), exc)
            acted = None

        if acted is None:
            report.skipped += 1
            return
        report.actions.append(acted)
        if decision.type == DecisionType.BUILD:
            report.builds += 1
        else:
            report.researches += 1

    async def _progress_governor(self, province_id: str, governor: Governor, decision: GovernorDecision, loyalty_gain: int) -> None:
        new_xp = update_governor_experience(governor.xp, decision)
        updated = governor.with_xp_gain(new_xp - governor.xp).with_loyalty_delta(loyalty_gain)
        await self._store_call(self.store.update_governor(province_id, updated))

    async def _charge_and_record(
        self,
        plan: dict[str, dict[str, int]],
        reason: str,
        record: Callable[[], Awaitable[Any]],
    ) -> None:
        """Deduct each province's share of a cost, then write the task record.

        If any deduction or the record write fails, every share already taken
        is refunded before the error propagates, so a failed action leaves
        neither a record nor a deduction.
        """
        applied: list[tuple[str, dict[str, int]]] = []
        try:
            for province_id, amounts in plan.items():
                await self._store_call(self.store.adjust_resources(
                    province_id,
                    {r: -amount for r, amount in amounts.items()},
                    reason=reason,
                ))
                applied.append((province_id, amounts))
            await self._store_call(record())
        except Exception:
            for province_id, amounts in applied:
                try:
                    await self._store_call(self.store.adjust_resources(province_id, amounts, reason=f"refund {reason}"))
                except Exception:
                    logger.exception("Refund of %s to %s failed (%s)", amounts, province_id, reason)
            raise

    async def _build(
        self,
        province: ProvinceSnapshot,
        governor: Governor,
        decision: GovernorDecision,
        now: datetime,
    ) -> Optional[str]:
        building_type = decision.action.building_type
        level = province.building_level(building_type)
        upgrade = self.catalog.upgrade_cost(building_type, level)
        if any(province.resource(r) < amount for r, amount in upgrade.cost.items()):
            return None

        task = ConstructionTask(
            province_id=province.id,
            building_type=building_type,
            target_level=level + 1,
            started_at=now,
            finishes_at=now + timedelta(hours=upgrade.time_hours),
            started_by=governor.id,
        )
        await self._charge_and_record(
            {province.id: dict(upgrade.cost)},
            f"build {building_type} {level + 1}",
            lambda: self.store.create_construction_task(task),
        )
        await self._progress_governor(province.id, governor, decision, self.rng.randint(1, 5))

        message = f"{governor.name} ({province.name}): started building {building_type.lower()} level {level + 1}"
        logger.info("%s", message)
        return message

    async def _research(
        self,
        province: ProvinceSnapshot,
        empire: EmpireSnapshot,
        governor: Governor,
        decision: GovernorDecision,
        now: datetime,
    ) -> Optional[str]:
        tech = self.catalog.get_technology(decision.action.tech_key)
        if empire.is_researching(tech.key):
            return None

        task = ResearchTask(
            city_id=empire.city_id,
            tech_key=tech.key,
            started_at=now,
            finishes_at=now + timedelta(hours=tech.research_time),
            started_by=governor.id,
        )
        await self._charge_and_record(
            plan_empire_deduction(empire, tech.cost),
            f"research {tech.key}",
            lambda: self.store.create_research_task(task),
        )
        await self._progress_governor(province.id, governor, decision, self.rng.randint(2, 4))

        message = f"{governor.name} ({province.name}): started research {tech.name}"
        logger.info("%s", message)
        return message
