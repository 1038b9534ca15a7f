"""Event selector - catalog filtering and roulette-wheel selection."""

from __future__ import annotations
import random
from datetime import datetime, timedelta
from typing import Callable, Optional, Sequence, TypeVar

from empire_sim.catalogs import Catalog, default_catalog
from empire_sim.errors import ChoiceRequirementsError, InvalidChoiceError
from empire_sim.models.combat import EnemyForce
from empire_sim.models.events import (
    ChoiceOutcome,
    EventChoice,
    EventInstance,
    GameEvent,
    ImpactType,
    Rarity,
    Requirements,
)
from empire_sim.models.province import EmpireSnapshot, ProvinceSnapshot


T = TypeVar("T")

DEFAULT_EXPIRY_HOURS = 24
ENEMY_RESOURCE_AFFINITY = 500


def weighted_choice(
    items: Sequence[T],
    weight_of: Callable[[T], float],
    rng: Optional[random.Random] = None,
) -> Optional[T]:
    """Roulette-wheel selection.

    One uniform draw in [0, total); walk the items subtracting weights
    until the remainder is <= 0. None for an empty list or zero total.
    """
    if not items:
        return None
    weights = [max(0.0, weight_of(item)) for item in items]
    total = sum(weights)
    if total <= 0:
        return None

    rng = rng or random.Random()
    remaining = rng.random() * total
    for item, weight in zip(items, weights):
        if weight <= 0:
            continue
        remaining -= weight
        if remaining <= 0:
            return item

    # Float rounding can leave a sliver; the last weighted item absorbs it
    for item, weight in zip(reversed(items), reversed(weights)):
        if weight > 0:
            return item
    return None


# ------------------------------------------------------------------
# Events
# ------------------------------------------------------------------

def meets_requirements(province: ProvinceSnapshot, requirements: Optional[Requirements]) -> bool:
    """Minimum building levels and resource stock."""
    if requirements is None:
        return True
    for building_type, min_level in requirements.min_buildings.items():
        if province.building_level(building_type) < min_level:
            return False
    for resource, min_amount in requirements.min_resources.items():
        if province.resource(resource) < min_amount:
            return False
    return True


def is_event_eligible(event: GameEvent, province: ProvinceSnapshot, empire: EmpireSnapshot) -> bool:
    req = event.requirements
    if req is None:
        return True
    if req.min_provinces is not None and empire.total_provinces < req.min_provinces:
        return False
    if not meets_requirements(province, req):
        return False
    if req.governor_personality is not None:
        if province.governor is None:
            return False
        if province.governor.personality.value not in req.governor_personality:
            return False
    return True


def get_eligible_events(
    province: ProvinceSnapshot,
    empire: EmpireSnapshot,
    catalog: Optional[Catalog] = None,
) -> list[GameEvent]:
    """Catalog events whose requirements this province satisfies."""
    catalog = catalog or default_catalog()
    return [e for e in catalog.events.values() if is_event_eligible(e, province, empire)]


def select_random_event(
    eligible: Sequence[GameEvent],
    rng: Optional[random.Random] = None,
    rarity_weights: Optional[dict[Rarity, float]] = None,
) -> Optional[GameEvent]:
    """Pick one event, weighted by ``weight x rarity multiplier``."""
    multipliers = rarity_weights if rarity_weights is not None else default_catalog().rarity_weights
    return weighted_choice(eligible, lambda e: e.weight * multipliers.get(e.rarity, 1.0), rng)


# ------------------------------------------------------------------
# Enemies
# ------------------------------------------------------------------

def is_enemy_eligible(enemy: EnemyForce, province: ProvinceSnapshot, season: Optional[int] = None) -> bool:
    if province.level < enemy.min_province_level:
        return False
    req = enemy.requirements
    if req is None:
        return True
    if req.min_threat is not None and province.threat < req.min_threat:
        return False
    if req.max_threat is not None and province.threat > req.max_threat:
        return False
    if req.near_resources:
        if not any(province.resource(r) > ENEMY_RESOURCE_AFFINITY for r in req.near_resources):
            return False
    if season is not None and req.seasonality is not None and req.seasonality != season:
        return False
    return True


def get_eligible_enemies(
    province: ProvinceSnapshot,
    catalog: Optional[Catalog] = None,
    season: Optional[int] = None,
) -> list[EnemyForce]:
    """Enemies that would plausibly raid this province."""
    catalog = catalog or default_catalog()
    return [e for e in catalog.enemies.values() if is_enemy_eligible(e, province, season)]


def select_random_enemy(
    eligible: Sequence[EnemyForce],
    rng: Optional[random.Random] = None,
) -> Optional[EnemyForce]:
    return weighted_choice(eligible, lambda e: e.spawn_weight, rng)


# ------------------------------------------------------------------
# Choices and instances
# ------------------------------------------------------------------

def _get_choice(choice_id: str, event: GameEvent) -> EventChoice:
    choice = event.get_choice(choice_id)
    if choice is None:
        raise InvalidChoiceError(choice_id, event.id)
    return choice


def can_afford_choice(choice_id: str, event: GameEvent, resources: dict[str, int]) -> dict[str, int]:
    """Shortfall per resource for a choice's cost. Empty means affordable."""
    choice = _get_choice(choice_id, event)
    missing: dict[str, int] = {}
    for resource, cost in choice.cost.items():
        available = resources.get(resource.lower(), 0)
        if available < cost:
            missing[resource.lower()] = cost - available
    return missing


def process_event_choice(
    choice_id: str,
    event: GameEvent,
    province: ProvinceSnapshot,
    rng: Optional[random.Random] = None,
) -> ChoiceOutcome:
    """Work out what a choice does to a province without applying it.

    Cost (negative) and outcome grant (positive) are merged per resource.
    The follow-up flag is a Bernoulli draw against the outcome's chance.
    """
    choice = _get_choice(choice_id, event)
    if not meets_requirements(province, choice.requirements):
        raise ChoiceRequirementsError(choice_id, event.id)
    outcome = choice.outcome
    rng = rng or random.Random()

    changes: dict[str, int] = {}
    for resource, cost in choice.cost.items():
        key = resource.lower()
        changes[key] = changes.get(key, 0) - cost
    for resource, gain in outcome.resources.items():
        key = resource.lower()
        changes[key] = changes.get(key, 0) + gain

    schedule_followup = outcome.followup_event_chance > 0 and rng.random() < outcome.followup_event_chance

    duration = None
    if outcome.temporary_effect is not None:
        duration = event.duration_hours or DEFAULT_EXPIRY_HOURS

    return ChoiceOutcome(
        resource_changes={k: v for k, v in changes.items() if v != 0},
        governor_loyalty_change=outcome.governor_loyalty,
        governor_xp_gain=outcome.governor_xp,
        message=outcome.message,
        schedule_followup=schedule_followup,
        temporary_effect=outcome.temporary_effect,
        duration_hours=duration,
    )


def create_event_instance(
    event: GameEvent,
    province_id: str,
    now: Optional[datetime] = None,
    expiry_hours: int = DEFAULT_EXPIRY_HOURS,
) -> EventInstance:
    """Build the record for a new event occurrence.

    IMMEDIATE events are created already resolved with no expiry;
    DELAYED events expire ``expiry_hours`` after triggering.
    """
    now = now or datetime.now()
    immediate = event.impact_type == ImpactType.IMMEDIATE
    return EventInstance(
        province_id=province_id,
        event_key=event.id,
        type=event.type,
        rarity=event.rarity,
        title=event.title,
        description=event.description,
        image_icon=event.image_icon,
        triggered_at=now,
        expires_at=None if immediate else now + timedelta(hours=expiry_hours),
        resolved=immediate,
        resolved_at=now if immediate else None,
    )
