"""Resolution steps - applying combat results and event choices to the store."""

from __future__ import annotations
import logging
import random
from datetime import timedelta
from typing import Optional

from empire_sim.catalogs import Catalog, default_catalog
from empire_sim.errors import AlreadyResolvedError, InsufficientResourcesError
from empire_sim.models.combat import RaidEvent
from empire_sim.models.events import ChoiceOutcome, EventInstance, TemporaryEffect
from empire_sim.models.province import Governor, normalize_resources
from empire_sim.store.base import SimulationStore
from empire_sim.systems.combat import resolve_combat
from empire_sim.systems.periodic import Clock, SystemClock
from empire_sim.systems.scoring import compute_defense_force
from empire_sim.systems.selection import can_afford_choice, process_event_choice


logger = logging.getLogger(__name__)

AUTO_DEFEND = "auto_defend"


async def _apply_governor_deltas(
    store: SimulationStore,
    province_id: str,
    xp_gain: int,
    loyalty_change: int,
) -> Optional[Governor]:
    """Move the province's current governor. Returns the governor as it was, or None if untouched."""
    if xp_gain == 0 and loyalty_change == 0:
        return None
    governor = (await store.get_province(province_id)).governor
    if governor is None:
        return None
    await store.update_governor(province_id, governor.with_xp_gain(xp_gain).with_loyalty_delta(loyalty_change))
    return governor


async def _revert(
    store: SimulationStore,
    province_id: str,
    written: dict[str, int],
    previous_governor: Optional[Governor],
    reason: str,
) -> None:
    """Undo writes made ahead of a resolution record that could not be saved."""
    try:
        if written:
            await store.adjust_resources_clamped(
                province_id, {r: -delta for r, delta in written.items()}, reason=f"revert {reason}",
            )
        if previous_governor is not None:
            await store.update_governor(province_id, previous_governor)
    except Exception:
        logger.exception("Could not revert %s in province %s", reason, province_id)


def _merge(*changes: dict[str, int]) -> dict[str, int]:
    merged: dict[str, int] = {}
    for change in changes:
        for resource, delta in change.items():
            merged[resource] = merged.get(resource, 0) + delta
    return {r: d for r, d in merged.items() if d != 0}


async def auto_resolve_raid(
    store: SimulationStore,
    raid_id: str,
    catalog: Optional[Catalog] = None,
    rng: Optional[random.Random] = None,
    clock: Optional[Clock] = None,
) -> RaidEvent:
    """Fight a pending raid with the province's current defenses and apply the result.

    Resource and governor changes are written before the raid is marked
    resolved. Losses are cut to the stock on hand at write time. If the
    resolution record cannot be saved, the earlier writes are reverted.
    """
    catalog = catalog or default_catalog()
    clock = clock or SystemClock()

    raid = await store.get_raid(raid_id)
    if raid.resolved:
        raise AlreadyResolvedError(f"Raid {raid_id} already resolved")
    province = await store.get_province(raid.province_id)
    enemy = catalog.get_enemy(raid.enemy_id)

    result = resolve_combat(enemy, compute_defense_force(province), rng)
    reason = f"raid {raid_id} {result.outcome.value.lower()}"

    applied: dict[str, int] = {}
    previous_governor = None
    try:
        applied = await store.adjust_resources_clamped(province.id, result.net_resource_changes(), reason=reason)
        previous_governor = await _apply_governor_deltas(
            store, province.id, result.governor_xp_gain, result.governor_loyalty_change,
        )
        resolved = await store.resolve_raid(raid_id, result, clock.now(), strategy=AUTO_DEFEND)
    except Exception:
        await _revert(store, province.id, applied, previous_governor, reason)
        raise

    logger.info("Raid %s on %s: %s", raid_id, province.name, result.summary())
    return resolved


async def resolve_event_choice(
    store: SimulationStore,
    instance_id: str,
    choice_id: str,
    catalog: Optional[Catalog] = None,
    rng: Optional[random.Random] = None,
    clock: Optional[Clock] = None,
) -> tuple[EventInstance, ChoiceOutcome]:
    """Apply a player's choice to a pending event.

    Raises InvalidChoiceError for an unknown choice, ChoiceRequirementsError
    when the province does not qualify, and InsufficientResourcesError
    (before touching anything) when the choice's cost is not covered. The
    cost is charged in full; losses in the outcome are cut to the stock on
    hand.
    """
    catalog = catalog or default_catalog()
    clock = clock or SystemClock()
    now = clock.now()

    instance = await store.get_event_instance(instance_id)
    if instance.resolved:
        raise AlreadyResolvedError(f"Event {instance_id} already resolved")
    event = catalog.get_event(instance.event_key)
    province = await store.get_province(instance.province_id)

    missing = can_afford_choice(choice_id, event, province.resources)
    if missing:
        raise InsufficientResourcesError(missing)
    outcome = process_event_choice(choice_id, event, province, rng)
    choice = event.get_choice(choice_id)
    cost = {r: -amount for r, amount in normalize_resources(choice.cost).items() if amount}
    reason = f"event {event.id}:{choice_id}"

    charged: dict[str, int] = {}
    applied: dict[str, int] = {}
    previous_governor = None
    try:
        if cost:
            await store.adjust_resources(province.id, cost, reason=reason)
            charged = cost
        applied = await store.adjust_resources_clamped(province.id, choice.outcome.resources, reason=reason)
        previous_governor = await _apply_governor_deltas(
            store, province.id, outcome.governor_xp_gain, outcome.governor_loyalty_change,
        )
        resolved = await store.resolve_event_instance(
            instance_id,
            choice_id,
            now,
            resource_changes=_merge(charged, applied),
            governor_loyalty_change=outcome.governor_loyalty_change if province.governor else 0,
            governor_xp_gained=outcome.governor_xp_gain if province.governor else 0,
            followup_scheduled=outcome.schedule_followup,
        )
    except Exception:
        await _revert(store, province.id, _merge(charged, applied), previous_governor, reason)
        raise

    if outcome.temporary_effect is not None and outcome.duration_hours:
        await store.add_temporary_effect(TemporaryEffect(
            province_id=province.id,
            event_instance_id=instance_id,
            type=outcome.temporary_effect.type,
            modifiers=dict(outcome.temporary_effect.modifiers),
            expires_at=now + timedelta(hours=outcome.duration_hours),
        ))

    logger.info("Event %s in %s resolved with %s", event.id, province.name, choice_id)
    return resolved, outcome
