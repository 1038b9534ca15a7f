"""Eligibility gate - cooldown and concurrency admission control.

These checks are read-then-act; the store's conditional inserts are what
actually hold the per-province ceilings under concurrent writers.
"""

from __future__ import annotations
import asyncio
import logging
from datetime import datetime
from typing import Awaitable, Optional, TypeVar

from empire_sim.config import SimulationConfig
from empire_sim.store.base import SimulationStore


logger = logging.getLogger(__name__)

T = TypeVar("T")

RAID_CEILING = 1


async def _query(call: Awaitable[T], timeout: Optional[float]) -> T:
    if timeout is None:
        return await call
    return await asyncio.wait_for(call, timeout=timeout)


async def is_province_eligible_for_event(
    store: SimulationStore,
    province_id: str,
    config: SimulationConfig,
    now: datetime,
    timeout: Optional[float] = None,
) -> bool:
    """False while the province is at its event ceiling or inside the cooldown.

    ``timeout`` bounds each store query separately.
    """
    unresolved = await _query(store.count_unresolved_events(province_id), timeout)
    if unresolved >= config.max_concurrent_events:
        return False
    recent = await _query(store.count_events_since(province_id, now - config.event_cooldown), timeout)
    return recent == 0


async def is_province_eligible_for_raid(
    store: SimulationStore,
    province_id: str,
    config: SimulationConfig,
    now: datetime,
    timeout: Optional[float] = None,
) -> bool:
    """Any unresolved raid blocks a new one, as does a raid within the cooldown."""
    unresolved = await _query(store.count_unresolved_raids(province_id), timeout)
    if unresolved >= RAID_CEILING:
        return False
    recent = await _query(store.count_raids_since(province_id, now - config.raid_cooldown), timeout)
    return recent == 0


async def get_eligible_provinces(
    store: SimulationStore,
    config: SimulationConfig,
    now: datetime,
    user_id: Optional[str] = None,
    timeout: Optional[float] = None,
) -> list[str]:
    """Ids of provinces (optionally one user's) that may receive an event now.

    A province whose counts cannot be read is logged and left out; the
    rest are still checked.
    """
    eligible: list[str] = []
    for province_id in await _query(store.list_province_ids(user_id), timeout):
        try:
            ok = await is_province_eligible_for_event(store, province_id, config, now, timeout)
        except Exception:
            logger.exception("Could not check eligibility of province %s", province_id)
            continue
        if ok:
            eligible.append(province_id)
        else:
            logger.debug("Province %s not eligible for events", province_id)
    return eligible
