"""Tests for the event scheduler loop."""

import asyncio
from datetime import timedelta

import pytest

from empire_sim.catalogs import Catalog
from empire_sim.config import SimulationConfig
from empire_sim.errors import ConcurrencyConflictError, StoreError
from empire_sim.models import EffectType, TemporaryEffect
from empire_sim.store import InMemoryStore
from empire_sim.systems import EventScheduler, FixedClock

from conftest import ScriptedRandom, event_at, make_province, raid_at


class FlakyStore(InMemoryStore):
    """Fails or stalls reads for chosen provinces."""

    def __init__(self, broken=(), slow=()):
        super().__init__()
        self.broken = set(broken)
        self.slow = set(slow)

    async def get_province(self, province_id):
        if province_id in self.broken:
            raise StoreError(f"read failed for {province_id}")
        if province_id in self.slow:
            await asyncio.sleep(1)
        return await super().get_province(province_id)


class CountFailStore(InMemoryStore):
    """Event counts fail for chosen provinces."""

    def __init__(self, broken=()):
        super().__init__()
        self.broken = set(broken)

    async def count_unresolved_events(self, province_id):
        if province_id in self.broken:
            raise StoreError(f"count failed for {province_id}")
        return await super().count_unresolved_events(province_id)


class RacingStore(InMemoryStore):
    """Every event insert loses the race."""

    async def create_event_instance(self, instance, max_unresolved=1):
        raise ConcurrencyConflictError(f"Province {instance.province_id} slot taken")


def seeded(store, *province_ids, user_id="user-1"):
    for province_id in province_ids:
        store.add_province(make_province(province_id, city_id=f"city-{province_id}"), user_id=user_id)
    return store


@pytest.fixture
def keep_store():
    return seeded(InMemoryStore(), "keep")


def scheduler(store, small_catalog, clock, draws=(), default=0.5, **config):
    return EventScheduler(
        store,
        config=SimulationConfig(**config),
        catalog=small_catalog,
        rng=ScriptedRandom(draws, default=default),
        clock=clock,
    )


class TestGeneration:

    def test_failed_draw_generates_nothing(self, keep_store, small_catalog, clock):
        report = asyncio.run(scheduler(keep_store, small_catalog, clock, [0.5]).run_cycle())
        assert report.eligible_provinces == 1
        assert report.events_generated == 0
        assert report.raids_generated == 0
        assert report.skipped == 1

    def test_generates_event(self, keep_store, small_catalog, clock, now):
        # 0.15 base chance x 0.7 dampening admits a 0.05 draw; 0.9 skips the raid
        report = asyncio.run(scheduler(keep_store, small_catalog, clock, [0.05, 0.9, 0.0]).run_cycle())
        assert report.events_generated == 1

        events = asyncio.run(keep_store.list_event_instances("keep"))
        assert len(events) == 1
        assert events[0].event_key == "HARVEST_FESTIVAL"
        assert not events[0].resolved
        assert events[0].expires_at == now + timedelta(hours=24)

    def test_generates_raid(self, keep_store, small_catalog, clock, now):
        report = asyncio.run(scheduler(keep_store, small_catalog, clock, [0.05, 0.1, 0.0]).run_cycle())
        assert report.raids_generated == 1
        assert report.events_generated == 0

        raid = asyncio.run(keep_store.list_raids("keep"))[0]
        assert raid.enemy_id == "HILL_RAIDERS"
        assert raid.detected_at == now
        assert 10 <= raid.preparation_minutes < 30
        assert raid.arrival_time == now + timedelta(minutes=raid.preparation_minutes)

    def test_closed_raid_gate_falls_back_to_event(self, keep_store, small_catalog, clock, now):
        asyncio.run(keep_store.create_raid(raid_at("keep", now - timedelta(hours=1))))
        report = asyncio.run(scheduler(keep_store, small_catalog, clock, [0.05, 0.1, 0.0]).run_cycle())
        assert report.raids_generated == 0
        assert report.events_generated == 1
        assert len(asyncio.run(keep_store.list_raids("keep"))) == 1

    def test_no_fitting_enemy_falls_back_to_event(self, keep_store, small_catalog, clock):
        raiders = small_catalog.enemies["HILL_RAIDERS"].model_copy(update={"min_province_level": 5})
        catalog = Catalog(events=small_catalog.events, enemies={raiders.id: raiders})
        report = asyncio.run(scheduler(keep_store, catalog, clock, [0.05, 0.1, 0.0]).run_cycle())
        assert report.raids_generated == 0
        assert report.events_generated == 1

    def test_ineligible_province_draws_nothing(self, keep_store, small_catalog, clock, now):
        asyncio.run(keep_store.create_event_instance(event_at("keep", now - timedelta(hours=1))))
        loop = scheduler(keep_store, small_catalog, clock, default=0.0)
        report = asyncio.run(loop.run_cycle())
        assert report.eligible_provinces == 0
        assert loop.rng.calls == 0

    def test_user_scope(self, small_catalog, clock):
        store = seeded(InMemoryStore(), "keep")
        store.add_province(make_province("tower", city_id="city-2"), user_id="user-2")
        loop = scheduler(store, small_catalog, clock, default=0.0, raid_chance=0.0)

        report = asyncio.run(loop.run_cycle(user_id="user-2"))
        assert report.eligible_provinces == 1
        assert report.events_generated == 1
        assert asyncio.run(store.list_event_instances("keep")) == []


class TestFailureIsolation:

    def test_store_error_is_counted_and_isolated(self, small_catalog, clock):
        store = seeded(FlakyStore(broken={"broken"}), "broken", "sound")
        loop = scheduler(store, small_catalog, clock, default=0.0, raid_chance=0.0)

        report = asyncio.run(loop.run_cycle())
        assert report.errors == 1
        assert report.events_generated == 1
        assert len(asyncio.run(store.list_event_instances("sound"))) == 1

    def test_slow_store_call_times_out(self, small_catalog, clock):
        store = seeded(FlakyStore(slow={"slow"}), "slow", "sound")
        loop = scheduler(store, small_catalog, clock, default=0.0, raid_chance=0.0, store_timeout_seconds=0.05)

        report = asyncio.run(loop.run_cycle())
        assert report.errors == 1
        assert report.events_generated == 1

    def test_failed_eligibility_count_is_isolated(self, small_catalog, clock):
        store = seeded(CountFailStore(broken={"broken"}), "broken", "sound")
        loop = scheduler(store, small_catalog, clock, default=0.0, raid_chance=0.0)

        report = asyncio.run(loop.run_cycle())
        assert report.errors == 1
        assert report.eligible_provinces == 1
        assert report.events_generated == 1
        assert len(asyncio.run(store.list_event_instances("sound"))) == 1
        assert asyncio.run(store.list_event_instances("broken")) == []

    def test_lost_race_counts_as_skip(self, small_catalog, clock):
        store = seeded(RacingStore(), "keep")
        loop = scheduler(store, small_catalog, clock, default=0.0, raid_chance=0.0)

        report = asyncio.run(loop.run_cycle())
        assert report.errors == 0
        assert report.skipped == 1
        assert report.events_generated == 0


class TestHousekeeping:

    def test_cycle_expires_and_purges(self, keep_store, small_catalog, clock, now):
        async def seed():
            await keep_store.create_event_instance(event_at("keep", now - timedelta(hours=30)))
            await keep_store.create_event_instance(event_at("keep", now - timedelta(days=8), resolved=True))
            await keep_store.add_temporary_effect(TemporaryEffect(
                province_id="keep",
                event_instance_id="old",
                type=EffectType.COST_REDUCTION,
                modifiers={"building_cost": 0.9},
                expires_at=now - timedelta(minutes=1),
            ))

        asyncio.run(seed())
        report = asyncio.run(scheduler(keep_store, small_catalog, clock, [0.99]).run_cycle())

        assert report.expired_events == 1
        assert report.cleaned_old_events == 1
        assert report.cleaned_effects == 1
        # the expired event no longer holds the slot
        assert report.eligible_provinces == 1
        assert report.errors == 0


class TestSchedulerLoop:

    def test_start_and_stop(self, keep_store, small_catalog):
        loop = EventScheduler(
            keep_store,
            config=SimulationConfig(check_interval_minutes=0.001),
            catalog=small_catalog,
            rng=ScriptedRandom(default=0.99),
            clock=FixedClock(),
        )

        async def scenario():
            loop.start()
            assert loop.is_running
            await asyncio.sleep(0.05)
            await loop.stop()

        asyncio.run(scenario())
        assert loop.cycles_run >= 1
        assert not loop.is_running

    def test_interval_follows_config(self, keep_store):
        loop = EventScheduler(keep_store, config=SimulationConfig(check_interval_minutes=30))
        assert loop.interval == timedelta(minutes=30)
