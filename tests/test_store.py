"""Tests for the in-memory store."""

import asyncio
import json
from datetime import timedelta

import pytest
from pydantic import ValidationError

from empire_sim.errors import (
    AlreadyResolvedError,
    ConcurrencyConflictError,
    EntityNotFoundError,
    InsufficientResourcesError,
    InvalidInputError,
)
from empire_sim.models import (
    ConstructionTask,
    EffectType,
    Governor,
    Personality,
    ResearchTask,
    TemporaryEffect,
)
from empire_sim.store import AUTO_EXPIRED, InMemoryStore, SimulationStore

from conftest import event_at, finished_result, make_province, raid_at


class TestReads:

    def test_satisfies_protocol(self, store):
        assert isinstance(store, SimulationStore)

    def test_missing_entities(self, store):
        with pytest.raises(EntityNotFoundError):
            asyncio.run(store.get_province("nowhere"))
        with pytest.raises(EntityNotFoundError):
            asyncio.run(store.get_empire("no-city"))
        with pytest.raises(EntityNotFoundError):
            asyncio.run(store.get_raid("no-raid"))

    def test_reads_are_copies(self, store):
        async def scenario():
            province = await store.get_province("alpha")
            province.resources["gold"] = 0
            return await store.get_province("alpha")

        assert asyncio.run(scenario()).resources["gold"] == 500

    def test_empire_totals(self, store):
        empire = asyncio.run(store.get_empire("city-1"))
        assert empire.total_provinces == 2
        assert empire.total_resources == {"gold": 700, "food": 300}
        assert empire.user_id == "user-1"


class TestAdjustResources:

    def test_applies_and_records(self, store):
        updated = asyncio.run(store.adjust_resources("alpha", {"gold": -100, "stone": 40}, reason="test"))
        assert updated == {"gold": 400, "food": 300, "stone": 40}
        assert store.ledger[-1].changes == {"gold": -100, "stone": 40}
        assert store.ledger[-1].reason == "test"

    def test_rejects_overdraw_without_mutation(self, store):
        with pytest.raises(InsufficientResourcesError) as exc_info:
            asyncio.run(store.adjust_resources("alpha", {"gold": -100, "food": -400}))
        assert exc_info.value.missing == {"food": 100}
        assert asyncio.run(store.get_province("alpha")).resources == {"gold": 500, "food": 300}
        assert store.ledger == []

    def test_clamped_adjustment_cuts_losses(self, store):
        applied = asyncio.run(store.adjust_resources_clamped(
            "alpha", {"GOLD": -800, "food": -100, "iron": -5, "stone": 25}, reason="raid",
        ))
        assert applied == {"gold": -500, "food": -100, "stone": 25}
        assert asyncio.run(store.get_province("alpha")).resources == {"gold": 0, "food": 200, "stone": 25}
        assert store.ledger[-1].changes == applied

    def test_clamped_adjustment_with_nothing_to_take(self, store):
        assert asyncio.run(store.adjust_resources_clamped("beta", {"iron": -50})) == {}
        assert store.ledger == []


class TestConditionalInserts:

    def test_event_ceiling(self, store, now):
        async def scenario():
            await store.create_event_instance(event_at("alpha", now))
            await store.create_event_instance(event_at("alpha", now))

        with pytest.raises(ConcurrencyConflictError):
            asyncio.run(scenario())
        assert asyncio.run(store.count_unresolved_events("alpha")) == 1

    def test_resolved_instances_bypass_ceiling(self, store, now):
        async def scenario():
            await store.create_event_instance(event_at("alpha", now))
            await store.create_event_instance(event_at("alpha", now, resolved=True))
            return len(await store.list_event_instances("alpha"))

        assert asyncio.run(scenario()) == 2

    def test_one_unresolved_raid(self, store, now):
        async def scenario():
            await store.create_raid(raid_at("alpha", now))
            await store.create_raid(raid_at("alpha", now))

        with pytest.raises(ConcurrencyConflictError):
            asyncio.run(scenario())

    def test_concurrent_inserts_admit_one(self, store, now):
        async def scenario():
            results = await asyncio.gather(
                *(store.create_event_instance(event_at("beta", now)) for _ in range(5)),
                return_exceptions=True,
            )
            return results

        results = asyncio.run(scenario())
        assert sum(1 for r in results if isinstance(r, ConcurrencyConflictError)) == 4
        assert asyncio.run(store.count_unresolved_events("beta")) == 1

    def test_resolution_is_final(self, store, now):
        async def scenario():
            instance = await store.create_event_instance(event_at("alpha", now))
            await store.resolve_event_instance(instance.id, "plant_crops", now)
            await store.resolve_event_instance(instance.id, "plant_crops", now)

        with pytest.raises(AlreadyResolvedError):
            asyncio.run(scenario())

    def test_raid_resolution_is_final(self, store, now):
        async def scenario():
            raid = await store.create_raid(raid_at("alpha", now))
            resolved = await store.resolve_raid(raid.id, finished_result(), now, strategy="auto_defend")
            assert resolved.resolved and resolved.strategy == "auto_defend"
            await store.resolve_raid(raid.id, finished_result(), now)

        with pytest.raises(AlreadyResolvedError):
            asyncio.run(scenario())


class TestGovernors:

    def test_personality_cannot_change(self, store):
        governor = Governor(id="g1", name="Mira", personality=Personality.MERCHANT)

        async def scenario():
            await store.update_governor("alpha", governor)
            turncoat = Governor(id="g1", name="Mira", personality=Personality.AGGRESSIVE)
            await store.update_governor("alpha", turncoat)

        with pytest.raises(InvalidInputError):
            asyncio.run(scenario())
        assert asyncio.run(store.get_province("alpha")).governor.personality == Personality.MERCHANT

    def test_personality_field_is_frozen(self):
        governor = Governor(name="Mira", personality=Personality.MERCHANT)
        with pytest.raises(ValidationError):
            governor.personality = Personality.EXPLORER


class TestHousekeeping:

    def test_expire_events(self, store, now):
        async def scenario():
            instance = event_at("alpha", now - timedelta(hours=30))
            await store.create_event_instance(instance)
            expired = await store.expire_events(now)
            return expired, await store.get_event_instance(instance.id)

        expired, instance = asyncio.run(scenario())
        assert expired == 1
        assert instance.resolved
        assert instance.choice_id == AUTO_EXPIRED

    def test_purge_resolved_events(self, store, now):
        async def scenario():
            await store.create_event_instance(event_at("alpha", now - timedelta(days=8), resolved=True))
            await store.create_event_instance(event_at("beta", now - timedelta(days=1), resolved=True))
            purged = await store.purge_resolved_events(now - timedelta(days=7))
            return purged, await store.list_event_instances()

        purged, remaining = asyncio.run(scenario())
        assert purged == 1
        assert [e.province_id for e in remaining] == ["beta"]

    def test_purge_expired_effects(self, store, now):
        async def scenario():
            for hours in (-1, 5):
                await store.add_temporary_effect(TemporaryEffect(
                    province_id="alpha",
                    event_instance_id="evt",
                    type=EffectType.PRODUCTION_BONUS,
                    modifiers={"food_production": 1.25},
                    expires_at=now + timedelta(hours=hours),
                ))
            purged = await store.purge_expired_effects(now)
            return purged, await store.list_temporary_effects("alpha")

        purged, remaining = asyncio.run(scenario())
        assert purged == 1
        assert len(remaining) == 1

    def test_complete_due_tasks(self, store, now):
        async def scenario():
            await store.create_construction_task(ConstructionTask(
                province_id="alpha", building_type="FARM", target_level=1,
                started_at=now - timedelta(hours=1), finishes_at=now - timedelta(minutes=1),
            ))
            await store.create_construction_task(ConstructionTask(
                province_id="beta", building_type="MINE", target_level=1,
                started_at=now, finishes_at=now + timedelta(hours=1),
            ))
            await store.create_research_task(ResearchTask(
                city_id="city-1", tech_key="AGRICULTURE_1",
                started_at=now - timedelta(hours=3), finishes_at=now,
            ))
            completed = await store.complete_due_tasks(now)
            return (
                completed,
                await store.get_province("alpha"),
                await store.get_province("beta"),
                await store.get_empire("city-1"),
            )

        completed, alpha, beta, empire = asyncio.run(scenario())
        assert completed == 2
        assert alpha.building_level("FARM") == 1
        assert alpha.active_constructions == []
        assert beta.is_under_construction("MINE")
        assert empire.has_researched("AGRICULTURE_1")
        assert empire.active_researches == []


class TestSerialization:

    def test_export_and_load(self, store, now):
        async def scenario():
            await store.create_event_instance(event_at("alpha", now))
            await store.create_raid(raid_at("beta", now))
            await store.adjust_resources("beta", {"iron": 5})

        asyncio.run(scenario())
        store.mark_researched("city-1", "MINING_1")

        restored = InMemoryStore.load(json.loads(json.dumps(store.export())))

        assert asyncio.run(restored.get_province("beta")).resources == {"gold": 200, "iron": 5}
        assert asyncio.run(restored.count_unresolved_events("alpha")) == 1
        assert asyncio.run(restored.count_unresolved_raids("beta")) == 1
        empire = asyncio.run(restored.get_empire("city-1"))
        assert empire.researched == ["MINING_1"]
        assert empire.user_id == "user-1"

    def test_seeding_helper(self):
        store = InMemoryStore()
        store.add_province(make_province("solo", city_id="c"))
        assert asyncio.run(store.list_city_ids()) == ["c"]
        assert asyncio.run(store.list_province_ids()) == ["solo"]
