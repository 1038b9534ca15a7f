"""Shared fixtures for the simulation core tests."""

import random
from datetime import datetime, timedelta

import pytest

from empire_sim.catalogs import Catalog, default_catalog
from empire_sim.config import SimulationConfig
from empire_sim.models import (
    Building,
    CombatOutcome,
    CombatResult,
    EnemyForce,
    EventInstance,
    RaidEvent,
    EnemyRequirements,
    EnemyType,
    EventChoice,
    EventOutcome,
    EventType,
    GameEvent,
    Governor,
    ImpactType,
    Personality,
    ProvinceSnapshot,
    Rarity,
)
from empire_sim.store import InMemoryStore
from empire_sim.systems import FixedClock


class ScriptedRandom(random.Random):
    """random() replays a fixed sequence, then returns ``default``.

    Integer draws (randint/randrange) still come from the seeded generator.
    """

    def __init__(self, values=(), default=0.5, seed=0):
        super().__init__(seed)
        self.values = list(values)
        self.default = default
        self.calls = 0

    def random(self):
        self.calls += 1
        if self.values:
            return self.values.pop(0)
        return self.default

    # keeps randint/randrange on getrandbits instead of random()
    def getrandbits(self, k):
        return super().getrandbits(k)


@pytest.fixture
def now() -> datetime:
    return datetime(2026, 3, 1, 12, 0, 0)


@pytest.fixture
def clock(now) -> FixedClock:
    return FixedClock(now)


@pytest.fixture
def catalog() -> Catalog:
    return default_catalog()


@pytest.fixture
def config() -> SimulationConfig:
    return SimulationConfig()


@pytest.fixture
def conservative_province() -> ProvinceSnapshot:
    """Level 1, threat 10, barracks 1, population 50, a loyal conservative governor."""
    return ProvinceSnapshot(
        id="prov-1",
        name="Ashford",
        level=1,
        threat=10,
        buildings=[Building(type="BARRACKS", level=1), Building(type="WALLS", level=0)],
        resources={"population": 50},
        governor=Governor(id="gov-1", name="Edda", personality=Personality.CONSERVATIVE, loyalty=75, xp=0),
    )


@pytest.fixture
def scouts(catalog) -> EnemyForce:
    return catalog.get_enemy("BARBARIAN_SCOUTS")


@pytest.fixture
def small_catalog() -> Catalog:
    """One delayed event and one low-level enemy, for predictable scheduling."""
    event = GameEvent(
        id="HARVEST_FESTIVAL",
        type=EventType.DISCOVERY,
        title="Harvest Festival",
        description="The villages celebrate a bountiful season.",
        rarity=Rarity.COMMON,
        impact_type=ImpactType.DELAYED,
        weight=10,
        choices=[
            EventChoice(
                id="celebrate",
                text="Join the celebration",
                cost={"gold": 50},
                outcome=EventOutcome(resources={"influence": 20}, governor_loyalty=3, message="The people cheer."),
            ),
        ],
    )
    enemy = EnemyForce(
        id="HILL_RAIDERS",
        type=EnemyType.BANDIT,
        name="Hill Raiders",
        strength=30,
        toughness=30,
        speed=50,
        cunning=40,
        threat_level=3,
        min_province_level=1,
        victory_rewards={"gold": 100},
        defeat_penalties={"gold": -100},
        spawn_weight=10,
        requirements=EnemyRequirements(min_threat=0),
    )
    return Catalog(events={event.id: event}, enemies={enemy.id: enemy})


def make_province(province_id: str, name: str = "", city_id: str = "city-1", **kwargs) -> ProvinceSnapshot:
    return ProvinceSnapshot(id=province_id, name=name or province_id.title(), city_id=city_id, **kwargs)


def event_at(province_id: str, when: datetime, resolved: bool = False, event_key: str = "FERTILE_SOIL") -> EventInstance:
    return EventInstance(
        province_id=province_id,
        event_key=event_key,
        type=EventType.DISCOVERY,
        rarity=Rarity.COMMON,
        title=event_key.replace("_", " ").title(),
        description="",
        triggered_at=when,
        expires_at=None if resolved else when + timedelta(hours=24),
        resolved=resolved,
        resolved_at=when if resolved else None,
    )


def raid_at(province_id: str, when: datetime, enemy_id: str = "WOLF_PACK") -> RaidEvent:
    return RaidEvent(
        province_id=province_id,
        enemy_id=enemy_id,
        enemy_type=EnemyType.BEAST,
        enemy_name="Wolf Pack",
        enemy_strength=40,
        enemy_threat_level=3,
        detected_at=when,
        arrival_time=when + timedelta(minutes=15),
        preparation_minutes=15,
    )


def finished_result() -> CombatResult:
    return CombatResult(
        outcome=CombatOutcome.VICTORY,
        victory_certainty=0.8,
        defense_score=1.4,
        defender_casualties=1,
        enemy_casualties=10,
        infrastructure_damage=0,
        battle_report="The wolves fled.",
    )


@pytest.fixture
def store() -> InMemoryStore:
    """Two provinces in one city owned by user-1."""
    store = InMemoryStore()
    store.add_province(make_province("alpha", resources={"gold": 500, "food": 300}), user_id="user-1")
    store.add_province(make_province("beta", resources={"gold": 200}), user_id="user-1")
    return store
