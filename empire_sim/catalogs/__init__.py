"""Read-only catalog tables consumed by the simulation core."""

from __future__ import annotations
from typing import Optional
from pydantic import BaseModel, Field

from empire_sim.errors import UnknownCatalogEntryError
from empire_sim.models.combat import EnemyForce
from empire_sim.models.events import GameEvent, Rarity

from .buildings import (
    BUILDING_DATA,
    TECHNOLOGY_DATA,
    BuildingData,
    BuildingRequirements,
    TechnologyData,
    UpgradeCost,
    get_building_upgrade_cost,
)
from .enemies import ENEMY_FORCES
from .events import GAME_EVENTS, RARITY_WEIGHTS


class Catalog(BaseModel):
    """The static tables one simulation run works from."""
    events: dict[str, GameEvent] = Field(default_factory=lambda: dict(GAME_EVENTS))
    enemies: dict[str, EnemyForce] = Field(default_factory=lambda: dict(ENEMY_FORCES))
    buildings: dict[str, BuildingData] = Field(default_factory=lambda: dict(BUILDING_DATA))
    technologies: dict[str, TechnologyData] = Field(default_factory=lambda: dict(TECHNOLOGY_DATA))
    rarity_weights: dict[Rarity, float] = Field(default_factory=lambda: dict(RARITY_WEIGHTS))

    def get_event(self, key: str) -> GameEvent:
        event = self.events.get(key)
        if event is None:
            raise UnknownCatalogEntryError("event", key)
        return event

    def get_enemy(self, key: str) -> EnemyForce:
        enemy = self.enemies.get(key)
        if enemy is None:
            raise UnknownCatalogEntryError("enemy", key)
        return enemy

    def get_technology(self, key: str) -> TechnologyData:
        tech = self.technologies.get(key)
        if tech is None:
            raise UnknownCatalogEntryError("technology", key)
        return tech

    def upgrade_cost(self, building_type: str, current_level: int) -> UpgradeCost:
        return get_building_upgrade_cost(building_type, current_level, self.buildings)


DEFAULT_CATALOG: Optional[Catalog] = None


def default_catalog() -> Catalog:
    """Shared catalog built from the bundled tables."""
    global DEFAULT_CATALOG
    if DEFAULT_CATALOG is None:
        DEFAULT_CATALOG = Catalog()
    return DEFAULT_CATALOG


__all__ = [
    "Catalog",
    "default_catalog",
    "BUILDING_DATA",
    "TECHNOLOGY_DATA",
    "ENEMY_FORCES",
    "GAME_EVENTS",
    "RARITY_WEIGHTS",
    "BuildingData",
    "BuildingRequirements",
    "TechnologyData",
    "UpgradeCost",
    "get_building_upgrade_cost",
]
