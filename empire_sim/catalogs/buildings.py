"""Default building and technology catalogs, plus upgrade cost scaling."""

from __future__ import annotations
import math
from typing import Optional
from pydantic import BaseModel, Field

from empire_sim.errors import InvalidInputError, UnknownCatalogEntryError


class BuildingRequirements(BaseModel):
    """Prerequisites for constructing a building."""
    min_level: Optional[int] = None  # minimum province level
    required_buildings: dict[str, int] = Field(default_factory=dict)
    required_tech: list[str] = Field(default_factory=list)


class BuildingData(BaseModel):
    """Base (level 1) cost and build time of a building type."""
    type: str
    build_time: float = Field(gt=0, description="Hours for level 1")
    cost: dict[str, int]
    requirements: Optional[BuildingRequirements] = None


class TechnologyData(BaseModel):
    """A node in the technology tree."""
    key: str
    name: str
    description: str = ""
    tier: int = 1
    category: str = "ECONOMY"
    research_time: float = Field(gt=0, description="Hours")
    cost: dict[str, int]
    prerequisites: list[str] = Field(default_factory=list)
    modifiers: dict[str, float] = Field(default_factory=dict)


class UpgradeCost(BaseModel):
    """Cost and duration of moving a building up one level."""
    time_hours: float
    cost: dict[str, int]


BUILDING_DATA: dict[str, BuildingData] = {
    "FARM": BuildingData(type="FARM", build_time=0.5, cost={"gold": 100, "stone": 50}),
    "MINE": BuildingData(type="MINE", build_time=1, cost={"gold": 150, "stone": 100}),
    "QUARRY": BuildingData(type="QUARRY", build_time=1, cost={"gold": 120, "food": 50}),
    "BARRACKS": BuildingData(
        type="BARRACKS",
        build_time=2,
        cost={"gold": 200, "stone": 150, "iron": 50},
        requirements=BuildingRequirements(min_level=1),
    ),
    "MARKETPLACE": BuildingData(
        type="MARKETPLACE",
        build_time=3,
        cost={"gold": 300, "stone": 200, "iron": 100},
        requirements=BuildingRequirements(min_level=2),
    ),
    "ACADEMY": BuildingData(
        type="ACADEMY",
        build_time=4,
        cost={"gold": 500, "stone": 300, "iron": 200},
        requirements=BuildingRequirements(min_level=3, required_buildings={"MARKETPLACE": 1}),
    ),
    # Fortifications, used by the defense calculation
    "WALLS": BuildingData(
        type="WALLS",
        build_time=3,
        cost={"gold": 250, "stone": 400},
        requirements=BuildingRequirements(min_level=2),
    ),
    "WATCHTOWER": BuildingData(type="WATCHTOWER", build_time=1.5, cost={"gold": 150, "stone": 150}),
    "SMITHY": BuildingData(
        type="SMITHY",
        build_time=2,
        cost={"gold": 200, "stone": 100, "iron": 150},
        requirements=BuildingRequirements(required_buildings={"BARRACKS": 1}),
    ),
    "STABLE": BuildingData(
        type="STABLE",
        build_time=2.5,
        cost={"gold": 250, "food": 200, "stone": 100},
        requirements=BuildingRequirements(min_level=2, required_buildings={"BARRACKS": 1}),
    ),
}


TECHNOLOGY_DATA: dict[str, TechnologyData] = {
    "AGRICULTURE_1": TechnologyData(
        key="AGRICULTURE_1",
        name="Agricultural Techniques",
        description="Improved farming methods increase food production by 25%",
        research_time=2,
        cost={"gold": 200, "influence": 10},
        modifiers={"food_production": 1.25},
    ),
    "MINING_1": TechnologyData(
        key="MINING_1",
        name="Mining Techniques",
        description="Better mining tools increase gold and iron production by 20%",
        research_time=3,
        cost={"gold": 300, "stone": 100, "influence": 15},
        modifiers={"gold_production": 1.2, "iron_production": 1.2},
    ),
    "CONSTRUCTION_1": TechnologyData(
        key="CONSTRUCTION_1",
        name="Advanced Construction",
        description="Reduces building construction time by 25%",
        category="INFRASTRUCTURE",
        research_time=4,
        cost={"gold": 400, "stone": 200, "influence": 20},
        modifiers={"construction_speed": 1.33},
    ),
    "MILITARY_1": TechnologyData(
        key="MILITARY_1",
        name="Military Organization",
        description="Improves troop efficiency and influence generation",
        category="MILITARY",
        research_time=5,
        cost={"gold": 500, "iron": 150, "influence": 25},
        prerequisites=["CONSTRUCTION_1"],
        modifiers={"influence_production": 1.3},
    ),
    "TRADE_1": TechnologyData(
        key="TRADE_1",
        name="Trade Networks",
        description="Establishes trade routes, boosting gold production by 40%",
        research_time=6,
        cost={"gold": 600, "influence": 30},
        prerequisites=["MINING_1"],
        modifiers={"gold_production": 1.4},
    ),
    "AGRICULTURE_2": TechnologyData(
        key="AGRICULTURE_2",
        name="Crop Rotation",
        description="Advanced farming techniques increase food production by 50%",
        tier=2,
        research_time=8,
        cost={"gold": 800, "food": 200, "influence": 40},
        prerequisites=["AGRICULTURE_1"],
        modifiers={"food_production": 1.5},
    ),
    "MINING_2": TechnologyData(
        key="MINING_2",
        name="Industrial Mining",
        description="Advanced extraction methods boost mining output significantly",
        tier=2,
        research_time=10,
        cost={"gold": 1200, "stone": 400, "iron": 200, "influence": 50},
        prerequisites=["MINING_1"],
        modifiers={"gold_production": 1.6, "iron_production": 1.6},
    ),
    "ENGINEERING": TechnologyData(
        key="ENGINEERING",
        name="Engineering",
        description="Advanced construction techniques and fortifications",
        tier=2,
        category="INFRASTRUCTURE",
        research_time=12,
        cost={"gold": 1000, "stone": 500, "influence": 60},
        prerequisites=["CONSTRUCTION_1"],
        modifiers={"construction_speed": 1.4},
    ),
}


# (levels in band, cost growth, time growth); the last band is open-ended
_SCALING_BANDS: list[tuple[int, float, float]] = [
    (5, 1.3, 1.1),
    (5, 1.4, 1.15),
    (5, 1.6, 1.2),
    (5, 2.0, 1.4),
    (0, 2.5, 1.8),
]


def _scaling_multipliers(current_level: int) -> tuple[float, float]:
    """Cost and time multipliers for upgrading from current_level."""
    cost_multiplier = 1.0
    time_multiplier = 1.0
    remaining = current_level
    for band_size, cost_growth, time_growth in _SCALING_BANDS:
        steps = remaining if band_size == 0 else min(remaining, band_size)
        cost_multiplier *= cost_growth ** steps
        time_multiplier *= time_growth ** steps
        remaining -= steps
        if remaining <= 0:
            break
    return cost_multiplier, time_multiplier


def get_building_upgrade_cost(
    building_type: str,
    current_level: int,
    buildings: Optional[dict[str, BuildingData]] = None,
) -> UpgradeCost:
    """Cost and build time to go from current_level to current_level + 1.

    Costs grow by 1.3x per level for levels 1-5, then 1.4x, 1.6x, 2.0x per
    band of five levels, and 2.5x past level 20. Times grow far more gently.
    """
    table = BUILDING_DATA if buildings is None else buildings
    base = table.get(building_type)
    if base is None:
        raise UnknownCatalogEntryError("building type", building_type)
    if current_level < 0:
        raise InvalidInputError(f"Building level cannot be negative: {current_level}")

    cost_multiplier, time_multiplier = _scaling_multipliers(current_level)
    # round away float noise before taking the ceiling
    cost = {resource: math.ceil(round(amount * cost_multiplier, 6)) for resource, amount in base.cost.items()}
    return UpgradeCost(time_hours=base.build_time * time_multiplier, cost=cost)
