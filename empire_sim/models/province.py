"""Province, governor and empire snapshots - the read side of the core."""

from __future__ import annotations
from datetime import datetime
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field, field_validator
import uuid

from empire_sim.models.tasks import ConstructionTask, ResearchTask


class ResourceType(str, Enum):
    """The six stockpiled resources."""
    GOLD = "gold"
    FOOD = "food"
    STONE = "stone"
    IRON = "iron"
    POPULATION = "population"
    INFLUENCE = "influence"


class Personality(str, Enum):
    """Governor personalities. Fixed at creation."""
    AGGRESSIVE = "AGGRESSIVE"
    CONSERVATIVE = "CONSERVATIVE"
    MERCHANT = "MERCHANT"
    EXPLORER = "EXPLORER"


def normalize_resources(resources: dict[str, int]) -> dict[str, int]:
    """Lower-case resource keys, merging duplicates."""
    merged: dict[str, int] = {}
    for key, amount in resources.items():
        name = key.value if isinstance(key, ResourceType) else str(key).lower()
        merged[name] = merged.get(name, 0) + amount
    return merged


class Building(BaseModel):
    """A building type and its current level."""
    type: str
    level: int = Field(default=0, ge=0)


class Governor(BaseModel):
    """An AI administrator assigned to one province."""
    id: str = Field(default_factory=lambda: str(uuid.uuid4())[:8])
    name: str
    personality: Personality = Field(frozen=True)
    loyalty: int = Field(default=50, ge=0, le=100)
    xp: int = Field(default=0, ge=0)

    def with_loyalty_delta(self, delta: int) -> "Governor":
        """Copy with loyalty moved by delta, clamped to 0-100."""
        return self.model_copy(update={"loyalty": clamp_loyalty(self.loyalty + delta)})

    def with_xp_gain(self, gain: int) -> "Governor":
        """Copy with experience added. Experience never goes down."""
        return self.model_copy(update={"xp": self.xp + max(0, gain)})


def clamp_to_stock(changes: dict[str, int], resources: dict[str, int]) -> dict[str, int]:
    """Limit each loss to what is actually in stock. Keys are normalised first."""
    stock = normalize_resources(resources)
    clamped: dict[str, int] = {}
    for resource, delta in normalize_resources(changes).items():
        if delta < 0:
            delta = max(delta, -stock.get(resource, 0))
        if delta != 0:
            clamped[resource] = delta
    return clamped


def clamp_loyalty(value: float) -> int:
    """Clamp a loyalty value into [0, 100]."""
    return int(max(0, min(100, value)))


class ProvinceSnapshot(BaseModel):
    """Point-in-time view of one province."""
    id: str = Field(default_factory=lambda: str(uuid.uuid4())[:8])
    name: str
    city_id: str = "default"
    level: int = Field(default=1, ge=1)
    threat: int = Field(default=0, ge=0)
    buildings: list[Building] = Field(default_factory=list)
    resources: dict[str, int] = Field(default_factory=dict)
    governor: Optional[Governor] = None
    active_constructions: list[ConstructionTask] = Field(default_factory=list)

    @field_validator("resources", mode="before")
    @classmethod
    def _check_resources(cls, value: dict) -> dict[str, int]:
        resources = normalize_resources(value)
        for resource, amount in resources.items():
            if amount < 0:
                raise ValueError(f"Resource {resource} is negative: {amount}")
        return resources

    @field_validator("buildings")
    @classmethod
    def _check_buildings(cls, value: list[Building]) -> list[Building]:
        seen: set[str] = set()
        for building in value:
            if building.type in seen:
                raise ValueError(f"Duplicate building entry: {building.type}")
            seen.add(building.type)
        return value

    def building_level(self, building_type: str) -> int:
        """Level of a building type, 0 if not built."""
        for building in self.buildings:
            if building.type == building_type:
                return building.level
        return 0

    def resource(self, resource: str) -> int:
        """Amount of a resource, 0 if absent."""
        return self.resources.get(resource.lower(), 0)

    def is_under_construction(self, building_type: str) -> bool:
        """Whether a pending construction exists for this building type."""
        return any(c.building_type == building_type for c in self.active_constructions)


class EmpireSnapshot(BaseModel):
    """Aggregate view of all provinces owned by one city/player."""
    city_id: str = "default"
    user_id: Optional[str] = None
    provinces: list[ProvinceSnapshot] = Field(default_factory=list)
    total_resources: dict[str, int] = Field(default_factory=dict)
    total_provinces: int = Field(default=0, ge=0)
    active_researches: list[ResearchTask] = Field(default_factory=list)
    researched: list[str] = Field(default_factory=list, description="Completed technology keys")

    @classmethod
    def from_provinces(
        cls,
        provinces: list[ProvinceSnapshot],
        city_id: str = "default",
        user_id: Optional[str] = None,
        active_researches: Optional[list[ResearchTask]] = None,
        researched: Optional[list[str]] = None,
    ) -> "EmpireSnapshot":
        """Build an empire snapshot, summing resources across provinces."""
        totals: dict[str, int] = {}
        for province in provinces:
            for resource, amount in province.resources.items():
                totals[resource] = totals.get(resource, 0) + amount
        return cls(
            city_id=city_id,
            user_id=user_id,
            provinces=list(provinces),
            total_resources=totals,
            total_provinces=len(provinces),
            active_researches=active_researches or [],
            researched=researched or [],
        )

    def is_researching(self, tech_key: str) -> bool:
        return any(r.tech_key == tech_key for r in self.active_researches)

    def has_researched(self, tech_key: str) -> bool:
        return tech_key in self.researched


class ResourceLedgerEntry(BaseModel):
    """A resource adjustment recorded by a store."""
    province_id: str
    changes: dict[str, int]
    reason: str = ""
    timestamp: datetime = Field(default_factory=datetime.now)
