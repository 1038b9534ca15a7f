"""Combat schemas - enemies, derived defenses, factors and results."""

from __future__ import annotations
from datetime import datetime
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field
import uuid


class EnemyType(str, Enum):
    """Broad families of hostile forces."""
    SCOUT = "scout"
    WARRIOR = "warrior"
    HORDE = "horde"
    BEAST = "beast"
    SPY = "spy"
    BANDIT = "bandit"
    CULTIST = "cultist"


class CombatOutcome(str, Enum):
    """How a battle ended, from the defender's side."""
    VICTORY = "VICTORY"
    DRAW = "DRAW"
    DEFEAT = "DEFEAT"


class EnemyRequirements(BaseModel):
    """Spawn conditions for an enemy force."""
    min_threat: Optional[int] = None
    max_threat: Optional[int] = None
    near_resources: list[str] = Field(default_factory=list)  # attracted by stockpiles of these
    seasonality: Optional[int] = Field(default=None, ge=0, le=3)  # season index, 0 = spring

    model_config = {"extra": "allow"}


class EnemyForce(BaseModel):
    """A catalog entry describing a hostile force."""
    id: str
    type: EnemyType
    name: str
    description: str = ""
    icon: str = ""

    # Independent 1-100 scales
    strength: int = Field(ge=1, le=100)
    toughness: int = Field(ge=1, le=100)
    speed: int = Field(ge=1, le=100)
    cunning: int = Field(ge=1, le=100)

    threat_level: int = Field(ge=1, le=10)
    min_province_level: int = Field(default=1, ge=1)

    victory_rewards: dict[str, int] = Field(default_factory=dict)
    defeat_penalties: dict[str, int] = Field(default_factory=dict)  # negative amounts

    spawn_weight: float = Field(default=1.0, ge=0)
    requirements: Optional[EnemyRequirements] = None

    model_config = {"extra": "allow"}


class DefenseForce(BaseModel):
    """Combat profile of a province, derived fresh for every battle."""
    wall_level: int = 0
    garrison_size: int = 0
    watchtowers: int = 0

    barracks_bonus: float = 0
    smithy_bonus: float = 0
    stable_bonus: float = 0

    governor_bonus: float = 0
    governor_personality: Optional[str] = None
    governor_name: Optional[str] = None
    governor_loyalty: int = 0

    militia_size: int = 0
    population_morale: float = 50

    recent_victories: int = 0
    strategic_reserves: int = 0

    model_config = {"frozen": True}


class CombatFactors(BaseModel):
    """The eleven additive sub-scores of a battle."""
    strength_ratio: float
    terrain_bonus: float
    preparation_bonus: float
    leadership_bonus: float
    morale_bonus: float
    equipment_bonus: float
    tactical_bonus: float
    confidence_bonus: float = 0.0

    # Random draws
    weather_effect: float = 0.0
    luck_factor: float = 0.0
    surprise_factor: float = 0.0

    model_config = {"frozen": True}

    def total(self) -> float:
        """Unnormalised defense score."""
        return (
            self.strength_ratio
            + self.terrain_bonus
            + self.preparation_bonus
            + self.leadership_bonus
            + self.morale_bonus
            + self.equipment_bonus
            + self.tactical_bonus
            + self.confidence_bonus
            + self.weather_effect
            + self.luck_factor
            + self.surprise_factor
        )


class CombatResult(BaseModel):
    """Everything a battle changed. Immutable once produced."""
    outcome: CombatOutcome
    victory_certainty: float = Field(ge=0, le=0.95)
    defense_score: float

    defender_casualties: int = Field(ge=0)
    enemy_casualties: int = Field(ge=0)
    infrastructure_damage: int = Field(ge=0)

    resources_gained: dict[str, int] = Field(default_factory=dict)
    resources_lost: dict[str, int] = Field(default_factory=dict)  # negative amounts

    governor_xp_gain: int = 0
    governor_loyalty_change: int = 0
    population_morale_change: int = 0

    battle_report: str

    model_config = {"frozen": True}

    def net_resource_changes(self) -> dict[str, int]:
        """Gains and losses merged per resource."""
        changes = dict(self.resources_gained)
        for resource, amount in self.resources_lost.items():
            changes[resource] = changes.get(resource, 0) + amount
        return {k: v for k, v in changes.items() if v != 0}

    def summary(self) -> str:
        return f"{self.outcome.value} (certainty {self.victory_certainty:.0%})"


class RaidEvent(BaseModel):
    """A scheduled hostile encounter against one province."""
    id: str = Field(default_factory=lambda: str(uuid.uuid4())[:8])
    province_id: str
    enemy_id: str
    enemy_type: EnemyType
    enemy_name: str
    enemy_strength: int
    enemy_threat_level: int

    detected_at: datetime = Field(default_factory=datetime.now)
    arrival_time: datetime
    preparation_minutes: int = Field(ge=0)

    resolved: bool = False
    resolved_at: Optional[datetime] = None
    strategy: Optional[str] = None
    combat_result: Optional[CombatResult] = None

    def summary(self) -> str:
        state = "resolved" if self.resolved else f"arrives {self.arrival_time:%H:%M}"
        return f"[{self.id}] {self.enemy_name} (strength {self.enemy_strength}) - {state}"
