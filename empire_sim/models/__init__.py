"""Pydantic data models for provinces, combat, events and tasks."""

from .tasks import ConstructionTask, ResearchTask, TaskStatus, GovernorDecision, DecisionType, DecisionAction
from .province import (
    ResourceType,
    Personality,
    Building,
    Governor,
    ProvinceSnapshot,
    EmpireSnapshot,
    ResourceLedgerEntry,
    clamp_loyalty,
    clamp_to_stock,
)
from .combat import EnemyType, EnemyForce, EnemyRequirements, DefenseForce, CombatFactors, CombatOutcome, CombatResult, RaidEvent
from .events import (
    EventType,
    Rarity,
    ImpactType,
    EffectType,
    Requirements,
    EventRequirements,
    EventChoice,
    EventOutcome,
    GameEvent,
    EventInstance,
    TemporaryEffect,
    TemporaryEffectTemplate,
    ChoiceOutcome,
)

__all__ = [
    "ConstructionTask",
    "ResearchTask",
    "TaskStatus",
    "GovernorDecision",
    "DecisionType",
    "DecisionAction",
    "ResourceType",
    "Personality",
    "Building",
    "Governor",
    "ProvinceSnapshot",
    "EmpireSnapshot",
    "ResourceLedgerEntry",
    "clamp_loyalty",
    "clamp_to_stock",
    "EnemyType",
    "EnemyForce",
    "EnemyRequirements",
    "DefenseForce",
    "CombatFactors",
    "CombatOutcome",
    "CombatResult",
    "RaidEvent",
    "EventType",
    "Rarity",
    "ImpactType",
    "EffectType",
    "Requirements",
    "EventRequirements",
    "EventChoice",
    "EventOutcome",
    "GameEvent",
    "EventInstance",
    "TemporaryEffect",
    "TemporaryEffectTemplate",
    "ChoiceOutcome",
]
