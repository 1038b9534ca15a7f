"""Game event schemas - catalog entries and their scheduled occurrences."""

from __future__ import annotations
from datetime import datetime
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field
import uuid


class EventType(str, Enum):
    """Categories of game events."""
    DISCOVERY = "DISCOVERY"
    DISASTER = "DISASTER"
    TRADE = "TRADE"
    BARBARIAN = "BARBARIAN"
    POLITICAL = "POLITICAL"
    ARTIFACT = "ARTIFACT"


class Rarity(str, Enum):
    COMMON = "COMMON"
    UNCOMMON = "UNCOMMON"
    RARE = "RARE"
    LEGENDARY = "LEGENDARY"


class ImpactType(str, Enum):
    """IMMEDIATE events resolve on creation; DELAYED ones wait for a choice."""
    IMMEDIATE = "IMMEDIATE"
    DELAYED = "DELAYED"


class EffectType(str, Enum):
    """Kinds of temporary province modifiers."""
    RESOURCE_MULTIPLIER = "RESOURCE_MULTIPLIER"
    PRODUCTION_BONUS = "PRODUCTION_BONUS"
    COST_REDUCTION = "COST_REDUCTION"


class Requirements(BaseModel):
    """Minimum building levels and resource stock."""
    min_buildings: dict[str, int] = Field(default_factory=dict)
    min_resources: dict[str, int] = Field(default_factory=dict)

    model_config = {"extra": "allow"}


class EventRequirements(Requirements):
    """Conditions a province must meet for an event to be eligible."""
    min_provinces: Optional[int] = None
    governor_personality: Optional[list[str]] = None  # allow-list


class TemporaryEffectTemplate(BaseModel):
    """A modifier granted by a choice, lasting for the event's duration."""
    type: EffectType
    modifiers: dict[str, float]


class EventOutcome(BaseModel):
    """What happens after a choice is made."""
    resources: dict[str, int] = Field(default_factory=dict)
    governor_loyalty: int = 0
    governor_xp: int = Field(default=0, ge=0)
    message: str
    followup_event_chance: float = Field(default=0.0, ge=0, le=1)
    temporary_effect: Optional[TemporaryEffectTemplate] = None


class EventChoice(BaseModel):
    """One option offered to the player."""
    id: str
    text: str
    description: str = ""
    cost: dict[str, int] = Field(default_factory=dict)
    requirements: Optional[Requirements] = None
    outcome: EventOutcome


class GameEvent(BaseModel):
    """A catalog entry for a random event."""
    id: str
    type: EventType
    title: str
    description: str
    image_icon: str = ""

    rarity: Rarity = Rarity.COMMON
    impact_type: ImpactType = ImpactType.DELAYED
    duration_hours: Optional[int] = Field(default=None, ge=1)  # temporary effect length

    requirements: Optional[EventRequirements] = None
    choices: list[EventChoice] = Field(default_factory=list)

    weight: float = Field(default=1.0, ge=0)

    model_config = {"extra": "allow"}

    def get_choice(self, choice_id: str) -> Optional[EventChoice]:
        for choice in self.choices:
            if choice.id == choice_id:
                return choice
        return None


class EventInstance(BaseModel):
    """A scheduled occurrence of a GameEvent against one province."""
    id: str = Field(default_factory=lambda: str(uuid.uuid4())[:8])
    province_id: str
    event_key: str
    type: EventType
    rarity: Rarity
    title: str
    description: str
    image_icon: str = ""

    triggered_at: datetime = Field(default_factory=datetime.now)
    expires_at: Optional[datetime] = None

    resolved: bool = False
    resolved_at: Optional[datetime] = None
    choice_id: Optional[str] = None
    resource_changes: dict[str, int] = Field(default_factory=dict)
    governor_loyalty_change: int = 0
    governor_xp_gained: int = 0
    followup_scheduled: bool = False

    def summary(self) -> str:
        state = "resolved" if self.resolved else "awaiting a choice"
        return f"[{self.id}] {self.title} - {state}"


class TemporaryEffect(BaseModel):
    """A province modifier that lapses at expires_at."""
    id: str = Field(default_factory=lambda: str(uuid.uuid4())[:8])
    province_id: str
    event_instance_id: str
    type: EffectType
    modifiers: dict[str, float]
    expires_at: datetime


class ChoiceOutcome(BaseModel):
    """Processed result of an event choice, ready to apply."""
    resource_changes: dict[str, int] = Field(default_factory=dict)
    governor_loyalty_change: int = 0
    governor_xp_gain: int = 0
    message: str
    schedule_followup: bool = False
    temporary_effect: Optional[TemporaryEffectTemplate] = None
    duration_hours: Optional[int] = None
