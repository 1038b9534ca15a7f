"""Personality trait table - every personality-keyed constant in one place."""

from __future__ import annotations
from typing import Optional, Union
from pydantic import BaseModel, Field

from empire_sim.models.province import Personality


class PersonalityTraits(BaseModel):
    """How a personality biases combat, events and governance."""
    combat_base: float  # governor bonus before loyalty/experience scaling
    preparation: float
    tactical: float
    event_bias: float
    engagement_text: str  # "{governor}" is replaced by the governor's name
    building_priorities: dict[str, int] = Field(default_factory=dict)
    research_priorities: dict[str, int] = Field(default_factory=dict)
    report_suggestion: str = ""

    model_config = {"frozen": True}


PERSONALITY_TRAITS: dict[Personality, PersonalityTraits] = {
    Personality.AGGRESSIVE: PersonalityTraits(
        combat_base=40,
        preparation=0.15,
        tactical=0.10,
        event_bias=0.05,
        engagement_text="{governor} led a bold counter-attack, meeting the enemy head-on.",
        building_priorities={
            "BARRACKS": 10,
            "MINE": 8,
            "ACADEMY": 6,
            "FARM": 5,
            "QUARRY": 4,
            "MARKETPLACE": 2,
        },
        research_priorities={
            "MILITARY_1": 10,
            "CONSTRUCTION_1": 8,
            "MINING_1": 6,
            "AGRICULTURE_1": 4,
            "TRADE_1": 2,
        },
        report_suggestion="Suggests aggressive expansion and military buildup.",
    ),
    Personality.CONSERVATIVE: PersonalityTraits(
        combat_base=25,
        preparation=0.25,
        tactical=0.15,
        event_bias=-0.03,
        engagement_text="{governor} employed proven defensive tactics, holding strong positions.",
        building_priorities={
            "FARM": 10,
            "QUARRY": 8,
            "BARRACKS": 6,
            "MINE": 5,
            "MARKETPLACE": 3,
            "ACADEMY": 2,
        },
        research_priorities={
            "AGRICULTURE_1": 10,
            "CONSTRUCTION_1": 8,
            "MINING_1": 6,
            "TRADE_1": 4,
            "MILITARY_1": 3,
        },
        report_suggestion="Recommends building defensive structures and maintaining food security.",
    ),
    Personality.MERCHANT: PersonalityTraits(
        combat_base=15,
        preparation=0.12,
        tactical=0.05,
        event_bias=0.0,
        engagement_text="{governor} coordinated hired mercenaries alongside the local militia.",
        building_priorities={
            "MARKETPLACE": 10,
            "MINE": 9,
            "FARM": 6,
            "QUARRY": 5,
            "ACADEMY": 4,
            "BARRACKS": 2,
        },
        research_priorities={
            "TRADE_1": 10,
            "MINING_1": 9,
            "AGRICULTURE_1": 6,
            "CONSTRUCTION_1": 5,
            "MILITARY_1": 2,
        },
        report_suggestion="Advocates for marketplace expansion and trade route development.",
    ),
    Personality.EXPLORER: PersonalityTraits(
        combat_base=20,
        preparation=0.20,
        tactical=0.20,
        event_bias=0.10,
        engagement_text="{governor} used clever tactical maneuvers to outflank the attackers.",
        building_priorities={
            "ACADEMY": 10,
            "MINE": 7,
            "MARKETPLACE": 6,
            "FARM": 5,
            "QUARRY": 4,
            "BARRACKS": 3,
        },
        research_priorities={
            "CONSTRUCTION_1": 10,
            "MINING_1": 8,
            "AGRICULTURE_1": 7,
            "TRADE_1": 6,
            "MILITARY_1": 4,
        },
        report_suggestion="Recommends investment in research and exploration technologies.",
    ),
}

# Used when a province has no governor
NO_GOVERNOR_TRAITS = PersonalityTraits(
    combat_base=20,
    preparation=0.10,
    tactical=0.0,
    event_bias=0.0,
    engagement_text="Your forces engaged the enemy with determination.",
)


def traits_for(personality: Optional[Union[Personality, str]]) -> PersonalityTraits:
    """Look up traits; None (no governor) gets the neutral row."""
    if personality is None or personality == "":
        return NO_GOVERNOR_TRAITS
    return PERSONALITY_TRAITS[Personality(personality)]
