"""Scoring library - defense strength, combat factors and event odds.

Everything here is a pure function of its arguments. The only randomness
is drawn from the ``rng`` passed in, so a seeded ``random.Random`` makes
a battle reproducible.
"""

from __future__ import annotations
import math
import random
from typing import Optional

from empire_sim.models.combat import CombatFactors, DefenseForce, EnemyForce
from empire_sim.models.province import EmpireSnapshot, ProvinceSnapshot
from empire_sim.systems.traits import traits_for


MAX_EVENT_CHANCE = 0.40
BASE_EVENT_CHANCE = 0.15


def compute_defense_force(province: ProvinceSnapshot) -> DefenseForce:
    """Project a province onto its combat profile."""
    barracks = province.building_level("BARRACKS")
    smithy = province.building_level("SMITHY")
    stable = province.building_level("STABLE")
    population = province.resource("population")

    governor = province.governor
    governor_bonus = 0.0
    if governor is not None:
        loyalty_factor = governor.loyalty / 100
        experience_factor = min(1.5, 1 + governor.xp / 2000)
        governor_bonus = traits_for(governor.personality).combat_base * loyalty_factor * experience_factor

    return DefenseForce(
        wall_level=province.building_level("WALLS"),
        garrison_size=barracks * 25,
        watchtowers=province.building_level("WATCHTOWER"),
        barracks_bonus=barracks * 15,
        smithy_bonus=smithy * 10,
        stable_bonus=stable * 10,
        governor_bonus=governor_bonus,
        governor_personality=governor.personality.value if governor else None,
        governor_name=governor.name if governor else None,
        governor_loyalty=governor.loyalty if governor else 0,
        militia_size=math.floor(population * 0.1),
        population_morale=min(100, 50 + population / 20),
        strategic_reserves=province.resource("gold") // 100,
    )


def attacker_strength(enemy: EnemyForce) -> float:
    return enemy.strength + enemy.cunning * 0.5


def defender_strength(defense: DefenseForce) -> float:
    return (
        defense.garrison_size * 0.8
        + defense.militia_size * 0.4
        + defense.barracks_bonus
        + defense.smithy_bonus
        + defense.stable_bonus
        + defense.governor_bonus
    )


def compute_combat_factors(
    enemy: EnemyForce,
    defense: DefenseForce,
    rng: Optional[random.Random] = None,
) -> CombatFactors:
    """The eleven additive sub-scores for one battle.

    Eight are deterministic. Weather (±0.05), luck (±0.075) and surprise
    (0-0.10, in the defender's favour) are drawn from ``rng`` in that order.
    """
    rng = rng or random.Random()
    traits = traits_for(defense.governor_personality)

    weather = (rng.random() - 0.5) * 0.1
    luck = (rng.random() - 0.5) * 0.15
    surprise = rng.random() * 0.1

    return CombatFactors(
        strength_ratio=defender_strength(defense) / max(1, attacker_strength(enemy)),
        terrain_bonus=defense.wall_level * 0.15 + defense.watchtowers * 0.1 + 0.2,
        preparation_bonus=traits.preparation,
        leadership_bonus=defense.governor_bonus / 100,
        morale_bonus=(defense.population_morale - 50) / 200,
        equipment_bonus=defense.smithy_bonus / 100 + defense.strategic_reserves / 1000,
        tactical_bonus=traits.tactical,
        confidence_bonus=min(0.15, defense.recent_victories * 0.05),
        weather_effect=weather,
        luck_factor=luck,
        surprise_factor=surprise,
    )


def calculate_event_chance(province: ProvinceSnapshot, empire: EmpireSnapshot) -> float:
    """Probability that a province receives an event this cycle, in [0, 0.40]."""
    chance = BASE_EVENT_CHANCE
    if province.level > 3:
        chance += 0.05
    if province.threat > 5:
        chance += 0.10
    if empire.total_provinces > 3:
        chance += 0.08
    if province.governor is not None:
        chance += traits_for(province.governor.personality).event_bias
    return max(0.0, min(MAX_EVENT_CHANCE, chance))
