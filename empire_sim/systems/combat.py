"""Combat resolver - turns an enemy and a defense profile into a CombatResult."""

from __future__ import annotations
import math
import random
from typing import Optional

from empire_sim.models.combat import (
    CombatFactors,
    CombatOutcome,
    CombatResult,
    DefenseForce,
    EnemyForce,
)
from empire_sim.systems.scoring import compute_combat_factors
from empire_sim.systems.traits import traits_for


VICTORY_THRESHOLD = 1.3
DRAW_THRESHOLD = 0.8
MAX_CERTAINTY = 0.95

# Per-outcome multipliers: (defender casualties, enemy casualties, infrastructure)
OUTCOME_MULTIPLIERS: dict[CombatOutcome, tuple[float, float, float]] = {
    CombatOutcome.VICTORY: (0.3, 0.8, 0.1),
    CombatOutcome.DRAW: (0.6, 0.5, 0.3),
    CombatOutcome.DEFEAT: (1.2, 0.3, 0.6),
}


def classify_outcome(defense_score: float) -> tuple[CombatOutcome, float]:
    """Map a defense score to (outcome, victory certainty).

    Lower edges are inclusive: exactly 1.3 wins, exactly 0.8 draws.
    """
    if defense_score >= VICTORY_THRESHOLD:
        outcome = CombatOutcome.VICTORY
        certainty = (defense_score - VICTORY_THRESHOLD) / 0.7 + 0.7
    elif defense_score >= DRAW_THRESHOLD:
        outcome = CombatOutcome.DRAW
        certainty = 0.5
    else:
        outcome = CombatOutcome.DEFEAT
        certainty = (DRAW_THRESHOLD - defense_score) / 0.8 + 0.5
    return outcome, max(0.0, min(MAX_CERTAINTY, certainty))


def _resource_deltas(
    enemy: EnemyForce,
    outcome: CombatOutcome,
    certainty: float,
    infrastructure_damage: int,
) -> tuple[dict[str, int], dict[str, int]]:
    gained: dict[str, int] = {}
    lost: dict[str, int] = {}

    if outcome == CombatOutcome.VICTORY:
        gained = dict(enemy.victory_rewards)
        loss_reduction = certainty * 0.7
        for resource, loss in enemy.defeat_penalties.items():
            if loss < 0:
                lost[resource] = math.floor(loss * (1 - loss_reduction))
    elif outcome == CombatOutcome.DRAW:
        for resource, reward in enemy.victory_rewards.items():
            gained[resource] = math.floor(reward * 0.3)
        for resource, loss in enemy.defeat_penalties.items():
            if loss < 0:
                lost[resource] = math.floor(loss * 0.6)
    else:
        lost = dict(enemy.defeat_penalties)
        if infrastructure_damage > 0:
            lost["stone"] = lost.get("stone", 0) - infrastructure_damage

    return gained, lost


def _governor_deltas(enemy: EnemyForce, outcome: CombatOutcome, certainty: float) -> tuple[int, int]:
    """(xp gain, loyalty change) for the defending governor."""
    if outcome == CombatOutcome.VICTORY:
        return math.floor(enemy.threat_level * 25 + certainty * 50), math.floor(2 + certainty * 3)
    if outcome == CombatOutcome.DRAW:
        return math.floor(enemy.threat_level * 15), 1
    return math.floor(enemy.threat_level * 10), math.floor(-2 - certainty * 2)


def _morale_change(outcome: CombatOutcome, certainty: float) -> int:
    if outcome == CombatOutcome.VICTORY:
        return math.floor(5 + certainty * 10)
    if outcome == CombatOutcome.DRAW:
        return -1
    return math.floor(-5 - certainty * 8)


def resolve_combat(
    enemy: EnemyForce,
    defense: DefenseForce,
    rng: Optional[random.Random] = None,
    factors: Optional[CombatFactors] = None,
) -> CombatResult:
    """Fight one battle.

    Pass ``factors`` to resolve against precomputed sub-scores; otherwise
    they are computed from ``enemy`` and ``defense`` using ``rng``.
    """
    if factors is None:
        factors = compute_combat_factors(enemy, defense, rng)

    defense_score = factors.total()
    outcome, certainty = classify_outcome(defense_score)
    defender_mult, enemy_mult, damage_mult = OUTCOME_MULTIPLIERS[outcome]

    defender_casualties = math.floor(enemy.strength / 4 * defender_mult * (1 - certainty * 0.3))
    enemy_casualties = math.floor(enemy.strength * enemy_mult * certainty)
    infrastructure_damage = math.floor(enemy.strength * 0.1 * damage_mult)

    gained, lost = _resource_deltas(enemy, outcome, certainty, infrastructure_damage)

    xp_gain, loyalty_change = 0, 0
    if defense.governor_bonus > 0:
        xp_gain, loyalty_change = _governor_deltas(enemy, outcome, certainty)

    return CombatResult(
        outcome=outcome,
        victory_certainty=certainty,
        defense_score=defense_score,
        defender_casualties=defender_casualties,
        enemy_casualties=enemy_casualties,
        infrastructure_damage=infrastructure_damage,
        resources_gained=gained,
        resources_lost=lost,
        governor_xp_gain=xp_gain,
        governor_loyalty_change=loyalty_change,
        population_morale_change=_morale_change(outcome, certainty),
        battle_report=generate_battle_report(enemy, defense, outcome, factors, certainty),
    )


# ------------------------------------------------------------------
# Narrative
# ------------------------------------------------------------------

_OUTCOME_TEXT: dict[CombatOutcome, dict[str, str]] = {
    CombatOutcome.VICTORY: {
        "decisive": "The battle was a decisive victory! Your superior strategy and preparation overwhelmed the attackers.",
        "close": "After fierce fighting, your defenders emerged victorious, though the battle was hard-fought.",
        "normal": "Your forces achieved victory through solid combat effectiveness.",
    },
    CombatOutcome.DEFEAT: {
        "decisive": "Despite brave resistance, your forces were overwhelmed by superior enemy numbers and tactics.",
        "close": "The defenders fought valiantly but were ultimately forced to retreat. The defeat was narrow but costly.",
        "normal": "Your defenses proved insufficient against the enemy assault.",
    },
}

_STALEMATE_TEXT = (
    "The battle ended in a costly stalemate. Both sides withdrew after heavy fighting, "
    "with neither achieving their objectives."
)


def generate_battle_report(
    enemy: EnemyForce,
    defense: DefenseForce,
    outcome: CombatOutcome,
    factors: CombatFactors,
    certainty: float,
) -> str:
    """Narrate a battle from its enemy, defenders, outcome and factors."""
    governor = defense.governor_name or "your governor"
    parts = [f"{enemy.name} approached your province with {enemy.strength} strength."]

    if factors.preparation_bonus > 0.2:
        parts.append(f"Thanks to excellent preparation by {governor}, your defenses were ready.")
    elif factors.surprise_factor > 0.05:
        parts.append("The attack caught some defenders off-guard, but your forces quickly rallied.")

    engagement = traits_for(defense.governor_personality).engagement_text.format(governor=governor)
    parts.append(engagement[:1].upper() + engagement[1:])

    if outcome == CombatOutcome.DRAW:
        parts.append(_STALEMATE_TEXT)
    else:
        if certainty > 0.7:
            tone = "decisive"
        elif certainty < 0.3:
            tone = "close"
        else:
            tone = "normal"
        parts.append(_OUTCOME_TEXT[outcome][tone])

    if abs(factors.weather_effect) > 0.05:
        if factors.weather_effect > 0:
            parts.append("Favorable weather conditions aided the defense.")
        else:
            parts.append("Poor weather hindered defensive operations.")

    return " ".join(parts)
