"""Tests for defense, combat factor and event chance scoring."""

import random

import pytest

from empire_sim.models import Building, EmpireSnapshot, Governor, Personality, ProvinceSnapshot
from empire_sim.systems.scoring import (
    calculate_event_chance,
    compute_combat_factors,
    compute_defense_force,
)
from empire_sim.systems.traits import NO_GOVERNOR_TRAITS, PERSONALITY_TRAITS, traits_for

from conftest import ScriptedRandom


class TestDefenseForce:

    def test_conservative_scenario(self, conservative_province):
        defense = compute_defense_force(conservative_province)
        assert defense.garrison_size == 25
        assert defense.militia_size == 5
        assert defense.population_morale == pytest.approx(52.5)
        assert defense.governor_bonus == pytest.approx(18.75)
        assert defense.barracks_bonus == 15
        assert defense.wall_level == 0
        assert defense.strategic_reserves == 0
        assert defense.governor_personality == "CONSERVATIVE"
        assert defense.governor_name == "Edda"

    def test_deterministic(self, conservative_province):
        assert compute_defense_force(conservative_province) == compute_defense_force(conservative_province)

    def test_no_governor(self):
        province = ProvinceSnapshot(name="Empty", resources={"gold": 950})
        defense = compute_defense_force(province)
        assert defense.governor_bonus == 0
        assert defense.governor_personality is None
        assert defense.strategic_reserves == 9

    def test_experience_bonus_caps_at_one_and_a_half(self):
        province = ProvinceSnapshot(
            name="Veteran",
            governor=Governor(name="Brann", personality=Personality.AGGRESSIVE, loyalty=100, xp=5000),
        )
        assert compute_defense_force(province).governor_bonus == pytest.approx(60)

    def test_morale_caps_at_hundred(self):
        province = ProvinceSnapshot(name="Crowded", resources={"population": 5000})
        defense = compute_defense_force(province)
        assert defense.population_morale == 100
        assert defense.militia_size == 500

    def test_building_bonuses(self):
        province = ProvinceSnapshot(
            name="Fort",
            buildings=[
                Building(type="SMITHY", level=2),
                Building(type="STABLE", level=3),
                Building(type="WATCHTOWER", level=1),
                Building(type="WALLS", level=4),
            ],
        )
        defense = compute_defense_force(province)
        assert defense.smithy_bonus == 20
        assert defense.stable_bonus == 30
        assert defense.watchtowers == 1
        assert defense.wall_level == 4


class TestCombatFactors:

    def test_deterministic_factors(self, conservative_province, scouts):
        defense = compute_defense_force(conservative_province)
        factors = compute_combat_factors(scouts, defense, ScriptedRandom([0.5, 0.5, 0.0]))

        # attacker 25 + 40 * 0.5 = 45; defender 20 + 2 + 15 + 18.75
        assert factors.strength_ratio == pytest.approx(55.75 / 45)
        assert factors.terrain_bonus == pytest.approx(0.2)
        assert factors.preparation_bonus == pytest.approx(0.25)
        assert factors.leadership_bonus == pytest.approx(0.1875)
        assert factors.morale_bonus == pytest.approx(0.0125)
        assert factors.equipment_bonus == pytest.approx(0.0)
        assert factors.tactical_bonus == pytest.approx(0.15)
        assert factors.confidence_bonus == 0
        assert factors.weather_effect == pytest.approx(0.0)
        assert factors.luck_factor == pytest.approx(0.0)
        assert factors.surprise_factor == pytest.approx(0.0)

    def test_random_draw_ranges(self, conservative_province, scouts):
        defense = compute_defense_force(conservative_province)

        low = compute_combat_factors(scouts, defense, ScriptedRandom([0.0, 0.0, 0.0]))
        assert low.weather_effect == pytest.approx(-0.05)
        assert low.luck_factor == pytest.approx(-0.075)
        assert low.surprise_factor == pytest.approx(0.0)

        high = compute_combat_factors(scouts, defense, ScriptedRandom([0.999999, 0.999999, 0.999999]))
        assert high.weather_effect == pytest.approx(0.05, abs=1e-6)
        assert high.luck_factor == pytest.approx(0.075, abs=1e-6)
        assert high.surprise_factor == pytest.approx(0.1, abs=1e-6)

    def test_seeded_rng_reproducible(self, conservative_province, scouts):
        defense = compute_defense_force(conservative_province)
        first = compute_combat_factors(scouts, defense, random.Random(7))
        second = compute_combat_factors(scouts, defense, random.Random(7))
        assert first == second

    def test_no_governor_uses_neutral_traits(self, scouts):
        defense = compute_defense_force(ProvinceSnapshot(name="Empty"))
        factors = compute_combat_factors(scouts, defense, ScriptedRandom())
        assert factors.preparation_bonus == pytest.approx(0.10)
        assert factors.tactical_bonus == 0

    def test_confidence_caps(self, scouts):
        defense = compute_defense_force(ProvinceSnapshot(name="Proud")).model_copy(update={"recent_victories": 10})
        factors = compute_combat_factors(scouts, defense, ScriptedRandom())
        assert factors.confidence_bonus == pytest.approx(0.15)


class TestPersonalityTraits:

    def test_every_personality_has_traits(self):
        for personality in Personality:
            assert personality in PERSONALITY_TRAITS
            assert traits_for(personality) is PERSONALITY_TRAITS[personality]

    def test_lookup_by_string_and_none(self):
        assert traits_for("EXPLORER").tactical == pytest.approx(0.20)
        assert traits_for(None) is NO_GOVERNOR_TRAITS

    def test_preparation_order(self):
        prep = {p: PERSONALITY_TRAITS[p].preparation for p in Personality}
        assert prep[Personality.CONSERVATIVE] > prep[Personality.EXPLORER] > prep[Personality.AGGRESSIVE]
        assert prep[Personality.AGGRESSIVE] > prep[Personality.MERCHANT] > NO_GOVERNOR_TRAITS.preparation


class TestEventChance:

    def _empire(self, count: int) -> EmpireSnapshot:
        return EmpireSnapshot(total_provinces=count)

    def test_base_chance(self):
        province = ProvinceSnapshot(name="Quiet")
        assert calculate_event_chance(province, self._empire(1)) == pytest.approx(0.15)

    def test_conservative_lowers_chance(self, conservative_province):
        # threat 10 adds 0.10
        assert calculate_event_chance(conservative_province, self._empire(1)) == pytest.approx(0.22)

    def test_capped_at_forty_percent(self):
        province = ProvinceSnapshot(
            name="Frontier",
            level=5,
            threat=20,
            governor=Governor(name="Ysolde", personality=Personality.EXPLORER),
        )
        assert calculate_event_chance(province, self._empire(5)) == pytest.approx(0.40)

    def test_additive_adjustments(self):
        province = ProvinceSnapshot(
            name="Border",
            level=4,
            governor=Governor(name="Tor", personality=Personality.MERCHANT),
        )
        assert calculate_event_chance(province, self._empire(4)) == pytest.approx(0.15 + 0.05 + 0.08)
