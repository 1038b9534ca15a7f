"""Simulation systems: scoring, combat, selection, scheduling and governors."""

from .traits import PersonalityTraits, PERSONALITY_TRAITS, traits_for
from .scoring import compute_defense_force, compute_combat_factors, calculate_event_chance
from .combat import classify_outcome, resolve_combat, generate_battle_report
from .selection import (
    weighted_choice,
    get_eligible_events,
    select_random_event,
    get_eligible_enemies,
    select_random_enemy,
    can_afford_choice,
    process_event_choice,
    create_event_instance,
)
from .eligibility import is_province_eligible_for_event, is_province_eligible_for_raid, get_eligible_provinces
from .periodic import Clock, SystemClock, FixedClock, PeriodicTask
from .scheduler import EventScheduler, SchedulerReport
from .governor import (
    make_governor_decision,
    update_governor_experience,
    generate_governor_report,
    calculate_affordability_score,
    plan_empire_deduction,
    GovernorRunner,
    GovernorReport,
)
from .resolution import auto_resolve_raid, resolve_event_choice

__all__ = [
    "PersonalityTraits",
    "PERSONALITY_TRAITS",
    "traits_for",
    "compute_defense_force",
    "compute_combat_factors",
    "calculate_event_chance",
    "classify_outcome",
    "resolve_combat",
    "generate_battle_report",
    "weighted_choice",
    "get_eligible_events",
    "select_random_event",
    "get_eligible_enemies",
    "select_random_enemy",
    "can_afford_choice",
    "process_event_choice",
    "create_event_instance",
    "is_province_eligible_for_event",
    "is_province_eligible_for_raid",
    "get_eligible_provinces",
    "Clock",
    "SystemClock",
    "FixedClock",
    "PeriodicTask",
    "EventScheduler",
    "SchedulerReport",
    "make_governor_decision",
    "update_governor_experience",
    "generate_governor_report",
    "calculate_affordability_score",
    "plan_empire_deduction",
    "GovernorRunner",
    "GovernorReport",
    "auto_resolve_raid",
    "resolve_event_choice",
]
