"""Default enemy catalog."""

from __future__ import annotations

from empire_sim.models.combat import EnemyForce, EnemyRequirements, EnemyType


ENEMY_FORCES: dict[str, EnemyForce] = {
    # Barbarians
    "BARBARIAN_SCOUTS": EnemyForce(
        id="BARBARIAN_SCOUTS",
        type=EnemyType.SCOUT,
        name="Barbarian Scout Party",
        description="A small group of barbarian scouts testing your defenses. They move quickly but lack heavy equipment.",
        icon="🏹",
        strength=25,
        toughness=20,
        speed=80,
        cunning=40,
        threat_level=2,
        min_province_level=1,
        victory_rewards={"gold": 150, "iron": 50, "influence": 25},
        defeat_penalties={"food": -300, "gold": -200, "population": -20},
        spawn_weight=25,
        requirements=EnemyRequirements(min_threat=5, max_threat=30),
    ),
    "BARBARIAN_RAIDERS": EnemyForce(
        id="BARBARIAN_RAIDERS",
        type=EnemyType.WARRIOR,
        name="Barbarian Raiding Party",
        description="Seasoned barbarian warriors seeking plunder. They are well-armed and experienced in combat.",
        icon="⚔️",
        strength=55,
        toughness=50,
        speed=60,
        cunning=65,
        threat_level=5,
        min_province_level=2,
        victory_rewards={"gold": 400, "iron": 150, "stone": 100, "influence": 75},
        defeat_penalties={"food": -600, "gold": -500, "stone": -200, "population": -50, "influence": -30},
        spawn_weight=15,
        requirements=EnemyRequirements(min_threat=15, max_threat=60, near_resources=["gold", "iron"]),
    ),
    "BARBARIAN_WARBAND": EnemyForce(
        id="BARBARIAN_WARBAND",
        type=EnemyType.HORDE,
        name="Barbarian Warband",
        description="A massive horde led by a fearsome chieftain, bringing siege equipment and overwhelming numbers.",
        icon="🛡️",
        strength=85,
        toughness=75,
        speed=40,
        cunning=55,
        threat_level=8,
        min_province_level=3,
        victory_rewards={"gold": 1000, "iron": 400, "stone": 300, "influence": 200, "population": 30},
        defeat_penalties={"food": -1200, "gold": -800, "stone": -500, "iron": -300, "population": -100, "influence": -75},
        spawn_weight=5,
        requirements=EnemyRequirements(min_threat=40, near_resources=["gold", "population"]),
    ),

    # Beasts
    "WOLF_PACK": EnemyForce(
        id="WOLF_PACK",
        type=EnemyType.BEAST,
        name="Dire Wolf Pack",
        description="Unnaturally large wolves, driven from their territory by expanding settlements.",
        icon="🐺",
        strength=40,
        toughness=35,
        speed=90,
        cunning=70,
        threat_level=3,
        min_province_level=1,
        victory_rewards={"food": 200, "iron": 25, "influence": 15},
        defeat_penalties={"food": -400, "population": -30, "gold": -100},
        spawn_weight=20,
        requirements=EnemyRequirements(min_threat=10, max_threat=40, near_resources=["food"]),
    ),
    "SHADOW_BEASTS": EnemyForce(
        id="SHADOW_BEASTS",
        type=EnemyType.BEAST,
        name="Shadow Beast Incursion",
        description="Creatures from the dark places of the world, attracted by magical energy.",
        icon="👹",
        strength=65,
        toughness=60,
        speed=75,
        cunning=85,
        threat_level=6,
        min_province_level=2,
        victory_rewards={"influence": 150, "gold": 300, "iron": 100},
        defeat_penalties={"population": -60, "influence": -50, "food": -300},
        spawn_weight=8,
        requirements=EnemyRequirements(min_threat=20, near_resources=["influence"]),
    ),

    # Humans
    "BANDIT_GANG": EnemyForce(
        id="BANDIT_GANG",
        type=EnemyType.BANDIT,
        name="Desperate Bandits",
        description="Outlaws seeking easy targets. They prefer quick strikes over prolonged battles.",
        icon="🔪",
        strength=35,
        toughness=25,
        speed=70,
        cunning=80,
        threat_level=3,
        min_province_level=1,
        victory_rewards={"gold": 250, "iron": 75, "influence": 20},
        defeat_penalties={"gold": -400, "food": -200, "stone": -150},
        spawn_weight=18,
        requirements=EnemyRequirements(min_threat=8, max_threat=35, near_resources=["gold"]),
    ),
    "RIVAL_SPIES": EnemyForce(
        id="RIVAL_SPIES",
        type=EnemyType.SPY,
        name="Rival Empire Agents",
        description="Infiltrators from a competing empire, out to steal secrets and sabotage your progress.",
        icon="🕵️",
        strength=20,
        toughness=30,
        speed=95,
        cunning=95,
        threat_level=4,
        min_province_level=2,
        victory_rewards={"influence": 100, "gold": 200, "iron": 50},
        defeat_penalties={"influence": -100, "gold": -300, "population": -15},
        spawn_weight=12,
        requirements=EnemyRequirements(min_threat=15, near_resources=["influence", "gold"]),
    ),

    # Mystical
    "CULTIST_INFILTRATORS": EnemyForce(
        id="CULTIST_INFILTRATORS",
        type=EnemyType.CULTIST,
        name="Cult of the Void",
        description="Fanatics seeking to corrupt your population with dark promises of power.",
        icon="🔮",
        strength=30,
        toughness=40,
        speed=50,
        cunning=90,
        threat_level=5,
        min_province_level=2,
        victory_rewards={"influence": 120, "gold": 300, "population": 20},
        defeat_penalties={"population": -80, "influence": -75, "food": -250},
        spawn_weight=10,
        requirements=EnemyRequirements(min_threat=25, near_resources=["influence", "population"]),
    ),
    "NECROMANCER_LEGION": EnemyForce(
        id="NECROMANCER_LEGION",
        type=EnemyType.CULTIST,
        name="Undead Legion",
        description="The walking dead, led by a necromancer who wants your population for his ranks.",
        icon="💀",
        strength=75,
        toughness=90,
        speed=30,
        cunning=60,
        threat_level=9,
        min_province_level=3,
        victory_rewards={"influence": 250, "gold": 600, "iron": 200, "stone": 400},
        defeat_penalties={"population": -150, "food": -800, "influence": -100, "gold": -400},
        spawn_weight=3,
        requirements=EnemyRequirements(min_threat=50, near_resources=["population", "influence"]),
    ),
}
