"""Default event catalog and rarity multipliers."""

from __future__ import annotations

from empire_sim.models.events import (
    EffectType,
    EventChoice,
    EventOutcome,
    EventRequirements,
    EventType,
    GameEvent,
    ImpactType,
    Rarity,
    Requirements,
    TemporaryEffectTemplate,
)


RARITY_WEIGHTS: dict[Rarity, float] = {
    Rarity.COMMON: 1.0,
    Rarity.UNCOMMON: 0.6,
    Rarity.RARE: 0.3,
    Rarity.LEGENDARY: 0.1,
}


GAME_EVENTS: dict[str, GameEvent] = {
    # Discoveries
    "ANCIENT_CACHE": GameEvent(
        id="ANCIENT_CACHE",
        type=EventType.DISCOVERY,
        title="Ancient Cache Discovery",
        description="Workers have uncovered a storage chamber of preserved goods and gold coins from a forgotten civilization.",
        image_icon="💰",
        rarity=Rarity.COMMON,
        impact_type=ImpactType.IMMEDIATE,
        weight=15,
        choices=[
            EventChoice(
                id="take_all",
                text="Take Everything",
                description="Claim all the ancient treasures",
                outcome=EventOutcome(
                    resources={"gold": 800, "stone": 200, "influence": 50},
                    message="Your province prospers from the ancient riches!",
                ),
            ),
            EventChoice(
                id="preserve_site",
                text="Preserve for Study",
                description="Set up archaeological research",
                cost={"gold": 300},
                outcome=EventOutcome(
                    resources={"gold": 400, "influence": 100},
                    governor_xp=150,
                    message="Archaeological study brings knowledge and prestige to your empire.",
                ),
            ),
        ],
    ),
    "FERTILE_SOIL": GameEvent(
        id="FERTILE_SOIL",
        type=EventType.DISCOVERY,
        title="Fertile Soil Discovery",
        description="A patch of exceptionally fertile land has been found. Farmers are excited about its potential.",
        image_icon="🌱",
        rarity=Rarity.COMMON,
        impact_type=ImpactType.DELAYED,
        duration_hours=24,
        weight=20,
        choices=[
            EventChoice(
                id="plant_crops",
                text="Plant Immediate Crops",
                description="Rush farming for quick food production",
                cost={"gold": 200, "population": 10},
                outcome=EventOutcome(
                    resources={"food": 1200},
                    message="Rapid farming yields abundant food supplies!",
                ),
            ),
            EventChoice(
                id="develop_farmland",
                text="Develop Permanent Farmland",
                description="Invest in long-term agricultural infrastructure",
                cost={"gold": 500, "stone": 300},
                outcome=EventOutcome(
                    resources={"food": 600},
                    message="New farmland will boost food production for the next 24 hours!",
                    temporary_effect=TemporaryEffectTemplate(
                        type=EffectType.PRODUCTION_BONUS,
                        modifiers={"food_production": 1.25},
                    ),
                ),
            ),
        ],
    ),

    # Disasters
    "WAREHOUSE_FIRE": GameEvent(
        id="WAREHOUSE_FIRE",
        type=EventType.DISASTER,
        title="Warehouse Fire",
        description="Fire has broken out in your main storage facility. Precious resources are at risk.",
        image_icon="🔥",
        rarity=Rarity.UNCOMMON,
        impact_type=ImpactType.IMMEDIATE,
        weight=8,
        choices=[
            EventChoice(
                id="fight_fire",
                text="Organize Fire Brigade",
                description="Rally citizens to fight the blaze",
                cost={"population": 20, "gold": 300},
                outcome=EventOutcome(
                    resources={"food": -500, "stone": -200, "iron": -100},
                    governor_loyalty=5,
                    message="Citizens rally together! Some resources lost but community bonds strengthen.",
                ),
            ),
            EventChoice(
                id="let_burn",
                text="Let it Burn",
                description="Focus on protecting people, accept the loss",
                outcome=EventOutcome(
                    resources={"food": -800, "stone": -400, "iron": -300, "gold": -200},
                    governor_loyalty=-10,
                    message="Heavy losses sustained. Your governor questions the lack of action.",
                ),
            ),
            EventChoice(
                id="magical_intervention",
                text="Seek Magical Aid",
                description="Call upon ancient powers to control the flames",
                cost={"influence": 100},
                requirements=Requirements(min_buildings={"ACADEMY": 1}),
                outcome=EventOutcome(
                    resources={"food": -100},
                    governor_xp=100,
                    message="Ancient knowledge saves the day! Minimal losses through mystical intervention.",
                ),
            ),
        ],
    ),
    "PLAGUE_OUTBREAK": GameEvent(
        id="PLAGUE_OUTBREAK",
        type=EventType.DISASTER,
        title="Disease Outbreak",
        description="A mysterious illness spreads through your province. Healers work frantically as productivity grinds to a halt.",
        image_icon="🦠",
        rarity=Rarity.RARE,
        impact_type=ImpactType.DELAYED,
        duration_hours=12,
        weight=4,
        choices=[
            EventChoice(
                id="quarantine",
                text="Strict Quarantine",
                description="Isolate affected areas completely",
                outcome=EventOutcome(
                    resources={"population": -100, "food": -300},
                    message="Quarantine contains the outbreak but at great cost to productivity.",
                ),
            ),
            EventChoice(
                id="herbal_remedies",
                text="Traditional Medicine",
                description="Use local knowledge and herbs",
                cost={"gold": 400},
                outcome=EventOutcome(
                    resources={"population": -50},
                    governor_loyalty=10,
                    message="Traditional remedies prove effective. Governor gains respect for wisdom.",
                ),
            ),
        ],
    ),

    # Trade
    "MERCHANT_CARAVAN": GameEvent(
        id="MERCHANT_CARAVAN",
        type=EventType.TRADE,
        title="Merchant Caravan Arrival",
        description="A wealthy caravan has stopped in your province, offering exotic goods and seeking trade relations.",
        image_icon="🐪",
        rarity=Rarity.COMMON,
        impact_type=ImpactType.IMMEDIATE,
        weight=12,
        requirements=EventRequirements(min_buildings={"MARKETPLACE": 1}),
        choices=[
            EventChoice(
                id="luxury_trade",
                text="Trade for Luxury Goods",
                description="Exchange resources for influence and rare items",
                cost={"gold": 600, "food": 300},
                outcome=EventOutcome(
                    resources={"influence": 150, "iron": 200},
                    message="Exotic trade goods boost your prestige across the empire!",
                ),
            ),
            EventChoice(
                id="bulk_trade",
                text="Bulk Resource Exchange",
                description="Focus on practical resource trading",
                cost={"stone": 500},
                outcome=EventOutcome(
                    resources={"gold": 1000, "food": 400},
                    message="Profitable trade strengthens your treasury!",
                ),
            ),
            EventChoice(
                id="establish_route",
                text="Establish Trade Route",
                description="Invest in a permanent trading relationship",
                cost={"gold": 800, "influence": 50},
                outcome=EventOutcome(
                    resources={"gold": 300},
                    message="New trade route established! Merchants will return regularly.",
                    followup_event_chance=0.3,
                ),
            ),
        ],
    ),

    # Barbarians
    "BARBARIAN_SCOUTS": GameEvent(
        id="BARBARIAN_SCOUTS",
        type=EventType.BARBARIAN,
        title="Barbarian Scouts Spotted",
        description="Border guards report figures watching your province from the hills. Barbarian scouts are assessing your defenses.",
        image_icon="⚔️",
        rarity=Rarity.UNCOMMON,
        impact_type=ImpactType.IMMEDIATE,
        weight=10,
        choices=[
            EventChoice(
                id="military_response",
                text="Show of Force",
                description="Deploy troops to intimidate the scouts",
                requirements=Requirements(min_buildings={"BARRACKS": 1}),
                cost={"gold": 200},
                outcome=EventOutcome(
                    resources={"influence": 75},
                    governor_xp=50,
                    message="Your military display discourages barbarian interest. Word spreads of your strength.",
                ),
            ),
            EventChoice(
                id="diplomatic_approach",
                text="Peaceful Contact",
                description="Attempt communication and negotiation",
                cost={"food": 300, "gold": 150},
                outcome=EventOutcome(
                    resources={"influence": 25},
                    message="Diplomatic gifts establish uneasy peace. The barbarians withdraw... for now.",
                ),
            ),
            EventChoice(
                id="ignore_scouts",
                text="Ignore Them",
                description="Continue normal operations",
                outcome=EventOutcome(
                    message="The scouts observe your province and disappear. Their intentions remain unknown...",
                    followup_event_chance=0.6,
                ),
            ),
        ],
    ),

    # Politics
    "NOBLE_PETITION": GameEvent(
        id="NOBLE_PETITION",
        type=EventType.POLITICAL,
        title="Petition of the Nobles",
        description="Local nobles demand a greater voice in provincial affairs, and your governor is expected to answer.",
        image_icon="📜",
        rarity=Rarity.UNCOMMON,
        impact_type=ImpactType.DELAYED,
        weight=6,
        requirements=EventRequirements(min_provinces=2, governor_personality=["CONSERVATIVE", "MERCHANT"]),
        choices=[
            EventChoice(
                id="grant_council",
                text="Grant a Council Seat",
                description="Share power to keep the peace",
                cost={"influence": 50},
                outcome=EventOutcome(
                    resources={"gold": 300},
                    governor_loyalty=-5,
                    message="The nobles are appeased and open their purses, though your governor resents the interference.",
                ),
            ),
            EventChoice(
                id="refuse",
                text="Refuse the Petition",
                description="Keep authority with the governor",
                outcome=EventOutcome(
                    resources={"influence": -30},
                    governor_loyalty=8,
                    message="Your governor stands firm, and the nobles grumble in their halls.",
                    followup_event_chance=0.25,
                ),
            ),
        ],
    ),

    # Artifacts
    "CRYSTAL_DISCOVERY": GameEvent(
        id="CRYSTAL_DISCOVERY",
        type=EventType.ARTIFACT,
        title="Mysterious Crystal",
        description="Miners found a glowing crystal deep underground. It pulses with an energy that seems to enhance nearby workers.",
        image_icon="💎",
        rarity=Rarity.LEGENDARY,
        impact_type=ImpactType.DELAYED,
        weight=2,
        requirements=EventRequirements(min_buildings={"MINE": 2}),
        choices=[
            EventChoice(
                id="study_crystal",
                text="Scientific Study",
                description="Research the crystal's properties",
                requirements=Requirements(min_buildings={"ACADEMY": 1}),
                cost={"gold": 1000, "influence": 100},
                outcome=EventOutcome(
                    resources={"influence": 200},
                    governor_xp=300,
                    message="Crystal study reveals ancient mining techniques! All mines gain permanent efficiency.",
                ),
            ),
            EventChoice(
                id="display_crystal",
                text="Create Monument",
                description="Display the crystal as a symbol of power",
                cost={"stone": 800, "gold": 500},
                outcome=EventOutcome(
                    resources={"influence": 300},
                    governor_loyalty=15,
                    message="The crystal monument inspires your people and attracts visitors from across the empire!",
                ),
            ),
        ],
    ),
}
