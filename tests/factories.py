"""
Sample compendium content and character data shared by the tests.
"""

from advancement_engine.core.content import compendium_uuid
from advancement_engine.documents.actor import Actor

FEATURES = [
    {
        "id": "frcEmpowered0001",
        "name": "Force-Empowered Self",
        "type": "feat",
        "system": {"type": {"value": "class", "subtype": ""}},
    },
    {
        "id": "guardianAura0001",
        "name": "Guardian Aura",
        "type": "feat",
        "system": {"type": {"value": "class", "subtype": ""}},
        "advancement": [
            {
                "id": "auraPower0000001",
                "type": "ItemChoice",
                "configuration": {
                    "choices": {"4": 1},
                    "pool": [
                        "Compendium.sw5e.powers.pwrBattleMed001",
                        "Compendium.sw5e.powers.pwrForcePush001",
                    ],
                    "allow_drops": False,
                    "type": "power",
                    "restriction": {"level": "1"},
                },
            }
        ],
    },
    {
        "id": "styleDefense0001",
        "name": "Defense Fighting Style",
        "type": "feat",
        "system": {"type": {"value": "class", "subtype": "fightingStyle"}},
    },
    {
        "id": "styleDueling0001",
        "name": "Dueling Fighting Style",
        "type": "feat",
        "system": {"type": {"value": "class", "subtype": "fightingStyle"}},
    },
    {
        "id": "formShiiCho00001",
        "name": "Shii-Cho",
        "type": "feat",
        "system": {"type": {"value": "class", "subtype": "lightsaberForm"}},
    },
    {
        "id": "featSentinel0001",
        "name": "Sentinel",
        "type": "feat",
        "system": {"type": {"value": "feat", "subtype": ""}},
    },
    {
        "id": "blasterRifle0001",
        "name": "Blaster Rifle",
        "type": "weapon",
    },
    {
        "id": "consularClass001",
        "name": "Consular",
        "type": "class",
    },
]

POWERS = [
    {"id": "pwrBattleMed001", "name": "Battle Meditation", "type": "power", "system": {"level": 1}},
    {"id": "pwrForcePush001", "name": "Force Push", "type": "power", "system": {"level": 1}},
    {"id": "pwrForceJump001", "name": "Force Jump", "type": "power", "system": {"level": 2}},
]


def feature_uuid(item_id: str) -> str:
    return compendium_uuid("classfeatures", item_id)


def power_uuid(item_id: str) -> str:
    return compendium_uuid("powers", item_id)


EMPOWERED = feature_uuid("frcEmpowered0001")
AURA = feature_uuid("guardianAura0001")
DEFENSE = feature_uuid("styleDefense0001")
DUELING = feature_uuid("styleDueling0001")
SHII_CHO = feature_uuid("formShiiCho00001")
SENTINEL = feature_uuid("featSentinel0001")
RIFLE = feature_uuid("blasterRifle0001")
CONSULAR = feature_uuid("consularClass001")
BATTLE_MEDITATION = power_uuid("pwrBattleMed001")
FORCE_PUSH = power_uuid("pwrForcePush001")
FORCE_JUMP = power_uuid("pwrForceJump001")

CLASS_ID = "guardianClass001"


def guardian_data(levels: int = 3) -> dict:
    """
    A Guardian class item with hit points recorded up to its level, items
    granted at level 4, a die scaling at 2 and 5, and a fighting style chosen
    at level 6.
    """
    rolls = [{"level": 1, "mode": "max", "result": 10, "bonus": 2}]
    rolls.extend(
        {"level": level, "mode": "avg", "result": 6, "bonus": 2}
        for level in range(2, levels + 1)
    )
    return {
        "id": CLASS_ID,
        "name": "Guardian",
        "type": "class",
        "system": {"identifier": "guardian", "levels": levels, "hit_dice": "d10"},
        "advancement": [
            {"id": "hitPoints0000001", "type": "HitPoints", "value": {"rolls": rolls}},
            {
                "id": "grantLevel000004",
                "type": "ItemGrant",
                "configuration": {"items": [EMPOWERED, AURA], "level": 4},
            },
            {
                "id": "scaleEmpowered01",
                "type": "ScaleValue",
                "configuration": {
                    "identifier": "force-empowered",
                    "type": "dice",
                    "scale": {"2": "d4", "5": "d6"},
                },
            },
            {
                "id": "styleChoice00006",
                "type": "ItemChoice",
                "configuration": {
                    "choices": {"6": 1},
                    "pool": [DEFENSE, DUELING],
                    "allow_drops": False,
                    "type": "feat",
                    "restriction": {"type": "class", "subtype": "fightingStyle"},
                },
            },
        ],
    }


def hit_points_for(levels: int) -> int:
    return 12 + 8 * (levels - 1)


def make_actor(*items: dict, con: int = 14, hp: int | None = None) -> Actor:
    """A character owning the given items, a level 3 Guardian by default."""
    items = items or (guardian_data(3),)
    levels = sum(i["system"]["levels"] for i in items if i["type"] == "class")
    hp = hit_points_for(levels) if hp is None else hp
    return Actor.model_validate(
        {
            "id": "kiraVenn00000001",
            "name": "Kira Venn",
            "system": {
                "abilities": {"str": 14, "dex": 12, "con": con, "int": 10, "wis": 15, "cha": 13},
                "attributes": {"hp": {"value": hp, "max": hp}},
                "details": {"original_class": CLASS_ID},
            },
            "items": list(items),
        }
    )
