"""Static game-data tables for World of Warcraft transmog classification.

# --- PURPOSE -----------------------------------------------------------
#
# Hand-curated knowledge about the game used by the classification
# heuristics and the filter endpoint:
#
#   - the canonical playable-class enumeration and the armor type each
#     class wears,
#   - per-class keyword lists used to guess a class from a set's name
#     ("Dreadnaught Battlegear" -> Warrior),
#   - Gladiator (PvP) name hints, which need their own pass because every
#     class gets a "Gladiator's ..." set,
#   - item-id breakpoints per expansion, and the item quality ladder.
#
# Everything here is plain data.  The keyword and Gladiator tables are
# defaults: config/config.yaml can override them per class.
# ----------------------------------------------------------------------
"""

from __future__ import annotations

import re

UNKNOWN = "Unknown"
ALL_CLASSES = "All"


# =========================================================================
# 1. PLAYABLE CLASSES
# =========================================================================
# Order matters: it is the order the filter endpoint lists classes in.

CANONICAL_CLASSES: tuple[str, ...] = (
    "Warrior",
    "Paladin",
    "Hunter",
    "Rogue",
    "Priest",
    "DeathKnight",
    "Shaman",
    "Mage",
    "Warlock",
    "Monk",
    "Druid",
    "DemonHunter",
    "Evoker",
)

_CLASS_KEY_RE = re.compile(r"[^a-z]")


def class_key(name: str) -> str:
    """Normalise a class display name for lookup: lowercase, letters only.

    ``"Death Knight"``, ``"death-knight"`` and ``"DeathKnight"`` all become
    ``"deathknight"``.
    """
    return _CLASS_KEY_RE.sub("", name.lower())


CLASS_BY_KEY: dict[str, str] = {class_key(c): c for c in CANONICAL_CLASSES}


# =========================================================================
# 2. ARMOR TYPES
# =========================================================================

ARMOR_CLASSES: dict[str, list[str]] = {
    "cloth": ["Mage", "Priest", "Warlock"],
    "leather": ["Rogue", "Druid", "Monk", "DemonHunter"],
    "mail": ["Hunter", "Shaman", "Evoker"],
    "plate": ["Warrior", "Paladin", "DeathKnight"],
}


# =========================================================================
# 3. NAME KEYWORDS
# =========================================================================
# Class -> lowercase substrings of set names.  Dictionary order decides
# the order of classes when a name matches more than one entry
# ("dreadnaught" is both a Warrior and a Death Knight tier name).

CLASS_KEYWORDS: dict[str, list[str]] = {
    "Warrior": [
        "battlegear of might", "wrath", "dreadnaught", "onslaught",
        "destroyer", "warbringer", "conqueror", "ymirjar lord",
    ],
    "Paladin": [
        "lawbringer", "judgement", "avenger", "justicar", "crystalforge",
        "lightbringer", "redemption", "radiant",
    ],
    "Hunter": [
        "giantstalker", "dragonstalker", "cryptstalker", "beast lord",
        "demon stalker", "gronnstalker", "scourgestalker", "windrunner",
    ],
    "Rogue": [
        "nightslayer", "bloodfang", "bonescythe", "netherblade", "slayer",
        "deathmantle", "terrorblade", "shadowblade",
    ],
    "Priest": [
        "prophecy", "transcendence", "vestments of faith", "incarnate",
        "avatar", "absolution", "sanctification", "zabra",
    ],
    "DeathKnight": [
        "dreadnaught", "scourgelord", "darkruned", "sanctified scourgelord",
        "magma plated",
    ],
    "Shaman": [
        "earthfury", "ten storms", "tidefury", "cyclone", "skyshatter",
        "cataclysm", "worldbreaker", "frost witch",
    ],
    "Mage": [
        "arcanist", "netherwind", "frostfire", "tirisfal", "tempest",
        "aldor", "kirin tor", "firehawk",
    ],
    "Warlock": [
        "felheart", "nemesis", "plagueheart", "voidheart", "corruptor",
        "malefic", "deathbringer", "shadowflame",
    ],
    "Monk": [
        "vestments of the eternal dynasty", "fire-charm",
        "battlegear of the thousandfold blades", "white tiger",
    ],
    "Druid": [
        "cenarion", "stormrage", "dreamwalker", "malorne", "nordrassil",
        "thunderheart", "nightsong", "lasherweave", "obsidian arborweave",
    ],
    "DemonHunter": [
        "diabolic", "demonbane", "vestments of blind absolution",
        "regalia of the dashing scoundrel",
    ],
    "Evoker": [
        "scales of the awakened", "draconic hierophant",
        "elements of infusion",
    ],
}


# =========================================================================
# 4. GLADIATOR HINTS
# =========================================================================
# Checked in order; the first hint found in a "Gladiator's ..." name wins.
# "wildhide" precedes "hide" so the specific hint is tried first.

GLADIATOR_HINTS: dict[str, list[str]] = {
    "wildhide": ["Druid"],
    "hide": ["Druid"],
    "raiment": ARMOR_CLASSES["cloth"],
    "vestments": ARMOR_CLASSES["cloth"],
    "battlegear": ARMOR_CLASSES["plate"],
    "armor": ARMOR_CLASSES["plate"],
    "mail": ARMOR_CLASSES["mail"],
    "leather": ARMOR_CLASSES["leather"],
}


# =========================================================================
# 5. EXPANSIONS
# =========================================================================
# Item ids are assigned chronologically upstream, so an id range is a
# reliable expansion signal.  Each bound is exclusive.

EXPANSIONS: tuple[str, ...] = (
    "Classic",
    "Burning Crusade",
    "Wrath of the Lich King",
    "Cataclysm",
    "Mists of Pandaria",
    "Warlords of Draenor",
    "Legion",
    "Battle for Azeroth",
    "Shadowlands",
    "Dragonflight",
    "The War Within",
)

EXPANSION_BREAKPOINTS: tuple[tuple[int, str], ...] = (
    (25000, "Classic"),
    (35000, "Burning Crusade"),
    (57000, "Wrath of the Lich King"),
    (79000, "Cataclysm"),
    (106000, "Mists of Pandaria"),
    (124000, "Warlords of Draenor"),
    (153000, "Legion"),
    (175000, "Battle for Azeroth"),
    (190000, "Shadowlands"),
    (212000, "Dragonflight"),
)

LATEST_EXPANSION = EXPANSIONS[-1]


def expansion_rank(label: str) -> int:
    """Chronological position of an expansion label; Unknown sorts last."""
    try:
        return EXPANSIONS.index(label)
    except ValueError:
        return len(EXPANSIONS)


# =========================================================================
# 6. QUALITIES
# =========================================================================

QUALITIES: tuple[str, ...] = (
    "Poor",
    "Common",
    "Uncommon",
    "Rare",
    "Epic",
    "Legendary",
    "Artifact",
    "Heirloom",
)


def quality_rank(label: str) -> int:
    try:
        return QUALITIES.index(label)
    except ValueError:
        return len(QUALITIES)
