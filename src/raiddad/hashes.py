"""
RaidDad - Hash Mapper
Turns the opaque integers Bungie sends into closed enumerations.

The live game keeps adding buckets, tiers and damage types, so every lookup
has a designated fallback member and never raises on an unrecognized value.
Most of the tables are keyed by large manifest hashes, not small ordinals.
"""

from enum import Enum, IntEnum, IntFlag
from typing import Dict, Tuple


class ItemSlot(IntEnum):
    """Inventory bucket an item lives in. Values are bucket hashes."""
    OTHER = 0  # consumables, cosmetics, ghosts, ...

    SUBCLASS = 3284755031

    KINETIC = 1498876634
    ENERGY = 2465295065
    HEAVY = 953998645

    HELMET = 3448274439
    ARMS = 3551918588
    CHEST = 14239492
    LEGS = 20886954
    CLASS_ARMOR = 1585787867

    @classmethod
    def from_hash(cls, raw: int) -> "ItemSlot":
        return _SLOT_BY_HASH.get(raw, cls.OTHER)

    @property
    def is_weapon(self) -> bool:
        return self in WEAPON_SLOTS

    @property
    def is_armor(self) -> bool:
        return self in ARMOR_SLOTS


_SLOT_BY_HASH: Dict[int, ItemSlot] = {
    slot.value: slot for slot in ItemSlot if slot is not ItemSlot.OTHER
}

WEAPON_SLOTS = frozenset({ItemSlot.KINETIC, ItemSlot.ENERGY, ItemSlot.HEAVY})
ARMOR_SLOTS = frozenset({
    ItemSlot.HELMET, ItemSlot.ARMS, ItemSlot.CHEST, ItemSlot.LEGS,
    ItemSlot.CLASS_ARMOR,
})
# Slots kept when a character's equipment is indexed
TRACKED_SLOTS = WEAPON_SLOTS | ARMOR_SLOTS | {ItemSlot.SUBCLASS}


class Tier(IntEnum):
    """Rarity of an item definition."""
    UNKNOWN = 0
    CURRENCY = 1
    COMMON = 2
    UNCOMMON = 3
    RARE = 4
    LEGENDARY = 5
    EXOTIC = 6

    @classmethod
    def from_hash(cls, raw: int) -> "Tier":
        return _TIER_BY_HASH.get(raw, cls.UNKNOWN)

    @classmethod
    def from_tier_type(cls, raw: int) -> "Tier":
        return _TIER_BY_TYPE.get(raw, cls.UNKNOWN)


# inventory.tierTypeHash → Tier
_TIER_BY_HASH: Dict[int, Tier] = {
    1801258597: Tier.CURRENCY,
    3340296461: Tier.COMMON,      # "Basic"
    2395677314: Tier.UNCOMMON,    # "Common" in the manifest
    2127292149: Tier.RARE,
    4008398120: Tier.LEGENDARY,   # "Superior" in the manifest
    2759499571: Tier.EXOTIC,
}

# inventory.tierType (DestinyTierType) → Tier
_TIER_BY_TYPE: Dict[int, Tier] = {
    1: Tier.CURRENCY,
    2: Tier.COMMON,
    3: Tier.UNCOMMON,
    4: Tier.RARE,
    5: Tier.LEGENDARY,
    6: Tier.EXOTIC,
}


class DamageType(IntEnum):
    UNKNOWN = -1
    NONE = 0
    KINETIC = 1
    ARC = 2
    SOLAR = 3
    VOID = 4
    RAID = 5
    STASIS = 6
    STRAND = 7

    @classmethod
    def from_value(cls, raw: int) -> "DamageType":
        return _DAMAGE_BY_VALUE.get(raw, cls.UNKNOWN)


_DAMAGE_BY_VALUE: Dict[int, DamageType] = {
    d.value: d for d in DamageType if d is not DamageType.UNKNOWN
}


class AmmoType(IntEnum):
    UNKNOWN = -1
    NONE = 0       # not a weapon, or a redacted definition
    PRIMARY = 1
    SPECIAL = 2
    HEAVY = 3

    @classmethod
    def from_value(cls, raw: int) -> "AmmoType":
        return _AMMO_BY_VALUE.get(raw, cls.UNKNOWN)


_AMMO_BY_VALUE: Dict[int, AmmoType] = {
    a.value: a for a in AmmoType if a is not AmmoType.UNKNOWN
}


class SocketCategory(IntEnum):
    """socketCategoryHash values from item definitions."""
    OTHER = 0
    WEAPON_PERKS = 4241085061
    WEAPON_MODS = 2685412949
    WEAPON_COSMETICS = 2048875504
    INTRINSIC_TRAITS = 3956125808
    ARMOR_PERKS = 3154740035
    ARMOR_MODS = 590099826
    ARMOR_COSMETICS = 1926152773
    ARMOR_TIER = 760375309

    @classmethod
    def from_hash(cls, raw: int) -> "SocketCategory":
        return _SOCKET_CATEGORY_BY_HASH.get(raw, cls.OTHER)


_SOCKET_CATEGORY_BY_HASH: Dict[int, SocketCategory] = {
    c.value: c for c in SocketCategory if c is not SocketCategory.OTHER
}


class StatHash(IntEnum):
    """primaryStat.statHash of an item instance."""
    OTHER = 0
    ATTACK = 1480404414
    DEFENSE = 3897883278

    @classmethod
    def from_hash(cls, raw: int) -> "StatHash":
        return _STAT_BY_HASH.get(raw, cls.OTHER)


_STAT_BY_HASH: Dict[int, StatHash] = {
    s.value: s for s in StatHash if s is not StatHash.OTHER
}


class ItemState(IntFlag):
    """Independent flags packed into an equipped item's `state` field."""
    NONE = 0
    LOCKED = 1 << 0
    TRACKED = 1 << 1
    MASTERWORK = 1 << 2


class CharacterClass(IntEnum):
    TITAN = 0
    HUNTER = 1
    WARLOCK = 2
    UNKNOWN = 3

    @classmethod
    def from_value(cls, raw: int) -> "CharacterClass":
        if raw in (0, 1, 2):
            return cls(raw)
        return cls.UNKNOWN

    @property
    def display_name(self) -> str:
        return _CLASS_NAMES.get(self, "")


_CLASS_NAMES = {
    CharacterClass.TITAN: "Titan",
    CharacterClass.HUNTER: "Hunter",
    CharacterClass.WARLOCK: "Warlock",
}


class Platform(IntEnum):
    """BungieMembershipType. NONE doubles as the unknown platform."""
    ALL = -1
    NONE = 0
    XBOX = 1
    PSN = 2
    STEAM = 3
    BLIZZARD = 4
    STADIA = 5

    @classmethod
    def from_membership_type(cls, raw: int) -> "Platform":
        return _PLATFORM_BY_TYPE.get(raw, cls.NONE)


_PLATFORM_BY_TYPE: Dict[int, Platform] = {p.value: p for p in Platform}


class Element(str, Enum):
    ARC = "arc"
    SOLAR = "solar"
    VOID = "void"
    STASIS = "stasis"
    UNKNOWN = "unknown"


# Subclass item talentGridHash → (element, class)
_SUBCLASS_BY_TALENT_GRID: Dict[int, Tuple[Element, CharacterClass]] = {
    465529128: (Element.VOID, CharacterClass.HUNTER),      # Nightstalker
    2682165958: (Element.ARC, CharacterClass.HUNTER),      # Arcstrider
    3745224476: (Element.SOLAR, CharacterClass.HUNTER),    # Gunslinger
    1694254940: (Element.VOID, CharacterClass.TITAN),      # Sentinel
    2307176982: (Element.ARC, CharacterClass.TITAN),       # Striker
    2303449158: (Element.SOLAR, CharacterClass.TITAN),     # Sunbreaker
    3774745298: (Element.VOID, CharacterClass.WARLOCK),    # Voidwalker
    73217278: (Element.ARC, CharacterClass.WARLOCK),       # Stormcaller
    213798046: (Element.SOLAR, CharacterClass.WARLOCK),    # Dawnblade
}

UNKNOWN_SUBCLASS = (Element.UNKNOWN, CharacterClass.UNKNOWN)


def subclass_identity(talent_grid_hash) -> Tuple[Element, CharacterClass]:
    """Map a talent grid hash (or None) to its (element, class) pair."""
    if talent_grid_hash is None:
        return UNKNOWN_SUBCLASS
    return _SUBCLASS_BY_TALENT_GRID.get(talent_grid_hash, UNKNOWN_SUBCLASS)


# Character stats are keyed by numeric-string stat hashes
CHARACTER_STAT_HASHES: Dict[str, str] = {
    "mobility": "2996146975",
    "resilience": "392767087",
    "recovery": "1943323491",
    "discipline": "1735777505",
    "intellect": "144602215",
    "strength": "4244567218",
}
