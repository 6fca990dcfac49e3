"""
RaidDad - Subclass
Subclass identity and the active tree, derived rather than decoded.

The profile only exposes the subclass item's opaque talent grid hash and the
indexes of its activated nodes, so both values are built by hand here.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional, Tuple

from raiddad.hashes import CharacterClass, Element, subclass_identity

MYSTERY = "It's a mystery…"


@dataclass(frozen=True)
class Subclass:
    """An element × class combination, e.g. Solar Hunter."""
    element: Element
    class_type: CharacterClass

    @classmethod
    def unknown(cls) -> "Subclass":
        return cls(Element.UNKNOWN, CharacterClass.UNKNOWN)

    @classmethod
    def stasis(cls, class_type: CharacterClass) -> "Subclass":
        """The element-less subclass group that ships without a talent grid."""
        return cls(Element.STASIS, class_type)

    @classmethod
    def from_talent_grid_hash(cls, talent_grid_hash: Optional[int]) -> "Subclass":
        element, class_type = subclass_identity(talent_grid_hash)
        return cls(element, class_type)

    @property
    def is_unknown(self) -> bool:
        return self.element is Element.UNKNOWN

    @property
    def name(self) -> str:
        """The common name of the subclass, e.g. "Gunslinger"."""
        return SUBCLASS_NAMES.get((self.element, self.class_type), MYSTERY)


class SubclassTree(str, Enum):
    """Where the chosen tree sits on the in-game subclass screen."""
    TOP = "Top"
    BOTTOM = "Bottom"
    MIDDLE = "Middle"
    UNKNOWN = "Unknown"

    @classmethod
    def from_nodes(cls, activated_node_indexes: Iterable[int]) -> "SubclassTree":
        """Pick the tree from the activated node indexes of a talent grid.

        Bands are checked in TOP, BOTTOM, MIDDLE order; the first band holding
        any activated node wins.
        """
        nodes = set(activated_node_indexes)
        for tree, (low, high) in TREE_NODE_BANDS:
            if any(low <= n <= high for n in nodes):
                return tree
        return cls.UNKNOWN

    def path_for(self, subclass: Subclass) -> str:
        """The name of this tree's path, e.g. "Way of the Outlaw"."""
        return TREE_PATHS.get((subclass.element, subclass.class_type, self), MYSTERY)

    def super_for(self, subclass: Subclass) -> str:
        """The super granted by this tree, e.g. "Golden Gun"."""
        key = (subclass.element, subclass.class_type)
        if self is SubclassTree.MIDDLE and key in MIDDLE_TREE_SUPERS:
            return MIDDLE_TREE_SUPERS[key]
        return SUPERS.get(key, MYSTERY)


# Inclusive node index bands per tree
TREE_NODE_BANDS: Tuple[Tuple[SubclassTree, Tuple[int, int]], ...] = (
    (SubclassTree.TOP, (11, 14)),
    (SubclassTree.BOTTOM, (15, 18)),
    (SubclassTree.MIDDLE, (20, 23)),
)

_H, _T, _W = CharacterClass.HUNTER, CharacterClass.TITAN, CharacterClass.WARLOCK
_ARC, _SOLAR, _VOID, _STASIS = Element.ARC, Element.SOLAR, Element.VOID, Element.STASIS

SUBCLASS_NAMES = {
    (_SOLAR, _H): "Gunslinger",
    (_SOLAR, _T): "Sunbreaker",
    (_SOLAR, _W): "Dawnblade",
    (_ARC, _H): "Arcstrider",
    (_ARC, _T): "Striker",
    (_ARC, _W): "Stormcaller",
    (_VOID, _H): "Nightstalker",
    (_VOID, _T): "Sentinel",
    (_VOID, _W): "Voidwalker",
    (_STASIS, _H): "Revenant",
    (_STASIS, _T): "Behemoth",
    (_STASIS, _W): "Shadebinder",
}

_TOP, _BOTTOM, _MIDDLE = SubclassTree.TOP, SubclassTree.BOTTOM, SubclassTree.MIDDLE

TREE_PATHS = {
    (_SOLAR, _H, _TOP): "Way of the Outlaw",
    (_SOLAR, _H, _BOTTOM): "Way of the Sharpshooter",
    (_SOLAR, _H, _MIDDLE): "Way of a Thousand Cuts",
    (_SOLAR, _T, _TOP): "Code of the Fire-Forged",
    (_SOLAR, _T, _BOTTOM): "Code of the Siegebreaker",
    (_SOLAR, _T, _MIDDLE): "Code of the Devastator",
    (_SOLAR, _W, _TOP): "Attunement of Sky",
    (_SOLAR, _W, _BOTTOM): "Attunement of Flame",
    (_SOLAR, _W, _MIDDLE): "Attunement of Grace",
    (_ARC, _H, _TOP): "Way of the Warrior",
    (_ARC, _H, _BOTTOM): "Way of the Wind",
    (_ARC, _H, _MIDDLE): "Way of the Current",
    (_ARC, _T, _TOP): "Code of the Earthshaker",
    (_ARC, _T, _BOTTOM): "Code of the Juggernaut",
    (_ARC, _T, _MIDDLE): "Code of the Missile",
    (_ARC, _W, _TOP): "Attunement of Conduction",
    (_ARC, _W, _BOTTOM): "Attunement of the Elements",
    (_ARC, _W, _MIDDLE): "Attunement of Control",
    (_VOID, _H, _TOP): "Way of the Trapper",
    (_VOID, _H, _BOTTOM): "Way of the Pathfinder",
    (_VOID, _H, _MIDDLE): "Way of the Wraith",
    (_VOID, _T, _TOP): "Code of the Protector",
    (_VOID, _T, _BOTTOM): "Code of the Aggressor",
    (_VOID, _T, _MIDDLE): "Code of the Commander",
    (_VOID, _W, _TOP): "Attunement of Chaos",
    (_VOID, _W, _BOTTOM): "Attunement of Hunger",
    (_VOID, _W, _MIDDLE): "Attunement of Fission",
}

# Top and bottom trees share a super; the middle tree has its own
SUPERS = {
    (_SOLAR, _H): "Golden Gun",
    (_SOLAR, _T): "Hammer of Sol",
    (_SOLAR, _W): "Daybreak",
    (_ARC, _H): "Arc Staff",
    (_ARC, _T): "Fists of Havok",
    (_ARC, _W): "Stormtrance",
    (_VOID, _H): "Shadow Shot",
    (_VOID, _T): "Sentinel Shield",
    (_VOID, _W): "Nova Bomb",
    (_STASIS, _H): "Silence and Squall",
    (_STASIS, _T): "Glacial Quake",
    (_STASIS, _W): "Winter's Wrath",
}

MIDDLE_TREE_SUPERS = {
    (_SOLAR, _H): "Blade Barrage",
    (_SOLAR, _T): "Burning Maul",
    (_SOLAR, _W): "Well of Radiance",
    (_ARC, _H): "Whirlwind Guard",
    (_ARC, _T): "Thundercrash",
    (_ARC, _W): "Chaos Reach",
    (_VOID, _H): "Spectral Blades",
    (_VOID, _T): "Banner Shield",
    (_VOID, _W): "Nova Warp",
}
