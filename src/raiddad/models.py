"""
RaidDad - Public Models
The values handed back to callers: players, clans, characters and loadouts.

Decoding lives in fragments.py; this module only holds the shapes and the
small amount of behaviour that belongs to them.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Dict, Iterator, List, Optional

from raiddad.errors import ItemModsAlreadyResolved
from raiddad.hashes import (
    AmmoType,
    CharacterClass,
    DamageType,
    ItemSlot,
    Platform,
    Tier,
)
from raiddad.subclass import Subclass, SubclassTree

if TYPE_CHECKING:
    from raiddad.fragments import EquippedItem, ItemInstance


@dataclass(frozen=True, order=True)
class Player:
    """A Destiny 2 player account. Sorts by display name."""
    display_name: str
    membership_id: str
    membership_type: int = 0

    @property
    def platform(self) -> Platform:
        return Platform.from_membership_type(self.membership_type)

    def to_json(self) -> dict:
        return {
            "displayName": self.display_name,
            "membershipId": self.membership_id,
            "membershipType": self.membership_type,
        }

    @classmethod
    def from_json(cls, data: dict) -> "Player":
        from raiddad.fragments import decode_player
        return decode_player(data)


@dataclass(frozen=True)
class Member:
    """A clan member, or a fireteam member synthesized from transitory data."""
    is_online: bool
    player: Player

    def __lt__(self, other: "Member") -> bool:
        return self.player < other.player


@dataclass(frozen=True)
class Clan:
    group_id: str
    name: str

    def to_json(self) -> dict:
        return {"groupId": self.group_id, "name": self.name}

    @classmethod
    def from_json(cls, data: dict) -> "Clan":
        from raiddad.fragments import decode_clan
        return decode_clan(data)


@dataclass(frozen=True)
class Mod:
    """One populated modification socket on an armor piece."""
    name: str
    icon: str


@dataclass
class Item:
    """A fully resolved equipped weapon or armor piece."""
    name: str
    icon: str
    damage_type: DamageType
    ammo_type: AmmoType
    power: int
    tier: Tier
    slot: ItemSlot
    is_fully_masterworked: bool = False
    # Manifest entry not yet public; fields exist but may be placeholders
    is_redacted: bool = False
    mods: Optional[List[Mod]] = None

    # Join keys, kept for the mod pass
    item_hash: int = 0
    instance_id: Optional[str] = None
    armor_mod_socket_indexes: tuple = ()

    @property
    def is_weapon(self) -> bool:
        return self.slot.is_weapon

    @property
    def is_armor(self) -> bool:
        return self.slot.is_armor

    @property
    def is_exotic_armor(self) -> bool:
        return self.slot.is_armor and self.tier is Tier.EXOTIC

    def attach_mods(self, mods: List[Mod]) -> None:
        """Set `mods`. Allowed once per item."""
        if self.mods is not None:
            raise ItemModsAlreadyResolved(f"Mods for {self.name!r} were already resolved")
        self.mods = list(mods)


@dataclass(frozen=True)
class Loadout:
    """The four slots RaidDad cares about. Any of them may be empty."""
    kinetic: Optional[Item] = None
    energy: Optional[Item] = None
    heavy: Optional[Item] = None
    exotic_armor: Optional[Item] = None

    @property
    def has_exotic_armor(self) -> bool:
        return self.exotic_armor is not None

    @classmethod
    def from_items(cls, items: List[Item]) -> "Loadout":
        def first(pred):
            return next((i for i in items if pred(i)), None)

        return cls(
            kinetic=first(lambda i: i.slot is ItemSlot.KINETIC),
            energy=first(lambda i: i.slot is ItemSlot.ENERGY),
            heavy=first(lambda i: i.slot is ItemSlot.HEAVY),
            exotic_armor=first(lambda i: i.is_exotic_armor),
        )

    def items(self) -> Iterator[Item]:
        """Populated slots in kinetic, energy, heavy, exotic armor order."""
        for item in (self.kinetic, self.energy, self.heavy, self.exotic_armor):
            if item is not None:
                yield item


@dataclass(eq=False)
class Character:
    """A player's in-game character.

    `loadout` starts empty and is filled once by the loadout resolver; the
    equipment/instance/socket maps are the unresolved references it uses.
    """
    player: Player
    id: str
    class_type: CharacterClass
    subclass: Subclass
    tree: SubclassTree
    level: int
    light: int
    date_last_played: datetime
    emblem_path: str
    emblem_background_path: str

    mobility: int = 0
    resilience: int = 0
    recovery: int = 0
    discipline: int = 0
    intellect: int = 0
    strength: int = 0

    loadout: Loadout = field(default_factory=Loadout)
    fireteam_members: Optional[List[Member]] = None

    # item hash → equipped reference / instance stats
    equipment: Dict[int, "EquippedItem"] = field(default_factory=dict, repr=False)
    item_instances: Dict[int, "ItemInstance"] = field(default_factory=dict, repr=False)
    # fragment id string → socket list
    sockets: Dict[str, list] = field(default_factory=dict, repr=False)

    @property
    def subclass_name(self) -> str:
        """E.g. "Gunslinger"."""
        return self.subclass.name

    @property
    def subclass_path(self) -> str:
        """E.g. "Way of the Outlaw"."""
        return self.tree.path_for(self.subclass)

    @property
    def subclass_tree(self) -> str:
        """Location of the tree in the in-game UI, e.g. "Top"."""
        return self.tree.value

    @property
    def subclass_super(self) -> str:
        """E.g. "Golden Gun"."""
        return self.tree.super_for(self.subclass)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Character):
            return NotImplemented
        return self.id == other.id and self.subclass == other.subclass

    def __hash__(self) -> int:
        return hash((self.id, self.subclass))
