"""
RaidDad - Fragment Decoders
Parses each independently shaped piece of a Bungie response into records.

Each decoder looks at exactly one fragment and knows nothing about the
others; joining them is the character assembler's job. Maps keyed by an
opaque id (character id, instance id, item hash as a string) are kept as
plain dicts from that string to the decoded record.

Only structural problems raise DecodeError: a missing required field, a
value of the wrong JSON type, an unparseable timestamp. Unrecognized hashes
and enum values go through raiddad.hashes and never fail.
"""

import json
import logging
import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from raiddad.config import PLATFORM_SUCCESS
from raiddad.errors import BungieApiError, DecodeError
from raiddad.hashes import (
    CHARACTER_STAT_HASHES,
    AmmoType,
    CharacterClass,
    DamageType,
    ItemSlot,
    ItemState,
    SocketCategory,
    StatHash,
    Tier,
)
from raiddad.models import Clan, Member, Player

logger = logging.getLogger(__name__)

_MISSING = object()
_FRACTION = re.compile(r"\.(\d+)(?=[+-]\d\d:\d\d$|$)")


# ─── Field helpers ───────────────────────────────────

def _type_name(kind) -> str:
    if isinstance(kind, tuple):
        return " or ".join(k.__name__ for k in kind)
    return kind.__name__


def _is_kind(value, kind) -> bool:
    # bool is an int subclass; JSON true/false must not pass as a number
    if isinstance(value, bool) and kind is not bool and not (
            isinstance(kind, tuple) and bool in kind):
        return False
    return isinstance(value, kind)


def _object(value, where: str) -> dict:
    if not isinstance(value, dict):
        raise DecodeError(f"{where}: expected object, got {type(value).__name__}")
    return value


def _require(data: dict, key: str, kind, where: str):
    """Return data[key], raising DecodeError if absent or of the wrong type."""
    value = _object(data, where).get(key, _MISSING)
    if value is _MISSING:
        raise DecodeError(f"{where}: missing required field '{key}'")
    if not _is_kind(value, kind):
        raise DecodeError(
            f"{where}.{key}: expected {_type_name(kind)}, got {type(value).__name__}")
    return value


def _optional(data: dict, key: str, kind, where: str, default=None):
    """Like _require, but an absent or null field yields `default`."""
    value = _object(data, where).get(key)
    if value is None:
        return default
    if not _is_kind(value, kind):
        raise DecodeError(
            f"{where}.{key}: expected {_type_name(kind)}, got {type(value).__name__}")
    return value


def _data_map(fragment: dict, where: str) -> Dict[str, Any]:
    """Unwrap the `{data: {<id>: value}}` shape shared by most components."""
    return _require(fragment, "data", dict, where)


def parse_timestamp(value: str, where: str = "timestamp") -> datetime:
    """Parse an ISO-8601 instant with a UTC designator, e.g. 2018-09-18T22:44:28Z.

    Fractional seconds of any length are accepted and cut to microseconds.
    """
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    text = _FRACTION.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), text, count=1)
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError as e:
        raise DecodeError(f"{where}: invalid ISO-8601 timestamp {value!r}") from e
    if parsed.tzinfo is None:
        raise DecodeError(f"{where}: timestamp {value!r} has no UTC designator")
    return parsed


# ─── API envelope ────────────────────────────────────

def decode_envelope(payload: bytes) -> Any:
    """Return the `Response` member of a platform response.

    Raises BungieApiError when the envelope reports a failure, e.g.
    SystemDisabled during maintenance.
    """
    try:
        root = json.loads(payload)
    except (ValueError, UnicodeDecodeError) as e:
        raise DecodeError(f"response body is not JSON: {e}") from e

    where = "envelope"
    error_code = _require(root, "ErrorCode", int, where)
    if error_code != PLATFORM_SUCCESS:
        raise BungieApiError(
            error_code=error_code,
            error_status=_optional(root, "ErrorStatus", str, where, ""),
            message=_optional(root, "Message", str, where, ""),
            throttle_seconds=_optional(root, "ThrottleSeconds", int, where, 0),
        )
    if "Response" not in root:
        raise DecodeError(f"{where}: missing required field 'Response'")
    return root["Response"]


# ─── Players, clans, members ─────────────────────────

def decode_player(data: dict, where: str = "player") -> Player:
    return Player(
        display_name=_require(data, "displayName", str, where),
        membership_id=_require(data, "membershipId", str, where),
        membership_type=_require(data, "membershipType", int, where),
    )


def decode_player_search(response) -> List[Player]:
    if not isinstance(response, list):
        raise DecodeError(f"player search: expected array, got {type(response).__name__}")
    return [decode_player(p, f"player search[{i}]") for i, p in enumerate(response)]


def decode_memberships(response) -> List[Player]:
    """destinyMemberships of the signed-in user."""
    memberships = _require(response, "destinyMemberships", list, "user")
    return [decode_player(p, f"user.destinyMemberships[{i}]")
            for i, p in enumerate(memberships)]


def decode_clan(data: dict, where: str = "clan") -> Clan:
    return Clan(
        group_id=_require(data, "groupId", str, where),
        name=_require(data, "name", str, where),
    )


def decode_clan_response(response) -> Clan:
    return decode_clan(_require(response, "detail", dict, "clan response"), "clan.detail")


def decode_member(data: dict, where: str = "member") -> Member:
    return Member(
        is_online=_require(data, "isOnline", bool, where),
        player=decode_player(_require(data, "destinyUserInfo", dict, where),
                             f"{where}.destinyUserInfo"),
    )


def decode_members(response) -> List[Member]:
    results = _require(response, "results", list, "members")
    return [decode_member(m, f"members[{i}]") for i, m in enumerate(results)]


# ─── Profile / characters ────────────────────────────

@dataclass(frozen=True)
class ProfileFragment:
    player: Player
    character_ids: List[str]


def decode_profile(fragment: dict) -> ProfileFragment:
    where = "profile.data"
    data = _require(fragment, "data", dict, "profile")
    ids = _require(data, "characterIds", list, where)
    for i, cid in enumerate(ids):
        if not isinstance(cid, str):
            raise DecodeError(f"{where}.characterIds[{i}]: expected str")
    return ProfileFragment(
        player=decode_player(_require(data, "userInfo", dict, where), f"{where}.userInfo"),
        character_ids=list(ids),
    )


@dataclass(frozen=True)
class RawCharacter:
    character_id: str
    light: int
    emblem_path: str
    emblem_background_path: str
    date_last_played: datetime
    level: int
    class_type: CharacterClass
    stats: Dict[str, int] = field(default_factory=dict)


def decode_character(data: dict, where: str = "character") -> RawCharacter:
    raw_stats = _require(data, "stats", dict, where)
    stats = {
        name: _require(raw_stats, stat_hash, int, f"{where}.stats")
        for name, stat_hash in CHARACTER_STAT_HASHES.items()
    }
    progression = _require(data, "levelProgression", dict, where)
    return RawCharacter(
        character_id=_require(data, "characterId", str, where),
        light=_require(data, "light", int, where),
        emblem_path=_require(data, "emblemPath", str, where),
        emblem_background_path=_require(data, "emblemBackgroundPath", str, where),
        date_last_played=parse_timestamp(
            _require(data, "dateLastPlayed", str, where), f"{where}.dateLastPlayed"),
        level=_require(progression, "level", int, f"{where}.levelProgression"),
        class_type=CharacterClass.from_value(_require(data, "classType", int, where)),
        stats=stats,
    )


def decode_characters(fragment: dict) -> Dict[str, RawCharacter]:
    """characterId → RawCharacter, in the fragment's key order."""
    return {
        cid: decode_character(raw, f"characters[{cid}]")
        for cid, raw in _data_map(fragment, "characters").items()
    }


# ─── Equipment ───────────────────────────────────────

@dataclass(frozen=True)
class EquippedItem:
    """An equipped item reference: static hash, runtime instance, bucket, flags."""
    item_hash: int
    item_instance_id: Optional[str]
    slot: ItemSlot
    state: ItemState = ItemState.NONE

    @property
    def is_masterwork(self) -> bool:
        return ItemState.MASTERWORK in self.state


def decode_equipped_item(data: dict, where: str = "item") -> EquippedItem:
    return EquippedItem(
        item_hash=_require(data, "itemHash", int, where),
        # Non-instanced items (e.g. some cosmetics) carry no instance id
        item_instance_id=_optional(data, "itemInstanceId", str, where),
        slot=ItemSlot.from_hash(_require(data, "bucketHash", int, where)),
        state=ItemState(_optional(data, "state", int, where, 0)),
    )


def decode_equipment(fragment: dict) -> Dict[str, List[EquippedItem]]:
    """characterId → equipped items, in the order Bungie lists them."""
    result = {}
    for cid, equipment in _data_map(fragment, "characterEquipment").items():
        where = f"characterEquipment[{cid}]"
        items = _require(equipment, "items", list, where)
        result[cid] = [decode_equipped_item(it, f"{where}.items[{i}]")
                       for i, it in enumerate(items)]
    return result


# ─── Item components ─────────────────────────────────

@dataclass(frozen=True)
class PrimaryStat:
    stat_hash: StatHash
    value: int


@dataclass(frozen=True)
class ItemInstance:
    """Live stats for one owned copy of an item."""
    damage_type: DamageType
    is_equipped: bool
    primary_stat: Optional[PrimaryStat] = None

    @property
    def power(self) -> Optional[int]:
        return self.primary_stat.value if self.primary_stat else None


def decode_item_instance(data: dict, where: str = "instance") -> ItemInstance:
    raw_stat = _optional(data, "primaryStat", dict, where)
    primary = None
    if raw_stat is not None:
        primary = PrimaryStat(
            stat_hash=StatHash.from_hash(_optional(raw_stat, "statHash", int, f"{where}.primaryStat", 0)),
            value=_require(raw_stat, "value", int, f"{where}.primaryStat"),
        )
    return ItemInstance(
        damage_type=DamageType.from_value(_require(data, "damageType", int, where)),
        is_equipped=_require(data, "isEquipped", bool, where),
        primary_stat=primary,
    )


@dataclass(frozen=True)
class TalentNode:
    node_index: int
    is_activated: bool


@dataclass(frozen=True)
class TalentGrid:
    talent_grid_hash: int
    nodes: Tuple[TalentNode, ...] = ()

    @property
    def activated_node_indexes(self) -> List[int]:
        return [n.node_index for n in self.nodes if n.is_activated]


def decode_talent_grid(data: dict, where: str = "talentGrid") -> TalentGrid:
    nodes = []
    for i, raw in enumerate(_require(data, "nodes", list, where)):
        nwhere = f"{where}.nodes[{i}]"
        nodes.append(TalentNode(
            node_index=_require(raw, "nodeIndex", int, nwhere),
            is_activated=_require(raw, "isActivated", bool, nwhere),
        ))
    return TalentGrid(
        talent_grid_hash=_require(data, "talentGridHash", int, where),
        nodes=tuple(nodes),
    )


@dataclass(frozen=True)
class Socket:
    """Live contents of one socket. An empty socket has no plug hash."""
    plug_hash: Optional[int]
    is_enabled: bool
    is_visible: bool

    @property
    def is_populated(self) -> bool:
        return self.plug_hash is not None and self.is_enabled and self.is_visible


def decode_socket(data: dict, where: str = "socket") -> Socket:
    return Socket(
        plug_hash=_optional(data, "plugHash", int, where),
        is_enabled=_require(data, "isEnabled", bool, where),
        # Bungie omits isVisible on some plug sets; absent means shown
        is_visible=_optional(data, "isVisible", bool, where, True),
    )


@dataclass
class ItemComponents:
    instances: Dict[str, ItemInstance] = field(default_factory=dict)
    talent_grids: Dict[str, TalentGrid] = field(default_factory=dict)
    sockets: Dict[str, List[Socket]] = field(default_factory=dict)


def _component(fragment: dict, key: str, where: str) -> Dict[str, Any]:
    """`{key: {data: {...}}}`; a component that wasn't returned is empty."""
    component = _optional(fragment, key, dict, where)
    if component is None:
        return {}
    return _optional(component, "data", dict, f"{where}.{key}", {})


def decode_item_components(fragment: dict) -> ItemComponents:
    where = "itemComponents"
    instances = {
        iid: decode_item_instance(raw, f"{where}.instances[{iid}]")
        for iid, raw in _data_map(_require(fragment, "instances", dict, where),
                                  f"{where}.instances").items()
    }
    talent_grids = {
        iid: decode_talent_grid(raw, f"{where}.talentGrids[{iid}]")
        for iid, raw in _component(fragment, "talentGrids", where).items()
    }
    sockets = {}
    for key, raw in _component(fragment, "sockets", where).items():
        swhere = f"{where}.sockets[{key}]"
        sockets[key] = [decode_socket(s, f"{swhere}[{i}]")
                        for i, s in enumerate(_require(raw, "sockets", list, swhere))]
    return ItemComponents(instances=instances, talent_grids=talent_grids, sockets=sockets)


# ─── Transitory (fireteam) ───────────────────────────

@dataclass(frozen=True)
class PartyMember:
    membership_id: str
    display_name: str


def decode_transitory(fragment: dict) -> List[PartyMember]:
    where = "profileTransitoryData.data"
    data = _require(fragment, "data", dict, "profileTransitoryData")
    members = []
    for i, raw in enumerate(_require(data, "partyMembers", list, where)):
        mwhere = f"{where}.partyMembers[{i}]"
        members.append(PartyMember(
            membership_id=_require(raw, "membershipId", str, mwhere),
            display_name=_require(raw, "displayName", str, mwhere),
        ))
    return members


# ─── Static definitions ──────────────────────────────

@dataclass(frozen=True)
class ItemDefinition:
    """Manifest metadata for an item type, independent of any owned copy."""
    hash: int
    name: str
    icon: str             # relative path, may be empty for redacted items
    tier: Tier
    slot: ItemSlot
    ammo_type: AmmoType = AmmoType.NONE
    is_redacted: bool = False
    armor_mod_socket_indexes: Tuple[int, ...] = ()

    @property
    def is_weapon(self) -> bool:
        return self.slot.is_weapon

    @property
    def is_armor(self) -> bool:
        return self.slot.is_armor

    @property
    def is_exotic_armor(self) -> bool:
        return self.slot.is_armor and self.tier is Tier.EXOTIC


@dataclass(frozen=True)
class DisplayProperties:
    name: str
    icon: str = ""


def decode_display_properties(data: dict, where: str = "definition") -> DisplayProperties:
    display = _require(data, "displayProperties", dict, where)
    dwhere = f"{where}.displayProperties"
    return DisplayProperties(
        name=_require(display, "name", str, dwhere),
        icon=_optional(display, "icon", str, dwhere, ""),
    )


def _decode_tier(inventory: dict, where: str) -> Tier:
    tier_hash = _optional(inventory, "tierTypeHash", int, where)
    if tier_hash is not None:
        return Tier.from_hash(tier_hash)
    return Tier.from_tier_type(_optional(inventory, "tierType", int, where, 0))


def _armor_mod_socket_indexes(sockets: Optional[dict], where: str) -> Tuple[int, ...]:
    if sockets is None:
        return ()
    indexes: List[int] = []
    categories = _optional(sockets, "socketCategories", list, where, [])
    for i, category in enumerate(categories):
        cwhere = f"{where}.socketCategories[{i}]"
        kind = SocketCategory.from_hash(_require(category, "socketCategoryHash", int, cwhere))
        if kind is not SocketCategory.ARMOR_MODS:
            continue
        for idx in _require(category, "socketIndexes", list, cwhere):
            if not _is_kind(idx, int):
                raise DecodeError(f"{cwhere}.socketIndexes: expected int")
            indexes.append(idx)
    return tuple(indexes)


def decode_item_definition(data: dict) -> ItemDefinition:
    where = "definition"
    display = decode_display_properties(data, where)
    inventory = _require(data, "inventory", dict, where)
    iwhere = f"{where}.inventory"
    equipping = _optional(data, "equippingBlock", dict, where)
    ammo = AmmoType.NONE
    if equipping is not None:
        ammo = AmmoType.from_value(_optional(equipping, "ammoType", int, f"{where}.equippingBlock", 0))
    return ItemDefinition(
        hash=_require(data, "hash", int, where),
        name=display.name,
        icon=display.icon,
        tier=_decode_tier(inventory, iwhere),
        slot=ItemSlot.from_hash(_require(inventory, "bucketTypeHash", int, iwhere)),
        ammo_type=ammo,
        is_redacted=_optional(data, "redacted", bool, where, False),
        armor_mod_socket_indexes=_armor_mod_socket_indexes(
            _optional(data, "sockets", dict, where), f"{where}.sockets"),
    )
