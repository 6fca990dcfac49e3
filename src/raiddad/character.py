"""
RaidDad - Character Assembler
Stitches the profile response fragments into one Character.

Steps:
1. Profile fragment → player + character ids (none → NoCharactersAssociatedWithPlayer)
2. Characters fragment → most recently played character
3. Emblem paths → absolute URLs
4. Equipment fragment → weapons/armor/subclass, indexed by item hash
5. Item instances, re-indexed by the same item hash
6-7. Subclass talent grid → Subclass + SubclassTree
8. Transitory fragment → fireteam members (best effort)

The returned Character has an empty loadout; see loadout.py.
"""

import logging
from typing import Dict, List, Optional
from urllib.parse import urlparse

from raiddad.config import BUNGIE_ASSET_BASE
from raiddad.errors import (
    DecodeError,
    EmblemImageUrlsMissingOrMalformed,
    NoCharactersAssociatedWithPlayer,
)
from raiddad.fragments import (
    EquippedItem,
    ItemComponents,
    ItemInstance,
    RawCharacter,
    TalentGrid,
    decode_characters,
    decode_equipment,
    decode_item_components,
    decode_profile,
    decode_transitory,
    _require,
)
from raiddad.hashes import TRACKED_SLOTS, DamageType, ItemSlot
from raiddad.models import Character, Member, Player
from raiddad.subclass import Subclass, SubclassTree

logger = logging.getLogger(__name__)


def assemble_character(response: dict, asset_base: str = BUNGIE_ASSET_BASE) -> Character:
    """Build the player's active Character from a profile `Response` object.

    Args:
        response: The decoded `Response` member of a GetProfile call made with
            the profile, characters, equipment, item component and (optionally)
            transitory components.
        asset_base: Host prepended to relative emblem paths.

    Raises:
        NoCharactersAssociatedWithPlayer: the profile lists no characters.
        EmblemImageUrlsMissingOrMalformed: emblem paths don't form URLs.
        DecodeError: a fragment is structurally malformed.
    """
    profile = decode_profile(_require(response, "profile", dict, "response"))
    player = profile.player
    if not profile.character_ids:
        raise NoCharactersAssociatedWithPlayer(player.membership_id)

    characters = decode_characters(_require(response, "characters", dict, "response"))
    raw = select_active_character(characters)
    if raw is None:
        raise DecodeError(
            f"characters: no entries returned for {len(profile.character_ids)} character id(s)")

    emblem = _asset_url(asset_base, raw.emblem_path)
    emblem_background = _asset_url(asset_base, raw.emblem_background_path)
    if emblem is None or emblem_background is None:
        raise EmblemImageUrlsMissingOrMalformed(
            f"Character {raw.character_id}: emblem paths "
            f"{raw.emblem_path!r} / {raw.emblem_background_path!r} are not valid")

    all_equipment = decode_equipment(
        _require(response, "characterEquipment", dict, "response")).get(raw.character_id)
    if all_equipment is None:
        logger.warning(f"No equipment returned for character {raw.character_id}")
        all_equipment = []
    components = decode_item_components(_require(response, "itemComponents", dict, "response"))

    equipment = index_equipment(all_equipment)
    instances = index_instances(equipment, components)

    subclass_item = next((e for e in all_equipment if e.slot is ItemSlot.SUBCLASS), None)
    grid = None
    if subclass_item is not None and subclass_item.item_instance_id:
        grid = components.talent_grids.get(subclass_item.item_instance_id)
    subclass = derive_subclass(raw, subclass_item, grid, components)
    tree = SubclassTree.from_nodes(grid.activated_node_indexes if grid else [])

    stats = raw.stats
    character = Character(
        player=player,
        id=raw.character_id,
        class_type=raw.class_type,
        subclass=subclass,
        tree=tree,
        level=raw.level,
        light=raw.light,
        date_last_played=raw.date_last_played,
        emblem_path=emblem,
        emblem_background_path=emblem_background,
        mobility=stats["mobility"],
        resilience=stats["resilience"],
        recovery=stats["recovery"],
        discipline=stats["discipline"],
        intellect=stats["intellect"],
        strength=stats["strength"],
        fireteam_members=decode_fireteam(response.get("profileTransitoryData")),
        equipment=equipment,
        item_instances=instances,
        sockets=components.sockets,
    )
    logger.info(
        f"Assembled {player.display_name}'s {raw.class_type.display_name or 'character'} "
        f"{raw.character_id} ({subclass.name}, {tree.value}, "
        f"{len(equipment)} tracked items)")
    return character


def select_active_character(characters: Dict[str, RawCharacter]) -> Optional[RawCharacter]:
    """The most recently played character; ties go to the first listed."""
    return max(characters.values(), key=lambda c: c.date_last_played, default=None)


def _asset_url(base: str, path: str) -> Optional[str]:
    if not path or not path.startswith("/") or any(ch.isspace() for ch in path):
        return None
    url = base + path
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        return None
    return url


def index_equipment(items: List[EquippedItem]) -> Dict[int, EquippedItem]:
    """Keep weapons, armor and the subclass; later duplicates of a hash win."""
    indexed: Dict[int, EquippedItem] = {}
    for item in items:
        if item.slot in TRACKED_SLOTS:
            indexed[item.item_hash] = item
    return indexed


def index_instances(equipment: Dict[int, EquippedItem],
                    components: ItemComponents) -> Dict[int, ItemInstance]:
    """Instance stats keyed by item hash. Items without a match are left out."""
    indexed: Dict[int, ItemInstance] = {}
    for item_hash, item in equipment.items():
        if not item.item_instance_id:
            continue
        instance = components.instances.get(item.item_instance_id)
        if instance is not None:
            indexed[item_hash] = instance
    return indexed


def derive_subclass(raw: RawCharacter, subclass_item: Optional[EquippedItem],
                    grid: Optional[TalentGrid], components: ItemComponents) -> Subclass:
    """Subclass from the talent grid hash, falling back to Stasis.

    Stasis subclasses have no talent grid, so an equipped subclass item with
    no grid (or one whose instance reports Stasis damage) means Stasis for
    this character's class.
    """
    subclass = Subclass.from_talent_grid_hash(grid.talent_grid_hash if grid else None)
    if not subclass.is_unknown or subclass_item is None:
        return subclass

    instance = None
    if subclass_item.item_instance_id:
        instance = components.instances.get(subclass_item.item_instance_id)
    stasis_damage = instance is not None and instance.damage_type is DamageType.STASIS
    if grid is None or stasis_damage:
        return Subclass.stasis(raw.class_type)

    logger.debug(f"Unrecognized talent grid hash {grid.talent_grid_hash}")
    return subclass


def decode_fireteam(fragment) -> Optional[List[Member]]:
    """Online party members from the transitory fragment, or None.

    Bungie's transitory data is unreliable, so any decode failure just
    leaves the fireteam unknown.
    """
    if fragment is None:
        return None
    try:
        party = decode_transitory(fragment)
    except DecodeError as e:
        logger.debug(f"Ignoring undecodable transitory data: {e}")
        return None
    return [
        Member(is_online=True, player=Player(display_name=p.display_name,
                                             membership_id=p.membership_id))
        for p in party
    ]
