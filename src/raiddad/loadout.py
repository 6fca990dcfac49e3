"""
RaidDad - Loadout & Mod Resolvers
Turns a Character's unresolved equipment references into Items.

Pipeline:
1. Fan out one definition lookup per equipped item hash
2. Keep weapon and armor definitions
3. Join each with its equipment reference and instance stats by item hash
   (a missing half → ApiReturnedIncongruousCharacterLoadoutInformation)
4. Build Items, skipping ones without a power level
5. Optionally fan out again for the plugs in each armor piece's mod sockets
6. Project into the four-slot Loadout

Lookups run concurrently and each result carries the hash it was requested
with, so joins never depend on completion order. The first failed lookup
fails the whole resolution; there are no partial loadouts.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Dict, Iterable, List, Optional, Tuple

from raiddad.config import BUNGIE_ASSET_BASE
from raiddad.errors import ApiReturnedIncongruousCharacterLoadoutInformation
from raiddad.fragments import (
    EquippedItem,
    ItemDefinition,
    ItemInstance,
    Socket,
    decode_display_properties,
    decode_item_definition,
)
from raiddad.models import Character, Item, Loadout, Mod

logger = logging.getLogger(__name__)

# item hash → (same item hash, raw manifest definition)
DefinitionFetcher = Callable[[int], Awaitable[Tuple[int, dict]]]


async def fetch_all(fetch: DefinitionFetcher, hashes: Iterable[int]) -> Dict[int, dict]:
    """Fetch every distinct hash concurrently; keyed by the requested hash."""
    distinct = list(dict.fromkeys(hashes))
    if not distinct:
        return {}
    results = await asyncio.gather(*(fetch(h) for h in distinct))
    return {item_hash: raw for item_hash, raw in results}


def icon_url(asset_base: str, path: str) -> str:
    """Absolute URL for a relative manifest icon path; empty stays empty."""
    return asset_base + path if path else ""


def build_item(definition: ItemDefinition, equip: EquippedItem, instance: ItemInstance,
               asset_base: str = BUNGIE_ASSET_BASE) -> Optional[Item]:
    """Join a definition with its equipment reference and instance stats.

    Returns None when the instance has no power level yet.
    """
    power = instance.power
    if power is None:
        return None
    return Item(
        name=definition.name,
        icon=icon_url(asset_base, definition.icon),
        damage_type=instance.damage_type,
        ammo_type=definition.ammo_type,
        power=power,
        tier=definition.tier,
        slot=definition.slot,
        is_fully_masterworked=equip.is_masterwork,
        is_redacted=definition.is_redacted,
        item_hash=equip.item_hash,
        instance_id=equip.item_instance_id,
        armor_mod_socket_indexes=definition.armor_mod_socket_indexes,
    )


async def resolve_items(character: Character, fetch: DefinitionFetcher,
                        asset_base: str = BUNGIE_ASSET_BASE) -> List[Item]:
    """Resolve the character's equipped weapons and armor into Items."""
    raw_definitions = await fetch_all(fetch, character.equipment.keys())

    items: List[Item] = []
    for item_hash, raw in raw_definitions.items():
        definition = decode_item_definition(raw)
        if not (definition.is_weapon or definition.is_armor):
            continue

        equip = character.equipment.get(item_hash)
        instance = character.item_instances.get(item_hash)
        if equip is None or instance is None:
            raise ApiReturnedIncongruousCharacterLoadoutInformation(
                f"Item {item_hash} ({definition.name!r}) on character {character.id} "
                f"has {'no equipment entry' if equip is None else 'no instance data'}")

        item = build_item(definition, equip, instance, asset_base)
        if item is None:
            logger.debug(f"Skipping {definition.name!r}: no power level on instance")
            continue
        items.append(item)

    logger.info(f"Resolved {len(items)} items for character {character.id}")
    return items


async def resolve_loadout(character: Character, fetch: DefinitionFetcher,
                          asset_base: str = BUNGIE_ASSET_BASE) -> Loadout:
    return Loadout.from_items(await resolve_items(character, fetch, asset_base))


def sockets_for(character: Character, item: Item) -> List[Socket]:
    """Live sockets for an item: by instance id, then by item hash."""
    if item.instance_id and item.instance_id in character.sockets:
        return character.sockets[item.instance_id]
    return character.sockets.get(str(item.item_hash), [])


def populated_mod_plugs(item: Item, sockets: List[Socket]) -> List[int]:
    """Plug hashes in the item's armor-mod sockets that are enabled and visible."""
    plugs = []
    for index in item.armor_mod_socket_indexes:
        if 0 <= index < len(sockets) and sockets[index].is_populated:
            plugs.append(sockets[index].plug_hash)
    return plugs


async def resolve_mods(character: Character, items: Iterable[Item], fetch: DefinitionFetcher,
                       asset_base: str = BUNGIE_ASSET_BASE) -> List[Item]:
    """Attach Mods to every armor piece.

    Items are updated in place and returned. Pieces whose sockets are
    missing or empty end up with an empty list.
    """
    items = list(items)
    targets: Dict[str, Item] = {}
    plugs_by_item: Dict[str, List[int]] = {}
    for item in items:
        if not item.is_armor:
            continue
        key = item.instance_id or str(item.item_hash)
        targets[key] = item
        plugs_by_item[key] = populated_mod_plugs(item, sockets_for(character, item))

    raw_plugs = await fetch_all(
        fetch, (h for plugs in plugs_by_item.values() for h in plugs))
    mods: Dict[int, Mod] = {}
    for plug_hash, raw in raw_plugs.items():
        display = decode_display_properties(raw, f"plug[{plug_hash}]")
        mods[plug_hash] = Mod(
            name=display.name,
            icon=icon_url(asset_base, display.icon),
        )

    for key, item in targets.items():
        item.attach_mods([mods[h] for h in plugs_by_item[key]])

    if targets:
        logger.info(f"Resolved {len(mods)} distinct mods across {len(targets)} armor pieces")
    return items
