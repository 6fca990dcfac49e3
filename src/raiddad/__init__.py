"""
RaidDad - read-only Destiny 2 account client.

Usage:
    from raiddad import Bungie, load_config

    bungie = Bungie(load_config())
    character = await bungie.get_current_character(player)
"""

from raiddad.bungie import Bungie
from raiddad.config import BungieConfig, load_config
from raiddad.errors import (
    ApiReturnedIncongruousCharacterLoadoutInformation,
    BungieApiError,
    BungieError,
    BungieHttpError,
    BungieTransportError,
    DecodeError,
    EmblemImageUrlsMissingOrMalformed,
    ItemModsAlreadyResolved,
    NoCharactersAssociatedWithPlayer,
)
from raiddad.hashes import (
    AmmoType,
    CharacterClass,
    DamageType,
    ItemSlot,
    Platform,
    SocketCategory,
    Tier,
)
from raiddad.models import Character, Clan, Item, Loadout, Member, Mod, Player
from raiddad.subclass import Subclass, SubclassTree

__all__ = [
    "Bungie",
    "BungieConfig",
    "load_config",
    "Player",
    "Member",
    "Clan",
    "Character",
    "Item",
    "Mod",
    "Loadout",
    "Subclass",
    "SubclassTree",
    "AmmoType",
    "CharacterClass",
    "DamageType",
    "ItemSlot",
    "Platform",
    "SocketCategory",
    "Tier",
    "BungieError",
    "BungieApiError",
    "BungieHttpError",
    "BungieTransportError",
    "DecodeError",
    "NoCharactersAssociatedWithPlayer",
    "EmblemImageUrlsMissingOrMalformed",
    "ApiReturnedIncongruousCharacterLoadoutInformation",
    "ItemModsAlreadyResolved",
]
