"""
RaidDad - Bungie facade
Async entry points for players, clans, characters and loadouts.

Usage:
    from raiddad import Bungie, load_config

    bungie = Bungie(load_config())
    players = await bungie.search_for_player("WeirdRituals#1656")
    character = await bungie.get_current_character(players[0])
    print(character.loadout.kinetic.name)

The transport is synchronous (send(request) -> (bytes, status)), so every
call is pushed onto the default thread executor; fan-outs simply await
many of those at once.
"""

import asyncio
import logging
from typing import Callable, Iterable, List, Optional, Tuple

from raiddad import api
from raiddad.bungie_client import BungieClient, BungieRequest, Send
from raiddad.character import assemble_character
from raiddad.config import BungieConfig
from raiddad.errors import BungieHttpError
from raiddad.fragments import (
    ItemDefinition,
    decode_clan_response,
    decode_envelope,
    decode_item_definition,
    decode_members,
    decode_memberships,
    decode_player_search,
)
from raiddad.hashes import Platform
from raiddad.loadout import resolve_items, resolve_mods
from raiddad.models import Character, Clan, Item, Loadout, Member, Player

logger = logging.getLogger(__name__)


class Bungie:
    """
    Reads account data from the Bungie.net platform API.

    Usage:
        bungie = Bungie(config)                 # default requests transport
        bungie = Bungie(config, send=my_send)   # caller-supplied transport
    """

    def __init__(self, config: BungieConfig, send: Optional[Send] = None):
        self.config = config
        self._send = send or BungieClient(config).send

    async def _call(self, request: BungieRequest):
        """Send `request` off the event loop and unwrap the platform envelope."""
        loop = asyncio.get_running_loop()
        body, status = await loop.run_in_executor(None, self._send, request)
        if status != 200:
            logger.warning(f"Bungie API error: HTTP {status} for {request.url}")
            raise BungieHttpError(status, request.url)
        return decode_envelope(body)

    # ── Players ────────────────────────────────────────────

    async def search_for_player(self, tag: str,
                                platform: Platform = Platform.ALL) -> List[Player]:
        """Search for a player tag. Steam/Battle.net tags need the "#1234" suffix."""
        response = await self._call(api.find_player(self.config, tag, platform))
        players = decode_player_search(response)
        logger.info(f"Player search {tag!r}: {len(players)} result(s)")
        return players

    async def get_current_player(
            self, sign_request: Callable[[BungieRequest], BungieRequest]) -> List[Player]:
        """Destiny memberships of the signed-in user.

        `sign_request` adds the caller's OAuth credentials; this package never
        builds auth headers itself.
        """
        request = sign_request(api.current_user(self.config))
        return decode_memberships(await self._call(request))

    # ── Clans ──────────────────────────────────────────────

    async def get_clan(self, group_id: str) -> Clan:
        return decode_clan_response(await self._call(api.clan(self.config, group_id)))

    async def search_for_clan(self, name: str) -> Clan:
        return decode_clan_response(await self._call(api.find_clan(self.config, name)))

    async def get_members(self, clan: Clan) -> List[Member]:
        response = await self._call(api.clan_members(self.config, clan.group_id))
        members = decode_members(response)
        logger.info(f"Clan {clan.name!r}: {len(members)} member(s)")
        return members

    # ── Characters ─────────────────────────────────────────

    async def get_current_character_without_loadout(self, player: Player) -> Character:
        """The player's most recently played Character, with an empty loadout.

        Use get_loadout() to fill it in later.
        """
        request = api.profile(self.config, player.membership_id, player.platform)
        response = await self._call(request)
        return assemble_character(response, self.config.asset_base)

    async def get_current_character(self, player: Player,
                                    include_mods: bool = True) -> Character:
        """The player's most recently played Character with its loadout."""
        character = await self.get_current_character_without_loadout(player)
        character.loadout = await self.get_loadout(character, include_mods=include_mods)
        return character

    # ── Items ──────────────────────────────────────────────

    async def get_definition(self, item_hash: int) -> Tuple[int, dict]:
        """Raw manifest definition, paired with the hash it was requested for."""
        response = await self._call(api.item_definition(self.config, item_hash))
        return item_hash, response

    async def get_item_definition(self, item_hash: int) -> Tuple[int, ItemDefinition]:
        item_hash, raw = await self.get_definition(item_hash)
        return item_hash, decode_item_definition(raw)

    async def get_loadout(self, character: Character, include_mods: bool = True) -> Loadout:
        """Resolve the four-slot Loadout for an assembled character."""
        items = await resolve_items(character, self.get_definition, self.config.asset_base)
        if include_mods:
            await self.resolve_mods(character, items)
        return Loadout.from_items(items)

    async def resolve_mods(self, character: Character, items: Iterable[Item]) -> List[Item]:
        return await resolve_mods(character, items, self.get_definition, self.config.asset_base)
