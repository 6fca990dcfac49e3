"""
RaidDad - API Endpoints
Builds the BungieRequest for every remote call the client makes.

Paths follow https://bungie-net.github.io/multi/ ; names and ids are
URL-quoted here so callers can pass raw player tags and clan names.
"""

from typing import Iterable
from urllib.parse import quote

from raiddad.bungie_client import BungieRequest
from raiddad.config import BungieConfig
from raiddad.hashes import Platform

# Clan searches are scoped to groupType 1 (clans, not general groups)
GROUP_TYPE_CLAN = 1


def _url(config: BungieConfig, path: str) -> str:
    return f"{config.api_base}{path}"


def _quoted(value: str) -> str:
    return quote(value, safe="")


def find_player(config: BungieConfig, tag: str,
                platform: Platform = Platform.ALL) -> BungieRequest:
    return BungieRequest(
        url=_url(config, f"/Destiny2/SearchDestinyPlayer/{int(platform)}/{_quoted(tag)}/"))


def current_user(config: BungieConfig) -> BungieRequest:
    """Memberships of the signed-in user. Must be signed by the caller."""
    return BungieRequest(url=_url(config, "/User/GetMembershipsForCurrentUser/"))


def profile(config: BungieConfig, membership_id: str, platform: Platform,
            components: Iterable[int] = ()) -> BungieRequest:
    wanted = tuple(components) or config.profile_components
    return BungieRequest(
        url=_url(config, f"/Destiny2/{int(platform)}/Profile/{_quoted(membership_id)}/"),
        params={"components": ",".join(str(c) for c in wanted)},
    )


def item_definition(config: BungieConfig, item_hash: int) -> BungieRequest:
    return BungieRequest(
        url=_url(config, f"/Destiny2/Manifest/DestinyInventoryItemDefinition/{int(item_hash)}/"))


def clan(config: BungieConfig, group_id: str) -> BungieRequest:
    return BungieRequest(url=_url(config, f"/GroupV2/{_quoted(group_id)}/"))


def find_clan(config: BungieConfig, name: str) -> BungieRequest:
    return BungieRequest(
        url=_url(config, f"/GroupV2/Name/{_quoted(name)}/{GROUP_TYPE_CLAN}/"))


def clan_members(config: BungieConfig, group_id: str) -> BungieRequest:
    return BungieRequest(url=_url(config, f"/GroupV2/{_quoted(group_id)}/Members/"))
