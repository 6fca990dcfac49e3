"""
RaidDad - Command line
Look up a player's current character and loadout, or list a clan.

Usage:
    python -m raiddad player "WeirdRituals#1656"
    python -m raiddad player "b3ll" --platform blizzard --no-mods
    python -m raiddad clan "Meow Pew Pew"
    python -m raiddad --debug clan "Meow Pew Pew"
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from raiddad.bungie import Bungie
from raiddad.config import LOG_FILE, LOG_LEVEL, load_config
from raiddad.errors import BungieError
from raiddad.hashes import Platform
from raiddad.models import Character, Item

logger = logging.getLogger("raiddad")


def setup_logging(debug: bool = False, log_file: str = LOG_FILE):
    """Configure logging.

    Console shows LOG_LEVEL (INFO) and up. With a log file, --debug sends
    DEBUG to the file only and the console stays at LOG_LEVEL; without one,
    --debug lowers the console to DEBUG.
    """
    base = getattr(logging, LOG_LEVEL, logging.INFO)
    level = logging.DEBUG if debug else base

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(base if log_file else level)
    console.setFormatter(logging.Formatter("%(asctime)s %(message)s", datefmt="%H:%M:%S"))

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.addHandler(console)

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(path, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(
            "%(asctime)s [%(levelname)s] %(name)s: %(message)s"))
        root_logger.addHandler(file_handler)


def _format_item(label: str, item: Item) -> str:
    line = f"  {label:<13} {item.name} ({item.power}, {item.tier.name.title()})"
    if item.is_fully_masterworked:
        line += " [MW]"
    if item.mods:
        line += "\n" + "\n".join(f"{'':<16}- {m.name}" for m in item.mods)
    return line


def format_character(character: Character) -> str:
    player = character.player
    lines = [
        f"{player.display_name} - {character.class_type.display_name or 'Unknown'} "
        f"{character.light} (level {character.level})",
        f"  Subclass      {character.subclass_name} / {character.subclass_tree} "
        f"({character.subclass_path}, {character.subclass_super})",
    ]
    loadout = character.loadout
    for label, item in (("Kinetic", loadout.kinetic), ("Energy", loadout.energy),
                        ("Heavy", loadout.heavy), ("Exotic armor", loadout.exotic_armor)):
        lines.append(_format_item(label, item) if item else f"  {label:<13} -")
    if character.fireteam_members:
        names = ", ".join(m.player.display_name for m in character.fireteam_members)
        lines.append(f"  Fireteam      {names}")
    return "\n".join(lines)


async def _show_player(bungie: Bungie, tag: str, platform: Platform, mods: bool) -> int:
    players = await bungie.search_for_player(tag, platform)
    if not players:
        print(f"No player found for {tag!r}")
        return 1
    character = await bungie.get_current_character(players[0], include_mods=mods)
    print(format_character(character))
    return 0


async def _show_clan(bungie: Bungie, name: str) -> int:
    clan = await bungie.search_for_clan(name)
    members = sorted(await bungie.get_members(clan))
    print(f"{clan.name} ({clan.group_id}) - {len(members)} members")
    for member in members:
        status = "online" if member.is_online else "offline"
        print(f"  {member.player.display_name:<24} {member.player.platform.name.title():<9} {status}")
    return 0


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog="raiddad",
        description="RaidDad - Destiny 2 loadout lookup",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m raiddad player "WeirdRituals#1656"
  python -m raiddad clan "Meow Pew Pew"

Set BUNGIE_API_KEY in the environment or a .env file.
        """
    )
    parser.add_argument(
        "--debug", "-d",
        action="store_true",
        help="Enable debug logging"
    )
    parser.add_argument(
        "--api-key",
        default=None,
        help="Bungie API key (default: $BUNGIE_API_KEY)"
    )
    sub = parser.add_subparsers(dest="command", required=True)

    player = sub.add_parser("player", help="Show a player's current character and loadout")
    player.add_argument("tag", help="Player name, with #1234 suffix where the platform needs it")
    player.add_argument(
        "--platform", "-p",
        choices=[p.name.lower() for p in Platform if p is not Platform.NONE],
        default="all",
        help="Platform to search (default: all)"
    )
    player.add_argument(
        "--no-mods",
        action="store_true",
        help="Skip resolving armor mods"
    )

    clan = sub.add_parser("clan", help="List a clan's members")
    clan.add_argument("name", help="Clan name")

    args = parser.parse_args(argv)
    setup_logging(debug=args.debug)

    config = load_config(api_key=args.api_key)
    if not config.api_key:
        parser.error("no API key: pass --api-key or set BUNGIE_API_KEY")
    bungie = Bungie(config)

    try:
        if args.command == "player":
            code = asyncio.run(_show_player(
                bungie, args.tag, Platform[args.platform.upper()], not args.no_mods))
        else:
            code = asyncio.run(_show_clan(bungie, args.name))
    except BungieError as e:
        logger.error(f"{type(e).__name__}: {e}")
        sys.exit(2)
    sys.exit(code)


if __name__ == "__main__":
    main()
