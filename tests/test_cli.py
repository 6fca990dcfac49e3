"""Tests for cli.py: output formatting and the command entry points."""

import asyncio
import logging

import pytest

import raiddad.cli as cli
import raiddad.config as config_module
from raiddad.bungie import Bungie
from raiddad.models import Player

from builders import MEMBERSHIP_ID, player_json

B3LL = Player("b3ll", MEMBERSHIP_ID, 4)


@pytest.fixture
def run_cli(monkeypatch, transport):
    """Run main() against the fake transport; returns the exit code."""
    monkeypatch.setattr(cli, "setup_logging", lambda debug=False: None)
    monkeypatch.setattr(config_module, "load_dotenv", lambda: False)
    monkeypatch.delenv("BUNGIE_API_KEY", raising=False)
    monkeypatch.setattr(cli, "Bungie", lambda config: Bungie(config, send=transport))

    def run(*argv):
        with pytest.raises(SystemExit) as exc:
            cli.main(list(argv))
        return exc.value.code
    return run


def test_format_character(bungie):
    character = asyncio.run(bungie.get_current_character(B3LL))
    text = cli.format_character(character)
    lines = text.splitlines()
    assert lines[0] == "b3ll - Hunter 1250 (level 50)"
    assert "Gunslinger / Top (Way of the Outlaw, Golden Gun)" in lines[1]
    assert "Ace of Spades (1250, Exotic)" in text
    assert "Funnelweb (1250, Legendary)" in text
    assert "Celestial Nighthawk" in text
    assert "Fireteam" not in text


def test_format_empty_slots(bungie):
    character = asyncio.run(bungie.get_current_character_without_loadout(B3LL))
    text = cli.format_character(character)
    assert "  Kinetic       -" in text
    assert "  Exotic armor  -" in text


def test_player_command(run_cli, transport, capsys):
    transport.routes["/SearchDestinyPlayer/-1/b3ll/"] = [player_json()]
    assert run_cli("--api-key", "k", "player", "b3ll") == 0
    out = capsys.readouterr().out
    assert "b3ll - Hunter" in out
    assert "Xenophage" in out


def test_player_not_found(run_cli, transport, capsys):
    transport.routes["/SearchDestinyPlayer/-1/nobody/"] = []
    assert run_cli("--api-key", "k", "player", "nobody") == 1
    assert "No player found" in capsys.readouterr().out


def test_clan_command(run_cli, transport, capsys):
    transport.routes["/GroupV2/Name/Meow%20Pew%20Pew/1/"] = {
        "detail": {"groupId": "2771930", "name": "Meow Pew Pew"}}
    transport.routes["/GroupV2/2771930/Members/"] = {"results": [
        {"isOnline": name == "cagey", "destinyUserInfo": player_json(name)}
        for name in ("cagey", "b3ll", "MalarkeyMaybe")
    ]}
    assert run_cli("--api-key", "k", "clan", "Meow Pew Pew") == 0
    lines = capsys.readouterr().out.splitlines()
    assert lines[0] == "Meow Pew Pew (2771930) - 3 members"
    assert [line.split()[0] for line in lines[1:]] == ["MalarkeyMaybe", "b3ll", "cagey"]
    assert lines[3].endswith("online")


def test_api_error_exits_2(run_cli):
    # No route for the search: the fake transport answers 404
    assert run_cli("--api-key", "k", "clan", "Nobody Home") == 2


def test_missing_api_key(run_cli):
    assert run_cli("clan", "Meow Pew Pew") == 2


@pytest.fixture
def root_logger():
    """The root logger, with its handlers and level restored afterwards."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    for handler in root.handlers[len(handlers):]:
        handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


def _added_handlers(root, before):
    added = root.handlers[before:]
    console = next(h for h in added if not isinstance(h, logging.FileHandler))
    files = [h for h in added if isinstance(h, logging.FileHandler)]
    return console, files


def test_debug_goes_to_log_file_only(root_logger, tmp_path):
    before = len(root_logger.handlers)
    cli.setup_logging(debug=True, log_file=str(tmp_path / "logs" / "raiddad.log"))
    console, files = _added_handlers(root_logger, before)
    assert console.level == logging.INFO
    assert [h.level for h in files] == [logging.DEBUG]
    assert root_logger.level == logging.DEBUG
    assert (tmp_path / "logs").is_dir()


def test_debug_without_log_file_reaches_console(root_logger):
    before = len(root_logger.handlers)
    cli.setup_logging(debug=True, log_file="")
    console, files = _added_handlers(root_logger, before)
    assert console.level == logging.DEBUG
    assert files == []


def test_default_levels(root_logger, tmp_path):
    before = len(root_logger.handlers)
    cli.setup_logging(log_file=str(tmp_path / "raiddad.log"))
    console, files = _added_handlers(root_logger, before)
    assert console.level == logging.INFO
    assert [h.level for h in files] == [logging.INFO]
