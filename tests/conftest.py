"""Shared fixtures for the RaidDad test suite."""

import sys
import logging
from pathlib import Path

import pytest

# Ensure src/ is importable
PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT / "src"))

from raiddad.bungie import Bungie
from raiddad.config import BungieConfig

from builders import FakeTransport, loadout_definitions, profile_response

logger = logging.getLogger(__name__)


# ── Config / transport ───────────────────────────────────

@pytest.fixture
def config():
    """A BungieConfig that never touches the environment."""
    return BungieConfig(api_key="test-key", app_id="12345")


@pytest.fixture
def transport():
    """FakeTransport serving a default hunter profile and its definitions."""
    return FakeTransport(
        routes={"/Profile/4611686018467346411/": profile_response()},
        definitions=loadout_definitions(),
    )


@pytest.fixture
def bungie(config, transport):
    return Bungie(config, send=transport)
