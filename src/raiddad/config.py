"""
RaidDad - Configuration
All tunable constants in one place, plus the per-process BungieConfig.

BungieConfig is built once at startup (see load_config) and handed to
whatever performs requests. Nothing here is mutated after import.
"""

import os
from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

from dotenv import load_dotenv

# ─────────────────────────────────────────────
# Version
# ─────────────────────────────────────────────
APP_NAME = "RaidDad"
APP_VERSION = "1.4.0"

# ─────────────────────────────────────────────
# Bungie.net hosts
# ─────────────────────────────────────────────
BUNGIE_API_BASE = "https://www.bungie.net/Platform"

# Icons and emblems come back as relative paths ("/common/destiny2_content/...")
BUNGIE_ASSET_BASE = "https://www.bungie.net"

# ─────────────────────────────────────────────
# Profile components
# ─────────────────────────────────────────────
COMPONENT_PROFILES = 100
COMPONENT_CHARACTERS = 200
COMPONENT_CHARACTER_EQUIPMENT = 205
COMPONENT_ITEM_INSTANCES = 300
COMPONENT_ITEM_SOCKETS = 305
COMPONENT_ITEM_TALENT_GRIDS = 306
COMPONENT_TRANSITORY = 1000

PROFILE_COMPONENTS = (
    COMPONENT_PROFILES,
    COMPONENT_CHARACTERS,
    COMPONENT_CHARACTER_EQUIPMENT,
    COMPONENT_ITEM_INSTANCES,
    COMPONENT_ITEM_SOCKETS,
    COMPONENT_ITEM_TALENT_GRIDS,
    COMPONENT_TRANSITORY,
)

# ─────────────────────────────────────────────
# Transport
# ─────────────────────────────────────────────
REQUEST_TIMEOUT = 30               # seconds per request
MAX_REQUESTS_PER_SECOND = 20       # Bungie allows ~25/s per key
DEFAULT_RETRY_AFTER = 10           # seconds to back off on a bare 429

# ErrorCode value for a successful platform response
PLATFORM_SUCCESS = 1

# ─────────────────────────────────────────────
# Logging
# ─────────────────────────────────────────────
LOG_LEVEL = "INFO"
LOG_FILE = os.environ.get("RAIDDAD_LOG_FILE", "")

# ─────────────────────────────────────────────
# Environment variable names
# ─────────────────────────────────────────────
ENV_API_KEY = "BUNGIE_API_KEY"
ENV_APP_ID = "BUNGIE_APP_ID"
ENV_APP_VERSION = "BUNGIE_APP_VERSION"


@dataclass(frozen=True)
class BungieConfig:
    """Process-wide client settings, passed explicitly to the transport."""

    # ── Identity ────────────────────────────────────────────
    api_key: str
    app_id: str = ""
    app_version: str = APP_VERSION

    # ── Hosts ───────────────────────────────────────────────
    api_base: str = BUNGIE_API_BASE
    asset_base: str = BUNGIE_ASSET_BASE

    # ── Transport ───────────────────────────────────────────
    timeout: float = REQUEST_TIMEOUT
    max_requests_per_second: int = MAX_REQUESTS_PER_SECOND
    profile_components: Tuple[int, ...] = field(default=PROFILE_COMPONENTS)

    @property
    def user_agent(self) -> str:
        # Bungie asks for "AppName/version AppId/appIdNum"
        agent = f"{APP_NAME}/{self.app_version}"
        if self.app_id:
            agent += f" AppId/{self.app_id}"
        return agent

    def headers(self) -> Dict[str, str]:
        """Unsigned headers every request carries."""
        return {
            "X-API-Key": self.api_key,
            "User-Agent": self.user_agent,
        }


def load_config(
    api_key: Optional[str] = None,
    app_id: Optional[str] = None,
    app_version: Optional[str] = None,
) -> BungieConfig:
    """Create the BungieConfig for this process.

    Args:
        api_key: Override the API key. Defaults to $BUNGIE_API_KEY.
        app_id: Override the application id. Defaults to $BUNGIE_APP_ID.
        app_version: Override the reported app version.

    Returns:
        Fully populated BungieConfig.
    """
    # .env is only consulted here, never at import time
    load_dotenv()

    return BungieConfig(
        api_key=api_key or os.environ.get(ENV_API_KEY, ""),
        app_id=app_id or os.environ.get(ENV_APP_ID, ""),
        app_version=app_version or os.environ.get(ENV_APP_VERSION, APP_VERSION),
    )
