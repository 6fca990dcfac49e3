"""
bungie_client.py - Default transport for Bungie.net platform calls.

Executes a BungieRequest and hands back the raw body and status code.
Everything above this layer only sees send(request) -> (bytes, status), so
callers can swap in their own transport (signed sessions, test fakes).

Rate limiting keeps a minimum interval between requests and honours
Retry-After on 429. Nothing is retried here; a 429 is returned to the
caller like any other status.
"""

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, Tuple

import requests

from raiddad.config import DEFAULT_RETRY_AFTER, BungieConfig
from raiddad.errors import BungieTransportError

logger = logging.getLogger(__name__)


@dataclass
class BungieRequest:
    url: str
    method: str = "GET"
    params: Dict[str, str] = field(default_factory=dict)
    headers: Dict[str, str] = field(default_factory=dict)
    json: Optional[Any] = None


# The transport contract the rest of the package depends on
Send = Callable[[BungieRequest], Tuple[bytes, int]]


class BungieClient:
    """Sends BungieRequests over a shared requests.Session."""

    def __init__(self, config: BungieConfig, session: Optional[requests.Session] = None):
        self._config = config
        self._session = session or requests.Session()
        self._session.headers.update(config.headers())

        # Rate limiting
        self._last_request_time = 0.0
        self._rate_lock = threading.Lock()
        self._min_interval = 1.0 / max(1, config.max_requests_per_second)
        self._rate_limited_until = 0.0

    def _rate_limit(self):
        """Enforce minimum interval between requests."""
        with self._rate_lock:
            now = time.time()

            # Respect 429 cooldown
            if now < self._rate_limited_until:
                wait = self._rate_limited_until - now
                logger.info(f"Bungie rate limited, waiting {wait:.1f}s")
                time.sleep(wait)

            # Enforce minimum interval
            elapsed = time.time() - self._last_request_time
            if elapsed < self._min_interval:
                time.sleep(self._min_interval - elapsed)

            self._last_request_time = time.time()

    def _note_throttle(self, resp: requests.Response):
        if resp.status_code != 429:
            return
        try:
            retry_after = float(resp.headers.get("Retry-After", DEFAULT_RETRY_AFTER))
        except ValueError:
            retry_after = DEFAULT_RETRY_AFTER
        self._rate_limited_until = time.time() + retry_after
        logger.warning(f"Bungie API 429, backing off {retry_after}s")

    def send(self, request: BungieRequest) -> Tuple[bytes, int]:
        """Execute `request`. Returns (body, HTTP status)."""
        self._rate_limit()
        try:
            resp = self._session.request(
                request.method,
                request.url,
                params=request.params or None,
                headers=request.headers or None,
                json=request.json,
                timeout=self._config.timeout,
            )
        except requests.RequestException as e:
            logger.error(f"Bungie request failed: {request.method} {request.url}: {e}")
            raise BungieTransportError(f"{request.method} {request.url}: {e}") from e

        self._note_throttle(resp)
        logger.debug(f"{request.method} {request.url} → {resp.status_code} ({len(resp.content)} bytes)")
        return resp.content, resp.status_code

    def close(self):
        self._session.close()
