"""Exceptions raised while fetching and assembling account data.

Nothing in the package retries on these; they surface to the caller as-is.
"""


class BungieError(Exception):
    """Base exception for the client."""


class DecodeError(BungieError):
    """Raised when a JSON fragment is structurally malformed."""


class NoCharactersAssociatedWithPlayer(BungieError):
    """Raised when the profile lists no characters."""

    def __init__(self, membership_id: str = ""):
        self.membership_id = membership_id
        super().__init__(
            f"The player {membership_id or '(unknown)'} has not yet created any characters."
        )


class EmblemImageUrlsMissingOrMalformed(BungieError):
    """Raised when a character's emblem paths cannot form absolute URLs."""


class ApiReturnedIncongruousCharacterLoadoutInformation(BungieError):
    """Raised when equipment, instance and definition data disagree.

    This is an upstream data-integrity problem. It usually shows up for new
    characters or characters in a transient state with empty weapon slots.
    """


class ItemModsAlreadyResolved(BungieError):
    """Raised when an item's mods are assigned a second time."""


class BungieHttpError(BungieError):
    """Raised when the transport returns a non-200 status."""

    def __init__(self, status: int, url: str = ""):
        self.status = status
        self.url = url
        super().__init__(f"HTTP {status} for {url}" if url else f"HTTP {status}")


class BungieApiError(BungieError):
    """Raised when the platform envelope reports an ErrorCode other than Success."""

    def __init__(self, error_code: int, error_status: str, message: str = "",
                 throttle_seconds: int = 0):
        self.error_code = error_code
        self.error_status = error_status
        self.message = message
        self.throttle_seconds = throttle_seconds
        super().__init__(f"{error_status} ({error_code}): {message}")


class BungieTransportError(BungieError):
    """Raised when the request never produced a response (DNS, timeout, reset)."""
