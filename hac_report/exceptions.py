"""Exceptions raised inside the HAC report client.

None of these cross the client façade: the fetcher converts them into a
``FetchOutcome`` variant before returning to the caller.
"""


class HACError(Exception):
    """Base exception for all HAC client errors."""


class HACConnectionError(HACError):
    """The portal could not be reached or answered with a server failure.

    Examples: connection refused, timeouts, 5xx responses. This is never used
    for a session the portal has rejected.
    """

    def __init__(self, message: str, *, timed_out: bool = False) -> None:
        """Initialize the error."""
        super().__init__(message)
        self.timed_out = timed_out


class HACParseError(HACError):
    """The portal returned a page that does not have the expected structure."""


class ConfigError(HACError):
    """Configuration values failed validation."""
