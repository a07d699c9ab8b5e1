"""Exception types shared across the tracker.

Feed failures are handed back to the caller inside a ``FetchResult`` rather
than raised, so the scheduler can decide to keep the previous snapshot.
Store, reference-data and config errors are raised normally.
"""

from typing import Optional


class LeagueTrackerError(Exception):
    """Base class for every error raised by the tracker."""


class FeedError(LeagueTrackerError):
    """A schedule fetch that produced no usable games."""

    kind = "feed"

    def as_dict(self):
        return {"kind": self.kind, "message": str(self)}


class TransportError(FeedError):
    """Network failure, timeout or a non-200 response."""

    kind = "transport"

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code

    def as_dict(self):
        data = super().as_dict()
        data["status_code"] = self.status_code
        return data


class EmptyResponse(FeedError):
    kind = "empty"


class DecodeError(FeedError):
    """Body was not a well-formed list of game objects."""

    kind = "decode"


class StoreError(LeagueTrackerError):
    """The snapshot store could not complete a read or a replace."""


class ReferenceDataError(LeagueTrackerError):
    """Reference or fallback dataset could not be loaded."""


class ConfigError(LeagueTrackerError):
    """An environment setting holds an unusable value."""
