class FeedError(Exception):
    """Base exception for feed assembly failures."""


class FetchError(FeedError):
    """Raised when a vendor endpoint cannot be reached or returns garbage."""


class TimeParseError(FeedError, ValueError):
    """Raised when a vendor timestamp does not match the expected format."""


class UnknownRoute(FeedError):
    """Raised when the static schedule has no trip for a route/service day."""


class UnknownStop(FeedError):
    """Raised when the static schedule has no sequence for a trip/stop."""


class MissingVehicleInfo(FeedError):
    """Raised when heading/position for a vehicle could not be resolved."""
