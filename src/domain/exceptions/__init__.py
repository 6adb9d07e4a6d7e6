from .feed import (
    FeedError,
    FetchError,
    MissingVehicleInfo,
    TimeParseError,
    UnknownRoute,
    UnknownStop,
)

__all__ = [
    "FeedError",
    "FetchError",
    "MissingVehicleInfo",
    "TimeParseError",
    "UnknownRoute",
    "UnknownStop",
]
