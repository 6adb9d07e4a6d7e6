from .feed import (
    PredictionTime,
    RawStopPrediction,
    RawVehicleLocation,
    RouteVehicle,
    VehicleLocation,
    VendorSnapshot,
)
from .geo import GeoPoint
from .realtime import (
    COLD_START,
    FeedSnapshot,
    StartTimes,
    StopEntry,
    TripAccumulator,
    TripUpdateEntity,
    VehicleInfo,
    VehiclePositionEntity,
)

__all__ = [
    "COLD_START",
    "FeedSnapshot",
    "GeoPoint",
    "PredictionTime",
    "RawStopPrediction",
    "RawVehicleLocation",
    "RouteVehicle",
    "StartTimes",
    "StopEntry",
    "TripAccumulator",
    "TripUpdateEntity",
    "VehicleInfo",
    "VehicleLocation",
    "VehiclePositionEntity",
    "VendorSnapshot",
]
