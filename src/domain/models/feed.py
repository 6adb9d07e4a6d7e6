from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class PredictionTime:
    vehicle_id: str
    prediction_time: str  # raw vendor timestamp, e.g. 2023-05-01T10:15:00-04:00


@dataclass(frozen=True, slots=True)
class RawStopPrediction:
    """Arrival predictions for one stop of one route, as polled from the vendor."""

    route_id: str
    stop_id: str
    predictions: tuple[PredictionTime, ...] = ()


@dataclass(frozen=True, slots=True)
class VehicleLocation:
    vehicle_id: str
    lat: float
    lon: float


@dataclass(frozen=True, slots=True)
class RawVehicleLocation:
    route_id: str
    vehicles: tuple[VehicleLocation, ...] = ()


@dataclass(frozen=True, slots=True)
class VendorSnapshot:
    timestamp: str
    stop_predictions: tuple[RawStopPrediction, ...] = ()
    vehicle_locations: tuple[RawVehicleLocation, ...] = ()


@dataclass(frozen=True, slots=True)
class RouteVehicle:
    """A vehicle from the per-route live endpoint (carries the compass heading)."""

    vehicle_id: str
    heading: str
    lat: float
    lon: float
