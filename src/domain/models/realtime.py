from __future__ import annotations

from dataclasses import dataclass

from .geo import GeoPoint

# Start time used when no sequence-1 stop has been seen for a vehicle yet.
COLD_START = "0"


@dataclass(frozen=True, slots=True)
class VehicleInfo:
    location: GeoPoint
    bearing: float


@dataclass(frozen=True, slots=True)
class StopEntry:
    stop_id: str
    stop_sequence: int
    arrival_time: int  # epoch seconds


@dataclass(frozen=True, slots=True)
class StartTimes:
    current: str = COLD_START
    previous: str = COLD_START


@dataclass(frozen=True, slots=True)
class TripAccumulator:
    """Per-(route, vehicle) trip update under construction within one cycle."""

    route_id: str
    vehicle_id: str
    trip_id: str
    start_time: str | None = None
    stop_entries: tuple[StopEntry, ...] = ()


@dataclass(frozen=True, slots=True)
class TripUpdateEntity:
    entity_id: str
    route_id: str
    trip_id: str
    vehicle_id: str
    start_time: str
    stop_time_updates: tuple[StopEntry, ...]


@dataclass(frozen=True, slots=True)
class VehiclePositionEntity:
    entity_id: str
    route_id: str
    vehicle_id: str
    location: GeoPoint
    bearing: float


@dataclass(frozen=True, slots=True)
class FeedSnapshot:
    """Finished output of one poll cycle, handed over to a publisher."""

    timestamp: int
    trip_updates: tuple[TripUpdateEntity, ...] = ()
    vehicle_positions: tuple[VehiclePositionEntity, ...] = ()
