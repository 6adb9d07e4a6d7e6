from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class ServicePeriod:
    """One calendar.txt row: weekdays are Monday=0 .. Sunday=6."""

    service_id: str
    weekdays: frozenset[int]
    start_date: str | None = None  # YYYYMMDD
    end_date: str | None = None  # YYYYMMDD


@dataclass(frozen=True, slots=True)
class ScheduleIndex:
    """In-memory subset of static GTFS needed to tag realtime predictions."""

    trip_id_by_route_service: dict[tuple[str, str], str] = field(default_factory=dict)
    stop_sequence_by_trip_stop: dict[tuple[str, str], int] = field(
        default_factory=dict
    )
    service_periods: tuple[ServicePeriod, ...] = ()
