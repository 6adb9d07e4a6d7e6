from __future__ import annotations

import csv
import logging
import os
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path

from src.app.ports.output import IScheduleRepository
from src.domain.models.gtfs import ScheduleIndex, ServicePeriod

logger = logging.getLogger(__name__)

_WEEKDAY_COLUMNS = (
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
)


@dataclass(slots=True)
class LocalGtfsScheduleRepository(IScheduleRepository):
    """Schedule lookups backed by a directory of static GTFS .txt files.

    Env vars:
      - GTFS_PATH: directory containing trips.txt, stop_times.txt, calendar.txt
        (routes.txt optional)

    Notes:
      - Routes are reachable by route_id and by route_short_name, since the
        vendor feed names routes by their short name.
      - The first trip of a (route, service) in trips.txt order is used.
    """

    base_path: str | Path | None = None

    _index: ScheduleIndex | None = field(default=None, init=False, repr=False)

    def _base(self) -> Path:
        value = self.base_path or os.getenv("GTFS_PATH") or "data/gtfs"
        return Path(value)

    def load_index(self) -> ScheduleIndex:
        if self._index is None:
            self._index = self._read_index(self._base())
        return self._index

    def service_id_for(self, day: date) -> str | None:
        stamp = day.strftime("%Y%m%d")
        for period in self.load_index().service_periods:
            if day.weekday() not in period.weekdays:
                continue
            if period.start_date and stamp < period.start_date:
                continue
            if period.end_date and stamp > period.end_date:
                continue
            return period.service_id
        return None

    def trip_id_for(self, route_id: str, service_id: str) -> str | None:
        return self.load_index().trip_id_by_route_service.get((route_id, service_id))

    def stop_sequence_for(self, trip_id: str, stop_id: str) -> int | None:
        return self.load_index().stop_sequence_by_trip_stop.get((trip_id, stop_id))

    def _read_index(self, base: Path) -> ScheduleIndex:
        # Optional: lets the vendor's short route names resolve to route_ids.
        aliases_by_route: dict[str, set[str]] = {}
        routes_path = base / "routes.txt"
        if routes_path.exists():
            with routes_path.open("r", encoding="utf-8-sig", newline="") as fp:
                for row in csv.DictReader(fp):
                    route_id = (row.get("route_id") or "").strip()
                    if not route_id:
                        continue
                    names = {route_id}
                    short_name = (row.get("route_short_name") or "").strip()
                    if short_name:
                        names.add(short_name)
                    aliases_by_route[route_id] = names

        trip_id_by_route_service: dict[tuple[str, str], str] = {}
        with (base / "trips.txt").open("r", encoding="utf-8-sig", newline="") as fp:
            for row in csv.DictReader(fp):
                trip_id = (row.get("trip_id") or "").strip()
                route_id = (row.get("route_id") or "").strip()
                service_id = (row.get("service_id") or "").strip()
                if not trip_id or not route_id:
                    continue
                for name in aliases_by_route.get(route_id, {route_id}):
                    trip_id_by_route_service.setdefault((name, service_id), trip_id)

        stop_sequence_by_trip_stop: dict[tuple[str, str], int] = {}
        with (base / "stop_times.txt").open(
            "r", encoding="utf-8-sig", newline=""
        ) as fp:
            for row in csv.DictReader(fp):
                trip_id = (row.get("trip_id") or "").strip()
                stop_id = (row.get("stop_id") or "").strip()
                if not trip_id or not stop_id:
                    continue
                try:
                    seq = int(row.get("stop_sequence") or "")
                except ValueError:
                    logger.warning(
                        "Bad stop_sequence in stop_times.txt",
                        extra={"trip_id": trip_id, "stop_id": stop_id},
                    )
                    continue
                # A loop route visits its first stop again at the end; keep
                # the earliest sequence for a repeated stop.
                stop_sequence_by_trip_stop.setdefault((trip_id, stop_id), seq)

        service_periods: list[ServicePeriod] = []
        calendar_path = base / "calendar.txt"
        if calendar_path.exists():
            with calendar_path.open("r", encoding="utf-8-sig", newline="") as fp:
                for row in csv.DictReader(fp):
                    service_id = (row.get("service_id") or "").strip()
                    if not service_id:
                        continue
                    weekdays = frozenset(
                        i
                        for i, col in enumerate(_WEEKDAY_COLUMNS)
                        if (row.get(col) or "").strip() == "1"
                    )
                    service_periods.append(
                        ServicePeriod(
                            service_id=service_id,
                            weekdays=weekdays,
                            start_date=(row.get("start_date") or "").strip() or None,
                            end_date=(row.get("end_date") or "").strip() or None,
                        )
                    )

        logger.info(
            "Loaded GTFS schedule from %s: %d route/service trips, %d stop sequences",
            base,
            len(trip_id_by_route_service),
            len(stop_sequence_by_trip_stop),
        )
        return ScheduleIndex(
            trip_id_by_route_service=trip_id_by_route_service,
            stop_sequence_by_trip_stop=stop_sequence_by_trip_stop,
            service_periods=tuple(service_periods),
        )
