from __future__ import annotations

from dataclasses import dataclass, field

from src.domain.algorithms.pair_key_store import PairKeyStore
from src.domain.models.realtime import COLD_START, StartTimes


@dataclass(slots=True)
class StartTimeHistory:
    """Two most recent trip start times per (route, vehicle).

    Lives for the whole process; it is the only state carried between cycles.
    """

    _store: PairKeyStore[StartTimes] = field(
        default_factory=PairKeyStore, init=False, repr=False
    )

    def record_new_start(self, route_id: str, vehicle_id: str, value: str) -> None:
        existing = self._store.get(route_id, vehicle_id)
        if existing is None:
            self._store.put(route_id, vehicle_id, StartTimes(value, COLD_START))
            return
        self._store.put(
            route_id, vehicle_id, StartTimes(current=value, previous=existing.current)
        )

    def current_start(self, route_id: str, vehicle_id: str) -> str | None:
        times = self._store.get(route_id, vehicle_id)
        return times.current if times is not None else None

    def previous_start(self, route_id: str, vehicle_id: str) -> str | None:
        times = self._store.get(route_id, vehicle_id)
        return times.previous if times is not None else None

    def ensure_cold_start(self, route_id: str, vehicle_id: str) -> StartTimes:
        times = self._store.get(route_id, vehicle_id)
        if times is None:
            times = StartTimes()
            self._store.put(route_id, vehicle_id, times)
        return times

    def clear_all(self) -> None:
        self._store.clear()

    def __len__(self) -> int:
        return len(self._store)
