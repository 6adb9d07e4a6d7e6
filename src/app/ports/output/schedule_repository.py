from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date


class IScheduleRepository(ABC):
    """Port for static schedule identifier lookups."""

    @abstractmethod
    def service_id_for(self, day: date) -> str | None:
        """Return the service id active on `day`, if any."""

    @abstractmethod
    def trip_id_for(self, route_id: str, service_id: str) -> str | None:
        raise NotImplementedError

    @abstractmethod
    def stop_sequence_for(self, trip_id: str, stop_id: str) -> int | None:
        raise NotImplementedError
