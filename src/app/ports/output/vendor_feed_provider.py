from __future__ import annotations

from abc import ABC, abstractmethod

from src.domain.models.feed import RouteVehicle, VendorSnapshot


class IVendorFeedProvider(ABC):
    """Port for polling the operator's proprietary prediction feed.

    Implementations raise FetchError on transport or payload failures.
    """

    @abstractmethod
    async def fetch_snapshot(self) -> VendorSnapshot:
        """Return the current stop predictions and vehicle locations."""

    @abstractmethod
    async def fetch_route_vehicles(self, route_id: str) -> tuple[RouteVehicle, ...]:
        """Return live vehicles (with compass heading) for one route."""
