from __future__ import annotations

import logging
from dataclasses import dataclass, field

from src.app.ports.output import IVendorFeedProvider
from src.domain.algorithms.pair_key_store import PairKeyStore
from src.domain.exceptions import FeedError, FetchError, MissingVehicleInfo
from src.domain.models.geo import GeoPoint, bearing_from_compass
from src.domain.models.realtime import VehicleInfo

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class HeadingPositionResolver:
    """Per-cycle cache of vehicle heading and position, filled route by route.

    Create a new instance for every poll cycle; each route is fetched at most
    once per instance, including when the fetch fails.
    """

    vendor_provider: IVendorFeedProvider

    cache: PairKeyStore[VehicleInfo] = field(
        default_factory=PairKeyStore, init=False, repr=False
    )
    _attempted_routes: set[str] = field(default_factory=set, init=False, repr=False)
    errors: list[FeedError] = field(default_factory=list, init=False, repr=False)

    async def resolve(self, route_id: str) -> None:
        if route_id in self._attempted_routes or self.cache.contains_first_key(
            route_id
        ):
            return
        self._attempted_routes.add(route_id)

        try:
            vehicles = await self.vendor_provider.fetch_route_vehicles(route_id)
        except FetchError as exc:
            logger.error(
                "Live vehicle fetch failed: %s", exc, extra={"route_id": route_id}
            )
            self.errors.append(exc)
            return

        for vehicle in vehicles:
            try:
                bearing = bearing_from_compass(vehicle.heading)
            except ValueError:
                logger.error(
                    "Unsupported heading %r, defaulting bearing to 0",
                    vehicle.heading,
                    extra={"route_id": route_id, "vehicle_id": vehicle.vehicle_id},
                )
                bearing = 0.0

            try:
                location = GeoPoint(lat=float(vehicle.lat), lon=float(vehicle.lon))
            except (TypeError, ValueError) as exc:
                logger.warning(
                    "Skipping vehicle with unusable coordinates: %s",
                    exc,
                    extra={"route_id": route_id, "vehicle_id": vehicle.vehicle_id},
                )
                continue

            self.cache.put(
                route_id,
                vehicle.vehicle_id,
                VehicleInfo(location=location, bearing=bearing),
            )
            logger.debug(
                "Resolved vehicle %s heading %s -> %.0f",
                vehicle.vehicle_id,
                vehicle.heading,
                bearing,
                extra={"route_id": route_id},
            )

    def lookup(self, route_id: str, vehicle_id: str) -> VehicleInfo:
        info = self.cache.get(route_id, vehicle_id)
        if info is None:
            raise MissingVehicleInfo(
                f"No heading/position for vehicle {vehicle_id} on route {route_id}"
            )
        return info
