from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable

from src.app.services.heading_position_resolver import HeadingPositionResolver
from src.domain.exceptions import FeedError, MissingVehicleInfo
from src.domain.models.feed import RawVehicleLocation
from src.domain.models.realtime import VehiclePositionEntity

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class VehiclePositionAssembly:
    vehicle_positions: tuple[VehiclePositionEntity, ...]
    errors: tuple[FeedError, ...] = ()


@dataclass(slots=True)
class VehiclePositionAssembler:
    """Joins vendor vehicle locations with resolved heading/position data."""

    async def assemble(
        self,
        locations: Iterable[RawVehicleLocation],
        resolver: HeadingPositionResolver,
    ) -> VehiclePositionAssembly:
        positions: list[VehiclePositionEntity] = []
        errors: list[FeedError] = []

        for record in locations:
            for vehicle in record.vehicles:
                await resolver.resolve(record.route_id)
                try:
                    info = resolver.lookup(record.route_id, vehicle.vehicle_id)
                except MissingVehicleInfo as exc:
                    logger.warning(
                        "Skipping vehicle position: %s",
                        exc,
                        extra={
                            "route_id": record.route_id,
                            "vehicle_id": vehicle.vehicle_id,
                        },
                    )
                    errors.append(exc)
                    continue

                positions.append(
                    VehiclePositionEntity(
                        entity_id=str(len(positions) + 1),
                        route_id=record.route_id,
                        vehicle_id=vehicle.vehicle_id,
                        location=info.location,
                        bearing=info.bearing,
                    )
                )

        logger.info(
            "Assembled %d vehicle positions (%d skipped)", len(positions), len(errors)
        )
        return VehiclePositionAssembly(
            vehicle_positions=tuple(positions), errors=tuple(errors)
        )
