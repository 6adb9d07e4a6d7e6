from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Query, Response

from src.adapters.api.dependencies import get_feed_publisher
from src.adapters.api.schemas.feeds import (
    GeoPointSchema,
    StopTimeUpdateSchema,
    TripUpdateSchema,
    TripUpdatesResponseSchema,
    VehiclePositionSchema,
    VehiclePositionsResponseSchema,
)
from src.adapters.persistence.in_memory_feed_publisher import InMemoryFeedPublisher
from src.adapters.realtime.gtfs_realtime_encoder import (
    encode_trip_updates,
    encode_vehicle_positions,
)
from src.domain.models.realtime import FeedSnapshot

router = APIRouter(prefix="/feeds", tags=["feeds"])

PROTOBUF_MEDIA_TYPE = "application/x-protobuf"


def _latest_or_503(publisher: InMemoryFeedPublisher) -> FeedSnapshot:
    snapshot = publisher.latest()
    if snapshot is None:
        raise HTTPException(status_code=503, detail="No feed published yet")
    return snapshot


def _timestamp(snapshot: FeedSnapshot) -> datetime:
    return datetime.fromtimestamp(snapshot.timestamp, tz=timezone.utc)


@router.get(
    "/trip-updates",
    response_model=None,
    responses={200: {"content": {PROTOBUF_MEDIA_TYPE: {}}}},
)
def get_trip_updates(
    debug: bool = Query(default=False),
    publisher: InMemoryFeedPublisher = Depends(get_feed_publisher),
) -> Response | TripUpdatesResponseSchema:
    snapshot = _latest_or_503(publisher)
    if not debug:
        return Response(
            content=encode_trip_updates(
                snapshot.trip_updates, timestamp=snapshot.timestamp
            ),
            media_type=PROTOBUF_MEDIA_TYPE,
        )

    return TripUpdatesResponseSchema(
        timestamp=_timestamp(snapshot),
        entities=[
            TripUpdateSchema(
                entity_id=t.entity_id,
                route_id=t.route_id,
                trip_id=t.trip_id,
                vehicle_id=t.vehicle_id,
                start_time=t.start_time,
                stop_time_updates=[
                    StopTimeUpdateSchema(
                        stop_id=s.stop_id,
                        stop_sequence=s.stop_sequence,
                        arrival_time=s.arrival_time,
                    )
                    for s in t.stop_time_updates
                ],
            )
            for t in snapshot.trip_updates
        ],
    )


@router.get(
    "/vehicle-positions",
    response_model=None,
    responses={200: {"content": {PROTOBUF_MEDIA_TYPE: {}}}},
)
def get_vehicle_positions(
    debug: bool = Query(default=False),
    publisher: InMemoryFeedPublisher = Depends(get_feed_publisher),
) -> Response | VehiclePositionsResponseSchema:
    snapshot = _latest_or_503(publisher)
    if not debug:
        return Response(
            content=encode_vehicle_positions(
                snapshot.vehicle_positions, timestamp=snapshot.timestamp
            ),
            media_type=PROTOBUF_MEDIA_TYPE,
        )

    return VehiclePositionsResponseSchema(
        timestamp=_timestamp(snapshot),
        entities=[
            VehiclePositionSchema(
                entity_id=v.entity_id,
                route_id=v.route_id,
                vehicle_id=v.vehicle_id,
                position=GeoPointSchema(lat=v.location.lat, lon=v.location.lon),
                bearing=v.bearing,
            )
            for v in snapshot.vehicle_positions
        ],
    )
