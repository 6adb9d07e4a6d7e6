from __future__ import annotations

from typing import Iterable

from google.transit import gtfs_realtime_pb2

from src.domain.models.realtime import TripUpdateEntity, VehiclePositionEntity

GTFS_REALTIME_VERSION = "2.0"


def _new_feed(timestamp: int) -> gtfs_realtime_pb2.FeedMessage:
    feed = gtfs_realtime_pb2.FeedMessage()
    feed.header.gtfs_realtime_version = GTFS_REALTIME_VERSION
    feed.header.incrementality = gtfs_realtime_pb2.FeedHeader.FULL_DATASET
    feed.header.timestamp = int(timestamp)
    return feed


def build_trip_updates_feed(
    entities: Iterable[TripUpdateEntity], *, timestamp: int
) -> gtfs_realtime_pb2.FeedMessage:
    feed = _new_feed(timestamp)
    for ent in entities:
        out = feed.entity.add()
        out.id = ent.entity_id

        tu = out.trip_update
        tu.trip.trip_id = ent.trip_id
        tu.trip.route_id = ent.route_id
        tu.trip.start_time = ent.start_time
        # Vendor trips are not matched to scheduled trip instances.
        tu.trip.schedule_relationship = (
            gtfs_realtime_pb2.TripDescriptor.UNSCHEDULED
        )
        tu.vehicle.id = ent.vehicle_id

        for stop in ent.stop_time_updates:
            stu = tu.stop_time_update.add()
            stu.stop_sequence = stop.stop_sequence
            stu.stop_id = stop.stop_id
            stu.arrival.time = stop.arrival_time
    return feed


def build_vehicle_positions_feed(
    entities: Iterable[VehiclePositionEntity], *, timestamp: int
) -> gtfs_realtime_pb2.FeedMessage:
    feed = _new_feed(timestamp)
    for ent in entities:
        out = feed.entity.add()
        out.id = ent.entity_id

        vp = out.vehicle
        vp.trip.route_id = ent.route_id
        vp.vehicle.id = ent.vehicle_id
        vp.position.latitude = ent.location.lat
        vp.position.longitude = ent.location.lon
        vp.position.bearing = ent.bearing
    return feed


def encode_trip_updates(
    entities: Iterable[TripUpdateEntity], *, timestamp: int
) -> bytes:
    return build_trip_updates_feed(entities, timestamp=timestamp).SerializeToString()


def encode_vehicle_positions(
    entities: Iterable[VehiclePositionEntity], *, timestamp: int
) -> bytes:
    return build_vehicle_positions_feed(
        entities, timestamp=timestamp
    ).SerializeToString()
