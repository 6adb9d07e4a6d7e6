from __future__ import annotations

import httpx
import pytest
from google.transit import gtfs_realtime_pb2

from src.adapters.api.dependencies import get_feed_publisher
from src.adapters.persistence import InMemoryFeedPublisher
from src.domain.models import (
    FeedSnapshot,
    GeoPoint,
    StopEntry,
    TripUpdateEntity,
    VehiclePositionEntity,
)
from src.main import app


def _snapshot() -> FeedSnapshot:
    return FeedSnapshot(
        timestamp=1682949610,
        trip_updates=(
            TripUpdateEntity(
                entity_id="1",
                route_id="A",
                trip_id="A-WK",
                vehicle_id="7",
                start_time="10:00:00",
                stop_time_updates=(
                    StopEntry(stop_id="101", stop_sequence=1, arrival_time=1682949600),
                ),
            ),
        ),
        vehicle_positions=(
            VehiclePositionEntity(
                entity_id="1",
                route_id="A",
                vehicle_id="7",
                location=GeoPoint(lat=28.06, lon=-82.41),
                bearing=90.0,
            ),
        ),
    )


async def _get(publisher: InMemoryFeedPublisher, path: str) -> httpx.Response:
    app.dependency_overrides[get_feed_publisher] = lambda: publisher

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        resp = await client.get(path)

    app.dependency_overrides.clear()
    return resp


@pytest.mark.unit
@pytest.mark.anyio
async def test_trip_updates_served_as_protobuf() -> None:
    publisher = InMemoryFeedPublisher()
    publisher.publish(_snapshot())

    resp = await _get(publisher, "/feeds/trip-updates")

    assert resp.status_code == 200
    assert resp.headers["content-type"] == "application/x-protobuf"
    feed = gtfs_realtime_pb2.FeedMessage()
    feed.ParseFromString(resp.content)
    assert feed.header.timestamp == 1682949610
    assert feed.entity[0].trip_update.trip.trip_id == "A-WK"


@pytest.mark.unit
@pytest.mark.anyio
async def test_vehicle_positions_served_as_protobuf() -> None:
    publisher = InMemoryFeedPublisher()
    publisher.publish(_snapshot())

    resp = await _get(publisher, "/feeds/vehicle-positions")

    assert resp.status_code == 200
    feed = gtfs_realtime_pb2.FeedMessage()
    feed.ParseFromString(resp.content)
    assert feed.entity[0].vehicle.vehicle.id == "7"


@pytest.mark.unit
@pytest.mark.anyio
async def test_debug_view_returns_json() -> None:
    publisher = InMemoryFeedPublisher()
    publisher.publish(_snapshot())

    trips = await _get(publisher, "/feeds/trip-updates?debug=true")
    vehicles = await _get(publisher, "/feeds/vehicle-positions?debug=true")

    assert trips.status_code == 200
    entity = trips.json()["entities"][0]
    assert entity["start_time"] == "10:00:00"
    assert entity["stop_time_updates"] == [
        {"stop_id": "101", "stop_sequence": 1, "arrival_time": 1682949600}
    ]

    assert vehicles.status_code == 200
    position = vehicles.json()["entities"][0]
    assert position["position"] == {"lat": 28.06, "lon": -82.41}
    assert position["bearing"] == 90.0


@pytest.mark.unit
@pytest.mark.anyio
@pytest.mark.parametrize("path", ["/feeds/trip-updates", "/feeds/vehicle-positions"])
async def test_returns_503_before_first_cycle(path: str) -> None:
    resp = await _get(InMemoryFeedPublisher(), path)

    assert resp.status_code == 503
    assert resp.json()["detail"] == "No feed published yet"


@pytest.mark.unit
@pytest.mark.anyio
async def test_health() -> None:
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        resp = await client.get("/health")

    assert resp.json() == {"status": "ok"}
