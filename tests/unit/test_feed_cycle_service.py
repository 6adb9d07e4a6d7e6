from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import date

from src.app.services.feed_cycle_service import CycleState, FeedCycleService
from src.app.services.start_time_history import StartTimeHistory
from src.domain.exceptions import FetchError
from src.domain.models import (
    FeedSnapshot,
    PredictionTime,
    RawStopPrediction,
    RawVehicleLocation,
    RouteVehicle,
    VehicleLocation,
    VendorSnapshot,
)


def _snapshot(with_predictions: bool = True) -> VendorSnapshot:
    stop_predictions = ()
    if with_predictions:
        stop_predictions = (
            RawStopPrediction(
                route_id="A",
                stop_id="101",
                predictions=(
                    PredictionTime(
                        vehicle_id="7", prediction_time="2023-05-01T10:00:00-04:00"
                    ),
                ),
            ),
        )
    return VendorSnapshot(
        timestamp="2023-05-01T09:59:45-04:00",
        stop_predictions=stop_predictions,
        vehicle_locations=(
            RawVehicleLocation(
                route_id="A",
                vehicles=(VehicleLocation(vehicle_id="7", lat=28.0, lon=-82.0),),
            ),
        ),
    )


@dataclass(slots=True)
class FakeVendorProvider:
    snapshot: VendorSnapshot = field(default_factory=_snapshot)
    fail_snapshot: bool = False
    gate: asyncio.Event | None = None
    snapshot_calls: int = 0

    async def fetch_snapshot(self) -> VendorSnapshot:
        self.snapshot_calls += 1
        if self.gate is not None:
            await self.gate.wait()
        if self.fail_snapshot:
            raise FetchError("vendor down")
        return self.snapshot

    async def fetch_route_vehicles(self, route_id: str) -> tuple[RouteVehicle, ...]:
        return (RouteVehicle(vehicle_id="7", heading="E", lat=28.06, lon=-82.41),)


@dataclass(slots=True)
class FakeScheduleRepository:
    days: list[date] = field(default_factory=list)

    def service_id_for(self, day: date) -> str | None:
        self.days.append(day)
        return "WK"

    def trip_id_for(self, route_id: str, service_id: str) -> str | None:
        return "A-WK" if (route_id, service_id) == ("A", "WK") else None

    def stop_sequence_for(self, trip_id: str, stop_id: str) -> int | None:
        return {"101": 1, "102": 2}.get(stop_id) if trip_id == "A-WK" else None


@dataclass(slots=True)
class FakePublisher:
    published: list[FeedSnapshot] = field(default_factory=list)

    def publish(self, snapshot: FeedSnapshot) -> None:
        self.published.append(snapshot)


def _service(provider: FakeVendorProvider, **kwargs) -> FeedCycleService:
    return FeedCycleService(
        vendor_provider=provider,
        schedule_repository=FakeScheduleRepository(),
        publisher=FakePublisher(),
        today=lambda: date(2023, 5, 1),
        clock=lambda: 1682949600.0,
        **kwargs,
    )


def test_run_cycle_publishes_both_feeds() -> None:
    svc = _service(FakeVendorProvider())

    feed = asyncio.run(svc.run_cycle())

    assert feed is not None
    assert svc.publisher.published == [feed]
    assert feed.timestamp == 1682949600
    assert [(t.trip_id, t.start_time) for t in feed.trip_updates] == [
        ("A-WK", "10:00:00")
    ]
    assert [(v.vehicle_id, v.bearing) for v in feed.vehicle_positions] == [("7", 90.0)]
    assert svc.schedule_repository.days == [date(2023, 5, 1)]
    assert svc.state is CycleState.IDLE
    assert svc.cycles_completed == 1


def test_fetch_failure_aborts_cycle_without_publishing() -> None:
    svc = _service(FakeVendorProvider(fail_snapshot=True))

    assert asyncio.run(svc.run_cycle()) is None
    assert svc.publisher.published == []
    assert svc.state is CycleState.IDLE
    assert svc.cycles_completed == 0


def test_empty_snapshot_clears_history_but_publishes_positions() -> None:
    history = StartTimeHistory()
    history.record_new_start("A", "7", "09:00:00")
    svc = _service(
        FakeVendorProvider(snapshot=_snapshot(with_predictions=False)),
        history=history,
    )

    feed = asyncio.run(svc.run_cycle())

    assert feed is not None
    assert feed.trip_updates == ()
    assert len(feed.vehicle_positions) == 1
    assert len(history) == 0


def test_history_carries_over_between_cycles() -> None:
    svc = _service(FakeVendorProvider())

    async def scenario() -> None:
        await svc.run_cycle()
        await svc.run_cycle()

    asyncio.run(scenario())

    assert svc.history.current_start("A", "7") == "10:00:00"
    assert svc.history.previous_start("A", "7") == "10:00:00"


def test_trigger_while_running_is_skipped() -> None:
    async def scenario() -> None:
        provider = FakeVendorProvider(gate=asyncio.Event())
        svc = _service(provider)

        first = asyncio.create_task(svc.run_cycle())
        await asyncio.sleep(0)
        assert svc.state is CycleState.RUNNING

        assert await svc.run_cycle() is None
        assert svc.skipped_triggers == 1
        assert provider.snapshot_calls == 1

        provider.gate.set()
        assert await first is not None
        assert svc.state is CycleState.IDLE

    asyncio.run(scenario())


def test_poll_loop_runs_until_stopped() -> None:
    async def scenario() -> FeedCycleService:
        svc = _service(FakeVendorProvider(), refresh_interval_s=0.01)
        svc.start()
        await asyncio.sleep(0.05)
        await svc.stop()
        return svc

    svc = asyncio.run(scenario())

    assert svc.cycles_completed >= 1
    assert svc.state is CycleState.IDLE


def test_poll_loop_survives_unexpected_errors() -> None:
    @dataclass(slots=True)
    class FlakyProvider(FakeVendorProvider):
        failures_left: int = 1

        async def fetch_snapshot(self) -> VendorSnapshot:
            if self.failures_left:
                self.failures_left -= 1
                raise RuntimeError("unexpected")
            return self.snapshot

    async def scenario() -> FeedCycleService:
        svc = _service(FlakyProvider(), refresh_interval_s=0.0)
        svc.start()
        await asyncio.sleep(0.05)
        await svc.stop()
        return svc

    svc = asyncio.run(scenario())

    assert svc.cycles_completed >= 1
