from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from datetime import date, tzinfo
from enum import Enum
from typing import Callable

from src.app.ports.output import (
    IFeedPublisher,
    IScheduleRepository,
    IVendorFeedProvider,
)
from src.app.services.heading_position_resolver import HeadingPositionResolver
from src.app.services.start_time_history import StartTimeHistory
from src.app.services.trip_update_assembler import TripUpdateAssembler
from src.app.services.vehicle_position_assembler import VehiclePositionAssembler
from src.domain.exceptions import FetchError
from src.domain.models.realtime import FeedSnapshot

logger = logging.getLogger(__name__)


class CycleState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"


@dataclass(slots=True)
class FeedCycleService:
    """Runs poll cycles: fetch -> trip updates -> vehicle positions -> publish.

    At most one cycle runs at a time. A trigger that arrives while a cycle is
    running is skipped (and counted), never run alongside it.
    """

    vendor_provider: IVendorFeedProvider
    schedule_repository: IScheduleRepository
    publisher: IFeedPublisher
    history: StartTimeHistory = field(default_factory=StartTimeHistory)
    refresh_interval_s: float = 15.0
    timezone: tzinfo | None = None
    today: Callable[[], date] = date.today
    clock: Callable[[], float] = time.time

    state: CycleState = field(default=CycleState.IDLE, init=False)
    cycles_completed: int = field(default=0, init=False)
    skipped_triggers: int = field(default=0, init=False)
    _lock: asyncio.Lock = field(default_factory=asyncio.Lock, init=False, repr=False)
    _task: asyncio.Task | None = field(default=None, init=False, repr=False)

    async def run_cycle(self) -> FeedSnapshot | None:
        """Run one cycle; returns the published snapshot, or None if skipped/aborted."""

        if self._lock.locked():
            self.skipped_triggers += 1
            logger.warning(
                "Previous feed cycle still running; skipping trigger (%d skipped so far)",
                self.skipped_triggers,
            )
            return None

        async with self._lock:
            self.state = CycleState.RUNNING
            try:
                return await self._execute()
            finally:
                self.state = CycleState.IDLE

    async def _execute(self) -> FeedSnapshot | None:
        try:
            snapshot = await self.vendor_provider.fetch_snapshot()
        except FetchError as exc:
            logger.error("Snapshot fetch failed; cycle aborted: %s", exc)
            return None

        day = self.today()
        service_id = self.schedule_repository.service_id_for(day)
        if service_id is None:
            logger.warning("No service id active on %s", day.isoformat())
            service_id = ""

        trips = TripUpdateAssembler(
            schedule_repository=self.schedule_repository,
            history=self.history,
            timezone=self.timezone,
        ).assemble(snapshot.stop_predictions, service_id)

        resolver = HeadingPositionResolver(vendor_provider=self.vendor_provider)
        vehicles = await VehiclePositionAssembler().assemble(
            snapshot.vehicle_locations, resolver
        )

        feed = FeedSnapshot(
            timestamp=int(self.clock()),
            trip_updates=trips.trip_updates,
            vehicle_positions=vehicles.vehicle_positions,
        )
        self.publisher.publish(feed)
        self.cycles_completed += 1

        logger.info(
            "Published feed: %d trip updates, %d vehicle positions (vendor time %s)",
            len(feed.trip_updates),
            len(feed.vehicle_positions),
            snapshot.timestamp,
        )
        return feed

    async def run_forever(self) -> None:
        """Fixed-rate poll loop; an overrunning cycle delays the next tick."""

        logger.info(
            "Starting GTFS-realtime feed loop, interval: %ss", self.refresh_interval_s
        )
        while True:
            started = time.monotonic()
            try:
                await self.run_cycle()
            except Exception:
                logger.exception("Error in feed refresh cycle")

            elapsed = time.monotonic() - started
            delay = self.refresh_interval_s - elapsed
            if delay < 0:
                logger.warning(
                    "Feed cycle took %.1fs, longer than the %ss interval",
                    elapsed,
                    self.refresh_interval_s,
                )
                delay = 0.0
            await asyncio.sleep(delay)

    def start(self) -> None:
        if self._task is not None and not self._task.done():
            logger.warning("Feed loop already running")
            return
        self._task = asyncio.create_task(self.run_forever())

    async def stop(self) -> None:
        if self._task is None or self._task.done():
            return
        logger.info("Stopping GTFS-realtime feed loop")
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            logger.info("Feed loop cancelled")
        self._task = None
