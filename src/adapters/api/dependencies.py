from __future__ import annotations

import os
from functools import lru_cache
from zoneinfo import ZoneInfo

from src.adapters.persistence.in_memory_feed_publisher import InMemoryFeedPublisher
from src.adapters.persistence.local_gtfs_schedule_repository import (
    LocalGtfsScheduleRepository,
)
from src.adapters.realtime.http_bullrunner_feed_provider import (
    HttpBullRunnerFeedProvider,
)
from src.app.ports.output import IFeedPublisher
from src.app.services.feed_cycle_service import FeedCycleService


@lru_cache(maxsize=1)
def get_feed_publisher() -> InMemoryFeedPublisher:
    return InMemoryFeedPublisher()


def build_feed_cycle_service(publisher: IFeedPublisher) -> FeedCycleService:
    service = FeedCycleService(
        vendor_provider=HttpBullRunnerFeedProvider(),
        schedule_repository=LocalGtfsScheduleRepository(),
        publisher=publisher,
    )

    # Allow tuning via env without changing code.
    if os.getenv("FEED_REFRESH_INTERVAL_S"):
        service.refresh_interval_s = float(os.environ["FEED_REFRESH_INTERVAL_S"])
    if os.getenv("AGENCY_TIMEZONE"):
        service.timezone = ZoneInfo(os.environ["AGENCY_TIMEZONE"])

    return service


@lru_cache(maxsize=1)
def get_feed_cycle_service() -> FeedCycleService:
    return build_feed_cycle_service(get_feed_publisher())
