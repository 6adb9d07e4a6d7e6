from .in_memory_feed_publisher import InMemoryFeedPublisher
from .local_gtfs_schedule_repository import LocalGtfsScheduleRepository
from .s3_feed_publisher import S3FeedPublisher

__all__ = [
    "InMemoryFeedPublisher",
    "LocalGtfsScheduleRepository",
    "S3FeedPublisher",
]
