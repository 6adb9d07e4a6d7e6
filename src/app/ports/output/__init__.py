from .feed_publisher import IFeedPublisher
from .schedule_repository import IScheduleRepository
from .vendor_feed_provider import IVendorFeedProvider

__all__ = [
    "IFeedPublisher",
    "IScheduleRepository",
    "IVendorFeedProvider",
]
