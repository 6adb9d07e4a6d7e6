from __future__ import annotations

from abc import ABC, abstractmethod

from src.domain.models.realtime import FeedSnapshot


class IFeedPublisher(ABC):
    """Port receiving the finished feeds once per poll cycle."""

    @abstractmethod
    def publish(self, snapshot: FeedSnapshot) -> None:
        raise NotImplementedError
