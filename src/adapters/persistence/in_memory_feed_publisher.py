from __future__ import annotations

from dataclasses import dataclass

from src.app.ports.output import IFeedPublisher
from src.domain.models.realtime import FeedSnapshot


@dataclass(slots=True)
class InMemoryFeedPublisher(IFeedPublisher):
    """Keeps the most recent snapshot for the HTTP API to serve."""

    _latest: FeedSnapshot | None = None

    def publish(self, snapshot: FeedSnapshot) -> None:
        self._latest = snapshot

    def latest(self) -> FeedSnapshot | None:
        return self._latest
