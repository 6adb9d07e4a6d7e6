from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from src.adapters.aws import s3_client
from src.adapters.realtime.gtfs_realtime_encoder import (
    encode_trip_updates,
    encode_vehicle_positions,
)
from src.app.ports.output import IFeedPublisher
from src.domain.models.realtime import FeedSnapshot

logger = logging.getLogger(__name__)

PROTOBUF_CONTENT_TYPE = "application/x-protobuf"


@dataclass(slots=True)
class S3FeedPublisher(IFeedPublisher):
    """Writes the GTFS-realtime feeds to S3 after every cycle.

    Env vars:
      - FEED_S3_BUCKET: bucket name
      - FEED_S3_PREFIX: key prefix (default: gtfs-rt)
      - ENDPOINT_URL: preferred LocalStack endpoint (e.g. http://localhost:4566)
      - AWS_REGION: defaults to eu-west-1

    Objects: <prefix>/trip-updates.pb and <prefix>/vehicle-positions.pb
    """

    bucket: str | None = None
    prefix: str | None = None

    def _bucket(self) -> str:
        value = self.bucket or os.getenv("FEED_S3_BUCKET")
        if not value:
            raise RuntimeError("Missing FEED_S3_BUCKET")
        return value

    def _prefix(self) -> str:
        return (self.prefix or os.getenv("FEED_S3_PREFIX") or "gtfs-rt").strip("/")

    def trip_updates_key(self) -> str:
        return f"{self._prefix()}/trip-updates.pb"

    def vehicle_positions_key(self) -> str:
        return f"{self._prefix()}/vehicle-positions.pb"

    def publish(self, snapshot: FeedSnapshot) -> None:
        s3 = s3_client()
        bucket = self._bucket()

        s3.put_object(
            Bucket=bucket,
            Key=self.trip_updates_key(),
            Body=encode_trip_updates(
                snapshot.trip_updates, timestamp=snapshot.timestamp
            ),
            ContentType=PROTOBUF_CONTENT_TYPE,
        )
        s3.put_object(
            Bucket=bucket,
            Key=self.vehicle_positions_key(),
            Body=encode_vehicle_positions(
                snapshot.vehicle_positions, timestamp=snapshot.timestamp
            ),
            ContentType=PROTOBUF_CONTENT_TYPE,
        )
        logger.info("Wrote feeds to s3://%s/%s", bucket, self._prefix())
