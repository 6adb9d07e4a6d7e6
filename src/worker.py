from __future__ import annotations

import asyncio
import logging
import os

from src.adapters.api.dependencies import build_feed_cycle_service
from src.adapters.persistence.s3_feed_publisher import S3FeedPublisher

logger = logging.getLogger(__name__)


async def _run() -> None:
    service = build_feed_cycle_service(S3FeedPublisher())

    loop = os.getenv("WORKER_LOOP", "1").strip().lower() not in {"0", "false", "no"}
    if not loop:
        snapshot = await service.run_cycle()
        if snapshot is None:
            logger.error("Single feed cycle did not publish")
        return

    await service.run_forever()


def main() -> None:
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        asyncio.run(_run())
    except KeyboardInterrupt:
        logger.info("Worker stopped")


if __name__ == "__main__":
    main()
