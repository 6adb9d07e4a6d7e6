from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from src.adapters.api.controllers.feeds import router as feeds_router
from src.adapters.api.dependencies import get_feed_cycle_service


def _polling_enabled() -> bool:
    raw = (os.getenv("FEED_POLLING_ENABLED") or "1").strip().lower()
    return raw not in {"0", "false", "no", "off"}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Run the vendor poll loop for as long as the API is up."""

    if not _polling_enabled():
        yield
        return

    service = get_feed_cycle_service()
    service.start()
    try:
        yield
    finally:
        await service.stop()


app = FastAPI(title="BullRunner GTFS-realtime", lifespan=lifespan)
app.include_router(feeds_router)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Keep API errors JSON, including unexpected ones."""

    logging.getLogger("uvicorn.error").exception(
        "Unhandled exception", extra={"path": str(request.url.path)}
    )

    reveal = (os.getenv("FEED_REVEAL_ERRORS") or "").strip().lower() in {
        "1",
        "true",
        "yes",
        "on",
    }

    if reveal or isinstance(exc, (FileNotFoundError, RuntimeError, ValueError)):
        detail = str(exc) or exc.__class__.__name__
    else:
        detail = "Internal Server Error"

    return JSONResponse(status_code=500, content={"detail": detail})


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
