from __future__ import annotations

import asyncio
import os
from dataclasses import dataclass, field
from typing import Any

import httpx

from src.adapters.realtime.bullrunner_json import (
    parse_route_ids,
    parse_route_vehicles,
    parse_snapshot,
)
from src.app.ports.output import IVendorFeedProvider
from src.domain.exceptions import FetchError
from src.domain.models.feed import RouteVehicle, VendorSnapshot

DEFAULT_FEED_URL = "http://usfbullrunner.com/region/0/prediction"
DEFAULT_ROUTES_URL = "http://usfbullrunner.com/region/0/routes"
DEFAULT_ROUTE_VEHICLES_URL = "http://usfbullrunner.com/route/{route_id}/vehicles"


@dataclass(slots=True)
class HttpBullRunnerFeedProvider(IVendorFeedProvider):
    """Polls the BullRunner prediction API over HTTP.

    Env vars:
      - BULLRUNNER_FEED_URL: prediction snapshot endpoint
      - BULLRUNNER_ROUTES_URL: route list (name -> numeric vendor id)
      - BULLRUNNER_ROUTE_VEHICLES_URL: live vehicles, with a {route_id} placeholder
      - BULLRUNNER_HEADERS: optional headers, as 'Key:Value;Key2:Value2'
      - BULLRUNNER_TIMEOUT_S: per-request timeout (default 10)

    Notes:
      - The route list is fetched once and kept for the life of the provider.
      - Every failure (transport, HTTP status, payload) surfaces as FetchError.
    """

    feed_url: str | None = None
    routes_url: str | None = None
    route_vehicles_url: str | None = None
    headers_raw: str | None = None
    timeout_s: float = 10.0
    transport: httpx.AsyncBaseTransport | None = None

    _lock: asyncio.Lock = field(default_factory=asyncio.Lock, init=False, repr=False)
    _route_ids: dict[str, int] | None = field(default=None, init=False, repr=False)

    def __post_init__(self) -> None:
        if self.feed_url is None:
            self.feed_url = os.getenv("BULLRUNNER_FEED_URL", DEFAULT_FEED_URL)
        if self.routes_url is None:
            self.routes_url = os.getenv("BULLRUNNER_ROUTES_URL", DEFAULT_ROUTES_URL)
        if self.route_vehicles_url is None:
            self.route_vehicles_url = os.getenv(
                "BULLRUNNER_ROUTE_VEHICLES_URL", DEFAULT_ROUTE_VEHICLES_URL
            )
        if self.headers_raw is None:
            self.headers_raw = os.getenv("BULLRUNNER_HEADERS")
        if os.getenv("BULLRUNNER_TIMEOUT_S"):
            self.timeout_s = float(os.environ["BULLRUNNER_TIMEOUT_S"])

    def _headers(self) -> dict[str, str]:
        raw = (self.headers_raw or "").strip()
        if not raw:
            return {}
        headers: dict[str, str] = {}
        for part in raw.split(";"):
            part = part.strip()
            if ":" not in part:
                continue
            k, v = part.split(":", 1)
            k = k.strip()
            if k:
                headers[k] = v.strip()
        return headers

    async def _get_json(self, url: str) -> Any:
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout_s, transport=self.transport
            ) as client:
                resp = await client.get(url, headers=self._headers())
                resp.raise_for_status()
                return resp.json()
        except httpx.HTTPError as exc:
            raise FetchError(f"GET {url} failed: {exc}") from exc
        except ValueError as exc:
            raise FetchError(f"GET {url} returned invalid JSON") from exc

    async def fetch_snapshot(self) -> VendorSnapshot:
        assert self.feed_url is not None
        payload = await self._get_json(self.feed_url)
        if not isinstance(payload, dict):
            raise FetchError("Prediction payload is not a JSON object")
        return parse_snapshot(payload)

    async def _vendor_route_id(self, route_id: str) -> int:
        async with self._lock:
            if self._route_ids is None:
                assert self.routes_url is not None
                self._route_ids = parse_route_ids(await self._get_json(self.routes_url))

        vendor_id = self._route_ids.get(route_id)
        if vendor_id is None:
            raise FetchError(f"Route {route_id} is not listed by the vendor")
        return vendor_id

    async def fetch_route_vehicles(self, route_id: str) -> tuple[RouteVehicle, ...]:
        vendor_id = await self._vendor_route_id(route_id)
        assert self.route_vehicles_url is not None
        url = self.route_vehicles_url.format(route_id=vendor_id)
        return parse_route_vehicles(await self._get_json(url))
