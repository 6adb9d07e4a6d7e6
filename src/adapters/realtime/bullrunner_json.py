from __future__ import annotations

import json
from typing import Any, Mapping

from src.domain.exceptions import FetchError
from src.domain.models.feed import (
    PredictionTime,
    RawStopPrediction,
    RawVehicleLocation,
    RouteVehicle,
    VehicleLocation,
    VendorSnapshot,
)

_ROUTE_PREFIX = "Route "


def route_name(raw: Any) -> str:
    """'Route A' -> 'A' (the vendor prefixes every route name)."""

    name = str(raw).strip()
    if name.startswith(_ROUTE_PREFIX):
        name = name[len(_ROUTE_PREFIX) :]
    return name.strip()


def parse_snapshot(payload: Mapping[str, Any]) -> VendorSnapshot:
    """Parse the prediction endpoint body.

    `PredictionData` is itself a JSON document encoded as a string.
    """

    try:
        data = payload["PredictionData"]
        if isinstance(data, str):
            data = json.loads(data)

        stop_predictions = tuple(
            RawStopPrediction(
                route_id=route_name(obj["route"]),
                stop_id=str(int(obj["stop"])),
                predictions=tuple(
                    PredictionTime(
                        vehicle_id=str(child["VehicleId"]),
                        prediction_time=str(child["PredictionTime"]),
                    )
                    for child in obj.get("Ptimes") or ()
                ),
            )
            for obj in data.get("StopPredictions") or ()
        )

        vehicle_locations = tuple(
            RawVehicleLocation(
                route_id=route_name(obj["route"]),
                vehicles=tuple(
                    VehicleLocation(
                        vehicle_id=str(child["VehicleId"]),
                        lat=float(child["vehicleLat"]),
                        lon=float(child["vehicleLong"]),
                    )
                    for child in obj.get("VehicleLocation") or ()
                ),
            )
            for obj in data.get("VehicleLocationData") or ()
        )

        return VendorSnapshot(
            timestamp=str(data.get("TimeStamp") or ""),
            stop_predictions=stop_predictions,
            vehicle_locations=vehicle_locations,
        )
    except (KeyError, TypeError, ValueError, AttributeError) as exc:
        raise FetchError(f"Malformed prediction payload: {exc!r}") from exc


def parse_route_ids(payload: Any) -> dict[str, int]:
    """Map route name -> numeric vendor route id from the routes endpoint."""

    out: dict[str, int] = {}
    try:
        for obj in payload or ():
            name = route_name(obj.get("Name") or obj.get("ShortName") or "")
            if not name:
                continue
            out[name] = int(obj["ID"])
    except (KeyError, TypeError, ValueError, AttributeError) as exc:
        raise FetchError(f"Malformed routes payload: {exc!r}") from exc
    return out


def parse_route_vehicles(payload: Any) -> tuple[RouteVehicle, ...]:
    try:
        return tuple(
            RouteVehicle(
                vehicle_id=str(child["Name"]),
                heading=str(child.get("Heading") or ""),
                lat=float(child["Coordinate"]["Latitude"]),
                lon=float(child["Coordinate"]["Longitude"]),
            )
            for child in payload or ()
        )
    except (KeyError, TypeError, ValueError, AttributeError) as exc:
        raise FetchError(f"Malformed route vehicles payload: {exc!r}") from exc
