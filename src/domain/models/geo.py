from __future__ import annotations

from dataclasses import dataclass

# 8-point compass rose as reported by the vendor's live-vehicle endpoint.
COMPASS_BEARINGS_DEG: dict[str, float] = {
    "N": 0.0,
    "NE": 45.0,
    "E": 90.0,
    "SE": 135.0,
    "S": 180.0,
    "SW": 225.0,
    "W": 270.0,
    "NW": 315.0,
}


@dataclass(frozen=True, slots=True)
class GeoPoint:
    lat: float
    lon: float

    def __post_init__(self) -> None:
        if not (-90.0 <= self.lat <= 90.0):
            raise ValueError(f"Invalid latitude: {self.lat}")
        if not (-180.0 <= self.lon <= 180.0):
            raise ValueError(f"Invalid longitude: {self.lon}")


def bearing_from_compass(heading: str) -> float:
    """Convert a compass abbreviation (e.g. 'SW') to degrees clockwise from north."""

    try:
        return COMPASS_BEARINGS_DEG[heading.strip().upper()]
    except KeyError:
        raise ValueError(f"Unsupported heading: {heading!r}") from None
