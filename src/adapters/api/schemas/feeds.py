from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class GeoPointSchema(BaseModel):
    lat: float = Field(..., ge=-90.0, le=90.0)
    lon: float = Field(..., ge=-180.0, le=180.0)


class StopTimeUpdateSchema(BaseModel):
    stop_id: str
    stop_sequence: int
    arrival_time: int


class TripUpdateSchema(BaseModel):
    entity_id: str
    route_id: str
    trip_id: str
    vehicle_id: str
    start_time: str
    stop_time_updates: list[StopTimeUpdateSchema]


class VehiclePositionSchema(BaseModel):
    entity_id: str
    route_id: str
    vehicle_id: str
    position: GeoPointSchema
    bearing: float


class TripUpdatesResponseSchema(BaseModel):
    timestamp: datetime
    entities: list[TripUpdateSchema]


class VehiclePositionsResponseSchema(BaseModel):
    timestamp: datetime
    entities: list[VehiclePositionSchema]
