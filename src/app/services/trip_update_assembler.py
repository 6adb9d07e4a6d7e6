from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import tzinfo
from typing import Iterable

from src.app.ports.output import IScheduleRepository
from src.app.services.start_time_history import StartTimeHistory
from src.domain.algorithms.loop_split import split_on_loop_wrap
from src.domain.algorithms.time_codec import format_clock_time, parse_epoch
from src.domain.exceptions import FeedError, TimeParseError, UnknownRoute, UnknownStop
from src.domain.models.feed import RawStopPrediction
from src.domain.models.realtime import (
    COLD_START,
    StopEntry,
    TripAccumulator,
    TripUpdateEntity,
)

logger = logging.getLogger(__name__)

_VehicleKey = tuple[str, str]


@dataclass(frozen=True, slots=True)
class TripUpdateAssembly:
    trip_updates: tuple[TripUpdateEntity, ...]
    errors: tuple[FeedError, ...] = ()


@dataclass(slots=True)
class _CycleState:
    """Scratch data for one assemble() call; discarded afterwards."""

    accumulators: dict[_VehicleKey, TripAccumulator] = field(default_factory=dict)
    pending: list[tuple[_VehicleKey, StopEntry]] = field(default_factory=list)
    errors: list[FeedError] = field(default_factory=list)


@dataclass(slots=True)
class TripUpdateAssembler:
    """Turns one cycle of raw stop predictions into ordered trip updates.

    1) group predictions per (route, vehicle) and resolve trip/stop sequence
    2) stable-sort all stop entries by stop sequence and attach them
    3) backfill start times for trips whose sequence-1 stop was not seen
    4) split trips whose arrival times wrap around (vehicle began a new loop)
    5) number the resulting entities
    """

    schedule_repository: IScheduleRepository
    history: StartTimeHistory
    timezone: tzinfo | None = None

    def assemble(
        self, predictions: Iterable[RawStopPrediction], service_id: str
    ) -> TripUpdateAssembly:
        predictions = tuple(predictions)
        if not predictions:
            # Nothing from the vendor at all: history is stale.
            logger.warning("Snapshot has no stop predictions; clearing start times")
            self.history.clear_all()
            return TripUpdateAssembly(trip_updates=())

        state = _CycleState()
        for prediction in predictions:
            self._collect(prediction, service_id, state)

        entries_by_key: dict[_VehicleKey, list[StopEntry]] = {}
        for key, entry in sorted(state.pending, key=lambda p: p[1].stop_sequence):
            entries_by_key.setdefault(key, []).append(entry)

        trip_updates: list[TripUpdateEntity] = []
        for key, acc in state.accumulators.items():
            acc = replace(acc, stop_entries=tuple(entries_by_key.get(key, ())))
            acc = self._backfill_start_time(acc)
            for trip in self._split(acc):
                trip_updates.append(
                    TripUpdateEntity(
                        entity_id=str(len(trip_updates) + 1),
                        route_id=trip.route_id,
                        trip_id=trip.trip_id,
                        vehicle_id=trip.vehicle_id,
                        start_time=trip.start_time or COLD_START,
                        stop_time_updates=trip.stop_entries,
                    )
                )

        logger.info(
            "Assembled %d trip updates from %d stop predictions (%d problems)",
            len(trip_updates),
            len(predictions),
            len(state.errors),
        )
        return TripUpdateAssembly(
            trip_updates=tuple(trip_updates), errors=tuple(state.errors)
        )

    def _collect(
        self, prediction: RawStopPrediction, service_id: str, state: _CycleState
    ) -> None:
        route_id = prediction.route_id
        stop_id = prediction.stop_id

        trip_id = self.schedule_repository.trip_id_for(route_id, service_id)
        if not trip_id:
            err = UnknownRoute(
                f"Route {route_id} has no trip for service {service_id!r}"
            )
            logger.warning(str(err), extra={"route_id": route_id})
            state.errors.append(err)
            trip_id = ""

        # Same for every vehicle at this stop.
        stop_sequence = self.schedule_repository.stop_sequence_for(trip_id, stop_id)
        if stop_sequence is None:
            err = UnknownStop(f"Stop {stop_id} is not part of trip {trip_id!r}")
            logger.warning(
                str(err), extra={"route_id": route_id, "stop_id": stop_id}
            )
            state.errors.append(err)
            stop_sequence = 0

        for pt in prediction.predictions:
            key = (route_id, pt.vehicle_id)
            try:
                arrival_time = parse_epoch(pt.prediction_time)
                start_time = (
                    format_clock_time(pt.prediction_time, self.timezone)
                    if stop_sequence == 1
                    else None
                )
            except TimeParseError as exc:
                logger.warning(
                    "Dropping prediction: %s",
                    exc,
                    extra={
                        "route_id": route_id,
                        "stop_id": stop_id,
                        "vehicle_id": pt.vehicle_id,
                    },
                )
                state.errors.append(exc)
                continue

            acc = state.accumulators.get(key)
            if acc is None:
                acc = TripAccumulator(
                    route_id=route_id, vehicle_id=pt.vehicle_id, trip_id=trip_id
                )
            if start_time is not None:
                acc = replace(acc, start_time=start_time)
                self.history.record_new_start(route_id, pt.vehicle_id, start_time)
            state.accumulators[key] = acc

            state.pending.append(
                (
                    key,
                    StopEntry(
                        stop_id=stop_id,
                        stop_sequence=stop_sequence,
                        arrival_time=arrival_time,
                    ),
                )
            )

    def _backfill_start_time(self, acc: TripAccumulator) -> TripAccumulator:
        if acc.stop_entries and acc.stop_entries[0].stop_sequence == 1:
            return acc

        current = self.history.current_start(acc.route_id, acc.vehicle_id)
        if current is None:
            current = self.history.ensure_cold_start(
                acc.route_id, acc.vehicle_id
            ).current
        return replace(acc, start_time=current)

    def _split(self, acc: TripAccumulator) -> list[TripAccumulator]:
        segments = split_on_loop_wrap(acc.stop_entries)
        if len(segments) <= 1:
            return [acc]

        # The first segment belongs to the trip whose sequence-1 stop was seen
        # last; everything after a wrap belongs to the trip before it.
        previous = self.history.previous_start(acc.route_id, acc.vehicle_id)
        logger.info(
            "Vehicle %s wrapped its loop; splitting into %d trip updates",
            acc.vehicle_id,
            len(segments),
            extra={"route_id": acc.route_id, "trip_id": acc.trip_id},
        )

        out = [replace(acc, stop_entries=segments[0])]
        for segment in segments[1:]:
            out.append(
                replace(
                    acc,
                    start_time=previous or COLD_START,
                    stop_entries=segment,
                )
            )
        return out
