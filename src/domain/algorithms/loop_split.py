from __future__ import annotations

from typing import Sequence

from src.domain.models.realtime import StopEntry


def _first_wrap_index(entries: Sequence[StopEntry]) -> int | None:
    """Index of the first entry arriving earlier than the entry before it."""

    for i in range(1, len(entries)):
        if entries[i].arrival_time < entries[i - 1].arrival_time:
            return i
    return None


def split_on_loop_wrap(
    entries: Sequence[StopEntry],
) -> list[tuple[StopEntry, ...]]:
    """Split sequence-ordered stop entries wherever arrival time goes backwards.

    Entries are expected sorted by stop_sequence. A drop in arrival time means
    the vehicle starts another pass over the route within the same data, so
    everything before the drop is one trip instance and the rest is another.
    The remainder is scanned again, so several wraps give several segments.
    """

    segments: list[tuple[StopEntry, ...]] = []
    remaining = tuple(entries)

    while remaining:
        cut = _first_wrap_index(remaining)
        if cut is None:
            segments.append(remaining)
            break
        segments.append(remaining[:cut])
        remaining = remaining[cut:]

    return segments
