from __future__ import annotations

from typing import Generic, Iterator, TypeVar

V = TypeVar("V")


class PairKeyStore(Generic[V]):
    """Mapping keyed by an ordered (first, second) string pair.

    Used as (route_id, vehicle_id) -> value. Not safe for concurrent writers.
    """

    __slots__ = ("_items", "_first_keys")

    def __init__(self) -> None:
        self._items: dict[tuple[str, str], V] = {}
        self._first_keys: set[str] = set()

    def put(self, first: str, second: str, value: V) -> None:
        self._items[(first, second)] = value
        self._first_keys.add(first)

    def get(self, first: str, second: str) -> V | None:
        return self._items.get((first, second))

    def contains_pair(self, first: str, second: str) -> bool:
        return (first, second) in self._items

    def contains_first_key(self, first: str) -> bool:
        return first in self._first_keys

    def clear(self) -> None:
        self._items.clear()
        self._first_keys.clear()

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[tuple[str, str]]:
        return iter(self._items)
