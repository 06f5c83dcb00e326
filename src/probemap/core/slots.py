"""Slot states and the fixed-capacity slot table."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterator, List, Tuple, Union


class SlotState(str, Enum):
    EMPTY = "empty"
    TOMBSTONE = "tombstone"
    OCCUPIED = "occupied"


@dataclass(frozen=True)
class Empty:
    """A slot that has never held an entry. Terminates probe scans."""

    state = SlotState.EMPTY


@dataclass(frozen=True)
class Tombstone:
    """A slot whose entry was removed. Probes skip over it; puts may reuse it."""

    state = SlotState.TOMBSTONE


@dataclass
class Occupied:
    key: Any
    value: Any

    state = SlotState.OCCUPIED


Slot = Union[Empty, Tombstone, Occupied]

EMPTY = Empty()
TOMBSTONE = Tombstone()


class SlotTable:
    """Fixed-length array of slots, all Empty at creation."""

    __slots__ = ("_slots",)

    def __init__(self, capacity: int) -> None:
        if not isinstance(capacity, int) or capacity < 1:
            raise ValueError(f"capacity must be a positive integer, got {capacity!r}")
        self._slots: List[Slot] = [EMPTY] * capacity

    @property
    def capacity(self) -> int:
        return len(self._slots)

    def __len__(self) -> int:
        return len(self._slots)

    def __getitem__(self, index: int) -> Slot:
        return self._slots[index]

    def __setitem__(self, index: int, slot: Slot) -> None:
        if not isinstance(slot, (Empty, Tombstone, Occupied)):
            raise TypeError(f"not a slot: {slot!r}")
        self._slots[index] = slot

    def __iter__(self) -> Iterator[Slot]:
        return iter(self._slots)

    def is_available(self, index: int) -> bool:
        return not isinstance(self._slots[index], Occupied)

    def is_empty(self, index: int) -> bool:
        return isinstance(self._slots[index], Empty)

    def occupied(self) -> Iterator[Tuple[int, Occupied]]:
        for idx, slot in enumerate(self._slots):
            if isinstance(slot, Occupied):
                yield idx, slot

    def count(self, state: SlotState) -> int:
        return sum(1 for slot in self._slots if slot.state is state)

    def __repr__(self) -> str:
        return f"SlotTable(capacity={self.capacity})"


__all__ = [
    "EMPTY",
    "TOMBSTONE",
    "Empty",
    "Occupied",
    "Slot",
    "SlotState",
    "SlotTable",
    "Tombstone",
]
