"""Linear-probe slot search over a :class:`SlotTable`."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, cast

from probemap.contracts.error import TableFullError

from .slots import Empty, Occupied, SlotTable


@dataclass
class ProbeStats:
    """Probe counters accumulated by the searches they are passed into."""

    searches: int = 0
    total_probes: int = 0
    max_probes: int = 0

    def record(self, probes: int) -> None:
        self.searches += 1
        self.total_probes += probes
        if probes > self.max_probes:
            self.max_probes = probes

    def average(self) -> float:
        return self.total_probes / self.searches if self.searches else 0.0

    def merge(self, other: "ProbeStats") -> None:
        self.searches += other.searches
        self.total_probes += other.total_probes
        self.max_probes = max(self.max_probes, other.max_probes)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "searches": self.searches,
            "total_probes": self.total_probes,
            "max_probes": self.max_probes,
            "avg_probes": self.average(),
        }


@dataclass(frozen=True)
class ProbeResult:
    """Outcome of :func:`find_slot`.

    ``index`` is the matching slot when ``found``; otherwise it is the first
    available slot seen during the scan, or ``None`` when every slot is
    occupied by some other key.
    """

    found: bool
    index: Optional[int]
    probes: int
    capacity: int

    @property
    def full(self) -> bool:
        return not self.found and self.index is None

    @property
    def encoded(self) -> int:
        """Match index, or ``-(candidate + 1)`` for a failed search.

        A full table has no candidate to encode and raises
        :class:`TableFullError` rather than returning a number that would
        alias a real slot.
        """

        if self.found:
            return cast(int, self.index)
        if self.index is None:
            raise TableFullError(self.capacity, None)
        return -(self.index + 1)


def find_slot(
    table: SlotTable, h: int, key: Any, stats: Optional[ProbeStats] = None
) -> ProbeResult:
    """Scan ``table`` from ``h`` for ``key``.

    The scan stops at a match, at the first Empty slot, or after wrapping
    back to ``h``. Tombstones never stop it; the first Empty or Tombstone
    slot seen is kept as the insertion candidate.
    """

    capacity = table.capacity
    if not 0 <= h < capacity:
        raise ValueError(f"start index {h} outside [0, {capacity})")
    avail: Optional[int] = None
    j = h
    probes = 0
    found = False
    while True:
        slot = table[j]
        probes += 1
        if isinstance(slot, Occupied):
            if slot.key == key:
                found = True
                break
        else:
            if avail is None:
                avail = j
            if isinstance(slot, Empty):
                break
        j = (j + 1) % capacity
        if j == h:
            break
    if stats is not None:
        stats.record(probes)
    if found:
        return ProbeResult(True, j, probes, capacity)
    return ProbeResult(False, avail, probes, capacity)


__all__ = ["ProbeResult", "ProbeStats", "find_slot"]
