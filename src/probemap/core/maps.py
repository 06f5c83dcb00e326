from __future__ import annotations

import logging
import random
from collections import defaultdict
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple, cast

from probemap.contracts.error import TableFullError

from .probe import ProbeResult, ProbeStats, find_slot
from .slots import TOMBSTONE, Occupied, SlotState, SlotTable

logger = logging.getLogger("probemap")

DEFAULT_CAPACITY = 17
DEFAULT_PRIME = 109_345_121
DEFAULT_MAX_LOAD_FACTOR = 0.5


class AbstractHashMap:
    """Hash map base: MAD compression, load tracking and rebuild on growth.

    Subclasses own the table layout and implement ``create_table``,
    ``bucket_get``, ``bucket_put``, ``bucket_remove`` and ``entries``.
    """

    def __init__(
        self,
        capacity: int = DEFAULT_CAPACITY,
        prime: int = DEFAULT_PRIME,
        max_load_factor: float = DEFAULT_MAX_LOAD_FACTOR,
        *,
        seed: Optional[int] = None,
        hash_fn: Callable[[Any], int] = hash,
    ) -> None:
        if capacity < 1:
            raise ValueError("capacity must be >= 1")
        if prime < 2:
            raise ValueError("prime must be >= 2")
        if not 0.0 < max_load_factor < 1.0:
            raise ValueError("max_load_factor must be in (0, 1)")
        rng = random.Random(seed)
        self.capacity = capacity
        self.prime = prime
        self.max_load_factor = max_load_factor
        self._scale = rng.randint(1, prime - 1)
        self._shift = rng.randint(0, prime - 1)
        self._hash_fn = hash_fn
        self._n = 0
        self.create_table(capacity)

    def __len__(self) -> int:
        return self._n

    def is_empty(self) -> bool:
        return self._n == 0

    def load_factor(self) -> float:
        return self._n / self.capacity if self.capacity else 0.0

    def compress(self, key: Any) -> int:
        code = self._hash_fn(key)
        return (abs(code * self._scale + self._shift) % self.prime) % self.capacity

    @staticmethod
    def _check_key(key: Any) -> None:
        if key is None:
            raise ValueError("None is not a valid key")

    def get(self, key: Any, *, stats: Optional[ProbeStats] = None) -> Optional[Any]:
        self._check_key(key)
        return self.bucket_get(self.compress(key), key, stats=stats)

    def put(self, key: Any, value: Any, *, stats: Optional[ProbeStats] = None) -> Optional[Any]:
        self._check_key(key)
        old = self.bucket_put(self.compress(key), key, value, stats=stats)
        if self.load_factor() > self.max_load_factor:
            self.rehash(max(2 * self.capacity - 1, self.capacity + 1))
        return old

    def remove(self, key: Any, *, stats: Optional[ProbeStats] = None) -> Optional[Any]:
        self._check_key(key)
        return self.bucket_remove(self.compress(key), key, stats=stats)

    def __contains__(self, key: Any) -> bool:
        if key is None:
            return False
        return self.probe(key).found

    def probe(self, key: Any, stats: Optional[ProbeStats] = None) -> ProbeResult:
        raise NotImplementedError

    def rehash(self, new_capacity: int) -> None:
        """Rebuild into a fresh table of ``new_capacity``, re-putting every entry.

        ``new_capacity`` must hold every live entry; a smaller value raises
        :class:`ValueError` and leaves the map untouched.
        """

        if new_capacity < max(1, self._n):
            raise ValueError(
                f"rehash capacity {new_capacity} cannot hold {self._n} entries"
            )
        buffer = self.entries()
        old_capacity = self.capacity
        self.capacity = new_capacity
        self.create_table(new_capacity)
        self._n = 0
        for k, v in buffer:
            self.bucket_put(self.compress(k), k, v)
        logger.debug(
            "Rehashed %d entries (capacity %d -> %d)", len(buffer), old_capacity, new_capacity
        )

    def items(self) -> List[Tuple[Any, Any]]:
        return self.entries()

    def keys(self) -> List[Any]:
        return [k for k, _ in self.entries()]

    def values(self) -> List[Any]:
        return [v for _, v in self.entries()]

    def __iter__(self) -> Iterator[Any]:
        return iter(self.keys())

    def create_table(self, capacity: int) -> Any:
        raise NotImplementedError

    def bucket_get(self, h: int, key: Any, *, stats: Optional[ProbeStats] = None) -> Optional[Any]:
        raise NotImplementedError

    def bucket_put(
        self, h: int, key: Any, value: Any, *, stats: Optional[ProbeStats] = None
    ) -> Optional[Any]:
        raise NotImplementedError

    def bucket_remove(
        self, h: int, key: Any, *, stats: Optional[ProbeStats] = None
    ) -> Optional[Any]:
        raise NotImplementedError

    def entries(self) -> List[Tuple[Any, Any]]:
        raise NotImplementedError


class ProbeHashMap(AbstractHashMap):
    """Open-addressing hash map with linear probing and tombstone deletion."""

    _table: SlotTable

    def create_table(self, capacity: int) -> SlotTable:
        self._table = SlotTable(capacity)
        return self._table

    @property
    def table(self) -> SlotTable:
        return self._table

    def probe(self, key: Any, stats: Optional[ProbeStats] = None) -> ProbeResult:
        return find_slot(self._table, self.compress(key), key, stats)

    def bucket_get(self, h: int, key: Any, *, stats: Optional[ProbeStats] = None) -> Optional[Any]:
        self._check_key(key)
        result = find_slot(self._table, h, key, stats)
        if not result.found:
            return None
        return cast(Occupied, self._table[cast(int, result.index)]).value

    def bucket_put(
        self, h: int, key: Any, value: Any, *, stats: Optional[ProbeStats] = None
    ) -> Optional[Any]:
        self._check_key(key)
        result = find_slot(self._table, h, key, stats)
        if result.found:
            slot = cast(Occupied, self._table[cast(int, result.index)])
            old = slot.value
            slot.value = value
            return old
        if result.index is None:
            raise TableFullError(self._table.capacity, key)
        self._table[result.index] = Occupied(key, value)
        self._n += 1
        return None

    def bucket_remove(
        self, h: int, key: Any, *, stats: Optional[ProbeStats] = None
    ) -> Optional[Any]:
        self._check_key(key)
        result = find_slot(self._table, h, key, stats)
        if not result.found:
            return None
        index = cast(int, result.index)
        slot = cast(Occupied, self._table[index])
        self._table[index] = TOMBSTONE
        self._n -= 1
        return slot.value

    def entries(self) -> List[Tuple[Any, Any]]:
        return [(slot.key, slot.value) for _, slot in self._table.occupied()]

    def tombstone_count(self) -> int:
        return self._table.count(SlotState.TOMBSTONE)

    def tombstone_ratio(self) -> float:
        return self.tombstone_count() / self.capacity if self.capacity else 0.0

    def probe_distance(self, index: int) -> int:
        """Wrap-aware offset of the entry at ``index`` from its home slot."""

        slot = self._table[index]
        if not isinstance(slot, Occupied):
            raise ValueError(f"slot {index} is not occupied")
        home = self.compress(slot.key)
        return index - home if index >= home else index + self.capacity - home

    def __repr__(self) -> str:
        return f"ProbeHashMap(size={self._n}, capacity={self.capacity})"


def collect_probe_histogram(m: ProbeHashMap) -> List[List[int]]:
    histogram: Dict[int, int] = defaultdict(int)
    for idx, _ in m.table.occupied():
        histogram[m.probe_distance(idx)] += 1
    return [[distance, count] for distance, count in sorted(histogram.items())]


def sample_metrics(m: ProbeHashMap) -> Dict[str, Any]:
    distances = [m.probe_distance(idx) for idx, _ in m.table.occupied()]
    tombstones = m.tombstone_count()
    return {
        "backend": "linear-probing",
        "capacity": m.capacity,
        "size": len(m),
        "load_factor": m.load_factor(),
        "max_load_factor": m.max_load_factor,
        "tombstones": tombstones,
        "tombstone_ratio": tombstones / m.capacity if m.capacity else 0.0,
        "avg_probe_distance": sum(distances) / len(distances) if distances else 0.0,
        "max_probe_distance": max(distances, default=0),
    }


__all__ = [
    "AbstractHashMap",
    "DEFAULT_CAPACITY",
    "DEFAULT_MAX_LOAD_FACTOR",
    "DEFAULT_PRIME",
    "ProbeHashMap",
    "collect_probe_histogram",
    "sample_metrics",
]
