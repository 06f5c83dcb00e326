from .maps import (
    DEFAULT_CAPACITY,
    DEFAULT_MAX_LOAD_FACTOR,
    DEFAULT_PRIME,
    AbstractHashMap,
    ProbeHashMap,
    collect_probe_histogram,
    sample_metrics,
)
from .probe import ProbeResult, ProbeStats, find_slot
from .slots import EMPTY, TOMBSTONE, Empty, Occupied, Slot, SlotState, SlotTable, Tombstone

__all__ = [
    "AbstractHashMap",
    "ProbeHashMap",
    "ProbeResult",
    "ProbeStats",
    "find_slot",
    "collect_probe_histogram",
    "sample_metrics",
    "EMPTY",
    "TOMBSTONE",
    "Empty",
    "Occupied",
    "Slot",
    "SlotState",
    "SlotTable",
    "Tombstone",
    "DEFAULT_CAPACITY",
    "DEFAULT_PRIME",
    "DEFAULT_MAX_LOAD_FACTOR",
]
