"""Linear-probing hash map with tombstone deletion."""

from . import analysis, contracts, core, workloads
from .core import ProbeHashMap, ProbeStats

__all__ = [
    "ProbeHashMap",
    "ProbeStats",
    "analysis",
    "contracts",
    "core",
    "workloads",
]
