"""Probe-path tracing for :class:`ProbeHashMap`."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

from probemap.core.maps import ProbeHashMap
from probemap.core.slots import Empty, Occupied

ProbeTrace = Dict[str, Any]


def _json_friendly(value: Any) -> Any:
    """Return ``value`` if it serialises to JSON, else its repr."""

    try:
        json.dumps(value)
        return value
    except (TypeError, ValueError):
        return repr(value)


def _walk(map_obj: ProbeHashMap, key: Any) -> ProbeTrace:
    """Replay the linear probe for ``key`` without touching the table."""

    table = map_obj.table
    cap = table.capacity
    start = map_obj.compress(key)
    idx = start
    path: List[Dict[str, Any]] = []
    candidate: Optional[int] = None
    terminal = "exhausted"
    step = 0
    while True:
        slot = table[idx]
        entry: Dict[str, Any] = {"step": step, "slot": idx, "state": slot.state.value}
        if isinstance(slot, Occupied):
            matches = slot.key == key
            entry.update(
                {
                    "key_repr": repr(slot.key),
                    "value_repr": repr(slot.value),
                    "home_slot": map_obj.compress(slot.key),
                    "probe_distance": map_obj.probe_distance(idx),
                    "matches": matches,
                }
            )
            path.append(entry)
            if matches:
                terminal = "match"
                break
        else:
            if candidate is None:
                candidate = idx
                entry["candidate"] = True
            path.append(entry)
            if isinstance(slot, Empty):
                terminal = "empty"
                break
        idx = (idx + 1) % cap
        step += 1
        if idx == start:
            break
    return {
        "backend": "linear-probing",
        "key_repr": repr(key),
        "found": terminal == "match",
        "terminal": terminal,
        "start_slot": start,
        "candidate_slot": candidate,
        "capacity": cap,
        "path": path,
    }


def trace_probe_get(map_obj: ProbeHashMap, key: Any) -> ProbeTrace:
    trace = _walk(map_obj, key)
    trace["operation"] = "get"
    return trace


def trace_probe_put(map_obj: ProbeHashMap, key: Any, value: Any) -> ProbeTrace:
    trace = _walk(map_obj, key)
    path = trace["path"]
    candidate = trace["candidate_slot"]
    for entry in path:
        if entry.get("matches"):
            entry["action"] = "update"
        elif entry["slot"] == candidate:
            entry["action"] = "fill"
        else:
            entry["action"] = "advance"
    if trace["found"]:
        terminal = "update"
    elif candidate is None:
        terminal = "full"
    elif _state_at(path, candidate) == "tombstone":
        terminal = "reuse-tombstone"
    else:
        terminal = "insert"
    grows = not trace["found"] and candidate is not None
    size_after = len(map_obj) + (1 if grows else 0)
    trace.update(
        {
            "operation": "put",
            "value_repr": _json_friendly(value),
            "terminal": terminal,
            "resize_after": size_after / map_obj.capacity > map_obj.max_load_factor,
        }
    )
    return trace


def trace_probe_remove(map_obj: ProbeHashMap, key: Any) -> ProbeTrace:
    trace = _walk(map_obj, key)
    trace["operation"] = "del"
    trace["terminal"] = "remove" if trace["found"] else "missing"
    return trace


def _state_at(path: List[Dict[str, Any]], slot: int) -> Optional[str]:
    for entry in path:
        if entry["slot"] == slot:
            return entry["state"]
    return None


def format_trace_lines(
    trace: Dict[str, Any],
    *,
    seeds: Optional[Sequence[str]] = None,
    export_path: Optional[Union[str, Path]] = None,
) -> List[str]:
    """Return a human-friendly rendering of a probe trace."""

    lines: List[str] = []
    operation = trace.get("operation", "?")
    backend = trace.get("backend", "?")
    key_repr = trace.get("key_repr", "?")
    lines.append(f"Probe visualization [{backend}] {operation.upper()} key={key_repr}")
    lines.append(f"Found: {trace.get('found')} | Terminal: {trace.get('terminal')}")
    if "capacity" in trace:
        lines.append(f"Capacity: {trace['capacity']} | Start slot: {trace.get('start_slot')}")
    if trace.get("candidate_slot") is not None and not trace.get("found"):
        lines.append(f"Insertion candidate: slot {trace['candidate_slot']}")
    if trace.get("resize_after"):
        lines.append("Put would trigger a rehash")
    if seeds:
        lines.append("Seed entries: " + ", ".join(seeds))
    lines.append("Steps:")
    path = trace.get("path")
    if not isinstance(path, list) or not path:
        lines.append("  (no path recorded)")
    else:
        for item in path:
            if not isinstance(item, dict):
                lines.append(f"  {item!r}")
                continue
            attrs: List[str] = []
            for key in (
                "slot",
                "state",
                "action",
                "home_slot",
                "probe_distance",
                "matches",
                "key_repr",
            ):
                if key in item and item[key] is not None:
                    value = item[key]
                    if isinstance(value, bool):
                        value = str(value).lower()
                    attrs.append(f"{key}={value}")
            lines.append(f"  Step {item.get('step', '?')}: " + ", ".join(attrs))
    if export_path:
        lines.append(f"Trace JSON written to: {export_path}")
    return lines


__all__ = [
    "trace_probe_get",
    "trace_probe_put",
    "trace_probe_remove",
    "format_trace_lines",
]
