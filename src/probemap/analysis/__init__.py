"""Diagnostics for probemap tables."""

from .probe import format_trace_lines, trace_probe_get, trace_probe_put, trace_probe_remove

__all__ = ["trace_probe_get", "trace_probe_put", "trace_probe_remove", "format_trace_lines"]
