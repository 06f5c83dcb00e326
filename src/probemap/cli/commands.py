"""CLI command registration and handlers for probemap."""

from __future__ import annotations

import argparse
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

from probemap.analysis import (
    format_trace_lines,
    trace_probe_get,
    trace_probe_put,
    trace_probe_remove,
)
from probemap.config import AppConfig, MapPolicy
from probemap.contracts.error import BadInputError, Exit
from probemap.core.maps import ProbeHashMap, collect_probe_histogram, sample_metrics
from probemap.core.probe import ProbeStats
from probemap.workloads import format_spellcheck_report, run_spellcheck


@dataclass(frozen=True)
class CLIContext:
    """Runtime hooks supplied by the top-level CLI entrypoint."""

    emit_success: Callable[..., None]
    build_map: Callable[[], ProbeHashMap]
    run_op: Callable[..., Optional[str]]
    app_config: Callable[[], AppConfig]
    logger: logging.Logger
    guard: Callable[[Callable[[argparse.Namespace], int]], Callable[[argparse.Namespace], int]]


def register_subcommands(
    subparsers: argparse._SubParsersAction[argparse.ArgumentParser],
    ctx: CLIContext,
) -> Dict[str, Callable[[argparse.Namespace], int]]:
    """Define CLI subcommands and return their handlers."""

    handlers: Dict[str, Callable[[argparse.Namespace], int]] = {}

    def _register(
        name: str,
        help_text: Optional[str],
        configure: Callable[[argparse.ArgumentParser], Callable[[argparse.Namespace], int]],
    ) -> None:
        parser = subparsers.add_parser(name, help=help_text)
        handler = configure(parser)
        handlers[name] = ctx.guard(handler)

    _register("put", "Insert or replace KEY in a seeded map.", lambda p: _configure_put(p, ctx))
    _register("get", "Look up KEY in a seeded map.", lambda p: _configure_get(p, ctx))
    _register("del", "Remove KEY from a seeded map.", lambda p: _configure_del(p, ctx))
    _register("items", "List live entries in slot order.", lambda p: _configure_items(p, ctx))
    _register(
        "stats",
        "Report load factor, tombstones and probe distances for a seeded map.",
        lambda p: _configure_stats(p, ctx),
    )
    _register(
        "probe-visualize",
        "Trace the probe path of a GET, PUT or DEL.",
        lambda p: _configure_probe_visualize(p, ctx),
    )
    _register(
        "spellcheck",
        "Report words of a search list found, or found after one adjacent swap, in a dictionary.",
        lambda p: _configure_spellcheck(p, ctx),
    )
    return handlers


def _add_seed_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--seed",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Seed the map with an entry before running the command (repeatable)",
    )
    parser.add_argument(
        "--remove",
        action="append",
        default=[],
        metavar="KEY",
        help="Remove KEY after seeding, leaving a tombstone (repeatable)",
    )


def _parse_seed(raw: str) -> Tuple[str, str]:
    if "=" not in raw:
        raise BadInputError(f"Seed entries must be KEY=VALUE (got {raw!r})")
    key, value = raw.split("=", 1)
    key = key.strip()
    if not key:
        raise BadInputError("Seed key cannot be empty")
    return key, value.strip()


def _seeded_map(args: argparse.Namespace, ctx: CLIContext) -> ProbeHashMap:
    m = ctx.build_map()
    for raw in args.seed:
        key, value = _parse_seed(raw)
        m.put(key, value)
    for key in args.remove:
        m.remove(key)
    if args.seed or args.remove:
        ctx.logger.debug(
            "Seeded map with %d entries, %d removals (capacity=%d)",
            len(args.seed),
            len(args.remove),
            m.capacity,
        )
    return m


def _configure_put(
    parser: argparse.ArgumentParser, ctx: CLIContext
) -> Callable[[argparse.Namespace], int]:
    parser.add_argument("key")
    parser.add_argument("value")
    _add_seed_argument(parser)

    def handler(args: argparse.Namespace) -> int:
        m = _seeded_map(args, ctx)
        replaced = args.key in m
        stats = ProbeStats()
        out = ctx.run_op(m, "put", args.key, args.value, stats)
        data = {
            "key": args.key,
            "value": args.value,
            "replaced": replaced,
            "size": len(m),
            "probes": stats.total_probes,
        }
        ctx.emit_success("put", text=out, data=data)
        return int(Exit.OK)

    return handler


def _configure_get(
    parser: argparse.ArgumentParser, ctx: CLIContext
) -> Callable[[argparse.Namespace], int]:
    parser.add_argument("key")
    _add_seed_argument(parser)

    def handler(args: argparse.Namespace) -> int:
        m = _seeded_map(args, ctx)
        stats = ProbeStats()
        found = m.probe(args.key).found
        out = ctx.run_op(m, "get", args.key, None, stats)
        data = {
            "key": args.key,
            "found": found,
            "value": out if found else None,
            "probes": stats.total_probes,
        }
        ctx.emit_success("get", text=out, data=data)
        return int(Exit.OK)

    return handler


def _configure_del(
    parser: argparse.ArgumentParser, ctx: CLIContext
) -> Callable[[argparse.Namespace], int]:
    parser.add_argument("key")
    _add_seed_argument(parser)

    def handler(args: argparse.Namespace) -> int:
        m = _seeded_map(args, ctx)
        deleted = m.probe(args.key).found
        out = ctx.run_op(m, "del", args.key, None)
        data = {
            "key": args.key,
            "deleted": deleted,
            "value": out if deleted else None,
            "size": len(m),
        }
        ctx.emit_success("del", text=out, data=data)
        return int(Exit.OK)

    return handler


def _parse_items_output(out: Optional[str]) -> List[Dict[str, str]]:
    items: List[Dict[str, str]] = []
    if not out:
        return items
    for line in out.splitlines():
        key, _, value = line.partition(",")
        items.append({"key": key, "value": value})
    return items


def _configure_items(
    parser: argparse.ArgumentParser, ctx: CLIContext
) -> Callable[[argparse.Namespace], int]:
    _add_seed_argument(parser)

    def handler(args: argparse.Namespace) -> int:
        m = _seeded_map(args, ctx)
        out = ctx.run_op(m, "items", None, None)
        items = _parse_items_output(out)
        data = {"count": len(items), "items": items}
        ctx.emit_success("items", text=out, data=data)
        return int(Exit.OK)

    return handler


def _configure_stats(
    parser: argparse.ArgumentParser, ctx: CLIContext
) -> Callable[[argparse.Namespace], int]:
    _add_seed_argument(parser)

    def handler(args: argparse.Namespace) -> int:
        m = _seeded_map(args, ctx)
        metrics = sample_metrics(m)
        histogram = collect_probe_histogram(m)
        lines = [f"{name}: {value}" for name, value in metrics.items()]
        if histogram:
            lines.append(
                "probe histogram: " + ", ".join(f"{dist}:{count}" for dist, count in histogram)
            )
        data: Dict[str, Any] = dict(metrics)
        data["probe_histogram"] = histogram
        ctx.emit_success("stats", text="\n".join(lines), data=data)
        return int(Exit.OK)

    return handler


def _configure_probe_visualize(
    parser: argparse.ArgumentParser, ctx: CLIContext
) -> Callable[[argparse.Namespace], int]:
    parser.add_argument(
        "--operation",
        choices=["get", "put", "del"],
        required=True,
        help="Operation to trace",
    )
    parser.add_argument("--key", required=True, help="Key to probe")
    parser.add_argument("--value", help="Value for PUT operations")
    _add_seed_argument(parser)
    parser.add_argument(
        "--export-json",
        help="Write the trace payload to a JSON file (indent=2)",
    )
    parser.add_argument(
        "--apply",
        action="store_true",
        help="Apply the operation after tracing and report the resulting size",
    )

    def handler(args: argparse.Namespace) -> int:
        if args.operation == "put" and args.value is None:
            raise BadInputError("PUT operation requires --value")

        m = _seeded_map(args, ctx)
        if args.operation == "get":
            trace = trace_probe_get(m, args.key)
        elif args.operation == "put":
            trace = trace_probe_put(m, args.key, args.value)
        else:
            trace = trace_probe_remove(m, args.key)

        if args.apply:
            ctx.run_op(m, args.operation, args.key, args.value)
            trace["size_after"] = len(m)

        export_path: Optional[Path] = None
        if args.export_json:
            export_path = Path(args.export_json).expanduser().resolve()
            export_path.parent.mkdir(parents=True, exist_ok=True)
            export_path.write_text(json.dumps(trace, indent=2), encoding="utf-8")

        text_output = "\n".join(
            format_trace_lines(trace, seeds=args.seed, export_path=export_path)
        )

        payload: Dict[str, Any] = {"trace": trace}
        if args.seed:
            payload["seed_entries"] = list(args.seed)
        if export_path is not None:
            payload["export_json"] = str(export_path)

        ctx.emit_success("probe-visualize", text=text_output, data=payload)
        return int(Exit.OK)

    return handler


def _configure_spellcheck(
    parser: argparse.ArgumentParser, ctx: CLIContext
) -> Callable[[argparse.Namespace], int]:
    parser.add_argument("--dictionary", required=True, help="Word list, one word per line")
    parser.add_argument("--search", required=True, help="Words to check, one per line")
    parser.add_argument("--encoding", default=None, help="File encoding (default from config)")

    def handler(args: argparse.Namespace) -> int:
        cfg = ctx.app_config()
        policy = cfg.map
        sized = MapPolicy(
            initial_capacity=cfg.spellcheck.initial_capacity,
            prime=policy.prime,
            max_load_factor=policy.max_load_factor,
            seed=policy.seed,
        )
        report = run_spellcheck(
            args.dictionary,
            args.search,
            sized,
            encoding=args.encoding or cfg.spellcheck.encoding,
        )
        ctx.emit_success(
            "spellcheck", text=format_spellcheck_report(report), data=report.to_dict()
        )
        return int(Exit.OK)

    return handler


__all__ = ["CLIContext", "register_subcommands"]
