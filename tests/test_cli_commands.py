from __future__ import annotations

import contextlib
import io
import json
import types
from pathlib import Path

from probemap.cli import app


def run_cli(args: list[str]) -> types.SimpleNamespace:
    stdout = io.StringIO()
    stderr = io.StringIO()
    try:
        with contextlib.redirect_stdout(stdout), contextlib.redirect_stderr(stderr):
            try:
                code = app.main(args)
            except SystemExit as exc:
                if isinstance(exc.code, int):
                    code = exc.code
                elif exc.code is None:
                    code = 0
                else:
                    code = 1
    finally:
        app.OUTPUT_JSON = False
        app.set_app_config(app.AppConfig())
    return types.SimpleNamespace(
        returncode=code, stdout=stdout.getvalue(), stderr=stderr.getvalue()
    )


def parse_error(stderr: str) -> dict:
    if not stderr.strip():
        return {}
    return json.loads(stderr.strip().splitlines()[-1])


def test_put_reports_insert_and_replace() -> None:
    result = run_cli(["--json", "put", "k", "2", "--seed", "k=1"])
    assert result.returncode == 0
    payload = json.loads(result.stdout)
    assert payload["ok"] is True
    assert payload["command"] == "put"
    assert payload["replaced"] is True
    assert payload["result"] == "1"
    assert payload["size"] == 1

    fresh = run_cli(["put", "k", "v"])
    assert fresh.returncode == 0
    assert fresh.stdout.strip() == "OK"


def test_get_found_and_missing() -> None:
    hit = run_cli(["--json", "get", "b", "--seed", "a=1", "--seed", "b=2"])
    payload = json.loads(hit.stdout)
    assert payload["found"] is True
    assert payload["value"] == "2"
    assert payload["probes"] >= 1

    miss = run_cli(["--json", "get", "zzz", "--seed", "a=1"])
    payload = json.loads(miss.stdout)
    assert payload["found"] is False
    assert payload["value"] is None


def test_get_after_removal_leaves_tombstone() -> None:
    result = run_cli(
        ["--json", "get", "a", "--seed", "a=1", "--seed", "b=2", "--remove", "a"]
    )
    assert json.loads(result.stdout)["found"] is False

    stats = run_cli(["--json", "stats", "--seed", "a=1", "--seed", "b=2", "--remove", "a"])
    payload = json.loads(stats.stdout)
    assert payload["size"] == 1
    assert payload["tombstones"] == 1
    assert payload["backend"] == "linear-probing"


def test_del_command() -> None:
    result = run_cli(["--json", "del", "a", "--seed", "a=1"])
    payload = json.loads(result.stdout)
    assert payload["deleted"] is True
    assert payload["value"] == "1"
    assert payload["size"] == 0

    missing = run_cli(["--json", "del", "nope"])
    assert json.loads(missing.stdout)["deleted"] is False


def test_items_lists_seeded_entries() -> None:
    result = run_cli(["--json", "items", "--seed", "a=1", "--seed", "b=2", "--seed", "a=3"])
    payload = json.loads(result.stdout)
    assert payload["count"] == 2
    assert sorted((item["key"], item["value"]) for item in payload["items"]) == [
        ("a", "3"),
        ("b", "2"),
    ]


def test_stats_text_output() -> None:
    result = run_cli(["stats", "--seed", "x=1"])
    assert result.returncode == 0
    assert "capacity: 17" in result.stdout
    assert "probe histogram: 0:1" in result.stdout


def test_invalid_seed_format() -> None:
    result = run_cli(["get", "k", "--seed", "not-key-value"])
    assert result.returncode == 2
    assert "KEY=VALUE" in parse_error(result.stderr)["detail"]


def test_probe_visualize_text() -> None:
    result = run_cli(
        [
            "probe-visualize",
            "--operation",
            "put",
            "--key",
            "K1",
            "--value",
            "V1",
            "--seed",
            "A=1",
            "--seed",
            "B=2",
        ]
    )
    assert result.returncode == 0
    assert "Probe visualization [linear-probing] PUT" in result.stdout
    assert "Seed entries: A=1, B=2" in result.stdout
    assert "Steps:" in result.stdout


def test_probe_visualize_json_and_apply() -> None:
    result = run_cli(
        [
            "--json",
            "probe-visualize",
            "--operation",
            "del",
            "--key",
            "A",
            "--seed",
            "A=1",
            "--apply",
        ]
    )
    assert result.returncode == 0
    trace = json.loads(result.stdout)["trace"]
    assert trace["operation"] == "del"
    assert trace["terminal"] == "remove"
    assert trace["size_after"] == 0


def test_probe_visualize_requires_value_for_put() -> None:
    result = run_cli(["probe-visualize", "--operation", "put", "--key", "K1"])
    assert result.returncode == 2
    assert "requires --value" in result.stderr


def test_probe_visualize_export_json(tmp_path: Path) -> None:
    target = tmp_path / "out" / "trace.json"
    result = run_cli(
        ["probe-visualize", "--operation", "get", "--key", "foo", "--export-json", str(target)]
    )
    assert result.returncode == 0
    payload = json.loads(target.read_text(encoding="utf-8"))
    assert payload["operation"] == "get"
    assert payload["found"] is False
    assert "Trace JSON written to" in result.stdout


def test_spellcheck_command(tmp_path: Path) -> None:
    dictionary = tmp_path / "dictionary.txt"
    dictionary.write_text("best\nform\n", encoding="utf-8")
    search = tmp_path / "search.txt"
    search.write_text("best\nfrom\nxyz\n", encoding="utf-8")

    result = run_cli(
        ["--json", "spellcheck", "--dictionary", str(dictionary), "--search", str(search)]
    )
    assert result.returncode == 0
    payload = json.loads(result.stdout)
    assert payload["command"] == "spellcheck"
    assert payload["counts"] == {"found": 1, "transposed": 1, "unknown": 1}
    assert payload["capacity"] == 37199

    text = run_cli(["spellcheck", "--dictionary", str(dictionary), "--search", str(search)])
    assert "Transposed: from -> form" in text.stdout
    assert "Average probes:" in text.stdout


def test_spellcheck_missing_file_returns_io(tmp_path: Path) -> None:
    result = run_cli(
        [
            "spellcheck",
            "--dictionary",
            str(tmp_path / "absent.txt"),
            "--search",
            str(tmp_path / "also-absent.txt"),
        ]
    )
    assert result.returncode == 5
    assert parse_error(result.stderr)["error"] == "FileNotFound"


def test_config_file_drives_map(tmp_path: Path) -> None:
    cfg_path = tmp_path / "probemap.toml"
    cfg_path.write_text("[map]\ninitial_capacity = 101\nseed = 4\n", encoding="utf-8")
    result = run_cli(["--json", "--config", str(cfg_path), "stats"])
    assert result.returncode == 0
    assert json.loads(result.stdout)["capacity"] == 101


def test_bad_config_returns_bad_input(tmp_path: Path) -> None:
    cfg_path = tmp_path / "bad.toml"
    cfg_path.write_text("[map]\nmax_load_factor = 2\n", encoding="utf-8")
    result = run_cli(["--config", str(cfg_path), "stats"])
    assert result.returncode == 2
    assert parse_error(result.stderr)["error"] == "BadInput"


def test_config_value_of_wrong_type_returns_bad_input(tmp_path: Path) -> None:
    cfg_path = tmp_path / "typed.toml"
    cfg_path.write_text('[map]\nmax_load_factor = "0.5"\n', encoding="utf-8")
    result = run_cli(["--config", str(cfg_path), "stats"])
    assert result.returncode == 2
    envelope = parse_error(result.stderr)
    assert envelope["error"] == "BadInput"
    assert "max_load_factor" in envelope["detail"]
