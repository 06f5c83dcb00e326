from __future__ import annotations

from pathlib import Path

import pytest

from probemap.config import AppConfig, load_app_config
from probemap.contracts.error import BadInputError


def test_default_config_validates() -> None:
    cfg = load_app_config(None)
    assert cfg.map.initial_capacity == 17
    assert cfg.map.prime == 109_345_121
    assert cfg.map.max_load_factor == pytest.approx(0.5)
    assert cfg.map.seed is None
    assert cfg.spellcheck.initial_capacity == 37199
    assert cfg.spellcheck.encoding == "utf-8"


def test_load_from_toml(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    cfg_path = tmp_path / "config.toml"
    cfg_path.write_text(
        """
[map]
initial_capacity = 31
prime = 1000003
max_load_factor = 0.75
seed = 7

[spellcheck]
initial_capacity = 101
encoding = "latin-1"
""",
        encoding="utf-8",
    )
    cfg = load_app_config(str(cfg_path))
    assert cfg.map.initial_capacity == 31
    assert cfg.map.prime == 1000003
    assert cfg.map.max_load_factor == pytest.approx(0.75)
    assert cfg.map.seed == 7
    assert cfg.spellcheck.initial_capacity == 101
    assert cfg.spellcheck.encoding == "latin-1"

    # env override takes precedence
    monkeypatch.setenv("PROBEMAP_INITIAL_CAPACITY", "53")
    monkeypatch.setenv("PROBEMAP_SEED", "none")
    monkeypatch.setenv("PROBEMAP_SPELLCHECK_ENCODING", "utf-8")
    cfg_env = AppConfig.load(cfg_path)
    assert cfg_env.map.initial_capacity == 53
    assert cfg_env.map.seed is None
    assert cfg_env.spellcheck.encoding == "utf-8"


@pytest.mark.parametrize(
    "body, message",
    [
        ("[map]\nmax_load_factor = 1.5\n", "max_load_factor"),
        ("[map]\ninitial_capacity = 0\n", "initial_capacity"),
        ("[map]\nprime = 1\n", "prime"),
        ("[map]\ninitial_capacity = 2.5\n", "initial_capacity"),
        ("[spellcheck]\nencoding = \"no-such-codec\"\n", "encoding"),
        ("[map]\nbogus = 1\n", "unknown keys"),
        ("map = 3\n", "must be a table"),
        ("[map\n", "Invalid TOML"),
    ],
)
def test_invalid_values_raise(tmp_path: Path, body: str, message: str) -> None:
    bad_path = tmp_path / "bad.toml"
    bad_path.write_text(body, encoding="utf-8")
    with pytest.raises(BadInputError) as excinfo:
        load_app_config(str(bad_path))
    assert message in str(excinfo.value)


def test_missing_config_file(tmp_path: Path) -> None:
    with pytest.raises(BadInputError, match="not found"):
        load_app_config(str(tmp_path / "absent.toml"))


def test_invalid_env_override(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PROBEMAP_MAX_LOAD_FACTOR", "lots")
    with pytest.raises(BadInputError, match="PROBEMAP_MAX_LOAD_FACTOR"):
        load_app_config(None)


def test_env_override_is_validated(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PROBEMAP_MAX_LOAD_FACTOR", "0")
    with pytest.raises(BadInputError, match="max_load_factor"):
        load_app_config(None)


@pytest.mark.parametrize(
    "data, message",
    [
        ({"map": {"max_load_factor": "0.5"}}, "map.max_load_factor must be a number"),
        ({"map": {"max_load_factor": True}}, "map.max_load_factor must be a number"),
        ({"map": {"prime": True}}, "map.prime must be an integer"),
        ({"map": {"seed": "7"}}, "map.seed must be an integer"),
        (
            {"spellcheck": {"initial_capacity": "big"}},
            "spellcheck.initial_capacity must be an integer",
        ),
        ({"spellcheck": {"encoding": 8}}, "spellcheck.encoding must be a string"),
    ],
)
def test_wrong_value_types_raise_bad_input(data: dict, message: str) -> None:
    cfg = AppConfig.from_dict(data)
    with pytest.raises(BadInputError, match=message):
        cfg.validate()


def test_wrong_type_in_toml_is_bad_input(tmp_path: Path) -> None:
    bad_path = tmp_path / "typed.toml"
    bad_path.write_text('[spellcheck]\ninitial_capacity = "big"\n', encoding="utf-8")
    with pytest.raises(BadInputError, match="spellcheck.initial_capacity"):
        load_app_config(str(bad_path))
