"""Typed configuration loader for probemap."""

from __future__ import annotations

import os
import tomllib
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .contracts.error import BadInputError
from .core.maps import DEFAULT_CAPACITY, DEFAULT_MAX_LOAD_FACTOR, DEFAULT_PRIME

_NONE_WORDS = {"none", "null", "off", ""}


def _optional_int(raw: str) -> int | None:
    if raw.strip().lower() in _NONE_WORDS:
        return None
    return int(raw)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


@dataclass
class MapPolicy:
    initial_capacity: int = DEFAULT_CAPACITY
    prime: int = DEFAULT_PRIME
    max_load_factor: float = DEFAULT_MAX_LOAD_FACTOR
    seed: int | None = None

    def validate(self) -> None:
        if self.initial_capacity < 1:
            raise BadInputError("map.initial_capacity must be >= 1")
        if self.prime < 2:
            raise BadInputError("map.prime must be >= 2")
        if not 0.0 < self.max_load_factor < 1.0:
            raise BadInputError("map.max_load_factor must be in (0, 1)")


@dataclass
class SpellcheckPolicy:
    initial_capacity: int = 37199
    encoding: str = "utf-8"

    def validate(self) -> None:
        if self.initial_capacity < 1:
            raise BadInputError("spellcheck.initial_capacity must be >= 1")
        try:
            "".encode(self.encoding)
        except LookupError as exc:
            raise BadInputError(f"spellcheck.encoding {self.encoding!r} is unknown") from exc


@dataclass
class AppConfig:
    map: MapPolicy = field(default_factory=MapPolicy)
    spellcheck: SpellcheckPolicy = field(default_factory=SpellcheckPolicy)

    @classmethod
    def load(cls, path: Path | None) -> AppConfig:
        if path is None:
            cfg = cls()
        else:
            try:
                data = tomllib.loads(path.read_text(encoding="utf-8"))
            except FileNotFoundError as exc:
                raise BadInputError(f"Config file not found: {path}") from exc
            except tomllib.TOMLDecodeError as exc:
                raise BadInputError(f"Invalid TOML: {exc}") from exc
            cfg = cls.from_dict(data)
        cfg.apply_env_overrides(os.environ)
        cfg.validate()
        return cfg

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AppConfig:
        sections: dict[str, Any] = {}
        for name, policy_cls in (("map", MapPolicy), ("spellcheck", SpellcheckPolicy)):
            section = data.get(name, {})
            if not isinstance(section, dict):
                raise BadInputError(f"[{name}] section must be a table")
            try:
                sections[name] = policy_cls(**section)
            except TypeError as exc:
                raise BadInputError(f"[{name}] has unknown keys: {exc}") from exc
        return cls(**sections)

    def apply_env_overrides(self, env: Mapping[str, str]) -> None:
        mapping: dict[str, tuple[Any, str, Callable[[str], Any]]] = {
            "PROBEMAP_INITIAL_CAPACITY": (self.map, "initial_capacity", int),
            "PROBEMAP_PRIME": (self.map, "prime", int),
            "PROBEMAP_MAX_LOAD_FACTOR": (self.map, "max_load_factor", float),
            "PROBEMAP_SEED": (self.map, "seed", _optional_int),
            "PROBEMAP_SPELLCHECK_CAPACITY": (self.spellcheck, "initial_capacity", int),
            "PROBEMAP_SPELLCHECK_ENCODING": (self.spellcheck, "encoding", str),
        }
        for key, (target, attr, caster) in mapping.items():
            raw_value = env.get(key)
            if raw_value is None:
                continue
            try:
                value = caster(raw_value)
            except ValueError as exc:
                raise BadInputError(f"Invalid env override {key}={raw_value!r}") from exc
            setattr(target, attr, value)

    def validate(self) -> None:
        for label, value in (
            ("map.initial_capacity", self.map.initial_capacity),
            ("map.prime", self.map.prime),
            ("spellcheck.initial_capacity", self.spellcheck.initial_capacity),
        ):
            if not _is_int(value):
                raise BadInputError(f"{label} must be an integer")
        if self.map.seed is not None and not _is_int(self.map.seed):
            raise BadInputError("map.seed must be an integer")
        lf = self.map.max_load_factor
        if isinstance(lf, bool) or not isinstance(lf, (int, float)):
            raise BadInputError("map.max_load_factor must be a number")
        if not isinstance(self.spellcheck.encoding, str):
            raise BadInputError("spellcheck.encoding must be a string")
        self.map.validate()
        self.spellcheck.validate()


DEFAULT_CONFIG = AppConfig()


def load_app_config(path: str | None) -> AppConfig:
    config_path = Path(path) if path else None
    return AppConfig.load(config_path)
