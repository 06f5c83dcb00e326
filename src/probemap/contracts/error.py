"""Failure envelopes for the probemap CLI.

Every subcommand failure is written to stderr as one JSON object
(``{"error": ..., "detail": ..., "hint": ...}``) and the process exits with
one of the :class:`Exit` codes. A full table is reported as ``TableFull``
under the invariant code.
"""

from __future__ import annotations

import json
import logging
import sys
from collections.abc import Callable
from dataclasses import dataclass
from enum import IntEnum
from functools import wraps
from typing import Any, NoReturn, TypeVar

logger = logging.getLogger(__name__)
T = TypeVar("T")


class Exit(IntEnum):
    OK = 0
    BAD_INPUT = 2
    INVARIANT = 3
    POLICY = 4
    IO = 5


@dataclass(slots=True)
class ErrorEnvelope:
    """One failed command, as printed on stderr."""

    error: str
    detail: str
    hint: str | None = None

    def to_json(self) -> str:
        body: dict[str, str] = {"error": self.error, "detail": self.detail}
        if self.hint:
            body["hint"] = self.hint
        return json.dumps(body, ensure_ascii=False)


def die(code: Exit, kind: str, detail: str, hint: str | None = None) -> NoReturn:
    """Print the envelope for ``kind`` and leave with ``code``."""

    sys.stderr.write(ErrorEnvelope(kind, detail, hint).to_json() + "\n")
    try:
        sys.stderr.flush()
    finally:
        sys.exit(int(code))


class EnvelopeError(Exception):
    """Error with an optional remedy shown as the envelope ``hint``."""

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint = hint


class BadInputError(EnvelopeError):
    """Bad seed pair, flag, word list or config value."""


class InvariantError(EnvelopeError):
    """The table cannot keep one of its structural guarantees."""


class TableFullError(InvariantError):
    """Insert into a table whose slots are all occupied by other keys."""

    def __init__(self, capacity: int, key: Any) -> None:
        super().__init__(
            f"no available slot for key {key!r} (capacity={capacity})",
            hint="raise the capacity or lower max_load_factor",
        )
        self.capacity = capacity
        self.key = key


class PolicyError(EnvelopeError):
    """Command the CLI does not know how to run."""


class IOErrorEnvelope(EnvelopeError):  # noqa: N818 - public API name
    """Word list or config that exists but cannot be decoded."""


# Most specific first: TableFullError is also an InvariantError.
_ENVELOPE_CODES: tuple[tuple[type[Exception], Exit, str], ...] = (
    (BadInputError, Exit.BAD_INPUT, "BadInput"),
    (TableFullError, Exit.INVARIANT, "TableFull"),
    (InvariantError, Exit.INVARIANT, "Invariant"),
    (PolicyError, Exit.POLICY, "Policy"),
    (IOErrorEnvelope, Exit.IO, "IO"),
    (FileNotFoundError, Exit.IO, "FileNotFound"),
    (ValueError, Exit.BAD_INPUT, "BadInput"),
)


def classify(exc: Exception) -> tuple[Exit, str]:
    """Exit code and envelope label for ``exc``; unknown errors are ``Unhandled``."""

    for exc_type, code, label in _ENVELOPE_CODES:
        if isinstance(exc, exc_type):
            return code, label
    if isinstance(exc, EnvelopeError):
        return Exit.POLICY, "UnhandledEnvelope"
    return Exit.POLICY, "Unhandled"


def guard_cli(fn: Callable[..., T]) -> Callable[..., T]:
    """Run ``fn`` and turn any exception into an envelope plus exit code."""

    @wraps(fn)
    def _wrapped(*args: Any, **kwargs: Any) -> T:
        try:
            return fn(*args, **kwargs)
        except Exception as exc:
            code, label = classify(exc)
            if label == "Unhandled":
                logger.exception("Unhandled CLI exception")
                die(code, label, f"{type(exc).__name__}: {exc}")
            die(code, label, str(exc), hint=getattr(exc, "hint", None))

    return _wrapped


__all__ = [
    "Exit",
    "ErrorEnvelope",
    "EnvelopeError",
    "BadInputError",
    "InvariantError",
    "TableFullError",
    "PolicyError",
    "IOErrorEnvelope",
    "classify",
    "guard_cli",
    "die",
]
