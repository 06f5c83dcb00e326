"""Error contracts shared by the probemap core and CLI."""

from .error import (
    BadInputError,
    EnvelopeError,
    ErrorEnvelope,
    Exit,
    InvariantError,
    IOErrorEnvelope,
    PolicyError,
    TableFullError,
    classify,
    die,
    guard_cli,
)

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
