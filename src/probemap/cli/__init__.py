"""probemap CLI package."""

from .app import configure_logging, console_main, emit_success, main
from .commands import CLIContext, register_subcommands

__all__ = [
    "CLIContext",
    "configure_logging",
    "console_main",
    "emit_success",
    "main",
    "register_subcommands",
]
