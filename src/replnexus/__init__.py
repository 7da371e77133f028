"""Interactive REPL sessions keyed by context, routed from a host editor."""

from .bootstrap import setup
from .commands import CommandSurface
from .errors import ErrorCode, ReplNexusError
from .manager import SessionManager

__all__ = [
    "CommandSurface",
    "ErrorCode",
    "ReplNexusError",
    "SessionManager",
    "setup",
]

__version__ = "0.1.0"
