"""User-facing error model for REPL session management."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ErrorCode(str, Enum):
    UNKNOWN_CONTEXT = "unknown-context"
    NO_REPL_AVAILABLE = "no-repl-available"
    NO_SESSION_TO_RESTART = "no-session-to-restart"
    NO_CONTEXT_DETECTED = "no-context-detected"
    CONFIG_ERROR = "config-error"
    PROCESS_ERROR = "process-error"


@dataclass
class ReplNexusError(Exception):
    message: str
    code: ErrorCode = ErrorCode.PROCESS_ERROR
    hint: str = ""

    def __str__(self) -> str:
        if self.hint:
            return f"{self.message} Hint: {self.hint}"
        return self.message


def user_facing_error(message: str, *, hint: str = "") -> str:
    if hint:
        return f"Error: {message}. Next step: {hint}"
    return f"Error: {message}."
