"""Launch definition model."""

from __future__ import annotations

from dataclasses import dataclass, field

from replnexus.formatting import Formatter, submit


@dataclass(frozen=True)
class LaunchDefinition:
    command: tuple[str, ...]
    format: Formatter = field(default=submit, compare=False)

    def __post_init__(self) -> None:
        command = tuple(self.command)
        if not command or not command[0].strip():
            raise ValueError("Launch definition command cannot be empty")
        object.__setattr__(self, "command", command)

    @property
    def executable(self) -> str:
        return self.command[0]
