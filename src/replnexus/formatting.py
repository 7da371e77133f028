"""Payload formatters applied before text is written to a REPL."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from replnexus.catalog.models import LaunchDefinition

Formatter = Callable[[Sequence[str]], list[str]]

PASTE_START = "\x1b[200~"
PASTE_END = "\x1b[201~"
_BLOCK_CONTINUATIONS = ("else", "elif", "except", "finally", "case")


def passthrough(lines: Sequence[str]) -> list[str]:
    return list(lines)


def submit(lines: Sequence[str]) -> list[str]:
    """Terminate the payload with a newline so the REPL evaluates it."""
    if not lines:
        return []
    return [*lines, ""]


def bracketed_paste(lines: Sequence[str]) -> list[str]:
    if len(lines) <= 1:
        return submit(lines)
    wrapped = [PASTE_START + lines[0], *lines[1:-1], lines[-1] + PASTE_END]
    return submit(wrapped)


def _is_indented(line: str) -> bool:
    return line[:1].isspace()


def _continues_block(line: str) -> bool:
    head = line.split(":", 1)[0].split(" ", 1)[0]
    return head in _BLOCK_CONTINUATIONS


def python_block(lines: Sequence[str]) -> list[str]:
    """Format source for the plain python prompt.

    Blank lines end a compound statement in the interactive interpreter, so
    they are dropped and an empty line is inserted wherever an indented block
    returns to column zero.
    """
    kept = [line for line in lines if line.strip()]
    result: list[str] = []
    for index, line in enumerate(kept):
        if index and _is_indented(kept[index - 1]) and not _is_indented(line) and not _continues_block(line):
            result.append("")
        result.append(line)
    if result and _is_indented(result[-1]):
        result.append("")
    return submit(result)


FORMATTERS: dict[str, Formatter] = {
    "passthrough": passthrough,
    "submit": submit,
    "bracketed_paste": bracketed_paste,
    "python_block": python_block,
}


def format_lines(definition: LaunchDefinition, lines: Sequence[str]) -> list[str]:
    return list(definition.format(list(lines)))
