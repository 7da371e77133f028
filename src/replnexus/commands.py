"""Public REPL operations for host keybindings and commands."""

from __future__ import annotations

import functools
import logging as py_logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import TypeVar

from replnexus.catalog import DefinitionTable, LaunchDefinition
from replnexus.config import ReplConfig
from replnexus.errors import ErrorCode, ReplNexusError, user_facing_error
from replnexus.host import CapturedRange, EditorSurface
from replnexus.manager import SessionManager
from replnexus.memory import ReplSession

logger = py_logging.getLogger(__name__)

T = TypeVar("T")

CHARWISE = "char"


@dataclass
class LastSendRange:
    captured: CapturedRange | None = None


def trim_range(lines: Sequence[str], captured: CapturedRange) -> list[str]:
    """Cut the first and last captured lines down to the captured columns."""
    trimmed = list(lines)
    if not trimmed:
        return trimmed
    trimmed[-1] = trimmed[-1][: captured.end_col]
    trimmed[0] = trimmed[0][captured.start_col :]
    return trimmed


def _reported(operation: Callable[..., T]) -> Callable[..., T | None]:
    @functools.wraps(operation)
    def wrapper(self: CommandSurface, *args: object, **kwargs: object) -> T | None:
        try:
            return operation(self, *args, **kwargs)
        except ReplNexusError as exc:
            logger.warning("%s failed (code=%s): %s", operation.__name__, exc.code.value, exc.message)
            self.manager.editor.report_error(user_facing_error(exc.message, hint=exc.hint))
            return None

    return wrapper


class CommandSurface:
    def __init__(self, manager: SessionManager, *, last: LastSendRange | None = None) -> None:
        self.manager = manager
        self.last = last or LastSendRange()

    @property
    def editor(self) -> EditorSurface:
        return self.manager.editor

    def _current_context(self) -> str:
        context = self.editor.context_of(self.editor.current_surface())
        if not context:
            raise ReplNexusError(
                "Could not detect a context for the current buffer",
                code=ErrorCode.NO_CONTEXT_DETECTED,
                hint="Set a file type for the buffer.",
            )
        if not self.manager.catalog.has_context(context):
            raise ReplNexusError(
                f"There's no REPL definition for context '{context}'",
                code=ErrorCode.UNKNOWN_CONTEXT,
                hint="Register a launch definition for this context.",
            )
        return context

    # -- session visibility ------------------------------------------------

    @_reported
    def repl_here(self, context: str | None = None) -> ReplSession:
        resolved = context or self._current_context()
        return self.manager.repl_here(resolved, self.editor.current_window())

    @_reported
    def repl_for(self, context: str | None = None) -> ReplSession:
        return self.manager.repl_for(context or self._current_context())

    @_reported
    def focus_on(self, context: str | None = None) -> ReplSession:
        return self.manager.focus_on(context or self._current_context())

    @_reported
    def restart(self) -> ReplSession:
        return self.manager.restart(self.editor.current_surface())

    # -- sending -----------------------------------------------------------

    @_reported
    def send(self, context: str, data: str | Sequence[str]) -> ReplSession:
        return self.manager.send(context, data)

    @_reported
    def send_line(self) -> ReplSession | None:
        context = self._current_context()
        cursor = self.editor.get_cursor(self.editor.current_window())
        lines = self.editor.get_lines(self.editor.current_surface(), cursor.line, cursor.line)
        if not lines or not lines[0]:
            return None
        return self.manager.send(context, lines[0])

    def mark_cursor(self) -> int:
        """Remember the cursor so it can be restored after a motion send."""
        position = self.editor.get_cursor(self.editor.current_window())
        return self.editor.place_mark(self.editor.current_surface(), position)

    @_reported
    def send_motion(self, captured: CapturedRange, mode: str = CHARWISE) -> ReplSession | None:
        context = self._current_context()
        surface = self.editor.current_surface()
        window = self.editor.current_window()
        lines = self.editor.get_lines(surface, captured.start_line, captured.end_line)
        if not lines:
            return None
        if mode == CHARWISE:
            lines = trim_range(lines, captured)

        session = self.manager.send(context, lines)

        marks = self.editor.get_marks(surface)
        if marks:
            self.editor.restore_view(window, marks[0].position)
            self.editor.delete_mark(surface, marks[0].mark_id)

        self.last.captured = captured
        return session

    @_reported
    def send_visual(self, captured: CapturedRange) -> ReplSession | None:
        context = self._current_context()
        lines = self.editor.get_lines(self.editor.current_surface(), captured.start_line, captured.end_line)
        if not lines:
            return None
        session = self.manager.send(context, trim_range(lines, captured))
        self.last.captured = captured
        return session

    @_reported
    def repeat_last(self) -> ReplSession | None:
        captured = self.last.captured
        if captured is None:
            logger.debug("repeat_last skipped; nothing sent yet")
            return None
        context = self._current_context()
        lines = self.editor.get_lines(self.editor.current_surface(), captured.start_line, captured.end_line)
        if not lines:
            return None
        return self.manager.send(context, trim_range(lines, captured))

    # -- catalog and configuration ----------------------------------------

    def add_definitions(self, definitions: DefinitionTable) -> None:
        self.manager.catalog.merge(definitions)

    def list_contexts(self) -> list[str]:
        return sorted(self.manager.catalog.contexts())

    @_reported
    def list_definitions_for(self, context: str) -> list[tuple[str, LaunchDefinition]]:
        return self.manager.catalog.definitions_for(context)

    @_reported
    def set_config(self, **fields: object) -> ReplConfig:
        return self.manager.configure(**fields)
