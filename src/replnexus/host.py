"""Host editor and process collaborator contracts.

The session manager never talks to a concrete editor. Hosts implement
:class:`EditorSurface` (windows, buffers, cursors, marks, timers) and
:class:`ProcessBackend` (interactive subprocesses bound to a surface).
Surface and window handles are opaque hashable values owned by the host.
"""

from __future__ import annotations

from collections.abc import Callable, Hashable, Sequence
from dataclasses import dataclass
from typing import Protocol

SurfaceHandle = Hashable
WindowHandle = Hashable
ProcessRef = Hashable


@dataclass(frozen=True)
class Position:
    """A cursor position: 1-based line, 0-based column."""

    line: int
    col: int


@dataclass(frozen=True)
class Mark:
    mark_id: int
    position: Position


@dataclass(frozen=True)
class CapturedRange:
    """A captured text region.

    Lines are 1-based and inclusive. ``start_col`` is the 0-based offset of the
    first captured character on the first line; ``end_col`` is the exclusive
    0-based end offset on the last line.
    """

    start_line: int
    start_col: int
    end_line: int
    end_col: int


class EditorSurface(Protocol):
    def create_scratch_surface(self) -> SurfaceHandle: ...

    def run_command(self, command: str) -> None: ...

    def current_window(self) -> WindowHandle: ...

    def set_current_window(self, window: WindowHandle) -> None: ...

    def window_exists(self, window: WindowHandle) -> bool: ...

    def current_surface(self) -> SurfaceHandle: ...

    def set_current_surface(self, surface: SurfaceHandle) -> None: ...

    def window_for(self, surface: SurfaceHandle) -> WindowHandle | None: ...

    def fix_window_width(self, window: WindowHandle) -> None: ...

    def surface_name(self, surface: SurfaceHandle) -> str: ...

    def line_count(self, surface: SurfaceHandle) -> int: ...

    def get_lines(self, surface: SurfaceHandle, start: int, end: int) -> list[str]:
        """Return lines ``start`` through ``end`` (1-based, inclusive)."""
        ...

    def set_cursor(self, window: WindowHandle, position: Position) -> None: ...

    def get_cursor(self, window: WindowHandle) -> Position: ...

    def context_of(self, surface: SurfaceHandle) -> str: ...

    def place_mark(self, surface: SurfaceHandle, position: Position) -> int: ...

    def get_marks(self, surface: SurfaceHandle) -> list[Mark]: ...

    def delete_mark(self, surface: SurfaceHandle, mark_id: int) -> None: ...

    def restore_view(self, window: WindowHandle, position: Position) -> None: ...

    def hide_surface(self, surface: SurfaceHandle) -> None: ...

    def destroy_surface(self, surface: SurfaceHandle) -> None: ...

    def focus_previous_window(self) -> None: ...

    def schedule(self, delay_seconds: float, callback: Callable[[], None]) -> None: ...

    def report_error(self, message: str) -> None: ...


class ProcessBackend(Protocol):
    def start(self, command: Sequence[str], *, surface: SurfaceHandle) -> ProcessRef: ...

    def write(self, process: ProcessRef, lines: Sequence[str]) -> None: ...

    def stop(self, process: ProcessRef) -> None:
        """Terminate the job; raises ``PROCESS_ERROR`` when it is no longer running."""
        ...

    def is_executable(self, name: str) -> bool: ...
