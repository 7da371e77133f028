from __future__ import annotations

import itertools
from collections.abc import Callable, Sequence
from pathlib import Path

import pytest

from replnexus.catalog import LaunchCatalog, LaunchDefinition
from replnexus.commands import CommandSurface
from replnexus.errors import ErrorCode, ReplNexusError
from replnexus.formatting import passthrough
from replnexus.host import Mark, Position
from replnexus.manager import SessionManager


class FakeEditor:
    """In-memory host: numbered surfaces shown in numbered windows."""

    def __init__(self) -> None:
        self._ids = itertools.count(1)
        self.surfaces: dict[int, dict[str, object]] = {}
        self.windows: dict[int, int | None] = {}
        self.cursors: dict[int, Position] = {}
        self.marks: dict[int, list[Mark]] = {}
        self.fixed_width: set[int] = set()
        self.commands: list[str] = []
        self.destroyed: list[int] = []
        self.errors: list[str] = []
        self.scheduled: list[tuple[float, Callable[[], None]]] = []
        self.previous_window: int | None = None

        source = self.add_surface(["print(1)"], context="python")
        self.current = self._new_window(source)

    # -- test helpers ------------------------------------------------------

    def add_surface(self, lines: list[str], *, context: str = "") -> int:
        surface = next(self._ids)
        self.surfaces[surface] = {"name": f"buffer-{surface}", "lines": list(lines), "context": context}
        return surface

    def _new_window(self, surface: int | None) -> int:
        window = next(self._ids)
        self.windows[window] = surface
        self.cursors[window] = Position(line=1, col=0)
        return window

    def close_externally(self, surface: int) -> None:
        self.surfaces[surface]["name"] = ""
        for window, shown in list(self.windows.items()):
            if shown == surface:
                del self.windows[window]

    def run_scheduled(self) -> None:
        pending, self.scheduled = self.scheduled, []
        for _, callback in pending:
            callback()

    def source_surface(self) -> int:
        return min(self.surfaces)

    # -- EditorSurface -----------------------------------------------------

    def create_scratch_surface(self) -> int:
        return self.add_surface([""])

    def run_command(self, command: str) -> None:
        self.commands.append(command)
        shown = self.windows.get(self.current)
        self.set_current_window(self._new_window(shown))

    def current_window(self) -> int:
        return self.current

    def set_current_window(self, window: int) -> None:
        if window not in self.windows:
            raise KeyError(window)
        if window != self.current:
            self.previous_window = self.current
        self.current = window

    def window_exists(self, window: int) -> bool:
        return window in self.windows

    def current_surface(self) -> int:
        return self.windows[self.current]

    def set_current_surface(self, surface: int) -> None:
        self.windows[self.current] = surface

    def window_for(self, surface: int) -> int | None:
        for window, shown in self.windows.items():
            if shown == surface:
                return window
        return None

    def fix_window_width(self, window: int) -> None:
        self.fixed_width.add(window)

    def surface_name(self, surface: int) -> str:
        payload = self.surfaces.get(surface)
        return str(payload["name"]) if payload else ""

    def line_count(self, surface: int) -> int:
        return len(self.surfaces[surface]["lines"])

    def get_lines(self, surface: int, start: int, end: int) -> list[str]:
        lines = self.surfaces[surface]["lines"]
        return list(lines[start - 1 : end])

    def set_cursor(self, window: int, position: Position) -> None:
        self.cursors[window] = position

    def get_cursor(self, window: int) -> Position:
        return self.cursors[window]

    def context_of(self, surface: int) -> str:
        return str(self.surfaces[surface]["context"])

    def place_mark(self, surface: int, position: Position) -> int:
        mark_id = next(self._ids)
        self.marks.setdefault(surface, []).append(Mark(mark_id=mark_id, position=position))
        return mark_id

    def get_marks(self, surface: int) -> list[Mark]:
        return list(self.marks.get(surface, []))

    def delete_mark(self, surface: int, mark_id: int) -> None:
        self.marks[surface] = [mark for mark in self.marks.get(surface, []) if mark.mark_id != mark_id]

    def restore_view(self, window: int, position: Position) -> None:
        self.cursors[window] = position

    def hide_surface(self, surface: int) -> None:
        for window, shown in list(self.windows.items()):
            if shown == surface and window != self.current:
                del self.windows[window]
            elif shown == surface:
                self.windows[window] = None

    def destroy_surface(self, surface: int) -> None:
        self.destroyed.append(surface)
        self.close_externally(surface)

    def focus_previous_window(self) -> None:
        if self.previous_window is not None and self.previous_window in self.windows:
            self.set_current_window(self.previous_window)

    def schedule(self, delay_seconds: float, callback: Callable[[], None]) -> None:
        self.scheduled.append((delay_seconds, callback))

    def report_error(self, message: str) -> None:
        self.errors.append(message)


class FakeProcesses:
    def __init__(self, available: set[str] | None = None) -> None:
        self.available = set(available or set())
        self.started: list[tuple[tuple[str, ...], int]] = []
        self.writes: list[tuple[int, list[str]]] = []
        self.checked: list[str] = []
        self.stopped: list[int] = []
        self.running: set[int] = set()
        self._jobs = itertools.count(100)

    def start(self, command: Sequence[str], *, surface: int) -> int:
        self.started.append((tuple(command), surface))
        job = next(self._jobs)
        self.running.add(job)
        return job

    def write(self, process: int, lines: Sequence[str]) -> None:
        self.writes.append((process, list(lines)))

    def stop(self, process: int) -> None:
        if process not in self.running:
            raise ReplNexusError(f"REPL job not running: {process}", code=ErrorCode.PROCESS_ERROR)
        self.running.discard(process)
        self.stopped.append(process)

    def is_executable(self, name: str) -> bool:
        self.checked.append(name)
        return name in self.available


@pytest.fixture
def editor() -> FakeEditor:
    return FakeEditor()


@pytest.fixture
def processes() -> FakeProcesses:
    return FakeProcesses(available={"python3", "bash"})


@pytest.fixture
def catalog() -> LaunchCatalog:
    return LaunchCatalog(
        {
            "python": {
                "ipython": LaunchDefinition(("ipython",), passthrough),
                "python": LaunchDefinition(("python3",), passthrough),
            },
            "sh": {"bash": LaunchDefinition(("bash",), passthrough)},
        }
    )


@pytest.fixture
def manager(editor: FakeEditor, processes: FakeProcesses, catalog: LaunchCatalog) -> SessionManager:
    return SessionManager(editor=editor, processes=processes, catalog=catalog)


@pytest.fixture
def commands(manager: SessionManager) -> CommandSurface:
    return CommandSurface(manager)


@pytest.hookimpl(trylast=True)
def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    del config
    for item in items:
        path = Path(str(getattr(item, "path", item.fspath)))
        if "property" in path.parts:
            item.add_marker(pytest.mark.property)
