"""Policies deciding how a REPL surface is shown or hidden."""

from __future__ import annotations

from collections.abc import Callable
from typing import Protocol

from replnexus.host import SurfaceHandle, WindowHandle

ShowFn = Callable[[], WindowHandle]


class SurfaceView(Protocol):
    def window_for(self, surface: SurfaceHandle) -> WindowHandle | None: ...

    def hide_surface(self, surface: SurfaceHandle) -> None: ...


class VisibilityPolicy(Protocol):
    name: str

    def apply(self, surface: SurfaceHandle, show_fn: ShowFn, view: SurfaceView) -> WindowHandle | None: ...


class ToggleVisibility:
    name = "toggle"

    def apply(self, surface: SurfaceHandle, show_fn: ShowFn, view: SurfaceView) -> WindowHandle | None:
        if view.window_for(surface) is None:
            return show_fn()
        view.hide_surface(surface)
        return None


class FocusVisibility:
    """Always show the surface; ``show_fn`` is expected to focus the window it returns."""

    name = "focus"

    def apply(self, surface: SurfaceHandle, show_fn: ShowFn, view: SurfaceView) -> WindowHandle | None:
        del surface, view
        return show_fn()


POLICIES: dict[str, Callable[[], VisibilityPolicy]] = {
    ToggleVisibility.name: ToggleVisibility,
    FocusVisibility.name: FocusVisibility,
}
