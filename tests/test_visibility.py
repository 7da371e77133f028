from __future__ import annotations

from replnexus.visibility import POLICIES, FocusVisibility, ToggleVisibility


class _View:
    def __init__(self, shown: dict[str, str]) -> None:
        self.shown = shown
        self.hidden: list[str] = []

    def window_for(self, surface: str) -> str | None:
        return self.shown.get(surface)

    def hide_surface(self, surface: str) -> None:
        self.hidden.append(surface)
        self.shown.pop(surface, None)


def test_toggle_shows_hidden_surface() -> None:
    view = _View({})
    calls: list[str] = []

    def show() -> str:
        calls.append("show")
        view.shown["repl"] = "win-1"
        return "win-1"

    assert ToggleVisibility().apply("repl", show, view) == "win-1"
    assert calls == ["show"]


def test_toggle_hides_visible_surface_without_showing() -> None:
    view = _View({"repl": "win-1"})

    assert ToggleVisibility().apply("repl", lambda: "unexpected", view) is None
    assert view.hidden == ["repl"]


def test_toggle_twice_restores_original_visibility() -> None:
    view = _View({"repl": "win-1"})
    policy = ToggleVisibility()

    def show() -> str:
        view.shown["repl"] = "win-2"
        return "win-2"

    policy.apply("repl", show, view)
    policy.apply("repl", show, view)

    assert view.window_for("repl") is not None


def test_focus_always_invokes_show() -> None:
    view = _View({"repl": "win-1"})
    calls: list[str] = []

    def show() -> str:
        calls.append("show")
        return "win-1"

    policy = FocusVisibility()
    policy.apply("repl", show, view)
    policy.apply("repl", show, view)

    assert calls == ["show", "show"]
    assert view.hidden == []


def test_policy_registry() -> None:
    assert isinstance(POLICIES["toggle"](), ToggleVisibility)
    assert isinstance(POLICIES["focus"](), FocusVisibility)
