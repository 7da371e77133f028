"""Session memory: which live REPL belongs to which context key."""

from __future__ import annotations

import os
from collections.abc import Callable, Hashable
from dataclasses import dataclass, field
from typing import Protocol

from replnexus.catalog.models import LaunchDefinition
from replnexus.host import ProcessRef, SurfaceHandle, WindowHandle


@dataclass(eq=False)
class ReplSession:
    context: str
    surface: SurfaceHandle
    process: ProcessRef
    definition: LaunchDefinition
    window: WindowHandle | None = None
    label: str = ""


class KeyStrategy(Protocol):
    name: str

    def key_for(self, context: str) -> Hashable: ...


class ContextKeying:
    """One session per context, regardless of where the editor is."""

    name = "singleton"

    def key_for(self, context: str) -> Hashable:
        return context


@dataclass
class ScopedKeying:
    """One session per (context, scope) pair; scope defaults to the working directory."""

    scope: Callable[[], Hashable] = field(default=os.getcwd)
    name: str = field(default="path_based", init=False)

    def key_for(self, context: str) -> Hashable:
        return (context, self.scope())


KEY_STRATEGIES: dict[str, Callable[[], KeyStrategy]] = {
    ContextKeying.name: ContextKeying,
    "path_based": ScopedKeying,
}


class MemoryStore:
    def __init__(self, strategy: KeyStrategy | None = None) -> None:
        self.strategy: KeyStrategy = strategy or ScopedKeying()
        self._entries: dict[Hashable, ReplSession] = {}

    def get(self, context: str) -> ReplSession | None:
        return self._entries.get(self.strategy.key_for(context))

    def set(self, context: str, session: ReplSession) -> ReplSession:
        self._entries[self.strategy.key_for(context)] = session
        return session

    def discard(self, context: str) -> ReplSession | None:
        return self._entries.pop(self.strategy.key_for(context), None)

    def rekey(
        self,
        strategy: KeyStrategy,
        keep: Callable[[ReplSession], bool] = lambda session: True,
    ) -> list[ReplSession]:
        """Re-file every entry under ``strategy`` and return the entries that no longer fit.

        An entry is displaced when ``keep`` rejects it or when an earlier entry
        already holds its new key.
        """
        entries, self._entries = list(self._entries.values()), {}
        self.strategy = strategy
        displaced: list[ReplSession] = []
        for session in entries:
            key = strategy.key_for(session.context)
            if key in self._entries or not keep(session):
                displaced.append(session)
            else:
                self._entries[key] = session
        return displaced

    def session_for_surface(self, surface: SurfaceHandle) -> ReplSession | None:
        for session in self._entries.values():
            if session.surface == surface:
                return session
        return None

    def context_for_surface(self, surface: SurfaceHandle) -> str | None:
        session = self.session_for_surface(surface)
        return session.context if session is not None else None
