"""REPL session lifecycle and routing.

The manager owns the context -> session memory and is the only component that
writes to a REPL's input stream. Liveness is re-checked lazily: a session whose
surface no longer resolves on the host is treated as absent and replaced on the
next access.
"""

from __future__ import annotations

import logging as py_logging
import threading
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from replnexus.catalog import LaunchCatalog, LaunchDefinition
from replnexus.config import ReplConfig, build_config
from replnexus.errors import ErrorCode, ReplNexusError
from replnexus.formatting import format_lines
from replnexus.host import EditorSurface, Position, ProcessBackend, SurfaceHandle, WindowHandle
from replnexus.memory import KeyStrategy, MemoryStore, ReplSession
from replnexus.visibility import FocusVisibility

logger = py_logging.getLogger(__name__)

FOCUS_RESTORE_DELAY_SECONDS = 0.01

Creator = Callable[[str], ReplSession]


@dataclass(frozen=True)
class SessionEvent:
    context: str
    step: str
    message: str


class SessionManager:
    def __init__(
        self,
        *,
        editor: EditorSurface,
        processes: ProcessBackend,
        catalog: LaunchCatalog,
        config: ReplConfig | None = None,
        memory: MemoryStore | None = None,
    ) -> None:
        self.editor = editor
        self.processes = processes
        self.catalog = catalog
        self.config = config or build_config()
        self.memory = memory or MemoryStore(self.config.manager)
        self._lock = threading.RLock()
        self._events: list[SessionEvent] = []
        self._adopt_strategy(self.config.manager)

    def configure(self, config: ReplConfig | None = None, **fields: object) -> ReplConfig:
        if config is not None and fields:
            raise ReplNexusError(
                "Cannot combine a config object with field overrides",
                code=ErrorCode.CONFIG_ERROR,
                hint="Pass either a ReplConfig or keyword fields.",
            )
        resolved = config if config is not None else build_config(**fields)
        with self._lock:
            self.config = resolved
            self._adopt_strategy(resolved.manager)
        logger.info(
            "Configuration replaced visibility=%s manager=%s preferred=%s",
            getattr(resolved.visibility, "name", type(resolved.visibility).__name__),
            getattr(resolved.manager, "name", type(resolved.manager).__name__),
            sorted(resolved.preferred),
        )
        return resolved

    def list_events(self) -> list[SessionEvent]:
        return list(self._events)

    def clear_events(self) -> None:
        self._events.clear()

    # -- selection ---------------------------------------------------------

    def select_definition(self, context: str) -> tuple[str, LaunchDefinition]:
        definitions = self.catalog.definitions_for(context)
        preference = self.config.preferred.get(context)

        if preference is not None:
            for label, definition in definitions:
                if label == preference:
                    return label, definition
            raise ReplNexusError(
                f"Preferred REPL '{preference}' is not defined for context '{context}'",
                code=ErrorCode.NO_REPL_AVAILABLE,
                hint="Register the preferred definition or change the preference.",
            )

        for label, definition in definitions:
            if self.processes.is_executable(definition.executable):
                return label, definition
            logger.debug("REPL executable not found context=%s label=%s", context, label)

        raise ReplNexusError(
            f"Failed to locate a REPL executable for context '{context}'",
            code=ErrorCode.NO_REPL_AVAILABLE,
            hint="Install one of: " + ", ".join(defn.executable for _, defn in definitions),
        )

    # -- lifecycle ---------------------------------------------------------

    def is_live(self, session: ReplSession | None) -> bool:
        return session is not None and self.editor.surface_name(session.surface) != ""

    def get_live(self, context: str) -> ReplSession | None:
        with self._lock:
            session = self.memory.get(context)
            return session if self.is_live(session) else None

    def context_for_surface(self, surface: SurfaceHandle) -> str | None:
        with self._lock:
            return self.memory.context_for_surface(surface)

    def open_window(self, surface: SurfaceHandle) -> WindowHandle:
        directive = self.config.repl_open_cmd
        if callable(directive):
            return directive(surface)

        self.editor.run_command(directive)
        self.editor.set_current_surface(surface)
        window = self.editor.window_for(surface)
        if window is None:
            window = self.editor.current_window()
        self.editor.fix_window_width(window)
        return window

    def show(self, session: ReplSession) -> WindowHandle:
        window = self.editor.window_for(session.surface)
        if window is None:
            window = self.open_window(session.surface)
        self.editor.set_current_window(window)
        session.window = window
        return window

    def create_new(
        self,
        context: str,
        definition: LaunchDefinition,
        *,
        open_new_window: bool = True,
        window: WindowHandle | None = None,
        label: str = "",
    ) -> ReplSession:
        with self._lock:
            previous_window = self.editor.current_window()
            surface = self.editor.create_scratch_surface()

            if window is None:
                if open_new_window:
                    window = self.open_window(surface)
                else:
                    existing = self.memory.get(context)
                    window = existing.window if existing and existing.window is not None else previous_window

            self.editor.set_current_window(window)
            self.editor.set_current_surface(surface)
            process = self.processes.start(definition.command, surface=surface)
            session = ReplSession(
                context=context,
                surface=surface,
                process=process,
                definition=definition,
                window=window,
                label=label,
            )
            self.editor.schedule(FOCUS_RESTORE_DELAY_SECONDS, self._focus_restorer(previous_window))
            self._record(context, "create", f"Started '{' '.join(definition.command)}'.")
            return self.memory.set(context, session)

    def create_preferred(
        self,
        context: str,
        *,
        open_new_window: bool = True,
        window: WindowHandle | None = None,
    ) -> ReplSession:
        with self._lock:
            label, definition = self.select_definition(context)
            return self.create_new(
                context,
                definition,
                open_new_window=open_new_window,
                window=window,
                label=label,
            )

    def ensure_exists(self, context: str, creator: Creator | None = None) -> tuple[ReplSession, bool]:
        with self._lock:
            session = self.memory.get(context)
            if self.is_live(session):
                return session, False
            if session is not None:
                self._record(context, "stale", "Session surface was closed; replacing it.")
                self._retire(session)
                self.memory.discard(context)
            created = (creator or self.create_preferred)(context)
            return self.memory.set(context, created), True

    # -- sending -----------------------------------------------------------

    def send(self, context: str, data: str | Sequence[str]) -> ReplSession:
        with self._lock:
            session, _ = self.ensure_exists(context)
            lines = data.split("\n") if isinstance(data, str) else list(data)
            payload = format_lines(session.definition, lines)

            window = self.editor.window_for(session.surface)
            if window is not None:
                last_line = self.editor.line_count(session.surface)
                self.editor.set_cursor(window, Position(line=max(last_line, 1), col=0))

            self.processes.write(session.process, payload)
            logger.debug("Sent %s line(s) to context=%s", len(payload), context)
            return session

    # -- surface-level operations -----------------------------------------

    def repl_here(self, context: str, window: WindowHandle) -> ReplSession:
        with self._lock:
            session = self.get_live(context)
            if session is not None:
                self.editor.set_current_surface(session.surface)
                session.window = window
                return session
            return self.create_preferred(context, open_new_window=False, window=window)

    def repl_for(self, context: str) -> ReplSession:
        with self._lock:
            session, created = self.ensure_exists(context)
            if created:
                self.editor.focus_previous_window()
                return session

            self.config.visibility.apply(session.surface, lambda: self.show(session), self.editor)
            return session

    def focus_on(self, context: str) -> ReplSession:
        with self._lock:
            session, _ = self.ensure_exists(context)
            FocusVisibility().apply(session.surface, lambda: self.show(session), self.editor)
            return session

    def restart(self, surface: SurfaceHandle) -> ReplSession:
        with self._lock:
            here = self.memory.session_for_surface(surface)
            if here is not None:
                window = self.editor.window_for(surface)
                if window is None:
                    window = self.editor.current_window()
                session = self.create_preferred(here.context, window=window)
                self._retire(here)
                self._record(here.context, "restart", "Replaced REPL in place.")
                return session

            context = self.editor.context_of(surface)
            old = self.get_live(context) if context else None
            if old is None:
                raise ReplNexusError(
                    "No repl found in current buffer; cannot restart",
                    code=ErrorCode.NO_SESSION_TO_RESTART,
                    hint="Open a REPL for this context first.",
                )
            self._retire(old)
            self.memory.discard(context)
            session, _ = self.ensure_exists(context)
            self.editor.focus_previous_window()
            self._record(context, "restart", "Wiped old REPL and started a new one.")
            return session

    def _retire(self, session: ReplSession) -> None:
        """Close a session's surface if still open and stop its process."""
        if self.is_live(session):
            self.editor.destroy_surface(session.surface)
        try:
            self.processes.stop(session.process)
        except ReplNexusError as exc:
            if exc.code != ErrorCode.PROCESS_ERROR:
                raise
            logger.debug("REPL job already gone context=%s: %s", session.context, exc.message)

    def _adopt_strategy(self, strategy: KeyStrategy) -> None:
        # Same keying kind: stored keys keep their meaning.
        if type(strategy) is type(self.memory.strategy):
            self.memory.strategy = strategy
            return
        for session in self.memory.rekey(strategy, keep=self.is_live):
            self._retire(session)
            self._record(session.context, "rekey", "Dropped session displaced by the new keying.")

    def _focus_restorer(self, window: WindowHandle) -> Callable[[], None]:
        def restore() -> None:
            if not self.editor.window_exists(window):
                logger.debug("Skipping focus restore; window %s is gone", window)
                return
            self.editor.set_current_window(window)

        return restore

    def _record(self, context: str, step: str, message: str) -> None:
        self._events.append(SessionEvent(context=context, step=step, message=message))
        logger.info("session-event context=%s step=%s message=%s", context, step, message)
