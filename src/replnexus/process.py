"""PTY-backed interactive process lifecycle for REPL sessions."""

from __future__ import annotations

import atexit
import itertools
import logging as py_logging
import shutil
import subprocess
import sys
from collections.abc import Callable, Sequence
from contextlib import suppress
from dataclasses import dataclass

from replnexus.errors import ErrorCode, ReplNexusError
from replnexus.host import SurfaceHandle

logger = py_logging.getLogger(__name__)


@dataclass(frozen=True)
class ProcessHandle:
    job_id: int
    command: tuple[str, ...]


PtySpawn = Callable[[list[str], str | None, dict[str, str] | None], object]


def _spawn_with_pty(command: list[str], cwd: str | None, env: dict[str, str] | None) -> object:
    kwargs: dict[str, object] = {}
    if cwd:
        kwargs["cwd"] = cwd
    if env:
        kwargs["env"] = env

    if sys.platform == "win32":
        try:
            from winpty import PtyProcess
        except Exception as exc:
            raise ReplNexusError(
                "pywinpty backend is unavailable.",
                code=ErrorCode.PROCESS_ERROR,
                hint="Install pywinpty to run REPLs on Windows.",
            ) from exc
        return PtyProcess.spawn(subprocess.list2cmdline(command), **kwargs)

    try:
        from ptyprocess import PtyProcessUnicode
    except Exception as exc:
        raise ReplNexusError(
            "ptyprocess backend is unavailable.",
            code=ErrorCode.PROCESS_ERROR,
            hint="Install ptyprocess to run REPLs.",
        ) from exc
    return PtyProcessUnicode.spawn(command, **kwargs)


class PtyProcessBackend:
    def __init__(
        self,
        spawn: PtySpawn | None = None,
        *,
        which: Callable[[str], str | None] = shutil.which,
    ) -> None:
        self._spawn = spawn or _spawn_with_pty
        self._which = which
        self._job_ids = itertools.count(1)
        self._sessions: dict[int, object] = {}
        atexit.register(self.stop_all)

    def is_executable(self, name: str) -> bool:
        return bool(name.strip()) and self._which(name) is not None

    def start(
        self,
        command: Sequence[str],
        *,
        surface: SurfaceHandle = None,
        cwd: str | None = None,
        env: dict[str, str] | None = None,
    ) -> ProcessHandle:
        resolved_command = [str(part) for part in command]
        if not resolved_command:
            raise ReplNexusError(
                "REPL command cannot be empty.",
                code=ErrorCode.PROCESS_ERROR,
                hint="Provide an argv for the launch definition.",
            )

        try:
            process = self._spawn(resolved_command, cwd, env)
        except ReplNexusError:
            raise
        except Exception as exc:
            raise ReplNexusError(
                f"Failed to start REPL process {resolved_command[0]}.",
                code=ErrorCode.PROCESS_ERROR,
                hint=str(exc) or "Check the REPL executable installation.",
            ) from exc

        handle = ProcessHandle(
            job_id=next(self._job_ids),
            command=tuple(resolved_command),
        )
        self._sessions[handle.job_id] = process
        logger.info("REPL job started job=%s command=%s surface=%s", handle.job_id, resolved_command[0], surface)
        return handle

    def write(self, process: ProcessHandle, lines: Sequence[str]) -> None:
        session = self._require_session(process)
        payload = "\n".join(lines)
        try:
            session.write(payload)
        except Exception as exc:
            raise ReplNexusError(
                f"Failed to write to REPL job {process.job_id}.",
                code=ErrorCode.PROCESS_ERROR,
                hint=str(exc) or "Verify the REPL process is still running.",
            ) from exc

    def stop(self, process: ProcessHandle) -> None:
        session = self._sessions.pop(process.job_id, None)
        if session is None:
            raise ReplNexusError(
                f"REPL job not running: {process.job_id}",
                code=ErrorCode.PROCESS_ERROR,
                hint="Select an active REPL session.",
            )
        self._close_session(session)
        logger.info("REPL job stopped job=%s", process.job_id)

    def stop_all(self) -> None:
        for job_id in list(self._sessions):
            session = self._sessions.pop(job_id, None)
            if session is None:
                continue
            self._close_session(session)

    def _require_session(self, process: ProcessHandle) -> object:
        session = self._sessions.get(process.job_id)
        if session is None:
            raise ReplNexusError(
                f"REPL job not running: {process.job_id}",
                code=ErrorCode.PROCESS_ERROR,
                hint="Start the REPL before writing to it.",
            )
        return session

    def _close_session(self, session: object) -> None:
        alive = _is_alive(session)
        if hasattr(session, "close"):
            try:
                session.close()
            except TypeError:
                session.close(True)
            except Exception:
                pass
        if alive and _is_alive(session):
            if hasattr(session, "terminate"):
                with suppress(Exception):
                    session.terminate()
            elif hasattr(session, "kill"):
                with suppress(Exception):
                    session.kill()


def _is_alive(session: object) -> bool:
    if hasattr(session, "isalive"):
        try:
            return bool(session.isalive())
        except Exception:
            return True
    return True
