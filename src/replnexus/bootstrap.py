"""Wire a host editor to a ready-to-use command surface."""

from __future__ import annotations

import logging as py_logging
from pathlib import Path

from replnexus.catalog import DefinitionTable, LaunchCatalog
from replnexus.commands import CommandSurface
from replnexus.config import ReplConfig, get_config_path, load_config, load_definitions
from replnexus.host import EditorSurface, ProcessBackend
from replnexus.logging import configure_logging, default_log_path
from replnexus.manager import SessionManager
from replnexus.memory import MemoryStore

logger = py_logging.getLogger(__name__)


def setup(
    editor: EditorSurface,
    processes: ProcessBackend | None = None,
    *,
    config: ReplConfig | None = None,
    config_path: str | Path | None = None,
    definitions: DefinitionTable | None = None,
    log_level: str = "INFO",
    log_file: str | Path | None = None,
) -> CommandSurface:
    configure_logging(log_level, log_file=log_file or default_log_path(get_config_path(config_path)))

    resolved_config = config if config is not None else load_config(config_path)
    catalog = LaunchCatalog.with_defaults()
    file_definitions = load_definitions(config_path)
    if file_definitions:
        catalog.merge(file_definitions)
    if definitions:
        catalog.merge(definitions)

    if processes is None:
        from replnexus.process import PtyProcessBackend

        processes = PtyProcessBackend()

    manager = SessionManager(
        editor=editor,
        processes=processes,
        catalog=catalog,
        config=resolved_config,
        memory=MemoryStore(resolved_config.manager),
    )
    logger.debug(
        "replnexus ready config=%s contexts=%s",
        get_config_path(config_path),
        len(catalog.contexts()),
    )
    return CommandSurface(manager)
