from __future__ import annotations

import logging as py_logging
from pathlib import Path

from replnexus import setup
from replnexus.catalog import LaunchDefinition
from replnexus.config import build_config
from replnexus.memory import ContextKeying
from replnexus.process import PtyProcessBackend
from replnexus.visibility import FocusVisibility


def test_setup_loads_config_file_and_merges_definitions(tmp_path: Path, editor, processes) -> None:
    path = tmp_path / "config.toml"
    path.write_text(
        "\n".join(
            [
                'visibility = "focus"',
                'manager = "singleton"',
                "",
                "[definitions.python.bpython]",
                'command = ["bpython"]',
            ]
        ),
        encoding="utf-8",
    )

    commands = setup(
        editor,
        processes,
        config_path=path,
        definitions={"fennel": {"fennel": LaunchDefinition(("fennel",))}},
    )

    manager = commands.manager
    assert isinstance(manager.config.visibility, FocusVisibility)
    assert isinstance(manager.memory.strategy, ContextKeying)
    assert [label for label, _ in manager.catalog.definitions_for("python")] == [
        "ipython",
        "ptpython",
        "python",
        "bpython",
    ]
    assert "fennel" in commands.list_contexts()


def test_setup_prefers_explicit_config_and_defaults_process_backend(tmp_path: Path, editor) -> None:
    config = build_config(preferred={"python": "python"})

    commands = setup(editor, config=config, config_path=tmp_path / "missing.toml", log_level="DEBUG")

    assert commands.manager.config is config
    assert isinstance(commands.manager.processes, PtyProcessBackend)
    assert py_logging.getLogger("replnexus").level == py_logging.DEBUG


def test_setup_sends_through_builtin_catalog(tmp_path: Path, editor, processes) -> None:
    commands = setup(editor, processes, config_path=tmp_path / "missing.toml")

    session = commands.send_line()

    assert session is not None
    assert session.label == "python"
    assert processes.writes == [(session.process, ["print(1)", ""])]


def test_setup_logs_beside_the_config_file_by_default(tmp_path: Path, editor, processes) -> None:
    setup(editor, processes, config_path=tmp_path / "config.toml")

    handlers = py_logging.getLogger("replnexus").handlers
    assert [type(handler) for handler in handlers] == [py_logging.FileHandler]
    assert (tmp_path / "logs" / "replnexus.log").exists()


def test_setup_honours_explicit_log_file(tmp_path: Path, editor, processes) -> None:
    setup(editor, processes, config_path=tmp_path / "config.toml", log_file=tmp_path / "elsewhere.log")

    assert (tmp_path / "elsewhere.log").exists()
    assert not (tmp_path / "logs").exists()
