"""Session manager configuration and XDG config loading."""

from __future__ import annotations

import logging as py_logging
import sys
from collections.abc import Callable, Hashable, Mapping
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from typing_extensions import TypedDict

if sys.version_info >= (3, 11):
    import tomllib
else:  # pragma: no cover
    import tomli as tomllib

from replnexus.catalog.models import LaunchDefinition
from replnexus.errors import ErrorCode, ReplNexusError
from replnexus.formatting import FORMATTERS
from replnexus.memory import KEY_STRATEGIES, ScopedKeying
from replnexus.visibility import POLICIES, ToggleVisibility

logger = py_logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("~/.config/replnexus/config.toml").expanduser()
DEFAULT_OPEN_CMD = "topleft vertical 100 split"
DEFAULT_FORMAT = "submit"

OpenDirective = str | Callable[[Hashable], Hashable]


class DefinitionEntry(TypedDict):
    command: list[str]
    format: str


class ReplConfig(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True, validate_assignment=True, extra="forbid")

    visibility: Any = Field(default_factory=ToggleVisibility)
    manager: Any = Field(default_factory=ScopedKeying)
    preferred: dict[str, str] = Field(default_factory=dict)
    repl_open_cmd: OpenDirective = DEFAULT_OPEN_CMD

    @field_validator("visibility", mode="before")
    @classmethod
    def _resolve_visibility(cls, value: object) -> object:
        if isinstance(value, str):
            factory = POLICIES.get(value.strip().lower())
            if factory is None:
                raise ValueError(f"Unknown visibility policy: {value}")
            return factory()
        if not callable(getattr(value, "apply", None)):
            raise ValueError("Visibility policy must provide apply(surface, show_fn, view)")
        return value

    @field_validator("manager", mode="before")
    @classmethod
    def _resolve_manager(cls, value: object) -> object:
        if isinstance(value, str):
            factory = KEY_STRATEGIES.get(value.strip().lower())
            if factory is None:
                raise ValueError(f"Unknown memory manager: {value}")
            return factory()
        if not callable(getattr(value, "key_for", None)):
            raise ValueError("Memory manager must provide key_for(context)")
        return value

    @field_validator("repl_open_cmd")
    @classmethod
    def _validate_open_cmd(cls, value: OpenDirective) -> OpenDirective:
        if isinstance(value, str) and not value.strip():
            raise ValueError("repl_open_cmd cannot be empty")
        return value


def build_config(overrides: Mapping[str, object] | None = None, **fields: object) -> ReplConfig:
    """Rebuild the configuration from defaults, overlaying the given fields."""
    merged = {**dict(overrides or {}), **fields}
    try:
        return ReplConfig(**merged)
    except ValidationError as exc:
        raise ReplNexusError(
            "Invalid REPL configuration",
            code=ErrorCode.CONFIG_ERROR,
            hint=str(exc).splitlines()[0] if str(exc) else "Check configuration values.",
        ) from exc


def get_config_path(path: str | Path | None = None) -> Path:
    if path is None:
        return DEFAULT_CONFIG_PATH
    return Path(path).expanduser()


def _read_toml(path: str | Path | None) -> dict[str, object]:
    resolved = get_config_path(path)
    if not resolved.exists():
        return {}
    try:
        with resolved.open("rb") as handle:
            raw = tomllib.load(handle)
    except (tomllib.TOMLDecodeError, OSError):
        logger.warning("Ignoring unreadable config file path=%s", resolved, exc_info=True)
        return {}
    if not isinstance(raw, dict):
        return {}
    return raw


def _normalize_preferred(value: object) -> dict[str, str]:
    if not isinstance(value, dict):
        return {}
    normalized: dict[str, str] = {}
    for context, label in value.items():
        if not isinstance(context, str) or not isinstance(label, str):
            continue
        if context.strip() and label.strip():
            normalized[context.strip()] = label.strip()
    return normalized


def _sanitize(raw: dict[str, object]) -> ReplConfig:
    cfg = ReplConfig()

    visibility = raw.get("visibility")
    if isinstance(visibility, str) and visibility.strip().lower() in POLICIES:
        cfg.visibility = visibility

    manager = raw.get("manager")
    if isinstance(manager, str) and manager.strip().lower() in KEY_STRATEGIES:
        cfg.manager = manager

    repl_open_cmd = raw.get("repl_open_cmd")
    if isinstance(repl_open_cmd, str) and repl_open_cmd.strip():
        cfg.repl_open_cmd = repl_open_cmd

    cfg.preferred = _normalize_preferred(raw.get("preferred", {}))
    return cfg


def load_config(path: str | Path | None = None) -> ReplConfig:
    raw = _read_toml(path)
    if not raw:
        return ReplConfig()
    return _sanitize(raw)


def _normalize_definitions(value: object) -> dict[str, dict[str, DefinitionEntry]]:
    if not isinstance(value, dict):
        return {}
    normalized: dict[str, dict[str, DefinitionEntry]] = {}
    for context, labelled in value.items():
        if not isinstance(context, str) or not isinstance(labelled, dict):
            continue
        entries: dict[str, DefinitionEntry] = {}
        for label, payload in labelled.items():
            if not isinstance(label, str) or not isinstance(payload, dict):
                continue
            command = payload.get("command")
            if isinstance(command, str):
                command = [command]
            if not isinstance(command, list) or not command:
                continue
            if not all(isinstance(part, str) for part in command) or not command[0].strip():
                continue
            fmt = payload.get("format", DEFAULT_FORMAT)
            if not isinstance(fmt, str) or fmt not in FORMATTERS:
                logger.debug("Unknown formatter for %s/%s; using %s", context, label, DEFAULT_FORMAT)
                fmt = DEFAULT_FORMAT
            entries[label] = DefinitionEntry(command=list(command), format=fmt)
        if entries:
            normalized[context] = entries
    return normalized


def load_definitions(path: str | Path | None = None) -> dict[str, dict[str, LaunchDefinition]]:
    raw = _read_toml(path)
    definitions: dict[str, dict[str, LaunchDefinition]] = {}
    for context, entries in _normalize_definitions(raw.get("definitions", {})).items():
        definitions[context] = {
            label: LaunchDefinition(tuple(entry["command"]), FORMATTERS[entry["format"]])
            for label, entry in entries.items()
        }
    return definitions
