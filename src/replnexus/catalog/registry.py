"""Per-context registry of labelled launch definitions."""

from __future__ import annotations

import logging as py_logging
from collections.abc import Mapping

from replnexus.catalog.models import LaunchDefinition
from replnexus.errors import ErrorCode, ReplNexusError

logger = py_logging.getLogger(__name__)

DefinitionTable = Mapping[str, Mapping[str, LaunchDefinition]]


class LaunchCatalog:
    def __init__(self, definitions: DefinitionTable | None = None) -> None:
        self._definitions: dict[str, dict[str, LaunchDefinition]] = {}
        if definitions:
            self.merge(definitions)

    @classmethod
    def with_defaults(cls) -> LaunchCatalog:
        from replnexus.catalog.builtin import DEFAULT_DEFINITIONS

        return cls(DEFAULT_DEFINITIONS)

    def merge(self, definitions: DefinitionTable) -> None:
        """Add or overwrite labelled definitions; existing labels keep their position."""
        for context, labelled in definitions.items():
            bucket = self._definitions.setdefault(context, {})
            for label, definition in labelled.items():
                if not isinstance(definition, LaunchDefinition):
                    raise TypeError(f"Definition {context}/{label} is not a LaunchDefinition")
                bucket[label] = definition
            logger.debug("catalog merge context=%s labels=%s", context, list(labelled))

    def contexts(self) -> set[str]:
        return {context for context, labelled in self._definitions.items() if labelled}

    def has_context(self, context: str) -> bool:
        return bool(self._definitions.get(context))

    def definitions_for(self, context: str) -> list[tuple[str, LaunchDefinition]]:
        labelled = self._definitions.get(context)
        if not labelled:
            raise ReplNexusError(
                f"There's no REPL definition for context '{context}'",
                code=ErrorCode.UNKNOWN_CONTEXT,
                hint="Register a launch definition for this context.",
            )
        return list(labelled.items())
