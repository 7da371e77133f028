"""Launch definition catalog."""

from .models import LaunchDefinition
from .registry import DefinitionTable, LaunchCatalog

__all__ = [
    "DefinitionTable",
    "LaunchCatalog",
    "LaunchDefinition",
]
