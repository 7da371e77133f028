"""Built-in launch definitions, in probing order per context."""

from __future__ import annotations

from replnexus.catalog.models import LaunchDefinition
from replnexus.formatting import bracketed_paste, python_block, submit

DEFAULT_DEFINITIONS: dict[str, dict[str, LaunchDefinition]] = {
    "python": {
        "ipython": LaunchDefinition(("ipython", "--no-autoindent"), bracketed_paste),
        "ptpython": LaunchDefinition(("ptpython",), bracketed_paste),
        "python": LaunchDefinition(("python3",), python_block),
    },
    "sh": {
        "bash": LaunchDefinition(("bash",), submit),
        "zsh": LaunchDefinition(("zsh",), submit),
        "sh": LaunchDefinition(("sh",), submit),
    },
    "lua": {
        "lua": LaunchDefinition(("lua",), submit),
    },
    "r": {
        "R": LaunchDefinition(("R",), submit),
        "radian": LaunchDefinition(("radian",), bracketed_paste),
    },
    "julia": {
        "julia": LaunchDefinition(("julia",), bracketed_paste),
    },
    "javascript": {
        "node": LaunchDefinition(("node",), submit),
    },
    "ruby": {
        "irb": LaunchDefinition(("irb",), submit),
    },
    "haskell": {
        "ghci": LaunchDefinition(("ghci",), submit),
        "stack": LaunchDefinition(("stack", "ghci"), submit),
    },
    "elixir": {
        "iex": LaunchDefinition(("iex",), submit),
    },
    "scheme": {
        "guile": LaunchDefinition(("guile",), submit),
    },
}
