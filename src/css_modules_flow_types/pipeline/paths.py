"""Pure path helpers tying sources to their declaration artifacts."""

from __future__ import annotations

import os
from pathlib import Path

from css_modules_flow_types.config import DEFAULT_DECLARATION_SUFFIX


def declaration_path_for(source: Path, suffix: str = DEFAULT_DECLARATION_SUFFIX) -> Path:
    """Return the artifact path that sits next to ``source``."""
    return Path(f"{source}{suffix}")


def source_path_for(artifact: Path, suffix: str = DEFAULT_DECLARATION_SUFFIX) -> Path | None:
    """Strip the declaration suffix from the end of an artifact path."""
    text = str(artifact)
    if not text.endswith(suffix) or len(text) == len(suffix):
        return None
    return Path(text[: -len(suffix)])


def display_path(path: Path, cwd: Path) -> str:
    """Format a path relative to cwd, prefixed with ./ unless it leaves cwd."""
    try:
        relative = os.path.relpath(path, cwd)
    except ValueError:
        return str(path)
    relative = relative.replace(os.sep, "/")
    if relative.startswith("../") or relative == "..":
        return relative
    return f"./{relative}"
