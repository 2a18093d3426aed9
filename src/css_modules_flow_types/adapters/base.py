"""Collaborator protocols for compiling stylesheets and emitting declarations."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol


class AdapterError(Exception):
    """Raised when a compiler or converter rejects its input.

    The message is the collaborator's own diagnostic and is shown to the
    operator verbatim.
    """


class StylesheetCompiler(Protocol):
    """Renders one stylesheet source file into plain CSS text."""

    name: str

    def render(self, source_path: Path) -> str:
        """Return the rendered CSS for an absolute source path."""
        ...


class DeclarationConverter(Protocol):
    """Turns a plain CSS file into a type-declaration document."""

    name: str

    def convert(self, css_path: Path) -> str:
        """Return declaration text for the CSS stored at ``css_path``."""
        ...
