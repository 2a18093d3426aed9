"""libsass-backed stylesheet compiler."""

from __future__ import annotations

from pathlib import Path

import sass

from css_modules_flow_types.adapters.base import AdapterError


class SassCompiler:
    """Render .css, .scss and .sass sources through libsass."""

    name = "libsass"

    def __init__(
        self,
        include_paths: tuple[Path, ...] = (),
        output_style: str = "nested",
    ) -> None:
        self._include_paths = tuple(str(path) for path in include_paths)
        self._output_style = output_style

    def render(self, source_path: Path) -> str:
        """Compile one file, surfacing compiler diagnostics as AdapterError."""
        if not source_path.is_file():
            raise FileNotFoundError(f"Missing stylesheet: {source_path}")
        try:
            return sass.compile(
                filename=str(source_path),
                output_style=self._output_style,
                include_paths=self._include_paths,
            )
        except sass.CompileError as exc:
            raise AdapterError(str(exc).strip()) from exc
