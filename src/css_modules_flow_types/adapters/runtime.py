"""Runtime adapter construction."""

from __future__ import annotations

from css_modules_flow_types.adapters.flow import FlowDeclarationConverter
from css_modules_flow_types.adapters.libsass import SassCompiler
from css_modules_flow_types.config import ToolConfig


def build_compiler(config: ToolConfig) -> SassCompiler:
    """Build the stylesheet compiler from effective config."""
    return SassCompiler(
        include_paths=config.compiler.include_paths,
        output_style=config.compiler.output_style,
    )


def build_converter() -> FlowDeclarationConverter:
    """Build the declaration converter; it has no tunable settings."""
    return FlowDeclarationConverter()
