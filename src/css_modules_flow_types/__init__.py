"""Generate Flow declaration files for CSS Modules stylesheets."""

from .config import CliOverrides, ToolConfig, load_effective_config
from .pipeline import (
    ConversionOutcome,
    FilePipeline,
    SourceSet,
    WatchCoordinator,
    declaration_path_for,
    resolve_sources,
)

__version__ = "0.1.0"

__all__ = [
    "CliOverrides",
    "ConversionOutcome",
    "FilePipeline",
    "SourceSet",
    "ToolConfig",
    "WatchCoordinator",
    "__version__",
    "declaration_path_for",
    "load_effective_config",
    "resolve_sources",
]
