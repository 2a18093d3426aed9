"""Source resolution, conversion pipeline and watch coordination."""

from .dangling import find_dangling, report_dangling
from .ephemeral import EphemeralStore
from .models import ConversionOutcome, FileStamp, SourceSet, WatchDelta, WatchEvent
from .paths import declaration_path_for, display_path, source_path_for
from .runner import BatchResult, FilePipeline, convert_source_set, run_batch
from .sources import (
    InputError,
    build_pattern,
    detect_watch_delta,
    expand_pattern,
    resolve_sources,
    take_snapshot,
)
from .watch import WatchCoordinator, ensure_watchable

__all__ = [
    "BatchResult",
    "ConversionOutcome",
    "EphemeralStore",
    "FilePipeline",
    "FileStamp",
    "InputError",
    "SourceSet",
    "WatchCoordinator",
    "WatchDelta",
    "WatchEvent",
    "build_pattern",
    "convert_source_set",
    "declaration_path_for",
    "detect_watch_delta",
    "display_path",
    "ensure_watchable",
    "expand_pattern",
    "find_dangling",
    "report_dangling",
    "resolve_sources",
    "run_batch",
    "source_path_for",
    "take_snapshot",
]
