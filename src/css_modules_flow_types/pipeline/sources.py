"""Source set resolution and stat snapshots for change detection."""

from __future__ import annotations

import fnmatch
import glob
import os
from collections.abc import Sequence
from pathlib import Path

from css_modules_flow_types.pipeline.models import FileStamp, SourceSet, WatchDelta


class InputError(ValueError):
    """Raised when operator input leaves nothing valid to process."""


def absolute_path(base: Path, candidate: str | Path) -> Path:
    """Join against base and normalize without following symlinks."""
    return Path(os.path.abspath(base / candidate))


def build_pattern(root: Path, extension: str) -> str:
    """Return the recursive glob for sources with ``extension`` under ``root``."""
    if root.is_file():
        return glob.escape(str(root))
    return os.path.join(glob.escape(str(root)), "**", f"*.{extension.lstrip('.')}")


def resolve_sources(
    paths: Sequence[str],
    extension: str,
    exclude_globs: tuple[str, ...] = (),
    cwd: Path | None = None,
) -> SourceSet:
    """Expand operator paths into concrete sources.

    Two or more paths are taken literally. A single path becomes a recursive
    glob whose matches are expanded immediately.
    """
    if not paths:
        raise InputError("No input paths given.")
    base = cwd if cwd is not None else Path.cwd()
    if len(paths) > 1:
        return SourceSet(files=tuple(absolute_path(base, path) for path in paths), pattern=None)
    root = absolute_path(base, paths[0])
    pattern = build_pattern(root, extension)
    return SourceSet(
        files=expand_pattern(pattern, root, exclude_globs),
        pattern=pattern,
        root=root,
    )


def expand_pattern(
    pattern: str,
    root: Path,
    exclude_globs: tuple[str, ...] = (),
) -> tuple[Path, ...]:
    """Return sorted regular files matching pattern, minus excluded ones."""
    matches: list[Path] = []
    for match in glob.glob(pattern, recursive=True):
        if not os.path.isfile(match):
            continue
        path = Path(os.path.abspath(match))
        if exclude_globs and is_excluded(path, root, exclude_globs):
            continue
        matches.append(path)
    return tuple(sorted(matches))


def is_excluded(path: Path, root: Path, exclude_globs: tuple[str, ...]) -> bool:
    """Match ``path`` relative to ``root`` against the ignore globs."""
    return should_exclude(_relative_posix(path, root), exclude_globs)


def should_exclude(relative_path: str, exclude_globs: tuple[str, ...]) -> bool:
    """Return True when a path matches configured ignore globs."""
    anchored = f"/{relative_path}"
    return any(
        fnmatch.fnmatch(relative_path, pattern) or fnmatch.fnmatch(anchored, pattern)
        for pattern in exclude_globs
    )


def _relative_posix(path: Path, root: Path) -> str:
    if path == root:
        return path.name
    try:
        return path.relative_to(root).as_posix()
    except ValueError:
        return path.as_posix()


def take_snapshot(
    pattern: str,
    root: Path,
    exclude_globs: tuple[str, ...] = (),
) -> dict[Path, FileStamp]:
    """Stat every current match; files vanishing mid-scan are skipped."""
    snapshot: dict[Path, FileStamp] = {}
    for path in expand_pattern(pattern, root, exclude_globs):
        try:
            stat = path.stat()
        except OSError:
            continue
        snapshot[path] = FileStamp(size=stat.st_size, mtime_ns=stat.st_mtime_ns)
    return snapshot


def detect_watch_delta(
    previous: dict[Path, FileStamp],
    current: dict[Path, FileStamp],
) -> WatchDelta:
    """Compute deterministic added/changed/removed sets."""
    previous_paths = set(previous)
    current_paths = set(current)
    changed = sorted(
        path for path in previous_paths & current_paths if previous[path] != current[path]
    )
    return WatchDelta(
        added=tuple(sorted(current_paths - previous_paths)),
        changed=tuple(changed),
        removed=tuple(sorted(previous_paths - current_paths)),
    )
