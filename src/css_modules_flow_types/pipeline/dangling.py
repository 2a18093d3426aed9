"""Detection of declaration artifacts whose source is gone."""

from __future__ import annotations

import glob
import os
from collections.abc import Iterable
from pathlib import Path

from css_modules_flow_types.config import DEFAULT_DECLARATION_SUFFIX
from css_modules_flow_types.logging.console import ConsoleReporter
from css_modules_flow_types.pipeline.paths import display_path, source_path_for
from css_modules_flow_types.pipeline.sources import is_excluded


def find_dangling(
    pattern: str,
    live_sources: Iterable[Path],
    suffix: str = DEFAULT_DECLARATION_SUFFIX,
    root: Path | None = None,
    exclude_globs: tuple[str, ...] = (),
) -> tuple[Path, ...]:
    """Return sorted artifacts matching ``pattern + suffix`` with no live source.

    Artifacts whose source path falls under ``exclude_globs`` are ignored so
    that excluded trees are never reported.
    """
    live = {Path(os.path.abspath(path)) for path in live_sources}
    dangling: list[Path] = []
    for match in glob.glob(pattern + suffix, recursive=True):
        if not os.path.isfile(match):
            continue
        artifact = Path(os.path.abspath(match))
        source = source_path_for(artifact, suffix)
        if source is None or source in live:
            continue
        if root is not None and exclude_globs and is_excluded(source, root, exclude_globs):
            continue
        dangling.append(artifact)
    return tuple(sorted(dangling))


def report_dangling(
    dangling: tuple[Path, ...],
    reporter: ConsoleReporter,
    cwd: Path,
    suffix: str = DEFAULT_DECLARATION_SUFFIX,
) -> None:
    """Advise the operator about removable artifacts; nothing is deleted."""
    if not dangling:
        return
    reporter.warn(
        f"Detected {len(dangling)} dangling {suffix} file(s), that can be removed:"
    )
    for artifact in dangling:
        reporter.warn(f"- {display_path(artifact, cwd)}")
