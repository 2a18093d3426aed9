"""Typed models for conversion state."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(slots=True, frozen=True)
class SourceSet:
    """Resolved sources for one run.

    ``pattern`` is None when the operator named explicit files; such sets
    cannot be watched or re-scanned for dangling artifacts.
    """

    files: tuple[Path, ...]
    pattern: str | None
    root: Path | None = None


@dataclass(slots=True, frozen=True)
class ConversionOutcome:
    """Result of converting one source file."""

    source: Path
    ok: bool
    artifact: Path | None = None
    error: str | None = None

    @classmethod
    def success(cls, source: Path, artifact: Path) -> ConversionOutcome:
        return cls(source=source, ok=True, artifact=artifact)

    @classmethod
    def failure(cls, source: Path, reason: str) -> ConversionOutcome:
        return cls(source=source, ok=False, error=reason)


@dataclass(slots=True, frozen=True)
class FileStamp:
    """Stat fields used to detect changed sources between polls."""

    size: int
    mtime_ns: int


@dataclass(slots=True, frozen=True)
class WatchEvent:
    """Filesystem change delivered to the watch coordinator."""

    kind: str
    path: Path


@dataclass(slots=True, frozen=True)
class WatchDelta:
    """Deterministic added/changed classification between two snapshots."""

    added: tuple[Path, ...]
    changed: tuple[Path, ...]
    removed: tuple[Path, ...]

    def events(self) -> list[WatchEvent]:
        """Return dispatchable events; removals are not dispatched."""
        output = [WatchEvent(kind="added", path=path) for path in self.added]
        output.extend(WatchEvent(kind="changed", path=path) for path in self.changed)
        return output
