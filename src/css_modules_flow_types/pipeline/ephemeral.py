"""Temporary files bridging compiler output to the file-based converter."""

from __future__ import annotations

import tempfile
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

DEFAULT_PREFIX = "cmft-"


class EphemeralStore:
    """Issues unique temp paths; does not track them after issuance."""

    def __init__(self, directory: Path | None = None, prefix: str = DEFAULT_PREFIX) -> None:
        self._directory = directory
        self._prefix = prefix

    @property
    def directory(self) -> Path:
        """Return the directory new paths are allocated in."""
        if self._directory is not None:
            return self._directory
        return Path(tempfile.gettempdir())

    def allocate(self, suffix: str) -> Path:
        """Return a fresh path; uuid4 names make concurrent allocations distinct."""
        return self.directory / f"{self._prefix}{uuid.uuid4().hex}{suffix}"

    def release(self, path: Path) -> None:
        """Remove an allocated file, ignoring anything already gone or locked."""
        try:
            path.unlink(missing_ok=True)
        except OSError:
            return

    @contextmanager
    def ephemeral(self, suffix: str) -> Iterator[Path]:
        """Allocate a path for the duration of one conversion."""
        path = self.allocate(suffix)
        try:
            yield path
        finally:
            self.release(path)
