"""Polling watch loop that re-runs the pipeline for added or changed sources."""

from __future__ import annotations

import asyncio
from pathlib import Path

from css_modules_flow_types.config import DEFAULT_POLL_INTERVAL
from css_modules_flow_types.pipeline.models import (
    ConversionOutcome,
    FileStamp,
    SourceSet,
    WatchEvent,
)
from css_modules_flow_types.pipeline.runner import FilePipeline
from css_modules_flow_types.pipeline.sources import (
    InputError,
    detect_watch_delta,
    take_snapshot,
)


def ensure_watchable(source_set: SourceSet) -> None:
    """Reject explicit file lists, which have no pattern to watch."""
    if source_set.pattern is None or source_set.root is None:
        names = ", ".join(str(path) for path in source_set.files)
        raise InputError(f"Watch mode requires a single path... Not {names}")


class WatchCoordinator:
    """Dispatch one pipeline task per filesystem event until stopped.

    Events are found by diffing stat snapshots of the watch pattern. The
    first snapshot is a baseline and dispatches nothing. Events never wait on
    each other; two quick saves of one file race and the last write wins.
    """

    def __init__(
        self,
        source_set: SourceSet,
        pipeline: FilePipeline,
        *,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        exclude_globs: tuple[str, ...] = (),
    ) -> None:
        ensure_watchable(source_set)
        self._pattern = source_set.pattern
        self._root = source_set.root
        self._pipeline = pipeline
        self._poll_interval = poll_interval
        self._exclude_globs = exclude_globs
        self._snapshot: dict[Path, FileStamp] | None = None
        self._inflight: set[asyncio.Task[ConversionOutcome]] = set()

    @property
    def pattern(self) -> str:
        return self._pattern

    async def subscribe(self) -> None:
        """Take the baseline snapshot that later polls are compared against."""
        self._snapshot = await self._scan()

    async def poll(self) -> list[WatchEvent]:
        """Diff against the last snapshot and spawn a task per added/changed file."""
        if self._snapshot is None:
            await self.subscribe()
            return []
        current = await self._scan()
        delta = detect_watch_delta(self._snapshot, current)
        self._snapshot = current
        events = delta.events()
        for event in events:
            self._dispatch(event)
        return events

    async def _scan(self) -> dict[Path, FileStamp]:
        return await asyncio.to_thread(
            take_snapshot, self._pattern, self._root, self._exclude_globs
        )

    def _dispatch(self, event: WatchEvent) -> None:
        task = asyncio.create_task(self._pipeline.process(event.path))
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)

    async def drain(self) -> list[ConversionOutcome]:
        """Wait for every conversion started so far."""
        if not self._inflight:
            return []
        return list(await asyncio.gather(*tuple(self._inflight)))

    async def run(self, stop: asyncio.Event | None = None) -> None:
        """Poll until ``stop`` is set, then let in-flight conversions finish."""
        stop_event = stop or asyncio.Event()
        await self.subscribe()
        while not stop_event.is_set():
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=self._poll_interval)
            except TimeoutError:
                await self.poll()
        await self.drain()
