"""Per-file conversion pipeline and batch orchestration."""

from __future__ import annotations

import asyncio
import os
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from css_modules_flow_types.adapters.base import (
    AdapterError,
    DeclarationConverter,
    StylesheetCompiler,
)
from css_modules_flow_types.config import DEFAULT_DECLARATION_SUFFIX
from css_modules_flow_types.logging.console import ConsoleReporter
from css_modules_flow_types.logging.events import (
    ConversionEvent,
    JsonlEventLogger,
    utc_timestamp,
)
from css_modules_flow_types.pipeline.dangling import find_dangling, report_dangling
from css_modules_flow_types.pipeline.ephemeral import EphemeralStore
from css_modules_flow_types.pipeline.models import ConversionOutcome, SourceSet
from css_modules_flow_types.pipeline.paths import declaration_path_for, display_path


@dataclass(slots=True, frozen=True)
class BatchResult:
    """Outcomes of one batch run plus any dangling artifacts found afterwards."""

    outcomes: tuple[ConversionOutcome, ...]
    dangling: tuple[Path, ...]

    @property
    def failed(self) -> tuple[ConversionOutcome, ...]:
        return tuple(outcome for outcome in self.outcomes if not outcome.ok)


def write_text(path: Path, content: str) -> None:
    """Overwrite ``path`` with UTF-8 text, keeping newlines untranslated."""
    with path.open("w", encoding="utf-8", newline="") as handle:
        handle.write(content)


class FilePipeline:
    """Compile, extract and emit the declaration artifact for one source."""

    def __init__(
        self,
        compiler: StylesheetCompiler,
        converter: DeclarationConverter,
        reporter: ConsoleReporter,
        *,
        store: EphemeralStore | None = None,
        suffix: str = DEFAULT_DECLARATION_SUFFIX,
        cwd: Path | None = None,
        event_logger: JsonlEventLogger | None = None,
        mode: str = "batch",
    ) -> None:
        self._compiler = compiler
        self._converter = converter
        self._reporter = reporter
        self._store = store or EphemeralStore()
        self._suffix = suffix
        self._cwd = (cwd or Path.cwd()).resolve()
        self._event_logger = event_logger
        self._mode = mode

    @property
    def suffix(self) -> str:
        return self._suffix

    @property
    def cwd(self) -> Path:
        return self._cwd

    async def process(self, source: Path | str) -> ConversionOutcome:
        """Convert one source; every failure is reported and contained here."""
        source_path = Path(os.path.abspath(self._cwd / source))
        try:
            artifact = await self._convert(source_path)
        except AdapterError as error:
            outcome = ConversionOutcome.failure(source_path, str(error))
        except OSError as error:
            outcome = ConversionOutcome.failure(source_path, str(error))
        except Exception as error:
            outcome = ConversionOutcome.failure(source_path, f"{type(error).__name__}: {error}")
        else:
            outcome = ConversionOutcome.success(source_path, artifact)

        if outcome.ok and outcome.artifact is not None:
            self._reporter.wrote(display_path(outcome.artifact, self._cwd))
        else:
            self._reporter.error(outcome.error or "Unknown error")
        await self._record(outcome)
        return outcome

    async def _convert(self, source: Path) -> Path:
        css_text = await asyncio.to_thread(self._compiler.render, source)
        with self._store.ephemeral(".css") as compiled_css:
            await asyncio.to_thread(write_text, compiled_css, css_text)
            declaration = await asyncio.to_thread(self._converter.convert, compiled_css)
        artifact = declaration_path_for(source, self._suffix)
        await asyncio.to_thread(write_text, artifact, declaration)
        return artifact

    async def _record(self, outcome: ConversionOutcome) -> None:
        if self._event_logger is None:
            return
        event = ConversionEvent(
            timestamp=utc_timestamp(),
            mode=self._mode,
            source=str(outcome.source),
            artifact=str(outcome.artifact) if outcome.artifact is not None else None,
            ok=outcome.ok,
            error=outcome.error,
        )
        try:
            await asyncio.to_thread(self._event_logger.append, event)
        except OSError as error:
            self._reporter.error(f"Could not write event log {self._event_logger.path}: {error}")


async def run_batch(
    pipeline: FilePipeline,
    sources: Sequence[Path],
    max_concurrency: int | None = None,
) -> list[ConversionOutcome]:
    """Start every conversion at once, optionally capped, and wait for all of them."""
    if max_concurrency is None:
        return list(await asyncio.gather(*(pipeline.process(source) for source in sources)))

    semaphore = asyncio.Semaphore(max_concurrency)

    async def bounded(source: Path) -> ConversionOutcome:
        async with semaphore:
            return await pipeline.process(source)

    return list(await asyncio.gather(*(bounded(source) for source in sources)))


async def convert_source_set(
    source_set: SourceSet,
    pipeline: FilePipeline,
    reporter: ConsoleReporter,
    max_concurrency: int | None = None,
    exclude_globs: tuple[str, ...] = (),
) -> BatchResult:
    """Run a batch, then scan for dangling artifacts once every task has settled."""
    outcomes = await run_batch(pipeline, source_set.files, max_concurrency=max_concurrency)
    dangling: tuple[Path, ...] = ()
    if source_set.pattern is not None:
        dangling = find_dangling(
            source_set.pattern,
            source_set.files,
            pipeline.suffix,
            root=source_set.root,
            exclude_globs=exclude_globs,
        )
        report_dangling(dangling, reporter, pipeline.cwd, pipeline.suffix)
    return BatchResult(outcomes=tuple(outcomes), dangling=dangling)
