"""Command-line entrypoint for batch and watch conversion."""

from __future__ import annotations

import argparse
import asyncio
import signal
import sys
from pathlib import Path

from css_modules_flow_types.adapters.base import DeclarationConverter, StylesheetCompiler
from css_modules_flow_types.adapters.runtime import build_compiler, build_converter
from css_modules_flow_types.config import CliOverrides, ToolConfig, load_effective_config
from css_modules_flow_types.logging import ConsoleReporter, JsonlEventLogger
from css_modules_flow_types.pipeline import (
    FilePipeline,
    InputError,
    SourceSet,
    WatchCoordinator,
    convert_source_set,
    display_path,
    ensure_watchable,
    resolve_sources,
)

DESCRIPTION = "Creates .flow type definition files from CSS Modules files"


def build_arg_parser() -> argparse.ArgumentParser:
    """Build argument parser for the conversion CLI."""
    parser = argparse.ArgumentParser(prog="css-modules-flow-types", description=DESCRIPTION)
    parser.add_argument(
        "paths",
        nargs="*",
        metavar="path",
        help="directory to search for CSS Modules (or concrete files to convert)",
    )
    parser.add_argument("--watch", "-w", action="store_true", help="Run in watch mode")
    parser.add_argument(
        "--extension", "-e", default=None, help='File extension (defaults to "css")'
    )
    parser.add_argument(
        "--silent", "-s", action="store_true", help="Silences all output except errors"
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to a TOML config file (defaults to ./css-modules-flow-types.toml)",
    )
    return parser


def create_pipeline(
    config: ToolConfig,
    reporter: ConsoleReporter,
    mode: str,
    compiler: StylesheetCompiler | None = None,
    converter: DeclarationConverter | None = None,
) -> FilePipeline:
    """Create a pipeline wired to effective config."""
    event_logger = None
    if config.output.event_log is not None:
        event_logger = JsonlEventLogger(config.output.event_log)
    return FilePipeline(
        compiler=compiler or build_compiler(config),
        converter=converter or build_converter(),
        reporter=reporter,
        suffix=config.convert.declaration_suffix,
        cwd=config.cwd,
        event_logger=event_logger,
        mode=mode,
    )


def main(argv: list[str] | None = None) -> int:
    """Entrypoint for the css-modules-flow-types process."""
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    if not args.paths:
        parser.print_help()
        return 0

    overrides = CliOverrides(
        extension=args.extension,
        silent=True if args.silent else None,
    )
    try:
        config = load_effective_config(
            cwd=Path.cwd(),
            overrides=overrides,
            config_path=Path(args.config) if args.config is not None else None,
        )
    except ValueError as error:
        ConsoleReporter(sys.stdout, sys.stderr).error(str(error))
        return 2

    reporter = ConsoleReporter(
        sys.stdout,
        sys.stderr,
        silent=config.output.silent,
        color=config.output.color,
    )
    try:
        source_set = resolve_sources(
            args.paths,
            extension=config.convert.extension,
            exclude_globs=config.convert.exclude_globs,
            cwd=config.cwd,
        )
        if args.watch:
            ensure_watchable(source_set)
    except InputError as error:
        reporter.error(str(error))
        return 2

    if args.watch:
        return run_watch(config, source_set, reporter)
    return run_batch_mode(config, source_set, reporter)


def run_batch_mode(config: ToolConfig, source_set: SourceSet, reporter: ConsoleReporter) -> int:
    """Convert every source once and report dangling artifacts."""
    pipeline = create_pipeline(config, reporter, mode="batch")
    result = asyncio.run(
        convert_source_set(
            source_set,
            pipeline,
            reporter,
            max_concurrency=config.convert.max_concurrency,
            exclude_globs=config.convert.exclude_globs,
        )
    )
    return 1 if result.failed else 0


def run_watch(config: ToolConfig, source_set: SourceSet, reporter: ConsoleReporter) -> int:
    """Watch the source pattern until interrupted."""
    pipeline = create_pipeline(config, reporter, mode="watch")
    coordinator = WatchCoordinator(
        source_set,
        pipeline,
        poll_interval=config.watch.poll_interval,
        exclude_globs=config.convert.exclude_globs,
    )
    reporter.info(f"Watching {display_path(Path(coordinator.pattern), config.cwd)}")
    try:
        asyncio.run(_watch_until_signalled(coordinator))
    except KeyboardInterrupt:
        return 0
    return 0


async def _watch_until_signalled(coordinator: WatchCoordinator) -> None:
    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for signum in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(signum, stop.set)
        except NotImplementedError:
            # Windows loops: Ctrl+C surfaces as KeyboardInterrupt instead.
            break
    await coordinator.run(stop)


if __name__ == "__main__":
    raise SystemExit(main())
