"""Configuration loading and deterministic merge order."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass
from pathlib import Path

CONFIG_FILE_NAME = "css-modules-flow-types.toml"

DEFAULT_EXTENSION = "css"
DEFAULT_DECLARATION_SUFFIX = ".flow"
DEFAULT_POLL_INTERVAL = 0.5
MAX_CONCURRENCY_CAP = 256

OUTPUT_STYLES = ("nested", "expanded", "compact", "compressed")
COLOR_MODES = ("auto", "always", "never")


@dataclass(slots=True, frozen=True)
class ConvertConfig:
    """Source discovery and artifact naming settings."""

    extension: str
    declaration_suffix: str
    exclude_globs: tuple[str, ...]
    max_concurrency: int | None


@dataclass(slots=True, frozen=True)
class CompilerConfig:
    """Stylesheet compiler settings."""

    output_style: str
    include_paths: tuple[Path, ...]


@dataclass(slots=True, frozen=True)
class WatchConfig:
    """Watch mode polling settings."""

    poll_interval: float


@dataclass(slots=True, frozen=True)
class OutputConfig:
    """Operator-facing reporting settings."""

    silent: bool
    color: str
    event_log: Path | None


@dataclass(slots=True, frozen=True)
class ToolConfig:
    """Fully merged tool configuration."""

    cwd: Path
    convert: ConvertConfig
    compiler: CompilerConfig
    watch: WatchConfig
    output: OutputConfig


@dataclass(slots=True, frozen=True)
class CliOverrides:
    """Optional command-line overrides applied at highest precedence."""

    extension: str | None = None
    silent: bool | None = None


def default_config(cwd: Path) -> ToolConfig:
    """Build default config for a given working directory."""
    return ToolConfig(
        cwd=cwd.resolve(),
        convert=ConvertConfig(
            extension=DEFAULT_EXTENSION,
            declaration_suffix=DEFAULT_DECLARATION_SUFFIX,
            exclude_globs=(),
            max_concurrency=None,
        ),
        compiler=CompilerConfig(output_style="nested", include_paths=()),
        watch=WatchConfig(poll_interval=DEFAULT_POLL_INTERVAL),
        output=OutputConfig(silent=False, color="auto", event_log=None),
    )


def load_config_file(config_path: Path) -> dict[str, object]:
    """Load a TOML config file, returning an empty payload when it is absent."""
    if not config_path.exists():
        return {}
    with config_path.open("rb") as handle:
        payload = tomllib.load(handle)
    if not isinstance(payload, dict):
        raise ValueError(f"{config_path.name} must contain a top-level table.")
    return payload


def _get_table(payload: dict[str, object], key: str) -> dict[str, object]:
    value = payload.get(key, {})
    if not isinstance(value, dict):
        raise ValueError(f"Config section '{key}' must be a table.")
    return value


def _tuple_of_strings(value: object, section: str, field: str) -> tuple[str, ...]:
    if not isinstance(value, list):
        raise ValueError(f"Config field '{section}.{field}' must be a list of strings.")
    output: list[str] = []
    for item in value:
        if not isinstance(item, str):
            raise ValueError(f"Config field '{section}.{field}' must contain only strings.")
        output.append(item)
    return tuple(output)


def normalize_extension(value: str, name: str = "convert.extension") -> str:
    """Strip a leading dot and reject empty or path-like extensions."""
    normalized = value.strip().lstrip(".")
    if not normalized or any(char in normalized for char in "/\\*?[]"):
        raise ValueError(f"Config field '{name}' must be a plain file extension.")
    return normalized


def merge_config(
    base: ToolConfig,
    payload: dict[str, object],
    overrides: CliOverrides,
    config_dir: Path | None = None,
) -> ToolConfig:
    """Merge defaults, config file, then CLI overrides."""
    convert_payload = _get_table(payload, "convert")
    compiler_payload = _get_table(payload, "compiler")
    watch_payload = _get_table(payload, "watch")
    output_payload = _get_table(payload, "output")
    anchor = (config_dir or base.cwd).resolve()

    extension = base.convert.extension
    if "extension" in convert_payload:
        raw_extension = convert_payload["extension"]
        if not isinstance(raw_extension, str):
            raise ValueError("Config field 'convert.extension' must be a string.")
        extension = normalize_extension(raw_extension)

    declaration_suffix = base.convert.declaration_suffix
    if "declaration_suffix" in convert_payload:
        raw_suffix = convert_payload["declaration_suffix"]
        if not isinstance(raw_suffix, str) or not raw_suffix.startswith(".") or len(raw_suffix) < 2:
            raise ValueError(
                "Config field 'convert.declaration_suffix' must be a string starting with '.'."
            )
        declaration_suffix = raw_suffix

    exclude_globs = base.convert.exclude_globs
    if "exclude_globs" in convert_payload:
        exclude_globs = _tuple_of_strings(
            convert_payload["exclude_globs"], "convert", "exclude_globs"
        )

    max_concurrency = _optional_positive_int_with_cap(
        convert_payload.get("max_concurrency"),
        "convert.max_concurrency",
        base.convert.max_concurrency,
        MAX_CONCURRENCY_CAP,
    )

    output_style = base.compiler.output_style
    if "output_style" in compiler_payload:
        raw_style = compiler_payload["output_style"]
        if raw_style not in OUTPUT_STYLES:
            raise ValueError(
                "Config field 'compiler.output_style' must be one of "
                + ", ".join(OUTPUT_STYLES)
                + "."
            )
        output_style = str(raw_style)

    include_paths = base.compiler.include_paths
    if "include_paths" in compiler_payload:
        include_paths = tuple(
            (anchor / item).resolve()
            for item in _tuple_of_strings(
                compiler_payload["include_paths"], "compiler", "include_paths"
            )
        )

    poll_interval = base.watch.poll_interval
    if "poll_interval" in watch_payload:
        raw_interval = watch_payload["poll_interval"]
        if (
            isinstance(raw_interval, bool)
            or not isinstance(raw_interval, (int, float))
            or raw_interval <= 0
        ):
            raise ValueError("Config field 'watch.poll_interval' must be a positive number.")
        poll_interval = float(raw_interval)

    silent = base.output.silent
    if "silent" in output_payload:
        raw_silent = output_payload["silent"]
        if not isinstance(raw_silent, bool):
            raise ValueError("Config field 'output.silent' must be a boolean.")
        silent = raw_silent

    color = base.output.color
    if "color" in output_payload:
        raw_color = output_payload["color"]
        if raw_color not in COLOR_MODES:
            raise ValueError(
                "Config field 'output.color' must be one of " + ", ".join(COLOR_MODES) + "."
            )
        color = str(raw_color)

    event_log = base.output.event_log
    if "event_log" in output_payload:
        raw_event_log = output_payload["event_log"]
        if not isinstance(raw_event_log, str) or not raw_event_log.strip():
            raise ValueError("Config field 'output.event_log' must be a non-empty string.")
        event_log = (anchor / raw_event_log).resolve()

    merged = ToolConfig(
        cwd=base.cwd,
        convert=ConvertConfig(
            extension=extension,
            declaration_suffix=declaration_suffix,
            exclude_globs=exclude_globs,
            max_concurrency=max_concurrency,
        ),
        compiler=CompilerConfig(output_style=output_style, include_paths=include_paths),
        watch=WatchConfig(poll_interval=poll_interval),
        output=OutputConfig(silent=silent, color=color, event_log=event_log),
    )
    return apply_cli_overrides(merged, overrides)


def apply_cli_overrides(config: ToolConfig, overrides: CliOverrides) -> ToolConfig:
    """Apply command-line overrides at highest precedence."""
    extension = config.convert.extension
    if overrides.extension is not None:
        extension = normalize_extension(overrides.extension, name="--extension")
    silent = overrides.silent if overrides.silent is not None else config.output.silent
    return ToolConfig(
        cwd=config.cwd,
        convert=ConvertConfig(
            extension=extension,
            declaration_suffix=config.convert.declaration_suffix,
            exclude_globs=config.convert.exclude_globs,
            max_concurrency=config.convert.max_concurrency,
        ),
        compiler=config.compiler,
        watch=config.watch,
        output=OutputConfig(
            silent=silent,
            color=config.output.color,
            event_log=config.output.event_log,
        ),
    )


def load_effective_config(
    cwd: Path,
    overrides: CliOverrides | None = None,
    config_path: Path | None = None,
) -> ToolConfig:
    """Load effective config using merge order defaults -> config file -> overrides."""
    resolved_cwd = cwd.resolve()
    base = default_config(resolved_cwd)
    if config_path is not None:
        resolved_path = config_path if config_path.is_absolute() else resolved_cwd / config_path
        if not resolved_path.exists():
            raise ValueError(f"Config file not found: {config_path}")
    else:
        resolved_path = resolved_cwd / CONFIG_FILE_NAME
    payload = load_config_file(resolved_path)
    return merge_config(
        base,
        payload,
        overrides or CliOverrides(),
        config_dir=resolved_path.parent,
    )


def _optional_positive_int_with_cap(
    value: object,
    name: str,
    default: int | None,
    cap: int | None,
) -> int | None:
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ValueError(f"Config field '{name}' must be a positive integer.")
    if cap is not None and value > cap:
        raise ValueError(f"Config field '{name}' must be <= {cap}.")
    return value
