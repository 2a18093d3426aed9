from __future__ import annotations

import asyncio
import io
import threading
import time
from pathlib import Path

from css_modules_flow_types.adapters import AdapterError, FlowDeclarationConverter
from css_modules_flow_types.adapters.flow import print_flow_definition
from css_modules_flow_types.logging import ConsoleReporter, JsonlEventLogger
from css_modules_flow_types.pipeline import EphemeralStore, FilePipeline, run_batch


class PassthroughCompiler:
    """Treats sources as already-rendered CSS; named files fail to compile."""

    name = "passthrough"

    def __init__(self, failing: frozenset[str] = frozenset(), delay: float = 0.0) -> None:
        self._failing = failing
        self._delay = delay
        self._lock = threading.Lock()
        self.active = 0
        self.peak = 0

    def render(self, source_path: Path) -> str:
        with self._lock:
            self.active += 1
            self.peak = max(self.peak, self.active)
        try:
            if self._delay:
                time.sleep(self._delay)
            if source_path.name in self._failing:
                raise AdapterError(f"Invalid CSS after \"{source_path.name}\": expected '}}'")
            return source_path.read_text(encoding="utf-8")
        finally:
            with self._lock:
                self.active -= 1


class RecordingConverter(FlowDeclarationConverter):
    """Records the ephemeral paths handed to the converter."""

    def __init__(self) -> None:
        self.seen: list[tuple[Path, bool]] = []

    def convert(self, css_path: Path) -> str:
        self.seen.append((css_path, css_path.exists()))
        return super().convert(css_path)


def _pipeline(
    cwd: Path,
    compiler: PassthroughCompiler | None = None,
    converter: FlowDeclarationConverter | None = None,
    **kwargs: object,
) -> tuple[FilePipeline, io.StringIO, io.StringIO]:
    out = io.StringIO()
    err = io.StringIO()
    reporter = ConsoleReporter(out, err, silent=bool(kwargs.pop("silent", False)), color="never")
    pipeline = FilePipeline(
        compiler=compiler or PassthroughCompiler(),
        converter=converter or FlowDeclarationConverter(),
        reporter=reporter,
        cwd=cwd,
        **kwargs,  # type: ignore[arg-type]
    )
    return pipeline, out, err


def _source(path: Path, css: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(css, encoding="utf-8")
    return path


def test_success_writes_artifact_next_to_source(tmp_path: Path) -> None:
    source = _source(
        tmp_path / "styles" / "button.css",
        ".primary { color: red; }\n.disabled { opacity: 0.5; }\n",
    )
    pipeline, out, err = _pipeline(tmp_path)

    outcome = asyncio.run(pipeline.process(source))

    artifact = tmp_path / "styles" / "button.css.flow"
    assert outcome.ok is True
    assert outcome.artifact == artifact
    assert artifact.read_text(encoding="utf-8") == print_flow_definition(["primary", "disabled"])
    assert out.getvalue() == "[Wrote] ./styles/button.css.flow\n"
    assert err.getvalue() == ""


def test_relative_source_is_resolved_against_cwd(tmp_path: Path) -> None:
    _source(tmp_path / "a.css", ".a { color: red; }")
    pipeline, _, _ = _pipeline(tmp_path)

    outcome = asyncio.run(pipeline.process("a.css"))

    assert outcome.source == tmp_path / "a.css"
    assert (tmp_path / "a.css.flow").exists()


def test_artifact_outside_cwd_is_reported_with_parent_path(tmp_path: Path) -> None:
    source = _source(tmp_path / "shared" / "theme.css", ".theme { color: red; }")
    app = tmp_path / "app"
    app.mkdir()
    pipeline, out, _ = _pipeline(app)

    asyncio.run(pipeline.process(source))

    assert out.getvalue() == "[Wrote] ../shared/theme.css.flow\n"


def test_silent_hides_success_but_not_errors(tmp_path: Path) -> None:
    ok = _source(tmp_path / "ok.css", ".ok { color: red; }")
    bad = _source(tmp_path / "bad.css", ".bad {")
    pipeline, out, err = _pipeline(tmp_path, silent=True)

    asyncio.run(pipeline.process(ok))
    asyncio.run(pipeline.process(bad))

    assert out.getvalue() == ""
    assert err.getvalue().startswith("[Error] Unbalanced braces in ")


def test_failure_in_one_file_does_not_affect_siblings(tmp_path: Path) -> None:
    sources = [
        _source(tmp_path / f"{name}.css", f".{name} {{ color: red; }}") for name in ("a", "b", "c")
    ]
    compiler = PassthroughCompiler(failing=frozenset({"a.css"}))
    pipeline, _, err = _pipeline(tmp_path, compiler=compiler)

    outcomes = asyncio.run(run_batch(pipeline, sources))

    assert [outcome.ok for outcome in outcomes] == [False, True, True]
    assert outcomes[0].error == "Invalid CSS after \"a.css\": expected '}'"
    assert not (tmp_path / "a.css.flow").exists()
    assert (tmp_path / "b.css.flow").exists()
    assert (tmp_path / "c.css.flow").exists()
    assert err.getvalue() == "[Error] Invalid CSS after \"a.css\": expected '}'\n"


def test_missing_source_is_reported_as_io_error(tmp_path: Path) -> None:
    pipeline, _, err = _pipeline(tmp_path)

    outcome = asyncio.run(pipeline.process(tmp_path / "absent.css"))

    assert outcome.ok is False
    assert "absent.css" in (outcome.error or "")
    assert err.getvalue().startswith("[Error] ")


def test_unwritable_artifact_is_contained(tmp_path: Path) -> None:
    source = _source(tmp_path / "locked.css", ".locked { color: red; }")
    (tmp_path / "locked.css.flow").mkdir()
    pipeline, _, err = _pipeline(tmp_path)

    outcome = asyncio.run(pipeline.process(source))

    assert outcome.ok is False
    assert outcome.artifact is None
    assert "locked.css.flow" in err.getvalue()


def test_unexpected_adapter_exception_is_contained(tmp_path: Path) -> None:
    class ExplodingCompiler:
        name = "exploding"

        def render(self, source_path: Path) -> str:
            raise RuntimeError("compiler crashed")

    source = _source(tmp_path / "x.css", ".x { color: red; }")
    pipeline, _, err = _pipeline(tmp_path, compiler=ExplodingCompiler())  # type: ignore[arg-type]

    outcome = asyncio.run(pipeline.process(source))

    assert outcome.error == "RuntimeError: compiler crashed"
    assert err.getvalue() == "[Error] RuntimeError: compiler crashed\n"


def test_ephemeral_css_is_bridged_and_removed(tmp_path: Path) -> None:
    temp_dir = tmp_path / "tmp"
    temp_dir.mkdir()
    source = _source(tmp_path / "x.css", ".x { color: red; }")
    converter = RecordingConverter()
    pipeline, _, _ = _pipeline(
        tmp_path, converter=converter, store=EphemeralStore(directory=temp_dir)
    )

    asyncio.run(pipeline.process(source))
    bad = _source(tmp_path / "y.css", ".y {")
    asyncio.run(pipeline.process(bad))

    assert len(converter.seen) == 2
    for path, existed in converter.seen:
        assert existed is True
        assert path.parent == temp_dir
        assert path.suffix == ".css"
    assert list(temp_dir.iterdir()) == []


def test_rerun_produces_identical_artifacts(tmp_path: Path) -> None:
    sources = [
        _source(tmp_path / "one.css", ".one { color: red; }\n.two { color: blue; }"),
        _source(tmp_path / "two.css", "#id .three { color: red; }"),
    ]
    pipeline, _, _ = _pipeline(tmp_path)

    asyncio.run(run_batch(pipeline, sources))
    first = [(tmp_path / f"{p.name}.flow").read_bytes() for p in sources]
    asyncio.run(run_batch(pipeline, sources))
    second = [(tmp_path / f"{p.name}.flow").read_bytes() for p in sources]

    assert first == second


def test_artifact_is_overwritten_unconditionally(tmp_path: Path) -> None:
    source = _source(tmp_path / "x.css", ".x { color: red; }")
    artifact = tmp_path / "x.css.flow"
    artifact.write_text("stale", encoding="utf-8")
    pipeline, _, _ = _pipeline(tmp_path)

    asyncio.run(pipeline.process(source))

    assert artifact.read_text(encoding="utf-8") == print_flow_definition(["x"])


def test_custom_declaration_suffix(tmp_path: Path) -> None:
    source = _source(tmp_path / "x.css", ".x { color: red; }")
    pipeline, out, _ = _pipeline(tmp_path, suffix=".js.flow")

    asyncio.run(pipeline.process(source))

    assert (tmp_path / "x.css.js.flow").exists()
    assert out.getvalue() == "[Wrote] ./x.css.js.flow\n"


def test_max_concurrency_caps_in_flight_conversions(tmp_path: Path) -> None:
    sources = [_source(tmp_path / f"s{index}.css", ".s { color: red; }") for index in range(6)]
    compiler = PassthroughCompiler(delay=0.05)
    pipeline, _, _ = _pipeline(tmp_path, compiler=compiler)

    outcomes = asyncio.run(run_batch(pipeline, sources, max_concurrency=2))

    assert all(outcome.ok for outcome in outcomes)
    assert [outcome.source for outcome in outcomes] == sources
    assert compiler.peak <= 2


def test_outcomes_are_recorded_in_event_log(tmp_path: Path) -> None:
    good = _source(tmp_path / "good.css", ".good { color: red; }")
    bad = _source(tmp_path / "bad.css", ".bad {")
    logger = JsonlEventLogger(tmp_path / "logs" / "events.jsonl")
    pipeline, _, _ = _pipeline(tmp_path, event_logger=logger, mode="watch")

    asyncio.run(run_batch(pipeline, [good, bad]))

    events = sorted(logger.read(), key=lambda event: str(event["source"]))
    assert [event["ok"] for event in events] == [False, True]
    assert events[0]["artifact"] is None
    assert str(events[0]["error"]).startswith("Unbalanced braces")
    assert events[1]["artifact"] == str(tmp_path / "good.css.flow")
    assert {event["mode"] for event in events} == {"watch"}


def test_event_log_failure_does_not_abort_the_batch(tmp_path: Path) -> None:
    sources = [
        _source(tmp_path / f"{name}.css", f".{name} {{ color: red; }}") for name in ("a", "b", "c")
    ]
    log_path = tmp_path / "events.jsonl"
    log_path.mkdir()
    pipeline, out, err = _pipeline(tmp_path, event_logger=JsonlEventLogger(log_path))

    outcomes = asyncio.run(run_batch(pipeline, sources))

    assert [outcome.ok for outcome in outcomes] == [True, True, True]
    for name in ("a", "b", "c"):
        assert (tmp_path / f"{name}.css.flow").exists()
    assert len(out.getvalue().splitlines()) == 3
    error_lines = err.getvalue().splitlines()
    assert len(error_lines) == 3
    assert all(
        line.startswith(f"[Error] Could not write event log {log_path}: ") for line in error_lines
    )
