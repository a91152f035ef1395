from __future__ import annotations

import asyncio
import io
import json
import re
from datetime import datetime, timezone

from domain.models import RunContext, StatusUpdate
from domain.services import DebugRunManager, StatusReporter
from infra.interaction import ConsoleStatusObserver
from infra.runtime import StructuredLogger, SystemClock, TimestampRunIdGenerator
from test.mocks import (
    FakeWizardPage,
    FixedClock,
    InMemoryDebugArtifactStore,
    InMemoryLogger,
    RecordingStatusObserver,
    h,
)


def test_structured_logger_prints_json_lines() -> None:
    stream = io.StringIO()
    logger = StructuredLogger(stream=stream)

    logger.info("field_handled", handler="text", question="City")
    logger.warning("field_failed", path=datetime(2024, 1, 1))

    first, second = [json.loads(line) for line in stream.getvalue().splitlines()]
    assert first["level"] == "info"
    assert first["message"] == "field_handled"
    assert first["fields"] == {"handler": "text", "question": "City"}
    assert second["fields"]["path"] == "2024-01-01 00:00:00"


def test_structured_logger_debug_needs_verbose() -> None:
    quiet, loud = io.StringIO(), io.StringIO()
    StructuredLogger(stream=quiet).debug("page_scan", scan=1)
    StructuredLogger(verbose=True, stream=loud).debug("page_scan", scan=1)
    assert quiet.getvalue() == ""
    assert json.loads(loud.getvalue())["level"] == "debug"


def test_system_clock_is_timezone_aware() -> None:
    assert SystemClock().now().tzinfo is timezone.utc


def test_run_ids_sort_by_start_time() -> None:
    ids = TimestampRunIdGenerator(FixedClock(datetime(2024, 5, 1, 9, 30, 0)))
    first, second = ids.new_run_id(), ids.new_run_id()
    assert re.fullmatch(r"run-20240501-093000-[0-9a-f]{6}", first)
    assert first != second


def test_console_observer_formats_update() -> None:
    stream = io.StringIO()
    ConsoleStatusObserver(stream).publish(
        StatusUpdate(stage="page", activity="filled", details={"processed": 3, "failed": 0})
    )
    ConsoleStatusObserver(stream).publish(StatusUpdate(stage="wizard", activity="finished", message="Stop requested"))
    assert stream.getvalue().splitlines() == [
        "[page] filled (failed=0, processed=3)",
        "[wizard] finished: Stop requested",
    ]


def test_status_reporter_snapshots_stats_per_update() -> None:
    observer = RecordingStatusObserver()
    reporter = StatusReporter(observer)

    reporter.publish("page", "filling", page_index=0)
    reporter.stats.primary_clicks += 1
    reporter.publish("page", "filled", page_index=0)

    assert [u.stats["primary_clicks"] for u in observer.updates] == [0, 1]
    assert observer.updates[0].details == {"page_index": 0}
    assert len(reporter.history) == 2


def test_status_reporter_survives_observer_failure() -> None:
    logger = InMemoryLogger()
    reporter = StatusReporter(RecordingStatusObserver(fail=True), logger=logger)

    update = reporter.publish("wizard", "started")

    assert update.stage == "wizard"
    assert "status_observer_failed" in logger.messages("warning")


def test_debug_manager_writes_only_for_debug_runs() -> None:
    async def main() -> None:
        store = InMemoryDebugArtifactStore()
        manager = DebugRunManager(store)
        page = FakeWizardPage(h("p", text="Hello"))
        debug_run = RunContext(run_id="r1", is_debug=True)
        normal_run = RunContext(run_id="r2")

        assert manager.start(debug_run) == "logs/run_r1"
        assert await manager.capture_step(debug_run, page, "page_1_filled") == "logs/run_r1/page_1_filled.html"
        assert await manager.capture_step(normal_run, page, "page_1_filled") is None
        assert manager.finish(normal_run, {"outcome": "failed"}) is None
        manager.finish(debug_run, {"outcome": "submitted"})

        assert [(run, step) for run, step, _ in store.snapshots] == [("r1", "page_1_filled")]
        assert "Hello" in store.snapshots[0][2]
        assert store.metadata == [{"outcome": "submitted"}]

    asyncio.run(main())
