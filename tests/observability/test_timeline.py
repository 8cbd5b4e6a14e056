#!filepath: tests/observability/test_timeline.py
from loguru import logger

from tycoon.observability.timeline_reporter import TimelineReporter


def test_timeline_log_output():
    reporter = TimelineReporter(
        {"research_timer": 0.0123, "autosave": 0.5},
        {"research_timer": 300, "autosave": 10},
        "300 ticks",
    )

    captured = []
    sink_id = logger.add(lambda msg: captured.append(str(msg)))
    reporter.print()
    logger.remove(sink_id)

    output = "\n".join(captured)
    assert "Scheduler timeline: 300 ticks" in output
    assert "research_timer" in output
    assert "300x" in output
    assert "0.5000" in output


def test_timeline_total_line():
    lines = TimelineReporter({"a": 1.0, "b": 2.0}, {"a": 1, "b": 1}, "t").lines()

    assert lines[-1].startswith("Total")
    assert "3.0000" in lines[-1]
