#!filepath: tests/observability/test_metrics.py
from tycoon.observability.metrics import MetricRecorder
from tycoon.observability.timer import Timer


def test_record_and_incr():
    m = MetricRecorder()

    m.record("play_time_seconds", 12.5)
    m.incr("ticks_run")
    m.incr("ticks_run", 4)

    assert m.get("play_time_seconds") == 12.5
    assert m.get("ticks_run") == 5
    assert m.get("missing", 0) == 0


def test_disabled_recorder_ignores_everything():
    m = MetricRecorder(enabled=False)

    m.record("a", 1)
    m.incr("b")

    assert m.metrics == {}


def test_timer_unknown_name_is_zero():
    t = Timer()

    assert t.end("never_started") == 0.0

    t.start("x")
    assert t.end("x") >= 0.0
