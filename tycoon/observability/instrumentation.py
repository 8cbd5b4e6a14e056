#!filepath: tycoon/observability/instrumentation.py
from __future__ import annotations

from collections import OrderedDict
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Dict

from tycoon.observability.metrics import MetricRecorder
from tycoon.observability.timer import Timer
from tycoon.observability.timeline_reporter import TimelineReporter


@dataclass
class Instrumentation:
    """
    Scheduler Instrumentation

    规则：
    1. timeline 按 subsystem 名字累加（同一 handler 每 N tick 跑一次）
    2. record=False 的 timer 只划定 wall-time 边界，不写 timeline
    3. 本身不在热路径打日志；报告只在 stop() 时输出
    """

    enabled: bool = True

    def __post_init__(self):
        self._timer = Timer(enabled=self.enabled)
        self.metrics = MetricRecorder(enabled=self.enabled)

        self.timeline: Dict[str, float] = OrderedDict()
        self.calls: Dict[str, int] = OrderedDict()

    def timer(self, name: str, *, record: bool = True):
        inst = self

        @contextmanager
        def _ctx():
            if not inst.enabled:
                yield
                return

            inst._timer.start(name)
            try:
                yield
            finally:
                elapsed = inst._timer.end(name)
                if record:
                    inst.timeline[name] = inst.timeline.get(name, 0.0) + elapsed
                    inst.calls[name] = inst.calls.get(name, 0) + 1

        return _ctx()

    def generate_timeline_report(self, title: str) -> None:
        if not self.enabled or not self.timeline:
            return
        TimelineReporter(self.timeline, self.calls, title).print()


class NoOpInstrumentation:
    """observability 关闭时使用"""

    enabled = False

    def __init__(self):
        self.metrics = MetricRecorder(enabled=False)
        self.timeline: Dict[str, float] = {}
        self.calls: Dict[str, int] = {}

    def timer(self, name: str, *, record: bool = True):
        return _NoOpTimer()

    def generate_timeline_report(self, title: str) -> None:
        return None


class _NoOpTimer:
    def __enter__(self):
        pass

    def __exit__(self, exc_type, exc, tb):
        pass
