#!filepath: tycoon/observability/timeline_reporter.py
from typing import Dict

from tycoon.utils.logger import logs


class TimelineReporter:
    """
    Scheduler timeline 报告：
    - subsystem → 累计耗时 / 调用次数
    """

    def __init__(self, timeline: Dict[str, float], calls: Dict[str, int], title: str):
        self.timeline = timeline
        self.calls = calls
        self.title = title

    def lines(self) -> list[str]:
        out = []
        total = 0.0
        for name, sec in self.timeline.items():
            n = self.calls.get(name, 0)
            out.append(f"{str(name):<24} {n:>8}x {sec:>10.4f}s")
            total += sec
        out.append(f"{'Total':<24} {'':>9} {total:>10.4f}s")
        return out

    def print(self) -> None:
        logs.info(f"[Timeline] ===== Scheduler timeline: {self.title} =====")
        for line in self.lines():
            logs.info(f"[Timeline] {line}")
        logs.info("[Timeline] ===========================================")
