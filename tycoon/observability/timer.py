#!filepath: tycoon/observability/timer.py
import time
from typing import Dict


class Timer:
    """
    perf_counter 计时器（按名字配对 start / end）
    """

    def __init__(self, enabled: bool = True):
        self.enabled = enabled
        self._open: Dict[str, float] = {}

    def start(self, name: str) -> None:
        if self.enabled:
            self._open[name] = time.perf_counter()

    def end(self, name: str) -> float:
        """返回耗时秒数；未 start 过的名字返回 0"""
        began = self._open.pop(name, None)
        if not self.enabled or began is None:
            return 0.0
        return time.perf_counter() - began
