#!filepath: tycoon/observability/metrics.py
from dataclasses import dataclass, field
from typing import Any, Dict

from tycoon.utils.logger import logs


@dataclass
class MetricRecorder:
    """
    标量指标（冷路径）：
    - record: 覆盖写入并打日志（stop / prestige 等低频时刻）
    - incr:   计数器，不打日志（可在 tick 内调用）
    """
    enabled: bool = True
    metrics: Dict[str, Any] = field(default_factory=dict)

    def record(self, name: str, value: Any) -> None:
        if not self.enabled:
            return
        self.metrics[name] = value
        logs.info(f"[Metric] {name} = {value}")

    def incr(self, name: str, amount: int = 1) -> None:
        if not self.enabled:
            return
        self.metrics[name] = self.metrics.get(name, 0) + amount

    def get(self, name: str, default: Any = None) -> Any:
        return self.metrics.get(name, default)
