#!filepath: tycoon/config/simulation_config.py
from __future__ import annotations

from typing import List

from pydantic import BaseModel, Field


class RateEntryConfig(BaseModel):
    """rate table 单行：handler 在 tick_count % interval == offset 时触发"""
    name: str
    interval: int = Field(..., ge=1)
    offset: int = Field(default=0, ge=0)


def default_rate_table() -> List[RateEntryConfig]:
    rows = [
        ("research_timer", 1, 0),
        ("automation_collect", 5, 3),
        ("delivery_check", 10, 0),
        ("autosave", 30, 0),
        ("order_refresh", 60, 0),
        ("automation_assign", 60, 30),
        ("master_tool_check", 120, 0),
        ("event_check", 300, 0),
        ("network_score", 300, 100),
        ("network_contribution", 300, 200),
        ("network_finalize", 300, 250),
    ]
    return [RateEntryConfig(name=n, interval=i, offset=o) for n, i, o in rows]


class SimulationConfig(BaseModel):
    """
    SimulationConfig

    - tick_seconds: 一个 tick 代表的模拟秒数（固定 1.0）
    - rate_table: 低频子系统调度表（数据驱动，不写魔法数字）
    - seed: 事件 / 订单 / 补给随机源种子，None = 非确定
    """
    tick_seconds: float = Field(default=1.0, gt=0)
    rate_table: List[RateEntryConfig] = Field(default_factory=default_rate_table)
    seed: int | None = None
