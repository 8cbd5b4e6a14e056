from __future__ import annotations

from decimal import Decimal
from typing import List

from tycoon.core.catalog import create_research_tree
from tycoon.core.ledger import (
    BASELINE_UNIT_KIND,
    HUNDRED,
    Ledger,
    STRUCTURE_MAX_LEVEL,
    ZERO,
    baseline_unit,
)
from tycoon.utils.logger import logs

# tycoon/persistence/sanitize.py

ONE = Decimal("1.0")


def _clamp(value, low, high):
    return max(low, min(value, high))


def sanitize(ledger: Ledger, multiplier_max: Decimal = Decimal("20.0")) -> List[str]:
    """
    读档后的修复（clamp，而不是拒绝存档）

    返回被修复的字段名列表（写日志 / 测试断言用）
    """
    fixed: List[str] = []

    def fix(name: str) -> None:
        fixed.append(name)

    # currency
    if ledger.money < 0:
        ledger.money = ZERO
        fix("money")
    if ledger.total_money_earned < 0:
        ledger.total_money_earned = ZERO
        fix("total_money_earned")
    if ledger.total_money_spent < 0:
        ledger.total_money_spent = ZERO
        fix("total_money_spent")
    if ledger.premium_currency < 0:
        ledger.premium_currency = 0
        fix("premium_currency")

    # player
    if ledger.player_level < 1:
        ledger.player_level = 1
        fix("player_level")
    for name in ("current_xp", "total_xp", "orders_completed", "deliveries_claimed", "tick_count"):
        if getattr(ledger, name) < 0:
            setattr(ledger, name, 0)
            fix(name)
    if ledger.total_play_time_seconds < 0:
        ledger.total_play_time_seconds = 0.0
        fix("total_play_time_seconds")

    reputation = _clamp(ledger.reputation, 0, 100)
    if reputation != ledger.reputation:
        ledger.reputation = reputation
        fix("reputation")

    # prestige / ascension
    record = ledger.prestige
    multiplier = _clamp(record.permanent_multiplier, ONE, multiplier_max)
    if multiplier != record.permanent_multiplier:
        record.permanent_multiplier = multiplier
        fix("prestige.permanent_multiplier")
    for name in ("bronze_count", "silver_count", "gold_count", "prestige_points", "total_prestige_points"):
        if getattr(record, name) < 0:
            setattr(record, name, 0)
            fix(f"prestige.{name}")
    for name in ("ascension_level", "ascension_points", "total_ascension_points"):
        if getattr(ledger.ascension, name) < 0:
            setattr(ledger.ascension, name, 0)
            fix(f"ascension.{name}")

    # workers / units
    for unit in ledger.production_units:
        if unit.level < 1:
            unit.level = 1
            fix(f"unit.{unit.id}.level")
        for worker in unit.workers:
            mood = _clamp(worker.mood, ZERO, HUNDRED)
            fatigue = _clamp(worker.fatigue, ZERO, HUNDRED)
            if mood != worker.mood or fatigue != worker.fatigue:
                worker.mood, worker.fatigue = mood, fatigue
                fix(f"worker.{worker.id}")

    if not any(u.kind == BASELINE_UNIT_KIND for u in ledger.production_units):
        ledger.production_units.insert(0, baseline_unit())
        fix("production_units")

    # structures
    for structure in ledger.structures:
        level = _clamp(structure.level, 0, STRUCTURE_MAX_LEVEL)
        if level != structure.level:
            structure.level = level
            fix(f"structure.{structure.kind.value}")

    # research
    if not ledger.research_tree:
        ledger.research_tree = create_research_tree()
        fix("research_tree")

    # active id 必须指向存在且进行中的节点
    if ledger.active_research_id is not None:
        node = ledger.research(ledger.active_research_id)
        if node is None or node.is_researched:
            ledger.active_research_id = None
            fix("active_research_id")

    if fixed:
        logs.warning(f"[Save] sanitize repaired {len(fixed)} field(s): {fixed}")
    return fixed
