from __future__ import annotations

from decimal import Decimal
from typing import Optional

from tycoon.config.balance_config import BalanceConfig
from tycoon.core.catalog import (
    Catalog,
    STRUCTURE_BASE_COST,
    UNIT_UPGRADE_BASE_COST,
    UNIT_UPGRADE_GROWTH,
    WORKER_HIRE_COST,
)
from tycoon.core.ledger import (
    Ledger,
    ProductionUnit,
    Structure,
    Worker,
    STRUCTURE_MAX_LEVEL,
)
from tycoon.core.types import AutomationFeature, StructureKind, WorkerTier
from tycoon.engine.automation import AutomationDispatcher
from tycoon.engine.effects import EffectAggregator
from tycoon.utils.logger import logs

"""
{#!filepath: tycoon/engine/economy.py}

Economy: player actions (try-action contract)

- 每个 action 返回 bool：资源不足 / 前置不满足 → False，绝不抛异常
- 失败时 Ledger 不变（先检查，再扣费，再修改）
- 影响被动加成的 action（解锁单位、建造）负责 invalidate
- 经 Game 调用时运行在 scheduler.run_exclusive 内，与 tick 串行
"""

CENT = Decimal("0.01")
RUSH_PREMIUM_COST = 10


class Economy:
    def __init__(
        self,
        catalog: Catalog,
        balance: BalanceConfig,
        effects: EffectAggregator,
        automation: AutomationDispatcher,
    ):
        self.catalog = catalog
        self.balance = balance
        self.effects = effects
        self.automation = automation

    # --------------------------------------------------
    # currency
    # --------------------------------------------------
    @staticmethod
    def try_spend(ledger: Ledger, amount: Decimal) -> bool:
        return ledger.try_spend(amount)

    # --------------------------------------------------
    # production units / workers
    # --------------------------------------------------
    def unlock_unit(self, ledger: Ledger, kind: str) -> bool:
        template = self.catalog.units.get(kind)
        if template is None or ledger.unit(kind) is not None:
            return False
        if ledger.player_level < template.required_level:
            return False
        if not ledger.try_spend(template.unlock_cost):
            return False

        ledger.production_units.append(
            ProductionUnit(
                id=kind,
                kind=kind,
                base_income=template.base_income,
                base_running_cost=template.base_running_cost,
                special_role=template.special_role,
            )
        )
        self.effects.invalidate()
        logs.info(f"[Economy] unlocked unit {kind}")
        return True

    def hire_worker(self, ledger: Ledger, unit_id: str, tier: WorkerTier = WorkerTier.E) -> bool:
        unit = ledger.unit(unit_id)
        if unit is None:
            return False
        if len(unit.workers) >= unit.max_workers(self.effects.extra_worker_slots()):
            return False
        if not ledger.try_spend(WORKER_HIRE_COST[tier]):
            return False

        unit.workers.append(Worker.create(tier))
        logs.debug(f"[Economy] hired {tier.name} worker for {unit_id}")
        return True

    def upgrade_cost(self, unit: ProductionUnit) -> Decimal:
        discount = min(self.effects.upgrade_discount(), self.balance.cost_reduction_cap)
        cost = UNIT_UPGRADE_BASE_COST * unit.base_income * UNIT_UPGRADE_GROWTH ** (unit.level - 1)
        return (cost * (1 - discount)).quantize(CENT)

    def upgrade_unit(self, ledger: Ledger, unit_id: str) -> bool:
        unit = ledger.unit(unit_id)
        if unit is None:
            return False
        if not ledger.try_spend(self.upgrade_cost(unit)):
            return False

        unit.level += 1
        logs.debug(f"[Economy] {unit_id} -> level {unit.level}")
        return True

    @staticmethod
    def wake_worker(ledger: Ledger, worker_id: str) -> bool:
        worker = next((w for w in ledger.all_workers() if w.id == worker_id), None)
        if worker is None or not worker.is_resting:
            return False
        worker.is_resting = False
        return True

    # --------------------------------------------------
    # structures
    # --------------------------------------------------
    @staticmethod
    def structure_cost(kind: StructureKind, current_level: int) -> Decimal:
        return STRUCTURE_BASE_COST[kind] * (2 ** current_level)

    def build_structure(self, ledger: Ledger, kind: StructureKind) -> bool:
        """level 0 → 建造，否则升级一级（上限 5）"""
        structure: Optional[Structure] = ledger.structure(kind)
        level = structure.level if structure is not None else 0
        if level >= STRUCTURE_MAX_LEVEL:
            return False
        if not ledger.try_spend(self.structure_cost(kind, level)):
            return False

        if structure is None:
            structure = Structure(kind=kind)
            ledger.structures.append(structure)
        structure.level += 1

        self.effects.invalidate()
        logs.info(f"[Economy] {kind.value} -> level {structure.level}")
        return True

    # --------------------------------------------------
    # boosts
    # --------------------------------------------------
    def activate_rush(self, ledger: Ledger, now: float) -> bool:
        if ledger.premium_currency < RUSH_PREMIUM_COST:
            return False
        ledger.premium_currency -= RUSH_PREMIUM_COST
        ledger.rush_boost_until = max(ledger.rush_boost_until, now) + self.balance.rush_duration_seconds
        logs.info(f"[Economy] rush active until {ledger.rush_boost_until:.0f}")
        return True

    @staticmethod
    def activate_speed_boost(ledger: Ledger, now: float, seconds: float) -> bool:
        if seconds <= 0:
            return False
        ledger.speed_boost_until = max(ledger.speed_boost_until, now) + seconds
        return True

    # --------------------------------------------------
    # automation flags
    # --------------------------------------------------
    def set_automation(self, ledger: Ledger, feature: AutomationFeature, on: bool) -> bool:
        """打开需要等级门槛；关闭永远成功"""
        if on and ledger.player_level < self.automation.required_level(feature):
            return False
        setattr(ledger.automation, feature.value, on)
        return True
