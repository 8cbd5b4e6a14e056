from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, Optional

from tycoon.core.catalog import Catalog
from tycoon.core.ledger import Ledger, ProductionUnit, ResearchEffect, ZERO
from tycoon.core.types import StructureKind, WorkerTier
from tycoon.engine.memo import Memo

"""
{#!filepath: tycoon/engine/effects.py}

EffectAggregator (FINAL / FROZEN)

Answers ONE question:
- Given what has been purchased / researched / built / collected,
  what are the scalar bonuses right now?

Contract:
- Getters are read-only and cheap: they read one cached EffectSnapshot.
- Recompute is O(#purchased upgrades + #completed research + #structures
  + #collected tools), never O(ticks).
- invalidate() MUST follow: buying a permanent upgrade, completing research,
  building/upgrading a structure, collecting a master tool, unlocking a
  production unit, prestige, ascension.

Caps are NOT applied here (raw sums); the income pipeline owns the caps.
"""


@dataclass(frozen=True)
class EffectSnapshot:
    income_bonus: Decimal = ZERO
    research_efficiency: Decimal = ZERO
    cost_reduction: Decimal = ZERO
    rush_bonus: Decimal = ZERO
    delivery_speed_bonus: Decimal = ZERO
    upgrade_discount: Decimal = ZERO
    extra_start_money: Decimal = ZERO
    starting_worker_tier: WorkerTier = WorkerTier.E
    master_bonus: Decimal = ZERO
    extra_worker_slots: int = 0
    extra_order_slots: int = 0
    order_reward_bonus: Decimal = ZERO
    fatigue_recovery_bonus: Decimal = ZERO
    special_units: Dict[str, ProductionUnit] = field(default_factory=dict)


class EffectAggregator:
    def __init__(self, ledger: Ledger, catalog: Catalog):
        self._ledger = ledger
        self._catalog = catalog
        self._memo: Memo[EffectSnapshot] = Memo(self._compute)

    # --------------------------------------------------
    # invalidation
    # --------------------------------------------------
    def invalidate(self) -> None:
        self._memo.bump()

    def rebind(self, ledger: Ledger) -> None:
        """换 Ledger（读档）后必须重新绑定并失效"""
        self._ledger = ledger
        self.invalidate()

    @property
    def generation(self) -> int:
        return self._memo.generation

    @property
    def compute_count(self) -> int:
        return self._memo.compute_count

    # --------------------------------------------------
    # getters
    # --------------------------------------------------
    def snapshot(self) -> EffectSnapshot:
        return self._memo.get()

    def income_bonus(self) -> Decimal:
        return self.snapshot().income_bonus

    def research_efficiency_bonus(self) -> Decimal:
        return self.snapshot().research_efficiency

    def cost_reduction(self) -> Decimal:
        return self.snapshot().cost_reduction

    def rush_bonus(self) -> Decimal:
        return self.snapshot().rush_bonus

    def delivery_speed_bonus(self) -> Decimal:
        return self.snapshot().delivery_speed_bonus

    def upgrade_discount(self) -> Decimal:
        return self.snapshot().upgrade_discount

    def extra_start_money(self) -> Decimal:
        return self.snapshot().extra_start_money

    def starting_worker_tier(self) -> WorkerTier:
        return self.snapshot().starting_worker_tier

    def master_bonus(self) -> Decimal:
        return self.snapshot().master_bonus

    def extra_worker_slots(self) -> int:
        return self.snapshot().extra_worker_slots

    def extra_order_slots(self) -> int:
        return self.snapshot().extra_order_slots

    def order_reward_bonus(self) -> Decimal:
        return self.snapshot().order_reward_bonus

    def fatigue_recovery_bonus(self) -> Decimal:
        return self.snapshot().fatigue_recovery_bonus

    def special_unit(self, role: str) -> Optional[ProductionUnit]:
        return self.snapshot().special_units.get(role)

    def special_units(self) -> Dict[str, ProductionUnit]:
        return dict(self.snapshot().special_units)

    # --------------------------------------------------
    # recompute
    # --------------------------------------------------
    def _compute(self) -> EffectSnapshot:
        ledger = self._ledger
        catalog = self._catalog

        # ① prestige shop
        income = rush = delivery = discount = start_money = shop_cost = ZERO
        worker_tier = WorkerTier.E
        for upgrade_id in ledger.prestige.purchased_upgrades:
            upgrade = catalog.upgrades.get(upgrade_id)
            if upgrade is None:
                continue
            eff = upgrade.effect
            income += eff.income_bonus
            shop_cost += eff.cost_reduction
            rush += eff.rush_bonus
            delivery += eff.delivery_speed_bonus
            discount += eff.upgrade_discount
            start_money += eff.extra_start_money
            if eff.starting_worker_tier is not None and eff.starting_worker_tier > worker_tier:
                worker_tier = eff.starting_worker_tier

        # ② research
        research = ResearchEffect()
        for node in ledger.research_tree:
            if node.is_researched:
                research = research.combine(node.effect)

        # ③ structures
        storage_reduction = ZERO
        structure_worker_slots = structure_order_slots = 0
        reward_bonus = research.reward_bonus
        fatigue_recovery = ZERO
        for structure in ledger.structures:
            if structure.kind == StructureKind.STORAGE:
                storage_reduction += structure.material_cost_reduction
            structure_worker_slots += structure.extra_worker_slots
            structure_order_slots += structure.extra_order_slots
            reward_bonus += structure.order_reward_bonus
            fatigue_recovery += structure.fatigue_recovery_bonus

        # ④ collectibles
        master = ZERO
        for tool_id in ledger.collected_master_tools:
            tool = catalog.master_tools.get(tool_id)
            if tool is not None:
                master += tool.income_bonus

        # ⑤ special-role units（每个 role 只取第一个）
        special: Dict[str, ProductionUnit] = {}
        for unit in ledger.production_units:
            if unit.special_role and unit.special_role not in special:
                special[unit.special_role] = unit

        # storage 只有一半的效果作用在总成本上
        cost_reduction = (
            shop_cost
            + research.cost_reduction
            + research.wage_reduction
            + storage_reduction * Decimal("0.5")
        )

        return EffectSnapshot(
            income_bonus=income,
            research_efficiency=research.efficiency_bonus,
            cost_reduction=cost_reduction,
            rush_bonus=rush,
            delivery_speed_bonus=delivery,
            upgrade_discount=discount,
            extra_start_money=start_money,
            starting_worker_tier=worker_tier,
            master_bonus=master,
            extra_worker_slots=research.extra_worker_slots + structure_worker_slots,
            extra_order_slots=research.extra_order_slots + structure_order_slots,
            order_reward_bonus=reward_bonus,
            fatigue_recovery_bonus=fatigue_recovery,
            special_units=special,
        )
