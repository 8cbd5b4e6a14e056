from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from tycoon.config.balance_config import BalanceConfig
from tycoon.core.ledger import Ledger, ZERO
from tycoon.engine.effects import EffectAggregator

"""
{#!filepath: tycoon/engine/income.py}

IncomePipeline (FINAL / FROZEN)

数学语义（顺序固定，不允许重排）：

  base   = Σ unit.base_income_per_second × permanent_multiplier
  gross  = base
           × (1 + income_bonus)
           × (1 + min(research_efficiency, 0.50))
           × event.income_multiplier
           × (1 + master_bonus) × (1 + min(guild_bonus, guild_cap))
  gross  = min(gross, base × 3.0)            # 对 base 封顶，而不是对上一步
  costs  = Σ unit.running_cost_per_second
           × (1 − min(cost_reduction, 0.50)) × event.cost_multiplier
  net    = gross − costs
  net>0  : × speed(2) × rush(2 + rush_bonus)  # boost 不放大亏损
  money  = money + net   (net ≥ 0)
         = max(0, money + net)               (net < 0，静默吸收)
"""


@dataclass(frozen=True)
class TickResult:
    base_income: Decimal
    gross_income: Decimal
    costs: Decimal
    net: Decimal
    capped: bool
    applied: Decimal = ZERO

    @property
    def effective_multiplier(self) -> Decimal:
        if self.base_income <= 0:
            return Decimal("1")
        return self.gross_income / self.base_income


class IncomePipeline:
    def __init__(self, balance: BalanceConfig):
        self.balance = balance

    # --------------------------------------------------
    # steps 1..9（纯计算，不改 Ledger）
    # --------------------------------------------------
    def compute(
        self,
        ledger: Ledger,
        effects: EffectAggregator,
        now: float,
        seconds: Decimal = Decimal("1"),
    ) -> TickResult:
        b = self.balance

        # 1. unmodified base
        raw = sum((u.base_income_per_second for u in ledger.production_units), ZERO)
        base = raw * ledger.prestige.permanent_multiplier * seconds
        gross = base

        # 2. permanent upgrades
        gross *= 1 + effects.income_bonus()

        # 3. research efficiency（单独封顶）
        gross *= 1 + min(effects.research_efficiency_bonus(), b.research_efficiency_cap)

        # 4. active event
        event = ledger.current_event(now)
        if event is not None:
            gross *= event.income_multiplier

        # 5. collectibles + guild
        gross *= 1 + effects.master_bonus()
        guild = max(ZERO, min(ledger.guild_income_bonus, b.guild_income_cap))
        gross *= 1 + guild

        # 6. hard cap vs. step-1 base
        capped = False
        ceiling = base * b.income_cap_multiplier
        if base > 0 and gross > ceiling:
            gross = ceiling
            capped = True

        # 7. costs
        costs = sum((u.running_cost_per_second for u in ledger.production_units), ZERO) * seconds
        costs *= 1 - min(effects.cost_reduction(), b.cost_reduction_cap)
        if event is not None:
            costs *= event.cost_multiplier

        # 8. net
        net = gross - costs

        # 9. boosts（只放大盈利）
        if net > 0 and ledger.is_speed_boost_active(now):
            net *= b.speed_boost_multiplier
        if net > 0 and ledger.is_rush_boost_active(now):
            net *= b.rush_base_multiplier + effects.rush_bonus()

        return TickResult(
            base_income=base,
            gross_income=gross,
            costs=costs,
            net=net,
            capped=capped,
        )

    # --------------------------------------------------
    # steps 10..11
    # --------------------------------------------------
    def apply(self, ledger: Ledger, result: TickResult, seconds: Decimal = Decimal("1")) -> TickResult:
        if result.net >= 0:
            ledger.add_money(result.net)
            applied = result.net
        else:
            applied = -ledger.absorb_costs(-result.net)

        self._attribute(ledger, seconds)

        return TickResult(
            base_income=result.base_income,
            gross_income=result.gross_income,
            costs=result.costs,
            net=result.net,
            capped=result.capped,
            applied=applied,
        )

    def run(
        self,
        ledger: Ledger,
        effects: EffectAggregator,
        now: float,
        seconds: Decimal = Decimal("1"),
    ) -> TickResult:
        return self.apply(ledger, self.compute(ledger, effects, now, seconds), seconds)

    @staticmethod
    def _attribute(ledger: Ledger, seconds: Decimal) -> None:
        """
        统计口径：按 step 1 的原始贡献记账，与封顶无关。
        """
        pm = ledger.prestige.permanent_multiplier
        for unit in ledger.production_units:
            raw = unit.base_income_per_second
            if raw <= 0:
                continue
            unit.total_earned += raw * pm * seconds
            per_worker = unit.income_per_worker * pm * seconds
            for worker in unit.workers:
                if worker.is_working:
                    worker.total_earned += per_worker * worker.efficiency
