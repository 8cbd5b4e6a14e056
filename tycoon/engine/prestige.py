from __future__ import annotations

from decimal import Decimal, ROUND_FLOOR, ROUND_HALF_UP
from typing import Callable, Optional

from tycoon.config.balance_config import BalanceConfig
from tycoon.core.catalog import Catalog, TierRule
from tycoon.core.events import PrestigeCompletedEvent
from tycoon.core.ledger import Ledger
from tycoon.core.types import PrestigeTier
from tycoon.engine.effects import EffectAggregator
from tycoon.engine.resets import reset_run
from tycoon.utils.logger import logs

"""
{#!filepath: tycoon/engine/prestige.py}

PrestigeService (FINAL / FROZEN)

NONE → BRONZE → SILVER → GOLD（current_tier = 历史最高，只增不减）

do_prestige(tier):
  1. points = floor(sqrt(total_money_earned / 100_000)) × tier.point_multiplier
  2. points → 可花费 + 终身
  3. tier 计数 +1；tier > current_tier 时提升
  4. permanent_multiplier += tier.permanent_bonus（3 位小数，clamp [1, max]）
  5. reset_run（Bronze 清空研究，Silver / Gold 保留）
  6. persist + invalidate

guard: 等级 + 终身收入 + 上一档完成次数（Silver 需 1× Bronze，Gold 需 1× Silver）
每次调用都基于当前 Ledger 重新计算，不缓存。
"""

POINTS_DIVISOR = Decimal("100000")
MULTIPLIER_QUANTUM = Decimal("0.001")
ONE = Decimal("1")


class PrestigeService:
    def __init__(
        self,
        catalog: Catalog,
        balance: BalanceConfig,
        effects: EffectAggregator,
        persist: Optional[Callable[[Ledger], None]] = None,
    ):
        self.catalog = catalog
        self.balance = balance
        self.effects = effects
        self.persist = persist

    # --------------------------------------------------
    # guard
    # --------------------------------------------------
    def _rule(self, tier: PrestigeTier) -> Optional[TierRule]:
        return self.catalog.tier(tier)

    def can_prestige(self, ledger: Ledger, tier: PrestigeTier) -> bool:
        rule = self._rule(tier)
        if rule is None:
            return False
        if rule.required_previous_count and tier > PrestigeTier.BRONZE:
            previous = PrestigeTier(tier - 1)
            if ledger.prestige.tier_count(previous) < rule.required_previous_count:
                return False
        return (
            ledger.player_level >= rule.required_level
            and ledger.total_money_earned >= rule.min_lifetime_earnings
        )

    def prestige_points(self, ledger: Ledger, tier: PrestigeTier) -> int:
        rule = self._rule(tier)
        if rule is None or ledger.total_money_earned <= 0:
            return 0
        root = (ledger.total_money_earned / POINTS_DIVISOR).sqrt()
        return int(root.to_integral_value(rounding=ROUND_FLOOR)) * rule.point_multiplier

    # --------------------------------------------------
    # transition
    # --------------------------------------------------
    def do_prestige(self, ledger: Ledger, tier: PrestigeTier) -> Optional[PrestigeCompletedEvent]:
        if not self.can_prestige(ledger, tier):
            logs.debug(f"[Prestige] guard failed for {tier.name}")
            return None

        rule = self._rule(tier)
        record = ledger.prestige

        points = self.prestige_points(ledger, tier)
        record.prestige_points += points
        record.total_prestige_points += points

        if tier == PrestigeTier.BRONZE:
            record.bronze_count += 1
        elif tier == PrestigeTier.SILVER:
            record.silver_count += 1
        else:
            record.gold_count += 1
        if tier > record.current_tier:
            record.current_tier = tier

        multiplier = (record.permanent_multiplier + rule.permanent_bonus).quantize(
            MULTIPLIER_QUANTUM, rounding=ROUND_HALF_UP
        )
        record.permanent_multiplier = max(ONE, min(multiplier, self.balance.permanent_multiplier_max))

        reset_run(ledger, self.catalog, self.effects, self.balance, wipe_research=not rule.keeps_research)

        logs.info(
            f"[Prestige] {tier.name} done: +{points} pts, "
            f"multiplier={record.permanent_multiplier}"
        )

        if self.persist is not None:
            self.persist(ledger)
        return PrestigeCompletedEvent(tier=int(tier), points=points)

    # --------------------------------------------------
    # prestige shop
    # --------------------------------------------------
    def buy_upgrade(self, ledger: Ledger, upgrade_id: str) -> bool:
        upgrade = self.catalog.upgrades.get(upgrade_id)
        record = ledger.prestige
        if upgrade is None or upgrade_id in record.purchased_upgrades:
            return False
        if record.prestige_points < upgrade.cost:
            return False

        record.prestige_points -= upgrade.cost
        record.purchased_upgrades.add(upgrade_id)
        self.effects.invalidate()

        logs.info(f"[Prestige] bought {upgrade_id} ({upgrade.cost} pts)")
        return True
