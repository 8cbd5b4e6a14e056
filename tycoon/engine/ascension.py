from __future__ import annotations

from decimal import Decimal
from typing import Callable, Optional

from tycoon.config.balance_config import BalanceConfig
from tycoon.core.catalog import Catalog
from tycoon.core.events import AscensionCompletedEvent
from tycoon.core.ledger import Ledger, PrestigeRecord
from tycoon.engine import perks
from tycoon.engine.effects import EffectAggregator
from tycoon.engine.resets import reset_deep
from tycoon.utils.logger import logs

"""
{#!filepath: tycoon/engine/ascension.py}

AscensionService (FINAL / FROZEN)

guard: 最高 prestige tier 完成次数 >= 3

do_ascension:
  1. points = 1 + floor(ascension_level / 2)；可花费 + 终身；level += 1
  2. prestige record 清零（total_prestige_points 保留）
  3. reset_deep（prestige reset 的超集）
  4. persist + invalidate

perk getter：level 0 → 默认值；否则 values[level − 1]
"""


class AscensionService:
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

    def can_ascend(self, ledger: Ledger) -> bool:
        top = ledger.prestige.tier_count(self.catalog.top_tier)
        return top >= self.balance.ascension_required_top_tier_count

    @staticmethod
    def ascension_points(ledger: Ledger) -> int:
        return 1 + ledger.ascension.ascension_level // 2

    def do_ascension(self, ledger: Ledger) -> Optional[AscensionCompletedEvent]:
        if not self.can_ascend(ledger):
            logs.debug("[Ascension] guard failed")
            return None

        record = ledger.ascension
        points = self.ascension_points(ledger)
        record.ascension_points += points
        record.total_ascension_points += points
        record.ascension_level += 1

        lifetime = ledger.prestige.total_prestige_points
        ledger.prestige = PrestigeRecord(total_prestige_points=lifetime)

        reset_deep(ledger, self.catalog, self.effects, self.balance)

        logs.info(f"[Ascension] level {record.ascension_level}: +{points} pts")

        if self.persist is not None:
            self.persist(ledger)
        return AscensionCompletedEvent(ascension_level=record.ascension_level, points=points)

    # --------------------------------------------------
    # perks
    # --------------------------------------------------
    def buy_perk(self, ledger: Ledger, perk_id: str) -> bool:
        perk = self.catalog.perks.get(perk_id)
        if perk is None:
            return False

        record = ledger.ascension
        level = record.perk_level(perk_id)
        if level >= perk.max_level:
            return False

        cost = perk.costs[level]
        if record.ascension_points < cost:
            return False

        record.ascension_points -= cost
        record.perk_levels[perk_id] = level + 1

        logs.info(f"[Ascension] perk {perk_id} -> {level + 1} ({cost} pts)")
        return True

    def start_capital_multiplier(self, ledger: Ledger) -> Decimal:
        return perks.start_capital_multiplier(ledger, self.catalog)

    def research_duration_reduction(self, ledger: Ledger) -> Decimal:
        return perks.research_duration_reduction(ledger, self.catalog)

    def premium_bonus(self, ledger: Ledger) -> Decimal:
        return perks.premium_bonus(ledger, self.catalog)

    def start_reputation(self, ledger: Ledger) -> int:
        return perks.start_reputation(ledger, self.catalog, self.balance.start_reputation)
