from __future__ import annotations

from typing import List

from tycoon.core.catalog import Catalog
from tycoon.core.events import MasterToolUnlockedEvent
from tycoon.core.ledger import Ledger
from tycoon.engine.effects import EffectAggregator
from tycoon.utils.logger import logs


class MasterTools:
    """收藏品：达到终身收入 / 等级门槛后解锁，提供被动收入加成"""

    def __init__(self, catalog: Catalog):
        self.catalog = catalog

    def check(self, ledger: Ledger, effects: EffectAggregator) -> List[MasterToolUnlockedEvent]:
        unlocked: List[MasterToolUnlockedEvent] = []

        for tool in self.catalog.master_tools.values():
            if tool.id in ledger.collected_master_tools:
                continue
            if ledger.total_money_earned < tool.min_lifetime_earnings:
                continue
            if ledger.player_level < tool.min_level:
                continue

            ledger.collected_master_tools.add(tool.id)
            unlocked.append(MasterToolUnlockedEvent(tool_id=tool.id))
            logs.info(f"[MasterTools] unlocked {tool.id} (+{tool.income_bonus})")

        if unlocked:
            effects.invalidate()
        return unlocked
