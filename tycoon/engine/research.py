from __future__ import annotations

from decimal import Decimal
from typing import Optional

from tycoon.core.catalog import Catalog, ROLE_RESEARCH_SPEED
from tycoon.core.events import ResearchCompletedEvent
from tycoon.core.ledger import Ledger, ResearchNode
from tycoon.engine.effects import EffectAggregator
from tycoon.engine.perks import research_duration_reduction
from tycoon.utils.logger import logs

# tycoon/engine/research.py

CANCEL_REFUND_RATE = Decimal("0.5")
LAB_SPEED_PER_LEVEL = 0.1


class ResearchLab:
    """
    研究树计时器

    - 同一时间最多一个 active research
    - 时长受 ascension perk（timeless research）缩短
    - innovation lab（special role）有工人在岗时加速计时
    - 完成 → effects.invalidate()
    """

    def __init__(self, catalog: Catalog):
        self.catalog = catalog

    def active(self, ledger: Ledger) -> Optional[ResearchNode]:
        if ledger.active_research_id is None:
            return None
        return ledger.research(ledger.active_research_id)

    def can_start(self, ledger: Ledger, research_id: str) -> bool:
        node = ledger.research(research_id)
        if node is None or node.is_researched or node.is_active:
            return False
        if ledger.active_research_id is not None:
            return False
        for prereq in node.prerequisites:
            done = ledger.research(prereq)
            if done is None or not done.is_researched:
                return False
        return ledger.can_afford(node.cost)

    def start(self, ledger: Ledger, research_id: str) -> bool:
        if not self.can_start(ledger, research_id):
            return False

        node = ledger.research(research_id)
        if not ledger.try_spend(node.cost):
            return False

        reduction = float(research_duration_reduction(ledger, self.catalog))
        node.is_active = True
        node.remaining_seconds = node.duration_seconds * (1.0 - reduction)
        ledger.active_research_id = node.id

        logs.info(f"[Research] start {node.id} ({node.remaining_seconds:.0f}s)")
        return True

    def cancel(self, ledger: Ledger) -> bool:
        node = self.active(ledger)
        if node is None:
            return False

        refund = node.cost * CANCEL_REFUND_RATE
        ledger.money += refund
        node.is_active = False
        node.remaining_seconds = 0.0
        ledger.active_research_id = None

        logs.info(f"[Research] cancel {node.id} refund={refund}")
        return True

    def speed_factor(self, effects: EffectAggregator) -> float:
        lab = effects.special_unit(ROLE_RESEARCH_SPEED)
        if lab is None or not any(w.is_working for w in lab.workers):
            return 1.0
        return 1.0 + LAB_SPEED_PER_LEVEL * lab.level

    def advance(
        self,
        ledger: Ledger,
        effects: EffectAggregator,
        seconds: float,
    ) -> Optional[ResearchCompletedEvent]:
        node = self.active(ledger)
        if node is None:
            # active_research_id 指向不存在的节点（旧存档）
            ledger.active_research_id = None
            return None

        node.remaining_seconds -= seconds * self.speed_factor(effects)
        if node.remaining_seconds > 0:
            return None

        node.remaining_seconds = 0.0
        node.is_active = False
        node.is_researched = True
        ledger.active_research_id = None
        effects.invalidate()

        logs.info(f"[Research] completed {node.id}")
        return ResearchCompletedEvent(research_id=node.id)
