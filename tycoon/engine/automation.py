from __future__ import annotations

from typing import Optional

from tycoon.config.balance_config import BalanceConfig
from tycoon.core.events import DeliveryCollectedEvent, OrderAcceptedEvent, WorkersWokenEvent
from tycoon.core.ledger import Ledger
from tycoon.core.types import AutomationFeature
from tycoon.engine.deliveries import DeliveryService
from tycoon.engine.effects import EffectAggregator
from tycoon.utils.logger import logs

"""
{#!filepath: tycoon/engine/automation.py}

AutomationDispatcher (FINAL / FROZEN)

每个功能都有两道门：
- player_level >= 对应门槛（15 / 25 / 50，来自 BalanceConfig）
- ledger.automation 上的开关

语义：
- collect : 领取一个未过期的 pending delivery，恰好一次
- accept  : 无 active order 时，接下 base_reward 最高的可用订单
- assign  : 唤醒疲劳 <= 阈值的休息工人（单位未超员时）

同一 tick 内重复调用是幂等的：第二次调用不会再产生效果。
"""


class AutomationDispatcher:
    def __init__(self, balance: BalanceConfig, deliveries: DeliveryService):
        self.balance = balance
        self.deliveries = deliveries

    # --------------------------------------------------
    # gates
    # --------------------------------------------------
    def required_level(self, feature: AutomationFeature) -> int:
        b = self.balance
        return {
            AutomationFeature.COLLECT: b.auto_collect_level,
            AutomationFeature.ACCEPT: b.auto_accept_level,
            AutomationFeature.ASSIGN: b.auto_assign_level,
        }[feature]

    def is_enabled(self, ledger: Ledger, feature: AutomationFeature) -> bool:
        if ledger.player_level < self.required_level(feature):
            return False
        return bool(getattr(ledger.automation, feature.value))

    # --------------------------------------------------
    # features
    # --------------------------------------------------
    def collect(self, ledger: Ledger, now: float) -> Optional[DeliveryCollectedEvent]:
        if not self.is_enabled(ledger, AutomationFeature.COLLECT):
            return None
        event = self.deliveries.claim(ledger, now, automated=True)
        if event is not None:
            logs.debug(f"[Automation] collected delivery {event.delivery_id}")
        return event

    def accept(self, ledger: Ledger) -> Optional[OrderAcceptedEvent]:
        if not self.is_enabled(ledger, AutomationFeature.ACCEPT):
            return None
        if ledger.active_order is not None or not ledger.available_orders:
            return None

        best = max(ledger.available_orders, key=lambda o: o.base_reward)
        ledger.available_orders.remove(best)
        ledger.active_order = best

        logs.debug(f"[Automation] accepted order {best.id} reward={best.base_reward}")
        return OrderAcceptedEvent(order_id=best.id, automated=True)

    def assign(self, ledger: Ledger, effects: EffectAggregator) -> Optional[WorkersWokenEvent]:
        if not self.is_enabled(ledger, AutomationFeature.ASSIGN):
            return None

        threshold = self.balance.auto_assign_fatigue_threshold
        extra = effects.extra_worker_slots()
        woken = 0

        for unit in ledger.production_units:
            working = sum(1 for w in unit.workers if w.is_working)
            capacity = unit.max_workers(extra)
            for worker in unit.workers:
                if working >= capacity:
                    break
                if worker.is_resting and worker.fatigue <= threshold:
                    worker.is_resting = False
                    working += 1
                    woken += 1

        if woken == 0:
            return None

        logs.debug(f"[Automation] woke {woken} workers")
        return WorkersWokenEvent(count=woken)
