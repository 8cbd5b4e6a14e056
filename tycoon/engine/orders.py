from __future__ import annotations

import random
from decimal import Decimal
from typing import List, Optional

from tycoon.config.balance_config import BalanceConfig
from tycoon.core.events import Event, OrderCompletedEvent, OrderExpiredEvent
from tycoon.core.ledger import Ledger, Order, new_id
from tycoon.engine.effects import EffectAggregator
from tycoon.utils.logger import logs

# tycoon/engine/orders.py

ORDER_LIFETIME_SECONDS = 1800.0
CENT = Decimal("0.01")


class OrderBoard:
    """
    订单板

    - refresh: 删除过期订单 / 取消过期 active 订单 / 补满订单位
    - accept: 手动接单（自动接单见 AutomationDispatcher）
    - complete_active: 结算 active 订单，记录网络贡献点
    """

    def __init__(self, balance: BalanceConfig, rng: random.Random | None = None):
        self.balance = balance
        self.rng = rng or random.Random()

    def slots(self, effects: EffectAggregator) -> int:
        return self.balance.base_order_slots + effects.extra_order_slots()

    def _new_order(self, ledger: Ledger, now: float) -> Order:
        level = ledger.player_level
        factor = Decimal(str(round(self.rng.uniform(0.8, 1.5), 2)))
        return Order(
            id=new_id("ord"),
            base_reward=(Decimal(50 * level) * factor).quantize(CENT),
            xp_reward=10 + level,
            expires_at=now + ORDER_LIFETIME_SECONDS,
        )

    def refresh(self, ledger: Ledger, effects: EffectAggregator, now: float) -> List[Event]:
        events: List[Event] = []

        kept = [o for o in ledger.available_orders if not o.is_expired(now)]
        dropped = len(ledger.available_orders) - len(kept)
        ledger.available_orders = kept

        active = ledger.active_order
        if active is not None and active.is_expired(now):
            ledger.active_order = None
            events.append(OrderExpiredEvent(order_id=active.id))

        while len(ledger.available_orders) < self.slots(effects):
            ledger.available_orders.append(self._new_order(ledger, now))

        logs.debug(
            f"[Orders] refresh dropped={dropped} available={len(ledger.available_orders)}"
        )
        return events

    def accept(self, ledger: Ledger, order_id: str) -> bool:
        if ledger.active_order is not None:
            return False
        order = next((o for o in ledger.available_orders if o.id == order_id), None)
        if order is None:
            return False

        ledger.available_orders.remove(order)
        ledger.active_order = order
        return True

    def complete_active(
        self,
        ledger: Ledger,
        effects: EffectAggregator,
        now: float,
    ) -> Optional[OrderCompletedEvent]:
        order = ledger.active_order
        if order is None:
            return None
        if order.is_expired(now):
            ledger.active_order = None
            return None

        reward = (order.base_reward * (1 + effects.order_reward_bonus())).quantize(CENT)
        ledger.add_money(reward)
        ledger.add_xp(order.xp_reward)

        ledger.active_order = None
        ledger.orders_completed += 1
        ledger.last_order_completed_at = now
        ledger.pending_contribution_points += self.balance.order_completed_points

        logs.info(f"[Orders] completed {order.id} reward={reward}")
        return OrderCompletedEvent(order_id=order.id, reward=reward)
