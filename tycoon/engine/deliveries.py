from __future__ import annotations

import random
from decimal import Decimal
from typing import Optional

from tycoon.config.balance_config import BalanceConfig
from tycoon.core.catalog import Catalog
from tycoon.core.events import DeliveryArrivedEvent, DeliveryCollectedEvent
from tycoon.core.ledger import Delivery, Ledger, HUNDRED, new_id
from tycoon.core.types import DeliveryKind
from tycoon.engine.effects import EffectAggregator
from tycoon.engine.perks import premium_bonus
from tycoon.utils.logger import logs

"""
{#!filepath: tycoon/engine/deliveries.py}

补给（delivery）

- 同一时间最多一个 pending delivery，过期未领取即作废
- 下一次到达间隔：uniform(120, 300) × (1 − min(delivery_speed_bonus, cap))
- claim 只成功一次：领取后 pending_delivery 置空
"""

MIN_INTERVAL_SECONDS = 120
MAX_INTERVAL_SECONDS = 300
DELIVERY_LIFETIME_SECONDS = 120.0
SPEED_DELIVERY_MINUTES = Decimal("5")


class DeliveryService:
    def __init__(self, catalog: Catalog, balance: BalanceConfig, rng: random.Random | None = None):
        self.catalog = catalog
        self.balance = balance
        self.rng = rng or random.Random()

    def next_interval(self, effects: EffectAggregator) -> float:
        bonus = min(effects.delivery_speed_bonus(), self.balance.delivery_speed_cap)
        base = self.rng.randint(MIN_INTERVAL_SECONDS, MAX_INTERVAL_SECONDS)
        return float(Decimal(base) * (1 - bonus))

    def _roll(self, ledger: Ledger, now: float) -> Delivery:
        kind = self.rng.choice(list(DeliveryKind))
        level = ledger.player_level

        if kind == DeliveryKind.MONEY:
            amount = Decimal(100 * level)
        elif kind == DeliveryKind.PREMIUM:
            amount = Decimal(self.rng.randint(1, 3))
        elif kind == DeliveryKind.XP:
            amount = Decimal(25 * level)
        elif kind == DeliveryKind.MOOD:
            amount = Decimal("10")
        else:
            amount = SPEED_DELIVERY_MINUTES

        return Delivery(
            id=new_id("dlv"),
            kind=kind,
            amount=amount,
            expires_at=now + DELIVERY_LIFETIME_SECONDS,
        )

    def check(self, ledger: Ledger, effects: EffectAggregator, now: float) -> Optional[DeliveryArrivedEvent]:
        pending = ledger.pending_delivery
        if pending is not None:
            if not pending.is_expired(now):
                return None
            logs.debug(f"[Delivery] expired {pending.id}")
            ledger.pending_delivery = None

        if now < ledger.next_delivery_at:
            return None

        delivery = self._roll(ledger, now)
        ledger.pending_delivery = delivery
        ledger.next_delivery_at = now + self.next_interval(effects)

        logs.debug(f"[Delivery] arrived {delivery.kind.value} x{delivery.amount}")
        return DeliveryArrivedEvent(delivery_id=delivery.id, kind=delivery.kind.value)

    def claim(self, ledger: Ledger, now: float, automated: bool = False) -> Optional[DeliveryCollectedEvent]:
        delivery = ledger.pending_delivery
        if delivery is None:
            return None
        if delivery.is_expired(now):
            ledger.pending_delivery = None
            return None

        ledger.pending_delivery = None
        ledger.deliveries_claimed += 1

        amount = delivery.amount
        if delivery.kind == DeliveryKind.MONEY:
            ledger.add_money(amount)
        elif delivery.kind == DeliveryKind.PREMIUM:
            amount = (amount * (1 + premium_bonus(ledger, self.catalog))).to_integral_value()
            ledger.add_premium(int(amount))
        elif delivery.kind == DeliveryKind.XP:
            ledger.add_xp(int(amount))
        elif delivery.kind == DeliveryKind.MOOD:
            for worker in ledger.all_workers():
                worker.mood = min(HUNDRED, worker.mood + amount)
        else:
            ledger.speed_boost_until = max(ledger.speed_boost_until, now) + float(amount) * 60

        return DeliveryCollectedEvent(
            delivery_id=delivery.id,
            kind=delivery.kind.value,
            amount=amount,
            automated=automated,
        )
