#!filepath: tests/engine/test_automation.py
import random
from decimal import Decimal

import pytest

from tycoon.core.ledger import Delivery, Order, Worker
from tycoon.core.types import AutomationFeature, DeliveryKind
from tycoon.engine.automation import AutomationDispatcher
from tycoon.engine.deliveries import DeliveryService

T0 = 1_700_000_000.0


@pytest.fixture
def dispatcher(catalog, balance) -> AutomationDispatcher:
    return AutomationDispatcher(balance, DeliveryService(catalog, balance, random.Random(1)))


def _money_delivery(amount="500", expires_at=T0 + 60) -> Delivery:
    return Delivery(id="dlv_1", kind=DeliveryKind.MONEY, amount=Decimal(amount), expires_at=expires_at)


def test_collect_requires_level_and_flag(dispatcher, ledger):
    ledger.pending_delivery = _money_delivery()
    ledger.automation.auto_collect_delivery = True
    ledger.player_level = 14

    assert dispatcher.collect(ledger, T0) is None

    ledger.player_level = 15
    ledger.automation.auto_collect_delivery = False
    assert dispatcher.collect(ledger, T0) is None
    assert ledger.pending_delivery is not None


def test_collect_claims_exactly_once(dispatcher, ledger):
    ledger.player_level = 15
    ledger.automation.auto_collect_delivery = True
    ledger.pending_delivery = _money_delivery()

    first = dispatcher.collect(ledger, T0)
    second = dispatcher.collect(ledger, T0)

    assert first is not None and first.automated is True
    assert second is None
    assert ledger.money == Decimal("600")
    assert ledger.deliveries_claimed == 1


def test_collect_skips_expired_delivery(dispatcher, ledger):
    ledger.player_level = 15
    ledger.automation.auto_collect_delivery = True
    ledger.pending_delivery = _money_delivery(expires_at=T0 - 1)

    assert dispatcher.collect(ledger, T0) is None
    assert ledger.pending_delivery is None
    assert ledger.money == Decimal("100")


def test_accept_takes_highest_reward(dispatcher, ledger):
    ledger.player_level = 25
    ledger.automation.auto_accept_order = True
    ledger.available_orders = [
        Order("o1", Decimal("50"), 10, T0 + 600),
        Order("o2", Decimal("80"), 10, T0 + 600),
        Order("o3", Decimal("60"), 10, T0 + 600),
    ]

    event = dispatcher.accept(ledger)

    assert event.order_id == "o2"
    assert ledger.active_order.id == "o2"
    assert [o.id for o in ledger.available_orders] == ["o1", "o3"]
    # 已有 active order → 不再接单
    assert dispatcher.accept(ledger) is None


def test_accept_gate_is_level_25(dispatcher, ledger):
    ledger.player_level = 24
    ledger.automation.auto_accept_order = True
    ledger.available_orders = [Order("o1", Decimal("50"), 10, T0 + 600)]

    assert dispatcher.accept(ledger) is None


def test_assign_wakes_only_rested_workers(dispatcher, ledger, effects):
    ledger.player_level = 50
    ledger.automation.auto_assign_workers = True
    unit = ledger.production_units[0]
    rested = Worker.create()
    rested.is_resting, rested.fatigue = True, Decimal("20")
    tired = Worker.create()
    tired.is_resting, tired.fatigue = True, Decimal("21")
    unit.workers = [rested, tired]

    event = dispatcher.assign(ledger, effects)

    assert event.count == 1
    assert rested.is_working
    assert tired.is_resting
    assert dispatcher.assign(ledger, effects) is None


def test_assign_respects_capacity(dispatcher, ledger, effects):
    ledger.player_level = 50
    ledger.automation.auto_assign_workers = True
    unit = ledger.production_units[0]
    unit.workers = [Worker.create() for _ in range(3)]
    sleeper = Worker.create()
    sleeper.is_resting = True
    unit.workers.append(sleeper)

    assert dispatcher.assign(ledger, effects) is None
    assert sleeper.is_resting


def test_gate_levels_come_from_balance(dispatcher):
    assert dispatcher.required_level(AutomationFeature.COLLECT) == 15
    assert dispatcher.required_level(AutomationFeature.ACCEPT) == 25
    assert dispatcher.required_level(AutomationFeature.ASSIGN) == 50


def test_second_pass_in_same_tick_is_a_no_op(dispatcher, ledger, effects):
    ledger.player_level = 50
    ledger.automation.auto_collect_delivery = True
    ledger.automation.auto_accept_order = True
    ledger.automation.auto_assign_workers = True
    ledger.pending_delivery = _money_delivery()
    ledger.available_orders = [
        Order(id="ord_a", base_reward=Decimal("10"), xp_reward=1, expires_at=T0 + 600),
    ]
    ledger.production_units[0].workers[0].is_resting = True

    def one_pass():
        return [
            dispatcher.collect(ledger, T0),
            dispatcher.accept(ledger),
            dispatcher.assign(ledger, effects),
        ]

    assert all(e is not None for e in one_pass())
    assert one_pass() == [None, None, None]
    assert ledger.active_order.id == "ord_a"
