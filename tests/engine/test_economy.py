#!filepath: tests/engine/test_economy.py
from decimal import Decimal

import pytest

from tycoon.core.types import AutomationFeature, StructureKind, WorkerTier
from tycoon.engine.automation import AutomationDispatcher
from tycoon.engine.deliveries import DeliveryService
from tycoon.engine.economy import Economy

T0 = 1_700_000_000.0


@pytest.fixture
def economy(catalog, balance, effects) -> Economy:
    automation = AutomationDispatcher(balance, DeliveryService(catalog, balance))
    return Economy(catalog, balance, effects, automation)


def test_hire_worker_until_capacity(economy, ledger):
    ledger.money = Decimal("1000")

    assert economy.hire_worker(ledger, "carpenter") is True
    assert economy.hire_worker(ledger, "carpenter") is True
    # baseline 1 + 2 = 3 = max_workers(level 1)
    assert economy.hire_worker(ledger, "carpenter") is False
    assert ledger.money == Decimal("900")


def test_hire_worker_fails_when_broke(economy, ledger):
    ledger.money = Decimal("10")

    assert economy.hire_worker(ledger, "carpenter", WorkerTier.S) is False
    assert len(ledger.production_units[0].workers) == 1
    assert ledger.money == Decimal("10")


def test_upgrade_cost_grows_and_discount_applies(economy, ledger, effects):
    unit = ledger.production_units[0]
    assert economy.upgrade_cost(unit) == Decimal("100.00")

    unit.level = 3
    assert economy.upgrade_cost(unit) == Decimal("225.00")

    ledger.prestige.purchased_upgrades.add("pp_upgrade_discount")
    effects.invalidate()
    assert economy.upgrade_cost(unit) == Decimal("191.25")


def test_upgrade_unit(economy, ledger):
    ledger.money = Decimal("150")

    assert economy.upgrade_unit(ledger, "carpenter") is True
    assert ledger.production_units[0].level == 2
    assert economy.upgrade_unit(ledger, "carpenter") is False
    assert economy.upgrade_unit(ledger, "missing") is False


def test_unlock_unit_checks_level_and_duplicates(economy, ledger):
    ledger.money = Decimal("10000")

    assert economy.unlock_unit(ledger, "plumber") is False  # level 5
    ledger.player_level = 5
    assert economy.unlock_unit(ledger, "plumber") is True
    assert economy.unlock_unit(ledger, "plumber") is False
    assert ledger.unit("plumber").base_income == Decimal("3")


def test_build_structure_upgrades_to_max(economy, ledger, effects):
    ledger.money = Decimal("1000000")

    for _ in range(5):
        assert economy.build_structure(ledger, StructureKind.OFFICE) is True
    assert economy.build_structure(ledger, StructureKind.OFFICE) is False

    assert ledger.structure(StructureKind.OFFICE).level == 5
    assert effects.extra_order_slots() == 6
    # 7500 × (1 + 2 + 4 + 8 + 16)
    assert ledger.money == Decimal("1000000") - Decimal("7500") * 31


def test_wake_worker(economy, ledger):
    worker = ledger.production_units[0].workers[0]

    assert economy.wake_worker(ledger, worker.id) is False
    worker.is_resting = True
    assert economy.wake_worker(ledger, worker.id) is True
    assert worker.is_working


def test_activate_rush_costs_premium(economy, ledger):
    assert economy.activate_rush(ledger, T0) is False

    ledger.premium_currency = 15
    assert economy.activate_rush(ledger, T0) is True
    assert ledger.premium_currency == 5
    assert ledger.is_rush_boost_active(T0 + 599)
    assert not ledger.is_rush_boost_active(T0 + 600)


def test_speed_boost_extends(economy, ledger):
    assert economy.activate_speed_boost(ledger, T0, 0) is False
    assert economy.activate_speed_boost(ledger, T0, 60) is True
    assert economy.activate_speed_boost(ledger, T0, 60) is True

    assert ledger.speed_boost_until == T0 + 120


def test_set_automation_respects_gate(economy, ledger):
    assert economy.set_automation(ledger, AutomationFeature.COLLECT, True) is False

    ledger.player_level = 15
    assert economy.set_automation(ledger, AutomationFeature.COLLECT, True) is True
    assert ledger.automation.auto_collect_delivery is True

    ledger.player_level = 1
    assert economy.set_automation(ledger, AutomationFeature.COLLECT, False) is True
    assert ledger.automation.auto_collect_delivery is False
