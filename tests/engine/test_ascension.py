#!filepath: tests/engine/test_ascension.py
from decimal import Decimal

import pytest

from tycoon.core.catalog import PERK_START_CAPITAL, PERK_TIMELESS_RESEARCH
from tycoon.core.types import PrestigeTier
from tycoon.engine.ascension import AscensionService


@pytest.fixture
def service(catalog, balance, effects) -> AscensionService:
    return AscensionService(catalog, balance, effects)


@pytest.fixture
def ready(ledger):
    record = ledger.prestige
    record.current_tier = PrestigeTier.GOLD
    record.gold_count = 3
    record.silver_count = 2
    record.prestige_points = 40
    record.total_prestige_points = 120
    record.purchased_upgrades = {"pp_income_50"}
    record.permanent_multiplier = Decimal("5.5")
    ledger.player_level = 300
    ledger.collected_master_tools = {"mt_golden_hammer"}
    ledger.crafting_inventory = {"plank": 4}
    ledger.managers = ["mgr_1"]
    ledger.unlocked_achievements = {"gold_rush"}
    return ledger


def test_gate_requires_three_gold(service, ready):
    ready.prestige.gold_count = 2

    assert service.do_ascension(ready) is None
    assert ready.prestige.gold_count == 2
    assert ready.ascension.ascension_level == 0
    assert ready.player_level == 300


@pytest.mark.parametrize("level, expected", [(0, 1), (1, 1), (2, 2), (3, 2), (6, 4)])
def test_points_formula(service, ready, level, expected):
    ready.ascension.ascension_level = level

    event = service.do_ascension(ready)

    assert event.points == expected
    assert ready.ascension.ascension_points == expected
    assert ready.ascension.total_ascension_points == expected
    assert ready.ascension.ascension_level == level + 1


def test_prestige_record_is_zeroed_except_lifetime(service, ready):
    service.do_ascension(ready)
    record = ready.prestige

    assert record.gold_count == 0
    assert record.silver_count == 0
    assert record.prestige_points == 0
    assert record.total_prestige_points == 120
    assert record.purchased_upgrades == set()
    assert record.permanent_multiplier == Decimal("1.0")
    assert record.current_tier == PrestigeTier.NONE


def test_deep_reset_is_superset(service, ready):
    service.do_ascension(ready)

    assert ready.player_level == 1
    assert ready.money == Decimal("100")
    assert ready.collected_master_tools == set()
    assert ready.crafting_inventory == {}
    assert ready.managers == []
    assert ready.unlocked_achievements == {"gold_rush"}


def test_buy_perk_uses_cost_table(service, ledger):
    ledger.ascension.ascension_points = 3

    assert service.buy_perk(ledger, PERK_START_CAPITAL) is True   # cost 1
    assert service.buy_perk(ledger, PERK_START_CAPITAL) is True   # cost 2
    assert service.buy_perk(ledger, PERK_START_CAPITAL) is False  # cost 3 > 0
    assert ledger.ascension.perk_level(PERK_START_CAPITAL) == 2
    assert service.buy_perk(ledger, "unknown") is False


def test_buy_perk_stops_at_max_level(service, ledger):
    ledger.ascension.ascension_points = 100
    for _ in range(5):
        assert service.buy_perk(ledger, PERK_TIMELESS_RESEARCH) is True

    assert service.buy_perk(ledger, PERK_TIMELESS_RESEARCH) is False
    assert service.research_duration_reduction(ledger) == Decimal("0.50")


def test_perk_getters_defaults_and_index(service, ledger):
    assert service.start_capital_multiplier(ledger) == Decimal("0")
    assert service.premium_bonus(ledger) == Decimal("0")
    assert service.start_reputation(ledger) == 50

    ledger.ascension.perk_levels[PERK_START_CAPITAL] = 1
    assert service.start_capital_multiplier(ledger) == Decimal("0.50")
    ledger.ascension.perk_levels[PERK_START_CAPITAL] = 3
    assert service.start_capital_multiplier(ledger) == Decimal("2.00")


def test_start_capital_perk_applies_on_reset(service, ready):
    ready.ascension.perk_levels[PERK_START_CAPITAL] = 1

    service.do_ascension(ready)

    assert ready.money == Decimal("150")
    assert ready.ascension.perk_level(PERK_START_CAPITAL) == 1
