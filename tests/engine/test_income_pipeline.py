#!filepath: tests/engine/test_income_pipeline.py
from decimal import Decimal

from tycoon.core.catalog import Catalog, PrestigeUpgrade, UpgradeEffect
from tycoon.core.ledger import TimedEvent
from tycoon.engine.effects import EffectAggregator
from tycoon.engine.prestige import PrestigeService

T0 = 1_700_000_000.0


def test_net_positive_tick_adds_exactly_net(ledger, effects, pipeline, make_unit):
    """base 100，成本 20，无加成 → money +80"""
    ledger.production_units = [make_unit(100, 20)]
    ledger.money = Decimal("0")

    result = pipeline.run(ledger, effects, T0)

    assert result.net == Decimal("80")
    assert ledger.money == Decimal("80")
    assert ledger.total_money_earned == Decimal("80")


def test_loss_is_absorbed_and_money_clamps_at_zero(ledger, effects, pipeline, make_unit):
    """base 100，成本 150，余额 40 → 0（而不是 −10）"""
    ledger.production_units = [make_unit(100, 150)]
    ledger.money = Decimal("40")

    result = pipeline.run(ledger, effects, T0)

    assert result.net == Decimal("-50")
    assert result.applied == Decimal("-40")
    assert ledger.money == Decimal("0")
    assert ledger.total_money_earned == Decimal("0")


def test_gross_never_exceeds_three_times_base(ledger, effects, pipeline, make_unit):
    ledger.production_units = [make_unit(100, 0)]
    ledger.prestige.purchased_upgrades = {"pp_income_100", "pp_income_50", "pp_income_25"}
    for node in ledger.research_tree:
        node.is_researched = True
    ledger.collected_master_tools = {"mt_golden_hammer", "mt_legendary_toolbox"}
    ledger.guild_income_bonus = Decimal("0.5")
    ledger.active_event = TimedEvent(
        id="evt", kind="market_boom", income_multiplier=Decimal("1.5"),
        started_at=T0 - 1, expires_at=T0 + 100,
    )
    effects.invalidate()

    result = pipeline.compute(ledger, effects, T0)

    assert result.capped is True
    assert result.gross_income == Decimal("300")
    assert result.effective_multiplier == Decimal("3")


def test_permanent_multiplier_is_part_of_base(ledger, effects, pipeline, make_unit):
    ledger.production_units = [make_unit(100, 0)]
    ledger.prestige.permanent_multiplier = Decimal("1.5")

    result = pipeline.compute(ledger, effects, T0)

    assert result.base_income == Decimal("150")
    assert result.capped is False


def test_research_efficiency_is_capped_separately(ledger, effects, pipeline, make_unit):
    ledger.production_units = [make_unit(100, 0)]
    # 5 × 0.05 = 0.25（未达上限）
    for node in ledger.research_tree:
        if node.branch == "efficiency":
            node.is_researched = True
    effects.invalidate()

    result = pipeline.compute(ledger, effects, T0)

    assert result.gross_income == Decimal("125")


def test_cost_reduction_cap(ledger, effects, pipeline, make_unit):
    ledger.production_units = [make_unit(0, 100)]
    ledger.prestige.purchased_upgrades = {"pp_cost_15", "pp_cost_30"}
    for node in ledger.research_tree:
        if node.branch == "economy":
            node.is_researched = True
    effects.invalidate()

    result = pipeline.compute(ledger, effects, T0)

    # 0.45 + 0.20 → 封顶 0.50
    assert result.costs == Decimal("50")


def test_boosts_amplify_profit_only(ledger, effects, pipeline, make_unit):
    ledger.production_units = [make_unit(100, 20)]
    ledger.speed_boost_until = T0 + 60
    ledger.rush_boost_until = T0 + 60

    assert pipeline.compute(ledger, effects, T0).net == Decimal("320")

    ledger.production_units = [make_unit(100, 150)]
    assert pipeline.compute(ledger, effects, T0).net == Decimal("-50")


def test_rush_bonus_from_shop(ledger, effects, pipeline, make_unit):
    ledger.production_units = [make_unit(100, 20)]
    ledger.rush_boost_until = T0 + 60
    ledger.prestige.purchased_upgrades = {"pp_rush_boost"}
    effects.invalidate()

    # 80 × (2 + 0.5)
    assert pipeline.compute(ledger, effects, T0).net == Decimal("200")


def test_expired_event_is_ignored(ledger, effects, pipeline, make_unit):
    ledger.production_units = [make_unit(100, 0)]
    ledger.active_event = TimedEvent(
        id="evt", kind="tax_audit", income_multiplier=Decimal("0.5"),
        started_at=T0 - 100, expires_at=T0 - 1,
    )

    assert pipeline.compute(ledger, effects, T0).gross_income == Decimal("100")


def test_two_half_upgrades_combine_to_one(ledger, balance, pipeline, make_unit):
    """两个 +0.5 永久升级 → 下一个 tick 生效 +1.0"""
    catalog = Catalog(
        upgrades={
            "half_a": PrestigeUpgrade("half_a", 1, UpgradeEffect(income_bonus=Decimal("0.5"))),
            "half_b": PrestigeUpgrade("half_b", 1, UpgradeEffect(income_bonus=Decimal("0.5"))),
        }
    )
    effects = EffectAggregator(ledger, catalog)
    shop = PrestigeService(catalog, balance, effects)
    ledger.production_units = [make_unit(100, 0)]
    ledger.money = Decimal("0")
    ledger.prestige.prestige_points = 2

    pipeline.run(ledger, effects, T0)
    assert shop.buy_upgrade(ledger, "half_a") is True
    assert shop.buy_upgrade(ledger, "half_b") is True

    result = pipeline.run(ledger, effects, T0 + 1)

    assert effects.income_bonus() == Decimal("1.0")
    assert result.gross_income == Decimal("200")


def test_attribution_uses_raw_contribution(ledger, effects, pipeline, make_unit):
    unit = make_unit(100, 0)
    ledger.production_units = [unit]
    ledger.speed_boost_until = T0 + 10

    pipeline.run(ledger, effects, T0)

    assert unit.total_earned == Decimal("100")
    assert unit.workers[0].total_earned == Decimal("100")
