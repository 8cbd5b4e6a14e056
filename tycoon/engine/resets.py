from __future__ import annotations

from decimal import Decimal

from tycoon.config.balance_config import BalanceConfig
from tycoon.core.catalog import Catalog, create_research_tree
from tycoon.core.ledger import Ledger, LuckySpinState, ZERO, baseline_unit
from tycoon.engine.effects import EffectAggregator
from tycoon.engine.perks import start_capital_multiplier, start_reputation

"""
{#!filepath: tycoon/engine/resets.py}

Reset routines (FINAL / FROZEN)

reset_run  : prestige 的 "always reset" 清单（research 由 wipe_research 决定）
reset_deep : ascension 用，reset_run(wipe_research=True) 的超集

永远不动：
- total_money_earned / total_play_time_seconds / created_at
- premium、achievements、cosmetics、settings、tutorial
- prestige record（ascension 自己清零）、ascension record、automation flags
- guild_income_bonus / pending_contribution_points
"""


def start_money(ledger: Ledger, catalog: Catalog, effects: EffectAggregator, balance: BalanceConfig) -> Decimal:
    """(base + Σ extra start money) × (1 + start capital perk)"""
    base = balance.base_start_money + effects.extra_start_money()
    return base * (1 + start_capital_multiplier(ledger, catalog))


def reset_run(
    ledger: Ledger,
    catalog: Catalog,
    effects: EffectAggregator,
    balance: BalanceConfig,
    wipe_research: bool,
) -> None:
    # 先读 effects（购买记录仍在），再改 Ledger
    effects.invalidate()
    money = start_money(ledger, catalog, effects, balance)
    worker_tier = effects.starting_worker_tier()

    ledger.player_level = 1
    ledger.current_xp = 0
    ledger.total_xp = 0
    ledger.money = money
    ledger.total_money_spent = ZERO
    ledger.reputation = start_reputation(ledger, catalog, balance.start_reputation)

    ledger.production_units = [baseline_unit(worker_tier)]
    ledger.structures = []

    ledger.available_orders = []
    ledger.active_order = None
    ledger.orders_completed = 0
    ledger.last_order_completed_at = 0.0
    ledger.pending_delivery = None
    ledger.next_delivery_at = 0.0

    ledger.speed_boost_until = 0.0
    ledger.rush_boost_until = 0.0
    ledger.xp_boost_until = 0.0

    ledger.daily_reward_streak = 0
    ledger.last_daily_reward_at = 0.0

    ledger.active_event = None
    ledger.last_applied_event_id = None

    if wipe_research:
        ledger.research_tree = create_research_tree()
        ledger.active_research_id = None

    effects.invalidate()


def reset_deep(
    ledger: Ledger,
    catalog: Catalog,
    effects: EffectAggregator,
    balance: BalanceConfig,
) -> None:
    reset_run(ledger, catalog, effects, balance, wipe_research=True)

    ledger.deliveries_claimed = 0
    ledger.collected_master_tools = set()
    ledger.crafting_inventory = {}
    ledger.crafting_jobs = []
    ledger.equipment_inventory = []
    ledger.managers = []
    ledger.tools = {}
    ledger.pending_story_id = None
    ledger.lucky_spin = LuckySpinState()
    ledger.active_offers = []
    ledger.tournament_id = None

    effects.invalidate()
