#!filepath: tycoon/config/balance_config.py
from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel


class BalanceConfig(BaseModel):
    """
    BalanceConfig（数值平衡）

    所有货币 / 比例值均为 Decimal，YAML 中写字符串或数字均可。
    """

    # 收入 / 成本上限
    income_cap_multiplier: Decimal = Decimal("3.0")
    research_efficiency_cap: Decimal = Decimal("0.50")
    cost_reduction_cap: Decimal = Decimal("0.50")
    guild_income_cap: Decimal = Decimal("0.20")
    delivery_speed_cap: Decimal = Decimal("0.50")

    # boost
    speed_boost_multiplier: Decimal = Decimal("2")
    rush_base_multiplier: Decimal = Decimal("2")
    rush_duration_seconds: int = 600

    # reset 起始值
    base_start_money: Decimal = Decimal("100")
    start_reputation: int = 50

    # 永久倍率的合法区间（sanitize / prestige 后 clamp）
    permanent_multiplier_max: Decimal = Decimal("20.0")

    # automation 等级门槛
    auto_collect_level: int = 15
    auto_accept_level: int = 25
    auto_assign_level: int = 50
    auto_assign_fatigue_threshold: Decimal = Decimal("20")

    # ascension 门槛：最高 prestige tier 的完成次数
    ascension_required_top_tier_count: int = 3

    # 订单完成 → 网络贡献点
    order_completed_points: int = 10
    base_order_slots: int = 3
