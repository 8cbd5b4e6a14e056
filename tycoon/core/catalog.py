from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, List, Optional, Tuple

from tycoon.core.ledger import Ledger, ResearchEffect, ResearchNode
from tycoon.core.types import PrestigeTier, StructureKind, WorkerTier

"""
{#!filepath: tycoon/core/catalog.py}

Catalog (static game content)

Contract:
- Pure data: tier rules, prestige shop, ascension perks, research tree,
  master tools, random event templates, unlockable production units.
- Never mutated at runtime; a Catalog instance is shared read-only by
  every service. Tests build their own Catalog to isolate numbers.
"""

D = Decimal


# -------------------------
# Prestige tiers
# -------------------------
@dataclass(frozen=True)
class TierRule:
    required_level: int
    min_lifetime_earnings: Decimal
    point_multiplier: int
    permanent_bonus: Decimal
    keeps_research: bool
    required_previous_count: int = 0  # 上一档需完成的次数


DEFAULT_TIERS: Dict[PrestigeTier, TierRule] = {
    PrestigeTier.BRONZE: TierRule(30, D("100000"), 1, D("0.10"), keeps_research=False),
    PrestigeTier.SILVER: TierRule(100, D("1000000"), 2, D("0.25"), keeps_research=True, required_previous_count=1),
    PrestigeTier.GOLD: TierRule(250, D("10000000"), 4, D("0.50"), keeps_research=True, required_previous_count=1),
}

TOP_TIER = PrestigeTier.GOLD


# -------------------------
# Prestige shop
# -------------------------
@dataclass(frozen=True)
class UpgradeEffect:
    income_bonus: Decimal = D("0")
    cost_reduction: Decimal = D("0")
    extra_start_money: Decimal = D("0")
    starting_worker_tier: Optional[WorkerTier] = None
    rush_bonus: Decimal = D("0")
    delivery_speed_bonus: Decimal = D("0")
    upgrade_discount: Decimal = D("0")


@dataclass(frozen=True)
class PrestigeUpgrade:
    id: str
    cost: int
    effect: UpgradeEffect


DEFAULT_UPGRADES: List[PrestigeUpgrade] = [
    PrestigeUpgrade("pp_income_10", 5, UpgradeEffect(income_bonus=D("0.10"))),
    PrestigeUpgrade("pp_income_25", 15, UpgradeEffect(income_bonus=D("0.25"))),
    PrestigeUpgrade("pp_income_50", 40, UpgradeEffect(income_bonus=D("0.50"))),
    PrestigeUpgrade("pp_income_100", 80, UpgradeEffect(income_bonus=D("1.00"))),
    PrestigeUpgrade("pp_cost_15", 12, UpgradeEffect(cost_reduction=D("0.15"))),
    PrestigeUpgrade("pp_cost_30", 30, UpgradeEffect(cost_reduction=D("0.30"))),
    PrestigeUpgrade("pp_start_money", 6, UpgradeEffect(extra_start_money=D("5000"))),
    PrestigeUpgrade("pp_start_money_big", 18, UpgradeEffect(extra_start_money=D("50000"))),
    PrestigeUpgrade("pp_better_start_worker", 10, UpgradeEffect(starting_worker_tier=WorkerTier.D)),
    PrestigeUpgrade("pp_start_worker_b", 30, UpgradeEffect(starting_worker_tier=WorkerTier.B)),
    PrestigeUpgrade("pp_rush_boost", 15, UpgradeEffect(rush_bonus=D("0.50"))),
    PrestigeUpgrade("pp_delivery_speed", 12, UpgradeEffect(delivery_speed_bonus=D("0.30"))),
    PrestigeUpgrade("pp_upgrade_discount", 20, UpgradeEffect(upgrade_discount=D("0.15"))),
]


# -------------------------
# Ascension perks
# -------------------------
@dataclass(frozen=True)
class AscensionPerk:
    """costs[i] / values[i] 对应第 i+1 级"""
    id: str
    max_level: int
    costs: Tuple[int, ...]
    values: Tuple[Decimal, ...]


PERK_START_CAPITAL = "asc_start_capital"
PERK_TIMELESS_RESEARCH = "asc_timeless_research"
PERK_GOLDEN_ERA = "asc_golden_era"
PERK_LEGENDARY_REPUTATION = "asc_legendary_reputation"

DEFAULT_PERKS: List[AscensionPerk] = [
    AscensionPerk(PERK_START_CAPITAL, 5, (1, 2, 3, 5, 8),
                  (D("0.50"), D("1.00"), D("2.00"), D("5.00"), D("10.00"))),
    AscensionPerk(PERK_TIMELESS_RESEARCH, 5, (1, 2, 3, 4, 6),
                  (D("0.10"), D("0.20"), D("0.30"), D("0.40"), D("0.50"))),
    AscensionPerk(PERK_GOLDEN_ERA, 5, (1, 2, 3, 5, 8),
                  (D("0.10"), D("0.20"), D("0.30"), D("0.50"), D("1.00"))),
    AscensionPerk(PERK_LEGENDARY_REPUTATION, 5, (1, 2, 3, 4, 6),
                  (D("60"), D("70"), D("80"), D("90"), D("100"))),
]


# -------------------------
# Master tools (collectibles, passive income bonus)
# -------------------------
@dataclass(frozen=True)
class MasterTool:
    id: str
    income_bonus: Decimal
    min_lifetime_earnings: Decimal = D("0")
    min_level: int = 1


DEFAULT_MASTER_TOOLS: List[MasterTool] = [
    MasterTool("mt_golden_hammer", D("0.02"), min_lifetime_earnings=D("10000")),
    MasterTool("mt_diamond_saw", D("0.03"), min_lifetime_earnings=D("100000")),
    MasterTool("mt_titanium_level", D("0.05"), min_level=50),
    MasterTool("mt_master_chisel", D("0.05"), min_lifetime_earnings=D("1000000"), min_level=75),
    MasterTool("mt_legendary_toolbox", D("0.10"), min_lifetime_earnings=D("10000000"), min_level=150),
]


# -------------------------
# Random events
# -------------------------
@dataclass(frozen=True)
class EventTemplate:
    kind: str
    duration_seconds: int
    income_multiplier: Decimal = D("1")
    cost_multiplier: Decimal = D("1")
    special_effect: Optional[str] = None
    reputation_change: int = 0
    weight: int = 1


DEFAULT_EVENTS: List[EventTemplate] = [
    EventTemplate("market_boom", 600, income_multiplier=D("1.5"), weight=3),
    EventTemplate("high_demand", 900, income_multiplier=D("1.25"), reputation_change=5, weight=3),
    EventTemplate("material_shortage", 600, cost_multiplier=D("1.5"), weight=2),
    EventTemplate("tax_audit", 600, income_multiplier=D("0.90"), weight=1),
    EventTemplate("worker_strike", 300, income_multiplier=D("0.75"), special_effect="mood_drop_all_20", weight=1),
]

# 每次 event_check 触发新事件的概率
EVENT_CHANCE = 0.35


# -------------------------
# Production units
# -------------------------
@dataclass(frozen=True)
class UnitTemplate:
    kind: str
    unlock_cost: Decimal
    required_level: int
    base_income: Decimal
    base_running_cost: Decimal
    special_role: Optional[str] = None


ROLE_RESEARCH_SPEED = "research_speed"

DEFAULT_UNITS: List[UnitTemplate] = [
    UnitTemplate("carpenter", D("0"), 1, D("1"), D("0.2")),
    UnitTemplate("plumber", D("500"), 5, D("3"), D("0.6")),
    UnitTemplate("electrician", D("5000"), 15, D("10"), D("2")),
    UnitTemplate("painter", D("50000"), 30, D("35"), D("7")),
    UnitTemplate("roofer", D("500000"), 60, D("120"), D("24")),
    UnitTemplate("contractor", D("5000000"), 120, D("450"), D("90")),
    UnitTemplate("innovation_lab", D("250000"), 40, D("10"), D("5"), special_role=ROLE_RESEARCH_SPEED),
]

WORKER_HIRE_COST: Dict[WorkerTier, Decimal] = {
    WorkerTier.E: D("50"),
    WorkerTier.D: D("250"),
    WorkerTier.C: D("1500"),
    WorkerTier.B: D("10000"),
    WorkerTier.A: D("75000"),
    WorkerTier.S: D("500000"),
}

UNIT_UPGRADE_BASE_COST = D("100")
UNIT_UPGRADE_GROWTH = D("1.5")


# -------------------------
# Structures
# -------------------------
STRUCTURE_BASE_COST: Dict[StructureKind, Decimal] = {
    StructureKind.STORAGE: D("5000"),
    StructureKind.WORKSHOP_EXTENSION: D("10000"),
    StructureKind.OFFICE: D("7500"),
    StructureKind.VEHICLE_FLEET: D("20000"),
    StructureKind.CANTEEN: D("3000"),
}


# -------------------------
# Research tree
# -------------------------
def _node(branch: str, level: int, cost: str, duration: float, effect: ResearchEffect, prereq: str | None):
    return ResearchNode(
        id=f"{branch}_{level}",
        branch=branch,
        level=level,
        cost=D(cost),
        duration_seconds=duration,
        prerequisites=[prereq] if prereq else [],
        effect=effect,
    )


def create_research_tree() -> List[ResearchNode]:
    """全新的研究树（未完成状态）。Bronze prestige / ascension 用它重置研究。"""
    tree: List[ResearchNode] = []

    # efficiency: 每级 +5% 效率
    prev = None
    for level in range(1, 6):
        tree.append(_node("efficiency", level, str(500 * 4 ** (level - 1)), 60.0 * level,
                          ResearchEffect(efficiency_bonus=D("0.05")), prev))
        prev = f"efficiency_{level}"

    # economy: 成本 / 工资降低
    prev = None
    for level in range(1, 6):
        effect = ResearchEffect(cost_reduction=D("0.04")) if level % 2 else ResearchEffect(wage_reduction=D("0.04"))
        tree.append(_node("economy", level, str(800 * 4 ** (level - 1)), 90.0 * level, effect, prev))
        prev = f"economy_{level}"

    # logistics: 工位 / 订单位 / 奖励
    tree.append(_node("logistics", 1, "2000", 120.0, ResearchEffect(extra_worker_slots=1), None))
    tree.append(_node("logistics", 2, "8000", 240.0, ResearchEffect(extra_order_slots=1), "logistics_1"))
    tree.append(_node("logistics", 3, "32000", 480.0, ResearchEffect(reward_bonus=D("0.10")), "logistics_2"))
    tree.append(_node("logistics", 4, "128000", 960.0, ResearchEffect(extra_worker_slots=1), "logistics_3"))

    return tree


# -------------------------
# Catalog
# -------------------------
@dataclass
class Catalog:
    tiers: Dict[PrestigeTier, TierRule] = field(default_factory=lambda: dict(DEFAULT_TIERS))
    upgrades: Dict[str, PrestigeUpgrade] = field(
        default_factory=lambda: {u.id: u for u in DEFAULT_UPGRADES}
    )
    perks: Dict[str, AscensionPerk] = field(default_factory=lambda: {p.id: p for p in DEFAULT_PERKS})
    master_tools: Dict[str, MasterTool] = field(
        default_factory=lambda: {t.id: t for t in DEFAULT_MASTER_TOOLS}
    )
    events: List[EventTemplate] = field(default_factory=lambda: list(DEFAULT_EVENTS))
    units: Dict[str, UnitTemplate] = field(default_factory=lambda: {u.kind: u for u in DEFAULT_UNITS})
    top_tier: PrestigeTier = TOP_TIER

    def tier(self, tier: PrestigeTier) -> Optional[TierRule]:
        return self.tiers.get(tier)


def new_ledger(now: float | None = None) -> Ledger:
    """首次启动的默认 Ledger（基础单位 + 全新研究树）"""
    ledger = Ledger(research_tree=create_research_tree())
    if now is not None:
        ledger.created_at = now
        ledger.last_played_at = now
    return ledger
