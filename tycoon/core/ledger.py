from __future__ import annotations

import time
import uuid
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, List, Optional, Set

from tycoon.core.types import (
    DeliveryKind,
    PrestigeTier,
    StructureKind,
    WorkerTier,
)

# tycoon/core/ledger.py

ZERO = Decimal("0")
HUNDRED = Decimal("100")

BASELINE_UNIT_KIND = "carpenter"

TIER_EFFICIENCY: Dict[WorkerTier, Decimal] = {
    WorkerTier.E: Decimal("1.0"),
    WorkerTier.D: Decimal("1.3"),
    WorkerTier.C: Decimal("1.7"),
    WorkerTier.B: Decimal("2.2"),
    WorkerTier.A: Decimal("3.0"),
    WorkerTier.S: Decimal("4.0"),
}

STRUCTURE_MAX_LEVEL = 5


def new_id(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex[:10]}"


# -------------------------
# Workforce
# -------------------------
@dataclass
class Worker:
    id: str
    tier: WorkerTier = WorkerTier.E
    mood: Decimal = Decimal("80")
    fatigue: Decimal = ZERO
    is_resting: bool = False
    total_earned: Decimal = ZERO

    @property
    def efficiency(self) -> Decimal:
        return TIER_EFFICIENCY[self.tier]

    @property
    def is_working(self) -> bool:
        return not self.is_resting

    @classmethod
    def create(cls, tier: WorkerTier = WorkerTier.E) -> "Worker":
        return cls(id=new_id("w"), tier=tier)


@dataclass
class ProductionUnit:
    """
    ProductionUnit

    income_per_worker       = base_income × (1 + 0.1 × (level − 1))
    base_income_per_second  = Σ working workers: income_per_worker × efficiency
    running_cost_per_second = base_running_cost × len(workers)   (resting workers still paid)
    """
    id: str
    kind: str
    level: int = 1
    workers: List[Worker] = field(default_factory=list)
    base_income: Decimal = Decimal("1")
    base_running_cost: Decimal = Decimal("0.2")
    special_role: Optional[str] = None
    total_earned: Decimal = ZERO

    @property
    def income_per_worker(self) -> Decimal:
        return self.base_income * (1 + Decimal("0.1") * (self.level - 1))

    @property
    def base_income_per_second(self) -> Decimal:
        per_worker = self.income_per_worker
        return sum(
            (per_worker * w.efficiency for w in self.workers if w.is_working),
            ZERO,
        )

    @property
    def running_cost_per_second(self) -> Decimal:
        return self.base_running_cost * len(self.workers)

    def max_workers(self, extra_slots: int = 0) -> int:
        return 3 + self.level // 5 + extra_slots


# -------------------------
# Research
# -------------------------
@dataclass
class ResearchEffect:
    """Additive research bonuses; combined across every completed node."""
    efficiency_bonus: Decimal = ZERO
    cost_reduction: Decimal = ZERO
    wage_reduction: Decimal = ZERO
    extra_worker_slots: int = 0
    extra_order_slots: int = 0
    reward_bonus: Decimal = ZERO

    def combine(self, other: "ResearchEffect") -> "ResearchEffect":
        return ResearchEffect(
            efficiency_bonus=self.efficiency_bonus + other.efficiency_bonus,
            cost_reduction=self.cost_reduction + other.cost_reduction,
            wage_reduction=self.wage_reduction + other.wage_reduction,
            extra_worker_slots=self.extra_worker_slots + other.extra_worker_slots,
            extra_order_slots=self.extra_order_slots + other.extra_order_slots,
            reward_bonus=self.reward_bonus + other.reward_bonus,
        )


@dataclass
class ResearchNode:
    id: str
    branch: str
    level: int
    cost: Decimal
    duration_seconds: float
    prerequisites: List[str] = field(default_factory=list)
    effect: ResearchEffect = field(default_factory=ResearchEffect)
    is_researched: bool = False
    is_active: bool = False
    remaining_seconds: float = 0.0


# -------------------------
# Structures
# -------------------------
_STORAGE_REDUCTION = [ZERO, Decimal("0.15"), Decimal("0.25"), Decimal("0.35"), Decimal("0.45"), Decimal("0.50")]
_FLEET_REWARD = [ZERO, Decimal("0.20"), Decimal("0.30"), Decimal("0.40"), Decimal("0.50"), Decimal("0.60")]


@dataclass
class Structure:
    kind: StructureKind
    level: int = 0

    @property
    def is_built(self) -> bool:
        return self.level > 0

    @property
    def material_cost_reduction(self) -> Decimal:
        if self.kind != StructureKind.STORAGE:
            return ZERO
        return _STORAGE_REDUCTION[min(self.level, STRUCTURE_MAX_LEVEL)]

    @property
    def extra_worker_slots(self) -> int:
        if self.kind != StructureKind.WORKSHOP_EXTENSION or not self.is_built:
            return 0
        return self.level + 1

    @property
    def extra_order_slots(self) -> int:
        if self.kind != StructureKind.OFFICE or not self.is_built:
            return 0
        return self.level + 1

    @property
    def order_reward_bonus(self) -> Decimal:
        if self.kind != StructureKind.VEHICLE_FLEET:
            return ZERO
        return _FLEET_REWARD[min(self.level, STRUCTURE_MAX_LEVEL)]

    @property
    def fatigue_recovery_bonus(self) -> Decimal:
        if self.kind != StructureKind.CANTEEN:
            return ZERO
        return Decimal("0.2") * self.level


# -------------------------
# Meta progress
# -------------------------
@dataclass
class PrestigeRecord:
    current_tier: PrestigeTier = PrestigeTier.NONE
    bronze_count: int = 0
    silver_count: int = 0
    gold_count: int = 0
    prestige_points: int = 0
    total_prestige_points: int = 0
    purchased_upgrades: Set[str] = field(default_factory=set)
    permanent_multiplier: Decimal = Decimal("1.0")

    def tier_count(self, tier: PrestigeTier) -> int:
        if tier == PrestigeTier.BRONZE:
            return self.bronze_count
        if tier == PrestigeTier.SILVER:
            return self.silver_count
        if tier == PrestigeTier.GOLD:
            return self.gold_count
        return 0

    @property
    def total_prestige_count(self) -> int:
        return self.bronze_count + self.silver_count + self.gold_count


@dataclass
class AscensionRecord:
    ascension_level: int = 0
    ascension_points: int = 0
    total_ascension_points: int = 0
    perk_levels: Dict[str, int] = field(default_factory=dict)

    def perk_level(self, perk_id: str) -> int:
        return self.perk_levels.get(perk_id, 0)


@dataclass
class AutomationFlags:
    auto_collect_delivery: bool = False
    auto_accept_order: bool = False
    auto_assign_workers: bool = False


@dataclass
class Settings:
    sound_enabled: bool = True
    music_enabled: bool = True
    haptics_enabled: bool = True
    language: str = "en"


# -------------------------
# Time-limited things
# -------------------------
@dataclass
class TimedEvent:
    id: str
    kind: str
    income_multiplier: Decimal = Decimal("1")
    cost_multiplier: Decimal = Decimal("1")
    special_effect: Optional[str] = None
    reputation_change: int = 0
    started_at: float = 0.0
    expires_at: float = 0.0

    def is_active(self, now: float) -> bool:
        return self.started_at <= now < self.expires_at


@dataclass
class Delivery:
    id: str
    kind: DeliveryKind
    amount: Decimal
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at


@dataclass
class Order:
    id: str
    base_reward: Decimal
    xp_reward: int
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at


@dataclass
class LuckySpinState:
    free_spins: int = 1
    last_spin_at: float = 0.0


def xp_for_next_level(level: int) -> int:
    return 100 * level


def baseline_unit(worker_tier: WorkerTier = WorkerTier.E) -> ProductionUnit:
    unit = ProductionUnit(id=BASELINE_UNIT_KIND, kind=BASELINE_UNIT_KIND)
    unit.workers.append(Worker.create(worker_tier))
    return unit


# -------------------------
# Ledger
# -------------------------
@dataclass
class Ledger:
    """
    Ledger (FINAL / FROZEN)

    The single mutable aggregate of the simulation. Owned by the TickScheduler;
    every subsystem receives it as an argument for the duration of a call.
    """

    # currency
    money: Decimal = Decimal("100")
    total_money_earned: Decimal = ZERO
    total_money_spent: Decimal = ZERO
    premium_currency: int = 0
    total_premium_earned: int = 0

    # player
    player_level: int = 1
    current_xp: int = 0
    total_xp: int = 0
    reputation: int = 50

    # production / research / structures
    production_units: List[ProductionUnit] = field(default_factory=lambda: [baseline_unit()])
    research_tree: List[ResearchNode] = field(default_factory=list)
    active_research_id: Optional[str] = None
    structures: List[Structure] = field(default_factory=list)

    # orders / deliveries
    available_orders: List[Order] = field(default_factory=list)
    active_order: Optional[Order] = None
    orders_completed: int = 0
    last_order_completed_at: float = 0.0
    pending_delivery: Optional[Delivery] = None
    next_delivery_at: float = 0.0
    deliveries_claimed: int = 0

    # boosts (epoch seconds)
    speed_boost_until: float = 0.0
    rush_boost_until: float = 0.0
    xp_boost_until: float = 0.0

    # daily rewards
    daily_reward_streak: int = 0
    last_daily_reward_at: float = 0.0

    # random events
    active_event: Optional[TimedEvent] = None
    last_applied_event_id: Optional[str] = None

    # collectibles / ascension-only subsystems
    collected_master_tools: Set[str] = field(default_factory=set)
    crafting_inventory: Dict[str, int] = field(default_factory=dict)
    crafting_jobs: List[str] = field(default_factory=list)
    equipment_inventory: List[str] = field(default_factory=list)
    managers: List[str] = field(default_factory=list)
    tools: Dict[str, int] = field(default_factory=dict)
    pending_story_id: Optional[str] = None
    lucky_spin: LuckySpinState = field(default_factory=LuckySpinState)
    active_offers: List[str] = field(default_factory=list)
    tournament_id: Optional[str] = None

    # meta progress
    prestige: PrestigeRecord = field(default_factory=PrestigeRecord)
    ascension: AscensionRecord = field(default_factory=AscensionRecord)
    automation: AutomationFlags = field(default_factory=AutomationFlags)

    # always preserved
    unlocked_achievements: Set[str] = field(default_factory=set)
    cosmetic_unlocks: Set[str] = field(default_factory=set)
    is_premium: bool = False
    settings: Settings = field(default_factory=Settings)
    tutorial_completed: bool = False
    tutorial_step: int = 0
    created_at: float = field(default_factory=time.time)

    # network scalars
    guild_income_bonus: Decimal = ZERO
    pending_contribution_points: int = 0

    # lifetime / scheduling
    total_play_time_seconds: float = 0.0
    last_played_at: float = 0.0
    tick_count: int = 0

    # --------------------------------------------------
    # lookups
    # --------------------------------------------------
    def unit(self, unit_id: str) -> Optional[ProductionUnit]:
        return next((u for u in self.production_units if u.id == unit_id), None)

    def research(self, research_id: str) -> Optional[ResearchNode]:
        return next((r for r in self.research_tree if r.id == research_id), None)

    def structure(self, kind: StructureKind) -> Optional[Structure]:
        return next((s for s in self.structures if s.kind == kind), None)

    def all_workers(self) -> List[Worker]:
        return [w for u in self.production_units for w in u.workers]

    # --------------------------------------------------
    # currency（money >= 0 永远成立）
    # --------------------------------------------------
    def add_money(self, amount: Decimal) -> None:
        if amount <= 0:
            return
        self.money += amount
        self.total_money_earned += amount

    def can_afford(self, amount: Decimal) -> bool:
        return amount >= 0 and self.money >= amount

    def try_spend(self, amount: Decimal) -> bool:
        if not self.can_afford(amount):
            return False
        self.money -= amount
        self.total_money_spent += amount
        return True

    def absorb_costs(self, amount: Decimal) -> Decimal:
        """
        运行成本超出余额时静默吸收：余额最低到 0。
        返回实际扣除的金额。
        """
        if amount <= 0:
            return ZERO
        paid = min(amount, self.money)
        self.money -= paid
        return paid

    def add_premium(self, amount: int) -> None:
        if amount <= 0:
            return
        self.premium_currency += amount
        self.total_premium_earned += amount

    def add_xp(self, amount: int) -> int:
        """加经验并升级，返回本次升了几级"""
        if amount <= 0:
            return 0
        self.current_xp += amount
        self.total_xp += amount

        gained = 0
        while self.current_xp >= xp_for_next_level(self.player_level):
            self.current_xp -= xp_for_next_level(self.player_level)
            self.player_level += 1
            gained += 1
        return gained

    # --------------------------------------------------
    # boosts
    # --------------------------------------------------
    def is_speed_boost_active(self, now: float) -> bool:
        return now < self.speed_boost_until

    def is_rush_boost_active(self, now: float) -> bool:
        return now < self.rush_boost_until

    def current_event(self, now: float) -> Optional[TimedEvent]:
        if self.active_event is not None and self.active_event.is_active(now):
            return self.active_event
        return None
