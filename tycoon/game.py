from __future__ import annotations

import random
import time
from decimal import Decimal
from typing import Any, Callable, Dict

from tycoon.config.app_config import AppConfig
from tycoon.core.catalog import Catalog
from tycoon.core.events import EventQueue
from tycoon.core.ledger import Ledger
from tycoon.core.types import AutomationFeature, PrestigeTier, StructureKind, WorkerTier
from tycoon.engine.ascension import AscensionService
from tycoon.engine.automation import AutomationDispatcher
from tycoon.engine.deliveries import DeliveryService
from tycoon.engine.economy import Economy
from tycoon.engine.effects import EffectAggregator
from tycoon.engine.income import IncomePipeline
from tycoon.engine.master_tools import MasterTools
from tycoon.engine.orders import OrderBoard
from tycoon.engine.prestige import PrestigeService
from tycoon.engine.random_events import EventService
from tycoon.engine.rate_table import RateTable
from tycoon.engine.research import ResearchLab
from tycoon.engine.scheduler import Handler, TickContext, TickScheduler
from tycoon.network.clients import BountyClient, GuildClient, LeaderboardClient, OfflineNetwork
from tycoon.network.hooks import NetworkHooks
from tycoon.observability.instrumentation import Instrumentation
from tycoon.persistence.autosave import Autosaver
from tycoon.persistence.store import JsonSaveStore, SaveStore
from tycoon.utils.logger import logs

"""
{#!filepath: tycoon/game.py}

Game: composition root

- 从 AppConfig 构建所有子系统，并把它们绑定到 rate table 的 handler 名字上
- 所有玩家操作经 scheduler.run_exclusive 执行（与 tick 互斥）
- 不持有任何模拟逻辑：只做装配 + 转发
"""


class Game:
    def __init__(
        self,
        cfg: AppConfig,
        *,
        store: SaveStore | None = None,
        leaderboard: LeaderboardClient | None = None,
        guild: GuildClient | None = None,
        bounty: BountyClient | None = None,
        clock: Callable[[], float] = time.time,
        catalog: Catalog | None = None,
        inst: Instrumentation | None = None,
        ledger: Ledger | None = None,
    ):
        self.cfg = cfg
        self.catalog = catalog or Catalog()
        self.clock = clock
        self.rng = random.Random(cfg.simulation.seed)
        self.inst = inst or Instrumentation()
        self.events = EventQueue()

        # persistence
        self.store = store or JsonSaveStore(cfg.save.path, write_attempts=cfg.save.write_attempts)
        self.autosaver = Autosaver(self.store)
        if ledger is None:
            ledger = self.autosaver.load_or_new(cfg.balance, now=clock())

        # network
        offline = OfflineNetwork()
        self.network = NetworkHooks(
            leaderboard or offline,
            guild or offline,
            bounty or offline,
            cfg.network,
        )

        # services
        balance = cfg.balance
        self.effects = EffectAggregator(ledger, self.catalog)
        self.pipeline = IncomePipeline(balance)
        self.research = ResearchLab(self.catalog)
        self.deliveries = DeliveryService(self.catalog, balance, self.rng)
        self.orders = OrderBoard(balance, self.rng)
        self.random_events = EventService(self.catalog, self.rng)
        self.master_tools = MasterTools(self.catalog)
        self.automation = AutomationDispatcher(balance, self.deliveries)
        self.economy = Economy(self.catalog, balance, self.effects, self.automation)
        self.prestige = PrestigeService(self.catalog, balance, self.effects, persist=self._persist)
        self.ascension = AscensionService(self.catalog, balance, self.effects, persist=self._persist)

        self.scheduler = TickScheduler(
            ledger,
            RateTable.from_config(cfg.simulation.rate_table),
            self.pipeline,
            self.effects,
            self._handlers(),
            events=self.events,
            network=self.network,
            clock=clock,
            tick_seconds=cfg.simulation.tick_seconds,
            on_pause=self._persist if cfg.save.save_on_pause else None,
            inst=self.inst,
        )

    @property
    def ledger(self) -> Ledger:
        return self.scheduler.ledger

    def _persist(self, ledger: Ledger) -> None:
        self.autosaver.submit(ledger)

    # --------------------------------------------------
    # rate table bindings
    # --------------------------------------------------
    def _handlers(self) -> Dict[str, Handler]:
        tick_seconds = self.cfg.simulation.tick_seconds

        def research_timer(ctx: TickContext) -> None:
            ctx.emit(self.research.advance(ctx.ledger, ctx.effects, tick_seconds))

        def automation_collect(ctx: TickContext) -> None:
            ctx.emit(self.automation.collect(ctx.ledger, ctx.now))

        def delivery_check(ctx: TickContext) -> None:
            ctx.emit(self.deliveries.check(ctx.ledger, ctx.effects, ctx.now))

        def autosave(ctx: TickContext) -> None:
            self.autosaver.submit(ctx.ledger)

        def order_refresh(ctx: TickContext) -> None:
            # 上一个周期接下的订单在本周期完工
            ctx.emit(self.orders.complete_active(ctx.ledger, ctx.effects, ctx.now))
            ctx.emit_all(self.orders.refresh(ctx.ledger, ctx.effects, ctx.now))
            ctx.emit(self.automation.accept(ctx.ledger))

        def automation_assign(ctx: TickContext) -> None:
            ctx.emit(self.automation.assign(ctx.ledger, ctx.effects))

        def master_tool_check(ctx: TickContext) -> None:
            ctx.emit_all(self.master_tools.check(ctx.ledger, ctx.effects))

        def event_check(ctx: TickContext) -> None:
            ctx.emit(self.random_events.check(ctx.ledger, ctx.now))

        def network_score(ctx: TickContext) -> None:
            self.network.submit_score(ctx.ledger)

        def network_contribution(ctx: TickContext) -> None:
            self.network.contribute(ctx.ledger)

        def network_finalize(ctx: TickContext) -> None:
            self.network.finalize(ctx.ledger)

        return {
            "research_timer": research_timer,
            "automation_collect": automation_collect,
            "delivery_check": delivery_check,
            "autosave": autosave,
            "order_refresh": order_refresh,
            "automation_assign": automation_assign,
            "master_tool_check": master_tool_check,
            "event_check": event_check,
            "network_score": network_score,
            "network_contribution": network_contribution,
            "network_finalize": network_finalize,
        }

    # --------------------------------------------------
    # lifecycle
    # --------------------------------------------------
    def start(self, background: bool = False) -> None:
        self.scheduler.start(background=background)

    def run_ticks(self, n: int):
        return self.scheduler.run_ticks(n)

    def pause(self) -> None:
        self.scheduler.pause()

    def resume(self) -> None:
        self.scheduler.resume()

    def stop(self) -> None:
        self.scheduler.stop()
        self.network.flush(timeout=self.cfg.network.timeout_seconds)
        self.autosaver.flush()

    def save(self) -> bool:
        """同步保存（CLI 单次命令结束时）"""
        return self._exclusive(self.autosaver.save_now)

    def reload(self) -> None:
        """从存档重新读取 Ledger（tick 之间原子替换）"""
        self.autosaver.flush()
        ledger = self.autosaver.load_or_new(self.cfg.balance, now=self.clock())
        self.scheduler.replace_ledger(ledger)

    def close(self) -> None:
        self.stop()
        self.network.shutdown()
        self.autosaver.shutdown()

    # --------------------------------------------------
    # player actions（try-action：返回 bool）
    # --------------------------------------------------
    def _exclusive(self, fn: Callable, *args) -> Any:
        return self.scheduler.run_exclusive(fn, *args)

    def unlock_unit(self, kind: str) -> bool:
        return self._exclusive(self.economy.unlock_unit, kind)

    def hire_worker(self, unit_id: str, tier: WorkerTier = WorkerTier.E) -> bool:
        return self._exclusive(self.economy.hire_worker, unit_id, tier)

    def upgrade_unit(self, unit_id: str) -> bool:
        return self._exclusive(self.economy.upgrade_unit, unit_id)

    def wake_worker(self, worker_id: str) -> bool:
        return self._exclusive(self.economy.wake_worker, worker_id)

    def build_structure(self, kind: StructureKind) -> bool:
        return self._exclusive(self.economy.build_structure, kind)

    def start_research(self, research_id: str) -> bool:
        return self._exclusive(self.research.start, research_id)

    def cancel_research(self) -> bool:
        return self._exclusive(self.research.cancel)

    def activate_rush(self) -> bool:
        return self._exclusive(self.economy.activate_rush, self.clock())

    def activate_speed_boost(self, seconds: float) -> bool:
        return self._exclusive(self.economy.activate_speed_boost, self.clock(), seconds)

    def set_automation(self, feature: AutomationFeature, on: bool) -> bool:
        return self._exclusive(self.economy.set_automation, feature, on)

    def accept_order(self, order_id: str) -> bool:
        return self._exclusive(self.orders.accept, order_id)

    def complete_order(self) -> bool:
        event = self._exclusive(self.orders.complete_active, self.effects, self.clock())
        return self._push(event)

    def claim_delivery(self) -> bool:
        event = self._exclusive(self.deliveries.claim, self.clock())
        return self._push(event)

    def buy_upgrade(self, upgrade_id: str) -> bool:
        return self._exclusive(self.prestige.buy_upgrade, upgrade_id)

    def buy_perk(self, perk_id: str) -> bool:
        return self._exclusive(self.ascension.buy_perk, perk_id)

    def do_prestige(self, tier: PrestigeTier) -> bool:
        return self._push(self._exclusive(self.prestige.do_prestige, tier))

    def do_ascension(self) -> bool:
        return self._push(self._exclusive(self.ascension.do_ascension))

    def _push(self, event) -> bool:
        if event is None:
            return False
        self.events.push(event)
        return True

    # --------------------------------------------------
    # read side
    # --------------------------------------------------
    def status(self) -> Dict[str, Any]:
        ledger = self.ledger
        result = self.scheduler.last_result
        return {
            "money": ledger.money.quantize(Decimal("0.01")),
            "player_level": ledger.player_level,
            "prestige_tier": ledger.prestige.current_tier.name,
            "prestige_points": ledger.prestige.prestige_points,
            "prestige_count": ledger.prestige.total_prestige_count,
            "permanent_multiplier": ledger.prestige.permanent_multiplier,
            "ascension_level": ledger.ascension.ascension_level,
            "ascension_points": ledger.ascension.ascension_points,
            "units": len(ledger.production_units),
            "workers": len(ledger.all_workers()),
            "net_per_tick": result.net if result is not None else Decimal("0"),
            "tick_count": ledger.tick_count,
            "play_time_seconds": round(ledger.total_play_time_seconds, 1),
        }


def build_game(cfg: AppConfig | None = None, **kwargs) -> Game:
    cfg = cfg or AppConfig.load()
    logs.debug(f"[Game] building with save path {cfg.save.path}")
    return Game(cfg, **kwargs)
