from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Callable, Dict, List, Optional

from tycoon.core.events import Event, EventQueue, LevelUpEvent, TickEvent
from tycoon.core.ledger import Ledger
from tycoon.engine.effects import EffectAggregator
from tycoon.engine.income import IncomePipeline, TickResult
from tycoon.engine.rate_table import RateTable
from tycoon.engine.workforce import update_worker_states
from tycoon.network.hooks import NetworkHooks
from tycoon.observability.instrumentation import Instrumentation, NoOpInstrumentation
from tycoon.utils.errors import ScheduleConfigError
from tycoon.utils.logger import logs

"""
{#!filepath: tycoon/engine/scheduler.py}

TickScheduler (FINAL / FROZEN)

一个 tick（原子，不会被部分应用）：
  0. network inbox → Ledger
  1. IncomePipeline
  2. 工人状态（疲劳 / 心情）
  3. tick_count += 1
  4. rate table 中到期的 handler（按表顺序）
     单个 handler 抛异常 → logs.exception，其余 handler 与本 tick 照常完成
  5. TickEvent → EventQueue

并发模型：
- tick 与玩家操作（run_exclusive）共享同一把不可重入锁
- background 模式只有一个 daemon 线程推进 tick
- autosave / network 在各自后台线程，只接触拷贝出来的数据

Session 时间：
- start / resume 记录 session_start
- pause / stop 把 now − session_start 计入 total_play_time_seconds 并清空
  → pause 之后再 stop 不会重复计时；暂停期间不计时
"""

Handler = Callable[["TickContext"], None]


class SchedulerState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    STOPPED = "stopped"


class ManualClock:
    """可推进的时钟：headless 快进 / 测试"""

    def __init__(self, start: float = 0.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@dataclass
class TickContext:
    ledger: Ledger
    effects: EffectAggregator
    now: float
    tick: int
    events: EventQueue

    def emit(self, event: Optional[Event]) -> None:
        if event is not None:
            self.events.push(event)

    def emit_all(self, events: List[Event]) -> None:
        if events:
            self.events.extend(events)


class TickScheduler:
    def __init__(
        self,
        ledger: Ledger,
        rate_table: RateTable,
        pipeline: IncomePipeline,
        effects: EffectAggregator,
        handlers: Dict[str, Handler],
        *,
        events: EventQueue | None = None,
        network: NetworkHooks | None = None,
        clock: Callable[[], float] = time.time,
        tick_seconds: float = 1.0,
        on_pause: Callable[[Ledger], None] | None = None,
        inst: Instrumentation | None = None,
    ):
        missing = [name for name in rate_table.names if name not in handlers]
        if missing:
            raise ScheduleConfigError(f"rate table entries without handler: {missing}")

        self.ledger = ledger
        self.rate_table = rate_table
        self.pipeline = pipeline
        self.effects = effects
        self.handlers = handlers
        self.events = events or EventQueue()
        self.network = network
        self.clock = clock
        self.tick_seconds = tick_seconds
        self.on_pause = on_pause
        self.inst = inst if inst is not None else NoOpInstrumentation()

        self.state = SchedulerState.IDLE
        self.last_result: Optional[TickResult] = None

        self._lock = threading.Lock()
        self._session_start: Optional[float] = None
        self._session_elapsed = 0.0
        self._stop_evt = threading.Event()
        self._thread: Optional[threading.Thread] = None

    # --------------------------------------------------
    # lifecycle
    # --------------------------------------------------
    def start(self, background: bool = False) -> None:
        if self.state in (SchedulerState.RUNNING, SchedulerState.PAUSED):
            return

        with self._lock:
            self.ledger.tick_count = 0
            self._session_start = self.clock()
            self._session_elapsed = 0.0
            self._stop_evt.clear()
            self.state = SchedulerState.RUNNING

        logs.info(f"[Scheduler] start (background={background}, entries={len(self.rate_table)})")

        if background:
            self._thread = threading.Thread(target=self._loop, name="tick-scheduler", daemon=True)
            self._thread.start()

    def pause(self) -> None:
        with self._lock:
            if self.state != SchedulerState.RUNNING:
                return
            self._flush_session(self.clock())
            self.state = SchedulerState.PAUSED
            logs.info(f"[Scheduler] pause at tick {self.ledger.tick_count}")
            self._persist()

    def resume(self) -> None:
        with self._lock:
            if self.state != SchedulerState.PAUSED:
                return
            self._session_start = self.clock()
            self.state = SchedulerState.RUNNING
            logs.info("[Scheduler] resume")

    def stop(self) -> None:
        if self.state in (SchedulerState.IDLE, SchedulerState.STOPPED):
            return

        self._stop_evt.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=max(5.0, self.tick_seconds * 5))
        self._thread = None

        with self._lock:
            self._flush_session(self.clock())
            self.state = SchedulerState.STOPPED
            self._persist()

        self.inst.metrics.record("ticks", self.ledger.tick_count)
        self.inst.metrics.record("play_time_seconds", round(self.ledger.total_play_time_seconds, 1))
        self.inst.generate_timeline_report(f"{self.ledger.tick_count} ticks")
        logs.info(f"[Scheduler] stop after {self.ledger.tick_count} ticks")

    @property
    def is_running(self) -> bool:
        return self.state == SchedulerState.RUNNING

    # --------------------------------------------------
    # session time
    # --------------------------------------------------
    def _flush_session(self, now: float) -> None:
        if self._session_start is None:
            return
        elapsed = max(0.0, now - self._session_start)
        self.ledger.total_play_time_seconds += elapsed
        self.ledger.last_played_at = now
        self._session_elapsed += elapsed
        self._session_start = None

    def session_duration(self, now: float | None = None) -> float:
        if self._session_start is None:
            return self._session_elapsed
        now = self.clock() if now is None else now
        return self._session_elapsed + max(0.0, now - self._session_start)

    def _persist(self) -> None:
        if self.on_pause is None:
            return
        try:
            self.on_pause(self.ledger)
        except Exception:
            logs.exception("[Scheduler] save on pause/stop failed")

    # --------------------------------------------------
    # tick
    # --------------------------------------------------
    def tick(self, now: float | None = None) -> Optional[TickResult]:
        with self._lock:
            if self.state != SchedulerState.RUNNING:
                logs.debug(f"[Scheduler] tick ignored in state {self.state.value}")
                return None
            return self._tick(self.clock() if now is None else now)

    def _tick(self, now: float) -> TickResult:
        ledger = self.ledger
        effects = self.effects
        seconds = Decimal(str(self.tick_seconds))

        # 0. network results
        if self.network is not None:
            self.network.drain(ledger)

        # 1. income
        level_before = ledger.player_level
        result = self.pipeline.run(ledger, effects, now, seconds)
        self.last_result = result

        # 2. workers
        update_worker_states(ledger, seconds, effects.fatigue_recovery_bonus())

        # 3. tick counter
        ledger.tick_count += 1
        tick = ledger.tick_count

        # 4. rate table
        ctx = TickContext(ledger=ledger, effects=effects, now=now, tick=tick, events=self.events)
        for name in self.rate_table.due(tick):
            with self.inst.timer(name):
                try:
                    self.handlers[name](ctx)
                except Exception:
                    logs.exception(f"[Scheduler] handler {name} failed at tick {tick}")

        if ledger.player_level > level_before:
            self.events.push(LevelUpEvent(level=ledger.player_level))

        # 5. observation
        self.events.push(
            TickEvent(
                tick=tick,
                net_earnings=result.applied,
                money=ledger.money,
                session_duration=self.session_duration(now),
            )
        )
        self.inst.metrics.incr("ticks_run")
        logs.debug(f"[Scheduler] tick {tick} net={result.applied} money={ledger.money}")
        return result

    def run_ticks(self, n: int) -> List[TickResult]:
        """headless 快进；clock 可推进时每 tick 推进 tick_seconds"""
        if self.state == SchedulerState.IDLE:
            self.start()

        results: List[TickResult] = []
        advance = getattr(self.clock, "advance", None)
        for _ in range(n):
            if advance is not None:
                advance(self.tick_seconds)
            result = self.tick()
            if result is None:
                break
            results.append(result)
        return results

    def run_exclusive(self, fn: Callable, *args, **kwargs):
        """玩家操作：与 tick 互斥，执行完之后下一个 tick 才会读 Ledger"""
        with self._lock:
            return fn(self.ledger, *args, **kwargs)

    def replace_ledger(self, ledger: Ledger) -> None:
        with self._lock:
            self.ledger = ledger
            self.effects.rebind(ledger)

    # --------------------------------------------------
    # background loop
    # --------------------------------------------------
    def _loop(self) -> None:
        next_at = time.monotonic()
        while not self._stop_evt.is_set():
            if self.state == SchedulerState.RUNNING:
                try:
                    self.tick()
                except Exception:
                    logs.exception("[Scheduler] tick failed, stopping background loop")
                    self._stop_evt.set()
                    break

            next_at += self.tick_seconds
            self._stop_evt.wait(max(0.0, next_at - time.monotonic()))
