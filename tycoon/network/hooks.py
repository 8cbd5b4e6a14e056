from __future__ import annotations

import asyncio
import queue
import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Callable, List

from tycoon.config.network_config import NetworkConfig
from tycoon.core.ledger import Ledger, ZERO
from tycoon.network.clients import BountyClient, GuildClient, LeaderboardClient
from tycoon.utils.logger import logs
from tycoon.utils.retry import AsyncRetry

"""
{#!filepath: tycoon/network/hooks.py}

NetworkHooks: fire-and-forget

调度线程（tick 内）:
  submit_score / contribute / finalize
    → 从 Ledger 拷贝标量，提交到后台线程，立即返回
  drain(ledger)
    → 下一个 tick 开头把 inbox 里的结果写回 Ledger

后台线程:
  asyncio.run(AsyncRetry.run(...)) + 超时
  任何异常都在这里吞掉 + warning，绝不抛回调度线程
  贡献点提交失败 → 放回 inbox，由调度线程加回 pending_contribution_points
  返回值在后台线程里转成 Decimal / int，转不了按失败处理
  drain 遇到无法写回的结果只丢弃那一条
"""

GUILD_BONUS = "guild_bonus"
REQUEUE_POINTS = "requeue_points"
BOUNTY_REWARD = "bounty_reward"


@dataclass(frozen=True)
class NetworkResult:
    kind: str
    value: Any


class NetworkHooks:
    def __init__(
        self,
        leaderboard: LeaderboardClient,
        guild: GuildClient,
        bounty: BountyClient,
        cfg: NetworkConfig | None = None,
    ):
        self.leaderboard = leaderboard
        self.guild = guild
        self.bounty = bounty
        self.cfg = cfg or NetworkConfig(enabled=True)

        self._inbox: "queue.Queue[NetworkResult]" = queue.Queue()
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="network")
        self._pending: List[Future] = []
        self._lock = threading.Lock()

    # --------------------------------------------------
    # background plumbing
    # --------------------------------------------------
    async def _call(self, func: Callable, *args):
        return await asyncio.wait_for(func(*args), timeout=self.cfg.timeout_seconds)

    def _run(self, func: Callable, *args):
        return asyncio.run(
            AsyncRetry.run(
                self._call,
                func,
                *args,
                max_attempts=self.cfg.max_attempts,
                delay=self.cfg.retry_delay,
            )
        )

    def _submit(self, job: Callable[[], None]) -> Future:
        future = self._executor.submit(job)
        with self._lock:
            self._pending = [f for f in self._pending if not f.done()]
            self._pending.append(future)
        return future

    # --------------------------------------------------
    # hooks（调度线程调用）
    # --------------------------------------------------
    def submit_score(self, ledger: Ledger) -> None:
        if not self.cfg.enabled:
            return
        score = ledger.total_money_earned

        def job():
            try:
                self._run(self.leaderboard.submit_score, score)
                logs.debug(f"[Network] score submitted: {score}")
            except Exception as e:
                logs.warning(f"[Network] submit_score failed: {e!r}")

        self._submit(job)

    def contribute(self, ledger: Ledger) -> None:
        if not self.cfg.enabled:
            return
        points = ledger.pending_contribution_points
        if points <= 0:
            return
        ledger.pending_contribution_points = 0

        def job():
            try:
                raw = self._run(self.guild.contribute, points)
                bonus = max(ZERO, Decimal(str(raw)))
            except Exception as e:
                logs.warning(f"[Network] contribute({points}) failed, re-queued: {e!r}")
                self._inbox.put(NetworkResult(REQUEUE_POINTS, points))
                return
            self._inbox.put(NetworkResult(GUILD_BONUS, bonus))
            logs.debug(f"[Network] contributed {points} pts, guild bonus={bonus}")

        self._submit(job)

    def finalize(self, ledger: Ledger) -> None:
        if not self.cfg.enabled:
            return

        def job():
            try:
                reward = int(self._run(self.bounty.check_and_finalize) or 0)
            except Exception as e:
                logs.warning(f"[Network] check_and_finalize failed: {e!r}")
                return
            if reward:
                self._inbox.put(NetworkResult(BOUNTY_REWARD, reward))

        self._submit(job)

    # --------------------------------------------------
    # inbox → Ledger（调度线程，tick 开头）
    # --------------------------------------------------
    def drain(self, ledger: Ledger) -> int:
        applied = 0
        while True:
            try:
                result = self._inbox.get_nowait()
            except queue.Empty:
                break

            try:
                if result.kind == GUILD_BONUS:
                    ledger.guild_income_bonus = max(ZERO, Decimal(str(result.value)))
                elif result.kind == REQUEUE_POINTS:
                    ledger.pending_contribution_points += int(result.value)
                elif result.kind == BOUNTY_REWARD:
                    ledger.add_premium(int(result.value))
            except Exception as e:
                logs.warning(f"[Network] dropped {result.kind} result {result.value!r}: {e!r}")
                continue
            applied += 1
        return applied

    def flush(self, timeout: float | None = None) -> None:
        """等待所有已提交的后台调用结束（测试 / 停止时）"""
        with self._lock:
            pending = list(self._pending)
        wait(pending, timeout=timeout)

    def shutdown(self) -> None:
        self._executor.shutdown(wait=True)
