from __future__ import annotations

import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Optional

from tycoon.config.balance_config import BalanceConfig
from tycoon.core.catalog import new_ledger
from tycoon.core.ledger import Ledger
from tycoon.persistence.codec import LedgerCodec
from tycoon.persistence.sanitize import sanitize
from tycoon.persistence.store import SaveStore
from tycoon.utils.logger import logs

"""
{#!filepath: tycoon/persistence/autosave.py}

Autosaver: fire-and-forget persistence

- snapshot 在调用线程（scheduler）上生成：后台线程只接触 dict，不碰 Ledger
- 单 worker 线程：写入按提交顺序串行
- 写入失败只记录日志，不影响模拟
"""


class Autosaver:
    def __init__(self, store: SaveStore, codec: LedgerCodec | None = None):
        self.store = store
        self.codec = codec or LedgerCodec()
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="autosave")
        self._last: Optional[Future] = None
        self._lock = threading.Lock()

    def submit(self, ledger: Ledger) -> Future:
        snapshot = self.codec.to_dict(ledger)
        future = self._executor.submit(self._write, snapshot)
        with self._lock:
            self._last = future
        return future

    def save_now(self, ledger: Ledger) -> bool:
        return self._write(self.codec.to_dict(ledger))

    def _write(self, snapshot: dict) -> bool:
        try:
            ok = self.store.save(snapshot)
        except Exception:
            logs.exception("[Save] autosave raised")
            return False
        if not ok:
            logs.warning("[Save] autosave failed, will retry next interval")
        return ok

    def flush(self, timeout: float | None = None) -> None:
        """等待最后一次提交的写入完成"""
        with self._lock:
            last = self._last
        if last is not None:
            last.result(timeout=timeout)

    def shutdown(self) -> None:
        self._executor.shutdown(wait=True)

    # --------------------------------------------------
    # load
    # --------------------------------------------------
    def load_or_new(self, balance: BalanceConfig, now: float | None = None) -> Ledger:
        """缺失 / 损坏 → 全新 Ledger；否则逐字段修复 + sanitize"""
        try:
            snapshot = self.store.load()
        except Exception:
            logs.exception("[Save] load raised, starting fresh")
            snapshot = None

        if snapshot is None:
            return new_ledger(now)

        ledger = self.codec.from_dict(snapshot)
        sanitize(ledger, balance.permanent_multiplier_max)
        logs.info(f"[Save] loaded ledger (money={ledger.money}, level={ledger.player_level})")
        return ledger
