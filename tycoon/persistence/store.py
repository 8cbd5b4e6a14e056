# tycoon/persistence/store.py
from __future__ import annotations

import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Optional

from tycoon.utils.filesystem import FileSystem
from tycoon.utils.logger import logs
from tycoon.utils.retry import Retry


class SaveStore(ABC):
    """
    SaveStore (FROZEN)

    snapshot dict <-> durable storage

    - save() 原子且崩溃安全；失败返回 False，不抛异常
    - load() 文件缺失 / 损坏 → None（调用方从头开始）
    - 不关心 Ledger 结构，只搬运 dict
    """

    @abstractmethod
    def save(self, snapshot: Dict[str, Any]) -> bool:
        ...

    @abstractmethod
    def load(self) -> Optional[Dict[str, Any]]:
        ...


class JsonSaveStore(SaveStore):
    def __init__(self, path: str | Path, write_attempts: int = 2):
        self.path = Path(path)
        self.write_attempts = write_attempts
        FileSystem.clean_temp_files(self.path.parent)

    def save(self, snapshot: Dict[str, Any]) -> bool:
        data = json.dumps(snapshot, ensure_ascii=False, indent=2).encode("utf-8")
        try:
            Retry.run(
                FileSystem.safe_write,
                self.path,
                data,
                max_attempts=self.write_attempts,
            )
        except OSError as e:
            logs.error(f"[Save] write failed {self.path}: {e}")
            return False

        logs.debug(f"[Save] saved {self.path}")
        return True

    def load(self) -> Optional[Dict[str, Any]]:
        try:
            raw = FileSystem.read_bytes(self.path)
        except OSError as e:
            logs.error(f"[Save] read failed {self.path}: {e}")
            return None

        if raw is None:
            logs.info(f"[Save] no save file at {self.path}")
            return None

        try:
            data = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError):
            logs.exception(f"[Save] corrupt save file {self.path}")
            return None

        if not isinstance(data, dict):
            logs.error(f"[Save] unexpected save payload type: {type(data).__name__}")
            return None
        return data


class MemorySaveStore(SaveStore):
    """进程内存储（测试 / 无盘运行）"""

    def __init__(self, snapshot: Optional[Dict[str, Any]] = None):
        self.snapshot = snapshot
        self.save_count = 0

    def save(self, snapshot: Dict[str, Any]) -> bool:
        self.snapshot = json.loads(json.dumps(snapshot))
        self.save_count += 1
        return True

    def load(self) -> Optional[Dict[str, Any]]:
        return self.snapshot
