#!filepath: tycoon/utils/filesystem.py
import os
from pathlib import Path

from tycoon.utils.logger import logs


class FileSystem:
    """
    存档用文件系统工具
    - 自动创建目录
    - 原子写入（临时文件 → replace）
    - 清理残留 *.tmp
    """

    @staticmethod
    def ensure_dir(path: str | Path) -> Path:
        p = Path(path)
        if not p.exists():
            p.mkdir(parents=True, exist_ok=True)
            logs.debug(f"[FS] 创建目录: {p}")
        return p

    @staticmethod
    def safe_write(path: str | Path, data: bytes) -> None:
        """
        原子写入（崩溃时旧存档保持完整）
            1) 写入同目录 tmp 文件并 fsync
            2) os.replace → 正式文件
        """
        path = Path(path)
        FileSystem.ensure_dir(path.parent)

        tmp_path = path.with_suffix(path.suffix + ".tmp")

        with open(tmp_path, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())

        os.replace(tmp_path, path)
        logs.debug(f"[FS] 原子写入完成: {path} ({len(data)} bytes)")

    @staticmethod
    def read_bytes(path: str | Path) -> bytes | None:
        p = Path(path)
        if not p.exists():
            return None
        return p.read_bytes()

    @staticmethod
    def clean_temp_files(path: str | Path, suffix: str = ".tmp") -> int:
        """
        删除目录下残留的临时文件（上次写入中途崩溃）
        返回删除的数量
        """
        p = Path(path)
        if not p.exists():
            return 0

        count = 0
        for f in p.glob(f"*{suffix}"):
            f.unlink()
            count += 1
            logs.debug(f"[FS] 删除临时文件: {f}")

        return count
