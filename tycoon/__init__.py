#!filepath: tycoon/__init__.py

from .utils.logger import Logging, logs
from .utils.retry import Retry, AsyncRetry
from .utils.filesystem import FileSystem
from .config.app_config import AppConfig

# alias 简化调用
retry = Retry
async_retry = AsyncRetry
fs = FileSystem

__all__ = [
    "logs", "Logging",
    "retry", "async_retry",
    "fs",
    "AppConfig",
]
