#!filepath: tycoon/utils/retry.py
import time
import random
import asyncio
from typing import Callable, Tuple, Type

from tycoon.utils.logger import logs


def backoff_delay(attempt: int, delay: float, backoff: float, jitter: bool) -> float:
    """第 attempt 次失败后的等待秒数（指数退避 + 可选 jitter）"""
    wait = delay * (backoff ** (attempt - 1))
    if jitter:
        wait = wait * random.uniform(0.8, 1.2)
    return wait


class Retry:
    """
    同步重试：存档写入（IO 抖动、文件被占用）。
    """

    @staticmethod
    def run(
        func: Callable,
        *args,
        exceptions: Tuple[Type[Exception], ...] = (OSError,),
        max_attempts: int = 3,
        delay: float = 0.2,
        backoff: float = 2.0,
        jitter: bool = True,
        **kwargs,
    ):
        for attempt in range(1, max_attempts + 1):
            try:
                return func(*args, **kwargs)
            except exceptions as e:
                if attempt == max_attempts:
                    logs.error(f"[Retry] {func.__name__} 已达最大次数 {max_attempts}: {e}")
                    raise

                wait = backoff_delay(attempt, delay, backoff, jitter)
                logs.warning(f"[Retry] {func.__name__} 第 {attempt} 次失败: {e}. {wait:.2f}s 后重试")
                time.sleep(wait)


class AsyncRetry:
    """
    异步重试：网络协作者（排行榜 / 公会 / 悬赏）。

    最后一次仍失败时向上抛出，由 NetworkHooks 边界统一吞掉并记录，
    下一个调度周期再试。
    """

    @staticmethod
    async def run(
        func: Callable,
        *args,
        exceptions: Tuple[Type[Exception], ...] = (Exception,),
        max_attempts: int = 2,
        delay: float = 1.0,
        backoff: float = 2.0,
        jitter: bool = True,
        **kwargs,
    ):
        for attempt in range(1, max_attempts + 1):
            try:
                return await func(*args, **kwargs)
            except exceptions as e:
                if attempt == max_attempts:
                    raise

                wait = backoff_delay(attempt, delay, backoff, jitter)
                logs.warning(f"[AsyncRetry] {func.__name__} 第 {attempt} 次失败: {e}. {wait:.2f}s 后重试")
                await asyncio.sleep(wait)
