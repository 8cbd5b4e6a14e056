#!filepath: tests/test_retry.py
import asyncio

import pytest

from tycoon import retry, async_retry


def test_retry_success_without_retry():
    """第一次运行成功，不触发重试"""
    call_count = {"n": 0}

    def func():
        call_count["n"] += 1
        return "ok"

    assert retry.run(func) == "ok"
    assert call_count["n"] == 1


def test_retry_success_after_failures(monkeypatch):
    """失败 2 次后成功"""
    monkeypatch.setattr("time.sleep", lambda t: None)
    call_count = {"n": 0}

    def func():
        call_count["n"] += 1
        if call_count["n"] < 3:
            raise OSError("busy")
        return "saved"

    assert retry.run(func, max_attempts=5) == "saved"
    assert call_count["n"] == 3


def test_retry_raises_after_max_attempts(monkeypatch):
    monkeypatch.setattr("time.sleep", lambda t: None)
    call_count = {"n": 0}

    def func():
        call_count["n"] += 1
        raise OSError("disk full")

    with pytest.raises(OSError):
        retry.run(func, max_attempts=3)

    assert call_count["n"] == 3


def test_retry_only_catches_listed_exceptions():
    """非 OSError 直接抛出，只执行一次"""
    call_count = {"n": 0}

    def func():
        call_count["n"] += 1
        raise ValueError("not an io error")

    with pytest.raises(ValueError):
        retry.run(func, max_attempts=3)

    assert call_count["n"] == 1


def test_exponential_backoff(monkeypatch):
    """指数退避: 1, 2, 4（不测真实 sleep）"""
    sleep_calls = []
    monkeypatch.setattr("time.sleep", lambda t: sleep_calls.append(t))

    def func():
        raise OSError("fail")

    with pytest.raises(OSError):
        retry.run(func, max_attempts=4, delay=1, backoff=2, jitter=False)

    assert sleep_calls == [1, 2, 4]


# =============================
#   AsyncRetry 测试
# =============================
def test_async_retry_success_after_failure(monkeypatch):
    sleeps = []

    async def fake_sleep(t):
        sleeps.append(t)

    monkeypatch.setattr("asyncio.sleep", fake_sleep)
    call_count = {"n": 0}

    async def contribute():
        call_count["n"] += 1
        if call_count["n"] == 1:
            raise ConnectionError("offline")
        return 7

    result = asyncio.run(async_retry.run(contribute, max_attempts=2, delay=1.0, jitter=False))

    assert result == 7
    assert sleeps == [1.0]


def test_async_retry_raises_last_error(monkeypatch):
    async def fake_sleep(t):
        return None

    monkeypatch.setattr("asyncio.sleep", fake_sleep)

    async def contribute():
        raise ConnectionError("offline")

    with pytest.raises(ConnectionError):
        asyncio.run(async_retry.run(contribute, max_attempts=3, delay=0.0))
