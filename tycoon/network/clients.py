from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import Decimal

"""
{#!filepath: tycoon/network/clients.py}

Network collaborators (FROZEN surface)

- 只接收标量（分数 / 贡献点），只返回标量
- 全部 async；调用方（NetworkHooks）负责线程、重试、超时、吞异常
- 线协议不在本仓库范围内：这里只定义接口 + 离线实现
"""


class LeaderboardClient(ABC):
    @abstractmethod
    async def submit_score(self, score: Decimal) -> None:
        ...


class GuildClient(ABC):
    @abstractmethod
    async def contribute(self, points: int) -> Decimal:
        """提交贡献点，返回当前公会收入加成（未封顶）"""
        ...


class BountyClient(ABC):
    @abstractmethod
    async def check_and_finalize(self) -> int:
        """结算已完成的悬赏，返回奖励的 premium currency（无则 0）"""
        ...


class OfflineNetwork(LeaderboardClient, GuildClient, BountyClient):
    """默认实现：完全离线，所有调用立即成功且无效果"""

    async def submit_score(self, score: Decimal) -> None:
        return None

    async def contribute(self, points: int) -> Decimal:
        return Decimal("0")

    async def check_and_finalize(self) -> int:
        return 0
