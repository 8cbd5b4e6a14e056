#!filepath: tests/network/test_hooks.py
from decimal import Decimal

import pytest

from tycoon.config.network_config import NetworkConfig
from tycoon.network.clients import BountyClient, GuildClient, LeaderboardClient, OfflineNetwork
from tycoon.network.hooks import BOUNTY_REWARD, GUILD_BONUS, NetworkHooks, NetworkResult


class RecordingLeaderboard(LeaderboardClient):
    def __init__(self):
        self.scores = []

    async def submit_score(self, score):
        self.scores.append(score)


class FixedGuild(GuildClient):
    def __init__(self, bonus="0.12"):
        self.bonus = Decimal(bonus)
        self.received = []

    async def contribute(self, points):
        self.received.append(points)
        return self.bonus


class FailingGuild(GuildClient):
    def __init__(self):
        self.calls = 0

    async def contribute(self, points):
        self.calls += 1
        raise ConnectionError("guild offline")


class NoneGuild(GuildClient):
    async def contribute(self, points):
        return None


class GenerousBounty(BountyClient):
    async def check_and_finalize(self):
        return 5


@pytest.fixture
def cfg() -> NetworkConfig:
    return NetworkConfig(enabled=True, max_attempts=2, retry_delay=0.0, timeout_seconds=2.0)


@pytest.fixture
def make_hooks(cfg):
    created = []

    def _make(leaderboard=None, guild=None, bounty=None, config=None) -> NetworkHooks:
        offline = OfflineNetwork()
        hooks = NetworkHooks(leaderboard or offline, guild or offline, bounty or offline, config or cfg)
        created.append(hooks)
        return hooks

    yield _make

    for hooks in created:
        hooks.shutdown()


def test_submit_score_copies_lifetime_earnings(make_hooks, ledger):
    board = RecordingLeaderboard()
    hooks = make_hooks(leaderboard=board)
    ledger.total_money_earned = Decimal("5000")

    hooks.submit_score(ledger)
    hooks.flush(timeout=5)

    assert board.scores == [Decimal("5000")]


def test_contribute_updates_guild_bonus_on_drain(make_hooks, ledger):
    guild = FixedGuild("0.12")
    hooks = make_hooks(guild=guild)
    ledger.pending_contribution_points = 30

    hooks.contribute(ledger)
    assert ledger.pending_contribution_points == 0

    hooks.flush(timeout=5)
    assert ledger.guild_income_bonus == Decimal("0")  # 只在 drain 时写回

    assert hooks.drain(ledger) == 1
    assert guild.received == [30]
    assert ledger.guild_income_bonus == Decimal("0.12")


def test_failed_contribution_requeues_points(make_hooks, ledger):
    guild = FailingGuild()
    hooks = make_hooks(guild=guild)
    ledger.pending_contribution_points = 20

    hooks.contribute(ledger)
    hooks.flush(timeout=5)
    ledger.pending_contribution_points += 10  # 期间又完成了订单
    hooks.drain(ledger)

    assert guild.calls == 2
    assert ledger.pending_contribution_points == 30


def test_guild_returning_none_requeues_points(make_hooks, ledger):
    hooks = make_hooks(guild=NoneGuild())
    ledger.pending_contribution_points = 15

    hooks.contribute(ledger)
    hooks.flush(timeout=5)

    assert hooks.drain(ledger) == 1
    assert ledger.guild_income_bonus == Decimal("0")
    assert ledger.pending_contribution_points == 15


def test_drain_drops_unusable_result(make_hooks, ledger):
    hooks = make_hooks()
    hooks._inbox.put(NetworkResult(GUILD_BONUS, "abc"))
    hooks._inbox.put(NetworkResult(BOUNTY_REWARD, 3))

    assert hooks.drain(ledger) == 1
    assert ledger.guild_income_bonus == Decimal("0")
    assert ledger.premium_currency == 3


def test_nothing_to_contribute(make_hooks, ledger):
    guild = FixedGuild()
    hooks = make_hooks(guild=guild)

    hooks.contribute(ledger)
    hooks.flush(timeout=5)

    assert guild.received == []
    assert hooks.drain(ledger) == 0


def test_bounty_reward_becomes_premium(make_hooks, ledger):
    hooks = make_hooks(bounty=GenerousBounty())

    hooks.finalize(ledger)
    hooks.flush(timeout=5)
    hooks.drain(ledger)

    assert ledger.premium_currency == 5


def test_disabled_hooks_do_nothing(make_hooks, ledger):
    board = RecordingLeaderboard()
    guild = FixedGuild()
    hooks = make_hooks(leaderboard=board, guild=guild, config=NetworkConfig(enabled=False))
    ledger.pending_contribution_points = 10

    hooks.submit_score(ledger)
    hooks.contribute(ledger)
    hooks.finalize(ledger)
    hooks.flush(timeout=5)

    assert board.scores == []
    assert guild.received == []
    assert ledger.pending_contribution_points == 10
