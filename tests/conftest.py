# tests/conftest.py
from __future__ import annotations

from decimal import Decimal
from pathlib import Path

import pytest
from loguru import logger

from tycoon.config.app_config import AppConfig
from tycoon.config.balance_config import BalanceConfig
from tycoon.config.log_config import LogConfig
from tycoon.config.save_config import SaveConfig
from tycoon.core.catalog import Catalog, new_ledger
from tycoon.core.ledger import Ledger, ProductionUnit, Worker
from tycoon.engine.effects import EffectAggregator
from tycoon.engine.income import IncomePipeline
from tycoon.engine.scheduler import ManualClock
from tycoon.persistence.store import MemorySaveStore

T0 = 1_700_000_000.0


@pytest.fixture(autouse=True)
def disable_file_logger():
    logger.remove()
    logger.add(lambda msg: None)  # or sys.stderr
    yield


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock(T0)


@pytest.fixture
def catalog() -> Catalog:
    return Catalog()


@pytest.fixture
def balance() -> BalanceConfig:
    return BalanceConfig()


@pytest.fixture
def ledger() -> Ledger:
    return new_ledger(T0)


@pytest.fixture
def effects(ledger, catalog) -> EffectAggregator:
    return EffectAggregator(ledger, catalog)


@pytest.fixture
def pipeline(balance) -> IncomePipeline:
    return IncomePipeline(balance)


@pytest.fixture
def make_unit():
    """
    单个工人（E 级，效率 1.0，level 1）的生产单位：
    base_income_per_second == income，running_cost_per_second == cost
    """

    def _make(income, cost, kind: str = "carpenter") -> ProductionUnit:
        return ProductionUnit(
            id=kind,
            kind=kind,
            base_income=Decimal(str(income)),
            base_running_cost=Decimal(str(cost)),
            workers=[Worker.create()],
        )

    return _make


@pytest.fixture
def app_config(tmp_path: Path) -> AppConfig:
    return AppConfig(
        log=LogConfig(dir=str(tmp_path / "logs")),
        save=SaveConfig(path=str(tmp_path / "saves" / "ledger.json")),
    )


@pytest.fixture
def memory_store() -> MemorySaveStore:
    return MemorySaveStore()


@pytest.fixture
def make_game(app_config, clock, memory_store):
    """Game factory：内存存档 + 可推进时钟，关闭由测试结束时统一处理"""
    from tycoon.game import Game

    games = []

    def _make(cfg: AppConfig | None = None, **kwargs) -> Game:
        kwargs.setdefault("store", memory_store)
        kwargs.setdefault("clock", clock)
        game = Game(cfg or app_config, **kwargs)
        games.append(game)
        return game

    yield _make

    for game in games:
        game.close()
