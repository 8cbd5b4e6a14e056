#!filepath: tests/base_test/test_app_config.py
from decimal import Decimal

import pytest
import yaml

from tycoon.config import AppConfig
from tycoon.config.balance_config import BalanceConfig
from tycoon.config.log_config import LogConfig
from tycoon.config.network_config import NetworkConfig
from tycoon.config.simulation_config import SimulationConfig
from tycoon.engine.rate_table import RateTable


@pytest.fixture
def sample_config_file(tmp_path):
    """临时 YAML 配置（pytest 自动清理）"""
    data = {
        "log": {"dir": "logs", "level": "DEBUG"},
        "simulation": {
            "tick_seconds": 1.0,
            "seed": 42,
            "rate_table": [
                {"name": "research_timer", "interval": 1, "offset": 0},
                {"name": "autosave", "interval": 10, "offset": 5},
            ],
        },
        "balance": {"income_cap_multiplier": "2.5", "guild_income_cap": "0.10"},
        "save": {"path": "custom/ledger.json"},
        "network": {"enabled": True, "max_attempts": 3},
    }
    config_file = tmp_path / "config.yaml"
    config_file.write_text(yaml.safe_dump(data), encoding="utf-8")
    return config_file


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("TYCOON_PLAYER_ID", "TYCOON_API_TOKEN", "TYCOON_SAVE_PATH"):
        monkeypatch.delenv(name, raising=False)


def test_default_config_loads():
    """包内 base.yml 可以直接加载"""
    cfg = AppConfig.load()

    assert isinstance(cfg.log, LogConfig)
    assert isinstance(cfg.simulation, SimulationConfig)
    assert isinstance(cfg.balance, BalanceConfig)
    assert isinstance(cfg.network, NetworkConfig)
    assert cfg.network.enabled is False
    assert cfg.balance.permanent_multiplier_max == Decimal("20.0")
    assert len(RateTable.from_config(cfg.simulation.rate_table)) == 11


def test_custom_values(sample_config_file):
    cfg = AppConfig.load(path=str(sample_config_file))

    assert cfg.log.level == "DEBUG"
    assert cfg.simulation.seed == 42
    assert cfg.balance.income_cap_multiplier == Decimal("2.5")
    assert cfg.balance.guild_income_cap == Decimal("0.10")
    assert cfg.save.path == "custom/ledger.json"
    assert cfg.network.max_attempts == 3
    assert [e.name for e in cfg.simulation.rate_table] == ["research_timer", "autosave"]


def test_secrets_come_from_env(sample_config_file, monkeypatch):
    monkeypatch.setenv("TYCOON_PLAYER_ID", "player-1")
    monkeypatch.setenv("TYCOON_API_TOKEN", "token-xyz")
    monkeypatch.setenv("TYCOON_SAVE_PATH", "/tmp/elsewhere.json")

    cfg = AppConfig.load(path=str(sample_config_file))

    assert cfg.secret.player_id == "player-1"
    assert cfg.secret.api_token == "token-xyz"
    assert cfg.save.path == "/tmp/elsewhere.json"


def test_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        AppConfig.load(path=str(tmp_path / "nope.yml"))


def test_empty_file_gives_defaults(tmp_path):
    empty = tmp_path / "empty.yml"
    empty.write_text("", encoding="utf-8")

    cfg = AppConfig.load(path=str(empty))

    assert cfg.simulation.tick_seconds == 1.0
    assert cfg.save.save_on_pause is True


def test_invalid_rate_entry_should_fail(tmp_path):
    bad = tmp_path / "bad.yml"
    bad.write_text(
        yaml.safe_dump({"simulation": {"rate_table": [{"name": "autosave", "interval": 0}]}}),
        encoding="utf-8",
    )

    with pytest.raises(Exception):
        AppConfig.load(path=str(bad))
