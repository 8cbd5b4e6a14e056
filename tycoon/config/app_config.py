#!filepath: tycoon/config/app_config.py
import os

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field

from .log_config import LogConfig
from .simulation_config import SimulationConfig
from .balance_config import BalanceConfig
from .save_config import SaveConfig
from .network_config import NetworkConfig
from .secret_config import SecretConfig


def project_root() -> str:
    """
    返回项目根目录（基于当前文件位置推导）:
    tycoon/config/app_config.py → tycoon/config → tycoon → project_root
    """
    return os.path.abspath(os.path.join(os.path.dirname(__file__), "../../"))


def default_config_path() -> str:
    return os.path.join(os.path.dirname(os.path.abspath(__file__)), "base.yml")


class AppConfig(BaseModel):
    log: LogConfig = Field(default_factory=LogConfig)
    simulation: SimulationConfig = Field(default_factory=SimulationConfig)
    balance: BalanceConfig = Field(default_factory=BalanceConfig)
    save: SaveConfig = Field(default_factory=SaveConfig)
    network: NetworkConfig = Field(default_factory=NetworkConfig)
    secret: SecretConfig = Field(default_factory=SecretConfig)

    @classmethod
    def load(cls, path: str | None = None) -> "AppConfig":
        """
        加载 YAML 配置 + .env
        - 默认使用 tycoon/config/base.yml
        - 不依赖当前工作目录
        - secret 只从环境变量注入
        """
        root = project_root()

        # 1) 先加载 .env（在项目根目录下）
        load_dotenv(os.path.join(root, ".env"))

        # 2) 决定配置文件路径
        if path is None:
            path = default_config_path()

        if not os.path.exists(path):
            raise FileNotFoundError(f"Config file not found: {path}")

        # 3) 读取 YAML（空文件 → 全部默认值）
        with open(path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}

        raw["secret"] = {
            "player_id": os.getenv("TYCOON_PLAYER_ID", ""),
            "api_token": os.getenv("TYCOON_API_TOKEN", ""),
        }

        save_override = os.getenv("TYCOON_SAVE_PATH")
        if save_override:
            raw.setdefault("save", {})["path"] = save_override

        return cls(**raw)
