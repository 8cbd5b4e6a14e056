#!filepath: tycoon/config/network_config.py
from pydantic import BaseModel, Field


class NetworkConfig(BaseModel):
    """
    网络协作者（排行榜 / 公会 / 悬赏）

    - enabled=False → rate table 中的 network_* handler 不提交任何东西
    - max_attempts: 单个调度周期内的重试次数，失败留到下一个周期
    - timeout_seconds: 单次 async 调用的超时
    """
    enabled: bool = False
    max_attempts: int = Field(default=2, ge=1)
    retry_delay: float = Field(default=1.0, ge=0)
    timeout_seconds: float = Field(default=10.0, gt=0)
