#!filepath: tycoon/config/secret_config.py
from pydantic import BaseModel


class SecretConfig(BaseModel):
    """由 .env 注入，不写进 YAML"""
    player_id: str = ''
    api_token: str = ''
