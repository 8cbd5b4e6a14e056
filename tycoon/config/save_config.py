#!filepath: tycoon/config/save_config.py
from pydantic import BaseModel


class SaveConfig(BaseModel):
    path: str = "saves/ledger.json"
    # 暂停 / 停止时也会保存（与 rate table 中的 autosave 无关）
    save_on_pause: bool = True
    write_attempts: int = 2
