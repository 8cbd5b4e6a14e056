from __future__ import annotations

from enum import Enum, IntEnum


# tycoon/core/types.py

class PrestigeTier(IntEnum):
    """tier 只增不减（current_tier = 历史最高 tier）"""
    NONE = 0
    BRONZE = 1
    SILVER = 2
    GOLD = 3


class WorkerTier(IntEnum):
    E = 0
    D = 1
    C = 2
    B = 3
    A = 4
    S = 5


class StructureKind(str, Enum):
    STORAGE = "storage"                        # 材料成本降低
    WORKSHOP_EXTENSION = "workshop_extension"  # 额外工位
    OFFICE = "office"                          # 额外订单位
    VEHICLE_FLEET = "vehicle_fleet"            # 订单奖励加成
    CANTEEN = "canteen"                        # 疲劳恢复加速


class DeliveryKind(str, Enum):
    MONEY = "money"
    PREMIUM = "premium"
    XP = "xp"
    MOOD = "mood"
    SPEED = "speed"


class AutomationFeature(str, Enum):
    COLLECT = "auto_collect_delivery"
    ACCEPT = "auto_accept_order"
    ASSIGN = "auto_assign_workers"
