from __future__ import annotations

from decimal import Decimal

from tycoon.core.ledger import Ledger, ZERO, HUNDRED

# tycoon/engine/workforce.py

FATIGUE_PER_SECOND = Decimal("0.5")
RECOVERY_PER_SECOND = Decimal("2")
MOOD_DECAY_PER_SECOND = Decimal("0.01")


def update_worker_states(ledger: Ledger, seconds: Decimal, recovery_bonus: Decimal = ZERO) -> int:
    """
    每 tick 更新工人状态，返回本 tick 新进入休息的人数。

    - 工作中：疲劳上升，到 100 强制休息；心情缓慢下降
    - 休息中：疲劳下降（canteen 加速），降到 0 自动复工
    """
    started_resting = 0
    recovery = RECOVERY_PER_SECOND * (1 + recovery_bonus) * seconds

    for worker in ledger.all_workers():
        if worker.is_resting:
            worker.fatigue = max(ZERO, worker.fatigue - recovery)
            if worker.fatigue == 0:
                worker.is_resting = False
            continue

        worker.fatigue = min(HUNDRED, worker.fatigue + FATIGUE_PER_SECOND * seconds)
        worker.mood = max(ZERO, worker.mood - MOOD_DECAY_PER_SECOND * seconds)
        if worker.fatigue >= HUNDRED:
            worker.is_resting = True
            started_resting += 1

    return started_resting
