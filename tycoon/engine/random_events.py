from __future__ import annotations

import random
from decimal import Decimal
from typing import Optional

from tycoon.core.catalog import Catalog, EVENT_CHANCE, EventTemplate
from tycoon.core.events import GameEventStartedEvent
from tycoon.core.ledger import Ledger, TimedEvent, ZERO, new_id
from tycoon.utils.logger import logs

"""
{#!filepath: tycoon/engine/random_events.py}

随机事件（market boom / strike / audit ...）

- 同一时间最多一个 active event
- 收入 / 成本倍率由 IncomePipeline 在 step 4 / step 7 读取
- 一次性效果（心情下降、声望变化）每个事件实例只生效一次，
  以 last_applied_event_id 去重（读档后不会重复生效）
"""

MOOD_DROP_ALL_20 = "mood_drop_all_20"


class EventService:
    def __init__(self, catalog: Catalog, rng: random.Random | None = None, chance: float = EVENT_CHANCE):
        self.catalog = catalog
        self.rng = rng or random.Random()
        self.chance = chance

    def _pick(self) -> Optional[EventTemplate]:
        templates = self.catalog.events
        if not templates:
            return None
        return self.rng.choices(templates, weights=[t.weight for t in templates], k=1)[0]

    def apply_one_shot(self, ledger: Ledger, event: TimedEvent) -> bool:
        if ledger.last_applied_event_id == event.id:
            return False

        if event.special_effect == MOOD_DROP_ALL_20:
            for worker in ledger.all_workers():
                worker.mood = max(ZERO, worker.mood - Decimal("20"))

        if event.reputation_change:
            ledger.reputation = max(0, min(100, ledger.reputation + event.reputation_change))

        ledger.last_applied_event_id = event.id
        return True

    def check(self, ledger: Ledger, now: float) -> Optional[GameEventStartedEvent]:
        current = ledger.active_event
        if current is not None:
            if current.is_active(now):
                return None
            logs.debug(f"[Event] ended {current.kind}")
            ledger.active_event = None

        if self.rng.random() >= self.chance:
            return None

        template = self._pick()
        if template is None:
            return None

        event = TimedEvent(
            id=new_id("evt"),
            kind=template.kind,
            income_multiplier=template.income_multiplier,
            cost_multiplier=template.cost_multiplier,
            special_effect=template.special_effect,
            reputation_change=template.reputation_change,
            started_at=now,
            expires_at=now + template.duration_seconds,
        )
        ledger.active_event = event
        self.apply_one_shot(ledger, event)

        logs.info(f"[Event] started {event.kind} for {template.duration_seconds}s")
        return GameEventStartedEvent(event_id=event.id, kind=event.kind)
