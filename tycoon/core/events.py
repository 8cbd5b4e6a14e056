from __future__ import annotations

import threading
from collections import deque
from dataclasses import dataclass
from decimal import Decimal
from typing import Deque, List, Optional, Type, TypeVar


# -------------------------
# Base
# -------------------------
class Event:
    pass


E = TypeVar("E", bound=Event)


# -------------------------
# Tick observation
# -------------------------
@dataclass(frozen=True)
class TickEvent(Event):
    """每个 tick 恰好一条：(net, money, session_duration)"""
    tick: int
    net_earnings: Decimal
    money: Decimal
    session_duration: float


# -------------------------
# Subsystem notifications
# -------------------------
@dataclass(frozen=True)
class LevelUpEvent(Event):
    level: int


@dataclass(frozen=True)
class ResearchCompletedEvent(Event):
    research_id: str


@dataclass(frozen=True)
class DeliveryArrivedEvent(Event):
    delivery_id: str
    kind: str


@dataclass(frozen=True)
class DeliveryCollectedEvent(Event):
    delivery_id: str
    kind: str
    amount: Decimal
    automated: bool


@dataclass(frozen=True)
class OrderAcceptedEvent(Event):
    order_id: str
    automated: bool


@dataclass(frozen=True)
class OrderExpiredEvent(Event):
    order_id: str


@dataclass(frozen=True)
class OrderCompletedEvent(Event):
    order_id: str
    reward: Decimal


@dataclass(frozen=True)
class WorkersWokenEvent(Event):
    count: int


@dataclass(frozen=True)
class GameEventStartedEvent(Event):
    event_id: str
    kind: str


@dataclass(frozen=True)
class MasterToolUnlockedEvent(Event):
    tool_id: str


@dataclass(frozen=True)
class PrestigeCompletedEvent(Event):
    tier: int
    points: int


@dataclass(frozen=True)
class AscensionCompletedEvent(Event):
    ascension_level: int
    points: int


class EventQueue:
    """
    显式事件队列（替代多订阅者回调）

    - 调度线程 push
    - 展示层 / 测试每 tick drain 一次
    - maxlen 防止无人消费时无限增长（丢弃最旧）
    """

    def __init__(self, maxlen: Optional[int] = 10_000):
        self._items: Deque[Event] = deque(maxlen=maxlen)
        self._lock = threading.Lock()

    def push(self, event: Event) -> None:
        with self._lock:
            self._items.append(event)

    def extend(self, events: List[Event]) -> None:
        with self._lock:
            self._items.extend(events)

    def drain(self) -> List[Event]:
        with self._lock:
            items = list(self._items)
            self._items.clear()
        return items

    def drain_of(self, kind: Type[E]) -> List[E]:
        """只取出某一类事件，其余保留"""
        with self._lock:
            hit = [e for e in self._items if isinstance(e, kind)]
            rest = [e for e in self._items if not isinstance(e, kind)]
            self._items.clear()
            self._items.extend(rest)
        return hit

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)
