from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List

from tycoon.config.simulation_config import RateEntryConfig
from tycoon.utils.errors import ScheduleConfigError


# tycoon/engine/rate_table.py

@dataclass(frozen=True)
class RateEntry:
    """
    One row of the schedule: the subsystem `name` runs on every tick where
    tick % interval == offset (tick counted after the increment).
    """
    name: str
    interval: int
    offset: int = 0

    def is_due(self, tick: int) -> bool:
        return tick % self.interval == self.offset


class RateTable:
    """
    Declarative multi-rate schedule (FROZEN)

    Validation:
    - interval >= 1 and 0 <= offset < interval
    - names unique
    - two entries with the same interval never share an offset
    """

    def __init__(self, entries: Iterable[RateEntry]):
        self._entries: List[RateEntry] = list(entries)
        self._validate()

    @classmethod
    def from_config(cls, rows: Iterable[RateEntryConfig]) -> "RateTable":
        return cls(RateEntry(r.name, r.interval, r.offset) for r in rows)

    def _validate(self) -> None:
        names: set[str] = set()
        slots: Dict[tuple[int, int], str] = {}

        for e in self._entries:
            if e.interval < 1:
                raise ScheduleConfigError(f"{e.name}: interval must be >= 1, got {e.interval}")
            if not 0 <= e.offset < e.interval:
                raise ScheduleConfigError(
                    f"{e.name}: offset {e.offset} outside [0, {e.interval})"
                )
            if e.name in names:
                raise ScheduleConfigError(f"duplicate rate entry: {e.name}")
            names.add(e.name)

            slot = (e.interval, e.offset)
            if slot in slots:
                raise ScheduleConfigError(
                    f"{e.name} collides with {slots[slot]} "
                    f"(interval={e.interval}, offset={e.offset})"
                )
            slots[slot] = e.name

    # --------------------------------------------------
    def due(self, tick: int) -> List[str]:
        return [e.name for e in self._entries if e.is_due(tick)]

    def entry(self, name: str) -> RateEntry:
        for e in self._entries:
            if e.name == name:
                return e
        raise KeyError(name)

    @property
    def names(self) -> List[str]:
        return [e.name for e in self._entries]

    def __iter__(self) -> Iterator[RateEntry]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)
