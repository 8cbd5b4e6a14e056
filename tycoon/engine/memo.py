from __future__ import annotations

from typing import Callable, Generic, Optional, TypeVar

# tycoon/engine/memo.py

T = TypeVar("T")


class Memo(Generic[T]):
    """
    Generation-counted lazy cache.

    - bump()  : a relevant mutation happened → generation += 1
    - get()   : recompute iff computed_generation != generation
    - compute_count : how many times compute actually ran (tests assert on it)
    """

    def __init__(self, compute: Callable[[], T]):
        self._compute = compute
        self._value: Optional[T] = None
        self.generation = 0
        self._computed_generation = -1
        self.compute_count = 0

    def bump(self) -> None:
        self.generation += 1

    @property
    def is_stale(self) -> bool:
        return self._computed_generation != self.generation

    def get(self) -> T:
        if self.is_stale:
            self._value = self._compute()
            self._computed_generation = self.generation
            self.compute_count += 1
        return self._value
