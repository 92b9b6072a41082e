from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from typing import Callable, Dict, Hashable, Optional


@dataclass(order=True)
class _Timer:
    deadline: float
    seq: int
    callback: Callable[[], None] = field(compare=False)


class TimerScheduler:
    """One-shot timers keyed by owner, driven by a virtual clock.

    Scheduling for a key replaces any pending timer for that key. ``advance``
    moves time forward and fires due timers one at a time in deadline order
    (ties broken by scheduling order); each callback runs to completion before
    the next is considered, and timers it schedules may fire in the same call.
    """

    def __init__(self) -> None:
        self.now = 0.0
        self._timers: Dict[Hashable, _Timer] = {}
        self._seq = itertools.count()

    def schedule(self, key: Hashable, seconds: float, callback: Callable[[], None]) -> None:
        if seconds < 0:
            raise ValueError(f"timer duration must be non-negative, got {seconds}")
        self._timers[key] = _Timer(self.now + float(seconds), next(self._seq), callback)

    def cancel(self, key: Hashable) -> bool:
        return self._timers.pop(key, None) is not None

    def cancel_all(self) -> None:
        self._timers.clear()

    def is_scheduled(self, key: Hashable) -> bool:
        return key in self._timers

    def remaining(self, key: Hashable) -> Optional[float]:
        timer = self._timers.get(key)
        if timer is None:
            return None
        return timer.deadline - self.now

    def __len__(self) -> int:
        return len(self._timers)

    def advance(self, seconds: float) -> int:
        """Move the clock forward by ``seconds``; return how many timers fired."""
        target = self.now + float(seconds)
        fired = 0
        while True:
            due = [(timer, key) for key, timer in self._timers.items() if timer.deadline <= target]
            if not due:
                break
            timer, key = min(due, key=lambda item: item[0])
            del self._timers[key]
            self.now = max(self.now, timer.deadline)
            timer.callback()
            fired += 1
        self.now = target
        return fired
