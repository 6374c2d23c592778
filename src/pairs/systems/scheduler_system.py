from __future__ import annotations

import heapq
import itertools
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, List

from pairs.events.bus import EVENT_TICK, EventBus

logger = logging.getLogger(__name__)


@dataclass(order=True, slots=True)
class ScheduledCall:
    due: float
    seq: int
    callback: Callable[[], Any] = field(compare=False)
    label: str = field(default="", compare=False)
    cancelled: bool = field(default=False, compare=False)
    fired: bool = field(default=False, compare=False)

    def cancel(self) -> None:
        self.cancelled = True

    @property
    def active(self) -> bool:
        return not (self.cancelled or self.fired)


class SchedulerSystem:
    """Cooperative timer queue advanced by ``EVENT_TICK``.

    All delayed work of a tab (match checks, flip-backs, clock ticks) runs from
    here, on the same thread that emits the tick, in due-time order. Calls that
    fall due inside a single ``advance`` run in that same advance, including
    ones scheduled by earlier callbacks.
    """

    def __init__(self, event_bus: EventBus):
        self.event_bus = event_bus
        self._now = 0.0
        self._queue: List[ScheduledCall] = []
        self._seq = itertools.count()
        self.event_bus.subscribe(EVENT_TICK, self.on_tick)

    @property
    def now(self) -> float:
        return self._now

    @property
    def pending(self) -> int:
        return sum(1 for call in self._queue if not call.cancelled)

    def call_later(self, delay: float, callback: Callable[[], Any], *, label: str = "") -> ScheduledCall:
        return self.call_at(self._now + max(0.0, float(delay)), callback, label=label)

    def call_at(self, due: float, callback: Callable[[], Any], *, label: str = "") -> ScheduledCall:
        call = ScheduledCall(due=due, seq=next(self._seq), callback=callback, label=label)
        heapq.heappush(self._queue, call)
        return call

    def cancel_all(self) -> None:
        for call in self._queue:
            call.cancelled = True
        self._queue.clear()

    def on_tick(self, sender, **kwargs):
        dt = kwargs.get('dt', 0.0)
        try:
            dt = float(dt)
        except (TypeError, ValueError):
            return
        if dt < 0.0:
            return
        self.advance(dt)

    def advance(self, dt: float) -> None:
        target = self._now + dt
        while self._queue and self._queue[0].due <= target:
            call = heapq.heappop(self._queue)
            if call.cancelled:
                continue
            # Callbacks observe the time they were due, not the end of the window.
            self._now = max(self._now, call.due)
            logger.debug("running %s at %.3f", call.label or call.callback, self._now)
            call.fired = True
            call.callback()
        self._now = target
