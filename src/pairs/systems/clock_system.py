from __future__ import annotations

import logging

from esper import World

from pairs.constants import CLOCK_INTERVAL
from pairs.events.bus import (
    EVENT_CLOCK_TICK,
    EVENT_GAME_COMPLETED,
    EVENT_GAME_READY,
    EVENT_GAME_STARTED,
    EventBus,
)
from pairs.systems.scheduler_system import ScheduledCall, SchedulerSystem
from pairs.utils.session import find_session
from pairs.utils.time_format import format_elapsed

logger = logging.getLogger(__name__)


class ClockSystem:
    """Counts elapsed whole seconds while a started game is unfinished.

    At most one tick is scheduled at a time. Stopping cancels that entry in
    the scheduler, so a replaced session never receives a late tick.
    """

    def __init__(
        self,
        world: World,
        event_bus: EventBus,
        scheduler: SchedulerSystem,
        *,
        interval: float = CLOCK_INTERVAL,
    ) -> None:
        if interval <= 0:
            raise ValueError("clock interval must be positive")
        self.world = world
        self.event_bus = event_bus
        self.scheduler = scheduler
        self.interval = float(interval)
        self._pending: ScheduledCall | None = None
        self._generation: int | None = None
        self.event_bus.subscribe(EVENT_GAME_STARTED, self._on_game_started)
        self.event_bus.subscribe(EVENT_GAME_COMPLETED, self._on_game_completed)
        self.event_bus.subscribe(EVENT_GAME_READY, self._on_game_ready)

    @property
    def running(self) -> bool:
        return self._pending is not None

    def start(self) -> None:
        session = find_session(self.world)
        if session is None or session.complete:
            return
        self.stop()
        self._generation = session.generation
        logger.debug("clock started at %ss (generation %s)", session.elapsed_seconds, session.generation)
        self._schedule(self.scheduler.now + self.interval)

    def stop(self) -> None:
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None
        self._generation = None

    @property
    def formatted_time(self) -> str:
        session = find_session(self.world)
        return format_elapsed(session.elapsed_seconds if session else 0)

    def _schedule(self, due: float) -> None:
        generation = self._generation
        self._pending = self.scheduler.call_at(
            due, lambda: self._on_tick(generation, due), label="clock_tick"
        )

    def _on_tick(self, generation: int | None, due: float) -> None:
        session = find_session(self.world)
        if session is None or generation != self._generation or session.generation != generation:
            return
        if not session.started or session.complete:
            self._pending = None
            return
        session.elapsed_seconds += 1
        # Anchor the next tick to this one's due time so long frames do not drift.
        self._schedule(due + self.interval)
        self.event_bus.emit(
            EVENT_CLOCK_TICK,
            elapsed_seconds=session.elapsed_seconds,
            formatted_time=format_elapsed(session.elapsed_seconds),
        )

    # Event handlers -----------------------------------------------------

    def _on_game_started(self, sender, **payload) -> None:
        self.start()

    def _on_game_completed(self, sender, **payload) -> None:
        self.stop()

    def _on_game_ready(self, sender, **payload) -> None:
        self.stop()
        if not payload.get("restored"):
            return
        session = find_session(self.world)
        if session is not None and session.started and not session.complete:
            self.start()
