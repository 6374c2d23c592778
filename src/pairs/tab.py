"""Composition root for one tab: a world, its event bus, and its systems."""
from __future__ import annotations

import logging
import random

from pairs.errors import ConfigurationError
from pairs.events.bus import EVENT_TICK, EventBus
from pairs.persistence.channel import StorageChannel
from pairs.persistence.stores import KeyValueStore, MemoryStore
from pairs.settings import GameSettings
from pairs.snapshot import SessionSnapshot, take_snapshot
from pairs.systems.aggregate_system import AggregateSystem
from pairs.systems.clock_system import ClockSystem
from pairs.systems.persistence_system import PersistenceSystem
from pairs.systems.scheduler_system import SchedulerSystem
from pairs.systems.turn_system import TurnSystem
from pairs.utils.board_shape import parse_board_shape
from pairs.world import create_world

logger = logging.getLogger(__name__)


class GameTab:
    """One independent game session plus its persistence wiring.

    Tabs of the same profile share ``shared_store`` and ``channel``; each tab
    keeps its own ``session_store`` and session id.
    """

    def __init__(
        self,
        settings: GameSettings | None = None,
        *,
        session_store: KeyValueStore | None = None,
        shared_store: KeyValueStore | None = None,
        channel: StorageChannel | None = None,
        session_id: str | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.settings = settings or GameSettings()
        self.event_bus = EventBus()
        self.world = create_world(rng=rng)
        self.scheduler = SchedulerSystem(self.event_bus)
        self.clock_system = ClockSystem(
            self.world,
            self.event_bus,
            self.scheduler,
            interval=self.settings.clock_interval,
        )
        self.turn_system = TurnSystem(
            self.world,
            self.event_bus,
            self.scheduler,
            match_check_delay=self.settings.match_check_delay,
            flip_back_delay=self.settings.flip_back_delay,
            completion_notice_delay=self.settings.completion_notice_delay,
        )
        self.persistence_system = PersistenceSystem(
            self.world,
            self.event_bus,
            session_store if session_store is not None else MemoryStore(),
            session_id=session_id,
            snapshot_every_ticks=self.settings.snapshot_every_ticks,
        )
        self.aggregate_system = AggregateSystem(self.world, self.event_bus, shared_store, channel)

    @property
    def session_id(self) -> str:
        return self.persistence_system.session_id

    def start(self) -> SessionSnapshot:
        """Resume this tab's saved session, or deal a new game with the configured shape."""
        decoded = self.persistence_system.load()
        if decoded is not None:
            self.turn_system.restore(decoded)
        else:
            rows, cols = self.settings.board_shape
            self.turn_system.new_game(rows, cols)
        return self.snapshot()

    def tick(self, dt: float) -> None:
        self.event_bus.emit(EVENT_TICK, dt=dt)

    def reveal(self, tile_id: int) -> bool:
        return self.turn_system.reveal(tile_id)

    def new_game(self, shape: str | tuple[int, int] | None = None) -> SessionSnapshot:
        if shape is None:
            rows, cols = self.settings.board_shape
        elif isinstance(shape, str):
            rows, cols = parse_board_shape(shape)
        else:
            try:
                rows, cols = shape
            except (TypeError, ValueError):
                raise ConfigurationError(f"board shape must be 'RxC' or (rows, cols), got {shape!r}") from None
        self.turn_system.new_game(rows, cols)
        return self.snapshot()

    def snapshot(self) -> SessionSnapshot:
        snapshot = take_snapshot(self.world)
        if snapshot is None:
            raise RuntimeError("tab has not been started")
        return snapshot

    def subscribe(self, event: str, fn) -> None:
        self.event_bus.subscribe(event, fn)

    def close(self) -> None:
        """Flush the session to its store, then release timers and the shared channel."""
        self.persistence_system.save("close")
        self.clock_system.stop()
        self.scheduler.cancel_all()
        self.aggregate_system.close()
        logger.debug("tab %s closed", self.session_id)
