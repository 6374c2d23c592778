from __future__ import annotations

import logging

from esper import World

from pairs.constants import SESSION_KEY_PREFIX, SNAPSHOT_EVERY_TICKS
from pairs.errors import PersistenceMiss
from pairs.events.bus import (
    EVENT_CLOCK_TICK,
    EVENT_GAME_READY,
    EVENT_PAIR_MATCHED,
    EVENT_SESSION_SAVED,
    EVENT_TILE_REVEALED,
    EVENT_TILES_HIDDEN,
    EventBus,
)
from pairs.persistence.codec import DecodedSession, decode_session, dumps_session
from pairs.persistence.session_id import new_session_id, session_key
from pairs.persistence.stores import KeyValueStore
from pairs.utils.session import find_session

logger = logging.getLogger(__name__)


class PersistenceSystem:
    """Snapshots the tab's session into a tab-scoped store.

    Saves after every accepted reveal, every resolution outcome, every new
    deck, and every ``snapshot_every_ticks`` clock ticks. A failing store is
    logged and otherwise ignored; the game keeps running in memory.
    """

    def __init__(
        self,
        world: World,
        event_bus: EventBus,
        store: KeyValueStore | None,
        *,
        session_id: str | None = None,
        key_prefix: str = SESSION_KEY_PREFIX,
        snapshot_every_ticks: int = SNAPSHOT_EVERY_TICKS,
    ) -> None:
        self.world = world
        self.event_bus = event_bus
        self.store = store
        self.session_id = session_id or new_session_id()
        self.key = session_key(key_prefix, self.session_id)
        self.snapshot_every_ticks = max(1, int(snapshot_every_ticks))
        self._loaded = False

        self.event_bus.subscribe(EVENT_TILE_REVEALED, self._on_tile_revealed)
        self.event_bus.subscribe(EVENT_PAIR_MATCHED, self._on_pair_matched)
        self.event_bus.subscribe(EVENT_TILES_HIDDEN, self._on_tiles_hidden)
        self.event_bus.subscribe(EVENT_GAME_READY, self._on_game_ready)
        self.event_bus.subscribe(EVENT_CLOCK_TICK, self._on_clock_tick)

    def load(self) -> DecodedSession | None:
        """Read this tab's snapshot; only the first call consults the store."""
        if self._loaded:
            return None
        self._loaded = True
        if self.store is None:
            return None
        raw = None
        try:
            raw = self.store.get(self.key)
            return decode_session(raw)
        except PersistenceMiss as exc:
            if raw is not None:
                logger.warning("discarding snapshot %s: %s", self.key, exc)
            return None
        except (OSError, TypeError, ValueError) as exc:
            logger.warning("session store unavailable, starting fresh: %s", exc)
            return None

    def save(self, reason: str = "manual") -> bool:
        if self.store is None or find_session(self.world) is None:
            return False
        try:
            self.store.set(self.key, dumps_session(self.world))
        except (OSError, TypeError, ValueError) as exc:
            logger.warning("could not save session %s (%s): %s", self.key, reason, exc)
            return False
        logger.debug("saved %s after %s", self.key, reason)
        self.event_bus.emit(EVENT_SESSION_SAVED, key=self.key, reason=reason)
        return True

    def clear(self) -> None:
        if self.store is None:
            return
        try:
            self.store.remove(self.key)
        except OSError as exc:
            logger.warning("could not remove session %s: %s", self.key, exc)

    # Event handlers -----------------------------------------------------

    def _on_tile_revealed(self, sender, **payload) -> None:
        self.save("reveal")

    def _on_pair_matched(self, sender, **payload) -> None:
        self.save("match")

    def _on_tiles_hidden(self, sender, **payload) -> None:
        self.save("mismatch")

    def _on_game_ready(self, sender, **payload) -> None:
        self.save("restored" if payload.get("restored") else "new_game")

    def _on_clock_tick(self, sender, **payload) -> None:
        elapsed = payload.get("elapsed_seconds")
        if isinstance(elapsed, int) and elapsed % self.snapshot_every_ticks == 0:
            self.save("clock")
