from __future__ import annotations

import logging

from esper import World

from pairs.constants import TOTAL_MOVES_KEY
from pairs.events.bus import EVENT_AGGREGATE_CHANGED, EVENT_MOVE_COUNTED, EventBus
from pairs.persistence.channel import StorageChannel
from pairs.persistence.stores import KeyValueStore
from pairs.utils.session import get_or_create_totals

logger = logging.getLogger(__name__)


class AggregateSystem:
    """Keeps the profile-wide move counter shared by every tab.

    Each counted move is a read-increment-write against the store's current
    value followed by a change notification on the channel. All tabs, the
    writer included, refresh their displayed total from the store when
    notified. Concurrent writers may lose increments; the total is advisory.
    """

    def __init__(
        self,
        world: World,
        event_bus: EventBus,
        store: KeyValueStore | None,
        channel: StorageChannel | None = None,
        *,
        key: str = TOTAL_MOVES_KEY,
    ) -> None:
        self.world = world
        self.event_bus = event_bus
        self.store = store
        self.channel = channel
        self.key = key
        self.event_bus.subscribe(EVENT_MOVE_COUNTED, self._on_move_counted)
        if self.channel is not None:
            self.channel.subscribe(self._on_storage_changed)
        self.refresh()

    @property
    def total(self) -> int:
        return get_or_create_totals(self.world).total_moves

    def read_total(self) -> int:
        if self.store is None:
            return self.total
        try:
            raw = self.store.get(self.key)
        except (OSError, TypeError, ValueError) as exc:
            logger.warning("shared store unavailable: %s", exc)
            return self.total
        try:
            return max(0, int(raw)) if raw is not None else 0
        except (TypeError, ValueError):
            logger.warning("ignoring malformed %s value %r", self.key, raw)
            return 0

    def increment(self, amount: int = 1) -> int:
        if self.store is None:
            totals = get_or_create_totals(self.world)
            totals.total_moves += amount
            self.event_bus.emit(EVENT_AGGREGATE_CHANGED, total=totals.total_moves)
            return totals.total_moves
        value = self.read_total() + amount
        try:
            self.store.set(self.key, str(value))
        except (OSError, TypeError, ValueError) as exc:
            logger.warning("could not update %s: %s", self.key, exc)
            return self.total
        if self.channel is not None:
            self.channel.publish(self.key, origin=self)
        else:
            self.refresh()
        return value

    def refresh(self) -> int:
        totals = get_or_create_totals(self.world)
        totals.total_moves = self.read_total()
        self.event_bus.emit(EVENT_AGGREGATE_CHANGED, total=totals.total_moves)
        return totals.total_moves

    def close(self) -> None:
        if self.channel is not None:
            self.channel.unsubscribe(self._on_storage_changed)

    # Event handlers -----------------------------------------------------

    def _on_move_counted(self, sender, **payload) -> None:
        self.increment()

    def _on_storage_changed(self, origin, **payload) -> None:
        if payload.get("key") != self.key:
            return
        self.refresh()
