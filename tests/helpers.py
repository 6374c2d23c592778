from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Tuple

from esper import World

from pairs.events.bus import EVENT_TICK, EventBus
from pairs.systems.clock_system import ClockSystem
from pairs.systems.scheduler_system import SchedulerSystem
from pairs.systems.turn_system import TurnSystem
from pairs.utils.session import tiles_in_order
from pairs.world import create_world


@dataclass
class Engine:
    bus: EventBus
    world: World
    scheduler: SchedulerSystem
    clock: ClockSystem
    turns: TurnSystem


def make_engine(rows: int = 4, cols: int = 4, *, seed: int = 7) -> Engine:
    """Wire a bus, world, scheduler, clock and turn system and deal one game."""

    bus = EventBus()
    world = create_world(rng=random.Random(seed))
    scheduler = SchedulerSystem(bus)
    clock = ClockSystem(world, bus, scheduler)
    turns = TurnSystem(world, bus, scheduler)
    turns.new_game(rows, cols)
    return Engine(bus=bus, world=world, scheduler=scheduler, clock=clock, turns=turns)


def advance(bus: EventBus, seconds: float, step: float = 0.25) -> None:
    """Emit ticks until ``seconds`` of game time have passed.

    The default step is exact in binary so sums of it hit delay boundaries.
    """

    remaining = seconds
    while remaining > 1e-9:
        dt = min(step, remaining)
        bus.emit(EVENT_TICK, dt=dt)
        remaining -= dt


def find_pair(world: World, *, skip: set[int] | None = None) -> Tuple[int, int]:
    """Ids of two unmatched tiles sharing a symbol."""

    skip = skip or set()
    seen: dict[str, int] = {}
    for tile in tiles_in_order(world):
        if tile.matched or tile.id in skip:
            continue
        if tile.symbol in seen:
            return seen[tile.symbol], tile.id
        seen[tile.symbol] = tile.id
    raise AssertionError("no unmatched pair left")


def find_mismatch(world: World) -> Tuple[int, int]:
    """Ids of two unmatched tiles with different symbols."""

    tiles = [tile for tile in tiles_in_order(world) if not tile.matched]
    first = tiles[0]
    for other in tiles[1:]:
        if other.symbol != first.symbol:
            return first.id, other.id
    raise AssertionError("no mismatching tiles left")
