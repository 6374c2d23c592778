import random

from esper import World

from pairs.components.cross_tab_totals import CrossTabTotals


def create_world(*, rng: random.Random | None = None) -> World:
    """Create an empty per-tab world; TurnSystem deals the deck into it."""
    world = World()
    setattr(world, "random", rng or random.Random())
    world.create_entity(CrossTabTotals())
    return world
