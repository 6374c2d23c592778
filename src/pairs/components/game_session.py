"""Session resource describing the progress of the current game."""
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import List


class TurnPhase(Enum):
    """Where the reveal/match state machine currently stands."""
    IDLE = auto()
    ONE_REVEALED = auto()
    RESOLVING = auto()
    COMPLETE = auto()


@dataclass(slots=True)
class GameSession:
    """Singleton component owned by TurnSystem.

    ``generation`` is bumped whenever the deck is replaced or restored so that
    scheduled callbacks belonging to an older session can recognise themselves
    as stale.
    """
    total_pairs: int
    matched_pairs: int = 0
    move_count: int = 0
    elapsed_seconds: int = 0
    started: bool = False
    complete: bool = False
    input_locked: bool = False
    pending_reveals: List[int] = field(default_factory=list)
    generation: int = 0

    @property
    def phase(self) -> TurnPhase:
        if self.complete:
            return TurnPhase.COMPLETE
        if len(self.pending_reveals) >= 2:
            return TurnPhase.RESOLVING
        if len(self.pending_reveals) == 1:
            return TurnPhase.ONE_REVEALED
        return TurnPhase.IDLE
