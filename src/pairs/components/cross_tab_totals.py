from dataclasses import dataclass

@dataclass(slots=True)
class CrossTabTotals:
    """Last observed value of the shared, cross-tab move counter."""
    total_moves: int = 0
