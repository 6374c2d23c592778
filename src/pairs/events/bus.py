from blinker import Signal
from typing import Dict

class EventBus:
    """Simple event bus leveraging blinker Signal objects."""
    def __init__(self):
        self._signals: Dict[str, Signal] = {}

    def subscribe(self, name: str, fn):
        sig = self._signals.setdefault(name, Signal(name))
        # weak=False keeps bound methods of systems that are not stored anywhere alive.
        sig.connect(fn, weak=False)

    def unsubscribe(self, name: str, fn):
        sig = self._signals.get(name)
        if sig:
            sig.disconnect(fn)

    def emit(self, name: str, **payload):
        sig = self._signals.get(name)
        if sig:
            sig.send(self, **payload)


# ============================================================================
# SYSTEM & TIMING
# ============================================================================
EVENT_TICK = "tick"                                # payload: dt=float
EVENT_CLOCK_TICK = "clock_tick"                    # payload: elapsed_seconds=int, formatted_time=str


# ============================================================================
# COMMANDS (UI -> engine)
# ============================================================================
EVENT_REVEAL_REQUEST = "reveal_request"            # payload: tile_id=int
EVENT_NEW_GAME_REQUEST = "new_game_request"        # payload: rows=int, cols=int | difficulty="RxC"


# ============================================================================
# TILES & TURNS
# ============================================================================
EVENT_TILE_REVEALED = "tile_revealed"              # payload: tile_id=int, symbol=str, pending=list[int]
EVENT_REVEAL_REJECTED = "reveal_rejected"          # payload: tile_id=int, reason=str
EVENT_MOVE_COUNTED = "move_counted"                # payload: move_count=int
EVENT_PAIR_MATCHED = "pair_matched"                # payload: tile_ids=(int,int), symbol=str, matched_pairs=int
EVENT_PAIR_MISMATCHED = "pair_mismatched"          # payload: tile_ids=(int,int)
EVENT_TILES_HIDDEN = "tiles_hidden"                # payload: tile_ids=(int,int)
EVENT_STATE_CHANGED = "state_changed"              # payload: reason=str


# ============================================================================
# SESSION LIFECYCLE
# ============================================================================
EVENT_GAME_READY = "game_ready"                    # payload: rows=int, cols=int, difficulty=str, restored=bool
EVENT_GAME_STARTED = "game_started"                # payload: elapsed_seconds=int
EVENT_GAME_COMPLETED = "game_completed"            # payload: moves=int, seconds=int, formatted_time=str
EVENT_COMPLETION_NOTICE = "completion_notice"      # payload: moves=int, seconds=int, formatted_time=str
EVENT_CONFIGURATION_ERROR = "configuration_error"  # payload: message=str


# ============================================================================
# PERSISTENCE & AGGREGATE
# ============================================================================
EVENT_SESSION_SAVED = "session_saved"              # payload: key=str, reason=str
EVENT_AGGREGATE_CHANGED = "aggregate_changed"      # payload: total=int
