"""Exceptions raised by the game session engine."""
from __future__ import annotations


class ConfigurationError(ValueError):
    """Board shape or setting that cannot produce a playable game."""


class InvalidMove(Exception):
    """A reveal the current session cannot accept.

    Raised while validating a reveal; ``TurnSystem.reveal`` turns it into a
    rejection event so callers never see it for ordinary bad input.
    """

    LOCKED = 'locked'
    ALREADY_REVEALED = 'already_revealed'
    ALREADY_MATCHED = 'already_matched'
    OUT_OF_RANGE = 'out_of_range'
    COMPLETE = 'complete'
    NO_SESSION = 'no_session'

    def __init__(self, tile_id, reason: str):
        super().__init__(f"cannot reveal tile {tile_id!r}: {reason}")
        self.tile_id = tile_id
        self.reason = reason


class PersistenceMiss(LookupError):
    """No usable snapshot: absent, unparsable, or failing validation."""
