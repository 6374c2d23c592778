"""Entry point for the Pairs memory game.

Sets up one game tab (world, event bus, systems) and an Arcade window that
renders it and forwards player input.
"""
from __future__ import annotations

import argparse
import logging
from pathlib import Path

import arcade
from arcade import Window, run, set_background_color, color

from pairs.constants import DIFFICULTY_PRESETS, SHARED_STORE_FILENAME
from pairs.errors import ConfigurationError
from pairs.events.bus import EVENT_AGGREGATE_CHANGED, EVENT_COMPLETION_NOTICE, EVENT_GAME_READY
from pairs.persistence.channel import StorageChannel
from pairs.persistence.stores import JsonFileStore
from pairs.settings import GameSettings, load_settings
from pairs.tab import GameTab

logger = logging.getLogger(__name__)

CARD_BACK = (40, 70, 120)
CARD_FRONT = (235, 235, 220)
CARD_MATCHED = (120, 190, 120)
HUD_HEIGHT = 60
PADDING = 8
# Seconds between checks of the shared store for writes from other windows.
SHARED_POLL_INTERVAL = 0.5


class PairsWindow(Window):
    def __init__(self, settings: GameSettings, session_id: str | None = None):
        super().__init__(800, 700, "Pairs", resizable=True)
        self.set_update_rate(1/60)
        data_dir = settings.data_dir
        self.channel = StorageChannel()
        self.shared_store = JsonFileStore(data_dir / SHARED_STORE_FILENAME, channel=self.channel)
        session_store = None
        if session_id:
            session_store = JsonFileStore(data_dir / f"session_{session_id}.json")
        self.tab = GameTab(
            settings,
            session_store=session_store,
            shared_store=self.shared_store,
            channel=self.channel,
            session_id=session_id,
        )
        self.total_moves = 0
        self.banner: str | None = None
        self._poll_elapsed = 0.0
        self.tab.subscribe(EVENT_AGGREGATE_CHANGED, self._on_aggregate_changed)
        self.tab.subscribe(EVENT_COMPLETION_NOTICE, self._on_completion_notice)
        self.tab.subscribe(EVENT_GAME_READY, self._on_game_ready)
        self.tab.start()
        self.total_moves = self.tab.aggregate_system.total
        logger.info("tab %s ready", self.tab.session_id)
        set_background_color(color.BLACK)

    def _board_geometry(self, rows: int, cols: int) -> tuple[float, float, float]:
        usable_w = self.width - 2 * PADDING
        usable_h = self.height - HUD_HEIGHT - 2 * PADDING
        size = min(usable_w / cols, usable_h / rows)
        start_x = (self.width - size * cols) / 2
        start_y = PADDING + (usable_h - size * rows) / 2
        return size, start_x, start_y

    def on_draw(self):
        self.clear()
        snap = self.tab.snapshot()
        size, start_x, start_y = self._board_geometry(snap.rows, snap.cols)
        for tile in snap.tiles:
            row, col = divmod(tile.id, snap.cols)
            left = start_x + col * size + 2
            # Row 0 is drawn at the top of the board.
            bottom = start_y + (snap.rows - 1 - row) * size + 2
            if tile.matched:
                fill = CARD_MATCHED
            elif tile.revealed:
                fill = CARD_FRONT
            else:
                fill = CARD_BACK
            arcade.draw_lbwh_rectangle_filled(left, bottom, size - 4, size - 4, fill)
            if tile.revealed or tile.matched:
                arcade.draw_text(
                    tile.symbol,
                    left + (size - 4) / 2,
                    bottom + (size - 4) / 2,
                    color.BLACK,
                    font_size=int(size * 0.35),
                    anchor_x="center",
                    anchor_y="center",
                )
        hud = (
            f"{snap.difficulty}   Moves: {snap.move_count}   Time: {snap.formatted_time}"
            f"   All tabs: {self.total_moves}"
        )
        arcade.draw_text(hud, PADDING, self.height - HUD_HEIGHT / 2, color.WHITE, 16, anchor_y="center")
        if self.banner:
            arcade.draw_text(
                self.banner,
                self.width / 2,
                self.height / 2,
                color.GOLD,
                24,
                anchor_x="center",
                anchor_y="center",
            )

    def on_update(self, delta_time: float):
        self.tab.tick(delta_time)
        self._poll_elapsed += delta_time
        if self._poll_elapsed >= SHARED_POLL_INTERVAL:
            self._poll_elapsed = 0.0
            try:
                self.shared_store.poll()
            except OSError as exc:
                logger.warning("could not poll shared store: %s", exc)

    def on_mouse_press(self, x: float, y: float, button: int, modifiers: int):
        if button != arcade.MOUSE_BUTTON_LEFT:
            return
        snap = self.tab.snapshot()
        size, start_x, start_y = self._board_geometry(snap.rows, snap.cols)
        col = int((x - start_x) // size)
        row_from_bottom = int((y - start_y) // size)
        if not (0 <= col < snap.cols and 0 <= row_from_bottom < snap.rows):
            return
        row = snap.rows - 1 - row_from_bottom
        self.tab.reveal(row * snap.cols + col)

    def on_key_press(self, symbol: int, modifiers: int):
        if symbol == arcade.key.N:
            self.tab.new_game(self.tab.snapshot().difficulty)
            return
        index = symbol - arcade.key.KEY_1
        if 0 <= index < len(DIFFICULTY_PRESETS):
            self.tab.new_game(DIFFICULTY_PRESETS[index])

    def on_close(self):
        self.tab.close()
        super().on_close()

    def _on_aggregate_changed(self, sender, **payload):
        self.total_moves = payload.get("total", self.total_moves)

    def _on_completion_notice(self, sender, **payload):
        self.banner = f"Solved in {payload.get('moves')} moves, {payload.get('formatted_time')}. Press N"

    def _on_game_ready(self, sender, **payload):
        self.banner = None


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Pairs memory game")
    parser.add_argument("--difficulty", help="board shape as RxC, e.g. 4x4")
    parser.add_argument("--session", help="session id to resume or create")
    parser.add_argument("--data-dir", help="directory for saved sessions and shared totals")
    parser.add_argument("--log-level", default="INFO")
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        settings = load_settings().with_overrides(
            difficulty=args.difficulty,
            data_dir=Path(args.data_dir) if args.data_dir else None,
        )
    except ConfigurationError as exc:
        raise SystemExit(f"invalid configuration: {exc}")
    PairsWindow(settings, session_id=args.session)
    run()


if __name__ == "__main__":
    main()
