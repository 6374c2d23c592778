# Sports symbols used as tile faces; pairs are taken from the front of the list.
SYMBOLS = (
    '⚽', '🏀', '🏈', '⚾', '🥎', '🏐', '🏉', '🎾', '🥏', '🎱', '🏓', '🏸',
    '🏒', '🏑', '🥍', '🏏', '⛳', '🥊', '🥋', '🎽', '⛸️', '🎿', '🛷', '🥌',
    '🏄', '🚣', '🏊', '🚴', '🧗', '🤺', '⛹️', '🤸',
)

# Board presets offered by the difficulty selector ("rows x cols").
DIFFICULTY_PRESETS = ('2x2', '2x4', '4x4', '4x5', '6x6', '8x8')
DEFAULT_DIFFICULTY = '4x4'

# Seconds both tiles stay face-up before the pair is compared.
MATCH_CHECK_DELAY = 0.5
# Seconds a mismatched pair stays visible (input locked) before hiding again.
FLIP_BACK_DELAY = 1.0
# Seconds between completion and the game-over notice.
COMPLETION_NOTICE_DELAY = 0.5

CLOCK_INTERVAL = 1.0
# Clock ticks between opportunistic session snapshots.
SNAPSHOT_EVERY_TICKS = 5

# Storage keys
SESSION_KEY_PREFIX = 'memoryGame:'
TOTAL_MOVES_KEY = 'totalMovesAcrossTabs'
SHARED_STORE_FILENAME = 'shared_store.json'
