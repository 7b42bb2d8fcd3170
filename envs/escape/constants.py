"""
Shared constants for the Escape room: geometry, timers and start values
"""

# Room
ROOM_SIZE = 300
PLAYER_SIZE = 30
MAX_COORD = ROOM_SIZE - PLAYER_SIZE  # 270
STEP_SIZE = 20
PLAYER_START = (10, 10)

# Player resources
START_LIVES = 3
START_TIME = 30  # seconds
TIME_BONUS = 10
LIFE_BONUS = 1

# Exit door
EXIT_SIZE = 32
EXIT_MARGIN = 40
DEFAULT_EXIT_CODE = "unlockDoor()"

# Timer periods (milliseconds)
COUNTDOWN_PERIOD_MS = 1000
MOVING_PERIOD_MS = 50  # ~20 Hz

# Power-up kinds
POWERUP_TIME = "time"
POWERUP_LIFE = "life"
POWERUP_KINDS = (POWERUP_TIME, POWERUP_LIFE)
