from .geometry import Rect, overlaps, clamp_position, player_rect, rect_tuple
from .levels import (Obstacle, MovingObstacle, Enemy, PowerUp, Exit, Level,
                     build_level, build_levels, load_templates, random_exit_position)
from .session import GameSession, Mode, Direction, MoveResult, Notice, NoticeKind
from .escape_env import EscapeEnv
from .oracle import OracleAgent

__all__ = [
    'Rect', 'overlaps', 'clamp_position', 'player_rect', 'rect_tuple',
    'Obstacle', 'MovingObstacle', 'Enemy', 'PowerUp', 'Exit', 'Level',
    'build_level', 'build_levels', 'load_templates', 'random_exit_position',
    'GameSession', 'Mode', 'Direction', 'MoveResult', 'Notice', 'NoticeKind',
    'EscapeEnv', 'OracleAgent',
]
