"""
Scripted oracle for EscapeEnv: answer any open prompt, otherwise walk
greedily towards the nearest uncollected power-up (or the exit once they are
all collected) while steering clear of enemies and obstacles.
"""

from collections import defaultdict

from .constants import STEP_SIZE
from .geometry import clamp_position, overlaps, player_rect
from .session import DIRECTION_DELTAS, Mode


def _center(obj):
    return obj.x + obj.w / 2, obj.y + obj.h / 2


def _manhattan(a, b) -> float:
    return abs(a[0] - b[0]) + abs(a[1] - b[1])


class OracleAgent:
    """Greedy navigator with a revisit penalty to get out of dead ends."""

    REVISIT_PENALTY = 2 * STEP_SIZE

    def __init__(self):
        self.visits = defaultdict(int)
        self._level_index = None

    def reset(self):
        self.visits.clear()
        self._level_index = None

    def act(self, env) -> int:
        session = env.session
        if session.mode in (Mode.AWAITING_ANSWER, Mode.AWAITING_CODE):
            return env.INTERACT
        if session.mode is not Mode.PLAYING:
            return env.NO_OP

        if session.level_index != self._level_index:
            self.visits.clear()
            self._level_index = session.level_index
        self.visits[session.player_pos] += 1

        level = session.level
        remaining = level.remaining_powerups()
        if remaining:
            player_center = _center(player_rect(*session.player_pos))
            target = min(remaining, key=lambda p: _manhattan(_center(p), player_center))
        else:
            target = level.exit
        target_center = _center(target)

        best_action = env.NO_OP
        best_score = float('inf')
        for action, direction in env.ACTION_DIRECTIONS.items():
            dx, dy = DIRECTION_DELTAS[direction]
            pos = clamp_position(session.player_pos[0] + dx * STEP_SIZE,
                                 session.player_pos[1] + dy * STEP_SIZE)
            if pos == session.player_pos:
                continue
            candidate = player_rect(*pos)
            if not self._is_safe(candidate, level, remaining):
                continue
            if overlaps(candidate, target):
                return action

            score = _manhattan(_center(candidate), target_center) + self.REVISIT_PENALTY * self.visits[pos]
            if score < best_score:
                best_score = score
                best_action = action

        return best_action

    @staticmethod
    def _is_safe(candidate, level, remaining) -> bool:
        if any(overlaps(candidate, e) for e in level.enemies):
            return False
        if any(overlaps(candidate, o) for o in level.obstacles):
            return False
        if any(overlaps(candidate, m) for m in level.moving):
            return False
        # A locked exit only produces a notice, so treat it as a wall until it opens
        if remaining and level.exit.locked and overlaps(candidate, level.exit):
            return False
        return True
