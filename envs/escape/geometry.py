"""
Axis-aligned rectangle helpers used for every interaction in the room
"""

from dataclasses import dataclass
from typing import Tuple

from .constants import MAX_COORD, PLAYER_SIZE


@dataclass
class Rect:
    x: int
    y: int
    w: int
    h: int


def rect_tuple(obj) -> Tuple[int, int, int, int]:
    return (obj.x, obj.y, obj.w, obj.h)


def overlaps(a, b) -> bool:
    """Half-open overlap test between two objects exposing x, y, w, h."""
    return (a.x < b.x + b.w and a.x + a.w > b.x and
            a.y < b.y + b.h and a.y + a.h > b.y)


def player_rect(x: int, y: int) -> Rect:
    return Rect(x, y, PLAYER_SIZE, PLAYER_SIZE)


def clamp_position(x: int, y: int) -> Tuple[int, int]:
    """Keep the player's box inside the room."""
    return max(0, min(MAX_COORD, x)), max(0, min(MAX_COORD, y))
