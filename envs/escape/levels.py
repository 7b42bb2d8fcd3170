"""
Level data for the Escape room.

Levels are described in ``templates/escape_levels.json`` next to this module.
The only random part of a level is the exit door position, which is drawn
once when the level set is built. Pass a seeded ``numpy.random.Generator``
(or a seed) to get a reproducible layout.
"""

import copy
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import numpy as np

from .constants import (DEFAULT_EXIT_CODE, EXIT_MARGIN, EXIT_SIZE, POWERUP_KINDS,
                        ROOM_SIZE)


@dataclass
class Obstacle:
    x: int
    y: int
    w: int
    h: int


@dataclass
class MovingObstacle:
    x: int
    y: int
    w: int
    h: int
    dx: int

    def step(self, room_size: int = ROOM_SIZE):
        """Advance one tick and bounce off the left/right walls."""
        self.x += self.dx
        if self.x <= 0 or self.x + self.w >= room_size:
            self.dx = -self.dx


@dataclass
class Enemy:
    x: int
    y: int
    w: int
    h: int


@dataclass
class PowerUp:
    id: str
    kind: str
    x: int
    y: int
    w: int
    h: int
    question: str
    answer: str
    collected: bool = False

    def matches(self, text: Optional[str]) -> bool:
        """Case-insensitive comparison with surrounding whitespace ignored."""
        if text is None:
            return False
        return str(text).strip().lower() == str(self.answer).strip().lower()


@dataclass
class Exit:
    x: int
    y: int
    code: str = DEFAULT_EXIT_CODE
    locked: bool = True
    w: int = EXIT_SIZE
    h: int = EXIT_SIZE

    def unlock(self):
        # One-way: nothing in the game ever locks a door again
        self.locked = False


@dataclass
class Level:
    exit: Exit
    obstacles: List[Obstacle] = field(default_factory=list)
    moving: List[MovingObstacle] = field(default_factory=list)
    enemies: List[Enemy] = field(default_factory=list)
    powerups: List[PowerUp] = field(default_factory=list)

    def remaining_powerups(self) -> List[PowerUp]:
        return [p for p in self.powerups if not p.collected]


def default_template_path() -> Path:
    return Path(__file__).parent / "templates" / "escape_levels.json"


def load_templates(template_path=None) -> Dict[int, Dict[str, Any]]:
    """Load level templates from JSON, keyed by level number (1-based)."""
    template_path = Path(template_path) if template_path else default_template_path()
    if not template_path.exists():
        raise FileNotFoundError(f"Level template file not found: {template_path}")

    with open(template_path, 'r') as f:
        templates_data = json.load(f)

    return {int(level_id): data for level_id, data in templates_data.items()}


def random_exit_position(rng: np.random.Generator,
                         margin: int = EXIT_MARGIN,
                         room_size: int = ROOM_SIZE) -> Tuple[int, int]:
    """Draw an exit position with both coordinates in [margin, room_size - margin)."""
    upper = room_size - margin
    x = int(rng.integers(margin, upper))
    y = int(rng.integers(margin, upper))
    return x, y


def _rect_args(data: Dict[str, Any]) -> Dict[str, int]:
    try:
        return {k: int(data[k]) for k in ('x', 'y', 'w', 'h')}
    except KeyError as e:
        raise ValueError(f"Rectangle is missing field {e}: {data}") from e


def build_level(template: Dict[str, Any], rng: np.random.Generator) -> Level:
    """Turn one template dict into a Level, placing its exit at random."""
    exit_data = template.get('exit', {})
    if 'x' in exit_data and 'y' in exit_data:
        exit_x, exit_y = int(exit_data['x']), int(exit_data['y'])
    else:
        exit_x, exit_y = random_exit_position(rng)
    exit_door = Exit(
        x=exit_x,
        y=exit_y,
        code=exit_data.get('code', DEFAULT_EXIT_CODE),
        locked=exit_data.get('locked', True),
    )

    powerups = []
    for pu in template.get('powerups', []):
        kind = pu.get('type')
        if kind not in POWERUP_KINDS:
            raise ValueError(f"Unknown power-up type {kind!r} for {pu.get('id')}")
        powerups.append(PowerUp(
            id=pu['id'],
            kind=kind,
            question=pu['question'],
            answer=pu['answer'],
            collected=pu.get('collected', False),
            **_rect_args(pu),
        ))

    return Level(
        exit=exit_door,
        obstacles=[Obstacle(**_rect_args(o)) for o in template.get('obstacles', [])],
        moving=[MovingObstacle(dx=int(m['dx']), **_rect_args(m)) for m in template.get('moving', [])],
        enemies=[Enemy(**_rect_args(e)) for e in template.get('enemies', [])],
        powerups=powerups,
    )


def build_levels(template_path=None,
                 rng: Optional[np.random.Generator] = None,
                 seed: Optional[int] = None) -> List[Level]:
    """Build the full level set in template order."""
    if rng is None:
        rng = np.random.default_rng(seed)

    templates = load_templates(template_path)
    levels = [build_level(templates[level_id], rng) for level_id in sorted(templates)]
    logging.debug(f"Built {len(levels)} levels, exits at "
                  f"{[(lvl.exit.x, lvl.exit.y) for lvl in levels]}")
    return levels


def clone_levels(levels: List[Level]) -> List[Level]:
    """Independent copy of a level set so play never mutates the source levels."""
    return copy.deepcopy(levels)
