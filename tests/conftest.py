import copy
import json
import os

import numpy as np
import pytest

os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")

from envs.escape.levels import build_level, load_templates
from envs.escape.session import GameSession

# Far corner, clear of every shipped obstacle, enemy and power-up
FIXED_EXIT = (240, 240)


def make_levels(exit_pos=FIXED_EXIT):
    """Shipped levels with the exit pinned so tests can walk into it."""
    templates = load_templates()
    levels = []
    for level_id in sorted(templates):
        template = copy.deepcopy(templates[level_id])
        template['exit'].update(x=exit_pos[0], y=exit_pos[1])
        levels.append(build_level(template, np.random.default_rng(0)))
    return levels


@pytest.fixture
def session():
    return GameSession(levels=make_levels())


@pytest.fixture
def levels():
    return make_levels()


@pytest.fixture
def single_level_templates(tmp_path):
    """One open room: a power-up near the start and a fixed exit."""
    template = {
        "1": {
            "exit": {"locked": True, "code": "unlockDoor()", "x": 200, "y": 200},
            "obstacles": [],
            "enemies": [],
            "moving": [],
            "powerups": [{
                "id": "p1", "type": "time",
                "x": 100, "y": 10, "w": 26, "h": 26,
                "question": "What is 1 + 1?", "answer": "2",
            }],
        }
    }
    path = tmp_path / "single_level.json"
    path.write_text(json.dumps(template))
    return path
