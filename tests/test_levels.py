import json
from pathlib import Path

import numpy as np
import pytest

import envs.escape.levels as levels_module
from envs.escape.levels import (MovingObstacle, PowerUp, build_level, build_levels,
                                clone_levels, default_template_path, load_templates,
                                random_exit_position)


def test_templates_define_two_levels():
    templates = load_templates()
    assert sorted(templates) == [1, 2]
    assert [p['id'] for p in templates[1]['powerups']] == ['l1p1', 'l1p2']
    assert [p['id'] for p in templates[2]['powerups']] == ['l2p1', 'l2p2']


def test_build_levels_layout():
    levels = build_levels(seed=3)
    first, second = levels

    assert len(first.obstacles) == 2
    assert first.moving == []
    assert len(first.enemies) == 1
    assert first.exit.locked and first.exit.code == "unlockDoor()"
    assert (first.exit.w, first.exit.h) == (32, 32)

    assert second.moving == [MovingObstacle(x=150, y=100, w=40, h=16, dx=2)]
    assert all(not p.collected for level in levels for p in level.powerups)


def test_exit_positions_stay_inside_margin():
    rng = np.random.default_rng(123)
    for _ in range(500):
        x, y = random_exit_position(rng)
        assert 40 <= x < 260
        assert 40 <= y < 260


def test_exit_placement_is_reproducible_with_seed():
    a = build_levels(seed=42)
    b = build_levels(seed=42)
    assert [(lvl.exit.x, lvl.exit.y) for lvl in a] == [(lvl.exit.x, lvl.exit.y) for lvl in b]


def test_exit_placement_uses_injected_generator():
    a = build_levels(rng=np.random.default_rng(7))
    b = build_levels(rng=np.random.default_rng(7))
    assert [(lvl.exit.x, lvl.exit.y) for lvl in a] == [(lvl.exit.x, lvl.exit.y) for lvl in b]


def test_fixed_exit_position_in_template_is_kept():
    template = {"exit": {"x": 100, "y": 120}, "powerups": []}
    level = build_level(template, np.random.default_rng(0))
    assert (level.exit.x, level.exit.y) == (100, 120)
    assert level.exit.locked


def test_unknown_powerup_type_is_rejected():
    template = {"exit": {}, "powerups": [
        {"id": "bad", "type": "speed", "x": 0, "y": 0, "w": 10, "h": 10,
         "question": "?", "answer": "!"}
    ]}
    with pytest.raises(ValueError):
        build_level(template, np.random.default_rng(0))


def test_rectangle_missing_field_is_rejected():
    template = {"exit": {}, "obstacles": [{"x": 0, "y": 0, "w": 10}]}
    with pytest.raises(ValueError):
        build_level(template, np.random.default_rng(0))


def test_missing_template_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_templates(tmp_path / "nope.json")


def test_default_templates_ship_inside_package():
    path = default_template_path()
    package_dir = Path(levels_module.__file__).parent
    assert path.is_file()
    assert path.parent.parent == package_dir


def test_custom_template_file(tmp_path):
    path = tmp_path / "levels.json"
    path.write_text(json.dumps({
        "1": {"exit": {"x": 200, "y": 200}, "obstacles": [], "enemies": [], "moving": [],
              "powerups": []}
    }))
    levels = build_levels(path)
    assert len(levels) == 1
    assert (levels[0].exit.x, levels[0].exit.y) == (200, 200)


def test_clone_levels_is_independent():
    levels = build_levels(seed=0)
    copies = clone_levels(levels)
    copies[0].powerups[0].collected = True
    copies[0].exit.unlock()
    assert not levels[0].powerups[0].collected
    assert levels[0].exit.locked


def test_answer_matching_ignores_case_and_whitespace():
    powerup = PowerUp(id="p", kind="life", x=0, y=0, w=26, h=26,
                      question="Which keyword declares a variable in JS?", answer="let")
    assert powerup.matches("let")
    assert powerup.matches("  LET \n")
    assert not powerup.matches("var")
    assert not powerup.matches("")
    assert not powerup.matches(None)


def test_moving_obstacle_bounces_exactly_at_walls():
    mov = MovingObstacle(x=150, y=100, w=40, h=16, dx=2)

    ticks = 0
    while mov.dx > 0:
        assert mov.x + mov.w < 300
        mov.step()
        ticks += 1
    assert ticks == 55
    assert mov.x == 260  # x + w == 300

    ticks = 0
    while mov.dx < 0:
        assert mov.x > 0 or ticks == 0
        mov.step()
        ticks += 1
    assert mov.x == 0
    assert mov.dx == 2
    assert ticks == 130
