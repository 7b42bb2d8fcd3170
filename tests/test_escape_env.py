import numpy as np
import pytest

from envs.escape.escape_env import EscapeEnv
from envs.escape.oracle import OracleAgent
from envs.escape.session import Mode


def test_reset_returns_observation_and_info():
    env = EscapeEnv()
    obs, info = env.reset(seed=7)

    assert obs["player_pos"].tolist() == [10, 10]
    assert obs["lives"][0] == 3
    assert obs["time_left"][0] == 30
    assert obs["level"][0] == 0
    assert obs["powerups_remaining"][0] == 2
    assert obs["door_open"][0] == 0
    assert obs["mode"][0] == 0
    assert obs["entities"].shape == (EscapeEnv.MAX_ENTITIES, EscapeEnv.ENTITY_FEATURES)
    assert obs["entities"].dtype == np.float32
    assert obs["entity_mask"].dtype == np.bool_
    # 2 obstacles, 1 enemy, 2 power-ups, exit
    assert obs["entity_mask"].sum() == 6

    assert info["seed"] == 7
    assert info["mode"] == "playing"
    assert info["step_count"] == 0
    env.close()


def test_same_seed_same_exit_positions():
    env = EscapeEnv()
    env.reset(seed=11)
    first = [(lvl.exit.x, lvl.exit.y) for lvl in env.session.levels]
    env.reset(seed=11)
    second = [(lvl.exit.x, lvl.exit.y) for lvl in env.session.levels]
    assert first == second
    for x, y in first:
        assert 40 <= x < 260 and 40 <= y < 260
    env.close()


def test_unseeded_reset_reports_no_seed():
    env = EscapeEnv()
    env.reset(seed=5)
    first = [(lvl.exit.x, lvl.exit.y) for lvl in env.session.levels]

    obs, info = env.reset()
    assert info["seed"] is None
    assert env.step(EscapeEnv.NO_OP)[4]["seed"] is None

    env.reset(seed=5)
    assert [(lvl.exit.x, lvl.exit.y) for lvl in env.session.levels] == first
    env.close()


def test_constructor_seed_used_on_first_reset():
    env = EscapeEnv(seed=3)
    obs, info = env.reset()
    assert info["seed"] == 3
    seeded = [(lvl.exit.x, lvl.exit.y) for lvl in env.session.levels]

    other = EscapeEnv()
    other.reset(seed=3)
    assert [(lvl.exit.x, lvl.exit.y) for lvl in other.session.levels] == seeded
    env.close()
    other.close()


def test_step_before_reset_raises():
    env = EscapeEnv()
    with pytest.raises(RuntimeError):
        env.step(EscapeEnv.NO_OP)


def test_invalid_action_raises():
    env = EscapeEnv()
    env.reset(seed=0)
    with pytest.raises(ValueError):
        env.step(9)
    env.close()


def test_move_action_and_step_penalty():
    env = EscapeEnv()
    env.reset(seed=0)
    obs, reward, terminated, truncated, info = env.step(EscapeEnv.RIGHT)

    assert obs["player_pos"].tolist() == [30, 10]
    assert reward == pytest.approx(EscapeEnv.STEP_PENALTY)
    assert not terminated and not truncated
    assert info["result"] == "moved"
    assert info["step_count"] == 1
    env.close()


def test_clock_advances_with_steps():
    env = EscapeEnv(step_ms=250)
    env.reset(seed=0)
    for _ in range(4):
        obs, *_ = env.step(EscapeEnv.NO_OP)
    assert obs["time_left"][0] == 29
    env.close()


def test_truncates_at_step_limit():
    env = EscapeEnv(max_steps=3)
    env.reset(seed=0)
    results = [env.step(EscapeEnv.NO_OP) for _ in range(3)]
    assert [r[3] for r in results] == [False, False, True]
    assert not any(r[2] for r in results)
    env.close()


def test_interact_answers_question(single_level_templates):
    env = EscapeEnv(template_path=single_level_templates)
    env.reset(seed=0)
    env.session.player_pos = (70, 10)

    obs, _, _, _, info = env.step(EscapeEnv.RIGHT)
    assert info["result"] == "question"
    assert obs["mode"][0] == 1

    obs, reward, terminated, truncated, info = env.step(EscapeEnv.INTERACT)
    assert env.session.mode is Mode.PLAYING
    assert obs["powerups_remaining"][0] == 0
    assert obs["door_open"][0] == 1
    assert obs["time_left"][0] == 40
    expected = EscapeEnv.STEP_PENALTY + EscapeEnv.POWERUP_REWARD + EscapeEnv.UNLOCK_REWARD
    assert reward == pytest.approx(expected)
    assert "Correct! Power-up applied." in info["notices"]
    env.close()


def test_interact_without_prompt_does_nothing():
    env = EscapeEnv()
    env.reset(seed=0)
    obs, reward, *_ = env.step(EscapeEnv.INTERACT)
    assert obs["player_pos"].tolist() == [10, 10]
    assert reward == pytest.approx(EscapeEnv.STEP_PENALTY)
    env.close()


def test_losing_last_life_terminates():
    env = EscapeEnv()
    env.reset(seed=0)
    env.session.lives = 1
    env.session.player_pos = (170, 80)

    obs, reward, terminated, truncated, info = env.step(EscapeEnv.RIGHT)
    assert terminated
    assert not truncated
    assert not info["success"]
    assert info["mode"] == "game_over"
    assert reward == pytest.approx(EscapeEnv.STEP_PENALTY + EscapeEnv.DEATH_PENALTY)
    env.close()


def test_oracle_finishes_open_room(single_level_templates):
    env = EscapeEnv(template_path=single_level_templates, max_steps=200)
    agent = OracleAgent()
    env.reset(seed=0)
    agent.reset()

    terminated = truncated = False
    info = {}
    while not (terminated or truncated):
        obs, reward, terminated, truncated, info = env.step(agent.act(env))

    assert terminated
    assert info["success"]
    assert info["mode"] == "finished"
    env.close()


def test_oracle_answers_open_prompt(single_level_templates):
    env = EscapeEnv(template_path=single_level_templates)
    agent = OracleAgent()
    env.reset(seed=0)
    env.session.player_pos = (70, 10)
    env.step(EscapeEnv.RIGHT)
    assert agent.act(env) == EscapeEnv.INTERACT
    env.close()


def test_rgb_array_render_shape():
    env = EscapeEnv(render_mode="rgb_array")
    env.reset(seed=0)
    frame = env.render()
    assert frame.shape == (690, 640, 3)
    assert frame.dtype == np.uint8
    env.close()


def test_render_without_mode_returns_none():
    env = EscapeEnv()
    env.reset(seed=0)
    assert env.render() is None
    env.close()


def test_unknown_render_mode_rejected():
    with pytest.raises(ValueError):
        EscapeEnv(render_mode="ascii")
