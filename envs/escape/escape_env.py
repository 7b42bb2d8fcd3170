import os
from typing import Any, Dict, Optional, Tuple

import gymnasium as gym
import numpy as np
from gymnasium import spaces

from .constants import MAX_COORD, ROOM_SIZE
from .rendering import WINDOW_HEIGHT, WINDOW_WIDTH, make_fonts, render_frame
from .session import Direction, GameSession, Mode, NoticeKind

MODE_CODES = {
    Mode.PLAYING: 0,
    Mode.AWAITING_ANSWER: 1,
    Mode.AWAITING_CODE: 2,
    Mode.GAME_OVER: 3,
    Mode.FINISHED: 4,
}


class EscapeEnv(gym.Env):
    """
    Gymnasium view of an Escape game session.

    Every step applies one action and then advances the session clock by
    ``step_ms``, so moving obstacles and the countdown keep running while the
    agent plays. INTERACT resolves an open prompt with the right answer (or
    the unlock code): an agent cannot type, so the quiz is taken as solved
    and the task is navigation.
    """

    metadata = {"render_modes": ["human", "rgb_array"], "render_fps": 20}

    # Entity types
    OBSTACLE = 0
    MOVING = 1
    ENEMY = 2
    POWERUP = 3
    EXIT = 4
    NUM_ENTITY_TYPES = 5

    # Actions
    UP = 0
    DOWN = 1
    LEFT = 2
    RIGHT = 3
    INTERACT = 4
    NO_OP = 5

    ACTION_NAMES = ["UP", "DOWN", "LEFT", "RIGHT", "INTERACT", "NO_OP"]
    ACTION_DIRECTIONS = {
        UP: Direction.UP,
        DOWN: Direction.DOWN,
        LEFT: Direction.LEFT,
        RIGHT: Direction.RIGHT,
    }

    MAX_ENTITIES = 16
    ENTITY_FEATURES = 10

    # Rewards
    STEP_PENALTY = -0.01
    POWERUP_REWARD = 0.5
    UNLOCK_REWARD = 0.2
    LEVEL_REWARD = 1.0
    DEATH_PENALTY = -1.0

    def __init__(self, max_steps: int = 2000, step_ms: int = 50,
                 render_mode: Optional[str] = None, template_path=None,
                 seed: Optional[int] = None):
        super().__init__()
        if render_mode is not None and render_mode not in self.metadata["render_modes"]:
            raise ValueError(f"Unsupported render mode: {render_mode}")

        self.max_steps = max_steps
        self.step_ms = step_ms
        self.render_mode = render_mode
        self.template_path = template_path
        self.seed = seed

        self.action_space = spaces.Discrete(6)  # UP, DOWN, LEFT, RIGHT, INTERACT, NO_OP
        self.observation_space = spaces.Dict({
            "player_pos": spaces.Box(0, MAX_COORD, (2,), dtype=np.int32),
            "lives": spaces.Box(0, 99, (1,), dtype=np.int32),
            "time_left": spaces.Box(0, 999, (1,), dtype=np.int32),
            "level": spaces.Box(0, 15, (1,), dtype=np.int32),
            "powerups_remaining": spaces.Box(0, self.MAX_ENTITIES, (1,), dtype=np.int32),
            "door_open": spaces.Box(0, 1, (1,), dtype=np.int32),
            "mode": spaces.Box(0, len(MODE_CODES) - 1, (1,), dtype=np.int32),
            # type_onehot(5), dx, dy, w, h, active
            "entities": spaces.Box(low=-np.inf, high=np.inf,
                                   shape=(self.MAX_ENTITIES, self.ENTITY_FEATURES), dtype=np.float32),
            "entity_mask": spaces.Box(0, 1, (self.MAX_ENTITIES,), dtype=np.bool_),
        })

        self.session: Optional[GameSession] = None
        self.step_count = 0

        # For rendering
        self.window = None
        self.canvas = None
        self.clock = None
        self.fonts = None
        if self.render_mode == "rgb_array":
            os.environ.setdefault("SDL_VIDEODRIVER", "dummy")

    def reset(self, seed: Optional[int] = None,
              options: Optional[Dict[str, Any]] = None) -> Tuple[Dict[str, Any], Dict[str, Any]]:
        if seed is None and self.session is None:
            seed = self.seed
        super().reset(seed=seed)
        # None once the generator just carries on from an earlier episode
        self.seed = seed

        if self.session is not None:
            self.session.close()
        # Exit placement draws from the env's seeded generator
        self.session = GameSession(template_path=self.template_path, rng=self.np_random)
        self.step_count = 0

        if self.render_mode == "human":
            self.render()
        return self._get_observation(), self._get_info()

    def step(self, action):
        if self.session is None:
            raise RuntimeError("Call reset() before step()")
        if not self.action_space.contains(action):
            raise ValueError(f"Invalid action: {action}")
        action = int(action)

        session = self.session
        reward = self.STEP_PENALTY
        level_before = session.level_index
        was_locked = session.level.exit.locked
        result = None

        if action in self.ACTION_DIRECTIONS:
            result = session.move(self.ACTION_DIRECTIONS[action])
        elif action == self.INTERACT:
            self._interact()
        elif action == self.NO_OP:
            pass

        session.advance(self.step_ms)

        notices = session.drain_notices()
        for notice in notices:
            if notice.kind is NoticeKind.ANSWER_CORRECT:
                reward += self.POWERUP_REWARD
            elif notice.kind in (NoticeKind.LEVEL_COMPLETE, NoticeKind.GAME_FINISHED):
                reward += self.LEVEL_REWARD
            elif notice.kind in (NoticeKind.DIED, NoticeKind.GAME_OVER):
                reward += self.DEATH_PENALTY

        if session.level_index == level_before and was_locked and not session.level.exit.locked:
            reward += self.UNLOCK_REWARD

        self.step_count += 1
        terminated = session.game_over or session.finished
        truncated = not terminated and self.step_count >= self.max_steps

        info = self._get_info()
        info['result'] = result.value if result is not None else None
        info['notices'] = [notice.message for notice in notices]
        info['success'] = session.finished

        if self.render_mode == "human":
            self.render()
        return self._get_observation(), reward, terminated, truncated, info

    def _interact(self):
        """Answer the open prompt correctly; does nothing otherwise."""
        session = self.session
        if session.mode is Mode.AWAITING_ANSWER:
            session.submit_answer(session.active_question.answer)
        elif session.mode is Mode.AWAITING_CODE:
            session.submit_code(session.level.exit.code)

    def _get_info(self) -> Dict[str, Any]:
        session = self.session
        return {
            'seed': self.seed,
            'mode': session.mode.value,
            'level': session.level_index,
            'lives': session.lives,
            'time_left': session.time_left,
            'step_count': self.step_count,
        }

    def _get_observation(self) -> Dict[str, Any]:
        session = self.session
        entities, entity_mask = self._extract_entities()
        return {
            "player_pos": np.array(session.player_pos, dtype=np.int32),
            "lives": np.array([session.lives], dtype=np.int32),
            "time_left": np.array([session.time_left], dtype=np.int32),
            "level": np.array([session.level_index], dtype=np.int32),
            "powerups_remaining": np.array([session.powerups_remaining], dtype=np.int32),
            "door_open": np.array([int(not session.level.exit.locked)], dtype=np.int32),
            "mode": np.array([MODE_CODES[session.mode]], dtype=np.int32),
            "entities": entities,
            "entity_mask": entity_mask,
        }

    def _extract_entities(self) -> Tuple[np.ndarray, np.ndarray]:
        level = self.session.level
        rows = []
        rows.extend(self._create_entity_vector(self.OBSTACLE, o) for o in level.obstacles)
        rows.extend(self._create_entity_vector(self.MOVING, m) for m in level.moving)
        rows.extend(self._create_entity_vector(self.ENEMY, e) for e in level.enemies)
        rows.extend(self._create_entity_vector(self.POWERUP, p, active=not p.collected)
                    for p in level.powerups)
        rows.append(self._create_entity_vector(self.EXIT, level.exit, active=level.exit.locked))

        entities = np.zeros((self.MAX_ENTITIES, self.ENTITY_FEATURES), dtype=np.float32)
        entity_mask = np.zeros(self.MAX_ENTITIES, dtype=np.bool_)
        for i, row in enumerate(rows[:self.MAX_ENTITIES]):
            entities[i] = row
            entity_mask[i] = True
        return entities, entity_mask

    def _create_entity_vector(self, entity_type: int, obj, active: bool = True) -> np.ndarray:
        # Features: [type_onehot(5), dx_player, dy_player, w, h, active]
        features = np.zeros(self.ENTITY_FEATURES, dtype=np.float32)
        features[entity_type] = 1.0

        px, py = self.session.player_pos
        features[5] = (obj.x - px) / ROOM_SIZE
        features[6] = (obj.y - py) / ROOM_SIZE
        features[7] = obj.w / ROOM_SIZE
        features[8] = obj.h / ROOM_SIZE
        features[9] = float(active)
        return features

    def render(self):
        if self.render_mode is None or self.session is None:
            return None

        import pygame
        if self.fonts is None:
            pygame.init()
            self.fonts = make_fonts()
        if self.render_mode == "human" and self.window is None:
            self.window = pygame.display.set_mode((WINDOW_WIDTH, WINDOW_HEIGHT))
            pygame.display.set_caption("Escape The Program - Env")
            self.clock = pygame.time.Clock()
        if self.canvas is None:
            self.canvas = pygame.Surface((WINDOW_WIDTH, WINDOW_HEIGHT))

        render_frame(self.canvas, self.session.snapshot(), self.fonts)

        if self.render_mode == "human":
            self.window.blit(self.canvas, self.canvas.get_rect())
            pygame.event.pump()
            pygame.display.flip()
            self.clock.tick(self.metadata["render_fps"])
            return None

        arr = pygame.surfarray.array3d(self.canvas)
        return np.transpose(arr, (1, 0, 2)).astype(np.uint8)

    def close(self):
        if self.session is not None:
            self.session.close()
        if self.fonts is not None:
            import pygame
            if self.window is not None:
                pygame.display.quit()
            pygame.quit()
            self.window = None
            self.canvas = None
            self.fonts = None
