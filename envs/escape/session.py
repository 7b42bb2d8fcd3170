"""
Escape game session - owns the level data and the player state and applies
every gameplay rule: movement and collisions, question prompts, the exit lock,
timers, death, level progression and restart.

The session never blocks. Prompts are modes (AWAITING_ANSWER, AWAITING_CODE)
that are left through submit/cancel calls, and the two periodic timers are
driven by feeding elapsed wall-clock time into ``advance``.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

import numpy as np

from .constants import (COUNTDOWN_PERIOD_MS, LIFE_BONUS, MOVING_PERIOD_MS, PLAYER_SIZE,
                        PLAYER_START, POWERUP_LIFE, POWERUP_TIME, START_LIVES, START_TIME,
                        STEP_SIZE, TIME_BONUS)
from .geometry import clamp_position, overlaps, player_rect, rect_tuple
from .levels import Level, PowerUp, build_levels, clone_levels


class Mode(Enum):
    PLAYING = "playing"
    AWAITING_ANSWER = "awaiting_answer"
    AWAITING_CODE = "awaiting_code"
    GAME_OVER = "game_over"
    FINISHED = "finished"


class Direction(Enum):
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"


DIRECTION_DELTAS = {
    Direction.UP: (0, -1),
    Direction.DOWN: (0, 1),
    Direction.LEFT: (-1, 0),
    Direction.RIGHT: (1, 0),
}


class MoveResult(Enum):
    MOVED = "moved"
    BLOCKED = "blocked"
    DIED = "died"
    QUESTION = "question"
    LOCKED = "locked"
    CODE_PROMPT = "code_prompt"
    ADVANCED = "advanced"
    FINISHED = "finished"
    IGNORED = "ignored"


class NoticeKind(Enum):
    DOOR_LOCKED = "door_locked"
    CODE_ACCEPTED = "code_accepted"
    CODE_REJECTED = "code_rejected"
    ANSWER_CORRECT = "answer_correct"
    ANSWER_WRONG = "answer_wrong"
    DIED = "died"
    GAME_OVER = "game_over"
    LEVEL_COMPLETE = "level_complete"
    GAME_FINISHED = "game_finished"


@dataclass
class Notice:
    kind: NoticeKind
    message: str


class GameSession:
    """
    A single play-through of the level set.

    Args:
        levels: Pre-built levels. They are copied, never mutated.
        template_path: Level template file used when ``levels`` is None.
        seed: Seed for the exit placement when ``levels`` is None.
        rng: Generator for the exit placement (takes precedence over seed).
    """

    def __init__(self,
                 levels: Optional[List[Level]] = None,
                 template_path=None,
                 seed: Optional[int] = None,
                 rng: Optional[np.random.Generator] = None):
        if levels is None:
            levels = build_levels(template_path, rng=rng, seed=seed)
        if not levels:
            raise ValueError("A game session needs at least one level")

        # Pristine copy; restart rebuilds the playable levels from it
        self.level_set = clone_levels(levels)

        self.levels: List[Level] = []
        self.level_index = 0
        self.player_pos: Tuple[int, int] = PLAYER_START
        self.lives = START_LIVES
        self.time_left = START_TIME
        self.mode = Mode.PLAYING
        self.active_question: Optional[PowerUp] = None
        self.input_buffer = ""
        self.notices: List[Notice] = []
        self.last_notice: Optional[Notice] = None
        self.closed = False

        self._countdown_elapsed = 0
        self._moving_elapsed = 0

        self._reset_state()

    # ------------------------------------------------------------------
    # State queries
    # ------------------------------------------------------------------

    @property
    def level(self) -> Level:
        return self.levels[self.level_index]

    @property
    def game_over(self) -> bool:
        return self.mode is Mode.GAME_OVER

    @property
    def finished(self) -> bool:
        return self.mode is Mode.FINISHED

    @property
    def prompt_open(self) -> bool:
        return self.mode in (Mode.AWAITING_ANSWER, Mode.AWAITING_CODE)

    @property
    def timers_active(self) -> bool:
        return self.mode is Mode.PLAYING and not self.closed

    @property
    def powerups_remaining(self) -> int:
        return len(self.level.remaining_powerups())

    # ------------------------------------------------------------------
    # Movement
    # ------------------------------------------------------------------

    def move(self, direction) -> MoveResult:
        """Try one step of STEP_SIZE in the given direction."""
        direction = Direction(direction)
        if self.mode is not Mode.PLAYING or self.closed:
            return MoveResult.IGNORED

        dx, dy = DIRECTION_DELTAS[direction]
        nx, ny = clamp_position(self.player_pos[0] + dx * STEP_SIZE,
                                self.player_pos[1] + dy * STEP_SIZE)
        candidate = player_rect(nx, ny)
        level = self.level

        if any(overlaps(candidate, enemy) for enemy in level.enemies):
            self._on_death()
            return MoveResult.DIED

        if (any(overlaps(candidate, ob) for ob in level.obstacles) or
                any(overlaps(candidate, mov) for mov in level.moving)):
            logging.debug(f"Move {direction.value} to {(nx, ny)} blocked by obstacle")
            return MoveResult.BLOCKED

        # Movement onto a power-up waits until its question is resolved
        powerup = self._detect_powerup(candidate)
        if powerup is not None:
            self._open_question(powerup)
            return MoveResult.QUESTION

        if overlaps(candidate, level.exit):
            return self._enter_exit()

        self.player_pos = (nx, ny)
        return MoveResult.MOVED

    def _detect_powerup(self, rect) -> Optional[PowerUp]:
        for powerup in self.level.powerups:
            if not powerup.collected and overlaps(rect, powerup):
                return powerup
        return None

    def _enter_exit(self) -> MoveResult:
        exit_door = self.level.exit
        if exit_door.locked:
            remaining = self.powerups_remaining
            if remaining > 0:
                self._notify(NoticeKind.DOOR_LOCKED,
                             f"Door is locked. Collect all power-ups first ({remaining} left).")
                return MoveResult.LOCKED
            self.mode = Mode.AWAITING_CODE
            self.input_buffer = ""
            self._stop_timers()
            logging.debug("Exit reached with all power-ups collected, asking for unlock code")
            return MoveResult.CODE_PROMPT
        return self._advance_level()

    def _advance_level(self) -> MoveResult:
        if self.level_index + 1 < len(self.levels):
            completed = self.level_index + 1
            self.level_index += 1
            self.player_pos = PLAYER_START
            self.time_left = START_TIME
            self._stop_timers()
            self._notify(NoticeKind.LEVEL_COMPLETE,
                         f"Level {completed} complete! On to level {completed + 1}.")
            logging.info(f"Advanced to level {self.level_index + 1}/{len(self.levels)}")
            return MoveResult.ADVANCED

        self.mode = Mode.FINISHED
        self._stop_timers()
        self._notify(NoticeKind.GAME_FINISHED, "You finished all levels!")
        logging.info(f"Game finished with {self.lives} lives and {self.time_left}s left")
        return MoveResult.FINISHED

    # ------------------------------------------------------------------
    # Prompts
    # ------------------------------------------------------------------

    def _open_question(self, powerup: PowerUp):
        self.active_question = powerup
        self.input_buffer = ""
        self.mode = Mode.AWAITING_ANSWER
        self._stop_timers()
        logging.debug(f"Question opened for power-up {powerup.id}")

    def _close_prompt(self):
        self.active_question = None
        self.input_buffer = ""
        self.mode = Mode.PLAYING
        self._stop_timers()

    def type_text(self, text: str):
        """Append typed characters to the open prompt's input."""
        if self.prompt_open:
            self.input_buffer += text

    def backspace(self):
        if self.prompt_open:
            self.input_buffer = self.input_buffer[:-1]

    def submit_answer(self, text: Optional[str] = None) -> Optional[bool]:
        """
        Answer the active question.

        Uses the typed input buffer when ``text`` is None. Returns whether the
        answer was correct, or None when no question is open.
        """
        if self.mode is not Mode.AWAITING_ANSWER or self.active_question is None:
            return None
        if text is None:
            text = self.input_buffer

        powerup = self.active_question
        correct = powerup.matches(text)
        if correct:
            if powerup.kind == POWERUP_TIME:
                self.time_left += TIME_BONUS
            elif powerup.kind == POWERUP_LIFE:
                self.lives += LIFE_BONUS
            powerup.collected = True
            logging.info(f"Power-up {powerup.id} collected ({powerup.kind})")

            if self.powerups_remaining == 0 and self.level.exit.locked:
                self.level.exit.unlock()
                logging.info(f"All power-ups collected, exit of level {self.level_index + 1} unlocked")

            self._notify(NoticeKind.ANSWER_CORRECT, "Correct! Power-up applied.")
        else:
            self._notify(NoticeKind.ANSWER_WRONG, "Wrong answer.")

        self._close_prompt()
        return correct

    def cancel_answer(self):
        if self.mode is Mode.AWAITING_ANSWER:
            logging.debug(f"Question for {self.active_question.id} cancelled")
            self._close_prompt()

    def submit_code(self, text: Optional[str] = None) -> Optional[bool]:
        """Enter the unlock code at a locked exit. None when no code prompt is open."""
        if self.mode is not Mode.AWAITING_CODE:
            return None
        if text is None:
            text = self.input_buffer
        return self._resolve_code(text)

    def cancel_code(self) -> Optional[bool]:
        """Dismissing the code prompt counts as entering no code."""
        if self.mode is not Mode.AWAITING_CODE:
            return None
        return self._resolve_code(None)

    def _resolve_code(self, text: Optional[str]) -> bool:
        exit_door = self.level.exit
        accepted = text is not None and text == exit_door.code
        if accepted:
            exit_door.unlock()
            logging.info(f"Exit of level {self.level_index + 1} unlocked by code")
            self._notify(NoticeKind.CODE_ACCEPTED, "Door unlocked!")
        else:
            self._notify(NoticeKind.CODE_REJECTED, "Wrong code.")
        self._close_prompt()
        return accepted

    # ------------------------------------------------------------------
    # Timers and death
    # ------------------------------------------------------------------

    def advance(self, elapsed_ms: float):
        """Feed elapsed time to the countdown and moving-obstacle timers."""
        if not self.timers_active:
            return

        self._moving_elapsed += elapsed_ms
        self._countdown_elapsed += elapsed_ms

        # Fire ticks in time order so nothing runs past a game over
        while self.timers_active:
            moving_due = MOVING_PERIOD_MS - self._moving_elapsed
            countdown_due = COUNTDOWN_PERIOD_MS - self._countdown_elapsed
            if moving_due > 0 and countdown_due > 0:
                break
            if moving_due <= countdown_due:
                self._moving_elapsed -= MOVING_PERIOD_MS
                self.tick_moving()
            else:
                self._countdown_elapsed -= COUNTDOWN_PERIOD_MS
                self.tick_countdown()

    def tick_countdown(self):
        if not self.timers_active:
            return
        self.time_left -= 1
        if self.time_left <= 0:
            logging.debug("Countdown reached zero")
            self._on_death()
            self.time_left = START_TIME

    def tick_moving(self):
        if not self.timers_active:
            return
        for mov in self.level.moving:
            mov.step()

    def _on_death(self):
        self.lives = max(0, self.lives - 1)
        self.player_pos = PLAYER_START
        self.time_left = START_TIME
        if self.lives == 0:
            self.mode = Mode.GAME_OVER
            self._stop_timers()
            self._notify(NoticeKind.GAME_OVER, "GAME OVER - You ran out of lives.")
            logging.info(f"Game over on level {self.level_index + 1}")
        else:
            self._notify(NoticeKind.DIED, f"You died! {self.lives} lives left.")
            logging.info(f"Player died, {self.lives} lives left")

    def _stop_timers(self):
        # Partial periods never carry over into a new level or past a prompt
        self._countdown_elapsed = 0
        self._moving_elapsed = 0

    def close(self):
        """Tear the session down; timers and input stop for good."""
        self.closed = True
        self._stop_timers()

    # ------------------------------------------------------------------
    # Restart, notices, snapshot
    # ------------------------------------------------------------------

    def _reset_state(self):
        self.levels = clone_levels(self.level_set)
        self.level_index = 0
        self.player_pos = PLAYER_START
        self.lives = START_LIVES
        self.time_left = START_TIME
        self.mode = Mode.PLAYING
        self.active_question = None
        self.input_buffer = ""
        self.notices = []
        self.last_notice = None
        self.closed = False
        self._stop_timers()

    def restart(self):
        self._reset_state()
        logging.info("Game restarted")

    def _notify(self, kind: NoticeKind, message: str):
        notice = Notice(kind, message)
        self.notices.append(notice)
        self.last_notice = notice
        logging.debug(f"Notice [{kind.value}]: {message}")

    def drain_notices(self) -> List[Notice]:
        notices = self.notices
        self.notices = []
        return notices

    def snapshot(self) -> Dict[str, Any]:
        """Everything a renderer needs to draw the current frame."""
        level = self.level
        prompt = None
        if self.mode is Mode.AWAITING_ANSWER:
            prompt = {"kind": "question", "text": self.active_question.question,
                      "powerup_id": self.active_question.id}
        elif self.mode is Mode.AWAITING_CODE:
            prompt = {"kind": "code", "text": "Enter code to unlock door:"}

        return {
            "player": {"x": self.player_pos[0], "y": self.player_pos[1],
                       "w": PLAYER_SIZE, "h": PLAYER_SIZE},
            "lives": self.lives,
            "time_left": self.time_left,
            "level_index": self.level_index,
            "level_number": self.level_index + 1,
            "level_count": len(self.levels),
            "mode": self.mode.value,
            "game_over": self.game_over,
            "finished": self.finished,
            "obstacles": [rect_tuple(o) for o in level.obstacles],
            "moving": [rect_tuple(m) for m in level.moving],
            "enemies": [rect_tuple(e) for e in level.enemies],
            "powerups": [{"id": p.id, "kind": p.kind, "rect": rect_tuple(p)}
                         for p in level.remaining_powerups()],
            "exit": {"rect": rect_tuple(level.exit),
                     "locked": level.exit.locked},
            "powerups_remaining": self.powerups_remaining,
            "prompt": prompt,
            "input": self.input_buffer,
            "notice": self.last_notice.message if self.last_notice else None,
        }
