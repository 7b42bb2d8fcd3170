"""
Escape The Program - interactive pygame front end.

Move with WASD or the arrow keys (one step per key press, holding a key does
not repeat). Walk into a power-up to answer its question, collect them all to
open the door, and reach the door to go to the next level.
"""

import argparse
import logging
import sys
from pathlib import Path

import pygame

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from envs.escape.rendering import WINDOW_HEIGHT, WINDOW_WIDTH, make_fonts, render_frame
from envs.escape.session import Direction, GameSession, Mode, NoticeKind

FPS = 60
NOTICE_DURATION = 3000  # milliseconds

KEY_DIRECTIONS = {
    pygame.K_UP: Direction.UP,
    pygame.K_w: Direction.UP,
    pygame.K_DOWN: Direction.DOWN,
    pygame.K_s: Direction.DOWN,
    pygame.K_LEFT: Direction.LEFT,
    pygame.K_a: Direction.LEFT,
    pygame.K_RIGHT: Direction.RIGHT,
    pygame.K_d: Direction.RIGHT,
}

NOTICE_ICONS = {
    NoticeKind.DOOR_LOCKED: "🔒",
    NoticeKind.CODE_ACCEPTED: "🚪",
    NoticeKind.CODE_REJECTED: "❌",
    NoticeKind.ANSWER_CORRECT: "✅",
    NoticeKind.ANSWER_WRONG: "❌",
    NoticeKind.DIED: "💀",
    NoticeKind.GAME_OVER: "💀",
    NoticeKind.LEVEL_COMPLETE: "🎯",
    NoticeKind.GAME_FINISHED: "🎉",
}


class EscapeGame:
    def __init__(self, session: GameSession, fps: int = FPS):
        pygame.init()
        self.screen = pygame.display.set_mode((WINDOW_WIDTH, WINDOW_HEIGHT))
        pygame.display.set_caption("Escape The Program")
        self.clock = pygame.time.Clock()
        self.fonts = make_fonts()
        self.fps = fps

        self.session = session
        self.running = True

        # Info popup
        self.notice_message = None
        self.notice_close_time = 0

    def handle_input(self, events):
        """Route key presses to movement, prompt text entry or restart."""
        for event in events:
            if event.type == pygame.QUIT:
                self.running = False
            elif event.type == pygame.KEYDOWN:
                if self.session.prompt_open:
                    self._handle_prompt_key(event)
                elif event.key == pygame.K_ESCAPE:
                    self.running = False
                elif event.key == pygame.K_r and self.session.mode in (Mode.GAME_OVER, Mode.FINISHED):
                    self.session.restart()
                    self.notice_message = None
                    print("🔄 Restarted - good luck!")
                elif event.key == pygame.K_SPACE:
                    self.notice_message = None
                elif event.key in KEY_DIRECTIONS:
                    self.session.move(KEY_DIRECTIONS[event.key])

    def _handle_prompt_key(self, event):
        session = self.session
        if event.key == pygame.K_RETURN:
            if session.mode is Mode.AWAITING_ANSWER:
                session.submit_answer()
            else:
                session.submit_code()
        elif event.key == pygame.K_ESCAPE:
            if session.mode is Mode.AWAITING_ANSWER:
                session.cancel_answer()
            else:
                session.cancel_code()
        elif event.key == pygame.K_BACKSPACE:
            session.backspace()
        elif event.unicode and event.unicode.isprintable():
            session.type_text(event.unicode)

    def _collect_notices(self):
        for notice in self.session.drain_notices():
            print(f"{NOTICE_ICONS.get(notice.kind, '')} {notice.message}")
            self.notice_message = notice.message
            self.notice_close_time = pygame.time.get_ticks() + NOTICE_DURATION

        if self.notice_message and pygame.time.get_ticks() >= self.notice_close_time:
            self.notice_message = None

    def render(self):
        render_frame(self.screen, self.session.snapshot(), self.fonts, notice=self.notice_message)

    def run(self):
        """Main game loop."""
        while self.running:
            elapsed = self.clock.tick(self.fps)

            self.handle_input(pygame.event.get())
            self.session.advance(elapsed)
            self._collect_notices()

            self.render()
            pygame.display.flip()

        self.session.close()
        pygame.quit()


def main(argv=None):
    parser = argparse.ArgumentParser(description="Play Escape The Program.")
    parser.add_argument('--seed', type=int, default=None,
                        help='Seed for the exit door placement')
    parser.add_argument('--templates', type=str, default=None,
                        help='Path to a level template JSON file')
    parser.add_argument('--fps', type=int, default=FPS,
                        help='Frame rate cap')
    parser.add_argument('--log-level', type=str, default='WARNING',
                        help='Logging level (DEBUG, INFO, WARNING, ...)')
    args = parser.parse_args(argv)

    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.WARNING),
                        format='%(levelname)s: %(message)s')

    session = GameSession(template_path=args.templates, seed=args.seed)
    game = EscapeGame(session, fps=args.fps)
    game.run()


if __name__ == "__main__":
    main()
