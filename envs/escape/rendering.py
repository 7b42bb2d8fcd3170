"""
pygame drawing for the Escape room. Everything here reads a session snapshot
and never touches game state.
"""

import pygame

from .constants import ROOM_SIZE

# Neon palette
BACKGROUND = (10, 8, 24)
ROOM_FLOOR = (18, 16, 40)
ROOM_BORDER = (0, 255, 230)
PLAYER_COLOR = (0, 200, 255)
OBSTACLE_COLOR = (120, 120, 150)
MOVING_COLOR = (255, 140, 0)
ENEMY_COLOR = (255, 40, 90)
POWERUP_COLORS = {
    "time": (255, 230, 0),
    "life": (60, 255, 120),
}
EXIT_LOCKED_COLOR = (200, 60, 60)
EXIT_OPEN_COLOR = (60, 220, 90)
TEXT_COLOR = (230, 230, 255)
HINT_COLOR = (170, 170, 190)
POPUP_BG = (20, 40, 60)
POPUP_BORDER = (100, 150, 255)

CELL_SCALE = 2
HUD_HEIGHT = 50
ROOM_PIXELS = ROOM_SIZE * CELL_SCALE
WINDOW_WIDTH = ROOM_PIXELS + 40
WINDOW_HEIGHT = ROOM_PIXELS + HUD_HEIGHT + 40
ROOM_ORIGIN = (20, HUD_HEIGHT + 20)


def _to_screen(rect, origin=ROOM_ORIGIN, scale=CELL_SCALE):
    x, y, w, h = rect
    return pygame.Rect(origin[0] + x * scale, origin[1] + y * scale, w * scale, h * scale)


def draw_room(canvas, snapshot, origin=ROOM_ORIGIN, scale=CELL_SCALE):
    """Draw the room and every visible entity."""
    room_rect = pygame.Rect(origin[0], origin[1], ROOM_SIZE * scale, ROOM_SIZE * scale)
    pygame.draw.rect(canvas, ROOM_FLOOR, room_rect)
    pygame.draw.rect(canvas, ROOM_BORDER, room_rect, 2)

    for rect in snapshot["obstacles"]:
        pygame.draw.rect(canvas, OBSTACLE_COLOR, _to_screen(rect, origin, scale))

    for rect in snapshot["moving"]:
        pygame.draw.rect(canvas, MOVING_COLOR, _to_screen(rect, origin, scale))

    for rect in snapshot["enemies"]:
        pygame.draw.rect(canvas, ENEMY_COLOR, _to_screen(rect, origin, scale))

    # Collected power-ups are not part of the snapshot
    for powerup in snapshot["powerups"]:
        screen_rect = _to_screen(powerup["rect"], origin, scale)
        pygame.draw.ellipse(canvas, POWERUP_COLORS.get(powerup["kind"], TEXT_COLOR), screen_rect)

    exit_info = snapshot["exit"]
    exit_color = EXIT_LOCKED_COLOR if exit_info["locked"] else EXIT_OPEN_COLOR
    exit_rect = _to_screen(exit_info["rect"], origin, scale)
    pygame.draw.rect(canvas, exit_color, exit_rect)
    pygame.draw.rect(canvas, TEXT_COLOR, exit_rect, 2)
    if exit_info["locked"]:
        # Padlock shackle
        pygame.draw.circle(canvas, TEXT_COLOR, exit_rect.center, exit_rect.width // 5, 2)

    player = snapshot["player"]
    pygame.draw.rect(canvas, PLAYER_COLOR,
                     _to_screen((player["x"], player["y"], player["w"], player["h"]), origin, scale))


def draw_hud(canvas, snapshot, font):
    items = [
        f"Lives: {snapshot['lives']}",
        f"Time: {snapshot['time_left']}s",
        f"Level {snapshot['level_number']}/{snapshot['level_count']}",
        f"Power-ups left: {snapshot['powerups_remaining']}",
    ]
    x = 20
    for item in items:
        surface = font.render(item, True, TEXT_COLOR)
        canvas.blit(surface, (x, 15))
        x += surface.get_width() + 25


def _draw_popup(canvas, title, lines, help_text, title_font, font):
    popup_width = min(canvas.get_width() - 40, 520)
    popup_height = 100 + len(lines) * 28
    popup_x = (canvas.get_width() - popup_width) // 2
    popup_y = (canvas.get_height() - popup_height) // 2

    popup_rect = pygame.Rect(popup_x, popup_y, popup_width, popup_height)
    pygame.draw.rect(canvas, POPUP_BG, popup_rect)
    pygame.draw.rect(canvas, POPUP_BORDER, popup_rect, 3)

    title_surface = title_font.render(title, True, (255, 255, 100))
    canvas.blit(title_surface, (popup_x + (popup_width - title_surface.get_width()) // 2, popup_y + 15))

    y_offset = popup_y + 55
    for line in lines:
        surface = font.render(line, True, TEXT_COLOR)
        canvas.blit(surface, (popup_x + (popup_width - surface.get_width()) // 2, y_offset))
        y_offset += 28

    help_surface = font.render(help_text, True, HINT_COLOR)
    canvas.blit(help_surface, (popup_x + (popup_width - help_surface.get_width()) // 2,
                               popup_y + popup_height - 30))


def draw_prompt(canvas, snapshot, title_font, font):
    prompt = snapshot["prompt"]
    if prompt is None:
        return
    title = "QUESTION" if prompt["kind"] == "question" else "LOCKED DOOR"
    _draw_popup(canvas, title, [prompt["text"], f"> {snapshot['input']}_"],
                "Press ENTER to submit - ESC to cancel", title_font, font)


def draw_notice(canvas, message, title_font, font):
    _draw_popup(canvas, "NOTICE", [message], "Press SPACE to close", title_font, font)


def draw_game_over(canvas, snapshot, title_font, font):
    if snapshot["game_over"]:
        _draw_popup(canvas, "GAME OVER", ["You ran out of lives."],
                    "Press R to restart", title_font, font)
    elif snapshot["finished"]:
        _draw_popup(canvas, "YOU ESCAPED", ["You finished all levels!"],
                    "Press R to play again", title_font, font)


def render_frame(canvas, snapshot, fonts, notice=None):
    """Draw a complete frame: HUD, room, and whichever popup is showing."""
    title_font, font = fonts
    canvas.fill(BACKGROUND)
    draw_hud(canvas, snapshot, font)
    draw_room(canvas, snapshot)

    if snapshot["game_over"] or snapshot["finished"]:
        draw_game_over(canvas, snapshot, title_font, font)
    elif snapshot["prompt"] is not None:
        draw_prompt(canvas, snapshot, title_font, font)
    elif notice:
        draw_notice(canvas, notice, title_font, font)


def make_fonts():
    pygame.font.init()
    return pygame.font.Font(None, 30), pygame.font.Font(None, 24)
