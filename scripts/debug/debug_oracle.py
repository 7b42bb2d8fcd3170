# scripts/debug/debug_oracle.py

import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))

from envs.escape.escape_env import EscapeEnv
from envs.escape.oracle import OracleAgent

CELL = 10  # room units per character


def room_to_ascii(session):
    """Draw the current room on a 30x30 character grid"""
    size = 300 // CELL
    grid = [['.'] * size for _ in range(size)]

    def paint(obj, symbol):
        for row in range(obj.y // CELL, min(size, (obj.y + obj.h - 1) // CELL + 1)):
            for col in range(obj.x // CELL, min(size, (obj.x + obj.w - 1) // CELL + 1)):
                grid[row][col] = symbol

    level = session.level
    for obstacle in level.obstacles:
        paint(obstacle, '#')
    for mov in level.moving:
        paint(mov, '=')
    for enemy in level.enemies:
        paint(enemy, 'E')
    for powerup in level.remaining_powerups():
        paint(powerup, 'T' if powerup.kind == 'time' else 'L')
    paint(level.exit, 'X' if level.exit.locked else 'O')

    px, py = session.player_pos
    for row in range(py // CELL, (py + 29) // CELL + 1):
        for col in range(px // CELL, (px + 29) // CELL + 1):
            grid[row][col] = 'P'

    return '\n'.join(''.join(row) for row in grid)


def debug_oracle(seed=0, max_steps=400, every=10):
    """Run the oracle and print the room every few steps"""
    env = EscapeEnv(max_steps=max_steps)
    agent = OracleAgent()

    print(f"Testing seed {seed}")
    print("=" * 40)

    obs, info = env.reset(seed=seed)
    print(room_to_ascii(env.session))
    print()

    for step in range(max_steps):
        action = agent.act(env)
        obs, reward, terminated, truncated, info = env.step(action)

        if info['notices'] or step % every == 0:
            print(f"Step {step + 1}: Action = {env.ACTION_NAMES[action]}, Reward = {reward:.2f}")
            print(f"Player: {tuple(obs['player_pos'])}  Lives: {obs['lives'][0]}  "
                  f"Time: {obs['time_left'][0]}  Level: {obs['level'][0] + 1}  "
                  f"Power-ups left: {obs['powerups_remaining'][0]}")
            for message in info['notices']:
                print(f"  >> {message}")
            print(room_to_ascii(env.session))
            print()

        if terminated or truncated:
            print(f"Episode finished! Success: {info['success']}")
            break

    env.close()
    return info['success']


if __name__ == "__main__":
    for seed in range(3):
        success = debug_oracle(seed)
        print(f"Seed {seed} success: {success}")
        print("=" * 60)
        print()
