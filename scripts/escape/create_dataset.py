#!/usr/bin/env python3
"""
Create a demonstration dataset for the Escape environment using the oracle.
"""

import argparse
import logging
import os
import pickle
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))

import numpy as np
from tqdm import tqdm

from envs.escape.escape_env import EscapeEnv
from envs.escape.oracle import OracleAgent


def run_episode(env, agent, seed):
    """Play one oracle episode and return its observations, actions and outcome."""
    obs, info = env.reset(seed=seed)
    agent.reset()

    episode_obs = []
    episode_actions = []
    terminated = truncated = False
    while not (terminated or truncated):
        action = agent.act(env)
        episode_obs.append(obs)
        episode_actions.append(action)
        obs, reward, terminated, truncated, info = env.step(action)

    return episode_obs, episode_actions, info.get('success', False)


def generate_dataset(env, num_episodes=100, base_seed=0):
    """Generate dataset using oracle policy"""
    agent = OracleAgent()
    observations = []
    actions = []
    success_count = 0

    for episode in tqdm(range(num_episodes), desc="Oracle episodes"):
        episode_obs, episode_actions, success = run_episode(env, agent, seed=base_seed + episode)
        observations.extend(episode_obs)
        actions.extend(episode_actions)
        if success:
            success_count += 1

    success_rate = success_count / num_episodes if num_episodes > 0 else 0
    print(f"Oracle success rate: {success_rate:.2%} ({success_count}/{num_episodes})")

    return observations, actions, success_rate


def main():
    parser = argparse.ArgumentParser(description="Generate oracle demonstrations for the Escape environment.")
    parser.add_argument('--episodes', type=int, default=50,
                        help='Number of oracle episodes to record')
    parser.add_argument('--output', type=str, default='datasets/escape_demo_dataset.pkl',
                        help='Where to write the pickled dataset')
    parser.add_argument('--seed', type=int, default=0,
                        help='Seed of the first episode; later episodes use seed + i')
    parser.add_argument('--max_steps', type=int, default=2000,
                        help='Step limit per episode')
    args = parser.parse_args()

    logging.basicConfig(level=logging.WARNING, format='%(levelname)s: %(message)s')

    print("Creating Escape environment...")
    env = EscapeEnv(max_steps=args.max_steps)

    print("Generating dataset...")
    observations, actions, success_rate = generate_dataset(env, num_episodes=args.episodes, base_seed=args.seed)
    env.close()

    print(f"Generated {len(observations)} observations")

    dataset = {
        'observations': observations,
        'actions': actions,
        'success_rate': success_rate,
    }
    output_dir = os.path.dirname(args.output)
    if output_dir:
        os.makedirs(output_dir, exist_ok=True)
    with open(args.output, 'wb') as f:
        pickle.dump(dataset, f)

    print(f"Dataset saved to {args.output}")
    print(f"Action distribution: {np.bincount(actions, minlength=6)}")


if __name__ == "__main__":
    main()
