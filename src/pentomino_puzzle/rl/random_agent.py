from __future__ import annotations

import argparse
import logging
import random

import gymnasium as gym

import pentomino_puzzle.env  # noqa: F401  ensure registration
from pentomino_puzzle.game import SessionConfig


def run_random(steps: int = 200, seed: int | None = None, config: SessionConfig | None = None) -> float:
    rng = random.Random(seed)
    env = gym.make("PentominoPuzzle-10x6-v0", config=config)
    obs, info = env.reset(seed=seed)
    total_reward = 0.0
    episodes = 0
    for _ in range(steps):
        # Prefer valid placements if available
        valid = info.get("valid_actions", [])
        if valid:
            action = rng.choice(valid)
        else:
            action = env.action_space.sample()
        obs, reward, terminated, truncated, info = env.step(action)
        total_reward += float(reward)
        if terminated or truncated:
            episodes += 1
            print(f"episode {episodes}: filled {info['filled_ratio']:.0%}, time left {info['remaining_seconds']}s")
            obs, info = env.reset()
    env.close()
    print(f"Random agent total reward: {total_reward:.2f}")
    return total_reward


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser()
    p.add_argument("--steps", type=int, default=200)
    p.add_argument("--seed", type=int, default=None)
    p.add_argument("--seconds", type=int, default=240, help="Initial countdown in seconds")
    p.add_argument("--width", type=int, default=10)
    p.add_argument("--height", type=int, default=6)
    p.add_argument("--log-level", type=str, default="WARNING")
    return p


def main() -> None:
    args = build_parser().parse_args()
    logging.basicConfig(level=args.log_level.upper())
    config = SessionConfig(width=args.width, height=args.height, initial_seconds=args.seconds, random_seed=args.seed)
    run_random(args.steps, args.seed, config)


if __name__ == "__main__":  # pragma: no cover
    main()
