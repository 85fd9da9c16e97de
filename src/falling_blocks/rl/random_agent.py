from __future__ import annotations

import argparse
import logging

import gymnasium as gym

import falling_blocks.env  # noqa: F401

logger = logging.getLogger(__name__)


def run_random(env_id: str = "FallingBlocks-Tetris-v0", steps: int = 500, seed: int | None = None) -> float:
    env = gym.make(env_id)
    obs, info = env.reset(seed=seed)
    total_reward = 0.0
    episodes = 0
    for _ in range(steps):
        action = env.action_space.sample()
        obs, reward, terminated, truncated, info = env.step(action)
        total_reward += float(reward)
        if terminated or truncated:
            episodes += 1
            logger.info("episode %d finished: score=%d lines=%d", episodes, info["score"], info["lines_cleared"])
            obs, info = env.reset()
    env.close()
    return total_reward


def main() -> None:
    p = argparse.ArgumentParser()
    p.add_argument("--env", default="FallingBlocks-Tetris-v0")
    p.add_argument("--steps", type=int, default=500)
    p.add_argument("--seed", type=int, default=None)
    args = p.parse_args()
    logging.basicConfig(level=logging.INFO)
    total = run_random(args.env, args.steps, args.seed)
    print(f"Random agent total reward: {total:.2f}")


if __name__ == "__main__":  # pragma: no cover
    main()
