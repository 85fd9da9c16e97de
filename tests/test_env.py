import gymnasium as gym
import numpy as np

import falling_blocks.env  # noqa: F401
from falling_blocks.env.falling_blocks_env import FallingBlocksEnv
from falling_blocks.game import Action, LINE_DESTROYER_CONFIG


def test_registered_env_resets():
    env = gym.make("FallingBlocks-Tetris-v0")
    obs, info = env.reset(seed=0)
    assert obs["grid"].shape == (20, 10)
    assert 1 <= obs["next_piece"] <= 7
    assert int((obs["grid"] == 2).sum()) == 4
    assert info["score"] == 0
    env.close()


def test_line_destroyer_env_uses_its_config():
    env = gym.make("FallingBlocks-LineDestroyer-v0")
    env.reset(seed=1)
    assert env.unwrapped.game.config.game_id == "lineDestroyer"
    env.close()


def test_hard_drops_until_termination_and_reward_matches_score():
    env = FallingBlocksEnv()
    env.reset(seed=3)
    total = 0.0
    terminated = False
    info = {}
    for _ in range(200):
        _, reward, terminated, truncated, info = env.step(int(Action.HARD_DROP))
        assert reward >= 0
        total += reward
        if terminated:
            break
    assert terminated
    assert total == info["score"]
    env.close()


def test_same_seed_gives_same_pieces():
    a, b = FallingBlocksEnv(), FallingBlocksEnv()
    a.reset(seed=11)
    b.reset(seed=11)
    for _ in range(20):
        obs_a, *_ = a.step(int(Action.HARD_DROP))
        obs_b, *_ = b.step(int(Action.HARD_DROP))
        assert np.array_equal(obs_a["grid"], obs_b["grid"])


def test_toggle_pause_is_ignored():
    env = FallingBlocksEnv(LINE_DESTROYER_CONFIG)
    env.reset(seed=0)
    env.step(int(Action.TOGGLE_PAUSE))
    assert env.game.phase.value == "playing"


def test_rgb_render():
    env = FallingBlocksEnv(render_mode="rgb_array")
    env.reset(seed=0)
    frame = env.render()
    assert frame.shape == (240, 120, 3)
    assert frame.dtype == np.uint8
