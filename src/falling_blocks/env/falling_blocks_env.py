from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

import numpy as np
import gymnasium as gym
from gymnasium import spaces

from falling_blocks.game import Action, FallingBlockGame, GameConfig, Phase
from falling_blocks.game.grid import ACTIVE


class FallingBlocksEnv(gym.Env):
    """Gymnasium adapter over `FallingBlockGame`.

    One step applies one command and then one gravity tick, so every episode
    makes progress even when the agent only moves sideways. Reward is the
    engine's score delta.
    """

    metadata = {"render_modes": ["rgb_array"], "render_fps": 30}

    def __init__(self, config: Optional[GameConfig] = None, render_mode: Optional[str] = None,
                 gravity_every: int = 1) -> None:
        super().__init__()
        self.config = config or GameConfig()
        self.render_mode = render_mode
        self.gravity_every = max(1, int(gravity_every))
        self.game = FallingBlockGame(self.config)

        h, w = self.config.height, self.config.width
        self.observation_space = spaces.Dict(
            {
                "grid": spaces.Box(low=0, high=ACTIVE, shape=(h, w), dtype=np.int8),
                # TetrominoType values 1..7
                "next_piece": spaces.Discrete(8),
            }
        )
        self.action_space = spaces.Discrete(len(Action))
        self._steps = 0
        self._last_score = 0

    def _get_obs(self) -> Dict[str, Any]:
        state = self.game.snapshot()
        return {
            "grid": state.display_grid().astype(np.int8),
            "next_piece": int(state.next_piece.type),
        }

    def _get_info(self) -> Dict[str, Any]:
        return {
            "score": self.game.score,
            "level": self.game.level,
            "lines_cleared": self.game.lines_cleared,
            "steps": self._steps,
        }

    def reset(self, *, seed: Optional[int] = None, options: Optional[dict] = None) -> Tuple[Dict[str, Any], Dict[str, Any]]:
        super().reset(seed=seed)
        if seed is not None:
            self.game.teardown()
            self.game = FallingBlockGame(self.config, rng=_NumpyChoice(self.np_random))
        self.game.start()
        self._steps = 0
        self._last_score = 0
        return self._get_obs(), self._get_info()

    def step(self, action: int):
        action = Action(int(action))
        # Pausing would stall an episode; agents only play.
        if action is not Action.TOGGLE_PAUSE:
            self.game.step(action)
        self._steps += 1
        if self._steps % self.gravity_every == 0:
            self.game.tick()

        reward = float(self.game.score - self._last_score)
        self._last_score = self.game.score
        terminated = self.game.phase is Phase.GAME_OVER
        return self._get_obs(), reward, terminated, False, self._get_info()

    def render(self) -> Optional[np.ndarray]:
        if self.render_mode != "rgb_array":
            return None
        grid = self.game.snapshot().display_grid()
        cell = 12
        h, w = grid.shape
        img = np.zeros((h * cell, w * cell, 3), dtype=np.uint8)
        colors = {0: (30, 30, 36), 1: (190, 190, 190), ACTIVE: (70, 140, 230)}
        for y in range(h):
            for x in range(w):
                img[y * cell : (y + 1) * cell, x * cell : (x + 1) * cell, :] = colors[int(grid[y, x])]
        return img

    def close(self) -> None:
        self.game.teardown()


class _NumpyChoice:
    """Adapts a numpy Generator to the `choice(seq)` random source protocol."""

    def __init__(self, generator: np.random.Generator) -> None:
        self.generator = generator

    def choice(self, seq):
        return seq[int(self.generator.integers(len(seq)))]
