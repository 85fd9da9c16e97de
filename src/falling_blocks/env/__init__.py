"""Gymnasium environments for the falling-block engine."""

from __future__ import annotations

from gymnasium.envs.registration import register

from falling_blocks.game import LINE_DESTROYER_CONFIG, TETRIS_CONFIG

register(
    id="FallingBlocks-Tetris-v0",
    entry_point="falling_blocks.env.falling_blocks_env:FallingBlocksEnv",
    kwargs={"config": TETRIS_CONFIG},
)

register(
    id="FallingBlocks-LineDestroyer-v0",
    entry_point="falling_blocks.env.falling_blocks_env:FallingBlocksEnv",
    kwargs={"config": LINE_DESTROYER_CONFIG},
)

__all__ = ["FallingBlocks-Tetris-v0", "FallingBlocks-LineDestroyer-v0"]
