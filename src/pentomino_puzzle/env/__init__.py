"""Gymnasium environments for the pentomino puzzle."""

from __future__ import annotations

from gymnasium.envs.registration import register

# Register the default 10x6 timed puzzle
register(
    id="PentominoPuzzle-10x6-v0",
    entry_point="pentomino_puzzle.env.pentomino_env:PentominoPuzzleEnv",
)

__all__ = ["PentominoPuzzle-10x6-v0"]
