from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

import numpy as np
import gymnasium as gym
from gymnasium import spaces

from pentomino_puzzle.game import Outcome, PieceState, PuzzleSession, SessionConfig


def _compute_action_mask(session: PuzzleSession) -> np.ndarray:
    board = session.board
    mask = np.zeros((4, board.width, board.height), dtype=np.bool_)
    piece = session.state.active_piece
    if piece is None or not piece.movable:
        return mask
    for r in range(4):
        for x, y in board.valid_anchors(piece.shape, r):
            mask[r, x, y] = True
    return mask


class PentominoPuzzleEnv(gym.Env):
    """Place the active pool piece each step while the clock runs.

    Action is ``(rotation, x, y)`` for the current pool piece. Every step
    advances the session by ``seconds_per_step``. The pool piece is selected
    only on the first step that acts on it, so its engaged window is not
    refreshed and an agent that keeps missing still loses the piece to its
    vanish timer. The countdown ends the episode.
    """

    metadata = {"render_modes": ["rgb_array"], "render_fps": 4}

    def __init__(self, config: Optional[SessionConfig] = None, render_mode: Optional[str] = None,
                 seconds_per_step: float = 1.0,
                 cell_reward: float = 0.2,
                 invalid_action_penalty: float = -0.1,
                 win_bonus: float = 10.0,
                 loss_penalty: float = -1.0,
                 max_episode_steps: int = 1000) -> None:
        super().__init__()
        self.session = PuzzleSession(config)
        self.render_mode = render_mode

        self.seconds_per_step = float(seconds_per_step)
        self.cell_reward = float(cell_reward)
        self.invalid_action_penalty = float(invalid_action_penalty)
        self.win_bonus = float(win_bonus)
        self.loss_penalty = float(loss_penalty)
        self.max_episode_steps = int(max_episode_steps)

        width = self.session.config.width
        height = self.session.config.height
        seconds = self.session.config.initial_seconds

        # piece: 0 when no piece is in the pool, otherwise PentominoType value
        self.observation_space = spaces.Dict(
            {
                "grid": spaces.Box(low=0, high=1, shape=(height, width), dtype=np.int8),
                "piece": spaces.Discrete(13),
                "rotation": spaces.Discrete(4),
                "time_left": spaces.Discrete(seconds + 1),
            }
        )

        # Action: (rotation, x, y)
        self.action_space = spaces.MultiDiscrete((4, width, height))

        self._last_obs: Optional[Dict[str, Any]] = None
        self._steps = 0

    def _get_obs(self) -> Dict[str, Any]:
        state = self.session.state
        piece = state.active_piece
        obs: Dict[str, Any] = {
            "grid": self.session.board.clone_state(),
            "piece": int(piece.shape.kind) if piece is not None else 0,
            "rotation": int(piece.rotation) if piece is not None else 0,
            "time_left": int(max(0, state.remaining_seconds)),
        }
        return obs

    def _valid_actions(self, mask: np.ndarray) -> List[Tuple[int, int, int]]:
        return [(int(r), int(x), int(y)) for r, x, y in np.argwhere(mask)]

    def _get_info(self) -> Dict[str, Any]:
        mask = _compute_action_mask(self.session)
        info: Dict[str, Any] = {
            "action_mask": mask,
            "valid_actions": self._valid_actions(mask),
            "filled_ratio": self.session.board.filled_ratio(),
            "remaining_seconds": self.session.state.remaining_seconds,
            "steps": self._steps,
        }
        return info

    def get_action_mask(self) -> np.ndarray:
        return _compute_action_mask(self.session)

    def reset(self, *, seed: Optional[int] = None, options: Optional[dict] = None) -> Tuple[Dict[str, Any], Dict[str, Any]]:
        super().reset(seed=seed)
        self.session.new_game(seed)
        self._steps = 0
        obs = self._get_obs()
        info = self._get_info()
        self._last_obs = obs
        return obs, info

    def _place(self, rotation: int, x: int, y: int) -> int:
        """Select, rotate and place the pool piece; return cells placed."""
        piece = self.session.state.active_piece
        if piece is None:
            return 0
        if piece.state is PieceState.SPAWNED:
            self.session.select(piece.piece_id)
        while piece.movable and piece.rotation != rotation % 4:
            self.session.rotate(piece.piece_id, 1)
        if self.session.attempt_place(piece.piece_id, x, y):
            return len(piece.cells())
        return 0

    def step(self, action: np.ndarray | Tuple[int, int, int]):
        rotation, x, y = map(int, action)
        state = self.session.state

        terminated = False
        truncated = False

        reward_components: Dict[str, float] = {}
        cells_placed = 0
        if not state.game_over:
            cells_placed = self._place(rotation, x, y)
        if cells_placed:
            reward_components["cells"] = self.cell_reward * float(cells_placed)
        else:
            reward_components["invalid"] = self.invalid_action_penalty

        # Let the clock run; a completed board has already stopped it
        self.session.advance(self.seconds_per_step)
        state = self.session.state

        terminated = bool(state.game_over)
        self._steps += 1
        if self._steps >= self.max_episode_steps:
            truncated = True
        if terminated:
            reward_components["terminal"] = self.win_bonus if state.outcome is Outcome.WIN else self.loss_penalty

        reward = float(sum(reward_components.values()))

        obs = self._get_obs()
        info = self._get_info()
        info["reward_components"] = reward_components
        info["cells_placed"] = cells_placed
        self._last_obs = obs
        return obs, reward, terminated, truncated, info

    def render(self) -> Optional[np.ndarray]:
        if self.render_mode == "rgb_array":
            grid = self._last_obs["grid"] if self._last_obs is not None else self.session.board.clone_state()
            cell = 12
            h, w = grid.shape
            img = np.zeros((h * cell, w * cell, 3), dtype=np.uint8)
            for y in range(h):
                for x in range(w):
                    color = (70, 200, 120) if grid[y, x] else (30, 30, 36)
                    img[y * cell : (y + 1) * cell, x * cell : (x + 1) * cell, :] = color
            return img
        return None

    def close(self) -> None:
        pass
