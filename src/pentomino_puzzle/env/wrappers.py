from __future__ import annotations

import numpy as np
import gymnasium as gym
from gymnasium import spaces

from .pentomino_env import _compute_action_mask


class FlattenDiscreteActionWrapper(gym.ActionWrapper):
    """Flattens MultiDiscrete (rotation, x, y) -> Discrete(N).

    Also exposes `get_action_mask()` returning a 1D boolean mask of shape (N,).
    Order: rotation, x, y (C-order flattening).
    """

    def __init__(self, env: gym.Env):
        super().__init__(env)
        assert isinstance(env.action_space, spaces.MultiDiscrete)
        rotations, width, height = map(int, env.action_space.nvec)
        self.rot = rotations
        self.width = width
        self.height = height
        self.n = int(rotations * width * height)
        self.action_space = spaces.Discrete(self.n)

    def flatten(self, rotation: int, x: int, y: int) -> int:
        return int((rotation * self.width + x) * self.height + y)

    def unflatten(self, idx: int) -> tuple[int, int, int]:
        y = idx % self.height
        idx //= self.height
        x = idx % self.width
        r = idx // self.width
        return int(r), int(x), int(y)

    def action(self, action: int):  # type: ignore[override]
        return np.array(self.unflatten(int(action)), dtype=np.int64)

    def get_action_mask(self) -> np.ndarray:
        mask3d = _compute_action_mask(self.env.unwrapped.session)
        return mask3d.reshape(-1)


class ResampleInvalidActionWrapper(gym.Wrapper):
    """If a sampled action is invalid, resample uniformly among valid ones.

    Requires a Discrete action space with `get_action_mask()` underneath.
    """

    def step(self, action):  # type: ignore[override]
        if isinstance(self.action_space, spaces.Discrete):
            mask = self.get_action_mask()
            if 0 <= int(action) < mask.shape[0] and not bool(mask[int(action)]):
                valid_idxs = np.flatnonzero(mask)
                if valid_idxs.size > 0:
                    action = int(self.np_random.choice(valid_idxs))
        return self.env.step(action)

    def get_action_mask(self) -> np.ndarray:
        if hasattr(self.env, "get_action_mask"):
            return getattr(self.env, "get_action_mask")()
        raise AttributeError("Underlying env does not provide get_action_mask")
