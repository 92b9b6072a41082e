from __future__ import annotations

import gymnasium as gym
import numpy as np
import pytest

import pentomino_puzzle.env  # noqa: F401
from pentomino_puzzle.env.pentomino_env import PentominoPuzzleEnv
from pentomino_puzzle.env.wrappers import FlattenDiscreteActionWrapper, ResampleInvalidActionWrapper
from pentomino_puzzle.game import SessionConfig


@pytest.fixture
def env() -> PentominoPuzzleEnv:
    env = PentominoPuzzleEnv(render_mode="rgb_array")
    yield env
    env.close()


def test_reset_observation_and_mask(env):
    obs, info = env.reset(seed=0)
    assert env.observation_space.contains(obs)
    assert obs["grid"].shape == (6, 10)
    assert obs["grid"].sum() == 0
    assert 1 <= obs["piece"] <= 12
    assert obs["time_left"] == 240
    assert info["action_mask"].shape == (4, 10, 6)
    assert info["valid_actions"]
    r, x, y = info["valid_actions"][0]
    assert info["action_mask"][r, x, y]


def test_valid_action_places_the_pool_piece(env):
    obs, info = env.reset(seed=1)
    action = info["valid_actions"][0]
    obs, reward, terminated, truncated, info = env.step(np.array(action))
    assert info["cells_placed"] == 5
    assert obs["grid"].sum() == 5
    assert reward == pytest.approx(5 * env.cell_reward)
    assert obs["time_left"] == 239
    assert not terminated and not truncated


def test_invalid_action_is_penalized(env):
    env.reset(seed=2)
    # No pentomino fits with its anchor in the bottom-right cell
    obs, reward, terminated, truncated, info = env.step((0, 9, 5))
    assert info["cells_placed"] == 0
    assert reward == pytest.approx(env.invalid_action_penalty)
    assert obs["grid"].sum() == 0
    assert "invalid" in info["reward_components"]


def test_timeout_terminates_with_loss_penalty():
    env = PentominoPuzzleEnv(SessionConfig(initial_seconds=3))
    env.reset(seed=0)
    terminated = False
    rewards = []
    while not terminated:
        _, reward, terminated, _, info = env.step((0, 9, 5))
        rewards.append(reward)
    assert len(rewards) == 3
    assert info["remaining_seconds"] == 0
    assert rewards[-1] == pytest.approx(env.invalid_action_penalty + env.loss_penalty)


def test_truncates_after_max_episode_steps():
    env = PentominoPuzzleEnv(max_episode_steps=2)
    env.reset(seed=0)
    _, _, _, truncated, _ = env.step((0, 9, 5))
    assert not truncated
    _, _, _, truncated, _ = env.step((0, 9, 5))
    assert truncated


def test_idle_steps_let_the_pool_piece_vanish(env):
    env.reset(seed=0)
    first = env.session.state.active_piece.piece_id
    # The first step engages the piece; nothing refreshes it after that
    for _ in range(31):
        env.step((0, 9, 5))
    state = env.session.state
    assert not state.game_over
    assert first not in state.pieces
    assert state.active_piece is not None
    assert state.active_piece.piece_id != first


def test_render_rgb_array(env):
    env.reset(seed=0)
    img = env.render()
    assert img.shape == (6 * 12, 10 * 12, 3)
    assert img.dtype == np.uint8


def test_flatten_wrapper_round_trip_and_mask(env):
    wrapped = FlattenDiscreteActionWrapper(env)
    assert wrapped.action_space.n == 4 * 10 * 6
    _, info = wrapped.reset(seed=3)
    assert wrapped.unflatten(wrapped.flatten(3, 7, 2)) == (3, 7, 2)
    mask = wrapped.get_action_mask()
    assert mask.shape == (240,)
    for r, x, y in info["valid_actions"][:10]:
        assert mask[wrapped.flatten(r, x, y)]
    assert mask.sum() == len(info["valid_actions"])


def test_resample_wrapper_replaces_invalid_actions(env):
    wrapped = ResampleInvalidActionWrapper(FlattenDiscreteActionWrapper(env))
    wrapped.reset(seed=4)
    inner = wrapped.env
    invalid = inner.flatten(0, 9, 5)
    assert not wrapped.get_action_mask()[invalid]
    _, _, _, _, info = wrapped.step(invalid)
    assert info["cells_placed"] == 5


def test_registered_id_makes_the_env():
    env = gym.make("PentominoPuzzle-10x6-v0")
    obs, info = env.reset(seed=0)
    assert obs["grid"].shape == (6, 10)
    env.close()
