from __future__ import annotations

import random
from typing import List, Sequence, Tuple

import pytest

from pentomino_puzzle.game import PENTOMINOES, PentominoType, PuzzleSession, SessionConfig


class ScriptedRandom(random.Random):
    """Hands out queued shapes from ``choice`` before falling back to chance."""

    def __init__(self, kinds: Sequence[PentominoType] = (), seed: int = 0) -> None:
        super().__init__(seed)
        self.queue = [PENTOMINOES[kind] for kind in kinds]

    def choice(self, seq):
        if self.queue:
            shape = self.queue.pop(0)
            assert shape in seq
            return shape
        return super().choice(seq)


# (kind, rotation, anchor_x, anchor_y) covering a 10x6 board exactly:
# two P pairs fill rows 0-1, eight horizontal I pieces fill rows 2-5.
EXACT_FIT: List[Tuple[PentominoType, int, int, int]] = [
    (PentominoType.P, 1, 0, 0),
    (PentominoType.P, 3, 2, 0),
    (PentominoType.P, 1, 5, 0),
    (PentominoType.P, 3, 7, 0),
] + [(PentominoType.I, 1, x, y) for y in range(2, 6) for x in (0, 5)]


@pytest.fixture
def exact_fit() -> List[Tuple[PentominoType, int, int, int]]:
    return list(EXACT_FIT)


@pytest.fixture
def make_session():
    def _make(kinds: Sequence[PentominoType] = (), seed: int = 0, **overrides) -> PuzzleSession:
        return PuzzleSession(SessionConfig(**overrides), rng=ScriptedRandom(kinds, seed))

    return _make


@pytest.fixture
def session(make_session) -> PuzzleSession:
    return make_session()


@pytest.fixture
def events(session):
    seen = []
    session.subscribe(seen.append)
    return seen
