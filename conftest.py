# Ensure project root is on sys.path for tests
import sys, pathlib
root = pathlib.Path(__file__).resolve().parent
if str(root) not in sys.path:
    sys.path.insert(0, str(root))

import random
import pytest


class FixedRng(random.Random):
    """Seeded Random whose damage variance and percent rolls can be pinned."""

    def __init__(self, seed=0, *, variance=None, roll=None, coin=None):
        super().__init__(seed)
        self.variance = variance
        self.roll = roll
        self.coin = coin

    def uniform(self, a, b):
        if self.variance is not None:
            return self.variance
        return super().uniform(a, b)

    def randint(self, a, b):
        if (a, b) == (1, 100) and self.roll is not None:
            return self.roll
        if (a, b) == (0, 1) and self.coin is not None:
            return self.coin
        return super().randint(a, b)


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def fixed_rng():
    # Always hit, variance 1.0, player wins speed ties
    return FixedRng(0, variance=1.0, roll=1, coin=0)


@pytest.fixture(autouse=True)
def _no_seed_env(monkeypatch):
    monkeypatch.delenv("POKERUN_RNG_SEED", raising=False)


@pytest.fixture
def make_rng():
    return FixedRng
