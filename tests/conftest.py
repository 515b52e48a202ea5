import os
import random

import pytest

# Non-interactive matplotlib backend for the report tests
os.environ.setdefault("MPLBACKEND", "Agg")

ALPHABET = "abcdefghijklmnopqrstuvwxyz"


@pytest.fixture
def rng():
    return random.Random(456)


@pytest.fixture
def make_frequencies(rng):
    def make():
        size = rng.randint(2, len(ALPHABET))
        symbols = rng.sample(ALPHABET, size)
        return {s: rng.randint(1, 50) for s in symbols}
    return make
