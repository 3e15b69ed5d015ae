import random

import pytest

from rubik_core.config import COLOR_SCHEME, FACES_INIT_STATE
from rubik_core.facelet_state import FaceletState
from rubik_core.two_phase import CubieEngine


@pytest.fixture
def solved():
    return FaceletState()


@pytest.fixture
def colored():
    """Solved cube painted in the display scheme (W top, G front)."""
    return FaceletState(COLOR_SCHEME)


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def scrambled(rng):
    def make(length=20, home_colors=None):
        cube = FaceletState(home_colors)
        cube.scramble(length, rng)
        return cube
    return make


@pytest.fixture
def swap():
    """Solved facelet string with the given index pairs swapped."""
    def make(*pairs, base=FACES_INIT_STATE):
        s = list(base)
        for a, b in pairs:
            s[a], s[b] = s[b], s[a]
        return "".join(s)
    return make


@pytest.fixture(scope="session")
def engine():
    eng = CubieEngine()
    eng.build_tables()
    return eng
