import random

import pytest

from rubik_core.config import FACES_INIT_STATE
from rubik_core.cubie import MOVE_CUBES, CubieCube, cnk


def random_cubie(seed, n=25):
    rng = random.Random(seed)
    cc = CubieCube()
    for _ in range(n):
        cc.move(rng.randrange(6), rng.randrange(1, 4))
    return cc


def test_solved_round_trip():
    assert CubieCube().to_facelets() == FACES_INIT_STATE
    assert CubieCube.from_facelets(FACES_INIT_STATE).is_solved()


@pytest.mark.parametrize("seed", range(5))
def test_facelet_round_trip(seed):
    cc = random_cubie(seed)
    assert CubieCube.from_facelets(cc.to_facelets()) == cc
    assert cc.verify() == 0


@pytest.mark.parametrize("seed", range(3))
def test_inverse(seed):
    cc = random_cubie(seed)
    cc.multiply(cc.inverse())
    assert cc.is_solved()


@pytest.mark.parametrize("face", range(6))
def test_four_quarter_turns(face):
    cc = CubieCube()
    cc.move(face, 1)
    assert cc == MOVE_CUBES[face]
    for _ in range(3):
        assert not cc.is_solved()
        cc.move(face, 1)
    assert cc.is_solved()


def test_coordinate_round_trips():
    cc = CubieCube()
    for t in (0, 1, 1000, 2186):
        cc.set_twist(t)
        assert cc.get_twist() == t
        assert sum(cc.co) % 3 == 0
    for f in (0, 1, 777, 2047):
        cc.set_flip(f)
        assert cc.get_flip() == f
        assert sum(cc.eo) % 2 == 0
    for s in range(495):
        cc.set_slice(s)
        assert sorted(cc.ep) == list(range(12))
        assert cc.get_slice() == s


def test_solved_coordinates_are_zero():
    cc = CubieCube()
    assert (cc.get_twist(), cc.get_flip(), cc.get_slice()) == (0, 0, 0)


def test_verify_codes():
    cc = CubieCube()
    cc.eo[0] = 1
    assert cc.verify() == -3
    cc = CubieCube()
    cc.co[0] = 1
    assert cc.verify() == -5
    cc = CubieCube()
    cc.ep[0], cc.ep[1] = cc.ep[1], cc.ep[0]
    assert cc.verify() == -6
    cc = CubieCube()
    cc.cp[0] = cc.cp[1]
    assert cc.verify() == -4


def test_cnk():
    assert cnk(12, 4) == 495
    assert cnk(3, 5) == 0
