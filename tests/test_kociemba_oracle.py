"""Cross-checks against the reference two-phase solver from PyPI."""

import random

import pytest

from rubik_core.facelet_state import FaceletState
from rubik_core.validator import StateValidator

kociemba = pytest.importorskip("kociemba")


@pytest.mark.parametrize("seed", range(10))
def test_reference_solutions_solve_our_cube(seed):
    cube = FaceletState()
    cube.scramble(20, random.Random(seed))
    solution = kociemba.solve(cube.to_facelet_string())
    cube.apply_moves(solution)
    assert cube.is_solved()


@pytest.mark.parametrize("seed", range(5))
def test_reference_pattern_solve_reaches_our_cube(seed):
    cube = FaceletState()
    cube.scramble(8, random.Random(100 + seed))
    pattern = kociemba.solve(FaceletState().to_facelet_string(), cube.to_facelet_string())
    probe = FaceletState()
    probe.apply_moves(pattern)
    assert probe == cube


def test_two_phase_is_close_to_reference(engine):
    cube = FaceletState()
    cube.scramble(9, random.Random(77))
    ours = engine.solve(cube)
    reference = kociemba.solve(cube.to_facelet_string()).split()
    assert ours.success
    assert len(ours.solution) <= max(len(reference), 22)


def test_validator_agrees_on_unsolvable_cube():
    s = list(FaceletState().to_facelet_string())
    s[7], s[19] = s[19], s[7]
    facelets = "".join(s)
    assert not StateValidator().validate_facelets(facelets).valid
    with pytest.raises(ValueError):
        kociemba.solve(facelets)
