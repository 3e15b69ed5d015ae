import random

import pytest

from rubik_core.config import COLOR_SCHEME
from rubik_core.facelet_state import FaceletState
from rubik_core.layer_solver import PHASES, SIDES, LayerSolver, template_moves
from rubik_core.validator import StateValidator


@pytest.fixture
def solver():
    return LayerSolver()


def replay(cube, moves):
    probe = cube.clone()
    probe.apply_moves(moves, record=False)
    return probe


def test_already_solved(solver, solved):
    result = solver.solve(solved)
    assert result.success
    assert result.solution == []
    assert [p.name for p in result.phases] == ["Already solved"]


def test_solution_solves_and_keeps_input(solver, scrambled):
    cube = scrambled(20)
    before = cube.to_facelet_string()
    result = solver.solve(cube)
    assert result.success, result.error
    assert result.method == "layer"
    assert cube.to_facelet_string() == before
    assert replay(cube, result.solution).is_solved()
    assert [p.name for p in result.phases] == [name for name, _, _ in PHASES]


def test_phases_concatenate_to_solution(solver, scrambled):
    cube = scrambled(20)
    result = solver.solve(cube)
    probe = cube.clone()
    for phase in result.phases:
        probe.apply_moves(phase.moves, record=False)
    assert probe.is_solved()


def test_phase_goals(solver, scrambled):
    cube = scrambled(20)
    result = solver.solve(cube)
    probe = cube.clone()
    probe.apply_moves(result.phases[0].moves, record=False)
    for k in range(4):
        assert probe.get_facelet("D", (1, 5, 7, 3)[k]) == "D"
    probe.apply_moves(result.phases[1].moves + result.phases[2].moves, record=False)
    assert probe.face("D") == ("D",) * 9
    for side in SIDES:
        assert set(probe.face(side)[3:]) == {side.letter}
    probe.apply_moves(result.phases[3].moves + result.phases[4].moves, record=False)
    assert probe.face("U") == ("U",) * 9


def test_arbitrary_colors(solver, scrambled):
    cube = scrambled(25, COLOR_SCHEME)
    result = solver.solve(cube)
    assert result.success
    assert replay(cube, result.solution).is_solved()


def test_many_scrambles():
    rng = random.Random(2025)
    solver, validator = LayerSolver(), StateValidator()
    for _ in range(1000):
        cube = FaceletState()
        cube.scramble(rng.randint(1, 30), rng)
        assert validator.validate(cube).valid
        result = solver.solve(cube)
        assert result.success, (cube.to_facelet_string(), result.error)
        assert replay(cube, result.solution).is_solved()


def test_exhausted_retry_budget_is_reported(scrambled):
    result = LayerSolver(retry_limit=1).solve(scrambled(20))
    assert not result.success
    assert result.error.startswith("Could not find solution")
    assert result.phases


def test_template_relabelling():
    assert [str(m) for m in template_moves("R U R'", 0)] == ["R", "U", "R'"]
    assert [str(m) for m in template_moves("F R U R' U' F'", 1)] == ["R", "B", "U", "B'", "U'", "R'"]
    assert [str(m) for m in template_moves("R' D' R D", 2)] == ["L'", "D'", "L", "D"]
