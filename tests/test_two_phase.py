import itertools
import random

import numpy as np
import pytest

from rubik_core.cubie import CubieCube
from rubik_core.facelet_state import FaceletState
from rubik_core.two_phase import (
    PHASE2_MOVES,
    CubieEngine,
    build_tables,
    move_of,
    perm_rank,
    phase2_coordinates,
)


def test_perm_rank_is_lexicographic():
    perms = np.array(list(itertools.permutations(range(5))))
    assert perm_rank(perms).tolist() == list(range(120))


def test_tables_are_shared(engine):
    assert build_tables() is engine.build_tables()


def test_move_tables(engine):
    t = engine.build_tables()
    u, r, f = 0, 3, 6
    assert t.twist_move[0][u] == 0
    assert t.twist_move[0][r] != 0
    assert t.flip_move[0][r] == 0
    assert t.flip_move[0][f] != 0
    assert t.slice_move[0][u] == 0
    assert t.slice_move[0][r] != 0
    assert [t.corner_move[0][j] for j in range(len(PHASE2_MOVES))].count(0) == 0


def test_pruning_tables_start_at_goal(engine):
    t = engine.build_tables()
    assert t.slice_twist_prune[0] == 0
    assert t.slice_flip_prune[0] == 0
    assert t.corner_slice_prune[0] == 0
    assert t.edge_slice_prune[0] == 0
    assert min(t.slice_twist_prune[1:]) == 1


def test_phase2_moves_stay_in_g1():
    names = [str(move_of(m)) for m in PHASE2_MOVES]
    assert names == ["U", "U2", "U'", "D", "D2", "D'", "R2", "L2", "F2", "B2"]


def test_phase1_reaches_g1(engine):
    cube = FaceletState()
    cube.scramble(12, random.Random(5))
    cc = engine.to_cubie(cube)
    moves = engine.phase1_search(cc)
    assert moves is not None
    for mv in moves:
        cc.move(mv.face.value, mv.amount)
    assert (cc.get_twist(), cc.get_flip(), cc.get_slice()) == (0, 0, 0)


def test_phase2_solves_g1_cube(engine):
    cc = CubieCube()
    for face, amount in [(0, 1), (1, 2), (3, 3), (2, 2), (4, 2), (5, 2), (0, 2)]:
        cc.move(face, amount)
    assert phase2_coordinates(cc) != (0, 0, 0)
    moves = engine.phase2_search(cc)
    assert moves is not None
    assert len(moves) <= 7
    for mv in moves:
        assert mv.amount == 2 or mv.face.letter in "UD"
        cc.move(mv.face.value, mv.amount)
    assert cc.is_solved()


def test_phase2_needs_g1(engine):
    cc = CubieCube()
    cc.move(1, 1)
    with pytest.raises(ValueError):
        engine.phase2_search(cc)


def test_already_solved(engine):
    result = engine.solve(FaceletState())
    assert result.success and result.solution == []
    assert result.phases[0].name == "Already solved"


@pytest.mark.parametrize("seed", range(8))
def test_short_scrambles(engine, seed):
    cube = FaceletState()
    cube.scramble(7, random.Random(seed))
    before = cube.to_facelet_string()
    result = engine.solve(cube)
    assert result.success, result.error
    assert result.method == "two_phase"
    assert len(result.solution) <= 22
    assert [p.name for p in result.phases] == ["Phase 1", "Phase 2"]
    assert cube.to_facelet_string() == before
    probe = cube.clone()
    probe.apply_moves(result.solution)
    assert probe.is_solved()


def test_single_move_is_found_exactly(engine):
    cube = FaceletState()
    cube.apply_move("R")
    result = engine.solve(cube)
    assert [str(m) for m in result.solution] == ["R'"]


def test_node_budget(engine):
    cube = FaceletState()
    cube.scramble(20, random.Random(11))
    tight = CubieEngine(node_limit=10)
    result = tight.solve(cube)
    assert not result.success
    assert result.error.startswith("Could not find solution")
