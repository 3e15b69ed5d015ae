import random

import pytest

from rubik_core.config import COLOR_SCHEME, FACES_INIT_STATE
from rubik_core.cube_types import FACES, Face, Move
from rubik_core.facelet_state import FaceletState

ALL_MOVES = [Move(f, a) for f in FACES for a in (1, 2, 3)]


def test_reset_state_serializes_to_face_letters(solved):
    assert solved.to_facelet_string() == FACES_INIT_STATE
    assert solved.is_solved()
    assert solved.history == ()


def test_colored_state(colored):
    assert colored.face(Face.U) == ("W",) * 9
    assert colored.to_face_letters() == FACES_INIT_STATE
    assert colored.is_solved()


def test_round_trip(scrambled):
    cube = scrambled(25)
    again = FaceletState.from_facelet_string(cube.to_facelet_string())
    assert again == cube
    assert again.to_facelet_string() == cube.to_facelet_string()


def test_u_turn_brings_right_face_to_front(solved):
    solved.apply_move("U")
    assert solved.face("F")[:3] == ("R", "R", "R")
    assert solved.face("L")[:3] == ("F", "F", "F")
    assert solved.face("F")[3:] == ("F",) * 6
    assert solved.face("U") == ("U",) * 9


def test_r_turn_brings_front_column_up(solved):
    solved.apply_move("R")
    assert [solved.get_facelet("U", i) for i in (2, 5, 8)] == ["F", "F", "F"]
    assert [solved.get_facelet("U", i) for i in (0, 3, 6)] == ["U", "U", "U"]
    assert [solved.get_facelet("B", i) for i in (0, 3, 6)] == ["U", "U", "U"]


@pytest.mark.parametrize("move", ALL_MOVES, ids=str)
def test_move_then_inverse_restores(scrambled, move):
    cube = scrambled(15)
    before = cube.to_facelet_string()
    cube.apply_move(move)
    cube.apply_move(move.inverse())
    assert cube.to_facelet_string() == before


@pytest.mark.parametrize("face", FACES, ids=lambda f: f.letter)
def test_quarter_turn_has_order_four(scrambled, face):
    cube = scrambled(15)
    before = cube.to_facelet_string()
    for i in range(4):
        cube.apply_move(Move(face, 1))
        assert (cube.to_facelet_string() == before) == (i == 3)


def test_sexy_move_has_order_six(solved):
    for i in range(6):
        solved.apply_moves("R U R' U'")
        assert solved.is_solved() == (i == 5)


def test_history_and_undo(solved):
    solved.apply_moves("R U F'")
    assert [str(m) for m in solved.history] == ["R", "U", "F'"]
    assert str(solved.undo_last()) == "F'"
    assert str(solved.undo_last()) == "U"
    assert str(solved.undo_last()) == "R"
    assert solved.is_solved()
    assert solved.undo_last() is None


def test_unrecorded_moves_skip_history(solved):
    solved.apply_moves("R U", record=False)
    assert solved.history == ()
    assert not solved.is_solved()


def test_scramble(solved):
    moves = solved.scramble(30, random.Random(7))
    assert len(moves) == 30
    assert list(solved.history) == moves
    assert all(a.face != b.face for a, b in zip(moves, moves[1:]))
    for _ in moves:
        solved.undo_last()
    assert solved.is_solved()


def test_reset_clears_history(scrambled):
    cube = scrambled(10)
    cube.reset()
    assert cube.is_solved()
    assert cube.history == ()


def test_clone_is_independent(scrambled):
    cube = scrambled(10)
    copy = cube.clone()
    copy.apply_move("R")
    assert copy != cube
    assert len(copy.history) == len(cube.history) + 1


def test_paint(solved):
    solved.set_facelet("U", 0, "R")
    assert solved.get_facelet(Face.U, 0) == "R"
    assert solved.color_counts()["R"] == 10
    assert solved.history == ()
    with pytest.raises(ValueError):
        solved.set_facelet("U", 9, "R")
    with pytest.raises(ValueError):
        solved.set_facelet("U", 0, "")


def test_from_mapping_faces():
    mapping = {f: [c] * 9 for f, c in COLOR_SCHEME.items()}
    cube = FaceletState.from_mapping(mapping)
    assert cube.center_colors()[Face.F] == "G"
    assert cube.is_solved()


def test_from_mapping_labels(scrambled):
    cube = scrambled(12, COLOR_SCHEME)
    s = cube.to_facelet_string()
    labels = {f"{face}{i + 1}": s[n * 9 + i] for n, face in enumerate("URFDLB") for i in range(9)}
    assert FaceletState.from_mapping(labels) == cube


def test_from_mapping_reports_missing_labels():
    labels = {f"{face}{i + 1}": face for face in "URFDLB" for i in range(9)}
    del labels["F5"]
    del labels["B9"]
    with pytest.raises(ValueError, match="F5"):
        FaceletState.from_mapping(labels)


@pytest.mark.parametrize("text", [
    FACES_INIT_STATE[:53],
    FACES_INIT_STATE + "U",
    " " + FACES_INIT_STATE[1:],
    "X" + FACES_INIT_STATE[1:],
])
def test_malformed_strings_are_rejected(text):
    with pytest.raises(ValueError):
        FaceletState.from_facelet_string(text)


def test_to_face_letters_needs_distinct_centers(solved):
    solved.set_facelet("U", 4, "R")
    with pytest.raises(ValueError):
        solved.to_face_letters()


def test_home_colors_must_be_complete():
    with pytest.raises(ValueError):
        FaceletState({"U": "W"})
