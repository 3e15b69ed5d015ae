import pytest

from rubik_core.config import COLOR_SCHEME, FACES_INIT_STATE
from rubik_core.cube_types import ErrorCategory
from rubik_core.cubie import FACELETS
from rubik_core.facelet_state import FaceletState
from rubik_core.validator import StateValidator


@pytest.fixture
def validator():
    return StateValidator()


def check(validator, facelets):
    return validator.validate(FaceletState.from_facelet_string(facelets))


def test_solved_cube_is_valid(validator, solved):
    result = validator.validate(solved)
    assert result.valid
    assert result.to_dict() == {"valid": True, "errors": []}


def test_scrambled_cubes_are_valid(validator, scrambled):
    for _ in range(50):
        assert validator.validate(scrambled(20, COLOR_SCHEME)).valid


def test_swapped_edge_stickers_break_parity(validator, swap):
    # F2 and R2 belong to the UF and UR edges
    result = check(validator, swap((FACELETS["F2"], FACELETS["R2"])))
    assert not result.valid
    assert result.categories == {ErrorCategory.PARITY}
    assert "Parity error" in result.errors[0]


def test_flipped_edge(validator, swap):
    result = check(validator, swap((FACELETS["U8"], FACELETS["F2"])))
    assert result.categories == {ErrorCategory.FLIP}
    assert result.errors == ["Unsolvable: odd number of flipped edges. Flip error: One edge has to be flipped"]


def test_twisted_corner(validator):
    s = list(FACES_INIT_STATE)
    u9, r1, f3 = FACELETS["U9"], FACELETS["R1"], FACELETS["F3"]
    s[u9], s[r1], s[f3] = "F", "U", "R"
    result = check(validator, "".join(s))
    assert result.categories == {ErrorCategory.TWIST}
    assert "Twist error" in result.errors[0]


def test_two_flipped_edges_are_fine(validator, swap):
    pairs = [(FACELETS["U8"], FACELETS["F2"]), (FACELETS["U6"], FACELETS["R2"])]
    assert check(validator, swap(*pairs)).valid


def test_impossible_pieces(validator, swap):
    # UF shows U/D, DF shows F/F
    result = check(validator, swap((FACELETS["F2"], FACELETS["D2"])))
    assert result.categories == {ErrorCategory.IMPOSSIBLE_PIECE}
    assert len(result.errors) == 2
    assert result.errors[0].startswith("Impossible piece at edge UF")
    assert "opposite colors" in result.errors[0]
    assert "appears twice" in result.errors[1]


def test_duplicate_pieces(validator):
    s = list(FACES_INIT_STATE)
    s[FACELETS["F2"]] = "R"  # UF slot now shows the UR piece
    s[FACELETS["R8"]] = "F"  # DR slot now shows the DF piece
    result = check(validator, "".join(s))
    assert result.categories == {ErrorCategory.DUPLICATE_PIECE}
    assert result.errors[0].startswith("Not all 12 edges exist exactly once")
    assert "missing UF, DR" in result.errors[0]


def test_wrong_color_counts(validator, colored):
    colored.set_facelet("U", 0, "G")
    result = validator.validate(colored)
    assert result.categories == {ErrorCategory.COLOR_COUNT}
    assert result.errors == [
        "Color 'W' (White) appears 8 times, expected 9 (1 missing)",
        "Color 'G' (Green) appears 10 times, expected 9 (1 too many)",
    ]


def test_seventh_color_is_malformed(validator):
    result = validator.validate_facelets("P" + FACES_INIT_STATE[1:])
    assert result.categories == {ErrorCategory.MALFORMED}
    assert "at most 6 colors" in result.errors[0]


def test_center_collision_stops_early(validator, swap):
    # U center painted R; the R sticker it replaced moved to R1
    result = check(validator, swap((FACELETS["U5"], FACELETS["R1"])))
    assert result.categories == {ErrorCategory.CENTERS}
    assert result.errors[0].startswith("Centers must all differ: Up and Right")


def test_several_parity_problems_reported_together(validator, swap):
    s = swap((FACELETS["U8"], FACELETS["F2"]))
    s = list(s)
    u9, r1, f3 = FACELETS["U9"], FACELETS["R1"], FACELETS["F3"]
    s[u9], s[r1], s[f3] = "F", "U", "R"
    result = check(validator, "".join(s))
    assert result.categories == {ErrorCategory.FLIP, ErrorCategory.TWIST}


@pytest.mark.parametrize("text", ["", "UUU", FACES_INIT_STATE + "U"])
def test_malformed_input_is_a_diagnostic(validator, text):
    result = validator.validate_facelets(text)
    assert result.categories == {ErrorCategory.MALFORMED}


def test_validate_facelets_accepts_good_strings(validator):
    assert validator.validate_facelets(FACES_INIT_STATE).valid
