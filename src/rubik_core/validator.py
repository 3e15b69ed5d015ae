"""
validator.py — is a painted cube physically possible?
=====================================================

``StateValidator`` checks a ``FaceletState`` in five stages:

1. the six centers show six distinct colors;
2. every center color appears exactly nine times;
3. every corner and edge slot holds a real piece (no repeated color, no
   opposite colors, corner colors in the right clockwise order);
4. no piece appears twice;
5. edge flip, corner twist and permutation parity.

A stage only runs when all earlier stages passed, so a user painting a cube
by hand gets the diagnostics that matter first instead of a cascade. Within
a stage every problem is reported. Validation never raises: problems are
returned as ``Diagnostic`` values.

--------------------------------------------------------------------------

Copyright (c) 2025 Facundo Gauna & Ulises Carnevale. Licensed under MIT License.
"""

from __future__ import annotations

import logging
from collections import Counter, defaultdict
from typing import Dict, List, Optional, Tuple

from .config import COLOR_NAMES
from .cube_types import FACES, Diagnostic, ErrorCategory, Face, ValidationResult
from .cubie import (
    CORNER_COLOR,
    CORNER_FACELET,
    CORNER_NAMES,
    EDGE_COLOR,
    EDGE_FACELET,
    EDGE_NAMES,
    VERIFY_MESSAGES,
    CubieCube,
)
from .facelet_state import FaceletState

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

# face index -> opposite face index (U<->D, R<->L, F<->B)
_OPPOSITE = {f.value: f.opposite.value for f in FACES}


def color_label(color: str) -> str:
    name = COLOR_NAMES.get(color)
    return f"{color!r} ({name})" if name else repr(color)


def _match_corner(cols: List[int]) -> Optional[Tuple[int, int]]:
    """(piece, orientation) for the colors read clockwise from a corner slot."""
    for ori in range(3):
        rotated = [cols[ori], cols[(ori + 1) % 3], cols[(ori + 2) % 3]]
        for j in range(8):
            if rotated == CORNER_COLOR[j]:
                return j, ori
    return None


def _match_edge(cols: List[int]) -> Optional[Tuple[int, int]]:
    for j in range(12):
        if cols == EDGE_COLOR[j]:
            return j, 0
        if cols == EDGE_COLOR[j][::-1]:
            return j, 1
    return None


def _piece_problem(cols: List[int]) -> str:
    if len(set(cols)) != len(cols):
        return "a color appears twice"
    for a in cols:
        if _OPPOSITE[a] in cols:
            return "it shows two opposite colors"
    return "its colors are in mirrored order"


class StateValidator:
    """Layered, short-circuiting solvability check for facelet states."""

    def validate(self, state: FaceletState) -> ValidationResult:
        result = ValidationResult()
        for stage in (self._check_centers, self._check_color_counts, self._check_pieces):
            stage(state, result)
            if not result.valid:
                logger.debug("Validation stopped at %s: %s", stage.__name__, result.errors)
                return result
        return result

    def validate_facelets(self, facelets: str) -> ValidationResult:
        """Validate a raw 54-symbol string; malformed input becomes a diagnostic."""
        try:
            state = FaceletState.from_facelet_string(facelets)
        except ValueError as e:
            return ValidationResult([Diagnostic(ErrorCategory.MALFORMED, str(e))])
        return self.validate(state)

    # ---------------- stage 1 ----------------

    def _check_centers(self, state: FaceletState, result: ValidationResult) -> None:
        by_color: Dict[str, List[Face]] = defaultdict(list)
        for face, color in state.center_colors().items():
            by_color[color].append(face)
        for color, faces in by_color.items():
            if len(faces) > 1:
                names = " and ".join(f.long_name for f in faces)
                result.diagnostics.append(Diagnostic(
                    ErrorCategory.CENTERS,
                    f"Centers must all differ: {names} centers are all {color_label(color)}",
                ))

    # ---------------- stage 2 ----------------

    def _check_color_counts(self, state: FaceletState, result: ValidationResult) -> None:
        counts = state.color_counts()
        centers = state.center_colors()
        for face in FACES:
            color = centers[face]
            n = counts.get(color, 0)
            if n < 9:
                result.diagnostics.append(Diagnostic(
                    ErrorCategory.COLOR_COUNT,
                    f"Color {color_label(color)} appears {n} times, expected 9 ({9 - n} missing)",
                ))
            elif n > 9:
                result.diagnostics.append(Diagnostic(
                    ErrorCategory.COLOR_COUNT,
                    f"Color {color_label(color)} appears {n} times, expected 9 ({n - 9} too many)",
                ))

    # ---------------- stages 3 to 5 ----------------

    def _check_pieces(self, state: FaceletState, result: ValidationResult) -> None:
        letters = state.to_face_letters()
        f = [Face.from_letter(c).value for c in letters]

        cubie = CubieCube()
        for i in range(8):
            cols = [f[k] for k in CORNER_FACELET[i]]
            found = _match_corner(cols)
            if found is None:
                shown = "/".join(state.sticker(k) for k in CORNER_FACELET[i])
                result.diagnostics.append(Diagnostic(
                    ErrorCategory.IMPOSSIBLE_PIECE,
                    f"Impossible piece at corner {CORNER_NAMES[i]} ({shown}): {_piece_problem(cols)}",
                ))
                continue
            cubie.cp[i], cubie.co[i] = found

        for i in range(12):
            cols = [f[k] for k in EDGE_FACELET[i]]
            found = _match_edge(cols)
            if found is None:
                shown = "/".join(state.sticker(k) for k in EDGE_FACELET[i])
                result.diagnostics.append(Diagnostic(
                    ErrorCategory.IMPOSSIBLE_PIECE,
                    f"Impossible piece at edge {EDGE_NAMES[i]} ({shown}): {_piece_problem(cols)}",
                ))
                continue
            cubie.ep[i], cubie.eo[i] = found

        if not result.valid:
            return

        self._check_uniqueness(cubie, result)
        if not result.valid:
            return

        self._check_parity(cubie, result)

    def _check_uniqueness(self, cubie: CubieCube, result: ValidationResult) -> None:
        for label, perm, names, code in (
            ("corner", cubie.cp, CORNER_NAMES, -4),
            ("edge", cubie.ep, EDGE_NAMES, -2),
        ):
            counts = Counter(perm)
            dupes = sorted(p for p, n in counts.items() if n > 1)
            if not dupes:
                continue
            missing = [names[p] for p in range(len(names)) if p not in counts]
            where = "; ".join(
                f"{names[p]} at {', '.join(names[i] for i, q in enumerate(perm) if q == p)}" for p in dupes
            )
            result.diagnostics.append(Diagnostic(
                ErrorCategory.DUPLICATE_PIECE,
                f"{VERIFY_MESSAGES[code]}: duplicated {label} {where}; missing {', '.join(missing)}",
            ))

    def _check_parity(self, cubie: CubieCube, result: ValidationResult) -> None:
        if sum(cubie.eo) % 2 != 0:
            result.diagnostics.append(Diagnostic(
                ErrorCategory.FLIP,
                f"Unsolvable: odd number of flipped edges. {VERIFY_MESSAGES[-3]}",
            ))
        if sum(cubie.co) % 3 != 0:
            result.diagnostics.append(Diagnostic(
                ErrorCategory.TWIST,
                f"Unsolvable: a corner is twisted. {VERIFY_MESSAGES[-5]}",
            ))
        if cubie.corner_parity() != cubie.edge_parity():
            result.diagnostics.append(Diagnostic(
                ErrorCategory.PARITY,
                f"Unsolvable: two pieces are swapped. {VERIFY_MESSAGES[-6]}",
            ))
