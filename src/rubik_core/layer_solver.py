"""
layer_solver.py — layer-by-layer (beginner's method) solver
===========================================================

Solves a valid ``FaceletState`` in six phases:

1. cross on the bottom (D) face,
2. bottom corners,
3. middle-layer edges,
4. top cross (edge orientation),
5. top corner orientation,
6. top layer permutation (corners, then edges, then a final alignment).

Every sub-goal runs the same loop: classify the current state into a case,
look the case up in that phase's table to get an algorithm template, apply
it and classify again. Templates are written for one viewpoint (front = F)
and re-targeted to the other three sides by relabelling F/R/B/L, which is the
same as turning the whole cube around the vertical axis first.

Every case table moves a piece strictly closer to its goal, so each sub-goal
finishes in a handful of steps; the retry limit only guards against a corrupt
state. Exhausting it is reported in the result, never raised.

--------------------------------------------------------------------------

Copyright (c) 2025 Facundo Gauna & Ulises Carnevale. Licensed under MIT License.
"""

from __future__ import annotations

import functools
import logging
from typing import Callable, Dict, List, Optional, Tuple

from .config import LAYER_RETRY_LIMIT
from .cube_types import FACES, Face, Move, PhaseRecord, SolveResult, parse_moves
from .cubie import (
    CORNER_FACELET,
    DB, DBL, DF, DFR, DL, DLF, DR, DRB,
    EDGE_FACELET,
    BL, BR, FL, FR,
    UB, UBR, UF, UFL, UL, ULB, UR, URF,
)
from .facelet_state import FaceletState
from .optimizer import MoveOptimizer

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

# Side faces in the order a clockwise U turn visits them backwards:
# U carries the UR edge to UF, i.e. frame k to frame k-1.
SIDES: List[Face] = [Face.F, Face.R, Face.B, Face.L]

# frame k -> slot seen as UF / DF / FR / URF / DFR from that side
U_EDGES = [UF, UR, UB, UL]
D_EDGES = [DF, DR, DB, DL]
MID_EDGES = [FR, BR, BL, FL]
U_CORNERS = [URF, UBR, ULB, UFL]
D_CORNERS = [DFR, DRB, DBL, DLF]

# ---------------- algorithm templates ----------------
SEXY_RIGHT = "R U R'"
EDGE_FLIP_IN = "U' R' F R"
CORNER_FRONT = "F' U' F"
CORNER_UP = "R U2 R' U'"
INSERT_RIGHT = "U R U' R' U' F' U F"
INSERT_LEFT = "U' L' U L U F U' F'"
TOP_CROSS = "F R U R' U' F'"
CORNER_TWIST = "R' D' R D"
CORNER_CYCLE = "R' F R' B2 R F' R' B2 R2"   # cycles URF <- UBR <- ULB <- URF, keeps UFL
EDGE_CYCLE = "R2 U R U R' U' R' U' R' U R'"  # cycles UR <- UL <- UF <- UR, keeps UB

_ALIGN = {1: "U", 2: "U2", 3: "U'"}

# Case tables: case -> template. "solved" ends the sub-goal.
CROSS_CASES: Dict[str, Optional[str]] = {
    "solved": None,
    "bottom_misplaced": "F2",
    "middle_layer": SEXY_RIGHT,
    "top_facing_up": "F2",
    "top_facing_side": EDGE_FLIP_IN,
    **{f"align_{n}": alg for n, alg in _ALIGN.items()},
}

CORNER_CASES: Dict[str, Optional[str]] = {
    "solved": None,
    "bottom_misplaced": SEXY_RIGHT,
    "facing_right": SEXY_RIGHT,
    "facing_front": CORNER_FRONT,
    "facing_up": CORNER_UP,
    **{f"align_{n}": alg for n, alg in _ALIGN.items()},
}

MIDDLE_CASES: Dict[str, Optional[str]] = {
    "solved": None,
    "wrong_slot": INSERT_RIGHT,
    "insert_right": INSERT_RIGHT,
    "insert_left": INSERT_LEFT,
    **{f"align_{n}": alg for n, alg in _ALIGN.items()},
}

TOP_CROSS_CASES: Dict[str, Optional[str]] = {
    "solved": None,
    "dot": TOP_CROSS,
    "ell": TOP_CROSS,
    "line": TOP_CROSS,
}

TWIST_CASES: Dict[str, Optional[str]] = {
    "solved": None,
    "twisted": CORNER_TWIST,
}

CORNER_PERM_CASES: Dict[str, Optional[str]] = {
    "solved": None,
    "three_cycle": CORNER_CYCLE,
    "double_swap": CORNER_CYCLE,
    **{f"align_{n}": alg for n, alg in _ALIGN.items()},
}

EDGE_PERM_CASES: Dict[str, Optional[str]] = {
    "solved": None,
    "three_cycle": EDGE_CYCLE,
    "double_swap": EDGE_CYCLE,
}

ALIGN_CASES: Dict[str, Optional[str]] = {
    "solved": None,
    **{f"align_{n}": alg for n, alg in _ALIGN.items()},
}

# name, icon, description
PHASES: List[Tuple[str, str, str]] = [
    ("Bottom Cross", "✚",
     "Form a cross on the bottom face, matching edge colors with the side centers."),
    ("Bottom Corners", "◣",
     "Position and orient the four bottom corner pieces using the \"sexy move\"."),
    ("Second Layer", "▤",
     "Solve the middle layer edges. Insert edges left or right."),
    ("Top Cross", "✛",
     "Create a cross on the top face using F R U R' U' F'."),
    ("Orient Top Corners", "↻",
     "Twist the top corners until the top face is one color. Use R' D' R D repeatedly."),
    ("Permute Top Layer", "⇄",
     "Cycle the top corners, then the top edges, into place and align the layer."),
]

Case = Tuple[str, int]


@functools.lru_cache(maxsize=None)
def template_moves(template: str, frame: int) -> Tuple[Move, ...]:
    """Moves of `template` as seen from side SIDES[frame] instead of F."""
    relabel = {f: f for f in FACES}
    for i, side in enumerate(SIDES):
        relabel[side] = SIDES[(i + frame) % 4]
    return tuple(Move(relabel[m.face], m.amount) for m in parse_moves(template))


def _face_of(facelet: int) -> Face:
    return FACES[facelet // 9]


class LayerSolver:
    """Layer-by-layer solver working directly on facelet states."""

    def __init__(self, retry_limit: int = LAYER_RETRY_LIMIT, optimizer: Optional[MoveOptimizer] = None):
        self.retry_limit = retry_limit
        self.optimizer = optimizer or MoveOptimizer()

    def solve(self, state: FaceletState) -> SolveResult:
        """
        Solve a clone of `state`. The caller's state is never touched.
        Input is assumed to have passed StateValidator.
        """
        cube = state.clone()
        if cube.is_solved():
            return SolveResult(True, [], [PhaseRecord("Already solved", "✔", "The cube is already solved.")],
                               None, "layer")

        steps: List[Callable[[FaceletState, List[Move]], bool]] = [
            self._solve_cross,
            self._solve_bottom_corners,
            self._solve_middle_layer,
            self._solve_top_cross,
            self._orient_top_corners,
            self._permute_top_layer,
        ]
        phases: List[PhaseRecord] = []
        for (name, icon, description), step in zip(PHASES, steps):
            moves: List[Move] = []
            ok = step(cube, moves)
            phases.append(PhaseRecord(name, icon, description, self.optimizer.optimize(moves)))
            logger.debug("Phase %s: %d moves", name, len(moves))
            if not ok:
                solution = self.optimizer.optimize([m for p in phases for m in p.moves])
                return SolveResult(False, solution, phases,
                                   f"Could not find solution: phase '{name}' did not converge", "layer")

        solution = self.optimizer.optimize([m for p in phases for m in p.moves])
        if not cube.is_solved():
            return SolveResult(False, solution, phases, "Could not find solution", "layer")
        return SolveResult(True, solution, phases, None, "layer")

    # ---------------- generic machinery ----------------

    def _run(self, cube: FaceletState, out: List[Move], classify: Callable[[FaceletState], Case],
             table: Dict[str, Optional[str]], goal: str) -> bool:
        for _ in range(self.retry_limit):
            case, frame = classify(cube)
            if case == "solved":
                return True
            template = table.get(case)
            if template is None:
                logger.warning("%s: no algorithm for case %r", goal, case)
                return False
            for mv in template_moves(template, frame):
                cube.apply_move(mv, record=False)
                out.append(mv)
        logger.warning("%s: retry limit %d exhausted", goal, self.retry_limit)
        return False

    @staticmethod
    def _find_edge(cube: FaceletState, a: str, b: str) -> Tuple[int, Dict[str, Face]]:
        for i, (p, q) in enumerate(EDGE_FACELET):
            cp, cq = cube.sticker(p), cube.sticker(q)
            if {cp, cq} == {a, b}:
                return i, {cp: _face_of(p), cq: _face_of(q)}
        raise ValueError(f"edge {a}{b} not found")

    @staticmethod
    def _find_corner(cube: FaceletState, a: str, b: str, c: str) -> Tuple[int, Dict[str, Face]]:
        want = {a, b, c}
        for i, slots in enumerate(CORNER_FACELET):
            cols = [cube.sticker(k) for k in slots]
            if set(cols) == want:
                return i, {col: _face_of(k) for col, k in zip(cols, slots)}
        raise ValueError(f"corner {a}{b}{c} not found")

    @staticmethod
    def _align_case(n: int) -> Case:
        return f"align_{n % 4}", 0

    # ---------------- phase 1: bottom cross ----------------

    def _solve_cross(self, cube: FaceletState, out: List[Move]) -> bool:
        centers = cube.center_colors()
        down = centers[Face.D]
        for k, side in enumerate(SIDES):
            color = centers[side]

            def classify(c: FaceletState, k=k, color=color) -> Case:
                slot, faces = self._find_edge(c, down, color)
                if slot == D_EDGES[k] and faces[down] is Face.D:
                    return "solved", k
                if slot in D_EDGES:
                    return "bottom_misplaced", D_EDGES.index(slot)
                if slot in MID_EDGES:
                    return "middle_layer", MID_EDGES.index(slot)
                n = (U_EDGES.index(slot) - k) % 4
                if n:
                    return self._align_case(n)
                if faces[down] is Face.U:
                    return "top_facing_up", k
                return "top_facing_side", k

            if not self._run(cube, out, classify, CROSS_CASES, f"cross edge {down}{color}"):
                return False
        return True

    # ---------------- phase 2: bottom corners ----------------

    def _solve_bottom_corners(self, cube: FaceletState, out: List[Move]) -> bool:
        centers = cube.center_colors()
        down = centers[Face.D]
        for k in range(4):
            front, right = SIDES[k], SIDES[(k + 1) % 4]
            a, b = centers[front], centers[right]

            def classify(c: FaceletState, k=k, front=front, right=right, a=a, b=b) -> Case:
                slot, faces = self._find_corner(c, down, a, b)
                if slot == D_CORNERS[k] and faces[down] is Face.D:
                    return "solved", k
                if slot in D_CORNERS:
                    return "bottom_misplaced", D_CORNERS.index(slot)
                n = (U_CORNERS.index(slot) - k) % 4
                if n:
                    return self._align_case(n)
                if faces[down] is Face.U:
                    return "facing_up", k
                if faces[down] is front:
                    return "facing_front", k
                return "facing_right", k

            if not self._run(cube, out, classify, CORNER_CASES, f"bottom corner {down}{a}{b}"):
                return False
        return True

    # ---------------- phase 3: middle layer ----------------

    def _solve_middle_layer(self, cube: FaceletState, out: List[Move]) -> bool:
        centers = cube.center_colors()
        for k in range(4):
            front = SIDES[k]
            a, b = centers[front], centers[SIDES[(k + 1) % 4]]

            def classify(c: FaceletState, k=k, front=front, a=a, b=b) -> Case:
                slot, faces = self._find_edge(c, a, b)
                if slot == MID_EDGES[k] and faces[a] is front:
                    return "solved", k
                if slot in MID_EDGES:
                    return "wrong_slot", MID_EDGES.index(slot)
                if slot not in U_EDGES:
                    return "lost", k
                # the sticker not on U decides the insertion side
                if faces[a] is not Face.U:
                    n = (SIDES.index(faces[a]) - k) % 4
                    return self._align_case(n) if n else ("insert_right", k)
                n = (SIDES.index(faces[b]) - (k + 1)) % 4
                return self._align_case(n) if n else ("insert_left", (k + 1) % 4)

            if not self._run(cube, out, classify, MIDDLE_CASES, f"middle edge {a}{b}"):
                return False
        return True

    # ---------------- phase 4: top cross ----------------

    def _solve_top_cross(self, cube: FaceletState, out: List[Move]) -> bool:
        up = cube.center_colors()[Face.U]

        def classify(c: FaceletState) -> Case:
            good = [c.sticker(EDGE_FACELET[slot][0]) == up for slot in U_EDGES]
            count = sum(good)
            if count == 4:
                return "solved", 0
            if count == 0:
                return "dot", 0
            if count != 2:
                return "lost", 0
            if good[0] == good[2]:
                # line: the template wants it through UL and UR
                return "line", 0 if good[1] else 1
            # L shape: the template wants it at UB and UL
            for k in range(4):
                if good[(k + 2) % 4] and good[(k + 3) % 4]:
                    return "ell", k
            return "lost", 0

        return self._run(cube, out, classify, TOP_CROSS_CASES, "top cross")

    # ---------------- phase 5: top corner orientation ----------------

    def _orient_top_corners(self, cube: FaceletState, out: List[Move]) -> bool:
        up = cube.center_colors()[Face.U]
        up_sticker = CORNER_FACELET[URF][0]

        def classify(c: FaceletState) -> Case:
            return ("solved", 0) if c.sticker(up_sticker) == up else ("twisted", 0)

        # Twist each corner in URF, then bring the next one in with U. The
        # bottom layers are scrambled in between and come back once all four
        # corners are oriented.
        for n in range(4):
            if not self._run(cube, out, classify, TWIST_CASES, f"top corner {n + 1}"):
                return False
            mv = cube.apply_move("U", record=False)
            out.append(mv)
        return True

    # ---------------- phase 6: top layer permutation ----------------

    def _permute_top_layer(self, cube: FaceletState, out: List[Move]) -> bool:
        centers = cube.center_colors()
        side_index = {centers[side]: i for i, side in enumerate(SIDES)}
        up = centers[Face.U]

        def corner_homes(c: FaceletState) -> List[int]:
            homes = []
            for slot in U_CORNERS:
                sides = {c.sticker(k) for k in CORNER_FACELET[slot]} - {up}
                idx = sorted(side_index[s] for s in sides)
                # sides k and k+1 belong to frame k; {0, 3} wraps to frame 3
                homes.append(3 if idx == [0, 3] else idx[0])
            return homes

        def classify_corners(c: FaceletState) -> Case:
            homes = corner_homes(c)
            # fixed[t]: slots that would be correct after t quarter turns of U
            fixed = {t: [s for s in range(4) if (s - t) % 4 == homes[s]] for t in range(4)}
            if len(fixed[0]) == 4:
                return "solved", 0
            for t in range(1, 4):
                if len(fixed[t]) == 4:
                    return self._align_case(t)
            if len(fixed[0]) == 1:
                # the cycle keeps the corner seen as UFL, U_CORNERS[k - 1] from frame k
                return "three_cycle", (fixed[0][0] + 1) % 4
            for t in range(1, 4):
                if len(fixed[t]) == 1:
                    return self._align_case(t)
            for t in range(4):
                shifted = [(homes[s] + t) % 4 for s in range(4)]
                if not fixed[t] and _is_even(shifted):
                    return ("double_swap", 0) if t == 0 else self._align_case(t)
            return "lost", 0

        def classify_edges(c: FaceletState) -> Case:
            homes = [side_index[c.sticker(EDGE_FACELET[slot][1])] for slot in U_EDGES]
            fixed = [s for s in range(4) if homes[s] == s]
            if len(fixed) == 4:
                return "solved", 0
            if len(fixed) == 1:
                # the cycle keeps the edge seen as UB, U_EDGES[k + 2] from frame k
                return "three_cycle", (fixed[0] - 2) % 4
            if not fixed:
                return "double_swap", 0
            return "lost", 0

        def classify_align(c: FaceletState) -> Case:
            if c.is_solved():
                return "solved", 0
            for t in range(1, 4):
                probe = c.clone()
                probe.apply_move(Move(Face.U, t), record=False)
                if probe.is_solved():
                    return self._align_case(t)
            return "lost", 0

        return (self._run(cube, out, classify_corners, CORNER_PERM_CASES, "top corner permutation")
                and self._run(cube, out, classify_edges, EDGE_PERM_CASES, "top edge permutation")
                and self._run(cube, out, classify_align, ALIGN_CASES, "top layer alignment"))


def _is_even(perm: List[int]) -> bool:
    inversions = 0
    for i in range(len(perm)):
        for j in range(i + 1, len(perm)):
            if perm[i] > perm[j]:
                inversions += 1
    return inversions % 2 == 0
