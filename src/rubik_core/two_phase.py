"""
two_phase.py — Kociemba-style two-phase search
==============================================

Phase 1 turns the cube into the subgroup G1 = <U, D, R2, L2, F2, B2>: every
corner twist and edge flip is zero and the four FR/FL/BL/BR edges sit in the
middle slice. It searches over three coordinates:

* twist : orientation of 7 corners, base 3  (0..2186)
* flip  : orientation of 11 edges, base 2   (0..2047)
* slice : which 4 edge positions hold the slice edges (0..494)

Phase 2 solves the cube inside G1 using only the ten G1 moves, over:

* corner permutation          (0..40319)
* U/D-layer edge permutation  (0..40319)
* slice edge permutation      (0..23)

Each coordinate has a move table (coordinate x move -> coordinate) and each
phase has two pruning tables over combined coordinates, built by
breadth-first expansion from the goal. Both phases run iterative-deepening
depth-first search with the larger of the two pruning values as heuristic.

Tables are built once per process (``build_tables``), with numpy, and shared
read-only by every search afterwards.

--------------------------------------------------------------------------

Copyright (c) 2025 Facundo Gauna & Ulises Carnevale. Licensed under MIT License.
"""

from __future__ import annotations

import itertools
import logging
import threading
import time
from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple

import numpy as np

from .config import (
    MAX_PHASE2_DEPTH,
    MAX_SOLUTION_LENGTH,
    PRUNING_DEPTH_LIMIT,
    SEARCH_NODE_LIMIT,
)
from .cube_types import FACES, Move, PhaseRecord, SolveResult
from .cubie import MOVE_CUBES, CubieCube
from .facelet_state import FaceletState
from .optimizer import MoveOptimizer

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

N_TWIST = 2187
N_FLIP = 2048
N_SLICE = 495
N_PERM8 = 40320
N_PERM4 = 24
N_MOVE = 18

# move index m = 3 * face + (amount - 1), faces in U, R, F, D, L, B order
PHASE2_MOVES: List[int] = [0, 1, 2, 9, 10, 11, 4, 13, 7, 16]  # U U2 U' D D2 D' R2 L2 F2 B2


def move_of(m: int) -> Move:
    return Move(FACES[m // 3], m % 3 + 1)


def _move_cubie(m: int) -> CubieCube:
    cc = CubieCube()
    cc.move(m // 3, m % 3 + 1)
    return cc


def perm_rank(perms: np.ndarray) -> np.ndarray:
    """Lexicographic rank of each row (a permutation of 0..n-1)."""
    perms = np.asarray(perms)
    n = perms.shape[1]
    rank = np.zeros(perms.shape[0], dtype=np.int64)
    for i in range(n):
        smaller = (perms[:, i + 1:] < perms[:, i:i + 1]).sum(axis=1)
        rank = rank * (n - i) + smaller
    return rank


# ---------------- table construction ----------------

def _twist_move_table() -> np.ndarray:
    table = np.zeros((N_TWIST, N_MOVE), dtype=np.int32)
    a = CubieCube()
    for i in range(N_TWIST):
        a.set_twist(i)
        for face in range(6):
            for k in range(3):
                a.corner_multiply(MOVE_CUBES[face])
                table[i, 3 * face + k] = a.get_twist()
            a.corner_multiply(MOVE_CUBES[face])
    return table


def _flip_move_table() -> np.ndarray:
    table = np.zeros((N_FLIP, N_MOVE), dtype=np.int32)
    a = CubieCube()
    for i in range(N_FLIP):
        a.set_flip(i)
        for face in range(6):
            for k in range(3):
                a.edge_multiply(MOVE_CUBES[face])
                table[i, 3 * face + k] = a.get_flip()
            a.edge_multiply(MOVE_CUBES[face])
    return table


def _slice_move_table() -> np.ndarray:
    table = np.zeros((N_SLICE, N_MOVE), dtype=np.int32)
    a = CubieCube()
    for i in range(N_SLICE):
        a.set_slice(i)
        for face in range(6):
            for k in range(3):
                a.edge_multiply(MOVE_CUBES[face])
                table[i, 3 * face + k] = a.get_slice()
            a.edge_multiply(MOVE_CUBES[face])
    return table


def _perm_move_table(n: int, position_maps: List[List[int]]) -> np.ndarray:
    """Move table of the permutation coordinate of n pieces; position_maps[j][i] = source position."""
    perms = np.array(list(itertools.permutations(range(n))), dtype=np.int8)
    table = np.zeros((perms.shape[0], len(position_maps)), dtype=np.int32)
    for j, pmap in enumerate(position_maps):
        table[:, j] = perm_rank(perms[:, pmap])
    return table


def _prune_table(move_a: np.ndarray, move_b: np.ndarray, moves: List[int], depth_limit: int) -> np.ndarray:
    """
    Distance to (0, 0) for every combined index a * len(move_b) + b, by
    breadth-first expansion. Entries beyond depth_limit get depth_limit + 1.
    """
    n_b = move_b.shape[0]
    table = np.full(move_a.shape[0] * n_b, -1, dtype=np.int8)
    table[0] = 0
    depth = 0
    while depth < depth_limit:
        frontier = np.flatnonzero(table == depth)
        if frontier.size == 0:
            break
        a, b = np.divmod(frontier, n_b)
        for m in moves:
            idx = move_a[a, m].astype(np.int64) * n_b + move_b[b, m]
            idx = idx[table[idx] < 0]
            table[idx] = depth + 1
        depth += 1
    table[table < 0] = depth_limit + 1
    return table


@dataclass
class CoordinateTables:
    twist_move: List[List[int]]
    flip_move: List[List[int]]
    slice_move: List[List[int]]
    corner_move: List[List[int]]       # indexed by position in PHASE2_MOVES
    edge8_move: List[List[int]]
    slice_perm_move: List[List[int]]
    slice_twist_prune: List[int]
    slice_flip_prune: List[int]
    corner_slice_prune: List[int]
    edge_slice_prune: List[int]

    @classmethod
    def build(cls) -> "CoordinateTables":
        t0 = time.perf_counter()
        twist = _twist_move_table()
        flip = _flip_move_table()
        slc = _slice_move_table()

        g1 = [_move_cubie(m) for m in PHASE2_MOVES]
        corner = _perm_move_table(8, [cc.cp for cc in g1])
        edge8 = _perm_move_table(8, [cc.ep[:8] for cc in g1])
        slice_perm = _perm_move_table(4, [[e - 8 for e in cc.ep[8:]] for cc in g1])
        logger.debug("Move tables built in %.2fs", time.perf_counter() - t0)

        all_moves = list(range(N_MOVE))
        g1_cols = list(range(len(PHASE2_MOVES)))
        slice_twist = _prune_table(slc, twist, all_moves, PRUNING_DEPTH_LIMIT)
        slice_flip = _prune_table(slc, flip, all_moves, PRUNING_DEPTH_LIMIT)
        corner_slice = _prune_table(corner, slice_perm, g1_cols, MAX_PHASE2_DEPTH)
        edge_slice = _prune_table(edge8, slice_perm, g1_cols, MAX_PHASE2_DEPTH)
        logger.debug("Tables ready in %.2fs", time.perf_counter() - t0)

        return cls(
            twist_move=twist.tolist(),
            flip_move=flip.tolist(),
            slice_move=slc.tolist(),
            corner_move=corner.tolist(),
            edge8_move=edge8.tolist(),
            slice_perm_move=slice_perm.tolist(),
            slice_twist_prune=slice_twist.tolist(),
            slice_flip_prune=slice_flip.tolist(),
            corner_slice_prune=corner_slice.tolist(),
            edge_slice_prune=edge_slice.tolist(),
        )


_TABLES: Optional[CoordinateTables] = None
_TABLES_LOCK = threading.Lock()


def build_tables() -> CoordinateTables:
    """Build (first call) or return the shared coordinate tables."""
    global _TABLES
    with _TABLES_LOCK:
        if _TABLES is None:
            logger.info("Building two-phase tables")
            _TABLES = CoordinateTables.build()
        return _TABLES


# ---------------- search ----------------

class SearchExhausted(Exception):
    """Raised inside a search when the node budget is used up."""


def _allowed(face: int, last_face: int) -> bool:
    # never the same face twice; of two opposite faces only U-D, R-L, F-B order
    return last_face < 0 or (face != last_face and face != last_face - 3)


def phase2_coordinates(cc: CubieCube) -> Tuple[int, int, int]:
    """(corner perm, U/D edge perm, slice perm) of a cube in G1."""
    corner = int(perm_rank(np.array([cc.cp]))[0])
    edge8 = int(perm_rank(np.array([cc.ep[:8]]))[0])
    slice_perm = int(perm_rank(np.array([[e - 8 for e in cc.ep[8:]]]))[0])
    return corner, edge8, slice_perm


class _Search:
    """State of one solve: tables, node budget, move stack."""

    def __init__(self, tables: CoordinateTables, node_limit: int):
        self.t = tables
        self.node_limit = node_limit
        self.nodes = 0

    def _tick(self) -> None:
        self.nodes += 1
        if self.nodes > self.node_limit:
            raise SearchExhausted(self.nodes)

    # phase 1

    def h1(self, twist: int, flip: int, slc: int) -> int:
        t = self.t
        return max(t.slice_twist_prune[slc * N_TWIST + twist], t.slice_flip_prune[slc * N_FLIP + flip])

    def phase1(self, twist: int, flip: int, slc: int, depth: int,
               moves: List[int], last_face: int) -> Iterator[List[int]]:
        """Yield every phase-1 solution of exactly `depth` more moves."""
        if depth == 0:
            if twist == 0 and flip == 0 and slc == 0:
                # a last move inside G1 means a shorter solution was already tried
                if not moves or moves[-1] not in PHASE2_MOVES:
                    yield list(moves)
            return
        t = self.t
        for m in range(N_MOVE):
            face = m // 3
            if not _allowed(face, last_face):
                continue
            self._tick()
            nt = t.twist_move[twist][m]
            nf = t.flip_move[flip][m]
            ns = t.slice_move[slc][m]
            if self.h1(nt, nf, ns) > depth - 1:
                continue
            moves.append(m)
            yield from self.phase1(nt, nf, ns, depth - 1, moves, face)
            moves.pop()

    # phase 2

    def h2(self, corner: int, edge8: int, sp: int) -> int:
        t = self.t
        return max(t.corner_slice_prune[corner * N_PERM4 + sp], t.edge_slice_prune[edge8 * N_PERM4 + sp])

    def phase2(self, corner: int, edge8: int, sp: int, depth: int,
               moves: List[int], last_face: int) -> bool:
        if depth == 0:
            return corner == 0 and edge8 == 0 and sp == 0
        t = self.t
        for j, m in enumerate(PHASE2_MOVES):
            face = m // 3
            if not _allowed(face, last_face):
                continue
            self._tick()
            nc = t.corner_move[corner][j]
            ne = t.edge8_move[edge8][j]
            ns = t.slice_perm_move[sp][j]
            if self.h2(nc, ne, ns) > depth - 1:
                continue
            moves.append(m)
            if self.phase2(nc, ne, ns, depth - 1, moves, face):
                return True
            moves.pop()
        return False

    def solve_phase2(self, cc: CubieCube, max_depth: int) -> Optional[List[int]]:
        corner, edge8, sp = phase2_coordinates(cc)
        for depth in range(self.h2(corner, edge8, sp), max_depth + 1):
            moves: List[int] = []
            if self.phase2(corner, edge8, sp, depth, moves, -1):
                return moves
        return None


class CubieEngine:
    """
    Two-phase solver on the cubie level.

    max_length bounds phase1 + phase2; node_limit bounds the work of one
    solve. Either limit being hit makes the solve fail with
    "could not find solution" instead of running on.
    """

    def __init__(self, max_length: int = MAX_SOLUTION_LENGTH, node_limit: int = SEARCH_NODE_LIMIT,
                 optimizer: Optional[MoveOptimizer] = None):
        self.max_length = max_length
        self.node_limit = node_limit
        self.optimizer = optimizer or MoveOptimizer()

    def build_tables(self) -> CoordinateTables:
        return build_tables()

    @staticmethod
    def to_cubie(state: FaceletState) -> CubieCube:
        return CubieCube.from_facelets(state.to_face_letters())

    def phase1_search(self, cubie: CubieCube, max_depth: Optional[int] = None) -> Optional[List[Move]]:
        """Shortest move sequence taking `cubie` into G1, or None within max_depth."""
        search = _Search(self.build_tables(), self.node_limit)
        twist, flip, slc = cubie.get_twist(), cubie.get_flip(), cubie.get_slice()
        limit = self.max_length if max_depth is None else max_depth
        try:
            for depth in range(search.h1(twist, flip, slc), limit + 1):
                for sol in search.phase1(twist, flip, slc, depth, [], -1):
                    return [move_of(m) for m in sol]
        except SearchExhausted:
            logger.debug("Phase 1 search exhausted after %d nodes", search.nodes)
        return None

    def phase2_search(self, cubie: CubieCube, max_depth: int = MAX_PHASE2_DEPTH) -> Optional[List[Move]]:
        """Solve a cube already in G1 using only G1 moves."""
        if cubie.get_twist() or cubie.get_flip() or cubie.get_slice():
            raise ValueError("phase 2 needs a cube in G1 (no twist, no flip, slice edges in the slice)")
        search = _Search(self.build_tables(), self.node_limit)
        try:
            sol = search.solve_phase2(cubie, max_depth)
        except SearchExhausted:
            logger.debug("Phase 2 search exhausted after %d nodes", search.nodes)
            return None
        return None if sol is None else [move_of(m) for m in sol]

    def search(self, cubie: CubieCube) -> Optional[Tuple[List[Move], List[Move]]]:
        """(phase-1 moves, phase-2 moves) with total length <= max_length, or None."""
        search = _Search(self.build_tables(), self.node_limit)
        twist, flip, slc = cubie.get_twist(), cubie.get_flip(), cubie.get_slice()
        try:
            for depth1 in range(search.h1(twist, flip, slc), self.max_length + 1):
                for sol1 in search.phase1(twist, flip, slc, depth1, [], -1):
                    cc = cubie.copy()
                    for m in sol1:
                        cc.move(m // 3, m % 3 + 1)
                    budget = min(MAX_PHASE2_DEPTH, self.max_length - depth1)
                    sol2 = search.solve_phase2(cc, budget)
                    if sol2 is not None:
                        logger.debug("Two-phase: %d + %d moves, %d nodes", len(sol1), len(sol2), search.nodes)
                        return [move_of(m) for m in sol1], [move_of(m) for m in sol2]
        except SearchExhausted:
            logger.debug("Two-phase search exhausted after %d nodes", search.nodes)
        return None

    def solve(self, state: FaceletState) -> SolveResult:
        """Solve a validated state. Works on a cubie copy; `state` is not modified."""
        if state.is_solved():
            return SolveResult(True, [], [PhaseRecord("Already solved", "✔", "The cube is already solved.")],
                               None, "two_phase")
        found = self.search(self.to_cubie(state))
        if found is None:
            return SolveResult(False, [], [],
                               f"Could not find solution within {self.max_length} moves", "two_phase")
        sol1, sol2 = found
        phases = [
            PhaseRecord("Phase 1", "①", "Orient all pieces and gather the middle-slice edges.", sol1),
            PhaseRecord("Phase 2", "②", "Solve the reduced cube with U, D and half turns.", sol2),
        ]
        return SolveResult(True, self.optimizer.optimize(sol1 + sol2), phases, None, "two_phase")
