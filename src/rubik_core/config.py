"""config.py — project configuration
------------------------------------

This file centralizes the constants shared by the cube model, the validator
and the solving engines. They are plain module-level values: import them,
or pass overrides explicitly to the classes that accept them (for example
``LayerSolver(retry_limit=...)`` or ``CubieEngine(max_length=...)``).

Notes / warnings
- The 54-facelet order is fixed: U, R, F, D, L, B, nine stickers per face,
  row-major as seen when looking straight at that face. Everything that
  indexes facelets (cubie tables, the renderer bridge, serialization)
  assumes this order.
- The search limits are trade-offs between solution length and CPU time.
  The pruning tables are built once per process and reused, so the first
  two-phase solve pays the table cost (a couple of seconds with numpy).

-------------------------------------------------------------------------------

Copyright (c) 2025 Facundo Gauna & Ulises Carnevale. Licensed under MIT License.
"""

from typing import Dict, List

# ---------------- Rubik cube layout ----------------

# Face letters in facelet-string order.
FACE_ORDER: List[str] = ['U', 'R', 'F', 'D', 'L', 'B']

# 54-character flattened string of the solved cube using face letters as
# colors. This is the serialized form of a freshly reset FaceletState.
FACES_INIT_STATE: str = "UUUUUUUUURRRRRRRRRFFFFFFFFFDDDDDDDDDLLLLLLLLLBBBBBBBBB"

# Face letter -> index of that face's center sticker in the flattened array.
CENTER_INDICES: Dict[str, int] = {'U': 4, 'R': 13, 'F': 22, 'D': 31, 'L': 40, 'B': 49}

FACE_NAMES: Dict[str, str] = {
    'U': 'Up',
    'R': 'Right',
    'F': 'Front',
    'D': 'Down',
    'L': 'Left',
    'B': 'Back',
}

# The three axis pairs. Two faces on the same axis never share a piece.
OPPOSITE_FACES: Dict[str, str] = {'U': 'D', 'D': 'U', 'R': 'L', 'L': 'R', 'F': 'B', 'B': 'F'}

# ---------------- Colors ----------------

# Display scheme: white on top, green in front.
COLOR_SCHEME: Dict[str, str] = {'U': 'W', 'R': 'R', 'F': 'G', 'D': 'Y', 'L': 'O', 'B': 'B'}

# Human readable names used in validator diagnostics.
COLOR_NAMES: Dict[str, str] = {
    'W': 'White',
    'Y': 'Yellow',
    'R': 'Red',
    'O': 'Orange',
    'B': 'Blue',
    'G': 'Green',
}

# ---------------- Scramble ----------------
DEFAULT_SCRAMBLE_LENGTH: int = 20

# ---------------- Layer-by-layer solver ----------------
# Attempt budget for one sub-goal (one cross edge, one corner, ...). Every
# case table used by the layer solver converges in at most 6 steps, so this
# is a guard against a corrupted state rather than a tuning knob.
LAYER_RETRY_LIMIT: int = 24

# ---------------- Two-phase search ----------------
# Breadth-first expansion ceiling for the pruning tables. Phase-1 distances
# never exceed 12, so the phase-1 tables are always complete.
PRUNING_DEPTH_LIMIT: int = 12

# Upper bound on phase1 + phase2 length.
MAX_SOLUTION_LENGTH: int = 22

# Upper bound on the phase-2 part alone (18 is the known maximum).
MAX_PHASE2_DEPTH: int = 18

# Hard cap on visited search nodes per solve; exhaustion is reported as
# "could not find solution" instead of searching forever.
SEARCH_NODE_LIMIT: int = 2_000_000

# ---------------- Solver facade ----------------
# Worker threads used by CubeSolver.solve_async.
SOLVER_WORKERS: int = 1
