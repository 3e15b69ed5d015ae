"""
cube_solver.py — the solve entry point
======================================

``CubeSolver`` ties the core together:

1. accept a ``FaceletState`` or a 54-symbol facelet string;
2. validate it with ``StateValidator`` and stop with the diagnostics if the
   cube cannot be solved;
3. run the requested engine (``"layer"`` or ``"two_phase"``);
4. verify the returned moves by replaying them on a clone;
5. cache the result per (facelets, method) and notify ``on_solved``.

A solve never raises: invalid input, search exhaustion and unexpected faults
all come back as a ``SolveResult`` with ``success=False`` and an ``error``.
``solve_async`` runs the same call on a small worker pool and returns a
``concurrent.futures.Future``.

Two-phase searches are bounded (total length and node budget). When one
gives up and ``fallback`` is set, the layer solver answers instead.

--------------------------------------------------------------------------

Copyright (c) 2025 Facundo Gauna & Ulises Carnevale. Licensed under MIT License.
"""

from __future__ import annotations

import concurrent.futures
import logging
import threading
from typing import Callable, Dict, Optional, Tuple, Union

from .config import SOLVER_WORKERS
from .cube_types import SolveResult, ValidationResult, format_moves
from .facelet_state import FaceletState
from .layer_solver import LayerSolver
from .optimizer import MoveOptimizer
from .two_phase import CubieEngine
from .validator import StateValidator

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

# Thread pool for asynchronous solves (small, single-worker by default)
_EXECUTOR = concurrent.futures.ThreadPoolExecutor(max_workers=SOLVER_WORKERS)

METHODS = ("layer", "two_phase")

SolvedCallback = Callable[[SolveResult], None]
StateInput = Union[FaceletState, str]


class CubeSolver:
    def __init__(self, fallback: bool = True, on_solved: Optional[SolvedCallback] = None,
                 engine: Optional[CubieEngine] = None):
        self.fallback = fallback
        self.on_solved = on_solved
        self.optimizer = MoveOptimizer()
        self.validator = StateValidator()
        self.layer_solver = LayerSolver(optimizer=self.optimizer)
        self.engine = engine or CubieEngine(optimizer=self.optimizer)
        self._solve_cache: Dict[Tuple[str, str], SolveResult] = {}
        self._lock = threading.Lock()

    @staticmethod
    def _as_state(state_or_string: StateInput) -> FaceletState:
        if isinstance(state_or_string, FaceletState):
            return state_or_string.clone()
        return FaceletState.from_facelet_string(state_or_string)

    def validate(self, state_or_string: StateInput) -> ValidationResult:
        if isinstance(state_or_string, FaceletState):
            return self.validator.validate(state_or_string)
        return self.validator.validate_facelets(state_or_string)

    def solve(self, state_or_string: StateInput, method: str = "layer",
              on_solved: Optional[SolvedCallback] = None) -> SolveResult:
        """
        Solve a cube given as FaceletState or facelet string.

        The caller's state is never modified. on_solved (or the instance
        callback) runs only for successful results.
        """
        try:
            result = self._solve(state_or_string, method)
        except Exception as e:
            logger.exception("Solver error: %s", e)
            result = SolveResult(False, error=f"Solver error: {e}", method=method)
        if result.success:
            self._notify(on_solved or self.on_solved, result)
        return result

    def _solve(self, state_or_string: StateInput, method: str) -> SolveResult:
        if method not in METHODS:
            return SolveResult(False, error=f"Unknown method {method!r}, expected one of {METHODS}", method=method)

        validation = self.validate(state_or_string)
        if not validation.valid:
            logger.debug("Facelet validation failed : %s", validation.errors)
            return SolveResult(False, error="Facelets invalid: " + "; ".join(validation.errors), method=method)

        state = self._as_state(state_or_string)
        key = (state.to_facelet_string(), method)
        with self._lock:
            cached = self._solve_cache.get(key)
        if cached is not None:
            logger.debug("Solver cache hit for facelets")
            return cached

        if method == "two_phase":
            result = self._verified(state, self.engine.solve(state))
            if not result.success and self.fallback:
                logger.info("Two-phase search gave up (%s), falling back to layer solver", result.error)
                result = self._verified(state, self.layer_solver.solve(state))
        else:
            result = self._verified(state, self.layer_solver.solve(state))

        with self._lock:
            self._solve_cache[key] = result
        return result

    @staticmethod
    def _verified(state: FaceletState, result: SolveResult) -> SolveResult:
        """Replay the solution on a clone; a non-solving sequence becomes a failure."""
        if not result.success:
            return result
        probe = state.clone()
        probe.apply_moves(result.solution, record=False)
        if probe.is_solved():
            return result
        logger.warning("%s solution does not solve the cube", result.method)
        return SolveResult(False, result.solution, result.phases,
                           "Could not find solution: replay check failed", result.method)

    @staticmethod
    def _notify(callback: Optional[SolvedCallback], result: SolveResult) -> None:
        if callback is None:
            return
        try:
            callback(result)
        except Exception as e:
            logger.exception("on_solved callback failed: %s", e)

    # asynchronous convenience wrapper: returns Future
    def solve_async(self, state_or_string: StateInput, method: str = "layer",
                    on_solved: Optional[SolvedCallback] = None) -> "concurrent.futures.Future[SolveResult]":
        if isinstance(state_or_string, FaceletState):
            state_or_string = state_or_string.clone()
        return _EXECUTOR.submit(self.solve, state_or_string, method, on_solved)

    def clear_cache(self) -> None:
        """Clear the internal solve cache."""
        with self._lock:
            self._solve_cache.clear()


# Module self-test when executed directly
if __name__ == "__main__":
    import argparse
    import sys

    logging.basicConfig(level=logging.INFO)
    parser = argparse.ArgumentParser(prog="cube_solver.py")
    parser.add_argument("--facelets", help="Provide a 54-char facelet string to solve")
    parser.add_argument("--method", choices=METHODS, default="layer")
    parser.add_argument("--scramble", type=int, default=20, help="Scramble length when no facelets are given")
    args = parser.parse_args()

    solver = CubeSolver()
    if args.facelets:
        facelets = args.facelets
    else:
        cube = FaceletState()
        scramble = cube.scramble(args.scramble)
        logger.info("Scramble: %s", format_moves(scramble))
        facelets = cube.to_facelet_string()

    res = solver.solve(facelets, method=args.method)
    if not res.success:
        logger.error("Solve failed: %s", res.error)
        sys.exit(1)
    for phase in res.phases:
        logger.info("%s %s: %s", phase.icon, phase.name, format_moves(phase.moves))
    logger.info("Solution (%d moves): %s", res.move_count, format_moves(res.solution))
