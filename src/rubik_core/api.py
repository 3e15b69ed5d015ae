"""api.py — dict-returning facade for a renderer / UI
=====================================================

``CubeAPI`` owns one ``FaceletState`` and one ``CubeSolver`` and exposes the
operations a front end needs: read the stickers, replay moves, paint
stickers, scramble, undo, validate and solve. Every method returns a plain
dict with an ``ok`` flag so it can be handed to a JS bridge or serialized to
JSON as is. No method raises; failures come back as
``{"ok": False, "error": ...}`` and are logged.

Threading model / shared state
- All state mutation happens under ``self.lock``, so the facade can be called
  from a UI thread while a background solve is running.
- Solves run on a clone of the current state; ``solve`` only reads it.
- ``on_solved(state_dict)`` fires when a replayed move (not a paint or load)
  turns an unsolved cube into a solved one. Callback errors are logged.
------------------------------------------------------------------

Copyright (c) 2025 Facundo Gauna & Ulises Carnevale. Licensed under MIT License.
"""

import logging
import random
import threading
from typing import Any, Callable, Dict, Optional

from .config import DEFAULT_SCRAMBLE_LENGTH
from .cube_solver import CubeSolver
from .cube_types import format_moves
from .facelet_state import FaceletState

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())


class CubeAPI:
    def __init__(self, on_solved: Optional[Callable[[Dict[str, Any]], None]] = None,
                 solver: Optional[CubeSolver] = None, rng: Optional[random.Random] = None):
        self.on_solved = on_solved
        self.state = FaceletState()
        self.solver = solver or CubeSolver()
        self.rng = rng or random.Random()
        self.lock = threading.Lock()

    # ---------------- read-out ----------------

    def _state_dict(self) -> Dict[str, Any]:
        return {
            "ok": True,
            "facelets": self.state.to_facelet_string(),
            "faces": {f.letter: list(colors) for f, colors in self.state.faces.items()},
            "solved": self.state.is_solved(),
            "history": format_moves(self.state.history),
        }

    def get_state(self) -> Dict[str, Any]:
        try:
            with self.lock:
                return self._state_dict()
        except Exception as e:
            logger.exception("[CubeAPI.get_state] error: %s", e)
            return {"ok": False, "error": str(e)}

    def get_facelet(self, face: str, index: int) -> Dict[str, Any]:
        try:
            with self.lock:
                return {"ok": True, "face": face, "index": index, "color": self.state.get_facelet(face, index)}
        except ValueError as e:
            return {"ok": False, "error": str(e)}
        except Exception as e:
            logger.exception("[CubeAPI.get_facelet] error: %s", e)
            return {"ok": False, "error": str(e)}

    # ---------------- moves ----------------

    def _notify_if_solved(self, was_solved: bool, snapshot: Dict[str, Any]) -> None:
        if was_solved or not snapshot["solved"] or self.on_solved is None:
            return
        try:
            self.on_solved(snapshot)
        except Exception as e:
            logger.exception("[CubeAPI] on_solved callback failed: %s", e)

    def apply_moves(self, seq) -> Dict[str, Any]:
        """Apply a move or a space separated sequence ("R U R' U'") to the cube."""
        try:
            with self.lock:
                was_solved = self.state.is_solved()
                moves = self.state.apply_moves(seq)
                snapshot = self._state_dict()
            snapshot["applied"] = format_moves(moves)
            self._notify_if_solved(was_solved, snapshot)
            return snapshot
        except ValueError as e:
            logger.debug("[CubeAPI.apply_moves] rejected %r: %s", seq, e)
            return {"ok": False, "error": str(e)}
        except Exception as e:
            logger.exception("[CubeAPI.apply_moves] error: %s", e)
            return {"ok": False, "error": str(e)}

    def apply_move(self, move) -> Dict[str, Any]:
        if isinstance(move, str) and len(move.split()) > 1:
            return {"ok": False, "error": f"Expected a single move, got {move!r}"}
        return self.apply_moves([move])

    def undo(self) -> Dict[str, Any]:
        try:
            with self.lock:
                mv = self.state.undo_last()
                if mv is None:
                    return {"ok": False, "error": "Nothing to undo"}
                snapshot = self._state_dict()
            snapshot["undone"] = str(mv)
            return snapshot
        except Exception as e:
            logger.exception("[CubeAPI.undo] error: %s", e)
            return {"ok": False, "error": str(e)}

    def scramble(self, length: int = DEFAULT_SCRAMBLE_LENGTH) -> Dict[str, Any]:
        """Scramble the cube; returns the state plus the scramble text."""
        try:
            with self.lock:
                moves = self.state.scramble(int(length), self.rng)
                snapshot = self._state_dict()
            snapshot["scramble"] = format_moves(moves)
            logger.info("Scramble: %s", snapshot["scramble"])
            return snapshot
        except Exception as e:
            logger.exception("[CubeAPI.scramble] Error scrambling the cube: %s", e)
            return {"ok": False, "error": str(e)}

    def reset(self) -> Dict[str, Any]:
        try:
            with self.lock:
                self.state.reset()
                return self._state_dict()
        except Exception as e:
            logger.exception("[CubeAPI.reset] Cube cannot be reset: %s", e)
            return {"ok": False, "error": str(e)}

    # ---------------- painting ----------------

    def paint(self, face: str, index: int, color: str) -> Dict[str, Any]:
        try:
            with self.lock:
                self.state.set_facelet(face, index, color)
                return self._state_dict()
        except ValueError as e:
            return {"ok": False, "error": str(e)}
        except Exception as e:
            logger.exception("[CubeAPI.paint] error: %s", e)
            return {"ok": False, "error": str(e)}

    def load(self, facelets: str) -> Dict[str, Any]:
        """Replace the whole cube by a 54-symbol facelet string."""
        try:
            with self.lock:
                self.state.load_facelet_string(facelets)
                return self._state_dict()
        except ValueError as e:
            return {"ok": False, "error": str(e)}
        except Exception as e:
            logger.exception("[CubeAPI.load] error: %s", e)
            return {"ok": False, "error": str(e)}

    # ---------------- validate / solve ----------------

    def validate(self) -> Dict[str, Any]:
        try:
            with self.lock:
                state = self.state.clone()
            result = self.solver.validate(state)
            return {"ok": True, **result.to_dict()}
        except Exception as e:
            logger.exception("[CubeAPI.validate] error: %s", e)
            return {"ok": False, "error": str(e)}

    def solve(self, method: str = "layer") -> Dict[str, Any]:
        """Solve the current cube. The cube itself is not turned."""
        try:
            with self.lock:
                state = self.state.clone()
            result = self.solver.solve(state, method=method)
            logger.info("Solve result success: %s error: %s", result.success, result.error)
            return {
                "ok": result.success,
                **result.to_dict(),
                "method": result.method,
                "facelets": state.to_facelet_string(),
            }
        except Exception as e:
            logger.exception("[CubeAPI.solve] error: %s", e)
            return {"ok": False, "error": str(e)}
