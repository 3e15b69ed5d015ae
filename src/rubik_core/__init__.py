"""rubik_core — 3x3x3 cube model, validation and solvers.

Copyright (c) 2025 Facundo Gauna & Ulises Carnevale. Licensed under MIT License.
"""

from .api import CubeAPI
from .cube_solver import CubeSolver
from .cube_types import (
    Diagnostic,
    ErrorCategory,
    Face,
    Move,
    PhaseRecord,
    SolveResult,
    ValidationResult,
    format_moves,
    parse_moves,
)
from .cubie import CubieCube
from .facelet_state import FaceletState
from .layer_solver import LayerSolver
from .optimizer import MoveOptimizer
from .two_phase import CubieEngine, build_tables
from .validator import StateValidator

__all__ = [
    "CubeAPI",
    "CubeSolver",
    "CubieCube",
    "CubieEngine",
    "Diagnostic",
    "ErrorCategory",
    "Face",
    "FaceletState",
    "LayerSolver",
    "Move",
    "MoveOptimizer",
    "PhaseRecord",
    "SolveResult",
    "StateValidator",
    "ValidationResult",
    "build_tables",
    "format_moves",
    "parse_moves",
]

__version__ = "1.0.0"
