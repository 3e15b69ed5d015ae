from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Set, Union

from .config import FACE_NAMES, FACE_ORDER, OPPOSITE_FACES


class Face(Enum):
    """The six faces, valued by their position in the facelet string."""

    U = 0
    R = 1
    F = 2
    D = 3
    L = 4
    B = 5

    @property
    def letter(self) -> str:
        return self.name

    @property
    def long_name(self) -> str:
        return FACE_NAMES[self.name]

    @property
    def offset(self) -> int:
        """Index of this face's first sticker in the 54-facelet string."""
        return self.value * 9

    @property
    def center_index(self) -> int:
        return self.value * 9 + 4

    @property
    def opposite(self) -> "Face":
        return Face[OPPOSITE_FACES[self.name]]

    @classmethod
    def from_letter(cls, letter: str) -> "Face":
        try:
            return cls[letter.upper()]
        except KeyError:
            raise ValueError(f"Unknown face: {letter!r}") from None


FACES: List[Face] = [Face[f] for f in FACE_ORDER]

_SUFFIX = {1: "", 2: "2", 3: "'"}
_AMOUNT = {"": 1, "2": 2, "'": 3, "2'": 2, "'2": 2}


@dataclass(frozen=True)
class Move:
    """A face turn. amount counts clockwise quarter turns (1, 2 or 3)."""

    face: Face
    amount: int = 1

    def __post_init__(self):
        if self.amount not in (1, 2, 3):
            raise ValueError(f"Move amount must be 1, 2 or 3, got {self.amount!r}")

    def __str__(self) -> str:
        return self.face.letter + _SUFFIX[self.amount]

    def inverse(self) -> "Move":
        return Move(self.face, 4 - self.amount)

    @classmethod
    def parse(cls, token: Union[str, "Move"]) -> "Move":
        if isinstance(token, Move):
            return token
        tok = token.strip()
        if not tok:
            raise ValueError("Empty move token")
        face = Face.from_letter(tok[0])
        suffix = tok[1:]
        if suffix not in _AMOUNT:
            raise ValueError(f"Unknown move token: {token!r}")
        return cls(face, _AMOUNT[suffix])


MoveSeq = Union[str, Iterable[Union[str, Move]]]


def parse_moves(seq: Optional[MoveSeq]) -> List[Move]:
    """Parse "R U R' U'" (or a list of tokens / Move objects) into Moves."""
    if seq is None:
        return []
    if isinstance(seq, str):
        tokens: Iterable[Union[str, Move]] = seq.split()
    else:
        tokens = seq
    return [Move.parse(tok) for tok in tokens]


def format_moves(moves: Iterable[Move]) -> str:
    return " ".join(str(m) for m in moves)


# ---------------- Solve results ----------------

@dataclass
class PhaseRecord:
    name: str
    icon: str
    description: str
    moves: List[Move] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "icon": self.icon,
            "description": self.description,
            "moves": [str(m) for m in self.moves],
        }


@dataclass
class SolveResult:
    success: bool
    solution: List[Move] = field(default_factory=list)
    phases: List[PhaseRecord] = field(default_factory=list)
    error: Optional[str] = None
    method: str = ""

    @property
    def move_count(self) -> int:
        return len(self.solution)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "solution": [str(m) for m in self.solution],
            "phases": [p.to_dict() for p in self.phases],
            "error": self.error,
        }


# ---------------- Validation ----------------

class ErrorCategory(Enum):
    MALFORMED = "malformed"
    CENTERS = "centers"
    COLOR_COUNT = "color_count"
    IMPOSSIBLE_PIECE = "impossible_piece"
    DUPLICATE_PIECE = "duplicate_piece"
    FLIP = "flip"
    TWIST = "twist"
    PARITY = "parity"


@dataclass(frozen=True)
class Diagnostic:
    category: ErrorCategory
    message: str


@dataclass
class ValidationResult:
    diagnostics: List[Diagnostic] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.diagnostics

    @property
    def errors(self) -> List[str]:
        return [d.message for d in self.diagnostics]

    @property
    def categories(self) -> Set[ErrorCategory]:
        return {d.category for d in self.diagnostics}

    def to_dict(self) -> Dict[str, Any]:
        return {"valid": self.valid, "errors": self.errors}
