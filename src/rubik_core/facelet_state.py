"""
facelet_state.py — the cube as 54 colored stickers
===================================================

``FaceletState`` is the model every other component works against: the
renderer reads stickers from it, the validator inspects it and the solvers
replay their moves on private clones of it.

Stickers are kept in one flat list in facelet-string order (U, R, F, D, L, B,
nine per face, row-major) and addressed through the ``Face`` enum. Colors are
arbitrary one-character symbols; the center stickers decide which color
belongs to which face.

Face turns are precomputed 54-index maps derived from the cubie-level move
cubes (see ``cubie.facelet_map``), so the facelet and cubie levels can never
disagree about what a move does.

--------------------------------------------------------------------------

Copyright (c) 2025 Facundo Gauna & Ulises Carnevale. Licensed under MIT License.
"""

from __future__ import annotations

import logging
import random
from collections import Counter
from typing import Dict, List, Mapping, Optional, Sequence, Tuple, Union

from .config import DEFAULT_SCRAMBLE_LENGTH, FACE_ORDER
from .cube_types import FACES, Face, Move, MoveSeq, parse_moves
from .cubie import CubieCube, facelet_map

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

# Precompute mapping from (face_idx, amount) -> mapping54
# mapping54[dest_index] = source_index of the sticker that moves to dest_index
_MOVE_MAPS: Dict[Tuple[int, int], List[int]] = {}
for _face_idx in range(6):
    for _amount in (1, 2, 3):
        _cc = CubieCube()
        _cc.move(_face_idx, _amount)
        _MOVE_MAPS[(_face_idx, _amount)] = facelet_map(_cc)

_SCRAMBLE_AMOUNTS = (1, 2, 3)

FaceKey = Union[Face, str]


def _face(key: FaceKey) -> Face:
    return key if isinstance(key, Face) else Face.from_letter(key)


def _check_stickers(stickers: Sequence[str]) -> List[str]:
    """Reject malformed sticker sequences with a specific message."""
    stickers = list(stickers)
    if len(stickers) != 54:
        raise ValueError(f"A cube has 54 stickers, got {len(stickers)}")
    for i, s in enumerate(stickers):
        if not isinstance(s, str) or len(s) != 1 or s.isspace():
            raise ValueError(f"Sticker {i} must be a single non-blank character, got {s!r}")
    symbols = set(stickers)
    if len(symbols) > 6:
        raise ValueError(f"A cube uses at most 6 colors, got {len(symbols)}: {''.join(sorted(symbols))}")
    return stickers


class FaceletState:
    """
    Sticker-level cube state with move history.

    home_colors maps each face (Face or letter) to the color it shows when
    solved. Without it every face is colored with its own letter, so a reset
    cube serializes to "UUUUUUUUURRR...BBB".
    """

    def __init__(self, home_colors: Optional[Mapping[FaceKey, str]] = None):
        if home_colors is None:
            self.home_colors: Dict[Face, str] = {f: f.letter for f in FACES}
        else:
            self.home_colors = {_face(k): v for k, v in home_colors.items()}
            if set(self.home_colors) != set(FACES) or len(set(self.home_colors.values())) != 6:
                raise ValueError("home_colors must give six distinct colors, one per face")
        self._stickers: List[str] = []
        self._history: List[Move] = []
        self.reset()

    # ---------------- construction / serialization ----------------

    def reset(self) -> None:
        """Every face monochrome in its home color; history cleared."""
        self._stickers = [self.home_colors[f] for f in FACES for _ in range(9)]
        self._history = []

    def clone(self) -> "FaceletState":
        other = FaceletState.__new__(FaceletState)
        other.home_colors = dict(self.home_colors)
        other._stickers = list(self._stickers)
        other._history = list(self._history)
        return other

    def to_facelet_string(self) -> str:
        return ''.join(self._stickers)

    def load_facelet_string(self, facelets: str) -> None:
        """Replace all stickers (paint a whole cube). Clears the history."""
        if not isinstance(facelets, str):
            raise ValueError("facelets must be a string")
        self._stickers = _check_stickers(list(facelets))
        self._history = []

    @classmethod
    def from_facelet_string(cls, facelets: str,
                            home_colors: Optional[Mapping[FaceKey, str]] = None) -> "FaceletState":
        state = cls(home_colors)
        state.load_facelet_string(facelets)
        return state

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, object],
                     home_colors: Optional[Mapping[FaceKey, str]] = None) -> "FaceletState":
        """
        Build from {'U': [9 colors], ...} or from sticker labels {'U1': 'W', ..., 'B9': 'B'}.
        Raises ValueError listing the missing faces/stickers.
        """
        stickers: List[str] = []
        missing: List[str] = []
        for face in FACE_ORDER:
            if face in mapping:
                colors = list(mapping[face])  # type: ignore[arg-type]
                if len(colors) != 9:
                    raise ValueError(f"Face {face} must have 9 stickers, got {len(colors)}")
                stickers.extend(colors)
                continue
            for i in range(1, 10):
                k = f"{face}{i}"
                if k not in mapping:
                    missing.append(k)
                    stickers.append("X")
                else:
                    stickers.append(mapping[k])  # type: ignore[arg-type]
        if missing:
            raise ValueError(f"Missing stickers: {missing}")
        state = cls(home_colors)
        state._stickers = _check_stickers(stickers)
        return state

    # ---------------- read-out ----------------

    @property
    def faces(self) -> Dict[Face, Tuple[str, ...]]:
        return {f: self.face(f) for f in FACES}

    def face(self, face: FaceKey) -> Tuple[str, ...]:
        off = _face(face).offset
        return tuple(self._stickers[off:off + 9])

    def get_facelet(self, face: FaceKey, index: int) -> str:
        if not 0 <= index < 9:
            raise ValueError(f"Sticker index must be 0..8, got {index}")
        return self._stickers[_face(face).offset + index]

    def set_facelet(self, face: FaceKey, index: int, color: str) -> None:
        """Paint one sticker. Does not touch the move history."""
        if not 0 <= index < 9:
            raise ValueError(f"Sticker index must be 0..8, got {index}")
        stickers = list(self._stickers)
        stickers[_face(face).offset + index] = color
        self._stickers = _check_stickers(stickers)

    def sticker(self, index: int) -> str:
        return self._stickers[index]

    def center_colors(self) -> Dict[Face, str]:
        return {f: self._stickers[f.center_index] for f in FACES}

    def color_counts(self) -> Counter:
        return Counter(self._stickers)

    def to_face_letters(self) -> str:
        """
        Translate colors to face letters through the centers (the form the
        cubie level reads). Raises ValueError if the centers are not distinct.
        """
        color_to_face: Dict[str, str] = {}
        for face, color in self.center_colors().items():
            if color in color_to_face:
                raise ValueError(
                    f"Duplicate center color {color!r} between {color_to_face[color]!r} and {face.letter!r}"
                )
            color_to_face[color] = face.letter
        return ''.join(color_to_face.get(c, '?') for c in self._stickers)

    @property
    def history(self) -> Tuple[Move, ...]:
        return tuple(self._history)

    # ---------------- moves ----------------

    def apply_move(self, move: Union[Move, str], record: bool = True) -> Move:
        mv = Move.parse(move)
        mapping54 = _MOVE_MAPS[(mv.face.value, mv.amount)]
        old = self._stickers
        self._stickers = [old[src] for src in mapping54]
        if record:
            self._history.append(mv)
        return mv

    def apply_moves(self, moves: MoveSeq, record: bool = True) -> List[Move]:
        parsed = parse_moves(moves)
        for mv in parsed:
            self.apply_move(mv, record)
        return parsed

    def undo_last(self) -> Optional[Move]:
        """Undo the most recent recorded move; returns it, or None if there is nothing to undo."""
        if not self._history:
            logger.debug("Nothing to undo")
            return None
        mv = self._history.pop()
        self.apply_move(mv.inverse(), record=False)
        return mv

    def scramble(self, length: int = DEFAULT_SCRAMBLE_LENGTH,
                 rng: Optional[random.Random] = None) -> List[Move]:
        """
        Apply `length` random moves, never turning the same face twice in a
        row. The moves are recorded in the history and returned.
        """
        rng = rng or random.Random()
        moves: List[Move] = []
        prev: Optional[Face] = None
        for _ in range(length):
            face = rng.choice(FACES)
            while face == prev:
                face = rng.choice(FACES)
            mv = Move(face, rng.choice(_SCRAMBLE_AMOUNTS))
            self.apply_move(mv)
            moves.append(mv)
            prev = face
        return moves

    def is_solved(self) -> bool:
        """True iff every face shows a single color."""
        for f in FACES:
            off = f.offset
            if len(set(self._stickers[off:off + 9])) != 1:
                return False
        return True

    # ---------------- dunder ----------------

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FaceletState):
            return NotImplemented
        return self._stickers == other._stickers

    def __repr__(self) -> str:
        return f"FaceletState({self.to_facelet_string()!r})"
