"""
cubie.py — the cube on the cubie level
======================================

Facelet positions are named face + number, row-major on each face::

                 |U1 U2 U3|
                 |U4 U5 U6|
                 |U7 U8 U9|
        |L1 L2 L3|F1 F2 F3|R1 R2 R3|B1 B2 B3|
        |L4 L5 L6|F4 F5 F6|R4 R5 R6|B4 B5 B6|
        |L7 L8 L9|F7 F8 F9|R7 R8 R9|B7 B8 B9|
                 |D1 D2 D3|
                 |D4 D5 D6|
                 |D7 D8 D9|

and serialized in the order U1..U9, R1..R9, F1..F9, D1..D9, L1..L9, B1..B9.
A definition string "UBL..." means: position U1 shows the U color, U2 shows
the B color, U3 shows the L color and so on.

A ``CubieCube`` stores where each of the 8 corner and 12 edge pieces sits
(``cp``/``ep``: position -> piece) and how it is turned (``co``/``eo``).
Corner orientation counts the clockwise twist of the piece's U/D sticker away
from the U/D facelet of its position; edge orientation is 1 when the piece's
reference sticker is not on the reference facelet of its position.

--------------------------------------------------------------------------

Copyright (c) 2025 Facundo Gauna & Ulises Carnevale. Licensed under MIT License.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence

from .config import FACE_ORDER

# Facelet label -> index in the 54-facelet string
FACELETS: Dict[str, int] = {
    f"{face}{i + 1}": n * 9 + i for n, face in enumerate(FACE_ORDER) for i in range(9)
}

# Face (color) indices
U, R, F, D, L, B = range(6)

# Corner positions. Corner URF has an U(p), a R(ight) and a F(ront) facelet.
URF, UFL, ULB, UBR, DFR, DLF, DBL, DRB = range(8)
CORNER_NAMES = ('URF', 'UFL', 'ULB', 'UBR', 'DFR', 'DLF', 'DBL', 'DRB')

# Edge positions. Edge UR has an U(p) and a R(ight) facelet.
UR, UF, UL, UB, DR, DF, DL, DB, FR, FL, BL, BR = range(12)
EDGE_NAMES = ('UR', 'UF', 'UL', 'UB', 'DR', 'DF', 'DL', 'DB', 'FR', 'FL', 'BL', 'BR')


def _idx(*labels: str) -> List[int]:
    return [FACELETS[label] for label in labels]


# Facelets of each corner position, clockwise, starting with the U/D facelet
# which defines the orientation.
CORNER_FACELET: List[List[int]] = [
    _idx('U9', 'R1', 'F3'), _idx('U7', 'F1', 'L3'), _idx('U1', 'L1', 'B3'), _idx('U3', 'B1', 'R3'),
    _idx('D3', 'F9', 'R7'), _idx('D1', 'L9', 'F7'), _idx('D7', 'B9', 'L7'), _idx('D9', 'R9', 'B7'),
]

# Facelets of each edge position; the first one defines the orientation.
EDGE_FACELET: List[List[int]] = [
    _idx('U6', 'R2'), _idx('U8', 'F2'), _idx('U4', 'L2'), _idx('U2', 'B2'),
    _idx('D6', 'R8'), _idx('D2', 'F8'), _idx('D4', 'L8'), _idx('D8', 'B8'),
    _idx('F6', 'R4'), _idx('F4', 'L6'), _idx('B6', 'L4'), _idx('B4', 'R6'),
]

# Colors of each corner / edge piece, in the same facelet order.
CORNER_COLOR: List[List[int]] = [
    [U, R, F], [U, F, L], [U, L, B], [U, B, R],
    [D, F, R], [D, L, F], [D, B, L], [D, R, B],
]

EDGE_COLOR: List[List[int]] = [
    [U, R], [U, F], [U, L], [U, B], [D, R], [D, F],
    [D, L], [D, B], [F, R], [F, L], [B, L], [B, R],
]


def cnk(n: int, k: int) -> int:
    """n choose k"""
    if n < k:
        return 0
    if k > n // 2:
        k = n - k
    s = 1
    i = n
    j = 1
    while i != n - k:
        s *= i
        s //= j
        i -= 1
        j += 1
    return s


class CubieCube:
    """Cube on the cubie level. Defaults to the solved cube."""

    def __init__(self, cp: Optional[Sequence[int]] = None, co: Optional[Sequence[int]] = None,
                 ep: Optional[Sequence[int]] = None, eo: Optional[Sequence[int]] = None):
        self.cp: List[int] = list(cp) if cp is not None else list(range(8))
        self.co: List[int] = list(co) if co is not None else [0] * 8
        self.ep: List[int] = list(ep) if ep is not None else list(range(12))
        self.eo: List[int] = list(eo) if eo is not None else [0] * 12

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CubieCube):
            return NotImplemented
        return (self.cp == other.cp and self.co == other.co
                and self.ep == other.ep and self.eo == other.eo)

    def __repr__(self) -> str:
        return f"CubieCube(cp={self.cp}, co={self.co}, ep={self.ep}, eo={self.eo})"

    def copy(self) -> "CubieCube":
        return CubieCube(self.cp, self.co, self.ep, self.eo)

    # ---------------- facelet conversion ----------------

    @classmethod
    def from_facelets(cls, face_letters: str) -> "CubieCube":
        """
        Build from a 54-char face-letter string (U,R,F,D,L,B order).
        The string is assumed to describe well-formed pieces; use the
        validator first for painted input.
        """
        if len(face_letters) != 54:
            raise ValueError("facelet string must have 54 characters")
        try:
            f = [FACE_ORDER.index(c) for c in face_letters]
        except ValueError:
            raise ValueError(f"facelet string must only contain {''.join(FACE_ORDER)}") from None

        cc = cls()
        for i in range(8):
            # find the U/D sticker, its slot gives the orientation
            for ori in range(3):
                if f[CORNER_FACELET[i][ori]] in (U, D):
                    break
            col1 = f[CORNER_FACELET[i][(ori + 1) % 3]]
            col2 = f[CORNER_FACELET[i][(ori + 2) % 3]]
            for j in range(8):
                if col1 == CORNER_COLOR[j][1] and col2 == CORNER_COLOR[j][2]:
                    cc.cp[i] = j
                    cc.co[i] = ori % 3
                    break

        for i in range(12):
            a = f[EDGE_FACELET[i][0]]
            b = f[EDGE_FACELET[i][1]]
            for j in range(12):
                if a == EDGE_COLOR[j][0] and b == EDGE_COLOR[j][1]:
                    cc.ep[i] = j
                    cc.eo[i] = 0
                    break
                if a == EDGE_COLOR[j][1] and b == EDGE_COLOR[j][0]:
                    cc.ep[i] = j
                    cc.eo[i] = 1
                    break
        return cc

    def to_facelets(self) -> str:
        """Return the 54-char face-letter string of this cube."""
        f = [n // 9 for n in range(54)]
        for i in range(8):
            j = self.cp[i]
            ori = self.co[i]
            for n in range(3):
                f[CORNER_FACELET[i][(n + ori) % 3]] = CORNER_COLOR[j][n]
        for i in range(12):
            j = self.ep[i]
            ori = self.eo[i]
            for n in range(2):
                f[EDGE_FACELET[i][(n + ori) % 2]] = EDGE_COLOR[j][n]
        return ''.join(FACE_ORDER[c] for c in f)

    # ---------------- group operations ----------------

    def corner_multiply(self, b: "CubieCube") -> None:
        """Multiply this cube with b in place, restricted to the corners."""
        c_perm = [self.cp[b.cp[i]] for i in range(8)]
        c_ori = [(self.co[b.cp[i]] + b.co[i]) % 3 for i in range(8)]
        self.cp = c_perm
        self.co = c_ori

    def edge_multiply(self, b: "CubieCube") -> None:
        """Multiply this cube with b in place, restricted to the edges."""
        e_perm = [self.ep[b.ep[i]] for i in range(12)]
        e_ori = [(b.eo[i] + self.eo[b.ep[i]]) % 2 for i in range(12)]
        self.ep = e_perm
        self.eo = e_ori

    def multiply(self, b: "CubieCube") -> None:
        self.corner_multiply(b)
        self.edge_multiply(b)

    def inverse(self) -> "CubieCube":
        c = CubieCube()
        for i in range(12):
            c.ep[self.ep[i]] = i
        for i in range(12):
            c.eo[i] = self.eo[c.ep[i]]
        for i in range(8):
            c.cp[self.cp[i]] = i
        for i in range(8):
            c.co[i] = (-self.co[c.cp[i]]) % 3
        return c

    def move(self, face: int, amount: int = 1) -> None:
        """Apply `amount` clockwise quarter turns of basic move `face` (0..5)."""
        for _ in range(amount % 4):
            self.multiply(MOVE_CUBES[face])

    def is_solved(self) -> bool:
        return self == SOLVED_CUBIE

    # ---------------- phase-1 coordinates ----------------

    def get_twist(self) -> int:
        """Twist of the 8 corners. 0 <= twist < 3^7"""
        ret = 0
        for i in range(URF, DRB):
            ret = 3 * ret + self.co[i]
        return ret

    def set_twist(self, twist: int) -> None:
        twist_parity = 0
        for i in range(DRB - 1, URF - 1, -1):
            self.co[i] = twist % 3
            twist_parity += self.co[i]
            twist //= 3
        self.co[DRB] = (3 - twist_parity % 3) % 3

    def get_flip(self) -> int:
        """Flip of the 12 edges. 0 <= flip < 2^11"""
        ret = 0
        for i in range(UR, BR):
            ret = 2 * ret + self.eo[i]
        return ret

    def set_flip(self, flip: int) -> None:
        flip_parity = 0
        for i in range(BR - 1, UR - 1, -1):
            self.eo[i] = flip % 2
            flip_parity += self.eo[i]
            flip //= 2
        self.eo[BR] = (2 - flip_parity % 2) % 2

    def get_slice(self) -> int:
        """Which 4 positions hold the FR, FL, BL, BR edges. 0 <= slice < 495, 0 when in the slice."""
        a = 0
        x = 0
        for j in range(BR, UR - 1, -1):
            if FR <= self.ep[j] <= BR:
                a += cnk(11 - j, x + 1)
                x += 1
        return a

    def set_slice(self, idx: int) -> None:
        slice_edge = [FR, FL, BL, BR]
        other_edge = [UR, UF, UL, UB, DR, DF, DL, DB]
        a = idx
        for i in range(12):
            self.ep[i] = -1
        x = 3
        for j in range(UR, BR + 1):
            if x >= 0 and a - cnk(11 - j, x + 1) >= 0:
                self.ep[j] = slice_edge[3 - x]
                a -= cnk(11 - j, x + 1)
                x -= 1
        x = 0
        for j in range(UR, BR + 1):
            if self.ep[j] == -1:
                self.ep[j] = other_edge[x]
                x += 1

    # ---------------- parity and verification ----------------

    def corner_parity(self) -> int:
        """Parity of the corner permutation"""
        s = 0
        for i in range(DRB, URF, -1):
            for j in range(i - 1, URF - 1, -1):
                if self.cp[j] > self.cp[i]:
                    s += 1
        return s % 2

    def edge_parity(self) -> int:
        """Parity of the edge permutation. Equal to the corner parity on a solvable cube."""
        s = 0
        for i in range(BR, UR, -1):
            for j in range(i - 1, UR - 1, -1):
                if self.ep[j] > self.ep[i]:
                    s += 1
        return s % 2

    def verify(self) -> int:
        """
        Check a cubiecube for solvability. Return the error code.
        0: Cube is solvable
        -2: Not all 12 edges exist exactly once
        -3: Flip error: One edge has to be flipped
        -4: Not all corners exist exactly once
        -5: Twist error: One corner has to be twisted
        -6: Parity error: Two corners or two edges have to be exchanged
        """
        if sorted(self.ep) != list(range(12)):
            return -2
        if sum(self.eo) % 2 != 0:
            return -3
        if sorted(self.cp) != list(range(8)):
            return -4
        if sum(self.co) % 3 != 0:
            return -5
        if self.edge_parity() != self.corner_parity():
            return -6
        return 0


VERIFY_MESSAGES: Dict[int, str] = {
    0: "Cube OK",
    -2: "Not all 12 edges exist exactly once",
    -3: "Flip error: One edge has to be flipped",
    -4: "Not all corners exist exactly once",
    -5: "Twist error: One corner has to be twisted",
    -6: "Parity error: Two corners or two edges have to be exchanged",
}


def facelet_map(cc: CubieCube) -> List[int]:
    """
    Facelet permutation of the position change described by `cc`.
    mapping[dest] = source index of the sticker that lands on dest.
    """
    mapping = list(range(54))
    for i in range(8):
        j = cc.cp[i]
        ori = cc.co[i]
        for n in range(3):
            mapping[CORNER_FACELET[i][(n + ori) % 3]] = CORNER_FACELET[j][n]
    for i in range(12):
        j = cc.ep[i]
        ori = cc.eo[i]
        for n in range(2):
            mapping[EDGE_FACELET[i][(n + ori) % 2]] = EDGE_FACELET[j][n]
    return mapping


# ************************ Moves on the cubie level ****************************

cpU = [UBR, URF, UFL, ULB, DFR, DLF, DBL, DRB]
coU = [0, 0, 0, 0, 0, 0, 0, 0]
epU = [UB, UR, UF, UL, DR, DF, DL, DB, FR, FL, BL, BR]
eoU = [0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0]

cpR = [DFR, UFL, ULB, URF, DRB, DLF, DBL, UBR]
coR = [2, 0, 0, 1, 1, 0, 0, 2]
epR = [FR, UF, UL, UB, BR, DF, DL, DB, DR, FL, BL, UR]
eoR = [0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0]

cpF = [UFL, DLF, ULB, UBR, URF, DFR, DBL, DRB]
coF = [1, 2, 0, 0, 2, 1, 0, 0]
epF = [UR, FL, UL, UB, DR, FR, DL, DB, UF, DF, BL, BR]
eoF = [0, 1, 0, 0, 0, 1, 0, 0, 1, 1, 0, 0]

cpD = [URF, UFL, ULB, UBR, DLF, DBL, DRB, DFR]
coD = [0, 0, 0, 0, 0, 0, 0, 0]
epD = [UR, UF, UL, UB, DF, DL, DB, DR, FR, FL, BL, BR]
eoD = [0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0]

cpL = [URF, ULB, DBL, UBR, DFR, UFL, DLF, DRB]
coL = [0, 1, 2, 0, 0, 2, 1, 0]
epL = [UR, UF, BL, UB, DR, DF, FL, DB, FR, UL, DL, BR]
eoL = [0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0]

cpB = [URF, UFL, UBR, DRB, DFR, DLF, ULB, DBL]
coB = [0, 0, 1, 2, 0, 0, 2, 1]
epB = [UR, UF, UL, BR, DR, DF, DL, BL, FR, FL, UB, DB]
eoB = [0, 0, 0, 1, 0, 0, 0, 1, 0, 0, 1, 1]

# the 6 basic clockwise quarter turns, indexed like FACE_ORDER
MOVE_CUBES: List[CubieCube] = [
    CubieCube(cp=cpU, co=coU, ep=epU, eo=eoU),
    CubieCube(cp=cpR, co=coR, ep=epR, eo=eoR),
    CubieCube(cp=cpF, co=coF, ep=epF, eo=eoF),
    CubieCube(cp=cpD, co=coD, ep=epD, eo=eoD),
    CubieCube(cp=cpL, co=coL, ep=epL, eo=eoL),
    CubieCube(cp=cpB, co=coB, ep=epB, eo=eoB),
]

SOLVED_CUBIE = CubieCube()
