"""Move-sequence canonicalization."""

from __future__ import annotations

import logging
from typing import List

from .cube_types import Move, MoveSeq, format_moves, parse_moves

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())


class MoveOptimizer:
    """Merges adjacent turns of the same face; turns that add up to a full rotation vanish."""

    def optimize(self, moves: MoveSeq) -> List[Move]:
        # A stack gives the fixed point in one pass: after a cancellation the
        # new neighbours are compared again.
        out: List[Move] = []
        for mv in parse_moves(moves):
            if out and out[-1].face == mv.face:
                amount = (out[-1].amount + mv.amount) % 4
                out.pop()
                if amount:
                    out.append(Move(mv.face, amount))
            else:
                out.append(mv)
        return out

    def optimize_text(self, moves: MoveSeq) -> str:
        return format_moves(self.optimize(moves))
