from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import Dict, Iterable, List

from model import ALL_POSITIONS, Board, Position
from segments import Segment, SegmentIndex


@dataclass(frozen=True)
class CellValidity:
    valid_in_row: bool = True
    valid_in_straight: bool = True

    @property
    def ok(self) -> bool:
        return self.valid_in_row and self.valid_in_straight


@dataclass(frozen=True)
class ValidityResult:
    cells: Dict[Position, CellValidity]
    solved: bool

    def __getitem__(self, pos: Position) -> CellValidity:
        return self.cells[pos]

    def invalid_positions(self) -> List[Position]:
        return [pos for pos in ALL_POSITIONS if not self.cells[pos].ok]


def duplicate_positions(board: Board, line: Iterable[Position]) -> List[Position]:
    """Positions in ``line`` whose digit occurs more than once in it."""
    filled = [(pos, board.get(pos).value) for pos in line if board.get(pos).value]
    counts = Counter(val for _, val in filled)
    return [pos for pos, val in filled if counts[val] > 1]


def straight_ok(board: Board, segment: Segment) -> bool:
    digits = {board.get(pos).value for pos in segment.cells if board.get(pos).value}
    if len(digits) <= 1:
        return True
    return len(digits) == max(digits) - min(digits) + 1


def is_complete(board: Board) -> bool:
    return all(cell.value is not None for _, cell in board if cell.is_white)


def evaluate(board: Board, segment_index: SegmentIndex) -> ValidityResult:
    bad_row = set()
    for line in board.lines():
        bad_row.update(duplicate_positions(board, line))

    bad_straight = set()
    for segment in segment_index:
        if not straight_ok(board, segment):
            bad_straight.update(segment.cells)

    cells = {
        pos: CellValidity(pos not in bad_row, pos not in bad_straight)
        for pos in ALL_POSITIONS
    }
    solved = not bad_row and not bad_straight and is_complete(board)
    return ValidityResult(cells, solved)
