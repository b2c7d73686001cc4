from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Tuple

from model import SIZE, Board, Position, check_position


@dataclass(frozen=True)
class Segment:
    """A maximal run of white cells in one row ("row") or column ("col")."""

    axis: str
    line: int
    cells: Tuple[Position, ...]

    def __len__(self) -> int:
        return len(self.cells)

    def __contains__(self, pos: object) -> bool:
        return pos in self.cells

    @property
    def has_straight_rule(self) -> bool:
        return len(self.cells) > 1


@dataclass(frozen=True)
class SegmentIndex:
    row_segments: Tuple[Segment, ...]
    col_segments: Tuple[Segment, ...]

    def __post_init__(self) -> None:
        by_row: Dict[Position, Segment] = {}
        by_col: Dict[Position, Segment] = {}
        for seg in self.row_segments:
            for pos in seg.cells:
                by_row[pos] = seg
        for seg in self.col_segments:
            for pos in seg.cells:
                by_col[pos] = seg
        object.__setattr__(self, "_by_row", by_row)
        object.__setattr__(self, "_by_col", by_col)

    def __iter__(self) -> Iterator[Segment]:
        yield from self.row_segments
        yield from self.col_segments

    def __len__(self) -> int:
        return len(self.row_segments) + len(self.col_segments)

    def row_segment(self, pos: Position) -> Optional[Segment]:
        return self._by_row.get(check_position(pos))

    def column_segment(self, pos: Position) -> Optional[Segment]:
        return self._by_col.get(check_position(pos))

    def segments_of(self, pos: Position) -> List[Segment]:
        return [
            seg
            for seg in (self.row_segment(pos), self.column_segment(pos))
            if seg is not None
        ]


def _scan(board: Board, axis: str, line: int, positions: List[Position]) -> List[Segment]:
    segments: List[Segment] = []
    run: List[Position] = []
    for pos in positions:
        if board.get(pos).is_white:
            run.append(pos)
            continue
        if run:
            segments.append(Segment(axis, line, tuple(run)))
            run = []
    if run:
        segments.append(Segment(axis, line, tuple(run)))
    return segments


def rebuild(board: Board) -> SegmentIndex:
    rows: List[Segment] = []
    cols: List[Segment] = []
    for i in range(SIZE):
        rows.extend(_scan(board, "row", i, board.row(i)))
        cols.extend(_scan(board, "col", i, board.column(i)))
    return SegmentIndex(tuple(rows), tuple(cols))
