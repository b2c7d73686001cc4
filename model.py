from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, List, Optional, Set, Tuple

Position = Tuple[int, int]

SIZE = 9
DIGITS = range(1, 10)


class Str8tsError(Exception):
    pass


class OutOfBounds(Str8tsError, IndexError):
    pass


class CellLocked(Str8tsError):
    pass


class ModeNotAllowed(Str8tsError):
    pass


class Unsolvable(Str8tsError):
    pass


class PuzzleLoadError(Str8tsError, ValueError):
    pass


class Color(Enum):
    WHITE = "white"
    BLACK = "black"


class Mode(Enum):
    EDIT_COLORS = "edit-colors"
    EDIT_FIXED_VALUES = "edit-fixed-values"
    PLAY_VALUES = "play-values"
    PLAY_CANDIDATES = "play-candidates"

    @property
    def is_edit(self) -> bool:
        return self in (Mode.EDIT_COLORS, Mode.EDIT_FIXED_VALUES)


ALL_POSITIONS: List[Position] = [(r, c) for r in range(SIZE) for c in range(SIZE)]


def check_position(pos: Position) -> Position:
    try:
        row, col = pos
    except (TypeError, ValueError):
        raise OutOfBounds(f"Not a board position: {pos!r}") from None
    if not (
        isinstance(row, int) and isinstance(col, int) and 0 <= row < SIZE and 0 <= col < SIZE
    ):
        raise OutOfBounds(f"Position {pos!r} is outside the 9x9 board")
    return row, col


def position_of(index: int) -> Position:
    """Map a row-major cell index (0-80) to its (row, col) position."""
    if not isinstance(index, int) or not 0 <= index < SIZE * SIZE:
        raise OutOfBounds(f"Cell index {index!r} is outside the 9x9 board")
    return divmod(index, SIZE)


def _check_digit(digit: int) -> int:
    if isinstance(digit, bool) or not isinstance(digit, int) or digit not in DIGITS:
        raise ValueError(f"Digit must be 1-9, got {digit!r}")
    return digit


@dataclass
class Cell:
    color: Color = Color.WHITE
    value: Optional[int] = None
    is_fixed: bool = False
    candidates: Set[int] = field(default_factory=set)

    @property
    def is_white(self) -> bool:
        return self.color is Color.WHITE

    def copy(self) -> "Cell":
        return Cell(self.color, self.value, self.is_fixed, set(self.candidates))


class Board:
    def __init__(self, cells: Optional[Dict[Position, Cell]] = None) -> None:
        self._cells: Dict[Position, Cell] = {pos: Cell() for pos in ALL_POSITIONS}
        if cells:
            for pos, cell in cells.items():
                self._cells[check_position(pos)] = cell

    @classmethod
    def empty(cls) -> "Board":
        return cls()

    def get(self, pos: Position) -> Cell:
        return self._cells[check_position(pos)]

    def __iter__(self) -> Iterator[Tuple[Position, Cell]]:
        for pos in ALL_POSITIONS:
            yield pos, self._cells[pos]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Board):
            return NotImplemented
        return self._cells == other._cells

    def copy(self) -> "Board":
        return Board({pos: cell.copy() for pos, cell in self._cells.items()})

    def white_positions(self) -> List[Position]:
        return [pos for pos in ALL_POSITIONS if self._cells[pos].is_white]

    def row(self, index: int) -> List[Position]:
        return [(index, c) for c in range(SIZE)]

    def column(self, index: int) -> List[Position]:
        return [(r, index) for r in range(SIZE)]

    def lines(self) -> Iterator[List[Position]]:
        for i in range(SIZE):
            yield self.row(i)
        for i in range(SIZE):
            yield self.column(i)

    def _editable(self, pos: Position, mode: Mode) -> Cell:
        cell = self.get(pos)
        if not cell.is_white:
            raise CellLocked(f"r{pos[0]+1}c{pos[1]+1} is black and takes no digits")
        if cell.is_fixed and not mode.is_edit:
            raise CellLocked(f"r{pos[0]+1}c{pos[1]+1} is a clue")
        return cell

    def set_value(self, pos: Position, value: Optional[int], mode: Mode) -> None:
        if mode not in (Mode.PLAY_VALUES, Mode.EDIT_FIXED_VALUES):
            raise ModeNotAllowed(f"Cannot set values in {mode.value} mode")
        if value is not None:
            _check_digit(value)
        cell = self._editable(pos, mode)
        cell.value = value
        cell.candidates.clear()
        if mode is Mode.EDIT_FIXED_VALUES:
            cell.is_fixed = value is not None

    def toggle_candidate(self, pos: Position, digit: int, mode: Mode) -> None:
        if mode is not Mode.PLAY_CANDIDATES:
            raise ModeNotAllowed(f"Cannot edit candidates in {mode.value} mode")
        _check_digit(digit)
        cell = self._editable(pos, mode)
        if digit in cell.candidates:
            cell.candidates.remove(digit)
        else:
            cell.candidates.add(digit)

    def set_color(self, pos: Position, color: Color, mode: Mode) -> bool:
        if mode is not Mode.EDIT_COLORS:
            raise ModeNotAllowed(f"Cannot change colors in {mode.value} mode")
        cell = self.get(pos)
        if cell.color is color:
            return False
        cell.color = color
        cell.value = None
        cell.is_fixed = False
        cell.candidates.clear()
        return True

    def clear(self, pos: Position, mode: Mode) -> bool:
        cell = self.get(pos)
        if not cell.is_white:
            return False
        if cell.is_fixed and not mode.is_edit:
            raise CellLocked(f"r{pos[0]+1}c{pos[1]+1} is a clue")
        if cell.value is None and not cell.candidates:
            return False
        cell.value = None
        cell.candidates.clear()
        cell.is_fixed = False
        return True

    def reset_entries(self) -> None:
        for cell in self._cells.values():
            if cell.is_fixed:
                continue
            cell.value = None
            cell.candidates.clear()

    def values(self) -> Dict[Position, int]:
        return {
            pos: cell.value for pos, cell in self._cells.items() if cell.value is not None
        }
