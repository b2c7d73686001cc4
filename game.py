from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple, Union

from model import (
    ALL_POSITIONS,
    Board,
    CellLocked,
    Color,
    Mode,
    Position,
    Unsolvable,
    check_position,
    position_of,
)
from segments import SegmentIndex, rebuild
from solver import SolverResult, Str8tsSolver, possible_values
from storage import load_board, save_board
from validator import ValidityResult, evaluate

CLEAR_KEYS = {"BackSpace", "Delete", "\b", "\x7f"}
COLOR_TOGGLE_KEYS = {"space", " "}


@dataclass(frozen=True)
class CellView:
    position: Position
    value: Optional[int]
    candidates: Tuple[bool, ...]
    color: Color
    is_fixed: bool
    has_focus: bool
    valid_in_row: bool
    valid_in_straight: bool

    @property
    def index(self) -> int:
        return 9 * self.position[0] + self.position[1]


@dataclass(frozen=True)
class SolveTicket:
    board: Board
    generation: int


def _digit(key: str) -> Optional[int]:
    if len(key) == 1 and key in "123456789":
        return int(key)
    return None


def _position(pos: Union[Position, int]) -> Position:
    """Accept either a (row, col) pair or a row-major cell index."""
    if isinstance(pos, int) and not isinstance(pos, bool):
        return position_of(pos)
    return check_position(pos)


class Str8tsGame:
    """Routes user intents to the board and keeps the validity read model current.

    One intent is handled completely (mutation, segment rebuild, validation)
    before the call returns.
    """

    def __init__(self, board: Optional[Board] = None, mode: Mode = Mode.PLAY_VALUES) -> None:
        self.mode = mode
        self.focused: Optional[Position] = None
        self._just_solved = False
        self.generation = 0
        self._replace_board(board or Board.empty())

    def _replace_board(self, board: Board) -> None:
        self.board = board
        self.focused = None
        self.segments: SegmentIndex = rebuild(board)
        self.validity: ValidityResult = evaluate(board, self.segments)
        self._just_solved = False
        self.generation += 1

    def _after_mutation(self, colors_changed: bool = False) -> None:
        self.generation += 1
        self._just_solved = False
        was_solved = self.validity.solved
        if colors_changed:
            self.segments = rebuild(self.board)
        self.validity = evaluate(self.board, self.segments)
        if self.validity.solved and not was_solved:
            self._just_solved = True

    @property
    def solved(self) -> bool:
        return self.validity.solved

    @property
    def just_solved(self) -> bool:
        return self._just_solved

    def consume_just_solved(self) -> bool:
        pulse = self._just_solved
        self._just_solved = False
        return pulse

    def set_mode(self, mode: Union[Mode, str]) -> None:
        self.mode = mode if isinstance(mode, Mode) else Mode(mode)

    def cell_clicked(self, pos: Union[Position, int]) -> None:
        self.focused = _position(pos)

    def key_pressed(self, pos: Union[Position, int], key: str) -> bool:
        """Apply a key to the focused cell; returns whether the board changed."""
        pos = _position(pos)
        if pos != self.focused:
            return False
        try:
            if self.mode is Mode.EDIT_COLORS:
                if key not in COLOR_TOGGLE_KEYS:
                    return False
                cell = self.board.get(pos)
                new_color = Color.BLACK if cell.is_white else Color.WHITE
                self._after_mutation(self.board.set_color(pos, new_color, self.mode))
                return True
            if key in CLEAR_KEYS:
                if not self.board.clear(pos, self.mode):
                    return False
            else:
                digit = _digit(key)
                if digit is None:
                    return False
                if self.mode is Mode.PLAY_CANDIDATES:
                    self.board.toggle_candidate(pos, digit, self.mode)
                else:
                    self.board.set_value(pos, digit, self.mode)
        except CellLocked:
            return False
        self._after_mutation()
        return True

    def reset(self) -> None:
        self.board.reset_entries()
        self.focused = None
        self._after_mutation()

    def new_game(self) -> None:
        self._replace_board(Board.empty())

    def fill_candidates(self) -> None:
        for pos in self.board.white_positions():
            cell = self.board.get(pos)
            if cell.is_fixed or cell.value is not None:
                continue
            cell.candidates = possible_values(self.board, self.segments, pos)
        self._after_mutation()

    def begin_solve(self) -> SolveTicket:
        return SolveTicket(self.board.copy(), self.generation)

    def finish_solve(self, ticket: SolveTicket, result: SolverResult) -> bool:
        """Apply a solve started with ``begin_solve``.

        Returns False when the board changed in the meantime and the result
        was discarded. Raises Unsolvable when the solver found no solution.
        """
        if ticket.generation != self.generation:
            print("[game] discarding stale solve result")
            return False
        if not result.ok:
            raise Unsolvable(result.message)
        for pos in self.board.white_positions():
            cell = self.board.get(pos)
            if cell.is_fixed:
                continue
            cell.value = result.solution.get(pos).value
            cell.candidates.clear()
        self._after_mutation()
        self._just_solved = self.validity.solved
        return True

    def solve_puzzle(self) -> SolverResult:
        ticket = self.begin_solve()
        result = Str8tsSolver(ticket.board, self.segments).solve()
        self.finish_solve(ticket, result)
        return result

    def save_game(self, path: str) -> None:
        save_board(self.board, path)
        print(f"[game] saved puzzle to {path}")

    def load_game(self, path: str) -> None:
        board = load_board(path)
        self._replace_board(board)
        print(f"[game] loaded puzzle from {path}")

    def cells(self) -> List[CellView]:
        views = []
        for pos in ALL_POSITIONS:
            cell = self.board.get(pos)
            flags = self.validity[pos]
            views.append(
                CellView(
                    position=pos,
                    value=cell.value,
                    candidates=tuple(d in cell.candidates for d in range(1, 10)),
                    color=cell.color,
                    is_fixed=cell.is_fixed,
                    has_focus=pos == self.focused,
                    valid_in_row=flags.valid_in_row,
                    valid_in_straight=flags.valid_in_straight,
                )
            )
        return views
