from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Set

from constraints import (
    Candidates,
    Constraint,
    build_line_constraints,
    build_straight_constraints,
    possible_straight_values,
    value_of,
)
from model import Board, Position, Unsolvable
from segments import SegmentIndex, rebuild
from validator import duplicate_positions

Solution = Dict[Position, int]

PROGRESS_INTERVAL_S = 60


class SolveCancelled(Exception):
    pass


@dataclass
class SolverResult:
    status: str
    solution: Optional[Board]
    duration_ms: int
    solutions_found: int = 0
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.solution is not None


class Str8tsSolver:
    def __init__(
        self,
        board: Board,
        segment_index: Optional[SegmentIndex] = None,
        logger: Optional[Callable[[str], None]] = None,
    ) -> None:
        self.board = board.copy()
        self.segment_index = segment_index or rebuild(self.board)
        self.logger = logger

    def _base_constraints(self) -> List[Constraint]:
        constraints: List[Constraint] = []
        constraints.extend(build_line_constraints(self.board))
        constraints.extend(build_straight_constraints(self.segment_index))
        return constraints

    def _givens_conflict(self) -> bool:
        return any(duplicate_positions(self.board, line) for line in self.board.lines())

    def _initial_candidates(
        self, constraints: List[Constraint]
    ) -> Optional[Candidates]:
        candidates: Candidates = {}
        for pos in self.board.white_positions():
            val = self.board.get(pos).value
            candidates[pos] = {val} if val else set(range(1, 10))
        ok = self._propagate(candidates, constraints)
        return candidates if ok else None

    def _propagate(self, candidates: Candidates, constraints: List[Constraint]) -> bool:
        while True:
            changed_any = False
            for constraint in constraints:
                changed, ok = constraint.propagate(candidates)
                if not ok:
                    return False
                changed_any = changed_any or changed
            if not changed_any:
                break
        return all(candidates.values())

    def _is_complete(self, candidates: Candidates) -> bool:
        return all(len(vals) == 1 for vals in candidates.values())

    def _search(
        self,
        candidates: Candidates,
        constraints: List[Constraint],
        max_solutions: int,
        solutions: List[Solution],
        start_time: float,
        last_report: List[float],
        cancel: Optional[threading.Event],
    ) -> None:
        if cancel is not None and cancel.is_set():
            raise SolveCancelled()
        now = time.time()
        if now - last_report[0] >= PROGRESS_INTERVAL_S:
            filled = sum(1 for v in candidates.values() if len(v) == 1)
            print(
                f"[solver] {int(now - start_time)}s elapsed; filled {filled}/{len(candidates)} cells; solutions found {len(solutions)}"
            )
            last_report[0] = now
        if self._is_complete(candidates):
            assignment = {pos: value_of(candidates, pos) for pos in candidates}
            if all(c.is_satisfied(assignment) for c in constraints):
                solutions.append(assignment)
            return
        cell = min(
            (cell for cell in candidates if len(candidates[cell]) > 1),
            key=lambda c: len(candidates[c]),
        )
        for val in sorted(candidates[cell]):
            new_cands = {k: set(v) for k, v in candidates.items()}
            new_cands[cell] = {val}
            if not self._propagate(new_cands, constraints):
                if self.logger:
                    self.logger(f"Backtrack: r{cell[0]+1}c{cell[1]+1} != {val}")
                continue
            if self.logger:
                self.logger(f"Guess: r{cell[0]+1}c{cell[1]+1} = {val}")
            self._search(
                new_cands,
                constraints,
                max_solutions,
                solutions,
                start_time,
                last_report,
                cancel,
            )
            if len(solutions) >= max_solutions:
                return

    def _to_board(self, solution: Solution) -> Board:
        board = self.board.copy()
        for pos, val in solution.items():
            cell = board.get(pos)
            cell.value = val
            cell.candidates.clear()
        return board

    def solve(
        self,
        require_uniqueness: bool = False,
        cancel: Optional[threading.Event] = None,
    ) -> SolverResult:
        start = time.time()

        def elapsed() -> int:
            return int((time.time() - start) * 1000)

        if self._givens_conflict():
            return SolverResult(
                status="no-solution",
                solution=None,
                duration_ms=elapsed(),
                message="Clues contradict each other.",
            )
        constraints = self._base_constraints()
        candidates = self._initial_candidates(constraints)
        if candidates is None:
            return SolverResult(
                status="no-solution",
                solution=None,
                duration_ms=elapsed(),
                message="Contradiction in givens.",
            )
        solutions: List[Solution] = []
        max_solutions = 2 if require_uniqueness else 1
        last_report = [start]
        print("[solver] solve start")
        try:
            self._search(
                candidates,
                constraints,
                max_solutions,
                solutions,
                start,
                last_report,
                cancel,
            )
        except SolveCancelled:
            print(f"[solver] solve cancelled after {elapsed()} ms")
            return SolverResult(
                status="cancelled",
                solution=None,
                duration_ms=elapsed(),
                solutions_found=len(solutions),
                message="Solve cancelled.",
            )
        duration_ms = elapsed()
        print(
            f"[solver] solve end in {duration_ms} ms; solutions found {len(solutions)}"
        )
        if not solutions:
            return SolverResult(
                status="no-solution",
                solution=None,
                duration_ms=duration_ms,
                solutions_found=0,
                message="No solution found.",
            )
        if require_uniqueness and len(solutions) > 1:
            return SolverResult(
                status="multiple",
                solution=self._to_board(solutions[0]),
                duration_ms=duration_ms,
                solutions_found=len(solutions),
                message="Multiple solutions exist.",
            )
        return SolverResult(
            status="solved",
            solution=self._to_board(solutions[0]),
            duration_ms=duration_ms,
            solutions_found=len(solutions),
            message="Solved successfully.",
        )


def solve(board: Board, segment_index: Optional[SegmentIndex] = None) -> Board:
    result = Str8tsSolver(board, segment_index).solve()
    if not result.ok:
        raise Unsolvable(result.message)
    return result.solution


def possible_values(board: Board, segment_index: SegmentIndex, pos: Position) -> Set[int]:
    """Digits a white cell may hold given the digits already on the board."""
    cell = board.get(pos)
    if not cell.is_white:
        return set()
    digits = {p: v for p, v in board.values().items() if p != pos}
    used = {digits[p] for p in board.row(pos[0]) + board.column(pos[1]) if p in digits}
    allowed = set(range(1, 10)) - used
    for seg in segment_index.segments_of(pos):
        allowed = possible_straight_values(seg.cells, pos, digits, allowed)
    return allowed
