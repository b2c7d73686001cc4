from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Set, Tuple

from model import Board, Position
from segments import SegmentIndex

Candidates = Dict[Position, Set[int]]


def value_of(candidates: Candidates, cell: Position) -> int:
    """Return assigned value if the cell is fixed to a single digit, else 0."""
    vals = candidates[cell]
    return next(iter(vals)) if len(vals) == 1 else 0


def ensure_non_empty(candidates: Candidates, cell: Position) -> bool:
    return len(candidates[cell]) > 0


class Constraint:
    name: str = "constraint"

    def propagate(self, candidates: Candidates) -> Tuple[bool, bool]:
        """Returns (changed, ok)."""
        raise NotImplementedError

    def is_satisfied(self, assignment: Dict[Position, int]) -> bool:
        """Return True if the fully assigned grid satisfies the constraint."""
        raise NotImplementedError


@dataclass
class AllDifferentConstraint(Constraint):
    cells: Sequence[Position]
    name: str = "all-different"

    def propagate(self, candidates: Candidates) -> Tuple[bool, bool]:
        changed = False
        assigned = {
            cell: value_of(candidates, cell)
            for cell in self.cells
            if value_of(candidates, cell)
        }
        seen: Dict[int, Position] = {}
        for cell, val in assigned.items():
            if val in seen:
                return changed, False
            seen[val] = cell
        for cell in self.cells:
            if cell in assigned:
                continue
            removed = candidates[cell] & set(seen)
            if removed:
                candidates[cell] -= removed
                changed = True
                if not ensure_non_empty(candidates, cell):
                    return changed, False
        if len(self.cells) < 9:
            return changed, True
        # A full line holds every digit: a digit with one home goes there.
        for val in range(1, 10):
            if val in seen:
                continue
            homes = [cell for cell in self.cells if val in candidates[cell]]
            if not homes:
                return changed, False
            if len(homes) == 1 and candidates[homes[0]] != {val}:
                candidates[homes[0]] = {val}
                changed = True
        return changed, True

    def is_satisfied(self, assignment: Dict[Position, int]) -> bool:
        vals = [assignment[cell] for cell in self.cells]
        return len(vals) == len(set(vals))


def _has_matching(cells: Sequence[Position], digits: Set[int], candidates: Candidates) -> bool:
    """Whether every cell can take a distinct digit out of ``digits``."""
    owner: Dict[int, Position] = {}

    def augment(cell: Position, visited: Set[int]) -> bool:
        for val in candidates[cell] & digits:
            if val in visited:
                continue
            visited.add(val)
            if val not in owner or augment(owner[val], visited):
                owner[val] = cell
                return True
        return False

    return all(augment(cell, set()) for cell in cells)


def _disjoint_choice(
    windows: Sequence[List[Set[int]]], start: int, start_window: int
) -> Optional[List[int]]:
    """Pick one window per run, run ``start`` taking ``start_window``, with no
    digit shared between runs. Returns the window indices or None."""
    choice = [0] * len(windows)
    choice[start] = start_window
    order = sorted(
        (i for i in range(len(windows)) if i != start), key=lambda i: len(windows[i])
    )

    def dfs(k: int, used: Set[int]) -> bool:
        if k == len(order):
            return True
        i = order[k]
        for wi, digits in enumerate(windows[i]):
            if used & digits:
                continue
            choice[i] = wi
            if dfs(k + 1, used | digits):
                return True
        return False

    return choice if dfs(0, set(windows[start][start_window])) else None


@dataclass
class StraightConstraint(Constraint):
    """The white runs of one row or column.

    Every run holds consecutive digits, and runs of the same line never share
    a digit, so each run takes a window of consecutive values disjoint from
    the windows of the other runs.
    """

    segments: Sequence[Sequence[Position]]
    name: str = "straight"

    @staticmethod
    def feasible_windows(cells: Sequence[Position], candidates: Candidates) -> List[Set[int]]:
        length = len(cells)
        windows = []
        for start in range(1, 11 - length):
            digits = set(range(start, start + length))
            if _has_matching(cells, digits, candidates):
                windows.append(digits)
        return windows

    def propagate(self, candidates: Candidates) -> Tuple[bool, bool]:
        changed = False
        windows = [self.feasible_windows(seg, candidates) for seg in self.segments]
        if not all(windows):
            return changed, False
        usable: List[Set[int]] = [set() for _ in windows]
        for i, options in enumerate(windows):
            for wi in range(len(options)):
                if wi in usable[i]:
                    continue
                choice = _disjoint_choice(windows, i, wi)
                if choice is None:
                    continue
                for j, wj in enumerate(choice):
                    usable[j].add(wj)
            if not usable[i]:
                return changed, False

        for seg, options, picks in zip(self.segments, windows, usable):
            picked = [options[wi] for wi in picks]
            allowed = set().union(*picked)
            for cell in seg:
                new_vals = candidates[cell] & allowed
                if not new_vals:
                    return True, False
                if new_vals != candidates[cell]:
                    candidates[cell] = new_vals
                    changed = True
            # Digits in every usable window must sit in this run.
            for val in set.intersection(*picked):
                homes = [cell for cell in seg if val in candidates[cell]]
                if not homes:
                    return True, False
                if len(homes) == 1 and candidates[homes[0]] != {val}:
                    candidates[homes[0]] = {val}
                    changed = True
        return changed, True

    def is_satisfied(self, assignment: Dict[Position, int]) -> bool:
        seen: Set[int] = set()
        for seg in self.segments:
            vals = sorted(assignment[cell] for cell in seg)
            if vals != list(range(vals[0], vals[0] + len(vals))) or seen & set(vals):
                return False
            seen.update(vals)
        return True


def build_line_constraints(board: Board) -> List[AllDifferentConstraint]:
    constraints = []
    for line in board.lines():
        whites = [pos for pos in line if board.get(pos).is_white]
        if len(whites) > 1:
            constraints.append(AllDifferentConstraint(whites))
    return constraints


def build_straight_constraints(index: SegmentIndex) -> List[StraightConstraint]:
    lines: Dict[Tuple[str, int], List[List[Position]]] = {}
    for seg in index:
        lines.setdefault((seg.axis, seg.line), []).append(list(seg.cells))
    return [
        StraightConstraint(segments)
        for segments in lines.values()
        if sum(len(cells) for cells in segments) > 1
    ]


def possible_straight_values(
    segment_cells: Sequence[Position],
    cell: Position,
    digits: Dict[Position, int],
    allowed: Optional[Set[int]] = None,
) -> Set[int]:
    """Digits for ``cell`` that keep the filled part of a segment within
    a window as long as the segment."""
    allowed = set(range(1, 10)) if allowed is None else set(allowed)
    placed = [digits[pos] for pos in segment_cells if pos != cell and pos in digits]
    if not placed:
        return allowed
    lo, hi = min(placed), max(placed)
    length = len(segment_cells)
    return {val for val in allowed if max(hi, val) - min(lo, val) < length}
