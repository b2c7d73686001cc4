# tests/conftest.py
import sys
from pathlib import Path

import pytest

# Add project root to sys.path so the top-level modules import in tests
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from storage import board_from_rows  # noqa: E402

BLACK_ROW = "#########"

# 3x3 white block, unique completion:
#   1 2 3
#   2 3 4
#   3 4 5
BLOCK_ROWS = ["1..######", "...######", "..5######"] + [BLACK_ROW] * 6
BLOCK_SOLUTION = {
    (0, 0): 1, (0, 1): 2, (0, 2): 3,
    (1, 0): 2, (1, 1): 3, (1, 2): 4,
    (2, 0): 3, (2, 1): 4, (2, 2): 5,
}

# Black anti-diagonal; (r + c) % 9 + 1 fills it.
ANTI_DIAGONAL_ROWS = ["".join("#" if r + c == 8 else "." for c in range(9)) for r in range(9)]


@pytest.fixture
def block_board():
    return board_from_rows(BLOCK_ROWS)


@pytest.fixture
def anti_diagonal_board():
    return board_from_rows(ANTI_DIAGONAL_ROWS)

# Full 9x9 puzzle with 19 black cells and 18 blanks; its only solution is
# (r + c) % 9 + 1 on every white cell.
PUZZLE_ROWS = [
    "#2.4#6.8#",
    "23..6#8#1",
    ".4#6.8#12",
    "45.78#1.3",
    "#6.8#1.3#",
    "6.8#12.45",
    "78#1.3#5.",
    "8#1#3..67",
    "#1.3#5.7#",
]


@pytest.fixture
def puzzle_board():
    return board_from_rows(PUZZLE_ROWS)
