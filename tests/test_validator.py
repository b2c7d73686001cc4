from model import Board, Mode
from segments import rebuild
from storage import board_from_rows
from validator import evaluate

from conftest import BLACK_ROW, BLOCK_SOLUTION


def _evaluate(board):
    return evaluate(board, rebuild(board))


def test_empty_board_is_valid_but_not_solved():
    result = _evaluate(Board.empty())
    assert not result.invalid_positions()
    assert not result.solved


def test_duplicate_in_row_flags_both_cells_and_clears_when_removed():
    board = Board.empty()
    board.set_value((0, 0), 5, Mode.PLAY_VALUES)
    board.set_value((0, 7), 5, Mode.PLAY_VALUES)
    result = _evaluate(board)
    assert not result[(0, 0)].valid_in_row
    assert not result[(0, 7)].valid_in_row
    assert result[(0, 3)].valid_in_row

    board.clear((0, 7), Mode.PLAY_VALUES)
    assert _evaluate(board)[(0, 0)].valid_in_row


def test_duplicate_in_column_uses_same_flag():
    board = Board.empty()
    board.set_value((1, 3), 8, Mode.PLAY_VALUES)
    board.set_value((6, 3), 8, Mode.PLAY_VALUES)
    result = _evaluate(board)
    assert not result[(1, 3)].valid_in_row
    assert not result[(6, 3)].valid_in_row


def test_duplicate_rule_spans_segments():
    board = board_from_rows(["4..#..4.."] + [BLACK_ROW] * 8)
    result = _evaluate(board)
    assert not result[(0, 0)].valid_in_row
    assert not result[(0, 6)].valid_in_row
    assert result[(0, 0)].valid_in_straight
    assert result[(0, 6)].valid_in_straight


def test_straight_with_single_value_is_valid():
    board = board_from_rows(["9...#####"] + [BLACK_ROW] * 8)
    assert all(cell.valid_in_straight for cell in _evaluate(board).cells.values())


def test_straight_with_gap_is_invalid():
    board = board_from_rows(["1.3.#2###"] + [BLACK_ROW] * 8)
    result = _evaluate(board)
    for col in range(4):
        assert not result[(0, col)].valid_in_straight
    assert result[(0, 5)].valid_in_straight


def test_contiguous_straight_in_any_order_is_valid():
    board = board_from_rows(["3.24#####"] + [BLACK_ROW] * 8)
    result = _evaluate(board)
    assert all(result[(0, col)].valid_in_straight for col in range(4))


def test_column_straight_marks_cells():
    rows = ["1########", ".########", "7########"] + [BLACK_ROW] * 6
    result = _evaluate(board_from_rows(rows))
    assert not result[(0, 0)].valid_in_straight
    assert not result[(1, 0)].valid_in_straight


def test_adjacent_fixed_fives_are_flagged():
    board = board_from_rows(["55#######"] + [BLACK_ROW] * 8)
    result = _evaluate(board)
    assert not result[(0, 0)].valid_in_row
    assert not result[(0, 1)].valid_in_row
    assert not result.solved


def test_completed_block_is_solved(block_board):
    for pos, val in BLOCK_SOLUTION.items():
        if not block_board.get(pos).is_fixed:
            block_board.set_value(pos, val, Mode.PLAY_VALUES)
    result = _evaluate(block_board)
    assert result.solved
    assert not result.invalid_positions()


def test_incomplete_board_is_not_solved(block_board):
    result = _evaluate(block_board)
    assert not result.invalid_positions()
    assert not result.solved
