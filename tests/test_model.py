import pytest

from model import (
    Board,
    CellLocked,
    Color,
    Mode,
    ModeNotAllowed,
    OutOfBounds,
    position_of,
)


def test_empty_board_has_81_white_cells():
    board = Board.empty()
    cells = list(board)
    assert len(cells) == 81
    assert len({pos for pos, _ in cells}) == 81
    assert all(cell.is_white and cell.value is None for _, cell in cells)


@pytest.mark.parametrize("pos", [(-1, 0), (0, 9), (9, 9), (1,), "a1", (0.5, 1)])
def test_out_of_range_positions_fail_fast(pos):
    with pytest.raises(OutOfBounds):
        Board.empty().get(pos)


def test_position_of_index():
    assert position_of(0) == (0, 0)
    assert position_of(80) == (8, 8)
    assert position_of(10) == (1, 1)
    with pytest.raises(OutOfBounds):
        position_of(81)


def test_set_value_clears_candidates():
    board = Board.empty()
    board.toggle_candidate((0, 0), 3, Mode.PLAY_CANDIDATES)
    board.toggle_candidate((0, 0), 4, Mode.PLAY_CANDIDATES)
    assert board.get((0, 0)).candidates == {3, 4}
    board.set_value((0, 0), 7, Mode.PLAY_VALUES)
    assert board.get((0, 0)).value == 7
    assert board.get((0, 0)).candidates == set()


def test_toggle_candidate_twice_removes_it():
    board = Board.empty()
    board.toggle_candidate((2, 2), 5, Mode.PLAY_CANDIDATES)
    board.toggle_candidate((2, 2), 5, Mode.PLAY_CANDIDATES)
    assert board.get((2, 2)).candidates == set()


def test_fixed_cell_is_locked_in_play_mode():
    board = Board.empty()
    board.set_value((4, 4), 5, Mode.EDIT_FIXED_VALUES)
    assert board.get((4, 4)).is_fixed
    with pytest.raises(CellLocked):
        board.set_value((4, 4), 6, Mode.PLAY_VALUES)
    with pytest.raises(CellLocked):
        board.toggle_candidate((4, 4), 6, Mode.PLAY_CANDIDATES)
    with pytest.raises(CellLocked):
        board.clear((4, 4), Mode.PLAY_VALUES)
    assert board.get((4, 4)).value == 5


def test_fixed_cell_editable_in_edit_mode():
    board = Board.empty()
    board.set_value((4, 4), 5, Mode.EDIT_FIXED_VALUES)
    board.set_value((4, 4), 6, Mode.EDIT_FIXED_VALUES)
    assert board.get((4, 4)).value == 6
    board.set_value((4, 4), None, Mode.EDIT_FIXED_VALUES)
    assert not board.get((4, 4)).is_fixed


def test_black_cells_take_no_digits():
    board = Board.empty()
    board.set_color((0, 0), Color.BLACK, Mode.EDIT_COLORS)
    with pytest.raises(CellLocked):
        board.set_value((0, 0), 1, Mode.EDIT_FIXED_VALUES)


def test_set_color_only_in_edit_colors_mode():
    board = Board.empty()
    with pytest.raises(ModeNotAllowed):
        board.set_color((0, 0), Color.BLACK, Mode.PLAY_VALUES)


def test_color_change_clears_entries():
    board = Board.empty()
    board.set_value((1, 1), 4, Mode.EDIT_FIXED_VALUES)
    assert board.set_color((1, 1), Color.BLACK, Mode.EDIT_COLORS)
    cell = board.get((1, 1))
    assert cell.value is None and not cell.is_fixed and not cell.candidates
    assert not board.set_color((1, 1), Color.BLACK, Mode.EDIT_COLORS)


@pytest.mark.parametrize("digit", [0, 10, True])
def test_digits_outside_range_are_rejected(digit):
    with pytest.raises(ValueError):
        Board.empty().set_value((0, 0), digit, Mode.PLAY_VALUES)


def test_reset_entries_keeps_clues():
    board = Board.empty()
    board.set_value((0, 0), 1, Mode.EDIT_FIXED_VALUES)
    board.set_value((0, 1), 2, Mode.PLAY_VALUES)
    board.toggle_candidate((0, 2), 3, Mode.PLAY_CANDIDATES)
    board.reset_entries()
    assert board.get((0, 0)).value == 1
    assert board.get((0, 1)).value is None
    assert board.get((0, 2)).candidates == set()


def test_copy_is_independent():
    board = Board.empty()
    snapshot = board.copy()
    board.set_value((0, 0), 1, Mode.PLAY_VALUES)
    assert snapshot.get((0, 0)).value is None
    assert snapshot != board


def test_clear_reports_whether_anything_changed():
    board = Board.empty()
    assert not board.clear((0, 0), Mode.PLAY_VALUES)
    board.set_value((0, 0), 3, Mode.PLAY_VALUES)
    assert board.clear((0, 0), Mode.PLAY_VALUES)
    assert board.get((0, 0)).value is None
    board.toggle_candidate((0, 0), 5, Mode.PLAY_CANDIDATES)
    assert board.clear((0, 0), Mode.PLAY_CANDIDATES)
    assert not board.get((0, 0)).candidates
    board.set_color((1, 1), Color.BLACK, Mode.EDIT_COLORS)
    assert not board.clear((1, 1), Mode.EDIT_FIXED_VALUES)
