from __future__ import annotations

import json
from typing import Any, Dict, List

from model import ALL_POSITIONS, Board, Cell, Color, PuzzleLoadError

SAVE_FORMAT_VERSION = 1


def serialize_board(board: Board) -> Dict[str, Any]:
    return {
        "version": SAVE_FORMAT_VERSION,
        "cells": [
            {
                "row": pos[0],
                "col": pos[1],
                "color": cell.color.value,
                "fixed": cell.is_fixed,
                "value": cell.value,
            }
            for pos, cell in board
        ],
    }


def _int_field(record: Dict[str, Any], key: str, lo: int, hi: int) -> int:
    val = record.get(key)
    if isinstance(val, bool) or not isinstance(val, int) or not lo <= val <= hi:
        raise PuzzleLoadError(f"Invalid {key!r} in cell record: {record!r}")
    return val


def deserialize_board(data: Any) -> Board:
    """Build a Board from saved data; raises PuzzleLoadError on anything malformed."""
    if not isinstance(data, dict):
        raise PuzzleLoadError("Save data must be a JSON object")
    if data.get("version") != SAVE_FORMAT_VERSION:
        raise PuzzleLoadError(f"Unsupported save version: {data.get('version')!r}")
    records = data.get("cells")
    if not isinstance(records, list) or len(records) != len(ALL_POSITIONS):
        raise PuzzleLoadError("Save data must hold exactly 81 cell records")

    cells = {}
    for record in records:
        if not isinstance(record, dict):
            raise PuzzleLoadError(f"Invalid cell record: {record!r}")
        pos = (_int_field(record, "row", 0, 8), _int_field(record, "col", 0, 8))
        if pos in cells:
            raise PuzzleLoadError(f"Duplicate cell record for r{pos[0]+1}c{pos[1]+1}")
        try:
            color = Color(record.get("color"))
        except ValueError:
            raise PuzzleLoadError(f"Invalid color in cell record: {record!r}") from None
        fixed = record.get("fixed", False)
        if not isinstance(fixed, bool):
            raise PuzzleLoadError(f"Invalid 'fixed' in cell record: {record!r}")
        value = None
        if record.get("value") is not None:
            value = _int_field(record, "value", 1, 9)
        if color is Color.BLACK and (value is not None or fixed):
            raise PuzzleLoadError(f"Black cell r{pos[0]+1}c{pos[1]+1} carries a digit")
        if fixed and value is None:
            raise PuzzleLoadError(f"Clue r{pos[0]+1}c{pos[1]+1} has no value")
        cells[pos] = Cell(color=color, value=value, is_fixed=fixed)
    return Board(cells)


def save_board(board: Board, path: str) -> None:
    with open(path, "w") as f:
        json.dump(serialize_board(board), f, indent=2)


def load_board(path: str) -> Board:
    try:
        with open(path, "r") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise PuzzleLoadError(f"Failed to read {path}: {e}") from e
    return deserialize_board(data)


def board_from_rows(rows: List[str]) -> Board:
    """Build a board from 9 strings of 9 characters.

    ``#`` is an empty black cell, ``.`` an empty white cell, a digit a white
    clue. Used for fixtures and quick puzzle entry.
    """
    if len(rows) != 9 or any(len(row) != 9 for row in rows):
        raise PuzzleLoadError("Expected 9 rows of 9 characters")
    cells = {}
    for r, row in enumerate(rows):
        for c, ch in enumerate(row):
            if ch == "#":
                cells[(r, c)] = Cell(color=Color.BLACK)
            elif ch == ".":
                cells[(r, c)] = Cell()
            elif ch.isdigit() and ch != "0":
                cells[(r, c)] = Cell(value=int(ch), is_fixed=True)
            else:
                raise PuzzleLoadError(f"Unexpected character {ch!r} at r{r+1}c{c+1}")
    return Board(cells)
