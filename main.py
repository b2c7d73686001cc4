from __future__ import annotations

import io
import os
import sys
import threading
import tkinter as tk
from contextlib import contextmanager
from tkinter import filedialog, messagebox, ttk
from typing import List, Optional, Tuple

from game import CellView, SolveTicket, Str8tsGame
from model import Color, Mode, PuzzleLoadError, Unsolvable
from solver import SolverResult, Str8tsSolver

SAVEGAME_PATH = "game_state.json"
JUST_SOLVED_MS = 400

Cell = Tuple[int, int]


class Str8tsApp:
    def __init__(self, save_path: str = SAVEGAME_PATH) -> None:
        self.game = Str8tsGame()
        self.save_path = save_path
        self.root = tk.Tk()
        self.root.title("Str8ts")
        self.cell_size = 50
        self.margin = 20
        canvas_size = self.margin * 2 + self.cell_size * 9
        self.canvas = tk.Canvas(
            self.root,
            width=canvas_size,
            height=canvas_size,
            bg="white",
            highlightthickness=0,
        )
        self.canvas.grid(row=0, column=0, padx=10, pady=10, sticky="nsew")
        self.canvas.bind("<Button-1>", self.on_click)
        self.canvas.bind("<Configure>", self.on_canvas_resize)
        self.root.bind("<Key>", self.on_key_press)
        self.root.rowconfigure(0, weight=1)
        self.root.columnconfigure(0, weight=1)

        control_frame = ttk.Frame(self.root)
        control_frame.grid(row=0, column=1, sticky="ns")

        self.status_var = tk.StringVar(value="Click a cell to start.")
        self.uniqueness_var = tk.BooleanVar(value=False)
        self.solve_ticket: Optional[SolveTicket] = None
        self.solve_cancel: Optional[threading.Event] = None
        self.flash = False
        self._control_buttons: List[ttk.Button] = []

        self._build_controls(control_frame)
        if os.path.exists(self.save_path):
            self._load_from(self.save_path)
        self.draw()

    def _on_mode_selected(self, _event=None) -> None:
        label = self.mode_combo.get()
        mode = self._mode_label_to_value.get(label)
        if mode:
            self.game.set_mode(mode)
            self.status_var.set(f"Mode: {label}.")
            self.draw()

    @contextmanager
    def _quiet_stderr(self):
        buf = io.StringIO()
        orig = sys.stderr
        try:
            sys.stderr = buf
            yield
        finally:
            sys.stderr = orig

    def save_game(self) -> None:
        try:
            self.game.save_game(self.save_path)
            self.status_var.set(f"Saved puzzle to {self.save_path}.")
        except OSError as e:
            messagebox.showerror("Error", f"Failed to save puzzle: {e}")

    def save_game_as(self) -> None:
        with self._quiet_stderr():
            path = filedialog.asksaveasfilename(
                defaultextension=".json",
                filetypes=[("JSON Files", "*.json")],
                title="Save Puzzle",
            )
        if not path:
            return
        self.save_path = path
        self.save_game()

    def load_game(self) -> None:
        with self._quiet_stderr():
            path = filedialog.askopenfilename(
                defaultextension=".json",
                filetypes=[("JSON Files", "*.json")],
                title="Load Puzzle",
            )
        if not path:
            return
        self._load_from(path)
        self.draw()

    def _load_from(self, path: str) -> None:
        try:
            self.game.load_game(path)
        except PuzzleLoadError as e:
            messagebox.showerror("Error", f"Failed to load puzzle: {e}")
            return
        self.save_path = path
        self.status_var.set(f"Loaded puzzle from {path}.")

    def _build_controls(self, frame: ttk.Frame) -> None:
        ttk.Label(frame, text="Mode", font=("Arial", 12, "bold")).grid(
            row=0, column=0, pady=(0, 4), sticky="w"
        )
        self._mode_options = [
            ("Play: numbers", Mode.PLAY_VALUES),
            ("Play: pencil marks", Mode.PLAY_CANDIDATES),
            ("Edit: black/white", Mode.EDIT_COLORS),
            ("Edit: clues", Mode.EDIT_FIXED_VALUES),
        ]
        self._mode_label_to_value = {label: mode for label, mode in self._mode_options}
        self.mode_combo = ttk.Combobox(
            frame,
            values=[label for label, _ in self._mode_options],
            state="readonly",
            width=22,
        )
        self.mode_combo.current(0)
        self.mode_combo.bind("<<ComboboxSelected>>", self._on_mode_selected)
        self.mode_combo.grid(row=1, column=0, pady=(0, 8), sticky="ew")

        buttons = [
            ("Solve", self.solve),
            ("Fill pencil marks", self.fill_candidates),
            ("Reset", self.reset),
            ("New puzzle", self.new_puzzle),
            ("Save", self.save_game),
            ("Save as...", self.save_game_as),
            ("Load...", self.load_game),
        ]
        for i, (text, command) in enumerate(buttons):
            btn = ttk.Button(frame, text=text, command=command)
            btn.grid(row=2 + i, column=0, pady=2, sticky="ew")
            self._control_buttons.append(btn)
        base_row = 2 + len(buttons)
        ttk.Checkbutton(
            frame, text="Check uniqueness", variable=self.uniqueness_var
        ).grid(row=base_row, column=0, pady=(8, 0), sticky="w")
        ttk.Label(
            frame,
            text="Digits 1-9 enter values, Delete clears,\nSpace toggles black/white.",
            justify="left",
        ).grid(row=base_row + 1, column=0, pady=(8, 0), sticky="w")
        ttk.Label(
            frame, textvariable=self.status_var, wraplength=200, justify="left"
        ).grid(row=base_row + 2, column=0, pady=(8, 0), sticky="w")

    def coords_to_cell(self, x: int, y: int) -> Optional[Cell]:
        x -= self.margin
        y -= self.margin
        if x < 0 or y < 0:
            return None
        row, col = y // self.cell_size, x // self.cell_size
        if 0 <= row < 9 and 0 <= col < 9:
            return int(row), int(col)
        return None

    def on_click(self, event) -> None:
        cell = self.coords_to_cell(event.x, event.y)
        if cell is None:
            return
        self.game.cell_clicked(cell)
        self.status_var.set(f"Selected cell r{cell[0]+1} c{cell[1]+1}.")
        self.draw()

    def on_key_press(self, event) -> None:
        if self.game.focused is None:
            return
        key = event.keysym if event.keysym in ("BackSpace", "Delete", "space") else event.char
        if not self.game.key_pressed(self.game.focused, key):
            return
        self._cancel_pending_solve()
        if self.game.consume_just_solved():
            self._flash_solved()
        self.draw()

    def _flash_solved(self) -> None:
        self.flash = True
        self.status_var.set("Solved!")

        def done() -> None:
            self.flash = False
            self.draw()

        self.root.after(JUST_SOLVED_MS, done)

    def reset(self) -> None:
        self._cancel_pending_solve()
        self.game.reset()
        self.status_var.set("Cleared all entries.")
        self.draw()

    def new_puzzle(self) -> None:
        self._cancel_pending_solve()
        self.game.new_game()
        self.status_var.set("Started a new puzzle.")
        self.draw()

    def fill_candidates(self) -> None:
        self._cancel_pending_solve()
        self.game.fill_candidates()
        self.status_var.set("Filled pencil marks.")
        self.draw()

    def _cancel_pending_solve(self) -> None:
        if self.solve_cancel is not None:
            self.solve_cancel.set()

    def solve(self) -> None:
        if self.solve_ticket is not None:
            return
        self._set_controls_enabled(False)
        self.status_var.set("Solving...")
        ticket = self.game.begin_solve()
        segments = self.game.segments
        check_unique = self.uniqueness_var.get()
        cancel = threading.Event()
        self.solve_ticket = ticket
        self.solve_cancel = cancel

        def worker() -> None:
            solver = Str8tsSolver(ticket.board, segments)
            result = solver.solve(require_uniqueness=check_unique, cancel=cancel)
            self.root.after(0, lambda: self._on_solve_finished(ticket, result))

        threading.Thread(target=worker, daemon=True).start()

    def _on_solve_finished(self, ticket: SolveTicket, result: SolverResult) -> None:
        self.solve_ticket = None
        self.solve_cancel = None
        self._set_controls_enabled(True)
        if result.status == "cancelled":
            self.status_var.set("Solve abandoned: the board changed.")
            return
        try:
            applied = self.game.finish_solve(ticket, result)
        except Unsolvable:
            messagebox.showerror("No solution", result.message)
            self.status_var.set(result.message)
            return
        if not applied:
            self.status_var.set("Solve abandoned: the board changed.")
            return
        msg = f"{result.message} ({result.duration_ms} ms)"
        if result.status == "multiple":
            messagebox.showwarning("Multiple solutions", msg)
        self.status_var.set(msg)
        if self.game.consume_just_solved():
            self._flash_solved()
        self.draw()

    def _set_controls_enabled(self, enabled: bool) -> None:
        state = "!disabled" if enabled else "disabled"
        for btn in self._control_buttons:
            btn.state([state])

    def draw(self) -> None:
        self.canvas.delete("all")
        for view in self.game.cells():
            self._draw_cell(view)
        self._draw_grid()

    def _draw_grid(self) -> None:
        for i in range(10):
            x0 = self.margin + i * self.cell_size
            y0 = self.margin + i * self.cell_size
            end = self.margin + 9 * self.cell_size
            self.canvas.create_line(x0, self.margin, x0, end, width=1)
            self.canvas.create_line(self.margin, y0, end, y0, width=1)
        self.canvas.create_rectangle(
            self.margin,
            self.margin,
            self.margin + 9 * self.cell_size,
            self.margin + 9 * self.cell_size,
            outline="black",
            width=3,
        )
        if self.game.focused:
            x0, y0, x1, y1 = self._cell_rect(*self.game.focused)
            self.canvas.create_rectangle(x0, y0, x1, y1, outline="blue", width=3)

    def _cell_rect(self, row: int, col: int) -> Tuple[int, int, int, int]:
        x0 = self.margin + col * self.cell_size
        y0 = self.margin + row * self.cell_size
        x1 = x0 + self.cell_size
        y1 = y0 + self.cell_size
        return x0, y0, x1, y1

    def on_canvas_resize(self, event) -> None:
        available = min(event.width, event.height)
        new_size = max(15, int((available - 2 * self.margin) / 9))
        if new_size != self.cell_size:
            self.cell_size = new_size
            self.draw()

    def _draw_cell(self, view: CellView) -> None:
        x0, y0, x1, y1 = self._cell_rect(*view.position)
        if view.color is Color.BLACK:
            self.canvas.create_rectangle(x0, y0, x1, y1, fill="black", outline="")
            return
        if self.flash:
            fill = "#c8f7c5"
        elif not view.valid_in_straight:
            fill = "#fde2e2"
        else:
            fill = "white"
        self.canvas.create_rectangle(x0, y0, x1, y1, fill=fill, outline="")
        if view.value is not None:
            self.canvas.create_text(
                (x0 + x1) // 2,
                (y0 + y1) // 2,
                text=str(view.value),
                font=("Arial", 18, "bold" if view.is_fixed else "normal"),
                fill="red" if not view.valid_in_row else "black",
            )
            return
        step = self.cell_size / 3
        for digit, present in enumerate(view.candidates, start=1):
            if not present:
                continue
            r, c = divmod(digit - 1, 3)
            self.canvas.create_text(
                x0 + step * (c + 0.5),
                y0 + step * (r + 0.5),
                text=str(digit),
                font=("Arial", 8),
                fill="gray30",
            )

    def run(self) -> None:
        self.root.mainloop()


if __name__ == "__main__":
    app = Str8tsApp(sys.argv[1] if len(sys.argv) > 1 else SAVEGAME_PATH)
    app.run()
