"""Immutable board state and rules for 3x3 tic-tac-toe."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, NamedTuple, Optional, Sequence, Tuple

SIZE = 3

WINNING_LINES: Tuple[Tuple[int, int, int], ...] = (
    (0, 1, 2),
    (3, 4, 5),
    (6, 7, 8),
    (0, 3, 6),
    (1, 4, 7),
    (2, 5, 8),
    (0, 4, 8),
    (2, 4, 6),
)


# ---------- Errors ----------


class GameError(ValueError):
    """Base class for caller-correctable game errors."""


class IllegalMoveError(GameError):
    """The action names an occupied or out-of-range cell."""


class IllegalStateError(GameError):
    """The operation is not valid for the board's current state."""


# ---------- Values ----------


class Mark(str, Enum):
    FIRST = "X"
    SECOND = "O"
    EMPTY = " "

    def opponent(self) -> "Mark":
        if self is Mark.FIRST:
            return Mark.SECOND
        if self is Mark.SECOND:
            return Mark.FIRST
        raise ValueError("Empty cells have no opponent")


class Outcome(str, Enum):
    FIRST_WINS = "first_wins"
    SECOND_WINS = "second_wins"
    TIE = "tie"
    UNDETERMINED = "undetermined"


class Action(NamedTuple):
    row: int
    col: int


def _to_mark(value: object) -> Mark:
    if isinstance(value, Mark):
        return value
    if value is None or value == "":
        return Mark.EMPTY
    try:
        return Mark(value)
    except ValueError as exc:
        raise ValueError(f"Unknown cell mark {value!r}") from exc


def parse_cell_id(cell_id: str) -> Action:
    """Parse a two-digit grid identifier such as ``"02"`` into an Action."""
    if len(cell_id) != 2 or any(ch not in "012" for ch in cell_id):
        raise IllegalMoveError(f"Malformed cell identifier {cell_id!r}")
    return Action(int(cell_id[0]), int(cell_id[1]))


# ---------- Board ----------


@dataclass(frozen=True)
class Board:
    # Row-major: index = row * 3 + col
    cells: Tuple[Mark, ...] = field(default=(Mark.EMPTY,) * (SIZE * SIZE))

    def __post_init__(self) -> None:
        if len(self.cells) != SIZE * SIZE:
            raise ValueError(f"A board has {SIZE * SIZE} cells, got {len(self.cells)}")
        if not all(isinstance(c, Mark) for c in self.cells):
            raise ValueError("Board cells must be Mark values")
        diff = self.cells.count(Mark.FIRST) - self.cells.count(Mark.SECOND)
        if diff not in (0, 1):
            raise ValueError("Mark counts cannot come from alternating play")

    @classmethod
    def empty(cls) -> "Board":
        return cls()

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence[object]]) -> "Board":
        """Build a board from a 3x3 grid of Marks or their string values.

        ``None`` and ``""`` are accepted as empty cells so that the grid shape
        produced by :meth:`rows` (and by the web UI) can be read back.
        """
        if len(rows) != SIZE or any(len(r) != SIZE for r in rows):
            raise ValueError("Board rows must form a 3x3 grid")
        return cls(tuple(_to_mark(v) for row in rows for v in row))

    # ---- queries ----

    def rows(self) -> List[List[str]]:
        return [
            [c.value for c in self.cells[r * SIZE : (r + 1) * SIZE]]
            for r in range(SIZE)
        ]

    def at(self, row: int, col: int) -> Mark:
        return self.cells[row * SIZE + col]

    def next_player(self) -> Mark:
        """Equal counts mean FIRST to move, so any empty board starts with X."""
        if self.cells.count(Mark.FIRST) == self.cells.count(Mark.SECOND):
            return Mark.FIRST
        return Mark.SECOND

    def allowed_actions(self) -> List[Action]:
        """Empty cells in row-major order."""
        return [
            Action(i // SIZE, i % SIZE)
            for i, c in enumerate(self.cells)
            if c is Mark.EMPTY
        ]

    def apply(self, action: Iterable[int]) -> "Board":
        """Return the successor board; ``self`` is left untouched."""
        try:
            row, col = action
        except (TypeError, ValueError) as exc:
            raise IllegalMoveError(f"Malformed action {action!r}") from exc
        if type(row) is not int or type(col) is not int:
            raise IllegalMoveError(f"Action indices must be integers: {action!r}")
        if not (0 <= row < SIZE and 0 <= col < SIZE):
            raise IllegalMoveError(f"Action {(row, col)} is off the board")
        idx = row * SIZE + col
        if self.cells[idx] is not Mark.EMPTY:
            raise IllegalMoveError(f"Cell {(row, col)} is already occupied")
        cells = list(self.cells)
        cells[idx] = self.next_player()
        return Board(tuple(cells))

    def winner(self) -> Optional[Mark]:
        # Only the player who just moved can have completed a line
        last = self.next_player().opponent()
        c = self.cells
        for a, b, d in WINNING_LINES:
            if c[a] is last and c[b] is last and c[d] is last:
                return last
        return None

    def is_terminal(self) -> bool:
        return self.winner() is not None or Mark.EMPTY not in self.cells

    def utility(self) -> int:
        """1 if X has won, -1 if O has won, 0 otherwise.

        Only meaningful once :meth:`is_terminal` holds; a board still in play
        also scores 0.
        """
        w = self.winner()
        if w is Mark.FIRST:
            return 1
        if w is Mark.SECOND:
            return -1
        return 0

    def outcome(self) -> Outcome:
        w = self.winner()
        if w is Mark.FIRST:
            return Outcome.FIRST_WINS
        if w is Mark.SECOND:
            return Outcome.SECOND_WINS
        if Mark.EMPTY not in self.cells:
            return Outcome.TIE
        return Outcome.UNDETERMINED

    def pretty(self) -> str:
        lines = [" | ".join(row) for row in self.rows()]
        return "\n---------\n".join(lines)
