"""
Othello board state machine.

The board owns an 8x8 grid and the colour to move. It validates, applies and
enumerates moves; everything else (turn sequencing, passes, termination) is
the Game's job.

Board representation:
    np.ndarray of shape (8, 8), dtype uint8
    - 0: empty
    - 1: black
    - 2: white

Moves use algebraic notation on the API boundary: a column letter A-H
followed by a row number 1-8, e.g. "D3" is row index 2, column index 3.
"""

from __future__ import annotations

from typing import List, NamedTuple, Optional, Tuple

import numpy as np
from loguru import logger as default_logger

BOARD_SIZE = 8
NUM_CELLS = BOARD_SIZE * BOARD_SIZE
COLUMNS = "ABCDEFGH"

EMPTY = 0
BLACK = 1
WHITE = 2

PLAYER_NAMES = {BLACK: "Black", WHITE: "White"}

DIRECTIONS: Tuple[Tuple[int, int], ...] = (
    (-1, -1), (-1, 0), (-1, 1),
    (0, -1),           (0, 1),
    (1, -1),  (1, 0),  (1, 1),
)

Coord = Tuple[int, int]  # (row, col), zero-based


class Scores(NamedTuple):
    black: int
    white: int


def opponent(player: int) -> int:
    """Return the other colour."""
    return WHITE if player == BLACK else BLACK


def in_bounds(row: int, col: int) -> bool:
    return 0 <= row < BOARD_SIZE and 0 <= col < BOARD_SIZE


def coord_to_move(row: int, col: int) -> str:
    """Convert zero-based (row, col) to notation, e.g. (2, 3) -> "D3"."""
    if not in_bounds(row, col):
        raise ValueError(f"Out of bounds coordinate: ({row}, {col})")
    return f"{COLUMNS[col]}{row + 1}"


def move_to_coord(move: str) -> Coord:
    """Convert notation to zero-based (row, col), e.g. "D3" -> (2, 3).

    Raises:
        ValueError: If the token is not a column letter A-H followed by a
            row number 1-8.
    """
    if not isinstance(move, str) or len(move) != 2:
        raise ValueError(f"Invalid move notation: {move!r}")
    col_char, row_char = move[0].upper(), move[1]
    if col_char not in COLUMNS or not row_char.isdigit():
        raise ValueError(f"Invalid move notation: {move!r}")
    row = int(row_char) - 1
    col = COLUMNS.index(col_char)
    if not in_bounds(row, col):
        raise ValueError(f"Out of bounds move: {move!r}")
    return row, col


def is_state_key(state: str) -> bool:
    """True if `state` looks like a serialized 8x8 grid."""
    return (
        isinstance(state, str)
        and len(state) == NUM_CELLS
        and all(ch in "012" for ch in state)
    )


class Board:
    """
    8x8 Othello board plus the colour to move.

    Attributes:
        grid (np.ndarray): (8, 8) uint8 array of cell values.
        current_player (int): BLACK or WHITE.

    Example:
        >>> board = Board()
        >>> board.get_available_moves()
        ['D3', 'C4', 'F5', 'E6']
        >>> board.make_move("D3")
        [(3, 3)]
        >>> board.get_scores()
        Scores(black=4, white=1)
    """

    def __init__(self, logger=None):
        self.logger = logger or default_logger
        self.grid = np.zeros((BOARD_SIZE, BOARD_SIZE), dtype=np.uint8)
        self.current_player = BLACK
        self.initialize()

    @classmethod
    def from_state(cls, state: str, current_player: int = BLACK, logger=None) -> "Board":
        """Rebuild a board from a state key (see get_state)."""
        if not is_state_key(state):
            raise ValueError(f"Invalid state key: {state!r}")
        board = cls(logger=logger)
        board.grid = (
            np.frombuffer(state.encode("ascii"), dtype=np.uint8) - ord("0")
        ).reshape(BOARD_SIZE, BOARD_SIZE).astype(np.uint8)
        board.current_player = current_player
        return board

    def initialize(self) -> None:
        """Reset to the standard opening position with Black to move."""
        mid = BOARD_SIZE // 2
        self.grid.fill(EMPTY)
        self.grid[mid - 1, mid - 1] = WHITE
        self.grid[mid - 1, mid] = BLACK
        self.grid[mid, mid - 1] = BLACK
        self.grid[mid, mid] = WHITE
        self.current_player = BLACK
        self.logger.debug("Board reset to the opening position")

    def get_state(self) -> str:
        """Row-major concatenation of cell values, e.g. '000...0210...'."""
        return "".join(str(int(v)) for v in self.grid.flat)

    def get_scores(self) -> Scores:
        return Scores(
            black=int(np.count_nonzero(self.grid == BLACK)),
            white=int(np.count_nonzero(self.grid == WHITE)),
        )

    def _capture_run(self, row: int, col: int, dr: int, dc: int, player: int) -> List[Coord]:
        """Opponent disks bracketed by `player` when walking from (row, col).

        Returns an empty list when the run reaches an empty cell or the edge
        before a `player` disk, or when there is no opponent disk to bracket.
        """
        run: List[Coord] = []
        r, c = row + dr, col + dc
        while in_bounds(r, c):
            cell = self.grid[r, c]
            if cell == EMPTY:
                return []
            if cell == player:
                return run
            run.append((r, c))
            r += dr
            c += dc
        return []

    def is_valid_move(self, row: int, col: int, player: int) -> bool:
        """True iff (row, col) is empty and captures in at least one direction."""
        if not in_bounds(row, col) or self.grid[row, col] != EMPTY:
            return False
        return any(
            self._capture_run(row, col, dr, dc, player) for dr, dc in DIRECTIONS
        )

    def make_move(self, move: str) -> Optional[List[Coord]]:
        """
        Place a disk for the side to move and flip every captured run.

        Args:
            move: Target cell in notation, e.g. "D3".

        Returns:
            List of flipped coordinates on success, or None if the move is
            malformed, out of range or illegal. On None the board is unchanged.
        """
        try:
            row, col = move_to_coord(move)
        except ValueError as exc:
            self.logger.debug(f"Rejected move {move!r}: {exc}")
            return None

        player = self.current_player
        if not self.is_valid_move(row, col, player):
            self.logger.debug(f"Invalid move: {move}")
            return None

        flipped: List[Coord] = []
        for dr, dc in DIRECTIONS:
            flipped.extend(self._capture_run(row, col, dr, dc, player))

        self.grid[row, col] = player
        for r, c in flipped:
            self.grid[r, c] = player

        self.current_player = opponent(player)
        self.logger.debug(
            "Played {} for {}, flipped {}", move, PLAYER_NAMES[player], len(flipped)
        )
        return flipped

    def get_available_moves(self) -> List[str]:
        """Legal moves for current_player, scanned row by row, then column."""
        return [
            coord_to_move(row, col)
            for row in range(BOARD_SIZE)
            for col in range(BOARD_SIZE)
            if self.is_valid_move(row, col, self.current_player)
        ]

    def has_moves(self, player: int) -> bool:
        return any(
            self.is_valid_move(row, col, player)
            for row in range(BOARD_SIZE)
            for col in range(BOARD_SIZE)
        )

    def render(self) -> str:
        """
        Text rendering of the board.

        Returns:
            Multi-line string with:
            - Column letters and row numbers
            - Pieces (● for black, ○ for white, . for empty)
            - Legal moves for the side to move marked with *
            - Piece counts and the side to move
        """
        symbols = {EMPTY: ".", BLACK: "●", WHITE: "○"}
        available = set(self.get_available_moves())

        lines = ["  " + " ".join(COLUMNS)]
        for row in range(BOARD_SIZE):
            cells = []
            for col in range(BOARD_SIZE):
                if coord_to_move(row, col) in available:
                    cells.append("*")
                else:
                    cells.append(symbols[int(self.grid[row, col])])
            lines.append(f"{row + 1} " + " ".join(cells))

        scores = self.get_scores()
        lines.append("")
        lines.append(f"● Black: {scores.black}  ○ White: {scores.white}")
        lines.append(f"Current player: {PLAYER_NAMES[self.current_player]}")
        return "\n".join(lines)

    def __str__(self) -> str:
        return self.render()
