"""
Read-only greedy policy over a saved model snapshot.

Used for play against the trained tables. It reads the model file once and
never writes to it, so it may lag behind a trainer that is still running.
"""

from __future__ import annotations

import math
from typing import Dict, Optional

import numpy as np
from loguru import logger as default_logger

from tabular_rl.othello.agent import QTable
from tabular_rl.othello.board import BLACK, Board
from tabular_rl.othello.config import Paths
from tabular_rl.othello.persistence import ModelStore


class ModelPolicy:
    """
    Picks the highest-valued legal move for the side to move.

    Black reads the "player1" table and White reads "player2". Unknown
    states, or a model that failed to load, fall back to a uniformly random
    legal move.
    """

    def __init__(
        self,
        tables: Optional[Dict[str, QTable]] = None,
        seed: Optional[int] = None,
        logger=None,
    ):
        self.tables = tables or {"player1": {}, "player2": {}}
        self.rng = np.random.default_rng(seed)
        self.logger = logger or default_logger

    @classmethod
    def from_file(cls, model_file: str, seed: Optional[int] = None, logger=None) -> "ModelPolicy":
        store = ModelStore(Paths(model_file=model_file), logger=logger)
        return cls(store.load_model(), seed=seed, logger=logger)

    @property
    def loaded(self) -> bool:
        return any(self.tables.values())

    def predict(self, board: Board) -> Optional[str]:
        moves = board.get_available_moves()
        if not moves:
            return None

        player = "player1" if board.current_player == BLACK else "player2"
        values = self.tables.get(player, {}).get(board.get_state())
        if not values:
            self.logger.debug(f"Unknown state for {player}, playing a random move")
            return moves[int(self.rng.integers(len(moves)))]

        best_move = None
        best_value = -math.inf
        for move in moves:
            value = values.get(move, 0.0)
            if value > best_value:
                best_value = value
                best_move = move
        return best_move or moves[int(self.rng.integers(len(moves)))]

    def __call__(self, board: Board) -> Optional[str]:
        return self.predict(board)
