"""
Tabular Q-learning agent for one Othello player.

Each agent owns a value table mapping state keys to {move: value} and a
per-episode trace of its most recent decision. The table is updated once per
episode from the terminal reward (see QAgent.update_q_value).
"""

from __future__ import annotations

from typing import Dict, Optional

from loguru import logger as default_logger

from tabular_rl.othello.board import Board

QTable = Dict[str, Dict[str, float]]


class QAgent:
    """
    One player's value table and decision trace.

    Attributes:
        name (str): Model key of this agent ("player1" or "player2").
        alpha (float): Learning rate.
        gamma (float): Discount factor.
        q_values (QTable): state key -> move -> value. Entries are created
            lazily on update; lookups of absent entries read as 0.
        last_state (Optional[str]): State before this agent's latest move.
        last_action (Optional[str]): This agent's latest move.
        current_state (Optional[str]): State right after that move.
    """

    def __init__(
        self,
        name: str,
        alpha: float = 0.1,
        gamma: float = 0.9,
        q_values: Optional[QTable] = None,
        logger=None,
    ):
        self.name = name
        self.alpha = alpha
        self.gamma = gamma
        self.q_values: QTable = q_values if q_values is not None else {}
        self.logger = logger or default_logger
        self.last_state: Optional[str] = None
        self.last_action: Optional[str] = None
        self.current_state: Optional[str] = None
        self.logger.info(f"Initialized agent {name}")

    @property
    def has_trace(self) -> bool:
        return self.last_state is not None and self.last_action is not None

    def reset_trace(self) -> None:
        self.last_state = None
        self.last_action = None
        self.current_state = None

    def record_action(self, state: str, move: str) -> None:
        self.last_state = state
        self.last_action = move

    def record_result(self, state: str) -> None:
        self.current_state = state

    def get_q_value(self, state: str, move: str) -> float:
        return self.q_values.get(state, {}).get(move, 0.0)

    def get_max_q_value(self, state: str, board: Board) -> float:
        """Max stored value for `state` over the moves legal on `board`.

        Missing moves count as 0, and the result is exactly 0 when the board
        has no legal move for its side to move.
        """
        available_moves = board.get_available_moves()
        if not available_moves:
            return 0.0
        return max(self.get_q_value(state, move) for move in available_moves)

    def update_q_value(
        self,
        last_state: Optional[str],
        last_action: Optional[str],
        reward: float,
        current_state: Optional[str],
        board: Board,
    ) -> Optional[float]:
        """
        Single-step Bellman update of Q(last_state, last_action).

        Q <- Q + alpha * (reward + gamma * maxQ(current_state, board) - Q)

        Returns:
            The new value, or None if there is no (state, action) to update.
        """
        if last_state is None or last_action is None:
            self.logger.debug(f"{self.name}: no action this episode, update skipped")
            return None

        actions = self.q_values.setdefault(last_state, {})
        current_q = actions.get(last_action, 0.0)
        max_q = self.get_max_q_value(current_state, board) if current_state else 0.0

        new_q = current_q + self.alpha * (reward + self.gamma * max_q - current_q)
        actions[last_action] = new_q

        self.logger.debug(
            f"{self.name}: Q updated state={last_state} action={last_action} "
            f"reward={reward} new_q={new_q:.6f}"
        )
        return new_q

    def num_entries(self) -> int:
        return sum(len(actions) for actions in self.q_values.values())
