"""
Turn orchestration for one Othello episode.

A Game pairs a Board with two agents (player1 plays Black, player2 plays
White), sequences their turns, handles forced passes and detects the end of
the game. It is created fresh for each episode and discarded afterwards;
only the agents' value tables outlive it.
"""

from __future__ import annotations

from typing import List, Optional

from loguru import logger as default_logger

from tabular_rl.othello.agent import QAgent
from tabular_rl.othello.board import BLACK, WHITE, Board, Coord
from tabular_rl.othello.config import GameConfig


class Game:
    """
    Two-player turn state machine: in progress -> ended (terminal).

    Attributes:
        player1 (QAgent): Black.
        player2 (QAgent): White.
        board (Board): Shared board; its current_player is kept in step with
            the agent to move.
        current_player (QAgent): Agent to move.
        move_count (int): Moves and explicit passes played through this Game.
        game_ended (bool): Set once both players have been forced to pass in
            a row, or is_game_over() found no legal move for either colour.
    """

    def __init__(
        self,
        player1: QAgent,
        player2: QAgent,
        board: Optional[Board] = None,
        config: Optional[GameConfig] = None,
        logger=None,
    ):
        self.logger = logger or default_logger
        self.config = config or GameConfig()
        self.player1 = player1
        self.player2 = player2
        self.board = board if board is not None else Board(logger=self.logger)
        self.current_player = player1
        self.board.current_player = BLACK
        self.move_count = 0
        self.game_ended = False
        self.logger.debug("Starting a new game")

    def color_of(self, agent: QAgent) -> int:
        return BLACK if agent is self.player1 else WHITE

    def _other(self, agent: QAgent) -> QAgent:
        return self.player2 if agent is self.player1 else self.player1

    def _set_current(self, agent: QAgent) -> None:
        self.current_player = agent
        self.board.current_player = self.color_of(agent)

    def switch_player(self) -> None:
        """Hand the turn to the other player, passing while nobody can move.

        Two consecutive forced passes end the game.
        """
        self._set_current(self._other(self.current_player))
        self.logger.debug("Turn: {}", self.current_player.name)

        pass_count = 0
        while not self.game_ended and not self.board.get_available_moves():
            self.logger.warning(f"{self.current_player.name} passes")
            self._set_current(self._other(self.current_player))
            pass_count += 1
            if pass_count >= 2:
                self.logger.info("Both players passed, game over")
                self.game_ended = True
                return

    def apply_move(self, move: str) -> Optional[List[Coord]]:
        """Count the turn and apply `move` to the board without switching.

        Returns:
            Flipped coordinates, or None if the board rejected the move.
        """
        self.move_count += 1
        self.logger.debug(
            "Turn {}: {} plays {}", self.move_count, self.current_player.name, move
        )
        flipped = self.board.make_move(move)
        if flipped is None:
            self.logger.warning(f"Invalid move selected: {move}")
            return None
        self.logger.opt(lazy=True).debug("\n{}", self.board.render)
        return flipped

    def play_move(self, move: Optional[str]) -> bool:
        """
        Play one turn for the current player.

        A None move, or a turn with no legal move, is a pass: a no-op if the
        game is already over, otherwise the turn moves on via switch_player().
        An illegal move is rejected and the turn stays with the same player.

        Returns:
            True if a move was applied.
        """
        if move is None or not self.board.get_available_moves():
            self.move_count += 1
            self.logger.warning(f"{self.current_player.name} cannot move")
            if self.is_game_over():
                self.logger.info("Game over")
                return False
            self.switch_player()
            return False

        if self.apply_move(move) is None:
            return False
        self.switch_player()
        return True

    def is_game_over(self) -> bool:
        """True iff neither Black nor White has a legal move on the grid."""
        original_player = self.board.current_player

        self.board.current_player = BLACK
        black_moves = self.board.get_available_moves()

        self.board.current_player = WHITE
        white_moves = self.board.get_available_moves()

        self.board.current_player = original_player

        is_over = not black_moves and not white_moves
        if is_over and not self.game_ended:
            self.game_ended = True
            scores = self.board.get_scores()
            self.logger.debug(
                f"Game over - Black: {scores.black}, White: {scores.white}"
            )
        return is_over

    def has_reached_turn_limit(self) -> bool:
        return self.move_count >= self.config.max_turns

    def winner(self) -> Optional[int]:
        """BLACK or WHITE by disk count, None on a tie."""
        scores = self.board.get_scores()
        if scores.black > scores.white:
            return BLACK
        if scores.white > scores.black:
            return WHITE
        return None
