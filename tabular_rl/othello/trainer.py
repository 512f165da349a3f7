"""
Self-play training loop for two tabular Othello agents.

The Trainer plays one episode at a time between player1 (Black) and player2
(White) with an epsilon-greedy policy, rewards each agent from the final
score, applies one terminal Q update per agent, anneals epsilon and persists
the tables, stats and a resume checkpoint at configurable cadences.

Training is strictly sequential. An external stop signal is polled only
between episodes; when it is set the loop checkpoints the episode it just
finished and returns.
"""

from __future__ import annotations

import math
import threading
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

import numpy as np
from loguru import logger as default_logger

from tabular_rl.othello.agent import QAgent, QTable
from tabular_rl.othello.board import Board, Scores
from tabular_rl.othello.config import Paths, TrainingConfig
from tabular_rl.othello.game import Game
from tabular_rl.othello.persistence import ModelStore


def terminal_reward(own_score: int, other_score: int) -> int:
    """+1 for the strictly higher score, -1 for the strictly lower, 0 on a tie."""
    if own_score > other_score:
        return 1
    if own_score < other_score:
        return -1
    return 0


@dataclass
class EpisodeResult:
    episode: int
    scores: Scores
    rewards: Tuple[int, int]
    moves: int
    turn_limited: bool
    q_deltas: List[float] = field(default_factory=list)


@dataclass
class TrainingSummary:
    start_episode: int
    last_episode: int
    epsilon: float
    interrupted: bool = False


class Trainer:
    """
    Owns both agents and drives the self-play episode loop.

    Args:
        config: Training options; validated once here.
        paths: Artifact locations (ignored when `store` is given).
        store: Persistence backend, built from `paths` by default.
        logger: Logger handle from the entry point (loguru).
        stop_event: Cooperative cancellation flag, polled between episodes.

    Example:
        >>> trainer = Trainer(TrainingConfig(episodes=10, seed=0))
        >>> summary = trainer.train()
        >>> summary.last_episode
        10
    """

    def __init__(
        self,
        config: Optional[TrainingConfig] = None,
        paths: Optional[Paths] = None,
        store: Optional[ModelStore] = None,
        logger=None,
        stop_event: Optional[threading.Event] = None,
    ):
        self.config = (config or TrainingConfig()).validate()
        self.logger = logger or default_logger
        self.store = store or ModelStore(paths, logger=self.logger)
        self.stop_event = stop_event or threading.Event()
        self.rng = np.random.default_rng(self.config.seed)
        self.epsilon = self.config.initial_epsilon

        self.player1 = QAgent(
            "player1", alpha=self.config.alpha, gamma=self.config.gamma, logger=self.logger
        )
        self.player2 = QAgent(
            "player2", alpha=self.config.alpha, gamma=self.config.gamma, logger=self.logger
        )
        tables = self.store.load_model()
        self.player1.q_values = tables["player1"]
        self.player2.q_values = tables["player2"]
        self.stats = self.store.load_stats()

        self._window_scores: List[Scores] = []
        self._window_deltas: List[float] = []

    @property
    def tables(self) -> Dict[str, QTable]:
        return {"player1": self.player1.q_values, "player2": self.player2.q_values}

    def _random_move(self, moves: List[str]) -> str:
        return moves[int(self.rng.integers(len(moves)))]

    def select_move(self, board: Board, agent: QAgent) -> Optional[str]:
        """
        Epsilon-greedy move for the side to move on `board`.

        Explores uniformly with probability epsilon; otherwise returns the
        first legal move (in board scan order) with the highest stored value,
        falling back to a random legal move if no finite maximum exists.

        Returns:
            A move in notation, or None if there is no legal move.
        """
        moves = board.get_available_moves()
        if not moves:
            self.logger.debug("No legal moves available")
            return None

        if self.rng.random() < self.epsilon:
            self.logger.debug("Exploring: random move")
            return self._random_move(moves)

        state = board.get_state()
        best_move = None
        best_value = -math.inf
        for move in moves:
            value = agent.get_q_value(state, move)
            if value > best_value:
                best_value = value
                best_move = move

        if best_move is None:
            self.logger.debug("No best move found, falling back to random")
            return self._random_move(moves)

        self.logger.debug("Exploiting: {} (Q={:.4f})", best_move, best_value)
        return best_move

    def run_episode(self, episode: int) -> EpisodeResult:
        """Play one full self-play game and apply the terminal updates."""
        self.logger.debug(f"Episode {episode} start")
        board = Board(logger=self.logger)
        game = Game(self.player1, self.player2, board, config=self.config.game, logger=self.logger)
        self.player1.reset_trace()
        self.player2.reset_trace()

        turn_limited = False
        while not game.is_game_over() and not game.has_reached_turn_limit():
            agent = game.current_player
            state = board.get_state()
            move = self.select_move(board, agent)
            if move is None:
                self.logger.warning(f"{agent.name} has no move, passing")
                game.play_move(None)
                continue

            agent.record_action(state, move)
            game.apply_move(move)
            agent.record_result(board.get_state())

            if game.has_reached_turn_limit():
                self.logger.warning(f"Episode {episode} reached the turn limit")
                turn_limited = True
                break
            game.switch_player()

        scores = board.get_scores()
        rewards = (
            terminal_reward(scores.black, scores.white),
            terminal_reward(scores.white, scores.black),
        )

        q_deltas: List[float] = []
        for agent, reward in zip((self.player1, self.player2), rewards):
            if not agent.has_trace:
                self.logger.debug(f"{agent.name} made no move, skipping update")
                continue
            old_q = agent.get_q_value(agent.last_state, agent.last_action)
            new_q = agent.update_q_value(
                agent.last_state, agent.last_action, reward, agent.current_state, board
            )
            q_deltas.append(abs(new_q - old_q))

        self.logger.debug(
            f"Episode {episode} final score - Black: {scores.black}, White: {scores.white}"
        )
        return EpisodeResult(
            episode=episode,
            scores=scores,
            rewards=rewards,
            moves=game.move_count,
            turn_limited=turn_limited,
            q_deltas=q_deltas,
        )

    def decay_epsilon(self) -> float:
        self.epsilon = max(self.config.min_epsilon, self.epsilon * self.config.epsilon_decay)
        return self.epsilon

    def _record_stats(self, episode: int) -> None:
        """Fold the window since the last save point into the stats record."""
        if self._window_scores:
            black = float(np.mean([s.black for s in self._window_scores]))
            white = float(np.mean([s.white for s in self._window_scores]))
        else:
            black = white = 0.0
        convergence = float(np.mean(self._window_deltas)) if self._window_deltas else 0.0

        self.stats["episodes"].append(episode)
        self.stats["convergence"].append(convergence)
        self.stats["averageScores"].append({"player1": black, "player2": white})
        self._window_scores.clear()
        self._window_deltas.clear()

    def save(self, episode: int) -> None:
        """Persist both value tables and the stats record."""
        self._record_stats(episode)
        self.store.save_model(self.tables)
        self.store.save_stats(self.stats)
        self.logger.info(
            f"Table entries: player1 {self.player1.num_entries()}, "
            f"player2 {self.player2.num_entries()}"
        )

    def checkpoint(self, episode: int) -> bool:
        return self.store.save_checkpoint(episode, self.epsilon, self.config.to_dict())

    def resume(self) -> int:
        """First episode to run, restoring epsilon from a checkpoint if present."""
        if not self.config.start_from_checkpoint:
            return 1
        checkpoint = self.store.load_checkpoint()
        if checkpoint is None:
            return 1
        self.epsilon = checkpoint.epsilon
        start = checkpoint.episode + 1
        self.logger.info(f"Resuming from checkpoint: episode {start}, epsilon {self.epsilon:.6f}")
        return start

    def train(self, episodes: Optional[int] = None) -> TrainingSummary:
        """
        Run episodes up to `episodes` (default: config.episodes), inclusive.

        Returns:
            TrainingSummary with the first and last episode played, the final
            epsilon and whether the run was interrupted.
        """
        total = self.config.episodes if episodes is None else episodes
        start = self.resume()
        last_episode = start - 1
        cfg = self.config
        self.logger.info(f"Training episodes {start}..{total}")

        for episode in range(start, total + 1):
            result = self.run_episode(episode)
            last_episode = episode
            self._window_scores.append(result.scores)
            self._window_deltas.extend(result.q_deltas)

            self.decay_epsilon()
            self.logger.debug(f"Epsilon updated: {self.epsilon:.6f}")

            if episode % cfg.save_interval == 0:
                self.save(episode)
                self.logger.info(
                    f"Episode {episode} stats: Black {result.scores.black}, "
                    f"White {result.scores.white}"
                )

            if episode % cfg.progress_interval == 0:
                progress = episode / total * 100 if total else 100.0
                self.logger.info(f"Progress: {progress:.1f}%, epsilon: {self.epsilon:.4f}")

            if episode % cfg.checkpoint_interval == 0:
                self.checkpoint(episode)

            if self.stop_event.is_set():
                self.logger.warning(f"Training interrupted after episode {episode}")
                self.checkpoint(episode)
                return TrainingSummary(start, episode, self.epsilon, interrupted=True)

        if last_episode >= start:
            if last_episode % cfg.save_interval != 0:
                self.save(last_episode)
            if last_episode % cfg.checkpoint_interval != 0:
                self.checkpoint(last_episode)
        self.logger.info("Training complete")
        return TrainingSummary(start, last_episode, self.epsilon)
