"""
Tabular Q-learning for Othello (Reversi) via self-play.

This package provides a pure-Python Othello board, two independent tabular
Q-learning agents and the self-play training loop that pits them against
each other.

The package supports:
- Full Othello rules: 8-direction capture, forced passes, double-pass end
- Epsilon-greedy self-play with multiplicative epsilon annealing
- Terminal-reward Bellman updates, one per agent per episode
- JSON persistence of value tables, stats and resume checkpoints
- Cooperative interruption between episodes
- Playing against the trained tables from the terminal

Example:
    >>> from tabular_rl.othello import Trainer, TrainingConfig
    >>> trainer = Trainer(TrainingConfig(episodes=100, seed=0))
    >>> summary = trainer.train()

Classes:
    Board: Grid, turn and move rules
    QAgent: One player's value table and decision trace
    Game: Turn orchestration for one episode
    Trainer: Self-play episode loop
    ModelStore: JSON persistence
    ModelPolicy: Read-only greedy player over a saved model
"""

from tabular_rl.othello.agent import QAgent
from tabular_rl.othello.board import BLACK, EMPTY, WHITE, Board, Scores
from tabular_rl.othello.config import GameConfig, Paths, TrainingConfig
from tabular_rl.othello.game import Game
from tabular_rl.othello.persistence import Checkpoint, ModelStore, SchemaError
from tabular_rl.othello.policy import ModelPolicy
from tabular_rl.othello.trainer import Trainer, terminal_reward

__all__ = [
    "BLACK",
    "EMPTY",
    "WHITE",
    "Board",
    "Checkpoint",
    "Game",
    "GameConfig",
    "ModelPolicy",
    "ModelStore",
    "Paths",
    "QAgent",
    "SchemaError",
    "Scores",
    "Trainer",
    "TrainingConfig",
    "terminal_reward",
]
