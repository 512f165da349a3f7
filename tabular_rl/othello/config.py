"""
Configuration for Othello self-play training.

Every recognised option is listed here with its default. Configuration is
resolved once when a Trainer or Game is built; nothing downstream merges
defaults again.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Optional


@dataclass
class GameConfig:
    """Board geometry and the per-episode safety valve."""

    board_size: int = 8
    max_turns: int = 100

    def __post_init__(self):
        if self.board_size != 8:
            raise ValueError(
                f"Invalid board_size: {self.board_size}. Only 8x8 boards are supported."
            )
        if self.max_turns <= 0:
            raise ValueError(f"max_turns must be positive, got {self.max_turns}")


@dataclass
class TrainingConfig:
    """Hyperparameters and cadences for the self-play episode loop.

    Attributes:
        episodes: Last episode index to train (inclusive).
        initial_epsilon: Exploration rate used when no checkpoint is resumed.
        epsilon_decay: Multiplicative anneal applied after every episode.
        min_epsilon: Floor for the annealed epsilon (0.0 disables the clamp).
        alpha: Learning rate of the terminal Bellman update.
        gamma: Discount factor of the terminal Bellman update.
        save_interval: Persist model tables and stats every N episodes.
        checkpoint_interval: Persist a resume checkpoint every N episodes.
        progress_interval: Log training progress every N episodes.
        start_from_checkpoint: Resume episode index and epsilon if a
            checkpoint file exists.
        seed: Seed for the exploration RNG (None for nondeterministic).
    """

    episodes: int = 100000
    initial_epsilon: float = 0.3
    epsilon_decay: float = 0.9999
    min_epsilon: float = 0.0
    alpha: float = 0.1
    gamma: float = 0.95
    save_interval: int = 100
    checkpoint_interval: int = 100
    progress_interval: int = 100
    start_from_checkpoint: bool = True
    seed: Optional[int] = None
    game: GameConfig = field(default_factory=GameConfig)

    def validate(self) -> "TrainingConfig":
        """Raise ValueError for out-of-range options, return self otherwise."""
        if self.episodes < 0:
            raise ValueError(f"episodes must be >= 0, got {self.episodes}")
        for name in ("initial_epsilon", "min_epsilon", "alpha", "gamma"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"{name} must be in [0, 1], got {value}")
        if not 0.0 < self.epsilon_decay <= 1.0:
            raise ValueError(
                f"epsilon_decay must be in (0, 1], got {self.epsilon_decay}"
            )
        for name in ("save_interval", "checkpoint_interval", "progress_interval"):
            value = getattr(self, name)
            if value <= 0:
                raise ValueError(f"{name} must be positive, got {value}")
        return self

    def to_dict(self) -> Dict[str, Any]:
        """JSON-compatible snapshot stored alongside checkpoints."""
        return asdict(self)


@dataclass
class Paths:
    """Locations of the persisted artifacts."""

    model_file: str = "model.json"
    stats_file: str = "training_stats.json"
    checkpoint_file: str = "training_checkpoint.json"
    log_file: str = "game.log"
