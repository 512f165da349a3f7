"""
JSON persistence for value tables, training stats and resume checkpoints.

The three artifacts are written independently, each through a temporary
file that is renamed into place. Loads validate the payload against the
schemas below and fail soft: a missing, unreadable or malformed file is
logged and replaced by the fresh default, never propagated.

Schemas:
    model:      {"version": 1,
                 "player1": {"qValues": {<state>: {<move>: <number>}}},
                 "player2": {...}}
    stats:      {"episodes": [...], "convergence": [...], "averageScores": [...]}
    checkpoint: {"episode": int, "epsilon": number, "config": {...},
                 "timestamp": ISO-8601 string}
"""

from __future__ import annotations

import json
import math
import os
import tempfile
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional

from loguru import logger as default_logger

from tabular_rl.othello.agent import QTable
from tabular_rl.othello.board import is_state_key, move_to_coord
from tabular_rl.othello.config import Paths

MODEL_SCHEMA_VERSION = 1
PLAYER_KEYS = ("player1", "player2")
STATS_KEYS = ("episodes", "convergence", "averageScores")


class SchemaError(ValueError):
    """Raised when a persisted payload does not match its schema."""


@dataclass
class Checkpoint:
    episode: int
    epsilon: float
    config: Dict[str, Any] = field(default_factory=dict)
    timestamp: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "episode": self.episode,
            "epsilon": self.epsilon,
            "config": self.config,
            "timestamp": self.timestamp,
        }


def default_stats() -> Dict[str, list]:
    return {key: [] for key in STATS_KEYS}


def _is_number(value: Any) -> bool:
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and math.isfinite(value)
    )


def validate_q_table(payload: Any, player: str) -> QTable:
    if not isinstance(payload, Mapping):
        raise SchemaError(f"{player}: expected an object, got {type(payload).__name__}")
    q_values = payload.get("qValues", {})
    if not isinstance(q_values, Mapping):
        raise SchemaError(f"{player}.qValues: expected an object")

    table: QTable = {}
    for state, actions in q_values.items():
        if not is_state_key(state):
            raise SchemaError(f"{player}: invalid state key {state!r}")
        if not isinstance(actions, Mapping):
            raise SchemaError(f"{player}: actions for a state must be an object")
        row: Dict[str, float] = {}
        for move, value in actions.items():
            try:
                move_to_coord(move)
            except ValueError as exc:
                raise SchemaError(f"{player}: {exc}") from exc
            if not _is_number(value):
                raise SchemaError(f"{player}: non-numeric value for {move}: {value!r}")
            row[move] = float(value)
        table[state] = row
    return table


def validate_model(payload: Any) -> Dict[str, QTable]:
    """Validate a model payload and return {player: table}.

    A payload without a "version" key is read as version 1.
    """
    if not isinstance(payload, Mapping):
        raise SchemaError("model: expected an object")
    version = payload.get("version", MODEL_SCHEMA_VERSION)
    if version != MODEL_SCHEMA_VERSION:
        raise SchemaError(f"model: unsupported schema version {version!r}")
    return {
        player: validate_q_table(payload.get(player, {}), player)
        for player in PLAYER_KEYS
    }


def validate_stats(payload: Any) -> Dict[str, list]:
    if not isinstance(payload, Mapping):
        raise SchemaError("stats: expected an object")
    stats = default_stats()
    for key in STATS_KEYS:
        value = payload.get(key, [])
        if not isinstance(value, list):
            raise SchemaError(f"stats.{key}: expected a list")
        stats[key] = list(value)
    return stats


def validate_checkpoint(payload: Any) -> Checkpoint:
    if not isinstance(payload, Mapping):
        raise SchemaError("checkpoint: expected an object")
    episode = payload.get("episode")
    epsilon = payload.get("epsilon")
    config = payload.get("config", {})
    timestamp = payload.get("timestamp", "")
    if not isinstance(episode, int) or isinstance(episode, bool) or episode < 0:
        raise SchemaError(f"checkpoint.episode: expected a non-negative integer, got {episode!r}")
    if not _is_number(epsilon) or not 0.0 <= epsilon <= 1.0:
        raise SchemaError(f"checkpoint.epsilon: expected a number in [0, 1], got {epsilon!r}")
    if not isinstance(config, Mapping):
        raise SchemaError("checkpoint.config: expected an object")
    if not isinstance(timestamp, str):
        raise SchemaError("checkpoint.timestamp: expected a string")
    return Checkpoint(
        episode=episode, epsilon=float(epsilon), config=dict(config), timestamp=timestamp
    )


class ModelStore:
    """Reads and writes the model, stats and checkpoint files.

    Every save returns True on success and False after logging a failure;
    callers keep training on their in-memory state either way.
    """

    def __init__(self, paths: Optional[Paths] = None, logger=None):
        self.paths = paths or Paths()
        self.logger = logger or default_logger

    def _write_json(self, path: str, payload: Any) -> None:
        directory = os.path.dirname(os.path.abspath(path))
        os.makedirs(directory, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(
            dir=directory, prefix=f".{os.path.basename(path)}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(payload, f, indent=2, allow_nan=False)
            os.replace(tmp_path, path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise

    def _read_json(self, path: str) -> Any:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)

    def _save(self, path: str, payload: Any, what: str) -> bool:
        try:
            self._write_json(path, payload)
        except (OSError, TypeError, ValueError) as exc:
            self.logger.error(f"Failed to save {what} to {path}: {exc}")
            return False
        self.logger.info(f"Saved {what} to {path}")
        return True

    def _load(self, path: str, what: str, validator):
        """Validated payload, or None if absent, unreadable or malformed."""
        if not os.path.exists(path):
            self.logger.info(f"No {what} at {path}, starting fresh")
            return None
        try:
            result = validator(self._read_json(path))
        except (OSError, json.JSONDecodeError, SchemaError) as exc:
            self.logger.error(f"Failed to load {what} from {path}: {exc}")
            return None
        self.logger.info(f"Loaded {what} from {path}")
        return result

    def load_model(self) -> Dict[str, QTable]:
        tables = self._load(self.paths.model_file, "model", validate_model)
        if tables is None:
            return {player: {} for player in PLAYER_KEYS}
        return tables

    def save_model(self, tables: Mapping[str, QTable]) -> bool:
        payload: Dict[str, Any] = {"version": MODEL_SCHEMA_VERSION}
        for player in PLAYER_KEYS:
            payload[player] = {"qValues": tables.get(player, {})}
        return self._save(self.paths.model_file, payload, "model")

    def load_stats(self) -> Dict[str, list]:
        stats = self._load(self.paths.stats_file, "training stats", validate_stats)
        return stats if stats is not None else default_stats()

    def save_stats(self, stats: Mapping[str, list]) -> bool:
        return self._save(self.paths.stats_file, dict(stats), "training stats")

    def load_checkpoint(self) -> Optional[Checkpoint]:
        return self._load(self.paths.checkpoint_file, "checkpoint", validate_checkpoint)

    def save_checkpoint(self, episode: int, epsilon: float, config: Mapping[str, Any]) -> bool:
        checkpoint = Checkpoint(
            episode=episode,
            epsilon=epsilon,
            config=dict(config),
            timestamp=datetime.now(timezone.utc).isoformat(),
        )
        saved = self._save(self.paths.checkpoint_file, checkpoint.to_dict(), "checkpoint")
        if saved:
            self.logger.info(f"Checkpoint at episode {episode}, epsilon {epsilon:.6f}")
        return saved
