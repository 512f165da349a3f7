"""
Shared fixtures for the Othello test suite.
"""

import pytest
from loguru import logger

from tabular_rl.othello.agent import QAgent
from tabular_rl.othello.config import Paths
from tabular_rl.othello.persistence import ModelStore


@pytest.fixture(autouse=True, scope="session")
def quiet_logger():
    """Drop loguru's default DEBUG sink so per-move logging stays cheap."""
    logger.remove()
    yield


@pytest.fixture
def paths(tmp_path):
    return Paths(
        model_file=str(tmp_path / "model.json"),
        stats_file=str(tmp_path / "training_stats.json"),
        checkpoint_file=str(tmp_path / "training_checkpoint.json"),
        log_file=str(tmp_path / "game.log"),
    )


@pytest.fixture
def store(paths):
    return ModelStore(paths)


@pytest.fixture
def agents():
    return QAgent("player1"), QAgent("player2")
