"""
Tests for the training entry point and logger setup.
"""

import json
import signal
import sys
import threading

import pytest
from loguru import logger

from tabular_rl.othello import train
from tabular_rl.othello.config import Paths, TrainingConfig
from tabular_rl.othello.logging_setup import setup_logger
from tabular_rl.othello.persistence import ModelStore
from tabular_rl.othello.trainer import Trainer


@pytest.fixture
def restore_process_hooks(monkeypatch):
    """Undo the sink, excepthook and SIGINT changes made by the entry point."""
    monkeypatch.setattr(sys, "excepthook", sys.excepthook)
    previous_handler = signal.getsignal(signal.SIGINT)
    yield
    signal.signal(signal.SIGINT, previous_handler)
    logger.remove()


def cli_args(tmp_path, *extra):
    return [
        "--model-file", str(tmp_path / "model.json"),
        "--stats-file", str(tmp_path / "training_stats.json"),
        "--checkpoint-file", str(tmp_path / "training_checkpoint.json"),
        "--log-file", str(tmp_path / "game.log"),
        "--log-level", "warning",
        *extra,
    ]


class TestTrainMain:
    """Test suite for the training command."""

    def test_short_run_writes_artifacts(self, tmp_path, restore_process_hooks):
        """Test that a short run writes the model, stats and checkpoint files."""
        status = train.main(
            cli_args(tmp_path, "--episodes", "3", "--save-interval", "2", "--seed", "0")
        )

        assert status == 0
        with open(tmp_path / "training_checkpoint.json", encoding="utf-8") as f:
            checkpoint = json.load(f)
        assert checkpoint["episode"] == 3
        assert checkpoint["config"]["save_interval"] == 2
        assert checkpoint["config"]["checkpoint_interval"] == 2
        with open(tmp_path / "training_stats.json", encoding="utf-8") as f:
            assert json.load(f)["episodes"] == [2, 3]
        with open(tmp_path / "model.json", encoding="utf-8") as f:
            assert json.load(f)["version"] == 1

    def test_resume_flag(self, tmp_path, restore_process_hooks):
        """Test that runs resume by default and start over with --no-resume."""
        train.main(cli_args(tmp_path, "--episodes", "2", "--seed", "0"))
        train.main(cli_args(tmp_path, "--episodes", "4", "--seed", "0"))
        with open(tmp_path / "training_stats.json", encoding="utf-8") as f:
            assert json.load(f)["episodes"] == [2, 4]

        train.main(cli_args(tmp_path, "--episodes", "1", "--seed", "0", "--no-resume"))
        with open(tmp_path / "training_checkpoint.json", encoding="utf-8") as f:
            assert json.load(f)["episode"] == 1

    def test_installs_handlers(self, tmp_path, restore_process_hooks):
        """Test that the command installs its excepthook and SIGINT handler."""
        hook = sys.excepthook
        train.main(cli_args(tmp_path, "--episodes", "1"))
        assert sys.excepthook is not hook
        assert signal.getsignal(signal.SIGINT) not in (
            signal.default_int_handler,
            signal.SIG_DFL,
        )

    @pytest.mark.parametrize(
        "extra",
        [
            ("--alpha", "1.5"),
            ("--epsilon-decay", "0"),
            ("--save-interval", "0"),
            ("--max-turns", "0"),
        ],
    )
    def test_invalid_options_exit_with_usage_error(self, tmp_path, capsys, extra):
        """Test that out-of-range options exit with status 2 before training."""
        assert train.main(cli_args(tmp_path, *extra)) == 2
        assert "Error:" in capsys.readouterr().err
        assert not (tmp_path / "model.json").exists()

    def test_checkpoint_interval_defaults_to_save_interval(self):
        """Test that the checkpoint cadence follows --save-interval unless given."""
        args = train.build_arg_parser().parse_args(["--save-interval", "25"])
        assert train.build_config(args).checkpoint_interval == 25
        args = train.build_arg_parser().parse_args(
            ["--save-interval", "25", "--checkpoint-interval", "5"]
        )
        assert train.build_config(args).checkpoint_interval == 5

    def test_unknown_log_level_is_rejected(self):
        """Test that argparse rejects an unknown log level."""
        with pytest.raises(SystemExit):
            train.build_arg_parser().parse_args(["--log-level", "chatty"])


class TestInterruptHandler:
    """Test suite for SIGINT handling."""

    def test_sigint_stops_after_current_episode(self, tmp_path, restore_process_hooks):
        """Test that the installed handler only sets the stop event, and the
        trainer checkpoints the episode it just finished."""
        messages = []
        logger.add(messages.append, level="DEBUG", format="{message}")
        stop_event = threading.Event()
        train.install_interrupt_handler(stop_event)

        handler = signal.getsignal(signal.SIGINT)
        handler(signal.SIGINT, None)

        assert stop_event.is_set()
        assert messages == []

        store = ModelStore(Paths(
            model_file=str(tmp_path / "model.json"),
            stats_file=str(tmp_path / "training_stats.json"),
            checkpoint_file=str(tmp_path / "training_checkpoint.json"),
        ))
        trainer = Trainer(
            TrainingConfig(episodes=100, seed=0, start_from_checkpoint=False),
            store=store,
            stop_event=stop_event,
        )
        summary = trainer.train()

        assert summary.interrupted
        assert summary.last_episode == 1
        checkpoint = store.load_checkpoint()
        assert checkpoint.episode == 1
        assert checkpoint.epsilon == trainer.epsilon
        assert any("Training interrupted after episode 1" in m for m in messages)


class TestFatalHandler:
    """Test suite for uncaught exception reporting."""

    def test_logs_critical_and_exits(self, restore_process_hooks):
        """Test that an uncaught exception is logged as CRITICAL and exits with 1."""
        messages = []
        logger.add(messages.append, level="CRITICAL", format="{level} {message}")
        train.install_fatal_handler(logger)

        try:
            raise RuntimeError("boom")
        except RuntimeError as exc:
            with pytest.raises(SystemExit) as exit_info:
                sys.excepthook(type(exc), exc, exc.__traceback__)

        assert exit_info.value.code == 1
        assert any("CRITICAL Unhandled exception: boom" in m for m in messages)


class TestSetupLogger:
    """Test suite for loguru sink configuration."""

    def test_file_sink_is_truncated(self, tmp_path, restore_process_hooks):
        """Test that the log file is truncated and written at the chosen level."""
        log_file = tmp_path / "game.log"
        log_file.write_text("stale line\n", encoding="utf-8")

        log = setup_logger(level="INFO", log_file=str(log_file), console=False)
        log.debug("hidden")
        log.info("fresh line")
        logger.remove()

        text = log_file.read_text(encoding="utf-8")
        assert "stale line" not in text
        assert "hidden" not in text
        assert "[INFO] - fresh line" in text

    def test_invalid_level(self):
        """Test that an unknown level name raises ValueError."""
        with pytest.raises(ValueError, match="Invalid log level"):
            setup_logger(level="LOUD")
