"""
Training script for the tabular Othello self-play agents.

This module wires the command line, logging, interruption handling and
fatal-error reporting around the Trainer. Ctrl-C stops training at the next
episode boundary after writing a checkpoint.
"""

import argparse
import signal
import sys
import threading

from tabular_rl.othello.config import GameConfig, Paths, TrainingConfig
from tabular_rl.othello.logging_setup import LOG_LEVELS, setup_logger
from tabular_rl.othello.trainer import Trainer

EXIT_INTERRUPTED = 130


def install_fatal_handler(logger) -> None:
    """Log uncaught exceptions as CRITICAL and exit with status 1."""

    def handle_exception(exc_type, exc_value, exc_traceback):
        if issubclass(exc_type, KeyboardInterrupt):
            sys.__excepthook__(exc_type, exc_value, exc_traceback)
            return
        logger.opt(exception=(exc_type, exc_value, exc_traceback)).critical(
            f"Unhandled exception: {exc_value}"
        )
        sys.exit(1)

    sys.excepthook = handle_exception


def install_interrupt_handler(stop_event: threading.Event) -> None:
    """Turn SIGINT into a stop request polled between episodes.

    The handler only sets the event and must not log: loguru sinks are not
    re-entrant.
    """

    def handle_sigint(signum, frame):
        stop_event.set()

    signal.signal(signal.SIGINT, handle_sigint)


def build_config(args) -> TrainingConfig:
    return TrainingConfig(
        episodes=args.episodes,
        initial_epsilon=args.initial_epsilon,
        epsilon_decay=args.epsilon_decay,
        min_epsilon=args.min_epsilon,
        alpha=args.alpha,
        gamma=args.gamma,
        save_interval=args.save_interval,
        checkpoint_interval=args.checkpoint_interval or args.save_interval,
        progress_interval=args.progress_interval,
        start_from_checkpoint=args.resume,
        seed=args.seed,
        game=GameConfig(max_turns=args.max_turns),
    )


def train_othello(args) -> int:
    """Train both agents with self-play.

    Args:
        args: Parsed command-line arguments containing training configuration.

    Returns:
        Process exit status.
    """
    logger = setup_logger(level=args.log_level, log_file=args.log_file)
    install_fatal_handler(logger)

    stop_event = threading.Event()
    install_interrupt_handler(stop_event)
    logger.info("Press Ctrl-C to stop after the current episode")

    paths = Paths(
        model_file=args.model_file,
        stats_file=args.stats_file,
        checkpoint_file=args.checkpoint_file,
        log_file=args.log_file,
    )
    trainer = Trainer(build_config(args), paths=paths, logger=logger, stop_event=stop_event)
    summary = trainer.train()

    logger.info(
        f"Episodes {summary.start_episode}..{summary.last_episode}, "
        f"final epsilon {summary.epsilon:.6f}"
    )
    return EXIT_INTERRUPTED if summary.interrupted else 0


def build_arg_parser() -> argparse.ArgumentParser:
    defaults = TrainingConfig()
    paths = Paths()
    parser = argparse.ArgumentParser(
        description="Train two tabular Q-learning Othello agents with self-play"
    )

    # Training parameters
    parser.add_argument(
        "--episodes",
        type=int,
        default=defaults.episodes,
        help=f"Train up to this episode index (default: {defaults.episodes})",
    )
    parser.add_argument(
        "--save-interval",
        type=int,
        default=defaults.save_interval,
        help=f"Save model and stats every N episodes (default: {defaults.save_interval})",
    )
    parser.add_argument(
        "--checkpoint-interval",
        type=int,
        default=None,
        help="Save a resume checkpoint every N episodes (default: same as --save-interval)",
    )
    parser.add_argument(
        "--progress-interval",
        type=int,
        default=defaults.progress_interval,
        help=f"Log progress every N episodes (default: {defaults.progress_interval})",
    )
    parser.add_argument(
        "--resume",
        action=argparse.BooleanOptionalAction,
        default=defaults.start_from_checkpoint,
        help="Resume episode and epsilon from the checkpoint file (default: true)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for the exploration RNG (default: None)",
    )
    parser.add_argument(
        "--max-turns",
        type=int,
        default=GameConfig().max_turns,
        help=f"Turn cap per episode (default: {GameConfig().max_turns})",
    )

    # Q-learning hyperparameters
    parser.add_argument(
        "--alpha",
        type=float,
        default=defaults.alpha,
        help=f"Learning rate (default: {defaults.alpha})",
    )
    parser.add_argument(
        "--gamma",
        type=float,
        default=defaults.gamma,
        help=f"Discount factor (default: {defaults.gamma})",
    )
    parser.add_argument(
        "--initial-epsilon",
        type=float,
        default=defaults.initial_epsilon,
        help=f"Starting exploration rate (default: {defaults.initial_epsilon})",
    )
    parser.add_argument(
        "--epsilon-decay",
        type=float,
        default=defaults.epsilon_decay,
        help=f"Per-episode epsilon multiplier (default: {defaults.epsilon_decay})",
    )
    parser.add_argument(
        "--min-epsilon",
        type=float,
        default=defaults.min_epsilon,
        help=f"Epsilon floor (default: {defaults.min_epsilon})",
    )

    # Files and logging
    parser.add_argument(
        "--model-file",
        type=str,
        default=paths.model_file,
        help=f"Model (value tables) file (default: {paths.model_file})",
    )
    parser.add_argument(
        "--stats-file",
        type=str,
        default=paths.stats_file,
        help=f"Training stats file (default: {paths.stats_file})",
    )
    parser.add_argument(
        "--checkpoint-file",
        type=str,
        default=paths.checkpoint_file,
        help=f"Resume checkpoint file (default: {paths.checkpoint_file})",
    )
    parser.add_argument(
        "--log-file",
        type=str,
        default=paths.log_file,
        help=f"Log file, truncated on start (default: {paths.log_file})",
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        default="INFO",
        help="Console and file log level (default: INFO)",
    )
    return parser


def main(argv=None) -> int:
    """Parse arguments and start training."""
    args = build_arg_parser().parse_args(argv)
    try:
        build_config(args).validate()
    except ValueError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2
    return train_othello(args)


if __name__ == "__main__":
    sys.exit(main())
