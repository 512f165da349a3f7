"""
Human vs Agent Othello game (CLI).

The agent side plays greedily from a saved model file (see ModelPolicy) and
falls back to random legal moves for positions it has never seen.
"""

from __future__ import annotations

import argparse
from typing import Callable, List, Optional

from tabular_rl.othello.board import BLACK, WHITE, Board, PLAYER_NAMES, opponent
from tabular_rl.othello.config import Paths
from tabular_rl.othello.logging_setup import setup_logger
from tabular_rl.othello.policy import ModelPolicy

QUIT = "q"


def get_human_move(valid_moves: List[str], input_fn: Callable[[str], str] = input) -> Optional[str]:
    """
    Get move input from human player via console.

    Args:
        valid_moves: Legal moves in notation, e.g. ["D3", "C4"]
        input_fn: Prompt function (replaceable for tests)

    Returns:
        The chosen move, or None if the player quits.
    """
    print("\nValid moves: " + ", ".join(valid_moves))

    while True:
        try:
            user_input = input_fn("\nEnter your move (e.g. D3) or 'q' to quit: ").strip().upper()
        except (EOFError, KeyboardInterrupt):
            print("\nQuitting game...")
            return None

        if user_input == QUIT.upper():
            print("Quitting game...")
            return None

        if user_input not in valid_moves:
            print(f"Invalid move: {user_input}. Valid moves are: {', '.join(valid_moves)}")
            continue

        return user_input


def play_game(
    policy: Callable[[Board], Optional[str]],
    human_color: str = "black",
    input_fn: Callable[[str], str] = input,
) -> Optional[Board]:
    """
    Play a game of Othello with human vs agent.

    Args:
        policy: Agent policy, called with the board and returning a move
        human_color: Color for human player ("black" or "white")
        input_fn: Prompt function for the human's moves

    Returns:
        The final board, or None if the human quit.
    """
    human = BLACK if human_color == "black" else WHITE
    board = Board()

    print("\n" + "=" * 60)
    print("OTHELLO - Human vs Agent")
    print("=" * 60)
    print(f"Human plays as: {human_color.upper()}")
    print("Enter moves as a column letter and a row number, e.g. D3.")
    print("Valid moves are marked with '*' on the board.")
    print("=" * 60 + "\n")
    print(board.render())

    move_count = 0
    while board.has_moves(BLACK) or board.has_moves(WHITE):
        valid_moves = board.get_available_moves()
        if not valid_moves:
            print(f"\n{PLAYER_NAMES[board.current_player]} has no valid moves and passes.")
            board.current_player = opponent(board.current_player)
            continue

        move_count += 1
        print(f"\n{'=' * 60}")
        print(f"Move {move_count}")
        print(f"{'=' * 60}")

        if board.current_player == human:
            print("Your turn!")
            move = get_human_move(valid_moves, input_fn)
            if move is None:
                return None
        else:
            move = policy(board)
            print(f"Agent plays: {move}")

        board.make_move(move)
        print(board.render())

    scores = board.get_scores()
    print("\n" + "=" * 60)
    print("GAME OVER")
    print("=" * 60)
    print("\nFinal score:")
    print(f"  ● Black: {scores.black}")
    print(f"  ○ White: {scores.white}")

    human_score, agent_score = (
        (scores.black, scores.white) if human == BLACK else (scores.white, scores.black)
    )
    if human_score == agent_score:
        print("\nResult: DRAW")
    elif human_score > agent_score:
        print("\nYOU WIN!")
    else:
        print("\nYou lost. Better luck next time!")
    return board


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="Play Othello against the trained tables")
    parser.add_argument(
        "--model-file",
        type=str,
        default=Paths().model_file,
        help=f"Model file to play against (default: {Paths().model_file})",
    )
    parser.add_argument(
        "--human-color",
        type=str,
        choices=["black", "white"],
        default="black",
        help="Color for human player (default: black)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for the agent's random fallback moves (default: None)",
    )
    return parser.parse_args(argv)


def main(argv=None) -> None:
    """Main entry point."""
    args = parse_args(argv)
    logger = setup_logger(level="WARNING")
    policy = ModelPolicy.from_file(args.model_file, seed=args.seed, logger=logger)
    if not policy.loaded:
        print("No trained model found; the agent will play random moves.")
    play_game(policy, args.human_color)


if __name__ == "__main__":
    main()
