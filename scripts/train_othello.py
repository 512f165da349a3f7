#!/usr/bin/env python3
"""
Self-play training script for the tabular Othello agents.

Usage:
    python scripts/train_othello.py [--episodes N] [--save-interval N] [--no-resume]

Examples:
    # Train (or continue training) up to episode 100000
    python scripts/train_othello.py

    # Short reproducible run from scratch
    python scripts/train_othello.py --episodes 1000 --seed 0 --no-resume

    # Verbose run with a separate model file
    python scripts/train_othello.py --model-file runs/model.json --log-level DEBUG
"""

import sys

from tabular_rl.othello.train import main

if __name__ == "__main__":
    sys.exit(main())
