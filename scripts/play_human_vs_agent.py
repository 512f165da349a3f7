#!/usr/bin/env python3
"""
Human vs Agent Othello Game Script

This script lets a human play Othello against the trained value tables.

Usage:
    python scripts/play_human_vs_agent.py [--model-file PATH] [--human-color black|white]

Examples:
    # Play Black against the default model.json
    python scripts/play_human_vs_agent.py

    # Play White against a specific model
    python scripts/play_human_vs_agent.py --model-file runs/model.json --human-color white
"""

from tabular_rl.othello.play_human_vs_agent import main

if __name__ == "__main__":
    main()
