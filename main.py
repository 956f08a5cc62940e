"""
Entry point for the blockfall project.

Supports two modes:
  - play:     Play with keyboard controls in a pygame window.
  - simulate: Run the engine headless with random input and print a summary.

Usage:
    python main.py --mode play
    python main.py --mode play --config config/game.yaml
    python main.py --mode simulate --steps 20000 --seed 7
"""

from __future__ import annotations

import argparse
import pathlib
import sys

import yaml


def load_config(config_path: str | pathlib.Path) -> dict:
    """Load configuration from a YAML file.

    Args:
        config_path: Path to the YAML config file.

    Returns:
        Dict of configuration key-value pairs (empty if the file is empty).

    Raises:
        FileNotFoundError: If the config file does not exist.
    """
    config_path = pathlib.Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")
    with open(config_path, "r") as f:
        return yaml.safe_load(f) or {}


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Returns:
        Namespace with mode, config, steps and seed attributes.
    """
    parser = argparse.ArgumentParser(
        description="blockfall: a falling-block puzzle simulation.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--mode",
        type=str,
        choices=["play", "simulate"],
        default="play",
        help="Run mode: 'play' (keyboard, pygame window) or 'simulate' (headless random input).",
    )
    parser.add_argument(
        "--config",
        type=str,
        default="config/game.yaml",
        help="Path to the YAML configuration file.",
    )
    parser.add_argument(
        "--steps",
        type=int,
        default=10_000,
        help="Number of frames to run in 'simulate' mode.",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for pieces and simulated input (overrides the config seed).",
    )
    return parser.parse_args(argv)


def main() -> None:
    """Main entry point: parse args, load config, and dispatch to the selected mode."""
    args = parse_args()
    config = load_config(args.config)
    if args.seed is not None:
        config["seed"] = args.seed

    if args.mode == "play":
        from blockfall.play import play_manual
        play_manual(config)

    elif args.mode == "simulate":
        if args.steps <= 0:
            print("Error: --steps must be positive.", file=sys.stderr)
            sys.exit(1)
        from blockfall.simulate import simulate
        simulate(config, steps=args.steps, seed=args.seed)

    else:
        print(f"Unknown mode: {args.mode}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
