"""
Headless simulation: drives the engine with random key input at a fixed
frame rate, without opening a window. Used by the `simulate` CLI mode and
by scripts/record_gif.py.
"""

from __future__ import annotations

import random
import time
from typing import Any, Callable

from blockfall.game.engine import Command, GameEngine, KeyLatch, StepResult


class RandomController:
    """Produces a plausible stream of held keys.

    Each frame, every key is held with some probability; a held key tends to
    stay held for a few frames so that repeats and presses both happen.
    """

    def __init__(self, seed: int | None = None, hold_probability: float = 0.15, release_probability: float = 0.3) -> None:
        self._rng = random.Random(seed)
        self.hold_probability = hold_probability
        self.release_probability = release_probability
        self._held: set[Command] = set()

    def next_held(self) -> set[Command]:
        for command in Command:
            if command in self._held:
                if self._rng.random() < self.release_probability:
                    self._held.discard(command)
            elif self._rng.random() < self.hold_probability:
                self._held.add(command)
        # Left and right together cancel out; keep only one.
        if {Command.MOVE_LEFT, Command.MOVE_RIGHT} <= self._held:
            self._held.discard(self._rng.choice([Command.MOVE_LEFT, Command.MOVE_RIGHT]))
        return set(self._held)


def run_simulation(
    engine: GameEngine,
    steps: int,
    fps: int = 60,
    seed: int | None = None,
    on_step: Callable[[StepResult], None] | None = None,
) -> dict[str, int]:
    """Step the engine with random input.

    Args:
        engine: Engine to drive.
        steps: Number of frames to simulate.
        fps: Simulated frame rate; each frame advances 1000 / fps ms.
        seed: Seed for the input stream.
        on_step: Called with every StepResult, e.g. to capture frames.

    Returns:
        The engine's statistics after the run.
    """
    controller = RandomController(seed)
    latch = KeyLatch()
    delta_ms = 1000.0 / fps
    for _ in range(steps):
        held = controller.next_held()
        result = engine.step(delta_ms, held, latch.update(held))
        if on_step is not None:
            on_step(result)
    return engine.get_stats()


def simulate(config: dict[str, Any], steps: int = 10_000, seed: int | None = None) -> dict[str, int]:
    """Run a headless session and print a summary.

    Args:
        config: Config dict loaded from game.yaml.
        steps: Number of frames to simulate.
        seed: Seed for the input stream (the piece seed comes from config).

    Returns:
        The engine's statistics after the run.
    """
    engine = GameEngine.from_config(config)
    fps = config.get("fps", 60)

    print(f"Simulating {steps} steps at {fps} FPS ({steps / fps:.1f}s of game time)")
    start = time.perf_counter()

    def report(result: StepResult) -> None:
        if result.snapshot.game_over:
            print(
                f"  Game over #{engine.games_played} at step {engine.steps}"
                f" | Pieces: {engine.pieces_locked} | Rows: {engine.rows_cleared}"
            )

    stats = run_simulation(engine, steps, fps=fps, seed=seed, on_step=report)
    elapsed = time.perf_counter() - start

    print(
        f"Done in {elapsed:.2f}s | Games: {stats['games_played']} | Pieces: {stats['pieces_locked']}"
        f" | Rows: {stats['rows_cleared']} | Occupied: {stats['occupied']}"
    )
    return stats
