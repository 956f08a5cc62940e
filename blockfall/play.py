"""
Manual play mode.

The player steers the falling piece with the arrow keys; the engine's
timers handle gravity and horizontal repeat, so this loop only samples the
keyboard, forwards the frame delta and draws the result.
"""

from __future__ import annotations

from typing import Any

import pygame

from blockfall.game.engine import Command, GameEngine, KeyLatch, StepResult
from blockfall.renderer import GameRenderer


# ── Keyboard mapping ──────────────────────────────────────────────────────
# Left/Right move (repeat while held), Down hard-drops, Up rotates clockwise
KEY_MAP: dict[int, Command] = {
    pygame.K_LEFT: Command.MOVE_LEFT,
    pygame.K_RIGHT: Command.MOVE_RIGHT,
    pygame.K_DOWN: Command.HARD_DROP,
    pygame.K_UP: Command.ROTATE_CW,
}


def held_commands(keys: Any) -> set[Command]:
    """Map a pygame key-state sequence to the commands currently held."""
    return {command for key, command in KEY_MAP.items() if keys[key]}


def report_step(result: StepResult, engine: GameEngine) -> None:
    """Print a line when the step ended in a game-over reset."""
    if result.snapshot.game_over:
        stats = engine.get_stats()
        print(
            f"Game over #{stats['games_played']} | Pieces: {stats['pieces_locked']}"
            f" | Rows: {stats['rows_cleared']} | Steps: {stats['steps']}"
        )


def play_manual(config: dict[str, Any]) -> None:
    """Run the game in manual (human) play mode.

    Controls:
      - Left/Right arrow: move piece (repeats while held)
      - Down arrow: hard drop
      - Up arrow: rotate clockwise
      - Escape / close window: quit

    Args:
        config: Config dict loaded from game.yaml.
    """
    engine = GameEngine.from_config(config)
    renderer = GameRenderer(engine, cell_size=config.get("cell_size", 40))
    fps = config.get("fps", 60)
    latch = KeyLatch()

    # Force renderer init before the event loop (pygame must be initialized for event.get())
    renderer.render(engine.snapshot(), fps)
    delta_ms = 0
    running = True

    while running:
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                running = False
            elif event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE:
                running = False

        if not running:
            break

        held = held_commands(pygame.key.get_pressed())
        pressed = latch.update(held)
        result = engine.step(delta_ms, held, pressed)
        report_step(result, engine)

        delta_ms = renderer.render(result.snapshot, fps)

    renderer.close()
    stats = engine.get_stats()
    print(
        f"Session ended | Games: {stats['games_played']} | Pieces: {stats['pieces_locked']}"
        f" | Rows: {stats['rows_cleared']}"
    )
