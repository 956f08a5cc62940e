"""
Record a demo GIF of a headless blockfall session.

Renders snapshots to images using PIL (no pygame needed), then saves as GIF.
Usage: python scripts/record_gif.py [--steps 3000] [--seed 1] [--output assets/demo.gif]
"""

import argparse
import pathlib
import sys

# Ensure project root is on path
PROJECT_ROOT = pathlib.Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from PIL import Image, ImageDraw, ImageFont
from blockfall.game.engine import GameEngine, Snapshot, StepResult
from blockfall.simulate import run_simulation

# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------
OUTPUT_PATH = PROJECT_ROOT / "assets" / "demo.gif"
SIM_FPS = 60
FRAME_EVERY = 4  # keep one simulated frame out of this many
FRAME_DURATION_MS = 1000 * FRAME_EVERY // SIM_FPS

# Visual settings
CELL_SIZE = 24
BOARD_COLS = 10
BOARD_ROWS = 18
SIDEBAR_WIDTH = 120

BOARD_PX_W = BOARD_COLS * CELL_SIZE
BOARD_PX_H = BOARD_ROWS * CELL_SIZE
IMG_W = BOARD_PX_W + SIDEBAR_WIDTH
IMG_H = BOARD_PX_H

# Colors (RGB)
BG_COLOR = (18, 18, 24)
GRID_COLOR = (40, 40, 50)
GRID_LINE_COLOR = (30, 30, 40)
SIDEBAR_BG = (14, 14, 20)
BORDER_COLOR = (80, 80, 100)
LOCKED_COLOR = (150, 150, 160)
LABEL_COLOR = (140, 140, 160)
ACCENT_COLOR = (100, 200, 255)


def darken(color, amount=50):
    return tuple(max(0, c - amount) for c in color)


def lighten(color, amount=40):
    return tuple(min(255, c + amount) for c in color)


def try_load_font(size):
    """Try to load a monospace font, fall back to default."""
    font_paths = [
        "/usr/share/fonts/truetype/dejavu/DejaVuSansMono.ttf",
        "/usr/share/fonts/truetype/liberation/LiberationMono-Regular.ttf",
        "/usr/share/fonts/truetype/freefont/FreeMono.ttf",
    ]
    for fp in font_paths:
        try:
            return ImageFont.truetype(fp, size)
        except OSError:
            continue
    return ImageFont.load_default()


FONT_SMALL = try_load_font(12)
FONT_LARGE = try_load_font(20)


def draw_cell(draw, x, y, color, size=CELL_SIZE):
    """Draw a single filled cell with 3D-style shading."""
    draw.rectangle([x, y, x + size - 1, y + size - 1], fill=color)
    highlight = lighten(color, 60)
    draw.line([(x, y), (x + size - 2, y)], fill=highlight, width=1)
    draw.line([(x, y), (x, y + size - 2)], fill=highlight, width=1)
    shadow = darken(color, 60)
    draw.line([(x + 1, y + size - 1), (x + size - 1, y + size - 1)], fill=shadow, width=1)
    draw.line([(x + size - 1, y + 1), (x + size - 1, y + size - 1)], fill=shadow, width=1)


def cell_origin(x, y):
    """Pixel origin of board cell (x, y); board row 0 is the bottom row."""
    return x * CELL_SIZE, (BOARD_ROWS - 1 - y) * CELL_SIZE


def render_frame(snapshot: Snapshot, stats: dict) -> Image.Image:
    """Render a single snapshot as a PIL Image."""
    img = Image.new("RGB", (IMG_W, IMG_H), BG_COLOR)
    draw = ImageDraw.Draw(img)

    # --- Draw board ---
    for row in range(BOARD_ROWS):
        for col in range(BOARD_COLS):
            px, py = cell_origin(col, row)
            draw.rectangle([px, py, px + CELL_SIZE - 1, py + CELL_SIZE - 1], fill=GRID_COLOR)
            draw.rectangle([px, py, px + CELL_SIZE - 1, py + CELL_SIZE - 1], outline=GRID_LINE_COLOR)

    for x, y in snapshot.occupied:
        draw_cell(draw, *cell_origin(x, y), LOCKED_COLOR)

    if snapshot.piece_color is not None:
        for x, y in snapshot.piece_cells:
            if 0 <= y < BOARD_ROWS:
                draw_cell(draw, *cell_origin(x, y), snapshot.piece_color)

    draw.rectangle([0, 0, BOARD_PX_W - 1, BOARD_PX_H - 1], outline=BORDER_COLOR, width=2)

    # --- Draw sidebar ---
    sx = BOARD_PX_W
    draw.rectangle([sx, 0, IMG_W - 1, IMG_H - 1], fill=SIDEBAR_BG)
    draw.line([(sx, 0), (sx, IMG_H)], fill=BORDER_COLOR, width=2)

    cx = sx + 12
    cy = 12
    for label, key in (("GAMES", "games_played"), ("PIECES", "pieces_locked"), ("ROWS", "rows_cleared")):
        draw.text((cx, cy), label, fill=LABEL_COLOR, font=FONT_SMALL)
        cy += 15
        draw.text((cx, cy), str(stats[key]), fill=ACCENT_COLOR, font=FONT_LARGE)
        cy += 28

    return img


def parse_args():
    parser = argparse.ArgumentParser(description="Record a headless blockfall session to a GIF.")
    parser.add_argument("--steps", type=int, default=3000, help="Simulated frames to run.")
    parser.add_argument("--seed", type=int, default=1, help="Seed for pieces and input.")
    parser.add_argument("--output", type=str, default=str(OUTPUT_PATH), help="Output GIF path.")
    return parser.parse_args()


def main():
    args = parse_args()
    output_path = pathlib.Path(args.output)

    print("Recording demo GIF...")
    print(f"  Steps: {args.steps}")
    print(f"  Seed: {args.seed}")
    print(f"  Output: {output_path}")
    print()

    engine = GameEngine(BOARD_COLS, BOARD_ROWS, seed=args.seed)
    frames = []

    def capture(result: StepResult):
        if engine.steps % FRAME_EVERY == 0 or result.snapshot.game_over:
            frames.append(render_frame(result.snapshot, engine.get_stats()))

    stats = run_simulation(engine, args.steps, fps=SIM_FPS, seed=args.seed, on_step=capture)

    if not frames:
        print("No frames captured; increase --steps.", file=sys.stderr)
        sys.exit(1)

    print(f"Recording complete: {len(frames)} frames")
    print(f"Games: {stats['games_played']} | Pieces: {stats['pieces_locked']} | Rows: {stats['rows_cleared']}")

    print(f"Saving GIF to {output_path}...")
    output_path.parent.mkdir(parents=True, exist_ok=True)

    # Quantize for smaller file size
    quantized_frames = [f.quantize(colors=64, method=Image.Quantize.MEDIANCUT) for f in frames]
    quantized_frames[0].save(
        str(output_path),
        save_all=True,
        append_images=quantized_frames[1:],
        duration=FRAME_DURATION_MS,
        loop=0,
        optimize=True,
    )

    file_size_mb = output_path.stat().st_size / (1024 * 1024)
    print(f"GIF saved: {output_path} ({file_size_mb:.1f} MB)")
    print("Done!")


if __name__ == "__main__":
    main()
