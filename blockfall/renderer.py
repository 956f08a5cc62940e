"""
Pygame renderer for the falling-block game.

Draws the locked cells, the active piece and a sidebar with session
statistics, reading only the engine's Snapshot. Board row 0 is drawn at the
bottom of the window.
"""

from __future__ import annotations

import pygame

from blockfall.game.engine import GameEngine, Snapshot


# ── Color constants ───────────────────────────────────────────────────────
BACKGROUND_COLOR = (30, 30, 30)
GRID_LINE_COLOR = (60, 60, 60)
BORDER_COLOR = (200, 200, 200)
TEXT_COLOR = (255, 255, 255)
SIDEBAR_BG_COLOR = (20, 20, 20)
EMPTY_CELL_COLOR = (40, 40, 40)
LOCKED_CELL_COLOR = (150, 150, 160)


class GameRenderer:
    """Pygame-based renderer for a GameEngine.

    The window is divided into:
      - Left: board area (cell_size * width) x (cell_size * height)
      - Right: sidebar with games, pieces and rows counters

    Attributes:
        engine: The engine whose snapshots are drawn.
        cell_size: Pixel size of each grid cell.
        board_pixel_width: Pixel width of the board area.
        board_pixel_height: Pixel height of the board area.
        sidebar_width: Pixel width of the sidebar.
        screen: Pygame display surface (created on first render).
    """

    SIDEBAR_WIDTH_CELLS: int = 5

    def __init__(self, engine: GameEngine, cell_size: int = 40) -> None:
        """Initialize the renderer.

        Does NOT create the Pygame window yet; that happens on the first
        call to render().

        Args:
            engine: The engine to render.
            cell_size: Size of each grid cell in pixels.
        """
        self.engine = engine
        self.cell_size = cell_size

        self.board_pixel_width = cell_size * engine.width
        self.board_pixel_height = cell_size * engine.height
        self.sidebar_width = cell_size * self.SIDEBAR_WIDTH_CELLS
        self.window_width = self.board_pixel_width + self.sidebar_width
        self.window_height = self.board_pixel_height

        self.screen: pygame.Surface | None = None
        self._clock: pygame.time.Clock | None = None
        self._font: pygame.font.Font | None = None
        self._initialized: bool = False

    def render(self, snapshot: Snapshot, fps: int = 60) -> int:
        """Draw a snapshot to the screen.

        Args:
            snapshot: State to draw.
            fps: Target frames per second for the display clock.

        Returns:
            Milliseconds elapsed since the previous render() call.
        """
        if not self._initialized:
            self._init_pygame()

        self.screen.fill(BACKGROUND_COLOR)
        self._draw_board(snapshot)
        self._draw_piece(snapshot)
        self._draw_sidebar()

        pygame.draw.rect(
            self.screen,
            BORDER_COLOR,
            (0, 0, self.board_pixel_width, self.board_pixel_height),
            2,
        )

        pygame.display.flip()
        return self._clock.tick(fps)

    def _init_pygame(self) -> None:
        pygame.init()
        self.screen = pygame.display.set_mode((self.window_width, self.window_height))
        pygame.display.set_caption("blockfall")
        self._clock = pygame.time.Clock()
        self._font = pygame.font.SysFont("monospace", 20)
        self._initialized = True

    def cell_rect(self, x: int, y: int) -> tuple[int, int, int, int]:
        """Return the pixel rect of board cell (x, y), row 0 at the bottom."""
        screen_row = self.engine.height - 1 - y
        return (x * self.cell_size, screen_row * self.cell_size, self.cell_size, self.cell_size)

    def _draw_cell(self, x: int, y: int, color: tuple[int, int, int]) -> None:
        rect = self.cell_rect(x, y)
        pygame.draw.rect(self.screen, color, rect)
        darker = tuple(max(0, c - 40) for c in color)
        pygame.draw.rect(self.screen, darker, rect, 1)

    def _draw_board(self, snapshot: Snapshot) -> None:
        for y in range(self.engine.height):
            for x in range(self.engine.width):
                rect = self.cell_rect(x, y)
                pygame.draw.rect(self.screen, EMPTY_CELL_COLOR, rect)
                pygame.draw.rect(self.screen, GRID_LINE_COLOR, rect, 1)
        for x, y in snapshot.occupied:
            self._draw_cell(x, y, LOCKED_CELL_COLOR)

    def _draw_piece(self, snapshot: Snapshot) -> None:
        """Draw the active piece; cells in the spawn buffer row are hidden."""
        if snapshot.piece_color is None:
            return
        for x, y in snapshot.piece_cells:
            if 0 <= y < self.engine.height:
                self._draw_cell(x, y, snapshot.piece_color)

    def _draw_sidebar(self) -> None:
        sidebar_x = self.board_pixel_width
        pygame.draw.rect(
            self.screen,
            SIDEBAR_BG_COLOR,
            (sidebar_x, 0, self.sidebar_width, self.window_height),
        )
        pygame.draw.line(
            self.screen,
            BORDER_COLOR,
            (sidebar_x, 0),
            (sidebar_x, self.window_height),
            2,
        )

        text_x = sidebar_x + 15
        text_y = 20
        stats = self.engine.get_stats()
        for label, key in (("GAMES", "games_played"), ("PIECES", "pieces_locked"), ("ROWS", "rows_cleared")):
            self._draw_text(label, text_x, text_y)
            self._draw_text(str(stats[key]), text_x, text_y + 25)
            text_y += 65

    def _draw_text(self, text: str, x: int, y: int, color: tuple[int, int, int] = TEXT_COLOR) -> None:
        surface = self._font.render(text, True, color)
        self.screen.blit(surface, (x, y))

    def close(self) -> None:
        """Shut down Pygame and close the window."""
        if self._initialized:
            pygame.quit()
            self._initialized = False
