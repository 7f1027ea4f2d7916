"""
Renderer - paints a GridBuffer onto a Tk canvas or a PIL image
"""
from typing import Optional, Tuple

import numpy as np
from PIL import Image, ImageDraw

from .grid import CellState, GridBuffer
from .noise import LEVEL_WEIGHTS
from .theme import Theme, blend, hex_to_rgb

_LEVELS = len(LEVEL_WEIGHTS) + 1

# Lit cells never fade below this opacity
MIN_LIT_ALPHA = 0.2


def lit_alphas(rows: int, cols: int, base: float, jitter: float) -> np.ndarray:
    """
    Opacity of every lit cell position.

    The offset of each cell comes from a hash of its position and is the
    same in every frame.
    """
    row, col = np.indices((rows, cols))
    hashed = ((col * 29 + row * 91) & 255) / 255.0
    return np.clip(base + (hashed - 0.5) * 2.0 * jitter, MIN_LIT_ALPHA, 1.0)


def cell_colors(grid: GridBuffer, theme: Theme) -> np.ndarray:
    """
    Resolve every cell to a hex color.

    LIT cells take the accent (faded per cell when the theme asks for it),
    NOISE cells the accent shade for their level, UNLIT cells the inactive color.

    Returns:
        Object array of hex strings shaped like the grid
    """
    lut = np.empty(len(CellState) * _LEVELS, dtype=object)
    lut[:] = theme.inactive
    for level in range(1, _LEVELS):
        lut[CellState.NOISE * _LEVELS + level] = theme.shade(level)
    lut[CellState.LIT * _LEVELS:] = theme.current()

    keys = grid.cells.astype(np.intp) * _LEVELS + np.minimum(grid.levels, _LEVELS - 1)
    colors = lut[keys]

    lit = grid.cells == CellState.LIT
    if not theme.uniform_lit and lit.any():
        alphas = lit_alphas(grid.rows, grid.cols, theme.active_alpha, theme.active_alpha_jitter)[lit]
        levels, inverse = np.unique(alphas, return_inverse=True)
        shades = np.array([blend(theme.current(), theme.inactive, float(a)) for a in levels], dtype=object)
        colors[lit] = shades[inverse]

    return colors


class CanvasRenderer:
    """
    Draws the grid as one rectangle per cell on a tkinter Canvas.

    Rectangles are created on the first paint; later paints only re-color
    cells whose color changed.
    """

    def __init__(self, canvas, cell_size: int = 5, cell_gap: int = 2, origin: Tuple[int, int] = (0, 0)):
        """
        Args:
            canvas: tkinter Canvas (anything with create_rectangle/itemconfig)
            cell_size: Cell edge in pixels
            cell_gap: Pixels between cells
            origin: (x, y) of the top-left cell
        """
        self._canvas = canvas
        self._cell = cell_size
        self._step = cell_size + cell_gap
        self._origin = origin
        self._items: Optional[np.ndarray] = None
        self._colors: Optional[np.ndarray] = None

    def _create_cells(self, rows: int, cols: int, colors: np.ndarray) -> None:
        x0, y0 = self._origin
        self._items = np.zeros((rows, cols), dtype=np.int64)
        for row in range(rows):
            for col in range(cols):
                x = x0 + col * self._step
                y = y0 + row * self._step
                self._items[row, col] = self._canvas.create_rectangle(
                    x, y, x + self._cell, y + self._cell,
                    fill=colors[row, col], width=0, tags=('cell',)
                )

    def paint(self, grid: GridBuffer, theme: Theme) -> int:
        """
        Paint a frame.

        Returns:
            Number of rectangles touched
        """
        colors = cell_colors(grid, theme)

        if self._items is None or self._items.shape != colors.shape:
            if self._items is not None:
                self._canvas.delete('cell')
            self._create_cells(grid.rows, grid.cols, colors)
            self._colors = colors
            return colors.size

        changed = np.argwhere(colors != self._colors)
        for row, col in changed:
            self._canvas.itemconfig(int(self._items[row, col]), fill=colors[row, col])
        self._colors = colors
        return len(changed)

    def reset(self) -> None:
        """Forget drawn state so the next paint recreates every cell"""
        if self._items is not None:
            self._canvas.delete('cell')
        self._items = None
        self._colors = None


def render_image(grid: GridBuffer, theme: Theme, cell_size: int = 5, cell_gap: int = 2,
                 padding: int = 16) -> Image.Image:
    """
    Render a frame off-screen.

    Args:
        grid: Frame to draw
        theme: Colors to use
        cell_size: Cell edge in pixels
        cell_gap: Pixels between cells
        padding: Backdrop border in pixels

    Returns:
        RGB PIL image
    """
    step = cell_size + cell_gap
    width = padding * 2 + grid.cols * step - cell_gap
    height = padding * 2 + grid.rows * step - cell_gap

    image = Image.new('RGB', (width, height), hex_to_rgb(theme.background))
    draw = ImageDraw.Draw(image)
    colors = cell_colors(grid, theme)

    for row in range(grid.rows):
        y = padding + row * step
        for col in range(grid.cols):
            x = padding + col * step
            draw.rectangle([x, y, x + cell_size - 1, y + cell_size - 1], fill=hex_to_rgb(colors[row, col]))

    return image
