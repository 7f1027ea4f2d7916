"""
Grid - per-frame cell buffer and frame composition
"""
from enum import IntEnum
from typing import Iterable, Optional

import numpy as np

from .layout import LayoutEngine, Placement
from .noise import NoiseGenerator


class CellState(IntEnum):
    UNLIT = 0
    NOISE = 1
    LIT = 2


class GridBuffer:
    """
    Cell states for one frame plus the intensity of each noise cell.
    """

    def __init__(self, rows: int, cols: int):
        self.cells = np.full((rows, cols), CellState.UNLIT, dtype=np.uint8)
        self.levels = np.zeros((rows, cols), dtype=np.uint8)

    @property
    def rows(self) -> int:
        return self.cells.shape[0]

    @property
    def cols(self) -> int:
        return self.cells.shape[1]

    def stamp(self, placement: Placement) -> None:
        """Light the cells covered by a placed glyph, clipped to the grid"""
        bitmap = placement.glyph.bitmap[:, placement.first_col:placement.first_col + placement.width]
        if not bitmap.any():
            return
        block = np.kron(bitmap, np.ones((placement.scale, placement.scale), dtype=bool)).astype(bool)

        top, left = placement.row, placement.col
        r0, c0 = max(top, 0), max(left, 0)
        r1 = min(top + block.shape[0], self.rows)
        c1 = min(left + block.shape[1], self.cols)
        if r0 >= r1 or c0 >= c1:
            return

        region = block[r0 - top:r1 - top, c0 - left:c1 - left]
        self.cells[r0:r1, c0:c1][region] = CellState.LIT

    def apply_noise(self, levels: np.ndarray) -> None:
        mask = (levels > 0) & (self.cells == CellState.UNLIT)
        self.cells[mask] = CellState.NOISE
        self.levels[mask] = levels[mask]

    def count(self, state: CellState) -> int:
        return int((self.cells == state).sum())

    def lit_mask(self) -> np.ndarray:
        return self.cells == CellState.LIT

    def unlit_mask(self) -> np.ndarray:
        return self.cells == CellState.UNLIT


class FrameBuilder:
    """
    Builds a fresh GridBuffer per frame from display strings.
    """

    def __init__(self, layout: LayoutEngine, noise: Optional[NoiseGenerator] = None):
        self._layout = layout
        self._noise = noise or NoiseGenerator()

    def render_frame(
        self,
        time_text: str,
        date_text: str,
        noise_density: Optional[float] = None,
        meridiem: Optional[str] = None,
        year: Optional[str] = None
    ) -> GridBuffer:
        """
        Compose one frame.

        Args:
            time_text: Time line, e.g. "14:07"
            date_text: Date line, e.g. "SAT 17 OCT"
            noise_density: Per-cell noise probability, generator default if None
            meridiem: AM/PM indicator drawn after the time
            year: Year line, drawn when the layout has a year band

        Returns:
            New GridBuffer; nothing carries over from earlier frames
        """
        grid = GridBuffer(self._layout.rows, self._layout.cols)
        self.stamp_all(grid, self._layout.layout_frame(time_text, date_text, meridiem, year))
        grid.apply_noise(self._noise.sample(grid.unlit_mask(), noise_density))
        return grid

    @staticmethod
    def stamp_all(grid: GridBuffer, placements: Iterable[Placement]) -> None:
        for placement in placements:
            grid.stamp(placement)

    @property
    def layout(self) -> LayoutEngine:
        return self._layout
