"""
Noise - sparse heatmap-style filler for unlit cells
"""
from typing import Optional, Sequence

import numpy as np


# Probability of each noise level 1..3, faint cells dominate like a quiet contribution graph
LEVEL_WEIGHTS = (0.6, 0.3, 0.1)


class NoiseGenerator:
    """
    Marks unlit cells as noise, each independently with probability ``density``.
    """

    def __init__(self, density: float = 0.04, seed: Optional[int] = None,
                 level_weights: Sequence[float] = LEVEL_WEIGHTS):
        """
        Args:
            density: Default per-cell probability, 0.0 to 1.0
            seed: Fixed seed for reproducible frames, None for a fresh random source
            level_weights: Relative frequency of intensity levels 1..n
        """
        if not 0.0 <= density <= 1.0:
            raise ValueError(f"Noise density must be between 0 and 1, got {density}")

        weights = np.asarray(level_weights, dtype=float)
        self._level_p = weights / weights.sum()
        self._density = density
        self._rng = np.random.default_rng(seed)

    def sample(self, unlit: np.ndarray, density: Optional[float] = None) -> np.ndarray:
        """
        Draw noise levels for one frame.

        Args:
            unlit: Bool mask of cells that may receive noise
            density: Override for this frame

        Returns:
            uint8 array shaped like ``unlit``: 0 for no noise, otherwise the level
        """
        density = self._density if density is None else density
        if not 0.0 <= density <= 1.0:
            raise ValueError(f"Noise density must be between 0 and 1, got {density}")

        levels = np.zeros(unlit.shape, dtype=np.uint8)
        if density == 0.0:
            return levels

        hit = unlit & (self._rng.random(unlit.shape) < density)
        count = int(hit.sum())
        if count:
            levels[hit] = self._rng.choice(
                np.arange(1, len(self._level_p) + 1, dtype=np.uint8), size=count, p=self._level_p
            )
        return levels

    @property
    def density(self) -> float:
        return self._density

    @property
    def max_level(self) -> int:
        return len(self._level_p)
