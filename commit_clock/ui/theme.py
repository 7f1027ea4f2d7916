"""
Theme - accent palette and the fixed dark heatmap colors
"""
from typing import List, Sequence, Tuple

from PIL import ImageColor


# Color Palette
BG_PRIMARY = '#0f1214'        # Window backdrop
CELL_INACTIVE = '#1f2126'     # Unlit cell

FG_TEXT = '#ffffff'           # PR titles
FG_DIM = '#6b7178'            # Status labels

# Font Configuration
FONT_FAMILY = 'Helvetica'
FONT_SIZE_SMALL = 12
FONT_SIZE_TINY = 10

# Opacity of each noise level (1..3) over the inactive cell
NOISE_ALPHAS = (0.25, 0.45, 0.7)


def hex_to_rgb(color: str) -> Tuple[int, int, int]:
    """Convert hex color to RGB tuple."""
    return ImageColor.getrgb(color)[:3]


def rgb_to_hex(rgb: Sequence[int]) -> str:
    return '#{:02x}{:02x}{:02x}'.format(*(max(0, min(255, int(round(c)))) for c in rgb[:3]))


def blend(fg: str, bg: str, alpha: float) -> str:
    """
    Alpha-blend two hex colors.

    Args:
        fg: Foreground color
        bg: Background color
        alpha: Foreground opacity, 0.0 to 1.0

    Returns:
        Hex color string
    """
    f, b = hex_to_rgb(fg), hex_to_rgb(bg)
    return rgb_to_hex([fc * alpha + bc * (1.0 - alpha) for fc, bc in zip(f, b)])


class Theme:
    """
    Ordered accent colors with one active at a time.
    """

    def __init__(self, palette: Sequence[str], index: int = 0,
                 background: str = BG_PRIMARY, inactive: str = CELL_INACTIVE,
                 active_alpha: float = 1.0, active_alpha_jitter: float = 0.0):
        """
        Args:
            palette: Accent colors as hex strings
            index: Starting accent, wrapped into range
            background: Backdrop behind the cells
            inactive: Unlit cell color
            active_alpha: Opacity of lit cells over the inactive color
            active_alpha_jitter: Per-cell spread of that opacity, 0 keeps it uniform
        """
        if not palette:
            raise ValueError("Theme palette must contain at least one color")
        for color in list(palette) + [background, inactive]:
            hex_to_rgb(color)
        if not (0.0 <= active_alpha <= 1.0 and 0.0 <= active_alpha_jitter <= 1.0):
            raise ValueError("Lit cell opacity and jitter must be between 0 and 1")

        self._palette: List[str] = list(palette)
        self._index = index % len(self._palette)
        self._background = background
        self._inactive = inactive
        self._active_alpha = active_alpha
        self._active_alpha_jitter = active_alpha_jitter

    def current(self) -> str:
        return self._palette[self._index]

    def next(self) -> str:
        """Advance to the next accent, wrapping to the first"""
        self._index = (self._index + 1) % len(self._palette)
        return self.current()

    def shade(self, level: int) -> str:
        """Noise color for an intensity level, the accent blended over the inactive cell"""
        level = max(1, min(level, len(NOISE_ALPHAS)))
        return blend(self.current(), self._inactive, NOISE_ALPHAS[level - 1])

    @property
    def index(self) -> int:
        return self._index

    @property
    def background(self) -> str:
        return self._background

    @property
    def inactive(self) -> str:
        return self._inactive

    @property
    def active_alpha(self) -> float:
        return self._active_alpha

    @property
    def active_alpha_jitter(self) -> float:
        return self._active_alpha_jitter

    @property
    def uniform_lit(self) -> bool:
        """True when every lit cell is drawn in the plain accent"""
        return self._active_alpha >= 1.0 and self._active_alpha_jitter == 0.0

    def __len__(self) -> int:
        return len(self._palette)
