"""
Glyphs - fixed 5x7 pixel font
"""
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

import numpy as np


GLYPH_ROWS = 7
GLYPH_COLS = 5

# Columns a blank glyph (space or unsupported character) advances
BLANK_ADVANCE = 3

_PATTERNS: Dict[str, Tuple[str, ...]] = {
    '0': ('.###.', '#...#', '#..##', '#.#.#', '##..#', '#...#', '.###.'),
    '1': ('..#..', '.##..', '..#..', '..#..', '..#..', '..#..', '.###.'),
    '2': ('.###.', '#...#', '....#', '...#.', '..#..', '.#...', '#####'),
    '3': ('.###.', '#...#', '....#', '..##.', '....#', '#...#', '.###.'),
    '4': ('...#.', '..##.', '.#.#.', '#..#.', '#####', '...#.', '...#.'),
    '5': ('#####', '#....', '####.', '....#', '....#', '#...#', '.###.'),
    '6': ('.###.', '#...#', '#....', '####.', '#...#', '#...#', '.###.'),
    '7': ('#####', '....#', '...#.', '..#..', '.#...', '.#...', '.#...'),
    '8': ('.###.', '#...#', '#...#', '.###.', '#...#', '#...#', '.###.'),
    '9': ('.###.', '#...#', '#...#', '.####', '....#', '#...#', '.###.'),
    ':': ('.....', '..#..', '..#..', '.....', '..#..', '..#..', '.....'),
    '-': ('.....', '.....', '.....', '.###.', '.....', '.....', '.....'),
    '/': ('....#', '....#', '...#.', '..#..', '.#...', '#....', '#....'),
    '.': ('.....', '.....', '.....', '.....', '.....', '.##..', '.##..'),
    'A': ('.###.', '#...#', '#...#', '#####', '#...#', '#...#', '#...#'),
    'B': ('####.', '#...#', '#...#', '####.', '#...#', '#...#', '####.'),
    'C': ('.###.', '#...#', '#....', '#....', '#....', '#...#', '.###.'),
    'D': ('####.', '#...#', '#...#', '#...#', '#...#', '#...#', '####.'),
    'E': ('#####', '#....', '#....', '####.', '#....', '#....', '#####'),
    'F': ('#####', '#....', '#....', '####.', '#....', '#....', '#....'),
    'G': ('.###.', '#...#', '#....', '#.###', '#...#', '#...#', '.###.'),
    'H': ('#...#', '#...#', '#...#', '#####', '#...#', '#...#', '#...#'),
    'I': ('#####', '..#..', '..#..', '..#..', '..#..', '..#..', '#####'),
    'J': ('..###', '...#.', '...#.', '...#.', '...#.', '#..#.', '.##..'),
    'K': ('#...#', '#..#.', '#.#..', '##...', '#.#..', '#..#.', '#...#'),
    'L': ('#....', '#....', '#....', '#....', '#....', '#....', '#####'),
    'M': ('#...#', '##.##', '#.#.#', '#...#', '#...#', '#...#', '#...#'),
    'N': ('#...#', '##..#', '#.#.#', '#..##', '#...#', '#...#', '#...#'),
    'O': ('.###.', '#...#', '#...#', '#...#', '#...#', '#...#', '.###.'),
    'P': ('####.', '#...#', '#...#', '####.', '#....', '#....', '#....'),
    'Q': ('.###.', '#...#', '#...#', '#...#', '#.#.#', '#..#.', '.##.#'),
    'R': ('####.', '#...#', '#...#', '####.', '#.#..', '#..#.', '#...#'),
    'S': ('.###.', '#....', '#....', '.###.', '....#', '....#', '###..'),
    'T': ('#####', '..#..', '..#..', '..#..', '..#..', '..#..', '..#..'),
    'U': ('#...#', '#...#', '#...#', '#...#', '#...#', '#...#', '.###.'),
    'V': ('#...#', '#...#', '#...#', '#...#', '#...#', '.#.#.', '..#..'),
    'W': ('#...#', '#...#', '#...#', '#.#.#', '#.#.#', '##.##', '#...#'),
    'X': ('#...#', '.#.#.', '..#..', '..#..', '..#..', '.#.#.', '#...#'),
    'Y': ('#...#', '#...#', '.#.#.', '..#..', '..#..', '..#..', '..#..'),
    'Z': ('#####', '....#', '...#.', '..#..', '.#...', '#....', '#####'),
    ' ': ('.....',) * GLYPH_ROWS,
}


@dataclass(frozen=True, eq=False)
class Glyph:
    """One character's bitmap. ``bitmap`` is a read-only 7x5 bool array."""
    char: str
    bitmap: np.ndarray

    @property
    def is_blank(self) -> bool:
        return not self.bitmap.any()


def _build(char: str, pattern: Tuple[str, ...]) -> Glyph:
    if len(pattern) != GLYPH_ROWS or any(len(line) != GLYPH_COLS for line in pattern):
        raise ValueError(f"Glyph {char!r} is not {GLYPH_ROWS}x{GLYPH_COLS}")
    bitmap = np.array([[cell == '#' for cell in line] for line in pattern], dtype=bool)
    bitmap.setflags(write=False)
    return Glyph(char, bitmap)


GLYPHS: Dict[str, Glyph] = {char: _build(char, pattern) for char, pattern in _PATTERNS.items()}
BLANK = GLYPHS[' ']


def is_supported(char: str) -> bool:
    return char.upper() in GLYPHS


def lookup(char: str) -> Glyph:
    """
    Get the glyph for a character.

    Lower-case letters map to upper case. Anything outside the table gets the
    blank glyph, so one bad character never breaks a frame.
    """
    return GLYPHS.get(char.upper(), BLANK)


def lit_bounds(glyph: Glyph) -> Optional[Tuple[int, int]]:
    """First and last lit column, or None for a blank glyph"""
    columns = np.flatnonzero(glyph.bitmap.any(axis=0))
    if columns.size == 0:
        return None
    return int(columns[0]), int(columns[-1])
