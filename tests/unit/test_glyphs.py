import sys
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT))

from commit_clock.ui.glyphs import BLANK, GLYPH_COLS, GLYPH_ROWS, GLYPHS, is_supported, lit_bounds, lookup


class GlyphTableTests(unittest.TestCase):
    def test_every_supported_glyph_is_7x5(self):
        for char, glyph in GLYPHS.items():
            with self.subTest(char=char):
                self.assertEqual(glyph.bitmap.shape, (GLYPH_ROWS, GLYPH_COLS))
                self.assertIs(lookup(char), glyph)

    def test_clock_characters_are_supported(self):
        for char in '0123456789:AMP -/.':
            self.assertTrue(is_supported(char), char)
            self.assertEqual(lookup(char).char, char)

    def test_unsupported_characters_are_blank(self):
        for char in ('?', '#', 'é', '€', ''):
            with self.subTest(char=char):
                glyph = lookup(char)
                self.assertIs(glyph, BLANK)
                self.assertTrue(glyph.is_blank)
                self.assertEqual(glyph.bitmap.shape, (GLYPH_ROWS, GLYPH_COLS))

    def test_lower_case_maps_to_upper_case(self):
        self.assertIs(lookup('p'), lookup('P'))
        self.assertTrue(is_supported('m'))

    def test_bitmaps_are_read_only(self):
        with self.assertRaises(ValueError):
            lookup('8').bitmap[0, 0] = False

    def test_lit_bounds(self):
        self.assertEqual(lit_bounds(lookup('8')), (0, 4))
        self.assertEqual(lit_bounds(lookup('1')), (1, 3))
        self.assertEqual(lit_bounds(lookup(':')), (2, 2))
        self.assertIsNone(lit_bounds(BLANK))


if __name__ == "__main__":
    unittest.main()
