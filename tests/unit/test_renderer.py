import sys
import unittest
from pathlib import Path

import numpy as np

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT))

from commit_clock.ui.grid import CellState, FrameBuilder
from commit_clock.ui.layout import LayoutEngine
from commit_clock.ui.noise import NoiseGenerator
from commit_clock.ui.renderer import MIN_LIT_ALPHA, CanvasRenderer, cell_colors, lit_alphas, render_image
from commit_clock.ui.theme import Theme


class FakeCanvas:
    def __init__(self):
        self.items = {}
        self.updates = []
        self.deleted = []

    def create_rectangle(self, x0, y0, x1, y1, **options):
        item = len(self.items) + 1
        self.items[item] = dict(options, coords=(x0, y0, x1, y1))
        return item

    def itemconfig(self, item, **options):
        self.items[item].update(options)
        self.updates.append(item)

    def delete(self, tag):
        self.deleted.append(tag)


class RendererTests(unittest.TestCase):
    def setUp(self):
        self.theme = Theme(['#40c463', '#2e87e0'], background='#0f1214', inactive='#1f2126')
        self.frames = FrameBuilder(LayoutEngine(cols=40, rows=26), NoiseGenerator(0.1, seed=3))
        self.grid = self.frames.render_frame("12:34", "SAT 17", meridiem=None)

    def test_cell_colors(self):
        colors = cell_colors(self.grid, self.theme)
        lit = self.grid.cells == CellState.LIT
        unlit = self.grid.cells == CellState.UNLIT
        noise = self.grid.cells == CellState.NOISE

        self.assertTrue((colors[lit] == '#40c463').all())
        self.assertTrue((colors[unlit] == '#1f2126').all())
        self.assertTrue(noise.any())
        for row, col in zip(*noise.nonzero()):
            self.assertEqual(colors[row, col], self.theme.shade(int(self.grid.levels[row, col])))

    def test_first_paint_creates_every_cell(self):
        canvas = FakeCanvas()
        renderer = CanvasRenderer(canvas, cell_size=5, cell_gap=2, origin=(16, 16))
        touched = renderer.paint(self.grid, self.theme)

        self.assertEqual(touched, 40 * 26)
        self.assertEqual(len(canvas.items), 40 * 26)
        self.assertEqual(canvas.items[1]['coords'], (16, 16, 21, 21))
        self.assertEqual(canvas.items[2]['coords'], (23, 16, 28, 21))

    def test_repaint_only_touches_changed_cells(self):
        canvas = FakeCanvas()
        renderer = CanvasRenderer(canvas)
        renderer.paint(self.grid, self.theme)

        self.assertEqual(renderer.paint(self.grid, self.theme), 0)

        self.theme.next()
        touched = renderer.paint(self.grid, self.theme)
        self.assertEqual(touched, self.grid.count(CellState.LIT) + self.grid.count(CellState.NOISE))
        self.assertEqual(len(canvas.items), 40 * 26)

    def test_reset_recreates_cells(self):
        canvas = FakeCanvas()
        renderer = CanvasRenderer(canvas)
        renderer.paint(self.grid, self.theme)
        renderer.reset()
        self.assertEqual(canvas.deleted, ['cell'])
        self.assertEqual(renderer.paint(self.grid, self.theme), 40 * 26)

    def test_render_image(self):
        image = render_image(self.grid, self.theme, cell_size=4, cell_gap=1, padding=10)
        self.assertEqual(image.size, (10 * 2 + 40 * 5 - 1, 10 * 2 + 26 * 5 - 1))
        self.assertEqual(image.getpixel((0, 0)), (15, 18, 20))

        lit_row, lit_col = np.argwhere(self.grid.lit_mask())[0]
        x = 10 + int(lit_col) * 5
        y = 10 + int(lit_row) * 5
        self.assertEqual(image.getpixel((x, y)), (0x40, 0xc4, 0x63))



class LitOpacityTests(unittest.TestCase):
    def setUp(self):
        self.theme = Theme(['#40c463'], inactive='#1f2126', active_alpha=0.82, active_alpha_jitter=0.4)
        frames = FrameBuilder(LayoutEngine(cols=40, rows=26), NoiseGenerator(0.0))
        self.grid = frames.render_frame("12:34", "SAT 17")

    def test_lit_cells_vary_but_stay_lit(self):
        colors = cell_colors(self.grid, self.theme)
        lit_colors = set(colors[self.grid.cells == CellState.LIT])

        self.assertGreater(len(lit_colors), 1)
        self.assertNotIn('#1f2126', lit_colors)
        self.assertTrue((colors[self.grid.cells == CellState.UNLIT] == '#1f2126').all())

    def test_opacity_is_stable_across_frames(self):
        first = cell_colors(self.grid, self.theme)
        second = cell_colors(self.grid, self.theme)
        self.assertTrue((first == second).all())

    def test_alphas_are_clamped(self):
        alphas = lit_alphas(26, 40, base=0.5, jitter=1.0)
        self.assertEqual(alphas.shape, (26, 40))
        self.assertGreaterEqual(alphas.min(), MIN_LIT_ALPHA)
        self.assertLessEqual(alphas.max(), 1.0)
        self.assertTrue((lit_alphas(4, 4, base=0.7, jitter=0.0) == 0.7).all())


if __name__ == "__main__":
    unittest.main()
