"""
Layout - places glyphs for the year, date and time lines on the cell grid
"""
from dataclasses import dataclass, replace
from typing import Iterable, List, Optional, Tuple

from ..core.logging_service import get_logger
from .glyphs import BLANK_ADVANCE, GLYPH_ROWS, Glyph, lit_bounds, lookup


@dataclass(frozen=True)
class Segment:
    """A run of text drawn at one scale"""
    text: str
    scale: int = 1


@dataclass(frozen=True)
class Placement:
    """
    One glyph on the grid.

    ``first_col``/``width`` select the glyph's bitmap columns that are drawn,
    ``row``/``col`` are the grid origin of the (scaled) result.
    """
    char: str
    glyph: Glyph
    row: int
    col: int
    scale: int
    first_col: int
    width: int

    @property
    def span(self) -> int:
        """Grid columns covered"""
        return self.width * self.scale

    @property
    def end_col(self) -> int:
        return self.col + self.span

    @property
    def height(self) -> int:
        return GLYPH_ROWS * self.scale


class LayoutEngine:
    """
    Fixed band layout: an optional year line, the date line, then the time
    line beneath them.

    Lines are centered horizontally. A line wider than the grid keeps the
    longest prefix of whole glyphs that fits and drops the rest.
    """

    def __init__(
        self,
        cols: int,
        rows: int,
        margin_rows: int = 2,
        band_gap: int = 3,
        date_scale: int = 1,
        time_scale: int = 2,
        glyph_gap: int = 1,
        show_year: bool = False,
        year_gap: int = 2
    ):
        """
        Initialize layout engine.

        Args:
            cols: Grid width in cells
            rows: Grid height in cells
            margin_rows: Empty rows above the first band
            band_gap: Empty rows between the date and time bands
            date_scale: Cells per glyph pixel on the date line and AM/PM
            time_scale: Cells per glyph pixel on the time line
            glyph_gap: Columns between glyphs, multiplied by the scale
            show_year: Reserve a year band above the date band
            year_gap: Empty rows between the year and date bands

        Raises:
            ValueError: If the grid cannot hold its bands
        """
        if cols <= 0 or rows <= 0:
            raise ValueError(f"Grid must be at least 1x1, got {cols}x{rows}")
        if date_scale < 1 or time_scale < 1:
            raise ValueError("Glyph scales must be at least 1")
        if glyph_gap < 1:
            raise ValueError("glyph_gap must be at least 1 column")
        if margin_rows < 0 or band_gap < 0 or year_gap < 0:
            raise ValueError("Row gaps cannot be negative")

        self._cols = cols
        self._rows = rows
        self._date_scale = date_scale
        self._time_scale = time_scale
        self._glyph_gap = glyph_gap
        self._logger = get_logger()

        self._show_year = show_year
        self._year_top = margin_rows
        self._date_top = margin_rows
        if show_year:
            self._date_top += GLYPH_ROWS * date_scale + year_gap
        self._time_top = self._date_top + GLYPH_ROWS * date_scale + band_gap
        time_height = GLYPH_ROWS * max(time_scale, date_scale)

        required = self._time_top + time_height
        if required > rows:
            raise ValueError(f"Grid needs at least {required} rows for its bands, has {rows}")

    @staticmethod
    def extent(glyph: Glyph) -> Tuple[int, int]:
        """(first column, width) of the part of a glyph that is drawn"""
        bounds = lit_bounds(glyph)
        if bounds is None:
            return 0, BLANK_ADVANCE
        first, last = bounds
        return first, last - first + 1

    def layout_line(self, segments: Iterable[Segment], top_row: int) -> List[Placement]:
        """
        Place a line of text segments.

        Segments share a baseline: smaller scales are bottom-aligned with
        larger ones. Glyphs that do not fit entirely are clipped from the end.

        Args:
            segments: Text runs in reading order
            top_row: Grid row of the top of the line

        Returns:
            Placements, left to right, centered in the grid width
        """
        segments = [s for s in segments if s.text]
        if not segments:
            return []

        line_height = max(GLYPH_ROWS * s.scale for s in segments)
        placements: List[Placement] = []
        cursor = 0
        prev_scale: Optional[int] = None
        dropped = ''

        for segment in segments:
            for index, char in enumerate(segment.text):
                glyph = lookup(char)
                first, width = self.extent(glyph)

                start = cursor
                if prev_scale is not None:
                    start += self._glyph_gap * max(prev_scale, segment.scale)
                end = start + width * segment.scale

                if end > self._cols:
                    dropped = segment.text[index:]
                    break

                row = top_row + line_height - GLYPH_ROWS * segment.scale
                placements.append(Placement(char, glyph, row, start, segment.scale, first, width))
                cursor = end
                prev_scale = segment.scale

            if dropped:
                break

        if dropped:
            self._logger.debug(f"Line clipped to grid width {self._cols}, dropped {dropped!r}")

        offset = (self._cols - cursor) // 2
        return [replace(p, col=p.col + offset) for p in placements]

    def layout_frame(
        self,
        time_text: str,
        date_text: str,
        meridiem: Optional[str] = None,
        year_text: Optional[str] = None
    ) -> List[Placement]:
        """
        Place the year line (when enabled), the date line and the time line
        (with optional AM/PM).

        Returns:
            Year, date and time placements in that order
        """
        year_line = []
        if self._show_year and year_text:
            year_line = self.layout_line([Segment(year_text, self._date_scale)], self._year_top)
        date_line = self.layout_line([Segment(date_text, self._date_scale)], self._date_top)
        time_line = self.layout_line(
            [Segment(time_text, self._time_scale), Segment(meridiem or '', self._date_scale)],
            self._time_top
        )
        return year_line + date_line + time_line

    @property
    def show_year(self) -> bool:
        return self._show_year

    @property
    def cols(self) -> int:
        return self._cols

    @property
    def rows(self) -> int:
        return self._rows

    @property
    def dimensions(self) -> Tuple[int, int]:
        """(rows, cols)"""
        return (self._rows, self._cols)
