"""
Main Window - Tkinter pixel clock with a 1 Hz redraw timer
"""
import tkinter as tk
import webbrowser
from typing import List, Optional, Tuple

from ..core.app_state import AppState
from ..core.clock_service import ClockService
from ..core.logging_service import LoggingService
from ..core.pr_poller import ConnectionStatus, PrPoller
from . import theme as palette
from .grid import FrameBuilder
from .renderer import CanvasRenderer
from .titles import split_title, ticket_link


OVERLAY_HEIGHT = 72
TITLE_GAP = 4


class MainWindow:
    """
    Owns the Tk event loop. Every tick drains fetch results, derives the
    display strings and repaints; key presses mutate AppState and repaint
    immediately.
    """

    def __init__(
        self,
        state: AppState,
        clock_service: ClockService,
        frames: FrameBuilder,
        logger: LoggingService,
        pr_poller: Optional[PrPoller] = None,
        cell_size: int = 5,
        cell_gap: int = 2,
        padding: int = 16,
        update_interval: int = 1000,
        ticket_url: Optional[str] = None
    ):
        """
        Initialize main window.

        Args:
            state: Application state shared with the renderer
            clock_service: Wall-clock source
            frames: Frame builder for the configured grid
            logger: Logging service
            pr_poller: Pull request poller, None when the overlay is off
            cell_size: Cell edge in pixels
            cell_gap: Pixels between cells
            padding: Border around the grid in pixels
            update_interval: Redraw interval in milliseconds
            ticket_url: Tracker URL with a {key} placeholder for keys in PR titles
        """
        self._state = state
        self._clock = clock_service
        self._frames = frames
        self._logger = logger
        self._pr_poller = pr_poller

        self._cell_size = cell_size
        self._cell_gap = cell_gap
        self._padding = padding
        self._update_interval = update_interval
        self._ticket_url = ticket_url

        step = cell_size + cell_gap
        layout = frames.layout
        self._grid_width = layout.cols * step - cell_gap
        self._grid_height = layout.rows * step - cell_gap
        self._width = self._grid_width + padding * 2
        self._height = self._grid_height + padding * 2 + (OVERLAY_HEIGHT if pr_poller else 0)

        self._root: Optional[tk.Tk] = None
        self._canvas: Optional[tk.Canvas] = None
        self._renderer: Optional[CanvasRenderer] = None

        self._label_id: Optional[int] = None
        self._title_ids: List[int] = []
        self._shown_titles: Tuple[Tuple[str, str], ...] = ()
        self._running = False

    def initialize(self) -> None:
        """Create the window, canvas and key bindings"""
        self._logger.info("Initializing UI window")

        self._root = tk.Tk()
        self._root.title("")
        self._root.configure(bg=self._state.theme.background)
        self._root.geometry(f"{self._width}x{self._height}")
        self._root.resizable(False, False)

        self._canvas = tk.Canvas(
            self._root,
            width=self._width,
            height=self._height,
            bg=self._state.theme.background,
            highlightthickness=0
        )
        self._canvas.pack(fill=tk.BOTH, expand=True)

        self._renderer = CanvasRenderer(
            self._canvas, self._cell_size, self._cell_gap, origin=(self._padding, self._padding)
        )

        if self._pr_poller:
            self._label_id = self._canvas.create_text(
                self._width - self._padding, self._grid_height + self._padding * 2,
                text='', anchor='ne', fill=palette.FG_DIM,
                font=(palette.FONT_FAMILY, palette.FONT_SIZE_SMALL, 'bold')
            )

        self._root.bind('<KeyPress-c>', self._on_next_theme)
        self._root.bind('<KeyPress-h>', self._on_toggle_hours)
        self._root.bind('<KeyPress-f>', self._on_cycle_time_format)
        self._root.bind('<KeyPress-r>', self._on_refresh)
        self._root.bind('<KeyPress-q>', lambda event: self.stop())
        self._root.bind('<Escape>', lambda event: self.stop())
        self._root.protocol("WM_DELETE_WINDOW", self.stop)

        self._logger.info(f"UI initialized: {self._width}x{self._height}")

    def redraw(self) -> None:
        """Rebuild and paint the current frame"""
        reading = self._state.clock.format_now(self._clock.now())
        grid = self._frames.render_frame(
            reading.time, reading.date, meridiem=reading.meridiem, year=reading.year
        )
        self._renderer.paint(grid, self._state.theme)
        self._update_overlay()

    def _tick(self) -> None:
        """Timer callback, always reschedules itself while running"""
        if not self._running:
            return

        try:
            if self._pr_poller:
                self._pr_poller.drain()
                self._pr_poller.poll_due()
            self.redraw()
        except Exception as e:
            self._logger.error(f"UI update error: {e}", exc_info=True)

        if self._running and self._root:
            self._root.after(self._update_interval, self._tick)

    def _update_overlay(self) -> None:
        if not self._pr_poller or self._label_id is None:
            return

        pr = self._state.pr
        text = pr.label
        if pr.in_flight and text:
            text = f"{text} ..."

        color = self._state.theme.current() if pr.status == ConnectionStatus.CONNECTED else palette.FG_DIM
        self._canvas.itemconfig(self._label_id, text=text, fill=color)

        titles = tuple((p.title, p.url) for p in pr.pull_requests)
        if titles != self._shown_titles:
            self._draw_titles(titles)

    def _draw_titles(self, titles: Tuple[Tuple[str, str], ...]) -> None:
        """Recent PR titles under the grid, click to open"""
        for item in self._title_ids:
            self._canvas.delete(item)
        self._title_ids = []
        self._shown_titles = titles

        y = self._grid_height + self._padding * 2
        right = self._padding + self._grid_width - 80
        accent = self._state.theme.current()

        for title, url in titles:
            before, key, after = split_title(title)
            x = self._padding
            bottom = y + palette.FONT_SIZE_TINY

            # tracker keys are drawn in the accent and link to the tracker when one is configured
            for text, is_key in ((before, False), (key, True), (after, False)):
                if not text:
                    continue
                fill = accent if is_key else palette.FG_TEXT
                hover = palette.FG_TEXT if is_key else accent
                link = (ticket_link(key, self._ticket_url) or url) if is_key else url

                item = self._canvas.create_text(
                    x, y, text=text, anchor='nw', width=max(right - x, 40), fill=fill,
                    font=(palette.FONT_FAMILY, palette.FONT_SIZE_TINY)
                )
                self._bind_link(item, link, fill, hover)
                self._title_ids.append(item)

                bbox = self._canvas.bbox(item)
                if bbox:
                    x = bbox[2]
                    bottom = max(bottom, bbox[3])

            y = bottom + TITLE_GAP

    def _bind_link(self, item: int, url: str, fill: str, hover: str) -> None:
        self._canvas.tag_bind(item, '<Button-1>', lambda event: self._open_url(url))
        self._canvas.tag_bind(item, '<Enter>', lambda event: self._canvas.itemconfig(item, fill=hover))
        self._canvas.tag_bind(item, '<Leave>', lambda event: self._canvas.itemconfig(item, fill=fill))

    def _open_url(self, url: str) -> None:
        self._logger.info(f"Opening {url}")
        try:
            webbrowser.open(url)
        except webbrowser.Error as e:
            self._logger.warning(f"Could not open browser: {e}")

    def _on_next_theme(self, event=None) -> None:
        color = self._state.theme.next()
        self._shown_titles = ()
        self._logger.debug(f"Theme {self._state.theme.index}: {color}")
        self.redraw()

    def _on_toggle_hours(self, event=None) -> None:
        hour_format = self._state.clock.toggle_format()
        self._logger.debug(f"Hour format: {hour_format.value}h")
        self.redraw()

    def _on_cycle_time_format(self, event=None) -> None:
        time_format = self._state.clock.cycle_time_format()
        self._logger.debug(f"Time format: {time_format.value}")
        self.redraw()

    def _on_refresh(self, event=None) -> None:
        if self._pr_poller:
            self._pr_poller.request_refresh()
        self.redraw()

    def start(self) -> None:
        """Start UI event loop"""
        if not self._root:
            self.initialize()

        self._logger.info("Starting UI event loop")
        self._running = True

        self.redraw()
        self._root.after(self._update_interval, self._tick)

        self._root.mainloop()

    def stop(self) -> None:
        """Stop UI and cleanup"""
        self._logger.info("Stopping UI")
        self._running = False

        if self._root:
            try:
                self._root.quit()
                self._root.destroy()
            except tk.TclError as e:
                self._logger.error(f"Error during UI cleanup: {e}")

        self._root = None

    def is_running(self) -> bool:
        return self._running
