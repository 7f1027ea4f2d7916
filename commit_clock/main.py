"""
Main entry point for Commit Clock
"""
import argparse
import signal
import sys
from functools import partial
from pathlib import Path
from typing import List, Optional

from commit_clock.core.app_state import AppState
from commit_clock.core.clock_service import ClockService, ClockState, HourFormat, TimeFormat
from commit_clock.core.config_service import config
from commit_clock.core.credentials import load_github_token
from commit_clock.core.github_service import GithubService
from commit_clock.core.logging_service import get_logger
from commit_clock.core.pr_poller import PrPoller
from commit_clock.ui.grid import FrameBuilder
from commit_clock.ui.layout import LayoutEngine
from commit_clock.ui.noise import NoiseGenerator
from commit_clock.ui.renderer import render_image
from commit_clock.ui.theme import Theme


class Application:
    """
    Main application orchestrator.
    """

    def __init__(self, config_path: Optional[Path] = None, log_level: Optional[str] = None):
        """
        Initialize application.

        Args:
            config_path: Config file searched before the default locations
            log_level: Overrides logging.level from config
        """
        config.reload(config_path)

        level = log_level or config.get('logging.level', 'INFO')
        self._logger = get_logger('commit-clock', level)
        self._logger.set_level(level)

        self._logger.log_startup(config.get('app.version', '1.0.0'), self._get_config_summary())
        if config.source:
            self._logger.info(f"Configuration loaded from {config.source}")

        self._clock_service: Optional[ClockService] = None
        self._frames: Optional[FrameBuilder] = None
        self._pr_poller: Optional[PrPoller] = None
        self._state: Optional[AppState] = None
        self._main_window = None
        self._stopped = False

    def _get_config_summary(self) -> dict:
        """Get configuration summary for logging"""
        return {
            'timezone': config.get('clock.timezone', 'local'),
            'hour_format': config.get('clock.hour_format', 24),
            'grid': {
                'cols': config.get('grid.cols'),
                'rows': config.get('grid.rows'),
            },
            'github': config.get('github.enabled', True),
        }

    def _initialize_services(self, with_pull_requests: bool = True) -> None:
        """Build clock, frame pipeline, theme and pull request poller"""
        self._logger.info("Initializing services")

        self._clock_service = ClockService(config.get('clock.timezone', 'local'))
        self._logger.info(f"Clock service initialized: timezone={self._clock_service.timezone}")

        layout = LayoutEngine(
            cols=config.get('grid.cols'),
            rows=config.get('grid.rows'),
            margin_rows=config.get('grid.margin_rows', 2),
            band_gap=config.get('grid.band_gap', 3),
            date_scale=config.get('grid.date_scale', 1),
            time_scale=config.get('grid.time_scale', 2),
            glyph_gap=config.get('grid.glyph_gap', 1),
            show_year=config.get('grid.show_year', True),
            year_gap=config.get('grid.year_gap', 2),
        )
        noise = NoiseGenerator(config.get('noise.density', 0.04), seed=config.get('noise.seed'))
        self._frames = FrameBuilder(layout, noise)

        clock_state = ClockState(
            hour_format=HourFormat(config.get('clock.hour_format', 24)),
            time_format=TimeFormat(config.get('clock.time_format', 'HH:MM')),
            show_am_pm=config.get('clock.show_am_pm', True),
        )
        theme = Theme(
            config.get('theme.palette'),
            index=config.get('theme.index', 0),
            background=config.get('theme.background'),
            inactive=config.get('theme.inactive'),
            active_alpha=config.get('theme.active_alpha', 0.82),
            active_alpha_jitter=config.get('theme.active_alpha_jitter', 0.4),
        )
        self._state = AppState(clock=clock_state, theme=theme)

        if not with_pull_requests:
            return

        if config.get('github.enabled', True):
            self._pr_poller = PrPoller(
                token_loader=partial(load_github_token, config.get('github.token_file')),
                service_factory=partial(
                    self._build_github_service,
                    api_url=config.get('github.api_url'),
                    timeout=config.get('github.timeout', 4),
                ),
                interval=config.get('github.poll_interval', 300),
                state=self._state.pr,
            )
            self._pr_poller.start()
        else:
            self._logger.info("Pull request overlay disabled in config")

    @staticmethod
    def _build_github_service(token: str, api_url: str, timeout: float) -> GithubService:
        return GithubService(token, api_url=api_url, timeout=timeout)

    def _initialize_ui(self) -> None:
        # tkinter is only needed once a window is opened, --snapshot runs headless
        from commit_clock.ui.main_window import MainWindow

        self._logger.info("Initializing UI")
        self._main_window = MainWindow(
            state=self._state,
            clock_service=self._clock_service,
            frames=self._frames,
            logger=self._logger,
            pr_poller=self._pr_poller,
            cell_size=config.get('grid.cell_size', 5),
            cell_gap=config.get('grid.cell_gap', 2),
            padding=config.get('display.padding', 16),
            update_interval=config.get('display.update_interval', 1000),
            ticket_url=config.get('github.ticket_url'),
        )
        self._main_window.initialize()

    def _setup_signal_handlers(self) -> None:
        """Setup signal handlers for graceful shutdown"""
        def signal_handler(signum, frame):
            self._logger.info(f"Received signal {signum}, shutting down")
            self.shutdown()
            sys.exit(0)

        signal.signal(signal.SIGINT, signal_handler)
        signal.signal(signal.SIGTERM, signal_handler)

    def snapshot(self, path: Path) -> Path:
        """
        Render the current frame to an image file without opening a window.

        Args:
            path: Output file, format chosen from the suffix

        Returns:
            The written path
        """
        self._initialize_services(with_pull_requests=False)
        reading = self._state.clock.format_now(self._clock_service.now())
        grid = self._frames.render_frame(
            reading.time, reading.date, meridiem=reading.meridiem, year=reading.year
        )
        image = render_image(
            grid,
            self._state.theme,
            cell_size=config.get('grid.cell_size', 5),
            cell_gap=config.get('grid.cell_gap', 2),
            padding=config.get('display.padding', 16),
        )
        image.save(path)
        self._logger.info(f"Snapshot written to {path}")
        return path

    def run(self) -> None:
        """Run the application"""
        try:
            self._setup_signal_handlers()
            self._initialize_services()
            self._initialize_ui()

            self._logger.info("Application started successfully")
            self._main_window.start()

        except KeyboardInterrupt:
            self._logger.info("Keyboard interrupt received")
        except Exception as e:
            self._logger.critical(f"Fatal error: {e}", exc_info=True)
            raise
        finally:
            self.shutdown()

    def shutdown(self) -> None:
        """Cleanup and shutdown, safe to call more than once"""
        if self._stopped:
            return
        self._stopped = True

        if self._main_window and self._main_window.is_running():
            self._main_window.stop()

        if self._pr_poller:
            self._pr_poller.stop()
            self._pr_poller = None

        self._logger.log_shutdown()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='commit-clock', description='Pixel-art heatmap clock')
    parser.add_argument('--config', type=Path, help='YAML config file')
    parser.add_argument('--log-level', choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
                        type=str.upper, help='Override logging.level')
    parser.add_argument('--snapshot', type=Path, metavar='PNG',
                        help='Render one frame to an image and exit')
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point"""
    args = build_parser().parse_args(argv)
    app = Application(config_path=args.config, log_level=args.log_level)

    if args.snapshot:
        try:
            app.snapshot(args.snapshot)
        finally:
            app.shutdown()
        return 0

    app.run()
    return 0


if __name__ == '__main__':
    sys.exit(main())
