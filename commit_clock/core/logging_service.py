"""
Logging Service - Console logging with configurable levels
"""
import sys
import logging
from typing import Optional


LEVELS = {
    'DEBUG': logging.DEBUG,
    'INFO': logging.INFO,
    'WARNING': logging.WARNING,
    'ERROR': logging.ERROR,
    'CRITICAL': logging.CRITICAL
}


class LoggingService:
    """
    Thin wrapper over a named stdlib logger with a single stdout handler.
    """

    def __init__(self, name: str = 'commit-clock', level: str = 'INFO'):
        """
        Initialize logging service.

        Args:
            name: Logger name
            level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        """
        self._logger = logging.getLogger(name)
        self._set_level(level)
        self._setup_handlers()

    def _set_level(self, level: str) -> None:
        """Set logging level from string, unknown names fall back to INFO"""
        self._logger.setLevel(LEVELS.get(str(level).upper(), logging.INFO))

    def _setup_handlers(self) -> None:
        """Replace any existing handlers with one formatted stdout handler"""
        self._logger.handlers.clear()

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(self._logger.level)
        console_handler.setFormatter(logging.Formatter(
            '%(asctime)s [%(levelname)s] %(name)s: %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        ))

        self._logger.addHandler(console_handler)
        self._logger.propagate = False

    def debug(self, message: str, **kwargs) -> None:
        self._logger.debug(message, extra=kwargs)

    def info(self, message: str, **kwargs) -> None:
        self._logger.info(message, extra=kwargs)

    def warning(self, message: str, **kwargs) -> None:
        self._logger.warning(message, extra=kwargs)

    def error(self, message: str, exc_info: bool = False, **kwargs) -> None:
        """
        Log error message.

        Args:
            message: Error message
            exc_info: Include exception traceback
            **kwargs: Additional context
        """
        self._logger.error(message, exc_info=exc_info, extra=kwargs)

    def critical(self, message: str, exc_info: bool = False, **kwargs) -> None:
        self._logger.critical(message, exc_info=exc_info, extra=kwargs)

    def exception(self, message: str, **kwargs) -> None:
        """Log exception with traceback"""
        self._logger.exception(message, extra=kwargs)

    def set_level(self, level: str) -> None:
        """
        Change logging level dynamically.

        Args:
            level: New log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        """
        self._set_level(level)
        for handler in self._logger.handlers:
            handler.setLevel(self._logger.level)

    def log_startup(self, version: str, summary: dict) -> None:
        """
        Log application startup information.

        Args:
            version: Application version
            summary: Configuration summary
        """
        grid = summary.get('grid', {})
        self.info("=" * 60)
        self.info(f"Commit Clock v{version} starting up")
        self.info(f"Python: {sys.version.split()[0]}")
        self.info(f"Timezone: {summary.get('timezone', 'local')}")
        self.info(f"Grid: {grid.get('cols', 0)}x{grid.get('rows', 0)} cells")
        self.info(f"Hour format: {summary.get('hour_format', '24')}h")
        self.info(f"Pull requests: {'enabled' if summary.get('github') else 'disabled'}")
        self.info("=" * 60)

    def log_shutdown(self) -> None:
        self.info("=" * 60)
        self.info("Commit Clock shutting down")
        self.info("=" * 60)

    @property
    def logger(self) -> logging.Logger:
        """Get underlying logger instance"""
        return self._logger


# Global singleton instance
_logging_service: Optional[LoggingService] = None


def get_logger(name: str = 'commit-clock', level: str = 'INFO') -> LoggingService:
    """
    Get or create logging service singleton.

    Args:
        name: Logger name
        level: Log level, only used when the singleton is first created

    Returns:
        LoggingService instance
    """
    global _logging_service
    if _logging_service is None:
        _logging_service = LoggingService(name, level)
    return _logging_service
