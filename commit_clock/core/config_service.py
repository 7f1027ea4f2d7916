"""
Configuration Service - YAML config with environment variable overrides
"""
import copy
import os
import re
import yaml
from typing import Any, Dict, List, Optional
from pathlib import Path

from .logging_service import get_logger


HEX_COLOR = re.compile(r'^#[0-9a-fA-F]{6}$')

# Glyph height in cells at scale 1
BAND_ROWS = 7

DEFAULT_PALETTE = [
    '#176b33',
    '#30a14f',
    '#40c463',
    '#9ce8a8',
    '#2e87e0',
    '#70abf5',
    '#f5ad3d',
    '#f28c66',
    '#c78ff2',
    '#e073bd',
]

DEFAULTS: Dict[str, Any] = {
    'app': {
        'version': '1.0.0',
    },
    'logging': {
        'level': 'INFO',
    },
    'clock': {
        'hour_format': 24,
        'time_format': 'HH:MM',
        'show_am_pm': True,
        'timezone': 'local',
    },
    'grid': {
        'cols': 96,
        'rows': 37,
        'cell_size': 5,
        'cell_gap': 2,
        'margin_rows': 2,
        'band_gap': 3,
        'date_scale': 1,
        'time_scale': 2,
        'glyph_gap': 1,
        'show_year': True,
        'year_gap': 2,
    },
    'noise': {
        'density': 0.04,
        'seed': None,
    },
    'theme': {
        'palette': DEFAULT_PALETTE,
        'index': 0,
        'background': '#0f1214',
        'inactive': '#1f2126',
        'active_alpha': 0.82,
        'active_alpha_jitter': 0.4,
    },
    'display': {
        'update_interval': 1000,
        'padding': 16,
    },
    'github': {
        'enabled': True,
        'api_url': 'https://api.github.com',
        'poll_interval': 300,
        'timeout': 4,
        'token_file': '~/.config/chrono/token',
        'ticket_url': None,
    },
}


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """
    Recursively merge ``override`` into a copy of ``base``.

    An empty section (``github:`` with nothing under it) keeps the defaults.

    Raises:
        ValueError: If a section that holds settings is not a mapping
    """
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(merged.get(key), dict):
            if value is None:
                continue
            if not isinstance(value, dict):
                raise ValueError(f"{key} must be a mapping, got {type(value).__name__}")
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _is_bool_text(value: str) -> bool:
    return value.lower() in ('true', '1', 'yes')


def _section(config: Dict[str, Any], name: str) -> Dict[str, Any]:
    """A config section, empty when missing or null"""
    section = config.get(name)
    if section is None:
        return {}
    if not isinstance(section, dict):
        raise ValueError(f"{name} must be a mapping")
    return section


def _positive_int(section: Dict[str, Any], key: str, name: str) -> None:
    if key in section:
        value = section[key]
        if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
            raise ValueError(f"{name}.{key} must be a positive integer")


def _required_rows(grid: Dict[str, Any]) -> int:
    """Rows the year, date and time bands need, matching LayoutEngine"""
    date_scale = grid.get('date_scale', 1)
    time_scale = grid.get('time_scale', 2)
    rows = (grid.get('margin_rows', 2) + BAND_ROWS * date_scale + grid.get('band_gap', 3)
            + BAND_ROWS * max(date_scale, time_scale))
    if grid.get('show_year', False):
        rows += BAND_ROWS * date_scale + grid.get('year_gap', 2)
    return rows


def validate_config(config: Dict[str, Any]) -> bool:
    """
    Validate configuration dictionary.

    Args:
        config: Configuration dictionary

    Returns:
        True if valid

    Raises:
        ValueError: If configuration is invalid
    """
    if not isinstance(config, dict):
        raise ValueError("Configuration must be a dictionary")

    clock = _section(config, 'clock')
    if clock.get('hour_format', 24) not in (12, 24):
        raise ValueError("clock.hour_format must be 12 or 24")
    if clock.get('time_format', 'HH:MM') not in ('HH:MM', 'HH:MM:SS', 'MM:SS'):
        raise ValueError("clock.time_format must be one of: HH:MM, HH:MM:SS, MM:SS")
    if not isinstance(clock.get('show_am_pm', True), bool):
        raise ValueError("clock.show_am_pm must be a boolean")

    grid = _section(config, 'grid')
    for key in ('cols', 'rows', 'cell_size', 'date_scale', 'time_scale', 'glyph_gap'):
        _positive_int(grid, key, 'grid')
    for key in ('cell_gap', 'margin_rows', 'band_gap', 'year_gap'):
        value = grid.get(key, 0)
        if not isinstance(value, int) or isinstance(value, bool) or value < 0:
            raise ValueError(f"grid.{key} must be a non-negative integer")
    if not isinstance(grid.get('show_year', False), bool):
        raise ValueError("grid.show_year must be a boolean")
    required = _required_rows(grid)
    if grid.get('rows', required) < required:
        raise ValueError(f"grid.rows must be at least {required} for the configured bands")

    density = _section(config, 'noise').get('density', 0.0)
    if not isinstance(density, (int, float)) or not (0.0 <= density <= 1.0):
        raise ValueError("noise.density must be between 0.0 and 1.0")

    theme = _section(config, 'theme')
    palette: List[str] = theme.get('palette', DEFAULT_PALETTE)
    if not isinstance(palette, list) or not palette:
        raise ValueError("theme.palette must be a non-empty list of colors")
    for color in list(palette) + [theme.get('background', '#000000'), theme.get('inactive', '#000000')]:
        if not isinstance(color, str) or not HEX_COLOR.match(color):
            raise ValueError(f"theme colors must be hex strings like #40c463, got {color!r}")
    index = theme.get('index', 0)
    if not isinstance(index, int) or isinstance(index, bool) or not (0 <= index < len(palette)):
        raise ValueError("theme.index must be a valid palette index")
    for key in ('active_alpha', 'active_alpha_jitter'):
        value = theme.get(key, 0.0)
        if not isinstance(value, (int, float)) or isinstance(value, bool) or not (0.0 <= value <= 1.0):
            raise ValueError(f"theme.{key} must be between 0.0 and 1.0")

    _positive_int(_section(config, 'display'), 'update_interval', 'display')

    github = _section(config, 'github')
    _positive_int(github, 'poll_interval', 'github')
    timeout = github.get('timeout', 4)
    if not isinstance(timeout, (int, float)) or timeout <= 0:
        raise ValueError("github.timeout must be a positive number")
    ticket_url = github.get('ticket_url')
    if ticket_url is not None and (not isinstance(ticket_url, str) or '{key}' not in ticket_url):
        raise ValueError("github.ticket_url must be a URL containing {key}")

    return True


class ConfigService:
    """
    Centralized configuration management with environment overrides.

    Priority order:
    1. Environment variables (highest)
    2. YAML config file
    3. Default values (lowest)
    """

    _instance: Optional['ConfigService'] = None
    _config: Dict[str, Any] = {}

    def __new__(cls):
        """Singleton pattern for global config access"""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        """Initialize only once"""
        if not self._config:
            self.reload()

    def reload(self, path: Optional[Path] = None) -> None:
        """
        Load config from file and environment.

        Args:
            path: Explicit config file, searched before the default locations
        """
        try:
            self._config = _merge(DEFAULTS, self._load_yaml_config(path))
            self._apply_env_overrides()
            validate_config(self._config)
        except ValueError as e:
            get_logger().error(f"Invalid configuration, using defaults: {e}")
            self._config = copy.deepcopy(DEFAULTS)

    def _config_paths(self, path: Optional[Path]) -> List[Path]:
        paths = [
            Path.home() / '.config' / 'chrono' / 'config.yaml',
            Path('config/default.yaml'),
            Path(__file__).resolve().parent.parent / 'config' / 'default.yaml',
        ]
        if path is not None:
            paths.insert(0, Path(path).expanduser())
        return paths

    def _load_yaml_config(self, path: Optional[Path]) -> Dict[str, Any]:
        """Load the first readable YAML file, empty dict when none is found"""
        for config_path in self._config_paths(path):
            if not config_path.exists():
                continue
            try:
                with open(config_path, 'r') as f:
                    loaded = yaml.safe_load(f) or {}
                if not isinstance(loaded, dict):
                    raise ValueError("top level must be a mapping")
                self._source = config_path
                return loaded
            except (OSError, ValueError, yaml.YAMLError) as e:
                get_logger().warning(f"Failed to load {config_path}: {e}")

        self._source = None
        return {}

    def _apply_env_overrides(self) -> None:
        """Apply environment variable overrides"""
        if env_hours := os.environ.get('CLOCK_HOUR_FORMAT'):
            try:
                self.set('clock.hour_format', int(env_hours))
            except ValueError:
                get_logger().warning(f"Ignoring CLOCK_HOUR_FORMAT={env_hours!r}")

        if env_tz := os.environ.get('CLOCK_TIMEZONE'):
            self.set('clock.timezone', env_tz)

        if env_density := os.environ.get('CLOCK_NOISE_DENSITY'):
            try:
                self.set('noise.density', float(env_density))
            except ValueError:
                get_logger().warning(f"Ignoring CLOCK_NOISE_DENSITY={env_density!r}")

        if env_theme := os.environ.get('CLOCK_THEME_INDEX'):
            try:
                self.set('theme.index', int(env_theme))
            except ValueError:
                get_logger().warning(f"Ignoring CLOCK_THEME_INDEX={env_theme!r}")

        if env_interval := os.environ.get('PR_POLL_INTERVAL'):
            try:
                self.set('github.poll_interval', int(env_interval))
            except ValueError:
                get_logger().warning(f"Ignoring PR_POLL_INTERVAL={env_interval!r}")

        if env_enabled := os.environ.get('PR_ENABLED'):
            self.set('github.enabled', _is_bool_text(env_enabled))

        if env_level := os.environ.get('LOG_LEVEL'):
            self.set('logging.level', env_level.upper())

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get config value using dot notation
        Example: config.get('grid.cols')
        """
        value = self._config

        for k in key.split('.'):
            if isinstance(value, dict):
                value = value.get(k)
                if value is None:
                    return default
            else:
                return default

        return value

    def get_all(self) -> Dict[str, Any]:
        """Get entire configuration dict"""
        return copy.deepcopy(self._config)

    def set(self, key: str, value: Any) -> None:
        """
        Set config value using dot notation
        Example: config.set('github.enabled', False)
        """
        keys = key.split('.')
        target = self._config

        for k in keys[:-1]:
            target = target.setdefault(k, {})

        target[keys[-1]] = value

    @property
    def source(self) -> Optional[Path]:
        """Config file the current values were loaded from, if any"""
        return getattr(self, '_source', None)


# Global instance
config = ConfigService()
