"""
Clock Service - Time and date logic
Holds the display format state and derives the strings shown on the grid
"""
from datetime import datetime
from enum import Enum
from typing import NamedTuple, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .logging_service import get_logger


class HourFormat(Enum):
    H24 = 24
    H12 = 12


class TimeFormat(Enum):
    HH_MM = 'HH:MM'
    HH_MM_SS = 'HH:MM:SS'
    MM_SS = 'MM:SS'


_TIME_FORMAT_CYCLE = [TimeFormat.HH_MM, TimeFormat.HH_MM_SS, TimeFormat.MM_SS]

# Locale independent, the glyph table only covers A-Z
WEEKDAYS = ['MON', 'TUE', 'WED', 'THU', 'FRI', 'SAT', 'SUN']
MONTHS = ['JAN', 'FEB', 'MAR', 'APR', 'MAY', 'JUN',
          'JUL', 'AUG', 'SEP', 'OCT', 'NOV', 'DEC']


class ClockReading(NamedTuple):
    """Strings for one frame"""
    time: str
    date: str
    meridiem: Optional[str] = None
    year: str = ''


class ClockState:
    """
    Display format state. Only mutated by explicit toggle input.
    """

    def __init__(
        self,
        hour_format: HourFormat = HourFormat.H24,
        time_format: TimeFormat = TimeFormat.HH_MM,
        show_am_pm: bool = True
    ):
        self.hour_format = hour_format
        self.time_format = time_format
        self.show_am_pm = show_am_pm

    def toggle_format(self) -> HourFormat:
        """Flip between 12h and 24h"""
        if self.hour_format == HourFormat.H24:
            self.hour_format = HourFormat.H12
        else:
            self.hour_format = HourFormat.H24
        return self.hour_format

    def cycle_time_format(self) -> TimeFormat:
        """Advance HH:MM -> HH:MM:SS -> MM:SS -> HH:MM"""
        position = _TIME_FORMAT_CYCLE.index(self.time_format)
        self.time_format = _TIME_FORMAT_CYCLE[(position + 1) % len(_TIME_FORMAT_CYCLE)]
        return self.time_format

    def format_now(self, now: datetime) -> ClockReading:
        """
        Format a wall-clock time for display.

        Args:
            now: Wall-clock time to format

        Returns:
            ClockReading with the time line, the date line, the AM/PM
            indicator (None in 24h mode or when the indicator is hidden)
            and the year line
        """
        hour = now.hour
        meridiem = None

        if self.hour_format == HourFormat.H12:
            if self.show_am_pm:
                meridiem = 'PM' if hour >= 12 else 'AM'
            hour %= 12
            if hour == 0:
                hour = 12

        if self.time_format == TimeFormat.HH_MM_SS:
            time_str = f"{hour:02d}:{now.minute:02d}:{now.second:02d}"
        elif self.time_format == TimeFormat.MM_SS:
            time_str = f"{now.minute:02d}:{now.second:02d}"
        else:
            time_str = f"{hour:02d}:{now.minute:02d}"

        return ClockReading(time_str, self.format_date(now), meridiem, self.format_year(now))

    @staticmethod
    def format_year(now: datetime) -> str:
        return str(now.year)

    @staticmethod
    def format_date(now: datetime) -> str:
        """Short date line, e.g. SAT 17 OCT"""
        return f"{WEEKDAYS[now.weekday()]} {now.day:02d} {MONTHS[now.month - 1]}"

    @property
    def is_12h(self) -> bool:
        return self.hour_format == HourFormat.H12


class ClockService:
    """
    Wall-clock source with timezone support.
    """

    def __init__(self, timezone: str = 'local'):
        """
        Initialize clock service with timezone.

        Args:
            timezone: 'local' or an IANA timezone string (e.g., 'Europe/Berlin')
        """
        self._timezone = timezone
        self._tz_obj: Optional[ZoneInfo] = None
        self._load_timezone()

    def _load_timezone(self) -> None:
        """Load timezone object, fall back to local time on error"""
        if not self._timezone or self._timezone == 'local':
            self._timezone = 'local'
            self._tz_obj = None
            return

        try:
            self._tz_obj = ZoneInfo(self._timezone)
        except (ZoneInfoNotFoundError, ValueError) as e:
            get_logger().warning(f"Invalid timezone '{self._timezone}', using local time: {e}")
            self._timezone = 'local'
            self._tz_obj = None

    def now(self) -> datetime:
        """
        Get current time in configured timezone.

        Returns:
            Timezone-aware datetime object
        """
        if self._tz_obj is None:
            return datetime.now().astimezone()
        return datetime.now(self._tz_obj)

    @property
    def timezone(self) -> str:
        """Get current timezone string"""
        return self._timezone
