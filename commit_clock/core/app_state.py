"""
App State - mutable state owned by the event loop
"""
from dataclasses import dataclass, field

from ..ui.theme import Theme
from .clock_service import ClockState
from .pr_poller import PrOverlayState


@dataclass
class AppState:
    clock: ClockState
    theme: Theme
    pr: PrOverlayState = field(default_factory=PrOverlayState)
