"""App-day detection with a 4 AM cutoff."""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, date, datetime, timedelta

DAY_CUTOFF_HOUR = 4

_logger = logging.getLogger(__name__)

DayChangeListener = Callable[[], None]


def app_day_for(now: datetime, cutoff_hour: int = DAY_CUTOFF_HOUR) -> date:
    """Return the logical day for an instant; before the cutoff it is yesterday."""
    if now.hour < cutoff_hour:
        return (now - timedelta(days=1)).date()
    return now.date()


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class DayBoundaryDetector:
    """Tracks the current app day and notifies listeners when it advances.

    Call ``initialize`` on start, ``check`` on foreground/resume or from
    ``watch``, and ``teardown`` on exit.
    """

    clock: Callable[[], datetime] = _utc_now
    cutoff_hour: int = DAY_CUTOFF_HOUR
    current_app_day: date | None = None
    _listeners: list[DayChangeListener] = field(default_factory=list)

    def initialize(self) -> date:
        """Record the app day in effect right now."""
        self.current_app_day = app_day_for(self.clock(), self.cutoff_hour)
        return self.current_app_day

    def subscribe(self, listener: DayChangeListener) -> None:
        """Register a callback fired after the app day advances."""
        self._listeners.append(listener)

    def check(self) -> bool:
        """Compare the clock against the last observed app day.

        Returns True and notifies listeners when the app day changed.
        """
        app_day = app_day_for(self.clock(), self.cutoff_hour)
        if self.current_app_day is None:
            self.current_app_day = app_day
            return False
        if app_day == self.current_app_day:
            return False
        _logger.info("App day changed: %s -> %s", self.current_app_day, app_day)
        self.current_app_day = app_day
        for listener in list(self._listeners):
            listener()
        return True

    async def watch(self, interval_seconds: float) -> None:
        """Run ``check`` periodically until cancelled."""
        while True:
            try:
                self.check()
            except Exception:
                _logger.exception("Day boundary check failed")
            await asyncio.sleep(interval_seconds)

    def teardown(self) -> None:
        """Drop listeners and forget the observed day."""
        self._listeners.clear()
        self.current_app_day = None
