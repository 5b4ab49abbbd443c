import logging
from typing import Optional

from quotewatch.config import Settings
from quotewatch.domain.errors import ValidationError
from quotewatch.realtime.refresh_events import PeriodChanged, RefreshEventQueue

logger = logging.getLogger(__name__)

MIN_UPDATE_FREQUENCY = 1
MAX_UPDATE_FREQUENCY = 60


class QuoteTablePreferences:
    """
    Read/write access to the quote refresh preferences.

    ``update_frequency`` is the number of minutes between periodic fetches;
    ``use_monitor`` asks the fetch to report progress while reading.
    """

    def __init__(
        self,
        update_frequency: int = MIN_UPDATE_FREQUENCY,
        use_monitor: bool = False,
        events: Optional[RefreshEventQueue] = None,
    ):
        self._update_frequency = _checked_frequency(update_frequency)
        self.use_monitor = bool(use_monitor)
        self._events = events

    @classmethod
    def from_settings(cls, cfg: Settings, events: Optional[RefreshEventQueue] = None) -> "QuoteTablePreferences":
        return cls(
            update_frequency=cfg.UPDATE_FREQUENCY_MINUTES,
            use_monitor=cfg.USE_MONITOR,
            events=events,
        )

    @property
    def update_frequency(self) -> int:
        return self._update_frequency

    @update_frequency.setter
    def update_frequency(self, minutes: int) -> None:
        minutes = _checked_frequency(minutes)
        if minutes == self._update_frequency:
            return
        logger.info("Update frequency changed: %d -> %d minutes", self._update_frequency, minutes)
        self._update_frequency = minutes
        if self._events is not None:
            self._events.publish_nowait(PeriodChanged(minutes))


def _checked_frequency(minutes: int) -> int:
    if isinstance(minutes, bool) or not isinstance(minutes, int):
        raise ValidationError(f"Update frequency must be a whole number of minutes: {minutes!r}")
    if not MIN_UPDATE_FREQUENCY <= minutes <= MAX_UPDATE_FREQUENCY:
        raise ValidationError(
            f"Update frequency must be {MIN_UPDATE_FREQUENCY}..{MAX_UPDATE_FREQUENCY} minutes: {minutes}"
        )
    return minutes
