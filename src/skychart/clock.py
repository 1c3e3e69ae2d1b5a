"""Injectable time sources driving the sky recompute."""

from datetime import datetime, timedelta, timezone
import logging
from typing import Callable, List, Optional

from PyQt5.QtCore import QObject, QTimer

from .paths import TICK_INTERVAL_MS, TIME_OFFSET_LIMIT_HOURS


logger = logging.getLogger(__name__)

TickCallback = Callable[[datetime], None]


class TimeSource:
    """Current instant plus tick notifications.

    subscribe() returns a callable that removes the subscription. The
    underlying ticker runs only while somebody is subscribed.
    """

    def __init__(self):
        self._subscribers: List[TickCallback] = []

    def now(self) -> datetime:
        raise NotImplementedError

    def subscribe(self, callback: TickCallback) -> Callable[[], None]:
        self._subscribers.append(callback)
        if len(self._subscribers) == 1:
            self._start()

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)
                if not self._subscribers:
                    self._stop()

        return unsubscribe

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def _notify(self) -> None:
        instant = self.now()
        for callback in list(self._subscribers):
            callback(instant)

    def _start(self) -> None:
        pass

    def _stop(self) -> None:
        pass


def _require_aware(instant: datetime) -> datetime:
    if instant.tzinfo is None or instant.utcoffset() is None:
        raise ValueError(f"Instant must be timezone-aware: {instant.isoformat()}")
    return instant


class ManualTimeSource(TimeSource):
    """A clock that only moves when told to. Instants must be timezone-aware."""

    def __init__(self, instant: datetime):
        super().__init__()
        self._instant = _require_aware(instant)

    def now(self) -> datetime:
        return self._instant

    def set(self, instant: datetime) -> None:
        self._instant = _require_aware(instant)
        self._notify()

    def advance(self, delta: timedelta) -> None:
        self.set(self._instant + delta)


class SystemTimeSource(TimeSource):
    """Wall clock shifted by an offset, ticking on a QTimer (once a minute by default).

    The offset has two parts: a base offset (from the command line or
    set_offset) and an interactive shift of at most TIME_OFFSET_LIMIT_HOURS
    on top of it.
    """

    def __init__(
        self,
        offset: timedelta = timedelta(0),
        interval_ms: int = TICK_INTERVAL_MS,
        parent: Optional[QObject] = None,
    ):
        super().__init__()
        self.base_offset = offset
        self.offset = offset
        self.interval_ms = interval_ms
        self._parent = parent
        self._timer: Optional[QTimer] = None

    def now(self) -> datetime:
        return datetime.now(timezone.utc) + self.offset

    @property
    def active(self) -> bool:
        return self._timer is not None and self._timer.isActive()

    @property
    def shift(self) -> timedelta:
        return self.offset - self.base_offset

    def set_offset(self, offset: timedelta) -> None:
        """Replace the base offset, dropping any interactive shift."""
        self.base_offset = offset
        self.offset = offset
        self._notify()

    def shift_offset_hours(self, hours: int) -> timedelta:
        """Move the interactive shift by whole hours, keeping it within the limit."""
        limit = timedelta(hours=TIME_OFFSET_LIMIT_HOURS)
        shift = max(-limit, min(limit, self.shift + timedelta(hours=hours)))
        self.offset = self.base_offset + shift
        self._notify()
        return self.offset

    def _start(self) -> None:
        self._timer = QTimer(self._parent)
        self._timer.timeout.connect(self._notify)
        self._timer.start(self.interval_ms)
        logger.debug("Time source started (%d ms)", self.interval_ms)

    def _stop(self) -> None:
        if self._timer is not None:
            self._timer.stop()
            self._timer.deleteLater()
            self._timer = None
            logger.debug("Time source stopped")
