"""Focus timer: a fixed-length countdown spent on a single task."""
import time
from typing import Callable, Optional

FOCUS_TIME_MINUTES = 25


class FocusSession:
    def __init__(self, task_title: str, minutes: int = FOCUS_TIME_MINUTES, clock: Callable[[], float] = time.monotonic):
        if minutes < 0:
            raise ValueError("minutes must not be negative")
        self.task_title = task_title
        self.duration = minutes * 60
        self._clock = clock
        self._started = clock()
        self._stopped_at: Optional[float] = None

    def elapsed(self) -> float:
        end = self._stopped_at if self._stopped_at is not None else self._clock()
        return min(end - self._started, self.duration)

    def remaining(self) -> int:
        """Whole seconds left, never negative."""
        return max(0, int(round(self.duration - self.elapsed())))

    def is_finished(self) -> bool:
        return self.remaining() == 0

    @property
    def stopped(self) -> bool:
        return self._stopped_at is not None

    def stop(self) -> None:
        if self._stopped_at is None:
            self._stopped_at = self._clock()

    def display(self) -> str:
        minutes, seconds = divmod(self.remaining(), 60)
        return f"{minutes:02d}:{seconds:02d}"
