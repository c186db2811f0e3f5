"""Notifier port — user-facing notices raised by the cart engine.

The UI renders notices as toasts. Identical notices raised again within the
de-duplication window are dropped, so a burst of failing writes shows one
message rather than a stack of copies.
"""

import time
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

DEFAULT_DEDUPE_WINDOW = 1.0


class NoticeLevel(Enum):
    SUCCESS = "success"
    ERROR = "error"
    WARNING = "warning"


@dataclass(frozen=True)
class Notice:
    level: NoticeLevel
    message: str


class NotifierPort(ABC):
    """Abstract notifier with de-duplication of repeated notices."""

    def __init__(
        self,
        dedupe_window: float = DEFAULT_DEDUPE_WINDOW,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.dedupe_window = dedupe_window
        self._clock = clock
        self._last_shown: dict[tuple[NoticeLevel, str], float] = {}

    def notify(self, level: NoticeLevel, message: str) -> bool:
        """Show a notice unless the same one was shown within the window.

        Returns True when the notice was emitted.
        """
        now = self._clock()
        self._last_shown = {
            shown: at for shown, at in self._last_shown.items() if now - at < self.dedupe_window
        }
        key = (level, message)
        if key in self._last_shown:
            return False

        self._last_shown[key] = now
        self._emit(Notice(level=level, message=message))
        return True

    def success(self, message: str) -> bool:
        return self.notify(NoticeLevel.SUCCESS, message)

    def error(self, message: str) -> bool:
        return self.notify(NoticeLevel.ERROR, message)

    def warning(self, message: str) -> bool:
        return self.notify(NoticeLevel.WARNING, message)

    @abstractmethod
    def _emit(self, notice: Notice) -> None:
        """Deliver a notice to the user."""
        ...
