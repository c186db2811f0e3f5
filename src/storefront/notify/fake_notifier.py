"""Recording notifier — keeps notices in memory for test assertions."""

from storefront.notify.port import Notice, NoticeLevel, NotifierPort


class RecordingNotifier(NotifierPort):
    """Notifier that records notices; de-duplication is off unless asked for."""

    def __init__(self, dedupe_window: float = 0.0, **kwargs) -> None:
        super().__init__(dedupe_window=dedupe_window, **kwargs)
        self.notices: list[Notice] = []

    def _emit(self, notice: Notice) -> None:
        self.notices.append(notice)

    def messages(self, level: NoticeLevel | None = None) -> list[str]:
        return [n.message for n in self.notices if level is None or n.level is level]

    @property
    def errors(self) -> list[str]:
        return self.messages(NoticeLevel.ERROR)

    @property
    def warnings(self) -> list[str]:
        return self.messages(NoticeLevel.WARNING)

    @property
    def successes(self) -> list[str]:
        return self.messages(NoticeLevel.SUCCESS)

    def reset(self) -> None:
        """Clear recorded notices (useful between tests)."""
        self.notices.clear()
        self._last_shown.clear()
