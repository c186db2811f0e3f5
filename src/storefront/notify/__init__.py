"""Notifier registry — where the cart engine's user-facing notices go.

Uses LogNotifier by default. Select another adapter with the
NOTIFIER_ADAPTER environment variable ("log" or "recording"), or inject one
with set_notifier().
"""

import os

from storefront.notify.port import Notice, NoticeLevel, NotifierPort

__all__ = ["Notice", "NoticeLevel", "NotifierPort", "get_notifier", "reset_notifier", "set_notifier"]

_notifier_instance: NotifierPort | None = None


def get_notifier() -> NotifierPort:
    """Return the configured notifier (singleton)."""
    global _notifier_instance
    if _notifier_instance is None:
        adapter = os.environ.get("NOTIFIER_ADAPTER", "log")
        if adapter == "log":
            from storefront.notify.log_notifier import LogNotifier

            _notifier_instance = LogNotifier()
        elif adapter == "recording":
            from storefront.notify.fake_notifier import RecordingNotifier

            _notifier_instance = RecordingNotifier()
        else:
            raise ValueError(f"Unknown notifier adapter: {adapter}")
    return _notifier_instance


def set_notifier(notifier: NotifierPort) -> None:
    global _notifier_instance
    _notifier_instance = notifier


def reset_notifier() -> None:
    """Reset the notifier singleton (useful for testing)."""
    global _notifier_instance
    _notifier_instance = None
