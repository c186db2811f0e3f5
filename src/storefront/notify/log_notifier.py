"""Log notifier — writes notices to the structured log.

The default adapter when no UI is attached (scripts, headless sessions).
"""

import structlog

from storefront.notify.port import Notice, NoticeLevel, NotifierPort

logger = structlog.get_logger(__name__)


class LogNotifier(NotifierPort):
    def _emit(self, notice: Notice) -> None:
        if notice.level is NoticeLevel.ERROR:
            logger.error(notice.message, notice_level=notice.level.value)
        elif notice.level is NoticeLevel.WARNING:
            logger.warning(notice.message, notice_level=notice.level.value)
        else:
            logger.info(notice.message, notice_level=notice.level.value)
