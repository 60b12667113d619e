"""User-visible notifications (toasts, inline warnings)."""
import logging

logger = logging.getLogger(__name__)


class Notifier:
    """Default notifier: writes every message to the log.

    A UI subclasses this and overrides the three methods.
    """

    def success(self, message: str) -> None:
        logger.info(message)

    def warning(self, message: str) -> None:
        logger.warning(message)

    def error(self, message: str) -> None:
        logger.error(message)
