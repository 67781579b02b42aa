# app/client/notifier.py
import logging

logger = logging.getLogger(__name__)


class Notifier:
    """Where the engagement controller sends user-visible feedback"""

    def error(self, message: str) -> None:
        raise NotImplementedError

    def prompt_sign_in(self) -> None:
        raise NotImplementedError


class LoggingNotifier(Notifier):
    """Notifier for headless use; toasts become log lines"""

    def error(self, message: str) -> None:
        logger.warning(f"Toast: {message}")

    def prompt_sign_in(self) -> None:
        logger.info("Sign in required")
