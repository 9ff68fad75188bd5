"""Delivery of password reset links.

Email dispatch is not wired up; the reset link is written to the server log.
"""

import logging
from urllib.parse import urlencode

from app.config import get_settings

logger = logging.getLogger("account_service")


class ResetNotifier:
    """Sends reset tokens to account owners."""

    def __init__(self, reset_url_base: str) -> None:
        self.reset_url_base = reset_url_base.rstrip("?")

    def build_reset_link(self, token: str) -> str:
        return f"{self.reset_url_base}?{urlencode({'token': token})}"

    def send_reset_token(self, email: str, token: str) -> None:
        """Deliver the reset link for the given account."""
        logger.info("PASSWORD RESET for %s: %s", email, self.build_reset_link(token))


_reset_notifier: ResetNotifier | None = None


def get_reset_notifier() -> ResetNotifier:
    """Get singleton reset notifier instance."""
    global _reset_notifier
    if _reset_notifier is None:
        _reset_notifier = ResetNotifier(get_settings().RESET_URL_BASE)
    return _reset_notifier
