"""
Console notifier adapter - Implements Notifier protocol.

This module provides a console-based implementation of the domain's
notifier port, logging OTP codes to stdout for development.
"""

import logging

logger = logging.getLogger(__name__)


class ConsoleNotifier:
    """
    Implements Notifier protocol via console logging.

    Uses structural subtyping - no explicit inheritance from Protocol.
    Used when no email transport credentials are configured.
    """

    def send_otp(self, email: str, username: str, code: str) -> bool:
        """
        Log the OTP to console (simulates email delivery).

        The code is logged at INFO level to be visible in docker-compose logs.

        Args:
            email: Recipient email address (normalized by domain layer)
            username: Recipient username, used in the greeting
            code: 6-digit OTP

        Returns:
            Always True; logging cannot fail delivery
        """
        logger.info("[OTP] Email: %s User: %s Code: %s", email, username, code)
        return True

    def send_welcome(self, email: str, username: str) -> bool:
        logger.info("[WELCOME] Email: %s User: %s", email, username)
        return True
