"""
Console email sender adapter - Implements EmailSender protocol.

This module provides a console-based implementation of the domain's
email sender port, logging messages to stdout for development.
"""

import logging

logger = logging.getLogger(__name__)


class ConsoleEmailSender:
    """
    Implements EmailSender protocol via console logging.

    Uses structural subtyping - no explicit inheritance from Protocol.
    For demo/development purposes - the verification code ends up in the logs.
    """

    def send(self, to_address: str, subject: str, body: str) -> None:
        """
        Log the message at INFO level (simulates email delivery).

        Never fails, so it never raises DeliveryError.
        """
        logger.info("[MAIL] To: %s Subject: %s Body: %s", to_address, subject, body)
