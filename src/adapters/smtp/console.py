"""
Console email sender adapter - Implements EmailSender protocol.

This module provides a console-based implementation of the domain's
email sender port, logging verification links for development use.
"""

import logging

logger = logging.getLogger(__name__)


class ConsoleEmailSender:
    """
    Implements EmailSender protocol via console logging.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def send_verification(self, email: str, link: str) -> None:
        """
        Log the verification link (simulates email delivery).

        The link is logged at INFO level to be visible in container logs.

        Args:
            email: Recipient email address (normalized by domain layer)
            link: Verification link with user id and plaintext token
        """
        logger.info("[VERIFICATION] Email: %s Link: %s", email, link)
