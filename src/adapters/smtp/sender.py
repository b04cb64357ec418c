"""
SMTP email sender adapter - Implements EmailSender protocol.

Sends plain-text mail through an SMTP relay with optional STARTTLS and
login. Transport failures are reported as DeliveryError; nothing is
retried here.
"""

import logging
import smtplib
from email.mime.text import MIMEText

from src.domain.exceptions import DeliveryError

logger = logging.getLogger(__name__)


class SmtpEmailSender:
    """Implements EmailSender protocol via smtplib."""

    def __init__(
        self,
        host: str,
        port: int,
        from_address: str,
        username: str = "",
        password: str = "",
        use_tls: bool = True,
        timeout: float = 10.0,
    ) -> None:
        self._host = host
        self._port = port
        self._from_address = from_address
        self._username = username
        self._password = password
        self._use_tls = use_tls
        self._timeout = timeout

    def send(self, to_address: str, subject: str, body: str) -> None:
        """
        Deliver one message.

        Raises:
            DeliveryError: If connecting, authenticating or sending fails
        """
        msg = MIMEText(body, "plain", "utf-8")
        msg["Subject"] = subject
        msg["From"] = self._from_address
        msg["To"] = to_address

        try:
            with smtplib.SMTP(self._host, self._port, timeout=self._timeout) as server:
                if self._use_tls:
                    server.starttls()
                if self._username and self._password:
                    server.login(self._username, self._password)
                server.sendmail(self._from_address, [to_address], msg.as_string())
        except (smtplib.SMTPException, OSError) as e:
            logger.error("SMTP delivery to %s failed: %s", to_address, e)
            raise DeliveryError(to_address) from e
