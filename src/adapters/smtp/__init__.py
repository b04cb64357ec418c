"""Mail adapters - EmailSender implementations."""

from .console import ConsoleEmailSender
from .sender import SmtpEmailSender

__all__ = ["ConsoleEmailSender", "SmtpEmailSender"]
