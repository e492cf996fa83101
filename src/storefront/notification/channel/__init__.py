"""Email channel registry.

Uses the in-memory fake adapter by default; the SMTP adapter is selected when
``SMTP_HOST`` is configured.
"""

from storefront.config import get_settings
from storefront.notification.channel.email_port import EmailPort

_email_channel: EmailPort | None = None


def get_email_channel() -> EmailPort:
    """Return the configured email adapter (process-wide singleton)."""
    global _email_channel
    if _email_channel is None:
        settings = get_settings()
        if settings.smtp_host:
            from storefront.notification.channel.smtp_email import SmtpEmailAdapter

            _email_channel = SmtpEmailAdapter(
                host=settings.smtp_host,
                port=settings.smtp_port,
                username=settings.smtp_user,
                password=settings.smtp_password,
                use_ssl=settings.smtp_use_ssl,
                sender=settings.mail_from,
            )
        else:
            from storefront.notification.channel.fake_email import FakeEmailAdapter

            _email_channel = FakeEmailAdapter()
    return _email_channel


def set_email_channel(channel: EmailPort) -> None:
    """Override the email adapter (useful for tests)."""
    global _email_channel
    _email_channel = channel


def reset_channels():
    """Reset the channel singleton (useful for testing)."""
    global _email_channel
    _email_channel = None
