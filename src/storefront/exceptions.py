"""Storefront exception types.

Input and state-transition errors use protean's ``ValidationError``; the
classes here cover lookup, authentication, configuration and remote gateway
failures. ``api.errors`` maps each of them to an HTTP response.
"""


class StorefrontError(Exception):
    """Base class for storefront errors carrying a client-facing message."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFoundError(StorefrontError):
    """An order reference could not be resolved."""


class InvalidSignatureError(StorefrontError):
    """A payment callback failed HMAC signature verification."""


class ConfigError(StorefrontError):
    """Gateway credentials or secrets are not configured."""


class GatewayError(StorefrontError):
    """The remote payment gateway rejected a call or could not be reached.

    ``status_code`` is the remote HTTP status when one was received, so the
    API can pass it through; ``code`` and ``details`` are forwarded verbatim.
    """

    def __init__(
        self,
        message: str,
        code: str | None = None,
        status_code: int = 500,
        details: str | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.status_code = status_code
        self.details = details
