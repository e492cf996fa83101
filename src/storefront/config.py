"""Environment-driven settings for the Storefront domain.

``PROTEAN_ENV`` selects the environment ("test", "development",
"production"). Everything else is read from plain environment variables so
that the same container image runs in every environment.
"""

import os
from dataclasses import dataclass

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def _env(*names: str) -> str | None:
    """Return the first non-blank value among ``names``."""
    for name in names:
        raw = os.environ.get(name)
        if raw is not None and raw.strip() != "":
            return raw.strip()
    return None


def _env_bool(name: str, default: bool) -> bool:
    raw = _env(name)
    if raw is None:
        return default
    normalized = raw.lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    return default


def _env_float(name: str, default: float) -> float:
    raw = _env(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    environment: str = "development"

    # Payment gateway
    payment_gateway: str = "fake"  # fake | razorpay
    gateway_key_id: str | None = None
    gateway_key_secret: str | None = None
    gateway_currency: str = "INR"
    gateway_base_url: str = "https://api.razorpay.com/v1"
    gateway_timeout_seconds: float = 10.0

    # Order lookup and lifecycle
    timestamp_lookup_enabled: bool = True
    simulate_delivery: bool = False
    delivery_window_seconds: float = 60.0

    # Fulfillment callbacks authenticate with this shared secret
    fulfillment_token: str | None = None

    # Mail
    smtp_host: str | None = None
    smtp_port: int = 587
    smtp_user: str | None = None
    smtp_password: str | None = None
    smtp_use_ssl: bool = False
    mail_from: str = "Storefront <no-reply@storefront.local>"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @classmethod
    def from_env(cls) -> "Settings":
        environment = _env("PROTEAN_ENV") or "development"
        default_gateway = "razorpay" if environment == "production" else "fake"
        smtp_port = int(_env_float("SMTP_PORT", 587))
        return cls(
            environment=environment,
            payment_gateway=(_env("PAYMENT_GATEWAY") or default_gateway).lower(),
            gateway_key_id=_env("RAZORPAY_KEY_ID"),
            gateway_key_secret=_env("RAZORPAY_KEY_SECRET"),
            gateway_currency=(_env("GATEWAY_CURRENCY") or "INR").upper(),
            gateway_base_url=_env("RAZORPAY_BASE_URL") or "https://api.razorpay.com/v1",
            gateway_timeout_seconds=_env_float("GATEWAY_TIMEOUT_SECONDS", 10.0),
            timestamp_lookup_enabled=_env_bool("STOREFRONT_TIMESTAMP_LOOKUP", True),
            simulate_delivery=_env_bool("STOREFRONT_SIMULATE_DELIVERY", False),
            delivery_window_seconds=_env_float("STOREFRONT_DELIVERY_WINDOW_SECONDS", 60.0),
            fulfillment_token=_env("STOREFRONT_FULFILLMENT_TOKEN"),
            smtp_host=_env("SMTP_HOST", "EMAIL_HOST", "MAIL_HOST"),
            smtp_port=smtp_port,
            smtp_user=_env("SMTP_USER", "EMAIL_USER", "MAIL_USER"),
            smtp_password=_env("SMTP_PASS", "EMAIL_PASS", "MAIL_PASS"),
            smtp_use_ssl=_env_bool("SMTP_SECURE", smtp_port == 465),
            mail_from=_env("MAIL_FROM", "SMTP_FROM", "EMAIL_FROM") or "Storefront <no-reply@storefront.local>",
        )


_current_settings: Settings | None = None


def get_settings() -> Settings:
    """Return the active settings, loading them from the environment once."""
    global _current_settings
    if _current_settings is None:
        _current_settings = Settings.from_env()
    return _current_settings


def set_settings(settings: Settings) -> None:
    """Override the active settings (useful for tests)."""
    global _current_settings
    _current_settings = settings


def reset_settings() -> None:
    """Drop cached settings so the next read re-parses the environment."""
    global _current_settings
    _current_settings = None
