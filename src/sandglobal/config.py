"""Back-office configuration."""

from __future__ import annotations

import re

from pydantic_settings import BaseSettings, SettingsConfigDict

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def normalize_email(value: str | None) -> str | None:
    """Trim and lower-case an address, or ``None`` if it is not valid."""
    if not value:
        return None
    candidate = value.strip().lower()
    if not EMAIL_PATTERN.match(candidate):
        return None
    return candidate


class SandGlobalConfig(BaseSettings):
    """Runtime config, read from ``SANDGLOBAL_*`` environment variables."""

    model_config = SettingsConfigDict(env_prefix="SANDGLOBAL_")

    database_url: str = "sqlite+aiosqlite:///./sandglobal.db"

    admin_email: str | None = None
    support_email: str | None = None
    sales_email: str | None = None

    mail_api_url: str = "https://api.resend.com"
    mail_api_key: str | None = None
    mail_from: str = "noreply@sandglobalexpress.com"
    mail_timeout_seconds: float = 30.0

    auth_url: str | None = None
    auth_api_key: str | None = None
    login_timeout_seconds: float = 20.0

    geocoder_url: str = "https://nominatim.openstreetmap.org/search"
    geocoder_user_agent: str = "sand-global-express/1.0"
    geocoding_enabled: bool = False

    default_map_provider: str = "google"

    contact_rate_limit: int = 5
    contact_rate_window_seconds: int = 300

    retry_enabled: bool = True
    retry_max_attempts: int = 5
    retry_backoff_seconds: int = 60

    list_limit: int = 500
    blog_list_limit: int = 50
    tracking_number_attempts: int = 5
    strict_transitions: bool = False

    @property
    def demo_mode(self) -> bool:
        """True when no hosted auth provider is configured."""
        return not (self.auth_url and self.auth_api_key)

    @property
    def notification_recipients(self) -> list[str]:
        """Deduplicated admin addresses that receive copies of emails."""
        recipients: list[str] = []
        for candidate in (
            self.support_email,
            self.sales_email,
            self.admin_email,
            self.mail_from,
        ):
            email = normalize_email(candidate)
            if email and email not in recipients:
                recipients.append(email)
        return recipients
