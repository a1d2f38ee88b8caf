"""
Configuration settings for the Companies House distress monitor.
Loads from environment variables with sensible defaults.
"""
import os
from dataclasses import dataclass, field
from typing import Tuple

from distress_engine.sic_codes import TARGET_SIC_CODES

DEFAULT_BASE_URL = "https://api.company-information.service.gov.uk"

# Companies House caps advanced-search page size at 5000
MAX_PAGE_SIZE = 5000


class ConfigurationError(ValueError):
    """Raised at startup when required configuration is missing."""


def _split_list(raw: str) -> Tuple[str, ...]:
    return tuple(item.strip() for item in raw.split(",") if item.strip())


@dataclass
class EmailConfig:
    """Email configuration for new-finding alerts."""
    smtp_server: str = "smtp.gmail.com"
    smtp_port: int = 465
    sender_email: str = ""
    sender_password: str = ""
    recipient_emails: list[str] = field(default_factory=list)

    @property
    def enabled(self) -> bool:
        return bool(self.sender_email and self.sender_password and self.recipient_emails)


@dataclass
class Settings:
    """Main application settings."""
    # Registry API
    api_key: str = ""
    base_url: str = DEFAULT_BASE_URL
    timeout: int = 30

    # Scan scope
    sic_codes: Tuple[str, ...] = TARGET_SIC_CODES
    watchlist: Tuple[str, ...] = ()
    page_size: int = 20
    fetch_profiles: bool = True
    request_delay: float = 1.0  # Delay between registry calls in seconds

    # Output
    results_dir: str = "distress_results"
    database_path: str = "data/distress.db"

    # Schedule: cron expression in London time, empty for a single run
    schedule_cron: str = ""

    email_config: EmailConfig = field(default_factory=EmailConfig)

    def validate(self) -> "Settings":
        """Fail fast on configuration that would make every call fail."""
        if not self.api_key or not self.api_key.strip():
            raise ConfigurationError(
                "COMPANIES_HOUSE_API_KEY is not set; refusing to call the registry "
                "without credentials"
            )
        if not self.sic_codes and not self.watchlist:
            raise ConfigurationError("Nothing to scan: SIC_CODES and WATCHLIST are both empty")
        if not 1 <= self.page_size <= MAX_PAGE_SIZE:
            raise ConfigurationError(f"PAGE_SIZE must be between 1 and {MAX_PAGE_SIZE}")
        return self

    @classmethod
    def from_env(cls) -> "Settings":
        """Load settings from environment variables."""
        email_config = EmailConfig(
            smtp_server=os.getenv("SMTP_SERVER", "smtp.gmail.com"),
            smtp_port=int(os.getenv("SMTP_PORT", 465)),
            sender_email=os.getenv("SENDER_EMAIL", ""),
            sender_password=os.getenv("SENDER_PASSWORD", ""),
            recipient_emails=list(_split_list(os.getenv("RECIPIENT_EMAILS", ""))),
        )

        sic_codes = _split_list(os.getenv("SIC_CODES", "")) or TARGET_SIC_CODES

        return cls(
            api_key=os.getenv("COMPANIES_HOUSE_API_KEY", ""),
            base_url=os.getenv("COMPANIES_HOUSE_BASE_URL", DEFAULT_BASE_URL).rstrip("/"),
            timeout=int(os.getenv("TIMEOUT", 30)),
            sic_codes=sic_codes,
            watchlist=_split_list(os.getenv("WATCHLIST", "")),
            page_size=int(os.getenv("PAGE_SIZE", 20)),
            fetch_profiles=os.getenv("FETCH_PROFILES", "true").lower() == "true",
            request_delay=float(os.getenv("REQUEST_DELAY", 1.0)),
            results_dir=os.getenv("RESULTS_DIR", "distress_results"),
            database_path=os.getenv("DATABASE_PATH", "data/distress.db"),
            schedule_cron=os.getenv("SCHEDULE_CRON", ""),
            email_config=email_config,
        )
