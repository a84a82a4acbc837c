from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from pydantic import ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from slot_checker.errors import ConfigError
from slot_checker.utils.helpers import mask_email

# Base directory
BASE_DIR = Path(__file__).resolve().parent.parent
DATA_DIR = BASE_DIR / "data"

# Portal endpoints
LOGIN_URL = "https://visa.vfsglobal.com/aus/en/fra/login"
BOOKING_URL = "https://visa.vfsglobal.com/aus/en/fra/book-an-appointment"
DEFAULT_VISA_TYPE = "Short stay Schengen visa"

# Verification code mail
OTP_SENDER = "noreply@vfsglobal.com"
OTP_SUBJECT = "verification code"
OTP_WINDOW_MINUTES = 5

OTP_MODES = ("gmail", "imap", "manual")


@dataclass(frozen=True)
class Credentials:
    """Portal login; supplied once per run and never persisted."""
    identifier: str
    secret: str

    def __repr__(self) -> str:
        return f"Credentials(identifier={mask_email(self.identifier)!r}, secret='***')"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="VFS_", env_file=".env", extra="ignore")

    # VFS Login
    email: Optional[str] = None
    password: Optional[str] = None

    # Portal
    login_url: str = LOGIN_URL
    booking_url: str = BOOKING_URL
    visa_type: str = DEFAULT_VISA_TYPE

    # Verification code
    otp_mode: str = "gmail"
    otp_max_attempts: int = 10
    otp_retry_delay: float = 6.0

    # Gmail API
    gmail_credentials_path: Path = DATA_DIR / "gmail-credentials.json"
    gmail_token_path: Path = DATA_DIR / "gmail-token.json"

    # IMAP Settings
    imap_email: Optional[str] = None
    imap_password: Optional[str] = None
    imap_server: str = "imap.gmail.com"
    imap_port: int = 993

    # Browser
    headless: bool = True
    timeout: float = 30.0
    login_settle: float = 3.0
    probe_settle: float = 2.0

    # Output
    results_file: Path = DATA_DIR / "slot-results.json"

    # Telegram
    telegram_bot_token: Optional[str] = None
    telegram_chat_id: Optional[str] = None

    def credentials(self) -> Credentials:
        """Return the portal credentials or fail before anything is launched."""
        missing = [name for name, value in (("VFS_EMAIL", self.email), ("VFS_PASSWORD", self.password)) if not value]
        if missing:
            raise ConfigError(f"Please set {' and '.join(missing)} environment variable(s)")
        return Credentials(identifier=self.email, secret=self.password)


def load_settings(**overrides) -> Settings:
    """Load settings from the environment, applying non-empty overrides."""
    try:
        settings = Settings()
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e
    updates = {key: value for key, value in overrides.items() if value is not None}
    if updates:
        settings = settings.model_copy(update=updates)
    if settings.otp_mode not in OTP_MODES:
        raise ConfigError(f"Unknown OTP mode '{settings.otp_mode}', expected one of {', '.join(OTP_MODES)}")
    return settings
