"""
Gmail Setup - One-time OAuth authorization for reading verification codes
"""

import logging
from pathlib import Path

from google.auth.exceptions import GoogleAuthError
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow

from slot_checker.errors import ConfigError
from .mailbox import GMAIL_SCOPES

logger = logging.getLogger(__name__)

SETUP_INSTRUCTIONS = """\
=== SETUP INSTRUCTIONS ===
1. Go to https://console.cloud.google.com/
2. Create a new project or select an existing one
3. Enable Gmail API
4. Create OAuth 2.0 credentials (Desktop app)
5. Download the credentials file
6. Save it as: {path}
7. Run this command again"""


def authorize(credentials_path: Path, token_path: Path) -> Credentials:
    """Load the stored Gmail token, or run the browser consent flow to create it."""
    credentials_path = Path(credentials_path)
    token_path = Path(token_path)

    if token_path.exists():
        try:
            creds = Credentials.from_authorized_user_file(str(token_path), GMAIL_SCOPES)
        except (ValueError, GoogleAuthError) as e:
            logger.warning(f"Stored token is unusable, requesting a new one: {e}")
        else:
            logger.info("Gmail authentication already configured!")
            return creds

    if not credentials_path.exists():
        logger.error(SETUP_INSTRUCTIONS.format(path=credentials_path))
        raise ConfigError(f"Gmail client credentials not found at {credentials_path}")

    flow = InstalledAppFlow.from_client_secrets_file(str(credentials_path), GMAIL_SCOPES)
    logger.info("Authorize this app in the browser window that opens")
    creds = flow.run_local_server(port=0)

    token_path.parent.mkdir(parents=True, exist_ok=True)
    token_path.write_text(creds.to_json(), encoding="utf-8")
    logger.info(f"Token stored to {token_path}")
    return creds
