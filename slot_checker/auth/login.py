"""
VFS Global Login Handler
Drives the credential + verification code login handshake.
"""

import logging
from dataclasses import dataclass

from playwright.async_api import Error as PlaywrightError, Page

from slot_checker.config import Credentials, LOGIN_URL
from slot_checker.core.browser import has_element
from slot_checker.errors import AuthError, ChallengeTimeout
from slot_checker.utils.helpers import mask_email, wait_until
from .challenge import ChallengeResolver

logger = logging.getLogger(__name__)


@dataclass
class AuthenticatedSession:
    """Logged-in browsing context. Owned by the run until the browser closes."""
    page: Page


class SessionAuthenticator:
    """
    Handles VFS Global login: credentials, then the emailed verification code.
    """

    SELECTORS = {
        "email": 'input[name="email"]',
        "password": 'input[name="password"]',
        "submit": 'button[type="submit"]',
        "code": 'input[name="code"]',
    }

    def __init__(self, login_url: str = LOGIN_URL, timeout: float = 30.0, settle: float = 3.0):
        """
        Initialize the SessionAuthenticator.

        Args:
            login_url: Portal login page
            timeout: Seconds to wait for the code field and the final navigation
            settle: Upper bound, in seconds, on waiting for the code form after submitting credentials
        """
        self.login_url = login_url
        self.timeout = timeout
        self.settle = settle

    async def login(self, page: Page, credentials: Credentials, resolver: ChallengeResolver) -> AuthenticatedSession:
        """
        Perform login to the VFS Global portal.

        Returns:
            AuthenticatedSession: the logged-in page

        Raises:
            AuthError: if any step fails; the cause is chained
        """
        timeout_ms = self.timeout * 1000

        try:
            logger.info("Navigating to login page...")
            await page.goto(self.login_url, wait_until="networkidle")

            logger.info(f"Entering credentials for {mask_email(credentials.identifier)}...")
            await page.fill(self.SELECTORS["email"], credentials.identifier)
            await page.fill(self.SELECTORS["password"], credentials.secret)
            await page.click(self.SELECTORS["submit"])

            await wait_until(lambda: self._has_code_field(page), timeout=self.settle)

            try:
                challenge = await resolver.resolve()
            except ChallengeTimeout as e:
                raise AuthError(f"Verification code not received: {e}") from e

            logger.info("Entering verification code...")
            await page.wait_for_selector(self.SELECTORS["code"], timeout=timeout_ms)
            await page.fill(self.SELECTORS["code"], challenge.code)
            async with page.expect_navigation(wait_until="networkidle", timeout=timeout_ms):
                await page.click(self.SELECTORS["submit"])

        except PlaywrightError as e:
            raise AuthError(f"Login failed: {e}") from e

        logger.info("Login successful")
        return AuthenticatedSession(page=page)

    async def _has_code_field(self, page: Page) -> bool:
        return await has_element(page, self.SELECTORS["code"])
