"""
Location Enumerator - Discovers the visa offices offered after login
"""

import logging
from dataclasses import dataclass
from typing import List

from playwright.async_api import Error as PlaywrightError

from slot_checker.auth.login import AuthenticatedSession
from slot_checker.config import BOOKING_URL
from slot_checker.core.browser import read_options
from slot_checker.errors import DiscoveryError

logger = logging.getLogger(__name__)

LOCATION_SELECT = 'select[name="location"]'


@dataclass(frozen=True)
class Location:
    identifier: str
    display_name: str


class LocationEnumerator:
    """Reads the location dropdown of the booking page"""

    def __init__(self, booking_url: str = BOOKING_URL, timeout: float = 30.0):
        self.booking_url = booking_url
        self.timeout = timeout

    async def enumerate(self, session: AuthenticatedSession) -> List[Location]:
        page = session.page
        logger.info("Fetching visa office locations...")

        try:
            await page.goto(self.booking_url, wait_until="networkidle")
            await page.wait_for_selector(LOCATION_SELECT, timeout=self.timeout * 1000)
            options = await read_options(page, LOCATION_SELECT)
        except PlaywrightError as e:
            raise DiscoveryError(f"Location list did not load: {e}") from e

        # Placeholder entries carry an empty value
        locations = [
            Location(identifier=option["value"], display_name=option["text"])
            for option in options
            if option.get("value")
        ]
        logger.info(f"Found {len(locations)} visa offices")
        return locations
