"""
Availability Probe - Slot check for a single location
"""

import asyncio
import logging
from typing import Dict, List, Optional

from playwright.async_api import Page

from slot_checker.auth.login import AuthenticatedSession
from slot_checker.core.browser import has_element, read_options
from slot_checker.errors import ProbeError
from slot_checker.utils.helpers import wait_until
from .locations import LOCATION_SELECT, Location
from .results import MAX_SAMPLE_DATES, ProbeResult

logger = logging.getLogger(__name__)


def find_option(options: List[Dict[str, str]], label: str) -> Optional[Dict[str, str]]:
    """First option whose text contains ``label``, ignoring case."""
    needle = label.lower()
    for option in options:
        if needle in option.get("text", "").strip().lower():
            return option
    return None


class AvailabilityProbe:
    """Checks one visa office for open appointment slots"""

    SELECTORS = {
        "location": LOCATION_SELECT,
        "visa_type": 'select[name="visa_type"]',
        "available_slot": ".available-slot, .slot-available",
        "no_slots": ".no-slots, .not-available",
    }

    def __init__(self, timeout: float = 30.0, settle: float = 2.0):
        self.timeout = timeout
        self.settle = settle

    async def probe(self, session: AuthenticatedSession, location: Location, visa_type: str) -> ProbeResult:
        """Never raises: any failure becomes an error result for this location."""
        page = session.page
        try:
            await page.select_option(self.SELECTORS["location"], value=location.identifier)
            # The dependent dropdown gives no signal when it has refreshed
            await asyncio.sleep(self.settle)

            await page.wait_for_selector(self.SELECTORS["visa_type"], timeout=self.timeout * 1000)
            options = await read_options(page, self.SELECTORS["visa_type"])
            option = find_option(options, visa_type)
            if option is None:
                raise ProbeError("Visa type not found")

            # select_option fires input and change events on the element
            await page.select_option(self.SELECTORS["visa_type"], value=option["value"])
            await wait_until(lambda: self._has_marker(page), timeout=self.settle)

            return await self._classify(page, location)
        except Exception as e:
            logger.debug(f"Probe of {location.display_name} failed", exc_info=True)
            return ProbeResult.error(location.display_name, str(e))

    async def _has_marker(self, page: Page) -> bool:
        for key in ("available_slot", "no_slots"):
            if await has_element(page, self.SELECTORS[key]):
                return True
        return False

    async def _classify(self, page: Page, location: Location) -> ProbeResult:
        slots = await page.query_selector_all(self.SELECTORS["available_slot"])
        if slots:
            dates = []
            for slot in slots[:MAX_SAMPLE_DATES]:
                text = await slot.text_content()
                dates.append((text or "").strip())
            return ProbeResult.available(location.display_name, count=len(slots), dates=dates)

        if await page.query_selector(self.SELECTORS["no_slots"]) is not None:
            return ProbeResult.unavailable(location.display_name)

        return ProbeResult.uncertain(location.display_name)
