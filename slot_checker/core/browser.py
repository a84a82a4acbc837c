import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, List

from playwright.async_api import Error as PlaywrightError, Page, async_playwright

logger = logging.getLogger(__name__)

SELECT_OPTIONS_SCRIPT = (
    "select => Array.from(select.options)"
    ".map(option => ({value: option.value, text: option.textContent.trim()}))"
)


async def read_options(page: Page, selector: str) -> List[Dict[str, str]]:
    """Return every option of a <select> as {value, text}, in page order."""
    return await page.eval_on_selector(selector, SELECT_OPTIONS_SCRIPT)


async def has_element(page: Page, selector: str) -> bool:
    """Presence check usable while the page may be navigating.

    A query racing a navigation fails with "Execution context was destroyed";
    that counts as not present yet.
    """
    try:
        return await page.query_selector(selector) is not None
    except PlaywrightError as e:
        logger.debug(f"Query for {selector} failed mid-navigation: {e}")
        return False


class BrowserManager:
    """Playwright Firefox browser management"""

    def __init__(self, headless: bool = True):
        self.headless = headless

    @asynccontextmanager
    async def open_page(self) -> AsyncIterator[Page]:
        """Launch a browser and yield a single page; everything is closed on exit."""
        playwright = await async_playwright().start()
        browser = None
        try:
            browser = await playwright.firefox.launch(
                headless=self.headless,
                firefox_user_prefs={
                    "media.navigator.enabled": False,
                    "geo.enabled": False,
                },
            )
            context = await browser.new_context(
                viewport={"width": 1280, "height": 800},
                locale="en-AU",
                user_agent="Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:121.0) Gecko/20100101 Firefox/121.0",
            )
            page = await context.new_page()
            logger.debug("Browser started")
            yield page
        finally:
            if browser is not None:
                await browser.close()
            await playwright.stop()
            logger.debug("Browser closed")
