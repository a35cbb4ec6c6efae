"""Playwright browser session for the read-all runner"""

import os
from typing import Optional
from loguru import logger

from playwright.async_api import async_playwright, Browser, BrowserContext, Page

from readall.browser.page_document import PageDocument


DEFAULT_PROFILE_DIR = os.path.join("profiles", "default")


class BrowserSession:
    """Owns the Playwright browser, context and the page showing the mailbox.

    A persistent profile is used by default so that the webmail login made
    with scripts/setup_browser_profile.py is reused.
    """

    def __init__(self, correlation_id: str = "N/A", user_data_dir: Optional[str] = None):
        """
        Args:
            correlation_id: Unique ID for logging/tracing
            user_data_dir: Chromium profile directory (None for a fresh profile)
        """
        self.correlation_id = correlation_id
        self.user_data_dir = user_data_dir
        self.browser: Optional[Browser] = None
        self.context: Optional[BrowserContext] = None
        self.page: Optional[Page] = None
        self._playwright = None

    async def start(self, headless: bool = None):
        """
        Start Playwright browser.

        Args:
            headless: Override headless mode. If None, reads from HEADLESS env var (default: False)
        """
        if headless is None:
            headless = os.getenv('HEADLESS', 'false').lower() in ('true', '1', 'yes')

        self._playwright = await async_playwright().start()

        if self.user_data_dir:
            os.makedirs(self.user_data_dir, exist_ok=True)
            logger.info(f"[{self.correlation_id}] Launching persistent browser with profile: {self.user_data_dir}")

            # persistent_context is both a Browser and a Context
            self.context = await self._playwright.chromium.launch_persistent_context(
                user_data_dir=self.user_data_dir,
                headless=headless,
                viewport={"width": 1280, "height": 800},
                args=["--disable-blink-features=AutomationControlled"]
            )
            self.browser = None
            self.page = self.context.pages[0] if self.context.pages else await self.context.new_page()
        else:
            self.browser = await self._playwright.chromium.launch(headless=headless)
            self.context = await self.browser.new_context(viewport={"width": 1280, "height": 800})
            self.page = await self.context.new_page()

        mode = "headless" if headless else "headed"
        profile_msg = f" (profile: {os.path.basename(self.user_data_dir)})" if self.user_data_dir else " (fresh profile)"
        logger.info(f"[{self.correlation_id}] Browser started in {mode} mode{profile_msg}")

    async def open(self, url: str) -> PageDocument:
        """
        Navigate to the mailbox and wrap the page as a document.

        Args:
            url: Webmail URL

        Returns:
            PageDocument for the loaded page
        """
        if not self.page:
            raise ValueError("Browser not started")
        await self.page.goto(url, wait_until="domcontentloaded")
        logger.info(f"[{self.correlation_id}] Opened {self.page.url}")
        return PageDocument(self.page)

    async def close(self):
        """Close browser"""
        try:
            if self.context:
                await self.context.close()

            if self.browser:
                await self.browser.close()

            if self._playwright:
                await self._playwright.stop()

            logger.info(f"[{self.correlation_id}] Browser closed")
        except Exception as e:
            logger.debug(f"[{self.correlation_id}] Error closing browser: {e}")
        finally:
            self.page = None
            self.context = None
            self.browser = None
            self._playwright = None
