"""Chromium lifecycle shared by the crawler, the page scanner and the consent tester.

One browser process is launched per crawl, scan or consent test and reused for
every page of that run. Pages and consent phases are isolated from each other
by giving each its own browser context, which has its own cookie jar and
storage and is closed before the next one is handed out.
"""

import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Dict, List, Optional

from playwright.async_api import Browser, BrowserContext, Page, Playwright, async_playwright

logger = logging.getLogger(__name__)


# Keeps navigator.webdriver unset in the launched browser
DEFAULT_LAUNCH_ARGS = ['--disable-blink-features=AutomationControlled']


class BrowserLaunchError(Exception):
    """Raised when Playwright or Chromium cannot be started."""
    pass


@dataclass
class BrowserConfig:
    """Launch and context settings for the audit browser."""
    headless: bool = True
    args: List[str] = field(default_factory=lambda: list(DEFAULT_LAUNCH_ARGS))
    viewport: Optional[Dict[str, int]] = None
    user_agent: Optional[str] = None
    locale: Optional[str] = None
    ignore_https_errors: bool = False
    # Passed straight to chromium.launch(), e.g. slow_mo
    launch_options: Dict[str, Any] = field(default_factory=dict)

    def launch_kwargs(self) -> Dict[str, Any]:
        """Keyword arguments for ``chromium.launch()``."""
        kwargs: Dict[str, Any] = {'headless': self.headless}
        if self.args:
            kwargs['args'] = list(self.args)
        kwargs.update(self.launch_options)
        return kwargs

    def context_kwargs(self) -> Dict[str, Any]:
        """Keyword arguments for ``browser.new_context()``; unset values are omitted."""
        kwargs: Dict[str, Any] = {}
        if self.viewport:
            kwargs['viewport'] = self.viewport
        if self.user_agent:
            kwargs['user_agent'] = self.user_agent
        if self.locale:
            kwargs['locale'] = self.locale
        if self.ignore_https_errors:
            kwargs['ignore_https_errors'] = True
        return kwargs


class BrowserFactory:
    """Owns one Chromium process and hands out isolated contexts.

    Usage:
        factory = BrowserFactory(BrowserConfig(headless=False))
        await factory.start()
        try:
            async with factory.page() as page:
                await page.goto(url)
        finally:
            await factory.stop()
    """

    def __init__(self, config: Optional[BrowserConfig] = None):
        self.config = config or BrowserConfig()
        self.playwright: Optional[Playwright] = None
        self.browser: Optional[Browser] = None
        self._open_contexts = 0

    async def start(self) -> None:
        """Start Playwright and launch Chromium.

        Raises:
            BrowserLaunchError: If either fails; anything already started is stopped
        """
        if self.browser is not None:
            logger.warning("Browser already running, ignoring start()")
            return

        logger.info(f"Launching Chromium (headless={self.config.headless})")
        try:
            self.playwright = await async_playwright().start()
            self.browser = await self.playwright.chromium.launch(**self.config.launch_kwargs())
        except Exception as e:
            logger.error(f"Browser launch failed: {e}")
            await self.stop()
            raise BrowserLaunchError(f"Failed to launch browser: {e}") from e

    async def stop(self) -> None:
        """Close the browser and stop Playwright; safe to call repeatedly."""
        browser, playwright = self.browser, self.playwright
        self.browser = None
        self.playwright = None
        self._open_contexts = 0

        try:
            if browser is not None:
                await browser.close()
                logger.info("Browser closed")
            if playwright is not None:
                await playwright.stop()
        except Exception as e:
            logger.error(f"Error while shutting down browser: {e}")

    async def create_context(self, **overrides) -> BrowserContext:
        """Open a new, empty browser context.

        Raises:
            RuntimeError: If start() has not been called
        """
        if self.browser is None:
            raise RuntimeError("Browser not started. Call start() first.")

        options = self.config.context_kwargs()
        options.update(overrides)
        context = await self.browser.new_context(**options)
        self._open_contexts += 1
        return context

    @asynccontextmanager
    async def context(self, **overrides) -> AsyncIterator[BrowserContext]:
        """Yield a fresh context and close it on exit, even on error."""
        context = await self.create_context(**overrides)
        try:
            yield context
        finally:
            try:
                await context.close()
            except Exception as e:
                logger.warning(f"Error closing browser context: {e}")
            self._open_contexts -= 1

    @asynccontextmanager
    async def page(self, **overrides) -> AsyncIterator[Page]:
        """Yield a page in its own context; both are closed on exit."""
        async with self.context(**overrides) as context:
            page = await context.new_page()
            try:
                yield page
            finally:
                try:
                    await page.close()
                except Exception as e:
                    logger.debug(f"Error closing page: {e}")

    @property
    def is_running(self) -> bool:
        """True while the browser is launched and connected."""
        return self.browser is not None and self.browser.is_connected()

    @property
    def context_count(self) -> int:
        """Number of contexts currently open."""
        return self._open_contexts


def create_browser_factory(headless: bool = True, **config_kwargs) -> BrowserFactory:
    """Build a factory from keyword settings.

    Args:
        headless: Run without a visible window
        **config_kwargs: Other BrowserConfig fields

    Returns:
        Unstarted BrowserFactory
    """
    return BrowserFactory(BrowserConfig(headless=headless, **config_kwargs))
