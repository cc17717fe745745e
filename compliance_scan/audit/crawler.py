"""Breadth-first site crawler.

Walks a single host from the start URL in BFS order, one page at a time,
recording every successfully fetched page and every page that failed. Each
page is loaded in a fresh browser context that is closed before the next
fetch.
"""

import asyncio
import logging
from typing import List, Optional
from urllib.parse import urljoin

from playwright.async_api import Page

from .capture.browser_factory import BrowserFactory, BrowserLaunchError, create_browser_factory
from .models.crawl import CrawlConfig, CrawlError, CrawlResult, FrontierItem, PageInfo
from .queue.frontier_queue import Frontier


logger = logging.getLogger(__name__)


class CrawlerError(Exception):
    """Raised when crawler encounters a fatal error."""
    pass


class Crawler:
    """BFS crawler producing the page inventory of one site.

    Per-page failures (timeouts, non-2xx responses, navigation errors) are
    recorded as CrawlError entries and never stop the crawl. Only a browser
    launch failure is fatal.
    """

    def __init__(
        self,
        config: CrawlConfig,
        browser_factory: Optional[BrowserFactory] = None
    ):
        """Initialize crawler with configuration.

        Args:
            config: Crawl configuration
            browser_factory: Pre-built browser factory (defaults to Chromium
                with the configured headless mode)
        """
        self.config = config
        self.browser_factory = browser_factory or create_browser_factory(headless=config.headless)

        self._frontier: Optional[Frontier] = None
        self._pages: List[PageInfo] = []
        self._errors: List[CrawlError] = []

    async def crawl(self) -> List[PageInfo]:
        """Crawl the site.

        Returns:
            Successfully fetched pages in fetch order

        Raises:
            CrawlerError: If the browser cannot be launched
        """
        self._frontier = Frontier(self.config.url)
        self._pages = []
        self._errors = []

        logger.info(
            f"Starting crawl of {self.config.url} "
            f"(max_depth={self.config.max_depth}, max_pages={self.config.max_pages})"
        )

        try:
            await self.browser_factory.start()
        except BrowserLaunchError as e:
            logger.error(f"Crawl failed: {e}")
            raise CrawlerError(f"Crawl of {self.config.url} aborted: {e}") from e

        try:
            while not self._frontier.is_empty():
                if len(self._pages) >= self.config.max_pages:
                    logger.info(f"Reached max_pages limit ({self.config.max_pages})")
                    break

                item = self._frontier.dequeue()
                if item is None:
                    break

                if item.depth > self.config.max_depth:
                    logger.debug(f"Skipping {item.url} - max depth reached")
                    continue

                await self._crawl_page(item)

                logger.debug(
                    f"Crawling... ({len(self._pages)} pages found, "
                    f"{self._frontier.size()} in queue)"
                )

                if not self._frontier.is_empty():
                    await asyncio.sleep(self.config.delay / 1000)

        finally:
            await self.browser_factory.stop()

        logger.info(f"Crawl complete: {len(self._pages)} pages found, {len(self._errors)} errors")
        return list(self._pages)

    async def _crawl_page(self, item: FrontierItem) -> None:
        """Fetch one page, record the outcome and enqueue its links."""
        url = item.url
        timeout = self.config.navigation_timeout_ms

        try:
            async with self.browser_factory.page() as page:
                response = await page.goto(url, wait_until='domcontentloaded', timeout=timeout)

                if response is None:
                    raise CrawlerError("No response received")

                status_code = response.status
                if not 200 <= status_code < 300:
                    logger.warning(f"Non-2xx response for {url}: {status_code}")
                    self._record_error(url, f"HTTP {status_code}")
                    return

                title = await page.title()
                self._pages.append(PageInfo(
                    url=url,
                    depth=item.depth,
                    title=title or "",
                    status_code=status_code,
                ))
                self._frontier.mark_visited(url)
                logger.info(f"Crawled: {url} ({status_code})")

                if item.depth < self.config.max_depth:
                    await self._extract_links(page, url, item.depth)

        except Exception as e:
            logger.error(f"Failed to crawl {url}: {e}")
            self._record_error(url, str(e) or e.__class__.__name__)

    async def _extract_links(self, page: Page, current_url: str, current_depth: int) -> None:
        """Enqueue every anchor href of a page at the next depth."""
        try:
            elements = await page.query_selector_all('a[href]')
            hrefs = []
            for element in elements:
                href = await element.get_attribute('href')
                if href and href.strip():
                    hrefs.append(href.strip())
        except Exception as e:
            logger.error(f"Failed to extract links from {current_url}: {e}")
            self._record_error(current_url, f"Link extraction failed: {e}")
            return

        enqueued = 0
        for href in hrefs:
            try:
                absolute_url = urljoin(current_url, href)
            except ValueError:
                logger.debug(f"Invalid link: {href}")
                continue

            if self._frontier.enqueue(FrontierItem(
                url=absolute_url,
                depth=current_depth + 1,
                parent_url=current_url,
            )):
                enqueued += 1

        logger.debug(f"Extracted {len(hrefs)} links from {current_url} ({enqueued} queued)")

    def _record_error(self, url: str, error: str) -> None:
        self._errors.append(CrawlError(url=url, error=error))

    def get_pages(self) -> List[PageInfo]:
        """Get pages collected by the last crawl."""
        return list(self._pages)

    def get_errors(self) -> List[CrawlError]:
        """Get errors recorded by the last crawl."""
        return list(self._errors)

    def get_result(self) -> CrawlResult:
        """Get pages and errors of the last crawl."""
        return CrawlResult(
            pages=list(self._pages),
            total_pages=len(self._pages),
            errors=list(self._errors),
        )

    def get_frontier_stats(self) -> dict:
        """Get frontier statistics of the last crawl."""
        if self._frontier is None:
            return {}
        return self._frontier.get_stats()
