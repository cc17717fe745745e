"""Page scanner for cookies, scripts and network requests.

Visits every crawled page in its own browser context and aggregates what was
captured across the whole site, deduplicating cookies by (name, domain) and
scripts by URL.
"""

import asyncio
import logging
from typing import Dict, List, Optional, Sequence, Tuple

from ..cookies.classification import CookieAnalyzer
from ..models.capture import AggregatedScanResults, Cookie, Script, ScanResult
from ..models.crawl import PageInfo
from .browser_factory import BrowserConfig, BrowserFactory, BrowserLaunchError
from .consent_session import CaptureError
from .cookie_collector import CookieCollector
from .network_observer import DEFAULT_MAX_REQUESTS, NetworkObserver
from .script_collector import ScriptCollector

logger = logging.getLogger(__name__)


class CookieScanner:
    """Scans crawled pages for tracking state."""

    def __init__(
        self,
        browser_config: Optional[BrowserConfig] = None,
        navigation_timeout_ms: int = 30000,
        settle_ms: int = 2000,
        max_requests: int = DEFAULT_MAX_REQUESTS,
        analyzer: Optional[CookieAnalyzer] = None,
        browser_factory: Optional[BrowserFactory] = None
    ):
        """Initialize the scanner.

        Args:
            browser_config: Browser launch and context settings
            navigation_timeout_ms: Navigation timeout per page
            settle_ms: Wait after the network went idle before capturing
            max_requests: Per-page network request buffer size
            analyzer: Cookie analyzer used to classify unique cookies
            browser_factory: Pre-built factory (mainly for testing)
        """
        self.browser_factory = browser_factory or BrowserFactory(browser_config)
        self.navigation_timeout_ms = navigation_timeout_ms
        self.settle_ms = settle_ms
        self.max_requests = max_requests
        self.analyzer = analyzer or CookieAnalyzer()

    async def scan_pages(self, pages: Sequence[PageInfo]) -> AggregatedScanResults:
        """Scan every page and aggregate the results.

        Pages that fail to load are logged and left out of the results.

        Args:
            pages: Pages produced by a crawl

        Returns:
            AggregatedScanResults with cookie_analysis filled for unique cookies

        Raises:
            CaptureError: If the browser cannot be launched
        """
        scan_results: List[ScanResult] = []

        try:
            await self.browser_factory.start()
        except BrowserLaunchError as e:
            raise CaptureError(str(e)) from e

        try:
            for index, page_info in enumerate(pages, start=1):
                logger.info(f"Scanning page {index}/{len(pages)}: {page_info.url}")
                try:
                    scan_results.append(await self.scan_page(page_info.url))
                except Exception as e:
                    logger.error(f"Failed to scan {page_info.url}: {e}")
        finally:
            await self.browser_factory.stop()

        logger.info(f"Scanned {len(scan_results)} pages")

        aggregated = aggregate_results(scan_results)
        aggregated.cookie_analysis = self.analyzer.analyze_cookies(aggregated.unique_cookies)
        return aggregated

    async def scan_page(self, url: str) -> ScanResult:
        """Capture cookies, scripts and requests for one URL.

        Args:
            url: Page to scan

        Returns:
            ScanResult for the page
        """
        async with self.browser_factory.context() as context:
            page = await context.new_page()
            observer = NetworkObserver(page, url, max_requests=self.max_requests)

            try:
                await page.goto(url, wait_until='networkidle', timeout=self.navigation_timeout_ms)
                await asyncio.sleep(self.settle_ms / 1000)

                cookies = await CookieCollector(context, url).collect()
                scripts = await ScriptCollector(page, url, include_inline=True).collect()
                requests = observer.drain()
            finally:
                observer.detach()

        logger.info(f"Scanned {url}: {len(cookies)} cookies, {len(scripts)} scripts")

        return ScanResult(url=url, cookies=cookies, scripts=scripts, requests=requests)


def aggregate_results(scan_results: List[ScanResult]) -> AggregatedScanResults:
    """Combine per-page results into site-wide totals.

    Args:
        scan_results: Results in scan order

    Returns:
        AggregatedScanResults (cookie_analysis left empty)
    """
    unique_cookies: Dict[Tuple[str, str], Cookie] = {}
    unique_scripts: Dict[str, Script] = {}
    total_cookies = total_scripts = total_requests = 0

    for result in scan_results:
        total_cookies += len(result.cookies)
        total_scripts += len(result.scripts)
        total_requests += len(result.requests)

        for cookie in result.cookies:
            unique_cookies.setdefault((cookie.name, cookie.domain), cookie)
        for script in result.scripts:
            unique_scripts.setdefault(script.url, script)

    cookies = list(unique_cookies.values())
    scripts = list(unique_scripts.values())

    return AggregatedScanResults(
        total_cookies=total_cookies,
        total_scripts=total_scripts,
        total_requests=total_requests,
        unique_cookies=cookies,
        unique_scripts=scripts,
        third_party_cookies=[cookie for cookie in cookies if cookie.is_third_party],
        third_party_scripts=[script for script in scripts if script.is_third_party],
        scan_results=scan_results,
    )
