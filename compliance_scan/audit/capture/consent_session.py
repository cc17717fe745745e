"""Three-phase consent capture for a single URL.

The same URL is loaded in three fresh browser contexts, strictly one after
another: without interacting with the consent banner, after clicking its
accept-all control, and after clicking its reject-all control. Each phase
records the cookies, external scripts and network requests it observed.
Contexts never share cookies, and each is closed before the next opens.
"""

import asyncio
import logging
from typing import Optional

from playwright.async_api import BrowserContext

from ..models.capture import CapturePhaseResult, ConsentPhase, ConsentTestResult
from .browser_factory import BrowserConfig, BrowserFactory, BrowserLaunchError
from .cmp import ConsentAction, ConsentClickResult, find_and_click_consent
from .cookie_collector import CookieCollector
from .network_observer import DEFAULT_MAX_REQUESTS, NetworkObserver
from .script_collector import ScriptCollector

logger = logging.getLogger(__name__)


class CaptureError(Exception):
    """Raised when a consent capture cannot be completed."""
    pass


_PHASE_ACTIONS = {
    ConsentPhase.BEFORE: None,
    ConsentPhase.ACCEPT: ConsentAction.ACCEPT,
    ConsentPhase.REJECT: ConsentAction.REJECT,
}


class ConsentTester:
    """Captures tracking state under each consent condition."""

    def __init__(
        self,
        browser_config: Optional[BrowserConfig] = None,
        settle_ms: int = 3000,
        post_click_settle_ms: int = 2000,
        navigation_timeout_ms: int = 20000,
        max_requests: int = DEFAULT_MAX_REQUESTS,
        browser_factory: Optional[BrowserFactory] = None
    ):
        """Initialize the consent tester.

        Args:
            browser_config: Browser launch and context settings
            settle_ms: Wait after navigation before interacting or capturing
            post_click_settle_ms: Extra wait after a consent control was clicked
            navigation_timeout_ms: Navigation timeout per phase
            max_requests: Per-phase network request buffer size
            browser_factory: Pre-built factory (mainly for testing)
        """
        self.browser_factory = browser_factory or BrowserFactory(browser_config)
        self.settle_ms = settle_ms
        self.post_click_settle_ms = post_click_settle_ms
        self.navigation_timeout_ms = navigation_timeout_ms
        self.max_requests = max_requests

    async def test_consent(self, url: str) -> ConsentTestResult:
        """Run the before, accept and reject phases against a URL.

        Args:
            url: Page to test

        Returns:
            ConsentTestResult with one CapturePhaseResult per phase

        Raises:
            CaptureError: If the browser cannot be launched or a phase fails
        """
        logger.info(f"Testing consent behaviour on {url}")

        try:
            await self.browser_factory.start()
        except BrowserLaunchError as e:
            raise CaptureError(str(e)) from e

        try:
            before, _ = await self._run_phase(url, ConsentPhase.BEFORE)
            after_accept, accept_click = await self._run_phase(url, ConsentPhase.ACCEPT)
            # Vendor identity comes from the accept phase only
            after_reject, _ = await self._run_phase(url, ConsentPhase.REJECT)

        except CaptureError:
            raise
        except Exception as e:
            logger.error(f"Consent capture failed for {url}: {e}")
            raise CaptureError(f"Consent capture failed for {url}: {e}") from e
        finally:
            await self.browser_factory.stop()

        return ConsentTestResult(
            url=url,
            before_consent=before,
            after_accept_all=after_accept,
            after_reject_all=after_reject,
            consent_mechanism_found=accept_click.found,
            consent_vendor=accept_click.vendor,
        )

    async def _run_phase(self, url: str, phase: ConsentPhase):
        """Capture one phase in its own browser context.

        Returns:
            Tuple of (CapturePhaseResult, ConsentClickResult)
        """
        action = _PHASE_ACTIONS[phase]
        click = ConsentClickResult()

        async with self.browser_factory.context() as context:
            page = await context.new_page()
            observer = NetworkObserver(page, url, max_requests=self.max_requests)

            try:
                await page.goto(
                    url,
                    wait_until='domcontentloaded',
                    timeout=self.navigation_timeout_ms
                )
                await asyncio.sleep(self.settle_ms / 1000)

                if action is not None:
                    click = await find_and_click_consent(page, action)
                    if click.found:
                        await asyncio.sleep(self.post_click_settle_ms / 1000)

                result = await self._snapshot(context, page, url, observer)
            finally:
                observer.detach()

        logger.info(
            f"Phase {phase.value}: {len(result.cookies)} cookies, "
            f"{len(result.scripts)} scripts, {len(result.requests)} requests"
        )
        return result, click

    async def _snapshot(
        self,
        context: BrowserContext,
        page,
        url: str,
        observer: NetworkObserver
    ) -> CapturePhaseResult:
        """Read cookies, external scripts and buffered requests."""
        cookies = await CookieCollector(context, url).collect()
        scripts = await ScriptCollector(page, url).collect()
        requests = observer.drain()

        return CapturePhaseResult(cookies=cookies, scripts=scripts, requests=requests)
