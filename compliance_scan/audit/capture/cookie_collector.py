"""Cookie collector for browser contexts.

This module provides the CookieCollector class that snapshots the cookie jar
of a browser context after a page visit and converts each entry into a
:class:`Cookie` with its first/third-party flag computed against the page.
"""

import logging
from typing import Any, Dict, List

from playwright.async_api import BrowserContext

from ..models.capture import Cookie
from ..utils.url_normalizer import is_third_party

logger = logging.getLogger(__name__)


class CookieCollector:
    """Collects cookies from a browser context."""

    def __init__(self, context: BrowserContext, page_url: str):
        """Initialize cookie collector.

        Args:
            context: Playwright browser context to read cookies from
            page_url: URL of the visited page (for third-party classification)
        """
        self.context = context
        self.page_url = page_url
        self.cookies: List[Cookie] = []

    def _convert(self, pw_cookie: Dict[str, Any]) -> Cookie:
        """Convert a Playwright cookie dict into a Cookie."""
        domain = pw_cookie.get('domain', '')
        return Cookie(
            name=pw_cookie.get('name', ''),
            value=pw_cookie.get('value', ''),
            domain=domain,
            path=pw_cookie.get('path') or '/',
            expires=pw_cookie.get('expires'),
            http_only=bool(pw_cookie.get('httpOnly', False)),
            secure=bool(pw_cookie.get('secure', False)),
            same_site=pw_cookie.get('sameSite'),
            is_third_party=is_third_party(domain, self.page_url),
            found_on_url=self.page_url,
        )

    async def collect(self) -> List[Cookie]:
        """Snapshot every cookie currently stored in the context.

        Returns:
            List of Cookie objects in the order the browser reports them
        """
        playwright_cookies = await self.context.cookies()

        self.cookies = []
        for pw_cookie in playwright_cookies:
            try:
                self.cookies.append(self._convert(pw_cookie))
            except Exception as e:
                logger.warning(f"Failed to process cookie {pw_cookie.get('name', 'unknown')}: {e}")

        logger.info(f"Collected {len(self.cookies)} cookies for {self.page_url}")
        return self.cookies.copy()

    def get_third_party_cookies(self) -> List[Cookie]:
        """Get only third-party cookies."""
        return [cookie for cookie in self.cookies if cookie.is_third_party]

    def get_session_cookies(self) -> List[Cookie]:
        """Get only session cookies."""
        return [cookie for cookie in self.cookies if cookie.expires is None]
