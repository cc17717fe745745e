"""Script discovery and tracker categorization.

Collects the ``<script>`` elements of a loaded page. External scripts are
categorized by URL, inline scripts by the leading part of their body.
"""

import logging
from typing import Dict, List, Tuple

from playwright.async_api import Page

from ..models.capture import Script, ScriptCategory, ScriptType
from ..utils.url_normalizer import is_third_party

logger = logging.getLogger(__name__)


INLINE_CONTENT_LIMIT = 500

# Substring markers per category, checked in declaration order
TRACKER_PATTERNS: Dict[ScriptCategory, Tuple[str, ...]] = {
    ScriptCategory.ANALYTICS: (
        'google-analytics.com', 'googletagmanager.com', 'analytics.js',
        'ga.js', 'gtag', 'matomo', 'piwik', 'mixpanel',
    ),
    ScriptCategory.ADVERTISING: (
        'doubleclick.net', 'googlesyndication.com', 'adservice', 'adsystem',
        'advertising', 'criteo', 'outbrain', 'taboola',
    ),
    ScriptCategory.SOCIAL: (
        'facebook.com/tr', 'facebook.net', 'connect.facebook', 'twitter.com/i',
        'linkedin.com/px', 'snapchat.com/p', 'pinterest.com/ct',
    ),
    ScriptCategory.MARKETING: (
        'hubspot', 'marketo', 'mailchimp', 'pardot', 'eloqua',
    ),
}

_SCRIPTS_JS = """
els => els.map(e => ({
    src: e.src || '',
    text: e.src ? '' : (e.textContent || '')
}))
"""


def categorize_script(url_or_content: str) -> ScriptCategory:
    """Map a script URL or inline body to a tracker category.

    Args:
        url_or_content: Absolute script URL or inline script text

    Returns:
        First matching category, or UNKNOWN
    """
    lowered = (url_or_content or '').lower()
    for category, patterns in TRACKER_PATTERNS.items():
        if any(pattern in lowered for pattern in patterns):
            return category
    return ScriptCategory.UNKNOWN


class ScriptCollector:
    """Collects script elements from a page."""

    def __init__(self, page: Page, page_url: str, include_inline: bool = False):
        """Initialize script collector.

        Args:
            page: Loaded Playwright page
            page_url: URL of the page (for third-party classification)
            include_inline: Also record inline scripts
        """
        self.page = page
        self.page_url = page_url
        self.include_inline = include_inline

    async def collect(self) -> List[Script]:
        """Collect scripts in document order.

        Returns:
            List of Script objects; src attributes are resolved to absolute URLs
        """
        elements = await self.page.eval_on_selector_all('script', _SCRIPTS_JS)

        scripts = []
        for element in elements or []:
            src = element.get('src') or ''
            if src:
                scripts.append(Script(
                    url=src,
                    type=ScriptType.EXTERNAL,
                    is_third_party=is_third_party(src, self.page_url),
                    found_on_url=self.page_url,
                    category=categorize_script(src),
                ))
            elif self.include_inline:
                text = element.get('text') or ''
                if not text.strip():
                    continue
                content = text[:INLINE_CONTENT_LIMIT]
                scripts.append(Script(
                    url=self.page_url,
                    type=ScriptType.INLINE,
                    is_third_party=False,
                    found_on_url=self.page_url,
                    content=content,
                    category=categorize_script(content),
                ))

        logger.debug(f"Collected {len(scripts)} scripts on {self.page_url}")
        return scripts
