"""Unit tests for the context cookie collector."""

import pytest
import sys
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from compliance_scan.audit.capture.cookie_collector import CookieCollector
from compliance_scan.audit.models.capture import SameSite


PAGE_URL = "https://www.example.com/products"


def context_with_cookies(cookies):
    context = MagicMock()
    context.cookies = AsyncMock(return_value=cookies)
    return context


class TestCookieCollector:
    """Test cases for CookieCollector."""

    @pytest.mark.asyncio
    async def test_converts_playwright_cookies(self):
        context = context_with_cookies([
            {
                'name': 'session_id', 'value': 'abc123', 'domain': 'www.example.com',
                'path': '/', 'expires': -1, 'httpOnly': True, 'secure': True,
                'sameSite': 'Strict',
            },
            {
                'name': '_ga', 'value': 'GA1.2.3', 'domain': '.example.com',
                'path': '/', 'expires': 1893456000.5, 'httpOnly': False, 'secure': False,
                'sameSite': 'Lax',
            },
            {
                'name': 'IDE', 'value': 'xyz', 'domain': '.doubleclick.net',
                'path': '/', 'expires': 1893456000, 'httpOnly': True, 'secure': True,
                'sameSite': 'None',
            },
        ])
        collector = CookieCollector(context, PAGE_URL)

        cookies = await collector.collect()

        assert [c.name for c in cookies] == ['session_id', '_ga', 'IDE']

        session = cookies[0]
        assert session.expires is None
        assert session.http_only is True
        assert session.secure is True
        assert session.same_site == SameSite.STRICT
        assert session.is_third_party is False
        assert session.found_on_url == PAGE_URL

        assert cookies[1].expires == 1893456000.5
        assert cookies[1].is_third_party is False
        assert cookies[2].is_third_party is True
        assert cookies[2].same_site == SameSite.NONE

        assert [c.name for c in collector.get_third_party_cookies()] == ['IDE']
        assert [c.name for c in collector.get_session_cookies()] == ['session_id']

    @pytest.mark.asyncio
    async def test_missing_attributes_use_defaults(self):
        context = context_with_cookies([{'name': 'bare', 'value': '1', 'domain': 'example.com'}])

        cookies = await CookieCollector(context, PAGE_URL).collect()

        cookie = cookies[0]
        assert cookie.path == '/'
        assert cookie.expires is None
        assert cookie.same_site is None
        assert cookie.http_only is False

    @pytest.mark.asyncio
    async def test_unknown_same_site_degrades_to_unset(self):
        context = context_with_cookies([
            {'name': 'odd', 'value': '1', 'domain': 'example.com', 'sameSite': 'Whatever'},
        ])

        cookies = await CookieCollector(context, PAGE_URL).collect()

        assert cookies[0].same_site is None

    @pytest.mark.asyncio
    async def test_empty_jar(self):
        collector = CookieCollector(context_with_cookies([]), PAGE_URL)

        assert await collector.collect() == []
        assert collector.get_third_party_cookies() == []
