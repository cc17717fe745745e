"""Shared test fixtures and configuration for compliance-scan tests."""

import pytest
from pathlib import Path
import sys
from unittest.mock import AsyncMock, MagicMock

# Add project root to Python path
sys.path.insert(0, str(Path(__file__).parent.parent))

from compliance_scan.audit.models.capture import Cookie
from compliance_scan.audit.models.crawl import CrawlConfig


@pytest.fixture
def sample_crawl_config():
    """Sample crawl configuration for testing."""
    return CrawlConfig(
        url="https://example.com",
        max_depth=2,
        max_pages=10,
        delay=0,
    )


@pytest.fixture
def make_cookie():
    """Factory for cookies with test defaults."""
    def _make(**overrides):
        data = {
            "name": "test_cookie",
            "value": "test_value",
            "domain": "example.com",
            "path": "/",
            "http_only": False,
            "secure": False,
            "same_site": "Lax",
            "is_third_party": False,
            "found_on_url": "https://example.com",
        }
        data.update(overrides)
        return Cookie(**data)
    return _make


def make_mock_page():
    """Playwright page double; event registration is synchronous."""
    page = AsyncMock()
    page.on = MagicMock()
    page.remove_listener = MagicMock()
    page.query_selector = AsyncMock(return_value=None)
    page.query_selector_all = AsyncMock(return_value=[])
    page.eval_on_selector_all = AsyncMock(return_value=[])
    return page


def make_mock_factory(pages=None, contexts=None):
    """BrowserFactory double handing out the given pages and contexts in order.

    ``page()`` and ``context()`` behave as async context managers.
    """
    factory = MagicMock()
    factory.start = AsyncMock()
    factory.stop = AsyncMock()

    page_iter = iter(pages or [])
    context_iter = iter(contexts or [])

    class _PageCM:
        async def __aenter__(self):
            return next(page_iter)

        async def __aexit__(self, exc_type, exc, tb):
            return False

    class _ContextCM:
        async def __aenter__(self):
            return next(context_iter)

        async def __aexit__(self, exc_type, exc, tb):
            return False

    factory.page = MagicMock(side_effect=lambda **kwargs: _PageCM())
    factory.context = MagicMock(side_effect=lambda **kwargs: _ContextCM())
    return factory


def make_mock_context(page, cookies=None):
    """BrowserContext double returning one page and a fixed cookie jar."""
    context = AsyncMock()
    context.new_page = AsyncMock(return_value=page)
    context.cookies = AsyncMock(return_value=cookies or [])
    return context
