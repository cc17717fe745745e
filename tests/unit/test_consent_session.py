"""Unit tests for the three-phase consent capture."""

import pytest
import sys
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from conftest import make_mock_context, make_mock_factory, make_mock_page

from compliance_scan.audit.capture.browser_factory import BrowserLaunchError
from compliance_scan.audit.capture.consent_session import CaptureError, ConsentTester


URL = "https://example.com/"

FIRST_PARTY_COOKIE = {
    'name': 'session', 'value': 'abc', 'domain': 'example.com', 'path': '/',
    'expires': -1, 'httpOnly': True, 'secure': True, 'sameSite': 'Lax',
}
GA_COOKIE = {
    'name': '_ga', 'value': 'GA1.1.1', 'domain': '.google-analytics.com', 'path': '/',
    'expires': 1893456000, 'httpOnly': False, 'secure': False, 'sameSite': 'None',
}


def phase_page(elements=None, scripts=None, requests=None):
    """Mock page with consent elements, script srcs and requests fired on goto."""
    page = make_mock_page()
    elements = elements or {}
    page.query_selector = AsyncMock(side_effect=lambda selector: elements.get(selector))
    page.eval_on_selector_all = AsyncMock(
        return_value=[{'src': src, 'text': ''} for src in (scripts or [])]
    )

    async def goto(url, **kwargs):
        handler = page.on.call_args[0][1]
        for request_url in requests or []:
            request = MagicMock()
            request.url = request_url
            request.resource_type = "script"
            handler(request)
        return MagicMock(status=200)

    page.goto = AsyncMock(side_effect=goto)
    return page


def make_tester(contexts):
    factory = make_mock_factory(contexts=contexts)
    tester = ConsentTester(
        settle_ms=0,
        post_click_settle_ms=0,
        browser_factory=factory,
    )
    return tester, factory


class TestConsentTester:
    """Test cases for ConsentTester."""

    @pytest.mark.asyncio
    async def test_three_isolated_phases(self):
        accept_button = AsyncMock()
        reject_button = AsyncMock()

        before_page = phase_page(
            scripts=["https://www.googletagmanager.com/gtm.js"],
            requests=["https://example.com/", "https://www.googletagmanager.com/gtm.js"],
        )
        accept_page = phase_page(
            elements={'#onetrust-accept-btn-handler': accept_button},
            scripts=["https://www.googletagmanager.com/gtm.js", "https://example.com/app.js"],
        )
        reject_page = phase_page(elements={'#onetrust-reject-all-handler': reject_button})

        contexts = [
            make_mock_context(before_page, cookies=[FIRST_PARTY_COOKIE]),
            make_mock_context(accept_page, cookies=[FIRST_PARTY_COOKIE, GA_COOKIE]),
            make_mock_context(reject_page, cookies=[FIRST_PARTY_COOKIE]),
        ]
        tester, factory = make_tester(contexts)

        result = await tester.test_consent(URL)

        assert factory.context.call_count == 3
        factory.start.assert_awaited_once()
        factory.stop.assert_awaited_once()

        assert result.url == URL
        assert result.consent_mechanism_found is True
        assert result.consent_vendor == 'OneTrust'

        assert [c.name for c in result.before_consent.cookies] == ['session']
        assert [c.name for c in result.after_accept_all.cookies] == ['session', '_ga']
        assert [c.name for c in result.after_reject_all.cookies] == ['session']

        ga = result.after_accept_all.cookies[1]
        assert ga.is_third_party is True
        assert ga.found_on_url == URL
        assert result.before_consent.cookies[0].expires is None

        assert len(result.before_consent.scripts) == 1
        assert result.before_consent.scripts[0].is_third_party is True
        assert [r.url for r in result.before_consent.requests] == [
            "https://example.com/",
            "https://www.googletagmanager.com/gtm.js",
        ]
        assert result.after_accept_all.requests == []

        accept_button.click.assert_awaited_once()
        reject_button.click.assert_awaited_once()
        before_page.query_selector.assert_not_called()

    @pytest.mark.asyncio
    async def test_navigation_options(self):
        pages = [phase_page() for _ in range(3)]
        tester, _ = make_tester([make_mock_context(page) for page in pages])
        tester.navigation_timeout_ms = 15000

        await tester.test_consent(URL)

        for page in pages:
            page.goto.assert_awaited_once_with(URL, wait_until='domcontentloaded', timeout=15000)
            page.remove_listener.assert_called_once()

    @pytest.mark.asyncio
    async def test_no_banner(self):
        pages = [phase_page() for _ in range(3)]
        tester, _ = make_tester([make_mock_context(page) for page in pages])

        result = await tester.test_consent(URL)

        assert result.consent_mechanism_found is False
        assert result.consent_vendor is None

    @pytest.mark.asyncio
    async def test_vendor_reported_from_accept_phase_only(self):
        reject_button = AsyncMock()
        pages = [
            phase_page(),
            phase_page(),
            phase_page(elements={'#CybotCookiebotDialogBodyButtonDecline': reject_button}),
        ]
        tester, _ = make_tester([make_mock_context(page) for page in pages])

        result = await tester.test_consent(URL)

        reject_button.click.assert_awaited_once()
        assert result.consent_mechanism_found is False
        assert result.consent_vendor is None

    @pytest.mark.asyncio
    async def test_post_click_wait_only_after_click(self):
        button = AsyncMock()
        pages = [phase_page(), phase_page(elements={'.cc-accept': button}), phase_page()]
        tester, _ = make_tester([make_mock_context(page) for page in pages])
        tester.settle_ms = 3000
        tester.post_click_settle_ms = 2000

        with patch('compliance_scan.audit.capture.consent_session.asyncio.sleep', new_callable=AsyncMock) as sleep:
            await tester.test_consent(URL)

        waits = [call.args[0] for call in sleep.await_args_list]
        assert waits == [3.0, 3.0, 2.0, 3.0]

    @pytest.mark.asyncio
    async def test_launch_failure(self):
        tester, factory = make_tester([])
        factory.start = AsyncMock(side_effect=BrowserLaunchError("no browser"))

        with pytest.raises(CaptureError, match="no browser"):
            await tester.test_consent(URL)

        factory.context.assert_not_called()

    @pytest.mark.asyncio
    async def test_phase_failure_stops_browser(self):
        page = phase_page()
        page.goto = AsyncMock(side_effect=Exception("net::ERR_NAME_NOT_RESOLVED"))
        tester, factory = make_tester([make_mock_context(page)])

        with pytest.raises(CaptureError, match="ERR_NAME_NOT_RESOLVED"):
            await tester.test_consent(URL)

        factory.stop.assert_awaited_once()
        page.remove_listener.assert_called_once()
