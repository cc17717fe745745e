"""Consent banner automation.

Clicks the accept-all or reject-all control of a consent management
platform (CMP) by probing an ordered list of selectors: generic button text
first, then the markup of well-known CMP vendors, then generic class names.
The first selector that resolves to an element is clicked.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence, Tuple

from playwright.async_api import Page

logger = logging.getLogger(__name__)


DEFAULT_CLICK_TIMEOUT_MS = 5000


class ConsentAction(str, Enum):
    """Consent banner action to perform."""
    ACCEPT = "accept"
    REJECT = "reject"


ACCEPT_SELECTORS: Tuple[str, ...] = (
    # Generic button text
    'button:has-text("Accept")',
    'button:has-text("Accept All")',
    'button:has-text("Accept all")',
    'button:has-text("Agree")',
    'button:has-text("I agree")',
    'button:has-text("OK")',
    'a:has-text("Accept")',
    '[role="button"]:has-text("Accept")',
    # OneTrust
    '#onetrust-accept-btn-handler',
    '.onetrust-close-btn-handler',
    # Cookie Consent (Osano open source)
    '.cc-accept',
    '.cc-allow',
    # Cookiebot
    '#CybotCookiebotDialogBodyLevelButtonLevelOptinAllowAll',
    # Osano
    '.osano-cm-accept-all',
    '.osano-cm-button--type_accept',
    'button[data-osano="accept"]',
    # Termly
    '#accept-all-button',
    '.t-accept-all-button',
    '.t-preference-button[data-action="accept"]',
    # TrustArc
    '#truste-consent-button',
    '.trustarc-accept-btn',
    '.truste-button1',
    # GDPR Cookie Consent
    '.gdpr-cookie-accept',
    # Generic class names
    '.cookie-accept',
    '.accept-cookies',
    '.consent-accept',
)

REJECT_SELECTORS: Tuple[str, ...] = (
    # Generic button text
    'button:has-text("Reject")',
    'button:has-text("Reject All")',
    'button:has-text("Decline")',
    'button:has-text("No thanks")',
    'a:has-text("Reject")',
    # OneTrust
    '#onetrust-reject-all-handler',
    '.onetrust-reject-all',
    # Cookiebot
    '#CybotCookiebotDialogBodyButtonDecline',
    # Osano
    '.osano-cm-deny-all',
    '.osano-cm-button--type_deny',
    'button[data-osano="deny"]',
    # Termly
    '#reject-all-button',
    '.t-reject-all-button',
    '.t-preference-button[data-action="reject"]',
    # TrustArc
    '#truste-consent-required',
    '.trustarc-reject-btn',
    '.truste-button2',
    # Generic class names
    '.cookie-reject',
    '.reject-cookies',
    '.consent-reject',
)

# (tokens, vendor) pairs; the first pair with a token inside the selector wins
VENDOR_TOKENS: Tuple[Tuple[Tuple[str, ...], str], ...] = (
    (('onetrust',), 'OneTrust'),
    (('Cookiebot', 'Cybot'), 'Cookiebot'),
    (('osano',), 'Osano'),
    (('termly', '.t-', '#accept-all-button', '#reject-all-button'), 'Termly'),
    (('truste', 'trustarc'), 'TrustArc'),
    (('cc-',), 'Cookie Consent'),
)


@dataclass(frozen=True)
class ConsentClickResult:
    """Outcome of a consent click attempt."""
    found: bool = False
    vendor: Optional[str] = None
    selector: Optional[str] = None


def selectors_for(action: ConsentAction) -> Tuple[str, ...]:
    """Return the ordered selector list for an action."""
    if action == ConsentAction.ACCEPT:
        return ACCEPT_SELECTORS
    return REJECT_SELECTORS


def infer_vendor(selector: str) -> Optional[str]:
    """Infer the CMP vendor from the selector that matched.

    Generic text and class selectors carry no vendor token and yield None.
    """
    for tokens, vendor in VENDOR_TOKENS:
        if any(token in selector for token in tokens):
            return vendor
    return None


async def find_and_click_consent(
    page: Page,
    action: ConsentAction,
    selectors: Optional[Sequence[str]] = None,
    click_timeout_ms: int = DEFAULT_CLICK_TIMEOUT_MS
) -> ConsentClickResult:
    """Click the first consent control that resolves on the page.

    Args:
        page: Loaded Playwright page
        action: Whether to accept or reject
        selectors: Override for the ordered selector list
        click_timeout_ms: Timeout for a single click

    Returns:
        ConsentClickResult; ``found`` is False when no selector resolved or
        every resolved element failed to click
    """
    candidates = selectors if selectors is not None else selectors_for(action)

    for selector in candidates:
        try:
            element = await page.query_selector(selector)
            if not element:
                continue

            await element.click(timeout=click_timeout_ms)
            vendor = infer_vendor(selector)
            logger.info(f"Clicked {action.value} control: {selector} (vendor: {vendor or 'unknown'})")
            return ConsentClickResult(found=True, vendor=vendor, selector=selector)

        except Exception as e:
            logger.debug(f"Consent selector {selector} failed: {e}")
            continue

    logger.info(f"No {action.value} control found")
    return ConsentClickResult()
