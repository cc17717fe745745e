"""Browser capture package.

Playwright-based capture of cookies, scripts and network requests, either
per crawled page or per consent phase for a single URL.
"""

from .browser_factory import (
    BrowserConfig,
    BrowserFactory,
    BrowserLaunchError,
    create_browser_factory,
)
from .cmp import (
    ACCEPT_SELECTORS,
    REJECT_SELECTORS,
    ConsentAction,
    ConsentClickResult,
    find_and_click_consent,
    infer_vendor,
)
from .consent_session import CaptureError, ConsentTester
from .cookie_collector import CookieCollector
from .network_observer import NetworkObserver
from .scanner import CookieScanner, aggregate_results
from .script_collector import ScriptCollector, categorize_script

__all__ = [
    # Browser management
    'BrowserConfig',
    'BrowserFactory',
    'BrowserLaunchError',
    'create_browser_factory',

    # Consent automation
    'ACCEPT_SELECTORS',
    'REJECT_SELECTORS',
    'ConsentAction',
    'ConsentClickResult',
    'find_and_click_consent',
    'infer_vendor',
    'CaptureError',
    'ConsentTester',

    # Collectors
    'CookieCollector',
    'NetworkObserver',
    'ScriptCollector',
    'categorize_script',

    # Page scanning
    'CookieScanner',
    'aggregate_results',
]
