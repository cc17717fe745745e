"""Cookie classification and risk scoring.

Resolves the vendor behind each captured cookie, corrects third-party status
for tracking cookies that were captured as first-party, scores privacy risk
and flags identity-syncing and removable cookies. Batch analysis additionally
flags vendors that set an excessive number of cookies.
"""

import logging
import math
import time
from collections import Counter
from typing import Dict, List, Optional, Tuple

from ..models.capture import Cookie, SameSite
from .models import CookieAnalysis, CookieCategory, RiskLevel, VendorInfo
from .vendors import (
    SYNCING_DOMAINS,
    SYNCING_NAME_PATTERNS,
    UNNECESSARY_NAME_PREFIXES,
    find_domain_fallback,
    find_vendor_rule,
)

logger = logging.getLogger(__name__)


SECONDS_PER_DAY = 24 * 60 * 60
EXCESSIVE_VENDOR_THRESHOLD = 5
EXCESSIVE_COOKIES_REASON = "Excessive cookies from vendor"

# Score and reason contributed by each category; every category must be listed
CATEGORY_RISK: Dict[CookieCategory, Tuple[int, Optional[str]]] = {
    CookieCategory.ADVERTISING: (3, "Advertising/tracking cookie"),
    CookieCategory.ANALYTICS: (2, "Analytics tracking"),
    CookieCategory.SOCIAL: (2, "Social media tracking"),
    CookieCategory.FUNCTIONAL: (0, None),
    CookieCategory.NECESSARY: (0, None),
    CookieCategory.UNKNOWN: (0, None),
}


class CookieAnalyzer:
    """Vendor attribution and risk scoring for captured cookies."""

    def __init__(self, excessive_threshold: int = EXCESSIVE_VENDOR_THRESHOLD):
        """Initialize the analyzer.

        Args:
            excessive_threshold: Vendors with more cookies than this in one
                batch get their non-necessary cookies flagged as unnecessary
        """
        self.excessive_threshold = excessive_threshold

    def detect_vendor(self, cookie: Cookie) -> VendorInfo:
        """Resolve the vendor behind a cookie.

        Known name/domain patterns are checked first, then coarse company
        keywords in the domain. Anything else is attributed to its domain when
        third-party, or to "First Party".
        """
        rule = find_vendor_rule(cookie.name, cookie.domain)
        if rule is not None:
            return rule.info

        fallback = find_domain_fallback(cookie.domain)
        if fallback is not None:
            return fallback

        return VendorInfo(
            vendor=cookie.domain.lower() if cookie.is_third_party else "First Party",
            is_third_party=cookie.is_third_party,
            purpose="Unknown",
            category=CookieCategory.UNKNOWN,
        )

    def calculate_risk(
        self,
        cookie: Cookie,
        vendor_info: VendorInfo,
        now: Optional[float] = None
    ) -> Tuple[RiskLevel, List[str]]:
        """Score a cookie's privacy risk.

        Args:
            cookie: Captured cookie
            vendor_info: Resolved vendor attribution
            now: Reference Unix time for the expiry check (defaults to now)

        Returns:
            Tuple of (risk level, reasons in scoring order)
        """
        score = 0
        reasons: List[str] = []

        if vendor_info.is_third_party:
            score += 3
            reasons.append("Third-party tracking service")

        category_score, category_reason = CATEGORY_RISK[vendor_info.category]
        score += category_score
        if category_reason:
            reasons.append(category_reason)

        if vendor_info.is_third_party and not cookie.secure:
            score += 2
            reasons.append("Not marked as Secure")
        if vendor_info.is_third_party and not cookie.http_only:
            score += 1
            reasons.append("Accessible via JavaScript")

        # Unset SameSite is treated like None
        if cookie.same_site is None or cookie.same_site == SameSite.NONE:
            score += 2
            reasons.append("Can be sent in cross-site requests")

        if cookie.expires:
            reference = time.time() if now is None else now
            days_until_expiry = (cookie.expires - reference) / SECONDS_PER_DAY
            if days_until_expiry > 365:
                score += 1
                years = math.floor(days_until_expiry / 365 + 0.5)
                reasons.append(f"Long expiration ({years} years)")

        return RiskLevel.from_score(score), reasons

    def is_cookie_syncing(self, cookie: Cookie) -> bool:
        """Check for identity-syncing cookie names or ad-tech syncing domains."""
        name = cookie.name.lower()
        domain = cookie.domain.lower()

        if any(pattern in name for pattern in SYNCING_NAME_PATTERNS):
            return True
        return any(sync_domain in domain for sync_domain in SYNCING_DOMAINS)

    def is_unnecessary(self, cookie: Cookie) -> bool:
        """Check for conversion-linker or legacy analytics cookies."""
        return cookie.name.lower().startswith(UNNECESSARY_NAME_PREFIXES)

    def analyze_cookie(self, cookie: Cookie, now: Optional[float] = None) -> CookieAnalysis:
        """Analyze a single cookie.

        Args:
            cookie: Captured cookie
            now: Reference Unix time for the expiry check

        Returns:
            CookieAnalysis for the cookie
        """
        vendor_info = self.detect_vendor(cookie)
        risk_level, reasons = self.calculate_risk(cookie, vendor_info, now)

        return CookieAnalysis(
            cookie=cookie,
            actual_vendor=vendor_info.vendor,
            is_actually_third_party=vendor_info.is_third_party or cookie.is_third_party,
            risk_level=risk_level,
            risk_reasons=reasons,
            purpose=vendor_info.purpose,
            category=vendor_info.category,
            is_cookie_syncing=self.is_cookie_syncing(cookie),
            is_unnecessary=self.is_unnecessary(cookie),
        )

    def analyze_cookies(self, cookies: List[Cookie], now: Optional[float] = None) -> List[CookieAnalysis]:
        """Analyze a batch of cookies and flag excessive vendors.

        Args:
            cookies: Cookies to analyze
            now: Reference Unix time for the expiry check

        Returns:
            One CookieAnalysis per cookie, in input order
        """
        analyses = [self.analyze_cookie(cookie, now) for cookie in cookies]

        vendor_counts = Counter(analysis.actual_vendor for analysis in analyses)
        excessive = {
            vendor for vendor, count in vendor_counts.items()
            if count > self.excessive_threshold
        }

        for analysis in analyses:
            if analysis.actual_vendor not in excessive:
                continue
            if analysis.category == CookieCategory.NECESSARY:
                continue
            analysis.is_unnecessary = True
            if EXCESSIVE_COOKIES_REASON not in analysis.risk_reasons:
                analysis.risk_reasons.append(EXCESSIVE_COOKIES_REASON)

        if excessive:
            logger.info(f"Vendors with excessive cookies: {', '.join(sorted(excessive))}")

        return analyses

    def summarize(self, analyses: List[CookieAnalysis]) -> Dict[str, Dict[str, int]]:
        """Count analyses by risk level and by category."""
        by_risk = Counter(analysis.risk_level.value for analysis in analyses)
        by_category = Counter(analysis.category.value for analysis in analyses)
        return {
            "risk_levels": {level.value: by_risk.get(level.value, 0) for level in RiskLevel},
            "categories": {category.value: by_category.get(category.value, 0) for category in CookieCategory},
        }
