"""Cookie classification.

Vendor attribution, categorization and privacy risk scoring for cookies
captured during crawls and consent tests.
"""

from .models import CookieAnalysis, CookieCategory, RiskLevel, VendorInfo
from .vendors import (
    VENDOR_RULES,
    DOMAIN_FALLBACKS,
    MatchMode,
    VendorRule,
    find_vendor_rule,
)
from .classification import CookieAnalyzer, CATEGORY_RISK, EXCESSIVE_COOKIES_REASON

__all__ = [
    # Models
    'CookieAnalysis',
    'CookieCategory',
    'RiskLevel',
    'VendorInfo',

    # Vendor rules
    'VENDOR_RULES',
    'DOMAIN_FALLBACKS',
    'MatchMode',
    'VendorRule',
    'find_vendor_rule',

    # Analysis
    'CookieAnalyzer',
    'CATEGORY_RISK',
    'EXCESSIVE_COOKIES_REASON',
]
