"""Known cookie vendors and tracking patterns.

Vendor rules are evaluated in declaration order and the first match wins, so
specific patterns must precede broader ones (``_fbp`` before the
``facebook.com`` domain rule, for instance).
"""

from enum import Enum
from typing import NamedTuple, Optional, Tuple

from .models import CookieCategory, VendorInfo


class MatchMode(str, Enum):
    """How a vendor rule pattern is compared with a cookie."""
    # Pattern is a substring of the lowercased cookie name or domain
    CONTAINS = "contains"
    # Pattern equals the lowercased cookie name
    EXACT_NAME = "exact_name"


class VendorRule(NamedTuple):
    """A vendor pattern and the attribution it implies."""
    pattern: str
    info: VendorInfo
    match: MatchMode = MatchMode.CONTAINS

    def matches(self, name: str, domain: str) -> bool:
        """Check a lowercased cookie name and domain against the rule."""
        if self.match == MatchMode.EXACT_NAME:
            return name == self.pattern
        return self.pattern in name or self.pattern in domain


def _vendor(vendor: str, purpose: str, category: CookieCategory, third_party: bool = True) -> VendorInfo:
    return VendorInfo(vendor=vendor, is_third_party=third_party, purpose=purpose, category=category)


_GA = _vendor('Google Analytics', 'Analytics tracking', CookieCategory.ANALYTICS)
_GA_LEGACY = _vendor('Google Analytics (Legacy)', 'Analytics tracking', CookieCategory.ANALYTICS)
_CLARITY = _vendor('Microsoft Clarity', 'Session recording', CookieCategory.ANALYTICS)
_DOUBLECLICK = _vendor('Google DoubleClick', 'Ad targeting', CookieCategory.ADVERTISING)
_LINKEDIN = _vendor('LinkedIn', 'Social tracking', CookieCategory.SOCIAL)
_TIKTOK = _vendor('TikTok', 'Social tracking', CookieCategory.SOCIAL)
_PINTEREST = _vendor('Pinterest', 'Social tracking', CookieCategory.SOCIAL)
_HOTJAR = _vendor('Hotjar', 'Session recording', CookieCategory.ANALYTICS)
_HUBSPOT = _vendor('HubSpot', 'Visitor tracking', CookieCategory.ADVERTISING)


VENDOR_RULES: Tuple[VendorRule, ...] = (
    # Consent management
    VendorRule('cookieyes', _vendor('CookieYes', 'Consent management', CookieCategory.NECESSARY)),
    VendorRule('cookiebot', _vendor('Cookiebot', 'Consent management', CookieCategory.NECESSARY)),
    VendorRule('onetrust', _vendor('OneTrust', 'Consent management', CookieCategory.NECESSARY)),
    VendorRule('osano', _vendor('Osano', 'Consent management', CookieCategory.NECESSARY)),
    VendorRule('termly', _vendor('Termly', 'Consent management', CookieCategory.NECESSARY)),
    VendorRule('trustarc', _vendor('TrustArc', 'Consent management', CookieCategory.NECESSARY)),
    VendorRule('fs-consent', _vendor(
        'Consent Manager', 'Store consent preferences', CookieCategory.NECESSARY, third_party=False
    )),

    # Google analytics and ads
    VendorRule('__utm', _GA_LEGACY),
    VendorRule('_gcl_', _vendor('Google Ads', 'Conversion linking', CookieCategory.ADVERTISING)),
    VendorRule('_ga', _GA),
    VendorRule('_gid', _GA),
    VendorRule('_gat', _GA),
    VendorRule('_gtm', _vendor('Google Tag Manager', 'Tag management', CookieCategory.ANALYTICS)),
    VendorRule('ide', _DOUBLECLICK, MatchMode.EXACT_NAME),
    VendorRule('test_cookie', _vendor('Google DoubleClick', 'Ad testing', CookieCategory.ADVERTISING)),
    VendorRule('doubleclick.net', _DOUBLECLICK),

    # Microsoft
    VendorRule('_clck', _CLARITY),
    VendorRule('_clsk', _CLARITY),
    VendorRule('clid', _vendor('Microsoft Clarity', 'User identification', CookieCategory.ANALYTICS),
               MatchMode.EXACT_NAME),
    VendorRule('muid', _vendor('Microsoft Bing', 'User identification', CookieCategory.ANALYTICS),
               MatchMode.EXACT_NAME),
    VendorRule('anonchk', _vendor('Microsoft', 'Anonymous user check', CookieCategory.ANALYTICS)),

    # Analytics platforms
    VendorRule('_hj', _HOTJAR),
    VendorRule('hotjar', _HOTJAR),
    VendorRule('mixpanel', _vendor('Mixpanel', 'Product analytics', CookieCategory.ANALYTICS)),
    VendorRule('ajs_', _vendor('Segment', 'Customer data collection', CookieCategory.ANALYTICS)),

    # Facebook
    VendorRule('_fbp', _vendor('Facebook Pixel', 'Ad targeting', CookieCategory.ADVERTISING)),
    VendorRule('fr', _vendor('Facebook', 'Ad targeting', CookieCategory.ADVERTISING), MatchMode.EXACT_NAME),
    VendorRule('facebook.com', _vendor('Facebook', 'Ad targeting', CookieCategory.ADVERTISING)),

    # Social networks
    VendorRule('li_', _LINKEDIN),
    VendorRule('lidc', _LINKEDIN),
    VendorRule('bcookie', _vendor('LinkedIn', 'Browser identification', CookieCategory.SOCIAL)),
    VendorRule('bscookie', _vendor('LinkedIn', 'Browser identification', CookieCategory.SOCIAL)),
    VendorRule('linkedin.com', _LINKEDIN),
    VendorRule('twitter.com', _vendor('Twitter/X', 'Social tracking', CookieCategory.SOCIAL)),
    VendorRule('_ttp', _TIKTOK),
    VendorRule('tt_webid', _TIKTOK),
    VendorRule('tiktok.com', _TIKTOK),
    VendorRule('_pin', _PINTEREST),
    VendorRule('pinterest.com', _PINTEREST),

    # Advertising networks
    VendorRule('taboola', _vendor('Taboola', 'Content recommendation ads', CookieCategory.ADVERTISING)),
    VendorRule('criteo', _vendor('Criteo', 'Retargeting', CookieCategory.ADVERTISING)),
    VendorRule('demdex', _vendor('Adobe Audience Manager', 'Audience data sharing', CookieCategory.ADVERTISING)),
    VendorRule('snitcher', _vendor('Snitcher', 'B2B visitor tracking', CookieCategory.ADVERTISING)),

    # Marketing automation
    VendorRule('hubspotutk', _HUBSPOT),
    VendorRule('__hs', _HUBSPOT),
    VendorRule('_mkto', _vendor('Marketo', 'Lead tracking', CookieCategory.ADVERTISING)),
    VendorRule('_fuid', _vendor('Freshworks', 'User identification', CookieCategory.FUNCTIONAL)),
)


# (domain tokens, attribution) checked when no vendor rule matched
DOMAIN_FALLBACKS: Tuple[Tuple[Tuple[str, ...], VendorInfo], ...] = (
    (('google', 'doubleclick'),
     _vendor('Google', 'Analytics/Advertising', CookieCategory.ADVERTISING)),
    (('facebook', 'meta'),
     _vendor('Facebook/Meta', 'Social Media Tracking', CookieCategory.SOCIAL)),
    (('linkedin',),
     _vendor('LinkedIn', 'Social Media Tracking', CookieCategory.SOCIAL)),
    (('twitter', 'twimg'),
     _vendor('Twitter/X', 'Social Media Tracking', CookieCategory.SOCIAL)),
    (('clarity.ms', 'bing.com'),
     _vendor('Microsoft Clarity', 'Analytics/Session Recording', CookieCategory.ANALYTICS)),
)

SYNCING_NAME_PATTERNS: Tuple[str, ...] = ('sync', 'match', 'uuid')

# Ad-tech domains known for identity syncing
SYNCING_DOMAINS: Tuple[str, ...] = (
    'demdex.net', 'everesttech.net', 'adsrvr.org', 'mathtag.com',
    'rlcdn.com', 'bidswitch.net', 'adnxs.com', 'casalemedia.com',
    'pubmatic.com', 'rubiconproject.com', 'openx.net', 'bluekai.com',
    'krxd.net', 'agkn.com',
)

# Conversion-linker and legacy analytics cookies that can be removed
UNNECESSARY_NAME_PREFIXES: Tuple[str, ...] = ('_gcl_', '__utm')


def find_vendor_rule(name: str, domain: str) -> Optional[VendorRule]:
    """Return the first vendor rule matching a cookie, if any."""
    name = name.lower()
    domain = domain.lower()
    for rule in VENDOR_RULES:
        if rule.matches(name, domain):
            return rule
    return None


def find_domain_fallback(domain: str) -> Optional[VendorInfo]:
    """Return the coarse company attribution for a domain, if any."""
    domain = domain.lower()
    for tokens, info in DOMAIN_FALLBACKS:
        if any(token in domain for token in tokens):
            return info
    return None
