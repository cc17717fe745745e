"""Pydantic models for captured tracking state.

Cookies, scripts and network requests observed on a page, grouped per
consent phase and aggregated across the pages of a scan.
"""

from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Any, List, Optional

from pydantic import BaseModel, Field, field_validator

if TYPE_CHECKING:
    from ..cookies.models import CookieAnalysis


class SameSite(str, Enum):
    """SameSite cookie attribute values as reported by the browser."""
    STRICT = "Strict"
    LAX = "Lax"
    NONE = "None"


class ScriptType(str, Enum):
    """Whether a script was loaded from a URL or embedded in the page."""
    INLINE = "inline"
    EXTERNAL = "external"


class ScriptCategory(str, Enum):
    """Coarse purpose of a script."""
    ANALYTICS = "analytics"
    ADVERTISING = "advertising"
    SOCIAL = "social"
    MARKETING = "marketing"
    FUNCTIONAL = "functional"
    UNKNOWN = "unknown"


class ConsentPhase(str, Enum):
    """The three consent conditions a page is captured under."""
    BEFORE = "before"
    ACCEPT = "accept"
    REJECT = "reject"


class Cookie(BaseModel):
    """A cookie present in a browser context after visiting a page.

    ``is_third_party`` is computed against the visited page's host at capture
    time and is not corrected afterwards.
    """

    name: str
    value: str = ""
    domain: str = ""
    path: str = "/"
    expires: Optional[float] = Field(
        default=None,
        description="Expiry as Unix timestamp in seconds (None for session cookies)"
    )
    http_only: bool = False
    secure: bool = False
    same_site: Optional[SameSite] = None
    is_third_party: bool = False
    found_on_url: str

    @field_validator('expires', mode='before')
    @classmethod
    def normalize_expires(cls, v: Any):
        """Playwright reports session cookies with expires == -1."""
        if v is None:
            return None
        try:
            value = float(v)
        except (TypeError, ValueError):
            return None
        return value if value > 0 else None

    @field_validator('same_site', mode='before')
    @classmethod
    def normalize_same_site(cls, v: Any):
        """Unknown or missing SameSite values degrade to unset."""
        if v is None or isinstance(v, SameSite):
            return v
        for member in SameSite:
            if str(v).strip().lower() == member.value.lower():
                return member
        return None


class Script(BaseModel):
    """A script element found on a page."""

    url: str
    type: ScriptType = ScriptType.EXTERNAL
    is_third_party: bool = False
    found_on_url: str
    content: Optional[str] = Field(
        default=None,
        description="Leading part of an inline script body"
    )
    category: Optional[ScriptCategory] = None


class NetworkRequest(BaseModel):
    """A network request issued while a page loaded."""

    url: str
    resource_type: str = "other"
    is_third_party: bool = False
    found_on_url: str


class CapturePhaseResult(BaseModel):
    """Tracking state observed in one isolated browser context."""

    cookies: List[Cookie] = Field(default_factory=list)
    scripts: List[Script] = Field(default_factory=list)
    requests: List[NetworkRequest] = Field(default_factory=list)


class ConsentTestResult(BaseModel):
    """Tracking state of one URL under each consent condition."""

    url: str
    before_consent: CapturePhaseResult
    after_accept_all: CapturePhaseResult
    after_reject_all: CapturePhaseResult
    consent_mechanism_found: bool = False
    consent_vendor: Optional[str] = None


class ScanResult(BaseModel):
    """Tracking state captured on a single crawled page."""

    url: str
    cookies: List[Cookie] = Field(default_factory=list)
    scripts: List[Script] = Field(default_factory=list)
    requests: List[NetworkRequest] = Field(default_factory=list)
    timestamp: datetime = Field(default_factory=datetime.utcnow)


class AggregatedScanResults(BaseModel):
    """Scan results across all crawled pages.

    Cookies are deduplicated by (name, domain) and scripts by URL; the first
    occurrence wins.
    """

    total_cookies: int = 0
    total_scripts: int = 0
    total_requests: int = 0
    unique_cookies: List[Cookie] = Field(default_factory=list)
    unique_scripts: List[Script] = Field(default_factory=list)
    third_party_cookies: List[Cookie] = Field(default_factory=list)
    third_party_scripts: List[Script] = Field(default_factory=list)
    scan_results: List[ScanResult] = Field(default_factory=list)
    cookie_analysis: List["CookieAnalysis"] = Field(default_factory=list)
