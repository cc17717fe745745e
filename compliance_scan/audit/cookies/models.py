"""Data models for cookie classification.

Vendor attribution, category and risk assessment attached to a captured
:class:`Cookie`.
"""

from enum import Enum
from typing import List

from pydantic import BaseModel, ConfigDict, Field

from ..models.capture import AggregatedScanResults, Cookie


class CookieCategory(str, Enum):
    """Closed set of cookie purposes."""
    NECESSARY = "necessary"
    FUNCTIONAL = "functional"
    ANALYTICS = "analytics"
    ADVERTISING = "advertising"
    SOCIAL = "social"
    UNKNOWN = "unknown"


class RiskLevel(str, Enum):
    """Ordinal privacy risk level."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        """Position on the low-to-critical scale (0-3)."""
        return list(RiskLevel).index(self)

    @classmethod
    def from_score(cls, score: int) -> "RiskLevel":
        """Map an additive risk score onto a level."""
        if score >= 8:
            return cls.CRITICAL
        if score >= 6:
            return cls.HIGH
        if score >= 3:
            return cls.MEDIUM
        return cls.LOW


class VendorInfo(BaseModel):
    """Who sets a cookie and why."""

    model_config = ConfigDict(frozen=True)

    vendor: str
    is_third_party: bool
    purpose: str
    category: CookieCategory


class CookieAnalysis(BaseModel):
    """Classification result for one cookie.

    ``is_unnecessary`` and ``risk_reasons`` may be updated once more by batch
    analysis when the cookie's vendor sets an excessive number of cookies.
    """

    cookie: Cookie
    actual_vendor: str
    is_actually_third_party: bool
    risk_level: RiskLevel
    risk_reasons: List[str] = Field(default_factory=list)
    purpose: str
    category: CookieCategory
    is_cookie_syncing: bool = False
    is_unnecessary: bool = False


# Resolves the forward reference to CookieAnalysis
AggregatedScanResults.model_rebuild()
