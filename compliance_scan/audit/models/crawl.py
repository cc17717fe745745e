"""Pydantic models for crawl configuration and output data structures.

This module defines the data models used by the crawling system: the
configuration handed in by the CLI, the frontier items flowing through the
queue, and the page inventory and error records produced by a crawl.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..utils.url_normalizer import URLNormalizationError, canonicalize


SUPPORTED_FRAMEWORKS = ("gdpr", "ccpa", "eprivacy")


class CrawlConfig(BaseModel):
    """Configuration for a crawling session.

    Built from command-line input (or a YAML file) and passed to the crawler.
    Only ``url``, ``max_depth``, ``max_pages``, ``headless`` and ``delay`` drive
    the crawl itself; ``output_dir`` and ``frameworks`` are carried through for
    the reporting collaborators.
    """

    url: str = Field(
        description="Start URL; its hostname bounds the crawl"
    )

    max_depth: int = Field(
        default=3,
        ge=0,
        le=50,
        description="Maximum link depth from the start URL"
    )

    max_pages: int = Field(
        default=100,
        ge=1,
        le=100000,
        description="Maximum number of pages to collect"
    )

    headless: bool = Field(
        default=True,
        description="Run the browser without a visible window"
    )

    delay: int = Field(
        default=1000,
        ge=0,
        le=60000,
        description="Politeness delay between page fetches in milliseconds"
    )

    navigation_timeout_ms: int = Field(
        default=30000,
        ge=1000,
        le=300000,
        description="Per-page navigation timeout in milliseconds"
    )

    output_dir: str = Field(
        default="./reports",
        description="Directory where results are written"
    )

    frameworks: List[str] = Field(
        default_factory=lambda: list(SUPPORTED_FRAMEWORKS),
        description="Compliance frameworks to evaluate (gdpr, ccpa, eprivacy)"
    )

    @field_validator('url')
    @classmethod
    def validate_url(cls, v):
        """Require an absolute http(s) URL that canonicalizes cleanly."""
        v = v.strip()
        try:
            canonicalize(v)
        except URLNormalizationError as e:
            raise ValueError(f"Invalid start URL '{v}': {e}")
        return v

    @field_validator('frameworks')
    @classmethod
    def validate_frameworks(cls, v):
        """Normalize framework names and reject unknown ones."""
        normalized = [name.strip().lower() for name in v if name.strip()]
        unknown = [name for name in normalized if name not in SUPPORTED_FRAMEWORKS]
        if unknown:
            raise ValueError(
                f"Unknown frameworks: {', '.join(unknown)} "
                f"(supported: {', '.join(SUPPORTED_FRAMEWORKS)})"
            )
        return normalized


class FrontierItem(BaseModel):
    """A discovered URL waiting in the frontier.

    Created on discovery and consumed once dequeued; never mutated.
    """

    model_config = ConfigDict(frozen=True)

    url: str = Field(description="Canonical URL to visit")
    depth: int = Field(default=0, ge=0, description="Link depth from the start URL")
    parent_url: Optional[str] = Field(
        default=None,
        description="Page on which this URL was discovered (None for the start URL)"
    )


class PageInfo(BaseModel):
    """A successfully fetched page."""

    model_config = ConfigDict(frozen=True)

    url: str
    depth: int = Field(ge=0)
    title: str = ""
    status_code: int
    timestamp: datetime = Field(default_factory=datetime.utcnow)


class CrawlError(BaseModel):
    """A page that could not be crawled."""

    url: str
    error: str
    timestamp: datetime = Field(default_factory=datetime.utcnow)


class CrawlResult(BaseModel):
    """Page inventory and errors from one crawl."""

    pages: List[PageInfo] = Field(default_factory=list)
    total_pages: int = 0
    errors: List[CrawlError] = Field(default_factory=list)
