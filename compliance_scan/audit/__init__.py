"""Audit engine package for compliance-scan.

This package provides crawling, browser capture and cookie classification
for privacy compliance audits.
"""

from .crawler import Crawler, CrawlerError
from .models.crawl import (
    CrawlConfig,
    FrontierItem,
    PageInfo,
    CrawlError,
    CrawlResult,
)
from .queue.frontier_queue import Frontier
from .utils.url_normalizer import canonicalize, is_third_party
from .utils.scope_matcher import ScopeMatcher

__all__ = [
    # Main crawler
    'Crawler',
    'CrawlerError',

    # Models
    'CrawlConfig',
    'FrontierItem',
    'PageInfo',
    'CrawlError',
    'CrawlResult',

    # Frontier and utilities
    'Frontier',
    'canonicalize',
    'is_third_party',
    'ScopeMatcher',
]
