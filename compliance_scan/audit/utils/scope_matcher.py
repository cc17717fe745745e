"""Scope matching for single-host crawls.

A URL is in scope when its host equals the crawl's base host exactly and it
does not look like a static asset, feed, API or listing endpoint. Checks run
against canonical URLs produced by :func:`canonicalize`.
"""

from enum import Enum
from typing import Iterable, List, Optional, Tuple
from urllib.parse import urlparse

from .url_normalizer import canonicalize, URLNormalizationError


# Non-page file extensions, matched against the end of the URL path
RESOURCE_EXTENSIONS: Tuple[str, ...] = (
    '.jpg', '.jpeg', '.png', '.gif', '.svg', '.webp', '.ico',
    '.pdf', '.zip', '.tar', '.gz', '.mp4', '.mp3', '.avi',
    '.css', '.js', '.woff', '.woff2', '.ttf', '.eot',
    '.xml', '.txt', '.json', '.rss', '.feed',
)

# Substrings of feed, API, comment-action and listing URLs
NON_PAGE_PATTERNS: Tuple[str, ...] = (
    '/feed/', '/rss/', '/wp-json/', '/api/',
    '?replytocom=', '?share=', '?print=',
    '/tag/', '/author/', '/category/',
    '/page/', '/?p=', '/?page_id=',
)


class ScopeMatcherError(Exception):
    """Raised when scope matcher encounters an error."""
    pass


class ScopeDecision(str, Enum):
    """Outcome of a scope check."""
    IN_SCOPE = "in_scope"
    INVALID_URL = "invalid_url"
    DIFFERENT_HOST = "different_host"
    RESOURCE = "resource"


class ScopeMatcher:
    """Scope matcher restricting a crawl to one exact hostname.

    The matcher applies the following logic:
    1. The URL must canonicalize
    2. Its hostname must equal the base hostname (subdomains are out of scope)
    3. It must not match a resource extension or non-page pattern
    """

    def __init__(
        self,
        base_url: str,
        resource_extensions: Optional[Iterable[str]] = None,
        non_page_patterns: Optional[Iterable[str]] = None
    ):
        """Initialize the scope matcher.

        Args:
            base_url: Start URL of the crawl; its hostname bounds the scope
            resource_extensions: Override for the file-extension list
            non_page_patterns: Override for the non-page substring list

        Raises:
            ScopeMatcherError: If the base URL has no hostname
        """
        try:
            canonical = canonicalize(base_url)
        except URLNormalizationError as e:
            raise ScopeMatcherError(f"Invalid base URL '{base_url}': {e}")

        self._base_hostname = urlparse(canonical).hostname
        self._resource_extensions = tuple(
            ext.lower() for ext in (resource_extensions or RESOURCE_EXTENSIONS)
        )
        self._non_page_patterns = tuple(
            pattern.lower() for pattern in (non_page_patterns or NON_PAGE_PATTERNS)
        )

    @property
    def base_hostname(self) -> str:
        """Hostname every in-scope URL must have."""
        return self._base_hostname

    def check(self, url: str) -> Tuple[ScopeDecision, Optional[str]]:
        """Canonicalize a URL and decide whether it is in scope.

        Args:
            url: The URL to check

        Returns:
            Tuple of (decision, canonical_url); canonical_url is None for invalid URLs
        """
        try:
            canonical = canonicalize(url)
        except URLNormalizationError:
            return ScopeDecision.INVALID_URL, None

        if not self.is_same_host(canonical):
            return ScopeDecision.DIFFERENT_HOST, canonical

        if self.is_resource_url(canonical):
            return ScopeDecision.RESOURCE, canonical

        return ScopeDecision.IN_SCOPE, canonical

    def is_in_scope(self, url: str) -> bool:
        """Check if a URL is within the configured scope.

        Args:
            url: The URL to check

        Returns:
            True if the URL is in scope, False otherwise
        """
        decision, _ = self.check(url)
        return decision == ScopeDecision.IN_SCOPE

    def is_same_host(self, url: str) -> bool:
        """Exact hostname comparison against the base hostname."""
        try:
            return urlparse(url).hostname == self._base_hostname
        except ValueError:
            return False

    def is_resource_url(self, url: str) -> bool:
        """Check if URL points at a static asset or non-page endpoint.

        Args:
            url: Canonical URL to check

        Returns:
            True if the URL should not be crawled as a page
        """
        url_lower = url.lower()
        path = urlparse(url_lower).path

        if path.endswith(self._resource_extensions):
            return True

        # Canonical paths lose their trailing slash, so "/feed" must still match "/feed/"
        path_with_slash = path.rstrip('/') + '/'
        return any(
            pattern in url_lower or pattern in path_with_slash
            for pattern in self._non_page_patterns
        )

    def filter_urls(self, urls: List[str]) -> Tuple[List[str], List[str]]:
        """Filter a list of URLs into in-scope and out-of-scope lists.

        Args:
            urls: List of URLs to filter

        Returns:
            Tuple of (in_scope_urls, out_of_scope_urls)
        """
        in_scope = []
        out_of_scope = []

        for url in urls:
            if self.is_in_scope(url):
                in_scope.append(url)
            else:
                out_of_scope.append(url)

        return in_scope, out_of_scope

    def get_scope_info(self) -> dict:
        """Get information about the configured scope.

        Returns:
            Dictionary with scope configuration details
        """
        return {
            "base_hostname": self._base_hostname,
            "resource_extensions": len(self._resource_extensions),
            "non_page_patterns": list(self._non_page_patterns),
        }


def create_scope_matcher_from_config(config) -> ScopeMatcher:
    """Create a ScopeMatcher from a crawl configuration object.

    Args:
        config: CrawlConfig object with the start URL

    Returns:
        Configured ScopeMatcher instance
    """
    return ScopeMatcher(base_url=config.url)
