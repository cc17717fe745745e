"""Crawl frontier: FIFO to-visit queue plus the visited set.

The frontier owns discovery order and scope for one crawl. URLs are stored in
canonical form. A URL is only rejected as a duplicate once it has been marked
visited, so the same page may sit in the queue more than once and is fetched
once per queued copy.
"""

from collections import deque
from typing import Any, Deque, Dict, List, Optional, Set
import time
import logging

from ..models.crawl import FrontierItem
from ..utils.scope_matcher import ScopeDecision, ScopeMatcher
from ..utils.url_normalizer import canonicalize, URLNormalizationError


logger = logging.getLogger(__name__)


class FrontierStats:
    """Statistics tracking for frontier operations."""

    def __init__(self):
        self.enqueued_total = 0
        self.dequeued_total = 0
        self.rejected_visited = 0
        self.rejected_external = 0
        self.rejected_resource = 0
        self.rejected_invalid = 0
        self.queue_size_max = 0
        self.start_time = time.time()

    def export(self) -> Dict[str, Any]:
        """Export statistics as dictionary."""
        return {
            "enqueued_total": self.enqueued_total,
            "dequeued_total": self.dequeued_total,
            "rejected_visited": self.rejected_visited,
            "rejected_external": self.rejected_external,
            "rejected_resource": self.rejected_resource,
            "rejected_invalid": self.rejected_invalid,
            "queue_size_max": self.queue_size_max,
            "uptime_seconds": time.time() - self.start_time
        }


class Frontier:
    """FIFO URL frontier scoped to the start URL's exact hostname.

    Features:
    - Canonical URL storage (no fragment, no trailing slash, sorted query)
    - Exact-hostname scoping (subdomains rejected)
    - Static asset and feed/API/listing URL exclusion
    - Append-only visited set for the lifetime of one crawl
    """

    def __init__(self, start_url: str, scope_matcher: Optional[ScopeMatcher] = None):
        """Initialize the frontier and enqueue the start URL at depth 0.

        Args:
            start_url: Crawl start URL; defines the base hostname
            scope_matcher: Custom scope matcher (defaults to one built from start_url)
        """
        self._scope = scope_matcher or ScopeMatcher(start_url)
        self._queue: Deque[FrontierItem] = deque()
        self._visited: Set[str] = set()
        self._stats = FrontierStats()

        self.enqueue(FrontierItem(url=start_url, depth=0))

    @property
    def base_hostname(self) -> str:
        """Hostname every enqueued URL must have."""
        return self._scope.base_hostname

    def enqueue(self, item: FrontierItem) -> bool:
        """Add a URL to the queue if it is unvisited, same-host and a page.

        Args:
            item: Discovered URL with its depth and parent

        Returns:
            True if the item was queued, False if it was rejected
        """
        try:
            canonical = canonicalize(item.url)
        except URLNormalizationError:
            self._stats.rejected_invalid += 1
            logger.debug(f"Invalid URL: {item.url}")
            return False

        if canonical in self._visited:
            self._stats.rejected_visited += 1
            return False

        decision, _ = self._scope.check(canonical)
        if decision == ScopeDecision.DIFFERENT_HOST:
            self._stats.rejected_external += 1
            logger.debug(f"Skipping external URL: {canonical}")
            return False
        if decision == ScopeDecision.RESOURCE:
            self._stats.rejected_resource += 1
            return False
        if decision == ScopeDecision.INVALID_URL:
            self._stats.rejected_invalid += 1
            return False

        self._queue.append(item.model_copy(update={"url": canonical}))
        self._stats.enqueued_total += 1
        self._stats.queue_size_max = max(self._stats.queue_size_max, len(self._queue))

        logger.debug(f"Enqueued: {canonical} (depth: {item.depth})")
        return True

    def dequeue(self) -> Optional[FrontierItem]:
        """Pop the oldest queued item.

        Returns:
            Next FrontierItem or None if the queue is empty
        """
        if not self._queue:
            return None

        self._stats.dequeued_total += 1
        return self._queue.popleft()

    def mark_visited(self, url: str) -> None:
        """Record a URL as visited; repeated calls have no further effect."""
        try:
            self._visited.add(canonicalize(url))
        except URLNormalizationError:
            logger.debug(f"Not marking invalid URL as visited: {url}")

    def is_visited(self, url: str) -> bool:
        """Check whether the canonical form of a URL was visited."""
        try:
            return canonicalize(url) in self._visited
        except URLNormalizationError:
            return False

    def is_empty(self) -> bool:
        """Check if queue is empty."""
        return not self._queue

    def size(self) -> int:
        """Get current queue size."""
        return len(self._queue)

    def __len__(self) -> int:
        return len(self._queue)

    def visited_count(self) -> int:
        """Get number of visited URLs."""
        return len(self._visited)

    def get_visited(self) -> List[str]:
        """Get all visited URLs."""
        return list(self._visited)

    def get_stats(self) -> Dict[str, Any]:
        """Get frontier statistics."""
        stats = self._stats.export()
        stats.update({
            "current_size": self.size(),
            "visited_count": self.visited_count(),
            "base_hostname": self.base_hostname,
        })
        return stats
