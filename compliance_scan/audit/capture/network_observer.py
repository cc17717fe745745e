"""Network request observer feeding a bounded queue.

This module provides the NetworkObserver class that hooks into the Playwright
``request`` event and records every request issued while a page loads. The
event callback only enqueues; the capture session drains the queue once the
page has settled.
"""

import asyncio
import logging
from typing import List

from playwright.async_api import Page, Request

from ..models.capture import NetworkRequest
from ..utils.url_normalizer import is_third_party

logger = logging.getLogger(__name__)


DEFAULT_MAX_REQUESTS = 5000


class NetworkObserver:
    """Observes page requests and buffers them as NetworkRequest records."""

    def __init__(
        self,
        page: Page,
        page_url: str,
        max_requests: int = DEFAULT_MAX_REQUESTS
    ):
        """Initialize network observer for a page.

        Args:
            page: Playwright page to observe
            page_url: URL the page is being navigated to; recorded as
                found_on_url and used as the first-party reference
            max_requests: Queue capacity; requests beyond it are dropped
        """
        self.page = page
        self.page_url = page_url
        self.max_requests = max_requests
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=max_requests)
        self._dropped = 0
        self._attached = False

        self._setup_listeners()

    def _setup_listeners(self) -> None:
        """Setup Playwright event listener for outgoing requests."""
        self.page.on("request", self._on_request)
        self._attached = True
        logger.debug(f"Network observer attached for {self.page_url}")

    def _on_request(self, request: Request) -> None:
        """Handle the request event."""
        try:
            record = NetworkRequest(
                url=request.url,
                resource_type=request.resource_type or "other",
                is_third_party=is_third_party(request.url, self.page_url),
                found_on_url=self.page_url,
            )
        except Exception as e:
            logger.warning(f"Failed to record request: {e}")
            return

        try:
            self._queue.put_nowait(record)
        except asyncio.QueueFull:
            self._dropped += 1
            if self._dropped == 1:
                logger.warning(
                    f"Request buffer full ({self.max_requests}) on {self.page_url}, "
                    f"dropping further requests"
                )

    def drain(self) -> List[NetworkRequest]:
        """Remove and return every buffered request in arrival order."""
        requests = []
        while True:
            try:
                requests.append(self._queue.get_nowait())
            except asyncio.QueueEmpty:
                break

        if self._dropped:
            logger.info(f"Dropped {self._dropped} requests on {self.page_url}")

        return requests

    def detach(self) -> None:
        """Stop listening for requests."""
        if not self._attached:
            return
        try:
            self.page.remove_listener("request", self._on_request)
        except Exception as e:
            logger.debug(f"Error removing request listener: {e}")
        self._attached = False

    @property
    def pending_count(self) -> int:
        """Number of requests waiting to be drained."""
        return self._queue.qsize()

    @property
    def dropped_count(self) -> int:
        """Number of requests dropped because the buffer was full."""
        return self._dropped

    def get_stats(self) -> dict:
        """Get observer statistics."""
        return {
            "page_url": self.page_url,
            "pending": self.pending_count,
            "dropped": self.dropped_count,
            "max_requests": self.max_requests,
        }
