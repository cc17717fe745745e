"""Audit runner behind the ``scan`` command.

Runs the crawl, the per-page scan and the consent test in sequence and
writes each stage's output as JSON into the output directory:

- ``pages.json``: crawled pages and crawl errors
- ``scan.json``: aggregated cookies, scripts, requests and cookie analysis
- ``consent.json``: before/accept/reject capture of the start URL
"""

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import IntEnum
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import BaseModel

from ..audit.capture.consent_session import CaptureError, ConsentTester
from ..audit.capture.browser_factory import BrowserConfig
from ..audit.capture.scanner import CookieScanner
from ..audit.crawler import Crawler, CrawlerError
from ..audit.models.crawl import CrawlConfig

logger = logging.getLogger(__name__)


class ExitCode(IntEnum):
    """CLI exit codes."""
    SUCCESS = 0
    RUNTIME_ERROR = 1     # Browser launch or other fatal failure
    CONFIG_ERROR = 2      # Invalid options or config file


@dataclass
class ScanOptions:
    """Which stages of the audit to run."""
    run_scan: bool = True
    run_consent: bool = True


@dataclass
class AuditSummary:
    """Counts reported at the end of a run."""
    url: str
    pages_crawled: int = 0
    crawl_errors: int = 0
    total_cookies: int = 0
    unique_cookies: int = 0
    third_party_cookies: int = 0
    high_risk_cookies: int = 0
    consent_mechanism_found: Optional[bool] = None
    consent_vendor: Optional[str] = None
    output_files: Dict[str, str] = field(default_factory=dict)
    started_at: datetime = field(default_factory=datetime.utcnow)
    finished_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert summary to dictionary."""
        return {
            'url': self.url,
            'pages_crawled': self.pages_crawled,
            'crawl_errors': self.crawl_errors,
            'total_cookies': self.total_cookies,
            'unique_cookies': self.unique_cookies,
            'third_party_cookies': self.third_party_cookies,
            'high_risk_cookies': self.high_risk_cookies,
            'consent_mechanism_found': self.consent_mechanism_found,
            'consent_vendor': self.consent_vendor,
            'output_files': self.output_files,
            'started_at': self.started_at.isoformat(),
            'finished_at': self.finished_at.isoformat() if self.finished_at else None,
        }


def write_json(path: Path, payload: Any) -> None:
    """Write a pydantic model or plain data as indented JSON."""
    if isinstance(payload, BaseModel):
        payload = payload.model_dump(mode="json")
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w') as f:
        json.dump(payload, f, indent=2, default=str)


class AuditRunner:
    """Runs crawl, scan and consent test for one site."""

    def __init__(
        self,
        config: CrawlConfig,
        options: Optional[ScanOptions] = None,
        crawler: Optional[Crawler] = None,
        scanner: Optional[CookieScanner] = None,
        consent_tester: Optional[ConsentTester] = None
    ):
        """Initialize the runner.

        Args:
            config: Crawl configuration
            options: Stages to run
            crawler: Crawler override (mainly for testing)
            scanner: Page scanner override
            consent_tester: Consent tester override
        """
        self.config = config
        self.options = options or ScanOptions()
        self.output_dir = Path(config.output_dir)

        browser_config = BrowserConfig(headless=config.headless)
        self.crawler = crawler or Crawler(config)
        self.scanner = scanner or CookieScanner(
            browser_config=browser_config,
            navigation_timeout_ms=config.navigation_timeout_ms,
        )
        self.consent_tester = consent_tester or ConsentTester(browser_config=browser_config)

    async def run(self) -> AuditSummary:
        """Run the enabled stages.

        Returns:
            AuditSummary of the run

        Raises:
            CrawlerError: If the crawl cannot start
            CaptureError: If the scan or consent test cannot start
        """
        summary = AuditSummary(url=self.config.url)

        pages = await self.crawler.crawl()
        crawl_result = self.crawler.get_result()
        summary.pages_crawled = crawl_result.total_pages
        summary.crawl_errors = len(crawl_result.errors)
        summary.output_files['pages'] = self._write('pages.json', crawl_result)

        if self.options.run_scan and pages:
            aggregated = await self.scanner.scan_pages(pages)
            summary.total_cookies = aggregated.total_cookies
            summary.unique_cookies = len(aggregated.unique_cookies)
            summary.third_party_cookies = len(aggregated.third_party_cookies)
            summary.high_risk_cookies = sum(
                1 for analysis in aggregated.cookie_analysis
                if analysis.risk_level.rank >= 2
            )
            summary.output_files['scan'] = self._write('scan.json', aggregated)
        elif self.options.run_scan:
            logger.warning("No pages crawled, skipping page scan")

        if self.options.run_consent:
            consent = await self.consent_tester.test_consent(self.config.url)
            summary.consent_mechanism_found = consent.consent_mechanism_found
            summary.consent_vendor = consent.consent_vendor
            summary.output_files['consent'] = self._write('consent.json', consent)

        summary.finished_at = datetime.utcnow()
        return summary

    def _write(self, filename: str, payload: Any) -> str:
        path = self.output_dir / filename
        write_json(path, payload)
        logger.info(f"Wrote {path}")
        return str(path)


FATAL_ERRORS = (CrawlerError, CaptureError)
