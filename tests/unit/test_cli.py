"""Unit tests for the scan command and the audit runner."""

import json
import pytest
import sys
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from typer.testing import CliRunner

from compliance_scan import __version__
from compliance_scan.audit.capture.consent_session import CaptureError
from compliance_scan.audit.cookies.models import CookieAnalysis, CookieCategory, RiskLevel
from compliance_scan.audit.crawler import CrawlerError
from compliance_scan.audit.models.capture import (
    AggregatedScanResults,
    CapturePhaseResult,
    ConsentTestResult,
    Cookie,
)
from compliance_scan.audit.models.crawl import CrawlConfig, CrawlError, CrawlResult, PageInfo
from compliance_scan.cli.main import app
from compliance_scan.cli.runner import AuditRunner, AuditSummary, ExitCode, ScanOptions


cli_runner = CliRunner()


def make_summary(**overrides):
    data = {"url": "https://example.com", "pages_crawled": 3, "crawl_errors": 1}
    data.update(overrides)
    return AuditSummary(**data)


def analysis(name, level):
    cookie = Cookie(name=name, domain="example.com", found_on_url="https://example.com/")
    return CookieAnalysis(
        cookie=cookie,
        actual_vendor="First Party",
        is_actually_third_party=False,
        risk_level=level,
        purpose="Unknown",
        category=CookieCategory.UNKNOWN,
    )


class TestScanCommand:
    """Test cases for the scan command."""

    def test_version(self):
        result = cli_runner.invoke(app, ["version"])

        assert result.exit_code == 0
        assert __version__ in result.stdout

    def test_scan_passes_options(self, tmp_path):
        with patch("compliance_scan.cli.main.AuditRunner") as runner_cls:
            runner_cls.return_value.run = AsyncMock(return_value=make_summary())

            result = cli_runner.invoke(app, [
                "scan", "https://example.com",
                "--depth", "2", "--max-pages", "10", "--delay", "0",
                "--out", str(tmp_path), "--frameworks", "gdpr,ccpa",
                "--headful", "--skip-consent",
            ])

        assert result.exit_code == ExitCode.SUCCESS
        config = runner_cls.call_args[0][0]
        assert config.url == "https://example.com"
        assert config.max_depth == 2
        assert config.max_pages == 10
        assert config.delay == 0
        assert config.headless is False
        assert config.output_dir == str(tmp_path)
        assert config.frameworks == ["gdpr", "ccpa"]

        options = runner_cls.call_args.kwargs["options"]
        assert options == ScanOptions(run_scan=True, run_consent=False)
        assert "Crawled 3 pages (1 errors)" in result.stdout
        assert "Consent banner" not in result.stdout

    def test_scan_defaults(self):
        with patch("compliance_scan.cli.main.AuditRunner") as runner_cls:
            runner_cls.return_value.run = AsyncMock(
                return_value=make_summary(consent_mechanism_found=True, consent_vendor="OneTrust")
            )

            result = cli_runner.invoke(app, ["scan", "https://example.com"])

        assert result.exit_code == ExitCode.SUCCESS
        config = runner_cls.call_args[0][0]
        assert config.max_depth == 3
        assert config.max_pages == 100
        assert config.headless is True
        assert "Consent banner: found (OneTrust)" in result.stdout

    def test_json_summary(self):
        with patch("compliance_scan.cli.main.AuditRunner") as runner_cls:
            runner_cls.return_value.run = AsyncMock(return_value=make_summary(total_cookies=12))

            result = cli_runner.invoke(app, ["scan", "https://example.com", "--json"])

        assert result.exit_code == ExitCode.SUCCESS
        payload = json.loads(result.stdout)
        assert payload["pages_crawled"] == 3
        assert payload["total_cookies"] == 12

    def test_invalid_url_is_config_error(self):
        with patch("compliance_scan.cli.main.AuditRunner") as runner_cls:
            result = cli_runner.invoke(app, ["scan", "not-a-url"])

        assert result.exit_code == ExitCode.CONFIG_ERROR
        runner_cls.assert_not_called()

    def test_malformed_port_is_config_error(self):
        with patch("compliance_scan.cli.main.AuditRunner") as runner_cls:
            result = cli_runner.invoke(app, ["scan", "http://example.com:abc/"])

        assert result.exit_code == ExitCode.CONFIG_ERROR
        runner_cls.assert_not_called()

    def test_unknown_framework_is_config_error(self):
        result = cli_runner.invoke(app, ["scan", "https://example.com", "--frameworks", "hipaa"])

        assert result.exit_code == ExitCode.CONFIG_ERROR

    def test_missing_config_file_is_config_error(self, tmp_path):
        result = cli_runner.invoke(app, [
            "scan", "https://example.com", "--config", str(tmp_path / "missing.yaml"),
        ])

        assert result.exit_code == ExitCode.CONFIG_ERROR

    @pytest.mark.parametrize("error", [
        CrawlerError("Crawl of https://example.com aborted: no browser"),
        CaptureError("Consent capture failed"),
    ])
    def test_fatal_error_is_runtime_error(self, error):
        with patch("compliance_scan.cli.main.AuditRunner") as runner_cls:
            runner_cls.return_value.run = AsyncMock(side_effect=error)

            result = cli_runner.invoke(app, ["scan", "https://example.com"])

        assert result.exit_code == ExitCode.RUNTIME_ERROR


class TestAuditRunner:
    """Test cases for AuditRunner."""

    def _runner(self, tmp_path, pages, options=None):
        config = CrawlConfig(url="https://example.com", output_dir=str(tmp_path / "out"))

        crawler = MagicMock()
        crawler.crawl = AsyncMock(return_value=pages)
        crawler.get_result = MagicMock(return_value=CrawlResult(
            pages=pages,
            total_pages=len(pages),
            errors=[CrawlError(url="https://example.com/missing", error="HTTP 404")],
        ))

        scanner = MagicMock()
        scanner.scan_pages = AsyncMock(return_value=AggregatedScanResults(
            total_cookies=3,
            unique_cookies=[
                Cookie(name="a", found_on_url="https://example.com/"),
                Cookie(name="b", found_on_url="https://example.com/"),
            ],
            cookie_analysis=[
                analysis("a", RiskLevel.CRITICAL),
                analysis("b", RiskLevel.HIGH),
                analysis("c", RiskLevel.MEDIUM),
            ],
        ))

        tester = MagicMock()
        tester.test_consent = AsyncMock(return_value=ConsentTestResult(
            url="https://example.com",
            before_consent=CapturePhaseResult(),
            after_accept_all=CapturePhaseResult(),
            after_reject_all=CapturePhaseResult(),
            consent_mechanism_found=True,
            consent_vendor="Cookiebot",
        ))

        runner = AuditRunner(
            config, options=options, crawler=crawler, scanner=scanner, consent_tester=tester
        )
        return runner, crawler, scanner, tester

    @pytest.mark.asyncio
    async def test_runs_all_stages_and_writes_json(self, tmp_path):
        pages = [PageInfo(url="https://example.com/", depth=0, status_code=200)]
        runner, _, scanner, tester = self._runner(tmp_path, pages)

        summary = await runner.run()

        scanner.scan_pages.assert_awaited_once_with(pages)
        tester.test_consent.assert_awaited_once_with("https://example.com")

        assert summary.pages_crawled == 1
        assert summary.crawl_errors == 1
        assert summary.total_cookies == 3
        assert summary.unique_cookies == 2
        assert summary.high_risk_cookies == 2
        assert summary.consent_mechanism_found is True
        assert summary.consent_vendor == "Cookiebot"
        assert summary.finished_at is not None

        out = tmp_path / "out"
        assert set(summary.output_files) == {"pages", "scan", "consent"}
        pages_json = json.loads((out / "pages.json").read_text())
        assert pages_json["total_pages"] == 1
        assert pages_json["errors"][0]["error"] == "HTTP 404"
        scan_json = json.loads((out / "scan.json").read_text())
        assert scan_json["cookie_analysis"][0]["risk_level"] == "critical"
        consent_json = json.loads((out / "consent.json").read_text())
        assert consent_json["consent_vendor"] == "Cookiebot"

    @pytest.mark.asyncio
    async def test_scan_skipped_without_pages(self, tmp_path):
        runner, _, scanner, _ = self._runner(tmp_path, [])

        summary = await runner.run()

        scanner.scan_pages.assert_not_called()
        assert "scan" not in summary.output_files
        assert "consent" in summary.output_files

    @pytest.mark.asyncio
    async def test_stage_options(self, tmp_path):
        pages = [PageInfo(url="https://example.com/", depth=0, status_code=200)]
        runner, _, scanner, tester = self._runner(
            tmp_path, pages, options=ScanOptions(run_scan=False, run_consent=False)
        )

        summary = await runner.run()

        scanner.scan_pages.assert_not_called()
        tester.test_consent.assert_not_called()
        assert summary.consent_mechanism_found is None
        assert set(summary.output_files) == {"pages"}

    @pytest.mark.asyncio
    async def test_crawl_failure_propagates(self, tmp_path):
        runner, crawler, scanner, _ = self._runner(tmp_path, [])
        crawler.crawl = AsyncMock(side_effect=CrawlerError("no browser"))

        with pytest.raises(CrawlerError):
            await runner.run()

        scanner.scan_pages.assert_not_called()
