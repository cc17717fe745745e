#!/usr/bin/env python3
"""Main CLI entry point for compliance-scan using Typer."""

import asyncio
import json
import logging
from pathlib import Path
from typing import Optional

import typer
from typing_extensions import Annotated

from .. import __version__
from ..audit.config.loader import ConfigLoadError, load_crawl_config
from .runner import FATAL_ERRORS, AuditRunner, ExitCode, ScanOptions


app = typer.Typer(
    name="compliance-scan",
    help="Privacy compliance auditing for websites",
    add_completion=False,
)


def configure_logging(verbose: bool = False, quiet: bool = False) -> None:
    """Configure root logging for a CLI run."""
    if quiet:
        level = logging.WARNING
    elif verbose:
        level = logging.DEBUG
    else:
        level = logging.INFO

    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        force=True,
    )


@app.callback()
def main():
    """
    compliance-scan - audit a website's cookies, trackers and consent banner.
    """
    pass


@app.command(name="version")
def show_version():
    """Show version information."""
    typer.echo(f"compliance-scan v{__version__}")


@app.command()
def scan(
    url: Annotated[
        str,
        typer.Argument(help="Start URL; only pages on this exact host are crawled")
    ],

    depth: Annotated[
        Optional[int],
        typer.Option("--depth", "-d", help="Maximum link depth from the start URL")
    ] = None,

    max_pages: Annotated[
        Optional[int],
        typer.Option("--max-pages", help="Maximum pages to crawl")
    ] = None,

    out: Annotated[
        Optional[Path],
        typer.Option("--out", "-o", help="Output directory for results")
    ] = None,

    delay: Annotated[
        Optional[int],
        typer.Option("--delay", help="Delay between page fetches in milliseconds")
    ] = None,

    frameworks: Annotated[
        Optional[str],
        typer.Option("--frameworks", help="Comma-separated frameworks (gdpr,ccpa,eprivacy)")
    ] = None,

    headful: Annotated[
        bool,
        typer.Option("--headful", help="Run browser with GUI (for debugging)")
    ] = False,

    config_file: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="YAML file with crawl settings")
    ] = None,

    env: Annotated[
        Optional[str],
        typer.Option("--env", "-e", help="Environment section of the config file to apply")
    ] = None,

    skip_scan: Annotated[
        bool,
        typer.Option("--skip-scan", help="Do not scan crawled pages for cookies and scripts")
    ] = False,

    skip_consent: Annotated[
        bool,
        typer.Option("--skip-consent", help="Do not run the consent banner test")
    ] = False,

    json_output: Annotated[
        bool,
        typer.Option("--json", help="Print the run summary as JSON")
    ] = False,

    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable debug logging")
    ] = False,

    quiet: Annotated[
        bool,
        typer.Option("--quiet", "-q", help="Only log warnings and errors")
    ] = False,
):
    """
    Crawl a site, scan its pages and test its consent banner.

    Results are written to pages.json, scan.json and consent.json in the
    output directory.
    """
    configure_logging(verbose=verbose, quiet=quiet)

    overrides = {
        "url": url,
        "max_depth": depth,
        "max_pages": max_pages,
        "delay": delay,
        "output_dir": str(out) if out else None,
        "headless": False if headful else None,
        "frameworks": frameworks.split(",") if frameworks else None,
    }

    try:
        config = load_crawl_config(config_file, environment=env, overrides=overrides)
    except ConfigLoadError as e:
        typer.echo(f"❌ Configuration error: {e}", err=True)
        raise typer.Exit(code=ExitCode.CONFIG_ERROR.value)

    runner = AuditRunner(
        config,
        options=ScanOptions(run_scan=not skip_scan, run_consent=not skip_consent),
    )

    try:
        summary = asyncio.run(runner.run())
    except FATAL_ERRORS as e:
        typer.echo(f"❌ Audit failed: {e}", err=True)
        raise typer.Exit(code=ExitCode.RUNTIME_ERROR.value)
    except KeyboardInterrupt:
        typer.echo("❌ Operation interrupted by user", err=True)
        raise typer.Exit(code=ExitCode.RUNTIME_ERROR.value)

    if json_output:
        typer.echo(json.dumps(summary.to_dict(), indent=2))
        return

    typer.echo(f"✅ Crawled {summary.pages_crawled} pages ({summary.crawl_errors} errors)")
    if not skip_scan:
        typer.echo(
            f"   Cookies: {summary.unique_cookies} unique, "
            f"{summary.third_party_cookies} third-party, "
            f"{summary.high_risk_cookies} high or critical risk"
        )
    if not skip_consent:
        if summary.consent_mechanism_found:
            typer.echo(f"   Consent banner: found ({summary.consent_vendor or 'unknown vendor'})")
        else:
            typer.echo("   Consent banner: not found")
    typer.echo(f"   Results written to {config.output_dir}")


def cli_main():
    """Entry point for console script."""
    app()


if __name__ == "__main__":
    cli_main()
