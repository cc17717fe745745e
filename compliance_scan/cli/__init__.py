"""CLI module for compliance-scan.

This package provides the command-line interface for crawling a site,
scanning its pages and testing its consent banner.
"""

from .runner import (
    # Exit codes
    ExitCode,

    # Runner
    AuditRunner,
    AuditSummary,
    ScanOptions,
)

__all__ = [
    'ExitCode',
    'AuditRunner',
    'AuditSummary',
    'ScanOptions',
]
