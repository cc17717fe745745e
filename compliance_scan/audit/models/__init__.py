"""Audit data models package."""

from .crawl import (
    SUPPORTED_FRAMEWORKS,
    CrawlConfig,
    FrontierItem,
    PageInfo,
    CrawlError,
    CrawlResult,
)

from .capture import (
    SameSite,
    ScriptType,
    ScriptCategory,
    ConsentPhase,
    Cookie,
    Script,
    NetworkRequest,
    CapturePhaseResult,
    ConsentTestResult,
    ScanResult,
    AggregatedScanResults,
)

__all__ = [
    # Crawl models
    'SUPPORTED_FRAMEWORKS',
    'CrawlConfig',
    'FrontierItem',
    'PageInfo',
    'CrawlError',
    'CrawlResult',

    # Capture models
    'SameSite',
    'ScriptType',
    'ScriptCategory',
    'ConsentPhase',
    'Cookie',
    'Script',
    'NetworkRequest',
    'CapturePhaseResult',
    'ConsentTestResult',
    'ScanResult',
    'AggregatedScanResults',
]
