"""Configuration loading for crawl settings."""

from .loader import (
    ConfigLoadError,
    ENVIRONMENT_VARIABLE,
    load_crawl_config,
    read_config_file,
)

__all__ = [
    'ConfigLoadError',
    'ENVIRONMENT_VARIABLE',
    'load_crawl_config',
    'read_config_file',
]
