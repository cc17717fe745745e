"""YAML loading of crawl settings with per-environment overrides.

A config file holds default CrawlConfig fields plus an optional
``environments`` mapping whose entries are merged on top of the defaults for
the selected environment. The start URL normally comes from the command line
and is passed in as an override.
"""

import os
import yaml
from pathlib import Path
from typing import Dict, Any, Optional, Union
import logging

from pydantic import ValidationError

from ..models.crawl import CrawlConfig


logger = logging.getLogger(__name__)


ENVIRONMENT_VARIABLE = "COMPLIANCE_SCAN_ENV"
DEFAULT_ENVIRONMENT = "production"


class ConfigLoadError(Exception):
    """Exception raised when configuration loading fails."""
    pass


def read_config_file(config_path: Union[str, Path]) -> Dict[str, Any]:
    """Read a YAML config file into a dictionary.

    Raises:
        ConfigLoadError: If the file is missing, unreadable or not a mapping.
    """
    config_path = Path(config_path)
    if not config_path.exists():
        raise ConfigLoadError(f"Config file not found: {config_path}")

    try:
        with open(config_path, 'r') as f:
            config_data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigLoadError(f"Failed to parse YAML config: {e}")
    except IOError as e:
        raise ConfigLoadError(f"Failed to read config file: {e}")

    if config_data is None:
        return {}
    if not isinstance(config_data, dict):
        raise ConfigLoadError("Config file must contain a YAML dictionary")

    return config_data


def load_crawl_config(
    config_path: Optional[Union[str, Path]] = None,
    environment: Optional[str] = None,
    overrides: Optional[Dict[str, Any]] = None
) -> CrawlConfig:
    """Build a CrawlConfig from an optional YAML file and overrides.

    Args:
        config_path: Path to YAML config file; None means overrides only.
        environment: Environment name for override selection. If None, the
            COMPLIANCE_SCAN_ENV variable is used.
        overrides: Values applied last, typically command-line options.

    Returns:
        Validated CrawlConfig instance.

    Raises:
        ConfigLoadError: If configuration loading or validation fails.

    Example:
        >>> config = load_crawl_config(
        ...     "config/crawl.yaml",
        ...     environment="development",
        ...     overrides={"url": "https://example.com"},
        ... )
        >>> config.max_pages
        20
    """
    config_data: Dict[str, Any] = {}
    if config_path is not None:
        config_data = read_config_file(config_path)

    if environment is None:
        environment = os.getenv(ENVIRONMENT_VARIABLE, DEFAULT_ENVIRONMENT)

    environments = config_data.pop("environments", None) or {}
    if not isinstance(environments, dict):
        raise ConfigLoadError("'environments' must be a mapping of environment names to settings")

    if environment in environments:
        config_data = _deep_merge(config_data, environments[environment] or {})
        logger.info(f"Applied environment overrides for: {environment}")

    if overrides:
        # None means "not given on the command line"
        config_data = _deep_merge(
            config_data,
            {key: value for key, value in overrides.items() if value is not None}
        )
        logger.debug("Applied additional configuration overrides")

    try:
        return CrawlConfig(**config_data)
    except ValidationError as e:
        raise ConfigLoadError(f"Invalid crawl configuration: {e}")
    except TypeError as e:
        raise ConfigLoadError(f"Failed to create CrawlConfig: {e}")


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Deep merge two dictionaries, with override taking precedence."""
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result
