"""Audit utilities package."""

from .url_normalizer import (
    canonicalize,
    get_hostname,
    strip_www,
    is_third_party,
    is_valid_http_url,
    URLNormalizationError,
)
from .scope_matcher import (
    ScopeMatcher,
    ScopeDecision,
    ScopeMatcherError,
    create_scope_matcher_from_config,
)

__all__ = [
    'canonicalize',
    'get_hostname',
    'strip_www',
    'is_third_party',
    'is_valid_http_url',
    'URLNormalizationError',
    'ScopeMatcher',
    'ScopeDecision',
    'ScopeMatcherError',
    'create_scope_matcher_from_config'
]
