"""URL canonicalization for consistent deduplication and comparison.

This module provides the canonical form used by the frontier's visited set,
plus the hostname helpers used to decide whether captured cookies, scripts
and requests are third-party relative to the page they were found on.
"""

from urllib.parse import parse_qsl, urlencode, urlparse, urlunparse
from typing import Optional


class URLNormalizationError(Exception):
    """Raised when URL normalization fails."""
    pass


def _normalize_netloc(parsed, scheme: str) -> str:
    """Lowercase and IDN-encode the host, dropping default ports."""
    hostname = parsed.hostname
    if not hostname:
        raise URLNormalizationError(f"URL missing hostname: {parsed.geturl()}")

    try:
        port = parsed.port
    except ValueError as e:
        raise URLNormalizationError(f"Invalid port in URL '{parsed.geturl()}': {e}")

    if ':' in hostname:
        # IPv6 literal
        host = f"[{hostname}]"
    else:
        try:
            host = hostname.encode('idna').decode('ascii')
        except UnicodeError:
            # IDN encoding failed, keep original
            host = hostname

    if port is not None and not (
        (scheme == 'http' and port == 80) or (scheme == 'https' and port == 443)
    ):
        host = f"{host}:{port}"

    userinfo = parsed.netloc.rpartition('@')[0] if '@' in parsed.netloc else ''
    return f"{userinfo}@{host}" if userinfo else host


def canonicalize(url: str) -> str:
    """Canonicalize a URL for visited-set comparison.

    The fragment is removed, trailing slashes are stripped from every path
    except the root, and query parameters are sorted by name (parameters
    sharing a name keep their relative order). Scheme and host are lowercased
    and default ports dropped. Canonicalizing a canonical URL returns it
    unchanged.

    Args:
        url: The URL to canonicalize

    Returns:
        The canonical URL string

    Raises:
        URLNormalizationError: If the URL is not an absolute http(s) URL

    Example:
        >>> canonicalize("HTTPS://Example.com:443/docs/?b=2&a=1#intro")
        'https://example.com/docs?a=1&b=2'
    """
    if not url or not isinstance(url, str):
        raise URLNormalizationError("URL must be a non-empty string")

    url = url.strip()
    if not url:
        raise URLNormalizationError("URL cannot be empty or whitespace only")

    try:
        parsed = urlparse(url)
    except ValueError as e:
        raise URLNormalizationError(f"Failed to parse URL '{url}': {e}")

    scheme = parsed.scheme.lower()
    if scheme not in ('http', 'https'):
        raise URLNormalizationError(f"Unsupported URL scheme: {scheme or '(none)'}")
    if not parsed.netloc:
        raise URLNormalizationError(f"URL missing netloc: {url}")

    netloc = _normalize_netloc(parsed, scheme)

    path = parsed.path.rstrip('/') or '/'

    query = ''
    if parsed.query:
        params = parse_qsl(parsed.query, keep_blank_values=True)
        params.sort(key=lambda item: item[0])
        query = urlencode(params)

    return urlunparse((scheme, netloc, path, parsed.params, query, ''))


def get_hostname(url: str) -> Optional[str]:
    """Return the lowercased hostname of a URL, or None if it has none."""
    try:
        return urlparse(url).hostname
    except ValueError:
        return None


def strip_www(hostname: str) -> str:
    """Remove a single leading ``www.`` label."""
    return hostname[4:] if hostname.startswith('www.') else hostname


def is_third_party(url_or_domain: str, base_url: str) -> bool:
    """Check whether a captured URL or cookie domain is third-party.

    Both hostnames have a leading ``www.`` removed (cookie domains also lose
    their leading dot). The captured host is first-party when it ends with
    the page host, which covers subdomains of the visited site.

    Args:
        url_or_domain: Absolute URL of a script/request, or a cookie domain
        base_url: URL of the page the item was found on

    Returns:
        True if third-party; False if first-party or either value is unparseable

    Example:
        >>> is_third_party(".google-analytics.com", "https://www.example.com/")
        True
        >>> is_third_party("https://cdn.example.com/app.js", "https://example.com/")
        False
    """
    base_host = get_hostname(base_url)
    if not base_host or not url_or_domain:
        return False

    if url_or_domain.startswith('http'):
        test_host = get_hostname(url_or_domain)
        if not test_host:
            return False
    else:
        test_host = url_or_domain.lstrip('.').lower()

    return not strip_www(test_host).endswith(strip_www(base_host))


def is_valid_http_url(url: str) -> bool:
    """Check if a URL is a valid HTTP/HTTPS URL.

    Args:
        url: The URL to validate

    Returns:
        True if the URL is valid HTTP/HTTPS, False otherwise
    """
    try:
        canonicalize(url)
        return True
    except URLNormalizationError:
        return False
