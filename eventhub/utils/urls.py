"""URL validation and normalization utilities."""

from urllib.parse import urljoin, urlparse


def is_valid_url(url: str | None) -> bool:
    """Check if a string is an absolute http(s) URL.

    Args:
        url: URL string to validate

    Returns:
        True if valid URL, False otherwise
    """
    if not url:
        return False

    try:
        result = urlparse(url)
        return all([result.scheme in ("http", "https"), result.netloc])
    except ValueError:
        return False


def make_absolute_url(url: str | None, base_url: str) -> str | None:
    """Resolve a possibly relative link against the page it was found on.

    Args:
        url: URL found in markup (absolute, protocol-relative or relative)
        base_url: URL of the page the link was found on

    Returns:
        Absolute URL or None when the link is empty or not navigable
    """
    if not url:
        return None

    url = url.strip()
    if url.startswith(("javascript:", "mailto:", "tel:", "#")):
        return None

    if url.startswith("//"):
        url = "https:" + url

    absolute = urljoin(base_url, url)
    return absolute if is_valid_url(absolute) else None
