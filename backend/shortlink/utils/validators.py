"""
Validation utilities - Pure validation functions.
"""
from urllib.parse import urlparse


def validate_url(url: str) -> None:
    """
    Validate a URL to be shortened.

    Raises:
        ValueError: If the URL is empty, unparsable or not http/https
    """
    if not url or not url.strip():
        raise ValueError("Could not parse URL.")

    try:
        parsed = urlparse(url.strip())
    except ValueError as e:
        raise ValueError("Could not parse URL.") from e

    if parsed.scheme not in ("http", "https"):
        raise ValueError("URL does not appear to use HTTP or HTTPS.")
    if not parsed.netloc:
        raise ValueError("Could not parse URL.")


def validate_link_id(link_id: str, max_length: int) -> None:
    """
    Validate a caller-chosen short id.

    Raises:
        ValueError: If the id is too long or contains a path separator
    """
    if len(link_id) > max_length:
        raise ValueError(f"{link_id} was too long (max {max_length} characters).")
    if "/" in link_id or "\\" in link_id:
        raise ValueError("Short ids cannot contain slashes.")


def is_redirect_target(uri: str) -> bool:
    """Check whether uri is an absolute URL usable as a redirect target."""
    if not uri:
        return False
    try:
        parsed = urlparse(uri)
    except ValueError:
        return False
    return bool(parsed.scheme and parsed.netloc)
