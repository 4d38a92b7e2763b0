"""Raw-content retrieval of repository VERSION files.

Usage::

    with raw_client() as client:
        version = fetch_version(client, settings.raw_file_url("runtime", "master"))
"""

from __future__ import annotations

import httpx

from .shell import fatal
from .versions import strip_comments


def raw_client(transport: httpx.BaseTransport | None = None) -> httpx.Client:
    """Create the HTTP client used for raw file downloads.

    Redirects are followed and no timeout is applied.
    """
    return httpx.Client(follow_redirects=True, timeout=None, transport=transport)


def fetch_version(client: httpx.Client, url: str) -> str:
    """Download a VERSION file and return it without comment lines.

    The response status is not inspected: an error page goes through the
    same comment stripping as a real file, and the caller's comparison
    decides whether it is acceptable. Transport failures are fatal.
    """
    try:
        response = client.get(url)
    except httpx.HTTPError as exc:
        fatal(f"Failed to fetch {url}: {exc}")
    return strip_comments(response.text)
