"""Fetching the launcher API."""

from __future__ import annotations

from functools import lru_cache

import requests

from launcher_core.installer.downloader import DEFAULT_REQUESTS_TIMEOUT
from launcher_core.star_rail.schema import Response


@lru_cache(maxsize=None)
def request(uri: str, timeout: float = DEFAULT_REQUESTS_TIMEOUT) -> Response:
    """Fetch and parse the API response; successful results are cached per URI."""
    response = requests.get(uri, timeout=timeout)
    return Response.from_dict(response.json())