"""Shared HTTP session for talking to the Polynance API server.

Centralizes request defaults (timeouts, retries, connection pooling) so the
order batch and the verification loop behave the same on flaky networks.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = (3.05, 10)  # (connect, read)


def _build_retry() -> Retry:
    # Only connection failures are retried. Once the server has answered, a
    # resend could execute an order or send an oracle tx twice.
    return Retry(
        total=3,
        connect=3,
        read=0,
        status=0,
        other=0,
        backoff_factor=0.4,
        allowed_methods=("GET", "POST"),
        raise_on_status=False,
        respect_retry_after_header=False,
    )


def build_session() -> requests.Session:
    s = requests.Session()
    adapter = HTTPAdapter(max_retries=_build_retry(), pool_connections=4, pool_maxsize=4)
    s.mount("https://", adapter)
    s.mount("http://", adapter)
    s.headers.update({"Content-Type": "application/json", "Accept": "application/json"})
    return s


class HttpClient:
    """Base-URL-bound wrapper around a requests session."""

    def __init__(self, base_url: str, session: Optional[requests.Session] = None, timeout: Any = None):
        self.base_url = base_url.rstrip("/")
        self.session = session or build_session()
        self.timeout = timeout if timeout is not None else DEFAULT_TIMEOUT

    def url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def request(self, method: str, path: str, *, timeout: Any = None, **kwargs) -> requests.Response:
        """Perform an HTTP request with shared defaults."""
        if timeout is None:
            timeout = self.timeout
        return self.session.request(method=method, url=self.url(path), timeout=timeout, **kwargs)

    def close(self) -> None:
        self.session.close()
