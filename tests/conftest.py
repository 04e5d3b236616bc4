"""
Pytest configuration and fixtures for WebPageCheck tests.

Provides a scripted fake HTTP client so resolution tests never touch the network.
"""
import os
from typing import Callable, Dict, List, Optional, Sequence, Tuple, Union

import pytest


# Set test environment variables before ANY imports
os.environ["LOG_TO_CONSOLE"] = "false"
os.environ["LOG_TO_FILE"] = "false"
os.environ["LOG_LEVEL"] = "WARNING"

from WebPageCheck.config import _cached_checker_config  # noqa: E402
from WebPageCheck.exceptions import FetchError  # noqa: E402
from WebPageCheck.http_client import FetchResult  # noqa: E402


_CHECKER_ENV_VARS = (
    "WEBPAGECHECK_USER_AGENT",
    "USER_AGENT",
    "WEBPAGECHECK_TIMEOUT_SECONDS",
    "WEBPAGECHECK_TIMEOUT",
    "WEBPAGECHECK_MAX_RETRIES",
    "WEBPAGECHECK_VERIFY_TLS",
    "WEBPAGECHECK_MAX_HOPS",
    "WEBPAGECHECK_PAGES_FILE",
    "PAGES_FILE",
    "WEBPAGECHECK_COLOR",
    "WEBPAGECHECK_WIDTH",
    "NO_COLOR",
)


@pytest.fixture(autouse=True)
def clean_checker_env(monkeypatch):
    """Isolate every test from the caller's environment and the cached config."""
    for name in _CHECKER_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    _cached_checker_config.cache_clear()
    yield
    _cached_checker_config.cache_clear()


Response = Union[str, Exception]


class FakeClient:
    """
    Scripted stand-in for PageClient.

    `responses` maps URL -> body (or an exception to raise). A list of bodies is
    consumed one per request to that URL, the last one repeating.
    """

    def __init__(self, responses: Dict[str, Union[Response, List[Response]]]):
        self.responses = responses
        self.calls: List[Tuple[str, str, Optional[List[Tuple[str, str]]], Optional[str]]] = []
        self.closed = False
        self._served: Dict[str, int] = {}

    def _respond(self, url: str) -> FetchResult:
        if url not in self.responses:
            raise FetchError(f"no route to {url}", url=url)
        entry = self.responses[url]
        if isinstance(entry, list):
            i = self._served.get(url, 0)
            self._served[url] = i + 1
            entry = entry[min(i, len(entry) - 1)]
        if isinstance(entry, Exception):
            raise entry
        return FetchResult(url=url, status_code=200, body=entry)

    def get(self, url: str) -> FetchResult:
        self.calls.append(("GET", url, None, None))
        return self._respond(url)

    def submit_form(self, url: str, fields: Sequence[Tuple[str, str]], *, referer: Optional[str] = None) -> FetchResult:
        self.calls.append(("POST", url, list(fields), referer))
        return self._respond(url)

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_client() -> Callable[..., FakeClient]:
    return FakeClient
