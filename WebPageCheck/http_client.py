"""
HTTP client for fetching monitored pages.

Wraps a requests.Session so every request looks like a regular browser visit:
- browser User-Agent
- HTTP redirects followed
- retries for transient gateway/rate-limit statuses
- form submissions sent as multipart/form-data with a Referer header
"""
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

import requests
from requests.adapters import HTTPAdapter
from urllib3.filepost import encode_multipart_formdata
from urllib3.util.retry import Retry

from WebPageCheck.config import DEFAULT_USER_AGENT, CheckerConfig
from WebPageCheck.exceptions import FetchError

logger = logging.getLogger(__name__)


@dataclass
class ClientConfig:
    """Configuration for the page client."""
    user_agent: str = DEFAULT_USER_AGENT
    timeout: float = 30.0
    max_retries: int = 2
    verify_tls: bool = True


@dataclass
class FetchResult:
    """A fetched page after HTTP-level redirects."""
    url: str
    status_code: int
    body: str


class PageClient:
    """
    Browser-like page fetcher.

    HTTP error statuses are not raised: monitored sites often serve their
    maintenance page with a 5xx, and the body decides the verdict.
    Transport failures raise FetchError.
    """

    def __init__(self, config: ClientConfig):
        self.config = config
        self.session = requests.Session()
        self.session.headers.update({"User-Agent": config.user_agent})

        retry_strategy = Retry(
            total=config.max_retries,
            backoff_factor=0.5,
            status_forcelist=[429, 500, 502, 503, 504],
            allowed_methods=["GET", "POST"],
            raise_on_status=False,
        )
        adapter = HTTPAdapter(max_retries=retry_strategy)
        self.session.mount("http://", adapter)
        self.session.mount("https://", adapter)

    def _result(self, resp: requests.Response, requested_url: str) -> FetchResult:
        return FetchResult(
            url=str(resp.url or requested_url),
            status_code=int(resp.status_code),
            body=resp.text or "",
        )

    def get(self, url: str) -> FetchResult:
        try:
            resp = self.session.get(
                url,
                timeout=self.config.timeout,
                allow_redirects=True,
                verify=self.config.verify_tls,
            )
        except requests.RequestException as e:
            raise FetchError(f"GET {url} failed: {e}", url=url) from e
        logger.debug("GET %s -> %s (%s)", url, resp.status_code, resp.url)
        return self._result(resp, url)

    def submit_form(
        self,
        url: str,
        fields: Sequence[Tuple[str, str]],
        *,
        referer: Optional[str] = None,
    ) -> FetchResult:
        """
        POST form fields to `url` as multipart/form-data.

        A form without inputs is still sent as multipart/form-data (a body holding only the closing boundary).

        Args:
            url: Form action URL
            fields: (name, value) pairs in document order; duplicate names are kept
            referer: URL of the page that contained the form
        """
        # (None, value) parts are plain form fields rather than file uploads.
        parts: List[Tuple[str, Tuple[None, str]]] = [(name, (None, value)) for name, value in fields]
        headers: Dict[str, str] = {}
        if referer:
            headers["Referer"] = referer
        body: Optional[bytes] = None
        if not parts:
            # requests drops an empty `files` list, so encode the empty multipart body directly.
            body, headers["Content-Type"] = encode_multipart_formdata([])
        try:
            resp = self.session.post(
                url,
                files=parts or None,
                data=body,
                headers=headers,
                timeout=self.config.timeout,
                allow_redirects=True,
                verify=self.config.verify_tls,
            )
        except requests.RequestException as e:
            raise FetchError(f"POST {url} failed: {e}", url=url) from e
        logger.debug("POST %s fields=%d -> %s (%s)", url, len(parts), resp.status_code, resp.url)
        return self._result(resp, url)

    def close(self) -> None:
        self.session.close()


def create_client_from_config(cfg: CheckerConfig) -> PageClient:
    return PageClient(
        ClientConfig(
            user_agent=cfg.user_agent,
            timeout=cfg.timeout_seconds,
            max_retries=cfg.max_retries,
            verify_tls=cfg.verify_tls,
        )
    )
