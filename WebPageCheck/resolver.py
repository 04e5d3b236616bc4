"""
Per-page resolution loop.

Each page is fetched and its body evaluated in order:
1. success pattern matches          -> UP
2. maintenance pattern matches      -> MAINT
3. meta refresh tag present         -> follow it and evaluate the new page
4. configured form action on page   -> submit the page's inputs to it and evaluate the response
5. otherwise                        -> DOWN

Steps 3 and 4 are hops; a page that keeps hopping past `max_hops` is DOWN.
Transport failures are DOWN as well.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence, Tuple
from urllib.parse import urljoin

from WebPageCheck.exceptions import FetchError
from WebPageCheck.html_patterns import contains_pattern, contains_text, extract_form_inputs, find_meta_refresh_url
from WebPageCheck.http_client import FetchResult, PageClient
from WebPageCheck.logging_setup import bind_log_context, log_event
from WebPageCheck.page_list import PageConfig

logger = logging.getLogger("webpagecheck.resolver")

DEFAULT_MAX_HOPS = 10


class Status(str, Enum):
    UP = "up"
    MAINT = "maint"
    DOWN = "down"


@dataclass(frozen=True)
class Step:
    kind: str  # "fetch" | "meta_refresh" | "form_submit"
    url: str
    detail: str = ""


@dataclass
class PageResult:
    page: PageConfig
    original_url: str
    final_url: str
    status: Status
    steps: List[Step] = field(default_factory=list)
    error: Optional[str] = None
    hops: int = 0

    @property
    def redirected(self) -> bool:
        return self.final_url != self.original_url


class CheckListener:
    """Receives progress while pages are resolved. The report writer plugs in here."""

    def page_started(self, page: PageConfig) -> None:
        pass

    def step(self, page: PageConfig, step: Step) -> None:
        pass

    def response(self, page: PageConfig, url: str, body: str) -> None:
        pass

    def page_finished(self, result: PageResult) -> None:
        pass


def _fetch(
    client: PageClient,
    url: str,
    form_fields: Optional[Sequence[Tuple[str, str]]],
    referer: Optional[str],
) -> FetchResult:
    if form_fields is None:
        return client.get(url)
    return client.submit_form(url, form_fields, referer=referer)


def resolve_page(
    page: PageConfig,
    client: PageClient,
    *,
    max_hops: int = DEFAULT_MAX_HOPS,
    listener: Optional[CheckListener] = None,
) -> PageResult:
    listener = listener or CheckListener()
    result = PageResult(page=page, original_url=page.url, final_url=page.url, status=Status.DOWN)

    url = page.url
    form_fields: Optional[List[Tuple[str, str]]] = None
    referer: Optional[str] = None

    def _record(step: Step) -> None:
        result.steps.append(step)
        listener.step(page, step)

    while True:
        method = "POST" if form_fields is not None else "GET"
        try:
            with bind_log_context(step=method.lower()):
                fetched = _fetch(client, url, form_fields, referer)
        except FetchError as e:
            log_event(logger, logging.WARNING, "page_fetch_failed", url=url, method=method, error=str(e))
            result.error = str(e)
            result.status = Status.DOWN
            break
        # A submitted form is only sent once.
        form_fields = None
        _record(Step(kind="fetch", url=url, detail=f"{method} {fetched.status_code}"))
        listener.response(page, url, fetched.body)

        body = fetched.body
        if contains_pattern(body, page.success_pattern):
            result.status = Status.UP
            break
        if contains_pattern(body, page.maint_pattern):
            result.status = Status.MAINT
            break

        refresh_target = find_meta_refresh_url(body)
        has_form = contains_text(body, page.form_action)
        if not refresh_target and not has_form:
            result.status = Status.DOWN
            break

        if result.hops >= max_hops:
            log_event(logger, logging.WARNING, "page_hop_limit", url=url, max_hops=max_hops)
            result.error = f"too many redirects (more than {max_hops} hops)"
            result.status = Status.DOWN
            break
        result.hops += 1

        if refresh_target:
            url = urljoin(fetched.url or url, refresh_target)
            _record(Step(kind="meta_refresh", url=url))
        else:
            referer = url
            form_fields = extract_form_inputs(body)
            url = urljoin(fetched.url or url, page.form_action)
            _record(Step(kind="form_submit", url=url, detail=f"{len(form_fields)} fields"))
        result.final_url = url

    log_event(
        logger,
        logging.INFO,
        "page_resolved",
        url=page.url,
        final_url=result.final_url,
        status=result.status.value,
        hops=result.hops,
        error=result.error,
    )
    return result


def check_pages(
    pages: Sequence[PageConfig],
    client: PageClient,
    *,
    max_hops: int = DEFAULT_MAX_HOPS,
    listener: Optional[CheckListener] = None,
) -> List[PageResult]:
    """Resolve every page that has a URL, in list order."""
    listener = listener or CheckListener()
    results: List[PageResult] = []
    for page in pages:
        if not page.url:
            logger.debug("Skipping page without URL: %r", page.name)
            continue
        with bind_log_context(page=page.name):
            listener.page_started(page)
            result = resolve_page(page, client, max_hops=max_hops, listener=listener)
            listener.page_finished(result)
        results.append(result)
    return results
