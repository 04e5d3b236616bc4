from __future__ import annotations

import shutil
from datetime import datetime
from typing import Callable, Dict, Iterable, Optional, TextIO

from colorama import Cursor, Fore, Style
from colorama.ansi import clear_screen

from WebPageCheck.config import CheckerConfig
from WebPageCheck.page_list import PageConfig
from WebPageCheck.resolver import CheckListener, PageResult, Status, Step


LAST_COLUMN_WIDTH = 8
MIN_WIDTH = 20
FALLBACK_WIDTH = 80

TITLE = "Web Page Availability Status Checks"
TITLE_RULE = "=" * 38
SECTION_RULE = "-" * 44
BLOCK_RULE = "----"

_STATUS_TEXT: Dict[Status, str] = {
    Status.UP: " UP  ",
    Status.MAINT: "MAINT",
    Status.DOWN: "DOWN!",
}

_STATUS_COLOR: Dict[Status, str] = {
    Status.UP: Fore.GREEN,
    Status.MAINT: Fore.YELLOW,
    Status.DOWN: Fore.RED,
}


def terminal_width(override: Optional[int] = None) -> int:
    if override:
        return max(MIN_WIDTH, int(override))
    return max(MIN_WIDTH, shutil.get_terminal_size((FALLBACK_WIDTH, 24)).columns)


def should_use_color(cfg: CheckerConfig, stream: TextIO, *, disabled: bool = False) -> bool:
    if disabled or cfg.color == "never" or cfg.color_disabled_by_env:
        return False
    if cfg.color == "always":
        return True
    isatty = getattr(stream, "isatty", None)
    return bool(isatty and isatty())


def format_status(status: Status, *, color: bool) -> str:
    # Visible text is always LAST_COLUMN_WIDTH - 3 wide so " [" + text + "]" fills the last column.
    text = _STATUS_TEXT[status].rjust(LAST_COLUMN_WIDTH - 3)
    if not color:
        return text
    return f"{_STATUS_COLOR[status]}{text}{Style.RESET_ALL}"


def format_label(result: PageResult) -> str:
    if result.redirected:
        return f"{result.page.name} ({result.original_url} => {result.final_url})"
    return f"{result.page.name} ({result.original_url})"


def format_status_line(result: PageResult, *, width: int, color: bool) -> str:
    """Label dotted out to the first column, then the bracketed status in the last column."""
    first_column = max(1, width - LAST_COLUMN_WIDTH)
    label = format_label(result).ljust(first_column, ".")[:first_column]
    return f"{label} [{format_status(result.status, color=color)}]"


def summarize(results: Iterable[PageResult]) -> str:
    counts = {s: 0 for s in Status}
    total = 0
    for r in results:
        counts[r.status] += 1
        total += 1
    noun = "page" if total == 1 else "pages"
    return (
        f"{total} {noun} checked: {counts[Status.UP]} up, "
        f"{counts[Status.MAINT]} maintenance, {counts[Status.DOWN]} down"
    )


def _default_timestamp() -> str:
    # Same shape as date(1): "Mon Oct 19 14:07:00 UTC 2026".
    return datetime.now().astimezone().strftime("%a %b %d %H:%M:%S %Z %Y")


class ReportWriter(CheckListener):
    """Streams the status report while pages are being resolved."""

    def __init__(
        self,
        stream: TextIO,
        *,
        width: int = FALLBACK_WIDTH,
        color: bool = False,
        verbose: bool = False,
        show_response: bool = False,
        clear: bool = False,
        timestamp: Callable[[], str] = _default_timestamp,
    ) -> None:
        self.stream = stream
        self.width = width
        self.color = color
        self.verbose = verbose
        self.show_response = show_response
        self.clear = clear
        self.timestamp = timestamp

    def _line(self, text: str = "") -> None:
        self.stream.write(text + "\n")

    def header(self) -> None:
        if self.clear:
            self.stream.write(clear_screen() + Cursor.POS(1, 1))
        self._line(TITLE)
        self._line(TITLE_RULE)
        self._line(self.timestamp())
        self._line()
        self._line("Beginning scan...")
        self._line(SECTION_RULE)
        self.stream.flush()

    def page_started(self, page: PageConfig) -> None:
        if not self.verbose:
            return
        self._line(f"Name:        {page.name}")
        self._line(f"URL:         {page.url}")
        self._line(f"Success:     {page.success_pattern}")
        self._line(f"Maint:       {page.maint_pattern}")
        self._line(f"Form Action: {page.form_action}")
        self._line(BLOCK_RULE)

    def step(self, page: PageConfig, step: Step) -> None:
        if not self.verbose:
            return
        if step.kind == "meta_refresh":
            self._line(f"=> Meta refresh redirect to {step.url}")
        elif step.kind == "form_submit":
            self._line(f"=> Form submission to {step.url}")

    def response(self, page: PageConfig, url: str, body: str) -> None:
        if not self.show_response:
            return
        self._line(body)
        self._line(BLOCK_RULE)

    def page_finished(self, result: PageResult) -> None:
        self._line(format_status_line(result, width=self.width, color=self.color))
        if self.verbose:
            if result.error:
                self._line(f"Error:       {result.error}")
            self._line(SECTION_RULE)
        self.stream.flush()

    def footer(self, results: Iterable[PageResult]) -> None:
        self._line()
        self._line(summarize(results))
        self.stream.flush()
