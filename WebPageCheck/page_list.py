"""
Page list definitions.

A page entry carries:
- name: label shown in the report
- url: start URL (entries without a URL are skipped)
- success: pattern whose presence means the page is UP
- maint: pattern whose presence means a maintenance page (MAINT)
- form_action: form action URL; when it appears on a page, that page's form is auto-submitted to it

Pattern matching ignores case.

Besides the built-in list, pages can be loaded from a JSON file, either as objects:

    [{"name": "Google", "url": "https://www.google.com", "success": "<title>Google</title>"}]

or as legacy newline-separated blocks (name, URL, success, maint, form action):

    ["Google\\nhttps://www.google.com\\n<title>Google</title>\\n"]
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

from WebPageCheck.config import CheckerConfig
from WebPageCheck.exceptions import ConfigurationError
from WebPageCheck.logging_setup import log_event

logger = logging.getLogger("webpagecheck.page_list")


@dataclass(frozen=True)
class PageConfig:
    name: str
    url: str
    success_pattern: str = ""
    maint_pattern: str = ""
    form_action: str = ""


_KEY_ALIASES = {
    "name": ("name",),
    "url": ("url",),
    "success_pattern": ("success", "success_pattern", "regex_success"),
    "maint_pattern": ("maint", "maint_pattern", "maintenance", "regex_maint"),
    "form_action": ("form_action", "formAction", "form"),
}


def default_pages() -> List[PageConfig]:
    return [
        PageConfig(
            name="Google",
            url="https://www.google.com",
            success_pattern="<title>Google</title>",
        ),
        PageConfig(
            name="MSN",
            url="https://www.msn.com",
            success_pattern="<title>MSN",
        ),
        PageConfig(
            name="Github webPageCheck Repository",
            url="https://github.com/tomgehrke/webPageCheck",
            success_pattern="tomgehrke/webPageCheck",
        ),
    ]


def parse_page_block(block: str) -> PageConfig:
    """Parse a legacy page entry: one field per line, trailing fields optional."""
    lines = [ln.strip() for ln in str(block or "").splitlines()]
    fields = (lines + [""] * 5)[:5]
    name, url, success, maint, form_action = fields
    return PageConfig(
        name=name,
        url=url,
        success_pattern=success,
        maint_pattern=maint,
        form_action=form_action,
    )


def _pick(entry: Dict[str, Any], field: str) -> str:
    for key in _KEY_ALIASES[field]:
        value = entry.get(key)
        if value is not None:
            return str(value).strip()
    return ""


def _page_from_entry(entry: Any, index: int, source: Path) -> PageConfig:
    if isinstance(entry, str):
        return parse_page_block(entry)
    if isinstance(entry, dict):
        return PageConfig(**{field: _pick(entry, field) for field in _KEY_ALIASES})
    raise ConfigurationError(f"{source}: entry #{index} must be an object or a string, got {type(entry).__name__}")


def load_pages(path: Path) -> List[PageConfig]:
    p = Path(path)
    try:
        raw = json.loads(p.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise ConfigurationError(f"Page list file not found: {p}") from e
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigurationError(f"Cannot read page list file {p}: {e}") from e
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Page list file {p} is not valid JSON: {e}") from e

    # Also accept {"pages": [...]} so the list can sit next to other keys.
    if isinstance(raw, dict) and "pages" in raw:
        raw = raw["pages"]
    if not isinstance(raw, list):
        raise ConfigurationError(f"{p}: expected a JSON array of page entries")

    pages = [_page_from_entry(entry, i, p) for i, entry in enumerate(raw, start=1)]
    log_event(logger, logging.INFO, "pages_loaded", path=str(p), count=len(pages))
    return pages


def resolve_pages(cfg: CheckerConfig, override_path: Optional[Path] = None) -> List[PageConfig]:
    """CLI path first, then WEBPAGECHECK_PAGES_FILE, then the built-in list."""
    if override_path:
        return load_pages(Path(override_path))
    if cfg.pages_file:
        return load_pages(Path(cfg.pages_file))
    return default_pages()
