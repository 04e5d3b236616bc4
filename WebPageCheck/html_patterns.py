"""
Pattern matching against the handful of HTML constructs the checker cares about.

This is deliberately not an HTML parser: it recognises a meta refresh tag and input tags,
which is enough to walk the login/interstitial pages of the monitored sites.
"""

import re
from typing import List, Optional, Tuple


# The tag match never crosses a '>', so it cannot run into a later tag's content attribute.
_RE_META_REFRESH_TAG = re.compile(r"""<meta\s[^>]*?http-equiv\s*=\s*["']?refresh["']?[^>]*?content\s*=\s*["'][^>]*?url\s*=[^>]*>""", re.IGNORECASE)
_RE_META_REFRESH_URL = re.compile(r"""url\s*=\s*['"]?([^"'>]*)""", re.IGNORECASE)

_RE_INPUT_TAG = re.compile(r"<input\b.*?>", re.IGNORECASE | re.DOTALL)
_RE_INPUT_NAME = re.compile(r'\bname="(.*?)"', re.IGNORECASE | re.DOTALL)
_RE_INPUT_VALUE = re.compile(r'\bvalue="(.*?)"', re.IGNORECASE | re.DOTALL)


def _norm_text(value: object) -> str:
    if value is None:
        return ""
    return str(value)


def find_meta_refresh_url(body: Optional[str]) -> Optional[str]:
    """
    Return the redirect target of the first meta refresh tag in `body`, or None.

    Example:
        <meta http-equiv="refresh" content="0; url=/login">  ->  "/login"
    """
    text = _norm_text(body)
    tag = _RE_META_REFRESH_TAG.search(text)
    if not tag:
        return None
    m = _RE_META_REFRESH_URL.search(tag.group(0))
    if not m:
        return None
    url = m.group(1).strip()
    return url or None


def extract_form_inputs(body: Optional[str]) -> List[Tuple[str, str]]:
    """
    Collect (name, value) pairs from every <input> tag, in document order.

    Inputs without a name are skipped; a missing value becomes "".
    """
    fields: List[Tuple[str, str]] = []
    for tag in _RE_INPUT_TAG.findall(_norm_text(body)):
        name_m = _RE_INPUT_NAME.search(tag)
        if not name_m or not name_m.group(1):
            continue
        value_m = _RE_INPUT_VALUE.search(tag)
        fields.append((name_m.group(1), value_m.group(1) if value_m else ""))
    return fields


def contains_pattern(body: Optional[str], pattern: Optional[str]) -> bool:
    """
    Success/maintenance check: case-insensitive literal substring, an empty pattern never matches.

    Characters such as `$`, `|` or `.` in a pattern are plain text, not regex syntax.
    """
    return contains_text(body, pattern)


def contains_text(body: Optional[str], needle: Optional[str]) -> bool:
    if not needle:
        return False
    return needle.lower() in _norm_text(body).lower()
