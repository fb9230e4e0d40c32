from __future__ import annotations

import math
import re
from typing import Optional

from .document import DocumentNode
from .patterns import PAGE_PARAM_RE, RESULT_COUNT_RE
from .variants import VariantProfile


_LEADING_INT_RE = re.compile(r"^\s*(\d+)")


def _leading_int(text: str) -> Optional[int]:
    m = _LEADING_INT_RE.match(text or "")
    return int(m.group(1)) if m else None


def pagination_last_page(root: DocumentNode, profile: VariantProfile) -> Optional[int]:
    """Number in the last item of the first pagination control that has one."""
    for pattern in profile.pagination_patterns:
        control = root.css_first(pattern.selector)
        if control is None:
            continue
        items = control.css("li")
        if not items:
            continue
        n = _leading_int(items[-1].text)
        if n is not None and n > 0:
            return n
    return None


def result_count(root: DocumentNode, profile: VariantProfile) -> Optional[int]:
    """Total result count from an "of N results" / "About N results" line."""
    for pattern in profile.result_count_patterns:
        node = root.css_first(pattern.selector)
        if node is None:
            continue
        m = RESULT_COUNT_RE.search(node.text)
        if m:
            raw = m.group(1) or m.group(2)
            return int(raw.replace(",", ""))
    return None


def total_pages(root: DocumentNode, profile: VariantProfile) -> int:
    """Pagination control first, then result count / page size, else 1."""
    last = pagination_last_page(root, profile)
    if last is not None:
        return last
    count = result_count(root, profile)
    if count:
        return max(1, math.ceil(count / profile.page_size))
    return 1


def page_url(current_url: str, page_number: int) -> str:
    """Rewrite the page= query parameter, appending one when absent."""
    if page_number < 1:
        raise ValueError(f"page number must be >= 1, got {page_number}")
    if PAGE_PARAM_RE.search(current_url):
        return PAGE_PARAM_RE.sub(f"page={page_number}", current_url, count=1)
    base, sep, fragment = current_url.partition("#")
    joiner = "&" if "?" in base else "?"
    return f"{base}{joiner}page={page_number}{sep}{fragment}"
