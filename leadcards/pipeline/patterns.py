"""
Pattern Library - declarative selector cascades and regex cascades

Pure data. Every cascade is an ordered tuple of SelectorPattern; the
interpretation (first hit wins, or union of hits) lives in the matcher
functions of document.py. Variant-specific cascades are bundled per markup
family in variants.py; the patterns shared by both families live here.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True)
class SelectorPattern:
    """A CSS selector paired with the output field it serves."""
    selector: str
    field: str


Cascade = Tuple[SelectorPattern, ...]


def cascade(field: str, *selectors: str) -> Cascade:
    """Build an ordered cascade of patterns for one field."""
    return tuple(SelectorPattern(selector=s, field=field) for s in selectors)


# -------------------------
# Structural hints used by the locator and the classifier
# -------------------------
# Attribute written on elements by the live session before the snapshot
RENDERED_HEIGHT_ATTR = "data-rendered-height"
RENDERED_WIDTH_ATTR = "data-rendered-width"

PROFILE_IMAGE_SELECTOR = 'img[class*="profile"]'
TITLE_HINT_SELECTOR = '[class*="subtitle"], [class*="headline"], [class*="title"]'
LOADING_INDICATOR_SELECTOR = '.loading, .spinner, [class*="loader"], [class*="loading"]'
LOGIN_WALL_SELECTOR = 'a[href*="login"], form[action*="login"], form[action*="checkpoint"]'

CARD_TAGS = frozenset({"li"})
CARD_CLASS_TOKENS = frozenset({
    "entity-result",
    "artdeco-entity-lockup",
    "search-result",
    "reusable-search__result-container",
    "artdeco-card",
    "result-lockup",
})

# Block ancestors accepted when mapping a bare profile link to its card
BLOCK_TAGS = ("div", "article", "section")

GENERIC_ITEM_MIN_HEIGHT = 60
CONNECTION_MENTION = "connection"

# -------------------------
# Name
# -------------------------
# "View Jane Doe's profile" -> "Jane Doe"
VIEW_PROFILE_RE = re.compile(r"View |['’]s profile")
VIEW_PROFILE_WRAPPER_RE = re.compile(r"View .*['’]s profile")
VIEW_PROFILE_PHRASE = "View profile"
MIN_NAME_LENGTH = 3

# -------------------------
# Title / company
# -------------------------
CURRENT_MARKER = "Current:"

# Elements searched, most specific first, for the text carrying CURRENT_MARKER
CURRENT_ROLE_SCOPE: Cascade = cascade(
    "title",
    ".entity-result__summary",
    ".profile-info",
    ".current-position",
    "p",
    "div",
)


@dataclass(frozen=True)
class RolePattern:
    """One stage of the "Current:" regex cascade.

    kind:
      literal   - fixed title/company when the regex matches
      basic     - groups (title, company)
      subtitle  - groups (title, subtitle, company); title becomes "title: subtitle"
      keyword   - groups (title, company), only tried when `keyword` is present
      remainder - group (rest); split on " at " when present
      anchor    - `keyword` anywhere; company scanned after the next " at "
    """
    label: str
    kind: str
    regex: Optional[re.Pattern[str]] = None
    keyword: Optional[str] = None
    title: str = ""
    company: str = ""


ROLE_KEYWORD = "Marketing Manager"
ANCHOR_COMPANY_WINDOW = 30
ANCHOR_COMPANY_RE = re.compile(r"^([^.,;:\n\r]+)")

CURRENT_ROLE_PATTERNS: Tuple[RolePattern, ...] = (
    # Literal example string; see DESIGN.md open questions before generalizing
    RolePattern(
        label="literal",
        kind="literal",
        regex=re.compile(
            r"Current:\s*Senior\s+Marketing\s+Manager:\s*Product\s+Marketing\s*&\s*Sales\s+Enablement\s+at\s+Intuit",
            re.I,
        ),
        title="Senior Marketing Manager: Product Marketing & Sales Enablement",
        company="Intuit",
    ),
    RolePattern(
        label="basic",
        kind="basic",
        regex=re.compile(r"Current:\s*([^:]*?)\s+at\s+(.*?)(?:\s*$|\s*[•|])", re.I),
    ),
    RolePattern(
        label="subtitle",
        kind="subtitle",
        regex=re.compile(r"Current:\s*(.*?):\s*(.*?)\s+at\s+(.*?)(?:\s*$|\s*[•|])", re.I),
    ),
    RolePattern(
        label="keyword",
        kind="keyword",
        keyword=ROLE_KEYWORD,
        regex=re.compile(
            r"Current:.*?((?:Senior\s+)?Marketing\s+Manager(?:[^a-z]+[A-Za-z]+)?).*?\s+at\s+([A-Za-z0-9\s&]+)",
            re.I,
        ),
    ),
    RolePattern(
        label="remainder",
        kind="remainder",
        regex=re.compile(r"Current:\s*(.*?)(?:\s*$|\s*[•|])", re.I),
    ),
    RolePattern(label="anchor", kind="anchor", keyword=ROLE_KEYWORD),
)

# Headline "Title <delim> Company"; first delimiter present wins
HEADLINE_DELIMITERS: Tuple[str, ...] = (" at ", " @ ", " chez ", " - ", ": ")
# Direct title selector split
TITLE_COMPANY_DELIMITER = " at "

# -------------------------
# Location
# -------------------------
LOCATION_LABEL = "Location:"
LOCATION_SCAN_SELECTOR = "p, div"
LOCATION_SHAPE_RE = re.compile(r"^[A-Za-z\s]+, [A-Za-z\s]+$")
LOCATION_MAX_LENGTH = 50
COUNTRY_RE = re.compile(
    r"^(Canada|Australia|England|France|Germany|Japan|Brazil|Mexico|Israel|India|China|Russia)$"
)

# -------------------------
# Industry
# -------------------------
INDUSTRY_WORD = "industry"
INDUSTRY_SHAPE_RE = re.compile(r"^[A-Z][a-z]+( & [A-Z][a-z]+)?$")

# -------------------------
# Connection degree
# -------------------------
BADGE_PATTERNS: Cascade = cascade(
    "connection_degree",
    ".result-lockup__badge-icon",
    ".artdeco-entity-lockup__badge",
    ".entity-result__badge",
    ".search-result__connection-indicator",
    ".distance-badge",
    "span[data-test-distance-badge]",
    ".message-link__badge",
)

# (class substrings, label), checked before the badge text
DEGREE_CLASS_HINTS: Tuple[Tuple[Tuple[str, ...], str], ...] = (
    (("degree-1", "first-degree"), "1st"),
    (("degree-2", "second-degree"), "2nd"),
    (("degree-3", "third-degree"), "3rd"),
)
DEGREE_TEXT_TOKENS: Tuple[Tuple[Tuple[str, ...], str], ...] = (
    (("1st",), "1st"),
    (("2nd",), "2nd"),
    (("3rd",), "3rd"),
)
DEGREE_ARIA_TOKENS: Tuple[Tuple[Tuple[str, ...], str], ...] = (
    (("1st", "1 st"), "1st"),
    (("2nd", "2 nd"), "2nd"),
    (("3rd", "3 rd"), "3rd"),
)
ARIA_LABEL_SELECTOR = "[aria-label]"

# -------------------------
# Shared connections
# -------------------------
SHARED_PATTERNS: Cascade = cascade(
    "shared_connections",
    ".search-result__social-proof",
    ".result-lockup__misc-list",
    ".artdeco-entity-lockup__metadata",
    ".entity-result__simple-insight-text",
    'span[data-control-name="connection_degree_pill"]',
    ".shared-connections",
    ".member-insights",
)
SHARED_MARKER = "shared"
SHARED_CONNECTIONS_RE = re.compile(r"(\d+) shared connections?")

# -------------------------
# Paging
# -------------------------
RESULT_COUNT_RE = re.compile(r"of ([\d,]+) results|About ([\d,]+) results")
PAGE_PARAM_RE = re.compile(r"(?<=[?&])page=\d+")
