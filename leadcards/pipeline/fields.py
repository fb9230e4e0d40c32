"""
Field Extractors - one fallback cascade per output field

Every extractor takes a candidate card and returns a plain string ("" when
nothing matched). Within a field, the first cascade stage that produces a
non-empty value wins; a value is never stitched together from two stages.
Title and company are resolved together because they usually share a line.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple
from urllib.parse import urljoin

from .context import ExtractionContext
from .document import DocumentNode, all_matches, first_match, first_node
from .patterns import (
    ANCHOR_COMPANY_RE,
    ANCHOR_COMPANY_WINDOW,
    ARIA_LABEL_SELECTOR,
    BADGE_PATTERNS,
    COUNTRY_RE,
    CURRENT_MARKER,
    CURRENT_ROLE_PATTERNS,
    CURRENT_ROLE_SCOPE,
    DEGREE_ARIA_TOKENS,
    DEGREE_CLASS_HINTS,
    DEGREE_TEXT_TOKENS,
    HEADLINE_DELIMITERS,
    INDUSTRY_SHAPE_RE,
    INDUSTRY_WORD,
    LOCATION_LABEL,
    LOCATION_MAX_LENGTH,
    LOCATION_SCAN_SELECTOR,
    LOCATION_SHAPE_RE,
    MIN_NAME_LENGTH,
    SHARED_CONNECTIONS_RE,
    SHARED_MARKER,
    SHARED_PATTERNS,
    TITLE_COMPANY_DELIMITER,
    VIEW_PROFILE_PHRASE,
    VIEW_PROFILE_RE,
    VIEW_PROFILE_WRAPPER_RE,
    RolePattern,
)


# -------------------------
# Name / profile link
# -------------------------
def strip_view_profile(text: str) -> str:
    """'View Jane Doe's profile' -> 'Jane Doe'."""
    t = (text or "").strip()
    if "View " in t and VIEW_PROFILE_WRAPPER_RE.search(t):
        t = VIEW_PROFILE_RE.sub("", t).strip()
    return t


def extract_name(card: DocumentNode, ctx: ExtractionContext) -> str:
    m = first_match(card, ctx.profile.name_patterns)
    if m is not None:
        name = strip_view_profile(m.text)
        if name:
            return name

    # Deeper search: any profile link, its own text or a nested span
    for link in card.css(ctx.profile.profile_link_selector):
        text = link.text
        if text and VIEW_PROFILE_PHRASE not in text and len(text) > MIN_NAME_LENGTH:
            return text
        for span in link.css("span"):
            st = span.text
            if st and len(st) > MIN_NAME_LENGTH:
                return st
    return ""


def extract_profile_url(card: DocumentNode, ctx: ExtractionContext) -> str:
    for link in card.css(ctx.profile.profile_link_selector):
        href = link.attr("href").strip()
        if href:
            return urljoin(ctx.base_url, href) if ctx.base_url else href
    return ""


# -------------------------
# Title / company
# -------------------------
@dataclass(frozen=True)
class RoleResult:
    title: str = ""
    company: str = ""
    title_source: Optional[str] = None
    company_source: Optional[str] = None


def split_on_delimiters(text: str, delimiters: Tuple[str, ...] = HEADLINE_DELIMITERS) -> Optional[Tuple[str, str]]:
    """Split on the first delimiter (in priority order) present in text."""
    for delim in delimiters:
        if delim in text:
            left, _, right = text.partition(delim)
            return left.strip(), right.strip()
    return None


def current_role_text(card: DocumentNode) -> str:
    """Text of the most specific sub-node carrying the "Current:" marker."""
    for pattern in CURRENT_ROLE_SCOPE:
        hits = [n for n in card.css(pattern.selector) if CURRENT_MARKER in n.text]
        if hits:
            return min(hits, key=lambda n: len(n.text)).text
    return card.text


def _apply_role_pattern(rp: RolePattern, text: str) -> Tuple[str, str]:
    if rp.kind == "literal":
        if rp.regex is not None and rp.regex.search(text):
            return rp.title, rp.company
        return "", ""
    if rp.kind in ("keyword", "anchor") and rp.keyword and rp.keyword not in text:
        return "", ""
    if rp.kind == "anchor":
        company = ""
        at = text.find(" at ")
        if at > -1:
            window = text[at + 4: at + 4 + ANCHOR_COMPANY_WINDOW]
            m = ANCHOR_COMPANY_RE.match(window)
            if m:
                company = m.group(1).strip()
        return rp.keyword or "", company
    m = rp.regex.search(text) if rp.regex is not None else None
    if not m:
        return "", ""
    if rp.kind == "subtitle":
        head, sub, company = (g.strip() for g in m.groups())
        return (f"{head}: {sub}" if sub else head), company
    if rp.kind == "remainder":
        rest = m.group(1).strip()
        split = split_on_delimiters(rest, (TITLE_COMPANY_DELIMITER,))
        if split:
            return split
        return rest, ""
    # basic / keyword
    return m.group(1).strip(), m.group(2).strip()


def current_role_info(card: DocumentNode, ctx: ExtractionContext) -> RoleResult:
    """Stage 1: "Current: <title> at <company>" and its variations."""
    if CURRENT_MARKER not in card.text:
        return RoleResult()
    text = current_role_text(card)
    ctx.log(f"Text to analyze for Current info: {text[:200]}")
    for rp in CURRENT_ROLE_PATTERNS:
        title, company = _apply_role_pattern(rp, text)
        if title:
            ctx.log(f"current:{rp.label} -> title={title!r} company={company!r}")
            src = f"current:{rp.label}"
            return RoleResult(title=title, company=company, title_source=src, company_source=src if company else None)
    return RoleResult()


def headline_info(card: DocumentNode, ctx: ExtractionContext) -> RoleResult:
    """Stage 2: headline text split on the first delimiter present."""
    title = ""
    company = ""
    company_source: Optional[str] = None
    for pattern in ctx.profile.headline_patterns:
        node = card.css_first(pattern.selector)
        if node is None or not node.text:
            continue
        text = node.text
        split = split_on_delimiters(text)
        if split and not title:
            src = f"headline:{pattern.selector}"
            return RoleResult(title=split[0], company=split[1], title_source=src, company_source=src)
        if split and split[1]:
            company = split[1]
            company_source = f"headline:{pattern.selector}"
            break
        if not title:
            title = text
    if title and not company:
        m = first_match(card, ctx.profile.headline_company_patterns)
        if m is not None:
            company = m.text
            company_source = f"headline-company:{m.pattern.selector}"
    return RoleResult(
        title=title,
        company=company,
        title_source="headline" if title else None,
        company_source=company_source if company else None,
    )


def direct_role_info(card: DocumentNode, ctx: ExtractionContext, *, need_title: bool = True) -> RoleResult:
    """Stage 3: dedicated title / company cascades."""
    title = ""
    company = ""
    title_source = company_source = None
    if need_title:
        m = first_match(card, ctx.profile.title_patterns)
        if m is not None:
            raw = m.text
            title_source = f"title:{m.pattern.selector}"
            split = split_on_delimiters(raw, (TITLE_COMPANY_DELIMITER,))
            if split:
                title, company = split
                company_source = title_source if company else None
            else:
                title = raw
    if not company:
        m = first_match(card, ctx.profile.company_patterns)
        if m is not None:
            company = m.text
            company_source = f"company:{m.pattern.selector}"
    return RoleResult(title=title, company=company, title_source=title_source, company_source=company_source)


def resolve_title_company(card: DocumentNode, ctx: ExtractionContext) -> RoleResult:
    """Run the stages in order; each field keeps the first stage that filled it."""
    title = company = ""
    title_source = company_source = None
    stages = (current_role_info, headline_info)
    for stage in stages:
        res = stage(card, ctx)
        if not title and res.title:
            title, title_source = res.title, res.title_source
        if not company and res.company:
            company, company_source = res.company, res.company_source
        if title and company:
            return RoleResult(title, company, title_source, company_source)
    res = direct_role_info(card, ctx, need_title=not title)
    if not title and res.title:
        title, title_source = res.title, res.title_source
    if not company and res.company:
        company, company_source = res.company, res.company_source
    return RoleResult(title, company, title_source, company_source)


# -------------------------
# Location / industry
# -------------------------
def extract_location(card: DocumentNode, ctx: ExtractionContext) -> str:
    m = first_match(card, ctx.profile.location_patterns)
    if m is not None:
        loc = m.text
        if loc.startswith(LOCATION_LABEL):
            loc = loc[len(LOCATION_LABEL):].strip()
        if loc:
            return loc

    # Shape-based fallback: "City, Region" or a bare country name
    for node in card.css(LOCATION_SCAN_SELECTOR):
        text = node.text
        if LOCATION_SHAPE_RE.match(text) and len(text) < LOCATION_MAX_LENGTH:
            return text
        if COUNTRY_RE.match(text):
            return text
    return ""


def extract_industry(card: DocumentNode, ctx: ExtractionContext) -> str:
    for m in all_matches(card, ctx.profile.industry_patterns):
        text = m.text
        if INDUSTRY_WORD in text or INDUSTRY_SHAPE_RE.match(text):
            return text
    return ""


# -------------------------
# Connection degree / shared connections
# -------------------------
def _classify_tokens(text: str, table) -> str:
    for tokens, label in table:
        if any(tok in text for tok in tokens):
            return label
    return ""


def extract_connection_degree(card: DocumentNode, ctx: Optional[ExtractionContext] = None) -> str:
    """Always one of '', '1st', '2nd', '3rd'."""
    m = first_node(card, BADGE_PATTERNS)
    if m is not None:
        return (
            _classify_tokens(m.node.class_attr, DEGREE_CLASS_HINTS)
            or _classify_tokens(m.node.text, DEGREE_TEXT_TOKENS)
        )
    for node in card.css(ARIA_LABEL_SELECTOR):
        label = node.attr("aria-label")
        if not label:
            continue
        degree = _classify_tokens(label, DEGREE_ARIA_TOKENS)
        if degree:
            return degree
    return ""


def extract_shared_connections(card: DocumentNode, ctx: Optional[ExtractionContext] = None) -> str:
    m = first_match(card, SHARED_PATTERNS, accept=lambda n: SHARED_MARKER in n.text)
    if m is not None:
        return m.text
    found = SHARED_CONNECTIONS_RE.search(card.text)
    if found:
        return f"{found.group(1)} shared connections"
    return ""
