"""
Document adapter - read-only view over a parsed results page

Wraps selectolax nodes so the locator, classifier and extractors see one
small surface (tag, class tokens, attributes, text, children, rendered size)
and so every cascade is interpreted by the same two matcher functions.
"""

from __future__ import annotations

import functools
from dataclasses import dataclass
from typing import Callable, Dict, FrozenSet, Iterable, Iterator, List, Optional

from selectolax.parser import HTMLParser, Node

from .patterns import Cascade, RENDERED_HEIGHT_ATTR, RENDERED_WIDTH_ATTR, SelectorPattern


@dataclass(frozen=True)
class PageSnapshot:
    """Serialized page state handed from a session to the extraction pipeline."""
    html: str
    url: str
    scroll_top: float = 0.0
    scroll_height: float = 0.0
    client_height: float = 0.0

    @property
    def scroll_percent(self) -> int:
        span = self.scroll_height - self.client_height
        if span <= 0:
            return 0
        return int(round(self.scroll_top / span * 100))


@functools.lru_cache(maxsize=256)
def _report_bad_selector(selector: str, error: str) -> None:
    print(f"selector skipped ({selector!r}): {error}")


def _collapse(text: str) -> str:
    return " ".join(text.split())


def _to_float(v: Optional[str]) -> float:
    try:
        return float(v) if v is not None else 0.0
    except (TypeError, ValueError):
        return 0.0


class DocumentNode:
    """Borrowed handle on one element of the snapshot. Never mutates the tree."""

    __slots__ = ("_node",)

    def __init__(self, node: Node) -> None:
        self._node = node

    def __repr__(self) -> str:
        cls = " ".join(sorted(self.classes))
        return f"<DocumentNode {self.tag}{'.' + cls if cls else ''}>"

    def __eq__(self, other: object) -> bool:
        return isinstance(other, DocumentNode) and other.key == self.key

    def __hash__(self) -> int:
        return hash(self.key)

    @property
    def key(self) -> int:
        """Identity of the underlying element (stable across wrapper objects)."""
        return self._node.mem_id

    @property
    def tag(self) -> str:
        return (self._node.tag or "").lower()

    @property
    def attrs(self) -> Dict[str, str]:
        return {k: (v or "") for k, v in (self._node.attributes or {}).items()}

    def attr(self, name: str) -> str:
        return self.attrs.get(name, "")

    @property
    def class_attr(self) -> str:
        return self.attr("class")

    @property
    def classes(self) -> FrozenSet[str]:
        return frozenset(self.class_attr.split())

    @property
    def text(self) -> str:
        """Deep text content with whitespace runs collapsed."""
        return _collapse(self._node.text(deep=True, separator="") or "")

    @property
    def height(self) -> float:
        return _to_float(self._node.attributes.get(RENDERED_HEIGHT_ATTR))

    @property
    def width(self) -> float:
        return _to_float(self._node.attributes.get(RENDERED_WIDTH_ATTR))

    @property
    def parent(self) -> Optional["DocumentNode"]:
        p = self._node.parent
        return DocumentNode(p) if p is not None else None

    @property
    def children(self) -> List["DocumentNode"]:
        return [DocumentNode(ch) for ch in self._node.iter(include_text=False)]

    def ancestors(self) -> Iterator["DocumentNode"]:
        cur = self.parent
        while cur is not None:
            yield cur
            cur = cur.parent

    def css(self, selector: str) -> List["DocumentNode"]:
        """Descendants matching `selector` in document order (never self)."""
        try:
            found = self._node.css(selector)
        except Exception as e:
            _report_bad_selector(selector, str(e))
            return []
        own = self.key
        return [DocumentNode(n) for n in found if n.mem_id != own]

    def css_first(self, selector: str) -> Optional["DocumentNode"]:
        hits = self.css(selector)
        return hits[0] if hits else None

    def has(self, selector: str) -> bool:
        return self.css_first(selector) is not None


def parse_snapshot(snapshot: PageSnapshot) -> DocumentNode:
    """Parse snapshot HTML and return the document root."""
    return parse_html(snapshot.html)


def parse_html(html: str) -> DocumentNode:
    tree = HTMLParser(html or "")
    root = tree.root
    if root is None:
        # Empty input still yields an (empty) document
        root = HTMLParser("<html><body></body></html>").root
    return DocumentNode(root)


# -------------------------
# Cascade interpretation
# -------------------------
@dataclass(frozen=True)
class Match:
    pattern: SelectorPattern
    node: DocumentNode

    @property
    def text(self) -> str:
        return self.node.text


def first_match(
    scope: DocumentNode,
    patterns: Cascade,
    accept: Optional[Callable[[DocumentNode], bool]] = None,
) -> Optional[Match]:
    """First pattern (in order) whose first hit passes `accept`.

    Without `accept`, a hit counts when its text is non-empty.
    """
    check = accept or (lambda n: bool(n.text))
    for pattern in patterns:
        node = scope.css_first(pattern.selector)
        if node is not None and check(node):
            return Match(pattern=pattern, node=node)
    return None


def first_node(scope: DocumentNode, patterns: Cascade) -> Optional[Match]:
    """First pattern with any hit, regardless of its text."""
    return first_match(scope, patterns, accept=lambda n: True)


def all_matches(scope: DocumentNode, patterns: Cascade) -> Iterator[Match]:
    """Every hit of every pattern, pattern order first, then document order."""
    for pattern in patterns:
        for node in scope.css(pattern.selector):
            yield Match(pattern=pattern, node=node)


def unique_nodes(nodes: Iterable[DocumentNode]) -> List[DocumentNode]:
    """Insertion-ordered de-duplication by node identity."""
    seen = set()
    out: List[DocumentNode] = []
    for n in nodes:
        if n.key in seen:
            continue
        seen.add(n.key)
        out.append(n)
    return out
