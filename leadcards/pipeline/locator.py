"""
Candidate Locator - find the nodes that are likely one person card each

Strategies run in a fixed order and stop at the first that yields anything:

  1. container-scoped item patterns (union of every pattern with hits)
  2. generic list-item heuristic inside the container
  3. global item patterns over the whole document
  4. generic list-item heuristic over the whole document
  5. link-derived cards (nearest li / block ancestor of each profile link)

The result is de-duplicated by node identity in first-seen order, so the
output order follows strategy order, not on-page order.
"""

from __future__ import annotations

from typing import List, Optional

from .context import ExtractionContext
from .document import DocumentNode, all_matches, first_node, unique_nodes
from .patterns import (
    BLOCK_TAGS,
    CONNECTION_MENTION,
    GENERIC_ITEM_MIN_HEIGHT,
    PROFILE_IMAGE_SELECTOR,
    Cascade,
)


def find_results_container(root: DocumentNode, ctx: ExtractionContext) -> Optional[DocumentNode]:
    m = first_node(root, ctx.profile.container_patterns)
    if m is None:
        return None
    ctx.container_selector = m.pattern.selector
    ctx.log(f"Found search results container using selector: {m.pattern.selector}")
    return m.node


def _union_items(scope: DocumentNode, patterns: Cascade, ctx: ExtractionContext, strategy: str) -> List[DocumentNode]:
    found: List[DocumentNode] = []
    for m in all_matches(scope, patterns):
        found.append(m.node)
    ctx.strategy_hits[strategy] += len(found)
    if found:
        ctx.log(f"{strategy}: {len(found)} nodes before deduplication")
    return unique_nodes(found)


def looks_like_list_result(node: DocumentNode, ctx: ExtractionContext) -> bool:
    """Generic heuristic for an unlabelled list item."""
    return (
        node.has(ctx.profile.profile_link_selector)
        or node.has(PROFILE_IMAGE_SELECTOR)
        or CONNECTION_MENTION in node.text
        or node.height > GENERIC_ITEM_MIN_HEIGHT
    )


def _generic_items(scope: DocumentNode, ctx: ExtractionContext, strategy: str) -> List[DocumentNode]:
    items = [li for li in scope.css("li") if looks_like_list_result(li, ctx)]
    ctx.strategy_hits[strategy] += len(items)
    ctx.log(f"{strategy}: {len(items)} potential cards")
    return unique_nodes(items)


def nearest_card_ancestor(link: DocumentNode) -> Optional[DocumentNode]:
    """Closest li ancestor, else the closest block ancestor."""
    block: Optional[DocumentNode] = None
    for anc in link.ancestors():
        if anc.tag == "li":
            return anc
        if block is None and anc.tag in BLOCK_TAGS:
            block = anc
    return block


def _link_derived(root: DocumentNode, ctx: ExtractionContext) -> List[DocumentNode]:
    cards: List[DocumentNode] = []
    links = root.css(ctx.profile.profile_link_selector)
    for link in links:
        anc = nearest_card_ancestor(link)
        if anc is not None:
            cards.append(anc)
    ctx.strategy_hits["link_derived"] += len(cards)
    ctx.log(f"link_derived: {len(links)} profile links -> {len(cards)} ancestors")
    return unique_nodes(cards)


def locate_candidates(root: DocumentNode, ctx: ExtractionContext) -> List[DocumentNode]:
    """Ordered, duplicate-free candidate nodes for this document and variant."""
    profile = ctx.profile
    container = find_results_container(root, ctx)

    plan = []
    if container is not None:
        plan.append(("container_items", lambda: _union_items(container, profile.container_item_patterns, ctx, "container_items")))
        plan.append(("container_generic", lambda: _generic_items(container, ctx, "container_generic")))
    plan.append(("global_items", lambda: _union_items(root, profile.global_item_patterns, ctx, "global_items")))
    plan.append(("generic", lambda: _generic_items(root, ctx, "generic")))
    plan.append(("link_derived", lambda: _link_derived(root, ctx)))

    for name, strategy in plan:
        candidates = strategy()
        if candidates:
            ctx.strategy_used = name
            ctx.log(f"{len(candidates)} unique candidates via {name}")
            return candidates
    ctx.log("No candidate cards found")
    return []
