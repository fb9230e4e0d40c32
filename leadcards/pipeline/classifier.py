"""
Candidate Classifier - score how much a node looks like a person card

Each structural feature contributes a fixed, non-negative weight, so turning
on any extra feature can never lower the score. A candidate is kept when its
score reaches the variant threshold (primary 3, secondary 4).
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Dict, List, Tuple

from ..schemas import Variant
from .context import ExtractionContext
from .document import DocumentNode, first_node
from .patterns import CARD_CLASS_TOKENS, CARD_TAGS, TITLE_HINT_SELECTOR
from .variants import VariantProfile


WEIGHTS: Dict[str, int] = {
    "profile_link": 3,
    "has_text": 1,
    "title_element": 2,
    "card_structure": 2,
    "reasonable_size": 1,
    "has_image": 1,
    "variant_marker": 2,  # secondary only
}

MIN_TEXT_LENGTH = 20
MIN_HEIGHT = 40
MIN_WIDTH = 50


@dataclass(frozen=True)
class CandidateFeatures:
    profile_link: bool = False
    has_text: bool = False
    title_element: bool = False
    card_structure: bool = False
    reasonable_size: bool = False
    has_image: bool = False
    variant_marker: bool = False


@dataclass(frozen=True)
class ScoredCandidate:
    node: DocumentNode
    score: int
    features: CandidateFeatures


def is_card_structure(node: DocumentNode) -> bool:
    return node.tag in CARD_TAGS or bool(node.classes & CARD_CLASS_TOKENS)


def candidate_features(node: DocumentNode, profile: VariantProfile) -> CandidateFeatures:
    marker = False
    if profile.variant is Variant.SECONDARY and profile.marker_patterns:
        marker = first_node(node, profile.marker_patterns) is not None
    return CandidateFeatures(
        profile_link=node.has(profile.profile_link_selector),
        has_text=len(node.text) > MIN_TEXT_LENGTH,
        title_element=node.has(TITLE_HINT_SELECTOR),
        card_structure=is_card_structure(node),
        reasonable_size=node.height > MIN_HEIGHT and node.width > MIN_WIDTH,
        has_image=node.has("img"),
        variant_marker=marker,
    )


def score_features(features: CandidateFeatures, variant: Variant) -> int:
    score = 0
    for name, on in asdict(features).items():
        if not on:
            continue
        if name == "variant_marker" and variant is not Variant.SECONDARY:
            continue
        score += WEIGHTS[name]
    return score


def score_candidate(node: DocumentNode, profile: VariantProfile) -> ScoredCandidate:
    features = candidate_features(node, profile)
    return ScoredCandidate(node=node, score=score_features(features, profile.variant), features=features)


def classify_candidates(nodes: List[DocumentNode], ctx: ExtractionContext) -> List[ScoredCandidate]:
    """Score every candidate and keep those at or above the variant threshold."""
    kept: List[ScoredCandidate] = []
    threshold = ctx.profile.score_threshold
    for node in nodes:
        try:
            sc = score_candidate(node, ctx.profile)
        except Exception as e:
            ctx.warn(f"Error scoring candidate {node!r}: {e}")
            continue
        ctx.scores.append((node.key, sc.score))
        f = sc.features
        ctx.log(
            f"Card score: {sc.score}/{max_score(ctx.profile.variant)}, hasProfileLink: {f.profile_link}, "
            f"hasTitleElement: {f.title_element}, hasCardStructure: {f.card_structure}"
        )
        if sc.score >= threshold:
            kept.append(sc)
    ctx.log(f"Filtered down to {len(kept)} likely profile cards (threshold {threshold})")
    return kept


def max_score(variant: Variant) -> int:
    total = sum(WEIGHTS.values())
    if variant is not Variant.SECONDARY:
        total -= WEIGHTS["variant_marker"]
    return total


def feature_names() -> Tuple[str, ...]:
    return tuple(WEIGHTS)
