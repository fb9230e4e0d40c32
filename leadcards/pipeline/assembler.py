"""
Record Assembler - candidates in, records out

Runs the whole extraction for one parsed page:
locate -> classify -> per-field extraction -> records.

Errors are contained at two levels: a failing field extractor only empties
that field, and a failing candidate is skipped without stopping the page.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from ..schemas import Record, Variant
from .classifier import ScoredCandidate, classify_candidates
from .context import ExtractionContext
from .document import DocumentNode
from .fields import (
    RoleResult,
    extract_connection_degree,
    extract_industry,
    extract_location,
    extract_name,
    extract_profile_url,
    extract_shared_connections,
    resolve_title_company,
)
from .locator import locate_candidates
from .variants import VariantProfile, profile_for


FieldExtractor = Callable[[DocumentNode, ExtractionContext], str]

# Record field -> extractor; title/company are handled jointly below
FIELD_EXTRACTORS: Dict[str, FieldExtractor] = {
    "name": extract_name,
    "profile_url": extract_profile_url,
    "location": extract_location,
    "industry": extract_industry,
    "connection_degree": extract_connection_degree,
    "shared_connections": extract_shared_connections,
}


@dataclass
class ExtractionResult:
    records: List[Record] = field(default_factory=list)
    candidates: int = 0
    accepted: int = 0
    context: Optional[ExtractionContext] = None


def _safe_field(name: str, fn: FieldExtractor, card: DocumentNode, ctx: ExtractionContext) -> str:
    try:
        return fn(card, ctx) or ""
    except Exception as e:
        ctx.field_errors[name] += 1
        ctx.warn(f"Error extracting {name}: {e}")
        return ""


def _safe_role(card: DocumentNode, ctx: ExtractionContext) -> RoleResult:
    try:
        return resolve_title_company(card, ctx)
    except Exception as e:
        ctx.field_errors["title_company"] += 1
        ctx.warn(f"Error extracting title/company: {e}")
        return RoleResult()


def assemble_record(card: DocumentNode, ctx: ExtractionContext) -> Record:
    values = {name: _safe_field(name, fn, card, ctx) for name, fn in FIELD_EXTRACTORS.items()}
    role = _safe_role(card, ctx)
    values["title"] = role.title
    values["company"] = role.company
    return Record(**values)


def assemble_records(candidates: List[ScoredCandidate], ctx: ExtractionContext) -> List[Record]:
    """Build records in candidate order, keeping only identifiable ones."""
    records: List[Record] = []
    for cand in candidates:
        try:
            record = assemble_record(cand.node, ctx)
        except Exception as e:
            ctx.candidate_errors += 1
            ctx.warn(f"Error processing lead card: {e}")
            continue
        if record.is_identifiable():
            ctx.log(f"Extracted lead: {record.name!r} {record.profile_url!r}")
            records.append(record)
        else:
            ctx.log("Skipping lead with no name or profile URL")
    return records


def extract_records(
    root: DocumentNode,
    variant: Variant | str | VariantProfile,
    *,
    base_url: str = "",
    verbose: bool = False,
) -> ExtractionResult:
    """Full page extraction. Owns its ExtractionContext."""
    profile = variant if isinstance(variant, VariantProfile) else profile_for(variant)
    ctx = ExtractionContext(profile=profile, base_url=base_url, verbose=verbose)
    nodes = locate_candidates(root, ctx)
    accepted = classify_candidates(nodes, ctx)
    records = assemble_records(accepted, ctx)
    ctx.log(f"Successfully extracted {len(records)} leads ({profile.variant.value})")
    return ExtractionResult(records=records, candidates=len(nodes), accepted=len(accepted), context=ctx)
