from __future__ import annotations

import sys
from collections import Counter
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from .variants import VariantProfile


@dataclass
class ExtractionContext:
    """Per-call state threaded through locator -> classifier -> extractors -> assembler.

    Created by the caller for one extraction and discarded afterwards; nothing
    here is shared between calls.
    """
    profile: VariantProfile
    base_url: str = ""
    verbose: bool = False
    strategy_hits: Counter = field(default_factory=Counter)
    strategy_used: Optional[str] = None
    container_selector: Optional[str] = None
    scores: List[Tuple[int, int]] = field(default_factory=list)  # (node key, score)
    field_errors: Counter = field(default_factory=Counter)
    candidate_errors: int = 0

    def log(self, msg: str) -> None:
        if self.verbose:
            print(msg)

    def warn(self, msg: str) -> None:
        print(msg, file=sys.stderr)

    def stats(self) -> dict:
        return {
            "strategy": self.strategy_used,
            "container": self.container_selector,
            "strategy_hits": dict(self.strategy_hits),
            "scored": len(self.scores),
            "field_errors": dict(self.field_errors),
            "candidate_errors": self.candidate_errors,
        }
