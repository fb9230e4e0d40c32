"""
Request handlers - scrapePage / getTotalPages / navigateToPage

One ScrapeService wraps one page session (a live Playwright tab, or a static
HTML session) and answers the three request kinds. Every request produces
exactly one response envelope; any failure escaping the pipeline becomes
{success: false, error, ...} instead of an exception.
"""

from __future__ import annotations

import time
from typing import Any, Dict, Optional, Protocol

from ..config import PumpConfig
from ..ops_logger import OpsLogger
from ..schemas import NavigateResponse, ScrapeResponse, TotalPagesResponse, Variant
from .assembler import extract_records
from .diagnostics import debug_snapshot
from .document import PageSnapshot, parse_snapshot
from .paging import page_url, total_pages
from .pump import LazyLoadPump, PageProbe, PumpOutcome
from .variants import VariantProfile, profile_for


class PageSession(Protocol):
    def current_url(self) -> str: ...

    def goto(self, url: str) -> Any: ...

    def probe(self, profile: VariantProfile) -> Optional[PageProbe]: ...

    def snapshot(self) -> PageSnapshot: ...


def resolve_variant(message: Dict[str, Any], current_url: str = "") -> Variant:
    """Variant from an explicit name, the legacy isRegularLinkedIn flag, or the URL."""
    if message.get("variant"):
        return Variant.from_str(message["variant"])
    if "isRegularLinkedIn" in message:
        return Variant.PRIMARY if message["isRegularLinkedIn"] else Variant.SECONDARY
    detected = Variant.from_url(current_url)
    if detected is None:
        raise ValueError(f"cannot determine search variant for {current_url or 'empty URL'}")
    return detected


class ScrapeService:
    ACTIONS = ("scrapePage", "getTotalPages", "navigateToPage")

    def __init__(
        self,
        session: PageSession,
        *,
        pump: Optional[PumpConfig] = None,
        ops_logger: Optional[OpsLogger] = None,
        verbose: bool = False,
    ) -> None:
        self.session = session
        self.pump = pump or PumpConfig()
        self.ops_logger = ops_logger
        self.verbose = verbose
        self.last_pump: Optional[PumpOutcome] = None

    # -------------------------
    # Operations
    # -------------------------
    def scrape_page(self, variant: Variant | str) -> ScrapeResponse:
        t0 = time.perf_counter()
        counts: Dict[str, Any] = {"records": 0}
        pump_ms = 0
        try:
            profile = profile_for(variant)
            variant = profile.variant
            outcome = self._settle(profile)
            if outcome is not None:
                pump_ms = outcome.elapsed_ms
                counts["pump_ticks"] = outcome.ticks
            snap = self.session.snapshot()
            root = parse_snapshot(snap)
            result = extract_records(root, profile, base_url=snap.url, verbose=self.verbose)
            records = result.records
            counts.update(candidates=result.candidates, accepted=result.accepted, records=len(records))
            if result.context is not None:
                counts["strategy"] = result.context.strategy_used
                counts["field_errors"] = sum(result.context.field_errors.values())
                counts["candidate_errors"] = result.context.candidate_errors
            print(f"Scraped {len(records)} results from page")
            debug = debug_snapshot(root, snap) if not records else None
            resp = ScrapeResponse(success=True, records=records, debug_snapshot=debug)
        except Exception as e:
            print(f"Error during scraping: {e}")
            resp = ScrapeResponse(success=False, error=str(e) or type(e).__name__, debug_snapshot=self._safe_debug())
        self._emit("scrapePage", variant, resp.success, t0, counts, pump_ms=pump_ms, error=resp.error)
        return resp

    def get_total_pages(self, variant: Variant | str) -> TotalPagesResponse:
        t0 = time.perf_counter()
        try:
            profile = profile_for(variant)
            variant = profile.variant
            root = parse_snapshot(self.session.snapshot())
            pages = total_pages(root, profile)
            print(f"Total pages: {pages}")
            resp = TotalPagesResponse(success=True, total_pages=pages)
        except Exception as e:
            print(f"Error getting total pages: {e}")
            resp = TotalPagesResponse(success=False, error=str(e) or type(e).__name__)
        self._emit("getTotalPages", variant, resp.success, t0, {"total_pages": resp.total_pages}, error=resp.error)
        return resp

    def navigate_to_page(self, variant: Variant | str, page_number: int) -> NavigateResponse:
        t0 = time.perf_counter()
        try:
            variant = profile_for(variant).variant
            target = page_url(self.session.current_url(), int(page_number))
            nav = self.session.goto(target)
            error = getattr(nav, "error", None)
            resp = NavigateResponse(success=error is None, url=target, error=error)
        except Exception as e:
            print(f"Error navigating to page: {e}")
            resp = NavigateResponse(success=False, error=str(e) or type(e).__name__)
        self._emit("navigateToPage", variant, resp.success, t0, {"page": page_number}, error=resp.error)
        return resp

    # -------------------------
    # Message dispatch
    # -------------------------
    def handle(self, message: Dict[str, Any]) -> Dict[str, Any]:
        """dict request -> dict response, for transports that speak JSON."""
        action = message.get("action")
        if action not in self.ACTIONS:
            return {"success": False, "error": f"Unknown action: {action!r}"}
        try:
            variant = resolve_variant(message, self._current_url())
        except ValueError as e:
            return {"success": False, "error": str(e)}
        if action == "scrapePage":
            return self.scrape_page(variant).to_message()
        if action == "getTotalPages":
            return self.get_total_pages(variant).to_message()
        page_number = message.get("pageNumber")
        if page_number is None:
            return {"success": False, "error": "pageNumber is required"}
        return self.navigate_to_page(variant, page_number).to_message()

    # -------------------------
    # Internals
    # -------------------------
    def _settle(self, profile: VariantProfile) -> Optional[PumpOutcome]:
        self.last_pump = None
        if not (self.pump.enabled and profile.lazy_loads):
            return None
        probe = self.session.probe(profile)
        if probe is None:
            return None
        pump = LazyLoadPump(
            probe,
            base_delay_ms=self.pump.base_delay_ms,
            settle_pause_ms=self.pump.settle_pause_ms,
            max_attempts=self.pump.max_attempts,
            verbose=self.verbose,
        )
        self.last_pump = pump.run()
        return self.last_pump

    def _current_url(self) -> str:
        try:
            return self.session.current_url()
        except Exception:
            return ""

    def _safe_debug(self) -> str:
        try:
            snap = self.session.snapshot()
            return debug_snapshot(parse_snapshot(snap), snap)
        except Exception as e:
            return f"Error collecting debug info: {e}"

    def _emit(
        self,
        action: str,
        variant: Variant | str,
        success: bool,
        t0: float,
        counts: Dict[str, Any],
        *,
        pump_ms: int = 0,
        error: Optional[str] = None,
    ) -> None:
        if self.ops_logger is None:
            return
        total_ms = int((time.perf_counter() - t0) * 1000)
        record: Dict[str, Any] = {
            "action": action,
            "variant": getattr(variant, "value", str(variant)),
            "url": self._current_url(),
            "durations": {"pump_ms": pump_ms, "total_ms": total_ms},
            "counts": counts,
            "success": success,
        }
        if error:
            record["error"] = error
        self.ops_logger.emit(record)
