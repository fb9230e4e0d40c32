"""
Lead Cards - CLI Runner

Usage:
  python -m lcs.run \
    --url "https://www.linkedin.com/search/results/people/?keywords=designer" \
    --config config/example.yaml \
    --out ./out --all-pages

Saved page (no browser):
  python -m lcs.run --html-file saved_search.html --variant primary --out ./out

Exit codes:
  0 - success
  1 - config error (file missing or invalid YAML)
  2 - input error (missing HTML file, unknown variant, no URL)
  3 - processing error (runtime failures)
"""
from __future__ import annotations

import argparse
import contextlib
import sys
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional

from leadcards.config import ConfigError, ScraperConfig, load_config
from leadcards.ops_logger import OpsLogger, ops_enabled_by_env
from leadcards.schemas import Record, Variant
from leadcards.pipeline.diagnostics import page_structure_report
from leadcards.pipeline.document import parse_snapshot
from leadcards.pipeline.export import RecordExporter, dedupe_records, quality_issues
from leadcards.pipeline.fetchers.playwright import PlaywrightSession
from leadcards.pipeline.fetchers.static import HtmlSession, StaticFetcher, StaticSession
from leadcards.pipeline.handlers import ScrapeService


# Base for relative profile links in saved pages opened without --url
LINKEDIN_ORIGIN = "https://www.linkedin.com/"


@dataclass
class ScrapeRun:
    records: List[Record] = field(default_factory=list)
    total_pages: int = 1
    pages_scraped: int = 0
    errors: List[str] = field(default_factory=list)
    debug: List[str] = field(default_factory=list)


def scrape_pages(
    service: ScrapeService,
    variant: Variant,
    *,
    all_pages: bool = False,
    max_pages: Optional[int] = None,
    page_delay_s: float = 5.0,
    sleep: Callable[[float], None] = time.sleep,
) -> ScrapeRun:
    """Scrape the current page, or every page when all_pages is set.

    Stops at the first failed request; records from earlier pages are kept.
    """
    run = ScrapeRun()
    if all_pages:
        tp = service.get_total_pages(variant)
        if not tp.success:
            run.errors.append(f"Error getting total pages: {tp.error}")
            return run
        run.total_pages = tp.total_pages
    if max_pages:
        run.total_pages = min(run.total_pages, max_pages)

    page = 1
    while True:
        print(f"Scraping page {page} of {run.total_pages}...")
        resp = service.scrape_page(variant)
        if resp.debug_snapshot:
            run.debug.append(resp.debug_snapshot)
        if not resp.success:
            run.errors.append(f"Error scraping page {page}: {resp.error}")
            break
        run.records.extend(resp.records)
        run.pages_scraped += 1
        if page >= run.total_pages:
            break
        page += 1
        nav = service.navigate_to_page(variant, page)
        if not nav.success:
            run.errors.append(f"Error navigating to page {page}: {nav.error}")
            break
        # Give the next page time to load before scraping it
        sleep(page_delay_s)
    return run


def apply_overrides(cfg: ScraperConfig, args: argparse.Namespace) -> ScraperConfig:
    if args.no_pump:
        cfg.pump.enabled = False
    if args.headed:
        cfg.browser.headless = False
    if args.storage_state:
        cfg.browser.storage_state = args.storage_state
    if args.max_pages:
        cfg.paging.max_pages = args.max_pages
    if args.page_delay is not None:
        cfg.paging.page_delay_s = args.page_delay
    if args.format:
        cfg.export.format = args.format
    if args.verbose:
        cfg.verbose = True
    return cfg


def build_session(args: argparse.Namespace, cfg: ScraperConfig):
    if args.html_file:
        return HtmlSession.from_file(args.html_file, url=args.url or LINKEDIN_ORIGIN)
    if args.static:
        return StaticSession(StaticFetcher(respect_robots=not args.ignore_robots))
    kwargs = {}
    if cfg.browser.user_agent:
        kwargs["user_agent"] = cfg.browser.user_agent
    return PlaywrightSession(
        headless=cfg.browser.headless,
        timeout_ms=cfg.browser.timeout_ms,
        storage_state=cfg.browser.storage_state,
        **kwargs,
    )


def main(argv: list[str] | None = None) -> int:
    if sys.version_info < (3, 11):
        cur = f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}"
        print(f"Python 3.11+ required. Current: {cur}.", file=sys.stderr)
        return 1

    parser = argparse.ArgumentParser(prog="lcs.run", description="Extract lead cards from people-search result pages")
    src = parser.add_argument_group("source")
    src.add_argument("--url", "-u", default=None, help="Search results URL (opened in headless Chromium)")
    src.add_argument("--html-file", default=None, help="Saved results page to extract from instead of a live browser")
    src.add_argument("--static", action="store_true", help="Fetch --url over plain HTTP (no JavaScript, no scrolling)")
    src.add_argument("--ignore-robots", action="store_true", help="With --static, do not consult robots.txt")
    parser.add_argument("--variant", choices=["auto", "primary", "secondary"], default="auto", help="Markup family (default: detect from URL)")
    parser.add_argument("--config", "-c", default=None, help="Path to YAML config file")
    parser.add_argument("--out", "-o", default="output", help="Output directory (default: ./output)")
    parser.add_argument("--format", choices=["csv", "json", "both"], default=None, help="Export format (default from config: csv)")
    parser.add_argument("--all-pages", action="store_true", help="Follow pagination and scrape every page")
    parser.add_argument("--max-pages", type=int, default=None, help="Upper bound on pages with --all-pages")
    parser.add_argument("--page-delay", type=float, default=None, help="Seconds to wait after navigating to the next page")
    parser.add_argument("--no-pump", action="store_true", help="Do not scroll to trigger lazy loading before extraction")
    parser.add_argument("--headed", action="store_true", help="Show the browser window")
    parser.add_argument("--storage-state", default=None, help="Playwright storage state JSON (logged-in session)")
    parser.add_argument("--report-structure", action="store_true", help="Print a page structure survey before extracting")
    parser.add_argument("--verbose", "-v", action="store_true", help="Per-candidate diagnostics")
    parser.add_argument("--dry-run", action="store_true", help="Validate inputs/config and exit")
    parser.add_argument("--ops-log", default=None, help="Path to ops JSONL log file (default: <out>/ops.log when LEADCARDS_OPS_JSON=1)")
    parser.add_argument("--ops-stdout", action="store_true", help="Also mirror ops JSON to stdout")
    args = parser.parse_args(argv)

    try:
        cfg = apply_overrides(load_config(args.config), args)
    except ConfigError as e:
        print(f"Config error: {e}", file=sys.stderr)
        return 1

    if not args.url and not args.html_file:
        print("Input error: one of --url or --html-file is required", file=sys.stderr)
        return 2
    if args.html_file and not Path(args.html_file).is_file():
        print(f"Input error: file not found: {args.html_file}", file=sys.stderr)
        return 2

    variant: Optional[Variant] = None
    if args.variant != "auto":
        variant = Variant.from_str(args.variant)
    elif args.url:
        variant = Variant.from_url(args.url)
    if variant is None and not args.html_file:
        print(f"Input error: not a supported search URL: {args.url}", file=sys.stderr)
        return 2

    out_dir = Path(args.out)
    try:
        out_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        print(f"Output error: cannot write to {out_dir}: {e}", file=sys.stderr)
        return 3

    if args.dry_run:
        print("✅ Dry-run validation passed")
        print(f" - Source: {args.html_file or args.url}")
        print(f" - Variant: {variant.value if variant else 'auto'}")
        print(f" - Config: {args.config or '(defaults)'}")
        print(f" - Output dir: {out_dir}")
        return 0

    ops_logger: Optional[OpsLogger] = None
    if args.ops_log or ops_enabled_by_env():
        ops_logger = OpsLogger(Path(args.ops_log) if args.ops_log else out_dir / "ops.log", also_stdout=args.ops_stdout)

    proc_start = time.perf_counter()
    session = build_session(args, cfg)
    with contextlib.ExitStack() as stack:
        try:
            if isinstance(session, PlaywrightSession):
                stack.enter_context(session)
            elif isinstance(session, StaticSession):
                stack.callback(session.fetcher.close)
            if args.url and not args.html_file:
                nav = session.goto(args.url)
                if nav.error:
                    print(f"Processing error: cannot open {args.url}: {nav.error}", file=sys.stderr)
                    return 3
            if variant is None:
                variant = Variant.from_url(session.current_url())
                if variant is None:
                    print("Input error: cannot detect variant; pass --variant", file=sys.stderr)
                    return 2
            print(f"Variant: {variant.value}, pump={'on' if cfg.pump.enabled else 'off'}")

            if args.report_structure:
                snap = session.snapshot()
                for line in page_structure_report(parse_snapshot(snap), snap.html).lines():
                    print(f"   {line}")

            service = ScrapeService(session, pump=cfg.pump, ops_logger=ops_logger, verbose=cfg.verbose)
            run = scrape_pages(
                service,
                variant,
                all_pages=args.all_pages,
                max_pages=cfg.paging.max_pages,
                page_delay_s=cfg.paging.page_delay_s,
            )
        except Exception as e:
            print(f"Processing error: {e}", file=sys.stderr)
            return 3

    for err in run.errors:
        print(err, file=sys.stderr)
    records = dedupe_records(run.records)

    if ops_logger:
        ops_logger.emit({
            "summary": True,
            "variant": variant.value,
            "pages": run.pages_scraped,
            "total_pages": run.total_pages,
            "counts": {"records": len(records), "raw_records": len(run.records)},
            "durations": {"wall_s": round(time.perf_counter() - proc_start, 2)},
            "success": not run.errors,
        })

    if not records:
        print("No results found.")
        for d in run.debug:
            print(f"Debug: {d}")
        return 3 if run.errors else 0

    issues = quality_issues(records)
    if issues:
        print(f"Scraping completed with some issues: {', '.join(issues)}")

    try:
        RecordExporter(out_dir).export(records, cfg.export.format)
    except (OSError, ValueError) as e:
        print(f"Export error: {e}", file=sys.stderr)
        return 3

    print("🏁 Done.")
    print(f"   Pages scraped: {run.pages_scraped} of {run.total_pages}")
    print(f"   Total leads: {len(records)}")
    return 3 if run.errors else 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
