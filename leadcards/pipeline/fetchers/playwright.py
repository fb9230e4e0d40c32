from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from playwright.sync_api import Browser, BrowserContext, Page, Playwright, sync_playwright
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

from ..document import PageSnapshot
from ..patterns import LOADING_INDICATOR_SELECTOR, RENDERED_HEIGHT_ATTR, RENDERED_WIDTH_ATTR
from ..pump import PumpObservation
from ..variants import VariantProfile


DEFAULT_UA = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/140.0.0.0 Safari/537.36"
)

LAUNCH_ARGS = [
    '--disable-dev-shm-usage',     # Prevent /dev/shm issues in containers
    '--disable-gpu',                # Disable GPU for headless
    '--disable-extensions',         # No browser extensions
    '--disable-plugins',            # No plugins
    '--no-first-run',               # Skip first run setup
    '--disable-default-apps',       # No default apps
    '--disable-background-timer-throttling',  # Consistent timing
]  # sandbox stays enabled

RESULTS_READY_SELECTOR = (
    ".search-results-container, .scaffold-finite-scroll__content, "
    "#search-results-container, ol.artdeco-list"
)

# Elements that can become candidates get their rendered size recorded as attributes
STAMP_SIZES_JS = """
([hAttr, wAttr]) => {
  let n = 0;
  for (const el of document.querySelectorAll('li, div, article, section')) {
    const r = el.getBoundingClientRect();
    el.setAttribute(hAttr, String(Math.round(r.height)));
    el.setAttribute(wAttr, String(Math.round(r.width)));
    n++;
  }
  return n;
}
"""

CLEAR_SIZES_JS = """
([hAttr, wAttr]) => {
  for (const el of document.querySelectorAll(`[${hAttr}], [${wAttr}]`)) {
    el.removeAttribute(hAttr);
    el.removeAttribute(wAttr);
  }
}
"""

SCROLL_METRICS_JS = """
() => {
  const el = document.documentElement;
  return {
    scrollTop: el.scrollTop || window.scrollY || 0,
    scrollHeight: el.scrollHeight,
    clientHeight: el.clientHeight,
  };
}
"""

OBSERVE_JS = """
({resultSelector, loadingSelector}) => {
  const el = document.documentElement;
  return {
    scrollTop: el.scrollTop || window.scrollY || 0,
    scrollHeight: el.scrollHeight,
    clientHeight: el.clientHeight,
    results: document.querySelectorAll(resultSelector).length,
    loading: !!document.querySelector(loadingSelector),
  };
}
"""


@dataclass(frozen=True)
class NavigationResult:
    url: str
    status_code: int
    error: str | None = None


class PlaywrightPageProbe:
    """PageProbe over a live Playwright page."""

    def __init__(self, page: Page, result_selector: str, *, step_fraction: float = 0.8) -> None:
        self.page = page
        self.result_selector = result_selector
        self.step_fraction = step_fraction

    def observe(self) -> PumpObservation:
        data = self.page.evaluate(
            OBSERVE_JS,
            {"resultSelector": self.result_selector, "loadingSelector": LOADING_INDICATOR_SELECTOR},
        )
        return PumpObservation(
            scroll_top=float(data.get("scrollTop") or 0),
            document_height=float(data.get("scrollHeight") or 0),
            viewport_height=float(data.get("clientHeight") or 0),
            result_count=int(data.get("results") or 0),
            loading=bool(data.get("loading")),
        )

    def scroll_step(self) -> None:
        self.page.evaluate(f"() => window.scrollBy(0, Math.round(window.innerHeight * {self.step_fraction}))")

    def scroll_to_top(self) -> None:
        self.page.evaluate("() => window.scrollTo(0, 0)")

    def wait(self, ms: int) -> None:
        self.page.wait_for_timeout(ms)


class PlaywrightSession:
    """Live headless Chromium tab holding one search results page.

    Security-first launch settings (sandbox on, extensions and plugins off).
    A persisted storage state file carries the logged-in session.
    """

    def __init__(
        self,
        *,
        headless: bool = True,
        timeout_ms: int = 30000,
        user_agent: str = DEFAULT_UA,
        storage_state: Optional[str] = None,
    ) -> None:
        self.headless = headless
        self.timeout_ms = timeout_ms
        self.user_agent = user_agent
        self.storage_state = storage_state
        self._pw: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._context: Optional[BrowserContext] = None
        self._page: Optional[Page] = None

    def __enter__(self) -> "PlaywrightSession":
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def open(self) -> None:
        if self._page is not None:
            return
        self._pw = sync_playwright().start()
        self._browser = self._pw.chromium.launch(headless=self.headless, args=LAUNCH_ARGS)
        kwargs = {"user_agent": self.user_agent}
        if self.storage_state:
            kwargs["storage_state"] = self.storage_state
        self._context = self._browser.new_context(**kwargs)
        self._page = self._context.new_page()

    def close(self) -> None:
        try:
            if self._browser is not None:
                self._browser.close()
        finally:
            if self._pw is not None:
                self._pw.stop()
            self._pw = self._browser = self._context = self._page = None

    @property
    def page(self) -> Page:
        if self._page is None:
            raise RuntimeError("session is not open")
        return self._page

    def current_url(self) -> str:
        return self.page.url

    def goto(self, url: str) -> NavigationResult:
        try:
            response = self.page.goto(url, wait_until="domcontentloaded", timeout=self.timeout_ms)
        except Exception as e:
            return NavigationResult(url=url, status_code=0, error=str(e))
        if not response:
            return NavigationResult(url=url, status_code=0, error="No response received")
        # Results render after the shell; a timeout here is not fatal
        try:
            self.page.wait_for_selector(RESULTS_READY_SELECTOR, timeout=5000)
        except PlaywrightTimeoutError:
            pass
        return NavigationResult(url=self.page.url, status_code=response.status)

    def probe(self, profile: VariantProfile) -> PlaywrightPageProbe:
        return PlaywrightPageProbe(self.page, profile.result_count_selector)

    def snapshot(self) -> PageSnapshot:
        page = self.page
        attrs = [RENDERED_HEIGHT_ATTR, RENDERED_WIDTH_ATTR]
        page.evaluate(STAMP_SIZES_JS, attrs)
        try:
            html = page.content()
        finally:
            # Stamps live only in the serialized copy
            page.evaluate(CLEAR_SIZES_JS, attrs)
        metrics = page.evaluate(SCROLL_METRICS_JS)
        return PageSnapshot(
            html=html,
            url=page.url,
            scroll_top=float(metrics.get("scrollTop") or 0),
            scroll_height=float(metrics.get("scrollHeight") or 0),
            client_height=float(metrics.get("clientHeight") or 0),
        )
