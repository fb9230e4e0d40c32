from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional
from urllib.parse import urlparse
from urllib import robotparser

import httpx

from ..document import PageSnapshot
from ..variants import VariantProfile


DEFAULT_UA = "LeadCards-StaticFetcher/0.1 (+https://example.com)"


@dataclass(frozen=True)
class FetchResult:
    url: str
    status_code: int
    mime: str | None
    content_length: int
    html: str | None
    headers: dict[str, str]
    blocked_by_robots: bool = False
    error: str | None = None

    def to_snapshot(self) -> PageSnapshot:
        return PageSnapshot(html=self.html or "", url=self.url)


class StaticFetcher:
    """Plain HTTP fetcher for saved or server-rendered result pages.

    - Uses httpx for network IO
    - Parses robots.txt using urllib.robotparser
    - Does NOT execute JavaScript, so lazily rendered cards are not loaded
    """

    def __init__(
        self,
        *,
        timeout_s: float = 12.0,
        user_agent: str = DEFAULT_UA,
        respect_robots: bool = True,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self.timeout_s = timeout_s
        self.user_agent = user_agent
        self.respect_robots = respect_robots
        self._client = client or httpx.Client(timeout=self.timeout_s, headers={"User-Agent": self.user_agent})

    def close(self) -> None:
        self._client.close()

    def _robots_allows(self, url: str) -> bool:
        if not self.respect_robots:
            return True
        parsed = urlparse(url)
        robots_url = f"{parsed.scheme}://{parsed.netloc}/robots.txt"
        try:
            resp = self._client.get(robots_url)
        except httpx.HTTPError:
            # Unreachable robots.txt: allow
            return True
        if resp.status_code >= 400:
            return True
        rp = robotparser.RobotFileParser()
        rp.parse(resp.text.splitlines())
        return rp.can_fetch(self.user_agent, url) and rp.can_fetch("*", url)

    def fetch(self, url: str) -> FetchResult:
        if not self._robots_allows(url):
            return FetchResult(
                url=url,
                status_code=0,
                mime=None,
                content_length=0,
                html=None,
                headers={},
                blocked_by_robots=True,
                error="blocked by robots.txt",
            )
        try:
            resp = self._client.get(url, follow_redirects=True)
        except httpx.HTTPError as e:
            return FetchResult(url=url, status_code=0, mime=None, content_length=0, html=None, headers={}, error=str(e))
        mime = resp.headers.get("Content-Type")
        mime_main = None
        if mime:
            mime_main = mime.split(";")[0].strip().lower()
        html_text = None
        if mime_main == "text/html":
            html_text = resp.text
        return FetchResult(
            url=str(resp.request.url),
            status_code=resp.status_code,
            mime=mime_main,
            content_length=len(resp.content or b""),
            html=html_text,
            headers={k: v for k, v in resp.headers.items()},
            error=None if resp.status_code < 400 else f"HTTP {resp.status_code}",
        )


class HtmlSession:
    """Page session over already-rendered HTML (a saved results page).

    No scrolling is possible, so `probe()` returns None and the lazy-load
    pump is skipped. Navigation only rewrites the current address.
    """

    def __init__(self, html: str, url: str = "") -> None:
        self._snapshot = PageSnapshot(html=html, url=url)

    @classmethod
    def from_file(cls, path: str | Path, url: str = "") -> "HtmlSession":
        p = Path(path)
        return cls(p.read_text(encoding="utf-8"), url=url or p.resolve().as_uri())

    def current_url(self) -> str:
        return self._snapshot.url

    def goto(self, url: str) -> FetchResult:
        self._snapshot = PageSnapshot(html=self._snapshot.html, url=url)
        return FetchResult(url=url, status_code=200, mime="text/html", content_length=len(self._snapshot.html), html=self._snapshot.html, headers={})

    def probe(self, profile: VariantProfile) -> None:
        return None

    def snapshot(self) -> PageSnapshot:
        return self._snapshot


class StaticSession(HtmlSession):
    """HtmlSession whose navigation re-fetches the page over HTTP."""

    def __init__(self, fetcher: StaticFetcher, url: str = "") -> None:
        super().__init__("", url=url)
        self.fetcher = fetcher
        if url:
            self.goto(url)

    def goto(self, url: str) -> FetchResult:
        result = self.fetcher.fetch(url)
        self._snapshot = result.to_snapshot()
        return result
