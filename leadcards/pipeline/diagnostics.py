from __future__ import annotations

import re
from dataclasses import asdict, dataclass, field
from typing import List, Optional

from .document import DocumentNode, PageSnapshot
from .patterns import LOADING_INDICATOR_SELECTOR, LOGIN_WALL_SELECTOR


SEARCH_CONTAINER_SELECTOR = ".search-results-container, .scaffold-finite-scroll__content"
PROFILE_LINK_SELECTOR = 'a[href*="/in/"]'
ERROR_MESSAGE_SELECTOR = ".error, .alert, .notification"
MAIN_CONTAINER_SELECTOR = "body > div, body > main, #app, #main, .application-outlet"

# Raw-markup hints that the session was bounced to a sign-in or checkpoint page
AUTH_WALL_MARKERS = [
    r"authwall",
    r"/checkpoint/",
    r"Sign in to view",
    r"Join LinkedIn",
    r"Welcome to your professional community",
]


def _flag(v: bool) -> str:
    return "true" if v else "false"


def detect_auth_wall(html: str | None) -> list[str]:
    reasons: list[str] = []
    if not html:
        return reasons
    for pat in AUTH_WALL_MARKERS:
        if re.search(pat, html, flags=re.IGNORECASE):
            reasons.append(f"auth:{pat}")
    return reasons


def appears_logged_in(root: DocumentNode) -> bool:
    return not root.has(LOGIN_WALL_SELECTOR)


def has_loading_indicators(root: DocumentNode) -> bool:
    return root.has(LOADING_INDICATOR_SELECTOR)


def debug_snapshot(root: DocumentNode, snapshot: PageSnapshot) -> str:
    """Pipe-delimited page summary attached to empty or failed scrapes."""
    parts = [
        f"URL: {snapshot.url}",
        f"On LinkedIn: {_flag('linkedin.com' in snapshot.url)}",
        f"Appears logged in: {_flag(appears_logged_in(root))}",
        f"Has search results container: {_flag(root.has(SEARCH_CONTAINER_SELECTOR))}",
        f"Profile links found: {len(root.css(PROFILE_LINK_SELECTOR))}",
        f"Page shows loading indicators: {_flag(has_loading_indicators(root))}",
        f"Page has iframes: {_flag(root.has('iframe'))}",
        (
            f"Page scroll position: {snapshot.scroll_percent}% "
            f"({int(snapshot.scroll_top)}px/{int(snapshot.scroll_height)}px)"
        ),
    ]
    return " | ".join(parts)


@dataclass
class PageStructure:
    title: str = ""
    search_container: bool = False
    scaffold_content: bool = False
    result_list: bool = False
    profile_links: int = 0
    pagination: bool = False
    login_form: bool = False
    error_messages: int = 0
    iframes: int = 0
    loading_indicators: int = 0
    auth_wall: List[str] = field(default_factory=list)
    main_containers: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return asdict(self)

    def lines(self) -> List[str]:
        out = [
            f"Page title: {self.title}",
            f"Search results container present: {self.search_container}",
            f"Scaffold finite scroll content present: {self.scaffold_content}",
            f"Search result list present: {self.result_list}",
            f"Profile links found: {self.profile_links}",
            f"Pagination present: {self.pagination}",
            f"Login form present: {self.login_form}",
            f"Error messages found: {self.error_messages}",
            f"Iframes found: {self.iframes}",
            f"Loading indicators found: {self.loading_indicators}",
        ]
        if self.auth_wall:
            out.append(f"Auth wall markers: {', '.join(self.auth_wall)}")
        for i, c in enumerate(self.main_containers, 1):
            out.append(f"Container {i}: {c}")
        return out


def page_structure_report(root: DocumentNode, html: Optional[str] = None) -> PageStructure:
    """Survey of the landmarks the locator depends on, for troubleshooting."""
    title_node = root.css_first("title")
    containers: List[str] = []
    for node in root.css(MAIN_CONTAINER_SELECTOR):
        ident = node.attr("id")
        cls = node.class_attr
        desc = " ".join(p for p in (f'id="{ident}"' if ident else "", f'class="{cls}"' if cls else "") if p)
        containers.append(desc or node.tag)
    return PageStructure(
        title=title_node.text if title_node is not None else "",
        search_container=root.has(".search-results-container"),
        scaffold_content=root.has(".scaffold-finite-scroll__content"),
        result_list=root.has(".reusable-search__entity-result-list"),
        profile_links=len(root.css(PROFILE_LINK_SELECTOR)),
        pagination=root.has(".artdeco-pagination"),
        login_form=root.has('form[action*="login"], form[action*="checkpoint"]'),
        error_messages=len(root.css(ERROR_MESSAGE_SELECTOR)),
        iframes=len(root.css("iframe")),
        loading_indicators=len(root.css(LOADING_INDICATOR_SELECTOR)),
        auth_wall=detect_auth_wall(html),
        main_containers=containers,
    )
