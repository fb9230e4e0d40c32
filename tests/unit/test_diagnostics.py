from leadcards.pipeline.diagnostics import (
    appears_logged_in,
    debug_snapshot,
    detect_auth_wall,
    page_structure_report,
)
from leadcards.pipeline.document import PageSnapshot, parse_html


def test_debug_snapshot_format():
    html = """
    <html><body>
      <div class="search-results-container"><a href="/in/a">A</a><a href="/in/b">B</a></div>
      <div class="spinner"></div>
    </body></html>
    """
    snap = PageSnapshot(
        html=html,
        url="https://www.linkedin.com/search/results/people/?keywords=x",
        scroll_top=500,
        scroll_height=3000,
        client_height=1000,
    )
    assert debug_snapshot(parse_html(html), snap) == (
        "URL: https://www.linkedin.com/search/results/people/?keywords=x | "
        "On LinkedIn: true | "
        "Appears logged in: true | "
        "Has search results container: true | "
        "Profile links found: 2 | "
        "Page shows loading indicators: true | "
        "Page has iframes: false | "
        "Page scroll position: 25% (500px/3000px)"
    )


def test_debug_snapshot_login_page():
    html = '<html><body><form action="/uas/login-submit"><input name="session_key"></form><iframe></iframe></body></html>'
    snap = PageSnapshot(html=html, url="https://example.com/")
    text = debug_snapshot(parse_html(html), snap)
    assert "On LinkedIn: false" in text
    assert "Appears logged in: false" in text
    assert "Page has iframes: true" in text
    assert text.endswith("Page scroll position: 0% (0px/0px)")


def test_appears_logged_in():
    assert appears_logged_in(parse_html('<a href="/feed/">Home</a>'))
    assert not appears_logged_in(parse_html('<a href="https://www.linkedin.com/login">Sign in</a>'))


def test_detect_auth_wall():
    assert detect_auth_wall(None) == []
    assert detect_auth_wall('<a href="/authwall?trk=x">') == ["auth:authwall"]


def test_page_structure_report():
    html = """
    <html><head><title>People search</title></head><body>
      <div id="app" class="application-outlet">
        <div class="search-results-container"><ul class="reusable-search__entity-result-list"></ul></div>
        <div class="artdeco-pagination"></div>
      </div>
    </body></html>
    """
    report = page_structure_report(parse_html(html), html)
    assert report.title == "People search"
    assert report.search_container and report.result_list and report.pagination
    assert not report.login_form
    assert report.profile_links == 0
    assert 'id="app" class="application-outlet"' in report.main_containers
    assert "Pagination present: True" in report.lines()
