import os

import pytest

skip_live = pytest.mark.skipif(
    os.getenv("LEADCARDS_RUN_PW_TESTS", "0") != "1",
    reason="Set LEADCARDS_RUN_PW_TESTS=1 to run live Chromium tests"
)

# Three cards up front, three more appended once the page has been scrolled
LAZY_PAGE = """
<html><body>
<div class="search-results-container"><ul id="results"></ul></div>
<div style="height: 3000px"></div>
<script>
  function addCards(start) {
    const ul = document.getElementById('results');
    for (let i = start; i < start + 3; i++) {
      const li = document.createElement('li');
      li.className = 'reusable-search__result-container';
      li.style.height = '120px';
      li.innerHTML =
        '<span class="entity-result__title-text"><a href="/in/person-' + i + '/">Person ' + i + '</a></span>' +
        '<div class="entity-result__primary-subtitle">Engineer at Company ' + i + '</div>';
      ul.appendChild(li);
    }
  }
  addCards(0);
  let loaded = false;
  window.addEventListener('scroll', () => {
    if (!loaded && window.scrollY > 200) { loaded = true; addCards(3); }
  });
</script>
</body></html>
"""


@skip_live
def test_pump_loads_lazy_cards():
    from leadcards.config import PumpConfig
    from leadcards.pipeline.fetchers.playwright import PlaywrightSession
    from leadcards.pipeline.handlers import ScrapeService
    from leadcards.schemas import Variant

    with PlaywrightSession() as session:
        session.page.set_content(LAZY_PAGE)
        service = ScrapeService(session, pump=PumpConfig(base_delay_ms=100, settle_pause_ms=100))
        resp = service.scrape_page(Variant.PRIMARY)

    assert resp.success
    assert service.last_pump is not None and service.last_pump.ticks > 1
    assert [r.name for r in resp.records] == [f"Person {i}" for i in range(6)]
    assert resp.records[5].company == "Company 5"
