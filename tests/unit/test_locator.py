from leadcards.pipeline.context import ExtractionContext
from leadcards.pipeline.document import parse_html
from leadcards.pipeline.locator import locate_candidates, nearest_card_ancestor
from leadcards.pipeline.variants import PRIMARY, SECONDARY


def _locate(html, profile=PRIMARY):
    ctx = ExtractionContext(profile=profile)
    return locate_candidates(parse_html(html), ctx), ctx


def test_container_item_patterns():
    html = """
    <div class="search-results-container"><ul>
      <li class="reusable-search__result-container"><a href="/in/a">Alice Smith</a></li>
      <li class="reusable-search__result-container"><a href="/in/b">Bob Jones</a></li>
      <li class="something-else"><a href="/in/c">Carol King</a></li>
    </ul></div>
    """
    cands, ctx = _locate(html)
    assert len(cands) == 2
    assert ctx.strategy_used == "container_items"
    assert ctx.container_selector == ".search-results-container"


def test_generic_items_inside_container():
    html = """
    <div class="search-results-container"><ul>
      <li><a href="/in/a">Alice Smith</a></li>
      <li>Filters</li>
      <li>2 mutual connections</li>
      <li data-rendered-height="90">Tall item</li>
    </ul></div>
    """
    cands, ctx = _locate(html)
    assert ctx.strategy_used == "container_generic"
    assert [c.text for c in cands] == ["Alice Smith", "2 mutual connections", "Tall item"]


def test_global_items_without_container():
    html = """
    <main>
      <div class="entity-result"><a href="/in/a">Alice Smith</a></div>
      <div class="entity-result"><a href="/in/b">Bob Jones</a></div>
    </main>
    """
    cands, ctx = _locate(html)
    assert ctx.strategy_used == "global_items"
    assert len(cands) == 2


def test_link_derived_maps_links_to_block_ancestor():
    html = """
    <main><section class="people">
      <a href="/in/a">Alice Smith</a>
      <a href="/in/a/details">Alice Smith details</a>
    </section></main>
    """
    cands, ctx = _locate(html)
    assert ctx.strategy_used == "link_derived"
    assert len(cands) == 1
    assert cands[0].tag == "section"
    assert ctx.strategy_hits["link_derived"] == 2


def test_nearest_card_ancestor_prefers_li():
    root = parse_html("<ul><li><div><span><a href='/in/x'>X</a></span></div></li></ul>")
    link = root.css_first("a")
    assert nearest_card_ancestor(link).tag == "li"


def test_nearest_card_ancestor_block_fallback():
    root = parse_html("<article><p><a href='/in/x'>X</a></p></article>")
    assert nearest_card_ancestor(root.css_first("a")).tag == "article"


def test_dedup_by_identity_and_bounded_by_hits():
    html = """
    <ul>
      <li class="artdeco-list__item entity-result"><a href="/in/a">Alice Smith</a></li>
      <li class="artdeco-list__item entity-result"><a href="/in/b">Bob Jones</a></li>
    </ul>
    """
    cands, ctx = _locate(html)
    keys = [c.key for c in cands]
    assert len(keys) == len(set(keys)) == 2
    assert len(cands) <= sum(ctx.strategy_hits.values())
    assert ctx.strategy_hits["global_items"] == 4


def test_secondary_container():
    html = """
    <div id="search-results-container"><ol class="artdeco-list">
      <li class="artdeco-list__item"><a href="/sales/lead/1">Omar Haddad</a></li>
    </ol></div>
    """
    cands, ctx = _locate(html, SECONDARY)
    assert ctx.strategy_used == "container_items"
    assert len(cands) == 1


def test_nothing_found():
    cands, ctx = _locate("<html><body><p>No results</p></body></html>")
    assert cands == []
    assert ctx.strategy_used is None
