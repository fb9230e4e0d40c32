from __future__ import annotations

from dataclasses import dataclass
from typing import Dict

from ..schemas import Variant
from .patterns import Cascade, cascade


@dataclass(frozen=True)
class VariantProfile:
    """Everything that differs between the two markup families.

    The pipeline has a single code path; a variant only changes which
    cascades are consulted, the acceptance threshold and the paging math.
    """
    variant: Variant
    score_threshold: int
    page_size: int
    profile_link_selector: str
    lazy_loads: bool
    result_count_selector: str
    container_patterns: Cascade
    container_item_patterns: Cascade
    global_item_patterns: Cascade
    marker_patterns: Cascade
    name_patterns: Cascade
    headline_patterns: Cascade
    headline_company_patterns: Cascade
    title_patterns: Cascade
    company_patterns: Cascade
    location_patterns: Cascade
    industry_patterns: Cascade
    pagination_patterns: Cascade
    result_count_patterns: Cascade


PRIMARY = VariantProfile(
    variant=Variant.PRIMARY,
    score_threshold=3,
    page_size=10,
    profile_link_selector='a[href*="/in/"]',
    lazy_loads=True,
    result_count_selector="li.reusable-search__result-container, div.entity-result, li.artdeco-list__item",
    container_patterns=cascade(
        "container",
        ".search-results-container",
        ".scaffold-layout__main",
        ".scaffold-finite-scroll__content",
        'div[data-view-name="search-results-container"]',
        "div.search-marvel-srp",
    ),
    container_item_patterns=cascade(
        "item",
        "li.reusable-search__result-container",
        "li.search-result",
        "li.artdeco-list__item",
        "div.entity-result",
        "div.search-entity-result",
    ),
    global_item_patterns=cascade(
        "item",
        "li.reusable-search__result-container",
        "div.scaffold-finite-scroll__content > div > ul > li",
        "ul.reusable-search__entity-result-list > li",
        ".search-results-container > div > ul > li",
        "li[data-chameleon-result-urn]",
        "li.artdeco-list__item",
        ".reusable-search__result-container",
        ".entity-result",
        "li.search-result",
        ".profile-card",
        ".artdeco-entity-lockup",
        "li.occludable-update",
        "div[data-viewport-offset-top]",
        "div.relative.ember-view",
        "div.artdeco-card",
        "div.feed-shared-update-v2",
        "li.feed-item",
    ),
    marker_patterns=(),
    name_patterns=cascade(
        "name",
        "span.entity-result__title-text a",
        "span.entity-result__title-text a span span",
        "div.linked-area a span span",
        "span.entity-result__title-line a",
        ".artdeco-entity-lockup__title a",
        ".search-result__info a.search-result__result-link",
        'a[data-control-name="search_srp_result"] span span',
        "h3 a span span",
        "h3 span.t-24",
        'a[href*="/in/"]',
        ".app-aware-link",
        ".entity-result__title-text",
        "h2.profile-card__name",
        ".mb1 a",
        "strong.profile-name",
        ".artdeco-entity-lockup__title span span",
        'a.app-aware-link[href*="/in/"] span',
        ".feed-shared-actor__name span",
        ".update-components-actor__name",
        ".update-components-actor__meta",
        ".feed-shared-actor__title",
    ),
    headline_patterns=cascade(
        "title",
        ".entity-result__primary-subtitle",
        ".search-result__info p.subline-level-1",
        ".artdeco-entity-lockup__subtitle",
        ".profile-card__occupation",
        ".profile-position",
        ".job-info",
        ".occupation",
        "h2 + div",
        "h3 + div",
        ".mb1 + div",
        "p.job-title",
        ".headline",
    ),
    headline_company_patterns=cascade(
        "company",
        ".entity-result__secondary-subtitle",
        ".company-name",
        ".profile-card__company",
        ".company",
        'a[data-control-name="view_company"]',
    ),
    title_patterns=cascade(
        "title",
        "div.entity-result__primary-subtitle",
        ".search-result__truncate.search-result__truncate--primary",
        "div.linked-area + div.entity-result__primary-subtitle",
        ".artdeco-entity-lockup__subtitle",
        ".entity-result__summary",
        ".search-result__info p.subline-level-1",
        "div.t-14.t-black--light",
        ".entity-result__primary-subtitle",
        "p.subline-level-1",
        'div[data-test-id="job-title"]',
        ".profile-position",
        ".profile-card__occupation",
        ".mb1 + div",
        ".pv-entity__secondary-title",
        "p.job-title",
        "div.profile-info",
    ),
    company_patterns=cascade(
        "company",
        "div.entity-result__secondary-subtitle",
        ".search-result__truncate.search-result__truncate--secondary",
        ".artdeco-entity-lockup__subtitle:nth-child(2)",
        ".search-result__info p.subline-level-2",
        "div.t-14.t-black--light.t-normal:nth-child(2)",
        ".entity-result__secondary-subtitle",
        'a[data-field="headline"]',
        "p.subline-level-2",
        ".company-name",
        ".profile-card__company",
        ".pv-entity__company-summary",
        "span.company",
        'a[data-control-name="view_company"]',
    ),
    location_patterns=cascade(
        "location",
        "div.entity-result__tertiary-subtitle",
        ".artdeco-entity-lockup__caption",
        ".search-result__info p.subline-level-2",
        "div.t-12.t-black--light.t-normal",
        "div.t-14.t-normal.t-black--light",
        ".entity-result__tertiary-subtitle",
        'div[data-test-id="location"]',
        ".presence-entity__content",
        "p.subline-level-2",
        ".entity-result__summary",
        ".profile-card__location",
        ".location",
        ".profile-location",
    ),
    industry_patterns=(),
    pagination_patterns=cascade(
        "pagination",
        "ul.artdeco-pagination__pages",
        ".artdeco-pagination ol",
        ".pagination",
    ),
    result_count_patterns=cascade(
        "result_count",
        ".search-results-container h2",
        ".search-results__total",
        ".t-12.t-black--light.t-normal",
        ".pb2.t-black--light.t-14",
    ),
)


_NAVIGATOR_ITEMS = cascade(
    "item",
    ".artdeco-list__item.search-result",
    ".search-results__result-item",
    "li.result-lockup",
    "li.artdeco-list__item",
    ".entity-result",
)
_NAVIGATOR_TITLES = cascade(
    "title",
    ".result-lockup__highlight-keyword",
    ".artdeco-entity-lockup__subtitle",
    ".entity-result__primary-subtitle",
    ".search-result__info-container .t-14",
)
_NAVIGATOR_COMPANIES = cascade(
    "company",
    ".result-lockup__position-company a",
    ".artdeco-entity-lockup__subtitle:nth-child(2)",
    ".entity-result__secondary-subtitle",
    '[data-control-name="view_company"]',
)

SECONDARY = VariantProfile(
    variant=Variant.SECONDARY,
    score_threshold=4,
    page_size=25,
    profile_link_selector='a[href*="/in/"], a[href*="/sales/lead/"], a[href*="/sales/people/"]',
    lazy_loads=True,
    result_count_selector="li.artdeco-list__item, .search-results__result-item, li.result-lockup",
    container_patterns=cascade(
        "container",
        "#search-results-container",
        ".search-results__result-list",
        "ol.artdeco-list",
    ),
    container_item_patterns=_NAVIGATOR_ITEMS,
    global_item_patterns=_NAVIGATOR_ITEMS,
    marker_patterns=cascade(
        "marker",
        '[data-anonymize="person-name"]',
        ".result-lockup__name",
        'a[href*="/sales/lead/"]',
        'a[href*="/sales/people/"]',
        "[data-x--lead--name]",
    ),
    name_patterns=cascade(
        "name",
        ".result-lockup__name a",
        ".artdeco-entity-lockup__title a",
        ".entity-result__title-text a",
        'a[data-control-name="search_srp_result"]',
        '[data-anonymize="person-name"]',
    ),
    headline_patterns=_NAVIGATOR_TITLES,
    headline_company_patterns=_NAVIGATOR_COMPANIES,
    title_patterns=_NAVIGATOR_TITLES,
    company_patterns=_NAVIGATOR_COMPANIES,
    location_patterns=cascade(
        "location",
        ".result-lockup__misc-item",
        ".artdeco-entity-lockup__caption",
        ".entity-result__secondary-subtitle + .entity-result__tertiary-subtitle",
        ".search-result__location",
    ),
    industry_patterns=cascade(
        "industry",
        ".t-14",
        ".t-black--light",
        ".artdeco-entity-lockup__caption",
    ),
    pagination_patterns=cascade(
        "pagination",
        ".artdeco-pagination__pages",
        ".search-results__pagination",
        ".artdeco-pagination ul",
        ".search-results-container .artdeco-pagination",
    ),
    result_count_patterns=cascade(
        "result_count",
        ".search-results__total",
    ),
)


_PROFILES: Dict[Variant, VariantProfile] = {
    Variant.PRIMARY: PRIMARY,
    Variant.SECONDARY: SECONDARY,
}


def profile_for(variant: Variant | str) -> VariantProfile:
    """Return the descriptor for a variant (enum member or name)."""
    if not isinstance(variant, Variant):
        variant = Variant.from_str(variant)
    return _PROFILES[variant]
