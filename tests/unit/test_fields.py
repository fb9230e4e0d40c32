"""
Unit tests for the per-field extractors (name, role, location, industry,
connection degree, shared connections).
"""

import pytest

from leadcards.pipeline.context import ExtractionContext
from leadcards.pipeline.document import parse_html
from leadcards.pipeline.fields import (
    _apply_role_pattern,
    extract_connection_degree,
    extract_industry,
    extract_location,
    extract_name,
    extract_profile_url,
    extract_shared_connections,
    resolve_title_company,
    split_on_delimiters,
    strip_view_profile,
)
from leadcards.pipeline.patterns import CURRENT_ROLE_PATTERNS
from leadcards.pipeline.variants import PRIMARY, SECONDARY


def _card(inner: str):
    root = parse_html(f"<html><body><ul><li class='card'>{inner}</li></ul></body></html>")
    return root.css_first("li.card")


def _ctx(profile=PRIMARY, base_url="https://www.linkedin.com/search/results/people/?keywords=x"):
    return ExtractionContext(profile=profile, base_url=base_url)


class TestNameAndLink:
    def test_strip_view_profile(self):
        assert strip_view_profile("View Jane Doe’s profile") == "Jane Doe"
        assert strip_view_profile("View Jane Doe's profile") == "Jane Doe"
        assert strip_view_profile("  Jane Doe ") == "Jane Doe"

    def test_name_from_cascade(self):
        card = _card('<span class="entity-result__title-text"><a href="/in/jane-doe/">Jane Doe</a></span>')
        assert extract_name(card, _ctx()) == "Jane Doe"

    def test_name_from_profile_link_span_fallback(self):
        card = _card('<a href="/sales/lead/ACw123"><span>Li Wei Chen</span></a>')
        assert extract_name(card, _ctx(SECONDARY)) == "Li Wei Chen"

    def test_name_fallback_skips_short_text(self):
        card = _card('<a href="/sales/lead/ACw123"><span>Li</span></a>')
        assert extract_name(card, _ctx(SECONDARY)) == ""

    def test_profile_url_is_absolute(self):
        card = _card('<a href="/in/jane-doe/">Jane Doe</a>')
        assert extract_profile_url(card, _ctx()) == "https://www.linkedin.com/in/jane-doe/"

    def test_profile_url_without_base(self):
        card = _card('<a href="/in/jane-doe/">Jane Doe</a>')
        assert extract_profile_url(card, _ctx(base_url="")) == "/in/jane-doe/"

    def test_profile_url_missing(self):
        card = _card('<a href="/company/acme/">Acme</a>')
        assert extract_profile_url(card, _ctx()) == ""


class TestTitleCompany:
    def test_headline_at_split(self):
        card = _card('<div class="entity-result__primary-subtitle">Product Designer at Figma</div>')
        res = resolve_title_company(card, _ctx())
        assert (res.title, res.company) == ("Product Designer", "Figma")

    @pytest.mark.parametrize("headline,expected", [
        ("VP Sales @ Northwind", ("VP Sales", "Northwind")),
        ("Consultante chez Capgemini", ("Consultante", "Capgemini")),
        ("Founder - Acme Labs", ("Founder", "Acme Labs")),
        ("Engineer: Payments", ("Engineer", "Payments")),
    ])
    def test_headline_delimiters(self, headline, expected):
        card = _card(f'<div class="entity-result__primary-subtitle">{headline}</div>')
        res = resolve_title_company(card, _ctx())
        assert (res.title, res.company) == expected

    def test_first_delimiter_in_priority_order_wins(self):
        assert split_on_delimiters("CTO at Acme - Berlin") == ("CTO", "Acme - Berlin")

    def test_current_literal_example(self):
        card = _card(
            '<div class="entity-result__summary">Current: Senior Marketing Manager: '
            'Product Marketing &amp; Sales Enablement at Intuit</div>'
        )
        res = resolve_title_company(card, _ctx())
        assert res.title == "Senior Marketing Manager: Product Marketing & Sales Enablement"
        assert res.company == "Intuit"

    def test_current_basic(self):
        card = _card('<p>Current: Product Designer at Figma</p>')
        res = resolve_title_company(card, _ctx())
        assert (res.title, res.company) == ("Product Designer", "Figma")
        assert res.title_source == "current:basic"

    def test_current_colon_subtitle(self):
        card = _card('<p>Current: Staff Engineer: Platform Infrastructure at Stripe</p>')
        res = resolve_title_company(card, _ctx())
        assert res.title == "Staff Engineer: Platform Infrastructure"
        assert res.company == "Stripe"
        assert res.title_source == "current:subtitle"

    def test_current_stops_at_bullet(self):
        card = _card('<p>Current: Engineer at Acme • 3 yrs</p>')
        res = resolve_title_company(card, _ctx())
        assert (res.title, res.company) == ("Engineer", "Acme")

    def test_current_at_is_word_bounded(self):
        # "Data" contains "at" but is not a delimiter
        card = _card('<p>Current: Data Analyst</p>')
        res = resolve_title_company(card, _ctx())
        assert (res.title, res.company) == ("Data Analyst", "")

    def test_current_at_is_case_insensitive_but_headline_split_is_not(self):
        current = _card('<p>Current: Data Engineer AT Acme</p>')
        assert resolve_title_company(current, _ctx()).company == "Acme"

        headline = _card('<div class="entity-result__primary-subtitle">Data Engineer AT Acme</div>')
        res = resolve_title_company(headline, _ctx())
        assert res.title == "Data Engineer AT Acme"
        assert res.company == ""

    def test_current_picks_most_specific_element(self):
        card = _card(
            '<div><span>Jane Doe</span><div>Current: Designer at Figma</div></div>'
        )
        res = resolve_title_company(card, _ctx())
        assert (res.title, res.company) == ("Designer", "Figma")

    def test_company_filled_from_later_stage(self):
        card = _card(
            '<p>Current: Founder</p>'
            '<div class="entity-result__secondary-subtitle">Acme Robotics</div>'
        )
        res = resolve_title_company(card, _ctx())
        assert res.title == "Founder"
        assert res.company == "Acme Robotics"

    def test_headline_without_delimiter_uses_company_cascade(self):
        card = _card(
            '<div class="entity-result__primary-subtitle">Chief Executive Officer</div>'
            '<div class="entity-result__secondary-subtitle">Globex</div>'
        )
        res = resolve_title_company(card, _ctx())
        assert (res.title, res.company) == ("Chief Executive Officer", "Globex")

    def test_headline_job_title_selector(self):
        card = _card('<p class="job-title">Head of Growth at Initech</p>')
        res = resolve_title_company(card, _ctx())
        assert (res.title, res.company) == ("Head of Growth", "Initech")
        assert res.title_source == "headline:p.job-title"

    def test_direct_title_selector_splits_company(self):
        card = _card('<div data-test-id="job-title">Head of Growth at Initech</div>')
        res = resolve_title_company(card, _ctx())
        assert (res.title, res.company) == ("Head of Growth", "Initech")
        assert res.title_source == 'title:div[data-test-id="job-title"]'
        assert res.company_source == res.title_source

    def test_direct_title_without_company(self):
        card = _card('<div class="pv-entity__secondary-title">Staff Engineer</div>')
        res = resolve_title_company(card, _ctx())
        assert (res.title, res.company) == ("Staff Engineer", "")
        assert res.title_source.startswith("title:")

    def test_nothing_found(self):
        res = resolve_title_company(_card("<span>Jane</span>"), _ctx())
        assert (res.title, res.company) == ("", "")



ROLE_PATTERNS = {rp.label: rp for rp in CURRENT_ROLE_PATTERNS}


class TestCurrentRoleKeywordStages:
    """The keyword and anchor patterns sit behind broader ones, so they are exercised directly."""

    def test_pattern_order(self):
        assert [rp.label for rp in CURRENT_ROLE_PATTERNS] == [
            "literal", "basic", "subtitle", "keyword", "remainder", "anchor",
        ]

    def test_keyword_pattern(self):
        text = "Current: Team lead, Senior Marketing Manager - Growth at Acme Corp"
        assert _apply_role_pattern(ROLE_PATTERNS["keyword"], text) == (
            "Senior Marketing Manager - Growth", "Acme Corp",
        )

    def test_keyword_pattern_without_senior(self):
        text = "Current: Marketing Manager at Globex"
        assert _apply_role_pattern(ROLE_PATTERNS["keyword"], text) == ("Marketing Manager", "Globex")

    def test_keyword_pattern_needs_keyword(self):
        text = "Current: Sales Manager at Acme"
        assert _apply_role_pattern(ROLE_PATTERNS["keyword"], text) == ("", "")

    def test_anchor_cuts_company_at_punctuation(self):
        text = "Current: Senior Marketing Manager for the EMEA region at Acme, Inc and partners"
        assert _apply_role_pattern(ROLE_PATTERNS["anchor"], text) == ("Marketing Manager", "Acme")

    def test_anchor_company_window(self):
        company = "Northwind Traders International Holdings Group"
        text = f"Current: Marketing Manager at {company}"
        title, found = _apply_role_pattern(ROLE_PATTERNS["anchor"], text)
        assert title == "Marketing Manager"
        assert found == company[:30].strip()
        assert len(found) <= 30

    def test_anchor_without_at(self):
        text = "Current: Marketing Manager"
        assert _apply_role_pattern(ROLE_PATTERNS["anchor"], text) == ("Marketing Manager", "")

    def test_anchor_needs_keyword(self):
        assert _apply_role_pattern(ROLE_PATTERNS["anchor"], "Current: Recruiter at Acme") == ("", "")


class TestLocationIndustry:
    def test_location_from_cascade(self):
        card = _card('<div class="entity-result__tertiary-subtitle">San Francisco, CA</div>')
        assert extract_location(card, _ctx()) == "San Francisco, CA"

    def test_location_label_stripped(self):
        card = _card('<div data-test-id="location">Location: Lisbon</div>')
        assert extract_location(card, _ctx()) == "Lisbon"

    def test_location_shape_fallback(self):
        card = _card('<p>Berlin, Germany</p>')
        assert extract_location(card, _ctx()) == "Berlin, Germany"

    def test_location_country_fallback(self):
        card = _card('<div>Canada</div>')
        assert extract_location(card, _ctx()) == "Canada"

    def test_location_missing(self):
        card = _card('<p>Loves hiking and 3D printing.</p>')
        assert extract_location(card, _ctx()) == ""

    def test_industry_secondary(self):
        card = _card('<span class="t-14">Software</span>')
        assert extract_industry(card, _ctx(SECONDARY)) == "Software"

    def test_industry_shape_with_ampersand(self):
        card = _card('<span class="t-black--light">Banking &amp; Finance</span>')
        assert extract_industry(card, _ctx(SECONDARY)) == "Banking & Finance"

    def test_industry_empty_for_primary(self):
        card = _card('<span class="t-14">Software</span>')
        assert extract_industry(card, _ctx(PRIMARY)) == ""


class TestConnectionDegree:
    @pytest.mark.parametrize("inner,expected", [
        ('<span class="distance-badge degree-3"></span>', "3rd"),
        ('<span class="entity-result__badge"><span>• 2nd</span></span>', "2nd"),
        ('<span class="artdeco-entity-lockup__badge first-degree">x</span>', "1st"),
        ('<span data-test-distance-badge>3rd+</span>', "3rd"),
        ('<button aria-label="Invite, 2nd degree connection">Connect</button>', "2nd"),
        ('<span aria-label="1 st degree">x</span>', "1st"),
        ('<span>nothing here</span>', ""),
    ])
    def test_degree(self, inner, expected):
        assert extract_connection_degree(_card(inner)) == expected

    def test_badge_without_degree_does_not_fall_back_to_aria(self):
        card = _card(
            '<span class="entity-result__badge">Premium</span>'
            '<button aria-label="3rd degree connection">Connect</button>'
        )
        assert extract_connection_degree(card) == ""

    def test_degree_is_always_a_known_label(self):
        for inner in ('<span class="distance-badge">Out of network</span>', '<span aria-label="4th">x</span>'):
            assert extract_connection_degree(_card(inner)) in ("", "1st", "2nd", "3rd")


class TestSharedConnections:
    def test_from_insight_element(self):
        card = _card('<div class="entity-result__simple-insight-text">Ana and 12 shared connections</div>')
        assert extract_shared_connections(card) == "Ana and 12 shared connections"

    def test_element_without_marker_is_skipped(self):
        card = _card(
            '<div class="search-result__social-proof">Follows you</div>'
            '<span>7 shared connections</span>'
        )
        assert extract_shared_connections(card) == "7 shared connections"

    def test_from_card_text(self):
        card = _card('<span>Jane Doe</span><span>5 shared connections</span>')
        assert extract_shared_connections(card) == "5 shared connections"

    def test_missing(self):
        assert extract_shared_connections(_card('<span>Jane</span>')) == ""
