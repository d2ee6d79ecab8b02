"""Tests for the client-side search and filter engine."""
import random

import pytest

from catalog.core.search import (
    apply_filters,
    build_search_text,
    filter_applications,
    fuzzy_match,
    generate_app_code,
    get_search_suggestions,
    search_applications,
    summarize_applications,
    visible_applications,
)
from catalog.core.store import AppState
from catalog.schemas.search import FilterState
from tests.factories import make_app


def catalog():
    return [
        make_app(
            "HR1", "Employee Management System",
            description="Payroll and onboarding",
            functionalDomains=["Human Resources"],
            technicalStack=["React", "PostgreSQL"],
            status="Active",
            stakeholders={"productOwner": "Sarah Johnson"},
        ),
        make_app(
            "FN1", "Financial Planning Tool",
            functionalDomains=["Finance", "Analytics"],
            technicalStack=["Java"],
            status="Active",
        ),
        make_app(
            "MK1", "Digital Marketing Hub",
            functionalDomains=["Marketing"],
            technicalStack=["Python", "Redis"],
            status="Deprecated",
        ),
    ]


class TestFuzzyMatch:
    """Substring match with in-order subsequence fallback."""

    def test_substring_case_insensitive(self):
        assert fuzzy_match("Human Resources", "RESOURCE") is True

    def test_subsequence(self):
        assert fuzzy_match("Employee Management", "empmgmt") is True

    def test_out_of_order_characters_do_not_match(self):
        assert fuzzy_match("abc", "cba") is False

    def test_query_longer_than_text(self):
        assert fuzzy_match("ab", "abc") is False

    def test_empty_query_matches(self):
        assert fuzzy_match("anything", "") is True

    @pytest.mark.parametrize("text, query, expected", [
        ("Employee Management System", "ems", True),
        ("HR1", "xyz", False),
        ("HR1", "hr1", True),
    ])
    def test_examples(self, text, query, expected):
        assert fuzzy_match(text, query) is expected


class TestSearchApplications:

    def test_blank_query_returns_input_list(self):
        apps = catalog()
        assert search_applications(apps, "") is apps
        assert search_applications(apps, "   ") is apps

    def test_matches_on_name(self):
        result = search_applications(catalog(), "marketing")
        assert [a.app_code for a in result] == ["MK1"]

    def test_matches_on_stakeholder_name(self):
        result = search_applications(catalog(), "sarah johnson")
        assert [a.app_code for a in result] == ["HR1"]

    def test_matches_on_stack_and_preserves_order(self):
        apps = catalog()
        result = search_applications(apps, "a")
        assert [a.app_code for a in result] == ["HR1", "FN1", "MK1"]

    @pytest.mark.parametrize("query", ["hr", "java", "xq", "act", "sj"])
    def test_result_is_exactly_the_matching_apps(self, query):
        apps = catalog()
        result = search_applications(apps, query)
        for app in apps:
            assert (app in result) == fuzzy_match(build_search_text(app), query)

    def test_no_match(self):
        assert search_applications(catalog(), "zzzzzz") == []

    def test_search_text_includes_every_field(self):
        app = catalog()[0]
        text = build_search_text(app)
        for fragment in ("HR1", "Employee", "Payroll", "Human Resources", "React", "Active", "Sarah Johnson"):
            assert fragment in text


class TestSuggestions:

    def test_blank_query_yields_nothing(self):
        assert get_search_suggestions(catalog(), "  ") == []

    def test_distinct_and_ordered(self):
        apps = catalog() + [make_app("AN1", "Analytics Portal", functionalDomains=["Analytics"])]
        suggestions = get_search_suggestions(apps, "analytic")
        assert suggestions == ["Analytics", "Analytics Portal"]

    def test_limit(self):
        suggestions = get_search_suggestions(catalog(), "e", limit=2)
        assert len(suggestions) == 2

    def test_default_limit_is_five(self):
        apps = [make_app(f"A{i}", f"App {i}") for i in range(9)]
        assert len(get_search_suggestions(apps, "app")) == 5

    def test_substring_only_no_fuzzy(self):
        assert get_search_suggestions(catalog(), "empmgmt") == []


class TestFilters:

    def test_domain_filter_any_overlap(self):
        result = apply_filters(catalog(), FilterState(domains=["Finance"]))
        assert [a.app_code for a in result] == ["FN1"]

    def test_domain_filter_multiple(self):
        result = apply_filters(catalog(), FilterState(domains=["Finance", "Marketing"]))
        assert [a.app_code for a in result] == ["FN1", "MK1"]

    def test_status_filter(self):
        result = apply_filters(catalog(), FilterState(statuses=["Deprecated"]))
        assert [a.app_code for a in result] == ["MK1"]

    def test_domain_and_status_combined(self):
        filters = FilterState(domains=["Finance", "Marketing"], statuses=["Active"])
        assert [a.app_code for a in apply_filters(catalog(), filters)] == ["FN1"]

    def test_empty_filters_pass_everything(self):
        apps = catalog()
        assert apply_filters(apps, FilterState()) == apps

    def test_stakeholder_facet_is_ignored(self):
        apps = catalog()
        assert apply_filters(apps, FilterState(stakeholders=["Nobody"])) == apps

    def test_search_then_filter(self):
        result = filter_applications(catalog(), "a", FilterState(statuses=["Active"]))
        assert [a.app_code for a in result] == ["HR1", "FN1"]

    def test_visible_applications_from_state(self):
        state = AppState(applications=catalog(), search_query="", filters=FilterState(domains=["Finance"]))
        assert [a.app_code for a in visible_applications(state)] == ["FN1"]


class TestGenerateAppCode:

    def test_format(self):
        code = generate_app_code(rng=random.Random(7))
        assert len(code) == 3
        assert code[:2].isalpha() and code[:2].isupper()
        assert code[2].isdigit()

    def test_avoids_existing_codes(self):
        rng = random.Random(1)
        first = generate_app_code(rng=random.Random(1))
        second = generate_app_code({first}, rng=rng)
        assert second != first


class TestSummarize:

    def test_counts(self):
        stats = summarize_applications(catalog())
        assert stats.total_apps == 3
        assert stats.active_apps == 2
        assert stats.deprecated == 1
        assert stats.in_development == 0
        assert stats.total_domains == 4
        assert stats.total_tech_stack == 5
        assert stats.by_domain["Analytics"] == 1
        assert stats.by_status == {"Active": 2, "Deprecated": 1}

    def test_empty_catalog(self):
        stats = summarize_applications([])
        assert stats.total_apps == 0
        assert stats.by_domain == {}
