"""Solution discovery tests — categorization, ranking, backfill, truncation, catalog immutability."""

import os
import sys
from datetime import datetime, timedelta, timezone

# Ensure the backend package is importable
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest

from problem_radar.schemas.solution_schema import Solution
from problem_radar.services.solution_catalog import (
    SolutionCatalog,
    get_active_catalog,
    load_default_catalog,
    replace_active_catalog,
    reset_active_catalog,
)
from problem_radar.services.solution_discovery import (
    categorize_problem,
    find_solutions,
    rank_solutions,
    search_confidence,
)

NOW = datetime(2024, 6, 1, tzinfo=timezone.utc)


def _solution(name, rating=4.0, reviews=100, tags=None, updated=NOW - timedelta(days=400)):
    return Solution(
        name=name,
        description=f"{name} product",
        website_url=f"https://{name.lower().replace(' ', '')}.example",
        pricing_text="$10/month",
        rating=rating,
        review_count=reviews,
        category="Test",
        source_kind="manual",
        tags=tags or [],
        last_updated=updated,
    )


@pytest.fixture(autouse=True)
def fresh_catalog():
    reset_active_catalog()
    yield
    reset_active_catalog()


class TestCategorizeProblem:
    def test_payment(self):
        assert categorize_problem("Payment Processing Issues", ["payment", "checkout"]) == "payment"

    def test_keywords_take_part(self):
        assert categorize_problem("Some Related Issues", ["shipping", "tracking", "delivery"]) == "shipping"

    def test_no_terms_is_general(self):
        assert categorize_problem("General Business Challenges", []) == "general"


class TestRanking:
    def test_better_match_ranks_first(self):
        weak = _solution("Weak", rating=1.0, reviews=0)
        strong = _solution("Strong", rating=5.0, reviews=5000, tags=["checkout", "payment"])
        ranked = rank_solutions([weak, strong], "payment checkout", [], now=NOW)
        assert [s.name for s in ranked] == ["Strong", "Weak"]

    def test_recent_update_breaks_tie(self):
        stale = _solution("Stale")
        fresh = _solution("Fresh", updated=NOW - timedelta(days=2))
        ranked = rank_solutions([stale, fresh], "unrelated words", [], now=NOW)
        assert ranked[0].name == "Fresh"

    def test_search_confidence(self):
        assert search_confidence("payment", 3) == pytest.approx(1.0)
        assert search_confidence("general", 0) == pytest.approx(0.5)
        assert search_confidence("unknown", 20) == pytest.approx(0.6)


class TestFindSolutions:
    def test_thin_category_is_backfilled(self):
        result = find_solutions("Payment Processing Issues", ["payment", "checkout"], now=NOW)
        names = [s.name for s in result.solutions]
        assert result.category == "payment"
        assert set(names[:3]) == {"ReConvert", "Bold Cashier", "Stripe"}
        assert names[3:] == ["Custom Development", "Airtable"]
        assert result.total_found == 5

    def test_general_gets_generic_entries(self):
        result = find_solutions("General Business Challenges", [], now=NOW)
        assert result.category == "general"
        assert [s.name for s in result.solutions] == ["Custom Development", "Airtable"]
        assert result.search_confidence == pytest.approx(0.6)

    def test_truncated_to_six(self):
        catalog = SolutionCatalog({"payment": [_solution(f"Pay {i}") for i in range(8)]})
        result = find_solutions("Payment Processing Issues", ["payment"], catalog=catalog, now=NOW)
        assert len(result.solutions) == 6
        assert result.total_found == 8

    def test_empty_catalog_finds_nothing(self):
        result = find_solutions("Payment Processing Issues", ["payment"], catalog=SolutionCatalog({}), now=NOW)
        assert result.solutions == []
        assert result.total_found == 0
        assert result.search_confidence == pytest.approx(0.9)


class TestSolutionCatalog:
    def test_default_catalog_shape(self):
        catalog = load_default_catalog()
        assert catalog.stats() == {
            "payment": 3,
            "inventory": 3,
            "shipping": 3,
            "customer_service": 3,
            "marketing": 3,
            "analytics": 3,
            "technical": 3,
        }
        assert len(catalog.generic_solutions()) == 2

    def test_entries_stamped_at_load(self):
        loaded_at = datetime(2024, 1, 1, tzinfo=timezone.utc)
        catalog = SolutionCatalog({"payment": [_solution("Pay", updated=None)]}, loaded_at=loaded_at)
        assert catalog.solutions_for("payment")[0].last_updated == loaded_at

    def test_with_solution_returns_new_catalog(self):
        catalog = load_default_catalog()
        extended = catalog.with_solution("payment", _solution("PayFast", updated=None))

        assert catalog.stats()["payment"] == 3
        assert extended.stats()["payment"] == 4
        assert extended.solutions_for("payment")[-1].last_updated is not None

    def test_returned_lists_do_not_leak_state(self):
        catalog = load_default_catalog()
        catalog.solutions_for("payment").clear()
        assert len(catalog.solutions_for("payment")) == 3

    def test_replace_active_catalog(self):
        original = get_active_catalog()
        replacement = original.with_solution("crm", _solution("Pipedrive"))
        replace_active_catalog(replacement)

        assert get_active_catalog() is replacement
        assert "crm" not in original.categories()
