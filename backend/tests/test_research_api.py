"""Research API tests — full pipeline over fake searches, empty results, error mapping, catalog admin."""

import asyncio
import os
import sys
import time

# Ensure the backend package is importable
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from fastapi.testclient import TestClient

from problem_radar.exceptions import ResearchPipelineError
from problem_radar.http_client import close_client
from problem_radar.main import app
from problem_radar.routers.research import get_scheduler, get_solution_catalog
from problem_radar.schemas.reddit_schema import RawResult
from problem_radar.services.reddit_client import reset_reddit_client
from problem_radar.services.research_service import NO_RESULTS_MESSAGE, run_research
from problem_radar.services.search_scheduler import BoundedSearchScheduler, SearchPolicy
from problem_radar.services.solution_catalog import SolutionCatalog, reset_active_catalog

SHOPIFY_QUERY = "I want to find what Shopify store owners are lately bothered with"

PAYMENT = ("Payment checkout failing again", "Every payment at checkout fails and billing is a mess for our store")
SHIPPING = ("Shipping delays everywhere", "Our shipping carrier delivery times keep slipping and tracking is useless")
INVENTORY = ("Inventory supplier issues", "The supplier keeps sending the wrong stock to our warehouse every month")


def _result(result_id, text, created):
    title, body = text
    return RawResult(
        id=result_id,
        title=title,
        body_text=body,
        author_name="merchant",
        source_channel="shopify",
        score=12,
        comment_count=6,
        created_at_epoch_seconds=created,
        permalink=f"/r/shopify/comments/{result_id}",
    )


def _threads(created):
    return [
        _result("p1", PAYMENT, created),
        _result("p2", PAYMENT, created),
        _result("p3", PAYMENT, created),
        _result("s1", SHIPPING, created),
        _result("s2", SHIPPING, created),
        _result("i1", INVENTORY, created),
    ]


class FakeSearch:
    """Records every (source, query, window) call and returns fixed threads."""

    def __init__(self, results):
        self.results = results
        self.calls = []

    async def __call__(self, source, query, time_window):
        self.calls.append((source, query, time_window))
        return list(self.results)


async def _no_sleep(seconds):
    return None


def _scheduler(search):
    return BoundedSearchScheduler(search, SearchPolicy(inter_task_delay=0, max_retries=0), sleep=_no_sleep)


class ExplodingScheduler:
    async def run(self, sources, seed_queries, keywords, time_window):
        raise RuntimeError("boom")


client = TestClient(app)


@pytest.fixture(autouse=True)
def clean_state():
    reset_active_catalog()
    yield
    app.dependency_overrides.clear()
    reset_active_catalog()


def _use_search(search):
    app.dependency_overrides[get_scheduler] = lambda: _scheduler(search)
    return search


# ===================================================================== #
#  POST /research                                                         #
# ===================================================================== #

class TestResearchEndpoint:
    def test_full_pipeline(self):
        search = _use_search(FakeSearch(_threads(time.time() - 3600)))

        res = client.post("/research", json={"query": SHOPIFY_QUERY})

        assert res.status_code == 200, res.text
        data = res.json()
        assert data["original_input"] == SHOPIFY_QUERY
        assert data["parsed_query"]["target_audience"] == "Shopify store owners"
        assert data["total_results_analyzed"] == 6
        assert data["message"] is None
        assert data["processing_time_ms"] >= 0
        assert len(search.calls) == 42
        assert {window for _, _, window in search.calls} == {"week"}

        titles = [c["title"] for c in data["clusters"]]
        assert sorted(titles) == ["Payment Processing Issues", "Shipping and Fulfillment Challenges"]
        scores = [c["opportunity_score"] for c in data["clusters"]]
        assert scores == sorted(scores, reverse=True)
        for cluster in data["clusters"]:
            assert cluster["thread_count"] >= 2
            assert len(cluster["existing_solutions"]["solutions"]) <= 6
            assert cluster["trend_direction"] == "rising"

        assert data["insights"]["top_problems"] == titles
        assert 0.0 <= data["overall_confidence"] <= 1.0

    def test_overall_confidence(self):
        _use_search(FakeSearch(_threads(time.time() - 3600)))
        data = client.post("/research", json={"query": SHOPIFY_QUERY}).json()
        # 0.3 * 1.0 parse + 6/50 results + 0.4 * mean(0.3, 0.2)
        assert data["overall_confidence"] == pytest.approx(0.3 + 0.12 + 0.1)

    def test_empty_results(self):
        _use_search(FakeSearch([]))

        res = client.post("/research", json={"query": SHOPIFY_QUERY})

        assert res.status_code == 200
        data = res.json()
        assert data["clusters"] == []
        assert data["total_results_analyzed"] == 0
        assert data["overall_confidence"] == 0
        assert data["message"] == NO_RESULTS_MESSAGE
        assert len(data["insights"]["actionable_recommendations"]) == 2

    def test_short_query_rejected(self):
        search = _use_search(FakeSearch([]))

        res = client.post("/research", json={"query": "too short"})

        assert res.status_code == 400
        detail = res.json()["detail"]
        assert "error" in detail
        assert detail["example"] == SHOPIFY_QUERY
        assert search.calls == []

    def test_missing_query_field(self):
        search = _use_search(FakeSearch([]))

        res = client.post("/research", json={})

        assert res.status_code == 400
        detail = res.json()["detail"]
        assert "error" in detail
        assert "suggestion" in detail
        assert detail["example"] == SHOPIFY_QUERY
        assert search.calls == []

    def test_pipeline_failure_is_500(self):
        app.dependency_overrides[get_scheduler] = lambda: ExplodingScheduler()

        res = client.post("/research", json={"query": SHOPIFY_QUERY})

        assert res.status_code == 500
        assert res.json()["detail"].startswith("Research failed: search: RuntimeError: boom")

    def test_empty_catalog_exposes_solution_gaps(self):
        _use_search(FakeSearch(_threads(time.time() - 3600)))
        app.dependency_overrides[get_solution_catalog] = lambda: SolutionCatalog({})

        data = client.post("/research", json={"query": SHOPIFY_QUERY}).json()

        assert all(c["existing_solutions"]["solutions"] == [] for c in data["clusters"])
        assert sorted(data["insights"]["solution_gaps"]) == sorted(c["title"] for c in data["clusters"])


class TestRunResearch:
    def test_pipeline_error_carries_stage(self):
        with pytest.raises(ResearchPipelineError) as exc_info:
            asyncio.run(run_research(SHOPIFY_QUERY, ExplodingScheduler()))
        assert exc_info.value.stage == "search"

    def test_reference_time_drives_trend(self):
        now = 1_700_000_000
        scheduler = _scheduler(FakeSearch(_threads(now - 60 * 24 * 3600)))
        report = asyncio.run(run_research(SHOPIFY_QUERY, scheduler, now=now))
        assert {c.trend_direction for c in report.clusters} == {"declining"}
        assert report.insights.emerging_trends == []


class TestSchedulerDependency:
    def test_reddit_client_shared_across_requests(self):
        async def build_two():
            reset_reddit_client()
            try:
                first = await get_scheduler()
                second = await get_scheduler()
                return first.search.__self__, second.search.__self__
            finally:
                await close_client()
                reset_reddit_client()

        first, second = asyncio.run(build_two())
        assert first is second


# ===================================================================== #
#  POST /research/parse                                                   #
# ===================================================================== #

class TestParseEndpoint:
    def test_parse(self):
        res = client.post("/research/parse", json={"query": SHOPIFY_QUERY})
        assert res.status_code == 200
        data = res.json()
        assert data["input"] == SHOPIFY_QUERY
        assert data["is_valid"] is True
        assert data["parsed"]["intent_category"] == "find_problems"
        assert data["summary"].startswith("Looking for problems and pain points")

    def test_parse_short_input(self):
        res = client.post("/research/parse", json={"query": "hi"})
        assert res.status_code == 400


# ===================================================================== #
#  Solution catalog                                                       #
# ===================================================================== #

NEW_SOLUTION = {
    "name": "PayFast",
    "description": "Faster checkout for small stores",
    "website_url": "https://payfast.example",
    "pricing_text": "$15/month",
    "rating": 4.1,
    "review_count": 42,
    "category": "Payment Processing",
    "source_kind": "manual",
    "tags": ["checkout", "payment"],
}


class TestCatalogEndpoints:
    def test_categories(self):
        res = client.get("/research/solutions/categories")
        assert res.status_code == 200
        data = res.json()
        assert len(data["categories"]) == 7
        assert data["solution_counts"]["payment"] == 3
        assert data["generic_solutions"] == 2

    def test_add_solution_swaps_catalog(self):
        res = client.post("/research/solutions/payment", json={"solution": NEW_SOLUTION})
        assert res.status_code == 201
        assert res.json()["solution_counts"]["payment"] == 4

        data = client.get("/research/solutions/categories").json()
        assert data["solution_counts"]["payment"] == 4

    def test_add_solution_new_category(self):
        client.post("/research/solutions/crm", json={"solution": NEW_SOLUTION})
        data = client.get("/research/solutions/categories").json()
        assert "crm" in data["categories"]
        assert data["solution_counts"]["crm"] == 1

    def test_invalid_rating_rejected(self):
        bad = dict(NEW_SOLUTION, rating=7)
        res = client.post("/research/solutions/payment", json={"solution": bad})
        assert res.status_code == 422


class TestHealth:
    def test_research_health(self):
        assert client.get("/research/health").json()["status"] == "healthy"

    def test_global_health(self):
        assert client.get("/health").json()["service"] == "problem-radar"

    def test_root(self):
        assert "research" in client.get("/").json()["endpoints"]
