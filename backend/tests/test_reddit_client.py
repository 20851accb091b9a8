"""Reddit search client tests — listing parsing, public and OAuth modes, error mapping (httpx.MockTransport)."""

import asyncio
import os
import sys

# Ensure the backend package is importable
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import httpx
import pytest

from problem_radar.exceptions import UpstreamError, UpstreamRateLimitedError
from problem_radar.services.reddit_client import RedditSearchClient, parse_listing


def _listing(*posts):
    return {"kind": "Listing", "data": {"children": [{"kind": "t3", "data": post} for post in posts]}}


POST = {
    "id": "abc123",
    "title": "Checkout keeps failing",
    "selftext": "Customers cannot finish checkout since the last update.",
    "author": "merchant42",
    "subreddit": "shopify",
    "score": 17,
    "num_comments": 9,
    "created_utc": 1_700_000_000.0,
    "permalink": "/r/shopify/comments/abc123/checkout_keeps_failing/",
}


def _search(handler, query="problem with", time_window="week", **client_kwargs):
    """Run one search against a mock transport and return the results."""

    async def run():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
            reddit = RedditSearchClient(client=http, **client_kwargs)
            return await reddit.search("shopify", query, time_window)

    return asyncio.run(run())


PUBLIC = {"client_id": "", "client_secret": ""}


class TestParseListing:
    def test_valid_post(self):
        results = parse_listing(_listing(POST))
        assert len(results) == 1
        result = results[0]
        assert result.id == "abc123"
        assert result.body_text.startswith("Customers cannot")
        assert result.comment_count == 9
        assert result.url == "https://reddit.com/r/shopify/comments/abc123/checkout_keeps_failing/"

    def test_missing_author_and_selftext(self):
        post = dict(POST, author=None, selftext=None)
        result = parse_listing(_listing(post))[0]
        assert result.author_name == "[deleted]"
        assert result.body_text == ""

    def test_malformed_listing(self):
        with pytest.raises(UpstreamError):
            parse_listing({"unexpected": True})

    def test_post_without_id(self):
        post = {k: v for k, v in POST.items() if k != "id"}
        with pytest.raises(UpstreamError):
            parse_listing(_listing(post))

    def test_at_most_25_posts(self):
        posts = [dict(POST, id=f"p{i}") for i in range(40)]
        assert len(parse_listing(_listing(*posts))) == 25


class TestPublicSearch:
    def test_request_shape(self):
        seen = {}

        def handler(request):
            seen["url"] = request.url
            seen["agent"] = request.headers.get("user-agent")
            return httpx.Response(200, json=_listing(POST))

        results = _search(handler, query="checkout broken", time_window="month", user_agent="test-agent", **PUBLIC)

        assert [r.id for r in results] == ["abc123"]
        assert seen["url"].host == "www.reddit.com"
        assert seen["url"].path == "/r/shopify/search.json"
        assert seen["url"].params["q"] == "checkout broken"
        assert seen["url"].params["restrict_sr"] == "1"
        assert seen["url"].params["sort"] == "relevance"
        assert seen["url"].params["t"] == "month"
        assert seen["agent"] == "test-agent"

    def test_unknown_window_falls_back_to_week(self):
        seen = {}

        def handler(request):
            seen["t"] = request.url.params["t"]
            return httpx.Response(200, json=_listing())

        _search(handler, time_window="year", **PUBLIC)
        assert seen["t"] == "week"

    def test_rate_limited(self):
        def handler(request):
            return httpx.Response(429)

        with pytest.raises(UpstreamRateLimitedError):
            _search(handler, **PUBLIC)

    def test_server_error(self):
        def handler(request):
            return httpx.Response(503)

        with pytest.raises(UpstreamError) as exc_info:
            _search(handler, **PUBLIC)
        assert exc_info.value.status_code == 503
        assert not isinstance(exc_info.value, UpstreamRateLimitedError)

    def test_non_json_body(self):
        def handler(request):
            return httpx.Response(200, text="<html>maintenance</html>")

        with pytest.raises(UpstreamError):
            _search(handler, **PUBLIC)

    def test_network_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(UpstreamError):
            _search(handler, **PUBLIC)


class TestOAuthSearch:
    def test_token_fetched_once_and_sent(self):
        calls = {"token": 0, "search": []}

        def handler(request):
            if request.url.path == "/api/v1/access_token":
                calls["token"] += 1
                return httpx.Response(200, json={"access_token": "tok", "expires_in": 3600})
            calls["search"].append((request.url.host, request.url.path, request.headers.get("authorization")))
            return httpx.Response(200, json=_listing(POST))

        async def run():
            async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
                reddit = RedditSearchClient("id", "secret", client=http)
                await reddit.search("shopify", "problem with")
                await reddit.search("ecommerce", "issue with")

        asyncio.run(run())

        assert calls["token"] == 1
        assert calls["search"] == [
            ("oauth.reddit.com", "/r/shopify/search", "Bearer tok"),
            ("oauth.reddit.com", "/r/ecommerce/search", "Bearer tok"),
        ]

    def test_token_failure(self):
        def handler(request):
            return httpx.Response(401, json={"error": "invalid_grant"})

        with pytest.raises(UpstreamError):
            _search(handler, client_id="id", client_secret="bad")

    def test_env_credentials(self, monkeypatch):
        monkeypatch.setenv("REDDIT_CLIENT_ID", "env-id")
        monkeypatch.setenv("REDDIT_CLIENT_SECRET", "env-secret")
        assert RedditSearchClient().uses_oauth is True

    def test_no_credentials_uses_public_search(self, monkeypatch):
        monkeypatch.delenv("REDDIT_CLIENT_ID", raising=False)
        monkeypatch.delenv("REDDIT_CLIENT_SECRET", raising=False)
        assert RedditSearchClient().uses_oauth is False
