"""Reddit Search Client.

The single I/O collaborator of the research pipeline: searches one
subreddit for one query and returns validated :class:`RawResult` objects.

Uses application-only OAuth (``client_credentials``) when
``REDDIT_CLIENT_ID`` / ``REDDIT_CLIENT_SECRET`` are set, and Reddit's
public JSON listing otherwise.

Error contract
--------------
- HTTP 429                          → ``UpstreamRateLimitedError``
- any other non-2xx / network error → ``UpstreamError``
- listing that is not well-formed   → ``UpstreamError``
"""

from __future__ import annotations

import logging
import os
import time
from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError

from ..exceptions import UpstreamError, UpstreamRateLimitedError
from ..http_client import get_client, get_timeout, is_retryable_error
from ..schemas.reddit_schema import RawResult

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Reddit API configuration
# ---------------------------------------------------------------------------
_TOKEN_URL = "https://www.reddit.com/api/v1/access_token"
_OAUTH_BASE_URL = "https://oauth.reddit.com"
_PUBLIC_BASE_URL = "https://www.reddit.com"
_DEFAULT_USER_AGENT = "ProblemRadar/1.0 (problem research)"
_POSTS_PER_SEARCH = 25
_TOKEN_EXPIRY_MARGIN = 60  # seconds

_TIME_PARAMS = {"day", "week", "month", "all"}


def _time_param(time_window: str) -> str:
    """Map a time window to Reddit's ``t`` parameter (unknown → week)."""
    return time_window if time_window in _TIME_PARAMS else "week"


def _to_raw_result(post: Dict[str, Any]) -> RawResult:
    """Validate one listing child's ``data`` into a RawResult."""
    return RawResult(
        id=post["id"],
        title=post.get("title") or "",
        body_text=post.get("selftext") or "",
        author_name=post.get("author") or "[deleted]",
        source_channel=post.get("subreddit") or "",
        score=post.get("score") or 0,
        comment_count=post.get("num_comments") or 0,
        created_at_epoch_seconds=post.get("created_utc") or 0,
        permalink=post.get("permalink") or "",
    )


def parse_listing(payload: Any) -> List[RawResult]:
    """Turn a Reddit search listing into RawResults.

    Raises
    ------
    UpstreamError
        If the payload is not a listing or a post is malformed.
    """
    try:
        children = payload["data"]["children"]
        return [_to_raw_result(child["data"]) for child in children[:_POSTS_PER_SEARCH]]
    except (KeyError, TypeError, ValidationError) as exc:
        raise UpstreamError(f"Malformed Reddit listing: {exc}") from exc


class RedditSearchClient:
    """Async Reddit subreddit search.

    Parameters
    ----------
    client:
        Optional ``httpx.AsyncClient`` (tests pass one with a mock
        transport).  When omitted a client is created per call.
    """

    def __init__(
        self,
        client_id: Optional[str] = None,
        client_secret: Optional[str] = None,
        user_agent: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.client_id = client_id if client_id is not None else os.getenv("REDDIT_CLIENT_ID", "")
        self.client_secret = (
            client_secret if client_secret is not None else os.getenv("REDDIT_CLIENT_SECRET", "")
        )
        self.user_agent = user_agent or os.getenv("REDDIT_USER_AGENT", _DEFAULT_USER_AGENT)
        self._client = client
        self._token: Optional[str] = None
        self._token_expires_at = 0.0

    @property
    def uses_oauth(self) -> bool:
        return bool(self.client_id and self.client_secret)

    async def _send(self, method: str, url: str, **kwargs) -> httpx.Response:
        headers = {"User-Agent": self.user_agent, **kwargs.pop("headers", {})}
        try:
            if self._client is not None:
                return await self._client.request(method, url, headers=headers, **kwargs)
            async with httpx.AsyncClient(timeout=get_timeout("reddit_search")) as client:
                return await client.request(method, url, headers=headers, **kwargs)
        except httpx.HTTPError as exc:
            raise UpstreamError(f"Reddit request failed: {exc}") from exc

    async def _access_token(self) -> str:
        if self._token and time.time() < self._token_expires_at:
            return self._token

        response = await self._send(
            "POST",
            _TOKEN_URL,
            data={"grant_type": "client_credentials"},
            auth=(self.client_id, self.client_secret),
            timeout=get_timeout("reddit_token"),
        )
        if is_retryable_error(response.status_code):
            raise UpstreamRateLimitedError("Reddit token endpoint rate limited")
        if response.status_code != 200:
            raise UpstreamError(
                f"Reddit token request failed: HTTP {response.status_code}",
                status_code=response.status_code,
            )

        data = response.json()
        token = data.get("access_token")
        if not token:
            raise UpstreamError("Reddit token response has no access_token")

        self._token = token
        self._token_expires_at = time.time() + float(data.get("expires_in", 3600)) - _TOKEN_EXPIRY_MARGIN
        logger.info("Reddit OAuth token acquired")
        return token

    async def search(self, source: str, query: str, time_window: str = "week") -> List[RawResult]:
        """Search r/*source* for *query* within *time_window*."""
        params = {
            "q": query,
            "restrict_sr": 1,
            "sort": "relevance",
            "t": _time_param(time_window),
            "limit": _POSTS_PER_SEARCH,
        }
        headers: dict[str, str] = {}
        if self.uses_oauth:
            headers["Authorization"] = f"Bearer {await self._access_token()}"
            url = f"{_OAUTH_BASE_URL}/r/{source}/search"
        else:
            url = f"{_PUBLIC_BASE_URL}/r/{source}/search.json"

        response = await self._send("GET", url, params=params, headers=headers)

        if is_retryable_error(response.status_code):
            raise UpstreamRateLimitedError(f"Rate limited searching r/{source}")
        if response.status_code == 401 and self.uses_oauth:
            self._token = None
        if response.status_code != 200:
            raise UpstreamError(
                f"Reddit search on r/{source} failed: HTTP {response.status_code}",
                status_code=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise UpstreamError(f"Reddit returned non-JSON for r/{source}") from exc
        return parse_listing(payload)


# Shared search client (lazily initialized) so the OAuth token outlives a request
_reddit_client: Optional[RedditSearchClient] = None


async def get_reddit_client() -> RedditSearchClient:
    """Get the process-wide Reddit search client."""
    global _reddit_client
    if _reddit_client is None:
        _reddit_client = RedditSearchClient(client=await get_client())
    return _reddit_client


def reset_reddit_client() -> None:
    """Drop the shared client (call when the HTTP client is closed)."""
    global _reddit_client
    _reddit_client = None
