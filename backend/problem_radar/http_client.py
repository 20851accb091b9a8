"""
Async HTTP Client Configuration

Provides a shared httpx.AsyncClient with connection pooling, timeout
presets for Reddit, and the retry/backoff constants the search scheduler
is built from.
"""

import httpx
from typing import Optional


# Timeout configurations (in seconds)
class Timeouts:
    """Timeout presets for external services."""
    REDDIT_TOKEN = 8.0      # OAuth token exchange
    REDDIT_SEARCH = 10.0    # Subreddit search listing


# Retry configuration
class RetryConfig:
    """Retry settings for rate-limited searches.

    Searches run one at a time; ``INTER_REQUEST_DELAY`` is the pause
    between two consecutive searches.
    """
    MAX_RETRIES = 3
    INITIAL_BACKOFF = 2.0        # seconds; doubles on every retry
    INTER_REQUEST_DELAY = 1.0    # seconds

    # Retryable status codes (only throttling is retried)
    RETRYABLE_CODES = {429}


# Shared client instance (lazily initialized)
_client: Optional[httpx.AsyncClient] = None


async def get_client() -> httpx.AsyncClient:
    """Get the shared async HTTP client."""
    global _client
    if _client is None:
        _client = httpx.AsyncClient(
            timeout=httpx.Timeout(Timeouts.REDDIT_SEARCH, connect=5.0),
            limits=httpx.Limits(max_keepalive_connections=10, max_connections=20),
            follow_redirects=True,
        )
    return _client


async def close_client():
    """Close the shared client (call on app shutdown)."""
    global _client
    if _client is not None:
        await _client.aclose()
        _client = None


def get_timeout(service: str) -> httpx.Timeout:
    """Get timeout configuration for a service."""
    timeouts = {
        "reddit_token": Timeouts.REDDIT_TOKEN,
        "reddit_search": Timeouts.REDDIT_SEARCH,
    }
    seconds = timeouts.get(service.lower(), 10.0)
    return httpx.Timeout(seconds, connect=5.0)


def is_retryable_error(status_code: int) -> bool:
    """Check if an HTTP error is retryable."""
    return status_code in RetryConfig.RETRYABLE_CODES
