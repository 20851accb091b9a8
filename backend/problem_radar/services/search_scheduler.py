"""Bounded Search Scheduler.

Builds a prioritized queue of (source, query) searches from a
:class:`ParsedQuery`, runs it strictly one task at a time with a fixed
pause between tasks, retries throttled calls with exponential backoff,
then de-duplicates and quality-filters what came back.

Sequential execution is the rate-limit strategy: tasks are never run
concurrently.

Rules
-----
- The only I/O in the research pipeline happens here (via ``search``)
- A failing task never aborts the batch
- Only an unbuildable queue raises
"""

from __future__ import annotations

import asyncio
import logging
import os
from dataclasses import dataclass
from typing import Awaitable, Callable, Iterable, List, Optional

from ..exceptions import SearchQueueError, UpstreamRateLimitedError
from ..http_client import RetryConfig
from ..schemas.reddit_schema import RawResult
from ..schemas.query_schema import SearchTask

logger = logging.getLogger(__name__)

SearchFunction = Callable[[str, str, str], Awaitable[List[RawResult]]]
SleepFunction = Callable[[float], Awaitable[None]]

# ---------------------------------------------------------------------------
# Queue shape and result caps
# ---------------------------------------------------------------------------
_SEED_SOURCES = 5
_SEED_QUERIES = 6
_KEYWORD_SOURCES = 3
_KEYWORDS = 4

MAX_TASKS = _SEED_SOURCES * _SEED_QUERIES + _KEYWORD_SOURCES * _KEYWORDS

_RESULTS_PER_TASK = 20
_MAX_QUALITY_RESULTS = 150
_MIN_BODY_LENGTH = 20
_REMOVED_MARKERS = ("[deleted]", "[removed]")


@dataclass(frozen=True)
class SearchPolicy:
    """Pacing and retry policy applied around every search call."""

    inter_task_delay: float = RetryConfig.INTER_REQUEST_DELAY
    max_retries: int = RetryConfig.MAX_RETRIES
    initial_backoff: float = RetryConfig.INITIAL_BACKOFF
    results_per_task: int = _RESULTS_PER_TASK
    max_results: int = _MAX_QUALITY_RESULTS

    def backoff(self, attempt: int) -> float:
        """Seconds to wait before retry number ``attempt + 1``."""
        return self.initial_backoff * (2 ** attempt)

    @classmethod
    def from_env(cls) -> "SearchPolicy":
        """Build a policy from ``SEARCH_*`` environment variables (milliseconds)."""
        delay_ms = os.getenv("SEARCH_DELAY_MS")
        retries = os.getenv("SEARCH_MAX_RETRIES")
        backoff_ms = os.getenv("SEARCH_BACKOFF_MS")
        return cls(
            inter_task_delay=int(delay_ms) / 1000 if delay_ms else RetryConfig.INTER_REQUEST_DELAY,
            max_retries=int(retries) if retries else RetryConfig.MAX_RETRIES,
            initial_backoff=int(backoff_ms) / 1000 if backoff_ms else RetryConfig.INITIAL_BACKOFF,
        )


# ===================================================================== #
#  Queue construction & post-processing (pure)                            #
# ===================================================================== #

def build_search_queue(
    sources: List[str],
    seed_queries: List[str],
    keywords: Optional[List[str]] = None,
) -> List[SearchTask]:
    """Materialize the full, priority-sorted task queue.

    Priority 1: first 5 sources × first 6 seed queries.
    Priority 2: first 3 sources × first 4 keywords (when keywords exist).
    The sort is stable, so ties keep insertion order.

    Raises
    ------
    SearchQueueError
        When there are no sources, or no task could be produced.
    """
    if not sources:
        raise SearchQueueError("Cannot build a search queue without sources")

    queue: list[SearchTask] = []
    for source in sources[:_SEED_SOURCES]:
        for query in seed_queries[:_SEED_QUERIES]:
            queue.append(SearchTask(source_channel=source, query_text=query, priority=1, kind="query"))

    if keywords:
        for source in sources[:_KEYWORD_SOURCES]:
            for keyword in keywords[:_KEYWORDS]:
                queue.append(SearchTask(source_channel=source, query_text=keyword, priority=2, kind="keyword"))

    if not queue:
        raise SearchQueueError("Search queue is empty: no seed queries or keywords")

    return sorted(queue, key=lambda task: task.priority)


def dedupe_results(results: Iterable[RawResult]) -> List[RawResult]:
    """Collapse results sharing an id; the last one seen wins.

    Output order is the order in which each id was first seen.
    """
    by_id: dict[str, RawResult] = {}
    for result in results:
        by_id[result.id] = result
    return list(by_id.values())


def is_quality_result(result: RawResult) -> bool:
    """Substantive body, non-negative score, not deleted/removed."""
    title = result.title.lower()
    return (
        len(result.body_text) > _MIN_BODY_LENGTH
        and result.score >= 0
        and not any(marker in title for marker in _REMOVED_MARKERS)
    )


# ===================================================================== #
#  Scheduler                                                              #
# ===================================================================== #

class BoundedSearchScheduler:
    """Runs search tasks serially around an opaque ``search`` callable.

    ``search(source, query, time_window)`` must raise
    :class:`UpstreamRateLimitedError` on throttling and any other exception
    on other failures.  ``sleep`` is injectable so tests can run without
    real waiting.
    """

    def __init__(
        self,
        search: SearchFunction,
        policy: Optional[SearchPolicy] = None,
        sleep: SleepFunction = asyncio.sleep,
    ):
        self.search = search
        self.policy = policy or SearchPolicy()
        self.sleep = sleep

    async def _search_with_retry(self, task: SearchTask, time_window: str) -> List[RawResult]:
        attempt = 0
        while True:
            try:
                results = await self.search(task.source_channel, task.query_text, time_window)
                return list(results)[: self.policy.results_per_task]
            except UpstreamRateLimitedError:
                if attempt >= self.policy.max_retries:
                    raise
                delay = self.policy.backoff(attempt)
                logger.warning(
                    "[SEARCH] Rate limited on r/%s — retrying in %.1fs (attempt %d/%d)",
                    task.source_channel, delay, attempt + 1, self.policy.max_retries,
                )
                await self.sleep(delay)
                attempt += 1

    async def execute(self, tasks: List[SearchTask], time_window: str) -> List[RawResult]:
        """Run *tasks* in order and return every raw result collected."""
        collected: list[RawResult] = []
        total = len(tasks)

        for index, task in enumerate(tasks, 1):
            logger.info(
                "[SEARCH] [%d/%d] r/%s %r (%s)",
                index, total, task.source_channel, task.query_text, task.kind,
            )
            try:
                results = await self._search_with_retry(task, time_window)
            except UpstreamRateLimitedError as exc:
                logger.warning(
                    "[SEARCH] Giving up on r/%s %r after %d retries: %s",
                    task.source_channel, task.query_text, self.policy.max_retries, exc,
                )
            except Exception as exc:
                logger.warning(
                    "[SEARCH] Search failed on r/%s %r: %s",
                    task.source_channel, task.query_text, exc,
                )
            else:
                collected.extend(results)
                logger.debug("[SEARCH] %d results from r/%s", len(results), task.source_channel)

            if index < total:
                await self.sleep(self.policy.inter_task_delay)

        return collected

    async def run(
        self,
        sources: List[str],
        seed_queries: List[str],
        keywords: Optional[List[str]],
        time_window: str,
    ) -> List[RawResult]:
        """Build the queue, execute it, and return at most 150 quality results."""
        tasks = build_search_queue(sources, seed_queries, keywords)
        logger.info("[SEARCH] Queue prepared: %d searches (%s window)", len(tasks), time_window)

        collected = await self.execute(tasks, time_window)
        unique = dedupe_results(collected)
        quality = [r for r in unique if is_quality_result(r)]

        logger.info(
            "[SEARCH] Completed: %d raw, %d unique, %d quality results",
            len(collected), len(unique), len(quality),
        )
        return quality[: self.policy.max_results]
