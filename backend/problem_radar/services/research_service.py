"""Research Pipeline.

Orchestrates every stage for one research request:

1. Interpret the free-text request → ParsedQuery (rejects unusable input)
2. Run the bounded search scheduler → quality RawResults
3. Cluster results → ProblemClusters
4. Discover solutions per cluster
5. Score opportunities, generate insights → ResearchResponse

Only stage 2 performs I/O.  Input errors surface immediately; anything
unexpected after scheduling starts is wrapped in ResearchPipelineError.
"""

from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from typing import Optional

from ..exceptions import InputValidationError, ResearchPipelineError, SearchQueueError
from ..schemas.research_schema import ResearchResponse
from ..timing import StepTimer
from .clustering_engine import cluster_results
from .opportunity_scorer import (
    calculate_overall_confidence,
    empty_insights,
    enrich_with_opportunity,
    generate_insights,
    rank_by_opportunity,
)
from .query_interpreter import generate_summary, interpret_research_query
from .search_scheduler import BoundedSearchScheduler
from .solution_catalog import SolutionCatalog, get_active_catalog
from .solution_discovery import find_solutions

logger = logging.getLogger(__name__)

NO_RESULTS_MESSAGE = "No relevant discussions found. Try adjusting your search terms or timeframe."


async def run_research(
    query: str,
    scheduler: BoundedSearchScheduler,
    catalog: Optional[SolutionCatalog] = None,
    now: Optional[float] = None,
) -> ResearchResponse:
    """Run the full research pipeline for *query*.

    Parameters
    ----------
    query:
        Free-text research request.
    scheduler:
        Scheduler wrapping the upstream search function.
    catalog:
        Solution catalog snapshot for this request; defaults to the active one.
    now:
        Reference UNIX time for trend and freshness checks.

    Raises
    ------
    InputValidationError
        Request too short, or the parse fails the usability contract.
    ResearchPipelineError
        Any unexpected failure once the pipeline is under way.
    """
    timer = StepTimer("research")
    if catalog is None:
        catalog = get_active_catalog()

    with timer.step("parse"):
        parsed = interpret_research_query(query)
    summary = generate_summary(parsed)
    logger.info("[RESEARCH] %s", summary)

    stage = "search"
    try:
        with timer.step("search"):
            results = await scheduler.run(
                parsed.candidate_sources,
                parsed.seed_queries,
                parsed.keywords,
                parsed.time_window,
            )

        if not results:
            logger.info("[RESEARCH] No quality results — returning empty report")
            return ResearchResponse(
                original_input=query,
                parsed_query=parsed,
                summary=summary,
                total_results_analyzed=0,
                clusters=[],
                insights=empty_insights(),
                overall_confidence=0.0,
                processing_time_ms=timer.summary(),
                message=NO_RESULTS_MESSAGE,
            )

        reference_time = time.time() if now is None else now

        stage = "cluster"
        with timer.step("cluster"):
            clusters = cluster_results(results, now=reference_time)

        stage = "solutions"
        solution_time = datetime.fromtimestamp(reference_time, tz=timezone.utc)
        with timer.step("solutions"):
            enriched = [
                enrich_with_opportunity(
                    cluster,
                    find_solutions(cluster.title, cluster.top_keywords, catalog, now=solution_time),
                )
                for cluster in clusters
            ]

        stage = "insights"
        ranked = rank_by_opportunity(enriched)
        insights = generate_insights(ranked, parsed.target_audience)
        confidence = calculate_overall_confidence(parsed.confidence, ranked, len(results))

    except SearchQueueError as exc:
        raise InputValidationError(str(exc), parsed_query=parsed) from exc
    except Exception as exc:
        logger.exception("[RESEARCH] Pipeline failed during %s", stage)
        raise ResearchPipelineError("Research failed", stage=stage, cause=exc) from exc

    logger.info(
        "[RESEARCH] %d results → %d clusters (confidence=%.2f)",
        len(results), len(ranked), confidence,
    )
    return ResearchResponse(
        original_input=query,
        parsed_query=parsed,
        summary=summary,
        total_results_analyzed=len(results),
        clusters=ranked,
        insights=insights,
        overall_confidence=confidence,
        processing_time_ms=timer.summary(),
    )
