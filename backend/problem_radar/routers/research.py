"""Research Router.

Handles the /research endpoints.  The routes are thin: every stage of the
pipeline lives in service functions, and the search scheduler and solution
catalog arrive through dependencies so they can be overridden in tests.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from ..exceptions import InputValidationError, ResearchPipelineError
from ..schemas.research_schema import (
    CatalogSolutionInput,
    CatalogStats,
    ParseResponse,
    ResearchRequest,
    ResearchResponse,
)
from ..services.query_interpreter import (
    EXAMPLE_QUERY,
    generate_summary,
    is_usable,
    parse_research_query,
)
from ..services.reddit_client import get_reddit_client
from ..services.research_service import run_research
from ..services.search_scheduler import BoundedSearchScheduler, SearchPolicy
from ..services.solution_catalog import (
    SolutionCatalog,
    get_active_catalog,
    replace_active_catalog,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/research",
    tags=["Research"],
    responses={
        400: {"description": "Research request could not be understood"},
        500: {"description": "Internal server error during research"},
    },
)


# ===================================================================== #
#  Dependencies                                                           #
# ===================================================================== #

async def get_scheduler() -> BoundedSearchScheduler:
    """Scheduler bound to the Reddit search client and env-configured policy."""
    reddit = await get_reddit_client()
    return BoundedSearchScheduler(reddit.search, SearchPolicy.from_env())


def get_solution_catalog() -> SolutionCatalog:
    """Catalog snapshot for the current request."""
    return get_active_catalog()


def _bad_request(exc: InputValidationError) -> HTTPException:
    detail: dict = {"error": exc.message}
    if exc.parsed_query is not None:
        detail["parsed"] = exc.parsed_query.model_dump()
    if exc.suggestion:
        detail["suggestion"] = exc.suggestion
    detail["example"] = EXAMPLE_QUERY
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


# ===================================================================== #
#  Routes                                                                 #
# ===================================================================== #

@router.post(
    "",
    response_model=ResearchResponse,
    status_code=status.HTTP_200_OK,
    summary="Research Problems",
    response_description="Ranked problem clusters with solutions, opportunity scores and insights",
)
async def research(
    request: ResearchRequest,
    scheduler: BoundedSearchScheduler = Depends(get_scheduler),
    catalog: SolutionCatalog = Depends(get_solution_catalog),
) -> ResearchResponse:
    """Run the full research pipeline for a free-text request."""
    try:
        return await run_research(request.query, scheduler, catalog)
    except InputValidationError as exc:
        raise _bad_request(exc) from exc
    except ResearchPipelineError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Research failed: {exc.detail}",
        ) from exc
    except Exception as exc:
        logger.exception("[RESEARCH] Unexpected failure")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Research failed: {exc}",
        ) from exc


@router.post(
    "/parse",
    response_model=ParseResponse,
    summary="Parse a Research Request",
    description="Interpret a request without searching; useful for tuning queries",
)
async def parse_only(request: ResearchRequest) -> ParseResponse:
    try:
        parsed = parse_research_query(request.query)
    except InputValidationError as exc:
        raise _bad_request(exc) from exc

    return ParseResponse(
        input=request.query,
        parsed=parsed,
        summary=generate_summary(parsed),
        is_valid=is_usable(parsed),
    )


@router.get(
    "/solutions/categories",
    response_model=CatalogStats,
    summary="Solution Catalog Categories",
)
async def solution_categories(
    catalog: SolutionCatalog = Depends(get_solution_catalog),
) -> CatalogStats:
    """Categories in the active catalog and how many solutions each holds."""
    return CatalogStats(
        categories=catalog.categories(),
        solution_counts=catalog.stats(),
        generic_solutions=len(catalog.generic_solutions()),
    )


@router.post(
    "/solutions/{category}",
    response_model=CatalogStats,
    status_code=status.HTTP_201_CREATED,
    summary="Add a Solution to the Catalog",
)
async def add_solution(
    category: str,
    payload: CatalogSolutionInput,
    catalog: SolutionCatalog = Depends(get_solution_catalog),
) -> CatalogStats:
    """Build a new catalog with the solution appended and make it active.

    Requests already running keep the catalog they started with.
    """
    updated = replace_active_catalog(catalog.with_solution(category, payload.solution))
    return CatalogStats(
        categories=updated.categories(),
        solution_counts=updated.stats(),
        generic_solutions=len(updated.generic_solutions()),
    )


@router.get(
    "/health",
    summary="Health Check",
    description="Check if the research service is running",
    response_description="Health status",
)
async def health_check():
    """Simple health check endpoint."""
    return {"status": "healthy", "service": "problem-research"}
