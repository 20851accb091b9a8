from typing import Literal, Optional

from pydantic import BaseModel, Field

from .cluster_schema import ProblemCluster
from .query_schema import ParsedQuery
from .solution_schema import Solution, SolutionSearchResult

MarketSize = Literal["small", "medium", "large"]


class ResearchRequest(BaseModel):
    """Request body for ``POST /research``."""

    query: str = Field(
        default="",
        description="Free-text research request (at least 10 characters); missing or short text is rejected with 400",
        examples=["I want to find what Shopify store owners are lately bothered with"],
    )


class EnrichedCluster(ProblemCluster):
    """A problem cluster with its solution landscape and opportunity metrics."""

    existing_solutions: SolutionSearchResult
    opportunity_score: float = Field(..., ge=0.0, le=1.0)
    market_size: MarketSize


class ResearchInsights(BaseModel):
    """Natural-language takeaways aggregated across all clusters."""

    top_problems: list[str] = Field(default_factory=list, max_length=5)
    emerging_trends: list[str] = Field(default_factory=list, max_length=3)
    solution_gaps: list[str] = Field(default_factory=list, max_length=3)
    market_opportunities: list[str] = Field(default_factory=list, max_length=4)
    actionable_recommendations: list[str] = Field(default_factory=list, max_length=4)


class ResearchResponse(BaseModel):
    """Full research report returned by ``POST /research``."""

    original_input: str
    parsed_query: ParsedQuery
    summary: str
    total_results_analyzed: int = Field(..., ge=0)
    clusters: list[EnrichedCluster] = Field(
        default_factory=list,
        description="Sorted by opportunity_score, highest first",
    )
    insights: ResearchInsights
    overall_confidence: float = Field(..., ge=0.0, le=1.0)
    processing_time_ms: int = Field(..., ge=0)
    message: Optional[str] = None


class ParseResponse(BaseModel):
    """Diagnostics returned by ``POST /research/parse``."""

    input: str
    parsed: ParsedQuery
    summary: str
    is_valid: bool


class CatalogStats(BaseModel):
    """Solution catalog overview."""

    categories: list[str]
    solution_counts: dict[str, int]
    generic_solutions: int = Field(..., ge=0)


class CatalogSolutionInput(BaseModel):
    """Body for the administrative catalog extension endpoint."""

    solution: Solution
