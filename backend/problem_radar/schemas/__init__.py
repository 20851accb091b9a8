# Schemas package
from .reddit_schema import RawResult
from .query_schema import ParsedQuery, SearchTask
from .cluster_schema import FeatureVector, ProblemCluster
from .solution_schema import Solution, SolutionSearchResult
from .research_schema import (
    CatalogSolutionInput,
    CatalogStats,
    EnrichedCluster,
    ParseResponse,
    ResearchInsights,
    ResearchRequest,
    ResearchResponse,
)

__all__ = [
    "RawResult",
    "ParsedQuery",
    "SearchTask",
    "FeatureVector",
    "ProblemCluster",
    "Solution",
    "SolutionSearchResult",
    "EnrichedCluster",
    "ResearchInsights",
    "ResearchRequest",
    "ResearchResponse",
    "ParseResponse",
    "CatalogStats",
    "CatalogSolutionInput",
]
