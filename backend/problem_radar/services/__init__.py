from .query_interpreter import generate_summary, interpret_research_query, parse_research_query
from .search_scheduler import BoundedSearchScheduler, SearchPolicy, build_search_queue
from .clustering_engine import cluster_results
from .solution_catalog import SolutionCatalog, get_active_catalog, load_default_catalog
from .solution_discovery import find_solutions
from .opportunity_scorer import calculate_opportunity_score, generate_insights
from .reddit_client import RedditSearchClient
from .research_service import run_research

__all__ = [
    "parse_research_query",
    "interpret_research_query",
    "generate_summary",
    "BoundedSearchScheduler",
    "SearchPolicy",
    "build_search_queue",
    "cluster_results",
    "SolutionCatalog",
    "get_active_catalog",
    "load_default_catalog",
    "find_solutions",
    "calculate_opportunity_score",
    "generate_insights",
    "RedditSearchClient",
    "run_research",
]
