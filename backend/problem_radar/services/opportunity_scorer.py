"""Deterministic Opportunity Scorer & Insight Generator.

Combines cluster metrics with the solution landscape into an opportunity
score and market-size bucket, then aggregates all clusters into a short
list of natural-language insights.

Rules
-----
- NO API calls
- NO LLMs
- NO heuristics beyond the explicit formulas
- Pure deterministic math
"""

from __future__ import annotations

from typing import List

from .. import constants
from ..schemas.cluster_schema import ProblemCluster
from ..schemas.research_schema import EnrichedCluster, ResearchInsights
from ..schemas.solution_schema import SolutionSearchResult


def _clamp(value: float, lo: float = 0.0, hi: float = 1.0) -> float:
    """Clamp *value* to [lo, hi]."""
    return max(lo, min(hi, value))


def calculate_opportunity_score(cluster: ProblemCluster, solutions: SolutionSearchResult) -> float:
    """How under-served the clustered problem looks, in [0, 1]."""
    score = 0.0

    # Demand: frequency, severity, engagement
    score += min(cluster.thread_count / 20, 0.3)
    score += min(cluster.severity, 0.2)
    score += min(cluster.avg_score / 100, 0.1)

    if cluster.trend_direction == "rising":
        score += 0.15

    # Solution landscape
    found = solutions.solutions
    if not found:
        score += 0.2
    elif len(found) < 3:
        score += 0.1
    else:
        score -= 0.05

    if found:
        avg_rating = sum(s.rating for s in found) / len(found)
        if avg_rating < 4.0:
            score += 0.1

    return _clamp(score)


def determine_market_size(cluster: ProblemCluster) -> str:
    """Coarse small / medium / large bucket from aggregate engagement."""
    engagement = (
        cluster.thread_count
        + cluster.total_comments
        + cluster.avg_score * cluster.thread_count
    )
    if engagement > 500:
        return "large"
    if engagement > 150:
        return "medium"
    return "small"


def enrich_with_opportunity(cluster: ProblemCluster, solutions: SolutionSearchResult) -> EnrichedCluster:
    """Attach solutions, opportunity score and market size to *cluster*."""
    return EnrichedCluster(
        **cluster.model_dump(),
        existing_solutions=solutions,
        opportunity_score=calculate_opportunity_score(cluster, solutions),
        market_size=determine_market_size(cluster),
    )


def rank_by_opportunity(clusters: List[EnrichedCluster]) -> List[EnrichedCluster]:
    """Highest opportunity first; ties keep their incoming order."""
    return sorted(clusters, key=lambda c: c.opportunity_score, reverse=True)


# ===================================================================== #
#  Insights                                                               #
# ===================================================================== #

def _has_solution_gap(cluster: EnrichedCluster) -> bool:
    return len(cluster.existing_solutions.solutions) <= 2


def generate_recommendations(clusters: List[EnrichedCluster], target_audience: str) -> List[str]:
    """Up to four templated recommendations, in a fixed order.

    *clusters* must already be ranked by opportunity.
    """
    recommendations: list[str] = []

    if clusters:
        top = clusters[0]
        recommendations.append(
            f"Consider developing a solution for {top.title.lower()} - "
            f"{top.thread_count} {target_audience.lower()} are discussing this"
        )

    gaps = [c for c in clusters if _has_solution_gap(c)]
    if gaps:
        recommendations.append(
            f"Significant opportunity in {gaps[0].title.lower()} with limited existing solutions"
        )

    rising = [c for c in clusters if c.trend_direction == "rising"]
    if rising:
        recommendations.append(
            f"Monitor {rising[0].title.lower()} as it's showing rising interest"
        )

    if len(clusters) > 3:
        total_threads = sum(c.thread_count for c in clusters)
        recommendations.append(
            f"{total_threads} total discussions analyzed - strong market validation "
            f"for solutions in this space"
        )

    return recommendations[:4]


def generate_insights(clusters: List[EnrichedCluster], target_audience: str) -> ResearchInsights:
    """Aggregate insights; *clusters* must already be ranked by opportunity."""
    return ResearchInsights(
        top_problems=[c.title for c in clusters[:5]],
        emerging_trends=[c.title for c in clusters if c.trend_direction == "rising"][:3],
        solution_gaps=[c.title for c in clusters if _has_solution_gap(c)][:3],
        market_opportunities=[
            f"{c.title} ({c.thread_count} discussions)"
            for c in clusters
            if c.opportunity_score > 0.6
        ][:4],
        actionable_recommendations=generate_recommendations(clusters, target_audience),
    )


def empty_insights() -> ResearchInsights:
    """Insights for a request that produced no usable results."""
    return ResearchInsights(actionable_recommendations=list(constants.EMPTY_RECOMMENDATIONS))


def calculate_overall_confidence(
    parse_confidence: float,
    clusters: List[EnrichedCluster],
    result_count: int,
) -> float:
    """0.3 × parse confidence + result volume + 0.4 × mean cluster confidence."""
    confidence = parse_confidence * 0.3
    confidence += min(result_count / 50, 0.3)
    if clusters:
        mean_cluster_confidence = sum(c.confidence for c in clusters) / len(clusters)
        confidence += mean_cluster_confidence * 0.4
    return _clamp(confidence)
