"""Solution Discovery.

Categorizes a problem (title + keywords), looks up the curated solutions
for that category, ranks them by rating, term overlap, popularity and
freshness, and backfills thin categories with generic entries.

Rules
-----
- NO external API calls; the catalog is static configuration
- Catalog is read, never written
- Deterministic given the catalog and ``now``
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import List, Optional

from .. import constants
from ..schemas.solution_schema import Solution, SolutionSearchResult
from .solution_catalog import SolutionCatalog, get_active_catalog

logger = logging.getLogger(__name__)


def categorize_problem(problem_title: str, keywords: Optional[List[str]] = None) -> str:
    """Category whose terms appear most often in title + keywords.

    Each term counts once when present.  Ties keep the earlier category;
    no hit at all → ``general``.
    """
    text = f"{problem_title} {' '.join(keywords or [])}".lower()

    best_category = constants.GENERAL_CATEGORY
    best_score = 0
    for category, terms in constants.SOLUTION_CATEGORY_TERMS.items():
        score = sum(1 for term in terms if term in text)
        if score > best_score:
            best_score = score
            best_category = category
    return best_category


def _relevance(solution: Solution, search_terms: str, now: datetime) -> float:
    score = solution.rating / 5 * 0.3

    haystack = f"{solution.name} {solution.description} {' '.join(solution.tags)}".lower()
    words = search_terms.split()
    if words:
        matching = [w for w in words if len(w) > 2 and w in haystack]
        score += len(matching) / len(words) * 0.4

    score += min(solution.review_count / 10000, 0.2)

    if solution.last_updated is not None:
        updated = solution.last_updated
        if updated.tzinfo is None:
            updated = updated.replace(tzinfo=timezone.utc)
        if (now - updated).total_seconds() / 86400 < constants.RECENT_UPDATE_DAYS:
            score += 0.1

    return score


def rank_solutions(
    solutions: List[Solution],
    problem_title: str,
    keywords: Optional[List[str]] = None,
    now: Optional[datetime] = None,
) -> List[Solution]:
    """Sort *solutions* by transient relevance, highest first."""
    now = now or datetime.now(timezone.utc)
    search_terms = f"{problem_title} {' '.join(keywords or [])}".lower()
    scored = [(_relevance(s, search_terms, now), s) for s in solutions]
    scored.sort(key=lambda pair: pair[0], reverse=True)
    return [solution for _, solution in scored]


def search_confidence(category: str, candidate_count: int) -> float:
    base = constants.CATEGORY_SEARCH_CONFIDENCE.get(category, constants.DEFAULT_SEARCH_CONFIDENCE)
    return min(base + min(candidate_count / 10, 0.1), 1.0)


def find_solutions(
    problem_title: str,
    keywords: Optional[List[str]] = None,
    catalog: Optional[SolutionCatalog] = None,
    now: Optional[datetime] = None,
) -> SolutionSearchResult:
    """Return the top 6 known solutions for a problem.

    Parameters
    ----------
    problem_title:
        Cluster title, e.g. "Payment Processing Issues".
    keywords:
        Cluster top keywords; they take part in both categorization and
        ranking.
    catalog:
        Catalog to read; defaults to the active one.
    """
    if catalog is None:
        catalog = get_active_catalog()
    keywords = keywords or []

    category = categorize_problem(problem_title, keywords)
    ranked = rank_solutions(catalog.solutions_for(category), problem_title, keywords, now)

    if len(ranked) < constants.MIN_SOLUTIONS_BEFORE_BACKFILL:
        ranked = ranked + catalog.generic_solutions()

    logger.info(
        "[SOLUTIONS] %r → category=%s, %d candidates",
        problem_title, category, len(ranked),
    )
    return SolutionSearchResult(
        problem_title=problem_title,
        category=category,
        solutions=ranked[: constants.MAX_SOLUTIONS],
        search_confidence=search_confidence(category, len(ranked)),
        total_found=len(ranked),
    )
