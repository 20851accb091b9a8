"""Problem Clustering Engine.

Converts each search result into a :class:`FeatureVector` (vocabulary
frequencies, sentiment, urgency, category) and groups results with a
single-pass incremental similarity clustering, then enriches the
surviving clusters with titles, severity and trend direction.

Rules
-----
- NO LLM calls
- NO I/O
- Deterministic for a fixed input order (``now`` is injectable)
"""

from __future__ import annotations

import logging
import re
import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .. import constants
from ..schemas.cluster_schema import FeatureVector, ProblemCluster
from ..schemas.reddit_schema import RawResult

logger = logging.getLogger(__name__)

# Precompiled "term as word prefix" matchers for the problem vocabulary.
_TERM_PATTERNS: Dict[str, re.Pattern] = {
    term: re.compile(rf"\b{re.escape(term)}\w*\b", re.IGNORECASE)
    for term in constants.PROBLEM_VOCABULARY
}


@dataclass
class _WorkingCluster:
    """Mutable cluster state used only while assigning results."""

    centroid: FeatureVector
    members: List[RawResult] = field(default_factory=list)


def _clamp(value: float, lo: float = 0.0, hi: float = 1.0) -> float:
    """Clamp *value* to [lo, hi]."""
    return max(lo, min(hi, value))


# ===================================================================== #
#  Feature extraction                                                     #
# ===================================================================== #

def infer_category(keyword_frequency: Dict[str, float]) -> str:
    """Vocabulary group with the highest summed frequency.

    Ties go to the group declared first; all-zero → ``general``.
    """
    best_category = constants.GENERAL_CATEGORY
    best_score = 0.0
    for category, terms in constants.PROBLEM_CATEGORY_GROUPS.items():
        score = sum(keyword_frequency.get(term, 0) for term in terms)
        if score > best_score:
            best_score = score
            best_category = category
    return best_category


def extract_feature_vector(result: RawResult) -> FeatureVector:
    """Build the feature vector of one result from its title + body."""
    text = f"{result.title} {result.body_text}".lower()

    keyword_frequency: dict[str, float] = {}
    for term, pattern in _TERM_PATTERNS.items():
        hits = len(pattern.findall(text))
        if hits:
            keyword_frequency[term] = hits

    sentiment = 0.0
    for word in constants.NEGATIVE_WORDS:
        sentiment -= text.count(word) * 0.1
    for word in constants.POSITIVE_WORDS:
        sentiment += text.count(word) * 0.1

    # Flat bump per distinct phrase present; overlapping phrases both count.
    urgency = 0.0
    for indicator in constants.URGENCY_INDICATORS:
        if indicator in text:
            urgency += 0.2

    return FeatureVector(
        keyword_frequency=keyword_frequency,
        sentiment=_clamp(sentiment, -1.0, 1.0),
        urgency=_clamp(urgency),
        category=infer_category(keyword_frequency),
    )


# ===================================================================== #
#  Similarity & centroid maintenance                                      #
# ===================================================================== #

def jaccard(a: set, b: set) -> float:
    """|a ∩ b| / |a ∪ b|, or 0 for two empty sets."""
    union = a | b
    if not union:
        return 0.0
    return len(a & b) / len(union)


def calculate_similarity(first: FeatureVector, second: FeatureVector) -> float:
    """Weighted similarity in [0, 0.9]; symmetric in its arguments."""
    category_match = 1.0 if first.category == second.category else 0.0
    keyword_overlap = jaccard(set(first.keyword_frequency), set(second.keyword_frequency))
    sentiment_closeness = 1 - abs(first.sentiment - second.sentiment)
    urgency_closeness = 1 - abs(first.urgency - second.urgency)

    return (
        0.3 * category_match
        + 0.4 * keyword_overlap
        + 0.1 * sentiment_closeness
        + 0.1 * urgency_closeness
    )


def update_centroid(centroid: FeatureVector, incoming: FeatureVector, member_count: int) -> FeatureVector:
    """Fold *incoming* into *centroid* for a cluster that now has *member_count* members.

    Keyword frequencies present in *incoming* become
    ``(old + new) / member_count``; others are left untouched.
    Sentiment and urgency are a two-point mean.  Category never changes.
    """
    keywords = dict(centroid.keyword_frequency)
    for term, frequency in incoming.keyword_frequency.items():
        keywords[term] = (keywords.get(term, 0) + frequency) / member_count

    return FeatureVector(
        keyword_frequency=keywords,
        sentiment=(centroid.sentiment + incoming.sentiment) / 2,
        urgency=(centroid.urgency + incoming.urgency) / 2,
        category=centroid.category,
    )


def assign_clusters(
    results: List[RawResult],
    threshold: float = constants.SIMILARITY_THRESHOLD,
) -> List[_WorkingCluster]:
    """Single pass over *results* in order; returns every cluster formed."""
    clusters: list[_WorkingCluster] = []

    for result in results:
        vector = extract_feature_vector(result)

        best: Optional[_WorkingCluster] = None
        best_similarity = 0.0
        for cluster in clusters:
            similarity = calculate_similarity(vector, cluster.centroid)
            if similarity > best_similarity and similarity >= threshold:
                best_similarity = similarity
                best = cluster

        if best is None:
            clusters.append(_WorkingCluster(centroid=vector, members=[result]))
        else:
            best.members.append(result)
            best.centroid = update_centroid(best.centroid, vector, len(best.members))

    return clusters


# ===================================================================== #
#  Enrichment                                                             #
# ===================================================================== #

def _top_keywords(centroid: FeatureVector, limit: int = 5) -> List[str]:
    ranked = sorted(centroid.keyword_frequency.items(), key=lambda item: item[1], reverse=True)
    return [term for term, _ in ranked[:limit]]


def _common_patterns(members: List[RawResult]) -> str:
    patterns = [
        label
        for field_name, needle, label in constants.COMMON_PATTERNS
        if any(needle in getattr(member, field_name).lower() for member in members)
    ]
    if patterns:
        return f"Common themes include {', '.join(patterns)}."
    return "Various related challenges reported."


def _trend_direction(members: List[RawResult], now: float) -> str:
    recent = sum(
        1 for m in members
        if now - m.created_at_epoch_seconds < constants.RECENT_WINDOW_SECONDS
    )
    older = len(members) - recent

    if recent > older * 1.5:
        return "rising"
    if recent < older * 0.5:
        return "declining"
    return "stable"


def _severity(members: List[RawResult], urgency: float) -> float:
    avg_score = sum(m.score for m in members) / len(members)
    avg_comments = sum(m.comment_count for m in members) / len(members)

    normalized_score = min(avg_score / 100, 1.0)
    normalized_comments = min(avg_comments / 50, 1.0)
    return _clamp(0.4 * urgency + 0.3 * normalized_score + 0.3 * normalized_comments)


def _cluster_id(category: str, top_keyword: str, ordinal: int) -> str:
    return re.sub(r"[^a-z0-9_]", "", f"cluster_{category}_{top_keyword}_{ordinal}")


def enrich_cluster(cluster: _WorkingCluster, ordinal: int, now: float) -> ProblemCluster:
    """Turn a finished working cluster into a :class:`ProblemCluster`."""
    members = cluster.members
    centroid = cluster.centroid
    keywords = _top_keywords(centroid)
    category = centroid.category

    title = constants.CATEGORY_TITLES.get(category)
    if title is None:
        title = f"{(keywords[0] if keywords else category).upper()} Related Issues"

    description = (
        f"Business owners experiencing {category.replace('_', ' ', 1)} related challenges. "
        f"{_common_patterns(members)}"
    )

    return ProblemCluster(
        id=_cluster_id(category, keywords[0] if keywords else "none", ordinal),
        title=title,
        description=description,
        members=list(members),
        centroid=centroid,
        thread_count=len(members),
        severity=_severity(members, centroid.urgency),
        trend_direction=_trend_direction(members, now),
        confidence=min(0.9, len(members) / 10),
        top_keywords=keywords,
        avg_score=sum(m.score for m in members) / len(members),
        total_comments=sum(m.comment_count for m in members),
    )


# ===================================================================== #
#  Public API                                                             #
# ===================================================================== #

def cluster_results(results: List[RawResult], now: Optional[float] = None) -> List[ProblemCluster]:
    """Cluster *results* and return at most 10 enriched clusters.

    Clusters with fewer than 2 members are dropped.  The output is
    ordered by ``thread_count × severity``, highest first.
    """
    now = time.time() if now is None else now
    logger.info("[CLUSTER] Clustering %d results", len(results))

    working = assign_clusters(results)
    kept = [c for c in working if len(c.members) >= constants.MIN_CLUSTER_SIZE]
    logger.info("[CLUSTER] %d clusters formed, %d with ≥%d members",
                len(working), len(kept), constants.MIN_CLUSTER_SIZE)

    enriched = [enrich_cluster(cluster, ordinal, now) for ordinal, cluster in enumerate(kept)]
    enriched.sort(key=lambda c: c.thread_count * c.severity, reverse=True)
    return enriched[: constants.MAX_CLUSTERS]
