"""Deterministic Query Interpreter.

Turns a free-text research request ("I want to find what Shopify store
owners are lately bothered with") into a :class:`ParsedQuery` consumed by
the search scheduler.

Rules
-----
- NO LLM calls
- NO randomness
- NO external API calls
- Pure transformation: same text → same ParsedQuery
"""

from __future__ import annotations

import logging
import re
from typing import List, Optional, Tuple

from .. import constants
from ..exceptions import InputValidationError
from ..schemas.query_schema import ParsedQuery

logger = logging.getLogger(__name__)

EXAMPLE_QUERY = "I want to find what Shopify store owners are lately bothered with"


# ===================================================================== #
#  Internal helpers                                                       #
# ===================================================================== #

def _dedupe(items: List[str]) -> List[str]:
    """Return *items* with exact duplicates removed, preserving order."""
    return list(dict.fromkeys(items))


def _first_match(text: str, table: List[Tuple[str, str]], default: str) -> str:
    """Return the value of the first ``(pattern, value)`` row matching *text*."""
    for pattern, value in table:
        if re.search(pattern, text, re.IGNORECASE):
            return value
    return default


def _match_audience(text: str) -> Optional[dict]:
    """Return the first audience profile whose pattern matches, else None."""
    for profile in constants.AUDIENCE_PATTERNS:
        if re.search(profile["pattern"], text, re.IGNORECASE):
            return profile
    return None


def _count_matches(text: str, patterns: List[str]) -> int:
    """Count non-overlapping hits of the alternation of all *patterns*."""
    combined = "|".join(patterns)
    return len(re.findall(combined, text, re.IGNORECASE))


def _seed_queries(profile: Optional[dict], intent: str) -> List[str]:
    """Domain-specific queries first, then generic intent phrases; max 10."""
    queries: list[str] = []
    if profile is not None:
        queries.extend(profile.get("queries_by_intent", {}).get(intent, []))
        queries.extend(profile.get("queries", []))
    queries.extend(constants.INTENT_QUERIES.get(intent, []))
    return queries[: constants.MAX_SEED_QUERIES]


def _related_vocabulary(tokens: List[str], vocabulary: List[str]) -> List[str]:
    """Vocabulary entries that contain, or are contained in, any token."""
    return [
        entry
        for entry in vocabulary
        if any(token in entry or entry in token for token in tokens)
    ]


def _extract_keywords(text: str) -> List[str]:
    tokens = text.lower().split()
    keywords = _related_vocabulary(tokens, constants.PROBLEM_KEYWORDS)
    keywords += _related_vocabulary(tokens, constants.BUSINESS_KEYWORDS)
    return _dedupe(keywords)[: constants.MAX_KEYWORDS]


def _confidence(text: str, audience_matched: bool) -> float:
    confidence = 0.5
    if audience_matched:
        confidence += 0.2

    intent_hits = _count_matches(text, [p for p, _ in constants.INTENT_PATTERNS])
    confidence += min(intent_hits * 0.1, 0.2)

    if _count_matches(text, [p for p, _ in constants.TIME_PATTERNS]) > 0:
        confidence += 0.1

    return min(confidence, 1.0)


# ===================================================================== #
#  Public API                                                             #
# ===================================================================== #

def parse_research_query(text: Optional[str]) -> ParsedQuery:
    """Parse a free-text research request.

    Raises
    ------
    InputValidationError
        If *text* is missing or shorter than 10 characters once stripped.
    """
    if not text or len(text.strip()) < constants.MIN_QUERY_LENGTH:
        raise InputValidationError(
            "Input required. Please describe what you want to research.",
            suggestion=f"Example: {EXAMPLE_QUERY}",
        )

    lowered = text.lower()

    profile = _match_audience(lowered)
    if profile is not None:
        target = profile["target"]
        sources = _dedupe(profile["sources"])
    else:
        target = constants.DEFAULT_AUDIENCE
        sources = list(constants.DEFAULT_SOURCES)

    intent = _first_match(lowered, constants.INTENT_PATTERNS, constants.DEFAULT_INTENT)
    time_window = _first_match(lowered, constants.TIME_PATTERNS, constants.DEFAULT_TIME_WINDOW)

    parsed = ParsedQuery(
        target_audience=target,
        intent_category=intent,
        time_window=time_window,
        candidate_sources=sources,
        seed_queries=_seed_queries(profile, intent),
        keywords=_extract_keywords(lowered),
        confidence=_confidence(lowered, profile is not None),
    )
    logger.debug(
        "Parsed %r → audience=%s intent=%s window=%s confidence=%.2f",
        text, parsed.target_audience, parsed.intent_category,
        parsed.time_window, parsed.confidence,
    )
    return parsed


def is_usable(parsed: ParsedQuery) -> bool:
    """Return True when *parsed* is good enough to drive a search."""
    return (
        len(parsed.target_audience) > 0
        and len(parsed.candidate_sources) > 0
        and len(parsed.seed_queries) > 0
        and parsed.confidence > constants.MIN_USABLE_CONFIDENCE
    )


def interpret_research_query(text: Optional[str]) -> ParsedQuery:
    """Parse *text* and reject parses that fail the usability contract."""
    parsed = parse_research_query(text)
    if not is_usable(parsed):
        raise InputValidationError(
            "Could not understand the research request",
            parsed_query=parsed,
            suggestion="Try being more specific about the target audience and what you want to find",
        )
    return parsed


def generate_summary(parsed: ParsedQuery) -> str:
    """Human-readable one-liner describing what will be searched."""
    intent_text = constants.INTENT_DESCRIPTIONS.get(parsed.intent_category, "insights")
    window = "past week" if parsed.time_window == "week" else parsed.time_window
    return (
        f"Looking for {intent_text} affecting {parsed.target_audience} over the "
        f"{window} across {len(parsed.candidate_sources)} relevant subreddits"
    )
