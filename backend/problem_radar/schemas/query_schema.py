from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

IntentCategory = Literal["find_problems", "find_opportunities", "find_solutions", "find_trends"]
TimeWindow = Literal["day", "week", "month", "all"]


class ParsedQuery(BaseModel):
    """Structured intent extracted from a free-text research request.

    Produced by the Query Interpreter.  Read-only once created.
    ``candidate_sources`` is never empty (falls back to a default set).
    """

    model_config = ConfigDict(frozen=True)

    target_audience: str = Field(..., description="Audience the research is about")
    intent_category: IntentCategory = Field(..., description="What the user wants to find")
    time_window: TimeWindow = Field(..., description="How far back to search")
    candidate_sources: list[str] = Field(
        ...,
        min_length=1,
        description="Ordered, de-duplicated communities to search",
    )
    seed_queries: list[str] = Field(
        ...,
        max_length=10,
        description="Domain-specific queries first, then generic intent phrases",
    )
    keywords: list[str] = Field(
        default_factory=list,
        max_length=10,
        description="Problem / business vocabulary entries related to the request",
    )
    confidence: float = Field(
        ...,
        ge=0.0,
        le=1.0,
        description="Deterministic parse confidence derived from pattern matches",
    )


class SearchTask(BaseModel):
    """One (source, query) search executed by the scheduler."""

    model_config = ConfigDict(frozen=True)

    source_channel: str
    query_text: str
    priority: int = Field(..., ge=1, le=2, description="1 = seed query, 2 = keyword")
    kind: Literal["query", "keyword"]
