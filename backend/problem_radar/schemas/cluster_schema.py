from typing import Literal

from pydantic import BaseModel, Field

from .reddit_schema import RawResult

TrendDirection = Literal["rising", "stable", "declining"]


class FeatureVector(BaseModel):
    """Derived summary of one thread's text (or a cluster centroid)."""

    keyword_frequency: dict[str, float] = Field(
        default_factory=dict,
        description="Vocabulary term -> occurrence count (non-zero entries only)",
    )
    sentiment: float = Field(default=0.0, ge=-1.0, le=1.0)
    urgency: float = Field(default=0.0, ge=0.0, le=1.0)
    category: str = Field(default="general", description="Dominant vocabulary group")


class ProblemCluster(BaseModel):
    """A group of similar threads describing the same problem.

    Produced by the Problem Clustering Engine and enriched exactly once
    after every member has been assigned.
    """

    id: str
    title: str
    description: str
    members: list[RawResult] = Field(..., min_length=2)
    centroid: FeatureVector
    thread_count: int = Field(..., ge=2)
    severity: float = Field(
        ...,
        ge=0.0,
        le=1.0,
        description="0.4*urgency + 0.3*min(avg_score/100, 1) + 0.3*min(avg_comments/50, 1)",
    )
    trend_direction: TrendDirection
    confidence: float = Field(..., ge=0.0, le=1.0, description="min(0.9, thread_count / 10)")
    top_keywords: list[str] = Field(default_factory=list, max_length=5)
    avg_score: float
    total_comments: int = Field(..., ge=0)
