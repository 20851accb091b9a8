from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

SourceKind = Literal["shopify-apps", "chrome-extensions", "saas-directory", "github", "alternatives", "manual"]


class Solution(BaseModel):
    """A known third-party product that addresses a problem category."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1)
    description: str
    website_url: str
    pricing_text: str
    rating: float = Field(..., ge=0.0, le=5.0)
    review_count: int = Field(default=0, ge=0)
    category: str = Field(..., description="Human-readable catalog category label")
    source_kind: SourceKind = "manual"
    tags: list[str] = Field(default_factory=list)
    last_updated: Optional[datetime] = Field(
        default=None,
        description="Last catalog refresh (stamped at catalog load when unset)",
    )


class SolutionSearchResult(BaseModel):
    """Ranked solutions for one problem, as returned by Solution Discovery."""

    problem_title: str
    category: str = Field(default="general", description="Problem category used for lookup")
    solutions: list[Solution] = Field(default_factory=list, max_length=6)
    search_confidence: float = Field(..., ge=0.0, le=1.0)
    total_found: int = Field(..., ge=0, description="Candidates before the 6-item truncation")
