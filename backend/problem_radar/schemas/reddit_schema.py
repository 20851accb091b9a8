from pydantic import BaseModel, ConfigDict, Field


class RawResult(BaseModel):
    """A single discussion thread returned by the search collaborator.

    Validated once at the collaborator boundary and immutable afterwards.
    Identity is ``id``: two results with the same id are the same thread.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, description="Upstream thread identifier")
    title: str = Field(..., description="Thread title")
    body_text: str = Field(default="", description="Thread self-text (may be empty)")
    author_name: str = Field(default="[deleted]", description="Author username")
    source_channel: str = Field(..., description="Community the thread was posted in")
    score: int = Field(default=0, description="Net upvotes (may be negative)")
    comment_count: int = Field(default=0, ge=0, description="Number of comments")
    created_at_epoch_seconds: float = Field(..., ge=0.0, description="Creation time, UNIX seconds")
    permalink: str = Field(default="", description="Path of the thread relative to reddit.com")

    @property
    def url(self) -> str:
        """Absolute link to the thread."""
        return f"https://reddit.com{self.permalink}"
