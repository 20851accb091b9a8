"""Error taxonomy for the research pipeline.

- ``InputValidationError``  : bad request text or unusable parse; surfaced at once
- ``SearchQueueError``      : the scheduler could not build a task queue
- ``UpstreamRateLimitedError``: upstream throttling; retried with backoff
- ``UpstreamError``         : any other upstream failure; task-local, never retried
- ``ResearchPipelineError`` : unexpected internal failure after scheduling began
"""

from __future__ import annotations

from typing import Any, Optional


class ResearchError(Exception):
    """Base class for every error raised by the research pipeline."""


class InputValidationError(ResearchError):
    """The research request cannot be processed as given."""

    def __init__(
        self,
        message: str,
        parsed_query: Optional[Any] = None,
        suggestion: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.parsed_query = parsed_query
        self.suggestion = suggestion


class SearchQueueError(ResearchError):
    """No search tasks could be derived from the parsed query."""


class UpstreamError(ResearchError):
    """A single upstream search call failed."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class UpstreamRateLimitedError(UpstreamError):
    """The upstream API signalled throttling (HTTP 429)."""

    def __init__(self, message: str = "Upstream rate limit exceeded") -> None:
        super().__init__(message, status_code=429)


class ResearchPipelineError(ResearchError):
    """Unexpected failure that aborts the whole pipeline."""

    def __init__(self, message: str, stage: str, cause: Optional[BaseException] = None) -> None:
        super().__init__(message)
        self.stage = stage
        self.cause = cause

    @property
    def detail(self) -> str:
        if self.cause is None:
            return f"{self.stage}: {self}"
        return f"{self.stage}: {type(self.cause).__name__}: {self.cause}"
