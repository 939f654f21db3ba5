"""Insights query response models.

`QueryResponse` keeps only the top-level shape of an NRQL response; callers
who know the shape of their query can pass their own model to
`InsightsClient.query` instead.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field  # type: ignore


class _Model(BaseModel):
    # Query responses carry many more fields than we model.
    model_config = ConfigDict(extra="ignore", frozen=True)


class QueryResponse(_Model):
    """Generic NRQL response: one dict per result row plus response metadata."""

    results: list[dict[str, Any]] = Field(default_factory=list)
    metadata: dict[str, Any] = Field(default_factory=dict)

    def first(self, name: str, default: Any = None) -> Any:
        """Return `name` from the first result row, or `default` when absent."""
        if not self.results:
            return default
        return self.results[0].get(name, default)
