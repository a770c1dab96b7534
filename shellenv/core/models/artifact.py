"""
ArtifactPath — the result of resolving one tool requirement.

Resolvers return these instead of raising: a tool that cannot be
found is a ``failed`` artifact with an error message, not an exception.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field


class ArtifactPath(BaseModel):
    """Where a resolved tool lives, or why it could not be resolved."""

    identifier: str
    resolver: str
    status: Literal["ok", "failed"] = "ok"
    path: str | None = None
    error: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status == "ok"

    @property
    def failed(self) -> bool:
        return self.status == "failed"

    @classmethod
    def found(
        cls,
        identifier: str,
        resolver: str,
        path: str,
        **kwargs: Any,
    ) -> ArtifactPath:
        """Create a successful resolution."""
        return cls(
            identifier=identifier,
            resolver=resolver,
            status="ok",
            path=path,
            **kwargs,
        )

    @classmethod
    def missing(
        cls,
        identifier: str,
        resolver: str,
        error: str,
        **kwargs: Any,
    ) -> ArtifactPath:
        """Create a failed resolution."""
        return cls(
            identifier=identifier,
            resolver=resolver,
            status="failed",
            error=error,
            **kwargs,
        )
