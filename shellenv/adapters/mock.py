"""
Mock resolver — test double that resolves without touching the system.

By default every tool resolves to ``/mock/bin/<identifier>``. Specific
identifiers can be configured to fail.
"""

from __future__ import annotations

from shellenv.adapters.base import Resolver
from shellenv.core.models.artifact import ArtifactPath
from shellenv.core.models.environment import ToolRequirement


class MockResolver(Resolver):
    """Universal mock resolver for testing."""

    def __init__(
        self,
        resolver_name: str = "mock",
        available: bool = True,
        prefix: str = "/mock/bin",
    ):
        self._name = resolver_name
        self._available = available
        self._prefix = prefix
        self._failures: dict[str, str] = {}
        self._call_log: list[ToolRequirement] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def call_log(self) -> list[ToolRequirement]:
        """All requirements this mock has been asked to resolve."""
        return self._call_log

    @property
    def call_count(self) -> int:
        return len(self._call_log)

    def is_available(self) -> bool:
        return self._available

    def set_failure(self, identifier: str, error: str = "Mock failure") -> None:
        """Configure a specific identifier to fail."""
        self._failures[identifier] = error

    def resolve(self, requirement: ToolRequirement) -> ArtifactPath:
        self._call_log.append(requirement)

        if requirement.identifier in self._failures:
            return ArtifactPath.missing(
                identifier=requirement.identifier,
                resolver=self._name,
                error=self._failures[requirement.identifier],
            )

        return ArtifactPath.found(
            identifier=requirement.identifier,
            resolver=self._name,
            path=f"{self._prefix}/{requirement.identifier}",
            metadata={"mock": True},
        )

    def reset(self) -> None:
        """Clear call log and configured failures."""
        self._call_log.clear()
        self._failures.clear()
