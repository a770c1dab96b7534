"""
Resolver base — the contract between shellenv and a package manager.

Materialization is someone else's job. The only thing shellenv asks
of the outside world is: where does this tool live? Every resolver
answers through ``resolve(ToolRequirement) -> ArtifactPath``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from shellenv.core.models.artifact import ArtifactPath
from shellenv.core.models.environment import ToolRequirement


class Resolver(ABC):
    """Abstract base class for all resolvers.

    Resolvers look tools up and report where they are.
    They NEVER raise exceptions — failures are captured in the ArtifactPath.

    To create a new resolver:
        1. Subclass Resolver
        2. Implement name, is_available, resolve
        3. Register it in the ResolverRegistry
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """The resolver identifier (e.g., 'path', 'nix')."""

    @abstractmethod
    def is_available(self) -> bool:
        """Check if the resolver's backing tool exists. Never raises."""

    @abstractmethod
    def resolve(self, requirement: ToolRequirement) -> ArtifactPath:
        """Resolve one requirement.

        MUST never raise exceptions. All failures are captured
        in the ArtifactPath with status='failed'.
        """

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"
