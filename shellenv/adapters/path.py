"""
PATH resolver — finds tools already installed on the system.

Useful when the shell is already materialized (inside ``nix-shell``)
and you only want to confirm every required tool is reachable.
"""

from __future__ import annotations

import logging
import shutil

from shellenv.adapters.base import Resolver
from shellenv.core.models.artifact import ArtifactPath
from shellenv.core.models.environment import ToolRequirement

logger = logging.getLogger(__name__)


class PathResolver(Resolver):
    """Look each tool up with ``shutil.which``.

    Args:
        search_path: Optional PATH string to search instead of the
            process environment.
    """

    def __init__(self, search_path: str | None = None):
        self._search_path = search_path

    @property
    def name(self) -> str:
        return "path"

    def is_available(self) -> bool:
        return True

    def resolve(self, requirement: ToolRequirement) -> ArtifactPath:
        found = shutil.which(requirement.identifier, path=self._search_path)
        if found is None:
            logger.debug("%s not found on PATH", requirement.identifier)
            return ArtifactPath.missing(
                identifier=requirement.identifier,
                resolver=self.name,
                error=f"Tool not found on PATH: {requirement.identifier}",
            )
        return ArtifactPath.found(
            identifier=requirement.identifier,
            resolver=self.name,
            path=found,
        )
