"""
Domain models — Pydantic types for shell environments.

    from shellenv.core.models import ToolRequirement, EnvironmentDescriptor, ArtifactPath
"""

from shellenv.core.models.artifact import ArtifactPath
from shellenv.core.models.environment import EnvironmentDescriptor, ToolRequirement

__all__ = [
    # artifact.py
    "ArtifactPath",
    # environment.py
    "EnvironmentDescriptor",
    "ToolRequirement",
]
