"""
Nix resolver — asks nix-build for the store path of each tool.

shellenv never builds anything itself; this hands the attribute to
``nix-build <nixpkgs> -A <attr> --no-out-link`` and reports the store
path it prints.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
import time

from shellenv.adapters.base import Resolver
from shellenv.core.models.artifact import ArtifactPath
from shellenv.core.models.environment import ToolRequirement

logger = logging.getLogger(__name__)

# Channel names that refer to the nixpkgs root set
_ROOT_CHANNELS = ("pkgs", "nixpkgs")


def nixpkgs_attribute(requirement: ToolRequirement) -> str:
    """Attribute path inside nixpkgs, e.g. ``llvmPackages.lldb``."""
    channel = requirement.channel or ""
    for root in _ROOT_CHANNELS:
        if channel == root:
            channel = ""
        elif channel.startswith(root + "."):
            channel = channel[len(root) + 1:]
    return f"{channel}.{requirement.identifier}" if channel else requirement.identifier


class NixResolver(Resolver):
    """Resolve requirements through ``nix-build``.

    Args:
        nixpkgs: Expression to build from (default ``<nixpkgs>``).
        timeout: Seconds to wait for each build.
    """

    def __init__(self, nixpkgs: str = "<nixpkgs>", timeout: int = 600):
        self._nixpkgs = nixpkgs
        self._timeout = timeout

    @property
    def name(self) -> str:
        return "nix"

    def is_available(self) -> bool:
        return shutil.which("nix-build") is not None

    def command(self, requirement: ToolRequirement) -> list[str]:
        return [
            "nix-build",
            self._nixpkgs,
            "-A",
            nixpkgs_attribute(requirement),
            "--no-out-link",
        ]

    def resolve(self, requirement: ToolRequirement) -> ArtifactPath:
        cmd = self.command(requirement)
        logger.debug("Executing: %s", " ".join(cmd))
        start = time.monotonic()

        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=self._timeout,
            )
        except subprocess.TimeoutExpired:
            return ArtifactPath.missing(
                identifier=requirement.identifier,
                resolver=self.name,
                error=f"nix-build timed out after {self._timeout}s",
                metadata={"command": cmd},
            )
        except OSError as e:
            return ArtifactPath.missing(
                identifier=requirement.identifier,
                resolver=self.name,
                error=f"Cannot run nix-build: {e}",
                metadata={"command": cmd},
            )

        elapsed_ms = int((time.monotonic() - start) * 1000)
        out_paths = result.stdout.split()

        if result.returncode != 0 or not out_paths:
            return ArtifactPath.missing(
                identifier=requirement.identifier,
                resolver=self.name,
                error=result.stderr.strip()
                or f"nix-build exited with code {result.returncode}",
                metadata={"command": cmd, "return_code": result.returncode},
            )

        return ArtifactPath.found(
            identifier=requirement.identifier,
            resolver=self.name,
            path=out_paths[-1],
            metadata={"command": cmd, "duration_ms": elapsed_ms},
        )
