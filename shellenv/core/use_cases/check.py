"""
Check use case — validate a descriptor and report issues.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from shellenv.core.config.errors import DescriptorError
from shellenv.core.config.loader import load_with_warnings
from shellenv.core.config.options import LoaderOptions
from shellenv.core.models.environment import EnvironmentDescriptor


@dataclass
class CheckResult:
    """Result of descriptor validation."""

    valid: bool = False
    descriptor: EnvironmentDescriptor | None = None
    path: Path | None = None
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "valid": self.valid,
            "path": str(self.path) if self.path else None,
            "errors": self.errors,
            "warnings": self.warnings,
            "count": len(self.descriptor.requirements) if self.descriptor is not None else 0,
            "identifiers": self.descriptor.identifiers if self.descriptor is not None else [],
        }


def check_descriptor(
    path: Path,
    options: LoaderOptions | None = None,
) -> CheckResult:
    """Validate a descriptor file and report issues.

    Unlike ``load()``, this never raises for a bad descriptor:
    every problem ends up in ``errors`` or ``warnings``.
    """
    result = CheckResult(path=path)

    try:
        descriptor, warnings = load_with_warnings(path, options)
    except OSError as e:
        result.errors.append(f"Cannot read {path}: {e.strerror or e}")
        return result
    except DescriptorError as e:
        result.errors.append(str(e))
        return result

    result.descriptor = descriptor
    result.warnings.extend(warnings)

    for req in descriptor.requirements:
        if req.channel is None and descriptor.scope is None and descriptor.source_format == "nix":
            result.warnings.append(
                f"'{req.identifier}' has no channel and no 'with' scope is in effect"
            )

    result.valid = len(result.errors) == 0
    return result
