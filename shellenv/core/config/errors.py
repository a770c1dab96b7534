"""
Loader errors.

Missing or unreadable files are not wrapped: they surface as the
built-in ``OSError`` raised by ``open()``.
"""

from __future__ import annotations


class DescriptorError(Exception):
    """Base class for descriptor validation failures."""


class MalformedDescriptor(DescriptorError):
    """The file does not have the expected structure."""

    def __init__(
        self,
        message: str,
        line: int | None = None,
        field: str | None = None,
    ):
        self.line = line
        self.field = field
        context = []
        if line is not None:
            context.append(f"line {line}")
        if field:
            context.append(f"field '{field}'")
        if context:
            message = f"{message} ({', '.join(context)})"
        super().__init__(message)


class DuplicateRequirement(DescriptorError):
    """The same tool identifier is listed more than once."""

    def __init__(
        self,
        identifier: str,
        first_line: int | None = None,
        line: int | None = None,
    ):
        self.identifier = identifier
        self.first_line = first_line
        self.line = line
        message = f"Duplicate requirement '{identifier}'"
        if line is not None and first_line is not None:
            message += f" (line {line}, first listed on line {first_line})"
        super().__init__(message)


class EmptyDescriptor(DescriptorError):
    """The descriptor lists no tools."""
