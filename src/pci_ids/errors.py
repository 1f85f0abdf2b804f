"""Exceptions raised while building the PCI ID tables.

Every error here is a generation-time failure. Runtime lookups never raise
for unknown IDs; they return None instead.
"""

from __future__ import annotations


class PciIdsError(Exception):
    """Base class for all pci_ids errors."""


class ParseError(PciIdsError):
    """A line of the text database does not match the grammar."""

    def __init__(self, line_number: int, expected: str, found: str) -> None:
        self.line_number = line_number
        self.expected = expected
        self.found = found
        super().__init__(f"line {line_number}: expected {expected}, found {found!r}")


class AssemblyError(PciIdsError):
    """A record is nested under a parent that does not exist."""

    def __init__(self, line_number: int, message: str) -> None:
        self.line_number = line_number
        super().__init__(f"line {line_number}: {message}")


class GenerationError(PciIdsError):
    """The static tables could not be generated (e.g. duplicate key)."""

    def __init__(self, key: int | None, message: str) -> None:
        self.key = key
        super().__init__(message)


class ArtifactError(PciIdsError):
    """A generated table artifact is malformed or incompatible."""
