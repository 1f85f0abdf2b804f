"""Locate the data backing the default database.

Sources, first match wins:

1. PCI_IDS_ARTIFACT: a table artifact written by pci-ids-generate.
2. PCI_IDS_PATH: a pci.ids text file.
3. The pci.ids file bundled with this package.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

ARTIFACT_ENV = "PCI_IDS_ARTIFACT"
TEXT_ENV = "PCI_IDS_PATH"

# Bundled database (relative to package)
BUNDLED_PCI_IDS = Path(__file__).parent / "data" / "pci.ids"


@dataclass(frozen=True)
class DataSource:
    """Where the default database is loaded from."""

    path: Path
    is_artifact: bool = False

    def __str__(self) -> str:
        kind = "artifact" if self.is_artifact else "pci.ids"
        return f"{kind} {self.path}"


def resolve_data_source(environ: Mapping[str, str] | None = None) -> DataSource:
    """Pick the data source for the default database.

    Args:
        environ: Environment to read; defaults to os.environ.

    Returns:
        DataSource for the first configured location.

    Raises:
        FileNotFoundError: If a configured path does not exist.
    """
    if environ is None:
        environ = os.environ

    artifact = environ.get(ARTIFACT_ENV)
    if artifact:
        source = DataSource(Path(artifact), is_artifact=True)
    else:
        text_path = environ.get(TEXT_ENV)
        source = DataSource(Path(text_path) if text_path else BUNDLED_PCI_IDS)

    if not source.path.exists():
        raise FileNotFoundError(f"PCI ID database not found: {source}")
    return source
