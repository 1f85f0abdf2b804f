"""Tests for data source configuration."""

from pathlib import Path

import pytest

import pci_ids
from pci_ids.artifact import write_artifact
from pci_ids.config import (
    ARTIFACT_ENV,
    BUNDLED_PCI_IDS,
    TEXT_ENV,
    DataSource,
    resolve_data_source,
)
from pci_ids.generator import build_tables


class TestResolveDataSource:
    """Tests for resolve_data_source."""

    def test_default_is_bundled(self) -> None:
        """Without configuration the bundled file is used."""
        source = resolve_data_source({})
        assert source == DataSource(BUNDLED_PCI_IDS)
        assert source.path.exists()

    def test_text_path(self, tmp_path: Path) -> None:
        """PCI_IDS_PATH selects a text database."""
        path = tmp_path / "pci.ids"
        path.write_text("8086  Intel Corporation\n", encoding="utf-8")
        source = resolve_data_source({TEXT_ENV: str(path)})
        assert source == DataSource(path, is_artifact=False)

    def test_artifact_wins(self, tmp_path: Path) -> None:
        """PCI_IDS_ARTIFACT takes precedence over PCI_IDS_PATH."""
        artifact = tmp_path / "pci_ids.yaml"
        artifact.write_text("{}", encoding="utf-8")
        source = resolve_data_source({ARTIFACT_ENV: str(artifact), TEXT_ENV: "/nonexistent"})
        assert source.is_artifact is True
        assert source.path == artifact

    def test_missing_path(self, tmp_path: Path) -> None:
        """A configured path that does not exist is an error."""
        with pytest.raises(FileNotFoundError):
            resolve_data_source({TEXT_ENV: str(tmp_path / "missing.ids")})


class TestBuildDatabase:
    """Tests for building the default database from configuration."""

    def test_from_text_env(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """The configured text file backs the database."""
        path = tmp_path / "pci.ids"
        path.write_text("1234  Test Vendor\n\t5678  Test Device\n", encoding="utf-8")
        monkeypatch.delenv(ARTIFACT_ENV, raising=False)
        monkeypatch.setenv(TEXT_ENV, str(path))

        db = pci_ids._build_database()
        assert db.lookup_device(0x1234, 0x5678).name == "Test Device"
        assert db.lookup_vendor(0x8086) is None

    def test_from_artifact_env(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """The configured artifact backs the database."""
        path = tmp_path / "pci_ids.yaml"
        write_artifact(build_tables("C 02  Network controller\n\t00  Ethernet controller\n"), path)
        monkeypatch.setenv(ARTIFACT_ENV, str(path))

        db = pci_ids._build_database()
        assert db.lookup_subclass(0x02, 0x00).name == "Ethernet controller"
        assert len(db) == 0
