"""Tests for the pci-ids-generate build command."""

from pathlib import Path

from click.testing import CliRunner

from pci_ids.artifact import read_artifact
from pci_ids.build import main
from pci_ids.config import BUNDLED_PCI_IDS


class TestGenerateCommand:
    """Tests for the build step."""

    def test_generate_bundled(self, tmp_path: Path) -> None:
        """The bundled database generates a loadable artifact."""
        output = tmp_path / "pci_ids.yaml"
        runner = CliRunner()
        result = runner.invoke(main, [str(BUNDLED_PCI_IDS), str(output)])

        assert result.exit_code == 0, result.output
        assert "Wrote" in result.output
        tables = read_artifact(output)
        assert tables.vendors.get(0x8086).name == "Intel Corporation"

    def test_parse_error_exits(self, tmp_path: Path) -> None:
        """Malformed input fails with a line-located message and no output file."""
        source = tmp_path / "pci.ids"
        source.write_text("8086  Intel Corporation\nZZZZ  Bad Vendor\n", encoding="utf-8")
        output = tmp_path / "pci_ids.yaml"

        runner = CliRunner()
        result = runner.invoke(main, [str(source), str(output)])

        assert result.exit_code == 1
        assert "line 2" in result.output
        assert not output.exists()

    def test_duplicate_vendor_exits(self, tmp_path: Path) -> None:
        """Duplicate vendors fail generation."""
        source = tmp_path / "pci.ids"
        source.write_text("1234  First\n1234  Second\n", encoding="utf-8")

        runner = CliRunner()
        result = runner.invoke(main, [str(source), str(tmp_path / "out.yaml")])

        assert result.exit_code == 1
        assert "1234" in result.output

    def test_missing_source(self, tmp_path: Path) -> None:
        """A missing source file is a usage error."""
        runner = CliRunner()
        result = runner.invoke(main, [str(tmp_path / "missing"), str(tmp_path / "out.yaml")])
        assert result.exit_code != 0

    def test_invalid_utf8_exits(self, tmp_path: Path) -> None:
        """A source that is not UTF-8 fails with the offending line."""
        source = tmp_path / "pci.ids"
        source.write_bytes(b"8086  Intel Corporation\n1234  Bad \xff vendor\n")

        runner = CliRunner()
        result = runner.invoke(main, [str(source), str(tmp_path / "out.yaml")])

        assert result.exit_code == 1
        assert "line 2" in result.output
        assert "UTF-8" in result.output
