"""Build step: generate a table artifact from a pci.ids file."""

import logging
import sys

import click

from pci_ids import __version__
from pci_ids.artifact import write_artifact
from pci_ids.errors import PciIdsError
from pci_ids.generator import build_tables_from_file


@click.command()
@click.version_option(version=__version__)
@click.argument("source", type=click.Path(exists=True, dir_okay=False))
@click.argument("output", type=click.Path(dir_okay=False, writable=True))
@click.option("-v", "--verbose", is_flag=True, help="Log pipeline progress to stderr")
def main(source: str, output: str, verbose: bool) -> None:
    """Generate the lookup tables for a PCI ID database.

    SOURCE is a pci.ids text file; OUTPUT is the YAML table artifact to
    write. Point PCI_IDS_ARTIFACT at OUTPUT to use it at runtime.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        tables = build_tables_from_file(source)
    except PciIdsError as e:
        click.echo(f"Error: {source}: {e}", err=True)
        sys.exit(1)

    try:
        write_artifact(tables, output)
    except OSError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    click.echo(
        f"Wrote {len(tables.vendors)} vendors and {len(tables.classes)} classes to {output}"
    )


if __name__ == "__main__":
    main()
