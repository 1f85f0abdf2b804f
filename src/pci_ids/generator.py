"""Generate the static lookup tables from the assembled hierarchy."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from pci_ids.assembler import ClassNode, Hierarchy, VendorNode, assemble
from pci_ids.errors import GenerationError
from pci_ids.models import (
    Device,
    DeviceClass,
    ProgrammingInterface,
    Subclass,
    Subsystem,
    Vendor,
)
from pci_ids.parser import ParseResult, parse_file, parse_text
from pci_ids.phf import PerfectHashMap

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StaticTables:
    """Vendor and class tables plus database metadata."""

    vendors: PerfectHashMap[Vendor]
    classes: PerfectHashMap[DeviceClass]
    version: str | None = None
    date: str | None = None


def _freeze_vendor(node: VendorNode) -> Vendor:
    devices = tuple(
        Device(
            vendor_id=node.id,
            id=device.id,
            name=device.name,
            subsystems=tuple(
                Subsystem(
                    vendor_id=node.id,
                    device_id=device.id,
                    subvendor=sub.subvendor,
                    subdevice=sub.subdevice,
                    name=sub.name,
                )
                for sub in device.subsystems
            ),
        )
        for device in node.devices
    )
    return Vendor(id=node.id, name=node.name, devices=devices)


def _freeze_class(node: ClassNode) -> DeviceClass:
    subclasses = tuple(
        Subclass(
            class_id=node.id,
            id=subclass.id,
            name=subclass.name,
            prog_ifs=tuple(
                ProgrammingInterface(
                    class_id=node.id,
                    subclass_id=subclass.id,
                    id=prog_if.id,
                    name=prog_if.name,
                )
                for prog_if in subclass.prog_ifs
            ),
        )
        for subclass in node.subclasses
    )
    return DeviceClass(id=node.id, name=node.name, subclasses=subclasses)


def _check_unique(nodes: list[VendorNode] | list[ClassNode], kind: str, width: int) -> None:
    """Reject two top-level nodes sharing an ID."""
    first_seen: dict[int, int] = {}
    for node in nodes:
        if node.id in first_seen:
            raise GenerationError(
                node.id,
                f"duplicate {kind} ID {node.id:0{width}x} "
                f"(lines {first_seen[node.id]} and {node.line_number})",
            )
        first_seen[node.id] = node.line_number


def generate(
    hierarchy: Hierarchy, version: str | None = None, date: str | None = None
) -> StaticTables:
    """Build the perfect hash tables for vendors and classes.

    Args:
        hierarchy: Assembled vendor and class trees.
        version: Database version from the file header, if any.
        date: Database date from the file header, if any.

    Returns:
        StaticTables with immutable entities.

    Raises:
        GenerationError: If two vendors or two classes share an ID.
    """
    _check_unique(hierarchy.vendors, "vendor", 4)
    _check_unique(hierarchy.classes, "class", 2)

    vendors = PerfectHashMap.build((node.id, _freeze_vendor(node)) for node in hierarchy.vendors)
    classes = PerfectHashMap.build((node.id, _freeze_class(node)) for node in hierarchy.classes)

    logger.debug("Generated tables: %d vendors, %d classes", len(vendors), len(classes))
    return StaticTables(vendors=vendors, classes=classes, version=version, date=date)


def _from_parse_result(result: ParseResult) -> StaticTables:
    return generate(assemble(result.records), version=result.version, date=result.date)


def build_tables(text: str) -> StaticTables:
    """Run the whole pipeline (parse, assemble, generate) over database text.

    Raises:
        ParseError: On a malformed line.
        AssemblyError: On an orphaned child record.
        GenerationError: On a duplicate vendor or class ID.
    """
    return _from_parse_result(parse_text(text))


def build_tables_from_file(path: Path | str) -> StaticTables:
    """Run the whole pipeline over a pci.ids file."""
    return _from_parse_result(parse_file(path))
