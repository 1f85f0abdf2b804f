"""Reassemble the flat record stream into vendor and class trees."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from pci_ids.errors import AssemblyError
from pci_ids.parser import Record, RecordKind

logger = logging.getLogger(__name__)


@dataclass
class SubsystemNode:
    """Subsystem under construction."""

    subvendor: int
    subdevice: int
    name: str
    line_number: int


@dataclass
class DeviceNode:
    """Device under construction."""

    id: int
    name: str
    line_number: int
    subsystems: list[SubsystemNode] = field(default_factory=list)


@dataclass
class VendorNode:
    """Vendor under construction."""

    id: int
    name: str
    line_number: int
    devices: list[DeviceNode] = field(default_factory=list)


@dataclass
class ProgIfNode:
    """Programming interface under construction."""

    id: int
    name: str
    line_number: int


@dataclass
class SubclassNode:
    """Subclass under construction."""

    id: int
    name: str
    line_number: int
    prog_ifs: list[ProgIfNode] = field(default_factory=list)


@dataclass
class ClassNode:
    """Device class under construction."""

    id: int
    name: str
    line_number: int
    subclasses: list[SubclassNode] = field(default_factory=list)


@dataclass
class Hierarchy:
    """Both trees, top-level nodes in order of appearance."""

    vendors: list[VendorNode] = field(default_factory=list)
    classes: list[ClassNode] = field(default_factory=list)


class _Assembler:
    """Tracks the current depth-0 and depth-1 parent of each namespace."""

    def __init__(self) -> None:
        self.hierarchy = Hierarchy()
        self._vendor: VendorNode | None = None
        self._device: DeviceNode | None = None
        self._class: ClassNode | None = None
        self._subclass: SubclassNode | None = None

    def add(self, record: Record) -> None:
        handler = {
            RecordKind.VENDOR: self._add_vendor,
            RecordKind.DEVICE: self._add_device,
            RecordKind.SUBSYSTEM: self._add_subsystem,
            RecordKind.CLASS: self._add_class,
            RecordKind.SUBCLASS: self._add_subclass,
            RecordKind.PROG_IF: self._add_prog_if,
        }[record.kind]
        handler(record)

    def _add_vendor(self, record: Record) -> None:
        self._vendor = VendorNode(record.id, record.name, record.line_number)
        self._device = None
        # Leaving the class section; a later subclass must not attach to it
        self._class = None
        self._subclass = None
        self.hierarchy.vendors.append(self._vendor)

    def _add_device(self, record: Record) -> None:
        if self._vendor is None:
            raise AssemblyError(
                record.line_number, f"device {record.id:04x} appears before any vendor"
            )
        self._device = DeviceNode(record.id, record.name, record.line_number)
        self._vendor.devices.append(self._device)

    def _add_subsystem(self, record: Record) -> None:
        if self._device is None:
            raise AssemblyError(
                record.line_number,
                f"subsystem {record.ids[0]:04x} {record.ids[1]:04x} appears before any device",
            )
        subvendor, subdevice = record.ids
        self._device.subsystems.append(
            SubsystemNode(subvendor, subdevice, record.name, record.line_number)
        )

    def _add_class(self, record: Record) -> None:
        self._class = ClassNode(record.id, record.name, record.line_number)
        self._subclass = None
        self._vendor = None
        self._device = None
        self.hierarchy.classes.append(self._class)

    def _add_subclass(self, record: Record) -> None:
        if self._class is None:
            raise AssemblyError(
                record.line_number, f"subclass {record.id:02x} appears before any class"
            )
        self._subclass = SubclassNode(record.id, record.name, record.line_number)
        self._class.subclasses.append(self._subclass)

    def _add_prog_if(self, record: Record) -> None:
        if self._subclass is None:
            raise AssemblyError(
                record.line_number,
                f"programming interface {record.id:02x} appears before any subclass",
            )
        self._subclass.prog_ifs.append(ProgIfNode(record.id, record.name, record.line_number))


def assemble(records: Iterable[Record]) -> Hierarchy:
    """Group depth-tagged records into the vendor and class trees.

    Indentation depth is the only grouping signal: a depth-1 record belongs
    to the latest depth-0 record of its namespace, a depth-2 record to the
    latest depth-1 record.

    Args:
        records: Records in order of appearance, as produced by the parser.

    Returns:
        Hierarchy with vendors and classes in source order.

    Raises:
        AssemblyError: If a child record has no eligible parent.
    """
    assembler = _Assembler()
    for record in records:
        assembler.add(record)

    hierarchy = assembler.hierarchy
    logger.debug(
        "Assembled %d vendors and %d classes",
        len(hierarchy.vendors),
        len(hierarchy.classes),
    )
    return hierarchy
