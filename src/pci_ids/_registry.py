"""PCI ID database with indexed lookups."""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

from pci_ids.generator import StaticTables, build_tables, build_tables_from_file
from pci_ids.models import (
    Device,
    DeviceClass,
    ProgrammingInterface,
    Subclass,
    Subsystem,
    Vendor,
)


class PciDatabase:
    """Read-only view over generated vendor and class tables.

    Vendors and classes are found in O(1) through their perfect hash
    tables. Devices, subsystems, subclasses and programming interfaces are
    found by a linear scan of their parent's children, which are few.

    Nothing here mutates the tables, so one instance can be shared freely
    between threads.
    """

    def __init__(self, tables: StaticTables) -> None:
        """Initialize database from generated tables.

        Args:
            tables: Output of the generator (or of read_artifact()).
        """
        self._tables = tables

    @classmethod
    def from_text(cls, text: str) -> PciDatabase:
        """Build a database from the text of a pci.ids file."""
        return cls(build_tables(text))

    @classmethod
    def from_file(cls, path: Path | str) -> PciDatabase:
        """Build a database from a pci.ids file."""
        return cls(build_tables_from_file(path))

    @classmethod
    def from_artifact(cls, path: Path | str) -> PciDatabase:
        """Load a database from a table artifact written by write_artifact()."""
        from pci_ids.artifact import read_artifact

        return cls(read_artifact(path))

    @property
    def tables(self) -> StaticTables:
        """Return the underlying generated tables."""
        return self._tables

    @property
    def version(self) -> str | None:
        """Return the database version from the pci.ids header, if present."""
        return self._tables.version

    @property
    def date(self) -> str | None:
        """Return the database date from the pci.ids header, if present."""
        return self._tables.date

    # Hardware ID tree

    def iter_vendors(self) -> Iterator[Vendor]:
        """Iterate over all vendors, in table order (not numeric order)."""
        return self._tables.vendors.values()

    def lookup_vendor(self, vendor_id: int) -> Vendor | None:
        """Look up vendor by ID.

        Args:
            vendor_id: PCI vendor ID (e.g., 0x8086).

        Returns:
            Vendor object or None if not found.
        """
        return self._tables.vendors.get(vendor_id)

    def lookup_device(self, vendor_id: int, device_id: int) -> Device | None:
        """Look up device by vendor and device ID.

        Args:
            vendor_id: PCI vendor ID (e.g., 0x8086).
            device_id: PCI device ID (e.g., 0x1000).

        Returns:
            Device object or None if not found.
        """
        vendor = self.lookup_vendor(vendor_id)
        if vendor is None:
            return None
        return vendor.lookup_device(device_id)

    def lookup_subsystem(
        self, vendor_id: int, device_id: int, subvendor: int, subdevice: int
    ) -> Subsystem | None:
        """Look up a subsystem by its full key path.

        Args:
            vendor_id: PCI vendor ID.
            device_id: PCI device ID.
            subvendor: Subsystem vendor ID.
            subdevice: Subsystem device ID.

        Returns:
            Subsystem object or None if any part of the path is unknown.
        """
        device = self.lookup_device(vendor_id, device_id)
        if device is None:
            return None
        return device.lookup_subsystem(subvendor, subdevice)

    def is_known_vendor(self, vendor_id: int) -> bool:
        """Check if a vendor ID is in the database."""
        return vendor_id in self._tables.vendors

    def vendor_of(self, device: Device) -> Vendor | None:
        """Return the vendor owning a device (O(1))."""
        return self.lookup_vendor(device.vendor_id)

    def device_of(self, subsystem: Subsystem) -> Device | None:
        """Return the device owning a subsystem."""
        return self.lookup_device(subsystem.vendor_id, subsystem.device_id)

    # Device class tree

    def iter_classes(self) -> Iterator[DeviceClass]:
        """Iterate over all device classes, in table order."""
        return self._tables.classes.values()

    def lookup_class(self, class_id: int) -> DeviceClass | None:
        """Look up device class by ID.

        Args:
            class_id: Base class code (e.g., 0x02 for network controllers).

        Returns:
            DeviceClass object or None if not found.
        """
        return self._tables.classes.get(class_id)

    def lookup_subclass(self, class_id: int, subclass_id: int) -> Subclass | None:
        """Look up subclass by class and subclass ID."""
        device_class = self.lookup_class(class_id)
        if device_class is None:
            return None
        return device_class.lookup_subclass(subclass_id)

    def lookup_prog_if(
        self, class_id: int, subclass_id: int, prog_if_id: int
    ) -> ProgrammingInterface | None:
        """Look up programming interface by class, subclass and interface ID."""
        subclass = self.lookup_subclass(class_id, subclass_id)
        if subclass is None:
            return None
        return subclass.lookup_prog_if(prog_if_id)

    def is_known_class(self, class_id: int) -> bool:
        """Check if a class ID is in the database."""
        return class_id in self._tables.classes

    def class_of(self, subclass: Subclass) -> DeviceClass | None:
        """Return the class owning a subclass (O(1))."""
        return self.lookup_class(subclass.class_id)

    def subclass_of(self, prog_if: ProgrammingInterface) -> Subclass | None:
        """Return the subclass owning a programming interface."""
        return self.lookup_subclass(prog_if.class_id, prog_if.subclass_id)

    def counts(self) -> dict[str, int]:
        """Count the entities of every kind in the database."""
        vendors = list(self.iter_vendors())
        devices = [device for vendor in vendors for device in vendor.devices]
        classes = list(self.iter_classes())
        subclasses = [subclass for cls in classes for subclass in cls.subclasses]
        return {
            "vendors": len(vendors),
            "devices": len(devices),
            "subsystems": sum(len(device.subsystems) for device in devices),
            "classes": len(classes),
            "subclasses": len(subclasses),
            "prog_ifs": sum(len(subclass.prog_ifs) for subclass in subclasses),
        }

    def __len__(self) -> int:
        """Return total number of vendors in database."""
        return len(self._tables.vendors)
