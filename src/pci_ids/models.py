"""Data models for the PCI ID database.

Children keep a key of their parent instead of a reference to it, so the
two trees stay acyclic. Parents are resolved through PciDatabase.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Subsystem:
    """Subsystem (subvendor/subdevice pair) of a PCI device.

    The PCI database is not an authoritative source of subsystem
    information; query the hardware for that.
    """

    vendor_id: int
    device_id: int
    subvendor: int
    subdevice: int
    name: str

    @property
    def key(self) -> tuple[int, int]:
        """Return the (subvendor, subdevice) pair identifying this subsystem."""
        return (self.subvendor, self.subdevice)

    @property
    def pci_id_str(self) -> str:
        """Return the subsystem ID in lspci format (e.g., '1028:0001')."""
        return f"{self.subvendor:04x}:{self.subdevice:04x}"


@dataclass(frozen=True)
class Device:
    """PCI device (product) owned by a vendor."""

    vendor_id: int
    id: int
    name: str
    subsystems: tuple[Subsystem, ...] = ()

    def as_vid_pid(self) -> tuple[int, int]:
        """Return (vendor ID, device ID), as used by other PCI libraries."""
        return (self.vendor_id, self.id)

    @property
    def pci_id_str(self) -> str:
        """Return PCI ID in standard format (e.g., '8086:1000')."""
        return f"{self.vendor_id:04x}:{self.id:04x}"

    def lookup_subsystem(self, subvendor: int, subdevice: int) -> Subsystem | None:
        """Find a subsystem of this device by its subvendor/subdevice pair.

        Args:
            subvendor: Subsystem vendor ID.
            subdevice: Subsystem device ID.

        Returns:
            Subsystem object or None if the device has no such subsystem.
        """
        for subsystem in self.subsystems:
            if subsystem.subvendor == subvendor and subsystem.subdevice == subdevice:
                return subsystem
        return None


@dataclass(frozen=True)
class Vendor:
    """PCI vendor and the devices it owns."""

    id: int
    name: str
    devices: tuple[Device, ...] = ()

    def lookup_device(self, device_id: int) -> Device | None:
        """Find one of this vendor's devices by device ID.

        Args:
            device_id: PCI device ID (e.g., 0x1000).

        Returns:
            Device object or None if the vendor has no such device.
        """
        for device in self.devices:
            if device.id == device_id:
                return device
        return None

    def matches_name(self, query: str) -> bool:
        """Check if query is a substring of the vendor name (case-insensitive)."""
        return query.lower() in self.name.lower()


@dataclass(frozen=True)
class ProgrammingInterface:
    """Programming interface of a PCI subclass."""

    class_id: int
    subclass_id: int
    id: int
    name: str


@dataclass(frozen=True)
class Subclass:
    """PCI device subclass owned by a class."""

    class_id: int
    id: int
    name: str
    prog_ifs: tuple[ProgrammingInterface, ...] = ()

    def as_cid_sid(self) -> tuple[int, int]:
        """Return (class ID, subclass ID)."""
        return (self.class_id, self.id)

    @property
    def pci_id_str(self) -> str:
        """Return the class code prefix (e.g., '0200')."""
        return f"{self.class_id:02x}{self.id:02x}"

    def lookup_prog_if(self, prog_if_id: int) -> ProgrammingInterface | None:
        """Find a programming interface of this subclass by ID."""
        for prog_if in self.prog_ifs:
            if prog_if.id == prog_if_id:
                return prog_if
        return None


@dataclass(frozen=True)
class DeviceClass:
    """PCI device class (the base class byte of a class code)."""

    id: int
    name: str
    subclasses: tuple[Subclass, ...] = ()

    def lookup_subclass(self, subclass_id: int) -> Subclass | None:
        """Find a subclass of this class by ID.

        Args:
            subclass_id: Subclass ID (e.g., 0x00 for Ethernet controller).

        Returns:
            Subclass object or None if the class has no such subclass.
        """
        for subclass in self.subclasses:
            if subclass.id == subclass_id:
                return subclass
        return None
