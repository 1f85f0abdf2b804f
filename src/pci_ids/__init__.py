"""Offline lookups in the PCI ID Repository database.

Resolves PCI vendor, device, subsystem and device-class IDs to names using
a vendored copy of pci.ids. The text is parsed once into perfect hash
tables; the database is lazy-initialized on first access.

Example usage:
    >>> from pci_ids import lookup_vendor, lookup_device, lookup_class
    >>> lookup_vendor(0x8086).name
    'Intel Corporation'
    >>> lookup_device(0x8086, 0x1000).name
    '82542 Gigabit Ethernet Controller (Fiber)'
    >>> lookup_class(0x02).name
    'Network controller'
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterator
from typing import TYPE_CHECKING

# Re-export models and errors for convenience
from pci_ids.errors import (
    ArtifactError,
    AssemblyError,
    GenerationError,
    ParseError,
    PciIdsError,
)
from pci_ids.models import (
    Device,
    DeviceClass,
    ProgrammingInterface,
    Subclass,
    Subsystem,
    Vendor,
)

if TYPE_CHECKING:
    from pci_ids._registry import PciDatabase

__version__ = "0.3.0"

__all__ = [
    # Models
    "Device",
    "DeviceClass",
    "ProgrammingInterface",
    "Subclass",
    "Subsystem",
    "Vendor",
    # Errors
    "ArtifactError",
    "AssemblyError",
    "GenerationError",
    "ParseError",
    "PciIdsError",
    # Lookup functions
    "iter_vendors",
    "iter_classes",
    "lookup_vendor",
    "lookup_device",
    "lookup_subsystem",
    "lookup_class",
    "lookup_subclass",
    "lookup_prog_if",
    "is_known_vendor",
    "is_known_class",
    "get_db",
]

logger = logging.getLogger(__name__)

# Lazy-initialized singleton database
_db: PciDatabase | None = None
_db_lock = threading.Lock()


def _build_database() -> PciDatabase:
    """Build the database from the configured data source.

    This is called once on first access to any lookup function.
    """
    from pci_ids._registry import PciDatabase
    from pci_ids.config import resolve_data_source

    source = resolve_data_source()
    logger.info("Loading PCI ID database from %s", source)
    if source.is_artifact:
        return PciDatabase.from_artifact(source.path)
    return PciDatabase.from_file(source.path)


def get_db() -> PciDatabase:
    """Get the PCI ID database singleton.

    The database is lazy-initialized on first call; concurrent first calls
    build it only once.

    Returns:
        The PciDatabase instance for the configured data source.
    """
    global _db
    if _db is None:
        with _db_lock:
            if _db is None:
                _db = _build_database()
    return _db


def iter_vendors() -> Iterator[Vendor]:
    """Iterate over all known vendors (table order, not numeric order)."""
    return get_db().iter_vendors()


def iter_classes() -> Iterator[DeviceClass]:
    """Iterate over all known device classes (table order)."""
    return get_db().iter_classes()


def lookup_vendor(vendor_id: int) -> Vendor | None:
    """Look up a vendor by ID.

    Args:
        vendor_id: PCI vendor ID (e.g., 0x8086 for Intel).

    Returns:
        Vendor object or None if not found in database.

    Example:
        >>> vendor = lookup_vendor(0x8086)
        >>> vendor.name
        'Intel Corporation'
    """
    return get_db().lookup_vendor(vendor_id)


def lookup_device(vendor_id: int, device_id: int) -> Device | None:
    """Look up a device by vendor and device ID.

    Args:
        vendor_id: PCI vendor ID (e.g., 0x8086).
        device_id: PCI device ID (e.g., 0x1000).

    Returns:
        Device object or None if not found in database.
    """
    return get_db().lookup_device(vendor_id, device_id)


def lookup_subsystem(
    vendor_id: int, device_id: int, subvendor: int, subdevice: int
) -> Subsystem | None:
    """Look up a subsystem by vendor, device, subvendor and subdevice ID."""
    return get_db().lookup_subsystem(vendor_id, device_id, subvendor, subdevice)


def lookup_class(class_id: int) -> DeviceClass | None:
    """Look up a device class by ID.

    Args:
        class_id: Base class code (e.g., 0x02).

    Returns:
        DeviceClass object or None if not found in database.

    Example:
        >>> lookup_class(0x01).name
        'Mass storage controller'
    """
    return get_db().lookup_class(class_id)


def lookup_subclass(class_id: int, subclass_id: int) -> Subclass | None:
    """Look up a subclass by class and subclass ID."""
    return get_db().lookup_subclass(class_id, subclass_id)


def lookup_prog_if(
    class_id: int, subclass_id: int, prog_if_id: int
) -> ProgrammingInterface | None:
    """Look up a programming interface by class, subclass and interface ID.

    Example:
        >>> lookup_prog_if(0x0C, 0x03, 0x30).name
        'XHCI'
    """
    return get_db().lookup_prog_if(class_id, subclass_id, prog_if_id)


def is_known_vendor(vendor_id: int) -> bool:
    """Check if a vendor ID is in the database.

    Example:
        >>> is_known_vendor(0x8086)
        True
        >>> is_known_vendor(0x10000)
        False
    """
    return get_db().is_known_vendor(vendor_id)


def is_known_class(class_id: int) -> bool:
    """Check if a device class ID is in the database."""
    return get_db().is_known_class(class_id)
