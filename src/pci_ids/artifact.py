"""Save and load generated tables as a YAML artifact.

The artifact stores the perfect hash exactly as generated (seed,
displacements and entries in slot order), so loading it needs neither the
text parser nor the displacement search.

Layout:

    format: pci-ids-table
    format_version: 1
    version: '2024.02.23'
    date: '2024-02-23 03:15:02'
    vendors:
      seed: 0
      displacements: [[0, 3], ...]
      entries:
      - id: 32902
        name: Intel Corporation
        devices:
        - id: 4096
          name: 82542 Gigabit Ethernet Controller (Fiber)
          subsystems: [[3601, 4096, PRO/1000 Gigabit Server Adapter]]
    classes:
      seed: 0
      displacements: [...]
      entries:
      - id: 2
        name: Network controller
        subclasses:
        - id: 0
          name: Ethernet controller
          prog_ifs: []
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any

import yaml

from pci_ids.errors import ArtifactError
from pci_ids.generator import StaticTables
from pci_ids.models import (
    Device,
    DeviceClass,
    ProgrammingInterface,
    Subclass,
    Subsystem,
    Vendor,
)
from pci_ids.phf import PerfectHashMap

logger = logging.getLogger(__name__)

FORMAT_NAME = "pci-ids-table"
FORMAT_VERSION = 1

# libyaml bindings are optional in PyYAML; both loaders read the same documents
_Loader = getattr(yaml, "CSafeLoader", yaml.SafeLoader)
_Dumper = getattr(yaml, "CSafeDumper", yaml.SafeDumper)


def _vendor_to_dict(vendor: Vendor) -> dict[str, Any]:
    return {
        "id": vendor.id,
        "name": vendor.name,
        "devices": [
            {
                "id": device.id,
                "name": device.name,
                "subsystems": [
                    [sub.subvendor, sub.subdevice, sub.name] for sub in device.subsystems
                ],
            }
            for device in vendor.devices
        ],
    }


def _class_to_dict(device_class: DeviceClass) -> dict[str, Any]:
    return {
        "id": device_class.id,
        "name": device_class.name,
        "subclasses": [
            {
                "id": subclass.id,
                "name": subclass.name,
                "prog_ifs": [[prog_if.id, prog_if.name] for prog_if in subclass.prog_ifs],
            }
            for subclass in device_class.subclasses
        ],
    }


def _parse_vendor(data: dict[str, Any]) -> Vendor:
    vendor_id = int(data["id"])
    devices = []
    for device_data in data.get("devices", []):
        device_id = int(device_data["id"])
        subsystems = tuple(
            Subsystem(
                vendor_id=vendor_id,
                device_id=device_id,
                subvendor=int(subvendor),
                subdevice=int(subdevice),
                name=str(name),
            )
            for subvendor, subdevice, name in device_data.get("subsystems", [])
        )
        devices.append(
            Device(
                vendor_id=vendor_id,
                id=device_id,
                name=str(device_data["name"]),
                subsystems=subsystems,
            )
        )
    return Vendor(id=vendor_id, name=str(data["name"]), devices=tuple(devices))


def _parse_class(data: dict[str, Any]) -> DeviceClass:
    class_id = int(data["id"])
    subclasses = []
    for subclass_data in data.get("subclasses", []):
        subclass_id = int(subclass_data["id"])
        prog_ifs = tuple(
            ProgrammingInterface(
                class_id=class_id,
                subclass_id=subclass_id,
                id=int(prog_if_id),
                name=str(name),
            )
            for prog_if_id, name in subclass_data.get("prog_ifs", [])
        )
        subclasses.append(
            Subclass(
                class_id=class_id,
                id=subclass_id,
                name=str(subclass_data["name"]),
                prog_ifs=prog_ifs,
            )
        )
    return DeviceClass(id=class_id, name=str(data["name"]), subclasses=tuple(subclasses))


def _table_to_dict(table: PerfectHashMap[Any], convert: Callable[[Any], Any]) -> dict[str, Any]:
    return {
        "seed": table.seed,
        "displacements": [list(pair) for pair in table.displacements],
        "entries": [convert(value) for _, value in table.entries],
    }


def _parse_table(
    data: dict[str, Any], convert: Callable[[dict[str, Any]], Any], name: str
) -> PerfectHashMap[Any]:
    values = [convert(entry) for entry in data.get("entries", [])]
    table: PerfectHashMap[Any] = PerfectHashMap(
        seed=int(data["seed"]),
        displacements=[(d1, d2) for d1, d2 in data.get("displacements", [])],
        entries=[(value.id, value) for value in values],
    )
    if values and not table.displacements:
        raise ArtifactError(f"{name} table has entries but no displacements")
    # Every key must land on its own slot, otherwise the hash data is stale
    for value in values:
        if table.get(value.id) is not value:
            raise ArtifactError(f"{name} table does not resolve key {value.id:#x}")
    return table


def tables_to_dict(tables: StaticTables) -> dict[str, Any]:
    """Convert generated tables to plain data for serialization."""
    return {
        "format": FORMAT_NAME,
        "format_version": FORMAT_VERSION,
        "version": tables.version,
        "date": tables.date,
        "vendors": _table_to_dict(tables.vendors, _vendor_to_dict),
        "classes": _table_to_dict(tables.classes, _class_to_dict),
    }


def tables_from_dict(data: dict[str, Any]) -> StaticTables:
    """Rebuild StaticTables from plain data.

    Raises:
        ArtifactError: If the data is not a compatible, consistent artifact.
    """
    if not isinstance(data, dict) or data.get("format") != FORMAT_NAME:
        raise ArtifactError("not a pci-ids table artifact")
    if data.get("format_version") != FORMAT_VERSION:
        raise ArtifactError(f"unsupported artifact format version {data.get('format_version')!r}")

    try:
        vendors: PerfectHashMap[Vendor] = _parse_table(data["vendors"], _parse_vendor, "vendor")
        classes: PerfectHashMap[DeviceClass] = _parse_table(
            data["classes"], _parse_class, "class"
        )
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        raise ArtifactError(f"malformed artifact: {e!r}") from e

    return StaticTables(
        vendors=vendors,
        classes=classes,
        version=data.get("version"),
        date=data.get("date"),
    )


def write_artifact(tables: StaticTables, path: Path | str) -> None:
    """Write generated tables to a YAML file.

    Args:
        tables: Tables produced by the generator.
        path: Output file path.
    """
    path = Path(path)
    with path.open("w", encoding="utf-8") as f:
        yaml.dump(
            tables_to_dict(tables),
            f,
            Dumper=_Dumper,
            sort_keys=False,
            allow_unicode=True,
        )
    logger.debug("Wrote table artifact %s", path)


def read_artifact(path: Path | str) -> StaticTables:
    """Load tables from a YAML artifact written by write_artifact().

    Raises:
        FileNotFoundError: If the file doesn't exist.
        ArtifactError: If the file is not valid YAML or not a valid artifact.
    """
    path = Path(path)
    with path.open(encoding="utf-8") as f:
        try:
            data = yaml.load(f, Loader=_Loader)
        except yaml.YAMLError as e:
            raise ArtifactError(f"{path}: invalid YAML: {e}") from e
    logger.debug("Loaded table artifact %s", path)
    return tables_from_dict(data)
