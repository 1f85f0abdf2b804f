"""Tests for the package-level lookup functions over the bundled database."""

from pci_ids import (
    DeviceClass,
    Vendor,
    get_db,
    is_known_class,
    is_known_vendor,
    iter_classes,
    iter_vendors,
    lookup_class,
    lookup_device,
    lookup_prog_if,
    lookup_subclass,
    lookup_subsystem,
    lookup_vendor,
)

INTEL_VENDOR_ID = 0x8086


class TestModels:
    """Tests for data model helpers."""

    def test_vendor_matches_name(self) -> None:
        """Test vendor name matching."""
        vendor = Vendor(id=0x10B5, name="PLX Technology, Inc.")
        assert vendor.matches_name("PLX")
        assert vendor.matches_name("plx")  # Case-insensitive
        assert vendor.matches_name("Technology")
        assert not vendor.matches_name("Intel")

    def test_filter_vendors_by_name(self) -> None:
        """Name matching filters the vendor table."""
        red_hat = sorted(v.id for v in iter_vendors() if v.matches_name("red hat, inc."))
        assert {0x1AF4, 0x1B36} <= set(red_hat)

    def test_lookup_on_empty_children(self) -> None:
        """Child lookups on entities without children return None."""
        assert Vendor(id=0x1234, name="Empty").lookup_device(0x0001) is None
        assert DeviceClass(id=0x13, name="Empty").lookup_subclass(0x00) is None


class TestLookupFunctions:
    """Tests for top-level lookup functions."""

    def test_lookup_vendor_intel(self) -> None:
        """Test looking up Intel."""
        vendor = lookup_vendor(INTEL_VENDOR_ID)
        assert vendor is not None
        assert vendor.id == INTEL_VENDOR_ID
        assert vendor.name == "Intel Corporation"

    def test_lookup_vendor_mediatek(self) -> None:
        """Test looking up MediaTek."""
        vendor = lookup_vendor(0x14C3)
        assert vendor is not None
        assert vendor.name == "MEDIATEK Corp."

    def test_lookup_vendor_unknown(self) -> None:
        """Test looking up unknown vendor."""
        assert lookup_vendor(0x10000) is None

    def test_lookup_common_vendors(self) -> None:
        """Widely deployed vendors resolve out of the box."""
        expected = {
            0x10DE: "NVIDIA Corporation",
            0x1002: "Advanced Micro Devices, Inc. [AMD/ATI]",
            0x10EC: "Realtek Semiconductor Co., Ltd.",
            0x14E4: "Broadcom Inc. and subsidiaries",
            0x144D: "Samsung Electronics Co Ltd",
            0x15B3: "Mellanox Technologies",
        }
        for vendor_id, name in expected.items():
            vendor = lookup_vendor(vendor_id)
            assert vendor is not None, f"{vendor_id:04x} missing"
            assert vendor.name == name

    def test_lookup_device(self) -> None:
        """Test looking up a device by vendor and device ID."""
        device = lookup_device(0x16AE, 0x000A)
        assert device is not None
        assert device.name == "SafeXcel 1841"
        vid, pid = device.as_vid_pid()
        assert lookup_device(vid, pid) == device

    def test_lookup_device_intel_82542(self) -> None:
        """Test the 82542 and its subsystems."""
        device = lookup_device(INTEL_VENDOR_ID, 0x1000)
        assert device is not None
        assert device.name == "82542 Gigabit Ethernet Controller (Fiber)"
        assert len(device.subsystems) >= 5

    def test_lookup_device_unknown(self) -> None:
        """Test looking up unknown device."""
        assert lookup_device(INTEL_VENDOR_ID, 0x10000) is None
        assert lookup_device(0x10000, 0x1000) is None

    def test_lookup_subsystem(self) -> None:
        """Test looking up a subsystem."""
        subsystem = lookup_subsystem(INTEL_VENDOR_ID, 0x1000, 0x0E11, 0xB0DF)
        assert subsystem is not None
        assert subsystem.name == "NC6132 Gigabit Ethernet Adapter (1000-SX)"
        assert lookup_subsystem(INTEL_VENDOR_ID, 0x1000, 0x0E11, 0xFFFF) is None

    def test_lookup_class(self) -> None:
        """Test looking up a device class."""
        device_class = lookup_class(0x08)
        assert device_class is not None
        assert device_class.name == "Generic system peripheral"

    def test_lookup_subclass(self) -> None:
        """Test looking up a subclass."""
        subclass = lookup_subclass(0x07, 0x00)
        assert subclass is not None
        assert subclass.name == "Serial controller"
        assert lookup_subclass(*subclass.as_cid_sid()) == subclass

    def test_lookup_prog_if(self) -> None:
        """Test looking up a programming interface."""
        prog_if = lookup_prog_if(0x0C, 0x03, 0x30)
        assert prog_if is not None
        assert prog_if.name == "XHCI"
        assert lookup_prog_if(0x01, 0x08, 0x02).name == "NVM Express"

    def test_is_known_vendor(self) -> None:
        """Test is_known_vendor function."""
        assert is_known_vendor(INTEL_VENDOR_ID) is True
        assert is_known_vendor(0x10000) is False

    def test_is_known_class(self) -> None:
        """Test is_known_class function."""
        assert is_known_class(0x02) is True
        assert is_known_class(0x41) is False


class TestDatabase:
    """Tests for the database singleton."""

    def test_database_singleton(self) -> None:
        """Test that get_db returns the same instance."""
        db1 = get_db()
        db2 = get_db()
        assert db1 is db2

    def test_database_metadata(self) -> None:
        """Test the bundled database version."""
        db = get_db()
        assert db.version is not None
        assert db.date is not None

    def test_database_has_vendors(self) -> None:
        """Test database contains vendors."""
        assert len(list(iter_vendors())) >= 15

    def test_database_has_classes(self) -> None:
        """Test database contains the standard classes."""
        class_ids = {c.id for c in iter_classes()}
        assert set(range(0x00, 0x14)) <= class_ids
        assert 0xFF in class_ids

    def test_vendor_devices_reference_vendor(self) -> None:
        """Every device resolves back to its vendor."""
        db = get_db()
        vendor = lookup_vendor(0x17CB)
        assert vendor is not None
        assert vendor.devices
        for device in vendor.devices:
            assert db.vendor_of(device) == vendor
            assert device.name

    def test_class_subclasses_reference_class(self) -> None:
        """Every subclass resolves back to its class."""
        db = get_db()
        device_class = lookup_class(0x01)
        for subclass in device_class.subclasses:
            assert db.class_of(subclass) == device_class
            assert subclass.name


class TestDataIntegrity:
    """Tests for data integrity and consistency of the bundled file."""

    def test_no_duplicate_device_ids(self) -> None:
        """Verify no duplicate device IDs under a vendor."""
        for vendor in iter_vendors():
            ids = [d.id for d in vendor.devices]
            assert len(ids) == len(set(ids)), f"Duplicate device under {vendor.id:04x}"

    def test_no_duplicate_subclass_ids(self) -> None:
        """Verify no duplicate subclass or programming interface IDs."""
        for device_class in iter_classes():
            ids = [s.id for s in device_class.subclasses]
            assert len(ids) == len(set(ids)), f"Duplicate subclass under {device_class.id:02x}"
            for subclass in device_class.subclasses:
                prog_ids = [p.id for p in subclass.prog_ifs]
                assert len(prog_ids) == len(set(prog_ids))

    def test_ids_in_range(self) -> None:
        """Vendor/device IDs are 16-bit, class IDs 8-bit."""
        for vendor in iter_vendors():
            assert 0 <= vendor.id <= 0xFFFF
            for device in vendor.devices:
                assert 0 <= device.id <= 0xFFFF
        for device_class in iter_classes():
            assert 0 <= device_class.id <= 0xFF
