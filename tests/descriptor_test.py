import xml.etree.ElementTree as ET

import pytest

from virtimage.libvirt.descriptor import BackingStore, VolumeDescriptor


def test_plain_volume():
    root = ET.fromstring(VolumeDescriptor("base1", "qcow2", capacity=500).to_xml())

    assert root.tag == "volume"
    assert root.findtext("name") == "base1"
    assert root.find("capacity").get("unit") == "bytes"
    assert root.findtext("capacity") == "500"
    assert root.find("./target/format").get("type") == "qcow2"
    assert root.find("backingStore") is None


def test_backed_volume_without_capacity():
    desc = VolumeDescriptor(
        "inst1",
        "qcow2",
        backing_store=BackingStore("/var/lib/libvirt/images/base1"),
    )
    root = ET.fromstring(desc.to_xml())

    assert root.find("capacity") is None
    assert root.findtext("./backingStore/path") == "/var/lib/libvirt/images/base1"
    assert root.find("./backingStore/format").get("type") == "qcow2"


def test_escaping():
    desc = VolumeDescriptor(
        "a<b>&c",
        'we"ird',
        capacity=1,
        backing_store=BackingStore("/pool/x&y", "q'c"),
    )
    root = ET.fromstring(desc.to_xml())

    assert root.findtext("name") == "a<b>&c"
    assert root.find("./target/format").get("type") == 'we"ird'
    assert root.findtext("./backingStore/path") == "/pool/x&y"
    assert root.find("./backingStore/format").get("type") == "q'c"


def test_negative_capacity():
    with pytest.raises(ValueError):
        VolumeDescriptor("x", "raw", capacity=-1).to_xml()
