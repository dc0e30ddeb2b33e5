"""
Common fixtures that can be used without importing anything.
"""

import pytest

from virtimage.image import LibvirtImageManager
from virtimage.libvirt.host import LibvirtHost

from .fakelibvirt import FakeConnection

POOL_NAME = "images"


@pytest.fixture
def fake_conn():
    return FakeConnection()


@pytest.fixture
def pool(fake_conn):
    return fake_conn.add_pool(POOL_NAME)


@pytest.fixture
def host(fake_conn, pool):
    host = LibvirtHost("test:///default", POOL_NAME, upload_chunk_size=64)
    host.conn = fake_conn
    return host


@pytest.fixture
def volumes(host):
    return host.volumes


@pytest.fixture
def images(volumes):
    return LibvirtImageManager(volumes)


@pytest.fixture
def image_file(tmp_path):
    """Provide a 500 byte local image."""
    path = tmp_path / "base.qcow2"
    path.write_bytes(bytes(range(250)) * 2)
    return path
