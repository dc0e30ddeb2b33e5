from __future__ import annotations

import io
import logging
from typing import BinaryIO, Callable, List, Optional, Tuple, Union, TYPE_CHECKING

import libvirt

from .descriptor import BackingStore, VolumeDescriptor
from .errors import (
    PayloadTooLargeError,
    PoolLookupError,
    StorageError,
    VolumeCreateError,
    VolumeDeleteError,
    VolumeLookupError,
    VolumePathError,
    VolumeUploadError,
)

if TYPE_CHECKING:
    from .host import LibvirtHost


logger = logging.getLogger(__name__)

# Libvirt needs the capacity of a volume before the upload starts, so config
# ISOs are buffered in memory and capped at 10MB.
MAX_ISO_SIZE = 10_000_000

DEFAULT_CHUNK_SIZE = 2 * 1024 * 1024

BASE_IMAGE_FORMAT = "qcow2"
ISO_FORMAT = "iso"

Payload = Union[bytes, bytearray, BinaryIO]
PayloadProducer = Union[Payload, Callable[[], Payload]]


class LibvirtVolumeManager:
    """Provisions, clones and removes volumes of a single managed pool."""

    def __init__(self, host: "LibvirtHost", pool_name: str, *, chunk_size: Optional[int] = None):
        self._host = host
        self.pool_name = pool_name
        self._chunk_size = chunk_size or DEFAULT_CHUNK_SIZE

    # ------------------------------------------------------------------
    # Pool directory
    # ------------------------------------------------------------------
    def list_volumes(self) -> List[str]:
        return sorted(vol.name() for vol in self._list_all_volumes(self._lookup_storage_pool()))

    def list_volume_paths(self) -> List[Tuple[str, str]]:
        """Return ``(name, path)`` pairs sorted by name.

        Volumes whose path cannot be resolved are left out and logged.
        """
        entries: List[Tuple[str, str]] = []
        for vol in self._list_all_volumes(self._lookup_storage_pool()):
            name = vol.name()
            try:
                entries.append((name, vol.path()))
            except libvirt.libvirtError as exc:
                logger.warning(
                    "Skipping volume %s/%s without a resolvable path: %s",
                    self.pool_name,
                    name,
                    exc,
                )
        entries.sort(key=lambda entry: entry[0])
        return entries

    def get_volume(self, name: str) -> "libvirt.virStorageVol":
        pool = self._lookup_storage_pool()
        return self._lookup_storage_volume(pool, name)

    def volume_path(self, name: str) -> str:
        return self._volume_path(self.get_volume(name), name)

    def remove_volume(self, name: str) -> None:
        volume = self.get_volume(name)
        try:
            volume.delete(getattr(libvirt, "VIR_STORAGE_VOL_DELETE_NORMAL", 0))
        except libvirt.libvirtError as exc:
            logger.error("Failed to delete volume %s/%s: %s", self.pool_name, name, exc)
            raise VolumeDeleteError(self.pool_name, name, exc) from exc
        logger.info("Deleted volume %s/%s", self.pool_name, name)

    # ------------------------------------------------------------------
    # Provisioning
    # ------------------------------------------------------------------
    def create_volume(
        self,
        name: str,
        size: int,
        stream: BinaryIO,
        volume_format: str,
    ) -> "libvirt.virStorageVol":
        """Create a volume of ``size`` bytes and upload ``stream`` into it.

        The volume exists in the pool as soon as it is created; if the upload
        fails it is deleted again on a best-effort basis.
        """
        if size < 0:
            raise ValueError("Volume size must not be negative")

        descriptor = VolumeDescriptor(name=name, format=volume_format, capacity=size)
        pool = self._lookup_storage_pool()
        volume = self._create_from_descriptor(pool, descriptor)

        upload = None
        try:
            conn = self._host.require_connection()
            upload = conn.newStream(0)
            volume.upload(upload, 0, size, 0)
            self._send_all(upload, stream, size)
            upload.finish()
        except Exception as exc:
            logger.error(
                "Upload into volume %s/%s failed: %s", self.pool_name, name, exc
            )
            if upload is not None:
                try:
                    upload.abort()
                except libvirt.libvirtError as abort_exc:
                    logger.debug("Aborting upload stream for %s failed: %s", name, abort_exc)
            cleanup_error = None
            try:
                volume.delete(getattr(libvirt, "VIR_STORAGE_VOL_DELETE_NORMAL", 0))
            except libvirt.libvirtError as delete_exc:
                logger.warning(
                    "Failed to clean up partial volume %s/%s after upload error: %s",
                    self.pool_name,
                    name,
                    delete_exc,
                )
                cleanup_error = delete_exc
            raise VolumeUploadError(self.pool_name, name, exc, cleanup_error) from exc

        logger.info(
            "Created volume %s/%s (%d bytes, format %s)", self.pool_name, name, size, volume_format
        )
        return volume

    def create_config_volume(self, name: str, payload: PayloadProducer) -> "libvirt.virStorageVol":
        """Create an ISO volume from an in-memory payload of at most 10MB."""
        data = _read_bounded(_open_payload(payload), MAX_ISO_SIZE)
        if len(data) > MAX_ISO_SIZE:
            raise PayloadTooLargeError(name, MAX_ISO_SIZE)
        return self.create_volume(name, len(data), io.BytesIO(data), ISO_FORMAT)

    def clone_base_image(
        self, name: str, base_image: str, new_size: int = 0
    ) -> "libvirt.virStorageVol":
        """Create ``name`` as a copy-on-write child of ``base_image``.

        ``base_image`` has to be a qcow2 volume; this is not checked here. With
        ``new_size`` == 0 the clone keeps the size of the base image.
        """
        pool = self._lookup_storage_pool()
        base_volume = self._lookup_storage_volume(pool, base_image)
        base_path = self._volume_path(base_volume, base_image)

        descriptor = VolumeDescriptor(
            name=name,
            format=BASE_IMAGE_FORMAT,
            capacity=new_size or None,
            backing_store=BackingStore(path=base_path, format=BASE_IMAGE_FORMAT),
        )
        volume = self._create_from_descriptor(pool, descriptor)
        logger.info("Cloned %s/%s from %s", self.pool_name, name, base_path)
        return volume

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _lookup_storage_pool(self) -> "libvirt.virStoragePool":
        conn = self._host.require_connection()
        try:
            pool = conn.storagePoolLookupByName(self.pool_name)
        except libvirt.libvirtError as exc:
            logger.debug("storagePoolLookupByName(%s) failed: %s", self.pool_name, exc)
            raise PoolLookupError(self.pool_name, exc) from exc

        try:
            pool.refresh(0)
        except libvirt.libvirtError as exc:
            logger.debug("refresh(%s) failed: %s", self.pool_name, exc)

        return pool

    def _list_all_volumes(self, pool: "libvirt.virStoragePool") -> List["libvirt.virStorageVol"]:
        try:
            return pool.listAllVolumes(0) or []
        except libvirt.libvirtError as exc:
            logger.error("listAllVolumes failed for pool %s: %s", self.pool_name, exc)
            raise StorageError(
                f"Failed to list volumes of pool '{self.pool_name}': {exc}"
            ) from exc

    def _lookup_storage_volume(
        self, pool: "libvirt.virStoragePool", name: str
    ) -> "libvirt.virStorageVol":
        try:
            return pool.storageVolLookupByName(name)
        except libvirt.libvirtError as exc:
            logger.debug(
                "storageVolLookupByName(%s) failed in pool %s: %s", name, self.pool_name, exc
            )
            raise VolumeLookupError(self.pool_name, name, exc) from exc

    def _volume_path(self, volume: "libvirt.virStorageVol", name: str) -> str:
        try:
            return volume.path()
        except libvirt.libvirtError as exc:
            logger.debug("path() failed for volume %s/%s: %s", self.pool_name, name, exc)
            raise VolumePathError(self.pool_name, name, exc) from exc

    def _create_from_descriptor(
        self, pool: "libvirt.virStoragePool", descriptor: VolumeDescriptor
    ) -> "libvirt.virStorageVol":
        try:
            volume = pool.createXML(descriptor.to_xml(), 0)
        except libvirt.libvirtError as exc:
            logger.error(
                "Failed to create volume %s/%s: %s", self.pool_name, descriptor.name, exc
            )
            raise VolumeCreateError(self.pool_name, descriptor.name, exc) from exc
        if volume is None:
            raise VolumeCreateError(self.pool_name, descriptor.name, "libvirt returned no volume")
        return volume

    def _send_all(self, upload: "libvirt.virStream", source: BinaryIO, size: int) -> None:
        remaining = size
        while remaining > 0:
            chunk = source.read(min(self._chunk_size, remaining))
            if not chunk:
                raise IOError(f"source ended after {size - remaining} of {size} bytes")
            upload.send(chunk)
            remaining -= len(chunk)


def _open_payload(payload: PayloadProducer) -> BinaryIO:
    if callable(payload):
        payload = payload()
    if isinstance(payload, (bytes, bytearray, memoryview)):
        return io.BytesIO(bytes(payload))
    return payload


def _read_bounded(reader: BinaryIO, limit: int) -> bytes:
    # Read at most limit + 1 bytes; anything past the limit means overflow.
    data = bytearray()
    while len(data) <= limit:
        chunk = reader.read(limit + 1 - len(data))
        if not chunk:
            break
        data += chunk
    return bytes(data)


__all__ = [
    "LibvirtVolumeManager",
    "MAX_ISO_SIZE",
    "BASE_IMAGE_FORMAT",
    "ISO_FORMAT",
    "PayloadProducer",
]
