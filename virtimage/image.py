"""Image-level view over the managed storage pool."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import BinaryIO, List, Optional, Protocol

from .libvirt.progress import ProgressCallback, ProgressReader, log_progress
from .libvirt.source import resolve
from .libvirt.volume_manager import BASE_IMAGE_FORMAT, LibvirtVolumeManager, PayloadProducer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Image:
    name: str
    location: str


class ImageManager(Protocol):
    def create(self, name: str, image: BinaryIO, size: int) -> Image: ...

    def list(self) -> List[Image]: ...

    def remove(self, name: str) -> None: ...


class LibvirtImageManager:
    """Stores base images as qcow2 volumes of the managed pool."""

    def __init__(self, volumes: LibvirtVolumeManager):
        self._volumes = volumes

    def create_base_image(
        self,
        name: str,
        uri: str,
        progress: Optional[ProgressCallback] = None,
    ) -> Image:
        with resolve(uri) as source:
            logger.info("Importing %s (%d bytes) as %s", uri, source.size, name)
            reader = ProgressReader(source.stream, source.size, progress or log_progress(name))
            return self.create(name, reader, source.size)

    def create(self, name: str, image: BinaryIO, size: int) -> Image:
        self._volumes.create_volume(name, size, image, BASE_IMAGE_FORMAT)
        return Image(name=name, location=self._volumes.volume_path(name))

    def clone(self, name: str, base_image: str, size_bytes: int = 0) -> Image:
        self._volumes.clone_base_image(name, base_image, size_bytes)
        return Image(name=name, location=self._volumes.volume_path(name))

    def create_config_iso(self, name: str, payload: PayloadProducer) -> Image:
        self._volumes.create_config_volume(name, payload)
        return Image(name=name, location=self._volumes.volume_path(name))

    def list(self) -> List[Image]:
        return [
            Image(name=name, location=path)
            for name, path in self._volumes.list_volume_paths()
        ]

    def remove(self, name: str) -> None:
        self._volumes.remove_volume(name)


__all__ = ["Image", "ImageManager", "LibvirtImageManager"]
