import logging
from typing import Optional

from virtimage.core.config import get_settings
from virtimage.image import LibvirtImageManager
from virtimage.libvirt.host import LibvirtHost

logger = logging.getLogger(__name__)
_host: Optional[LibvirtHost] = None


def get_host() -> LibvirtHost:
    global _host
    if _host is None:
        settings = get_settings()
        logger.info("Initializing LibvirtHost for %s (pool %s)", settings.libvirt_uri, settings.pool)
        _host = LibvirtHost.from_settings(settings)
    return _host


def get_image_manager() -> LibvirtImageManager:
    return LibvirtImageManager(get_host().volumes)


def close_host() -> None:
    global _host
    if _host is not None:
        _host.disconnect()
        _host = None
