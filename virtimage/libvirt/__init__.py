from .host import LibvirtHost
from .source import Source, resolve
from .volume_manager import LibvirtVolumeManager, MAX_ISO_SIZE

__all__ = [
    "LibvirtHost",
    "LibvirtVolumeManager",
    "MAX_ISO_SIZE",
    "Source",
    "resolve",
]
