import logging
from typing import Optional

import libvirt

from ..core.config import Settings
from .volume_manager import LibvirtVolumeManager

logger = logging.getLogger(__name__)


class LibvirtHost:
    """Holds the libvirt connection and the managed pool it operates on."""

    def __init__(self, uri: str, pool: str, *, upload_chunk_size: Optional[int] = None):
        self.uri = uri
        self.pool = pool
        self.conn: Optional[libvirt.virConnect] = None
        self.volumes = LibvirtVolumeManager(self, pool, chunk_size=upload_chunk_size)

    @classmethod
    def from_settings(cls, settings: Settings) -> "LibvirtHost":
        return cls(settings.libvirt_uri, settings.pool, upload_chunk_size=settings.upload_chunk_size)

    def connect(self) -> bool:
        try:
            logger.info("Connecting to %s", self.uri)
            self.conn = libvirt.open(self.uri)
            if self.conn is None:
                logger.error("Failed to connect to %s", self.uri)
                return False
            logger.info("Connected to %s", self.uri)
            return True
        except libvirt.libvirtError as e:
            logger.error("Connection to %s failed: %s", self.uri, e)
            return False

    def disconnect(self):
        if self.conn:
            logger.info("Disconnecting from %s", self.uri)
            self.conn.close()
            self.conn = None

    def _ensure_connection(self) -> bool:
        """Ensure the libvirt connection is alive, reconnecting if needed."""
        if self.conn is not None:
            try:
                if hasattr(self.conn, "isAlive") and self.conn.isAlive():
                    return True
            except libvirt.libvirtError as exc:
                logger.debug("Connection liveness check failed for %s: %s", self.uri, exc)

        # Stale or missing connection; open a fresh one.
        if self.conn is not None:
            try:
                self.conn.close()
            except libvirt.libvirtError as exc:
                logger.debug("Closing stale connection to %s failed: %s", self.uri, exc)
            finally:
                self.conn = None

        return self.connect()

    def require_connection(self) -> "libvirt.virConnect":
        if not self._ensure_connection() or self.conn is None:
            raise ConnectionError(f"Not connected to {self.uri}")
        return self.conn


__all__ = ["LibvirtHost"]
