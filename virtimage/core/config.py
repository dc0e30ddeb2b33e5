import os
import yaml
import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Dict, Optional

# --- Base app settings ---
CONFIG_FILE = os.getenv("CONFIG_FILE", "config.yaml")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
APP_NAME = os.getenv("APP_NAME", "virtimage")
APP_VERSION = os.getenv("APP_VERSION", "0.1.0")

DEFAULT_LIBVIRT_URI = "qemu:///system"
DEFAULT_POOL = "default"
DEFAULT_UPLOAD_CHUNK_SIZE = 2 * 1024 * 1024

logger = logging.getLogger(APP_NAME)


def load_yaml_config(path: Optional[str] = None) -> dict:
    """Load the optional YAML configuration file."""
    path = path or CONFIG_FILE
    try:
        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}
            logger.info("Loaded configuration from %s", path)
            return data
    except FileNotFoundError:
        logger.warning("Configuration file not found: %s", path)
        return {}
    except yaml.YAMLError as e:
        logger.error("Error parsing YAML config (%s): %s", path, e)
        return {}


def _load_int(raw: Any, default: int) -> int:
    if raw is None:
        return default
    try:
        return int(raw)
    except (TypeError, ValueError):
        return default


@dataclass(frozen=True)
class Settings:
    """Connection and storage settings for the image manager."""

    libvirt_uri: str = DEFAULT_LIBVIRT_URI
    pool: str = DEFAULT_POOL
    upload_chunk_size: int = DEFAULT_UPLOAD_CHUNK_SIZE

    @classmethod
    def from_sources(cls, yaml_data: Optional[Dict[str, Any]] = None) -> "Settings":
        """Build settings from YAML data, letting environment variables win."""
        yaml_data = yaml_data or {}
        libvirt_cfg = yaml_data.get("libvirt") or {}
        storage_cfg = yaml_data.get("storage") or {}

        chunk_size = _load_int(
            os.getenv("UPLOAD_CHUNK_SIZE", storage_cfg.get("upload_chunk_size")),
            DEFAULT_UPLOAD_CHUNK_SIZE,
        )
        if chunk_size <= 0:
            logger.warning("Ignoring non-positive upload chunk size %s", chunk_size)
            chunk_size = DEFAULT_UPLOAD_CHUNK_SIZE

        return cls(
            libvirt_uri=os.getenv("LIBVIRT_URI", libvirt_cfg.get("uri") or DEFAULT_LIBVIRT_URI),
            pool=os.getenv("STORAGE_POOL", libvirt_cfg.get("pool") or DEFAULT_POOL),
            upload_chunk_size=chunk_size,
        )


@lru_cache
def get_settings() -> Settings:
    """Return cached settings for reuse across the app."""
    settings = Settings.from_sources(load_yaml_config())
    logger.debug(
        "LIBVIRT_URI=%s, STORAGE_POOL=%s, UPLOAD_CHUNK_SIZE=%s",
        settings.libvirt_uri,
        settings.pool,
        settings.upload_chunk_size,
    )
    return settings


__all__ = [
    "APP_NAME",
    "APP_VERSION",
    "CONFIG_FILE",
    "LOG_LEVEL",
    "Settings",
    "get_settings",
    "load_yaml_config",
]
