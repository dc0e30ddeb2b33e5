"""Resolve image URIs to a byte length and a readable stream."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import BinaryIO, Optional
from urllib.parse import unquote, urlparse

import requests

from .errors import SourceError, UnsupportedSchemeError

logger = logging.getLogger(__name__)

SUPPORTED_SCHEMES = ("file", "http", "https")


@dataclass
class Source:
    """An opened image source whose size is known up front."""

    scheme: str
    size: int
    stream: BinaryIO
    uri: str = ""
    _closer: Optional[object] = None

    def close(self) -> None:
        target = self._closer if self._closer is not None else self.stream
        close = getattr(target, "close", None)
        if callable(close):
            close()

    def __enter__(self) -> "Source":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


def resolve(uri: str) -> Source:
    """Open ``uri`` and determine its size.

    Only ``file``, ``http`` and ``https`` are supported. The size must be known
    before any volume is created because libvirt requires the capacity up front.
    """
    parsed = urlparse(uri)
    scheme = parsed.scheme.lower()

    if scheme == "file":
        return _resolve_file(uri, unquote(parsed.path))
    if scheme in ("http", "https"):
        return _resolve_http(uri)

    logger.debug("Refusing image source %s with scheme '%s'", uri, scheme)
    raise UnsupportedSchemeError(uri, scheme)


def _resolve_file(uri: str, path: str) -> Source:
    try:
        handle = open(path, "rb")
    except OSError as exc:
        raise SourceError(uri, f"cannot open '{path}': {exc}") from exc

    try:
        size = os.fstat(handle.fileno()).st_size
    except OSError as exc:
        handle.close()
        raise SourceError(uri, f"cannot stat '{path}': {exc}") from exc

    if size < 0:
        handle.close()
        raise SourceError(uri, "negative file size")

    logger.debug("Resolved %s to local file of %d bytes", uri, size)
    return Source(scheme="file", size=size, stream=handle, uri=uri)


def _resolve_http(uri: str) -> Source:
    try:
        response = requests.get(uri, stream=True)
    except requests.RequestException as exc:
        raise SourceError(uri, f"request failed: {exc}") from exc

    if response.status_code != 200:
        response.close()
        raise SourceError(uri, f"http status {response.status_code} returned")

    raw_length = response.headers.get("content-length")
    try:
        size = int(raw_length) if raw_length is not None else -1
    except ValueError:
        size = -1

    if size < 0:
        response.close()
        raise SourceError(uri, "could not determine content length")

    logger.debug("Resolved %s to http body of %d bytes", uri, size)
    # The raw body is read without content decoding so the byte count
    # matches Content-Length.
    return Source(
        scheme=urlparse(uri).scheme.lower(),
        size=size,
        stream=response.raw,
        uri=uri,
        _closer=response,
    )


__all__ = ["Source", "SUPPORTED_SCHEMES", "resolve"]
