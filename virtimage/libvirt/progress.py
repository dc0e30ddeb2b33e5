from __future__ import annotations

import logging
from typing import BinaryIO, Callable, Optional

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]


class ProgressReader:
    """Pass-through reader that reports how many bytes have been read."""

    def __init__(
        self,
        stream: BinaryIO,
        total: int,
        callback: Optional[ProgressCallback] = None,
    ) -> None:
        self._stream = stream
        self.total = total
        self.transferred = 0
        self._callback = callback or log_progress(getattr(stream, "name", "stream"))

    def read(self, size: int = -1) -> bytes:
        chunk = self._stream.read(size)
        if chunk:
            self.transferred += len(chunk)
            self._callback(self.transferred, self.total)
        return chunk

    def close(self) -> None:
        close = getattr(self._stream, "close", None)
        if callable(close):
            close()


def log_progress(label: str, step: int = 10) -> ProgressCallback:
    """Return a callback logging every ``step`` percent of a transfer."""
    state = {"next": step}

    def _report(transferred: int, total: int) -> None:
        if total <= 0:
            return
        percent = transferred * 100 // total
        if percent >= state["next"]:
            logger.info("%s: %d%% (%d/%d bytes)", label, percent, transferred, total)
            state["next"] = (percent // step + 1) * step

    return _report


__all__ = ["ProgressReader", "ProgressCallback", "log_progress"]
