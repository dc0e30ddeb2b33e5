from __future__ import annotations

from dataclasses import dataclass
from typing import Optional
from xml.sax.saxutils import escape, quoteattr


@dataclass(frozen=True)
class BackingStore:
    path: str
    format: str = "qcow2"


@dataclass(frozen=True)
class VolumeDescriptor:
    """Fields of a libvirt storage volume definition.

    ``capacity`` of ``None`` leaves the capacity element out so libvirt derives
    it from the backing store.
    """

    name: str
    format: str
    capacity: Optional[int] = None
    backing_store: Optional[BackingStore] = None

    def to_xml(self) -> str:
        capacity_fragment = ""
        if self.capacity is not None:
            if self.capacity < 0:
                raise ValueError("Volume capacity must not be negative")
            capacity_fragment = f"<capacity unit=\"bytes\">{int(self.capacity)}</capacity>"

        backing_fragment = ""
        if self.backing_store is not None:
            backing_fragment = (
                "<backingStore>"
                f"<path>{escape(self.backing_store.path)}</path>"
                f"<format type={quoteattr(self.backing_store.format)}/>"
                "</backingStore>"
            )

        return (
            "<volume>"
            "<name>{name}</name>"
            "{capacity}"
            "<target><format type={format}/></target>"
            "{backing}"
            "</volume>"
        ).format(
            name=escape(self.name),
            capacity=capacity_fragment,
            format=quoteattr(self.format),
            backing=backing_fragment,
        )


__all__ = ["BackingStore", "VolumeDescriptor"]
