"""Core data types: BlobPointer, PendingUpload, OffloadPlan, HandleResolution."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class BlobPointer:
    """Location of one offloaded payload: bucket (namespace) and object key."""

    bucket_name: str
    key: str


@dataclass(frozen=True, slots=True)
class PendingUpload:
    """One payload that must be written to the blob store before the queue call."""

    pointer: BlobPointer
    payload: bytes

    @property
    def size(self) -> int:
        """Return the payload size in bytes."""
        return len(self.payload)


@dataclass(frozen=True, slots=True)
class OffloadPlan:
    """A rewritten queue request plus the uploads it depends on.

    ``request`` is a new mapping ready for the queue client; the caller's
    request is never mutated. An empty ``uploads`` tuple means the request
    is sent unchanged.
    """

    request: Mapping[str, Any]
    uploads: tuple[PendingUpload, ...] = ()

    def __post_init__(self) -> None:
        """Normalize the uploads container to a tuple."""
        object.__setattr__(self, "uploads", tuple(self.uploads))

    @property
    def offloaded(self) -> bool:
        """Return whether any payload moves to the blob store."""
        return bool(self.uploads)


@dataclass(frozen=True, slots=True)
class HandleResolution:
    """The queue's own receipt handle and the payload to clean up, if any."""

    receipt_handle: str
    cleanup: BlobPointer | None = None
