"""PayloadStore: protocols for blob storage backends."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from sqs_extended.types import BlobPointer


@runtime_checkable
class PayloadStore(Protocol):
    """Blocking payload storage protocol.

    ``bucket_name`` is the namespace new payloads are written to. Reads and
    deletes use the bucket named by the pointer, so payloads written by other
    producers into other buckets can still be resolved.
    """

    @property
    def bucket_name(self) -> str:
        """Return the bucket new payloads are written to."""
        ...

    def put_payload(self, pointer: BlobPointer, payload: bytes) -> None:
        """Store ``payload`` at ``pointer``."""
        ...

    def get_payload(self, pointer: BlobPointer) -> bytes:
        """Return the payload at ``pointer``; raise ``PayloadNotFoundError`` when missing."""
        ...

    def delete_payload(self, pointer: BlobPointer) -> None:
        """Delete the payload at ``pointer``. Deleting a missing payload is not an error."""
        ...


@runtime_checkable
class AsyncPayloadStore(Protocol):
    """Awaitable counterpart of :class:`PayloadStore`."""

    @property
    def bucket_name(self) -> str:
        """Return the bucket new payloads are written to."""
        ...

    async def put_payload(self, pointer: BlobPointer, payload: bytes) -> None:
        """Store ``payload`` at ``pointer``."""
        ...

    async def get_payload(self, pointer: BlobPointer) -> bytes:
        """Return the payload at ``pointer``; raise ``PayloadNotFoundError`` when missing."""
        ...

    async def delete_payload(self, pointer: BlobPointer) -> None:
        """Delete the payload at ``pointer``."""
        ...
