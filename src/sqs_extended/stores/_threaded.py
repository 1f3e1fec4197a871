"""ThreadedPayloadStore: run a blocking payload store from async code."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from sqs_extended.stores._store import PayloadStore
    from sqs_extended.types import BlobPointer


class ThreadedPayloadStore:
    """Expose a blocking :class:`PayloadStore` as an async one.

    Every call runs in the default executor, so the event loop keeps serving
    other tasks while boto3 waits on the network.
    """

    def __init__(self, store: PayloadStore) -> None:
        """Initialize with the blocking store to delegate to."""
        self._store = store

    @property
    def store(self) -> PayloadStore:
        """Return the wrapped blocking store."""
        return self._store

    @property
    def bucket_name(self) -> str:
        """Return the bucket new payloads are written to."""
        return self._store.bucket_name

    async def put_payload(self, pointer: BlobPointer, payload: bytes) -> None:
        """Store ``payload`` at ``pointer`` in a worker thread."""
        await asyncio.to_thread(self._store.put_payload, pointer, payload)

    async def get_payload(self, pointer: BlobPointer) -> bytes:
        """Return the payload at ``pointer``, read in a worker thread."""
        return await asyncio.to_thread(self._store.get_payload, pointer)

    async def delete_payload(self, pointer: BlobPointer) -> None:
        """Delete the payload at ``pointer`` in a worker thread."""
        await asyncio.to_thread(self._store.delete_payload, pointer)
