"""AsyncExtendedClient: the asyncio counterpart of ExtendedClient."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

from sqs_extended.cleanup import DeleteCleanup
from sqs_extended.client import RECEIPT_HANDLE, failed_entry_ids, with_receipt_handles
from sqs_extended.config import ExtendedClientConfig
from sqs_extended.errors import PayloadNotFoundError
from sqs_extended.offload import ENTRIES, BatchOffloadPlanner, OffloadEngine
from sqs_extended.pointer import PointerCodec
from sqs_extended.receive import ReceiveRehydrator

if TYPE_CHECKING:
    from collections.abc import Awaitable, Mapping

    from sqs_extended.stores import AsyncPayloadStore
    from sqs_extended.types import BlobPointer, OffloadPlan

logger = logging.getLogger(__name__)


async def _gather_or_cancel(*aws: Awaitable[Any]) -> list[Any]:
    """Await ``aws`` concurrently; on the first failure cancel the rest before re-raising.

    Results keep the order of ``aws``. Cancelled siblings are awaited so none of
    them outlives the call or leaves an unretrieved exception behind.
    """
    tasks = [asyncio.ensure_future(aw) for aw in aws]
    try:
        return await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


class AsyncExtendedClient:
    """Async wrapper around an awaitable SQS client with payload offloading.

    ``sqs_client`` is any client whose operations are coroutines taking boto3
    keyword arguments (for example an aiobotocore client). Blocking stores
    such as :class:`~sqs_extended.stores.S3PayloadStore` are used through
    :class:`~sqs_extended.stores.ThreadedPayloadStore`.

    Uploads for one batch run concurrently and the queue send starts only
    after all of them finished. Payload fetches for one receive also run
    concurrently; messages keep their queue order.
    """

    def __init__(
        self,
        sqs_client: Any,
        config: ExtendedClientConfig | None = None,
        *,
        payload_store: AsyncPayloadStore | None = None,
    ) -> None:
        """Initialize with the queue client, the config, and an optional async payload store."""
        self._sqs = sqs_client
        self.config = config if config is not None else ExtendedClientConfig()
        self.payload_store = payload_store

        codec = PointerCodec.from_config(self.config)
        self._rehydrator = ReceiveRehydrator(self.config, codec)
        self._cleanup = DeleteCleanup(self.config, codec)
        self._planner: BatchOffloadPlanner | None = None
        if payload_store is not None:
            engine = OffloadEngine(self.config, bucket_name=payload_store.bucket_name, codec=codec)
            self._planner = BatchOffloadPlanner(engine)

    @property
    def sqs_client(self) -> Any:
        """Return the wrapped queue client."""
        return self._sqs

    @property
    def payload_support_enabled(self) -> bool:
        """Return whether payloads are offloaded and restored."""
        return self.payload_store is not None

    def __getattr__(self, name: str) -> Any:
        if name == "_sqs":
            raise AttributeError(name)
        return getattr(self._sqs, name)

    def _store(self) -> AsyncPayloadStore:
        store = self.payload_store
        if store is None:
            msg = "Payload support is disabled; no payload store is configured."
            raise RuntimeError(msg)
        return store

    async def _upload(self, plan: OffloadPlan) -> None:
        store = self._store()
        await _gather_or_cancel(*(store.put_payload(upload.pointer, upload.payload) for upload in plan.uploads))

    async def send_message(self, **kwargs: Any) -> dict[str, Any]:
        """Send one message, offloading its body when it is too large."""
        if self._planner is None:
            return await self._sqs.send_message(**kwargs)

        plan = self._planner.engine.plan_send(kwargs)
        await self._upload(plan)
        return await self._sqs.send_message(**plan.request)

    async def send_message_batch(self, **kwargs: Any) -> dict[str, Any]:
        """Send a batch, offloading the largest bodies until the batch fits."""
        if self._planner is None:
            return await self._sqs.send_message_batch(**kwargs)

        plan = self._planner.plan_batch(kwargs)
        await self._upload(plan)
        return await self._sqs.send_message_batch(**plan.request)

    async def receive_message(self, **kwargs: Any) -> dict[str, Any]:
        """Receive messages and restore offloaded payloads."""
        if not self.payload_support_enabled:
            return await self._sqs.receive_message(**kwargs)

        request = self._rehydrator.prepare_request(kwargs)
        response = await self._sqs.receive_message(**request)
        messages = response.get("Messages")
        if not messages:
            return response

        results = await _gather_or_cancel(*(self._rehydrate(request, message) for message in messages))
        return self._rehydrator.build_response(response, [message for message in results if message is not None])

    async def _rehydrate(self, request: Mapping[str, Any], message: Mapping[str, Any]) -> dict[str, Any] | None:
        pointer = self._rehydrator.pointer_for(message)
        if pointer is None:
            return dict(message)

        try:
            payload = await self._store().get_payload(pointer)
        except PayloadNotFoundError:
            if not self.config.ignore_payload_not_found:
                raise
            logger.warning(
                "Payload %s/%s of message %s not found; deleting the message from the queue.",
                pointer.bucket_name,
                pointer.key,
                message.get("MessageId"),
            )
            await self._sqs.delete_message(QueueUrl=request.get("QueueUrl"), ReceiptHandle=message[RECEIPT_HANDLE])
            return None
        return self._rehydrator.rehydrate(message, pointer, payload)

    async def delete_message(self, **kwargs: Any) -> dict[str, Any]:
        """Delete a message from the queue, then its payload."""
        if not self.payload_support_enabled:
            return await self._sqs.delete_message(**kwargs)

        resolution = self._cleanup.resolve_delete(kwargs.get(RECEIPT_HANDLE))
        response = await self._sqs.delete_message(**{**kwargs, RECEIPT_HANDLE: resolution.receipt_handle})
        if resolution.cleanup is not None:
            await self._store().delete_payload(resolution.cleanup)
        return response

    async def delete_message_batch(self, **kwargs: Any) -> dict[str, Any]:
        """Delete a batch of messages, then the payloads of the deleted ones, best effort."""
        if not self.payload_support_enabled:
            return await self._sqs.delete_message_batch(**kwargs)

        entries = kwargs.get(ENTRIES) or []
        resolutions = [self._cleanup.resolve_delete(entry.get(RECEIPT_HANDLE)) for entry in entries]
        response = await self._sqs.delete_message_batch(
            **{**kwargs, ENTRIES: with_receipt_handles(entries, [r.receipt_handle for r in resolutions])}
        )

        failed = failed_entry_ids(response)
        await _gather_or_cancel(
            *(
                self._delete_quietly(resolution.cleanup)
                for entry, resolution in zip(entries, resolutions)
                if resolution.cleanup is not None and entry.get("Id") not in failed
            )
        )
        return response

    async def _delete_quietly(self, pointer: BlobPointer) -> None:
        try:
            await self._store().delete_payload(pointer)
        except Exception:
            logger.warning("Failed to delete payload %s/%s.", pointer.bucket_name, pointer.key, exc_info=True)

    async def change_message_visibility(self, **kwargs: Any) -> dict[str, Any]:
        """Change a message's visibility timeout; its payload is kept."""
        if not self.payload_support_enabled:
            return await self._sqs.change_message_visibility(**kwargs)

        handle = self._cleanup.resolve_visibility(kwargs.get(RECEIPT_HANDLE))
        return await self._sqs.change_message_visibility(**{**kwargs, RECEIPT_HANDLE: handle})

    async def change_message_visibility_batch(self, **kwargs: Any) -> dict[str, Any]:
        """Change visibility timeouts for a batch; payloads are kept."""
        if not self.payload_support_enabled:
            return await self._sqs.change_message_visibility_batch(**kwargs)

        entries = kwargs.get(ENTRIES) or []
        handles = [self._cleanup.resolve_visibility(entry.get(RECEIPT_HANDLE)) for entry in entries]
        return await self._sqs.change_message_visibility_batch(
            **{**kwargs, ENTRIES: with_receipt_handles(entries, handles)}
        )

    async def purge_queue(self, **kwargs: Any) -> dict[str, Any]:
        """Purge the queue. Offloaded payloads are left in the blob store."""
        logger.warning(
            "Calling purge_queue deletes SQS messages without deleting their payloads from S3. "
            "Those payloads are left behind in the bucket."
        )
        return await self._sqs.purge_queue(**kwargs)
