"""ExtendedClient: a boto3 SQS client that keeps large payloads in a blob store."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from sqs_extended.cleanup import DeleteCleanup
from sqs_extended.config import ExtendedClientConfig
from sqs_extended.errors import PayloadNotFoundError
from sqs_extended.offload import ENTRIES, BatchOffloadPlanner, OffloadEngine
from sqs_extended.pointer import PointerCodec
from sqs_extended.receive import ReceiveRehydrator
from sqs_extended.stores import S3PayloadStore

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from sqs_extended.stores import PayloadStore
    from sqs_extended.types import BlobPointer, OffloadPlan

logger = logging.getLogger(__name__)

RECEIPT_HANDLE = "ReceiptHandle"


def failed_entry_ids(response: Mapping[str, Any]) -> set[str]:
    """Return the ids of batch entries the queue reported under ``Failed``."""
    return {failure.get("Id") for failure in response.get("Failed") or ()}


def with_receipt_handles(entries: Sequence[Mapping[str, Any]], handles: Sequence[str]) -> list[dict[str, Any]]:
    """Return copies of batch ``entries`` carrying the given receipt handles."""
    return [{**entry, RECEIPT_HANDLE: handle} for entry, handle in zip(entries, handles)]


class ExtendedClient:
    """Drop-in wrapper around ``boto3.client("sqs")`` with payload offloading.

    Message bodies that push a message over the size threshold are written to
    the payload store and replaced by a pointer. Receiving restores them, and
    deleting a received message removes its payload unless cleanup is
    disabled.

    Payload support is enabled when a ``payload_store`` is given, or when an
    ``s3_client`` is given together with ``config.bucket_name``. Without one,
    every call is forwarded to the wrapped client unchanged. Operations with
    no offloading semantics (``create_queue``, ``get_queue_url``, tags,
    permissions, ...) are always forwarded.

    Example::

        sqs = ExtendedClient(
            boto3.client("sqs"),
            ExtendedClientConfig(bucket_name="my-payloads"),
            s3_client=boto3.client("s3"),
        )
        sqs.send_message(QueueUrl=queue_url, MessageBody=large_body)
    """

    def __init__(
        self,
        sqs_client: Any,
        config: ExtendedClientConfig | None = None,
        *,
        s3_client: Any = None,
        payload_store: PayloadStore | None = None,
    ) -> None:
        """Initialize with the queue client, the config, and a payload store or S3 client."""
        self._sqs = sqs_client
        self.config = config if config is not None else ExtendedClientConfig()
        if payload_store is None and s3_client is not None:
            payload_store = S3PayloadStore.from_config(s3_client, self.config)
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

    def _store(self) -> PayloadStore:
        store = self.payload_store
        if store is None:
            msg = "Payload support is disabled; no payload store is configured."
            raise RuntimeError(msg)
        return store

    def _upload(self, plan: OffloadPlan) -> None:
        store = self._store()
        for upload in plan.uploads:
            store.put_payload(upload.pointer, upload.payload)

    # -- send ----------------------------------------------------------------

    def send_message(self, **kwargs: Any) -> dict[str, Any]:
        """Send one message, offloading its body when it is too large."""
        if self._planner is None:
            return self._sqs.send_message(**kwargs)

        plan = self._planner.engine.plan_send(kwargs)
        self._upload(plan)
        return self._sqs.send_message(**plan.request)

    def send_message_batch(self, **kwargs: Any) -> dict[str, Any]:
        """Send a batch, offloading the largest bodies until the batch fits."""
        if self._planner is None:
            return self._sqs.send_message_batch(**kwargs)

        plan = self._planner.plan_batch(kwargs)
        self._upload(plan)
        return self._sqs.send_message_batch(**plan.request)

    # -- receive -------------------------------------------------------------

    def receive_message(self, **kwargs: Any) -> dict[str, Any]:
        """Receive messages and restore offloaded payloads.

        Receipt handles of restored messages carry the payload pointer and
        must be passed back unchanged to the delete and visibility calls.
        """
        if not self.payload_support_enabled:
            return self._sqs.receive_message(**kwargs)

        request = self._rehydrator.prepare_request(kwargs)
        response = self._sqs.receive_message(**request)
        messages = response.get("Messages")
        if not messages:
            return response

        restored: list[dict[str, Any]] = []
        for message in messages:
            rehydrated = self._rehydrate(request, message)
            if rehydrated is not None:
                restored.append(rehydrated)
        return self._rehydrator.build_response(response, restored)

    def _rehydrate(self, request: Mapping[str, Any], message: Mapping[str, Any]) -> dict[str, Any] | None:
        pointer = self._rehydrator.pointer_for(message)
        if pointer is None:
            return dict(message)

        try:
            payload = self._store().get_payload(pointer)
        except PayloadNotFoundError:
            if not self.config.ignore_payload_not_found:
                raise
            self._drop_orphan(request, message, pointer)
            return None
        return self._rehydrator.rehydrate(message, pointer, payload)

    def _drop_orphan(self, request: Mapping[str, Any], message: Mapping[str, Any], pointer: BlobPointer) -> None:
        logger.warning(
            "Payload %s/%s of message %s not found; deleting the message from the queue.",
            pointer.bucket_name,
            pointer.key,
            message.get("MessageId"),
        )
        self._sqs.delete_message(QueueUrl=request.get("QueueUrl"), ReceiptHandle=message[RECEIPT_HANDLE])

    # -- delete --------------------------------------------------------------

    def delete_message(self, **kwargs: Any) -> dict[str, Any]:
        """Delete a message from the queue, then its payload.

        Payload deletion errors propagate; the queue delete has already
        happened by then.
        """
        if not self.payload_support_enabled:
            return self._sqs.delete_message(**kwargs)

        resolution = self._cleanup.resolve_delete(kwargs.get(RECEIPT_HANDLE))
        response = self._sqs.delete_message(**{**kwargs, RECEIPT_HANDLE: resolution.receipt_handle})
        if resolution.cleanup is not None:
            self._store().delete_payload(resolution.cleanup)
        return response

    def delete_message_batch(self, **kwargs: Any) -> dict[str, Any]:
        """Delete a batch of messages, then the payloads of the deleted ones.

        Payload cleanup is best effort: a failure is logged and does not stop
        cleanup of the other entries.
        """
        if not self.payload_support_enabled:
            return self._sqs.delete_message_batch(**kwargs)

        entries = kwargs.get(ENTRIES) or []
        resolutions = [self._cleanup.resolve_delete(entry.get(RECEIPT_HANDLE)) for entry in entries]
        response = self._sqs.delete_message_batch(
            **{**kwargs, ENTRIES: with_receipt_handles(entries, [r.receipt_handle for r in resolutions])}
        )

        failed = failed_entry_ids(response)
        for entry, resolution in zip(entries, resolutions):
            if resolution.cleanup is not None and entry.get("Id") not in failed:
                self._delete_quietly(resolution.cleanup)
        return response

    def _delete_quietly(self, pointer: BlobPointer) -> None:
        try:
            self._store().delete_payload(pointer)
        except Exception:
            logger.warning("Failed to delete payload %s/%s.", pointer.bucket_name, pointer.key, exc_info=True)

    # -- visibility ----------------------------------------------------------

    def change_message_visibility(self, **kwargs: Any) -> dict[str, Any]:
        """Change a message's visibility timeout; its payload is kept."""
        if not self.payload_support_enabled:
            return self._sqs.change_message_visibility(**kwargs)

        handle = self._cleanup.resolve_visibility(kwargs.get(RECEIPT_HANDLE))
        return self._sqs.change_message_visibility(**{**kwargs, RECEIPT_HANDLE: handle})

    def change_message_visibility_batch(self, **kwargs: Any) -> dict[str, Any]:
        """Change visibility timeouts for a batch; payloads are kept."""
        if not self.payload_support_enabled:
            return self._sqs.change_message_visibility_batch(**kwargs)

        entries = kwargs.get(ENTRIES) or []
        handles = [self._cleanup.resolve_visibility(entry.get(RECEIPT_HANDLE)) for entry in entries]
        return self._sqs.change_message_visibility_batch(**{**kwargs, ENTRIES: with_receipt_handles(entries, handles)})

    # -- queue ---------------------------------------------------------------

    def purge_queue(self, **kwargs: Any) -> dict[str, Any]:
        """Purge the queue. Offloaded payloads are left in the blob store."""
        logger.warning(
            "Calling purge_queue deletes SQS messages without deleting their payloads from S3. "
            "Those payloads are left behind in the bucket."
        )
        return self._sqs.purge_queue(**kwargs)
