"""Send-side planning: decide which payloads move to the blob store.

Planning is pure. It validates the request, generates object keys, and
returns an :class:`~sqs_extended.types.OffloadPlan` holding the rewritten
request and the uploads that must complete before the queue call. The
client wrappers execute plans; nothing here touches the network.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from sqs_extended.errors import InvalidArgumentError
from sqs_extended.pointer import PointerCodec
from sqs_extended.policy import ThresholdPolicy
from sqs_extended.sizing import message_size
from sqs_extended.types import BlobPointer, OffloadPlan, PendingUpload

if TYPE_CHECKING:
    from collections.abc import Callable

    from sqs_extended.config import ExtendedClientConfig

logger = logging.getLogger(__name__)

BODY = "MessageBody"
ATTRIBUTES = "MessageAttributes"
ENTRIES = "Entries"


def _require_request(request: object, *, operation: str) -> Mapping[str, Any]:
    if request is None or not isinstance(request, Mapping):
        msg = f"{operation} request cannot be None."
        logger.error(msg)
        raise InvalidArgumentError(msg)
    return request


def _require_body(message: Mapping[str, Any], *, label: str) -> None:
    body = message.get(BODY)
    if body is None or len(body) == 0:
        msg = f"{label} cannot be None or empty."
        logger.error(msg)
        raise InvalidArgumentError(msg)
    if isinstance(body, (bytes, bytearray, memoryview)):
        try:
            bytes(body).decode("utf-8")
        except UnicodeDecodeError as exc:
            msg = f"{label} must be valid UTF-8 when given as bytes: {exc.reason} at byte {exc.start}."
            logger.exception(msg)
            raise InvalidArgumentError(msg) from exc


class OffloadEngine:
    """Rewrite single messages so their payload lives in the blob store."""

    def __init__(
        self,
        config: ExtendedClientConfig,
        *,
        bucket_name: str,
        codec: PointerCodec | None = None,
        key_factory: Callable[[], str] | None = None,
    ) -> None:
        """Initialize with the client config and the bucket new payloads go to."""
        self.config = config
        self.bucket_name = bucket_name
        self.policy = ThresholdPolicy(config)
        self.codec = codec if codec is not None else PointerCodec.from_config(config)
        self._key_factory = key_factory or (lambda: str(uuid.uuid4()))

    def new_pointer(self) -> BlobPointer:
        """Return a pointer to a fresh, unique object key."""
        return BlobPointer(bucket_name=self.bucket_name, key=f"{self.config.key_prefix}{self._key_factory()}")

    def offload_message(self, message: Mapping[str, Any]) -> tuple[dict[str, Any], PendingUpload]:
        """Return ``message`` with its body replaced by a pointer, and the upload it needs.

        The reserved size attribute records the payload's byte size under the
        name selected by the configured attribute naming.
        """
        body = message[BODY]
        payload = body.encode("utf-8") if isinstance(body, str) else bytes(body)

        attributes = dict(message.get(ATTRIBUTES) or {})
        attributes[self.config.reserved_attribute_name] = {"DataType": "Number", "StringValue": str(len(payload))}

        pointer = self.new_pointer()
        rewritten = {**message, ATTRIBUTES: attributes, BODY: self.codec.serialize(pointer)}
        return rewritten, PendingUpload(pointer=pointer, payload=payload)

    def plan_send(self, request: Mapping[str, Any] | None) -> OffloadPlan:
        """Plan one ``send_message`` call."""
        request = _require_request(request, operation="send_message")
        _require_body(request, label=BODY)

        attributes = request.get(ATTRIBUTES)
        self.policy.validate_attributes(attributes)

        if not self.policy.must_offload(message_size(request[BODY], attributes)):
            return OffloadPlan(request=dict(request))

        rewritten, upload = self.offload_message(request)
        logger.debug("Offloading message body of %d bytes to %s", upload.size, upload.pointer.key)
        return OffloadPlan(request=rewritten, uploads=(upload,))


class BatchOffloadPlanner:
    """Offload just enough batch entries for the whole batch to fit the threshold.

    Entries are visited largest first; each offload removes the most bytes one
    upload can remove, so the fewest uploads clear the threshold. With
    ``always_through_s3`` every entry is offloaded.
    """

    def __init__(self, engine: OffloadEngine) -> None:
        """Initialize with the single-message engine used for each entry."""
        self.engine = engine

    def plan_batch(self, request: Mapping[str, Any] | None) -> OffloadPlan:
        """Plan one ``send_message_batch`` call."""
        request = _require_request(request, operation="send_message_batch")
        entries = request.get(ENTRIES)
        if not entries:
            msg = "send_message_batch entries cannot be None or empty."
            logger.error(msg)
            raise InvalidArgumentError(msg)

        policy = self.engine.policy
        for index, entry in enumerate(entries):
            _require_body(entry, label=f"{ENTRIES}[{index}].{BODY}")
            policy.validate_attributes(entry.get(ATTRIBUTES))

        sizes = [message_size(entry[BODY], entry.get(ATTRIBUTES)) for entry in entries]
        total_size = sum(sizes)
        # sorted() keeps original order among equal sizes, also with reverse=True
        largest_first = sorted(range(len(entries)), key=sizes.__getitem__, reverse=True)

        rewritten: list[dict[str, Any]] = [dict(entry) for entry in entries]
        uploads: list[PendingUpload] = []
        for index in largest_first:
            if not policy.must_offload(total_size):
                break
            entry, upload = self.engine.offload_message(entries[index])
            total_size += message_size(entry[BODY], entry[ATTRIBUTES]) - sizes[index]
            rewritten[index] = entry
            uploads.append(upload)

        if uploads:
            logger.debug(
                "Offloading %d of %d batch entries; batch size is now %d bytes",
                len(uploads),
                len(entries),
                total_size,
            )
        return OffloadPlan(request={**request, ENTRIES: rewritten}, uploads=tuple(uploads))
