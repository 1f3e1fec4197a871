"""ReceiveRehydrator: turn pointer-bearing messages back into their payloads."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from sqs_extended.errors import InvalidArgumentError
from sqs_extended.pointer import PointerCodec

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqs_extended.config import ExtendedClientConfig
    from sqs_extended.types import BlobPointer

logger = logging.getLogger(__name__)

ATTRIBUTE_NAMES = "MessageAttributeNames"


class ReceiveRehydrator:
    """Recognise offloaded messages and restore them for the consumer.

    A message is offloaded when it carries either reserved attribute name,
    whichever naming the producer used. Restoring replaces the body with the
    fetched payload, strips both reserved names, and embeds the pointer in the
    receipt handle so that deleting the message can find the payload.
    """

    def __init__(self, config: ExtendedClientConfig, codec: PointerCodec | None = None) -> None:
        """Initialize with the client config and an optional pointer codec."""
        self.config = config
        self.codec = codec if codec is not None else PointerCodec.from_config(config)

    @property
    def reserved_names(self) -> tuple[str, str]:
        """Return both reserved attribute names."""
        return self.config.wire.reserved_attribute_names

    def prepare_request(self, request: Mapping[str, Any] | None) -> dict[str, Any]:
        """Return ``request`` asking for both reserved attributes exactly once."""
        if request is None or not isinstance(request, Mapping):
            msg = "receive_message request cannot be None."
            logger.error(msg)
            raise InvalidArgumentError(msg)

        reserved = self.reserved_names
        names = [name for name in request.get(ATTRIBUTE_NAMES, ()) if name not in reserved]
        names.extend(reserved)
        return {**request, ATTRIBUTE_NAMES: names}

    def pointer_for(self, message: Mapping[str, Any]) -> BlobPointer | None:
        """Return the payload pointer of an offloaded message, or ``None`` for a plain one."""
        attributes = message.get("MessageAttributes") or {}
        if not any(name in attributes for name in self.reserved_names):
            return None
        return self.codec.deserialize(message.get("Body") or "")

    def rehydrate(self, message: Mapping[str, Any], pointer: BlobPointer, payload: bytes | str) -> dict[str, Any]:
        """Return ``message`` with its original payload restored."""
        body = payload.decode("utf-8") if isinstance(payload, (bytes, bytearray)) else payload
        attributes = {
            name: value
            for name, value in (message.get("MessageAttributes") or {}).items()
            if name not in self.reserved_names
        }
        restored = {**message, "Body": body, "MessageAttributes": attributes}
        handle = message.get("ReceiptHandle")
        if handle is not None:
            restored["ReceiptHandle"] = self.codec.embed(handle, pointer)
        return restored

    @staticmethod
    def build_response(response: Mapping[str, Any], messages: Sequence[Mapping[str, Any]]) -> dict[str, Any]:
        """Return ``response`` with its message list replaced."""
        return {**response, "Messages": list(messages)}
