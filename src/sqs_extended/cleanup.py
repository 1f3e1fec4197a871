"""DeleteCleanup: restore queue receipt handles and pick payloads to delete."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqs_extended.errors import InvalidArgumentError
from sqs_extended.pointer import PointerCodec
from sqs_extended.types import HandleResolution

if TYPE_CHECKING:
    from sqs_extended.config import ExtendedClientConfig


class DeleteCleanup:
    """Resolve receipt handles handed back by consumers."""

    def __init__(self, config: ExtendedClientConfig, codec: PointerCodec | None = None) -> None:
        """Initialize with the client config and an optional pointer codec."""
        self.config = config
        self.codec = codec if codec is not None else PointerCodec.from_config(config)

    def resolve_delete(self, handle: str | None) -> HandleResolution:
        """Resolve a handle passed to a delete call.

        The payload is scheduled for deletion only when the handle is augmented
        and payload cleanup is enabled.
        """
        handle = _require_handle(handle)
        if not self.codec.is_augmented(handle):
            return HandleResolution(receipt_handle=handle)

        cleanup = self.codec.extract_pointer(handle) if self.config.cleanup_payload else None
        return HandleResolution(receipt_handle=self.codec.extract_original_handle(handle), cleanup=cleanup)

    def resolve_visibility(self, handle: str | None) -> str:
        """Resolve a handle passed to a visibility change; the payload is kept."""
        handle = _require_handle(handle)
        if not self.codec.is_augmented(handle):
            return handle
        return self.codec.extract_original_handle(handle)


def _require_handle(handle: str | None) -> str:
    if not handle:
        msg = "ReceiptHandle cannot be None or empty."
        raise InvalidArgumentError(msg)
    return handle
