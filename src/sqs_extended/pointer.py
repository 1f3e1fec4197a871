"""PointerCodec: payload pointers as message bodies and inside receipt handles."""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import TYPE_CHECKING

from sqs_extended.config import WireFormat
from sqs_extended.errors import MalformedPointerError
from sqs_extended.handles import HandleCodec, MarkerHandleCodec, handle_codec_for
from sqs_extended.types import BlobPointer

if TYPE_CHECKING:
    from sqs_extended.config import ExtendedClientConfig

BUCKET_FIELD = "s3BucketName"
KEY_FIELD = "s3Key"


class PointerCodec:
    """Serialize pointers to message bodies and embed them in receipt handles.

    The body form is ``{"s3BucketName": ..., "s3Key": ...}``. Bodies written by
    Java clients use the typed form ``[type_tag, {...}]``; both are accepted, and
    the legacy type tag is rewritten to the current one before parsing.
    """

    def __init__(self, wire: WireFormat | None = None, handles: HandleCodec | None = None) -> None:
        """Initialize with the wire conventions and a handle codec."""
        self.wire = wire if wire is not None else WireFormat()
        self.handles = (
            handles
            if handles is not None
            else MarkerHandleCodec(bucket_marker=self.wire.bucket_marker, key_marker=self.wire.key_marker)
        )

    @classmethod
    def from_config(cls, config: ExtendedClientConfig) -> PointerCodec:
        """Build the codec selected by ``config``."""
        return cls(config.wire, handle_codec_for(config.handle_encoding, config.wire))

    def serialize(self, pointer: BlobPointer) -> str:
        """Return the message body that replaces an offloaded payload."""
        return json.dumps({BUCKET_FIELD: pointer.bucket_name, KEY_FIELD: pointer.key}, separators=(",", ":"))

    def deserialize(self, body: str) -> BlobPointer:
        """Parse a message body written by :meth:`serialize` or by a Java client."""
        text = body.replace(self.wire.legacy_pointer_type_tag, self.wire.pointer_type_tag)
        try:
            data = json.loads(text)
        except (json.JSONDecodeError, TypeError) as exc:
            raise MalformedPointerError(body, f"invalid JSON ({exc})") from exc

        if isinstance(data, list):
            data = self._unwrap_typed(body, data)
        if not isinstance(data, Mapping):
            raise MalformedPointerError(body, f"expected a JSON object, got {type(data).__name__}")

        bucket_name = data.get(BUCKET_FIELD)
        key = data.get(KEY_FIELD)
        if not isinstance(bucket_name, str) or not bucket_name:
            raise MalformedPointerError(body, f"{BUCKET_FIELD} must be a non-empty string")
        if not isinstance(key, str) or not key:
            raise MalformedPointerError(body, f"{KEY_FIELD} must be a non-empty string")
        return BlobPointer(bucket_name=bucket_name, key=key)

    def _unwrap_typed(self, body: str, data: list[object]) -> object:
        """Return the object half of a ``[type_tag, {...}]`` pair."""
        if len(data) != 2 or data[0] != self.wire.pointer_type_tag:
            raise MalformedPointerError(body, "unrecognised typed pointer")
        return data[1]

    def embed(self, handle: str, pointer: BlobPointer) -> str:
        """Return ``handle`` augmented with ``pointer``."""
        return self.handles.embed(handle, pointer)

    def is_augmented(self, handle: str) -> bool:
        """Return whether ``handle`` carries an embedded pointer."""
        return self.handles.is_augmented(handle)

    def extract_original_handle(self, handle: str) -> str:
        """Return the queue's own receipt handle from an augmented one."""
        return self.handles.extract_original_handle(handle)

    def extract_pointer(self, handle: str) -> BlobPointer:
        """Return the pointer embedded in an augmented handle."""
        return self.handles.extract_pointer(handle)
