"""Opaque-handle codecs: carry a payload pointer inside a receipt handle.

A receipt handle returned for an offloaded message is augmented with the
pointer's bucket and key, so a later delete or visibility change can find
the payload without any client-side state.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from sqs_extended.errors import InvalidArgumentError
from sqs_extended.types import BlobPointer

if TYPE_CHECKING:
    from sqs_extended.config import HandleEncoding, WireFormat


@runtime_checkable
class HandleCodec(Protocol):
    """Embed a pointer in a receipt handle and read it back."""

    def embed(self, handle: str, pointer: BlobPointer) -> str:
        """Return ``handle`` augmented with ``pointer``."""
        ...

    def is_augmented(self, handle: str) -> bool:
        """Return whether ``handle`` carries an embedded pointer."""
        ...

    def extract_original_handle(self, handle: str) -> str:
        """Return the queue's own receipt handle from an augmented one."""
        ...

    def extract_pointer(self, handle: str) -> BlobPointer:
        """Return the pointer embedded in an augmented handle."""
        ...


def _second_occurrence(handle: str, marker: str) -> tuple[int, int]:
    """Return the indices of the first and second occurrence of ``marker``."""
    first = handle.find(marker)
    second = handle.find(marker, first + 1) if first >= 0 else -1
    if second < 0:
        msg = f"Receipt handle does not contain the marker {marker!r} twice."
        raise InvalidArgumentError(msg)
    return first, second


class MarkerHandleCodec:
    """Wire-compatible marker encoding.

    Layout: ``B + bucket + B + K + key + K + handle`` where ``B`` and ``K`` are the
    bucket and key markers. Decoding looks for the second occurrence of each
    marker, so a bucket or key that itself contains a marker is mis-parsed.
    Markers are not escaped; this matches handles produced by other clients.
    """

    def __init__(self, bucket_marker: str = "-..s3BucketName..-", key_marker: str = "-..s3Key..-") -> None:
        """Initialize with the two marker strings."""
        self.bucket_marker = bucket_marker
        self.key_marker = key_marker

    def embed(self, handle: str, pointer: BlobPointer) -> str:
        """Return ``handle`` augmented with ``pointer``."""
        return (
            f"{self.bucket_marker}{pointer.bucket_name}{self.bucket_marker}"
            f"{self.key_marker}{pointer.key}{self.key_marker}{handle}"
        )

    def is_augmented(self, handle: str) -> bool:
        """Return whether both markers occur in ``handle``."""
        return self.bucket_marker in handle and self.key_marker in handle

    def extract_original_handle(self, handle: str) -> str:
        """Return everything after the second key marker."""
        _, second = _second_occurrence(handle, self.key_marker)
        return handle[second + len(self.key_marker) :]

    def extract_pointer(self, handle: str) -> BlobPointer:
        """Read bucket and key from between their marker pairs."""
        return BlobPointer(
            bucket_name=self._between(handle, self.bucket_marker),
            key=self._between(handle, self.key_marker),
        )

    def _between(self, handle: str, marker: str) -> str:
        first, second = _second_occurrence(handle, marker)
        return handle[first + len(marker) : second]


class LengthPrefixedHandleCodec:
    """Position-independent encoding for deployments that own every consumer.

    Layout: ``tag + len(bucket) + ":" + bucket + len(key) + ":" + key + handle``.
    Bucket and key may contain any characters, including marker strings.
    Handles in this layout are not readable by marker-based clients.
    """

    def __init__(self, tag: str = "-..s3Pointer..-") -> None:
        """Initialize with the leading tag that identifies augmented handles."""
        if not tag:
            msg = "tag must be a non-empty string."
            raise ValueError(msg)
        self.tag = tag

    def embed(self, handle: str, pointer: BlobPointer) -> str:
        """Return ``handle`` augmented with ``pointer``."""
        bucket, key = pointer.bucket_name, pointer.key
        return f"{self.tag}{len(bucket)}:{bucket}{len(key)}:{key}{handle}"

    def is_augmented(self, handle: str) -> bool:
        """Return whether ``handle`` starts with the tag."""
        return handle.startswith(self.tag)

    def extract_original_handle(self, handle: str) -> str:
        """Return the handle that follows the embedded fields."""
        _, _, end = self._decode(handle)
        return handle[end:]

    def extract_pointer(self, handle: str) -> BlobPointer:
        """Return the embedded pointer."""
        bucket, key, _ = self._decode(handle)
        return BlobPointer(bucket_name=bucket, key=key)

    def _decode(self, handle: str) -> tuple[str, str, int]:
        if not self.is_augmented(handle):
            msg = "Receipt handle does not start with the pointer tag."
            raise InvalidArgumentError(msg)
        bucket, position = self._read_field(handle, len(self.tag))
        key, position = self._read_field(handle, position)
        return bucket, key, position

    @staticmethod
    def _read_field(handle: str, position: int) -> tuple[str, int]:
        colon = handle.find(":", position)
        length_text = handle[position:colon] if colon >= 0 else ""
        if not (length_text.isascii() and length_text.isdigit()):
            msg = f"Malformed length prefix at offset {position} in receipt handle."
            raise InvalidArgumentError(msg)
        start = colon + 1
        end = start + int(length_text)
        if end > len(handle):
            msg = "Length prefix runs past the end of the receipt handle."
            raise InvalidArgumentError(msg)
        return handle[start:end], end


def handle_codec_for(encoding: HandleEncoding, wire: WireFormat) -> HandleCodec:
    """Build the handle codec selected by configuration."""
    if encoding == "length-prefixed":
        return LengthPrefixedHandleCodec()
    return MarkerHandleCodec(bucket_marker=wire.bucket_marker, key_marker=wire.key_marker)
