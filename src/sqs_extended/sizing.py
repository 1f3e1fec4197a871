"""Byte-size accounting for message bodies and attributes.

The rules match the queue service's own size accounting: a body counts
its UTF-8 encoded length, and every attribute counts its name, its data
type, and its string or binary value.
"""

from __future__ import annotations

import codecs
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping

_CHUNK_CHARS = 64 * 1024

Body = str | bytes | bytearray | memoryview


def body_size(body: Body | None) -> int:
    """Return the UTF-8 encoded length of ``body`` without building a full encoded copy."""
    if body is None:
        return 0
    if isinstance(body, memoryview):
        return body.nbytes
    if isinstance(body, (bytes, bytearray)):
        return len(body)
    if body.isascii():
        return len(body)

    encoder = codecs.getincrementalencoder("utf-8")()
    total = 0
    for start in range(0, len(body), _CHUNK_CHARS):
        total += len(encoder.encode(body[start : start + _CHUNK_CHARS]))
    total += len(encoder.encode("", final=True))
    return total


def attributes_size(attributes: Mapping[str, Mapping[str, object]] | None) -> int:
    """Return the summed size of a message attribute map."""
    if not attributes:
        return 0

    total = 0
    for name, value in attributes.items():
        total += body_size(name)
        data_type = value.get("DataType")
        if isinstance(data_type, str):
            total += body_size(data_type)
        string_value = value.get("StringValue")
        if isinstance(string_value, str):
            total += body_size(string_value)
        binary_value = value.get("BinaryValue")
        if isinstance(binary_value, (bytes, bytearray, memoryview)):
            total += body_size(binary_value)
    return total


def message_size(body: Body | None, attributes: Mapping[str, Mapping[str, object]] | None) -> int:
    """Return the size of one message or batch entry as the queue counts it."""
    return body_size(body) + attributes_size(attributes)
