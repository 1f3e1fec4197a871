"""Tests for sqs_extended.handles."""

import pytest

from sqs_extended.config import WireFormat
from sqs_extended.errors import InvalidArgumentError
from sqs_extended.handles import (
    HandleCodec,
    LengthPrefixedHandleCodec,
    MarkerHandleCodec,
    handle_codec_for,
)
from sqs_extended.types import BlobPointer

POINTER = BlobPointer(bucket_name="payload-bucket", key="large/5f0c1c7e-7a35-4f4b-9d43-6b2f8b1c1d11")
HANDLE = "AQEBwJnKyrHigUMZj6rYigCgxlaS3SLy0a=="

# =============================================================================
# MarkerHandleCodec
# =============================================================================


def test_marker_embed_layout_is_wire_compatible() -> None:
    codec = MarkerHandleCodec()
    assert codec.embed("h-1", BlobPointer(bucket_name="b", key="k")) == (
        "-..s3BucketName..-b-..s3BucketName..--..s3Key..-k-..s3Key..-h-1"
    )


def test_marker_round_trip() -> None:
    codec = MarkerHandleCodec()
    augmented = codec.embed(HANDLE, POINTER)
    assert codec.is_augmented(augmented) is True
    assert codec.extract_original_handle(augmented) == HANDLE
    assert codec.extract_pointer(augmented) == POINTER


def test_marker_plain_handle_is_not_augmented() -> None:
    codec = MarkerHandleCodec()
    assert codec.is_augmented(HANDLE) is False
    assert codec.is_augmented("-..s3BucketName..-only-one-marker") is False


def test_marker_extract_requires_two_markers() -> None:
    with pytest.raises(InvalidArgumentError, match="twice"):
        MarkerHandleCodec().extract_original_handle("-..s3Key..-abc")


def test_marker_custom_markers() -> None:
    codec = MarkerHandleCodec(bucket_marker="<b>", key_marker="<k>")
    augmented = codec.embed("h", POINTER)
    assert augmented.startswith("<b>payload-bucket<b><k>")
    assert codec.extract_pointer(augmented) == POINTER


def test_marker_inside_key_is_misparsed() -> None:
    codec = MarkerHandleCodec()
    pointer = BlobPointer(bucket_name="b", key="x-..s3Key..-y")
    augmented = codec.embed("h", pointer)
    assert codec.extract_original_handle(augmented) != "h"


# =============================================================================
# LengthPrefixedHandleCodec
# =============================================================================


def test_length_prefixed_layout() -> None:
    codec = LengthPrefixedHandleCodec()
    assert codec.embed("h", BlobPointer(bucket_name="bk", key="key")) == "-..s3Pointer..-2:bk3:keyh"


def test_length_prefixed_round_trip() -> None:
    codec = LengthPrefixedHandleCodec()
    augmented = codec.embed(HANDLE, POINTER)
    assert codec.is_augmented(augmented) is True
    assert codec.extract_original_handle(augmented) == HANDLE
    assert codec.extract_pointer(augmented) == POINTER


def test_length_prefixed_tolerates_marker_like_values() -> None:
    codec = LengthPrefixedHandleCodec()
    pointer = BlobPointer(bucket_name="a:1:b", key="-..s3Pointer..-3:x")
    augmented = codec.embed("12:h", pointer)
    assert codec.extract_pointer(augmented) == pointer
    assert codec.extract_original_handle(augmented) == "12:h"


@pytest.mark.parametrize(
    ("handle", "message"),
    [
        pytest.param("plain-handle", "does not start", id="untagged"),
        pytest.param("-..s3Pointer..-x:bk", "Malformed length", id="non-digit"),
        pytest.param("-..s3Pointer..-2bk", "Malformed length", id="no-colon"),
        pytest.param("-..s3Pointer..-99:bk", "past the end", id="overrun"),
    ],
)
def test_length_prefixed_rejects_malformed(handle: str, message: str) -> None:
    with pytest.raises(InvalidArgumentError, match=message):
        LengthPrefixedHandleCodec().extract_pointer(handle)


def test_length_prefixed_requires_tag() -> None:
    with pytest.raises(ValueError, match="tag"):
        LengthPrefixedHandleCodec(tag="")


# =============================================================================
# handle_codec_for
# =============================================================================


def test_handle_codec_for_selects_encoding() -> None:
    wire = WireFormat()
    markers = handle_codec_for("markers", wire)
    assert isinstance(markers, MarkerHandleCodec)
    assert isinstance(handle_codec_for("length-prefixed", wire), LengthPrefixedHandleCodec)
    assert isinstance(markers, HandleCodec)
