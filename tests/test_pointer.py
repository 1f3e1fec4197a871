"""Tests for sqs_extended.pointer."""

import json

import pytest

from sqs_extended.config import ExtendedClientConfig
from sqs_extended.errors import MalformedPointerError
from sqs_extended.handles import LengthPrefixedHandleCodec
from sqs_extended.pointer import PointerCodec
from sqs_extended.types import BlobPointer

POINTER = BlobPointer(bucket_name="payload-bucket", key="d1b8e2b6-0e5c-4f8e-9a8a-0c6a1f5a7e33")

# =============================================================================
# serialize / deserialize
# =============================================================================


def test_serialize_uses_wire_field_names() -> None:
    body = PointerCodec().serialize(POINTER)
    assert json.loads(body) == {"s3BucketName": "payload-bucket", "s3Key": POINTER.key}
    assert " " not in body


def test_deserialize_plain_object() -> None:
    codec = PointerCodec()
    assert codec.deserialize(codec.serialize(POINTER)) == POINTER


def test_deserialize_ignores_extra_fields() -> None:
    body = json.dumps({"s3BucketName": "b", "s3Key": "k", "extra": 1})
    assert PointerCodec().deserialize(body) == BlobPointer(bucket_name="b", key="k")


def test_deserialize_typed_current_form() -> None:
    body = '["software.amazon.payloadoffloading.PayloadS3Pointer",{"s3BucketName":"b","s3Key":"k"}]'
    assert PointerCodec().deserialize(body) == BlobPointer(bucket_name="b", key="k")


def test_deserialize_rewrites_legacy_type_tag() -> None:
    body = '["com.amazon.sqs.javamessaging.MessageS3Pointer",{"s3BucketName":"b","s3Key":"k"}]'
    assert PointerCodec().deserialize(body) == BlobPointer(bucket_name="b", key="k")


@pytest.mark.parametrize(
    ("body", "reason"),
    [
        pytest.param("not json", "invalid JSON", id="not-json"),
        pytest.param('"just a string"', "expected a JSON object", id="string"),
        pytest.param('["other.Type",{"s3BucketName":"b","s3Key":"k"}]', "unrecognised typed", id="other-tag"),
        pytest.param('{"s3Key":"k"}', "s3BucketName", id="missing-bucket"),
        pytest.param('{"s3BucketName":"b","s3Key":""}', "s3Key", id="empty-key"),
        pytest.param('{"s3BucketName":1,"s3Key":"k"}', "s3BucketName", id="wrong-type"),
    ],
)
def test_deserialize_rejects_malformed(body: str, reason: str) -> None:
    with pytest.raises(MalformedPointerError, match=reason) as exc_info:
        PointerCodec().deserialize(body)
    assert exc_info.value.body == body


# =============================================================================
# Handle delegation
# =============================================================================


def test_default_codec_embeds_with_markers() -> None:
    codec = PointerCodec()
    augmented = codec.embed("handle", POINTER)
    assert augmented.startswith("-..s3BucketName..-payload-bucket-..s3BucketName..--..s3Key..-")
    assert codec.is_augmented(augmented)
    assert codec.extract_original_handle(augmented) == "handle"
    assert codec.extract_pointer(augmented) == POINTER


def test_from_config_selects_length_prefixed() -> None:
    codec = PointerCodec.from_config(ExtendedClientConfig(handle_encoding="length-prefixed"))
    assert isinstance(codec.handles, LengthPrefixedHandleCodec)
    assert codec.extract_pointer(codec.embed("h", POINTER)) == POINTER
